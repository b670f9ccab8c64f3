from typing import Dict, Iterable, List

from app.domain.budgets.schemas import BudgetRecord, BudgetStatus
from app.domain.finance.schemas import FinanceSummary, ServiceTotals
from app.domain.pricing.models import ServiceType
from app.domain.projects.schemas import ProjectRecord, ProjectStatus


def summarize(budgets: Iterable[BudgetRecord], projects: Iterable[ProjectRecord]) -> FinanceSummary:
    budgets = list(budgets)
    projects = list(projects)

    budgets_by_status = {status.value: 0 for status in BudgetStatus}
    projects_by_status = {status.value: 0 for status in ProjectStatus}
    per_service: Dict[str, ServiceTotals] = {
        service.value: ServiceTotals(service_type=service.value) for service in ServiceType
    }

    quoted_total = 0.0
    approved_total = 0.0
    for budget in budgets:
        budgets_by_status[budget.status.value] += 1
        price = budget.calculation.price_with_discount
        quoted_total += price
        if budget.status == BudgetStatus.approved:
            approved_total += price
        totals = per_service[budget.service_type.value]
        totals.budgets += 1
        totals.quoted_total += price

    contracted_value = 0.0
    finished_value = 0.0
    finished_hours = 0.0
    estimated_hours = 0.0
    logged_hours = 0.0
    for project in projects:
        projects_by_status[project.status.value] += 1
        contracted_value += project.value
        estimated_hours += project.estimated_hours
        logged_hours += project.logged_hours
        if project.status == ProjectStatus.finished:
            finished_value += project.value
            finished_hours += project.logged_hours
        totals = per_service[project.service_type.value]
        totals.projects += 1
        totals.contracted_value += project.value

    decided = budgets_by_status[BudgetStatus.approved.value] + budgets_by_status[BudgetStatus.rejected.value]
    conversion_rate = budgets_by_status[BudgetStatus.approved.value] / decided if decided else None
    realized_hour_rate = finished_value / finished_hours if finished_hours > 0 else None

    by_service: List[ServiceTotals] = list(per_service.values())
    return FinanceSummary(
        budget_count=len(budgets),
        budgets_by_status=budgets_by_status,
        quoted_total=quoted_total,
        approved_total=approved_total,
        conversion_rate=conversion_rate,
        project_count=len(projects),
        projects_by_status=projects_by_status,
        contracted_value=contracted_value,
        finished_value=finished_value,
        estimated_hours=estimated_hours,
        logged_hours=logged_hours,
        realized_hour_rate=realized_hour_rate,
        by_service=by_service,
    )
