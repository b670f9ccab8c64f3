import uuid

from fastapi import APIRouter, Depends

from app.api.org_context import require_org_context
from app.dependencies import get_budget_store, get_project_store
from app.domain.finance.schemas import FinanceSummary
from app.domain.finance.service import summarize
from app.infra.budget_store import BudgetStore
from app.infra.project_store import ProjectStore

router = APIRouter(tags=["finance"])


@router.get("/v1/finance/summary", response_model=FinanceSummary)
async def finance_summary(
    org_id: uuid.UUID = Depends(require_org_context),
    budget_store: BudgetStore = Depends(get_budget_store),
    project_store: ProjectStore = Depends(get_project_store),
) -> FinanceSummary:
    budgets = await budget_store.list_budgets(org_id)
    projects = await project_store.list_projects(org_id)
    return summarize(budgets, projects)
