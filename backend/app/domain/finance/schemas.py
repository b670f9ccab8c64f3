from typing import Dict, List, Optional

from pydantic import Field

from app.shared.schemas import CamelResponseModel


class ServiceTotals(CamelResponseModel):
    service_type: str
    budgets: int = 0
    quoted_total: float = 0.0
    projects: int = 0
    contracted_value: float = 0.0


class FinanceSummary(CamelResponseModel):
    budget_count: int
    budgets_by_status: Dict[str, int]
    quoted_total: float
    approved_total: float
    conversion_rate: Optional[float] = None
    project_count: int
    projects_by_status: Dict[str, int]
    contracted_value: float
    finished_value: float
    estimated_hours: float
    logged_hours: float
    realized_hour_rate: Optional[float] = None
    by_service: List[ServiceTotals] = Field(default_factory=list)
