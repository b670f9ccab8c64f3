import uuid
from typing import List

from fastapi import APIRouter, Depends, Query, Response, status

from app.api.org_context import require_org_context
from app.dependencies import get_budget_store, get_metrics, get_pricing_config, get_project_store
from app.domain.budgets import service as budget_service
from app.domain.budgets.schemas import BudgetCreate, BudgetRecord, BudgetStatus, BudgetStatusUpdate
from app.domain.pricing.config_loader import PricingConfig
from app.infra.budget_store import BudgetStore
from app.infra.metrics import Metrics
from app.infra.project_store import ProjectStore

router = APIRouter(prefix="/v1/budgets", tags=["budgets"])


@router.post("", response_model=BudgetRecord, status_code=status.HTTP_201_CREATED)
async def create_budget(
    payload: BudgetCreate,
    org_id: uuid.UUID = Depends(require_org_context),
    store: BudgetStore = Depends(get_budget_store),
    pricing_config: PricingConfig = Depends(get_pricing_config),
    metrics_client: Metrics = Depends(get_metrics),
) -> BudgetRecord:
    record = await budget_service.create_budget(store, org_id, payload, pricing_config)
    metrics_client.record_budget("created")
    return record


@router.get("", response_model=List[BudgetRecord])
async def list_budgets(
    status_filter: BudgetStatus | None = Query(None, alias="status"),
    org_id: uuid.UUID = Depends(require_org_context),
    store: BudgetStore = Depends(get_budget_store),
) -> List[BudgetRecord]:
    return await budget_service.list_budgets(store, org_id, status_filter)


@router.get("/{budget_id}", response_model=BudgetRecord)
async def get_budget(
    budget_id: str,
    org_id: uuid.UUID = Depends(require_org_context),
    store: BudgetStore = Depends(get_budget_store),
) -> BudgetRecord:
    return await budget_service.get_budget(store, org_id, budget_id)


@router.put("/{budget_id}", response_model=BudgetRecord)
async def update_budget(
    budget_id: str,
    payload: BudgetCreate,
    org_id: uuid.UUID = Depends(require_org_context),
    store: BudgetStore = Depends(get_budget_store),
    pricing_config: PricingConfig = Depends(get_pricing_config),
    metrics_client: Metrics = Depends(get_metrics),
) -> BudgetRecord:
    record = await budget_service.update_budget(store, org_id, budget_id, payload, pricing_config)
    metrics_client.record_budget("updated")
    return record


@router.post("/{budget_id}/status", response_model=BudgetRecord)
async def change_budget_status(
    budget_id: str,
    payload: BudgetStatusUpdate,
    org_id: uuid.UUID = Depends(require_org_context),
    store: BudgetStore = Depends(get_budget_store),
    metrics_client: Metrics = Depends(get_metrics),
) -> BudgetRecord:
    record = await budget_service.change_status(store, org_id, budget_id, payload.status)
    metrics_client.record_budget(f"status_{payload.status.value}")
    return record


@router.delete("/{budget_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_budget(
    budget_id: str,
    org_id: uuid.UUID = Depends(require_org_context),
    store: BudgetStore = Depends(get_budget_store),
    project_store: ProjectStore = Depends(get_project_store),
    metrics_client: Metrics = Depends(get_metrics),
) -> Response:
    await budget_service.delete_budget(store, project_store, org_id, budget_id)
    metrics_client.record_budget("deleted")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
