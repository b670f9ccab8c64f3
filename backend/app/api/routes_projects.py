import uuid
from typing import List

from fastapi import APIRouter, Depends, Query, status

from app.api.org_context import require_org_context
from app.dependencies import get_budget_store, get_metrics, get_project_store
from app.domain.budgets import service as budget_service
from app.domain.pricing.models import Modality, ServiceType
from app.domain.projects import service as project_service
from app.domain.projects.schemas import ProjectCreate, ProjectRecord, ProjectStatus, StageAdvance, StageInfo
from app.domain.projects.stages import stages_for
from app.infra.budget_store import BudgetStore
from app.infra.metrics import Metrics
from app.infra.project_store import ProjectStore

router = APIRouter(tags=["projects"])


@router.post(
    "/v1/budgets/{budget_id}/project",
    response_model=ProjectRecord,
    status_code=status.HTTP_201_CREATED,
)
async def start_project(
    budget_id: str,
    payload: ProjectCreate,
    org_id: uuid.UUID = Depends(require_org_context),
    budget_store: BudgetStore = Depends(get_budget_store),
    project_store: ProjectStore = Depends(get_project_store),
) -> ProjectRecord:
    budget = await budget_service.get_budget(budget_store, org_id, budget_id)
    return await project_service.start_project(project_store, budget, payload)


@router.get("/v1/projects/stages/{service_type}", response_model=List[StageInfo])
async def list_stages(
    service_type: ServiceType,
    modality: Modality = Query(Modality.online),
) -> List[StageInfo]:
    return [
        StageInfo(id=stage.id, name=stage.name, description=stage.description)
        for stage in stages_for(service_type, modality)
    ]


@router.get("/v1/projects", response_model=List[ProjectRecord])
async def list_projects(
    status_filter: ProjectStatus | None = Query(None, alias="status"),
    org_id: uuid.UUID = Depends(require_org_context),
    store: ProjectStore = Depends(get_project_store),
) -> List[ProjectRecord]:
    return await project_service.list_projects(store, org_id, status_filter)


@router.get("/v1/projects/{project_id}", response_model=ProjectRecord)
async def get_project(
    project_id: str,
    org_id: uuid.UUID = Depends(require_org_context),
    store: ProjectStore = Depends(get_project_store),
) -> ProjectRecord:
    return await project_service.get_project(store, org_id, project_id)


@router.post("/v1/projects/{project_id}/advance", response_model=ProjectRecord)
async def advance_project_stage(
    project_id: str,
    payload: StageAdvance,
    org_id: uuid.UUID = Depends(require_org_context),
    store: ProjectStore = Depends(get_project_store),
    metrics_client: Metrics = Depends(get_metrics),
) -> ProjectRecord:
    record = await project_service.advance_stage(store, org_id, project_id, payload)
    metrics_client.record_stage_advance(record.service_type.value)
    return record
