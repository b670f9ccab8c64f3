import logging
import uuid
from datetime import datetime, timezone
from typing import List

from app.domain.budgets.schemas import BudgetRecord
from app.domain.errors import ConflictError, NotFoundError, ProjectStageError
from app.domain.pricing.models import ServiceType
from app.domain.projects.schemas import (
    ProjectCreate,
    ProjectRecord,
    ProjectStatus,
    StageAdvance,
    TimeEntry,
)
from app.domain.projects.stages import TERMINAL_STAGE_ID, stage_index, stages_for
from app.infra.project_store import ProjectStore

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def project_code(sequence: int, now: datetime) -> str:
    return f"{sequence:03d}_{now.month}_{now.year % 100:02d}"


def service_summary(budget: BudgetRecord) -> str:
    details = budget.service_details
    if budget.service_type == ServiceType.design:
        label = "Novo" if details.project_type.value == "new" else "Reforma"
        return f"{label} - {details.project_area:g}m²"
    environments = len(details.environments_config or []) or details.environment_count or 1
    return f"{environments} ambiente(s)"


def _with_hours(record: ProjectRecord) -> ProjectRecord:
    logged = sum(entry.hours for entry in record.entries)
    return record.model_copy(update={"logged_hours": logged, "hours_variance": logged - record.estimated_hours})


async def start_project(
    store: ProjectStore, budget: BudgetRecord, payload: ProjectCreate, *, now: datetime | None = None
) -> ProjectRecord:
    if await store.find_by_budget(budget.org_id, budget.budget_id) is not None:
        raise ConflictError(detail=f"Budget {budget.code} already has a project")
    now = now or _utcnow()
    modality = budget.service_details.service_modality
    stages = stages_for(budget.service_type, modality)
    sequence = await store.next_sequence(budget.org_id)
    record = _with_hours(
        ProjectRecord(
            project_id=str(uuid.uuid4()),
            code=project_code(sequence, now),
            org_id=budget.org_id,
            budget_id=budget.budget_id,
            budget_code=budget.code,
            client_name=budget.client.name,
            service_type=budget.service_type,
            modality=modality,
            service_summary=service_summary(budget),
            value=budget.calculation.price_with_discount,
            estimated_hours=budget.calculation.estimated_hours,
            architect=payload.architect,
            squad=payload.squad,
            briefing_date=payload.briefing_date,
            due_date=payload.due_date,
            notes=budget.client.notes,
            current_stage=stages[0].id,
            status=ProjectStatus.in_progress,
            created_at=now,
        )
    )
    try:
        await store.add(record)
    except ValueError as exc:
        raise ConflictError(detail=f"Budget {budget.code} already has a project") from exc
    logger.info(
        "project_started",
        extra={
            "extra": {
                "org_id": str(budget.org_id),
                "project_id": record.project_id,
                "budget_id": budget.budget_id,
                "service_type": budget.service_type.value,
            }
        },
    )
    return record


async def get_project(store: ProjectStore, org_id: uuid.UUID, project_id: str) -> ProjectRecord:
    record = await store.get(org_id, project_id)
    if record is None:
        raise NotFoundError(detail=f"Project {project_id} not found")
    return record


async def list_projects(
    store: ProjectStore, org_id: uuid.UUID, status: ProjectStatus | None = None
) -> List[ProjectRecord]:
    return await store.list_projects(org_id, status)


async def advance_stage(
    store: ProjectStore,
    org_id: uuid.UUID,
    project_id: str,
    payload: StageAdvance,
    *,
    now: datetime | None = None,
) -> ProjectRecord:
    """Log hours against the current stage and move to the next one.

    Moving onto the terminal stage, or advancing past the last stage of the
    list, finishes the project.
    """
    record = await get_project(store, org_id, project_id)
    if record.status == ProjectStatus.finished:
        raise ProjectStageError(detail=f"Project {record.code} is already finished")
    stages = stages_for(record.service_type, record.modality)
    index = stage_index(stages, record.current_stage)
    if index is None:
        raise ProjectStageError(detail=f"Stage '{record.current_stage}' is not part of this project's workflow")

    now = now or _utcnow()
    current = stages[index]
    entries = [
        *record.entries,
        TimeEntry(
            stage_id=current.id,
            stage_name=current.name,
            hours=payload.hours,
            description=payload.description,
            date=now,
        ),
    ]
    next_stage = stages[index + 1] if index + 1 < len(stages) else None
    finished = next_stage is None or next_stage.id == TERMINAL_STAGE_ID
    updated = _with_hours(
        record.model_copy(
            update={
                "entries": entries,
                "current_stage": next_stage.id if next_stage else current.id,
                "status": ProjectStatus.finished if finished else ProjectStatus.in_progress,
                "completed_at": now if finished else None,
            }
        )
    )
    await store.save(updated)
    logger.info(
        "project_stage_advanced",
        extra={
            "extra": {
                "org_id": str(org_id),
                "project_id": project_id,
                "from_stage": current.id,
                "to_stage": updated.current_stage,
                "hours": payload.hours,
                "status": updated.status.value,
            }
        },
    )
    return updated
