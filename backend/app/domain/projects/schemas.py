import uuid
from datetime import date, datetime
from enum import Enum
from typing import List, Optional

from pydantic import Field, confloat

from app.domain.pricing.models import Modality, ServiceType
from app.shared.schemas import CamelRequestModel, CamelResponseModel


class ProjectStatus(str, Enum):
    waiting = "aguardando"
    in_progress = "em_andamento"
    finished = "finalizado"


class ProjectCreate(CamelRequestModel):
    architect: str = Field(min_length=1, max_length=120)
    squad: Optional[str] = Field(None, max_length=120)
    briefing_date: Optional[date] = None
    due_date: Optional[date] = None


class StageAdvance(CamelRequestModel):
    hours: confloat(ge=0, le=1000)
    description: str = Field("", max_length=2000)


class StageInfo(CamelResponseModel):
    id: str
    name: str
    description: str


class TimeEntry(CamelResponseModel):
    stage_id: str
    stage_name: str
    hours: float
    description: str
    date: datetime


class ProjectRecord(CamelResponseModel):
    project_id: str
    code: str
    org_id: uuid.UUID
    budget_id: str
    budget_code: str
    client_name: str
    service_type: ServiceType
    modality: Modality
    service_summary: str
    value: float
    estimated_hours: float
    architect: str
    squad: Optional[str] = None
    briefing_date: Optional[date] = None
    due_date: Optional[date] = None
    notes: Optional[str] = None
    current_stage: str
    status: ProjectStatus = ProjectStatus.in_progress
    entries: List[TimeEntry] = Field(default_factory=list)
    created_at: datetime
    completed_at: Optional[datetime] = None
    logged_hours: float = 0.0
    hours_variance: float = 0.0
