import uuid
from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import Field

from app.domain.pricing.models import Calculation, ServiceDetails, ServiceType
from app.shared.schemas import CamelRequestModel, CamelResponseModel


class BudgetStatus(str, Enum):
    draft = "draft"
    sent = "sent"
    approved = "approved"
    rejected = "rejected"


class ClientInfo(CamelRequestModel):
    name: str = Field(min_length=1, max_length=200)
    phone: Optional[str] = Field(None, max_length=40)
    email: Optional[str] = Field(None, max_length=254)
    notes: Optional[str] = Field(None, max_length=5000)


class BudgetCreate(CamelRequestModel):
    client: ClientInfo
    service_type: ServiceType
    service_details: ServiceDetails = Field(default_factory=ServiceDetails)


class BudgetStatusUpdate(CamelRequestModel):
    status: BudgetStatus


class BudgetRecord(CamelResponseModel):
    budget_id: str
    code: str
    org_id: uuid.UUID
    client: ClientInfo
    service_type: ServiceType
    service_details: ServiceDetails
    calculation: Calculation
    pricing_config_id: str
    pricing_config_version: str
    config_hash: str
    status: BudgetStatus = BudgetStatus.draft
    created_at: datetime
    updated_at: datetime
