from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import Field, confloat, conint

from app.shared.schemas import CamelRequestModel, CamelResponseModel


class ServiceType(str, Enum):
    decoration = "decoration"
    production = "production"
    design = "design"


class EnvironmentType(str, Enum):
    standard = "standard"
    medium = "medium"
    high = "high"


class RoomSize(str, Enum):
    P = "P"
    M = "M"
    G = "G"


class Modality(str, Enum):
    online = "online"
    in_person = "in_person"


class PaymentType(str, Enum):
    cash = "cash"
    installments = "installments"
    custom = "custom"


class ProjectType(str, Enum):
    new = "new"
    renovation = "renovation"


class Efficiency(str, Enum):
    excellent = "Ótimo"
    good = "Bom"
    adjust = "Reajustar"


class EnvironmentConfig(CamelRequestModel):
    type: EnvironmentType = EnvironmentType.standard
    size: RoomSize = RoomSize.P
    complexity: Optional[str] = None


class ServiceDetails(CamelRequestModel):
    project_type: ProjectType = ProjectType.new
    project_area: Optional[confloat(ge=0)] = None
    environments_config: Optional[List[EnvironmentConfig]] = Field(None, min_length=1)
    environment_count: Optional[conint(ge=1)] = None
    complexity: Optional[str] = None
    extra_environments: conint(ge=0) = 0
    extra_environment_price: Optional[confloat(ge=0)] = None
    service_modality: Modality = Modality.online
    survey_fee: Optional[confloat(ge=0)] = None
    payment_type: PaymentType = PaymentType.cash
    discount_percentage: Optional[confloat(ge=0, le=100)] = None
    include_management: bool = False
    management_fee: Optional[confloat(ge=0)] = None


class QuoteRequest(CamelRequestModel):
    service_type: ServiceType
    service_details: ServiceDetails = Field(default_factory=ServiceDetails)


class EnvironmentDetail(CamelResponseModel):
    index: int
    type: EnvironmentType
    size: RoomSize
    complexity: str
    description: str
    type_multiplier: float
    size_multiplier: float
    combined_multiplier: float
    price: float
    hours: float


class Calculation(CamelResponseModel):
    service_type: ServiceType
    tier_key: str
    complexity: Optional[str] = None
    tier_description: str
    base_price: float
    base_hours: float
    average_multiplier: float
    price_per_m2: Optional[float] = None
    environment_details: List[EnvironmentDetail] = Field(default_factory=list)
    price_before_extras: float
    hours_before_extras: float
    extras_total: float
    extras_hours: float
    survey_fee_total: float
    survey_hours: float
    management_total: float
    management_hours: float
    final_price: float
    requested_discount_percentage: Optional[float] = None
    discount_percentage: float
    discount_amount: float
    price_with_discount: float
    estimated_hours: float
    hour_rate: Optional[float] = None
    efficiency: Efficiency


class QuoteResponse(CamelResponseModel):
    pricing_config_id: str
    pricing_config_version: str
    config_hash: str
    service_type: ServiceType
    service_details: ServiceDetails
    calculation: Calculation
    calculated_at: datetime
    assumptions: List[str] = Field(default_factory=list)
