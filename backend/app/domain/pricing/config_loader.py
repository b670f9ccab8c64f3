import hashlib
import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

logger = logging.getLogger(__name__)


class PricingConfigError(ValueError):
    pass


class _FrozenModel(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")


class MultiplierEntry(_FrozenModel):
    multiplier: float = Field(gt=0)
    label: str
    examples: List[str] = Field(default_factory=list)


class TierEntry(_FrozenModel):
    price: float = Field(ge=0)
    hours: float = Field(ge=0)
    description: str


class AreaRate(_FrozenModel):
    price_per_m2: float = Field(ge=0)
    hours_per_m2: float = Field(ge=0)


class AreaTier(_FrozenModel):
    min_area: float = Field(ge=0)
    max_area: float = Field(gt=0)
    rates: Dict[str, AreaRate]

    @model_validator(mode="after")
    def validate_bounds(self) -> "AreaTier":
        if self.max_area <= self.min_area:
            raise ValueError("max_area must be greater than min_area")
        return self


class ServiceTable(_FrozenModel):
    name: str
    uses_multipliers: bool = False
    extras_allowed: bool = False
    management_allowed: bool = False
    default_complexity: str | None = None
    max_environments: int | None = Field(None, ge=1)
    tiers: Dict[str, Dict[str, TierEntry]] = Field(default_factory=dict)
    area_tiers: List[AreaTier] = Field(default_factory=list)

    @model_validator(mode="after")
    def validate_shape(self) -> "ServiceTable":
        if not self.tiers and not self.area_tiers:
            raise ValueError("service table needs tiers or area_tiers")
        if self.tiers and self.default_complexity is None:
            raise ValueError("tiered service needs default_complexity")
        bounds = [(tier.min_area, tier.max_area) for tier in self.area_tiers]
        if bounds != sorted(bounds):
            raise ValueError("area_tiers must be in ascending order")
        return self


class PricingPolicy(_FrozenModel):
    default_cash_discount: float = Field(10, ge=0, le=100)
    survey_hours: float = Field(4, ge=0)
    management_hours: float = Field(8, ge=0)
    default_survey_fee: float = Field(1000, ge=0)
    default_extra_environment_price: float = Field(1200, ge=0)
    default_management_fee: float = Field(1500, ge=0)


class EfficiencySettings(_FrozenModel):
    target_hour_rate: float = Field(gt=0)
    good_band_ratio: float = Field(gt=0, le=1)

    @property
    def good_hour_rate(self) -> float:
        return self.target_hour_rate * self.good_band_ratio


class PricingDocument(_FrozenModel):
    pricing_config_id: str = Field(min_length=1)
    pricing_config_version: str = Field(min_length=1)
    currency: str = "BRL"
    hour_value: float = Field(gt=0)
    type_multipliers: Dict[str, MultiplierEntry]
    size_multipliers: Dict[str, MultiplierEntry]
    services: Dict[str, ServiceTable]
    policy: PricingPolicy = Field(default_factory=PricingPolicy)
    efficiency: EfficiencySettings


@dataclass(frozen=True)
class PricingConfig:
    pricing_config_id: str
    pricing_config_version: str
    config_hash: str
    tables: PricingDocument

    def service(self, service_type: str) -> ServiceTable:
        return self.tables.services[service_type]


def _canonical_json(data: Dict[str, Any]) -> str:
    return json.dumps(data, sort_keys=True, separators=(",", ":"))


def _resolve_pricing_path(path: str) -> Path:
    candidate = Path(path)
    if candidate.is_absolute():
        return candidate
    cwd_candidate = (Path.cwd() / candidate).resolve()
    if cwd_candidate.exists():
        return cwd_candidate
    module_candidate = Path(__file__).resolve().parents[3] / candidate
    if module_candidate.exists():
        return module_candidate
    raise FileNotFoundError(f"Pricing config not found at {path}")


def parse_pricing_config(data: Dict[str, Any]) -> PricingConfig:
    if not isinstance(data, dict):
        raise PricingConfigError("Pricing config must be a JSON object")
    try:
        document = PricingDocument.model_validate(
            {**data, "pricing_config_version": str(data.get("pricing_config_version", ""))}
        )
    except ValidationError as exc:
        raise PricingConfigError(f"Invalid pricing config: {exc}") from exc
    config_hash = hashlib.sha256(_canonical_json(data).encode("utf-8")).hexdigest()
    return PricingConfig(
        pricing_config_id=document.pricing_config_id,
        pricing_config_version=document.pricing_config_version,
        config_hash=f"sha256:{config_hash}",
        tables=document,
    )


def load_pricing_config(path: str) -> PricingConfig:
    resolved_path = _resolve_pricing_path(path)
    content = resolved_path.read_text(encoding="utf-8")
    try:
        data = json.loads(content)
    except json.JSONDecodeError as exc:
        raise PricingConfigError(f"Pricing config at {path} is not valid JSON") from exc
    config = parse_pricing_config(data)
    logger.info(
        "pricing_config_loaded",
        extra={
            "extra": {
                "pricing_config_id": config.pricing_config_id,
                "pricing_config_version": config.pricing_config_version,
                "config_hash": config.config_hash,
            }
        },
    )
    return config
