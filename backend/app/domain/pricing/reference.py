"""Read-only price table rendered from the loaded pricing configuration.

Each row reports the implied hourly rate of a tier so under-priced tiers can be
spotted with the same efficiency bands used for quotes.
"""

from typing import Dict, List, Optional

from pydantic import Field

from app.domain.pricing.calculator import area_tier_key, classify_efficiency
from app.domain.pricing.config_loader import PricingConfig
from app.domain.pricing.models import Efficiency
from app.shared.schemas import CamelResponseModel


class TierRow(CamelResponseModel):
    environments: int
    complexity: str
    description: str
    price: float
    hours: float
    hour_rate: Optional[float] = None
    efficiency: Efficiency


class AreaRow(CamelResponseModel):
    tier_key: str
    min_area: float
    max_area: float
    project_type: str
    price_per_m2: float
    hours_per_m2: float
    hour_rate: Optional[float] = None
    efficiency: Efficiency


class ServiceReference(CamelResponseModel):
    service_type: str
    name: str
    uses_multipliers: bool
    tiers: List[TierRow] = Field(default_factory=list)
    area_tiers: List[AreaRow] = Field(default_factory=list)


class MultiplierRow(CamelResponseModel):
    key: str
    label: str
    multiplier: float
    examples: List[str] = Field(default_factory=list)


class ReferenceTable(CamelResponseModel):
    pricing_config_id: str
    pricing_config_version: str
    config_hash: str
    currency: str
    hour_value: float
    target_hour_rate: float
    good_hour_rate: float
    type_multipliers: List[MultiplierRow]
    size_multipliers: List[MultiplierRow]
    services: List[ServiceReference]


def _rate(price: float, hours: float) -> float | None:
    return price / hours if hours > 0 else None


def _multiplier_rows(entries: Dict) -> List[MultiplierRow]:
    return [
        MultiplierRow(key=key, label=entry.label, multiplier=entry.multiplier, examples=list(entry.examples))
        for key, entry in entries.items()
    ]


def build_reference_table(pricing: PricingConfig) -> ReferenceTable:
    tables = pricing.tables
    services: List[ServiceReference] = []
    for service_type, table in tables.services.items():
        tier_rows: List[TierRow] = []
        for environments in sorted(table.tiers, key=int):
            for complexity, entry in table.tiers[environments].items():
                hour_rate = _rate(entry.price, entry.hours)
                tier_rows.append(
                    TierRow(
                        environments=int(environments),
                        complexity=complexity,
                        description=entry.description,
                        price=entry.price,
                        hours=entry.hours,
                        hour_rate=hour_rate,
                        efficiency=classify_efficiency(hour_rate, pricing),
                    )
                )
        area_rows: List[AreaRow] = []
        for tier in table.area_tiers:
            for project_type, rate in tier.rates.items():
                hour_rate = _rate(rate.price_per_m2, rate.hours_per_m2)
                area_rows.append(
                    AreaRow(
                        tier_key=area_tier_key(tier),
                        min_area=tier.min_area,
                        max_area=tier.max_area,
                        project_type=project_type,
                        price_per_m2=rate.price_per_m2,
                        hours_per_m2=rate.hours_per_m2,
                        hour_rate=hour_rate,
                        efficiency=classify_efficiency(hour_rate, pricing),
                    )
                )
        services.append(
            ServiceReference(
                service_type=service_type,
                name=table.name,
                uses_multipliers=table.uses_multipliers,
                tiers=tier_rows,
                area_tiers=area_rows,
            )
        )
    return ReferenceTable(
        pricing_config_id=pricing.pricing_config_id,
        pricing_config_version=pricing.pricing_config_version,
        config_hash=pricing.config_hash,
        currency=tables.currency,
        hour_value=tables.hour_value,
        target_hour_rate=tables.efficiency.target_hour_rate,
        good_hour_rate=tables.efficiency.good_hour_rate,
        type_multipliers=_multiplier_rows(tables.type_multipliers),
        size_multipliers=_multiplier_rows(tables.size_multipliers),
        services=services,
    )
