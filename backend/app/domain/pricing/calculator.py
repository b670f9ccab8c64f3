import math
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Mapping

from pydantic import ValidationError as PydanticValidationError

from app.domain.errors import ComputationError, ValidationError
from app.domain.pricing.config_loader import AreaTier, PricingConfig, ServiceTable, TierEntry
from app.domain.pricing.models import (
    Calculation,
    Efficiency,
    EnvironmentConfig,
    EnvironmentDetail,
    Modality,
    PaymentType,
    QuoteRequest,
    QuoteResponse,
    ServiceDetails,
    ServiceType,
)

_DETAILS = "serviceDetails"


def _field(name: str) -> str:
    return f"{_DETAILS}.{name}"


def classify_efficiency(hour_rate: float | None, pricing: PricingConfig) -> Efficiency:
    if hour_rate is None:
        return Efficiency.adjust
    efficiency = pricing.tables.efficiency
    if hour_rate >= efficiency.target_hour_rate:
        return Efficiency.excellent
    if hour_rate >= efficiency.good_hour_rate:
        return Efficiency.good
    return Efficiency.adjust


def applied_discount(details: ServiceDetails, pricing: PricingConfig) -> float:
    if details.discount_percentage is not None:
        return float(details.discount_percentage)
    if details.payment_type == PaymentType.cash:
        return float(pricing.tables.policy.default_cash_discount)
    return 0.0


def _multiplier(table: Dict[str, Any], key: str, kind: str) -> float:
    entry = table.get(key)
    if entry is None:
        raise ComputationError(detail=f"No {kind} multiplier configured for '{key}'")
    return float(entry.multiplier)


def _environment_count(details: ServiceDetails, table: ServiceTable) -> int:
    environments = details.environments_config or []
    if environments and details.environment_count is not None and details.environment_count != len(environments):
        raise ValidationError.for_field(
            _field("environmentCount"),
            f"environmentCount ({details.environment_count}) does not match "
            f"the {len(environments)} configured environments",
        )
    count = len(environments) or details.environment_count or 1
    if table.max_environments is not None and count > table.max_environments:
        field = "environmentsConfig" if environments else "environmentCount"
        raise ValidationError.for_field(
            _field(field),
            f"At most {table.max_environments} environments are priced per quote; "
            "use extraEnvironments for additional rooms",
        )
    return count


def _tier_entry(tier: Dict[str, TierEntry], complexity: str, field: str) -> TierEntry:
    entry = tier.get(complexity)
    if entry is None:
        allowed = ", ".join(sorted(tier))
        raise ValidationError.for_field(field, f"Unknown complexity '{complexity}'; expected one of: {allowed}")
    return entry


def _base_from_tier(
    details: ServiceDetails, table: ServiceTable, pricing: PricingConfig
) -> tuple[str, str, str, float, float, float, List[EnvironmentDetail]]:
    count = _environment_count(details, table)
    tier = table.tiers.get(str(count))
    if tier is None:
        raise ComputationError(detail=f"No pricing tier configured for {count} environments")

    default_complexity = details.complexity or table.default_complexity
    default_entry = _tier_entry(tier, default_complexity, _field("complexity"))
    environments = details.environments_config
    if not environments:
        return (
            str(count),
            default_complexity,
            default_entry.description,
            float(default_entry.price),
            float(default_entry.hours),
            1.0,
            [],
        )

    environment_details: List[EnvironmentDetail] = []
    for index, environment in enumerate(environments):
        environment_details.append(
            _environment_detail(index, environment, count, default_complexity, tier, table, pricing)
        )
    base_price = sum(float(tier[item.complexity].price) for item in environment_details) / count
    base_hours = sum(float(tier[item.complexity].hours) for item in environment_details) / count
    average_multiplier = sum(item.combined_multiplier for item in environment_details) / count
    first = environment_details[0]
    return (
        str(count),
        first.complexity,
        first.description,
        base_price,
        base_hours,
        average_multiplier,
        environment_details,
    )


def _environment_detail(
    index: int,
    environment: EnvironmentConfig,
    count: int,
    default_complexity: str,
    tier: Dict[str, TierEntry],
    table: ServiceTable,
    pricing: PricingConfig,
) -> EnvironmentDetail:
    complexity = environment.complexity or default_complexity
    entry = _tier_entry(tier, complexity, _field(f"environmentsConfig.{index}.complexity"))
    if table.uses_multipliers:
        type_multiplier = _multiplier(pricing.tables.type_multipliers, environment.type.value, "type")
        size_multiplier = _multiplier(pricing.tables.size_multipliers, environment.size.value, "size")
    else:
        type_multiplier = size_multiplier = 1.0
    combined = type_multiplier * size_multiplier
    return EnvironmentDetail(
        index=index,
        type=environment.type,
        size=environment.size,
        complexity=complexity,
        description=entry.description,
        type_multiplier=type_multiplier,
        size_multiplier=size_multiplier,
        combined_multiplier=combined,
        price=float(entry.price) / count * combined,
        hours=float(entry.hours) / count * combined,
    )


def find_area_tier(area: float, tiers: List[AreaTier]) -> AreaTier | None:
    """Tiers are half-open [min, max); the top tier also takes its own max."""
    for tier in tiers:
        if tier.min_area <= area < tier.max_area:
            return tier
    if tiers and area == tiers[-1].max_area:
        return tiers[-1]
    return None


def area_tier_key(tier: AreaTier) -> str:
    return f"{tier.min_area:g}-{tier.max_area:g}"


def _check_common_rules(service_type: ServiceType, details: ServiceDetails, table: ServiceTable) -> None:
    if details.include_management and not table.management_allowed:
        raise ValidationError.for_field(
            _field("includeManagement"),
            f"Management is not offered for {service_type.value} services",
        )
    if details.extra_environments and not table.extras_allowed:
        raise ValidationError.for_field(
            _field("extraEnvironments"),
            f"Extra environments are not offered for {service_type.value} services",
        )


def _finish(
    service_type: ServiceType,
    details: ServiceDetails,
    pricing: PricingConfig,
    *,
    tier_key: str,
    complexity: str | None,
    tier_description: str,
    base_price: float,
    base_hours: float,
    average_multiplier: float,
    price_per_m2: float | None = None,
    price_before_extras: float,
    hours_before_extras: float,
    environment_details: List[EnvironmentDetail],
) -> Calculation:
    policy = pricing.tables.policy

    extras_total = 0.0
    extras_hours = 0.0
    if details.extra_environments:
        unit_price = details.extra_environment_price
        if unit_price is None:
            unit_price = policy.default_extra_environment_price
        extras_total = details.extra_environments * float(unit_price)
        extras_hours = extras_total / pricing.tables.hour_value

    survey_fee_total = 0.0
    survey_hours = 0.0
    if details.service_modality == Modality.in_person:
        fee = details.survey_fee if details.survey_fee is not None else policy.default_survey_fee
        survey_fee_total = float(fee)
        survey_hours = float(policy.survey_hours)

    management_total = 0.0
    management_hours = 0.0
    if details.include_management:
        fee = details.management_fee if details.management_fee is not None else policy.default_management_fee
        management_total = float(fee)
        management_hours = float(policy.management_hours)

    final_price = price_before_extras + extras_total + survey_fee_total + management_total
    discount_percentage = applied_discount(details, pricing)
    price_with_discount = final_price * (1 - discount_percentage / 100)
    estimated_hours = hours_before_extras + extras_hours + survey_hours + management_hours

    for name, value in (
        ("finalPrice", final_price),
        ("priceWithDiscount", price_with_discount),
        ("estimatedHours", estimated_hours),
    ):
        if not math.isfinite(value) or value < 0:
            raise ComputationError(detail=f"Computed {name} is out of range: {value}")

    raw_rate = price_with_discount / estimated_hours if estimated_hours > 0 else None
    return Calculation(
        service_type=service_type,
        tier_key=tier_key,
        complexity=complexity,
        tier_description=tier_description,
        base_price=base_price,
        base_hours=base_hours,
        average_multiplier=average_multiplier,
        price_per_m2=price_per_m2,
        environment_details=environment_details,
        price_before_extras=price_before_extras,
        hours_before_extras=hours_before_extras,
        extras_total=extras_total,
        extras_hours=extras_hours,
        survey_fee_total=survey_fee_total,
        survey_hours=survey_hours,
        management_total=management_total,
        management_hours=management_hours,
        final_price=final_price,
        requested_discount_percentage=details.discount_percentage,
        discount_percentage=discount_percentage,
        discount_amount=final_price * discount_percentage / 100,
        price_with_discount=price_with_discount,
        estimated_hours=estimated_hours,
        hour_rate=round(raw_rate, 2) if raw_rate is not None else None,
        efficiency=classify_efficiency(raw_rate, pricing),
    )


def _calculate_tiered(service_type: ServiceType, details: ServiceDetails, pricing: PricingConfig) -> Calculation:
    table = pricing.service(service_type.value)
    _check_common_rules(service_type, details, table)
    tier_key, complexity, description, base_price, base_hours, average_multiplier, environment_details = (
        _base_from_tier(details, table, pricing)
    )
    if environment_details:
        price_before_extras = sum(item.price for item in environment_details)
        hours_before_extras = sum(item.hours for item in environment_details)
    else:
        price_before_extras = base_price * average_multiplier
        hours_before_extras = base_hours * average_multiplier
    return _finish(
        service_type,
        details,
        pricing,
        tier_key=tier_key,
        complexity=complexity,
        tier_description=description,
        base_price=base_price,
        base_hours=base_hours,
        average_multiplier=average_multiplier,
        price_before_extras=price_before_extras,
        hours_before_extras=hours_before_extras,
        environment_details=environment_details,
    )


def _calculate_design(service_type: ServiceType, details: ServiceDetails, pricing: PricingConfig) -> Calculation:
    table = pricing.service(service_type.value)
    _check_common_rules(service_type, details, table)
    if details.project_area is None:
        raise ValidationError.for_field(_field("projectArea"), "projectArea is required for design quotes")
    area = float(details.project_area)
    tier = find_area_tier(area, table.area_tiers)
    if tier is None:
        lowest = table.area_tiers[0].min_area
        highest = table.area_tiers[-1].max_area
        raise ValidationError.for_field(
            _field("projectArea"),
            f"projectArea must be between {lowest:g} and {highest:g} m²",
        )
    rate = tier.rates.get(details.project_type.value)
    if rate is None:
        raise ComputationError(detail=f"No design rate configured for '{details.project_type.value}'")
    base_price = area * float(rate.price_per_m2)
    base_hours = area * float(rate.hours_per_m2)
    return _finish(
        service_type,
        details,
        pricing,
        tier_key=area_tier_key(tier),
        complexity=None,
        tier_description=f"{table.name} {details.project_type.value} {area_tier_key(tier)} m²",
        base_price=base_price,
        base_hours=base_hours,
        average_multiplier=1.0,
        price_per_m2=float(rate.price_per_m2),
        price_before_extras=base_price,
        hours_before_extras=base_hours,
        environment_details=[],
    )


_CALCULATORS: Dict[ServiceType, Callable[[ServiceType, ServiceDetails, PricingConfig], Calculation]] = {
    ServiceType.decoration: _calculate_tiered,
    ServiceType.production: _calculate_tiered,
    ServiceType.design: _calculate_design,
}


def calculate(service_type: ServiceType | str, details: ServiceDetails, pricing: PricingConfig) -> Calculation:
    try:
        resolved = ServiceType(service_type)
    except ValueError as exc:
        raise ValidationError.for_field("serviceType", f"Unknown service type '{service_type}'") from exc
    if resolved.value not in pricing.tables.services:
        raise ComputationError(detail=f"No pricing table configured for '{resolved.value}'")
    return _CALCULATORS[resolved](resolved, details, pricing)


def _field_errors(exc: PydanticValidationError) -> List[dict]:
    errors = []
    for error in exc.errors():
        field = ".".join(str(part) for part in error.get("loc", ())) or "body"
        errors.append({"field": field, "message": error.get("msg", "Invalid value")})
    return errors


def _assumptions(request: QuoteRequest, calculation: Calculation) -> List[str]:
    details = request.service_details
    notes: List[str] = []
    if calculation.requested_discount_percentage is None and calculation.discount_percentage:
        notes.append(f"Default cash discount of {calculation.discount_percentage:g}% applied")
    if request.service_type != ServiceType.design and not details.environments_config:
        notes.append("No per-environment configuration supplied; flat tier price used")
    if calculation.hour_rate is None:
        notes.append("Estimated hours are zero; hourly rate is undefined")
    return notes


def calculate_quote(
    payload: QuoteRequest | Mapping[str, Any],
    pricing: PricingConfig,
    *,
    now: datetime | None = None,
) -> QuoteResponse:
    if isinstance(payload, QuoteRequest):
        request = payload
    else:
        try:
            request = QuoteRequest.model_validate(payload)
        except PydanticValidationError as exc:
            raise ValidationError(detail="Quote input is invalid", errors=_field_errors(exc)) from exc

    calculation = calculate(request.service_type, request.service_details, pricing)
    return QuoteResponse(
        pricing_config_id=pricing.pricing_config_id,
        pricing_config_version=pricing.pricing_config_version,
        config_hash=pricing.config_hash,
        service_type=request.service_type,
        service_details=request.service_details,
        calculation=calculation,
        calculated_at=now or datetime.now(timezone.utc),
        assumptions=_assumptions(request, calculation),
    )
