import logging

from fastapi import APIRouter, Depends

from app.dependencies import get_metrics, get_pricing_config
from app.domain.errors import ValidationError
from app.domain.pricing.calculator import calculate_quote
from app.domain.pricing.config_loader import PricingConfig
from app.domain.pricing.models import QuoteRequest, QuoteResponse
from app.domain.pricing.reference import ReferenceTable, build_reference_table
from app.infra.metrics import Metrics

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/v1/quotes/calculate", response_model=QuoteResponse)
async def create_quote(
    request: QuoteRequest,
    pricing_config: PricingConfig = Depends(get_pricing_config),
    metrics_client: Metrics = Depends(get_metrics),
) -> QuoteResponse:
    try:
        quote = calculate_quote(request, pricing_config)
    except ValidationError:
        metrics_client.record_quote_validation_error(request.service_type.value)
        raise
    calculation = quote.calculation
    metrics_client.record_quote(quote.service_type.value, calculation.efficiency.value)
    logger.info(
        "quote_calculated",
        extra={
            "extra": {
                "service_type": quote.service_type.value,
                "tier_key": calculation.tier_key,
                "final_price": calculation.final_price,
                "price_with_discount": calculation.price_with_discount,
                "estimated_hours": calculation.estimated_hours,
                "efficiency": calculation.efficiency.value,
                "config_hash": quote.config_hash,
            }
        },
    )
    return quote


@router.get("/v1/pricing/reference", response_model=ReferenceTable)
async def pricing_reference(
    pricing_config: PricingConfig = Depends(get_pricing_config),
) -> ReferenceTable:
    return build_reference_table(pricing_config)
