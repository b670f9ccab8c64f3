import logging
import uuid
from typing import List

from app.domain.budgets.schemas import BudgetCreate, BudgetRecord, BudgetStatus
from app.domain.errors import BudgetStatusError, ConflictError, NotFoundError
from app.domain.pricing.calculator import calculate_quote
from app.domain.pricing.config_loader import PricingConfig
from app.domain.pricing.models import QuoteRequest, QuoteResponse
from app.infra.budget_store import BudgetStore
from app.infra.project_store import ProjectStore

logger = logging.getLogger(__name__)

ALLOWED_TRANSITIONS: dict[BudgetStatus, set[BudgetStatus]] = {
    BudgetStatus.draft: {BudgetStatus.sent, BudgetStatus.approved, BudgetStatus.rejected},
    BudgetStatus.sent: {BudgetStatus.approved, BudgetStatus.rejected, BudgetStatus.draft},
    BudgetStatus.approved: {BudgetStatus.draft},
    BudgetStatus.rejected: {BudgetStatus.draft},
}
EDITABLE_STATUSES = {BudgetStatus.draft, BudgetStatus.sent}


def _concurrent_change(record: BudgetRecord) -> BudgetStatusError:
    return BudgetStatusError(detail=f"Budget {record.code} was changed by another request; reload and retry")


def _quote(payload: BudgetCreate, pricing: PricingConfig) -> QuoteResponse:
    request = QuoteRequest(service_type=payload.service_type, service_details=payload.service_details)
    return calculate_quote(request, pricing)


async def create_budget(
    store: BudgetStore, org_id: uuid.UUID, payload: BudgetCreate, pricing: PricingConfig
) -> BudgetRecord:
    quote = _quote(payload, pricing)
    record = await store.create(org_id, payload, quote)
    logger.info(
        "budget_created",
        extra={
            "extra": {
                "org_id": str(org_id),
                "budget_id": record.budget_id,
                "code": record.code,
                "service_type": record.service_type.value,
                "price_with_discount": record.calculation.price_with_discount,
            }
        },
    )
    return record


async def get_budget(store: BudgetStore, org_id: uuid.UUID, budget_id: str) -> BudgetRecord:
    record = await store.get(org_id, budget_id)
    if record is None:
        raise NotFoundError(detail=f"Budget {budget_id} not found")
    return record


async def list_budgets(
    store: BudgetStore, org_id: uuid.UUID, status: BudgetStatus | None = None
) -> List[BudgetRecord]:
    return await store.list_budgets(org_id, status)


async def update_budget(
    store: BudgetStore,
    org_id: uuid.UUID,
    budget_id: str,
    payload: BudgetCreate,
    pricing: PricingConfig,
) -> BudgetRecord:
    record = await get_budget(store, org_id, budget_id)
    if record.status not in EDITABLE_STATUSES:
        raise BudgetStatusError(
            detail=f"Budget {record.code} is {record.status.value}; reopen it as draft before editing"
        )
    quote = _quote(payload, pricing)
    updated = await store.transition(
        org_id,
        budget_id,
        record.status,
        {
            "client": payload.client,
            "service_type": quote.service_type,
            "service_details": quote.service_details,
            "calculation": quote.calculation,
            "pricing_config_id": quote.pricing_config_id,
            "pricing_config_version": quote.pricing_config_version,
            "config_hash": quote.config_hash,
        },
    )
    if updated is None:
        raise _concurrent_change(record)
    return updated


async def change_status(
    store: BudgetStore, org_id: uuid.UUID, budget_id: str, status: BudgetStatus
) -> BudgetRecord:
    record = await get_budget(store, org_id, budget_id)
    if record.status == status:
        return record
    if status not in ALLOWED_TRANSITIONS[record.status]:
        raise BudgetStatusError(
            detail=f"Cannot move budget {record.code} from {record.status.value} to {status.value}"
        )
    updated = await store.transition(org_id, budget_id, record.status, {"status": status})
    if updated is None:
        raise _concurrent_change(record)
    logger.info(
        "budget_status_changed",
        extra={
            "extra": {
                "org_id": str(org_id),
                "budget_id": budget_id,
                "from_status": record.status.value,
                "to_status": status.value,
            }
        },
    )
    return updated


async def delete_budget(
    store: BudgetStore, project_store: ProjectStore, org_id: uuid.UUID, budget_id: str
) -> None:
    record = await get_budget(store, org_id, budget_id)
    if await project_store.find_by_budget(org_id, budget_id) is not None:
        raise ConflictError(detail=f"Budget {record.code} already has a project and cannot be deleted")
    await store.delete(org_id, budget_id)
