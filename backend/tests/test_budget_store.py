import uuid

import pytest

from app.dependencies import get_pricing_config
from app.domain.budgets import service as budget_service
from app.domain.budgets.schemas import BudgetCreate, BudgetStatus
from app.domain.errors import BudgetStatusError
from app.infra.budget_store import InMemoryBudgetStore

ORG_ID = uuid.uuid4()
PAYLOAD = BudgetCreate.model_validate(
    {"client": {"name": "Ana Souza"}, "serviceType": "production", "serviceDetails": {"discountPercentage": 0}}
)


class RacingBudgetStore(InMemoryBudgetStore):
    """Moves the budget to another status right after it is read, like a second writer would."""

    def __init__(self, competing_status: BudgetStatus) -> None:
        super().__init__()
        self.competing_status = competing_status

    async def get(self, org_id, budget_id):
        record = await super().get(org_id, budget_id)
        if record is not None:
            await super().transition(org_id, budget_id, record.status, {"status": self.competing_status})
        return record


@pytest.mark.anyio
async def test_transition_requires_expected_status():
    store = InMemoryBudgetStore()
    record = await budget_service.create_budget(store, ORG_ID, PAYLOAD, get_pricing_config())

    sent = await store.transition(ORG_ID, record.budget_id, BudgetStatus.draft, {"status": BudgetStatus.sent})
    stale = await store.transition(
        ORG_ID, record.budget_id, BudgetStatus.draft, {"status": BudgetStatus.approved}
    )

    assert sent is not None
    assert sent.status == BudgetStatus.sent
    assert sent.updated_at >= record.updated_at
    assert stale is None
    assert (await store.get(ORG_ID, record.budget_id)).status == BudgetStatus.sent


@pytest.mark.anyio
async def test_transition_unknown_budget_returns_none():
    store = InMemoryBudgetStore()
    assert await store.transition(ORG_ID, "missing", BudgetStatus.draft, {"status": BudgetStatus.sent}) is None


@pytest.mark.anyio
async def test_status_change_loses_to_concurrent_writer():
    store = RacingBudgetStore(competing_status=BudgetStatus.rejected)
    record = await budget_service.create_budget(store, ORG_ID, PAYLOAD, get_pricing_config())

    with pytest.raises(BudgetStatusError) as excinfo:
        await budget_service.change_status(store, ORG_ID, record.budget_id, BudgetStatus.approved)
    assert "changed by another request" in excinfo.value.detail

    stored = await InMemoryBudgetStore.get(store, ORG_ID, record.budget_id)
    assert stored.status == BudgetStatus.rejected


@pytest.mark.anyio
async def test_edit_is_not_applied_after_concurrent_approval():
    store = RacingBudgetStore(competing_status=BudgetStatus.approved)
    record = await budget_service.create_budget(store, ORG_ID, PAYLOAD, get_pricing_config())
    edited = PAYLOAD.model_copy(update={"client": PAYLOAD.client.model_copy(update={"name": "Bruno Lima"})})

    with pytest.raises(BudgetStatusError) as excinfo:
        await budget_service.update_budget(store, ORG_ID, record.budget_id, edited, get_pricing_config())
    assert excinfo.value.status_code == 409

    stored = await InMemoryBudgetStore.get(store, ORG_ID, record.budget_id)
    assert stored.status == BudgetStatus.approved
    assert stored.client.name == "Ana Souza"
