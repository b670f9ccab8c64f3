from __future__ import annotations

import asyncio
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Protocol

from app.domain.budgets.schemas import BudgetCreate, BudgetRecord, BudgetStatus
from app.domain.pricing.models import QuoteResponse


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class BudgetStore(Protocol):
    async def create(self, org_id: uuid.UUID, payload: BudgetCreate, quote: QuoteResponse) -> BudgetRecord: ...

    async def get(self, org_id: uuid.UUID, budget_id: str) -> Optional[BudgetRecord]: ...

    async def list_budgets(self, org_id: uuid.UUID, status: BudgetStatus | None = None) -> List[BudgetRecord]: ...

    async def transition(
        self, org_id: uuid.UUID, budget_id: str, expected: BudgetStatus, changes: Dict[str, Any]
    ) -> Optional[BudgetRecord]: ...

    async def delete(self, org_id: uuid.UUID, budget_id: str) -> bool: ...


class InMemoryBudgetStore(BudgetStore):
    def __init__(self) -> None:
        self._budgets: Dict[uuid.UUID, Dict[str, BudgetRecord]] = {}
        self._sequences: Dict[uuid.UUID, int] = {}
        self._lock = asyncio.Lock()

    async def create(self, org_id: uuid.UUID, payload: BudgetCreate, quote: QuoteResponse) -> BudgetRecord:
        async with self._lock:
            sequence = self._sequences.get(org_id, 0) + 1
            self._sequences[org_id] = sequence
            now = _utcnow()
            record = BudgetRecord(
                budget_id=str(uuid.uuid4()),
                code=f"PROP-{sequence:03d}",
                org_id=org_id,
                client=payload.client,
                service_type=quote.service_type,
                service_details=quote.service_details,
                calculation=quote.calculation,
                pricing_config_id=quote.pricing_config_id,
                pricing_config_version=quote.pricing_config_version,
                config_hash=quote.config_hash,
                status=BudgetStatus.draft,
                created_at=now,
                updated_at=now,
            )
            self._budgets.setdefault(org_id, {})[record.budget_id] = record
            return record

    async def get(self, org_id: uuid.UUID, budget_id: str) -> Optional[BudgetRecord]:
        async with self._lock:
            return self._budgets.get(org_id, {}).get(budget_id)

    async def list_budgets(self, org_id: uuid.UUID, status: BudgetStatus | None = None) -> List[BudgetRecord]:
        async with self._lock:
            records = list(self._budgets.get(org_id, {}).values())
        if status is not None:
            records = [record for record in records if record.status == status]
        return sorted(records, key=lambda record: record.created_at)

    async def transition(
        self, org_id: uuid.UUID, budget_id: str, expected: BudgetStatus, changes: Dict[str, Any]
    ) -> Optional[BudgetRecord]:
        """Apply changes only while the stored budget still has the expected status."""
        async with self._lock:
            budgets = self._budgets.get(org_id, {})
            record = budgets.get(budget_id)
            if record is None or record.status != expected:
                return None
            updated = record.model_copy(update={**changes, "updated_at": _utcnow()})
            budgets[budget_id] = updated
            return updated

    async def delete(self, org_id: uuid.UUID, budget_id: str) -> bool:
        async with self._lock:
            return self._budgets.get(org_id, {}).pop(budget_id, None) is not None
