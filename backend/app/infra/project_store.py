from __future__ import annotations

import asyncio
import uuid
from typing import Dict, List, Optional, Protocol

from app.domain.projects.schemas import ProjectRecord, ProjectStatus


class ProjectStore(Protocol):
    async def next_sequence(self, org_id: uuid.UUID) -> int: ...

    async def add(self, record: ProjectRecord) -> ProjectRecord: ...

    async def get(self, org_id: uuid.UUID, project_id: str) -> Optional[ProjectRecord]: ...

    async def find_by_budget(self, org_id: uuid.UUID, budget_id: str) -> Optional[ProjectRecord]: ...

    async def list_projects(self, org_id: uuid.UUID, status: ProjectStatus | None = None) -> List[ProjectRecord]: ...

    async def save(self, record: ProjectRecord) -> ProjectRecord: ...


class InMemoryProjectStore(ProjectStore):
    def __init__(self) -> None:
        self._projects: Dict[uuid.UUID, Dict[str, ProjectRecord]] = {}
        self._sequences: Dict[uuid.UUID, int] = {}
        self._lock = asyncio.Lock()

    async def next_sequence(self, org_id: uuid.UUID) -> int:
        async with self._lock:
            sequence = self._sequences.get(org_id, 0) + 1
            self._sequences[org_id] = sequence
            return sequence

    async def add(self, record: ProjectRecord) -> ProjectRecord:
        async with self._lock:
            projects = self._projects.setdefault(record.org_id, {})
            if any(existing.budget_id == record.budget_id for existing in projects.values()):
                raise ValueError(f"budget {record.budget_id} already has a project")
            projects[record.project_id] = record
            return record

    async def get(self, org_id: uuid.UUID, project_id: str) -> Optional[ProjectRecord]:
        async with self._lock:
            return self._projects.get(org_id, {}).get(project_id)

    async def find_by_budget(self, org_id: uuid.UUID, budget_id: str) -> Optional[ProjectRecord]:
        async with self._lock:
            for record in self._projects.get(org_id, {}).values():
                if record.budget_id == budget_id:
                    return record
            return None

    async def list_projects(self, org_id: uuid.UUID, status: ProjectStatus | None = None) -> List[ProjectRecord]:
        async with self._lock:
            records = list(self._projects.get(org_id, {}).values())
        if status is not None:
            records = [record for record in records if record.status == status]
        return sorted(records, key=lambda record: record.created_at)

    async def save(self, record: ProjectRecord) -> ProjectRecord:
        async with self._lock:
            self._projects.setdefault(record.org_id, {})[record.project_id] = record
            return record
