from dataclasses import dataclass
from typing import List


@dataclass
class DomainError(Exception):
    detail: str
    title: str = "Domain Error"
    type: str = "https://example.com/problems/domain-error"
    errors: List[dict] | None = None
    status_code: int = 400


@dataclass
class ValidationError(DomainError):
    detail: str = "Request validation failed"
    title: str = "Validation Error"
    type: str = "https://example.com/problems/validation-error"
    status_code: int = 422

    @classmethod
    def for_field(cls, field: str, message: str) -> "ValidationError":
        return cls(detail=message, errors=[{"field": field, "message": message}])


@dataclass
class ComputationError(DomainError):
    title: str = "Internal Server Error"
    type: str = "https://example.com/problems/server-error"
    status_code: int = 500


@dataclass
class NotFoundError(DomainError):
    title: str = "Not Found"
    type: str = "https://example.com/problems/not-found"
    status_code: int = 404


@dataclass
class ConflictError(DomainError):
    title: str = "Conflict"
    type: str = "https://example.com/problems/conflict"
    status_code: int = 409


@dataclass
class BudgetStatusError(ConflictError):
    title: str = "Invalid Budget Status Transition"


@dataclass
class ProjectStageError(ConflictError):
    title: str = "Invalid Project Stage Transition"
