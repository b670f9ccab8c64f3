from functools import lru_cache

from fastapi import Request

from app.domain.pricing.config_loader import PricingConfig, load_pricing_config
from app.infra.budget_store import BudgetStore, InMemoryBudgetStore
from app.infra.metrics import Metrics, metrics
from app.infra.project_store import InMemoryProjectStore, ProjectStore
from app.settings import settings


@lru_cache
def get_pricing_config() -> PricingConfig:
    return load_pricing_config(settings.pricing_config_path)


def get_budget_store(request: Request) -> BudgetStore:
    store = getattr(request.app.state, "budget_store", None)
    if store is None:
        store = InMemoryBudgetStore()
        request.app.state.budget_store = store
    return store


def get_project_store(request: Request) -> ProjectStore:
    store = getattr(request.app.state, "project_store", None)
    if store is None:
        store = InMemoryProjectStore()
        request.app.state.project_store = store
    return store


def get_metrics(request: Request) -> Metrics:
    return getattr(request.app.state, "metrics", None) or metrics
