import logging

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Histogram,
    generate_latest,
)

logger = logging.getLogger(__name__)


class Metrics:
    def __init__(self, enabled: bool = False, service_name: str = "arqexpress-pricing") -> None:
        self._configure(enabled, service_name)

    def _configure(self, enabled: bool, service_name: str = "arqexpress-pricing") -> None:
        self.enabled = enabled
        self.service_name = service_name
        self.registry = CollectorRegistry(auto_describe=True)
        if not enabled:
            self.http_5xx = None
            self.http_latency = None
            self.quotes = None
            self.quote_validation_errors = None
            self.budgets = None
            self.stage_advances = None
            return

        self.http_5xx = Counter(
            "http_5xx_total",
            "HTTP responses with status >= 500.",
            ["method", "route"],
            registry=self.registry,
        )
        self.http_latency = Histogram(
            "http_request_latency_seconds",
            "HTTP request latency in seconds.",
            ["method", "route", "status_class"],
            buckets=(0.01, 0.05, 0.1, 0.25, 0.5, 1, 2, 5),
            registry=self.registry,
        )
        self.quotes = Counter(
            "quotes_calculated_total",
            "Quotes calculated by service type and efficiency rating.",
            ["service_type", "efficiency"],
            registry=self.registry,
        )
        self.quote_validation_errors = Counter(
            "quote_validation_errors_total",
            "Quote requests rejected by validation.",
            ["service_type"],
            registry=self.registry,
        )
        self.budgets = Counter(
            "budgets_total",
            "Saved budget lifecycle events.",
            ["action"],
            registry=self.registry,
        )
        self.stage_advances = Counter(
            "project_stage_advances_total",
            "Project kanban stage advances by service type.",
            ["service_type"],
            registry=self.registry,
        )

    def record_http_5xx(self, method: str, route: str) -> None:
        if not self.enabled or self.http_5xx is None:
            return
        self.http_5xx.labels(method=method, route=route).inc()

    def record_http_latency(self, method: str, route: str, status_code: int, duration_seconds: float) -> None:
        if not self.enabled or self.http_latency is None:
            return
        status_class = f"{status_code // 100}xx" if status_code else "unknown"
        duration_seconds = max(0.0, float(duration_seconds))
        self.http_latency.labels(method=method, route=route, status_class=status_class).observe(
            duration_seconds
        )

    def record_quote(self, service_type: str, efficiency: str) -> None:
        if not self.enabled or self.quotes is None:
            return
        self.quotes.labels(service_type=service_type or "unknown", efficiency=efficiency or "unknown").inc()

    def record_quote_validation_error(self, service_type: str | None) -> None:
        if not self.enabled or self.quote_validation_errors is None:
            return
        self.quote_validation_errors.labels(service_type=service_type or "unknown").inc()

    def record_budget(self, action: str, count: int = 1) -> None:
        if not self.enabled or self.budgets is None:
            return
        if count <= 0:
            return
        self.budgets.labels(action=action).inc(count)

    def record_stage_advance(self, service_type: str) -> None:
        if not self.enabled or self.stage_advances is None:
            return
        self.stage_advances.labels(service_type=service_type or "unknown").inc()

    def render(self) -> tuple[bytes, str]:
        if not self.enabled:
            return b"metrics_disabled 1\n", "text/plain; version=0.0.4"
        try:
            return generate_latest(self.registry), CONTENT_TYPE_LATEST
        except Exception:  # noqa: BLE001
            logger.exception("metrics_render_failed")
            return b"metrics_render_failed 1\n", "text/plain; version=0.0.4"


metrics = Metrics(enabled=False)


def configure_metrics(enabled: bool, service_name: str = "arqexpress-pricing") -> Metrics:
    metrics._configure(enabled, service_name)
    return metrics
