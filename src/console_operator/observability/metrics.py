"""
Prometheus metrics for the console operator.

This module provides metrics collection for monitoring sync passes and the
conditions they publish.
"""

import logging
import time
from collections.abc import Callable, Iterable, Iterator
from contextlib import contextmanager

# Note: aiohttp is provided transitively by kopf (it serves kopf's own health
# probes). We use it here to keep the HTTP server consistent with kopf.
from aiohttp.web import (
    Application,
    AppRunner,
    Request,
    Response,
    TCPSite,
    json_response,
)
from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Gauge,
    Histogram,
    generate_latest,
)

from console_operator.errors import SyntheticRequeueError
from console_operator.models import Condition

logger = logging.getLogger(__name__)

# Global metrics registry
_metrics_registry: CollectorRegistry | None = None

# Metrics definitions
SYNC_TOTAL = Counter(
    "console_operator_sync_total",
    "Total number of sync passes by outcome",
    ["controller", "result"],
    registry=None,  # Registered in get_metrics_registry
)

SYNC_DURATION = Histogram(
    "console_operator_sync_duration_seconds",
    "Time spent in one sync pass",
    ["controller"],
    buckets=[0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
    registry=None,
)

SYNC_ERRORS = Counter(
    "console_operator_sync_errors_total",
    "Total number of failed sync passes by error type",
    ["controller", "error_type"],
    registry=None,
)

SYNC_SKIPPED = Counter(
    "console_operator_sync_skipped_total",
    "Total number of passes skipped because the console is not managed",
    ["controller"],
    registry=None,
)

CONDITION_STATUS = Gauge(
    "console_operator_condition_status",
    "Owned condition status (1=True, 0=otherwise)",
    ["type"],
    registry=None,
)


def get_metrics_registry() -> CollectorRegistry:
    """Get or create the global metrics registry."""
    global _metrics_registry

    if _metrics_registry is None:
        _metrics_registry = CollectorRegistry()
        for metric in [
            SYNC_TOTAL,
            SYNC_DURATION,
            SYNC_ERRORS,
            SYNC_SKIPPED,
            CONDITION_STATUS,
        ]:
            _metrics_registry.register(metric)

    return _metrics_registry


class MetricsCollector:
    """Collects and manages metrics for the console operator."""

    def __init__(self):
        """Initialize metrics collector."""
        self.registry = get_metrics_registry()

    @contextmanager
    def track_sync(self, controller: str) -> Iterator[None]:
        """
        Context manager to track one sync pass.

        A ``SyntheticRequeueError`` is counted as ``requeue``, not as an error.

        Args:
            controller: Name of the controller running the pass
        """
        start_time = time.time()
        result = "unknown"

        try:
            yield
            result = "success"
        except SyntheticRequeueError:
            result = "requeue"
            raise
        except Exception as e:
            result = "error"
            SYNC_ERRORS.labels(controller=controller, error_type=type(e).__name__).inc()
            raise
        finally:
            SYNC_TOTAL.labels(controller=controller, result=result).inc()
            SYNC_DURATION.labels(controller=controller).observe(
                time.time() - start_time
            )

    def record_skip(self, controller: str) -> None:
        """Count a pass that was skipped because the operator is not managed."""
        SYNC_SKIPPED.labels(controller=controller).inc()

    def record_conditions(self, conditions: Iterable[Condition]) -> None:
        """Publish the flushed conditions' statuses."""
        for condition in conditions:
            CONDITION_STATUS.labels(type=condition.type).set(
                1 if condition.is_true else 0
            )


class MetricsServer:
    """HTTP server for exposing Prometheus metrics."""

    def __init__(
        self,
        port: int = 8081,
        host: str = "0.0.0.0",
        ready_check: Callable[[], bool] | None = None,
    ):
        """
        Initialize metrics server.

        Args:
            port: Port to serve metrics on
            host: Host interface to bind to
            ready_check: Returns True once the operator is ready to serve
        """
        self.port = port
        self.host = host
        self.ready_check = ready_check
        self.app = Application()
        self.runner: AppRunner | None = None
        self.site: TCPSite | None = None
        self._setup_routes()

    def _setup_routes(self) -> None:
        """Set up HTTP routes for the metrics server."""
        self.app.router.add_get("/metrics", self._metrics_handler)
        self.app.router.add_get("/ready", self._ready_handler)
        self.app.router.add_get("/healthz", self._healthz_handler)

    async def _metrics_handler(self, request: Request) -> Response:
        """Handle /metrics endpoint for Prometheus scraping."""
        try:
            metrics_data = generate_latest(get_metrics_registry())
            return Response(
                body=metrics_data, headers={"Content-Type": CONTENT_TYPE_LATEST}
            )
        except Exception as e:
            logger.error(f"Failed to generate metrics: {e}")
            return Response(
                text=f"Error generating metrics: {type(e).__name__}. Check logs for details.",
                status=500,
            )

    async def _ready_handler(self, request: Request) -> Response:
        """Handle /ready endpoint for readiness probes."""
        ready = self.ready_check() if self.ready_check else True
        return json_response(
            {"status": "ready" if ready else "not_ready", "timestamp": time.time()},
            status=200 if ready else 503,
        )

    async def _healthz_handler(self, request: Request) -> Response:
        """Handle /healthz endpoint for Kubernetes compatibility."""
        return Response(text="ok")

    async def start(self) -> None:
        """Start the metrics server."""
        self.runner = AppRunner(self.app)
        await self.runner.setup()

        self.site = TCPSite(self.runner, self.host, self.port)
        await self.site.start()

        logger.info(f"Metrics server started on {self.host}:{self.port}")

    async def stop(self) -> None:
        """Stop the metrics server."""
        if self.site:
            await self.site.stop()
            self.site = None

        if self.runner:
            await self.runner.cleanup()
            self.runner = None

        logger.info("Metrics server stopped")

    async def __aenter__(self):
        """Async context manager entry."""
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.stop()


# Global metrics collector instance
metrics_collector = MetricsCollector()
