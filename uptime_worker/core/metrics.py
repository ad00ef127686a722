"""Prometheus metrics collection for the check pipeline and log rotation."""

from typing import Optional

from prometheus_client import CollectorRegistry, Counter, Gauge, Histogram, start_http_server

from uptime_worker.utils.logger import get_logger

logger = get_logger(__name__)


class MetricsCollector:
    """Prometheus metrics collector for Uptime Worker."""

    def __init__(self, registry: Optional[CollectorRegistry] = None):
        """
        Initialize metrics collector.

        Args:
            registry: Optional custom registry
        """
        self.registry = registry or CollectorRegistry()
        self._setup_metrics()
        logger.info("Prometheus metrics collector initialized")

    def _setup_metrics(self) -> None:
        """Setup all Prometheus metrics."""

        self.probes_total = Counter(
            'uptime_worker_probes_total',
            'Total number of probes by resulting state',
            ['state'],
            registry=self.registry
        )

        self.probe_duration = Histogram(
            'uptime_worker_probe_duration_seconds',
            'Probe duration in seconds',
            registry=self.registry
        )

        self.alerts_total = Counter(
            'uptime_worker_alerts_total',
            'State-change alerts by delivery status',
            ['status'],
            registry=self.registry
        )

        self.pipelines_skipped_total = Counter(
            'uptime_worker_pipelines_skipped_total',
            'Check pipelines that stopped before probing',
            ['reason'],
            registry=self.registry
        )

        self.pipelines_in_flight = Gauge(
            'uptime_worker_pipelines_in_flight',
            'Check pipelines currently running',
            registry=self.registry
        )

        self.rotations_total = Counter(
            'uptime_worker_log_rotations_total',
            'Log rotation attempts by result',
            ['status'],
            registry=self.registry
        )

    def record_probe(self, state: str, duration: float) -> None:
        self.probes_total.labels(state=state).inc()
        self.probe_duration.observe(duration)

    def record_alert(self, status: str) -> None:
        self.alerts_total.labels(status=status).inc()

    def record_skip(self, reason: str) -> None:
        self.pipelines_skipped_total.labels(reason=reason).inc()

    def record_rotation(self, status: str) -> None:
        self.rotations_total.labels(status=status).inc()

    def serve(self, port: int) -> None:
        """Expose the registry over HTTP on ``port``."""
        start_http_server(port, registry=self.registry)
        logger.info("Prometheus metrics endpoint started", extra={"port": port})
