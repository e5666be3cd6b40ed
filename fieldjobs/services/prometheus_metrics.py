"""
Prometheus metrics for Field Jobs API
"""

from prometheus_client import Counter, Gauge, Histogram, generate_latest, CONTENT_TYPE_LATEST
from typing import Dict
import os

# Build info
BUILD_INFO = Gauge(
    'fieldjobs_build_info',
    'Build information',
    ['version', 'image_tag']
)

# Request counters
REQUESTS_TOTAL = Counter(
    'fieldjobs_requests_total',
    'Total number of requests',
    ['status_class', 'path_group']
)

# Jobs logged
JOBS_CREATED_TOTAL = Counter(
    'fieldjobs_jobs_created_total',
    'Total number of jobs logged'
)

# User-driven transitions, by the rule that fired
TRANSITIONS_TOTAL = Counter(
    'fieldjobs_transitions_total',
    'Status transitions applied',
    ['rule']
)

TRANSITION_CONFLICTS_TOTAL = Counter(
    'fieldjobs_transition_conflicts_total',
    'Transitions rejected because the job version moved on'
)

# Evaluations, by the condition the job was classified into
EVALUATIONS_TOTAL = Counter(
    'fieldjobs_evaluations_total',
    'Status evaluations performed',
    ['condition']
)

# Re-evaluation passes
REEVALUATION_PASSES_TOTAL = Counter(
    'fieldjobs_reevaluation_passes_total',
    'Completed periodic re-evaluation passes'
)

REEVALUATION_CHANGES_TOTAL = Counter(
    'fieldjobs_reevaluation_changes_total',
    'Jobs whose status or reason changed during re-evaluation'
)

REEVALUATION_SKIPPED_TOTAL = Counter(
    'fieldjobs_reevaluation_skipped_total',
    'Stored jobs skipped during re-evaluation because their timeline is invalid'
)

REEVALUATION_DURATION = Histogram(
    'fieldjobs_reevaluation_duration_ms',
    'Duration of a re-evaluation pass in milliseconds',
    buckets=[1, 5, 10, 25, 50, 100, 250, 500, 1000, 2500, 5000]
)

# Jobs per status after the last pass
JOBS_BY_STATUS = Gauge(
    'fieldjobs_jobs_by_status',
    'Number of jobs per traffic-light status',
    ['status']
)

class PrometheusMetrics:
    """Service for managing Prometheus metrics."""

    def __init__(self):
        self._setup_build_info()

    def _setup_build_info(self):
        """Set up build information gauge."""
        version = os.getenv("APP_VERSION", "dev")
        image_tag = os.getenv("IMAGE_TAG", "latest")

        BUILD_INFO.labels(version=version, image_tag=image_tag).set(1)

    def increment_requests(self, status_code: int, path: str = "/unknown"):
        """Increment request counter."""
        # Categorize status codes
        if 200 <= status_code < 300:
            status_class = "2xx"
        elif 400 <= status_code < 500:
            status_class = "4xx"
        elif 500 <= status_code < 600:
            status_class = "5xx"
        else:
            status_class = "other"

        # Categorize paths
        if "/v1/jobs" in path:
            path_group = "jobs"
        elif "/v1/metrics" in path:
            path_group = "metrics"
        else:
            path_group = "other"

        REQUESTS_TOTAL.labels(status_class=status_class, path_group=path_group).inc()

    def increment_jobs_created(self, count: int = 1):
        """Increment jobs created counter."""
        JOBS_CREATED_TOTAL.inc(count)

    def increment_transitions(self, rule: str, count: int = 1):
        """Increment transitions counter."""
        TRANSITIONS_TOTAL.labels(rule=rule).inc(count)

    def increment_transition_conflicts(self, count: int = 1):
        TRANSITION_CONFLICTS_TOTAL.inc(count)

    def increment_evaluations(self, condition: str, count: int = 1):
        """Increment evaluations counter."""
        EVALUATIONS_TOTAL.labels(condition=condition).inc(count)

    def record_reevaluation_pass(self, changed: int, skipped: int, duration_ms: float):
        """Record the outcome of a re-evaluation pass."""
        REEVALUATION_PASSES_TOTAL.inc()
        REEVALUATION_CHANGES_TOTAL.inc(changed)
        REEVALUATION_SKIPPED_TOTAL.inc(skipped)
        REEVALUATION_DURATION.observe(duration_ms)

    def set_jobs_by_status(self, counts: Dict[str, int]):
        """Set jobs per status gauge."""
        for status in ("green", "amber", "red"):
            JOBS_BY_STATUS.labels(status=status).set(counts.get(status, 0))

    def get_metrics(self) -> bytes:
        """Get Prometheus metrics in text format."""
        return generate_latest()

    def get_content_type(self) -> str:
        """Get the content type for Prometheus metrics."""
        return CONTENT_TYPE_LATEST

# Global metrics instance
prometheus_metrics = PrometheusMetrics()
