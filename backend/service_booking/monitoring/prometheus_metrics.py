"""
Prometheus metrics module for the service booking platform.

Service operation metrics are fed by the ``@measure_operation`` decorator on
``BaseService``; booking lifecycle counters are recorded by the booking
service itself. Everything lives in a private registry exposed by
``GET /metrics``.
"""

from typing import Optional

from prometheus_client import CONTENT_TYPE_LATEST, CollectorRegistry, Counter, Histogram, generate_latest

# Create a custom registry to avoid conflicts with default metrics
REGISTRY = CollectorRegistry()

service_operation_duration_seconds = Histogram(
    "service_booking_service_operation_duration_seconds",
    "Service operation duration in seconds",
    ["service", "operation"],
    registry=REGISTRY,
    buckets=(0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5),
)

service_operations_total = Counter(
    "service_booking_service_operations_total",
    "Total number of service operations",
    ["service", "operation", "status"],
    registry=REGISTRY,
)

errors_total = Counter(
    "service_booking_errors_total",
    "Total number of errors",
    ["service", "operation", "error_type"],
    registry=REGISTRY,
)

# Booking lifecycle
booking_status_transitions_total = Counter(
    "service_booking_status_transitions_total",
    "Count of booking status transitions",
    ["from_status", "to_status"],
    registry=REGISTRY,
)

refund_requests_total = Counter(
    "service_booking_refund_requests_total",
    "Count of refund requests issued on cancellation",
    ["status"],  # requested | failed | skipped
    registry=REGISTRY,
)


class PrometheusMetrics:
    """Manages Prometheus metrics collection and exposure."""

    @staticmethod
    def record_service_operation(
        service: str,
        operation: str,
        duration: float,
        status: str = "success",
        error_type: Optional[str] = None,
    ) -> None:
        """
        Record service operation metrics from @measure_operation decorator.

        Args:
            service: Service name (e.g., 'BookingService')
            operation: Operation/method name (e.g., 'book')
            duration: Operation duration in seconds
            status: Operation status ('success' or 'error')
            error_type: Type of error if status is 'error'
        """
        service_operation_duration_seconds.labels(service=service, operation=operation).observe(
            duration
        )
        service_operations_total.labels(service=service, operation=operation, status=status).inc()

        if status == "error" and error_type:
            errors_total.labels(service=service, operation=operation, error_type=error_type).inc()

    @staticmethod
    def record_status_transition(from_status: str, to_status: str) -> None:
        """Count one booking status transition."""
        booking_status_transitions_total.labels(from_status=from_status, to_status=to_status).inc()

    @staticmethod
    def record_refund(status: str) -> None:
        """Count one refund outcome."""
        refund_requests_total.labels(status=status).inc()

    @staticmethod
    def get_metrics() -> bytes:
        """Generate Prometheus metrics in exposition format."""
        return generate_latest(REGISTRY)

    @staticmethod
    def get_content_type() -> str:
        """Get the content type for Prometheus metrics."""
        return CONTENT_TYPE_LATEST


# Global instance for easy access
prometheus_metrics = PrometheusMetrics()
