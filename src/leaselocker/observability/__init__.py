"""Observability helpers for LeaseLocker."""

from leaselocker.observability.log import configure_logging, log_store_error
from leaselocker.observability.metrics import MetricsRegistry, metrics

__all__ = ["MetricsRegistry", "configure_logging", "log_store_error", "metrics"]
