"""Telemetry helpers and metrics."""

from .metrics import (
    ERROR_COUNTER,
    MODERATION_OUTCOMES,
    NOTIFICATION_COUNTER,
    REQUEST_COUNT,
    REQUEST_LATENCY,
    observe_request,
    record_moderation_outcome,
    record_notification,
)

__all__ = [
    "ERROR_COUNTER",
    "MODERATION_OUTCOMES",
    "NOTIFICATION_COUNTER",
    "REQUEST_COUNT",
    "REQUEST_LATENCY",
    "observe_request",
    "record_moderation_outcome",
    "record_notification",
]
