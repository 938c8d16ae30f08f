"""Observability – structured logging helpers."""
from mp_mediator.observability.logging.filters import DEFAULT_SENSITIVE_FIELDS, SensitiveFieldsFilter
from mp_mediator.observability.logging.factory import JsonLoggerFactory
from mp_mediator.observability.logging.processors import get_logger, request_payload

__all__ = [
    "DEFAULT_SENSITIVE_FIELDS",
    "JsonLoggerFactory",
    "SensitiveFieldsFilter",
    "get_logger",
    "request_payload",
]
