"""Observability – get_logger helper and request payload rendering."""
from __future__ import annotations

import dataclasses
from typing import Any

import structlog

from mp_mediator.observability.logging.filters import SensitiveFieldsFilter


def get_logger(name: str | None = None, **initial_values: Any) -> Any:
    """Return a bound structlog logger.

    Parameters
    ----------
    name:
        Logger name (typically ``__name__`` of the calling module).
    **initial_values:
        Key-value pairs to bind on the returned logger.
    """
    logger = structlog.get_logger(name)
    if initial_values:
        logger = logger.bind(**initial_values)
    return logger


def request_payload(request: Any, redactor: SensitiveFieldsFilter) -> dict[str, Any]:
    """Public fields of *request* as a dict, sensitive keys redacted.

    Dataclasses are read via :func:`dataclasses.fields`; other objects via
    ``vars()``. Objects without either yield an empty dict.
    """
    if dataclasses.is_dataclass(request) and not isinstance(request, type):
        fields = {f.name: getattr(request, f.name) for f in dataclasses.fields(request)}
    else:
        try:
            fields = dict(vars(request))
        except TypeError:
            return {}
    public = {k: v for k, v in fields.items() if not k.startswith("_")}
    return redactor.redact_deep(public)


__all__ = ["get_logger", "request_payload"]
