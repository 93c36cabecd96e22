"""Correlation-aware logging for nsdom.

Every record carries the ``component`` that emitted it and the
``correlation_id`` of the parse or serialization call, so one call can be
followed across the reader, tree and writer layers.
"""

import logging
from typing import Any, MutableMapping, Optional, Tuple


class CorrelationLogger(logging.LoggerAdapter):
    """Logger adapter that merges component and correlation ID into ``extra``.

    Per-call ``extra`` keys are kept alongside the two fixed keys.
    """

    def __init__(
        self,
        name: str,
        correlation_id: Optional[str] = None,
        component: Optional[str] = None
    ) -> None:
        self.correlation_id = correlation_id
        self.component = component or name.rsplit(".", 1)[-1]
        super().__init__(
            logging.getLogger(name),
            {"component": self.component, "correlation_id": correlation_id},
        )

    def process(
        self, msg: Any, kwargs: MutableMapping[str, Any]
    ) -> Tuple[Any, MutableMapping[str, Any]]:
        kwargs["extra"] = {**self.extra, **(kwargs.get("extra") or {})}
        return msg, kwargs


def get_logger(
    name: str,
    correlation_id: Optional[str] = None,
    component: Optional[str] = None
) -> CorrelationLogger:
    """Logger for module ``name``; ``component`` defaults to its last dotted part."""
    return CorrelationLogger(name, correlation_id, component)
