"""Log output setup for certhooks.

Two output styles are supported: one JSON object per line for log
collectors, and a single-line text format for terminals.  Both see
the hook being run and the event being dispatched through the
``hook_name`` and ``event`` record attributes, which the dispatcher
passes via ``extra=`` and :class:`HookContextFilter` fills in when
absent.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from certhooks.config.settings import LoggingSettings

# Attribute names every LogRecord carries; anything beyond these came
# from ``extra=`` or a filter.
_RECORD_ATTRS = frozenset(
    logging.LogRecord("", logging.NOTSET, "", 0, "", (), None).__dict__,
) | {"message", "asctime"}

_CONTEXT_ATTRS = ("hook_name", "event")


class StructuredFormatter(logging.Formatter):
    """Render each record as a one-line JSON document.

    Keys: ``timestamp`` (UTC, ISO 8601), ``level``, ``logger``,
    ``message``, then the hook context when set, then any other extra
    attributes.  Non-JSON values are stringified.
    """

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for attr in _CONTEXT_ATTRS:
            value = getattr(record, attr, None)
            if value is not None and value != "-":
                payload[attr] = value
        payload.update(
            (key, value)
            for key, value in vars(record).items()
            if key not in _RECORD_ATTRS
            and key not in _CONTEXT_ATTRS
            and not key.startswith("_")
        )
        if record.exc_info and record.exc_info[0] is not None:
            payload["exception"] = self.formatException(record.exc_info)
        if record.stack_info:
            payload["stack_info"] = self.formatStack(record.stack_info)
        return json.dumps(payload, default=str)


class TextFormatter(logging.Formatter):
    """``2024-01-01 12:00:00 INFO     [post-operation] certhooks.x: msg``"""

    def __init__(self) -> None:
        super().__init__(
            fmt="%(asctime)s %(levelname)-8s [%(event)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )


class HookContextFilter(logging.Filter):
    """Default ``hook_name`` to ``None`` and ``event`` to ``"-"``."""

    def filter(self, record: logging.LogRecord) -> bool:  # type: ignore[override]
        for attr, default in zip(_CONTEXT_ATTRS, (None, "-"), strict=True):
            if not hasattr(record, attr):
                setattr(record, attr, default)
        return True


def configure_logging(settings: LoggingSettings) -> logging.Logger:
    """Point the ``certhooks`` logger at stderr using *settings*.

    Existing handlers on that logger are dropped and propagation to the
    root logger is switched off, so the bootstrap ``basicConfig`` output
    from the CLI does not duplicate lines.  An unknown level name falls
    back to ``INFO``.

    Returns
    -------
    logging.Logger
        The configured ``certhooks`` logger.

    """
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        StructuredFormatter() if settings.format == "json" else TextFormatter(),
    )
    handler.addFilter(HookContextFilter())

    logger = logging.getLogger("certhooks")
    logger.handlers.clear()
    logger.addHandler(handler)
    logger.setLevel(getattr(logging, settings.level.upper(), logging.INFO))
    logger.propagate = False
    return logger
