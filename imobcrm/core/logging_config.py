"""Process-wide logging setup for imobcrm.

:func:`configure_logging` is called once by the CLI before anything else
runs; library modules only ever do::

    logger = logging.getLogger(__name__)

Level and format come from the arguments, then from ``$LOG_LEVEL`` /
``$LOG_FORMAT``, then from the defaults (``INFO``, ``text``).

Every record passing through the installed handler is stamped with the id
of the publish request being served (see :data:`REQUEST_ID_CTX`), so the
interleaved lines of a concurrent fan-out can be told apart:

    2026-10-17 12:00:01 INFO     [9c41e0d2] imobcrm.publishing.service: Publishing p-1
"""

from __future__ import annotations

import json
import logging
import os
import sys
from collections.abc import Callable
from contextvars import ContextVar
from datetime import UTC, datetime
from typing import Any

__all__ = [
    "configure_logging",
    "JsonFormatter",
    "REQUEST_ID_CTX",
    "RequestContextFilter",
]

logger = logging.getLogger(__name__)

#: Id of the publish request in progress, ``"-"`` outside one.  Set by
#: :meth:`~imobcrm.publishing.service.PublishingService.publish`; tasks
#: started with ``asyncio.gather`` inherit it.
REQUEST_ID_CTX: ContextVar[str] = ContextVar("request_id", default="-")

LEVELS: frozenset[str] = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})
FORMATS: frozenset[str] = frozenset({"text", "json"})

_TEXT_FORMAT = "%(asctime)s %(levelname)-8s [%(request_id)s] %(name)s: %(message)s"
_TEXT_DATEFMT = "%Y-%m-%d %H:%M:%S"

#: Third-party loggers held at WARNING unless we are debugging.
_CHATTY_LOGGERS: tuple[str, ...] = ("asyncio", "aiosqlite", "httpx", "supabase", "postgrest")


class RequestContextFilter(logging.Filter):
    """Set ``record.request_id`` from :data:`REQUEST_ID_CTX`.  Never drops a record."""

    def filter(self, record: logging.LogRecord) -> bool:  # noqa: A003
        record.request_id = REQUEST_ID_CTX.get()
        return True


def configure_logging(
    level: str | None = None,
    fmt: str | None = None,
    *,
    force: bool = False,
) -> None:
    """Install a single stderr handler on the root logger.

    Args:
        level: One of :data:`LEVELS`, case-insensitive.
        fmt: ``"text"`` or ``"json"``, case-insensitive.
        force: Replace existing root handlers.  Without it, a root logger
            that already has handlers (pytest, an embedding app) only has
            its level adjusted.

    Raises:
        ValueError: If the resolved level or format is not recognised.
    """
    resolved_level = _resolve(level, "LOG_LEVEL", "INFO", LEVELS, str.upper)
    resolved_fmt = _resolve(fmt, "LOG_FORMAT", "text", FORMATS, str.lower)

    root = logging.getLogger()
    root.setLevel(resolved_level)
    if root.handlers and not force:
        return

    root.handlers.clear()
    root.addHandler(_build_handler(resolved_level, resolved_fmt))

    quiet = logging.NOTSET if resolved_level == "DEBUG" else logging.WARNING
    for name in _CHATTY_LOGGERS:
        logging.getLogger(name).setLevel(quiet)


def _resolve(
    value: str | None,
    env_var: str,
    default: str,
    allowed: frozenset[str],
    normalise: Callable[[str], str],
) -> str:
    resolved = normalise(value or os.environ.get(env_var, default))
    if resolved not in allowed:
        raise ValueError(
            f"Unknown {env_var} {resolved!r}; expected one of {', '.join(sorted(allowed))}"
        )
    return resolved


def _build_handler(level: str, fmt: str) -> logging.Handler:
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.addFilter(RequestContextFilter())
    if fmt == "json":
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter(_TEXT_FORMAT, datefmt=_TEXT_DATEFMT))
    return handler


class JsonFormatter(logging.Formatter):
    """One JSON object per line, for log shippers.

    Keys: ``ts`` (UTC, millisecond precision, ``Z`` suffix), ``level``,
    ``logger``, ``message`` and ``extra``.  ``extra`` holds whatever the call
    site passed through ``extra=`` plus ``request_id``.  ``exc_info`` and
    ``stack_info`` appear only when the record carries them.
    """

    #: Attributes every LogRecord has; anything else came in through ``extra=``.
    _STANDARD_ATTRS: frozenset[str] = frozenset(
        vars(logging.LogRecord("", logging.NOTSET, "", 0, "", None, None))
    ) | {"message", "asctime"}

    def format(self, record: logging.LogRecord) -> str:  # noqa: A003
        ts = datetime.fromtimestamp(record.created, tz=UTC).isoformat(timespec="milliseconds")
        payload: dict[str, Any] = {
            "ts": ts.replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "extra": {
                key: value
                for key, value in vars(record).items()
                if key not in self._STANDARD_ATTRS
            },
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        elif record.exc_text:
            payload["exc_info"] = record.exc_text
        if record.stack_info:
            payload["stack_info"] = self.formatStack(record.stack_info)
        return json.dumps(payload, default=str, ensure_ascii=False)
