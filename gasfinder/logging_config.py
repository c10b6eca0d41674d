from __future__ import annotations

import logging
from logging.config import dictConfig
from typing import Iterable, Optional, Sequence, Union

_EXTRA_KEYS = (
    "serial",
    "event",
    "reason",
    "station",
)

_configured = False


class ContextualFormatter(logging.Formatter):
    """
    Formatter that appends known ``extra=`` fields as ``key=value`` pairs.

    Only keys listed in ``extra_keys`` and present (non-None) on the record
    are appended, in that order.
    """

    def __init__(
        self,
        fmt: Optional[str] = None,
        datefmt: Optional[str] = None,
        style: str = "%",
        extra_keys: Optional[Iterable[str]] = None,
    ) -> None:
        super().__init__(fmt=fmt, datefmt=datefmt, style=style)
        self._extra_keys: Sequence[str] = tuple(extra_keys or _EXTRA_KEYS)

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        parts = []
        for key in self._extra_keys:
            value = getattr(record, key, None)
            if value is None:
                continue
            parts.append(f"{key}={value}")
        if parts:
            return f"{message} | {' '.join(parts)}"
        return message


def configure_logging(level: Union[str, int] = "INFO") -> None:
    """Install the application log handler on the root logger (once)."""
    global _configured
    if _configured:
        return

    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "contextual": {
                    "()": "gasfinder.logging_config.ContextualFormatter",
                    "fmt": "%(asctime)s | %(levelname)s | %(name)s | %(message)s",
                    "datefmt": "%Y-%m-%d %H:%M:%S",
                    "style": "%",
                    "extra_keys": list(_EXTRA_KEYS),
                }
            },
            "handlers": {
                "default": {
                    "class": "logging.StreamHandler",
                    "level": level,
                    "formatter": "contextual",
                }
            },
            "root": {"handlers": ["default"], "level": level},
        }
    )

    _configured = True
