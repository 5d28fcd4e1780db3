"""Structured logging seam: (level, message, fields) over stdlib logging."""

from __future__ import annotations

import logging
from typing import Any, Protocol


class StructuredLogger(Protocol):
    def log(self, level: int, message: str, **fields: Any) -> None:
        ...


class StdlibStructuredLogger:
    def __init__(self, name: str = "gateway") -> None:
        self._logger = logging.getLogger(name)

    def log(self, level: int, message: str, **fields: Any) -> None:
        if not self._logger.isEnabledFor(level):
            return
        rendered = " ".join(f"{k}={v!r}" for k, v in fields.items())
        self._logger.log(
            level,
            "%s %s" if rendered else "%s%s",
            message,
            rendered,
            extra={"fields": fields},
        )


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
