"""Structured logging utilities."""

from __future__ import annotations

import json
import sys
from collections.abc import Mapping
from datetime import datetime, UTC
from typing import Any, TextIO, cast

from pydantic import BaseModel, field_validator

from hexgoap.core.models import HexCoord

_LEVELS = {"DEBUG": 10, "INFO": 20, "WARNING": 30, "ERROR": 40}


class _SanitizedText(BaseModel):
    """Model that escapes control characters in log text."""

    text: str

    @field_validator("text", mode="before")
    @classmethod
    def _escape_control_characters(cls, value: Any) -> str:
        text = str(value)
        if text.isprintable():
            return text
        return "".join(char if char.isprintable() else char.encode("unicode_escape").decode() for char in text)


def sanitize_text(text: str) -> str:
    """Escape control characters in the provided text."""
    return _SanitizedText.model_validate({"text": text}).text


def _sanitize_log_value(value: Any) -> Any:
    """Apply sanitisation recursively to structured log data."""
    if isinstance(value, str):
        return sanitize_text(value)
    if isinstance(value, HexCoord):
        return str(value)
    if isinstance(value, Mapping):
        typed_mapping = cast("Mapping[Any, Any]", value)
        return {str(key): _sanitize_log_value(item) for key, item in typed_mapping.items()}
    if isinstance(value, (list, tuple)):
        typed_items = cast("list[Any] | tuple[Any, ...]", value)
        return [_sanitize_log_value(item) for item in typed_items]
    if isinstance(value, set):
        typed_set = cast("set[Any]", value)
        return sorted(_sanitize_log_value(item) for item in typed_set)
    return value


class StructuredLogger:
    """Simple structured logger supporting JSON lines and text output."""

    def __init__(
        self,
        *,
        name: str,
        json_mode: bool = False,
        stream: TextIO | None = None,
        level: str = "DEBUG",
    ) -> None:
        """Initialise the structured logger."""
        if level.upper() not in _LEVELS:
            msg = f"unknown log level: {level}"
            raise ValueError(msg)
        self._name = name
        self._json_mode = json_mode
        self._stream: TextIO = stream or sys.stderr
        self._threshold = _LEVELS[level.upper()]

    @property
    def name(self) -> str:
        """Return the logger name."""
        return self._name

    @property
    def json_mode(self) -> bool:
        """Return whether JSON mode is enabled."""
        return self._json_mode

    def child(self, suffix: str) -> StructuredLogger:
        """Return a logger sharing this stream under ``<name>.<suffix>``."""
        child = StructuredLogger(name=f"{self._name}.{suffix}", json_mode=self._json_mode, stream=self._stream)
        child._threshold = self._threshold
        return child

    def debug(self, message: str, **fields: Any) -> None:
        """Log a DEBUG-level message."""
        self._emit("DEBUG", message, fields)

    def info(self, message: str, **fields: Any) -> None:
        """Log an INFO-level message."""
        self._emit("INFO", message, fields)

    def warning(self, message: str, **fields: Any) -> None:
        """Log a WARNING-level message."""
        self._emit("WARNING", message, fields)

    def error(self, message: str, **fields: Any) -> None:
        """Log an ERROR-level message."""
        self._emit("ERROR", message, fields)

    def _emit(self, level: str, message: str, fields: dict[str, Any]) -> None:
        if _LEVELS[level] < self._threshold:
            return
        timestamp = datetime.now(UTC).isoformat()
        sanitised_message = sanitize_text(message)
        sanitised_fields = {key: _sanitize_log_value(value) for key, value in fields.items()}
        if self._json_mode:
            payload: dict[str, Any] = {
                "timestamp": timestamp,
                "level": level,
                "logger": self._name,
                "message": sanitised_message,
            }
            payload.update(sanitised_fields)
            self._stream.write(json.dumps(payload, ensure_ascii=False) + "\n")
        else:
            line = f"[{timestamp}] {level:<7} {self._name}: {sanitised_message}"
            if sanitised_fields:
                extras = " ".join(
                    f"{key}={json.dumps(value, ensure_ascii=False)}" for key, value in sanitised_fields.items()
                )
                line = f"{line} | {extras}"
            self._stream.write(line + "\n")
        self._stream.flush()


__all__ = ["StructuredLogger", "sanitize_text"]
