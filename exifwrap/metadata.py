"""Metadata extracted from, or to be written to, a single file."""

from __future__ import annotations

import math
import re
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any

_INT64_MIN = -(2**63)
_INT64_MAX = 2**63 - 1
_INT_PATTERN = re.compile(r"[+-]?[0-9]+")
_HEX_FLOAT_PATTERN = re.compile(r"[+-]?0[xX]", re.ASCII)


class ExiftoolError(Exception):
    """Base class for every error raised by this package."""


class KeyNotFoundError(ExiftoolError, LookupError):
    """Raised when a queried field does not exist or has been cleared."""

    def __init__(self, key: str = "") -> None:
        super().__init__("key not found")
        self.key = key


def _format_float(value: float) -> str:
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "+Inf" if value > 0 else "-Inf"
    if value == 0:
        return "-0" if math.copysign(1.0, value) < 0 else "0"
    return format(Decimal(repr(value)).normalize(), "f")


def _to_string(value: Any) -> str:
    """Render a field value the way it is sent to, and read from, exiftool."""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return _format_float(value)
    if value is None:
        return "<nil>"
    if isinstance(value, (list, tuple)):
        return "[" + " ".join(_to_string(item) for item in value) + "]"
    if isinstance(value, dict):
        items = sorted((_to_string(k), _to_string(v)) for k, v in value.items())
        return "map[" + " ".join(f"{k}:{v}" for k, v in items) + "]"
    return str(value)


def _parse_float(text: str) -> float:
    try:
        if text != text.strip() or "_" in text:
            raise ValueError(f"invalid syntax: {text!r}")
        if _HEX_FLOAT_PATTERN.match(text):
            return float.fromhex(text)
        return float(text)
    except ValueError as exc:
        raise ExiftoolError(f"float64 parsing error ({text}): {exc}") from exc


def _parse_int(text: str) -> int:
    if not _INT_PATTERN.fullmatch(text):
        raise ExiftoolError(f"int64 parsing error ({text}): invalid syntax")
    value = int(text)
    if not _INT64_MIN <= value <= _INT64_MAX:
        raise ExiftoolError(f"int64 parsing error ({text}): value out of range")
    return value


@dataclass
class FileMetadata:
    """The fields of one file, with the error that occurred while handling it."""

    file: str = ""
    fields: dict[str, Any] = field(default_factory=dict)
    err: Exception | None = None

    def _lookup(self, key: str) -> Any:
        value = self.fields.get(key)
        if value is None:
            raise KeyNotFoundError(key)
        return value

    def get_string(self, key: str) -> str:
        """Return a field rendered as a string."""
        return _to_string(self._lookup(key))

    def get_float(self, key: str) -> float:
        """Return a field as a float, parsing it when it is not numeric."""
        value = self._lookup(key)
        if isinstance(value, bool):
            return _parse_float(_to_string(value))
        if isinstance(value, float):
            return value
        if isinstance(value, int):
            return float(value)
        return _parse_float(_to_string(value))

    def get_int(self, key: str) -> int:
        """Return a field as an integer; floats are truncated toward zero."""
        value = self._lookup(key)
        if isinstance(value, bool):
            return _parse_int(_to_string(value))
        if isinstance(value, int):
            return value
        if isinstance(value, float):
            try:
                return int(value)
            except (ValueError, OverflowError) as exc:
                raise ExiftoolError(f"int64 conversion error ({value}): {exc}") from exc
        return _parse_int(_to_string(value))

    def get_strings(self, key: str) -> list[str]:
        """Return a field as a list of strings; a scalar gives a one-item list."""
        value = self._lookup(key)
        if isinstance(value, (list, tuple)):
            return [_to_string(item) for item in value]
        return [_to_string(value)]

    def set_string(self, key: str, value: str) -> None:
        """Set a string field."""
        self.fields[key] = value

    def set_int(self, key: str, value: int) -> None:
        """Set an integer field."""
        self.fields[key] = value

    def set_float(self, key: str, value: float) -> None:
        """Set a float field."""
        self.fields[key] = value

    def set_strings(self, key: str, values: list[str]) -> None:
        """Set a multi-valued string field."""
        self.fields[key] = list(values)

    def clear(self, key: str) -> None:
        """Mark a field for removal."""
        self.fields[key] = None

    def clear_all(self) -> None:
        """Mark every known field for removal."""
        for key in self.fields:
            self.fields[key] = None


def empty_file_metadata() -> FileMetadata:
    """Create a FileMetadata with no file and no fields."""
    return FileMetadata()