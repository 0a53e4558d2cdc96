"""Cell length enforcement for report rows.

A cell that cannot be rendered must not abort the report: ``truncate``
returns ``Failed`` for it and ``enforce_max_length`` turns that into an
empty string.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any, Union

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class Truncated:
    value: str


@dataclass(frozen=True)
class Failed:
    reason: str


TruncationResult = Union[Truncated, Failed]


def _validate_max_length(max_length: Any) -> int:
    if isinstance(max_length, bool) or not isinstance(max_length, (int, float)):
        raise ValueError("max_length must be a positive integer")
    if isinstance(max_length, float) and not max_length.is_integer():
        raise ValueError("max_length must be a positive integer")
    if max_length <= 0:
        raise ValueError("max_length must be a positive integer")
    return int(max_length)


def _number_to_text(value: int | float) -> str:
    if isinstance(value, float):
        if not math.isfinite(value):
            return str(value)
        if value.is_integer():
            return str(int(value))
    return str(value)


def truncate(value: Any, max_length: int) -> TruncationResult:
    """Render *value* as text no longer than *max_length* characters.

    Raises ``ValueError`` when *max_length* is not a positive integer.
    """
    limit = _validate_max_length(max_length)
    if value is None:
        return Truncated("")
    if isinstance(value, bool):
        return Failed(f"unsupported cell type {type(value).__name__}")
    try:
        if isinstance(value, str):
            text = value
        elif isinstance(value, (int, float)):
            text = _number_to_text(value)
        else:
            return Failed(f"unsupported cell type {type(value).__name__}")
    except (TypeError, ValueError, OverflowError) as exc:
        return Failed(str(exc))
    return Truncated(text[:limit])


def enforce_max_length(value: Any, max_length: int) -> str:
    result = truncate(value, max_length)
    if isinstance(result, Failed):
        LOGGER.warning("Dropping report cell value: %s", result.reason)
        return ""
    return result.value
