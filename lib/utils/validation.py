"""Validation helpers for configuration values."""

from typing import Optional


def ensure(condition: bool, message: str) -> None:
    if not condition:
        raise ValueError(message)


def ensure_positive(value: Optional[float], name: str, allow_none: bool = False) -> None:
    """Reject zero or negative numbers; ``None`` passes only with ``allow_none``."""

    if value is None:
        ensure(allow_none, f"{name} is required")
        return
    ensure(value > 0, f"{name} must be positive, got {value!r}")
