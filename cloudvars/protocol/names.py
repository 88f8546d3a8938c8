"""Variable naming and scalar value helpers."""

from __future__ import annotations

import math
from typing import Any

CLOUD_PREFIX = "☁ "


def to_variable_name(name: str) -> str:
    """Add the cloud prefix to ``name`` if it is missing."""

    if name.startswith(CLOUD_PREFIX):
        return name
    return f"{CLOUD_PREFIX}{name}"


def is_scalar(value: Any) -> bool:
    """Return True if ``value`` is a string, finite number or boolean.

    The server may still reject the value; this only checks that it can be
    carried by the protocol.
    """

    if isinstance(value, (str, bool, int)):
        return True
    if isinstance(value, float):
        return math.isfinite(value)
    return False
