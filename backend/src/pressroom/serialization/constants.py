"""The ``_constants`` channel.

Constants meant for client consumption (status names, enumerations) are
request-independent, so they are merged once into a top-level payload
instead of being repeated on every list item.
"""

from collections.abc import Mapping
from typing import Any

from pressroom.core.types import to_json_safe

CONSTANTS_KEY = "_constants"


def with_constants(payload: Mapping[str, Any], constants: Mapping[str, Any]) -> dict[str, Any]:
    """Return a copy of ``payload`` with ``constants`` merged under ``_constants``.

    Constants already present in the payload are kept; later values win
    on name collisions. The input payload is not modified.
    """
    result = dict(payload)
    merged = dict(result.get(CONSTANTS_KEY) or {})
    for name, value in constants.items():
        merged[str(name)] = to_json_safe(value)
    result[CONSTANTS_KEY] = merged
    return result
