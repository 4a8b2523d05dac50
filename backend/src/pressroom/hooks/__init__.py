"""Pressroom extension hook system.

Provides named extension points at which listeners observe or modify
in-flight data:
- <Type>::getProperties::values: every serialization (best-effort)
- <Type>::getProperties::summaryProperties / fullProperties: per tier (best-effort)
- <Type>::list::queryBuilder: after built-in filters are applied (propagates)
- <Type>::list::queryObject: on the final composed query (propagates)

Usage:
    from pressroom.hooks import HookName, HookPoint

    @hooks.listener(HookName("Submission", HookPoint.VALUES))
    def add_flag(payload):
        payload.values["featured"] = False
"""

from pressroom.hooks.registry import HookRegistry, Listener
from pressroom.hooks.types import (
    HookName,
    HookPoint,
    HookPolicy,
    PropertiesPayload,
    QueryPayload,
    StopHook,
)

__all__ = [
    "HookName",
    "HookPoint",
    "HookPolicy",
    "HookRegistry",
    "Listener",
    "PropertiesPayload",
    "QueryPayload",
    "StopHook",
]
