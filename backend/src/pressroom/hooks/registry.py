"""Hook registry for Pressroom.

Maps hook names to ordered listener lists. One registry is constructed at
startup and shared through the ServiceRegistry; listeners are registered
during initialization and only invoked while handling requests.
"""

import logging
from collections.abc import Callable
from typing import Any, TypeVar, Union

from pressroom.core.errors import HookListenerError
from pressroom.hooks.types import HookName, HookPolicy, StopHook

logger = logging.getLogger(__name__)

# Listener signature: (payload) -> None. Listeners mutate the payload in place.
Listener = Callable[[Any], None]
HookKey = Union[HookName, str]

P = TypeVar("P")


class HookRegistry:
    """Registry of hook listeners.

    Duplicate registrations are allowed and each one fires. Listeners run in
    registration order.

    Example:
        hooks = HookRegistry()

        @hooks.listener("Submission::getProperties::values")
        def add_word_count(payload):
            payload.values["wordCount"] = 42
    """

    def __init__(self) -> None:
        self._listeners: dict[str, list[Listener]] = {}

    def register(self, name: HookKey, listener: Listener) -> Listener:
        """Append a listener for ``name``.

        Args:
            name: Typed hook name or its string form
            listener: Callable receiving the mutable payload

        Returns:
            The listener, so this can back a decorator
        """
        self._listeners.setdefault(str(name), []).append(listener)
        return listener

    def unregister(self, name: HookKey, listener: Listener) -> bool:
        """Remove the first registration of ``listener`` for ``name``.

        Returns:
            True if a registration was removed
        """
        listeners = self._listeners.get(str(name))
        if not listeners or listener not in listeners:
            return False
        listeners.remove(listener)
        if not listeners:
            del self._listeners[str(name)]
        return True

    def listener(self, name: HookKey) -> Callable[[Listener], Listener]:
        """Decorator form of :meth:`register`."""

        def decorator(fn: Listener) -> Listener:
            return self.register(name, fn)

        return decorator

    def invoke(
        self,
        name: HookKey,
        payload: P,
        policy: HookPolicy = HookPolicy.BEST_EFFORT,
    ) -> P:
        """Call every listener for ``name`` with ``payload``.

        Args:
            name: Hook to invoke
            payload: Mutable payload handed to each listener
            policy: Failure handling for listeners that raise

        Returns:
            The same payload object, after listeners have run

        Raises:
            HookListenerError: A listener failed and policy is PROPAGATE
        """
        key = str(name)
        # Copy so listeners registering/unregistering mid-invoke don't skew iteration
        for fn in list(self._listeners.get(key, ())):
            try:
                fn(payload)
            except StopHook:
                logger.debug("Hook '%s' stopped by %s", key, _describe(fn))
                break
            except Exception as e:
                if policy is HookPolicy.PROPAGATE:
                    raise HookListenerError(key, e) from e
                logger.warning(
                    "Listener %s for hook '%s' failed, skipping: %s",
                    _describe(fn),
                    key,
                    e,
                )
        return payload

    def is_registered(self, name: HookKey) -> bool:
        """Check if any listener is registered for a hook."""
        return bool(self._listeners.get(str(name)))

    def count(self, name: HookKey) -> int:
        return len(self._listeners.get(str(name), ()))

    def list_registered(self) -> list[str]:
        """List hook names with at least one listener."""
        return sorted(self._listeners.keys())

    def clear(self) -> None:
        """Clear all registrations. Primarily for testing."""
        self._listeners.clear()


def _describe(fn: Listener) -> str:
    return getattr(fn, "__qualname__", repr(fn))
