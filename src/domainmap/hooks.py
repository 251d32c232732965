"""
Extension points for overriding resolver results.

Every public resolver operation hands its result to a named extension point
before returning it. Callbacks registered against that point run in
registration order; each receives the current value plus the operation's
context arguments and returns the (possibly replaced) value. With no
callbacks registered the value passes through unchanged.
"""

from collections import defaultdict
from typing import Any, Callable, Union

from domainmap.enums import Hook
from domainmap.exceptions import HookError


HookCallback = Callable[..., Any]


def _resolve_hook(hook: Union[Hook, str]) -> Hook:
    if isinstance(hook, Hook):
        return hook
    try:
        return Hook(hook)
    except ValueError:
        raise HookError(
            code="unknown_hook",
            message=f"Unknown extension point {hook!r}",
            details={"hook": hook, "known": [h.value for h in Hook]},
        )


class HookRegistry:
    """Ordered callback chains keyed by extension point."""

    def __init__(self) -> None:
        self._callbacks: dict[Hook, list[HookCallback]] = defaultdict(list)

    def add(self, hook: Union[Hook, str], callback: HookCallback) -> None:
        """
        Register a callback for an extension point.

        Args:
            hook: Extension point (Hook member or its string value)
            callback: Called as ``callback(value, *context)``; its return
                value replaces ``value`` for the next callback

        Raises:
            HookError: If the extension point is unknown
        """
        if not callable(callback):
            raise HookError(
                code="not_callable",
                message="Hook callback must be callable",
                details={"hook": str(hook)},
            )
        self._callbacks[_resolve_hook(hook)].append(callback)

    def remove(self, hook: Union[Hook, str], callback: HookCallback) -> bool:
        """Unregister a callback. Returns False if it was not registered."""
        callbacks = self._callbacks.get(_resolve_hook(hook), [])
        if callback in callbacks:
            callbacks.remove(callback)
            return True
        return False

    def has(self, hook: Union[Hook, str]) -> bool:
        return bool(self._callbacks.get(_resolve_hook(hook)))

    def apply(self, hook: Union[Hook, str], value: Any, *context: Any) -> Any:
        """Run the callback chain of ``hook`` over ``value``."""
        for callback in list(self._callbacks.get(_resolve_hook(hook), [])):
            value = callback(value, *context)
        return value
