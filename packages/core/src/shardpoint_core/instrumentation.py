"""Instrumentation hooks — multiple hooks with filtering around blocking operations."""

from __future__ import annotations

import fnmatch
import logging
from contextvars import ContextVar
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Callable

logger = logging.getLogger("shardpoint.instrumentation")

_MATCH_CACHE_MAX_SIZE = 2048

STREAM_ATTRIBUTE = "stream.name"


@runtime_checkable
class InstrumentationHook(Protocol):
    """Protocol for instrumentation hooks (tracing, metrics, etc.)."""

    def __call__(
        self,
        operation: str,
        attributes: dict[str, Any],
        next_handler: Callable[[], Any],
    ) -> Any:
        """Wrap an operation with instrumentation."""
        ...


class HookRegistration:
    """A registered hook with filtering and priority.

    *operations* and *streams* are fnmatch patterns. A stream filter only
    matches operations whose attributes carry a ``stream.name``.
    """

    def __init__(
        self,
        hook: InstrumentationHook,
        *,
        priority: int = 0,
        predicate: Callable[[str, dict[str, Any]], bool] | None = None,
        operations: list[str] | None = None,
        streams: list[str] | None = None,
        enabled: bool = True,
    ) -> None:
        self.hook = hook
        self.priority = priority
        self.predicate = predicate
        self.operations = operations or []
        self.streams = streams or []
        self.enabled = enabled
        self._match_cache: dict[str, bool] = {}

    def matches(self, operation: str, attributes: dict[str, Any]) -> bool:
        """Check if this registration applies to the operation."""
        if not self.enabled:
            return False

        if self.predicate is not None and not self.predicate(operation, attributes):
            return False

        return self._matches_stream(attributes) and self._matches_operation(operation)

    def _matches_stream(self, attributes: dict[str, Any]) -> bool:
        if not self.streams:
            return True
        stream_name = attributes.get(STREAM_ATTRIBUTE)
        if not isinstance(stream_name, str):
            return False
        return any(fnmatch.fnmatchcase(stream_name, p) for p in self.streams)

    def _matches_operation(self, operation: str) -> bool:
        if not self.operations:
            return True
        if operation in self._match_cache:
            return self._match_cache[operation]
        matched = any(
            fnmatch.fnmatch(operation, pattern) for pattern in self.operations
        )
        if len(self._match_cache) >= _MATCH_CACHE_MAX_SIZE:
            self._match_cache.clear()
        self._match_cache[operation] = matched
        return matched

    def clear_cache(self) -> None:
        """Clear the match cache."""
        self._match_cache.clear()


class HookRegistry:
    """Registry for multiple instrumentation hooks with filtering."""

    def __init__(self) -> None:
        self._registrations: list[HookRegistration] = []

    @property
    def registrations(self) -> list[HookRegistration]:
        return list(self._registrations)

    def register(
        self,
        hook: InstrumentationHook,
        *,
        priority: int = 0,
        predicate: Callable[[str, dict[str, Any]], bool] | None = None,
        operations: list[str] | None = None,
        streams: list[str] | None = None,
        enabled: bool = True,
    ) -> HookRegistration:
        """Register a hook with optional filtering.

        Lower priorities run first (outermost).
        """
        registration = HookRegistration(
            hook=hook,
            priority=priority,
            predicate=predicate,
            operations=operations,
            streams=streams,
            enabled=enabled,
        )
        self._registrations.append(registration)
        self._registrations.sort(key=lambda r: r.priority)
        return registration

    def execute_all(
        self,
        operation: str,
        attributes: dict[str, Any],
        next_handler: Callable[[], Any],
    ) -> Any:
        """Execute all matching hooks in priority order around *next_handler*."""
        matching = [r for r in self._registrations if r.matches(operation, attributes)]
        if not matching:
            return next_handler()

        def pipeline(index: int = 0) -> Any:
            if index >= len(matching):
                return next_handler()
            registration = matching[index]
            return registration.hook(
                operation,
                attributes,
                lambda: pipeline(index + 1),
            )

        return pipeline()

    def clear(self) -> None:
        """Remove all registrations and clear caches."""
        for registration in self._registrations:
            registration.clear_cache()
        self._registrations.clear()


_hook_registry_var: ContextVar[HookRegistry | None] = ContextVar(
    "hook_registry", default=None
)


def get_hook_registry() -> HookRegistry:
    """Get the hook registry for the current context.

    Creates a fresh ``HookRegistry`` on first access within each context,
    providing automatic test isolation without leaking state across threads
    or test boundaries.
    """
    registry = _hook_registry_var.get()
    if registry is None:
        registry = HookRegistry()
        _hook_registry_var.set(registry)
    return registry


def set_hook_registry(registry: HookRegistry) -> None:
    """Set a custom hook registry in the current context."""
    _hook_registry_var.set(registry)


def notify_hooks(
    registry: HookRegistry,
    operation: str,
    attributes: dict[str, Any],
) -> None:
    """Run matching hooks around a no-op, as a notification.

    For observation points that have no operation of their own to wrap.
    A failing hook is logged and never breaks the caller.
    """
    if not registry._registrations:
        return

    def _no_op() -> None:
        return None

    try:
        registry.execute_all(operation, attributes, _no_op)
    except Exception as exc:  # noqa: BLE001
        logger.warning("Notification hook failed for %s: %s", operation, exc, exc_info=exc)
