"""shardpoint-core — Foundation package for the shard checkpoint toolkit.

Zero infrastructure dependencies. Pydantic for immutable value objects.
"""

from __future__ import annotations

# ── Adapters ────────────────────────────────────────────────────
from .adapters.memory import InMemoryStreamClient
from .correlation import (
    correlation_context,
    generate_correlation_id,
    get_correlation_id,
    set_correlation_id,
)

# ── Domain ───────────────────────────────────────────────────────
from .domain import ValueObject

# ── Instrumentation ─────────────────────────────────────────────
from .instrumentation import (
    HookRegistration,
    HookRegistry,
    InstrumentationHook,
    get_hook_registry,
    notify_hooks,
    set_hook_registry,
)

# ── Ports ────────────────────────────────────────────────────────
from .ports import IStreamClient, Shard, ShardIteratorType

# ── Primitives ──────────────────────────────────────────────────
from .primitives import (
    DomainError,
    InfrastructureError,
    InvariantViolationError,
    ShardpointError,
    StreamClientError,
)

__all__: list[str] = [
    # Domain
    "ValueObject",
    # Correlation
    "correlation_context",
    "generate_correlation_id",
    "get_correlation_id",
    "set_correlation_id",
    # Instrumentation
    "HookRegistration",
    "HookRegistry",
    "InstrumentationHook",
    "get_hook_registry",
    "notify_hooks",
    "set_hook_registry",
    # Ports
    "IStreamClient",
    "Shard",
    "ShardIteratorType",
    # Primitives
    "DomainError",
    "InfrastructureError",
    "InvariantViolationError",
    "ShardpointError",
    "StreamClientError",
    # Adapters
    "InMemoryStreamClient",
]
