"""Primitives: exceptions."""

from __future__ import annotations

from .exceptions import (
    DomainError,
    InfrastructureError,
    InvariantViolationError,
    ShardpointError,
    StreamClientError,
)

__all__ = [
    "DomainError",
    "InfrastructureError",
    "InvariantViolationError",
    "ShardpointError",
    "StreamClientError",
]
