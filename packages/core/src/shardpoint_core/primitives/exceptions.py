"""Domain and infrastructure exceptions for shardpoint-core."""

from __future__ import annotations


class ShardpointError(Exception):
    """Root exception for the entire shardpoint toolkit."""


class DomainError(ShardpointError):
    """Base class for all domain-related errors."""


class InvariantViolationError(DomainError):
    """Raised when a domain invariant is violated."""


class InfrastructureError(ShardpointError):
    """Base class for all infrastructure-related errors."""


class StreamClientError(InfrastructureError):
    """Raised by stream-client adapters when the stream service call fails.

    Carries the stream and the client operation that failed so callers can
    log or retry without parsing the message.
    """

    def __init__(
        self,
        message: str,
        *,
        stream_name: str | None = None,
        operation: str | None = None,
    ) -> None:
        self.stream_name = stream_name
        self.operation = operation
        super().__init__(message)
