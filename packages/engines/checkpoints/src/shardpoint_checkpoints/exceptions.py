"""Checkpoint engine exceptions."""

from __future__ import annotations

from shardpoint_core.primitives.exceptions import (
    DomainError,
    InfrastructureError,
    InvariantViolationError,
    ShardpointError,
)


class CheckpointError(ShardpointError):
    """Base for checkpoint-engine errors."""


class TopologyUnavailable(CheckpointError, InfrastructureError):
    """Raised when the shards of a stream cannot be enumerated.

    Transient: the stream service failed or the call was canceled. Callers
    should retry with backoff; nothing was built from the failed listing.
    """

    def __init__(self, stream_name: str, reason: str | None = None) -> None:
        self.stream_name = stream_name
        self.reason = reason
        msg = f"Shard topology of stream {stream_name!r} is unavailable"
        if reason:
            msg += f" - {reason}"
        super().__init__(msg)


class InvalidStartingPoint(CheckpointError, DomainError):
    """Raised when a starting point or position is internally inconsistent.

    Fatal: the input has to be fixed. Deliberately not a ``ValueError`` so it
    propagates unchanged out of pydantic validators.
    """


class InvalidShardPosition(InvalidStartingPoint):
    """Raised when a shard checkpoint's position fields do not fit its iterator type."""


class DuplicateShardCheckpoint(CheckpointError, InvariantViolationError):
    """Raised when a reader checkpoint is built with a shard id more than once."""

    def __init__(self, stream_name: str, shard_id: str) -> None:
        self.stream_name = stream_name
        self.shard_id = shard_id
        super().__init__(
            f"Duplicate checkpoint for shard {shard_id!r} of stream {stream_name!r}"
        )


class StreamMismatchError(CheckpointError, InvariantViolationError):
    """Raised when checkpoints of different streams are combined."""

    def __init__(self, expected: str, actual: str) -> None:
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Checkpoint belongs to stream {actual!r}, expected {expected!r}"
        )


class CheckpointSerializationError(CheckpointError, InfrastructureError):
    """Raised when a persisted reader checkpoint cannot be encoded or decoded."""
