"""Protocols for the checkpoint engine."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from shardpoint_core.ports.stream_client import IStreamClient

    from .reader_checkpoint import ReaderCheckpoint
    from .shard_checkpoint import ShardCheckpoint
    from .starting_point import StartingPoint


@runtime_checkable
class ITopologyFinder(Protocol):
    """Resolves a starting point into the shard checkpoints of a stream."""

    def resolve(
        self,
        client: IStreamClient,
        stream_name: str,
        starting_point: StartingPoint,
    ) -> frozenset[ShardCheckpoint]:
        """Return one checkpoint per shard to read; empty if none are open."""
        ...


@runtime_checkable
class ICheckpointGenerator(Protocol):
    """What the pipeline runner calls to obtain a reader checkpoint."""

    def generate(self, client: IStreamClient) -> ReaderCheckpoint:
        """Produce a complete checkpoint or raise; never a partial one."""
        ...


@runtime_checkable
class ICheckpointStore(Protocol):
    """Protocol for persisting reader checkpoints between runs."""

    def get_checkpoint(self, stream_name: str) -> ReaderCheckpoint | None:
        """Return the last saved checkpoint; None if never saved."""
        ...

    def save_checkpoint(self, checkpoint: ReaderCheckpoint) -> None:
        """Persist *checkpoint*, replacing the previous one of its stream."""
        ...
