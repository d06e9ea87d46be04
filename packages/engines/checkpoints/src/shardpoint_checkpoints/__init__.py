"""Shard checkpoint engine — starting points, topology resolution, generators."""

from __future__ import annotations

from .exceptions import (
    CheckpointError,
    CheckpointSerializationError,
    DuplicateShardCheckpoint,
    InvalidShardPosition,
    InvalidStartingPoint,
    StreamMismatchError,
    TopologyUnavailable,
)
from .finder import ShardTopologyFinder
from .generator import (
    CheckpointGenerator,
    ResumingCheckpointGenerator,
    StaticCheckpointGenerator,
)
from .ports import ICheckpointGenerator, ICheckpointStore, ITopologyFinder
from .reader_checkpoint import ReaderCheckpoint
from .reconciliation import ReconciliationResult, reconcile
from .serialization import ReaderCheckpointSerializer
from .shard_checkpoint import ShardCheckpoint
from .starting_point import InitialPosition, StartingPoint
from .store import InMemoryCheckpointStore

__all__ = [
    "CheckpointError",
    "CheckpointGenerator",
    "CheckpointSerializationError",
    "DuplicateShardCheckpoint",
    "ICheckpointGenerator",
    "ICheckpointStore",
    "ITopologyFinder",
    "InMemoryCheckpointStore",
    "InitialPosition",
    "InvalidShardPosition",
    "InvalidStartingPoint",
    "ReaderCheckpoint",
    "ReaderCheckpointSerializer",
    "ReconciliationResult",
    "ResumingCheckpointGenerator",
    "ShardCheckpoint",
    "ShardTopologyFinder",
    "StartingPoint",
    "StaticCheckpointGenerator",
    "StreamMismatchError",
    "TopologyUnavailable",
    "reconcile",
]
