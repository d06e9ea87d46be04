"""Checkpoint generators — what the pipeline runner calls at start-up."""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING, Any

from shardpoint_core.correlation import get_correlation_id
from shardpoint_core.instrumentation import get_hook_registry

from .exceptions import InvalidStartingPoint
from .finder import ShardTopologyFinder
from .ports import ICheckpointGenerator
from .reader_checkpoint import ReaderCheckpoint
from .reconciliation import ReconciliationResult, reconcile
from .starting_point import InitialPosition, StartingPoint

if TYPE_CHECKING:
    from collections.abc import Callable

    from shardpoint_core.ports.stream_client import IStreamClient

    from .ports import ITopologyFinder

logger = logging.getLogger("shardpoint.checkpoints")


def _instrumented(
    operation: str,
    attributes: dict[str, Any],
    produce: Callable[[], ReaderCheckpoint],
) -> ReaderCheckpoint:
    """Run *produce* through the hook registry, logging outcome and duration."""

    def _timed() -> ReaderCheckpoint:
        start = time.perf_counter()
        try:
            checkpoint = produce()
        except Exception:
            elapsed = (time.perf_counter() - start) * 1000
            logger.exception("%s failed after %.2fms", operation, elapsed)
            raise
        elapsed = (time.perf_counter() - start) * 1000
        logger.info(
            "%s produced %d shard checkpoint(s) in %.2fms (correlation_id=%s)",
            operation,
            len(checkpoint),
            elapsed,
            attributes.get("correlation_id"),
        )
        return checkpoint

    result: ReaderCheckpoint = get_hook_registry().execute_all(
        operation, attributes, _timed
    )
    return result


class CheckpointGenerator(ICheckpointGenerator):
    """Generates a fresh reader checkpoint from a starting point.

    One topology query per call, no retries and no side effects beyond the
    read-only client call. Errors from the finder propagate unchanged.
    Calling twice against an unchanged topology yields equal checkpoints.
    """

    def __init__(
        self,
        stream_name: str,
        starting_point: StartingPoint,
        finder: ITopologyFinder | None = None,
    ) -> None:
        self._stream_name = stream_name
        self._starting_point = starting_point
        self._finder = finder or ShardTopologyFinder()

    @property
    def stream_name(self) -> str:
        return self._stream_name

    @property
    def starting_point(self) -> StartingPoint:
        return self._starting_point

    def generate(self, client: IStreamClient) -> ReaderCheckpoint:
        return _instrumented(
            f"checkpoint.generate.{self._stream_name}",
            {
                "stream.name": self._stream_name,
                "starting_point": str(self._starting_point),
                "correlation_id": get_correlation_id(),
            },
            lambda: ReaderCheckpoint(
                self._stream_name,
                self._finder.resolve(client, self._stream_name, self._starting_point),
            ),
        )

    def __repr__(self) -> str:
        return f"CheckpointGenerator({self._stream_name!r}, {self._starting_point})"


class StaticCheckpointGenerator(ICheckpointGenerator):
    """Always returns the checkpoint it was built with; the client is unused."""

    def __init__(self, checkpoint: ReaderCheckpoint) -> None:
        self._checkpoint = checkpoint

    def generate(self, client: IStreamClient) -> ReaderCheckpoint:  # noqa: ARG002
        return self._checkpoint

    def __repr__(self) -> str:
        return f"StaticCheckpointGenerator({self._checkpoint!r})"


class ResumingCheckpointGenerator(ICheckpointGenerator):
    """Resumes from a persisted checkpoint, adjusted to the current topology.

    Shards still present keep their persisted positions, shards created since
    start at their trim horizon and vanished shards are dropped (see
    :func:`reconcile`). An empty persisted checkpoint is reconciled like any
    other, so every open shard starts at its trim horizon.

    *starting_point* only selects which shards are current, so it must resolve
    against the whole stream; ``AT_SEQUENCE_NUMBER`` names a single shard and
    is rejected.
    """

    def __init__(
        self,
        persisted: ReaderCheckpoint,
        starting_point: StartingPoint | None = None,
        finder: ITopologyFinder | None = None,
    ) -> None:
        starting_point = starting_point or StartingPoint.trim_horizon()
        if starting_point.position is InitialPosition.AT_SEQUENCE_NUMBER:
            raise InvalidStartingPoint(
                "Resuming needs the whole stream topology, "
                f"got single-shard {starting_point}"
            )
        self._persisted = persisted
        self._starting_point = starting_point
        self._finder = finder or ShardTopologyFinder()

    def reconcile(self, client: IStreamClient) -> ReconciliationResult:
        """Resolve the current topology and reconcile it with the persisted one."""
        stream_name = self._persisted.stream_name
        current = self._finder.resolve(client, stream_name, self._starting_point)
        return reconcile(self._persisted, current)

    def generate(self, client: IStreamClient) -> ReaderCheckpoint:
        stream_name = self._persisted.stream_name
        return _instrumented(
            f"checkpoint.resume.{stream_name}",
            {
                "stream.name": stream_name,
                "starting_point": str(self._starting_point),
                "correlation_id": get_correlation_id(),
                "resumed_shards": len(self._persisted),
            },
            lambda: self.reconcile(client).checkpoint,
        )
