"""Reconcile a persisted reader checkpoint with a freshly resolved topology."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from .reader_checkpoint import ReaderCheckpoint
from .shard_checkpoint import ShardCheckpoint
from .starting_point import StartingPoint

if TYPE_CHECKING:
    from collections.abc import Iterable

logger = logging.getLogger("shardpoint.checkpoints")


@dataclass(frozen=True)
class ReconciliationResult:
    """Outcome of :func:`reconcile`.

    - ``kept``: shards in both, at their persisted positions.
    - ``added``: shards only in the current topology, at ``TRIM_HORIZON``.
    - ``removed``: persisted shards that are gone from the topology.
    - ``checkpoint``: ``kept`` plus ``added``; what reading resumes from.
    """

    kept: ReaderCheckpoint
    added: ReaderCheckpoint
    removed: ReaderCheckpoint
    checkpoint: ReaderCheckpoint

    @property
    def has_changes(self) -> bool:
        return bool(self.added) or bool(self.removed)


def reconcile(
    persisted: ReaderCheckpoint,
    current: ReaderCheckpoint | Iterable[ShardCheckpoint],
) -> ReconciliationResult:
    """Carry *persisted* positions over to the *current* topology.

    Shards created by a split or merge start at their trim horizon so none
    of their records are skipped. Shards that disappeared are dropped; their
    records live on in descendants that are already part of *current*.
    Only shard ids of *current* matter, never its positions.
    """
    if not isinstance(current, ReaderCheckpoint):
        current = ReaderCheckpoint(persisted.stream_name, current)

    kept = persisted.intersection(current)
    removed = persisted - current
    trim_horizon = StartingPoint.trim_horizon()
    added = ReaderCheckpoint(
        persisted.stream_name,
        (
            ShardCheckpoint.from_starting_point(
                c.stream_name, c.shard_id, trim_horizon
            )
            for c in current - persisted
        ),
    )
    checkpoint = ReaderCheckpoint(persisted.stream_name, [*kept, *added])

    if added or removed:
        logger.info(
            "Shard topology of stream %s changed: kept=%d added=%s removed=%s",
            persisted.stream_name,
            len(kept),
            sorted(added.shard_ids),
            sorted(removed.shard_ids),
        )
    return ReconciliationResult(
        kept=kept,
        added=added,
        removed=removed,
        checkpoint=checkpoint,
    )
