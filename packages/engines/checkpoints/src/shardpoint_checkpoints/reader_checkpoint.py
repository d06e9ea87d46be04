"""ReaderCheckpoint — the full set of shard positions of one stream."""

from __future__ import annotations

from collections.abc import Collection
from types import MappingProxyType
from typing import TYPE_CHECKING

from .exceptions import DuplicateShardCheckpoint, StreamMismatchError
from .shard_checkpoint import ShardCheckpoint

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator


class ReaderCheckpoint(Collection[ShardCheckpoint]):
    """Immutable set of :class:`ShardCheckpoint` keyed by shard id.

    All entries belong to ``stream_name`` and each shard appears at most once.
    Iteration order is unspecified. Equality is structural, so a checkpoint
    rebuilt from persisted data equals the one that was saved.

    Difference and intersection work on shard ids, keeping the positions of
    the left operand::

        stale = persisted - current   # shards that disappeared
        fresh = current - persisted   # shards that appeared
    """

    __slots__ = ("_by_shard", "_stream_name")

    def __init__(
        self,
        stream_name: str,
        shard_checkpoints: Iterable[ShardCheckpoint] = (),
    ) -> None:
        by_shard: dict[str, ShardCheckpoint] = {}
        for checkpoint in shard_checkpoints:
            if checkpoint.stream_name != stream_name:
                raise StreamMismatchError(stream_name, checkpoint.stream_name)
            if checkpoint.shard_id in by_shard:
                raise DuplicateShardCheckpoint(stream_name, checkpoint.shard_id)
            by_shard[checkpoint.shard_id] = checkpoint
        self._stream_name = stream_name
        self._by_shard = MappingProxyType(by_shard)

    @classmethod
    def empty(cls, stream_name: str) -> ReaderCheckpoint:
        return cls(stream_name)

    @property
    def stream_name(self) -> str:
        return self._stream_name

    @property
    def shard_ids(self) -> frozenset[str]:
        return frozenset(self._by_shard)

    def __len__(self) -> int:
        return len(self._by_shard)

    def __iter__(self) -> Iterator[ShardCheckpoint]:
        return iter(self._by_shard.values())

    def __contains__(self, item: object) -> bool:
        if not isinstance(item, ShardCheckpoint):
            return False
        return self._by_shard.get(item.shard_id) == item

    def has_shard(self, shard_id: str) -> bool:
        return shard_id in self._by_shard

    def get(self, shard_id: str) -> ShardCheckpoint | None:
        return self._by_shard.get(shard_id)

    def sorted(self) -> list[ShardCheckpoint]:
        """Entries ordered by shard id, for stable output."""
        return [self._by_shard[k] for k in sorted(self._by_shard)]

    def __sub__(self, other: object) -> ReaderCheckpoint:
        if not isinstance(other, ReaderCheckpoint):
            return NotImplemented
        self._require_same_stream(other)
        return ReaderCheckpoint(
            self._stream_name,
            (c for c in self if not other.has_shard(c.shard_id)),
        )

    def intersection(self, other: ReaderCheckpoint) -> ReaderCheckpoint:
        """Entries of ``self`` whose shard is also in *other*."""
        self._require_same_stream(other)
        return ReaderCheckpoint(
            self._stream_name,
            (c for c in self if other.has_shard(c.shard_id)),
        )

    def with_checkpoint(self, checkpoint: ShardCheckpoint) -> ReaderCheckpoint:
        """Return a copy where *checkpoint* replaces (or adds) its shard's entry."""
        if checkpoint.stream_name != self._stream_name:
            raise StreamMismatchError(self._stream_name, checkpoint.stream_name)
        merged = dict(self._by_shard)
        merged[checkpoint.shard_id] = checkpoint
        return ReaderCheckpoint(self._stream_name, merged.values())

    def without_shards(self, shard_ids: Iterable[str]) -> ReaderCheckpoint:
        dropped = frozenset(shard_ids)
        return ReaderCheckpoint(
            self._stream_name,
            (c for c in self if c.shard_id not in dropped),
        )

    def _require_same_stream(self, other: ReaderCheckpoint) -> None:
        if other.stream_name != self._stream_name:
            raise StreamMismatchError(self._stream_name, other.stream_name)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ReaderCheckpoint):
            return NotImplemented
        return (
            self._stream_name == other._stream_name
            and dict(self._by_shard) == dict(other._by_shard)
        )

    def __hash__(self) -> int:
        return hash((self._stream_name, frozenset(self._by_shard.values())))

    def __repr__(self) -> str:
        entries = ", ".join(str(c) for c in self.sorted())
        return f"ReaderCheckpoint({self._stream_name!r}, [{entries}])"
