"""InMemoryStreamClient — dict-backed fake stream service for unit tests."""

from __future__ import annotations

from typing import TYPE_CHECKING

from ...ports.stream_client import IStreamClient, Shard, ShardIteratorType
from ...primitives.exceptions import StreamClientError

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator
    from datetime import datetime


class InMemoryStreamClient(IStreamClient):
    """In-memory implementation of ``IStreamClient``.

    Keeps one shard list per stream and serves ``list_shards`` in pages of
    ``page_size`` so pagination paths are exercised. Transient failures can be
    queued with :meth:`fail_next`; a queued failure fires after the first page
    has been yielded, mimicking a listing that breaks part way through.
    """

    def __init__(self, *, page_size: int = 100) -> None:
        if page_size < 1:
            raise ValueError("page_size must be >= 1")
        self._page_size = page_size
        self._streams: dict[str, list[Shard]] = {}
        self._pending_failures: list[Exception] = []
        self.list_calls = 0
        self.page_requests = 0
        self.cursor_requests: list[tuple[str, str, ShardIteratorType]] = []

    def add_stream(self, stream_name: str, shards: Iterable[Shard] = ()) -> None:
        self._streams[stream_name] = list(shards)

    def add_shard(self, stream_name: str, shard: Shard) -> None:
        self._streams.setdefault(stream_name, []).append(shard)

    def shards(self, stream_name: str) -> list[Shard]:
        return list(self._streams.get(stream_name, []))

    def close_shard(self, stream_name: str, shard_id: str, ending: str) -> Shard:
        """Mark a shard closed at *ending* and return the closed value."""
        shards = self._require_stream(stream_name)
        for index, shard in enumerate(shards):
            if shard.shard_id == shard_id:
                closed = shard.replace(ending_sequence_number=ending)
                shards[index] = closed
                return closed
        raise StreamClientError(
            f"Shard {shard_id!r} not found",
            stream_name=stream_name,
            operation="close_shard",
        )

    def split_shard(
        self,
        stream_name: str,
        shard_id: str,
        child_ids: tuple[str, str],
        *,
        ending: str = "1000",
    ) -> None:
        """Close *shard_id* and open two children that inherit from it."""
        self.close_shard(stream_name, shard_id, ending)
        for child_id in child_ids:
            self.add_shard(
                stream_name,
                Shard(
                    shard_id=child_id,
                    parent_shard_id=shard_id,
                    starting_sequence_number=str(int(ending) + 1),
                ),
            )

    def merge_shards(
        self,
        stream_name: str,
        shard_id: str,
        adjacent_shard_id: str,
        child_id: str,
        *,
        ending: str = "1000",
    ) -> None:
        """Close two adjacent shards and open one child that inherits from both."""
        self.close_shard(stream_name, shard_id, ending)
        self.close_shard(stream_name, adjacent_shard_id, ending)
        self.add_shard(
            stream_name,
            Shard(
                shard_id=child_id,
                parent_shard_id=shard_id,
                adjacent_parent_shard_id=adjacent_shard_id,
                starting_sequence_number=str(int(ending) + 1),
            ),
        )

    def fail_next(self, times: int = 1, error: Exception | None = None) -> None:
        """Make the next *times* listings fail with *error*."""
        for _ in range(times):
            self._pending_failures.append(
                error
                or StreamClientError("Simulated transient failure", operation="list_shards")
            )

    def list_shards(self, stream_name: str) -> Iterator[Shard]:
        self.list_calls += 1
        failure = self._pending_failures.pop(0) if self._pending_failures else None
        return self._paginate(stream_name, failure)

    def _paginate(
        self, stream_name: str, failure: Exception | None
    ) -> Iterator[Shard]:
        shards = self._require_stream(stream_name)
        snapshot = list(shards)
        for start in range(0, max(len(snapshot), 1), self._page_size):
            self.page_requests += 1
            if failure is not None and start > 0:
                raise failure
            yield from snapshot[start : start + self._page_size]
        if failure is not None:
            raise failure

    def get_shard_cursor(
        self,
        stream_name: str,
        shard_id: str,
        iterator_type: ShardIteratorType,
        *,
        sequence_number: str | None = None,
        timestamp: datetime | None = None,
    ) -> str:
        if not any(s.shard_id == shard_id for s in self._require_stream(stream_name)):
            raise StreamClientError(
                f"Shard {shard_id!r} not found",
                stream_name=stream_name,
                operation="get_shard_cursor",
            )
        self.cursor_requests.append((stream_name, shard_id, iterator_type))
        position = sequence_number or (timestamp.isoformat() if timestamp else "")
        return f"{stream_name}/{shard_id}/{iterator_type.value}/{position}"

    def _require_stream(self, stream_name: str) -> list[Shard]:
        try:
            return self._streams[stream_name]
        except KeyError:
            raise StreamClientError(
                f"Stream {stream_name!r} not found",
                stream_name=stream_name,
                operation="list_shards",
            ) from None
