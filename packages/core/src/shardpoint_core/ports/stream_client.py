"""IStreamClient protocol + Shard value object.

The stream client is the only collaborator that talks to the stream service.
Everything else in the toolkit works on the values it returns.
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from ..domain.value_object import ValueObject

if TYPE_CHECKING:
    from collections.abc import Iterable
    from datetime import datetime


class ShardIteratorType(str, Enum):
    """Where a shard cursor points, as understood by the stream service."""

    LATEST = "LATEST"
    TRIM_HORIZON = "TRIM_HORIZON"
    AT_TIMESTAMP = "AT_TIMESTAMP"
    AT_SEQUENCE_NUMBER = "AT_SEQUENCE_NUMBER"
    AFTER_SEQUENCE_NUMBER = "AFTER_SEQUENCE_NUMBER"


class Shard(ValueObject):
    """One shard as reported by the stream service.

    A shard is closed once it has an ending sequence number (it was split or
    merged away); closed shards stay listed until their records age out.
    """

    shard_id: str
    parent_shard_id: str | None = None
    adjacent_parent_shard_id: str | None = None
    starting_sequence_number: str | None = None
    ending_sequence_number: str | None = None

    @property
    def is_open(self) -> bool:
        return self.ending_sequence_number is None

    @property
    def parent_ids(self) -> tuple[str, ...]:
        return tuple(
            p for p in (self.parent_shard_id, self.adjacent_parent_shard_id) if p
        )


@runtime_checkable
class IStreamClient(Protocol):
    """Protocol for the stream-service client.

    Implementations own transport, retries and pagination. ``list_shards`` may
    yield lazily page by page; callers treat a failure at any point of the
    iteration as a failure of the whole listing.
    """

    def list_shards(self, stream_name: str) -> Iterable[Shard]:
        """Return every shard the service still reports for *stream_name*."""
        ...

    def get_shard_cursor(
        self,
        stream_name: str,
        shard_id: str,
        iterator_type: ShardIteratorType,
        *,
        sequence_number: str | None = None,
        timestamp: datetime | None = None,
    ) -> str:
        """Resolve a shard position to an opaque service cursor."""
        ...
