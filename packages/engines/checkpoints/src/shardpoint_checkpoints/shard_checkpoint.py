"""ShardCheckpoint — one shard's resumable read position."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError, field_validator, model_validator

from shardpoint_core.domain.value_object import ValueObject
from shardpoint_core.ports.stream_client import ShardIteratorType

from .exceptions import InvalidShardPosition, InvalidStartingPoint
from .starting_point import (
    InitialPosition,
    StartingPoint,
    describe_validation_error,
    validate_sequence_number,
    validate_timestamp,
)

if TYPE_CHECKING:
    from pydantic import ModelWrapValidatorHandler

    from shardpoint_core.ports.stream_client import IStreamClient

_SEQUENCE_TYPES = frozenset(
    {ShardIteratorType.AT_SEQUENCE_NUMBER, ShardIteratorType.AFTER_SEQUENCE_NUMBER}
)
_SYMBOLIC_TYPES = frozenset({ShardIteratorType.LATEST, ShardIteratorType.TRIM_HORIZON})


class ShardCheckpoint(ValueObject):
    """Resumable read position of one shard.

    The position is the iterator type plus whichever of sequence number,
    sub-sequence number and timestamp that type needs. ``AT`` and ``AFTER``
    sequence positions differ in whether the boundary record is delivered
    again. Instances are never changed; moving forward yields a new value.
    """

    stream_name: str
    shard_id: str
    iterator_type: ShardIteratorType
    sequence_number: str | None = None
    sub_sequence_number: int | None = None
    timestamp: datetime | None = None

    @field_validator("sequence_number")
    @classmethod
    def _sequence_is_decimal(cls, value: str | None) -> str | None:
        try:
            return validate_sequence_number(value)
        except InvalidStartingPoint as exc:
            raise InvalidShardPosition(str(exc)) from exc

    @field_validator("timestamp")
    @classmethod
    def _timestamp_is_aware(cls, value: datetime | None) -> datetime | None:
        try:
            return validate_timestamp(value)
        except InvalidStartingPoint as exc:
            raise InvalidShardPosition(str(exc)) from exc

    @model_validator(mode="after")
    def _check_position(self) -> ShardCheckpoint:
        kind = self.iterator_type
        has_seq = self.sequence_number is not None
        has_ts = self.timestamp is not None

        if kind in _SEQUENCE_TYPES and not has_seq:
            raise InvalidShardPosition(f"{kind.value} requires a sequence number")
        if kind not in _SEQUENCE_TYPES and has_seq:
            raise InvalidShardPosition(f"{kind.value} does not take a sequence number")
        if kind is ShardIteratorType.AT_TIMESTAMP and not has_ts:
            raise InvalidShardPosition("AT_TIMESTAMP requires a timestamp")
        if kind is not ShardIteratorType.AT_TIMESTAMP and has_ts:
            raise InvalidShardPosition(f"{kind.value} does not take a timestamp")
        if self.sub_sequence_number is not None:
            if not has_seq:
                raise InvalidShardPosition(
                    "A sub-sequence number needs a sequence number"
                )
            if self.sub_sequence_number < 0:
                raise InvalidShardPosition("Sub-sequence numbers are non-negative")
        return self

    @model_validator(mode="wrap")
    @classmethod
    def _as_domain_error(
        cls, data: Any, handler: ModelWrapValidatorHandler[ShardCheckpoint]
    ) -> ShardCheckpoint:
        try:
            return handler(data)
        except ValidationError as exc:
            raise InvalidShardPosition(describe_validation_error(exc)) from exc

    @classmethod
    def from_starting_point(
        cls,
        stream_name: str,
        shard_id: str,
        starting_point: StartingPoint,
    ) -> ShardCheckpoint:
        """Position *shard_id* where *starting_point* says reading begins."""
        return cls(
            stream_name=stream_name,
            shard_id=shard_id,
            iterator_type=starting_point.iterator_type,
            sequence_number=(
                starting_point.sequence_number
                if starting_point.position is InitialPosition.AT_SEQUENCE_NUMBER
                else None
            ),
            timestamp=starting_point.timestamp,
        )

    @property
    def is_symbolic(self) -> bool:
        """True for ``LATEST``/``TRIM_HORIZON`` markers, false for concrete offsets."""
        return self.iterator_type in _SYMBOLIC_TYPES

    def move_after(
        self,
        sequence_number: str,
        sub_sequence_number: int | None = None,
    ) -> ShardCheckpoint:
        """Return the checkpoint that follows a consumed record."""
        return self.replace(
            iterator_type=ShardIteratorType.AFTER_SEQUENCE_NUMBER,
            sequence_number=sequence_number,
            sub_sequence_number=sub_sequence_number,
            timestamp=None,
        )

    def is_before_or_at(
        self,
        sequence_number: str,
        sub_sequence_number: int = 0,
    ) -> bool:
        """Whether a record at this position is still to be delivered.

        Symbolic and timestamp positions are resolved by the service, so every
        record they hand out counts as pending. Sequence numbers compare
        numerically.
        """
        if self.sequence_number is None:
            return True
        record = (int(sequence_number), sub_sequence_number)
        own = (int(self.sequence_number), self.sub_sequence_number or 0)
        if record == own:
            return self.iterator_type is ShardIteratorType.AT_SEQUENCE_NUMBER
        return own < record

    def get_shard_cursor(self, client: IStreamClient) -> str:
        """Ask *client* to resolve this position to a shard cursor.

        An ``AFTER`` position inside an aggregated record restarts at that
        record; the remaining sub-records are filtered with
        :meth:`is_before_or_at`.
        """
        iterator_type = self.iterator_type
        if (
            iterator_type is ShardIteratorType.AFTER_SEQUENCE_NUMBER
            and self.sub_sequence_number is not None
        ):
            iterator_type = ShardIteratorType.AT_SEQUENCE_NUMBER
        return client.get_shard_cursor(
            self.stream_name,
            self.shard_id,
            iterator_type,
            sequence_number=self.sequence_number,
            timestamp=self.timestamp,
        )

    def __str__(self) -> str:
        position = self.iterator_type.value
        if self.sequence_number is not None:
            position += f"({self.sequence_number}"
            if self.sub_sequence_number is not None:
                position += f".{self.sub_sequence_number}"
            position += ")"
        elif self.timestamp is not None:
            position += f"({self.timestamp.isoformat()})"
        return f"{self.stream_name}/{self.shard_id}@{position}"
