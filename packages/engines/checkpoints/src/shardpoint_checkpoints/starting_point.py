"""StartingPoint — where a consumer begins reading a stream."""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError, field_validator, model_validator

from shardpoint_core.domain.value_object import ValueObject
from shardpoint_core.ports.stream_client import ShardIteratorType

from .exceptions import InvalidStartingPoint

if TYPE_CHECKING:
    from pydantic import ModelWrapValidatorHandler


class InitialPosition(str, Enum):
    """The variants of a starting point."""

    LATEST = "LATEST"
    TRIM_HORIZON = "TRIM_HORIZON"
    AT_TIMESTAMP = "AT_TIMESTAMP"
    AT_SEQUENCE_NUMBER = "AT_SEQUENCE_NUMBER"

    @property
    def iterator_type(self) -> ShardIteratorType:
        return ShardIteratorType(self.value)


def validate_sequence_number(value: str | None) -> str | None:
    """Sequence numbers are arbitrary-precision decimal strings."""
    if value is not None and not (value.isascii() and value.isdigit()):
        raise InvalidStartingPoint(
            f"Sequence number must be a decimal string, got {value!r}"
        )
    return value


def validate_timestamp(value: datetime | None) -> datetime | None:
    """Require timezone-aware timestamps and normalise them to UTC."""
    if value is None:
        return None
    if value.tzinfo is None or value.utcoffset() is None:
        raise InvalidStartingPoint(f"Timestamp must be timezone-aware, got {value!r}")
    return value.astimezone(timezone.utc)


def describe_validation_error(exc: ValidationError) -> str:
    """Flatten a pydantic error into one message, one entry per offending field."""
    return "; ".join(
        f"{'.'.join(str(p) for p in err['loc']) or 'value'}: {err['msg']}"
        for err in exc.errors()
    )


class StartingPoint(ValueObject):
    """Consumer intent for where reading begins.

    Exactly one variant is active. ``AT_TIMESTAMP`` carries a timestamp,
    ``AT_SEQUENCE_NUMBER`` carries a shard id and a sequence number, and the
    symbolic variants carry nothing. Build through the factories::

        StartingPoint.latest()
        StartingPoint.at_timestamp(datetime(2024, 1, 1, tzinfo=timezone.utc))
    """

    position: InitialPosition
    timestamp: datetime | None = None
    shard_id: str | None = None
    sequence_number: str | None = None

    @field_validator("timestamp")
    @classmethod
    def _timestamp_is_aware(cls, value: datetime | None) -> datetime | None:
        return validate_timestamp(value)

    @field_validator("sequence_number")
    @classmethod
    def _sequence_is_decimal(cls, value: str | None) -> str | None:
        return validate_sequence_number(value)

    @model_validator(mode="after")
    def _check_variant(self) -> StartingPoint:
        position = self.position
        has_ts = self.timestamp is not None
        has_seq = self.shard_id is not None or self.sequence_number is not None

        if position is InitialPosition.AT_TIMESTAMP:
            if not has_ts:
                raise InvalidStartingPoint("AT_TIMESTAMP requires a timestamp")
            if has_seq:
                raise InvalidStartingPoint(
                    "AT_TIMESTAMP does not take a shard id or sequence number"
                )
        elif position is InitialPosition.AT_SEQUENCE_NUMBER:
            if not self.shard_id or self.sequence_number is None:
                raise InvalidStartingPoint(
                    "AT_SEQUENCE_NUMBER requires a shard id and a sequence number"
                )
            if has_ts:
                raise InvalidStartingPoint("AT_SEQUENCE_NUMBER does not take a timestamp")
        elif has_ts or has_seq:
            raise InvalidStartingPoint(
                f"{position.value} does not take a timestamp, shard id "
                "or sequence number"
            )
        return self

    @model_validator(mode="wrap")
    @classmethod
    def _as_domain_error(
        cls, data: Any, handler: ModelWrapValidatorHandler[StartingPoint]
    ) -> StartingPoint:
        try:
            return handler(data)
        except ValidationError as exc:
            raise InvalidStartingPoint(describe_validation_error(exc)) from exc

    @classmethod
    def latest(cls) -> StartingPoint:
        return cls(position=InitialPosition.LATEST)

    @classmethod
    def trim_horizon(cls) -> StartingPoint:
        return cls(position=InitialPosition.TRIM_HORIZON)

    @classmethod
    def at_timestamp(cls, timestamp: datetime) -> StartingPoint:
        return cls(position=InitialPosition.AT_TIMESTAMP, timestamp=timestamp)

    @classmethod
    def at_sequence_number(cls, shard_id: str, sequence_number: str) -> StartingPoint:
        return cls(
            position=InitialPosition.AT_SEQUENCE_NUMBER,
            shard_id=shard_id,
            sequence_number=sequence_number,
        )

    @property
    def iterator_type(self) -> ShardIteratorType:
        return self.position.iterator_type

    @property
    def is_symbolic(self) -> bool:
        return self.position in (InitialPosition.LATEST, InitialPosition.TRIM_HORIZON)

    def __str__(self) -> str:
        if self.position is InitialPosition.AT_TIMESTAMP:
            assert self.timestamp is not None
            return f"AT_TIMESTAMP({self.timestamp.isoformat()})"
        if self.position is InitialPosition.AT_SEQUENCE_NUMBER:
            return f"AT_SEQUENCE_NUMBER({self.shard_id}, {self.sequence_number})"
        return self.position.value
