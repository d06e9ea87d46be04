"""Tests for StartingPoint."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from shardpoint_checkpoints.exceptions import InvalidStartingPoint
from shardpoint_checkpoints.starting_point import InitialPosition, StartingPoint
from shardpoint_core.ports.stream_client import ShardIteratorType


def test_symbolic_factories() -> None:
    assert StartingPoint.latest().position is InitialPosition.LATEST
    assert StartingPoint.trim_horizon().position is InitialPosition.TRIM_HORIZON
    assert StartingPoint.latest().is_symbolic
    assert StartingPoint.latest().iterator_type is ShardIteratorType.LATEST


def test_at_timestamp_normalises_to_utc() -> None:
    cet = timezone(timedelta(hours=1))
    point = StartingPoint.at_timestamp(datetime(2024, 5, 1, 13, 0, tzinfo=cet))

    assert point.timestamp == datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)
    assert point.timestamp is not None
    assert point.timestamp.tzinfo == timezone.utc
    assert not point.is_symbolic


def test_at_timestamp_requires_aware_timestamp() -> None:
    with pytest.raises(InvalidStartingPoint, match="timezone-aware"):
        StartingPoint.at_timestamp(datetime(2024, 5, 1))


def test_at_timestamp_requires_timestamp() -> None:
    with pytest.raises(InvalidStartingPoint, match="requires a timestamp"):
        StartingPoint(position=InitialPosition.AT_TIMESTAMP)


def test_at_timestamp_rejects_sequence_fields() -> None:
    with pytest.raises(InvalidStartingPoint):
        StartingPoint(
            position=InitialPosition.AT_TIMESTAMP,
            timestamp=datetime(2024, 5, 1, tzinfo=timezone.utc),
            sequence_number="1",
        )


@pytest.mark.parametrize(
    "kwargs",
    [
        {"timestamp": datetime(2024, 5, 1, tzinfo=timezone.utc)},
        {"shard_id": "shard-01"},
        {"sequence_number": "42"},
    ],
)
def test_symbolic_variants_take_no_payload(kwargs: dict[str, object]) -> None:
    with pytest.raises(InvalidStartingPoint, match="does not take"):
        StartingPoint(position=InitialPosition.LATEST, **kwargs)


def test_at_sequence_number() -> None:
    point = StartingPoint.at_sequence_number(
        "shard-01", "49590338271490256608559692538361571095921575989136588898"
    )

    assert point.shard_id == "shard-01"
    assert point.iterator_type is ShardIteratorType.AT_SEQUENCE_NUMBER
    assert str(point).startswith("AT_SEQUENCE_NUMBER(shard-01, ")


def test_at_sequence_number_requires_shard_and_sequence() -> None:
    with pytest.raises(InvalidStartingPoint, match="shard id and a sequence number"):
        StartingPoint(position=InitialPosition.AT_SEQUENCE_NUMBER, shard_id="shard-01")
    with pytest.raises(InvalidStartingPoint, match="shard id and a sequence number"):
        StartingPoint(position=InitialPosition.AT_SEQUENCE_NUMBER, sequence_number="1")


def test_sequence_number_must_be_decimal() -> None:
    with pytest.raises(InvalidStartingPoint, match="decimal"):
        StartingPoint.at_sequence_number("shard-01", "12ab")


@pytest.mark.parametrize("value", ["\u00b2", "\u2460", "\u0661\u0662", "", "-5"])
def test_sequence_number_must_use_ascii_digits(value: str) -> None:
    with pytest.raises(InvalidStartingPoint, match="decimal"):
        StartingPoint.at_sequence_number("shard-01", value)


def test_unknown_position_is_an_invalid_starting_point() -> None:
    with pytest.raises(InvalidStartingPoint, match="position"):
        StartingPoint(position="NEWEST")  # type: ignore[arg-type]


def test_wrongly_typed_sequence_number_is_an_invalid_starting_point() -> None:
    with pytest.raises(InvalidStartingPoint, match="sequence_number") as exc_info:
        StartingPoint.at_sequence_number("shard-01", 42)  # type: ignore[arg-type]

    assert exc_info.value.__cause__ is not None


def test_equal_starting_points_are_interchangeable() -> None:
    ts = datetime(2024, 5, 1, tzinfo=timezone.utc)
    assert StartingPoint.at_timestamp(ts) == StartingPoint.at_timestamp(ts)
    assert len({StartingPoint.latest(), StartingPoint.latest()}) == 1
    assert StartingPoint.latest() != StartingPoint.trim_horizon()


def test_str() -> None:
    ts = datetime(2024, 5, 1, tzinfo=timezone.utc)
    assert str(StartingPoint.latest()) == "LATEST"
    assert str(StartingPoint.at_timestamp(ts)) == f"AT_TIMESTAMP({ts.isoformat()})"
