"""Property-based tests for topology resolution and reconciliation.

- Symbolic policies resolve to exactly the open shards.
- Resolution is idempotent on an unchanged topology.
- Reconciliation partitions shards into kept/added/removed.
"""

from __future__ import annotations

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from shardpoint_checkpoints.exceptions import DuplicateShardCheckpoint
from shardpoint_checkpoints.generator import CheckpointGenerator
from shardpoint_checkpoints.reader_checkpoint import ReaderCheckpoint
from shardpoint_checkpoints.reconciliation import reconcile
from shardpoint_checkpoints.shard_checkpoint import ShardCheckpoint
from shardpoint_checkpoints.starting_point import StartingPoint
from shardpoint_core.adapters.memory import InMemoryStreamClient
from shardpoint_core.ports.stream_client import Shard, ShardIteratorType

STREAM = "stream"
STANDARD_SETTINGS = settings(max_examples=100, deadline=None)

shard_id_st = st.from_regex(r"shardId-[0-9]{12}", fullmatch=True)
shard_ids_st = st.frozensets(shard_id_st, min_size=1, max_size=30)
symbolic_st = st.sampled_from([StartingPoint.latest(), StartingPoint.trim_horizon()])
sequence_st = st.integers(min_value=0, max_value=10**40).map(str)


def _client(
    open_ids: frozenset[str], closed_ids: frozenset[str] = frozenset()
) -> InMemoryStreamClient:
    client = InMemoryStreamClient(page_size=7)
    client.add_stream(
        STREAM,
        [Shard(shard_id=s) for s in sorted(open_ids)]
        + [
            Shard(shard_id=s, ending_sequence_number="1")
            for s in sorted(closed_ids - open_ids)
        ],
    )
    return client


class TestSymbolicResolution:
    @given(
        open_ids=shard_ids_st,
        closed_ids=st.frozensets(shard_id_st, max_size=10),
        point=symbolic_st,
    )
    @STANDARD_SETTINGS
    def test_size_and_ids_match_open_shards(
        self,
        open_ids: frozenset[str],
        closed_ids: frozenset[str],
        point: StartingPoint,
    ) -> None:
        checkpoint = CheckpointGenerator(STREAM, point).generate(
            _client(open_ids, closed_ids)
        )

        assert len(checkpoint) == len(open_ids)
        assert checkpoint.shard_ids == open_ids
        assert all(c.iterator_type is point.iterator_type for c in checkpoint)

    @given(open_ids=shard_ids_st, point=symbolic_st)
    @STANDARD_SETTINGS
    def test_generate_is_idempotent(
        self, open_ids: frozenset[str], point: StartingPoint
    ) -> None:
        client = _client(open_ids)
        generator = CheckpointGenerator(STREAM, point)

        assert generator.generate(client) == generator.generate(client)


class TestReaderCheckpointConstruction:
    @given(ids=st.lists(shard_id_st, min_size=1, max_size=20), data=st.data())
    @STANDARD_SETTINGS
    def test_repeated_shard_id_is_rejected(
        self, ids: list[str], data: st.DataObject
    ) -> None:
        duplicate = data.draw(st.sampled_from(ids))
        entries = [
            ShardCheckpoint.from_starting_point(STREAM, s, StartingPoint.latest())
            for s in [*ids, duplicate]
        ]

        with pytest.raises(DuplicateShardCheckpoint) as exc_info:
            ReaderCheckpoint(STREAM, entries)
        assert exc_info.value.shard_id in ids


class TestReconciliation:
    @given(
        persisted_ids=st.frozensets(shard_id_st, max_size=20),
        current_ids=st.frozensets(shard_id_st, max_size=20),
        sequence=sequence_st,
    )
    @STANDARD_SETTINGS
    def test_partition(
        self,
        persisted_ids: frozenset[str],
        current_ids: frozenset[str],
        sequence: str,
    ) -> None:
        persisted = ReaderCheckpoint(
            STREAM,
            [
                ShardCheckpoint.from_starting_point(
                    STREAM, s, StartingPoint.latest()
                ).move_after(sequence)
                for s in persisted_ids
            ],
        )
        current = [
            ShardCheckpoint.from_starting_point(STREAM, s, StartingPoint.latest())
            for s in current_ids
        ]

        result = reconcile(persisted, current)

        assert result.kept.shard_ids == persisted_ids & current_ids
        assert result.added.shard_ids == current_ids - persisted_ids
        assert result.removed.shard_ids == persisted_ids - current_ids
        assert len(result.checkpoint) == len(result.kept) + len(result.added)
        assert result.checkpoint.shard_ids == current_ids
        for kept in result.kept:
            assert kept == persisted.get(kept.shard_id)
        for added in result.added:
            assert added.iterator_type is ShardIteratorType.TRIM_HORIZON
