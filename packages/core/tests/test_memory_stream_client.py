"""Tests for InMemoryStreamClient."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from shardpoint_core.adapters.memory.stream_client import InMemoryStreamClient
from shardpoint_core.ports.stream_client import IStreamClient, Shard, ShardIteratorType
from shardpoint_core.primitives.exceptions import StreamClientError


class TestInMemoryStreamClient:
    """Test InMemoryStreamClient listing, paging and topology changes."""

    @pytest.fixture
    def client(self) -> InMemoryStreamClient:
        client = InMemoryStreamClient(page_size=2)
        client.add_stream(
            "orders",
            [Shard(shard_id=f"shard-0{i}") for i in range(1, 6)],
        )
        return client

    def test_satisfies_protocol(self, client: InMemoryStreamClient) -> None:
        assert isinstance(client, IStreamClient)

    def test_lists_all_shards_across_pages(self, client: InMemoryStreamClient) -> None:
        shards = list(client.list_shards("orders"))

        assert [s.shard_id for s in shards] == [
            "shard-01",
            "shard-02",
            "shard-03",
            "shard-04",
            "shard-05",
        ]
        assert client.list_calls == 1
        assert client.page_requests == 3

    def test_unknown_stream_raises(self, client: InMemoryStreamClient) -> None:
        with pytest.raises(StreamClientError, match="missing"):
            list(client.list_shards("missing"))

    def test_empty_stream_lists_nothing(self) -> None:
        client = InMemoryStreamClient()
        client.add_stream("empty")
        assert list(client.list_shards("empty")) == []

    def test_fail_next_breaks_after_first_page(
        self, client: InMemoryStreamClient
    ) -> None:
        client.fail_next()
        listing = iter(client.list_shards("orders"))

        assert next(listing).shard_id == "shard-01"
        assert next(listing).shard_id == "shard-02"
        with pytest.raises(StreamClientError, match="transient"):
            next(listing)

        # only one failure was queued
        assert len(list(client.list_shards("orders"))) == 5

    def test_fail_next_with_custom_error(self, client: InMemoryStreamClient) -> None:
        client.fail_next(error=TimeoutError("canceled"))
        with pytest.raises(TimeoutError):
            list(client.list_shards("orders"))

    def test_split_shard_closes_parent_and_opens_children(
        self, client: InMemoryStreamClient
    ) -> None:
        client.split_shard("orders", "shard-01", ("shard-06", "shard-07"))

        by_id = {s.shard_id: s for s in client.shards("orders")}
        assert not by_id["shard-01"].is_open
        assert by_id["shard-06"].parent_shard_id == "shard-01"
        assert by_id["shard-07"].is_open

    def test_merge_shards_opens_single_child(self, client: InMemoryStreamClient) -> None:
        client.merge_shards("orders", "shard-01", "shard-02", "shard-08")

        by_id = {s.shard_id: s for s in client.shards("orders")}
        assert not by_id["shard-01"].is_open
        assert not by_id["shard-02"].is_open
        assert by_id["shard-08"].parent_ids == ("shard-01", "shard-02")

    def test_get_shard_cursor_is_deterministic(
        self, client: InMemoryStreamClient
    ) -> None:
        cursor = client.get_shard_cursor(
            "orders",
            "shard-01",
            ShardIteratorType.AT_SEQUENCE_NUMBER,
            sequence_number="42",
        )
        assert cursor == "orders/shard-01/AT_SEQUENCE_NUMBER/42"
        assert client.cursor_requests == [
            ("orders", "shard-01", ShardIteratorType.AT_SEQUENCE_NUMBER)
        ]

    def test_get_shard_cursor_for_timestamp(self, client: InMemoryStreamClient) -> None:
        ts = datetime(2024, 1, 1, tzinfo=timezone.utc)
        cursor = client.get_shard_cursor(
            "orders", "shard-02", ShardIteratorType.AT_TIMESTAMP, timestamp=ts
        )
        assert cursor == f"orders/shard-02/AT_TIMESTAMP/{ts.isoformat()}"

    def test_get_shard_cursor_unknown_shard(self, client: InMemoryStreamClient) -> None:
        with pytest.raises(StreamClientError):
            client.get_shard_cursor("orders", "shard-99", ShardIteratorType.LATEST)

    def test_page_size_must_be_positive(self) -> None:
        with pytest.raises(ValueError, match="page_size"):
            InMemoryStreamClient(page_size=0)
