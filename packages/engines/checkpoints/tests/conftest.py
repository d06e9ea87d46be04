"""Shared fixtures for checkpoint engine tests."""

from __future__ import annotations

import pytest

from shardpoint_core.adapters.memory import InMemoryStreamClient
from shardpoint_core.correlation import set_correlation_id
from shardpoint_core.instrumentation import HookRegistry, set_hook_registry
from shardpoint_core.ports.stream_client import Shard

STREAM = "stream"


@pytest.fixture(autouse=True)
def _isolated_context() -> None:
    """Fresh hook registry and no correlation id for every test."""
    set_hook_registry(HookRegistry())
    set_correlation_id(None)


@pytest.fixture
def client() -> InMemoryStreamClient:
    """Stream with three open shards and one closed parent."""
    client = InMemoryStreamClient(page_size=2)
    client.add_stream(
        STREAM,
        [
            Shard(shard_id="shard-00", ending_sequence_number="99"),
            Shard(shard_id="shard-01", parent_shard_id="shard-00"),
            Shard(shard_id="shard-02", parent_shard_id="shard-00"),
            Shard(shard_id="shard-03"),
        ],
    )
    return client
