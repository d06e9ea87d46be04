"""ReaderCheckpointSerializer — JSON roundtrip for persisted checkpoints."""

from __future__ import annotations

import json
from typing import Any

from .exceptions import CheckpointSerializationError, InvalidStartingPoint
from .reader_checkpoint import ReaderCheckpoint
from .shard_checkpoint import ShardCheckpoint

FORMAT_VERSION = 1


class ReaderCheckpointSerializer:
    """Serialize/deserialize a ReaderCheckpoint to/from JSON bytes.

    Shards are written in shard-id order, so equal checkpoints always encode
    to the same bytes. Layout::

        {"version": 1, "stream_name": "...", "shards": [{...}, ...]}
    """

    def serialize(self, checkpoint: ReaderCheckpoint) -> bytes:
        """Encode *checkpoint* to JSON bytes."""
        data = {
            "version": FORMAT_VERSION,
            "stream_name": checkpoint.stream_name,
            "shards": [
                c.model_dump(mode="json", exclude_none=True)
                for c in checkpoint.sorted()
            ],
        }
        try:
            return json.dumps(data, sort_keys=True).encode("utf-8")
        except (TypeError, ValueError) as e:
            raise CheckpointSerializationError(str(e)) from e

    def deserialize(self, raw: bytes) -> ReaderCheckpoint:
        """Decode JSON bytes to a ReaderCheckpoint.

        Raises:
            CheckpointSerializationError: malformed or unsupported payload.
            DuplicateShardCheckpoint: the payload lists a shard twice.
        """
        try:
            data = json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise CheckpointSerializationError(str(e)) from e
        if not isinstance(data, dict):
            raise CheckpointSerializationError("Checkpoint payload must be an object")

        version = data.get("version")
        if version != FORMAT_VERSION:
            raise CheckpointSerializationError(
                f"Unsupported checkpoint format version: {version!r}"
            )
        stream_name = data.get("stream_name")
        shards = data.get("shards")
        if not isinstance(stream_name, str) or not isinstance(shards, list):
            raise CheckpointSerializationError(
                "Checkpoint payload needs 'stream_name' and 'shards'"
            )
        return ReaderCheckpoint(stream_name, [self._load_shard(s) for s in shards])

    @staticmethod
    def _load_shard(entry: Any) -> ShardCheckpoint:
        try:
            return ShardCheckpoint.model_validate(entry)
        except InvalidStartingPoint as e:
            raise CheckpointSerializationError(str(e)) from e
