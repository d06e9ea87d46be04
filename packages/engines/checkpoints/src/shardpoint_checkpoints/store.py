"""In-memory checkpoint store for testing."""

from __future__ import annotations

from typing import TYPE_CHECKING

from shardpoint_core.correlation import get_correlation_id
from shardpoint_core.instrumentation import get_hook_registry

from .ports import ICheckpointStore
from .serialization import ReaderCheckpointSerializer

if TYPE_CHECKING:
    from .reader_checkpoint import ReaderCheckpoint


class InMemoryCheckpointStore(ICheckpointStore):
    """In-memory checkpoint store for testing.

    Keeps the serialized bytes, the same thing a durable store would keep,
    so every read returns a freshly decoded checkpoint.
    """

    def __init__(self, serializer: ReaderCheckpointSerializer | None = None) -> None:
        self._serializer = serializer or ReaderCheckpointSerializer()
        self._payloads: dict[str, bytes] = {}

    def get_checkpoint(self, stream_name: str) -> ReaderCheckpoint | None:
        raw = self._payloads.get(stream_name)
        if raw is None:
            return None
        return self._serializer.deserialize(raw)

    def save_checkpoint(self, checkpoint: ReaderCheckpoint) -> None:
        registry = get_hook_registry()
        registry.execute_all(
            f"checkpoint.save.{checkpoint.stream_name}",
            {
                "stream.name": checkpoint.stream_name,
                "checkpoint.size": len(checkpoint),
                "correlation_id": get_correlation_id(),
            },
            lambda: self._save_checkpoint_internal(checkpoint),
        )

    def _save_checkpoint_internal(self, checkpoint: ReaderCheckpoint) -> None:
        self._payloads[checkpoint.stream_name] = self._serializer.serialize(checkpoint)

    def raw(self, stream_name: str) -> bytes | None:
        """Stored bytes for *stream_name* (for tests)."""
        return self._payloads.get(stream_name)

    def clear(self) -> None:
        """Drop all checkpoints (for tests)."""
        self._payloads.clear()
