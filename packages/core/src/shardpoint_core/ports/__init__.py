from .stream_client import IStreamClient, Shard, ShardIteratorType

__all__ = [
    "IStreamClient",
    "Shard",
    "ShardIteratorType",
]
