from .stream_client import InMemoryStreamClient

__all__ = [
    "InMemoryStreamClient",
]
