"""ShardTopologyFinder — resolve a starting point against a stream's shards."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from shardpoint_core.instrumentation import get_hook_registry, notify_hooks

from .exceptions import TopologyUnavailable
from .shard_checkpoint import ShardCheckpoint
from .starting_point import InitialPosition

if TYPE_CHECKING:
    from shardpoint_core.ports.stream_client import IStreamClient, Shard

    from .starting_point import StartingPoint

logger = logging.getLogger("shardpoint.checkpoints")


class ShardTopologyFinder:
    """Turns a :class:`StartingPoint` into the shard checkpoints to read.

    ``LATEST``, ``TRIM_HORIZON`` and ``AT_TIMESTAMP`` all resolve to the open
    shards of the stream. Closed parents are never targeted: their records
    were inherited by the open descendants, and each open shard's trim
    horizon already covers its retained history. Timestamps are carried on
    the checkpoints and resolved inside each shard by the stream service.

    ``AT_SEQUENCE_NUMBER`` names one shard explicitly and is passed through
    without asking the client.
    """

    def resolve(
        self,
        client: IStreamClient,
        stream_name: str,
        starting_point: StartingPoint,
    ) -> frozenset[ShardCheckpoint]:
        """Return the checkpoints for *starting_point* on *stream_name*.

        Raises:
            TopologyUnavailable: the client failed while listing shards.
        """
        if starting_point.position is InitialPosition.AT_SEQUENCE_NUMBER:
            assert starting_point.shard_id is not None
            return frozenset(
                {
                    ShardCheckpoint.from_starting_point(
                        stream_name, starting_point.shard_id, starting_point
                    )
                }
            )

        open_shard_ids = self.find_open_shard_ids(client, stream_name)
        checkpoints = frozenset(
            ShardCheckpoint.from_starting_point(stream_name, shard_id, starting_point)
            for shard_id in open_shard_ids
        )
        logger.debug(
            "Resolved %s on stream %s to %d shard(s)",
            starting_point,
            stream_name,
            len(checkpoints),
        )
        notify_hooks(
            get_hook_registry(),
            f"topology.resolve.{stream_name}",
            {
                "stream.name": stream_name,
                "starting_point": str(starting_point),
                "shard.count": len(checkpoints),
            },
        )
        return checkpoints

    def find_open_shard_ids(
        self, client: IStreamClient, stream_name: str
    ) -> frozenset[str]:
        """List the stream once and return the ids of its open shards.

        The whole listing is read before anything is returned, so a failure
        on a later page never leaves a partial result behind. A shard reported
        more than once counts as open if any report says so.
        """
        shards = self._list_all(client, stream_name)
        open_ids: set[str] = set()
        closed_ids: set[str] = set()
        parents: dict[str, tuple[str, ...]] = {}
        for shard in shards:
            if shard.is_open:
                open_ids.add(shard.shard_id)
                if shard.parent_ids:
                    parents[shard.shard_id] = shard.parent_ids
            else:
                closed_ids.add(shard.shard_id)
        closed_ids -= open_ids
        if closed_ids:
            logger.debug(
                "Skipping %d closed shard(s) of stream %s: %s",
                len(closed_ids),
                stream_name,
                ", ".join(sorted(closed_ids)),
            )
            for shard_id, parent_ids in sorted(parents.items()):
                inherited = [p for p in parent_ids if p in closed_ids]
                if inherited:
                    logger.debug(
                        "Shard %s of stream %s continues %s",
                        shard_id,
                        stream_name,
                        ", ".join(inherited),
                    )
        return frozenset(open_ids)

    def _list_all(self, client: IStreamClient, stream_name: str) -> list[Shard]:
        try:
            return list(client.list_shards(stream_name))
        except TopologyUnavailable:
            raise
        except Exception as e:
            raise TopologyUnavailable(stream_name, str(e)) from e
