"""
RefreshLoop for periodic shard awareness collection.

This module implements the background loop that:
- Runs a collection cycle immediately, then once per interval
- Queries the cluster for its shard list and name
- Publishes a new AwarenessSnapshot when a cycle succeeds
- Keeps the previous snapshot when a cycle fails
- Stops when stop() is called or the task is cancelled

Cycles never overlap: the wait for the next tick starts only after the
current cycle has finished, so a slow cycle delays the next one instead of
running alongside it.
"""

import asyncio
import logging
import time
from datetime import datetime, timezone

from es_awareness_exporter.awareness import compute_awareness
from es_awareness_exporter.es_client import ElasticsearchClient
from es_awareness_exporter.exceptions import ExporterError
from es_awareness_exporter.store import SnapshotStore
from es_awareness_exporter.types import AwarenessSnapshot

logger = logging.getLogger(__name__)


class RefreshLoop:
    """
    Long-running task that keeps a SnapshotStore up to date.

    Uses asyncio.Event for shutdown coordination so the wait between
    cycles can be interrupted.

    Example:
        loop = RefreshLoop(client=client, store=store, interval_seconds=15.0)
        task = asyncio.create_task(loop.run())
        ...
        loop.stop()
        await task
    """

    def __init__(
        self,
        client: ElasticsearchClient,
        store: SnapshotStore,
        interval_seconds: float = 15.0,
    ) -> None:
        """
        Initialize refresh loop.

        Args:
            client: Cluster client used for each cycle
            store: Store the loop publishes snapshots to
            interval_seconds: Seconds between the end of one cycle and the
                start of the next (default 15)
        """
        self.client = client
        self.store = store
        self.interval = interval_seconds
        self._shutdown = asyncio.Event()

        # Stats for health reporting
        self.cycles_completed = 0
        self.cycles_failed = 0
        self.last_error: str | None = None

    async def run(self, max_cycles: int | None = None) -> None:
        """
        Run collection cycles until stopped.

        Args:
            max_cycles: Stop after this many cycles. None runs until stop()
                is called or the task is cancelled.
        """
        logger.info("Refresh loop starting (interval: %ss)", self.interval)

        cycles = 0
        while not self._shutdown.is_set():
            logger.debug("Collection cycle triggered")
            await self.collect_once()
            logger.debug("Collection cycle ended")

            cycles += 1
            if max_cycles is not None and cycles >= max_cycles:
                break

            try:
                await asyncio.wait_for(self._shutdown.wait(), timeout=self.interval)
            except asyncio.TimeoutError:
                pass  # Normal timeout, next tick

        logger.info("Refresh loop stopped")

    def stop(self) -> None:
        """Ask the loop to exit after the current cycle."""
        self._shutdown.set()

    async def collect_once(self) -> bool:
        """
        Run one collection cycle and publish its snapshot.

        On any cluster error the cycle is abandoned and the previously
        published snapshot stays in place.

        Returns:
            True if a new snapshot was published, False if the cycle failed.
        """
        started = time.perf_counter()

        try:
            shards = await self.client.get_shards()
            cluster_name = await self.client.get_cluster_name()
        except ExporterError as e:
            self.cycles_failed += 1
            self.last_error = str(e)
            logger.error("Collection cycle abandoned, keeping last snapshot: %s", e)
            return False
        except Exception as e:
            # Log but don't let an unexpected failure end the loop
            self.cycles_failed += 1
            self.last_error = f"{type(e).__name__}: {e}"
            logger.exception("Collection cycle failed unexpectedly, keeping last snapshot")
            return False

        counts = compute_awareness(shards)
        if counts.copies_skipped:
            logger.warning(
                "Skipped %d shard copies without a zone in their node name",
                counts.copies_skipped,
            )

        snapshot = AwarenessSnapshot(
            cluster_name=cluster_name,
            zone_aware_count=float(counts.zone_aware),
            zone_unaware_count=float(counts.zone_unaware),
            collection_duration_seconds=time.perf_counter() - started,
            collected_at=datetime.now(timezone.utc),
        )
        self.store.publish(snapshot)

        self.cycles_completed += 1
        self.last_error = None
        logger.debug(
            "Published snapshot for %r: %d zone-aware, %d zone-unaware (%.3fs)",
            cluster_name,
            counts.zone_aware,
            counts.zone_unaware,
            snapshot.collection_duration_seconds,
        )
        return True
