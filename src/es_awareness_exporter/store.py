"""Holder for the single live AwarenessSnapshot."""

import threading
from datetime import datetime, timezone

from es_awareness_exporter.types import AwarenessSnapshot


class SnapshotStore:
    """
    Owns the current AwarenessSnapshot.

    The refresh loop is the only writer; scrapes are readers. Snapshots are
    frozen, so swapping the reference under the lock is the whole publish:
    a reader sees either the old snapshot or the new one, never a mix.

    Example:
        store = SnapshotStore()
        store.read().zone_aware_count  # 0.0 before the first cycle
        store.publish(AwarenessSnapshot(cluster_name="prod", zone_aware_count=12))
    """

    def __init__(self, initial: AwarenessSnapshot | None = None) -> None:
        self._lock = threading.Lock()
        self._snapshot = initial if initial is not None else AwarenessSnapshot.empty()

    def publish(self, snapshot: AwarenessSnapshot) -> None:
        """Replace the current snapshot."""
        with self._lock:
            self._snapshot = snapshot

    def read(self) -> AwarenessSnapshot:
        """Return the current snapshot."""
        with self._lock:
            return self._snapshot

    def age_seconds(self, now: datetime | None = None) -> float | None:
        """
        Seconds since the current snapshot was collected.

        Returns None while the initial zero snapshot is still in place.
        """
        collected_at = self.read().collected_at
        if collected_at is None:
            return None
        now = now or datetime.now(timezone.utc)
        return max(0.0, (now - collected_at).total_seconds())
