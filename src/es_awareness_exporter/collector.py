"""
Prometheus collector for shard awareness metrics.

ShardAwarenessCollector renders whatever snapshot the store currently
holds. It never talks to the cluster: collection happens in the refresh
loop, and a scrape only reads the result.

Exposed metrics:
- es_awareness_zone_aware_shards_count{cluster}
- es_awareness_zone_not_aware_shards_count{cluster}
- es_awareness_metric_collection_time
- es_awareness_metric_scrape_time
"""

import time
from collections.abc import Iterator

from prometheus_client.core import GaugeMetricFamily
from prometheus_client.registry import Collector

from es_awareness_exporter.store import SnapshotStore

ZONE_AWARE = "es_awareness_zone_aware_shards_count"
ZONE_NOT_AWARE = "es_awareness_zone_not_aware_shards_count"
COLLECTION_TIME = "es_awareness_metric_collection_time"
SCRAPE_TIME = "es_awareness_metric_scrape_time"


class ShardAwarenessCollector(Collector):
    """
    Custom collector reading the latest AwarenessSnapshot.

    Example:
        registry = CollectorRegistry()
        registry.register(ShardAwarenessCollector(store))
        generate_latest(registry)
    """

    def __init__(self, store: SnapshotStore) -> None:
        self.store = store

    def describe(self) -> Iterator[GaugeMetricFamily]:
        yield _zone_aware_family()
        yield _zone_not_aware_family()
        yield _collection_time_family()
        yield _scrape_time_family()

    def collect(self) -> Iterator[GaugeMetricFamily]:
        started = time.perf_counter()
        snapshot = self.store.read()

        zone_aware = _zone_aware_family()
        zone_aware.add_metric([snapshot.cluster_name], snapshot.zone_aware_count)

        zone_not_aware = _zone_not_aware_family()
        zone_not_aware.add_metric([snapshot.cluster_name], snapshot.zone_unaware_count)

        collection_time = _collection_time_family()
        collection_time.add_metric([], snapshot.collection_duration_seconds)

        scrape_time = _scrape_time_family()
        scrape_time.add_metric([], time.perf_counter() - started)

        yield zone_aware
        yield zone_not_aware
        yield collection_time
        yield scrape_time


def _zone_aware_family() -> GaugeMetricFamily:
    return GaugeMetricFamily(
        ZONE_AWARE,
        "Number of shards with primary and replica located in different zones",
        labels=["cluster"],
    )


def _zone_not_aware_family() -> GaugeMetricFamily:
    return GaugeMetricFamily(
        ZONE_NOT_AWARE,
        "Number of shards with primary and replica located in the same zone",
        labels=["cluster"],
    )


def _collection_time_family() -> GaugeMetricFamily:
    return GaugeMetricFamily(
        COLLECTION_TIME,
        "Time it took for a collection thread to collect metrics",
    )


def _scrape_time_family() -> GaugeMetricFamily:
    return GaugeMetricFamily(
        SCRAPE_TIME,
        "Time it took for prometheus to scrape metrics",
    )
