"""
Factory function for wiring an exporter from settings.

Builds the HTTP client, cluster client, snapshot store, refresh loop and
Prometheus registry in one place so the CLI and tests share the wiring.
"""

from dataclasses import dataclass

import httpx
from prometheus_client import CollectorRegistry

from es_awareness_exporter.collector import ShardAwarenessCollector
from es_awareness_exporter.config import Settings
from es_awareness_exporter.es_client import ElasticsearchClient
from es_awareness_exporter.refresh import RefreshLoop
from es_awareness_exporter.store import SnapshotStore


@dataclass
class Exporter:
    """
    Everything the HTTP surface needs.

    Attributes:
        client: Cluster client used by the refresh loop.
        store: Holder of the current snapshot.
        loop: Background refresh loop publishing into store.
        registry: Registry the /metrics endpoint renders.
    """

    client: ElasticsearchClient
    store: SnapshotStore
    loop: RefreshLoop
    registry: CollectorRegistry


def create_exporter(
    settings: Settings,
    http: httpx.AsyncClient | None = None,
) -> Exporter:
    """
    Create an exporter from settings.

    Args:
        settings: Exporter configuration.
        http: Optional pre-configured httpx client for the cluster.
            If None, a new client is created with base_url set to
            settings.es_address and the configured request timeout.

    Returns:
        Exporter with a collector already registered on a private registry.

    Example:
        exporter = create_exporter(Settings(es_address="http://es:9200"))
        await exporter.loop.run(max_cycles=1)
        exporter.store.read()
    """
    if http is None:
        http = httpx.AsyncClient(
            base_url=settings.es_address,
            timeout=settings.query_timeout,
        )

    client = ElasticsearchClient(http=http, retries=settings.query_retries)
    store = SnapshotStore()
    loop = RefreshLoop(
        client=client,
        store=store,
        interval_seconds=settings.query_interval,
    )

    registry = CollectorRegistry()
    registry.register(ShardAwarenessCollector(store))

    return Exporter(client=client, store=store, loop=loop, registry=registry)
