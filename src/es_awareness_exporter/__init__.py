"""
Elasticsearch shard allocation awareness exporter.

This package periodically reads the shard placement of an Elasticsearch
cluster and reports, as Prometheus metrics, how many shards have their
copies spread across more than one failure zone. It includes:

- ElasticsearchClient: read-only client for _cat/shards and the root endpoint
- compute_awareness: pure zone-awareness classification
- SnapshotStore / RefreshLoop: background collection and publication
- ShardAwarenessCollector: Prometheus collector reading the latest snapshot
- create_exporter / create_app: wiring and the FastAPI HTTP surface
"""

from es_awareness_exporter.app import create_app
from es_awareness_exporter.awareness import compute_awareness, shard_key, zone_from_node
from es_awareness_exporter.collector import ShardAwarenessCollector
from es_awareness_exporter.config import Settings
from es_awareness_exporter.es_client import UNKNOWN_CLUSTER_NAME, ElasticsearchClient
from es_awareness_exporter.exceptions import (
    DecodeError,
    ExporterError,
    MissingFieldError,
    TransportError,
)
from es_awareness_exporter.factory import Exporter, create_exporter
from es_awareness_exporter.refresh import RefreshLoop
from es_awareness_exporter.store import SnapshotStore
from es_awareness_exporter.types import (
    AwarenessCounts,
    AwarenessSnapshot,
    ShardCopyRecord,
)

__all__ = [
    # Clients
    "ElasticsearchClient",
    "UNKNOWN_CLUSTER_NAME",
    # Calculation
    "compute_awareness",
    "shard_key",
    "zone_from_node",
    # Snapshot publication
    "SnapshotStore",
    "RefreshLoop",
    "ShardAwarenessCollector",
    # Wiring
    "Settings",
    "Exporter",
    "create_exporter",
    "create_app",
    # Types
    "ShardCopyRecord",
    "AwarenessCounts",
    "AwarenessSnapshot",
    # Errors
    "ExporterError",
    "TransportError",
    "DecodeError",
    "MissingFieldError",
]
