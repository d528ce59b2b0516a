"""
Elasticsearch response types and the published snapshot.

Response types are Pydantic models used to validate what the cluster
returns. The snapshot is a frozen dataclass: it is built once at the end
of a collection cycle and only ever replaced, never mutated.

Notes:
- _cat/shards reports the shard number as a string ("0", "1", ...)
- node is null for unassigned copies
"""

from dataclasses import dataclass
from datetime import datetime

from pydantic import BaseModel, ConfigDict, field_validator

ShardKey = str
"""Identity of a logical shard: "<index>-<shard number>"."""

ZoneLabel = str
"""Failure zone parsed from a node name."""


# =============================================================================
# Elasticsearch API Response Types
# =============================================================================
# GET /_cat/shards?h=index,shard,prirep,node&format=json
# Response structure: [{"index": "logs", "shard": "0", "prirep": "p", "node": "es1-a"}]


class ShardCopyRecord(BaseModel):
    """
    One shard copy (primary or replica) from _cat/shards.

    Attributes:
        index: Index the shard belongs to.
        shard: Shard number within the index.
        prirep: "p" for primary, "r" for replica.
        node: Node holding the copy, None while unassigned.
    """

    model_config = ConfigDict(extra="ignore")

    index: str
    shard: str
    prirep: str = ""
    node: str | None = None

    @field_validator("shard", mode="before")
    @classmethod
    def _shard_as_str(cls, value: object) -> object:
        # Some clients send the shard number as an int
        if isinstance(value, int):
            return str(value)
        return value


@dataclass(frozen=True)
class AwarenessCounts:
    """
    Result of classifying a shard list by zone placement.

    Attributes:
        zone_aware: Shards whose copies span more than one zone.
        zone_unaware: Shards whose copies all sit in one zone.
        copies_skipped: Copies ignored because no zone could be parsed.
    """

    zone_aware: int = 0
    zone_unaware: int = 0
    copies_skipped: int = 0

    @property
    def shards_total(self) -> int:
        return self.zone_aware + self.zone_unaware


@dataclass(frozen=True)
class AwarenessSnapshot:
    """
    Published result of one collection cycle.

    Attributes:
        cluster_name: Name reported by the cluster root endpoint.
        zone_aware_count: Number of zone-aware shards.
        zone_unaware_count: Number of zone-unaware shards.
        collection_duration_seconds: Wall-clock time of the whole cycle.
        collected_at: When the cycle finished, None for the initial snapshot.
    """

    cluster_name: str = ""
    zone_aware_count: float = 0.0
    zone_unaware_count: float = 0.0
    collection_duration_seconds: float = 0.0
    collected_at: datetime | None = None

    @classmethod
    def empty(cls) -> "AwarenessSnapshot":
        """Zero-valued snapshot served before the first successful cycle."""
        return cls()
