"""
Zone awareness classification for shard placement.

A shard is zone-aware when its copies (primary and replicas) sit on nodes
in at least two distinct failure zones. The zone is encoded in the node
name: "es1-zonea" lives in zone "zonea".

Everything here is pure: no I/O, deterministic for a given input.
"""

from collections.abc import Iterable

from es_awareness_exporter.types import (
    AwarenessCounts,
    ShardCopyRecord,
    ShardKey,
    ZoneLabel,
)

ZONE_DELIMITER = "-"


def shard_key(index: str, shard: str) -> ShardKey:
    """Identity of a logical shard across all of its copies."""
    return f"{index}-{shard}"


def zone_from_node(node: str | None, delimiter: str = ZONE_DELIMITER) -> ZoneLabel | None:
    """
    Parse the zone label out of a node name.

    The zone is the second delimiter-separated token.

    Args:
        node: Node name from _cat/shards, None for unassigned copies.
        delimiter: Token separator in node names.

    Returns:
        The zone label, or None when the node name carries no zone.

    Example:
        zone_from_node("es1-zonea")  # "zonea"
        zone_from_node("es1")        # None
    """
    if not node:
        return None
    parts = node.split(delimiter)
    if len(parts) < 2 or not parts[1]:
        return None
    return parts[1]


def compute_awareness(records: Iterable[ShardCopyRecord]) -> AwarenessCounts:
    """
    Classify every shard in a shard list as zone-aware or zone-unaware.

    Copies are grouped by shard key. A group seen in more than one zone is
    zone-aware, otherwise zone-unaware. Copies with no parseable zone are
    skipped; a shard with no parseable copies is counted in neither bucket.

    Args:
        records: Shard copies as returned by _cat/shards.

    Returns:
        AwarenessCounts with aware/unaware totals and the number of
        skipped copies.
    """
    zones_by_shard: dict[ShardKey, set[ZoneLabel]] = {}
    skipped = 0

    for record in records:
        zone = zone_from_node(record.node)
        if zone is None:
            skipped += 1
            continue
        zones_by_shard.setdefault(shard_key(record.index, record.shard), set()).add(zone)

    aware = sum(1 for zones in zones_by_shard.values() if len(zones) > 1)

    return AwarenessCounts(
        zone_aware=aware,
        zone_unaware=len(zones_by_shard) - aware,
        copies_skipped=skipped,
    )
