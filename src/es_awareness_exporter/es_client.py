"""
Elasticsearch API client for shard placement observation.

This module provides the ElasticsearchClient class for querying the
cluster's administrative HTTP API. Only read-only GET requests are issued.

ElasticsearchClient receives an injected httpx.AsyncClient with base_url set
to the cluster address and its timeout already configured.

Retry behavior:
- Each GET is attempted 1 + retries times, without delay between attempts
- The attempt counter is local to the call, never shared between calls
- Malformed bodies are not retried

Elasticsearch API Documentation:
- https://www.elastic.co/guide/en/elasticsearch/reference/current/cat-shards.html
"""

import logging
from dataclasses import dataclass
from typing import Any

import httpx
from pydantic import TypeAdapter, ValidationError

from es_awareness_exporter.exceptions import (
    DecodeError,
    MissingFieldError,
    TransportError,
)
from es_awareness_exporter.types import ShardCopyRecord

logger = logging.getLogger(__name__)

SHARDS_PATH = "/_cat/shards"
SHARDS_PARAMS = {"h": "index,shard,prirep,node", "format": "json"}
CLUSTER_INFO_PATH = "/"

UNKNOWN_CLUSTER_NAME = ""
"""Cluster name used when the root endpoint does not report one."""

_shard_list_adapter = TypeAdapter(list[ShardCopyRecord])


@dataclass
class ElasticsearchClient:
    """
    Elasticsearch API client with injected httpx client.

    Attributes:
        http: Pre-configured httpx.AsyncClient with base_url set to the cluster.
        retries: Extra attempts after the first failed one (default 3).

    Example:
        async with httpx.AsyncClient(base_url="http://es:9200", timeout=15.0) as http:
            client = ElasticsearchClient(http=http, retries=3)
            shards = await client.get_shards()
            name = await client.get_cluster_name()
    """

    http: httpx.AsyncClient
    retries: int = 3

    async def get_shards(self) -> list[ShardCopyRecord]:
        """
        Get every shard copy in the cluster.

        Calls GET /_cat/shards?h=index,shard,prirep,node&format=json.

        Returns:
            List of ShardCopyRecord, one per primary or replica copy.

        Raises:
            TransportError: When all attempts fail.
            DecodeError: On a body that is not a JSON list of shard rows.
        """
        url, payload = await self._get_json(SHARDS_PATH, params=SHARDS_PARAMS)

        try:
            shards = _shard_list_adapter.validate_python(payload)
        except ValidationError as e:
            raise DecodeError(url, str(e)) from e

        logger.debug("Shard list retrieved. Shards total: %d", len(shards))
        return shards

    async def get_cluster_name(self) -> str:
        """
        Get the cluster name from the root endpoint.

        A response without cluster_name is not an error: the name falls
        back to UNKNOWN_CLUSTER_NAME so the rest of the cycle can proceed.

        Returns:
            The cluster name, or UNKNOWN_CLUSTER_NAME when absent.

        Raises:
            TransportError: When all attempts fail.
            DecodeError: On a body that is not a JSON object.
        """
        url, payload = await self._get_json(CLUSTER_INFO_PATH)

        try:
            name = extract_cluster_name(payload, url)
        except MissingFieldError as e:
            logger.warning("%s, using %r", e, UNKNOWN_CLUSTER_NAME)
            return UNKNOWN_CLUSTER_NAME

        logger.debug("Cluster name retrieved: %s", name)
        return name

    async def _get_json(
        self, path: str, params: dict[str, str] | None = None
    ) -> tuple[str, Any]:
        """
        GET a path and decode the body as JSON, retrying transport failures.

        Args:
            path: Path relative to the client's base_url.
            params: Optional query parameters.

        Returns:
            Tuple of (requested URL, decoded JSON body).
        """
        attempts = self.retries + 1
        url = path
        last_error: httpx.HTTPError | None = None

        for attempt in range(1, attempts + 1):
            try:
                response = await self.http.get(path, params=params)
                response.raise_for_status()
            except httpx.HTTPError as e:
                last_error = e
                url = str(e.request.url) if _has_request(e) else path
                logger.error(
                    "Error with request to %s: %s. Retries left: %d",
                    url,
                    e,
                    attempts - attempt,
                )
                continue

            url = str(response.request.url)
            try:
                return url, response.json()
            except ValueError as e:
                raise DecodeError(url, str(e)) from e

        raise TransportError(url, attempts, str(last_error)) from last_error


def extract_cluster_name(payload: Any, url: str = CLUSTER_INFO_PATH) -> str:
    """
    Pull cluster_name out of a decoded root endpoint response.

    Args:
        payload: Decoded JSON body.
        url: URL the body came from, used in error messages.

    Returns:
        The cluster name as a string. Non-string values are stringified.

    Raises:
        DecodeError: If the payload is not a JSON object.
        MissingFieldError: If the object has no cluster_name key.
    """
    if not isinstance(payload, dict):
        raise DecodeError(url, f"expected a JSON object, got {type(payload).__name__}")
    if "cluster_name" not in payload:
        raise MissingFieldError("cluster_name", url)
    return str(payload["cluster_name"])


def _has_request(error: httpx.HTTPError) -> bool:
    # httpx raises RuntimeError from .request when none was attached
    try:
        error.request
    except RuntimeError:
        return False
    return True
