"""
Tests for the Elasticsearch API client.

These tests verify the ElasticsearchClient correctly:
- Fetches and parses the shard list from _cat/shards
- Extracts the cluster name, falling back when it is missing
- Retries transport failures up to the configured count
- Reports malformed bodies as DecodeError without retrying
"""

import httpx
import pytest
from httpx import Request, Response

from es_awareness_exporter.es_client import (
    UNKNOWN_CLUSTER_NAME,
    ElasticsearchClient,
    extract_cluster_name,
)
from es_awareness_exporter.exceptions import (
    DecodeError,
    MissingFieldError,
    TransportError,
)
from es_awareness_exporter.types import ShardCopyRecord


class MockTransport(httpx.AsyncBaseTransport):
    """Mock transport for testing HTTP responses."""

    def __init__(self, responses: dict[str, dict]):
        """
        Initialize with mapping of paths to response data.

        Args:
            responses: Dict mapping URL paths to response data. Each value
                may have 'status_code', 'json' or 'content' keys, and
                'fail_times' to raise ConnectError on the first N requests.
        """
        self._responses = responses
        self.requests: list[Request] = []

    async def handle_async_request(self, request: Request) -> Response:
        """Handle an async request by returning mocked response."""
        self.requests.append(request)
        path = request.url.path
        if path not in self._responses:
            return Response(status_code=404, request=request)

        resp_data = self._responses[path]
        if resp_data.get("fail_times", 0) > 0:
            resp_data["fail_times"] -= 1
            raise httpx.ConnectError("connection refused", request=request)

        if "content" in resp_data:
            return Response(
                status_code=resp_data.get("status_code", 200),
                content=resp_data["content"],
                request=request,
            )
        return Response(
            status_code=resp_data.get("status_code", 200),
            json=resp_data.get("json", {}),
            request=request,
        )


@pytest.fixture
def shards_response():
    """Sample _cat/shards response with one replicated index."""
    return [
        {"index": "logs", "shard": "0", "prirep": "p", "node": "es1-zonea"},
        {"index": "logs", "shard": "0", "prirep": "r", "node": "es2-zoneb"},
        {"index": "logs", "shard": "1", "prirep": "p", "node": "es2-zoneb"},
        {"index": "logs", "shard": "1", "prirep": "r", "node": None},
    ]


@pytest.fixture
def cluster_info_response():
    """Sample response from the root endpoint."""
    return {
        "name": "es1-zonea",
        "cluster_name": "search-prod",
        "cluster_uuid": "Zx8kPq1fT2mJ0aTqk1pQYw",
        "version": {"number": "8.13.0"},
        "tagline": "You Know, for Search",
    }


def make_client(transport: MockTransport, retries: int = 3) -> ElasticsearchClient:
    http = httpx.AsyncClient(transport=transport, base_url="http://es:9200")
    return ElasticsearchClient(http=http, retries=retries)


class TestGetShards:
    """Tests for ElasticsearchClient.get_shards() method."""

    @pytest.mark.asyncio
    async def test_get_shards_returns_records(self, shards_response):
        """get_shards should return one ShardCopyRecord per row."""
        transport = MockTransport({"/_cat/shards": {"json": shards_response}})
        client = make_client(transport)

        shards = await client.get_shards()

        assert len(shards) == 4
        assert all(isinstance(s, ShardCopyRecord) for s in shards)
        assert shards[0].index == "logs"
        assert shards[0].shard == "0"
        assert shards[0].prirep == "p"
        assert shards[0].node == "es1-zonea"

    @pytest.mark.asyncio
    async def test_get_shards_keeps_unassigned_copies(self, shards_response):
        """Unassigned copies have node=None rather than failing validation."""
        transport = MockTransport({"/_cat/shards": {"json": shards_response}})
        client = make_client(transport)

        shards = await client.get_shards()

        assert shards[3].node is None

    @pytest.mark.asyncio
    async def test_get_shards_requests_columns_as_json(self, shards_response):
        """The shard list is requested with the h and format parameters."""
        transport = MockTransport({"/_cat/shards": {"json": shards_response}})
        client = make_client(transport)

        await client.get_shards()

        params = transport.requests[0].url.params
        assert params["h"] == "index,shard,prirep,node"
        assert params["format"] == "json"

    @pytest.mark.asyncio
    async def test_get_shards_accepts_int_shard_numbers(self):
        """Integer shard numbers are normalized to strings."""
        transport = MockTransport(
            {"/_cat/shards": {"json": [{"index": "a", "shard": 3, "prirep": "p", "node": "n-z"}]}}
        )
        client = make_client(transport)

        shards = await client.get_shards()

        assert shards[0].shard == "3"

    @pytest.mark.asyncio
    async def test_get_shards_empty_list(self):
        """A cluster without indices returns an empty list."""
        transport = MockTransport({"/_cat/shards": {"json": []}})
        client = make_client(transport)

        assert await client.get_shards() == []

    @pytest.mark.asyncio
    async def test_get_shards_malformed_json_raises_decode_error(self):
        """A body that is not JSON should raise DecodeError."""
        transport = MockTransport({"/_cat/shards": {"content": b"<html>oops</html>"}})
        client = make_client(transport)

        with pytest.raises(DecodeError):
            await client.get_shards()

        # Not retried
        assert len(transport.requests) == 1

    @pytest.mark.asyncio
    async def test_get_shards_wrong_shape_raises_decode_error(self):
        """JSON that is not a list of shard rows should raise DecodeError."""
        transport = MockTransport({"/_cat/shards": {"json": {"error": "nope"}}})
        client = make_client(transport)

        with pytest.raises(DecodeError):
            await client.get_shards()


class TestGetClusterName:
    """Tests for ElasticsearchClient.get_cluster_name() method."""

    @pytest.mark.asyncio
    async def test_get_cluster_name(self, cluster_info_response):
        """get_cluster_name should return the cluster_name field."""
        transport = MockTransport({"/": {"json": cluster_info_response}})
        client = make_client(transport)

        assert await client.get_cluster_name() == "search-prod"

    @pytest.mark.asyncio
    async def test_missing_cluster_name_falls_back(self):
        """A root response without cluster_name is not an error."""
        transport = MockTransport({"/": {"json": {"name": "es1-zonea"}}})
        client = make_client(transport)

        assert await client.get_cluster_name() == UNKNOWN_CLUSTER_NAME

    @pytest.mark.asyncio
    async def test_non_object_body_raises_decode_error(self):
        """A root response that is not a JSON object should raise DecodeError."""
        transport = MockTransport({"/": {"json": ["not", "an", "object"]}})
        client = make_client(transport)

        with pytest.raises(DecodeError):
            await client.get_cluster_name()


class TestRetries:
    """Tests for bounded retry of transport failures."""

    @pytest.mark.asyncio
    async def test_recovers_after_transient_failures(self, shards_response):
        """Requests succeed if a retry attempt succeeds."""
        transport = MockTransport(
            {"/_cat/shards": {"json": shards_response, "fail_times": 2}}
        )
        client = make_client(transport, retries=3)

        shards = await client.get_shards()

        assert len(shards) == 4
        assert len(transport.requests) == 3

    @pytest.mark.asyncio
    async def test_exhausted_retries_raise_transport_error(self):
        """After 1 + retries failed attempts, TransportError is raised."""
        transport = MockTransport({"/_cat/shards": {"json": [], "fail_times": 10}})
        client = make_client(transport, retries=3)

        with pytest.raises(TransportError) as exc_info:
            await client.get_shards()

        assert exc_info.value.attempts == 4
        assert len(transport.requests) == 4
        assert isinstance(exc_info.value.__cause__, httpx.ConnectError)

    @pytest.mark.asyncio
    async def test_zero_retries_makes_single_attempt(self):
        """retries=0 means exactly one attempt."""
        transport = MockTransport({"/": {"json": {}, "fail_times": 10}})
        client = make_client(transport, retries=0)

        with pytest.raises(TransportError):
            await client.get_cluster_name()

        assert len(transport.requests) == 1

    @pytest.mark.asyncio
    async def test_http_error_status_is_retried(self):
        """5xx responses count as transport failures."""
        transport = MockTransport({"/": {"status_code": 503, "json": {"error": "busy"}}})
        client = make_client(transport, retries=2)

        with pytest.raises(TransportError):
            await client.get_cluster_name()

        assert len(transport.requests) == 3

    @pytest.mark.asyncio
    async def test_retry_budget_is_per_call(self, shards_response, cluster_info_response):
        """Failures in one call do not use up retries of the next."""
        transport = MockTransport(
            {
                "/_cat/shards": {"json": shards_response, "fail_times": 3},
                "/": {"json": cluster_info_response, "fail_times": 3},
            }
        )
        client = make_client(transport, retries=3)

        await client.get_shards()
        assert await client.get_cluster_name() == "search-prod"
        assert client.retries == 3


class TestExtractClusterName:
    """Tests for extract_cluster_name()."""

    def test_returns_name(self):
        assert extract_cluster_name({"cluster_name": "prod"}) == "prod"

    def test_stringifies_non_string_values(self):
        assert extract_cluster_name({"cluster_name": 42}) == "42"

    def test_missing_key_raises(self):
        with pytest.raises(MissingFieldError) as exc_info:
            extract_cluster_name({"name": "node"})
        assert exc_info.value.field == "cluster_name"

    def test_non_dict_raises_decode_error(self):
        with pytest.raises(DecodeError):
            extract_cluster_name("prod")
