"""Integration tests for the REST gateway and storage client over a mock transport"""

import json

import httpx
import pytest

from loanlight_admin.domain.exceptions import GatewayError, GatewayTimeoutError, NotFoundError
from loanlight_admin.domain.models import ClientStatus
from loanlight_admin.infrastructure.clients.gateway import table
from loanlight_admin.infrastructure.clients.rest_gateway import RestGateway
from loanlight_admin.infrastructure.clients.storage import StorageClient, unique_file_name
from loanlight_admin.infrastructure.repositories import ClientRepository

BASE_URL = "https://backend.test"


def gateway_for(handler) -> RestGateway:
    return RestGateway(base_url=BASE_URL, api_key="anon-key", timeout=1.0, transport=httpx.MockTransport(handler))


async def test_select_sends_postgrest_query():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["request"] = request
        return httpx.Response(200, json=[{"id": "c-1", "first_name": "Jane", "last_name": "Doe"}])

    rows = await gateway_for(handler).select(
        table("clients", "id", "first_name", "last_name").eq("status", ClientStatus.ACTIVE).limit(5)
    )

    request = seen["request"]
    assert rows == [{"id": "c-1", "first_name": "Jane", "last_name": "Doe"}]
    assert request.method == "GET"
    assert request.url.path == "/rest/v1/clients"
    assert request.url.params["select"] == "id,first_name,last_name"
    assert request.url.params["status"] == "eq.ACTIVE"
    assert request.url.params["limit"] == "5"
    assert request.headers["apikey"] == "anon-key"
    assert request.headers["authorization"] == "Bearer anon-key"


async def test_count_reads_content_range():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.method == "HEAD"
        assert request.headers["prefer"] == "count=exact"
        assert "select" not in request.url.params
        return httpx.Response(200, headers={"Content-Range": "0-9/42"})

    assert await gateway_for(handler).count(table("loans").eq("status", "PENDING")) == 42


async def test_insert_returns_representation():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.method == "POST"
        assert request.headers["prefer"] == "return=representation"
        body = json.loads(request.content)
        assert body["status"] == "ACTIVE"
        return httpx.Response(201, json=[{"id": "c-9", **body}])

    client = await ClientRepository(gateway_for(handler)).create(
        {"first_name": "Jane", "last_name": "Doe", "status": ClientStatus.ACTIVE}
    )

    assert client.id == "c-9"
    assert client.status is ClientStatus.ACTIVE


async def test_update_and_delete_target_row_by_id():
    requests = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        if request.method == "PATCH":
            return httpx.Response(200, json=[{"id": "c-1", "first_name": "Janet", "last_name": "Doe"}])
        return httpx.Response(204)

    repository = ClientRepository(gateway_for(handler))
    updated = await repository.update("c-1", {"first_name": "Janet"})
    await repository.delete("c-1")

    assert updated.first_name == "Janet"
    assert [r.method for r in requests] == ["PATCH", "DELETE"]
    assert all(r.url.params["id"] == "eq.c-1" for r in requests)
    assert "updated_at" in json.loads(requests[0].content)


async def test_update_of_missing_row_raises_not_found():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.params["id"] == "eq.does-not-exist"
        return httpx.Response(200, json=[])

    with pytest.raises(NotFoundError, match="No clients row with id does-not-exist"):
        await gateway_for(handler).update("clients", "does-not-exist", {"first_name": "X"})


async def test_insert_without_representation_is_not_a_missing_row():
    gateway = gateway_for(lambda request: httpx.Response(201, json=[]))

    with pytest.raises(GatewayError) as excinfo:
        await gateway.insert("clients", {"first_name": "X"})

    assert not isinstance(excinfo.value, NotFoundError)


async def test_http_error_maps_to_gateway_error():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(400, json={"message": "column loans.bogus does not exist"})

    with pytest.raises(GatewayError, match="column loans.bogus does not exist"):
        await gateway_for(handler).select(table("loans"))


async def test_timeout_maps_to_gateway_timeout():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    with pytest.raises(GatewayTimeoutError):
        await gateway_for(handler).select(table("loans"))


async def test_network_failure_maps_to_gateway_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(GatewayError, match="unreachable"):
        await gateway_for(handler).count(table("loans"))


def test_unique_file_name_keeps_extension():
    name = unique_file_name("passport photo.JPG")
    token, _, rest = name.partition("_")

    assert len(token) == 13
    assert rest.endswith(".JPG")
    assert unique_file_name("noext").endswith(".bin")
    assert unique_file_name("a.png") != unique_file_name("a.png")


async def test_upload_file_returns_public_url():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["request"] = request
        return httpx.Response(200, json={"Key": "avatars/x"})

    storage = StorageClient(base_url=BASE_URL, api_key="anon-key", transport=httpx.MockTransport(handler))
    url = await storage.upload_file("me.png", b"\x89PNG", "avatars", folder="clients", content_type="image/png")

    request = seen["request"]
    assert request.url.path.startswith("/storage/v1/object/avatars/clients/")
    assert request.headers["x-upsert"] == "true"
    assert request.headers["cache-control"] == "max-age=3600"
    assert request.content == b"\x89PNG"
    assert url.startswith(f"{BASE_URL}/storage/v1/object/public/avatars/clients/")
    assert url.endswith(".png")


async def test_upload_file_failure_returns_none():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(403, json={"error": "Unauthorized"})

    storage = StorageClient(base_url=BASE_URL, api_key="anon-key", transport=httpx.MockTransport(handler))

    assert await storage.upload_file("me.png", b"data", "avatars") is None
