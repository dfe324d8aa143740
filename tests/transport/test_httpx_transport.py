import json

import httpx
import pytest

from elasto import HttpxTransport, TransportError


def make_transport(handler) -> HttpxTransport:
    mock = httpx.MockTransport(handler)
    return HttpxTransport(
        client=httpx.Client(transport=mock),
        aclient=httpx.AsyncClient(transport=mock),
    )


async def execute(transport: HttpxTransport, async_call: bool, *args, **kw):
    if async_call:
        return await transport.aexecute(*args, **kw)
    return transport.execute(*args, **kw)


@pytest.mark.asyncio
@pytest.mark.parametrize("async_call", [False, True])
async def test_request_is_sent_as_json(async_call: bool):
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"count": 3})

    transport = make_transport(handler)
    response = await execute(
        transport,
        async_call,
        "POST",
        "http://localhost:9200/testing/_count",
        body={"query": {"match_all": {}}},
        headers={"Authorization": "ApiKey abc"},
    )

    assert response.ok
    assert response.status_code == 200
    assert json.loads(response.content) == {"count": 3}
    request = seen[0]
    assert request.method == "POST"
    assert str(request.url) == "http://localhost:9200/testing/_count"
    assert json.loads(request.content) == {"query": {"match_all": {}}}
    assert request.headers["content-type"] == "application/json"
    assert request.headers["accept"] == "application/json"
    assert request.headers["authorization"] == "ApiKey abc"


@pytest.mark.asyncio
@pytest.mark.parametrize("async_call", [False, True])
async def test_error_status_is_returned_not_raised(async_call: bool):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404, text='{"found": false}')

    transport = make_transport(handler)
    response = await execute(
        transport, async_call, "GET", "http://localhost:9200/testing/_doc/1"
    )

    assert not response.ok
    assert response.status_code == 404
    assert response.content == '{"found": false}'


@pytest.mark.asyncio
@pytest.mark.parametrize("async_call", [False, True])
async def test_connection_failure_raises_transport_error(async_call: bool):
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    transport = make_transport(handler)
    with pytest.raises(TransportError) as excinfo:
        await execute(
            transport, async_call, "POST", "http://localhost:9200/x/_search"
        )
    assert "connection refused" in str(excinfo.value)


@pytest.mark.asyncio
async def test_injected_clients_are_not_closed():
    client = httpx.Client(transport=httpx.MockTransport(lambda r: None))
    aclient = httpx.AsyncClient(transport=httpx.MockTransport(lambda r: None))
    transport = HttpxTransport(client=client, aclient=aclient)

    transport.close()
    await transport.aclose()

    assert not client.is_closed
    assert not aclient.is_closed
    client.close()
    await aclient.aclose()


@pytest.mark.asyncio
async def test_created_clients_are_closed():
    transport = HttpxTransport(timeout=5, headers={"X-Trace": "1"})
    client = transport.client
    aclient = transport.aclient

    assert client.timeout.read == 5
    assert client.headers["x-trace"] == "1"

    transport.close()
    await transport.aclose()
    assert client.is_closed
    assert aclient.is_closed
