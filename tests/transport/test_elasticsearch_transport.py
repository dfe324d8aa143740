import json
from types import SimpleNamespace

import elasticsearch
import pytest

from elasto import ElasticsearchTransport, TransportError


class FakeElasticsearch:
    def __init__(self, result=None, error: Exception | None = None):
        self.calls: list[dict] = []
        self.result = result
        self.error = error

    def perform_request(self, method, path, headers=None, body=None):
        self.calls.append(
            {"method": method, "path": path, "headers": headers, "body": body}
        )
        if self.error is not None:
            raise self.error
        return self.result


class FakeAsyncElasticsearch(FakeElasticsearch):
    async def perform_request(self, method, path, headers=None, body=None):
        return FakeElasticsearch.perform_request(
            self, method, path, headers=headers, body=body
        )


def make_transport(async_call: bool, **kwargs) -> tuple:
    transport = ElasticsearchTransport(hosts="http://localhost:9200")
    if async_call:
        fake = FakeAsyncElasticsearch(**kwargs)
        transport._aclient = fake
        transport._ainit = True
    else:
        fake = FakeElasticsearch(**kwargs)
        transport._client = fake
        transport._init = True
    return transport, fake


async def execute(transport, async_call: bool, *args, **kw):
    if async_call:
        return await transport.aexecute(*args, **kw)
    return transport.execute(*args, **kw)


def api_response(status: int, body: dict) -> SimpleNamespace:
    return SimpleNamespace(meta=SimpleNamespace(status=status), body=body)


@pytest.mark.asyncio
@pytest.mark.parametrize("async_call", [False, True])
async def test_request_uses_url_path(async_call: bool):
    transport, fake = make_transport(
        async_call, result=api_response(200, {"count": 7})
    )
    response = await execute(
        transport,
        async_call,
        "POST",
        "http://ignored:9200/proxy/testing/tweets/_count",
        body={"query": {"match_all": {}}},
        headers={"X-Opaque-Id": "abc"},
    )

    assert response.status_code == 200
    assert json.loads(response.content) == {"count": 7}
    call = fake.calls[0]
    assert call["method"] == "POST"
    assert call["path"] == "/proxy/testing/tweets/_count"
    assert call["body"] == {"query": {"match_all": {}}}
    assert call["headers"] == {
        "accept": "application/json",
        "content-type": "application/json",
        "x-opaque-id": "abc",
    }


@pytest.mark.asyncio
@pytest.mark.parametrize("async_call", [False, True])
async def test_bodyless_request_keeps_query_string(async_call: bool):
    transport, fake = make_transport(
        async_call, result=api_response(200, {"found": True})
    )
    await execute(
        transport,
        async_call,
        "PUT",
        "http://localhost:9200/testing/_doc/1?version=2",
    )

    call = fake.calls[0]
    assert call["path"] == "/testing/_doc/1?version=2"
    assert call["headers"] == {"accept": "application/json"}


@pytest.mark.asyncio
@pytest.mark.parametrize("async_call", [False, True])
async def test_api_error_becomes_response(async_call: bool):
    body = {"error": {"reason": "all shards failed"}, "status": 400}
    error = elasticsearch.ApiError(
        "search_phase_execution_exception",
        meta=SimpleNamespace(status=400),
        body=body,
    )
    transport, _ = make_transport(async_call, error=error)
    response = await execute(
        transport, async_call, "POST", "http://localhost:9200/x/_search"
    )

    assert response.status_code == 400
    assert not response.ok
    assert json.loads(response.content) == body


@pytest.mark.asyncio
@pytest.mark.parametrize("async_call", [False, True])
async def test_connection_error_raises_transport_error(async_call: bool):
    transport, _ = make_transport(
        async_call, error=elasticsearch.ConnectionError("connection refused")
    )
    with pytest.raises(TransportError):
        await execute(
            transport, async_call, "POST", "http://localhost:9200/x/_search"
        )


def test_client_params():
    transport = ElasticsearchTransport(
        hosts=["http://a:9200"],
        basic_auth=["elastic", "secret"],
        request_timeout=5,
        nparams={"max_retries": 1},
    )
    assert transport._get_client_params() == {
        "hosts": ["http://a:9200"],
        "basic_auth": ("elastic", "secret"),
        "request_timeout": 5,
        "max_retries": 1,
    }
