from __future__ import annotations

import json
from typing import Any
from urllib.parse import urlsplit

from elasticsearch import ApiError, AsyncElasticsearch
from elasticsearch import Elasticsearch as SyncElasticsearch
from elasticsearch import SerializationError
from elasticsearch import TransportError as ESTransportError

from elasto.core import get_logger
from elasto.core.exceptions import ParseError, TransportError

from .._models import TransportResponse
from ..component import Transport

logger = get_logger("transport.elasticsearch")


class ElasticsearchTransport(Transport):
    """Transport backed by the official Elasticsearch client.

    Requests are routed to the client's own hosts. Only the path and
    query string of the URL passed to execute are used.
    """

    hosts: str | list[str] | dict[str, str | int]
    api_key: str | list[str] | None
    basic_auth: str | list[str] | None
    bearer_auth: str | None
    verify_certs: bool | None
    ca_certs: str | None
    request_timeout: float | None
    nparams: dict[str, Any]

    _client: SyncElasticsearch
    _aclient: AsyncElasticsearch

    _init: bool
    _ainit: bool

    def __init__(
        self,
        hosts: str | list[str] | dict[str, str | int],
        api_key: str | list[str] | None = None,
        basic_auth: str | list[str] | None = None,
        bearer_auth: str | None = None,
        verify_certs: bool | None = None,
        ca_certs: str | None = None,
        request_timeout: float | None = None,
        nparams: dict[str, Any] = dict(),
    ):
        """Initialize.

        Args:
            hosts:
                Elasticsearch hosts.
            api_key:
                Elasticsearch api key.
            basic_auth:
                Elasticsearch basic auth.
            bearer_auth:
                Elasticsearch bearer auth.
            verify_certs:
                Elasticsearch verify certs.
            ca_certs:
                Elasticsearch ca certs.
            request_timeout:
                Request timeout in seconds.
            nparams:
                Native parameters to Elasticsearch client.
        """
        self.hosts = hosts
        self.api_key = api_key
        self.basic_auth = basic_auth
        self.bearer_auth = bearer_auth
        self.verify_certs = verify_certs
        self.ca_certs = ca_certs
        self.request_timeout = request_timeout
        self.nparams = nparams

        self._init = False
        self._ainit = False

    @property
    def client(self) -> SyncElasticsearch:
        if not self._init:
            self._client = SyncElasticsearch(**self._get_client_params())
            self._init = True
        return self._client

    @property
    def aclient(self) -> AsyncElasticsearch:
        if not self._ainit:
            self._aclient = AsyncElasticsearch(**self._get_client_params())
            self._ainit = True
        return self._aclient

    def _get_client_params(self) -> dict:
        def _add_if_not_none(key, value):
            return {key: value} if value is not None else {}

        def _convert_if_list(value):
            return tuple(value) if isinstance(value, list) else value

        args = {
            "hosts": self.hosts,
            **_add_if_not_none("api_key", _convert_if_list(self.api_key)),
            **_add_if_not_none(
                "basic_auth", _convert_if_list(self.basic_auth)
            ),
            **_add_if_not_none("bearer_auth", self.bearer_auth),
            **_add_if_not_none("verify_certs", self.verify_certs),
            **_add_if_not_none("ca_certs", self.ca_certs),
            **_add_if_not_none("request_timeout", self.request_timeout),
        }
        if self.nparams is not None:
            args.update(self.nparams)
        return args

    @staticmethod
    def _get_path(url: str) -> str:
        parts = urlsplit(url)
        path = parts.path or "/"
        if parts.query:
            path = f"{path}?{parts.query}"
        return path

    @staticmethod
    def _get_headers(
        body: dict[str, Any] | None, headers: dict[str, str] | None
    ) -> dict[str, str]:
        merged = {"accept": "application/json"}
        if body is not None:
            merged["content-type"] = "application/json"
        if headers:
            merged.update({k.lower(): v for k, v in headers.items()})
        return merged

    @staticmethod
    def _dump(body: Any) -> str | None:
        if body is None:
            return None
        if isinstance(body, str):
            return body
        return json.dumps(body)

    def execute(
        self,
        method: str,
        url: str,
        body: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> TransportResponse:
        path = self._get_path(url)
        logger.debug("elasticsearch request", method=method, path=path)
        try:
            resp = self.client.perform_request(
                method,
                path,
                headers=self._get_headers(body, headers),
                body=body,
            )
        except ApiError as e:
            return TransportResponse(
                status_code=e.meta.status, content=self._dump(e.body)
            )
        except SerializationError as e:
            raise ParseError(str(e)) from e
        except ESTransportError as e:
            raise TransportError(f"{method} {path} failed: {e}") from e
        return TransportResponse(
            status_code=resp.meta.status, content=self._dump(resp.body)
        )

    async def aexecute(
        self,
        method: str,
        url: str,
        body: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> TransportResponse:
        path = self._get_path(url)
        logger.debug("elasticsearch request", method=method, path=path)
        try:
            resp = await self.aclient.perform_request(
                method,
                path,
                headers=self._get_headers(body, headers),
                body=body,
            )
        except ApiError as e:
            return TransportResponse(
                status_code=e.meta.status, content=self._dump(e.body)
            )
        except SerializationError as e:
            raise ParseError(str(e)) from e
        except ESTransportError as e:
            raise TransportError(f"{method} {path} failed: {e}") from e
        return TransportResponse(
            status_code=resp.meta.status, content=self._dump(resp.body)
        )

    def close(self) -> None:
        if self._init:
            self.client.close()
            self._init = False

    async def aclose(self) -> None:
        if self._ainit:
            await self.aclient.close()
            self._ainit = False
