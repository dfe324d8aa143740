from __future__ import annotations

from typing import Any

import httpx

from elasto.core import get_logger
from elasto.core.exceptions import TransportError

from .._models import TransportResponse
from ..component import Transport

logger = get_logger("transport.httpx")


class HttpxTransport(Transport):
    timeout: float | None
    headers: dict[str, str] | None
    nparams: dict[str, Any]

    _client: httpx.Client
    _aclient: httpx.AsyncClient

    _init: bool
    _ainit: bool
    _owns_client: bool
    _owns_aclient: bool

    def __init__(
        self,
        timeout: float | None = 30.0,
        headers: dict[str, str] | None = None,
        client: httpx.Client | None = None,
        aclient: httpx.AsyncClient | None = None,
        nparams: dict[str, Any] = dict(),
    ):
        """Initialize.

        Args:
            timeout:
                HTTP timeout in seconds. Defaults to 30 seconds.
            headers:
                Headers sent with every request.
            client:
                Optional custom httpx.Client. The transport does not
                close clients it did not create.
            aclient:
                Optional custom httpx.AsyncClient.
            nparams:
                Native params to httpx clients.
        """
        self.timeout = timeout
        self.headers = headers
        self.nparams = nparams

        self._init = client is not None
        self._ainit = aclient is not None
        self._owns_client = client is None
        self._owns_aclient = aclient is None
        if client is not None:
            self._client = client
        if aclient is not None:
            self._aclient = aclient

    @property
    def client(self) -> httpx.Client:
        if not self._init:
            self._client = httpx.Client(**self._get_client_params())
            self._init = True
        return self._client

    @property
    def aclient(self) -> httpx.AsyncClient:
        if not self._ainit:
            self._aclient = httpx.AsyncClient(**self._get_client_params())
            self._ainit = True
        return self._aclient

    def _get_client_params(self) -> dict:
        args: dict = {"timeout": self.timeout}
        if self.headers:
            args["headers"] = self.headers
        args.update(self.nparams)
        return args

    def _get_headers(self, headers: dict[str, str] | None) -> dict[str, str]:
        merged = {
            "Accept": "application/json",
            "Content-Type": "application/json",
        }
        if headers:
            merged.update(headers)
        return merged

    def execute(
        self,
        method: str,
        url: str,
        body: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> TransportResponse:
        logger.debug("http request", method=method, url=url)
        try:
            response = self.client.request(
                method,
                url,
                json=body,
                headers=self._get_headers(headers),
            )
        except httpx.TransportError as e:
            raise TransportError(f"{method} {url} failed: {e}") from e
        return self._convert_response(response)

    async def aexecute(
        self,
        method: str,
        url: str,
        body: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> TransportResponse:
        logger.debug("http request", method=method, url=url)
        try:
            response = await self.aclient.request(
                method,
                url,
                json=body,
                headers=self._get_headers(headers),
            )
        except httpx.TransportError as e:
            raise TransportError(f"{method} {url} failed: {e}") from e
        return self._convert_response(response)

    def _convert_response(self, response: httpx.Response) -> TransportResponse:
        return TransportResponse(
            status_code=response.status_code,
            content=response.text,
        )

    def close(self) -> None:
        if self._init and self._owns_client:
            self._client.close()
            self._init = False

    async def aclose(self) -> None:
        if self._ainit and self._owns_aclient:
            await self._aclient.aclose()
            self._ainit = False
