from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any
from urllib.parse import quote, urlencode

from elasto.core import DataModel, ElastoConfig, get_logger
from elasto.core.exceptions import (
    EngineError,
    NotFoundError,
    ParseError,
    ValidationError,
)
from elasto.query import Query, ResourceHandle
from elasto.transport import HttpxTransport, Transport, TransportResponse

logger = get_logger("client")


class SaveResult(DataModel):
    """Result of indexing one document."""

    id: str
    """Document id assigned by the engine."""

    version: int | None = None
    """Document version after the write."""

    result: str | None = None
    """created or updated."""


class Elasto:
    """Search engine client.

    The client owns the configuration and the transport. Every query
    built from it reads the same configuration, which must not change
    while requests are in flight.

    Usage:
        with Elasto(host="localhost:9200") as client:
            docs = client.query("testing", "tweets").where("name", "x").search()

        async with Elasto.from_env() as client:
            count = await client.query("testing").acount()
    """

    config: ElastoConfig
    transport: Transport

    _owns_transport: bool

    def __init__(
        self,
        config: ElastoConfig | dict | None = None,
        transport: Transport | None = None,
        **kwargs: Any,
    ):
        """Initialize.

        Args:
            config:
                Client configuration. Keyword arguments override
                its values, e.g. host="localhost:9200".
            transport:
                Transport used for every request. Defaults to an
                HttpxTransport built from the configuration. The
                client closes only transports it created.
        """
        if config is None:
            config = ElastoConfig(**kwargs)
        elif isinstance(config, dict):
            config = ElastoConfig(**{**config, **kwargs})
        elif kwargs:
            config = ElastoConfig(**{**config.to_dict(), **kwargs})
        self.config = config
        self._owns_transport = transport is None
        self.transport = transport or HttpxTransport(
            timeout=config.timeout, headers=config.headers
        )

    @classmethod
    def from_env(cls, transport: Transport | None = None, **kwargs) -> Elasto:
        return cls(config=ElastoConfig.from_env(**kwargs), transport=transport)

    def query(
        self,
        resource: str | dict | ResourceHandle,
        type: str | None = None,
    ) -> Query:
        """Start a query on a collection.

        Args:
            resource:
                Index name, a mapping with index and type,
                or a resource handle.
            type:
                Document type when resource is an index name.

        Returns:
            New query builder.
        """
        return Query(client=self, resource=self._get_resource(resource, type))

    def save(
        self,
        resource: str | dict | ResourceHandle,
        document: dict[str, Any] | DataModel,
        id: str | int | None = None,
        type: str | None = None,
        version: int | None = None,
        version_type: str | None = None,
    ) -> SaveResult:
        """Index one document.

        Args:
            resource:
                Index name, a mapping with index and type,
                or a resource handle.
            document:
                Document body.
            id:
                Document id. The engine assigns one when omitted.
            type:
                Document type when resource is an index name.
            version:
                Expected version for optimistic concurrency.
            version_type:
                Version type, e.g. "external".

        Returns:
            Save result.
        """
        method, path, body = self._convert_save(
            resource, document, id, type, version, version_type
        )
        response = self._request(method, path, body=body)
        return self._convert_save_result(response)

    async def asave(
        self,
        resource: str | dict | ResourceHandle,
        document: dict[str, Any] | DataModel,
        id: str | int | None = None,
        type: str | None = None,
        version: int | None = None,
        version_type: str | None = None,
    ) -> SaveResult:
        method, path, body = self._convert_save(
            resource, document, id, type, version, version_type
        )
        response = await self._arequest(method, path, body=body)
        return self._convert_save_result(response)

    def _convert_save(
        self,
        resource: str | dict | ResourceHandle,
        document: dict[str, Any] | DataModel,
        id: str | int | None,
        type: str | None,
        version: int | None,
        version_type: str | None,
    ) -> tuple[str, str, dict]:
        handle = self._get_resource(resource, type)
        body = (
            document.to_dict() if isinstance(document, DataModel) else document
        )
        if not isinstance(body, Mapping):
            raise ValidationError("Document must be a mapping")
        path = f"{handle.index}/{handle.type or '_doc'}"
        method = "POST"
        if id is not None and id != "":
            path = f"{path}/{quote(str(id), safe='')}"
            method = "PUT"
        params: dict[str, Any] = {}
        if version is not None:
            params["version"] = version
        if version_type is not None:
            params["version_type"] = version_type
        if params:
            path = f"{path}?{urlencode(params)}"
        return method, path, dict(body)

    @staticmethod
    def _convert_save_result(response: dict) -> SaveResult:
        return SaveResult.from_dict(
            {
                "id": str(response.get("_id", "")),
                "version": response.get("_version"),
                "result": response.get("result"),
            }
        )

    @staticmethod
    def _get_resource(
        resource: str | dict | ResourceHandle, type: str | None = None
    ) -> ResourceHandle:
        if isinstance(resource, ResourceHandle):
            return resource
        if isinstance(resource, Mapping):
            if not resource.get("index"):
                raise ValidationError("No index specified")
            return ResourceHandle(
                index=resource["index"],
                type=resource.get("type", type),
            )
        if isinstance(resource, str) and resource:
            return ResourceHandle(index=resource, type=type)
        raise ValidationError("No index specified")

    def _get_url(self, path: str) -> str:
        return f"{self.config.base_url}/{path.lstrip('/')}"

    def _request(
        self,
        method: str,
        path: str,
        body: dict[str, Any] | None = None,
    ) -> Any:
        url = self._get_url(path)
        logger.debug("request", method=method, url=url)
        response = self.transport.execute(
            method, url, body=body, headers=self.config.headers
        )
        return self._handle_response(method, url, response)

    async def _arequest(
        self,
        method: str,
        path: str,
        body: dict[str, Any] | None = None,
    ) -> Any:
        url = self._get_url(path)
        logger.debug("request", method=method, url=url)
        response = await self.transport.aexecute(
            method, url, body=body, headers=self.config.headers
        )
        return self._handle_response(method, url, response)

    def _handle_response(
        self, method: str, url: str, response: TransportResponse
    ) -> Any:
        data = self._parse(response)
        if response.ok:
            return data

        message = self._get_error_message(data, response)
        logger.warning(
            "engine error",
            method=method,
            url=url,
            status_code=response.status_code,
            reason=message,
        )
        if response.status_code == 404:
            if isinstance(data, dict) and data.get("found") is False:
                message = f"Document {data.get('_id')} not found"
            raise NotFoundError(message, status_code=404, body=data)
        raise EngineError(message, status_code=response.status_code, body=data)

    @staticmethod
    def _parse(response: TransportResponse) -> Any:
        if not response.content:
            if response.ok:
                raise ParseError("Empty response body", content=None)
            return None
        try:
            return json.loads(response.content)
        except ValueError as e:
            if response.ok:
                raise ParseError(
                    f"Malformed JSON response: {e}",
                    content=response.content,
                ) from e
            return None

    @staticmethod
    def _get_error_message(data: Any, response: TransportResponse) -> str:
        if isinstance(data, dict) and "error" in data:
            error = data["error"]
            if isinstance(error, dict):
                return str(error.get("reason") or json.dumps(error))
            return str(error)
        if response.content:
            return response.content
        return f"HTTP {response.status_code}"

    def close(self) -> None:
        if self._owns_transport:
            self.transport.close()

    async def aclose(self) -> None:
        if self._owns_transport:
            await self.transport.aclose()

    def __enter__(self) -> Elasto:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    async def __aenter__(self) -> Elasto:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()
