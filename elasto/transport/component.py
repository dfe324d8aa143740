from __future__ import annotations

from typing import Any

from ._models import TransportResponse


class Transport:
    """Single request/response channel to the search engine.

    Implementations send one request per call, never retry and never
    interpret the status code. Connection failures are raised as
    elasto.core.exceptions.TransportError.
    """

    def execute(
        self,
        method: str,
        url: str,
        body: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> TransportResponse:
        """Execute request.

        Args:
            method:
                HTTP method.
            url:
                Absolute request URL.
            body:
                JSON body.
            headers:
                Extra request headers.

        Returns:
            Transport response.

        Raises:
            TransportError:
                Engine could not be reached.
        """
        raise NotImplementedError

    async def aexecute(
        self,
        method: str,
        url: str,
        body: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> TransportResponse:
        """Execute request asynchronously.

        Args:
            method:
                HTTP method.
            url:
                Absolute request URL.
            body:
                JSON body.
            headers:
                Extra request headers.

        Returns:
            Transport response.

        Raises:
            TransportError:
                Engine could not be reached.
        """
        raise NotImplementedError

    def close(self) -> None:
        pass

    async def aclose(self) -> None:
        pass
