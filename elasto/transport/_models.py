from __future__ import annotations

from elasto.core import DataModel


class TransportResponse(DataModel):
    """Transport response."""

    status_code: int
    """HTTP status code."""

    content: str | None = None
    """Undecoded response body."""

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300
