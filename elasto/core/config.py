from __future__ import annotations

import os
from typing import Any

from pydantic import ConfigDict, field_validator

from .data_model import DataModel


class ElastoConfig(DataModel):
    """Connection and compilation settings shared by every query.

    The config is frozen once built. Set it up before the first request
    and create a new client to point somewhere else.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    host: str = "http://localhost:9200"
    """Engine host URL."""

    base_path: str = ""
    """Path prefix placed between host and index."""

    timeout: float | None = 30.0
    """Request timeout in seconds, passed to the transport."""

    headers: dict[str, str] | None = None
    """Extra HTTP headers."""

    geo_field: str = "location"
    """geo_point field used by geo filters, sorts and script fields."""

    distance_unit: str = "mi"
    """Unit for radius and distance values."""

    default_radius: float = 100
    """Radius used by near() when none is given."""

    autocomplete_field: str = "name"
    """Field matched by autocomplete()."""

    highlight_pre_tag: str = "<strong>"
    highlight_post_tag: str = "</strong>"

    @field_validator("host")
    @classmethod
    def _strip_host(cls, value: str) -> str:
        value = value.rstrip("/")
        if "://" not in value:
            value = f"http://{value}"
        return value

    @field_validator("base_path")
    @classmethod
    def _normalize_base_path(cls, value: str) -> str:
        value = value.strip("/")
        return f"/{value}" if value else ""

    @property
    def base_url(self) -> str:
        return f"{self.host}{self.base_path}"

    @classmethod
    def from_env(cls, **overrides: Any) -> ElastoConfig:
        """Build config from ELASTO_* environment variables.

        Explicit keyword arguments take precedence over the environment.
        """
        values: dict[str, Any] = {}
        host = os.environ.get("ELASTO_HOST")
        if host:
            values["host"] = host
        base_path = os.environ.get("ELASTO_BASE_PATH")
        if base_path:
            values["base_path"] = base_path
        timeout = os.environ.get("ELASTO_TIMEOUT")
        if timeout:
            values["timeout"] = float(timeout)
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)
