from .client import Elasto, SaveResult
from .core import ElastoConfig, configure_logging
from .core.exceptions import (
    BaseError,
    EngineError,
    NotFoundError,
    ParseError,
    TransportError,
    ValidationError,
)
from .query import Query, QueryMode, ResourceHandle
from .transport import ElasticsearchTransport, HttpxTransport, Transport

__version__ = "0.2.0"

__all__ = [
    "BaseError",
    "ElasticsearchTransport",
    "Elasto",
    "ElastoConfig",
    "EngineError",
    "HttpxTransport",
    "NotFoundError",
    "ParseError",
    "Query",
    "QueryMode",
    "ResourceHandle",
    "SaveResult",
    "Transport",
    "TransportError",
    "ValidationError",
    "configure_logging",
]
