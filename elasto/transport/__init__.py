from ._models import TransportResponse
from .component import Transport
from .providers import ElasticsearchTransport, HttpxTransport

__all__ = [
    "ElasticsearchTransport",
    "HttpxTransport",
    "Transport",
    "TransportResponse",
]
