from .elasticsearch import ElasticsearchTransport
from .httpx import HttpxTransport

__all__ = ["ElasticsearchTransport", "HttpxTransport"]
