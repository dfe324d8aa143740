from ._log_helper import configure_logging, get_logger
from .config import ElastoConfig
from .data_model import DataModel

__all__ = [
    "DataModel",
    "ElastoConfig",
    "configure_logging",
    "get_logger",
]
