from .clients import get_elasticsearch_client
from .utils import set_logging_level

__all__ = [
    "get_elasticsearch_client",
    "set_logging_level",
]
