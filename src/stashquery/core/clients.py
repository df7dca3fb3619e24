import logging

from elasticsearch import ApiError, Elasticsearch, TransportError

from stashquery.core.exceptions import ClusterConnectionError
from stashquery.core.models import ExportConfig

logger = logging.getLogger(__name__)


def get_elasticsearch_client(config: ExportConfig, verify: bool = True) -> Elasticsearch:
    """
    Returns an Elasticsearch client for the configured host and port.

    Args:
        config: Export configuration holding the cluster address
        verify: Check that the cluster answers before returning the client

    Returns:
        Elasticsearch: Configured Elasticsearch client

    Raises:
        ClusterConnectionError: If the cluster cannot be reached
    """
    client = Elasticsearch(
        config.url,
        request_timeout=config.request_timeout,
        retry_on_timeout=True,  # Retries are left to the transport
        http_compress=True,
    )

    if not verify:
        return client

    try:
        info = client.info(request_timeout=10)
    except (ApiError, TransportError) as e:
        raise ClusterConnectionError(
            f"Could not connect to Elasticsearch cluster: {config.host}:{config.port}"
        ) from e

    logger.info(
        f"Connected to Elasticsearch cluster: {info['cluster_name']}",
        extra={
            "cluster_name": info["cluster_name"],
            "version": info["version"]["number"],
        },
    )
    return client
