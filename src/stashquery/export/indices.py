"""Resolve the daily Logstash indices covering a date range."""

import logging
from datetime import date, timedelta
from typing import Iterable

from elasticsearch import ApiError, Elasticsearch
from elasticsearch import ConnectionError as ESConnectionError

from stashquery.core.exceptions import ClusterConnectionError, QueryError
from stashquery.core.models import ExportRequest
from stashquery.settings import ALL_INDICES, INDEX_DATE_FORMAT

logger = logging.getLogger(__name__)


def days_between(start_day: date, end_day: date) -> list[date]:
    """Every calendar day from start_day through end_day inclusive."""
    return [start_day + timedelta(days=offset) for offset in range((end_day - start_day).days + 1)]


def resolve_indices(start_day: date, end_day: date, prefixes: Iterable[str]) -> list[str]:
    """Build the index names for each (day, prefix) pair in the range.

    Args:
        start_day: First day of the range
        end_day: Last day of the range (inclusive)
        prefixes: Index name prefixes, e.g. ["logstash-"]

    Returns:
        Index names of the form {prefix}{yyyy.mm.dd}, without duplicates

    Examples:
        resolve_indices(date(2024, 1, 1), date(2024, 1, 2), ["logstash-"])
            -> ["logstash-2024.01.01", "logstash-2024.01.02"]
    """
    prefixes = list(prefixes)
    if not prefixes:
        raise ValueError("At least one index prefix is required")

    indices = []
    for day in days_between(start_day, end_day):
        day_str = day.strftime(INDEX_DATE_FORMAT)
        for prefix in prefixes:
            name = f"{prefix}{day_str}"
            if name not in indices:
                indices.append(name)
    return indices


def filter_existing_indices(es_client: Elasticsearch, indices: Iterable[str]) -> list[str]:
    """Drop the indices the cluster does not have.

    Searching a missing index is a request error, so the candidates are
    checked one by one before the search is issued.
    """
    existing = []
    for index in indices:
        try:
            exists = es_client.indices.exists(index=index)
        except ESConnectionError as e:
            raise ClusterConnectionError(f"Could not reach Elasticsearch: {e}") from e
        except ApiError as e:
            raise QueryError(f"Index check rejected for {index}: {e}") from e

        if exists:
            existing.append(index)
        else:
            logger.debug(f"Skipping missing index {index}")
    return existing


def indices_for_request(es_client: Elasticsearch, request: ExportRequest) -> list[str]:
    """Return the existing indices to search for a request.

    Without a date range every index is searched.
    """
    if not request.has_date_range:
        return [ALL_INDICES]

    candidates = resolve_indices(request.start_day, request.end_day, request.index_prefixes)
    indices = filter_existing_indices(es_client, candidates)
    logger.debug(
        f"Using these indices: {','.join(indices)}",
        extra={"candidate_count": len(candidates), "index_count": len(indices)},
    )
    return indices
