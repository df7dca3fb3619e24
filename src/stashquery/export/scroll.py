"""Scroll session management for a single Elasticsearch query."""

import logging
from typing import Any, Optional, Sequence

from elasticsearch import ApiError, Elasticsearch, NotFoundError, TransportError
from elasticsearch import ConnectionError as ESConnectionError

from stashquery.core.exceptions import (
    ClusterConnectionError,
    QueryError,
    ScrollDeletionError,
    ScrollExpiredError,
)
from stashquery.core.models import HitPage, ScrollCursor, SessionState
from stashquery.settings import MESSAGE_FIELD, SCROLL_SIZE, SCROLL_TIME

logger = logging.getLogger(__name__)


def total_hits(response: Any) -> int:
    """Read hits.total from either the integer or the {"value": n} form."""
    total = response["hits"]["total"]
    if isinstance(total, dict):
        return int(total["value"])
    return int(total)


class ScrollSession:
    """Own the scroll contexts of one query: open, page through, clear.

    Every scroll id the cluster hands out is remembered, because renewing a
    scroll does not always release the previous context. ``close()`` clears
    all of them and may be called from any state, any number of times.

    Usage:
        with ScrollSession(es_client, scroll_time="30m", page_size=100) as session:
            page = session.open("status:500", ["logstash-2024.01.01"])
            while page.hits:
                ...
                page = session.next()
    """

    def __init__(
        self,
        es_client: Elasticsearch,
        scroll_time: str = SCROLL_TIME,
        page_size: int = SCROLL_SIZE,
        match_field: str = MESSAGE_FIELD,
    ):
        self.es_client = es_client
        self.scroll_time = scroll_time
        self.page_size = page_size
        self.match_field = match_field

        self.state = SessionState.UNOPENED
        self.scroll_ids: list[str] = []
        self.cursor: Optional[ScrollCursor] = None
        self.total = 0

    def __enter__(self) -> "ScrollSession":
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close()

    def _track(self, response: Any) -> ScrollCursor:
        scroll_id = response["_scroll_id"]
        if scroll_id not in self.scroll_ids:
            self.scroll_ids.append(scroll_id)
        self.cursor = ScrollCursor(scroll_id=scroll_id, ttl=self.scroll_time)
        return self.cursor

    def _page(self, response: Any) -> HitPage:
        cursor = self._track(response)
        hits = response["hits"]["hits"]
        if not hits:
            self.state = SessionState.EXHAUSTED
        return HitPage(hits=hits, total=self.total, cursor=cursor)

    def open(self, query: str, indices: Sequence[str]) -> HitPage:
        """Run the initial search and return the first page.

        Args:
            query: Lucene query string, searched against the match field by default
            indices: Indices to search

        Returns:
            The first page, carrying the declared total and the scroll cursor

        Raises:
            ClusterConnectionError: If the cluster cannot be reached
            QueryError: If the cluster rejects the search
        """
        if self.state != SessionState.UNOPENED:
            raise QueryError(f"Scroll session already {self.state.value}")

        try:
            response = self.es_client.search(
                index=",".join(indices),
                q=query,
                df=self.match_field,
                scroll=self.scroll_time,
                size=self.page_size,
                track_total_hits=True,
            )
        except ESConnectionError as e:
            self.state = SessionState.FAILED
            raise ClusterConnectionError(f"Could not reach Elasticsearch: {e}") from e
        except ApiError as e:
            self.state = SessionState.FAILED
            raise QueryError(f"Search rejected for query {query!r}: {e}") from e

        self.state = SessionState.OPEN
        self.total = total_hits(response)
        logger.debug(f"Initial search response: {response}")
        logger.info(
            f"Found {self.total} results",
            extra={"total_hits": self.total, "index_count": len(indices)},
        )
        return self._page(response)

    def next(self, cursor: Optional[ScrollCursor] = None) -> HitPage:
        """Fetch the next page using the most recent scroll id.

        Raises:
            ScrollExpiredError: If the cluster no longer has the scroll context
            ClusterConnectionError: If the cluster cannot be reached
            QueryError: If the cluster rejects the scroll request
        """
        if self.state == SessionState.EXHAUSTED:
            return HitPage(hits=[], total=self.total, cursor=self.cursor)
        if self.state != SessionState.OPEN:
            raise QueryError(f"Cannot page a scroll session that is {self.state.value}")

        scroll_id = (cursor or self.cursor).scroll_id
        try:
            response = self.es_client.scroll(scroll_id=scroll_id, scroll=self.scroll_time)
        except NotFoundError as e:
            self.state = SessionState.FAILED
            raise ScrollExpiredError(
                f"Scroll context expired (keep-alive {self.scroll_time}): {e}", scroll_id=scroll_id
            ) from e
        except ESConnectionError as e:
            self.state = SessionState.FAILED
            raise ClusterConnectionError(f"Could not reach Elasticsearch: {e}") from e
        except ApiError as e:
            self.state = SessionState.FAILED
            raise QueryError(f"Scroll request rejected: {e}") from e

        return self._page(response)

    def _delete_scroll(self, scroll_id: str) -> None:
        try:
            self.es_client.clear_scroll(scroll_id=scroll_id)
        except (ApiError, TransportError) as e:
            raise ScrollDeletionError(f"Delete failed for scroll {scroll_id}: {e}", scroll_id) from e

    def close(self) -> int:
        """Clear every scroll id seen by this session.

        Failures are logged and otherwise ignored.

        Returns:
            Number of scroll ids cleared successfully
        """
        if self.state == SessionState.CLOSED:
            return 0

        cleared = 0
        for scroll_id in self.scroll_ids:
            logger.debug(f"DELETE SCROLL: {scroll_id}")
            try:
                self._delete_scroll(scroll_id)
                cleared += 1
            except ScrollDeletionError as e:
                logger.warning(str(e), extra={"scroll_id": e.scroll_id})

        self.state = SessionState.CLOSED
        return cleared
