"""Shared fixtures: an in-memory stand-in for the Elasticsearch client."""

from unittest import mock

import pytest


def api_error(error_class, status: int, message: str):
    """Build an elasticsearch ApiError subclass the way the client raises it."""
    return error_class(message, meta=mock.Mock(status=status), body={"error": message})


def make_hits(messages):
    return [{"_index": "logstash-2024.01.01", "_source": {"message": m}} for m in messages]


def make_pages(sizes):
    """Pages of hits with distinct messages, numbered in descending order."""
    remaining = sum(sizes)
    pages = []
    for size in sizes:
        messages = [f"line {n:04d}" for n in range(remaining, remaining - size, -1)]
        remaining -= size
        pages.append(make_hits(messages))
    return pages


class FakeIndices:
    def __init__(self, existing=None, error=None):
        self.existing = None if existing is None else set(existing)
        self.error = error
        self.checked = []

    def exists(self, index):
        self.checked.append(index)
        if self.error is not None:
            raise self.error
        return self.existing is None or index in self.existing


class FakeElasticsearch:
    """Serves scroll pages from memory and records every call made."""

    def __init__(
        self,
        pages=(),
        total=None,
        scroll_ids=None,
        existing=None,
        search_error=None,
        scroll_errors=None,
        clear_errors=None,
        legacy_total=False,
        exists_error=None,
    ):
        self.pages = [list(page) for page in pages]
        self.total = total if total is not None else sum(len(page) for page in self.pages)
        self.scroll_ids = scroll_ids or [f"scroll-{n}" for n in range(max(len(self.pages), 1))]
        self.search_error = search_error
        self.scroll_errors = scroll_errors or {}
        self.clear_errors = clear_errors or {}
        self.legacy_total = legacy_total
        self.indices = FakeIndices(existing, exists_error)

        self.search_calls = []
        self.scroll_calls = []
        self.cleared = []
        self.issued = []
        self._position = 0

    def _response(self):
        position = min(self._position, len(self.scroll_ids) - 1)
        hits = self.pages[self._position] if self._position < len(self.pages) else []
        self.issued.append(self.scroll_ids[position])
        total = self.total if self.legacy_total else {"value": self.total, "relation": "eq"}
        return {
            "_scroll_id": self.scroll_ids[position],
            "hits": {"total": total, "hits": hits},
        }

    def search(self, **kwargs):
        self.search_calls.append(kwargs)
        if self.search_error is not None:
            raise self.search_error
        self._position = 0
        return self._response()

    def scroll(self, scroll_id, scroll):
        self.scroll_calls.append(scroll_id)
        error = self.scroll_errors.get(len(self.scroll_calls))
        if error is not None:
            raise error
        self._position += 1
        return self._response()

    def clear_scroll(self, scroll_id):
        self.cleared.append(scroll_id)
        if scroll_id in self.clear_errors:
            raise self.clear_errors[scroll_id]
        return {"succeeded": True, "num_freed": 1}

    def issued_scroll_ids(self):
        """Distinct scroll ids handed out so far, in order."""
        return list(dict.fromkeys(self.issued))


@pytest.fixture
def fake_es():
    """Factory for FakeElasticsearch instances."""
    return FakeElasticsearch
