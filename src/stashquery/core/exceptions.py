class StashQueryError(Exception):
    """Base class for export failures."""


class ClusterConnectionError(StashQueryError, ConnectionError):
    """Raised when the Elasticsearch cluster cannot be reached."""


class QueryError(StashQueryError):
    """Raised when the cluster rejects a search or scroll request."""


class ScrollExpiredError(StashQueryError):
    """
    Raised when the cluster no longer knows the scroll context.

    The scroll cannot be resumed; whatever was enumerated before the failure
    is all the export will produce.
    """

    def __init__(self, message: str, scroll_id: str = None):
        super().__init__(message)
        self.scroll_id = scroll_id


class SinkWriteError(StashQueryError, OSError):
    """Raised when the output file cannot be written."""

    def __init__(self, message: str, path=None):
        super().__init__(message)
        self.path = path


class ScrollDeletionError(StashQueryError):
    """Raised when clearing a scroll context fails. Only ever logged."""

    def __init__(self, message: str, scroll_id: str = None):
        super().__init__(message)
        self.scroll_id = scroll_id
