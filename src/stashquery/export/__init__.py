from .controller import ExportController
from .indices import indices_for_request, resolve_indices
from .sanitizer import sanitize_message
from .scroll import ScrollSession
from .writer import BufferedWriter

__all__ = [
    "ExportController",
    "ScrollSession",
    "BufferedWriter",
    "indices_for_request",
    "resolve_indices",
    "sanitize_message",
]
