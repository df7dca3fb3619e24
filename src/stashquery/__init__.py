"""Export log documents from Elasticsearch into a sorted flat file."""

__version__ = "0.1.0"
