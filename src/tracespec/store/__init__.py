"""TraceSpec document storage."""

from .document_store import YamlDocumentStore, dump_yaml, quote_dates

__all__ = ['YamlDocumentStore', 'dump_yaml', 'quote_dates']
