"""Bridge between an object store and a Solr-style full-text search backend."""

__version__ = "0.1.0"
