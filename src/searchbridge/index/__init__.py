"""Indexing, querying, schema generation and bulk reindexing."""
