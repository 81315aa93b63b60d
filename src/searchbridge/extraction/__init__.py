"""Text extraction from file-backed objects."""
