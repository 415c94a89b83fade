"""Use cases — the public operations."""
