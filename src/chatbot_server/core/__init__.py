"""Error types and logging setup shared across the server."""
