"""HTTP API serving an in-memory engine."""
