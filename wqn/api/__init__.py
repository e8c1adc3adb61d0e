"""HTTP API for review sessions."""
