"""Domain-layer interfaces independent of any storage backend."""
