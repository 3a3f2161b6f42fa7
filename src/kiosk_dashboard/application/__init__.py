"""Application layer - use cases built on domain contracts."""
