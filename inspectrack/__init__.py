"""Property inspection tracking service."""
