"""External AI question generation services."""
