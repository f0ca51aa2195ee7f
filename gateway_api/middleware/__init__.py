"""Application middleware."""
