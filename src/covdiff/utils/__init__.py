"""Utility helpers: HTTP transport and document caches."""
