"""Packaged flyproxy resources (library defaults)."""
