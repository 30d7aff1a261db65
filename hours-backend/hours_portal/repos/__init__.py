"""Upstream data access namespace."""
