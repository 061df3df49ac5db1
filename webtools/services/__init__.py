"""Catalog, classification and backend call services."""
