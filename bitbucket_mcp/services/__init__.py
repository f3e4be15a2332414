"""Aggregation services: resolution, enrichment, correlation, comments."""
