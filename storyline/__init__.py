"""Storyline core: entity store, event ingestion, log-derived sync, and precheck."""
