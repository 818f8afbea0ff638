"""Utility helpers shared across the pipeline stages and CLI."""
