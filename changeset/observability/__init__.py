"""Observability helpers for the changeset engine."""
