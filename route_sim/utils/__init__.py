"""Metrics and visualization helpers for network simulation."""
