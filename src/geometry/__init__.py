"""Intersectable scene geometry."""
