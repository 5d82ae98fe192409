"""Tiled multi-worker rendering and image output."""
