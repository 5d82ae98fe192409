"""Thin-lens camera: ray generation and recursive shading."""
