"""Vector arithmetic, rays, intervals and random sampling helpers."""
