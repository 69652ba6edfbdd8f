"""Infrastructure layer: Redis-backed cache and Prometheus monitoring."""
