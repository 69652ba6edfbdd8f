"""
Question-answer platform caching and metrics core.

Layers:
- core: configuration, exceptions, logging, interfaces
- infrastructure: Redis-backed cache strategies and Prometheus metrics
- application: FastAPI app wiring, HTTP metrics middleware, /metrics and /health
"""

__version__ = "1.0.0"
