"""
Configuration Module

Centralized, type-safe configuration management for the caching and
metrics core.

Components:
-----------
- **settings.py**: Pydantic-based configuration with environment variable loading
- **constants.py**: Strategy names, metric names, buckets and key defaults

Usage:
------
```python
from qa_platform.core.config import get_settings
from qa_platform.core.config.constants import CacheStrategyName

settings = get_settings()
ttl = settings.cache.CACHE_TTL_DEFAULT_SECONDS
strategy = CacheStrategyName.CACHE_ASIDE
```
"""

from qa_platform.core.config.settings import Settings, get_settings, reload_settings

__all__ = ["Settings", "get_settings", "reload_settings"]
