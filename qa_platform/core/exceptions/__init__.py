"""
Exception Module

Structured exception hierarchy for the caching and metrics core.

Module Structure:
-----------------
- **base.py**: QAPlatformError base class + ConfigurationError
- **cache.py**: Cache-related exceptions (Redis store, strategies)
- **monitoring.py**: Metrics exceptions

Usage:
------
```python
from qa_platform.core.exceptions import CacheConnectionError, CacheStrategyNotFoundError
```

Author: Platform Team
Date: 2025-12-08
"""

# Base exception
from qa_platform.core.exceptions.base import ConfigurationError, QAPlatformError

# Cache exceptions
from qa_platform.core.exceptions.cache import (
    CacheConnectionError,
    CacheError,
    CacheKeyError,
    CacheSerializationError,
    CacheStrategyNotFoundError,
)

# Monitoring exceptions
from qa_platform.core.exceptions.monitoring import MetricsError

__all__ = [
    # Base
    "QAPlatformError",
    "ConfigurationError",
    # Cache
    "CacheError",
    "CacheConnectionError",
    "CacheKeyError",
    "CacheSerializationError",
    "CacheStrategyNotFoundError",
    # Monitoring
    "MetricsError",
]
