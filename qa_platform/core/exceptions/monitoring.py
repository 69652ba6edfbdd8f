"""
Monitoring-Related Exceptions

Author: Platform Team
Date: 2025-12-08
"""

from qa_platform.core.exceptions.base import QAPlatformError


class MetricsError(QAPlatformError):
    """Raised when a metric cannot be recorded or rendered."""
    pass
