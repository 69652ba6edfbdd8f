"""
Unit Tests for Core Exceptions
"""

import pytest

from qa_platform.core.exceptions import (
    CacheConnectionError,
    CacheError,
    CacheKeyError,
    CacheSerializationError,
    CacheStrategyNotFoundError,
    ConfigurationError,
    MetricsError,
    QAPlatformError,
)


@pytest.mark.unit
class TestQAPlatformError:
    """Test the base exception class."""

    def test_message_and_defaults(self):
        error = QAPlatformError("Test message")

        assert str(error) == "Test message"
        assert error.details == {}
        assert error.request_id is None

    def test_details_are_copied(self):
        details = {"key": "cache:user:1"}
        error = QAPlatformError("Test", details=details)

        details["key"] = "changed"

        assert error.details == {"key": "cache:user:1"}

    def test_to_dict(self):
        error = CacheKeyError("Redis GET failed", request_id="req-1", details={"key": "k"})

        assert error.to_dict() == {
            "error_type": "CacheKeyError",
            "message": "Redis GET failed",
            "request_id": "req-1",
            "details": {"key": "k"},
        }

    def test_with_context_chains(self):
        error = QAPlatformError("Test").with_context(pattern="cache:*", strategy="TTL")

        assert error.details == {"pattern": "cache:*", "strategy": "TTL"}

    def test_from_exception_wraps_original(self):
        original = TimeoutError("socket timed out")

        error = CacheConnectionError.from_exception(original, host="localhost", port=6379)

        assert isinstance(error, CacheConnectionError)
        assert error.message == "socket timed out"
        assert error.details["original_error"] == "TimeoutError"
        assert error.details["port"] == 6379

    def test_repr(self):
        error = QAPlatformError("Boom", request_id="abc", details={"a": 1})
        assert repr(error) == "QAPlatformError(message='Boom', request_id='abc', details={'a': 1})"


@pytest.mark.unit
class TestHierarchy:

    @pytest.mark.parametrize(
        "error_cls,parent",
        [
            (ConfigurationError, QAPlatformError),
            (CacheStrategyNotFoundError, ConfigurationError),
            (CacheError, QAPlatformError),
            (CacheConnectionError, CacheError),
            (CacheKeyError, CacheError),
            (CacheSerializationError, CacheError),
            (MetricsError, QAPlatformError),
        ],
    )
    def test_parent(self, error_cls, parent):
        assert issubclass(error_cls, parent)

    def test_strategy_not_found_is_not_a_cache_error(self):
        assert not issubclass(CacheStrategyNotFoundError, CacheError)
