"""
Interfaces Module

Protocol definitions for dependency injection.
"""

from qa_platform.core.interfaces.store import KeyValueStore

__all__ = ["KeyValueStore"]
