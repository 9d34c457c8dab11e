"""
Observability Module: Structured Logging

Provides:
- StructuredLogger: keyword extras and request-scoped context
- JsonFormatter: one JSON object per log line
- setup_logging: root logger configuration
"""

from sessionmerge.observability.logging import (
    LogLevel,
    StructuredLogger,
    JsonFormatter,
    setup_logging,
)

__all__ = [
    "LogLevel",
    "StructuredLogger",
    "JsonFormatter",
    "setup_logging",
]
