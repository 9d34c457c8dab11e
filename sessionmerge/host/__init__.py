"""
Host Module: Request Lifecycle Adapter

Provides:
- SessionHandler: open/read/write/destroy/close/gc for a host pipeline
- BoundaryFormat: host blob <-> Document translation (JSON by default)
- create_handler: per-request handler factory
"""

from sessionmerge.host.boundary import (
    BoundaryFormat,
    JsonBoundaryFormat,
)
from sessionmerge.host.handler import (
    SessionHandler,
    create_handler,
)

__all__ = [
    "BoundaryFormat",
    "JsonBoundaryFormat",
    "SessionHandler",
    "create_handler",
]
