"""
Configuration Management for Session Merge

Provides validated configuration with sensible defaults.
Supports environment variable overrides (SESSIONMERGE_* and REDIS_*).

Design:
- Immutable after validation
- Fail-fast on invalid configuration
- Type-safe with dataclasses
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field

from sessionmerge.core.types import Result, Ok, Err
from sessionmerge.core import constants as C
from sessionmerge.storage.config import BackendType, RedisConfig


@dataclass(frozen=True)
class SessionConfig:
    """Per-session behaviour of the merge engine."""

    prefix: str = C.DEFAULT_KEY_PREFIX
    ttl_seconds: int = C.DEFAULT_TTL_SECONDS
    read_only: bool = False


@dataclass(frozen=True)
class CodecConfig:
    """Storage codec selection."""

    format: str = "json"  # "json" or "msgpack"
    compression_enabled: bool = True
    compression_threshold_bytes: int = C.COMPRESSION_THRESHOLD_BYTES


@dataclass(frozen=True)
class ObservabilityConfig:
    """Logging configuration."""

    log_level: str = "INFO"
    log_json: bool = True


@dataclass(frozen=True)
class SessionMergeConfig:
    """Root configuration."""

    session: SessionConfig = field(default_factory=SessionConfig)
    codec: CodecConfig = field(default_factory=CodecConfig)
    observability: ObservabilityConfig = field(default_factory=ObservabilityConfig)
    backend: BackendType = BackendType.IN_MEMORY
    redis: RedisConfig = field(default_factory=RedisConfig)

    @classmethod
    def from_env(cls) -> Result[SessionMergeConfig, str]:
        """
        Load configuration from environment variables.

        Session/codec/logging variables are prefixed with SESSIONMERGE_.
        Example: SESSIONMERGE_PREFIX, SESSIONMERGE_TTL_SECONDS,
        SESSIONMERGE_BACKEND=redis. Redis connection settings come from
        REDIS_* (see RedisConfig.from_env).
        """

        def _get(key: str, default: str) -> str:
            return os.getenv(f"{C.ENV_PREFIX}_{key}", default)

        def _get_bool(key: str, default: bool) -> bool:
            return _get(key, str(default)).lower() in ("true", "1", "yes")

        try:
            session = SessionConfig(
                prefix=_get("PREFIX", C.DEFAULT_KEY_PREFIX),
                ttl_seconds=int(_get("TTL_SECONDS", str(C.DEFAULT_TTL_SECONDS))),
                read_only=_get_bool("READ_ONLY", False),
            )

            codec = CodecConfig(
                format=_get("CODEC", "json").lower(),
                compression_enabled=_get_bool("COMPRESSION", True),
                compression_threshold_bytes=int(
                    _get("COMPRESSION_THRESHOLD", str(C.COMPRESSION_THRESHOLD_BYTES))
                ),
            )

            observability = ObservabilityConfig(
                log_level=_get("LOG_LEVEL", "INFO").upper(),
                log_json=_get_bool("LOG_JSON", True),
            )

            backend_name = _get("BACKEND", "in_memory").upper()
            try:
                backend = BackendType[backend_name]
            except KeyError:
                return Err(f"Configuration error: unknown backend '{backend_name.lower()}'")

            redis = RedisConfig.from_env()

            return Ok(cls(
                session=session,
                codec=codec,
                observability=observability,
                backend=backend,
                redis=redis,
            ))
        except (ValueError, TypeError) as e:
            return Err(f"Configuration error: {e}")

    def validate(self) -> Result[None, str]:
        """Validate configuration invariants."""
        if self.session.ttl_seconds < 0:
            return Err("Session ttl_seconds cannot be negative")
        if self.codec.format not in ("json", "msgpack"):
            return Err(f"Unknown codec format '{self.codec.format}'")
        if self.codec.compression_threshold_bytes < 0:
            return Err("Codec compression_threshold_bytes cannot be negative")
        if self.observability.log_level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            return Err(f"Unknown log level '{self.observability.log_level}'")
        return Ok(None)
