"""
System-Wide Constants for Session Merge

All defaults centralized here.
"""

from typing import Final

# =============================================================================
# SIZE AND TIME UNITS
# =============================================================================
KB: Final[int] = 1024

NS_PER_MS: Final[int] = 1_000_000

# =============================================================================
# SESSIONS
# =============================================================================
DEFAULT_KEY_PREFIX: Final[str] = "session_"
DEFAULT_TTL_SECONDS: Final[int] = 3600

# =============================================================================
# CODEC
# =============================================================================
COMPRESSION_THRESHOLD_BYTES: Final[int] = 1 * KB
FLAG_RAW: Final[int] = 0x00
FLAG_LZ4: Final[int] = 0x01

# =============================================================================
# ENVIRONMENT
# =============================================================================
ENV_PREFIX: Final[str] = "SESSIONMERGE"
