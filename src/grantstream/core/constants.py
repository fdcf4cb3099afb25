"""
GrantStream Constants

Numeric bounds and enumerations shared by the treasury ledger and the
stream/vesting engines.

NOTE: The integer bounds mirror the fixed-width fields of the on-ledger
records. Amounts are unsigned 64-bit, timestamps are signed 64-bit and the
grant counter is unsigned 32-bit. Changing them changes saturation points.
"""

from __future__ import annotations

from enum import Enum
from typing import Final

# =============================================================================
# INTEGER BOUNDS
# =============================================================================

U64_MAX: Final[int] = 2**64 - 1
U32_MAX: Final[int] = 2**32 - 1
I64_MIN: Final[int] = -(2**63)
I64_MAX: Final[int] = 2**63 - 1

# =============================================================================
# GRANT METADATA
# =============================================================================

MAX_DESCRIPTION_LENGTH: Final[int] = 64

# Progress is reported in basis points so it stays integral
BASIS_POINTS: Final[int] = 10_000

# Derivation seeds for deterministic identifiers
TREASURY_SEED: Final[str] = "treasury"
STREAM_SEED: Final[str] = "stream"
VESTING_SEED: Final[str] = "vesting"


class PaymentCategory(str, Enum):
    """Tag describing what a grant pays for."""

    CONTRIBUTORS = "contributors"
    GRANTS = "grants"
    OPERATIONS = "operations"
    MARKETING = "marketing"
    DEVELOPMENT = "development"
    OTHER = "other"


class GrantStatus(str, Enum):
    ACTIVE = "active"
    PAUSED = "paused"
    COMPLETED = "completed"  # terminal
    CANCELLED = "cancelled"  # terminal


TERMINAL_STATUSES: Final[frozenset[GrantStatus]] = frozenset(
    {GrantStatus.COMPLETED, GrantStatus.CANCELLED}
)


class VestingKind(str, Enum):
    """Release schedule of a vesting grant, fixed at creation."""

    LINEAR = "linear"
    CLIFF = "cliff"


class GrantKind(str, Enum):
    STREAM = "stream"
    VESTING = "vesting"
