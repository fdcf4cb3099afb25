"""
Creation checks and status transitions shared by streams and vesting grants.

Each check raises the matching :mod:`grantstream.core.exceptions` class and
mutates nothing, so callers can run them all before touching any record.
"""

from __future__ import annotations

from typing import Optional

from grantstream.core.constants import (
    MAX_DESCRIPTION_LENGTH,
    GrantKind,
    GrantStatus,
    VestingKind,
)
from grantstream.core.exceptions import LimitError, StateError, ValidationError
from grantstream.treasury.ledger import Treasury

# action -> (statuses it may start from, status it leads to)
_TRANSITIONS = {
    "pause": ((GrantStatus.ACTIVE,), GrantStatus.PAUSED),
    "resume": ((GrantStatus.PAUSED,), GrantStatus.ACTIVE),
    "cancel": ((GrantStatus.ACTIVE, GrantStatus.PAUSED), GrantStatus.CANCELLED),
}


def validate_total_amount(total_amount: int) -> None:
    if total_amount <= 0:
        raise ValidationError(
            "Total amount must be greater than 0",
            code="invalid_total_amount",
            details={"total_amount": total_amount},
        )


def validate_schedule(
    kind: GrantKind,
    start_time: int,
    end_time: int,
    vesting_kind: Optional[VestingKind] = None,
    cliff_time: Optional[int] = None,
) -> None:
    if start_time >= end_time:
        raise ValidationError(
            f"Invalid {kind.value} timing: start time must be before end time",
            code=f"invalid_{kind.value}_timing",
            details={"start_time": start_time, "end_time": end_time},
        )
    if vesting_kind is VestingKind.CLIFF:
        if cliff_time is None or not start_time <= cliff_time <= end_time:
            raise ValidationError(
                "Invalid cliff timing: cliff time must be between start and end time",
                code="invalid_cliff_timing",
                details={"start_time": start_time, "cliff_time": cliff_time, "end_time": end_time},
            )


def validate_description(description: str) -> None:
    if len(description) > MAX_DESCRIPTION_LENGTH:
        raise ValidationError(
            f"Description is too long (max {MAX_DESCRIPTION_LENGTH} characters)",
            code="description_too_long",
            details={"length": len(description)},
        )


def validate_mint(treasury: Treasury, mint: Optional[str]) -> None:
    if mint is not None and mint != treasury.mint:
        raise ValidationError(
            "Invalid mint: grant mint must match treasury mint",
            code="invalid_mint",
            details={"mint": mint, "treasury_mint": treasury.mint},
        )


def require_treasury_active(treasury: Treasury) -> None:
    if not treasury.is_active():
        raise LimitError(
            "Treasury operations are currently paused",
            code="treasury_paused",
            details={"treasury_id": treasury.treasury_id},
        )


def check_treasury_capacity(treasury: Treasury, total_amount: int) -> None:
    require_treasury_active(treasury)
    if not treasury.validate_grant_amount(total_amount):
        raise LimitError(
            "Grant amount exceeds maximum allowed per grant",
            code="grant_amount_exceeds_limit",
            details={
                "total_amount": total_amount,
                "max_grant_amount": treasury.governance.max_grant_amount,
            },
        )
    if not treasury.validate_total_allocation(total_amount):
        raise LimitError(
            "Total allocation would exceed treasury limits",
            code="total_allocation_exceeds_limit",
            details={
                "total_amount": total_amount,
                "total_allocated": treasury.total_allocated,
                "max_total_allocation": treasury.governance.max_total_allocation,
            },
        )


def validate_creation(
    treasury: Treasury,
    kind: GrantKind,
    total_amount: int,
    start_time: int,
    end_time: int,
    description: str,
    vesting_kind: Optional[VestingKind] = None,
    cliff_time: Optional[int] = None,
    mint: Optional[str] = None,
) -> None:
    """Run every creation check; request errors are reported before limit errors."""
    validate_total_amount(total_amount)
    validate_schedule(kind, start_time, end_time, vesting_kind, cliff_time)
    validate_description(description)
    validate_mint(treasury, mint)
    check_treasury_capacity(treasury, total_amount)


def require_active(kind: GrantKind, status: GrantStatus) -> None:
    """Reject releases from any status other than ACTIVE."""
    if status is not GrantStatus.ACTIVE:
        raise StateError(
            f"{kind.value.capitalize()} is {status.value} and cannot release funds",
            code=f"{kind.value}_{status.value}",
            details={"status": status.value},
        )


def next_status(kind: GrantKind, current: GrantStatus, action: str) -> GrantStatus:
    """Status reached by applying a manual ``action`` to ``current``."""
    allowed_from, target = _TRANSITIONS[action]
    if current not in allowed_from:
        raise StateError(
            f"Cannot {action} {kind.value} in {current.value} status",
            code="invalid_status_transition",
            details={"action": action, "status": current.value},
        )
    return target
