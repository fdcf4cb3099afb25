"""
Linear token streams.

A stream unlocks ``total_amount`` evenly between ``start_time`` and
``end_time``; the recipient withdraws any part of the unlocked balance at
will. Status moves ``ACTIVE -> COMPLETED`` once everything is withdrawn,
``ACTIVE <-> PAUSED`` and ``{ACTIVE, PAUSED} -> CANCELLED`` by hand.

All arithmetic is integral. Amounts are base units.
"""

from __future__ import annotations

import copy
import logging
from dataclasses import asdict, dataclass
from typing import Any, Dict

from grantstream.core.arithmetic import checked_add, linear_unlock, saturating_sub
from grantstream.core.constants import (
    BASIS_POINTS,
    GrantKind,
    GrantStatus,
    PaymentCategory,
)
from grantstream.core.exceptions import ValidationError
from grantstream.core.identifiers import custody_account
from grantstream.grants.validation import next_status, require_active

logger = logging.getLogger(__name__)


@dataclass
class Stream:
    stream_id: str
    treasury_id: str
    recipient: str
    authority: str
    mint: str
    total_amount: int
    start_time: int
    end_time: int
    category: PaymentCategory = PaymentCategory.OTHER
    description: str = ""
    withdrawn_amount: int = 0
    status: GrantStatus = GrantStatus.ACTIVE
    created_at: int = 0

    kind = GrantKind.STREAM

    @property
    def grant_id(self) -> str:
        return self.stream_id

    @property
    def released_amount(self) -> int:
        return self.withdrawn_amount

    @property
    def custody(self) -> str:
        return custody_account(self.stream_id)

    def duration(self) -> int:
        return self.end_time - self.start_time

    def remaining_amount(self) -> int:
        return saturating_sub(self.total_amount, self.withdrawn_amount)

    def is_active(self) -> bool:
        return self.status is GrantStatus.ACTIVE

    def withdrawable_amount(self, now: int) -> int:
        """Unlocked balance not yet withdrawn at time ``now``."""
        if self.status in (GrantStatus.PAUSED, GrantStatus.CANCELLED):
            return 0
        if now < self.start_time:
            return 0
        if now >= self.end_time:
            return self.remaining_amount()

        unlocked = linear_unlock(self.total_amount, now - self.start_time, self.duration())
        # Quantization can leave withdrawn slightly ahead of unlocked
        return saturating_sub(unlocked, self.withdrawn_amount)

    def can_withdraw(self, now: int) -> bool:
        return self.is_active() and self.withdrawable_amount(now) > 0

    def progress_bps(self, now: int) -> int:
        """Withdrawn plus withdrawable, in basis points of the total."""
        unlocked = self.withdrawn_amount + self.withdrawable_amount(now)
        return min(unlocked * BASIS_POINTS // self.total_amount, BASIS_POINTS)

    def withdraw(self, amount: int, now: int) -> int:
        """
        Move ``amount`` from unlocked to withdrawn.

        Only updates this record; the caller accounts for the payment on the
        treasury and moves the funds. Returns the new withdrawn total.

        Raises:
            ValidationError: non-positive amount, stream not started or
                amount above the withdrawable balance
            StateError: stream is not ACTIVE
            ArithmeticOverflowError: withdrawn total would exceed 64 bits
        """
        if amount <= 0:
            raise ValidationError(
                "Invalid withdrawal amount: must be greater than 0",
                code="invalid_withdrawal_amount",
                details={"amount": amount},
            )
        if now < self.start_time:
            raise ValidationError(
                "Stream has not started yet",
                code="stream_not_started",
                details={"now": now, "start_time": self.start_time},
            )
        require_active(self.kind, self.status)

        available = self.withdrawable_amount(now)
        if amount > available:
            raise ValidationError(
                "Insufficient unlocked tokens available for withdrawal",
                code="insufficient_unlocked_tokens",
                details={"amount": amount, "available": available},
            )

        self.withdrawn_amount = checked_add(
            self.withdrawn_amount, amount, field="withdrawn_amount"
        )
        if self.withdrawn_amount >= self.total_amount:
            self.status = GrantStatus.COMPLETED
            logger.info(
                "Stream %s completed",
                self.stream_id,
                extra={"event": "stream.completed", "grant_id": self.stream_id},
            )
        return self.withdrawn_amount

    def pause(self) -> None:
        self.status = next_status(self.kind, self.status, "pause")

    def resume(self) -> None:
        self.status = next_status(self.kind, self.status, "resume")

    def cancel(self) -> None:
        self.status = next_status(self.kind, self.status, "cancel")

    def snapshot(self) -> "Stream":
        return copy.deepcopy(self)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["category"] = self.category.value
        data["status"] = self.status.value
        data["remaining_amount"] = self.remaining_amount()
        return data
