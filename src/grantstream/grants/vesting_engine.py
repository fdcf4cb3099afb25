"""
Vesting grants with a linear or cliff release schedule.

LINEAR releases evenly from ``start_time`` to ``end_time``, exactly like a
stream. CLIFF releases nothing before ``cliff_time`` and then releases the
full amount evenly from ``cliff_time`` to ``end_time``. The schedule kind is
fixed at creation and the unlock computation branches on it once.

Unlike streams, a vesting grant reports nothing claimable unless it is ACTIVE.
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
    VestingKind,
)
from grantstream.core.exceptions import ValidationError
from grantstream.core.identifiers import custody_account
from grantstream.grants.validation import next_status, require_active

logger = logging.getLogger(__name__)


@dataclass
class Vesting:
    vesting_id: str
    treasury_id: str
    recipient: str
    authority: str
    mint: str
    vesting_kind: VestingKind
    total_amount: int
    start_time: int
    end_time: int
    cliff_time: int = 0
    category: PaymentCategory = PaymentCategory.OTHER
    description: str = ""
    claimed_amount: int = 0
    status: GrantStatus = GrantStatus.ACTIVE
    created_at: int = 0

    kind = GrantKind.VESTING

    @property
    def grant_id(self) -> str:
        return self.vesting_id

    @property
    def released_amount(self) -> int:
        return self.claimed_amount

    @property
    def custody(self) -> str:
        return custody_account(self.vesting_id)

    def duration(self) -> int:
        return self.end_time - self.start_time

    def remaining_amount(self) -> int:
        return saturating_sub(self.total_amount, self.claimed_amount)

    def is_active(self) -> bool:
        return self.status is GrantStatus.ACTIVE

    def _releasable_from(self, release_start: int, now: int) -> int:
        if now >= self.end_time:
            return self.remaining_amount()
        unlocked = linear_unlock(
            self.total_amount, now - release_start, self.end_time - release_start
        )
        return saturating_sub(unlocked, self.claimed_amount)

    def claimable_amount(self, now: int) -> int:
        """Vested balance not yet claimed at time ``now``."""
        if self.status is not GrantStatus.ACTIVE:
            return 0
        if now < self.start_time:
            return 0

        if self.vesting_kind is VestingKind.CLIFF:
            if now < self.cliff_time:
                return 0
            return self._releasable_from(self.cliff_time, now)
        return self._releasable_from(self.start_time, now)

    def can_claim(self, now: int) -> bool:
        return self.is_active() and self.claimable_amount(now) > 0

    def progress_bps(self, now: int) -> int:
        """Claimed plus claimable, in basis points of the total."""
        vested = self.claimed_amount + self.claimable_amount(now)
        return min(vested * BASIS_POINTS // self.total_amount, BASIS_POINTS)

    def claim(self, amount: int, now: int) -> int:
        """
        Move ``amount`` from vested to claimed and return the new claimed total.

        Raises:
            ValidationError: non-positive amount, vesting not started or
                amount above the claimable balance
            StateError: vesting is not ACTIVE
            ArithmeticOverflowError: claimed total would exceed 64 bits
        """
        if amount <= 0:
            raise ValidationError(
                "Invalid claim amount: must be greater than 0",
                code="invalid_claim_amount",
                details={"amount": amount},
            )
        require_active(self.kind, self.status)
        if now < self.start_time:
            raise ValidationError(
                "Vesting has not started yet",
                code="vesting_not_started",
                details={"now": now, "start_time": self.start_time},
            )

        claimable = self.claimable_amount(now)
        if amount > claimable:
            raise ValidationError(
                "Insufficient vested tokens available for claim",
                code="insufficient_vested_tokens",
                details={"amount": amount, "claimable": claimable},
            )

        self.claimed_amount = checked_add(self.claimed_amount, amount, field="claimed_amount")
        if self.claimed_amount >= self.total_amount:
            self.status = GrantStatus.COMPLETED
            logger.info(
                "Vesting %s completed",
                self.vesting_id,
                extra={"event": "vesting.completed", "grant_id": self.vesting_id},
            )
        return self.claimed_amount

    def pause(self) -> None:
        self.status = next_status(self.kind, self.status, "pause")

    def resume(self) -> None:
        self.status = next_status(self.kind, self.status, "resume")

    def cancel(self) -> None:
        self.status = next_status(self.kind, self.status, "cancel")

    def snapshot(self) -> "Vesting":
        return copy.deepcopy(self)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["vesting_kind"] = self.vesting_kind.value
        data["category"] = self.category.value
        data["status"] = self.status.value
        data["remaining_amount"] = self.remaining_amount()
        return data
