"""
Treasury ledger: aggregate statistics and governance limits.

A :class:`Treasury` is a single-owner mutable record. The service passes it
explicitly to whatever needs it and serialises writers; nothing here locks.
Counters only ever grow and saturate instead of wrapping.
"""

from __future__ import annotations

import copy
import logging
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, Optional

from grantstream.core.arithmetic import saturating_add
from grantstream.core.constants import U32_MAX, U64_MAX

logger = logging.getLogger(__name__)


@dataclass
class GovernanceSettings:
    is_paused: bool = False
    max_grant_amount: int = U64_MAX
    max_total_allocation: int = U64_MAX
    last_updated: int = 0


@dataclass
class Treasury:
    treasury_id: str
    authority: str
    mint: str
    total_grants: int = 0
    total_allocated: int = 0
    total_paid: int = 0
    governance: GovernanceSettings = field(default_factory=GovernanceSettings)
    created_at: int = 0

    def is_active(self) -> bool:
        """True unless governance has paused the treasury."""
        return not self.governance.is_paused

    def validate_grant_amount(self, amount: int) -> bool:
        return amount <= self.governance.max_grant_amount

    def validate_total_allocation(self, amount: int) -> bool:
        """
        Check that allocating ``amount`` keeps the treasury within its cap.

        An amount whose sum would overflow 64 bits fails, even under an
        unlimited cap, rather than being clamped into range.
        """
        if self.total_allocated + amount > U64_MAX:
            return False
        return saturating_add(self.total_allocated, amount) <= self.governance.max_total_allocation

    def record_allocation(self, amount: int) -> None:
        self.total_grants = saturating_add(self.total_grants, 1, bound=U32_MAX)
        self.total_allocated = saturating_add(self.total_allocated, amount)

    def record_payment(self, amount: int) -> None:
        self.total_paid = saturating_add(self.total_paid, amount)

    def update_governance(
        self,
        now: int,
        is_paused: Optional[bool] = None,
        max_grant_amount: Optional[int] = None,
        max_total_allocation: Optional[int] = None,
    ) -> None:
        """Apply the supplied governance fields; unspecified fields are kept."""
        if is_paused is not None:
            self.governance.is_paused = is_paused
        if max_grant_amount is not None:
            self.governance.max_grant_amount = max_grant_amount
        if max_total_allocation is not None:
            self.governance.max_total_allocation = max_total_allocation
        self.governance.last_updated = now
        logger.debug(
            "Governance updated for treasury %s",
            self.treasury_id,
            extra={"event": "treasury.governance_updated", "treasury_id": self.treasury_id},
        )

    def snapshot(self) -> "Treasury":
        return copy.deepcopy(self)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
