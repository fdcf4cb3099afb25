"""
Transfer gateway boundary.

The engine never moves balances itself. It asks a :class:`TransferGateway`
to do so and treats a ``False`` return as a failed call. Releases are always
authorized by the grant (the owner of the custody account), never by the
recipient.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Protocol, runtime_checkable

from grantstream.core.identifiers import custody_account

logger = logging.getLogger(__name__)


@runtime_checkable
class TransferGateway(Protocol):
    def transfer(
        self, from_custody: str, to_party: str, authorizing_party: str, amount: int
    ) -> bool:
        """Move ``amount`` between accounts; return False if it did not happen."""
        ...


@dataclass(frozen=True)
class TransferRecord:
    from_account: str
    to_account: str
    authorizing_party: str
    amount: int


class InMemoryTransferGateway:
    """
    Balance book for a single asset, used by tests and local runs.

    A plain account may be debited only when it authorizes the transfer
    itself; a custody account only when its grant does.
    """

    def __init__(self) -> None:
        self.balances: Dict[str, int] = {}
        self.transfers: List[TransferRecord] = []

    def deposit(self, account: str, amount: int) -> None:
        if not isinstance(amount, int) or amount <= 0:
            raise ValueError("Deposit amount must be a positive integer.")
        self.balances[account] = self.balances.get(account, 0) + amount

    def balance_of(self, account: str) -> int:
        return self.balances.get(account, 0)

    def _is_authorized(self, from_account: str, authorizing_party: str) -> bool:
        return from_account in (authorizing_party, custody_account(authorizing_party))

    def transfer(
        self, from_custody: str, to_party: str, authorizing_party: str, amount: int
    ) -> bool:
        if amount <= 0:
            return False
        if not self._is_authorized(from_custody, authorizing_party):
            logger.warning(
                "Transfer rejected: %s may not debit %s",
                authorizing_party,
                from_custody,
                extra={"event": "transfer.unauthorized", "from": from_custody},
            )
            return False
        balance = self.balance_of(from_custody)
        if balance < amount:
            logger.warning(
                "Transfer rejected: insufficient balance in %s (%d < %d)",
                from_custody,
                balance,
                amount,
                extra={"event": "transfer.insufficient_balance", "from": from_custody},
            )
            return False

        self.balances[from_custody] = balance - amount
        self.balances[to_party] = self.balance_of(to_party) + amount
        self.transfers.append(TransferRecord(from_custody, to_party, authorizing_party, amount))
        logger.debug(
            "Transferred %d from %s to %s",
            amount,
            from_custody,
            to_party,
            extra={"event": "transfer.completed", "amount": amount},
        )
        return True
