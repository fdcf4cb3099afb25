"""
GrantStream: treasury-funded token streams and vesting grants.

Exposes the treasury ledger, the stream and vesting engines, and the
:class:`GrantService` operation surface that ties them to a transfer gateway.
"""

from grantstream.core.constants import GrantStatus, PaymentCategory, VestingKind
from grantstream.core.exceptions import (
    ArithmeticOverflowError,
    AuthorizationError,
    GrantError,
    LimitError,
    NotFoundError,
    StateError,
    TransferError,
    ValidationError,
)
from grantstream.grants.stream_engine import Stream
from grantstream.grants.transfer_gateway import InMemoryTransferGateway, TransferGateway
from grantstream.grants.vesting_engine import Vesting
from grantstream.service import GrantService, OperationResult
from grantstream.treasury.ledger import GovernanceSettings, Treasury

__version__ = "0.1.0"

__all__ = [
    "GrantService",
    "OperationResult",
    "Treasury",
    "GovernanceSettings",
    "Stream",
    "Vesting",
    "TransferGateway",
    "InMemoryTransferGateway",
    "GrantStatus",
    "PaymentCategory",
    "VestingKind",
    "GrantError",
    "ValidationError",
    "StateError",
    "AuthorizationError",
    "LimitError",
    "NotFoundError",
    "TransferError",
    "ArithmeticOverflowError",
]
