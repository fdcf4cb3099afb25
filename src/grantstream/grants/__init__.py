"""Per-grant release schedules and the transfer boundary they settle through."""

from .stream_engine import Stream
from .transfer_gateway import InMemoryTransferGateway, TransferGateway, TransferRecord
from .vesting_engine import Vesting

__all__ = [
    "Stream",
    "Vesting",
    "TransferGateway",
    "InMemoryTransferGateway",
    "TransferRecord",
]
