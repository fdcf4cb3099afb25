"""
GrantService: the operation surface over treasuries, streams and vesting grants.

Every public mutating call is one unit of work. It validates, applies its
changes to private copies of the affected records, asks the transfer gateway
to move funds and only then stores the copies. Any failure along the way
leaves every stored record exactly as it was.

The service assumes one writer at a time per treasury and does no locking
of its own.
"""

from __future__ import annotations

import logging
import time
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Callable, Dict, Iterator, Optional, Union

from grantstream.core import metrics
from grantstream.core.config import GrantConfig, load_config
from grantstream.core.constants import (
    STREAM_SEED,
    VESTING_SEED,
    GrantKind,
    PaymentCategory,
    VestingKind,
)
from grantstream.core.exceptions import (
    AuthorizationError,
    GrantError,
    NotFoundError,
    StateError,
    TransferError,
)
from grantstream.core.identifiers import derive_id, derive_treasury_id
from grantstream.core.schemas import (
    CreateStreamInput,
    CreateVestingInput,
    GovernanceUpdateInput,
    InitTreasuryInput,
    ReleaseInput,
    StatusChangeInput,
    parse_request,
)
from grantstream.grants.stream_engine import Stream
from grantstream.grants.transfer_gateway import TransferGateway
from grantstream.grants.validation import require_treasury_active, validate_creation
from grantstream.grants.vesting_engine import Vesting
from grantstream.treasury.ledger import GovernanceSettings, Treasury

logger = logging.getLogger(__name__)

Grant = Union[Stream, Vesting]


@dataclass
class OperationResult:
    """Snapshots of the records a call committed."""

    grant: Grant
    treasury: Treasury
    amount: int


class GrantService:
    def __init__(
        self,
        gateway: TransferGateway,
        config: Optional[GrantConfig] = None,
        time_provider: Optional[Callable[[], int]] = None,
    ):
        self.gateway = gateway
        self.config = config or load_config()
        self._time_provider = time_provider or (lambda: int(time.time()))
        self.treasuries: Dict[str, Treasury] = {}
        self.streams: Dict[str, Stream] = {}
        self.vestings: Dict[str, Vesting] = {}

    def _current_time(self) -> int:
        timestamp = self._time_provider()
        try:
            return int(timestamp)
        except (TypeError, ValueError) as exc:
            raise ValueError("time_provider must return an integer timestamp") from exc

    def _resolve_now(self, now: Optional[int]) -> int:
        return self._current_time() if now is None else now

    @contextmanager
    def _operation(self, name: str) -> Iterator[None]:
        try:
            yield
        except GrantError as exc:
            metrics.record_rejection(name, type(exc).__name__, enabled=self.config.metrics_enabled)
            logger.warning(
                "%s rejected: %s",
                name,
                exc.message,
                extra={"event": f"{name}.rejected", "code": exc.code},
            )
            raise

    # ==================== Lookups ====================

    def _load_treasury(self, treasury_id: str) -> Treasury:
        treasury = self.treasuries.get(treasury_id)
        if treasury is None:
            raise NotFoundError(f"Treasury {treasury_id} not found", details={"treasury_id": treasury_id})
        return treasury

    def _load_stream(self, stream_id: str) -> Stream:
        stream = self.streams.get(stream_id)
        if stream is None:
            raise NotFoundError(f"Stream {stream_id} not found", details={"stream_id": stream_id})
        return stream

    def _load_vesting(self, vesting_id: str) -> Vesting:
        vesting = self.vestings.get(vesting_id)
        if vesting is None:
            raise NotFoundError(f"Vesting {vesting_id} not found", details={"vesting_id": vesting_id})
        return vesting

    def get_treasury(self, treasury_id: str) -> Treasury:
        return self._load_treasury(treasury_id).snapshot()

    def get_stream(self, stream_id: str) -> Stream:
        return self._load_stream(stream_id).snapshot()

    def get_vesting(self, vesting_id: str) -> Vesting:
        return self._load_vesting(vesting_id).snapshot()

    def find_stream(self, treasury_id: str, recipient: str) -> Optional[Stream]:
        stream = self.streams.get(derive_id(STREAM_SEED, treasury_id, recipient))
        return stream.snapshot() if stream else None

    def find_vesting(self, treasury_id: str, recipient: str) -> Optional[Vesting]:
        vesting = self.vestings.get(derive_id(VESTING_SEED, treasury_id, recipient))
        return vesting.snapshot() if vesting else None

    def withdrawable_amount(self, stream_id: str, now: Optional[int] = None) -> int:
        return self._load_stream(stream_id).withdrawable_amount(self._resolve_now(now))

    def claimable_amount(self, vesting_id: str, now: Optional[int] = None) -> int:
        return self._load_vesting(vesting_id).claimable_amount(self._resolve_now(now))

    # ==================== Authorization ====================

    @staticmethod
    def _require_authority(treasury: Treasury, caller: str, action: str) -> None:
        if caller != treasury.authority:
            raise AuthorizationError(
                f"Unauthorized: only the treasury authority can {action}",
                code="unauthorized_authority",
                details={"caller": caller, "action": action},
            )

    @staticmethod
    def _require_recipient(grant: Grant, caller: str) -> None:
        if caller != grant.recipient:
            raise AuthorizationError(
                f"Unauthorized: only the recipient can release funds from this {grant.kind.value}",
                code=f"unauthorized_{grant.kind.value}_release",
                details={"caller": caller, "grant_id": grant.grant_id},
            )

    @staticmethod
    def _require_grant_authority(grant: Grant, caller: str) -> None:
        if caller != grant.authority:
            raise AuthorizationError(
                f"Unauthorized: only the creating authority can change this {grant.kind.value}",
                code="unauthorized_status_change",
                details={"caller": caller, "grant_id": grant.grant_id},
            )

    def _transfer(self, from_account: str, to_account: str, authorizing_party: str, amount: int) -> None:
        if not self.gateway.transfer(from_account, to_account, authorizing_party, amount):
            raise TransferError(
                "Transfer gateway rejected the transfer",
                details={"from": from_account, "to": to_account, "amount": amount},
            )

    # ==================== Treasury ====================

    def init_treasury(self, authority: str, mint: str, now: Optional[int] = None) -> Treasury:
        """Create the treasury governed by ``authority`` with default governance."""
        with self._operation("init_treasury"):
            request = parse_request(
                InitTreasuryInput, authority=authority, mint=mint, now=self._resolve_now(now)
            )
            treasury_id = derive_treasury_id(request.authority)
            if treasury_id in self.treasuries:
                raise StateError(
                    "Treasury already exists for this authority",
                    code="treasury_already_exists",
                    details={"treasury_id": treasury_id},
                )

            treasury = Treasury(
                treasury_id=treasury_id,
                authority=request.authority,
                mint=request.mint,
                governance=GovernanceSettings(
                    is_paused=False,
                    max_grant_amount=self.config.default_max_grant_amount,
                    max_total_allocation=self.config.default_max_total_allocation,
                    last_updated=request.now,
                ),
                created_at=request.now,
            )
            self.treasuries[treasury_id] = treasury
            logger.info(
                "Treasury %s initialized for %s",
                treasury_id,
                request.authority,
                extra={"event": "treasury.initialized", "treasury_id": treasury_id, "mint": request.mint},
            )
            return treasury.snapshot()

    def set_governance(
        self,
        caller: str,
        treasury_id: str,
        is_paused: Optional[bool] = None,
        max_grant_amount: Optional[int] = None,
        max_total_allocation: Optional[int] = None,
        now: Optional[int] = None,
    ) -> Treasury:
        """Update pause flag and limits; authority only."""
        with self._operation("set_governance"):
            request = parse_request(
                GovernanceUpdateInput,
                caller=caller,
                treasury_id=treasury_id,
                is_paused=is_paused,
                max_grant_amount=max_grant_amount,
                max_total_allocation=max_total_allocation,
                now=self._resolve_now(now),
            )
            treasury = self._load_treasury(request.treasury_id)
            self._require_authority(treasury, request.caller, "modify governance")

            updated = treasury.snapshot()
            updated.update_governance(
                request.now,
                is_paused=request.is_paused,
                max_grant_amount=request.max_grant_amount,
                max_total_allocation=request.max_total_allocation,
            )
            self.treasuries[updated.treasury_id] = updated
            logger.info(
                "Governance updated for treasury %s",
                updated.treasury_id,
                extra={
                    "event": "treasury.governance_updated",
                    "treasury_id": updated.treasury_id,
                    "is_paused": updated.governance.is_paused,
                    "max_grant_amount": updated.governance.max_grant_amount,
                    "max_total_allocation": updated.governance.max_total_allocation,
                },
            )
            return updated.snapshot()

    # ==================== Streams ====================

    def create_stream(
        self,
        caller: str,
        treasury_id: str,
        recipient: str,
        start_time: int,
        end_time: int,
        total_amount: int,
        category: Union[PaymentCategory, str] = PaymentCategory.OTHER,
        description: str = "",
        mint: Optional[str] = None,
        now: Optional[int] = None,
    ) -> OperationResult:
        """Create a stream and move ``total_amount`` from the caller into its custody."""
        with self._operation("create_stream"):
            request = parse_request(
                CreateStreamInput,
                caller=caller,
                treasury_id=treasury_id,
                recipient=recipient,
                start_time=start_time,
                end_time=end_time,
                total_amount=total_amount,
                category=category,
                description=description,
                mint=mint,
                now=self._resolve_now(now),
            )
            treasury = self._load_treasury(request.treasury_id)
            self._require_authority(treasury, request.caller, "create streams")

            stream_id = derive_id(STREAM_SEED, treasury.treasury_id, request.recipient)
            if stream_id in self.streams:
                raise StateError(
                    "Stream already exists for this recipient",
                    code="stream_already_exists",
                    details={"stream_id": stream_id},
                )
            validate_creation(
                treasury,
                GrantKind.STREAM,
                request.total_amount,
                request.start_time,
                request.end_time,
                request.description,
                mint=request.mint,
            )

            stream = Stream(
                stream_id=stream_id,
                treasury_id=treasury.treasury_id,
                recipient=request.recipient,
                authority=request.caller,
                mint=treasury.mint,
                total_amount=request.total_amount,
                start_time=request.start_time,
                end_time=request.end_time,
                category=request.category,
                description=request.description,
                created_at=request.now,
            )
            updated_treasury = treasury.snapshot()
            updated_treasury.record_allocation(stream.total_amount)
            self._transfer(request.caller, stream.custody, request.caller, stream.total_amount)

            self.streams[stream_id] = stream
            self.treasuries[updated_treasury.treasury_id] = updated_treasury
            metrics.record_grant_created(
                GrantKind.STREAM.value, stream.total_amount, enabled=self.config.metrics_enabled
            )
            logger.info(
                "Stream %s created: %d to %s over %d seconds",
                stream_id,
                stream.total_amount,
                stream.recipient,
                stream.duration(),
                extra={
                    "event": "stream.created",
                    "grant_id": stream_id,
                    "category": stream.category.value,
                    "total_allocated": updated_treasury.total_allocated,
                },
            )
            return OperationResult(stream.snapshot(), updated_treasury.snapshot(), stream.total_amount)

    def withdraw_stream(
        self, caller: str, stream_id: str, amount: int, now: Optional[int] = None
    ) -> OperationResult:
        """Release ``amount`` of the unlocked balance to the stream recipient."""
        with self._operation("withdraw_stream"):
            request = parse_request(
                ReleaseInput,
                caller=caller,
                grant_id=stream_id,
                amount=amount,
                now=self._resolve_now(now),
            )
            stream = self._load_stream(request.grant_id)
            self._require_recipient(stream, request.caller)
            treasury = self._load_treasury(stream.treasury_id)
            require_treasury_active(treasury)

            updated_stream = stream.snapshot()
            updated_stream.withdraw(request.amount, request.now)
            updated_treasury = treasury.snapshot()
            updated_treasury.record_payment(request.amount)
            self._transfer(updated_stream.custody, updated_stream.recipient, updated_stream.stream_id, request.amount)

            self.streams[updated_stream.stream_id] = updated_stream
            self.treasuries[updated_treasury.treasury_id] = updated_treasury
            metrics.record_release(
                GrantKind.STREAM.value,
                request.amount,
                updated_treasury.treasury_id,
                updated_treasury.total_paid,
                enabled=self.config.metrics_enabled,
            )
            logger.info(
                "Stream %s withdrawal of %d (total withdrawn %d, remaining %d)",
                updated_stream.stream_id,
                request.amount,
                updated_stream.withdrawn_amount,
                updated_stream.remaining_amount(),
                extra={
                    "event": "stream.withdrawn",
                    "grant_id": updated_stream.stream_id,
                    "status": updated_stream.status.value,
                    "total_paid": updated_treasury.total_paid,
                },
            )
            return OperationResult(updated_stream.snapshot(), updated_treasury.snapshot(), request.amount)

    def _change_status(
        self,
        operation: str,
        store: Dict[str, Grant],
        loader: Callable[[str], Grant],
        caller: str,
        grant_id: str,
        action: str,
    ) -> Grant:
        """Apply pause/resume/cancel; only the creating authority may do so."""
        with self._operation(operation):
            request = parse_request(StatusChangeInput, caller=caller, grant_id=grant_id)
            grant = loader(request.grant_id)
            self._require_grant_authority(grant, request.caller)

            updated = grant.snapshot()
            getattr(updated, action)()
            store[updated.grant_id] = updated
            logger.info(
                "%s %s is now %s",
                updated.kind.value.capitalize(),
                updated.grant_id,
                updated.status.value,
                extra={"event": f"{updated.kind.value}.{action}", "grant_id": updated.grant_id},
            )
            return updated.snapshot()

    def pause_stream(self, caller: str, stream_id: str) -> Stream:
        return self._change_status("pause_stream", self.streams, self._load_stream, caller, stream_id, "pause")

    def resume_stream(self, caller: str, stream_id: str) -> Stream:
        return self._change_status("resume_stream", self.streams, self._load_stream, caller, stream_id, "resume")

    def cancel_stream(self, caller: str, stream_id: str) -> Stream:
        return self._change_status("cancel_stream", self.streams, self._load_stream, caller, stream_id, "cancel")

    # ==================== Vesting ====================

    def create_vesting(
        self,
        caller: str,
        treasury_id: str,
        recipient: str,
        kind: Union[VestingKind, str],
        total_amount: int,
        start_time: int,
        end_time: int,
        cliff_time: int = 0,
        category: Union[PaymentCategory, str] = PaymentCategory.OTHER,
        description: str = "",
        mint: Optional[str] = None,
        now: Optional[int] = None,
    ) -> OperationResult:
        """Create a linear or cliff vesting grant and fund its custody."""
        with self._operation("create_vesting"):
            request = parse_request(
                CreateVestingInput,
                caller=caller,
                treasury_id=treasury_id,
                recipient=recipient,
                kind=kind,
                total_amount=total_amount,
                start_time=start_time,
                end_time=end_time,
                cliff_time=cliff_time,
                category=category,
                description=description,
                mint=mint,
                now=self._resolve_now(now),
            )
            treasury = self._load_treasury(request.treasury_id)
            self._require_authority(treasury, request.caller, "create vesting")

            vesting_id = derive_id(VESTING_SEED, treasury.treasury_id, request.recipient)
            if vesting_id in self.vestings:
                raise StateError(
                    "Vesting already exists for this recipient",
                    code="vesting_already_exists",
                    details={"vesting_id": vesting_id},
                )
            validate_creation(
                treasury,
                GrantKind.VESTING,
                request.total_amount,
                request.start_time,
                request.end_time,
                request.description,
                vesting_kind=request.kind,
                cliff_time=request.cliff_time,
                mint=request.mint,
            )

            vesting = Vesting(
                vesting_id=vesting_id,
                treasury_id=treasury.treasury_id,
                recipient=request.recipient,
                authority=request.caller,
                mint=treasury.mint,
                vesting_kind=request.kind,
                total_amount=request.total_amount,
                start_time=request.start_time,
                end_time=request.end_time,
                cliff_time=request.cliff_time,
                category=request.category,
                description=request.description,
                created_at=request.now,
            )
            updated_treasury = treasury.snapshot()
            updated_treasury.record_allocation(vesting.total_amount)
            self._transfer(request.caller, vesting.custody, request.caller, vesting.total_amount)

            self.vestings[vesting_id] = vesting
            self.treasuries[updated_treasury.treasury_id] = updated_treasury
            metrics.record_grant_created(
                GrantKind.VESTING.value, vesting.total_amount, enabled=self.config.metrics_enabled
            )
            logger.info(
                "Vesting %s created: %d to %s (%s)",
                vesting_id,
                vesting.total_amount,
                vesting.recipient,
                vesting.vesting_kind.value,
                extra={
                    "event": "vesting.created",
                    "grant_id": vesting_id,
                    "category": vesting.category.value,
                    "total_allocated": updated_treasury.total_allocated,
                },
            )
            return OperationResult(vesting.snapshot(), updated_treasury.snapshot(), vesting.total_amount)

    def claim_vesting(
        self, caller: str, vesting_id: str, amount: int, now: Optional[int] = None
    ) -> OperationResult:
        """Release ``amount`` of the vested balance to the recipient."""
        with self._operation("claim_vesting"):
            request = parse_request(
                ReleaseInput,
                caller=caller,
                grant_id=vesting_id,
                amount=amount,
                now=self._resolve_now(now),
            )
            vesting = self._load_vesting(request.grant_id)
            self._require_recipient(vesting, request.caller)
            treasury = self._load_treasury(vesting.treasury_id)
            require_treasury_active(treasury)

            updated_vesting = vesting.snapshot()
            updated_vesting.claim(request.amount, request.now)
            updated_treasury = treasury.snapshot()
            updated_treasury.record_payment(request.amount)
            self._transfer(updated_vesting.custody, updated_vesting.recipient, updated_vesting.vesting_id, request.amount)

            self.vestings[updated_vesting.vesting_id] = updated_vesting
            self.treasuries[updated_treasury.treasury_id] = updated_treasury
            metrics.record_release(
                GrantKind.VESTING.value,
                request.amount,
                updated_treasury.treasury_id,
                updated_treasury.total_paid,
                enabled=self.config.metrics_enabled,
            )
            logger.info(
                "Vesting %s claim of %d (total claimed %d, remaining %d)",
                updated_vesting.vesting_id,
                request.amount,
                updated_vesting.claimed_amount,
                updated_vesting.remaining_amount(),
                extra={
                    "event": "vesting.claimed",
                    "grant_id": updated_vesting.vesting_id,
                    "status": updated_vesting.status.value,
                    "total_paid": updated_treasury.total_paid,
                },
            )
            return OperationResult(updated_vesting.snapshot(), updated_treasury.snapshot(), request.amount)

    def pause_vesting(self, caller: str, vesting_id: str) -> Vesting:
        return self._change_status("pause_vesting", self.vestings, self._load_vesting, caller, vesting_id, "pause")

    def resume_vesting(self, caller: str, vesting_id: str) -> Vesting:
        return self._change_status("resume_vesting", self.vestings, self._load_vesting, caller, vesting_id, "resume")

    def cancel_vesting(self, caller: str, vesting_id: str) -> Vesting:
        return self._change_status("cancel_vesting", self.vestings, self._load_vesting, caller, vesting_id, "cancel")
