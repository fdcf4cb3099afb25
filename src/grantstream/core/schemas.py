"""
Request models for the operation surface.

These models check shapes and integer widths only. Business rules (positive
amounts, start before end, cliff placement, description length) live in
``grantstream.grants.validation`` so they can report precise error codes.
"""

from __future__ import annotations

from typing import Any, Optional, Type, TypeVar

from pydantic import BaseModel, ConfigDict, Field, StrictBool
from pydantic import ValidationError as PydanticValidationError

from grantstream.core.constants import I64_MAX, I64_MIN, U64_MAX, PaymentCategory, VestingKind
from grantstream.core.exceptions import ValidationError

ModelT = TypeVar("ModelT", bound=BaseModel)

# Field name -> domain error code for type/enum failures
_FIELD_CODES = {
    "category": "invalid_payment_category",
    "kind": "invalid_vesting_kind",
    "mint": "invalid_mint",
}


class _Request(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)


def _amount(**kwargs: Any) -> Any:
    return Field(strict=True, ge=0, le=U64_MAX, **kwargs)


def _timestamp(**kwargs: Any) -> Any:
    return Field(strict=True, ge=I64_MIN, le=I64_MAX, **kwargs)


class InitTreasuryInput(_Request):
    authority: str = Field(min_length=1)
    mint: str = Field(min_length=1)
    now: int = _timestamp()


class CreateStreamInput(_Request):
    caller: str = Field(min_length=1)
    treasury_id: str = Field(min_length=1)
    recipient: str = Field(min_length=1)
    start_time: int = _timestamp()
    end_time: int = _timestamp()
    total_amount: int = _amount()
    category: PaymentCategory = PaymentCategory.OTHER
    description: str = ""
    mint: Optional[str] = None
    now: int = _timestamp()


class CreateVestingInput(_Request):
    caller: str = Field(min_length=1)
    treasury_id: str = Field(min_length=1)
    recipient: str = Field(min_length=1)
    kind: VestingKind
    total_amount: int = _amount()
    start_time: int = _timestamp()
    end_time: int = _timestamp()
    cliff_time: int = _timestamp(default=0)
    category: PaymentCategory = PaymentCategory.OTHER
    description: str = ""
    mint: Optional[str] = None
    now: int = _timestamp()


class ReleaseInput(_Request):
    """Withdrawal from a stream or claim from a vesting grant."""

    caller: str = Field(min_length=1)
    grant_id: str = Field(min_length=1)
    amount: int = _amount()
    now: int = _timestamp()


class StatusChangeInput(_Request):
    caller: str = Field(min_length=1)
    grant_id: str = Field(min_length=1)


class GovernanceUpdateInput(_Request):
    caller: str = Field(min_length=1)
    treasury_id: str = Field(min_length=1)
    is_paused: Optional[StrictBool] = None
    max_grant_amount: Optional[int] = _amount(default=None)
    max_total_allocation: Optional[int] = _amount(default=None)
    now: int = _timestamp()


def parse_request(model: Type[ModelT], **fields: Any) -> ModelT:
    """Validate ``fields`` against ``model``, raising the domain ValidationError."""
    try:
        return model(**fields)
    except PydanticValidationError as exc:
        errors = exc.errors(include_url=False, include_context=False)
        first_field = str(errors[0]["loc"][0]) if errors and errors[0]["loc"] else ""
        raise ValidationError(
            f"Invalid {model.__name__}: {errors[0]['msg'] if errors else exc}",
            code=_FIELD_CODES.get(first_field, "invalid_request"),
            details={"errors": [{"loc": list(e["loc"]), "msg": e["msg"]} for e in errors]},
        ) from exc
