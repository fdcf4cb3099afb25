import pytest

from grantstream.core.constants import GrantKind, GrantStatus, VestingKind
from grantstream.core.exceptions import LimitError, StateError, ValidationError
from grantstream.grants.validation import (
    next_status,
    require_active,
    validate_creation,
    validate_schedule,
)
from grantstream.treasury.ledger import GovernanceSettings, Treasury


@pytest.fixture
def ledger():
    return Treasury(treasury_id="t1", authority="0xAuthority", mint="MINT")


def create(ledger, **overrides):
    params = dict(
        treasury=ledger,
        kind=GrantKind.STREAM,
        total_amount=1000,
        start_time=0,
        end_time=100,
        description="payroll",
    )
    params.update(overrides)
    validate_creation(**params)


def test_valid_request_passes(ledger):
    create(ledger)
    create(ledger, kind=GrantKind.VESTING, vesting_kind=VestingKind.CLIFF, cliff_time=50)


@pytest.mark.parametrize(
    "overrides, code",
    [
        ({"total_amount": 0}, "invalid_total_amount"),
        ({"start_time": 100, "end_time": 100}, "invalid_stream_timing"),
        ({"start_time": 200, "end_time": 100}, "invalid_stream_timing"),
        ({"description": "x" * 65}, "description_too_long"),
        ({"mint": "OTHER"}, "invalid_mint"),
    ],
)
def test_request_errors(ledger, overrides, code):
    with pytest.raises(ValidationError) as exc_info:
        create(ledger, **overrides)
    assert exc_info.value.code == code


def test_description_at_limit_is_accepted(ledger):
    create(ledger, description="x" * 64)


@pytest.mark.parametrize("cliff_time", [-1, 101, None])
def test_cliff_must_lie_within_schedule(cliff_time):
    with pytest.raises(ValidationError) as exc_info:
        validate_schedule(GrantKind.VESTING, 0, 100, VestingKind.CLIFF, cliff_time)
    assert exc_info.value.code == "invalid_cliff_timing"


def test_cliff_bounds_are_inclusive():
    validate_schedule(GrantKind.VESTING, 0, 100, VestingKind.CLIFF, 0)
    validate_schedule(GrantKind.VESTING, 0, 100, VestingKind.CLIFF, 100)


def test_linear_vesting_ignores_cliff():
    validate_schedule(GrantKind.VESTING, 0, 100, VestingKind.LINEAR, 500)


def test_vesting_timing_code():
    with pytest.raises(ValidationError) as exc_info:
        validate_schedule(GrantKind.VESTING, 10, 5, VestingKind.LINEAR, 0)
    assert exc_info.value.code == "invalid_vesting_timing"


@pytest.mark.parametrize(
    "governance, code",
    [
        (GovernanceSettings(is_paused=True), "treasury_paused"),
        (GovernanceSettings(max_grant_amount=999), "grant_amount_exceeds_limit"),
        (GovernanceSettings(max_total_allocation=999), "total_allocation_exceeds_limit"),
    ],
)
def test_limit_errors(ledger, governance, code):
    ledger.governance = governance
    with pytest.raises(LimitError) as exc_info:
        create(ledger)
    assert exc_info.value.code == code
    assert exc_info.value.recoverable is True


def test_request_errors_take_precedence_over_limits(ledger):
    ledger.governance = GovernanceSettings(is_paused=True)
    with pytest.raises(ValidationError):
        create(ledger, total_amount=0)


def test_require_active():
    require_active(GrantKind.STREAM, GrantStatus.ACTIVE)
    with pytest.raises(StateError) as exc_info:
        require_active(GrantKind.VESTING, GrantStatus.CANCELLED)
    assert exc_info.value.code == "vesting_cancelled"


@pytest.mark.parametrize(
    "current, action, expected",
    [
        (GrantStatus.ACTIVE, "pause", GrantStatus.PAUSED),
        (GrantStatus.PAUSED, "resume", GrantStatus.ACTIVE),
        (GrantStatus.ACTIVE, "cancel", GrantStatus.CANCELLED),
        (GrantStatus.PAUSED, "cancel", GrantStatus.CANCELLED),
    ],
)
def test_allowed_transitions(current, action, expected):
    assert next_status(GrantKind.STREAM, current, action) is expected


@pytest.mark.parametrize(
    "current, action",
    [
        (GrantStatus.PAUSED, "pause"),
        (GrantStatus.ACTIVE, "resume"),
        (GrantStatus.COMPLETED, "cancel"),
        (GrantStatus.CANCELLED, "cancel"),
        (GrantStatus.COMPLETED, "resume"),
    ],
)
def test_rejected_transitions(current, action):
    with pytest.raises(StateError):
        next_status(GrantKind.VESTING, current, action)
