from grantstream.core.constants import U32_MAX, U64_MAX
from grantstream.treasury.ledger import GovernanceSettings, Treasury


def make_treasury(**governance) -> Treasury:
    return Treasury(
        treasury_id="t1",
        authority="0xAuthority",
        mint="MINT",
        governance=GovernanceSettings(**governance),
    )


def test_defaults_are_unlimited_and_unpaused():
    treasury = make_treasury()
    assert treasury.is_active() is True
    assert treasury.governance.max_grant_amount == U64_MAX
    assert treasury.governance.max_total_allocation == U64_MAX
    assert treasury.validate_grant_amount(U64_MAX) is True
    assert treasury.validate_total_allocation(U64_MAX) is True


def test_paused_treasury_is_inactive():
    assert make_treasury(is_paused=True).is_active() is False


def test_grant_amount_limit_is_inclusive():
    treasury = make_treasury(max_grant_amount=500)
    assert treasury.validate_grant_amount(500) is True
    assert treasury.validate_grant_amount(501) is False


def test_total_allocation_limit():
    treasury = make_treasury(max_total_allocation=1000)
    treasury.record_allocation(600)
    assert treasury.validate_total_allocation(400) is True
    assert treasury.validate_total_allocation(401) is False


def test_overflowing_allocation_fails_validation():
    treasury = make_treasury()
    treasury.total_allocated = U64_MAX - 10
    assert treasury.validate_total_allocation(10) is True
    assert treasury.validate_total_allocation(11) is False
    assert treasury.total_allocated == U64_MAX - 10


def test_record_allocation_and_payment_saturate():
    treasury = make_treasury()
    treasury.total_grants = U32_MAX
    treasury.total_allocated = U64_MAX - 1
    treasury.total_paid = U64_MAX - 1
    treasury.record_allocation(100)
    treasury.record_payment(100)
    assert treasury.total_grants == U32_MAX
    assert treasury.total_allocated == U64_MAX
    assert treasury.total_paid == U64_MAX


def test_record_allocation_counts_grants():
    treasury = make_treasury()
    treasury.record_allocation(100)
    treasury.record_allocation(250)
    assert treasury.total_grants == 2
    assert treasury.total_allocated == 350
    assert treasury.total_paid == 0


def test_update_governance_keeps_unspecified_fields():
    treasury = make_treasury(max_grant_amount=500)
    treasury.update_governance(now=42, max_total_allocation=1000)
    assert treasury.governance.max_grant_amount == 500
    assert treasury.governance.max_total_allocation == 1000
    assert treasury.governance.is_paused is False
    assert treasury.governance.last_updated == 42

    treasury.update_governance(now=50, is_paused=True)
    assert treasury.is_active() is False
    assert treasury.governance.last_updated == 50


def test_snapshot_is_independent():
    treasury = make_treasury()
    copy = treasury.snapshot()
    copy.record_allocation(10)
    copy.governance.is_paused = True
    assert treasury.total_allocated == 0
    assert treasury.is_active() is True
    assert treasury.to_dict()["governance"]["is_paused"] is False
