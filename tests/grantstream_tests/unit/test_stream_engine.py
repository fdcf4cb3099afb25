import pytest

from grantstream.core.constants import GrantStatus, PaymentCategory
from grantstream.core.exceptions import StateError, ValidationError
from grantstream.grants.stream_engine import Stream


def make_stream(total_amount=1000, start_time=0, end_time=100, **kwargs) -> Stream:
    return Stream(
        stream_id="s1",
        treasury_id="t1",
        recipient="0xRecipient",
        authority="0xAuthority",
        mint="MINT",
        total_amount=total_amount,
        start_time=start_time,
        end_time=end_time,
        category=PaymentCategory.CONTRIBUTORS,
        **kwargs,
    )


class TestWithdrawableAmount:
    def test_zero_before_and_at_start(self):
        stream = make_stream(start_time=10, end_time=110)
        assert stream.withdrawable_amount(0) == 0
        assert stream.withdrawable_amount(10) == 0

    def test_linear_midpoint(self):
        stream = make_stream()
        assert stream.withdrawable_amount(50) == 500
        assert stream.withdrawable_amount(25) == 250

    def test_truncates_fractional_units(self):
        stream = make_stream(total_amount=10, end_time=3)
        assert stream.withdrawable_amount(1) == 3
        assert stream.withdrawable_amount(2) == 6

    def test_remainder_at_and_after_end(self):
        stream = make_stream(withdrawn_amount=300)
        assert stream.withdrawable_amount(100) == 700
        assert stream.withdrawable_amount(10_000) == 700

    def test_subtracts_withdrawn_and_saturates(self):
        stream = make_stream(withdrawn_amount=400)
        assert stream.withdrawable_amount(50) == 100
        assert stream.withdrawable_amount(30) == 0

    def test_paused_or_cancelled_reports_zero(self):
        assert make_stream(status=GrantStatus.PAUSED).withdrawable_amount(100) == 0
        assert make_stream(status=GrantStatus.CANCELLED).withdrawable_amount(100) == 0

    def test_completed_has_nothing_left(self):
        stream = make_stream(withdrawn_amount=1000, status=GrantStatus.COMPLETED)
        assert stream.withdrawable_amount(200) == 0


class TestWithdraw:
    def test_partial_then_full_withdrawal_completes(self):
        stream = make_stream()
        assert stream.withdraw(500, now=50) == 500
        assert stream.status is GrantStatus.ACTIVE
        assert stream.withdrawable_amount(100) == 500
        stream.withdraw(500, now=100)
        assert stream.withdrawn_amount == 1000
        assert stream.status is GrantStatus.COMPLETED

    def test_rejects_non_positive_amount(self):
        stream = make_stream()
        with pytest.raises(ValidationError) as exc_info:
            stream.withdraw(0, now=50)
        assert exc_info.value.code == "invalid_withdrawal_amount"

    def test_rejects_before_start(self):
        stream = make_stream(start_time=10, end_time=20)
        with pytest.raises(ValidationError) as exc_info:
            stream.withdraw(1, now=5)
        assert exc_info.value.code == "stream_not_started"

    def test_rejects_more_than_unlocked(self):
        stream = make_stream()
        with pytest.raises(ValidationError) as exc_info:
            stream.withdraw(501, now=50)
        assert exc_info.value.code == "insufficient_unlocked_tokens"
        assert exc_info.value.details["available"] == 500
        assert stream.withdrawn_amount == 0

    @pytest.mark.parametrize(
        "status, code",
        [
            (GrantStatus.PAUSED, "stream_paused"),
            (GrantStatus.CANCELLED, "stream_cancelled"),
            (GrantStatus.COMPLETED, "stream_completed"),
        ],
    )
    def test_rejects_non_active_status(self, status, code):
        stream = make_stream(status=status)
        with pytest.raises(StateError) as exc_info:
            stream.withdraw(1, now=50)
        assert exc_info.value.code == code


class TestStatusTransitions:
    def test_pause_resume_cycle(self):
        stream = make_stream()
        stream.pause()
        assert stream.status is GrantStatus.PAUSED
        stream.resume()
        assert stream.status is GrantStatus.ACTIVE

    def test_cancel_from_paused_is_terminal(self):
        stream = make_stream()
        stream.pause()
        stream.cancel()
        assert stream.status is GrantStatus.CANCELLED
        for action in (stream.pause, stream.resume, stream.cancel):
            with pytest.raises(StateError):
                action()

    def test_resume_requires_paused(self):
        with pytest.raises(StateError) as exc_info:
            make_stream().resume()
        assert exc_info.value.code == "invalid_status_transition"

    def test_completed_cannot_be_paused(self):
        stream = make_stream(withdrawn_amount=1000, status=GrantStatus.COMPLETED)
        with pytest.raises(StateError):
            stream.pause()


def test_read_helpers():
    stream = make_stream(withdrawn_amount=200)
    assert stream.duration() == 100
    assert stream.remaining_amount() == 800
    assert stream.is_active() is True
    assert stream.can_withdraw(10) is False
    assert stream.can_withdraw(50) is True
    assert stream.progress_bps(50) == 5000
    assert stream.progress_bps(100) == 10_000
    assert stream.grant_id == "s1"
    assert stream.custody == "custody:s1"


def test_to_dict_serializes_enums():
    data = make_stream().to_dict()
    assert data["status"] == "active"
    assert data["category"] == "contributors"
    assert data["remaining_amount"] == 1000
