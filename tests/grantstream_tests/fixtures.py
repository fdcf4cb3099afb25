"""Shared constants and helpers for the grantstream test suite."""

AUTHORITY = "0xTreasuryAuthority"
RECIPIENT = "0xRecipient"
OTHER_RECIPIENT = "0xOtherRecipient"
MINT = "MINT-GRANT"
AUTHORITY_FUNDS = 10**15


class ManualClock:
    def __init__(self, start_time: int):
        self.current_time = start_time

    def now(self) -> int:
        return self.current_time

    def advance(self, seconds: int):
        self.current_time += seconds
