import pytest

from grantstream.core.config import GrantConfig
from grantstream.grants.transfer_gateway import InMemoryTransferGateway
from grantstream.service import GrantService

from grantstream_tests.fixtures import AUTHORITY, AUTHORITY_FUNDS, MINT, ManualClock


@pytest.fixture
def clock():
    return ManualClock(start_time=0)


@pytest.fixture
def gateway():
    gw = InMemoryTransferGateway()
    gw.deposit(AUTHORITY, AUTHORITY_FUNDS)
    return gw


@pytest.fixture
def service(gateway, clock):
    return GrantService(gateway, config=GrantConfig(), time_provider=clock.now)


@pytest.fixture
def treasury(service):
    return service.init_treasury(AUTHORITY, MINT, now=0)
