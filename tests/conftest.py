import pytest

from tests.fakes import FakeNetworkProxy, make_connection


@pytest.fixture
def network_proxy():
    return FakeNetworkProxy()


@pytest.fixture
def connection(network_proxy):
    return make_connection(network_proxy)
