import pytest
from common.fake_transport import FakeTransport

from elasto import Elasto


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def client(transport: FakeTransport) -> Elasto:
    return Elasto(host="http://localhost:9200", transport=transport)
