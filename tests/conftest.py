import pytest

from mcapfeed.models import Token
from tests.helpers import Clock, FakeClient


@pytest.fixture
def clock() -> Clock:
    return Clock()


@pytest.fixture
def client() -> FakeClient:
    return FakeClient()


@pytest.fixture
def token() -> Token:
    return Token(
        id="abc",
        symbol="ABC",
        name="Alpha Beta",
        color="#FF6384",
        platform="ethereum",
        contract="0xABC",
    )
