import pytest

from scoreboard.tests.fakes import FakeHost, FakeScoreboardSession


@pytest.fixture
def device() -> FakeScoreboardSession:
    return FakeScoreboardSession(screen_on=True, sport=1)


@pytest.fixture
def host() -> FakeHost:
    return FakeHost()
