import pytest

from tests.fakes import make_plan


@pytest.fixture
def valid_plan():
    return make_plan()
