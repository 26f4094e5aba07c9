import pytest

from caseload.encryption import reset_cipher


@pytest.fixture(autouse=True)
def fresh_cipher():
    """Each test builds its cipher from the settings it runs under."""
    reset_cipher()
    yield
    reset_cipher()
