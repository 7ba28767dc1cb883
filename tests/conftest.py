import pytest

from printstock.logging_config import reset_logging


@pytest.fixture(autouse=True)
def _isolated_logging():
    """CLI runs install a JSON handler; drop it so caplog keeps working."""
    yield
    reset_logging()
