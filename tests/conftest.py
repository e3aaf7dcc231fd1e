import pytest

from securelink import KeyExchange, KeyExchangeResponder, Signature


@pytest.fixture(autouse=True)
def reset_singletons():
    """Each test starts without shared instances."""
    for cls in (KeyExchange, KeyExchangeResponder, Signature):
        cls.reset_instance()
    yield
    for cls in (KeyExchange, KeyExchangeResponder, Signature):
        cls.reset_instance()
