# Crypto Provider Module
"""
Capability provider consumed by key exchange and signatures:
- CryptoProvider interface with opaque KeyHandle keys
- CryptographyProvider backed by the `cryptography` package
- acquire_provider() bootstrap
"""

import logging

from .base import Algorithm, CryptoProvider, KeyHandle, KeyPair
from .software import CryptographyProvider


_LOGGER = logging.getLogger(__name__)


async def acquire_provider() -> CryptoProvider:
    """
    Acquire the crypto provider for this process.

    Returns:
        A CryptographyProvider after checking backend support

    Raises:
        ProviderUnavailableError: If the backend lacks a required algorithm
    """
    CryptographyProvider.probe()
    provider = CryptographyProvider()
    _LOGGER.debug("Acquired crypto provider: %s", provider.name)
    return provider


__all__ = [
    'Algorithm',
    'CryptoProvider',
    'CryptographyProvider',
    'KeyHandle',
    'KeyPair',
    'acquire_provider',
]
