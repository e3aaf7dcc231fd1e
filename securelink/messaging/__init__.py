# Secure Messaging Module
"""
Point-to-point secure messaging primitives:
- X25519 ephemeral key exchange
- HKDF-SHA256 directional key derivation
- AES-256-GCM authenticated encryption envelope
- Ed25519 signatures with server key rotation

Both components expose a lazily created shared instance through
get_instance().
"""

from .lifecycle import LazySingleton
from .key_exchange import (
    KeyExchange,
    KeyExchangeResponder,
    KeyExchangeState,
)
from .signature import (
    Signature,
    SignatureState,
)

__all__ = [
    'LazySingleton',
    'KeyExchange',
    'KeyExchangeResponder',
    'KeyExchangeState',
    'Signature',
    'SignatureState',
]
