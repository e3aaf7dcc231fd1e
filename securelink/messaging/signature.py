"""
Signature Module

Ed25519 data authentication with server key rotation:
- Local non-extractable Ed25519 key pair, generated once per instance
- One trusted server verification key, replaced on rotation
- One-off verification against an arbitrary public key

verify() and verify_with_key() return False for a signature that does
not verify; they raise only when called before their prerequisites.
"""

import logging
from enum import Enum, auto
from typing import Optional, Union

from ..codec import base64_to_byte_array, byte_array_to_base64, encode_data
from ..const import ED25519, RAW
from ..exceptions import NotInitializedError, ServerKeyNotInitializedError
from ..provider import CryptoProvider, KeyHandle, KeyPair
from .lifecycle import LazySingleton


_LOGGER = logging.getLogger(__name__)


def _raw_bytes(value: bytes, name: str) -> bytes:
    if not isinstance(value, (bytes, bytearray, memoryview)):
        raise TypeError(f"{name} must be bytes-like, got {type(value).__name__}")
    return bytes(value)


class SignatureState(Enum):
    """Signature component states."""
    UNINITIALIZED = auto()
    READY = auto()
    SERVER_KEY_SET = auto()


class Signature(LazySingleton):
    """
    Ed25519 signing and server signature verification.

    Example:
        sig = await Signature.get_instance()
        await sig.initialize_server_key(server_pub_b64)
        ok = await sig.verify(signature, b"payload")

        # later, when the server rotates its key
        await sig.update_server_key(new_server_pub_b64)
    """

    def __init__(self, provider: Optional[CryptoProvider] = None):
        super().__init__(provider)
        self._keypair: Optional[KeyPair] = None
        self._server_public_key: Optional[KeyHandle] = None

    async def _setup(self) -> None:
        # Generated once; never rotated
        self._keypair = await self._require_provider().generate_key(
            ED25519, False, ['sign', 'verify']
        )

    @property
    def state(self) -> SignatureState:
        """Current component state."""
        if self._provider is None or self._keypair is None:
            return SignatureState.UNINITIALIZED
        if self._server_public_key is None:
            return SignatureState.READY
        return SignatureState.SERVER_KEY_SET

    @property
    def has_server_key(self) -> bool:
        """Check if a server verification key is set."""
        return self._server_public_key is not None

    def _require_keypair(self) -> KeyPair:
        if self._provider is None or self._keypair is None:
            raise NotInitializedError("Signature not initialized")
        return self._keypair

    async def _import_verify_key(self, raw: bytes) -> KeyHandle:
        return await self._require_provider().import_key(
            RAW, raw, ED25519, False, ['verify']
        )

    async def initialize_server_key(self, server_public_key_b64: str) -> None:
        """
        Set the trusted server verification key.

        Replaces any previous key. The old key stays in place if the
        new one fails to import.

        Args:
            server_public_key_b64: Server's raw Ed25519 public key, base64

        Raises:
            NotInitializedError: If the crypto provider is absent
            DecodeError: If the text is not valid base64
        """
        self._require_provider()
        key = await self._import_verify_key(base64_to_byte_array(server_public_key_b64))
        rotated = self._server_public_key is not None
        self._server_public_key = key
        _LOGGER.debug("Server verification key %s", "rotated" if rotated else "set")

    async def update_server_key(self, server_public_key_b64: str) -> None:
        """Rotate the server verification key."""
        await self.initialize_server_key(server_public_key_b64)

    async def get_public_key(self) -> str:
        """
        Get our public key to share with others.

        Returns:
            Base64 raw Ed25519 public key

        Raises:
            NotInitializedError: If no local key pair exists
        """
        keypair = self._require_keypair()
        public_bytes = await self._provider.export_key(RAW, keypair.public_key)
        return byte_array_to_base64(public_bytes)

    async def sign(self, data: Union[str, bytes]) -> bytes:
        """
        Sign data with our private key.

        Args:
            data: Text (UTF-8 encoded) or bytes

        Returns:
            64-byte Ed25519 signature

        Raises:
            NotInitializedError: If no local key pair exists
            TypeError: If data is neither text nor bytes-like
        """
        keypair = self._require_keypair()
        return await self._provider.sign(ED25519, keypair.private_key, encode_data(data))

    async def verify(self, signature: bytes, data: Union[str, bytes]) -> bool:
        """
        Verify a server signature with the stored server key.

        Args:
            signature: Signature bytes
            data: Original data that was signed

        Returns:
            True if the signature is valid, False otherwise

        Raises:
            ServerKeyNotInitializedError: If no server key has been set
            TypeError: If signature or data has an unsupported type
        """
        if self._provider is None or self._server_public_key is None:
            raise ServerKeyNotInitializedError(
                "Server public key not initialized. Call initialize_server_key() first."
            )
        return await self._provider.verify(
            ED25519, self._server_public_key,
            _raw_bytes(signature, "signature"), encode_data(data)
        )

    async def verify_with_key(self, public_key: bytes, signature: bytes,
                              data: Union[str, bytes]) -> bool:
        """
        Verify a signature with a one-off public key.

        The stored server key is not touched.

        Args:
            public_key: Raw Ed25519 public key bytes
            signature: Signature bytes
            data: Original data that was signed

        Returns:
            True if the signature is valid, False otherwise

        Raises:
            NotInitializedError: If the crypto provider is absent
            TypeError: If an argument has an unsupported type
        """
        provider = self._require_provider()
        key = await self._import_verify_key(_raw_bytes(public_key, "public_key"))
        return await provider.verify(
            ED25519, key, _raw_bytes(signature, "signature"), encode_data(data)
        )
