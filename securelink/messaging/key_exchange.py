"""
Key Exchange Module

Ephemeral key agreement and directional session encryption:
- X25519 Diffie-Hellman (fresh key pair per handshake)
- HKDF-SHA256 derivation of independent TX and RX keys
- AES-256-GCM authenticated encryption with random 96-bit nonces

Key derivation:
    shared = X25519(local_private, remote_public)                 (256 bits)
    info   = direction_label || base64(initiator_ephemeral_public)
    key    = HKDF-SHA256(shared, salt=32 zero bytes, info)        (256 bits)

    initiator: TX <- "client-to-server", RX <- "server-to-client"
    responder: TX <- "server-to-client", RX <- "client-to-server"

Envelope: {ciphertext (tag appended), nonce (12 bytes)}

Not provided: replay protection, sequencing or associated-data binding.
Each encrypt call is independent.
"""

import logging
from enum import Enum, auto
from typing import Optional, Tuple, Union

from ..codec import (
    EncryptionResult,
    base64_to_byte_array,
    byte_array_to_base64,
    encode_data,
    generate_random_bytes,
)
from ..const import (
    AES_GCM,
    AES_KEY_BITS,
    CLIENT_TO_SERVER,
    HKDF,
    HKDF_HASH,
    HKDF_SALT,
    NONCE_SIZE,
    RAW,
    SERVER_TO_CLIENT,
    SHARED_SECRET_BITS,
    X25519,
)
from ..exceptions import NoDecryptionKeyError, NoEncryptionKeyError, NotInitializedError
from ..provider import Algorithm, CryptoProvider, KeyHandle, KeyPair
from .lifecycle import LazySingleton


_LOGGER = logging.getLogger(__name__)

RemotePublicKey = Union[KeyHandle, bytes, bytearray, str]


class KeyExchangeState(Enum):
    """Key exchange states."""
    UNINITIALIZED = auto()
    READY = auto()
    KEYED = auto()


class _SessionCipher(LazySingleton):
    """Shared TX/RX key handling for both ends of the handshake."""

    def __init__(self, provider: Optional[CryptoProvider] = None):
        super().__init__(provider)
        self._keypair: Optional[KeyPair] = None
        self._tx_key: Optional[KeyHandle] = None   # encrypts local -> remote
        self._rx_key: Optional[KeyHandle] = None   # decrypts remote -> local

    @property
    def state(self) -> KeyExchangeState:
        """Current handshake state."""
        if self._provider is None:
            return KeyExchangeState.UNINITIALIZED
        if self._tx_key is None or self._rx_key is None:
            return KeyExchangeState.READY
        return KeyExchangeState.KEYED

    async def _import_remote(self, remote_public_key: RemotePublicKey) -> KeyHandle:
        if isinstance(remote_public_key, KeyHandle):
            return remote_public_key
        if isinstance(remote_public_key, str):
            remote_public_key = base64_to_byte_array(remote_public_key)
        elif not isinstance(remote_public_key, (bytes, bytearray, memoryview)):
            raise TypeError(
                f"Remote public key must be a KeyHandle, bytes or base64 text, "
                f"got {type(remote_public_key).__name__}"
            )
        return await self._require_provider().import_key(
            RAW, bytes(remote_public_key), X25519, True, []
        )

    async def _hkdf(self, shared_secret: bytes, info: bytes,
                    salt: bytes = HKDF_SALT) -> bytes:
        provider = self._require_provider()
        base_key = await provider.import_key(
            RAW, shared_secret, HKDF, False, ['deriveBits', 'deriveKey']
        )
        algorithm = Algorithm(HKDF, hash=HKDF_HASH, salt=salt, info=info)
        return await provider.derive_bits(algorithm, base_key, AES_KEY_BITS)

    async def _import_aes(self, raw: bytes) -> KeyHandle:
        return await self._require_provider().import_key(
            RAW, raw, Algorithm(AES_GCM, length=AES_KEY_BITS), False, ['encrypt', 'decrypt']
        )

    async def _derive_directional_keys(self, shared_secret: bytes,
                                       initiator_public_b64: str) -> Tuple[KeyHandle, KeyHandle]:
        """
        Derive the client-to-server and server-to-client keys.

        Both are bound to the initiator's ephemeral public key, so keys
        from different handshakes never coincide even if a peer reuses
        its own key.

        Returns:
            (client_to_server_key, server_to_client_key)
        """
        c2s = await self._import_aes(
            await self._hkdf(shared_secret, (CLIENT_TO_SERVER + initiator_public_b64).encode('utf-8'))
        )
        s2c = await self._import_aes(
            await self._hkdf(shared_secret, (SERVER_TO_CLIENT + initiator_public_b64).encode('utf-8'))
        )
        return c2s, s2c

    async def encrypt(self, plaintext: Union[str, bytes]) -> EncryptionResult:
        """
        Encrypt plaintext with the current TX key.

        A fresh random 12-byte nonce is drawn for every call. The caller
        must send the nonce along with the ciphertext.

        Args:
            plaintext: Text (UTF-8 encoded) or bytes

        Returns:
            EncryptionResult with ciphertext and nonce

        Raises:
            NoEncryptionKeyError: If no handshake has completed
            TypeError: If plaintext is neither text nor bytes-like
        """
        if self._tx_key is None:
            raise NoEncryptionKeyError("No encryption key available. Call generate_key() first.")
        provider = self._require_provider()

        nonce = await generate_random_bytes(NONCE_SIZE)
        data = encode_data(plaintext)
        ciphertext = await provider.encrypt(Algorithm(AES_GCM, iv=nonce), self._tx_key, data)

        return EncryptionResult(ciphertext=ciphertext, nonce=nonce)

    async def decrypt(self, ciphertext: bytes, nonce: bytes) -> bytes:
        """
        Decrypt ciphertext with the current RX key.

        Args:
            ciphertext: Ciphertext with GCM tag appended
            nonce: Nonce returned alongside the ciphertext

        Returns:
            Decrypted plaintext bytes

        Raises:
            NoDecryptionKeyError: If no handshake has completed
            AuthenticationFailedError: If the ciphertext or nonce was altered
        """
        if self._rx_key is None:
            raise NoDecryptionKeyError("No decryption key available. Call generate_key() first.")
        provider = self._require_provider()

        return await provider.decrypt(Algorithm(AES_GCM, iv=bytes(nonce)), self._rx_key, ciphertext)

    async def decrypt_envelope(self, envelope: EncryptionResult) -> bytes:
        """Decrypt an EncryptionResult produced by the peer."""
        return await self.decrypt(envelope.ciphertext, envelope.nonce)


class KeyExchange(_SessionCipher):
    """
    Initiator side of the key exchange.

    Each generate_key() call runs a new handshake with a new ephemeral
    key pair and replaces both session keys.

    Example:
        kx = await KeyExchange.get_instance()
        client_pub = await kx.generate_key(server_pub_b64)
        # send client_pub to the server
        envelope = await kx.encrypt("hello")
    """

    def __init__(self, provider: Optional[CryptoProvider] = None):
        super().__init__(provider)
        self._public_key_b64: Optional[str] = None

    @property
    def public_key(self) -> Optional[str]:
        """Base64 ephemeral public key from the last handshake, if any."""
        return self._public_key_b64

    async def generate_key(self, remote_public_key: RemotePublicKey) -> str:
        """
        Run a handshake against the remote X25519 public key.

        TX and RX are installed together once both are derived.
        Overlapping calls install keys in completion order: the call
        that finishes last wins, regardless of which was issued first.

        Args:
            remote_public_key: Remote X25519 key as KeyHandle, raw bytes
                or base64 text

        Returns:
            Base64 local ephemeral public key to send to the remote party

        Raises:
            NotInitializedError: If the crypto provider is absent
            TypeError: If the remote key has an unsupported type
        """
        provider = self._require_provider()
        remote = await self._import_remote(remote_public_key)

        keypair = await provider.generate_key(X25519, False, ['deriveKey', 'deriveBits'])
        public_b64 = byte_array_to_base64(await provider.export_key(RAW, keypair.public_key))

        shared_secret = await provider.derive_bits(
            Algorithm(X25519, public=remote), keypair.private_key, SHARED_SECRET_BITS
        )
        c2s, s2c = await self._derive_directional_keys(shared_secret, public_b64)

        self._keypair = keypair
        self._public_key_b64 = public_b64
        self._tx_key, self._rx_key = c2s, s2c
        _LOGGER.debug("Key exchange complete, session keys installed")

        return public_b64


class KeyExchangeResponder(_SessionCipher):
    """
    Responder (server) side of the key exchange.

    Holds a static X25519 key pair for its lifetime and derives session
    keys from each initiator's ephemeral public key.
    """

    async def _setup(self) -> None:
        self._keypair = await self._require_provider().generate_key(
            X25519, False, ['deriveKey', 'deriveBits']
        )

    async def get_public_key(self) -> str:
        """
        Get our static public key to publish to initiators.

        Raises:
            NotInitializedError: If not initialized
        """
        provider = self._require_provider()
        if self._keypair is None:
            raise NotInitializedError("Responder not initialized. Call create() first.")
        return byte_array_to_base64(await provider.export_key(RAW, self._keypair.public_key))

    async def accept(self, initiator_public_key: Union[bytes, str]) -> None:
        """
        Complete the handshake for an initiator's ephemeral public key.

        Args:
            initiator_public_key: Value returned by the initiator's
                generate_key(), as base64 text or raw bytes

        Raises:
            NotInitializedError: If not initialized
        """
        provider = self._require_provider()
        if self._keypair is None:
            raise NotInitializedError("Responder not initialized. Call create() first.")
        if isinstance(initiator_public_key, str):
            # Canonical padded form, as the initiator used it in HKDF info
            initiator_public_key = base64_to_byte_array(initiator_public_key)
        elif not isinstance(initiator_public_key, (bytes, bytearray, memoryview)):
            raise TypeError(
                f"Initiator public key must be bytes or base64 text, "
                f"got {type(initiator_public_key).__name__}"
            )
        initiator_b64 = byte_array_to_base64(initiator_public_key)
        remote = await self._import_remote(initiator_b64)

        shared_secret = await provider.derive_bits(
            Algorithm(X25519, public=remote), self._keypair.private_key, SHARED_SECRET_BITS
        )
        c2s, s2c = await self._derive_directional_keys(shared_secret, initiator_b64)

        self._tx_key, self._rx_key = s2c, c2s
        _LOGGER.debug("Accepted key exchange, session keys installed")
