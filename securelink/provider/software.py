"""
Software Crypto Provider

CryptoProvider backed by the `cryptography` package:
- X25519 key agreement
- Ed25519 signatures
- HKDF (SHA-256/384/512) bit derivation
- AES-GCM authenticated encryption

Only the "raw" key format is supported.
"""

from typing import Iterable, Set, Union

from cryptography.exceptions import InvalidSignature, InvalidTag, UnsupportedAlgorithm
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric.ed25519 import (
    Ed25519PrivateKey,
    Ed25519PublicKey,
)
from cryptography.hazmat.primitives.asymmetric.x25519 import (
    X25519PrivateKey,
    X25519PublicKey,
)
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from cryptography.hazmat.primitives.kdf.hkdf import HKDF as _HKDF

from ..const import AES_GCM, ED25519, HKDF, RAW, X25519
from ..exceptions import (
    AuthenticationFailedError,
    KeyNotExtractableError,
    KeyUsageError,
    ProviderError,
    ProviderUnavailableError,
    UnsupportedAlgorithmError,
)
from .base import AlgorithmLike, CryptoProvider, KeyHandle, KeyPair, normalize_algorithm


_HASHES = {
    'SHA-256': hashes.SHA256,
    'SHA-384': hashes.SHA384,
    'SHA-512': hashes.SHA512,
}

# Usages each key type may carry, per algorithm
_PRIVATE_USAGES = {
    X25519: {'deriveKey', 'deriveBits'},
    ED25519: {'sign'},
}
_PUBLIC_USAGES = {
    X25519: set(),
    ED25519: {'verify'},
}
_SECRET_USAGES = {
    HKDF: {'deriveKey', 'deriveBits'},
    AES_GCM: {'encrypt', 'decrypt', 'wrapKey', 'unwrapKey'},
}

AES_KEY_LENGTHS = (128, 192, 256)


def _check_usages(requested: Iterable[str], allowed: Set[str], algorithm: str) -> Set[str]:
    requested = set(requested)
    invalid = requested - allowed
    if invalid:
        raise KeyUsageError(f"Invalid usages for {algorithm}: {sorted(invalid)}")
    return requested


def _check_key(key: KeyHandle, algorithm: str, key_type: str, usage: str) -> None:
    if key.algorithm != algorithm or key.type != key_type:
        raise KeyUsageError(
            f"Expected {algorithm} {key_type} key, got {key.algorithm} {key.type}"
        )
    key.require_usage(usage)


def _byte_length(length: int) -> int:
    if length is None or length <= 0 or length % 8:
        raise ProviderError(f"Bit length must be a positive multiple of 8, got {length}")
    return length // 8


class CryptographyProvider(CryptoProvider):
    """CryptoProvider implemented on the `cryptography` library."""

    name = "cryptography"

    @staticmethod
    def probe() -> None:
        """
        Check the installed backend supports the required algorithms.

        Raises:
            ProviderUnavailableError: If X25519, Ed25519 or AES-GCM is missing
        """
        try:
            X25519PrivateKey.generate()
            Ed25519PrivateKey.generate()
            AESGCM(AESGCM.generate_key(bit_length=256))
        except UnsupportedAlgorithm as e:
            raise ProviderUnavailableError(
                "cryptography backend lacks X25519/Ed25519/AES-GCM support"
            ) from e

    async def generate_key(self, algorithm: AlgorithmLike, extractable: bool,
                           usages: Iterable[str]) -> Union[KeyPair, KeyHandle]:
        alg = normalize_algorithm(algorithm)
        usages = set(usages)

        if alg.name in (X25519, ED25519):
            _check_usages(usages, _PRIVATE_USAGES[alg.name] | _PUBLIC_USAGES[alg.name], alg.name)
            if alg.name == X25519:
                private = X25519PrivateKey.generate()
            else:
                private = Ed25519PrivateKey.generate()
            # Public halves are always exportable
            public_key = KeyHandle('public', alg.name, True,
                                   usages & _PUBLIC_USAGES[alg.name], private.public_key())
            private_key = KeyHandle('private', alg.name, extractable,
                                    usages & _PRIVATE_USAGES[alg.name], private)
            return KeyPair(public_key, private_key)

        if alg.name == AES_GCM:
            _check_usages(usages, _SECRET_USAGES[AES_GCM], AES_GCM)
            length = alg.length or 256
            if length not in AES_KEY_LENGTHS:
                raise ProviderError(f"AES key length must be one of {AES_KEY_LENGTHS}")
            material = AESGCM.generate_key(bit_length=length)
            return KeyHandle('secret', AES_GCM, extractable, usages, material)

        raise UnsupportedAlgorithmError(f"Cannot generate {alg.name} keys")

    async def import_key(self, fmt: str, data: bytes, algorithm: AlgorithmLike,
                         extractable: bool, usages: Iterable[str]) -> KeyHandle:
        alg = normalize_algorithm(algorithm)
        if fmt != RAW:
            raise UnsupportedAlgorithmError(f"Unsupported key format: {fmt}")
        data = bytes(data)

        if alg.name == X25519:
            usages = _check_usages(usages, _PUBLIC_USAGES[X25519], X25519)
            return KeyHandle('public', X25519, extractable, usages,
                             X25519PublicKey.from_public_bytes(data))

        if alg.name == ED25519:
            usages = _check_usages(usages, _PUBLIC_USAGES[ED25519], ED25519)
            return KeyHandle('public', ED25519, extractable, usages,
                             Ed25519PublicKey.from_public_bytes(data))

        if alg.name == HKDF:
            if extractable:
                raise ProviderError("HKDF keys cannot be extractable")
            usages = _check_usages(usages, _SECRET_USAGES[HKDF], HKDF)
            return KeyHandle('secret', HKDF, False, usages, data)

        if alg.name == AES_GCM:
            usages = _check_usages(usages, _SECRET_USAGES[AES_GCM], AES_GCM)
            # AESGCM validates the key length
            AESGCM(data)
            return KeyHandle('secret', AES_GCM, extractable, usages, data)

        raise UnsupportedAlgorithmError(f"Cannot import {alg.name} keys")

    async def export_key(self, fmt: str, key: KeyHandle) -> bytes:
        if fmt != RAW:
            raise UnsupportedAlgorithmError(f"Unsupported key format: {fmt}")
        if not key.extractable:
            raise KeyNotExtractableError(f"{key.algorithm} {key.type} key is not extractable")
        if key.type == 'public':
            return key._material.public_bytes_raw()
        if key.type == 'secret':
            return bytes(key._material)
        raise UnsupportedAlgorithmError("Private keys cannot be exported in raw format")

    async def derive_bits(self, algorithm: AlgorithmLike, base_key: KeyHandle,
                          length: int) -> bytes:
        alg = normalize_algorithm(algorithm)

        if alg.name == X25519:
            _check_key(base_key, X25519, 'private', 'deriveBits')
            peer = alg.public
            if peer is None or peer.algorithm != X25519 or peer.type != 'public':
                raise KeyUsageError("X25519 derivation needs an X25519 public key")
            shared = base_key._material.exchange(peer._material)
            if length is None:
                return shared
            n = _byte_length(length)
            if n > len(shared):
                raise ProviderError(f"X25519 yields at most {len(shared) * 8} bits")
            return shared[:n]

        if alg.name == HKDF:
            _check_key(base_key, HKDF, 'secret', 'deriveBits')
            hash_cls = _HASHES.get(alg.hash)
            if hash_cls is None:
                raise UnsupportedAlgorithmError(f"Unsupported HKDF hash: {alg.hash}")
            hkdf = _HKDF(
                algorithm=hash_cls(),
                length=_byte_length(length),
                salt=alg.salt,
                info=alg.info,
            )
            return hkdf.derive(base_key._material)

        raise UnsupportedAlgorithmError(f"Cannot derive bits with {alg.name}")

    def _aead(self, algorithm: AlgorithmLike, key: KeyHandle, usage: str):
        alg = normalize_algorithm(algorithm)
        if alg.name != AES_GCM:
            raise UnsupportedAlgorithmError(f"Unsupported cipher: {alg.name}")
        _check_key(key, AES_GCM, 'secret', usage)
        if not alg.iv:
            raise ProviderError("AES-GCM requires an iv")
        return AESGCM(key._material), alg.iv

    async def encrypt(self, algorithm: AlgorithmLike, key: KeyHandle,
                      data: bytes) -> bytes:
        aead, iv = self._aead(algorithm, key, 'encrypt')
        return aead.encrypt(iv, bytes(data), None)

    async def decrypt(self, algorithm: AlgorithmLike, key: KeyHandle,
                      data: bytes) -> bytes:
        aead, iv = self._aead(algorithm, key, 'decrypt')
        try:
            return aead.decrypt(iv, bytes(data), None)
        except InvalidTag as e:
            raise AuthenticationFailedError("AES-GCM authentication failed") from e

    async def sign(self, algorithm: AlgorithmLike, key: KeyHandle,
                   data: bytes) -> bytes:
        alg = normalize_algorithm(algorithm)
        if alg.name != ED25519:
            raise UnsupportedAlgorithmError(f"Unsupported signature algorithm: {alg.name}")
        _check_key(key, ED25519, 'private', 'sign')
        return key._material.sign(bytes(data))

    async def verify(self, algorithm: AlgorithmLike, key: KeyHandle,
                     signature: bytes, data: bytes) -> bool:
        alg = normalize_algorithm(algorithm)
        if alg.name != ED25519:
            raise UnsupportedAlgorithmError(f"Unsupported signature algorithm: {alg.name}")
        _check_key(key, ED25519, 'public', 'verify')
        try:
            key._material.verify(bytes(signature), bytes(data))
            return True
        except InvalidSignature:
            return False
