"""
Crypto Provider Interface

The capability surface the key exchange and signature layers consume:
- key generation, import and export
- bit derivation (X25519 agreement, HKDF)
- AEAD encrypt/decrypt
- sign/verify

Keys are opaque KeyHandle objects. Raw material stays inside the
provider; only extractable keys can be exported.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, FrozenSet, Iterable, Optional, Union

from ..exceptions import KeyUsageError


class KeyHandle:
    """
    Opaque reference to key material owned by a provider.

    Attributes:
        type: 'secret', 'private' or 'public'
        algorithm: Algorithm name the key is bound to
        extractable: Whether export_key may read the raw material
        usages: Operations the key may be used for
    """

    __slots__ = ('type', 'algorithm', 'extractable', 'usages', '_material')

    def __init__(self, key_type: str, algorithm: str, extractable: bool,
                 usages: Iterable[str], material: Any):
        self.type = key_type
        self.algorithm = algorithm
        self.extractable = extractable
        self.usages: FrozenSet[str] = frozenset(usages)
        self._material = material

    def require_usage(self, usage: str) -> None:
        """Raise KeyUsageError unless usage is permitted for this key."""
        if usage not in self.usages:
            raise KeyUsageError(
                f"{self.algorithm} {self.type} key does not permit '{usage}'"
            )

    def __repr__(self) -> str:
        return (f"KeyHandle(type={self.type!r}, algorithm={self.algorithm!r}, "
                f"extractable={self.extractable}, usages={sorted(self.usages)})")


@dataclass
class KeyPair:
    """Asymmetric key pair container."""
    public_key: KeyHandle
    private_key: KeyHandle


@dataclass(frozen=True)
class Algorithm:
    """
    Algorithm name plus the parameters an operation needs.

    X25519 derive: public. HKDF derive: hash, salt, info.
    AES-GCM encrypt/decrypt: iv. AES-GCM import/generate: length.
    """
    name: str
    public: Optional[KeyHandle] = None
    hash: Optional[str] = None
    salt: Optional[bytes] = None
    info: Optional[bytes] = None
    iv: Optional[bytes] = None
    length: Optional[int] = None


AlgorithmLike = Union[str, Algorithm]


def normalize_algorithm(algorithm: AlgorithmLike) -> Algorithm:
    """Wrap a bare algorithm name in an Algorithm."""
    if isinstance(algorithm, Algorithm):
        return algorithm
    return Algorithm(name=algorithm)


class CryptoProvider(ABC):
    """
    Abstract crypto capability provider.

    Every operation is a coroutine; callers suspend at each call.
    """

    name = "abstract"

    @abstractmethod
    async def generate_key(self, algorithm: AlgorithmLike, extractable: bool,
                           usages: Iterable[str]) -> Union[KeyPair, KeyHandle]:
        """Generate a key pair (X25519, Ed25519) or a secret key (AES-GCM)."""

    @abstractmethod
    async def import_key(self, fmt: str, data: bytes, algorithm: AlgorithmLike,
                         extractable: bool, usages: Iterable[str]) -> KeyHandle:
        """Import raw key material."""

    @abstractmethod
    async def export_key(self, fmt: str, key: KeyHandle) -> bytes:
        """Export an extractable key."""

    @abstractmethod
    async def derive_bits(self, algorithm: AlgorithmLike, base_key: KeyHandle,
                          length: int) -> bytes:
        """Derive length bits from base_key."""

    @abstractmethod
    async def encrypt(self, algorithm: AlgorithmLike, key: KeyHandle,
                      data: bytes) -> bytes:
        """Encrypt data, returning ciphertext with tag appended."""

    @abstractmethod
    async def decrypt(self, algorithm: AlgorithmLike, key: KeyHandle,
                      data: bytes) -> bytes:
        """Decrypt and authenticate data."""

    @abstractmethod
    async def sign(self, algorithm: AlgorithmLike, key: KeyHandle,
                   data: bytes) -> bytes:
        """Sign data with a private key."""

    @abstractmethod
    async def verify(self, algorithm: AlgorithmLike, key: KeyHandle,
                     signature: bytes, data: bytes) -> bool:
        """Verify a signature. Returns False if it does not verify."""
