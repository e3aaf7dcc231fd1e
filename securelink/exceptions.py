"""Exceptions raised by SecureLink."""


class SecureLinkError(Exception):
    """Base exception for SecureLink errors."""


class NotInitializedError(SecureLinkError):
    """Crypto provider or local key pair is not available."""


class NoEncryptionKeyError(SecureLinkError):
    """Encryption attempted before a handshake completed."""


class NoDecryptionKeyError(SecureLinkError):
    """Decryption attempted before a handshake completed."""


class ServerKeyNotInitializedError(SecureLinkError):
    """Verification attempted before a server key was imported."""


class AuthenticationFailedError(SecureLinkError):
    """AEAD authentication tag did not verify."""


class RangeError(SecureLinkError, ValueError):
    """Value outside the numeric domain of an encoding."""


class DecodeError(SecureLinkError, ValueError):
    """Malformed base64 text or unexpected decoded length."""


class BufferBoundsError(SecureLinkError, IndexError):
    """Write outside the bounds of a destination buffer."""


class ProviderError(SecureLinkError):
    """Error raised by the crypto provider."""


class ProviderUnavailableError(ProviderError):
    """No usable crypto provider in this environment."""


class UnsupportedAlgorithmError(ProviderError):
    """Algorithm or key format not supported by the provider."""


class KeyUsageError(ProviderError):
    """Key used for an operation outside its declared usages."""


class KeyNotExtractableError(ProviderError):
    """Export attempted on a non-extractable key."""
