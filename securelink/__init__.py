"""
SecureLink - cross-platform key exchange and signatures.

Usage:
    from securelink import KeyExchange, Signature

    async def main():
        kx = await KeyExchange.get_instance()
        client_pub = await kx.generate_key(server_pub_b64)
        envelope = await kx.encrypt("hello")

        sig = await Signature.get_instance()
        await sig.initialize_server_key(server_sig_pub_b64)
        ok = await sig.verify(signature, payload)
"""

__version__ = "0.1.0"

# Components
from .messaging import (
    KeyExchange,
    KeyExchangeResponder,
    KeyExchangeState,
    Signature,
    SignatureState,
)

# Provider
from .provider import (
    Algorithm,
    CryptoProvider,
    CryptographyProvider,
    KeyHandle,
    KeyPair,
    acquire_provider,
)

# Codec
from .codec import (
    EncryptionResult,
    byte_array_to_base64,
    base64_to_byte_array,
    bigint_to_base64,
    base64_to_bigint,
    number_to_base64,
    base64_to_number,
    uint32_to_bytes,
    bytes_to_uint32,
    uint32_to_base64,
    base64_to_uint32,
    copy_to_buffer,
    bytes_to_string,
    encode_data,
    generate_random_bytes,
    convert_to_json_serializable,
)

# Exceptions
from .exceptions import (
    SecureLinkError,
    NotInitializedError,
    NoEncryptionKeyError,
    NoDecryptionKeyError,
    ServerKeyNotInitializedError,
    AuthenticationFailedError,
    RangeError,
    DecodeError,
    BufferBoundsError,
    ProviderError,
    ProviderUnavailableError,
    UnsupportedAlgorithmError,
    KeyUsageError,
    KeyNotExtractableError,
)

__all__ = [
    "__version__",
    # Components
    "KeyExchange",
    "KeyExchangeResponder",
    "KeyExchangeState",
    "Signature",
    "SignatureState",
    # Provider
    "Algorithm",
    "CryptoProvider",
    "CryptographyProvider",
    "KeyHandle",
    "KeyPair",
    "acquire_provider",
    # Codec
    "EncryptionResult",
    "byte_array_to_base64",
    "base64_to_byte_array",
    "bigint_to_base64",
    "base64_to_bigint",
    "number_to_base64",
    "base64_to_number",
    "uint32_to_bytes",
    "bytes_to_uint32",
    "uint32_to_base64",
    "base64_to_uint32",
    "copy_to_buffer",
    "bytes_to_string",
    "encode_data",
    "generate_random_bytes",
    "convert_to_json_serializable",
    # Exceptions
    "SecureLinkError",
    "NotInitializedError",
    "NoEncryptionKeyError",
    "NoDecryptionKeyError",
    "ServerKeyNotInitializedError",
    "AuthenticationFailedError",
    "RangeError",
    "DecodeError",
    "BufferBoundsError",
    "ProviderError",
    "ProviderUnavailableError",
    "UnsupportedAlgorithmError",
    "KeyUsageError",
    "KeyNotExtractableError",
]
