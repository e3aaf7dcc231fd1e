"""
Unit tests for the crypto provider.

Tests:
- Key generation and extractability
- Usage enforcement
- X25519 agreement and HKDF derivation
- AES-GCM authentication failures
- Ed25519 sign/verify
"""

import pytest

from securelink.exceptions import (
    AuthenticationFailedError,
    KeyNotExtractableError,
    KeyUsageError,
    ProviderError,
    UnsupportedAlgorithmError,
)
from securelink.provider import (
    Algorithm,
    CryptographyProvider,
    KeyHandle,
    KeyPair,
    acquire_provider,
)


@pytest.fixture
def provider():
    return CryptographyProvider()


class TestBootstrap:
    """Tests for provider acquisition."""

    @pytest.mark.asyncio
    async def test_acquire_provider(self):
        """Default provider is the cryptography backend."""
        provider = await acquire_provider()
        assert isinstance(provider, CryptographyProvider)
        assert provider.name == "cryptography"


class TestKeyGeneration:
    """Tests for generate_key/export_key."""

    @pytest.mark.asyncio
    async def test_x25519_pair(self, provider):
        """X25519 generation yields a pair with a 32-byte public key."""
        pair = await provider.generate_key("X25519", False, ['deriveBits'])
        assert isinstance(pair, KeyPair)
        assert pair.public_key.type == 'public'
        assert pair.private_key.type == 'private'
        assert len(await provider.export_key('raw', pair.public_key)) == 32

    @pytest.mark.asyncio
    async def test_private_key_not_extractable(self, provider):
        """Non-extractable private keys cannot be exported."""
        pair = await provider.generate_key("Ed25519", False, ['sign', 'verify'])
        assert pair.public_key.extractable
        assert not pair.private_key.extractable
        with pytest.raises(KeyNotExtractableError):
            await provider.export_key('raw', pair.private_key)

    @pytest.mark.asyncio
    async def test_usages_split(self, provider):
        """Sign goes to the private half, verify to the public half."""
        pair = await provider.generate_key("Ed25519", False, ['sign', 'verify'])
        assert pair.private_key.usages == {'sign'}
        assert pair.public_key.usages == {'verify'}

    @pytest.mark.asyncio
    async def test_invalid_usage_rejected(self, provider):
        """Usages foreign to the algorithm are rejected."""
        with pytest.raises(KeyUsageError):
            await provider.generate_key("Ed25519", False, ['encrypt'])

    @pytest.mark.asyncio
    async def test_unsupported_algorithm(self, provider):
        """Unknown algorithms raise UnsupportedAlgorithmError."""
        with pytest.raises(UnsupportedAlgorithmError):
            await provider.generate_key("RSA-PSS", False, ['sign'])

    @pytest.mark.asyncio
    async def test_aes_key(self, provider):
        """AES-GCM generation yields an extractable secret if requested."""
        key = await provider.generate_key(Algorithm("AES-GCM", length=256), True,
                                          ['encrypt', 'decrypt'])
        assert isinstance(key, KeyHandle)
        assert len(await provider.export_key('raw', key)) == 32

    def test_repr_hides_material(self):
        """repr shows metadata only."""
        key = KeyHandle('secret', 'AES-GCM', False, ['encrypt'], b"\x00" * 32)
        assert "material" not in repr(key)
        assert "AES-GCM" in repr(key)


class TestImport:
    """Tests for import_key."""

    @pytest.mark.asyncio
    async def test_unsupported_format(self, provider):
        """Only raw format is supported."""
        with pytest.raises(UnsupportedAlgorithmError):
            await provider.import_key('spki', bytes(32), "Ed25519", False, ['verify'])

    @pytest.mark.asyncio
    async def test_wrong_length_propagates(self, provider):
        """Malformed public keys raise the library's ValueError unchanged."""
        with pytest.raises(ValueError):
            await provider.import_key('raw', bytes(31), "Ed25519", False, ['verify'])

    @pytest.mark.asyncio
    async def test_imported_non_extractable(self, provider):
        """Imported non-extractable keys cannot be exported."""
        pair = await provider.generate_key("Ed25519", False, ['sign', 'verify'])
        raw = await provider.export_key('raw', pair.public_key)
        key = await provider.import_key('raw', raw, "Ed25519", False, ['verify'])
        with pytest.raises(KeyNotExtractableError):
            await provider.export_key('raw', key)

    @pytest.mark.asyncio
    async def test_bad_aes_length(self, provider):
        """AES keys must be 16, 24 or 32 bytes."""
        with pytest.raises(ValueError):
            await provider.import_key('raw', bytes(20), "AES-GCM", False, ['encrypt'])


class TestDerivation:
    """Tests for derive_bits."""

    @pytest.mark.asyncio
    async def test_x25519_agreement(self, provider):
        """Both sides derive the same 256-bit secret."""
        alice = await provider.generate_key("X25519", False, ['deriveBits'])
        bob = await provider.generate_key("X25519", False, ['deriveBits'])

        s1 = await provider.derive_bits(Algorithm("X25519", public=bob.public_key),
                                        alice.private_key, 256)
        s2 = await provider.derive_bits(Algorithm("X25519", public=alice.public_key),
                                        bob.private_key, 256)
        assert s1 == s2
        assert len(s1) == 32

    @pytest.mark.asyncio
    async def test_x25519_length_limit(self, provider):
        """X25519 cannot produce more than 256 bits."""
        alice = await provider.generate_key("X25519", False, ['deriveBits'])
        with pytest.raises(ProviderError):
            await provider.derive_bits(Algorithm("X25519", public=alice.public_key),
                                       alice.private_key, 512)

    @pytest.mark.asyncio
    async def test_hkdf_rfc5869_case1(self, provider):
        """HKDF-SHA256 matches RFC 5869 test case 1."""
        ikm = bytes([0x0b] * 22)
        salt = bytes(range(0x00, 0x0d))
        info = bytes(range(0xf0, 0xfa))
        base = await provider.import_key('raw', ikm, "HKDF", False, ['deriveBits'])

        okm = await provider.derive_bits(
            Algorithm("HKDF", hash="SHA-256", salt=salt, info=info), base, 42 * 8
        )
        assert okm.hex() == (
            "3cb25f25faacd57a90434f64d0362f2a2d2d0a90cf1a5a4c5db02d56ecc4c5bf"
            "34007208d5b887185865"
        )

    @pytest.mark.asyncio
    async def test_hkdf_requires_derive_usage(self, provider):
        """HKDF keys without deriveBits are refused."""
        base = await provider.import_key('raw', bytes(32), "HKDF", False, ['deriveKey'])
        with pytest.raises(KeyUsageError):
            await provider.derive_bits(Algorithm("HKDF", hash="SHA-256", salt=b"", info=b""),
                                       base, 256)

    @pytest.mark.asyncio
    async def test_bit_length_multiple_of_8(self, provider):
        """Bit lengths must be whole bytes."""
        base = await provider.import_key('raw', bytes(32), "HKDF", False, ['deriveBits'])
        with pytest.raises(ProviderError):
            await provider.derive_bits(Algorithm("HKDF", hash="SHA-256", salt=b"", info=b""),
                                       base, 100)


class TestAEAD:
    """Tests for AES-GCM encrypt/decrypt."""

    @pytest.mark.asyncio
    async def test_roundtrip(self, provider):
        """Encrypt then decrypt returns the plaintext."""
        key = await provider.import_key('raw', bytes(32), "AES-GCM", False,
                                        ['encrypt', 'decrypt'])
        alg = Algorithm("AES-GCM", iv=bytes(12))
        ciphertext = await provider.encrypt(alg, key, b"hello")
        assert len(ciphertext) == len(b"hello") + 16
        assert await provider.decrypt(alg, key, ciphertext) == b"hello"

    @pytest.mark.asyncio
    async def test_wrong_iv_fails(self, provider):
        """A different iv fails authentication."""
        key = await provider.import_key('raw', bytes(32), "AES-GCM", False,
                                        ['encrypt', 'decrypt'])
        ciphertext = await provider.encrypt(Algorithm("AES-GCM", iv=bytes(12)), key, b"x")
        with pytest.raises(AuthenticationFailedError):
            await provider.decrypt(Algorithm("AES-GCM", iv=b"\x01" * 12), key, ciphertext)

    @pytest.mark.asyncio
    async def test_usage_enforced(self, provider):
        """Encrypt-only keys cannot decrypt."""
        key = await provider.import_key('raw', bytes(32), "AES-GCM", False, ['encrypt'])
        alg = Algorithm("AES-GCM", iv=bytes(12))
        ciphertext = await provider.encrypt(alg, key, b"x")
        with pytest.raises(KeyUsageError):
            await provider.decrypt(alg, key, ciphertext)

    @pytest.mark.asyncio
    async def test_iv_required(self, provider):
        """AES-GCM without an iv is refused."""
        key = await provider.import_key('raw', bytes(32), "AES-GCM", False, ['encrypt'])
        with pytest.raises(ProviderError):
            await provider.encrypt("AES-GCM", key, b"x")


class TestSignatures:
    """Tests for Ed25519 sign/verify."""

    @pytest.mark.asyncio
    async def test_sign_verify(self, provider):
        """Valid signatures verify, altered data does not."""
        pair = await provider.generate_key("Ed25519", False, ['sign', 'verify'])
        signature = await provider.sign("Ed25519", pair.private_key, b"data")

        assert len(signature) == 64
        assert await provider.verify("Ed25519", pair.public_key, signature, b"data")
        assert not await provider.verify("Ed25519", pair.public_key, signature, b"other")

    @pytest.mark.asyncio
    async def test_sign_with_public_key_rejected(self, provider):
        """Public keys cannot sign."""
        pair = await provider.generate_key("Ed25519", False, ['sign', 'verify'])
        with pytest.raises(KeyUsageError):
            await provider.sign("Ed25519", pair.public_key, b"data")
