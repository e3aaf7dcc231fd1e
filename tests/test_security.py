"""
Security tests for SecureLink.

Tests specifically for security-related scenarios:
- Ciphertext and nonce tampering
- Signature tampering
- Cross-session and cross-peer key confusion
"""

import pytest

from securelink import KeyExchange, KeyExchangeResponder, Signature
from securelink.exceptions import AuthenticationFailedError


async def connected_pair():
    client = await KeyExchange.create()
    server = await KeyExchangeResponder.create()
    await server.accept(await client.generate_key(await server.get_public_key()))
    return client, server


def flip_bit(data: bytes, bit: int) -> bytes:
    out = bytearray(data)
    out[bit // 8] ^= 1 << (bit % 8)
    return bytes(out)


class TestCiphertextTampering:
    """Modified envelopes must never decrypt."""

    @pytest.mark.asyncio
    async def test_every_bit_flip_detected(self):
        """Flipping any single ciphertext bit fails authentication."""
        client, server = await connected_pair()
        envelope = await client.encrypt("abcd")

        for bit in range(len(envelope.ciphertext) * 8):
            with pytest.raises(AuthenticationFailedError):
                await server.decrypt(flip_bit(envelope.ciphertext, bit), envelope.nonce)

    @pytest.mark.asyncio
    async def test_nonce_tampering_detected(self):
        """A modified nonce fails authentication."""
        client, server = await connected_pair()
        envelope = await client.encrypt("abcd")
        with pytest.raises(AuthenticationFailedError):
            await server.decrypt(envelope.ciphertext, flip_bit(envelope.nonce, 0))

    @pytest.mark.asyncio
    async def test_swapped_nonces_detected(self):
        """Ciphertext paired with another message's nonce fails."""
        client, server = await connected_pair()
        first = await client.encrypt("first")
        second = await client.encrypt("second")
        with pytest.raises(AuthenticationFailedError):
            await server.decrypt(first.ciphertext, second.nonce)

    @pytest.mark.asyncio
    async def test_truncated_ciphertext_detected(self):
        """Dropping the last byte of the tag fails."""
        client, server = await connected_pair()
        envelope = await client.encrypt("abcd")
        with pytest.raises(AuthenticationFailedError):
            await server.decrypt(envelope.ciphertext[:-1], envelope.nonce)

    @pytest.mark.asyncio
    async def test_other_peer_cannot_decrypt(self):
        """A responder from another handshake cannot read the traffic."""
        client, _ = await connected_pair()
        _, eavesdropper = await connected_pair()
        envelope = await client.encrypt("secret")
        with pytest.raises(AuthenticationFailedError):
            await eavesdropper.decrypt(envelope.ciphertext, envelope.nonce)

    @pytest.mark.asyncio
    async def test_replay_is_not_detected(self):
        """Envelopes carry no sequence binding; a replay decrypts again."""
        client, server = await connected_pair()
        envelope = await client.encrypt("once")
        assert await server.decrypt(envelope.ciphertext, envelope.nonce) == b"once"
        assert await server.decrypt(envelope.ciphertext, envelope.nonce) == b"once"


class TestSignatureTampering:
    """Modified signatures or data must not verify."""

    @pytest.mark.asyncio
    async def test_signature_bit_flips(self):
        """Flipping bits across the signature returns False."""
        signer = await Signature.create()
        verifier = await Signature.create()
        await verifier.initialize_server_key(await signer.get_public_key())
        signature = await signer.sign(b"payload")

        for bit in range(0, len(signature) * 8, 7):
            assert not await verifier.verify(flip_bit(signature, bit), b"payload")

    @pytest.mark.asyncio
    async def test_data_bit_flip(self):
        """Altered data returns False."""
        signer = await Signature.create()
        verifier = await Signature.create()
        await verifier.initialize_server_key(await signer.get_public_key())
        signature = await signer.sign(b"payload")

        assert not await verifier.verify(signature, flip_bit(b"payload", 3))
