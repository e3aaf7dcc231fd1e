"""
Wire Encoding Helpers

Deterministic conversions used by the key exchange and signature layers:
- bytes <-> base64 text (standard alphabet, padded; unpadded input accepted)
- uint64 / safe integer <-> 8-byte big-endian base64
- uint32 <-> 4-byte big-endian bytes / base64
- buffered copy of text or bytes into a destination buffer

Wire format:
    uint64: [8 bytes, big-endian] -> base64 (12 chars, one '=' pad)
    uint32: [4 bytes, big-endian] -> base64 (8 chars, two '=' pads)
"""

import base64
import binascii
import dataclasses
import secrets
import struct
from dataclasses import dataclass
from typing import Any, Dict, List, Union

from ..const import MAX_SAFE_INTEGER, NONCE_SIZE, UINT32_MAX, UINT64_MAX
from ..exceptions import BufferBoundsError, DecodeError, RangeError


BytesLike = Union[bytes, bytearray, memoryview]


@dataclass
class EncryptionResult:
    """
    Authenticated encryption envelope.

    Both fields must travel together; decryption needs the exact nonce
    that was used for encryption.
    """
    ciphertext: bytes     # Variable length, GCM tag appended
    nonce: bytes          # 12 bytes

    def to_dict(self) -> Dict[str, str]:
        """Serialize to a JSON-friendly dict of base64 strings."""
        return {
            'ciphertext': byte_array_to_base64(self.ciphertext),
            'nonce': byte_array_to_base64(self.nonce),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, str]) -> 'EncryptionResult':
        """
        Deserialize from a dict produced by to_dict().

        Raises:
            DecodeError: If a field is missing or the nonce has the wrong size
        """
        try:
            ciphertext = base64_to_byte_array(data['ciphertext'])
            nonce = base64_to_byte_array(data['nonce'])
        except KeyError as e:
            raise DecodeError(f"Missing envelope field: {e.args[0]}") from e
        if len(nonce) != NONCE_SIZE:
            raise DecodeError(f"Expected {NONCE_SIZE}-byte nonce, got {len(nonce)}")
        return cls(ciphertext, nonce)


def byte_array_to_base64(data: BytesLike) -> str:
    """Encode bytes as standard padded base64 text."""
    return base64.b64encode(bytes(data)).decode('ascii')


def base64_to_byte_array(text: str) -> bytes:
    """
    Decode standard base64 text to bytes.

    Missing '=' padding is restored before decoding, so peers that
    strip it interoperate.

    Args:
        text: Base64 string, padded or not (empty string decodes to b"")

    Returns:
        Decoded bytes

    Raises:
        DecodeError: If the text is not valid base64
    """
    if not text:
        return b""
    text += '=' * (-len(text) % 4)
    try:
        return base64.b64decode(text, validate=True)
    except (binascii.Error, ValueError) as e:
        raise DecodeError("Invalid base64 string") from e


def _decode_fixed(text: str, size: int, kind: str) -> bytes:
    if not text:
        raise DecodeError("Empty base64 string")
    data = base64_to_byte_array(text)
    if len(data) != size:
        raise DecodeError(f"Expected {size} bytes for {kind}, got {len(data)}")
    return data


def bigint_to_base64(n: int) -> str:
    """
    Encode an unsigned 64-bit integer as 8 big-endian bytes in base64.

    Args:
        n: Value in [0, 2^64 - 1]

    Returns:
        Base64 string, e.g. 1 -> "AAAAAAAAAAE="

    Raises:
        RangeError: If n is outside the uint64 range
    """
    if isinstance(n, bool) or not isinstance(n, int) or n < 0 or n > UINT64_MAX:
        raise RangeError("value out of uint64 range")
    return byte_array_to_base64(struct.pack('>Q', n))


def base64_to_bigint(text: str) -> int:
    """
    Decode base64 of 8 big-endian bytes to an unsigned 64-bit integer.

    Raises:
        DecodeError: If text is empty, malformed or not exactly 8 bytes
    """
    return struct.unpack('>Q', _decode_fixed(text, 8, 'uint64'))[0]


def number_to_base64(num: Union[int, float]) -> str:
    """
    Encode a non-negative safe integer as uint64 base64.

    Integral floats (e.g. 5.0) are accepted.

    Raises:
        RangeError: If num is negative, non-integral or above 2^53 - 1
    """
    if isinstance(num, bool) or not isinstance(num, (int, float)):
        raise RangeError("value out of safe integer range")
    if isinstance(num, float):
        if not num.is_integer():
            raise RangeError("value out of safe integer range")
        num = int(num)
    if num < 0 or num > MAX_SAFE_INTEGER:
        raise RangeError("value out of safe integer range")
    return bigint_to_base64(num)


def base64_to_number(text: str) -> int:
    """
    Decode uint64 base64, requiring the value to be a safe integer.

    Raises:
        DecodeError: If text is not base64 of exactly 8 bytes
        RangeError: If the decoded value exceeds 2^53 - 1
    """
    value = base64_to_bigint(text)
    if value > MAX_SAFE_INTEGER:
        raise RangeError("value exceeds safe integer range")
    return value


def _check_uint32(num: int) -> None:
    if isinstance(num, bool) or not isinstance(num, int) or num < 0 or num > UINT32_MAX:
        raise RangeError(f"Number must be a valid uint32 (0-{UINT32_MAX}), got: {num}")


def uint32_to_bytes(num: int) -> bytes:
    """Encode a uint32 as 4 big-endian bytes."""
    _check_uint32(num)
    return struct.pack('>I', num)


def bytes_to_uint32(data: BytesLike) -> int:
    """
    Decode 4 big-endian bytes to a uint32.

    Raises:
        DecodeError: If data is not exactly 4 bytes
    """
    if len(data) != 4:
        raise DecodeError(f"Expected 4 bytes for uint32, got {len(data)}")
    return struct.unpack('>I', bytes(data))[0]


def uint32_to_base64(num: int) -> str:
    """Encode a uint32 as base64 of its 4 big-endian bytes."""
    return byte_array_to_base64(uint32_to_bytes(num))


def base64_to_uint32(text: str) -> int:
    """Decode base64 of exactly 4 big-endian bytes to a uint32."""
    return bytes_to_uint32(_decode_fixed(text, 4, 'uint32'))


def copy_to_buffer(dest: bytearray, offset: int, source: Union[str, BytesLike]) -> int:
    """
    Copy text or bytes into dest starting at offset.

    Text is written one byte per UTF-16 code unit (low 8 bits of each
    unit), so ASCII text maps to itself.

    Args:
        dest: Destination buffer
        offset: Start position, must lie inside dest
        source: Text or bytes to copy

    Returns:
        Offset just past the last byte written

    Raises:
        BufferBoundsError: If offset is out of bounds or source does not fit
        TypeError: If source is neither text nor bytes
    """
    if offset < 0 or offset >= len(dest):
        raise BufferBoundsError(
            f"Offset {offset} is out of bounds for buffer length {len(dest)}"
        )

    if isinstance(source, str):
        units = source.encode('utf-16-le', 'surrogatepass')
        # Low byte of each little-endian code unit
        data = units[0::2]
    elif isinstance(source, (bytes, bytearray, memoryview)):
        data = bytes(source)
    else:
        raise TypeError("Source must be a string or bytes")

    if offset + len(data) > len(dest):
        raise BufferBoundsError(
            f"Buffer overflow: need {len(data)} bytes but only "
            f"{len(dest) - offset} available"
        )
    dest[offset:offset + len(data)] = data
    return offset + len(data)


def bytes_to_string(data: Union[BytesLike, List[int]]) -> str:
    """
    Decode UTF-8 bytes to text, replacing invalid sequences.

    Raises:
        TypeError: If data is None or of an unsupported type
    """
    if data is None:
        raise TypeError("Input cannot be None")
    if isinstance(data, list):
        data = bytes(data)
    if not isinstance(data, (bytes, bytearray, memoryview)):
        raise TypeError("Input must be bytes, bytearray, memoryview or list of ints")
    return bytes(data).decode('utf-8', errors='replace')


def encode_data(data: Union[str, BytesLike]) -> bytes:
    """
    Normalize message input to bytes.

    Text is UTF-8 encoded; bytes-like objects are copied as-is.

    Raises:
        TypeError: If data is neither text nor bytes-like
    """
    if isinstance(data, str):
        return data.encode('utf-8')
    if isinstance(data, (bytes, bytearray, memoryview)):
        return bytes(data)
    raise TypeError(f"Data must be str or bytes-like, got {type(data).__name__}")


async def generate_random_bytes(length: int) -> bytes:
    """
    Generate cryptographically secure random bytes.

    Args:
        length: Number of bytes to generate

    Returns:
        Random bytes

    Raises:
        ValueError: If length is negative
    """
    if length < 0:
        raise ValueError("Length must be non-negative")
    return secrets.token_bytes(length)


def convert_to_json_serializable(value: Any) -> Any:
    """
    Recursively convert a value into JSON-serializable form.

    bytes become base64 text, dataclasses become dicts, tuples become lists.
    """
    if isinstance(value, (bytes, bytearray, memoryview)):
        return byte_array_to_base64(value)
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {
            f.name: convert_to_json_serializable(getattr(value, f.name))
            for f in dataclasses.fields(value)
        }
    if isinstance(value, dict):
        return {str(k): convert_to_json_serializable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [convert_to_json_serializable(v) for v in value]
    return value
