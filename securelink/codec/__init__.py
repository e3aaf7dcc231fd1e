# Codec Module
"""
Wire encodings shared by key exchange and signatures:
- base64 <-> bytes
- uint64 / safe integer / uint32 big-endian encodings
- Buffered copy helpers
- Encryption envelope container
"""

from .encoding import (
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

__all__ = [
    'EncryptionResult',
    'byte_array_to_base64',
    'base64_to_byte_array',
    'bigint_to_base64',
    'base64_to_bigint',
    'number_to_base64',
    'base64_to_number',
    'uint32_to_bytes',
    'bytes_to_uint32',
    'uint32_to_base64',
    'base64_to_uint32',
    'copy_to_buffer',
    'bytes_to_string',
    'encode_data',
    'generate_random_bytes',
    'convert_to_json_serializable',
]
