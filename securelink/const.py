"""Constants for the SecureLink key exchange and signature protocol."""

# Algorithm identifiers understood by the capability provider
X25519 = "X25519"
ED25519 = "Ed25519"
HKDF = "HKDF"
AES_GCM = "AES-GCM"
RAW = "raw"

# Key exchange
SHARED_SECRET_BITS = 256
AES_KEY_BITS = 256
NONCE_SIZE = 12             # 96-bit nonce for GCM
TAG_SIZE = 16               # 128-bit GCM tag appended to ciphertext
HKDF_HASH = "SHA-256"
HKDF_SALT = bytes(32)       # fixed all-zero salt

# HKDF info prefixes; the local ephemeral public key (base64) is appended
CLIENT_TO_SERVER = "client-to-server"
SERVER_TO_CLIENT = "server-to-client"

# Wire sizes
PUBLIC_KEY_SIZE = 32        # raw X25519 / Ed25519 public key
SIGNATURE_SIZE = 64         # Ed25519 signature

# Codec ranges
UINT32_MAX = 0xFFFFFFFF
UINT64_MAX = 0xFFFFFFFFFFFFFFFF
MAX_SAFE_INTEGER = 2 ** 53 - 1
