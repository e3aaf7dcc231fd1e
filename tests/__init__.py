# SecureLink Test Suite
"""
Test suite including:
- Codec unit tests
- Provider contract tests
- Key exchange, signature and lifecycle tests
- Security tests (tampering, rotation, misuse)

Run with: pytest
"""
