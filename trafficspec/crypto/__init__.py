"""RSA compatibility verification for captured payloads."""

from trafficspec.crypto.equality import deep_equal
from trafficspec.crypto.rsa_cipher import (
    SUPPORTED_SCHEMES,
    RSACipher,
    generate_key_pair,
    load_private_key,
    load_public_key,
)
from trafficspec.crypto.verifier import (
    CANARY_PAYLOAD,
    CheckResult,
    EncryptionCompatibilityVerifier,
    EncryptionConfig,
    VerificationRecord,
    VerificationResult,
    validate_encryption_info,
)

__all__ = [
    # Equality
    "deep_equal",
    # Cipher
    "SUPPORTED_SCHEMES",
    "RSACipher",
    "generate_key_pair",
    "load_private_key",
    "load_public_key",
    # Verifier
    "CANARY_PAYLOAD",
    "CheckResult",
    "EncryptionCompatibilityVerifier",
    "EncryptionConfig",
    "VerificationRecord",
    "VerificationResult",
    "validate_encryption_info",
]
