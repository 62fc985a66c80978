"""RSA compatibility checks for a known key pair against sample payloads.

The verifier never raises from ``verify``: every failure is turned into a
failed ``CheckResult`` so the remaining checks still run.
"""

import base64
import binascii
import json
import time
import uuid
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from trafficspec.config import EncryptionInfo, EncryptionValidationResult, PaddingScheme
from trafficspec.crypto.equality import deep_equal
from trafficspec.crypto.rsa_cipher import (
    SCHEME_OAEP,
    SCHEME_PKCS1,
    SUPPORTED_SCHEMES,
    RSACipher,
    load_private_key,
    load_public_key,
)
from trafficspec.utils import logger

CANARY_PAYLOAD = {"test": "parameter_validation"}
ENCRYPTED_PREVIEW_LENGTH = 100


def _now_ms() -> float:
    return time.time() * 1000


def _serialize(payload: Any) -> str:
    return json.dumps(payload, separators=(",", ":"), ensure_ascii=False)


class EncryptionConfig(BaseModel):
    """Encryption parameters under test."""

    algorithm: str = "RSA"
    key_size: int = 2048
    padding: str = PaddingScheme.PKCS1.value
    public_key: Optional[str] = None
    private_key: Optional[str] = None
    encryption_scheme: str = SCHEME_PKCS1
    verified: bool = False
    last_verified: Optional[float] = None

    @classmethod
    def from_pem_files(
        cls,
        public_key_path: str,
        private_key_path: str,
        **kwargs: Any,
    ) -> "EncryptionConfig":
        """Load a key pair from PEM files."""
        return cls(
            public_key=Path(public_key_path).read_text(),
            private_key=Path(private_key_path).read_text(),
            **kwargs,
        )


class CheckResult(BaseModel):
    """Outcome of one verification check."""

    success: bool
    error: Optional[str] = None
    data: Optional[Dict[str, Any]] = None


class VerificationResult(BaseModel):
    """Outcome of one ``verify`` call."""

    test_id: str
    compatible: bool
    encryption_test: CheckResult
    round_trip_test: CheckResult
    key_compatibility_test: CheckResult
    parameter_test: CheckResult
    recommended_config: EncryptionConfig
    timestamp: float


class VerificationRecord(BaseModel):
    """History entry for a ``verify`` call."""

    test_id: str
    success: bool
    details: VerificationResult
    timestamp: float


def validate_encryption_info(info: EncryptionInfo) -> EncryptionValidationResult:
    """Structurally validate an encryption descriptor.

    No cryptographic operation is performed.

    Args:
        info: Descriptor to check

    Returns:
        EncryptionValidationResult with errors and warnings
    """
    errors: List[str] = []
    warnings: List[str] = []

    if info.algorithm != "RSA":
        errors.append("Algorithm must be RSA")

    if not info.key_size or info.key_size < 1024:
        errors.append("Key size must be at least 1024 bits")
    elif info.key_size < 2048:
        warnings.append("Key size less than 2048 bits is not recommended")

    if info.padding not in [p.value for p in PaddingScheme]:
        errors.append("Padding must be PKCS1 or OAEP")

    if info.public_key and "BEGIN PUBLIC KEY" not in info.public_key:
        errors.append("Public key must be in PEM format")

    if info.private_key and "BEGIN PRIVATE KEY" not in info.private_key:
        errors.append("Private key must be in PEM format")

    return EncryptionValidationResult(is_valid=not errors, errors=errors, warnings=warnings)


class EncryptionCompatibilityVerifier:
    """Checks whether a configured RSA key pair handles sample payloads."""

    def __init__(self, config: Optional[EncryptionConfig] = None):
        self._config = config or EncryptionConfig()
        self._history: Dict[str, VerificationRecord] = {}

    def _cipher(self, scheme: Optional[str] = None) -> RSACipher:
        return RSACipher.from_pem(
            public_pem=self._config.public_key,
            private_pem=self._config.private_key,
            scheme=scheme or self._config.encryption_scheme,
        )

    async def verify(self, sample: Any) -> VerificationResult:
        """Run all four checks against ``sample``.

        The payload must encrypt, round-trip back to an equal value and the
        key pair must import with the configured size for the result to be
        compatible. The scheme check is informational only.

        Args:
            sample: Decoded JSON payload to test with

        Returns:
            VerificationResult, also recorded in the test history
        """
        test_id = f"verify_{uuid.uuid1().hex}"

        try:
            encryption_test = await self._test_encryption(sample)
            round_trip_test = await self._test_round_trip(sample)
            key_test = await self._test_key_compatibility()
            parameter_test = await self._test_encryption_parameters()

            compatible = encryption_test.success and round_trip_test.success and key_test.success
            result = VerificationResult(
                test_id=test_id,
                compatible=compatible,
                encryption_test=encryption_test,
                round_trip_test=round_trip_test,
                key_compatibility_test=key_test,
                parameter_test=parameter_test,
                recommended_config=self._recommended_config(compatible),
                timestamp=_now_ms(),
            )
        except Exception as e:
            logger.warning(f"Encryption verification {test_id} aborted: {e}")
            failed = CheckResult(success=False, error=str(e))
            result = VerificationResult(
                test_id=test_id,
                compatible=False,
                encryption_test=failed,
                round_trip_test=failed.model_copy(),
                key_compatibility_test=failed.model_copy(),
                parameter_test=failed.model_copy(),
                recommended_config=self.get_current_config(),
                timestamp=_now_ms(),
            )

        self._history[test_id] = VerificationRecord(
            test_id=test_id,
            success=result.compatible,
            details=result,
            timestamp=result.timestamp,
        )
        logger.info(f"Encryption verification {test_id}: compatible={result.compatible}")
        return result

    async def _test_encryption(self, sample: Any) -> CheckResult:
        try:
            serialized = _serialize(sample)
            encrypted = self._cipher().encrypt(serialized)
            if not encrypted:
                return CheckResult(success=False, error="Encryption failed: no encrypted data returned")
            try:
                base64.b64decode(encrypted, validate=True)
            except binascii.Error:
                return CheckResult(success=False, error="Encryption failed: output is not valid base64")

            return CheckResult(
                success=True,
                data={
                    "original_size": len(serialized),
                    "encrypted_size": len(encrypted),
                    "encrypted_preview": encrypted[:ENCRYPTED_PREVIEW_LENGTH] + "...",
                },
            )
        except Exception as e:
            logger.warning(f"Encryption test failed: {e}")
            return CheckResult(success=False, error=f"Encryption test failed: {e}")

    async def _test_round_trip(self, sample: Any) -> CheckResult:
        try:
            cipher = self._cipher()
            encrypted = cipher.encrypt(_serialize(sample))
            decrypted = json.loads(cipher.decrypt(encrypted).decode("utf-8"))

            if not deep_equal(sample, decrypted):
                return CheckResult(
                    success=False,
                    error="Round trip failed: decrypted data does not match original",
                    data={"original": sample, "decrypted": decrypted},
                )

            return CheckResult(success=True, data={"round_trip_successful": True, "data_integrity": "preserved"})
        except Exception as e:
            logger.warning(f"Round trip test failed: {e}")
            return CheckResult(success=False, error=f"Round trip test failed: {e}")

    async def _test_key_compatibility(self) -> CheckResult:
        try:
            if not self._config.private_key or not self._config.public_key:
                return CheckResult(success=False, error="Key compatibility test failed: key pair is incomplete")

            private_key = load_private_key(self._config.private_key)
            public_key = load_public_key(self._config.public_key)

            if private_key.public_key().public_numbers() != public_key.public_numbers():
                return CheckResult(success=False, error="Key pair mismatch: public key does not belong to private key")

            key_size = private_key.key_size
            if key_size != self._config.key_size:
                return CheckResult(
                    success=False,
                    error=f"Key size mismatch: expected {self._config.key_size}, got {key_size}",
                )

            cipher = RSACipher(public_key, private_key, self._config.encryption_scheme)
            return CheckResult(
                success=True,
                data={
                    "key_size": key_size,
                    "max_message_size": cipher.max_message_size,
                    "key_format": "PEM",
                },
            )
        except Exception as e:
            logger.warning(f"Key compatibility test failed: {e}")
            return CheckResult(success=False, error=f"Key compatibility test failed: {e}")

    async def _test_encryption_parameters(self) -> CheckResult:
        try:
            private_key = load_private_key(self._config.private_key or "")
            canary = _serialize(CANARY_PAYLOAD)

            results: Dict[str, bool] = {}
            for scheme in SUPPORTED_SCHEMES:
                cipher = RSACipher(private_key=private_key, scheme=scheme)
                try:
                    decrypted = json.loads(cipher.decrypt(cipher.encrypt(canary)).decode("utf-8"))
                    results[scheme] = deep_equal(CANARY_PAYLOAD, decrypted)
                except (ValueError, TypeError) as e:
                    logger.debug(f"Scheme {scheme} failed canary round trip: {e}")
                    results[scheme] = False

            return CheckResult(
                success=True,
                data={
                    "supported_schemes": results,
                    "current_scheme": self._config.encryption_scheme,
                    "recommended_scheme": SCHEME_PKCS1 if results.get(SCHEME_PKCS1) else SCHEME_OAEP,
                },
            )
        except Exception as e:
            logger.warning(f"Parameter test failed: {e}")
            return CheckResult(success=False, error=f"Parameter test failed: {e}")

    def _recommended_config(self, compatible: bool) -> EncryptionConfig:
        return self._config.model_copy(update={"verified": compatible, "last_verified": _now_ms()})

    def update_config(self, **changes: Any) -> None:
        """Merge ``changes`` into the configuration under test."""
        self._config = self._config.model_copy(update=changes)

    def get_current_config(self) -> EncryptionConfig:
        return self._config.model_copy()

    def get_test_history(self) -> List[VerificationRecord]:
        """All recorded verifications, newest first."""
        return list(reversed(list(self._history.values())))

    def get_latest_test_result(self) -> Optional[VerificationRecord]:
        history = self.get_test_history()
        return history[0] if history else None

    def clear_history(self) -> None:
        self._history.clear()

    def validate_encryption_info(self, info: EncryptionInfo) -> EncryptionValidationResult:
        return validate_encryption_info(info)

    def generate_encryption_info(self) -> EncryptionInfo:
        """Describe the configuration under test as an ``EncryptionInfo``."""
        return EncryptionInfo(
            algorithm=self._config.algorithm,
            key_size=self._config.key_size,
            padding=self._config.padding,
            public_key=self._config.public_key,
            private_key=self._config.private_key,
        )
