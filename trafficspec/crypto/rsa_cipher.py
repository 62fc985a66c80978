"""Block-wise RSA encryption compatible with base64 request envelopes.

Plaintext longer than one RSA block is split into chunks of the maximum
message size. The encrypted blocks are concatenated and base64-encoded.
"""

import base64
import binascii
from typing import Optional, Tuple, Union

from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import padding, rsa

SCHEME_PKCS1 = "pkcs1"
SCHEME_OAEP = "pkcs1_oaep"
SUPPORTED_SCHEMES = (SCHEME_PKCS1, SCHEME_OAEP)

# OAEP overhead with SHA-1: 2 * digest size + 2
_OAEP_OVERHEAD = 2 * 20 + 2
_PKCS1_OVERHEAD = 11


def load_private_key(pem: str) -> rsa.RSAPrivateKey:
    key = serialization.load_pem_private_key(pem.encode(), password=None)
    if not isinstance(key, rsa.RSAPrivateKey):
        raise TypeError(f"Expected an RSA private key, got {type(key).__name__}")
    return key


def load_public_key(pem: str) -> rsa.RSAPublicKey:
    key = serialization.load_pem_public_key(pem.encode())
    if not isinstance(key, rsa.RSAPublicKey):
        raise TypeError(f"Expected an RSA public key, got {type(key).__name__}")
    return key


def generate_key_pair(key_size: int = 2048) -> Tuple[str, str]:
    """Generate a PEM key pair ``(public, private)`` for local testing."""
    private_key = rsa.generate_private_key(public_exponent=65537, key_size=key_size)
    private_pem = private_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    ).decode()
    public_pem = private_key.public_key().public_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    ).decode()
    return public_pem, private_pem


class RSACipher:
    """RSA encryption/decryption over arbitrarily long messages."""

    def __init__(
        self,
        public_key: Optional[rsa.RSAPublicKey] = None,
        private_key: Optional[rsa.RSAPrivateKey] = None,
        scheme: str = SCHEME_PKCS1,
    ):
        if scheme not in SUPPORTED_SCHEMES:
            raise ValueError(f"Unsupported encryption scheme: {scheme}")
        if public_key is None and private_key is not None:
            public_key = private_key.public_key()

        self.public_key = public_key
        self.private_key = private_key
        self.scheme = scheme

    @classmethod
    def from_pem(
        cls,
        public_pem: Optional[str] = None,
        private_pem: Optional[str] = None,
        scheme: str = SCHEME_PKCS1,
    ) -> "RSACipher":
        return cls(
            public_key=load_public_key(public_pem) if public_pem else None,
            private_key=load_private_key(private_pem) if private_pem else None,
            scheme=scheme,
        )

    @property
    def key_size(self) -> int:
        key = self.public_key or self.private_key
        if key is None:
            raise ValueError("No RSA key configured")
        return key.key_size

    @property
    def block_size(self) -> int:
        return (self.key_size + 7) // 8

    @property
    def max_message_size(self) -> int:
        overhead = _OAEP_OVERHEAD if self.scheme == SCHEME_OAEP else _PKCS1_OVERHEAD
        return self.block_size - overhead

    def _padding(self) -> padding.AsymmetricPadding:
        if self.scheme == SCHEME_OAEP:
            return padding.OAEP(
                mgf=padding.MGF1(algorithm=hashes.SHA1()),
                algorithm=hashes.SHA1(),
                label=None,
            )
        return padding.PKCS1v15()

    def encrypt(self, message: Union[str, bytes]) -> str:
        """Encrypt ``message`` with the public key and return base64 text."""
        if self.public_key is None:
            raise ValueError("No public key configured")

        data = message.encode("utf-8") if isinstance(message, str) else message
        size = self.max_message_size
        chunks = [data[i:i + size] for i in range(0, len(data), size)] or [b""]

        ciphertext = b"".join(self.public_key.encrypt(chunk, self._padding()) for chunk in chunks)
        return base64.b64encode(ciphertext).decode("ascii")

    def decrypt(self, token: str) -> bytes:
        """Decrypt base64 text produced by ``encrypt``."""
        if self.private_key is None:
            raise ValueError("No private key configured")

        try:
            ciphertext = base64.b64decode(token, validate=True)
        except binascii.Error as e:
            raise ValueError(f"Ciphertext is not valid base64: {e}")

        block = self.block_size
        if not ciphertext or len(ciphertext) % block:
            raise ValueError(f"Ciphertext length {len(ciphertext)} is not a multiple of {block}")

        return b"".join(
            self.private_key.decrypt(ciphertext[i:i + block], self._padding())
            for i in range(0, len(ciphertext), block)
        )
