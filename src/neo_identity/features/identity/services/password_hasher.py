"""PBKDF2 password hashing.

Hash layout (base64 encoded):

    [0]      format marker (0x01)
    [1:5]    iteration count, big-endian uint32
    [5:21]   salt
    [21:53]  PBKDF2-HMAC-SHA256 subkey
"""

import base64
import binascii
import logging
import secrets
import struct
from typing import Generic, Optional

from cryptography.exceptions import InvalidKey
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from ..entities.protocols import TUser
from ..entities.results import PasswordVerificationResult

logger = logging.getLogger(__name__)

FORMAT_MARKER = 0x01
SALT_SIZE = 16
SUBKEY_SIZE = 32
DEFAULT_ITERATIONS = 100000

_HEADER = struct.Struct(">BI")


def _kdf(salt: bytes, iterations: int) -> PBKDF2HMAC:
    return PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=SUBKEY_SIZE,
        salt=salt,
        iterations=iterations,
    )


class PasswordHasher(Generic[TUser]):
    """Hashes passwords with PBKDF2-HMAC-SHA256 and a random salt."""

    def __init__(self, iterations: int = DEFAULT_ITERATIONS):
        if iterations < 1:
            raise ValueError("iterations must be positive")
        self.iterations = iterations

    def hash_password(self, user: Optional[TUser], password: str) -> str:
        if password is None:
            raise ValueError("password is required")

        salt = secrets.token_bytes(SALT_SIZE)
        subkey = _kdf(salt, self.iterations).derive(password.encode("utf-8"))
        payload = _HEADER.pack(FORMAT_MARKER, self.iterations) + salt + subkey
        return base64.b64encode(payload).decode("ascii")

    def verify_hashed_password(
        self, user: Optional[TUser], hashed_password: str, provided_password: str
    ) -> PasswordVerificationResult:
        if not hashed_password or provided_password is None:
            return PasswordVerificationResult.FAILED

        try:
            payload = base64.b64decode(hashed_password, validate=True)
        except (binascii.Error, ValueError):
            logger.debug("Stored password hash is not valid base64")
            return PasswordVerificationResult.FAILED

        if len(payload) != _HEADER.size + SALT_SIZE + SUBKEY_SIZE:
            return PasswordVerificationResult.FAILED

        marker, iterations = _HEADER.unpack_from(payload)
        if marker != FORMAT_MARKER or iterations < 1:
            return PasswordVerificationResult.FAILED

        salt = payload[_HEADER.size:_HEADER.size + SALT_SIZE]
        expected = payload[_HEADER.size + SALT_SIZE:]

        try:
            _kdf(salt, iterations).verify(provided_password.encode("utf-8"), expected)
        except InvalidKey:
            return PasswordVerificationResult.FAILED

        if iterations < self.iterations:
            return PasswordVerificationResult.SUCCESS_REHASH_NEEDED
        return PasswordVerificationResult.SUCCESS
