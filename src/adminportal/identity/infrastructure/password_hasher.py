from __future__ import annotations

import hashlib
import hmac
import os

import structlog

from adminportal.identity.domain.entities.user import PasswordMaterial

logger = structlog.get_logger(__name__)


class Pbkdf2PasswordHasher:
    """PBKDF2-HMAC-SHA512 with a separate hex salt; digest and salt are stored apart."""

    iterations: int = 10_000
    dklen: int = 64
    salt_bytes: int = 16

    def hash(self, plain: str) -> PasswordMaterial:
        if not plain:
            raise ValueError("password_empty")
        salt = os.urandom(self.salt_bytes).hex()
        return PasswordMaterial(hash=self._derive(plain, salt), salt=salt)

    def verify(self, plain: str, material: PasswordMaterial) -> bool:
        try:
            candidate = self._derive(plain, material.salt)
            return hmac.compare_digest(candidate, material.hash.lower())
        except (TypeError, ValueError) as e:
            logger.error("PBKDF2 verify failed", error=str(e))
            return False

    def _derive(self, plain: str, salt: str) -> str:
        # the hex salt string itself is the PBKDF2 salt input
        dk = hashlib.pbkdf2_hmac("sha512", plain.encode("utf-8"), salt.encode("utf-8"), self.iterations, dklen=self.dklen)
        return dk.hex()
