"""
Password hashing utilities using bcrypt.
"""

import asyncio
import secrets

import bcrypt

from auth_manager.kernel.errors import HashingError, ValidationError

# Number of rounds for bcrypt hashing (12 is secure default)
BCRYPT_ROUNDS = 12

# bcrypt ignores everything past this many bytes of input
MAX_PASSWORD_BYTES = 72


def password_byte_length(password: str) -> int:
    return len(password.encode("utf-8"))


class PasswordHasher:
    """
    Password hashing service.

    Passwords longer than MAX_PASSWORD_BYTES (UTF-8) are refused by `hash` and
    never verify, so two passwords sharing a 72-byte prefix cannot match each
    other. bcrypt is CPU-bound; async callers use hash_async/verify_async,
    which run the work in the loop's default executor.
    """

    def __init__(self, rounds: int = BCRYPT_ROUNDS):
        self.rounds = rounds
        # Stand-in for a stored hash when the account does not exist
        self._dummy_hash = self.hash(secrets.token_urlsafe(16))

    def hash(self, password: str) -> str:
        """
        Hash a password using bcrypt.

        Args:
            password: Plain text password

        Returns:
            Hashed password string

        Raises:
            ValidationError: If the password exceeds MAX_PASSWORD_BYTES
            HashingError: If salt generation or hashing fails
        """
        pwd_bytes = password.encode("utf-8")
        if len(pwd_bytes) > MAX_PASSWORD_BYTES:
            raise ValidationError(
                {"password": f"Password must be at most {MAX_PASSWORD_BYTES} bytes"}
            )
        try:
            salt = bcrypt.gensalt(rounds=self.rounds)
            hashed = bcrypt.hashpw(pwd_bytes, salt)
        except (ValueError, OSError) as e:
            raise HashingError(f"bcrypt hashing failed: {type(e).__name__}") from e
        return hashed.decode("utf-8")

    def verify(self, plain_password: str, hashed_password: str) -> bool:
        """
        Verify a password against its hash.

        Malformed or empty hashes verify as False instead of raising.
        Oversized passwords still cost one bcrypt check, then verify as False.
        """
        if not hashed_password:
            return False
        try:
            pwd_bytes = plain_password.encode("utf-8")
            matched = bcrypt.checkpw(
                pwd_bytes[:MAX_PASSWORD_BYTES],
                hashed_password.encode("utf-8"),
            )
        except (ValueError, TypeError, UnicodeError):
            return False
        return matched and len(pwd_bytes) <= MAX_PASSWORD_BYTES

    async def hash_async(self, password: str) -> str:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self.hash, password)

    async def verify_async(self, plain_password: str, hashed_password: str) -> bool:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self.verify, plain_password, hashed_password)

    async def dummy_verify_async(self, plain_password: str) -> bool:
        """
        Spend one verification against a throwaway hash.

        Used when there is no stored hash to check, so that path costs the
        same as a real mismatch.
        """
        return await self.verify_async(plain_password, self._dummy_hash)
