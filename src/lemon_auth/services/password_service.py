"""Password hashing service using bcrypt.

Provides secure password hashing and verification with configurable
strength validation.
"""

import secrets

import bcrypt

from lemon_auth.exceptions import WeakPasswordError

# bcrypt only reads the first 72 bytes and recent releases reject longer input
BCRYPT_MAX_BYTES = 72


def _encode(password: str) -> bytes:
    return password.encode("utf-8")[:BCRYPT_MAX_BYTES]


class PasswordHashingService:
    """Service for secure password hashing and verification.

    Uses bcrypt for password hashing with configurable work factor.
    Also provides password strength validation.

    Examples
    --------
    >>> service = PasswordHashingService()
    >>> hash = service.hash("my_secure_password")
    >>> service.verify("my_secure_password", hash)
    True
    >>> service.verify("wrong_password", hash)
    False
    """

    # Password requirements
    MIN_LENGTH = 8
    MAX_LENGTH = 128

    def __init__(self, rounds: int = 12):
        """Initialize the password hashing service.

        Parameters
        ----------
        rounds
            The bcrypt work factor (log2 of iterations). Default is 12,
            which is a good balance of security and performance.
            Higher values are more secure but slower.
        """
        self._rounds = rounds
        self._dummy_hash: bytes | None = None

    @property
    def rounds(self) -> int:
        return self._rounds

    def hash(self, password: str) -> str:
        """Hash a plaintext password.

        Parameters
        ----------
        password
            The plaintext password to hash

        Returns
        -------
        The bcrypt hash as a string

        Raises
        ------
        WeakPasswordError
            If password doesn't meet requirements
        """
        self.validate_strength(password)
        salt = bcrypt.gensalt(rounds=self._rounds)
        hashed = bcrypt.hashpw(_encode(password), salt)
        return hashed.decode("utf-8")

    def verify(self, password: str, password_hash: str) -> bool:
        """Verify a password against a hash.

        Parameters
        ----------
        password
            The plaintext password to check
        password_hash
            The bcrypt hash to verify against

        Returns
        -------
        True if password matches, False otherwise
        """
        if not password or not password_hash:
            return False
        try:
            return bcrypt.checkpw(
                _encode(password),
                password_hash.encode("utf-8"),
            )
        except (ValueError, TypeError):
            # Invalid hash format
            return False

    def dummy_verify(self, password: str) -> None:
        """Spend one bcrypt comparison on a throwaway hash.

        Called when no account matches a login attempt, so the response
        takes as long as a wrong password for an existing account.
        """
        if self._dummy_hash is None:
            self._dummy_hash = bcrypt.hashpw(
                secrets.token_hex(16).encode("ascii"),
                bcrypt.gensalt(rounds=self._rounds),
            )
        bcrypt.checkpw(_encode(password or ""), self._dummy_hash)

    def validate_strength(self, password: str) -> None:
        """Validate that a password meets strength requirements.

        Current requirements:
        - Minimum 8 characters
        - Maximum 128 characters

        Raises
        ------
        WeakPasswordError
            If password doesn't meet requirements
        """
        if not password:
            msg = "Password cannot be empty"
            raise WeakPasswordError(msg)

        if len(password) < self.MIN_LENGTH:
            msg = f"Password must be at least {self.MIN_LENGTH} characters"
            raise WeakPasswordError(msg)

        if len(password) > self.MAX_LENGTH:
            msg = f"Password cannot exceed {self.MAX_LENGTH} characters"
            raise WeakPasswordError(msg)

    def needs_rehash(self, password_hash: str) -> bool:
        """Check if a password hash needs to be rehashed.

        This is useful when upgrading the work factor. After changing
        the rounds setting, existing hashes can be identified for
        rehashing on next login.
        """
        try:
            # bcrypt format: $2b$XX$...
            parts = password_hash.split("$")
            if len(parts) >= 3:
                current_rounds = int(parts[2])
                return current_rounds != self._rounds
        except (ValueError, IndexError):
            pass
        return True
