"""JWT token service.

Provides JWT token creation and verification for authentication, with
signing key rotation: tokens are signed with the active key and carry its
key id in the ``kid`` header, while retired keys stay valid for
verification until they are removed from configuration.
"""

import hashlib
from collections.abc import Sequence
from datetime import datetime, timedelta, timezone
from uuid import UUID

import jwt

from lemon_auth.exceptions import InvalidTokenError
from lemon_auth.schemas import TokenPayload


def key_id(secret_key: str) -> str:
    """Derive a stable, non-reversible identifier for a signing key."""
    return hashlib.sha256(secret_key.encode("utf-8")).hexdigest()[:16]


class JWTService:
    """Service for JWT token creation and verification.

    Handles access tokens (short-lived) and refresh tokens (long-lived)
    for user authentication.

    Examples
    --------
    >>> service = JWTService(secret_key="your-secret-key")
    >>> token = service.create_access_token(user_id, "user@example.com")
    >>> payload = service.verify_token(token)
    >>> print(payload.user_id)
    """

    DEFAULT_ACCESS_EXPIRE_MINUTES = 60
    DEFAULT_REFRESH_EXPIRE_DAYS = 7
    ALGORITHM = "HS256"

    def __init__(
        self,
        secret_key: str,
        access_token_expire_minutes: int = DEFAULT_ACCESS_EXPIRE_MINUTES,
        refresh_token_expire_days: int = DEFAULT_REFRESH_EXPIRE_DAYS,
        previous_secret_keys: Sequence[str] = (),
    ):
        """Initialize the JWT service.

        Parameters
        ----------
        secret_key
            Active key for signing tokens. Must be kept secure.
        access_token_expire_minutes
            Minutes until access token expires (default 60)
        refresh_token_expire_days
            Days until refresh token expires (default 7)
        previous_secret_keys
            Retired keys; tokens signed with them still verify
        """
        if not secret_key:
            msg = "JWT secret key cannot be empty"
            raise ValueError(msg)

        self._active_kid = key_id(secret_key)
        self._keys: dict[str, str] = {self._active_kid: secret_key}
        for old_key in previous_secret_keys:
            if old_key:
                self._keys.setdefault(key_id(old_key), old_key)

        self._access_expire = timedelta(minutes=access_token_expire_minutes)
        self._refresh_expire = timedelta(days=refresh_token_expire_days)

    @property
    def access_token_lifetime(self) -> timedelta:
        return self._access_expire

    @property
    def refresh_token_lifetime(self) -> timedelta:
        return self._refresh_expire

    def create_access_token(
        self,
        user_id: UUID,
        email: str,
        expires_delta: timedelta | None = None,
    ) -> str:
        """Create a short-lived access token."""
        return self._create_token(
            user_id=user_id,
            email=email,
            token_type="access",
            expires_delta=expires_delta or self._access_expire,
        )

    def create_refresh_token(
        self,
        user_id: UUID,
        email: str,
        expires_delta: timedelta | None = None,
    ) -> str:
        """Create a long-lived refresh token.

        Refresh tokens are used to obtain new access tokens without
        requiring the user to log in again.
        """
        return self._create_token(
            user_id=user_id,
            email=email,
            token_type="refresh",
            expires_delta=expires_delta or self._refresh_expire,
        )

    def verify_token(self, token: str) -> TokenPayload:
        """Verify and decode a JWT token.

        Parameters
        ----------
        token
            The JWT token string to verify

        Returns
        -------
        TokenPayload containing the decoded data

        Raises
        ------
        InvalidTokenError
            If token is invalid, expired, malformed or signed with an
            unknown key
        """
        try:
            header = jwt.get_unverified_header(token)
        except jwt.InvalidTokenError as e:
            raise InvalidTokenError(f"Invalid token: {e}") from e

        kid = header.get("kid")
        if kid in self._keys:
            candidates = [self._keys[kid]]
        else:
            candidates = list(self._keys.values())

        payload = None
        signature_error: jwt.InvalidSignatureError | None = None
        for key in candidates:
            try:
                payload = jwt.decode(token, key, algorithms=[self.ALGORITHM])
                break
            except jwt.InvalidSignatureError as e:
                signature_error = e
            except jwt.ExpiredSignatureError as e:
                raise InvalidTokenError("Token has expired") from e
            except jwt.InvalidTokenError as e:
                raise InvalidTokenError(f"Invalid token: {e}") from e

        if payload is None:
            raise InvalidTokenError(f"Invalid token: {signature_error}") from signature_error

        try:
            return TokenPayload(
                user_id=UUID(payload["sub"]),
                email=payload["email"],
                exp=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
                iat=datetime.fromtimestamp(payload["iat"], tz=timezone.utc),
                token_type=payload.get("type", "access"),
            )
        except (KeyError, ValueError, TypeError) as e:
            raise InvalidTokenError(f"Malformed token payload: {e}") from e

    def _create_token(
        self,
        user_id: UUID,
        email: str,
        token_type: str,
        expires_delta: timedelta,
    ) -> str:
        now = datetime.now(tz=timezone.utc)
        expire = now + expires_delta

        payload = {
            "sub": str(user_id),
            "email": email,
            "type": token_type,
            "iat": now,
            "exp": expire,
        }

        return jwt.encode(
            payload,
            self._keys[self._active_kid],
            algorithm=self.ALGORITHM,
            headers={"kid": self._active_kid},
        )
