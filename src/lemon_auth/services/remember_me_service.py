"""Stateless remember-me tokens.

The cookie value is ``base64url(user_id:expiry:signature)`` where the
signature is an HMAC-SHA256 over ``user_id:expiry:password_hash``. Nothing
is stored server side: changing the password changes the hash and with it
every signature, so outstanding remember-me cookies stop working.
"""

import base64
import binascii
import hashlib
import hmac
from collections.abc import Sequence
from datetime import datetime, timedelta, timezone
from uuid import UUID

from lemon_auth.exceptions import InvalidRememberMeTokenError
from lemon_auth.schemas import RememberMePayload

REMEMBER_ME_COOKIE = "rememberMe"
REMEMBER_ME_PARAMETER = "rememberMe"
DEFAULT_VALIDITY_SECONDS = 14 * 24 * 60 * 60


class RememberMeService:
    """Create and check remember-me cookie values.

    Examples
    --------
    >>> service = RememberMeService(key="remember-me-key")
    >>> value = service.create_token(user_id, password_hash)
    >>> payload = service.decode(value)
    >>> service.verify(payload, password_hash)
    """

    def __init__(
        self,
        key: str,
        previous_keys: Sequence[str] = (),
        validity_seconds: int = DEFAULT_VALIDITY_SECONDS,
    ):
        """Initialize the remember-me service.

        Parameters
        ----------
        key
            Active signing key, used for every new cookie
        previous_keys
            Retired keys still accepted when checking a cookie
        validity_seconds
            Lifetime of a new cookie (default two weeks)
        """
        if not key:
            msg = "Remember-me key cannot be empty"
            raise ValueError(msg)
        self._keys = [key, *(k for k in previous_keys if k and k != key)]
        self._validity = timedelta(seconds=validity_seconds)

    @property
    def validity_seconds(self) -> int:
        return int(self._validity.total_seconds())

    def create_token(
        self,
        user_id: UUID,
        password_hash: str,
        now: datetime | None = None,
    ) -> str:
        """Build a signed cookie value for the user."""
        issued = now or datetime.now(tz=timezone.utc)
        expiry = int((issued + self._validity).timestamp())
        signature = self._sign(self._keys[0], user_id, expiry, password_hash)
        raw = f"{user_id}:{expiry}:{signature}".encode("utf-8")
        return base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")

    def decode(self, value: str) -> RememberMePayload:
        """Split a cookie value into its parts without checking the signature.

        Raises
        ------
        InvalidRememberMeTokenError
            If the value is not a well-formed remember-me token
        """
        if not value:
            raise InvalidRememberMeTokenError("Remember-me cookie is empty")

        padded = value + "=" * (-len(value) % 4)
        try:
            raw = base64.urlsafe_b64decode(padded.encode("ascii")).decode("utf-8")
        except (binascii.Error, UnicodeError, ValueError) as e:
            raise InvalidRememberMeTokenError("Remember-me cookie is not base64") from e

        parts = raw.split(":")
        if len(parts) != 3:
            raise InvalidRememberMeTokenError("Remember-me cookie must have three parts")

        user_id_str, expiry_str, signature = parts
        try:
            user_id = UUID(user_id_str)
            expires_at = datetime.fromtimestamp(int(expiry_str), tz=timezone.utc)
        except (ValueError, OverflowError, OSError) as e:
            raise InvalidRememberMeTokenError("Remember-me cookie is malformed") from e

        return RememberMePayload(
            user_id=user_id,
            expires_at=expires_at,
            signature=signature,
        )

    def verify(
        self,
        payload: RememberMePayload,
        password_hash: str,
        now: datetime | None = None,
    ) -> None:
        """Check expiry and signature of a decoded cookie.

        Parameters
        ----------
        payload
            Result of :meth:`decode`
        password_hash
            Current password hash of ``payload.user_id``

        Raises
        ------
        InvalidRememberMeTokenError
            If the cookie expired or no configured key produced its signature
        """
        current = now or datetime.now(tz=timezone.utc)
        if payload.expires_at < current:
            raise InvalidRememberMeTokenError("Remember-me cookie has expired")

        expiry = int(payload.expires_at.timestamp())
        for key in self._keys:
            expected = self._sign(key, payload.user_id, expiry, password_hash)
            if hmac.compare_digest(expected, payload.signature):
                return

        raise InvalidRememberMeTokenError("Remember-me cookie signature mismatch")

    @staticmethod
    def _sign(key: str, user_id: UUID, expiry: int, password_hash: str) -> str:
        message = f"{user_id}:{expiry}:{password_hash}".encode("utf-8")
        return hmac.new(key.encode("utf-8"), message, hashlib.sha256).hexdigest()
