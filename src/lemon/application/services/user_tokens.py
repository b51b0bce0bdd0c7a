"""Raw codes for single-use tokens; only their hashes are stored."""

import hashlib
import secrets
from datetime import timedelta

from lemon.domain.shared.time import utc_now
from lemon_auth.repositories import UserTokenRepository

# Expired tokens stay countable by per-day rate limits for this long
EXPIRED_TOKEN_RETENTION = timedelta(days=1)


def generate_code() -> str:
    return secrets.token_urlsafe(32)


def hash_code(raw_code: str) -> str:
    return hashlib.sha256(raw_code.encode()).hexdigest()


async def purge_stale_tokens(token_repository: UserTokenRepository) -> int:
    """Delete tokens that expired longer ago than the retention window."""
    return await token_repository.cleanup_expired(utc_now() - EXPIRED_TOKEN_RETENTION)
