"""
Shared fixtures for signer, timestamp signer and serializer tests.

The secret keys and timestamps below produce tokens that are also produced by
itsdangerous, and several tests assert on those exact tokens.
"""

from datetime import datetime, timezone

import pytest

from safesign import default_builder


# ==================== Known-answer constants ====================

SECRET_KEY = "hello"

# 1560181622 seconds after the Unix epoch
SIGNED_AT = datetime.fromtimestamp(1560181622, tz=timezone.utc)


# ==================== Signer Fixtures ====================


@pytest.fixture
def signer():
    """Default signer (sha1, HMAC, django-concat) for the known-answer key."""
    return default_builder(SECRET_KEY).build()


@pytest.fixture
def timestamp_signer(signer):
    """Timestamp signer wrapping the default signer."""
    return signer.into_timestamp_signer()


@pytest.fixture
def signed_at() -> datetime:
    """Timestamp used by the known-answer timed tokens."""
    return SIGNED_AT


@pytest.fixture
def now() -> datetime:
    """Current UTC time, truncated to the second like encoded timestamps."""
    return datetime.now(timezone.utc).replace(microsecond=0)
