"""
Delivery component - Response policy derived from the system config.

Functional core: pure functions the HTTP layer applies to each response.

Key behaviors:
- CORS disabled limits cross-origin access to the configured domain
- HTTP caching uses the configured max-age and the current etag,
  or is overridden entirely when disabled
- Backup downloads are gated by HTTP Basic credentials
"""

from __future__ import annotations

import base64
import binascii
import secrets
from dataclasses import dataclass, field
from urllib.parse import urlparse

from src.domain.entities import SystemConfig

NO_CACHE_CONTROL = "no-cache"
GZIP_MIN_BYTES = 500


@dataclass(frozen=True)
class CachePolicy:
    """Cache headers for a cacheable response."""

    cache_control: str
    etag: str | None = None
    headers: dict[str, str] = field(default_factory=dict)


# --- CORS ---


def origin_allowed(config: SystemConfig, origin: str | None) -> bool:
    """
    Decide whether a request from ``origin`` may be served.

    Requests without an Origin header are same-origin and always allowed.
    With CORS disabled only the configured domain is allowed; an empty
    domain allows no cross-origin requests at all.
    """
    if not origin or not config.disable_cors:
        return True
    if not config.domain:
        return False
    host = urlparse(origin).hostname
    return host is not None and host.lower() == config.domain


# --- HTTP Cache ---


def determine_cache_policy(config: SystemConfig) -> CachePolicy:
    """Build the cache headers for a public response."""
    if config.disable_http_cache:
        return CachePolicy(
            cache_control=NO_CACHE_CONTROL,
            headers={"Cache-Control": NO_CACHE_CONTROL},
        )

    cache_control = f"max-age={config.cache_max_age}, public"
    return CachePolicy(
        cache_control=cache_control,
        etag=config.etag,
        headers={"Cache-Control": cache_control, "ETag": config.etag},
    )


def is_not_modified(config: SystemConfig, if_none_match: str | None) -> bool:
    """True when the client already holds the current etag."""
    if config.disable_http_cache or not if_none_match or not config.etag:
        return False
    tags = [tag.strip() for tag in if_none_match.split(",")]
    return config.etag in tags or "*" in tags


# --- GZIP ---


def gzip_allowed(config: SystemConfig, accept_encoding: str | None, size: int) -> bool:
    """True when a response body of ``size`` bytes should be gzip-compressed."""
    if config.disable_gzip or not accept_encoding or size < GZIP_MIN_BYTES:
        return False
    encodings = [part.split(";")[0].strip().lower() for part in accept_encoding.split(",")]
    return "gzip" in encodings


# --- Backup Auth ---


def backup_auth_ok(config: SystemConfig, authorization: str | None) -> bool:
    """
    Check HTTP Basic credentials against the configured backup user.

    Backups are refused entirely until both a user and a password are set.
    """
    user = config.backup_basic_auth_user
    password = config.backup_basic_auth_password
    if not user or not password or not authorization:
        return False

    scheme, _, encoded = authorization.partition(" ")
    if scheme.lower() != "basic" or not encoded:
        return False
    try:
        decoded = base64.b64decode(encoded.strip(), validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError):
        return False

    given_user, sep, given_password = decoded.partition(":")
    if not sep:
        return False
    user_ok = secrets.compare_digest(given_user.encode(), user.encode())
    password_ok = secrets.compare_digest(given_password.encode(), password.encode())
    return user_ok and password_ok
