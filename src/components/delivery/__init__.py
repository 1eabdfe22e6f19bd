"""
Delivery component - Config-driven response policy.
"""

from .component import (
    GZIP_MIN_BYTES,
    NO_CACHE_CONTROL,
    CachePolicy,
    backup_auth_ok,
    determine_cache_policy,
    gzip_allowed,
    is_not_modified,
    origin_allowed,
)

__all__ = [
    "CachePolicy",
    "GZIP_MIN_BYTES",
    "NO_CACHE_CONTROL",
    "backup_auth_ok",
    "determine_cache_policy",
    "gzip_allowed",
    "is_not_modified",
    "origin_allowed",
]
