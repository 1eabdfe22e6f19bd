"""
SystemConfigService - Singleton system configuration store.

Owns the one live SystemConfig of the process: created with defaults on
first run, then read as an immutable snapshot and replaced on each save.

Key behaviors:
- Reads never block; saves are serialized by a single lock
  (last committed write wins, there is no version token)
- Server-owned fields (client secret, etag, identity) are always restored
  from the current record before a save is persisted
- cache_max_age is clamped into range by the entity, never rejected
- The cache invalidate flag is a one-shot command: it rotates the etag,
  triggers exactly one cache purge and is never persisted
"""

from __future__ import annotations

import base64
import logging
import re
import secrets
from collections.abc import Iterable
from datetime import UTC, datetime
from threading import Lock
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from src.components.editor import EditorView, decode, form
from src.domain.entities import (
    INVALIDATE_FLAG,
    SERVER_OWNED_FIELDS,
    SystemConfig,
)

from .models import SaveConfigOutput, ValidationError
from .ports import CachePurgePort, ClockPort, ConfigRepoPort

logger = logging.getLogger(__name__)

_DOMAIN_LABEL = re.compile(r"^[a-z0-9](?:[a-z0-9-]{0,61}[a-z0-9])?$")
_MAX_DOMAIN_LENGTH = 253


# --- Defaults ---


class _UTCClock:
    def now_utc(self) -> datetime:
        return datetime.now(UTC)


def new_etag(now: datetime) -> str:
    """Derive a fresh etag from a point in time."""
    stamp = f"{now.timestamp():.6f}".encode()
    return base64.urlsafe_b64encode(stamp).decode("ascii")


def new_client_secret() -> str:
    return secrets.token_urlsafe(32)


def get_default_config(clock: ClockPort | None = None) -> SystemConfig:
    """
    Build the config created on first run.

    Server-owned values (client secret, etag, uuid) are generated here.
    """
    now = (clock or _UTCClock()).now_utc()
    return SystemConfig(
        created_at=now,
        updated_at=now,
        client_secret=new_client_secret(),
        etag=new_etag(now),
    )


# --- Validation ---


def validate_domain(domain: str) -> bool:
    """
    Check a domain is empty or a bare host name.

    Schemes, paths, ports, whitespace and multiple hosts are rejected.
    """
    if not domain:
        return True
    if len(domain) > _MAX_DOMAIN_LENGTH:
        return False
    return all(_DOMAIN_LABEL.match(label) for label in domain.split("."))


def validate_email(email: str) -> bool:
    if not email:
        return True
    local, sep, host = email.partition("@")
    return bool(sep and local and host and "@" not in host and " " not in email)


def validate_config(config: SystemConfig) -> list[ValidationError]:
    """Validate a candidate config, returning actionable errors."""
    errors: list[ValidationError] = []

    if not validate_domain(config.domain):
        errors.append(
            ValidationError(
                field="domain",
                code="invalid_domain",
                message=(
                    "Field 'domain' must be a bare host name such as example.com "
                    "(no scheme, port, path or multiple hosts)"
                ),
            )
        )

    if not validate_email(config.admin_email):
        errors.append(
            ValidationError(
                field="admin_email",
                code="invalid_email",
                message="Field 'admin_email' must be an email address",
            )
        )

    return errors


def _parse_pydantic_errors(exc: PydanticValidationError) -> list[ValidationError]:
    """Convert a pydantic ValidationError into field-specific errors."""
    errors: list[ValidationError] = []
    for error in exc.errors():
        loc = error.get("loc", ())
        field = ".".join(str(part) for part in loc) if loc else "_schema"
        error_type = error.get("type", "unknown")
        code = "invalid_value"
        if "int" in error_type:
            code = "invalid_number"
        elif "string" in error_type:
            code = "invalid_type"

        errors.append(
            ValidationError(
                field=field,
                code=code,
                message=f"Field '{field}': {error.get('msg', 'Invalid value')}",
            )
        )
    return errors


# --- Cache Purge ---


class NoOpCachePurger:
    """Default no-op cache purger."""

    def purge(self) -> None:
        pass


# --- Settings Service ---


class SystemConfigService:
    """
    Explicitly owned store for the singleton SystemConfig.

    Create one per process and call ``initialize()`` at startup.
    """

    def __init__(
        self,
        repo: ConfigRepoPort,
        purger: CachePurgePort | None = None,
        clock: ClockPort | None = None,
    ) -> None:
        self._repo = repo
        self._purger = purger or NoOpCachePurger()
        self._clock = clock or _UTCClock()
        self._lock = Lock()
        self._current: SystemConfig | None = None

    def initialize(self) -> SystemConfig:
        """Load the stored config, creating defaults on first run."""
        with self._lock:
            if self._current is None:
                stored = self._repo.get()
                if stored is None:
                    stored = self._repo.save(get_default_config(self._clock))
                    logger.info("Created default system config")
                self._current = stored
            return self._current

    def get(self) -> SystemConfig:
        """Current config snapshot."""
        current = self._current
        if current is None:
            return self.initialize()
        return current

    def render_editor(self) -> EditorView:
        """
        Compose the admin editor from the current snapshot.

        Raises:
            EditorError: if the field descriptors fail to render.
        """
        config = self.get()
        return form(config, config.editor_fields())

    def save_submission(self, pairs: Iterable[tuple[str, str]]) -> SaveConfigOutput:
        """Decode a submitted editor form and persist the result."""
        pairs = list(pairs)
        self.get()
        with self._lock:
            current = self._current
            assert current is not None
            decoded = decode(current, current.editor_fields(), pairs)
            return self._commit(
                current,
                decoded.values,
                invalidate=decoded.has_command("cache_invalidate", INVALIDATE_FLAG),
                discarded=decoded.discarded,
            )

    def update(self, updates: dict[str, Any]) -> SaveConfigOutput:
        """
        Apply a programmatic update keyed by field name.

        Server-owned fields are ignored. A cache_invalidate list containing
        the invalidate flag acts as the command, as it does on the form.
        """
        self.get()
        with self._lock:
            current = self._current
            assert current is not None
            unknown = sorted(set(updates) - set(SystemConfig.model_fields))
            if unknown:
                return SaveConfigOutput(
                    config=current,
                    errors=[
                        ValidationError(
                            field=name,
                            code="unknown_field",
                            message=f"Field '{name}' does not exist",
                        )
                        for name in unknown
                    ],
                    success=False,
                )

            values = dict(updates)
            discarded = tuple(sorted(name for name in values if name in SERVER_OWNED_FIELDS))
            for name in discarded:
                logger.warning("Ignored update to server-owned field '%s'", name)
                values.pop(name)
            flags = values.pop("cache_invalidate", None) or []
            return self._commit(
                current,
                values,
                invalidate=INVALIDATE_FLAG in flags,
                discarded=discarded,
            )

    def rotate_etag(self) -> SystemConfig:
        """Issue a new etag and purge caches outside of a form save."""
        self.get()
        with self._lock:
            current = self._current
            assert current is not None
            return self._commit(current, {}, invalidate=True, discarded=()).config

    def _commit(
        self,
        current: SystemConfig,
        values: dict[str, Any],
        *,
        invalidate: bool,
        discarded: tuple[str, ...],
    ) -> SaveConfigOutput:
        # Caller holds self._lock.
        data = current.model_dump()
        data.update(values)
        for name in SERVER_OWNED_FIELDS:
            data[name] = getattr(current, name)
        data["cache_invalidate"] = []

        try:
            candidate = SystemConfig.model_validate(data)
        except PydanticValidationError as e:
            return SaveConfigOutput(
                config=current,
                errors=_parse_pydantic_errors(e),
                success=False,
                discarded=discarded,
            )

        errors = validate_config(candidate)
        if errors:
            return SaveConfigOutput(
                config=current, errors=errors, success=False, discarded=discarded
            )

        now = self._clock.now_utc()
        changes: dict[str, Any] = {"updated_at": now}
        if invalidate:
            changes["etag"] = new_etag(now)
        candidate = candidate.model_copy(update=changes)

        saved = self._repo.save(candidate)
        self._current = saved
        logger.info("Saved system config")

        if invalidate:
            self._purger.purge()
            logger.info("Cache invalidated; new etag issued")

        return SaveConfigOutput(
            config=saved,
            errors=[],
            success=True,
            invalidated=invalidate,
            discarded=discarded,
        )


# --- Factory ---


def create_config_service(
    repo: ConfigRepoPort,
    purger: CachePurgePort | None = None,
    clock: ClockPort | None = None,
) -> SystemConfigService:
    """Create and initialize a config service."""
    service = SystemConfigService(repo, purger, clock)
    service.initialize()
    return service
