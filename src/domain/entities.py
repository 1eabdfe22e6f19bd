from datetime import UTC, datetime
from decimal import Decimal, InvalidOperation
from typing import Any
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator

from src.components.editor.models import EditorField

# --- Constants ---

CACHE_MAX_AGE_MIN = 0
CACHE_MAX_AGE_MAX = 259200  # 3 days
INVALIDATE_FLAG = "invalidate"
SINGLETON_ID = 1

# Fields the server owns; never taken from a submission.
SERVER_OWNED_FIELDS = frozenset({"id", "uuid", "created_at", "updated_at", "client_secret", "etag"})

BACKUP_AUTH_INFO = """
<p class="flow-text">Database backup credentials:</p>
<p>Add a user name and password to restrict HTTP downloads of your backup files.</p>
"""


def _utcnow() -> datetime:
    return datetime.now(UTC)


# --- System Config ---


class SystemConfig(BaseModel):
    """
    Process-wide configuration record for one deployment.

    Python field names are internal; aliases are the external names used for
    form submit names and for the persisted record.
    """

    model_config = ConfigDict(populate_by_name=True)

    id: int = SINGLETON_ID
    uuid: UUID = Field(default_factory=uuid4)
    created_at: datetime = Field(default_factory=_utcnow, alias="timestamp")
    updated_at: datetime = Field(default_factory=_utcnow, alias="updated")

    name: str = ""
    domain: str = ""
    bind_address: str = Field(default="localhost", alias="bind_addr")
    http_port: str = "8080"
    https_port: str = "443"
    admin_email: str = ""
    client_secret: str = ""
    etag: str = ""
    disable_cors: bool = Field(default=False, alias="cors_disabled")
    disable_gzip: bool = Field(default=False, alias="gzip_disabled")
    disable_http_cache: bool = Field(default=False, alias="cache_disabled")
    cache_max_age: int = 0
    cache_invalidate: list[str] = Field(default_factory=list, alias="cache")
    backup_basic_auth_user: str = ""
    backup_basic_auth_password: str = ""

    @field_validator("cache_max_age", mode="before")
    @classmethod
    def _clamp_cache_max_age(cls, value: Any) -> Any:
        # Form input arrives as text; out-of-range values are clamped, never rejected.
        if value is None:
            return CACHE_MAX_AGE_MIN
        if isinstance(value, bool):
            raise ValueError("cache_max_age must be a number of seconds")
        number = value
        if isinstance(value, str):
            if not value.strip():
                return CACHE_MAX_AGE_MIN
            try:
                number = Decimal(value.strip())
            except InvalidOperation:
                return value  # left for int validation to reject
        if isinstance(number, (float, Decimal)):
            whole = Decimal(number)
            if not whole.is_finite() or whole != whole.to_integral_value():
                return value  # fractional or infinite: left for int validation to reject
            number = whole
        if isinstance(number, (int, Decimal)):
            return int(max(CACHE_MAX_AGE_MIN, min(CACHE_MAX_AGE_MAX, number)))
        return value

    @field_validator("domain", mode="before")
    @classmethod
    def _normalize_domain(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().lower()
        return value

    def __str__(self) -> str:
        return self.name

    def to_record(self) -> dict[str, Any]:
        """Flat record keyed by external names."""
        return self.model_dump(mode="json", by_alias=True)

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> "SystemConfig":
        return cls.model_validate(record)

    def editor_fields(self) -> list[EditorField]:
        """Ordered field descriptors for the admin edit surface."""
        cors_scope = self.domain or "your domain"
        return [
            EditorField.input(
                "name",
                label="Site name (internal use only)",
                placeholder="Configure a site name for internal use only",
            ),
            EditorField.input(
                "domain",
                label="Domain name (required for SSL certificate)",
                placeholder="e.g. www.example.com or example.com",
            ),
            EditorField.input("bind_address", type="hidden"),
            EditorField.input("http_port", type="hidden"),
            EditorField.input("https_port", type="hidden"),
            EditorField.input(
                "admin_email",
                label="Administrator email (notified of internal system information)",
            ),
            EditorField.locked_input(
                "client_secret",
                label="Client secret (used to validate requests, DO NOT SHARE)",
            ),
            EditorField.locked_input(
                "etag",
                label="Etag header (used to cache resources)",
            ),
            EditorField.checkbox(
                "disable_cors",
                {"true": "Disable CORS"},
                label=f"Disable CORS (so only {cors_scope} can fetch your data)",
            ),
            EditorField.checkbox(
                "disable_gzip",
                {"true": "Disable GZIP"},
                label="Disable GZIP (will increase server speed, but also bandwidth)",
            ),
            EditorField.checkbox(
                "disable_http_cache",
                {"true": "Disable HTTP Cache"},
                label="Disable HTTP Cache (overrides 'Cache-Control' header)",
            ),
            EditorField.input(
                "cache_max_age",
                label=(
                    f"Max-Age value for HTTP caching "
                    f"(in seconds, {CACHE_MAX_AGE_MIN} - {CACHE_MAX_AGE_MAX})"
                ),
                type="text",
            ),
            EditorField.command(
                "cache_invalidate",
                {INVALIDATE_FLAG: "Invalidate Cache"},
                label="Invalidate cache on save",
            ),
            EditorField.raw(BACKUP_AUTH_INFO),
            EditorField.input(
                "backup_basic_auth_user",
                label="HTTP Basic Auth User",
                placeholder="Enter a user name for Basic Auth access",
                type="text",
            ),
            EditorField.input(
                "backup_basic_auth_password",
                label="HTTP Basic Auth Password",
                placeholder="Enter a password for Basic Auth access",
                type="password",
            ),
        ]
