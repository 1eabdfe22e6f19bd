"""Test doubles and browser simulation shared by the test suite."""

from datetime import UTC, datetime, timedelta
from html.parser import HTMLParser

from fastapi import FastAPI

from src.api.middleware import install_config_policy
from src.api.routes import admin_backup, admin_config, public_site
from src.components.settings import SystemConfigService
from src.domain.entities import SystemConfig

# --- Test Doubles ---


class MockConfigRepo:
    """In-memory config repository for testing."""

    def __init__(self, initial: SystemConfig | None = None) -> None:
        self._config = initial
        self.save_count = 0

    def get(self) -> SystemConfig | None:
        return self._config

    def save(self, config: SystemConfig) -> SystemConfig:
        self._config = config
        self.save_count += 1
        return config


class MockCachePurger:
    """Counts cache purges."""

    def __init__(self) -> None:
        self.purge_count = 0

    def purge(self) -> None:
        self.purge_count += 1


class StepClock:
    """Clock that advances one second on every read."""

    def __init__(self, start: datetime | None = None) -> None:
        self._now = start or datetime(2025, 1, 1, 12, 0, 0, tzinfo=UTC)

    def now_utc(self) -> datetime:
        self._now += timedelta(seconds=1)
        return self._now


# --- Browser Simulation ---


class _InputCollector(HTMLParser):
    def __init__(self) -> None:
        super().__init__(convert_charrefs=True)
        self.inputs: list[dict[str, str | None]] = []

    def handle_starttag(self, tag: str, attrs: list[tuple[str, str | None]]) -> None:
        if tag == "input":
            self.inputs.append(dict(attrs))


def parse_inputs(markup: str) -> list[dict[str, str | None]]:
    """All <input> elements of a fragment, in document order."""
    collector = _InputCollector()
    collector.feed(markup)
    collector.close()
    return collector.inputs


def markup_submit_names(markup: str) -> list[str]:
    """Submit names in document order, one per field (adjacent repeats collapsed)."""
    names: list[str] = []
    for attrs in parse_inputs(markup):
        name = attrs.get("name")
        if name and (not names or names[-1] != name):
            names.append(name)
    return names


def browser_submission(
    markup: str,
    edits: dict[str, str] | None = None,
    check: dict[str, list[str]] | None = None,
) -> list[tuple[str, str]]:
    """
    Pairs a browser would post for the form in ``markup``.

    ``edits`` replaces the value typed into text-like inputs by submit name.
    ``check`` sets exactly which checkbox values are checked for a name.
    Disabled and unnamed inputs are never submitted.
    """
    edits = edits or {}
    check = check or {}
    pairs: list[tuple[str, str]] = []
    for attrs in parse_inputs(markup):
        name = attrs.get("name")
        if not name or "disabled" in attrs:
            continue
        value = attrs.get("value") or ""
        if attrs.get("type") == "checkbox":
            checked = value in check[name] if name in check else "checked" in attrs
            if checked:
                pairs.append((name, value))
            continue
        if name in edits and attrs.get("type") != "hidden":
            value = edits[name]
        pairs.append((name, value))
    return pairs




# --- App ---


def make_app(service: SystemConfigService) -> FastAPI:
    """App with all routers and the config policy, bound to ``service``."""
    app = FastAPI()
    app.include_router(admin_config.router, prefix="/admin/configure")
    app.include_router(admin_backup.router, prefix="/admin/backup")
    app.include_router(public_site.router, prefix="/api/public")
    install_config_policy(app)
    app.state.config_service = service
    return app


def form_data(pairs: list[tuple[str, str]]) -> dict[str, list[str]]:
    """Group submitted pairs by name, keeping per-name order."""
    data: dict[str, list[str]] = {}
    for name, value in pairs:
        data.setdefault(name, []).append(value)
    return data
