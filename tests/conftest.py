from collections.abc import Callable
from typing import Any

import pytest

from src.components.settings import SystemConfigService
from tests.support import (
    MockCachePurger,
    MockConfigRepo,
    StepClock,
    browser_submission,
    markup_submit_names,
    parse_inputs,
)

# --- Fixtures ---


@pytest.fixture
def repo() -> MockConfigRepo:
    """Empty repository (first run)."""
    return MockConfigRepo()


@pytest.fixture
def purger() -> MockCachePurger:
    return MockCachePurger()


@pytest.fixture
def clock() -> StepClock:
    return StepClock()


@pytest.fixture
def service(repo: MockConfigRepo, purger: MockCachePurger, clock: StepClock) -> SystemConfigService:
    svc = SystemConfigService(repo=repo, purger=purger, clock=clock)
    svc.initialize()
    return svc


@pytest.fixture
def submit() -> Callable[..., list[tuple[str, str]]]:
    return browser_submission


@pytest.fixture
def inputs_of() -> Callable[[str], list[dict[str, Any]]]:
    return parse_inputs


@pytest.fixture
def names_of() -> Callable[[str], list[str]]:
    return markup_submit_names
