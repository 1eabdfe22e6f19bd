"""
SystemConfigService tests.

Covers first-run defaults, the locked-field protocol, cache max-age
clamping on save, the one-shot invalidate command, render/decode round
trips and serialized concurrent saves.
"""

from __future__ import annotations

import threading
from collections.abc import Callable

import pytest

from src.components.editor import EditorError, EditorField, apply_submission, decode
from src.components.settings import (
    GetConfigInput,
    RenderConfigInput,
    SaveConfigInput,
    SystemConfigService,
    UpdateConfigInput,
    get_default_config,
    run,
    run_get,
    run_render,
    run_save,
    run_update,
    validate_domain,
    validate_email,
)
from src.domain.entities import SystemConfig
from tests.support import MockCachePurger, MockConfigRepo, StepClock

Submit = Callable[..., list[tuple[str, str]]]


class TestDefaults:
    """First run creates and persists defaults."""

    def test_initialize_creates_defaults(
        self, service: SystemConfigService, repo: MockConfigRepo
    ) -> None:
        config = service.get()

        assert repo.save_count == 1
        assert repo.get() == config
        assert config.id == 1
        assert config.client_secret
        assert config.etag
        assert config.http_port == "8080"
        assert config.https_port == "443"
        assert config.cache_invalidate == []

    def test_initialize_loads_existing(self, purger: MockCachePurger, clock: StepClock) -> None:
        existing = SystemConfig(name="Existing", client_secret="abc123", etag="e1")
        repo = MockConfigRepo(existing)
        service = SystemConfigService(repo=repo, purger=purger, clock=clock)

        assert service.initialize() == existing
        assert repo.save_count == 0

    def test_defaults_generate_distinct_secrets(self) -> None:
        assert get_default_config().client_secret != get_default_config().client_secret

    def test_get_initializes_lazily(self, repo: MockConfigRepo) -> None:
        service = SystemConfigService(repo=repo)

        assert service.get().client_secret
        assert repo.save_count == 1


class TestLockedFields:
    """Server-owned fields survive any submission."""

    def test_hostile_secret_is_discarded(self, purger: MockCachePurger, clock: StepClock, submit: Submit) -> None:
        repo = MockConfigRepo(SystemConfig(client_secret="abc123", etag="tag-1"))
        service = SystemConfigService(repo=repo, purger=purger, clock=clock)
        markup = service.render_editor().markup

        # Client re-enables the disabled copy and posts a forged value with it.
        pairs = [("client_secret", "hacked")] + submit(markup)
        result = service.save_submission(pairs)

        assert result.success
        assert result.config.client_secret == "abc123"
        assert repo.get().client_secret == "abc123"
        assert result.discarded == ("client_secret",)

    def test_forged_hidden_carrier_is_discarded(self, service: SystemConfigService, submit: Submit) -> None:
        before = service.get()
        pairs = [
            (name, "forged" if name in ("client_secret", "etag") else value)
            for name, value in submit(service.render_editor().markup)
        ]

        result = service.save_submission(pairs)

        assert result.config.client_secret == before.client_secret
        assert result.config.etag == before.etag
        assert set(result.discarded) == {"client_secret", "etag"}

    def test_missing_locked_values_are_restored(self, service: SystemConfigService) -> None:
        before = service.get()

        result = service.save_submission([("name", "Renamed")])

        assert result.config.name == "Renamed"
        assert result.config.client_secret == before.client_secret
        assert result.config.etag == before.etag
        assert result.config.uuid == before.uuid
        assert result.config.created_at == before.created_at

    def test_update_ignores_server_owned_fields(self, service: SystemConfigService) -> None:
        before = service.get()

        result = service.update({"client_secret": "hacked", "uuid": "x", "name": "New"})

        assert result.success
        assert result.config.name == "New"
        assert result.config.client_secret == before.client_secret
        assert result.config.uuid == before.uuid
        assert result.discarded == ("client_secret", "uuid")


class TestCacheMaxAgeOnSave:
    """Submitted max-age values are clamped, not rejected."""

    @pytest.mark.parametrize(
        ("submitted", "stored"),
        [("999999", 259200), ("-5", 0), ("3600", 3600)],
    )
    def test_clamped_on_save(
        self, service: SystemConfigService, submit: Submit, submitted: str, stored: int
    ) -> None:
        markup = service.render_editor().markup

        result = service.save_submission(submit(markup, edits={"cache_max_age": submitted}))

        assert result.success
        assert result.config.cache_max_age == stored

    def test_update_clamps_float(self, service: SystemConfigService) -> None:
        result = service.update({"cache_max_age": 999999.0})

        assert result.success
        assert result.config.cache_max_age == 259200

    def test_update_rejects_boolean(self, service: SystemConfigService) -> None:
        before = service.get().cache_max_age

        result = service.update({"cache_max_age": True})

        assert not result.success
        assert result.errors[0].field == "cache_max_age"
        assert service.get().cache_max_age == before

    def test_non_numeric_is_a_validation_error(self, service: SystemConfigService, repo: MockConfigRepo) -> None:
        saves = repo.save_count

        result = service.save_submission([("cache_max_age", "later")])

        assert not result.success
        assert result.errors[0].field == "cache_max_age"
        assert result.errors[0].code == "invalid_number"
        assert repo.save_count == saves


class TestInvalidateCommand:
    """The invalidate flag triggers exactly one purge and never persists."""

    def test_invalidate_purges_once(
        self,
        service: SystemConfigService,
        purger: MockCachePurger,
        repo: MockConfigRepo,
        submit: Submit,
    ) -> None:
        before = service.get()
        markup = service.render_editor().markup

        result = service.save_submission(submit(markup, check={"cache": ["invalidate"]}))

        assert purger.purge_count == 1
        assert result.invalidated
        assert result.config.cache_invalidate == []
        assert repo.get().cache_invalidate == []
        assert result.config.etag != before.etag

    def test_empty_flags_do_not_purge(
        self, service: SystemConfigService, purger: MockCachePurger, submit: Submit
    ) -> None:
        before = service.get()

        result = service.save_submission(submit(service.render_editor().markup))

        assert purger.purge_count == 0
        assert not result.invalidated
        assert result.config.etag == before.etag

    def test_next_render_is_unchecked(self, service: SystemConfigService, submit: Submit, inputs_of) -> None:
        service.save_submission(submit(service.render_editor().markup, check={"cache": ["invalidate"]}))

        flags = [i for i in inputs_of(service.render_editor().markup) if i.get("name") == "cache"]
        assert len(flags) == 1
        assert "checked" not in flags[0]

    def test_failed_save_does_not_purge(self, service: SystemConfigService, purger: MockCachePurger) -> None:
        result = service.save_submission([("domain", "http://bad/"), ("cache", "invalidate")])

        assert not result.success
        assert purger.purge_count == 0

    def test_update_with_flag_purges(self, service: SystemConfigService, purger: MockCachePurger) -> None:
        result = service.update({"cache_invalidate": ["invalidate"]})

        assert result.invalidated
        assert purger.purge_count == 1

    def test_rotate_etag(self, service: SystemConfigService, purger: MockCachePurger) -> None:
        before = service.get().etag

        after = service.rotate_etag()

        assert after.etag != before
        assert purger.purge_count == 1


class TestRoundTrip:
    """Render, resubmit unchanged, decode: nothing changes."""

    def test_default_config_round_trips(self, service: SystemConfigService, submit: Submit) -> None:
        config = service.get()
        view = service.render_editor()

        decoded = decode(config, config.editor_fields(), submit(view.markup))

        assert apply_submission(config, decoded) == config
        assert decoded.discarded == ()

    def test_populated_config_round_trips(self, submit: Submit) -> None:
        config = SystemConfig(
            name='Site "A" & <B>',
            domain="example.com",
            admin_email="ops@example.com",
            client_secret="abc123",
            etag="tag",
            disable_cors=True,
            disable_http_cache=True,
            cache_max_age=120,
            backup_basic_auth_user="backup",
            backup_basic_auth_password="p@ss word",
        )
        service = SystemConfigService(repo=MockConfigRepo(config))
        view = service.render_editor()

        decoded = decode(config, config.editor_fields(), submit(view.markup))

        assert apply_submission(config, decoded) == config

    def test_save_of_unchanged_form_keeps_values(self, service: SystemConfigService, submit: Submit) -> None:
        before = service.get()

        result = service.save_submission(submit(service.render_editor().markup))

        after = result.config
        assert after.model_dump(exclude={"updated_at"}) == before.model_dump(exclude={"updated_at"})
        assert after.updated_at > before.updated_at

    def test_render_is_deterministic(self, service: SystemConfigService) -> None:
        assert service.render_editor().markup == service.render_editor().markup

    def test_markup_submit_names_match_view(self, service: SystemConfigService, names_of) -> None:
        view = service.render_editor()

        assert tuple(names_of(view.markup)) == view.submit_names


class TestValidation:
    """Domain and email policy."""

    @pytest.mark.parametrize(
        "domain",
        ["", "example.com", "www.example.com", "localhost", "xn--bcher-kva.example"],
    )
    def test_valid_domains(self, domain: str) -> None:
        assert validate_domain(domain)

    @pytest.mark.parametrize(
        "domain",
        [
            "https://example.com",
            "example.com/path",
            "example.com:8080",
            "a.com b.com",
            "a.com,b.com",
            "-bad.com",
            "a..com",
            "x" * 254,
        ],
    )
    def test_invalid_domains(self, domain: str) -> None:
        assert not validate_domain(domain)

    def test_invalid_domain_rejects_save(self, service: SystemConfigService, repo: MockConfigRepo) -> None:
        saves = repo.save_count

        result = service.save_submission([("domain", "https://example.com")])

        assert not result.success
        assert [e.code for e in result.errors] == ["invalid_domain"]
        assert result.config == service.get()
        assert repo.save_count == saves

    def test_domain_normalized_on_save(self, service: SystemConfigService) -> None:
        result = service.save_submission([("domain", " Example.COM ")])

        assert result.config.domain == "example.com"

    @pytest.mark.parametrize(("email", "ok"), [("", True), ("a@b.c", True), ("nope", False), ("a@b@c", False)])
    def test_email(self, email: str, ok: bool) -> None:
        assert validate_email(email) is ok

    def test_unknown_update_field(self, service: SystemConfigService) -> None:
        result = service.update({"colour": "red"})

        assert not result.success
        assert result.errors[0].code == "unknown_field"


class TestEditorFailure:
    """Render failures propagate without partial output."""

    def test_render_error_propagates(self, monkeypatch: pytest.MonkeyPatch, service: SystemConfigService) -> None:
        monkeypatch.setattr(
            SystemConfig,
            "editor_fields",
            lambda self: [EditorField.input("name"), EditorField.input("missing")],
        )

        with pytest.raises(EditorError):
            service.render_editor()


class TestConcurrency:
    """Concurrent saves are serialized; the last committed write wins."""

    def test_parallel_saves(self, service: SystemConfigService, repo: MockConfigRepo) -> None:
        saves = repo.save_count
        names = [f"site-{i}" for i in range(20)]
        threads = [
            threading.Thread(target=service.save_submission, args=([("name", name)],))
            for name in names
        ]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert repo.save_count == saves + len(names)
        assert service.get().name in names
        assert repo.get() == service.get()


class TestEntryPoints:
    """Component entry points."""

    def test_run_dispatch(self, service: SystemConfigService) -> None:
        assert run(GetConfigInput(), service).config == service.get()
        assert run(RenderConfigInput(), service).view.markup == service.render_editor().markup

    def test_run_save_and_update(self, service: SystemConfigService) -> None:
        assert run_save(SaveConfigInput(pairs=[("name", "A")]), service).config.name == "A"
        assert run_update(UpdateConfigInput(updates={"name": "B"}), service).config.name == "B"
        assert run_get(GetConfigInput(), service).config.name == "B"
        assert "card" in run_render(RenderConfigInput(), service).view.markup

    def test_run_unknown_input(self, service: SystemConfigService) -> None:
        with pytest.raises(ValueError):
            run(object(), service)  # type: ignore[arg-type]
