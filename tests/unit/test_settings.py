"""
Unit tests for settings loading and translation into WaitlistOptions.
"""

import pytest

from src.api.dependencies import build_options
from src.config.settings import Settings
from src.domain.options import (
    DEFAULT_INTERCEPT_PATHS,
    AlwaysApprove,
    AutoApproveDisabled,
    PredicateApprove,
)


class TestSettings:
    def test_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("STORE_BACKEND", raising=False)
        settings = Settings(_env_file=None)

        assert settings.store_backend == "postgres"
        assert settings.invite_code_expiration == 172800
        assert settings.max_waitlist_size is None
        assert settings.admin_roles == ["admin"]

    def test_environment_overrides(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("STORE_BACKEND", "memory")
        monkeypatch.setenv("REQUIRE_INVITE_CODE", "true")
        monkeypatch.setenv("AUTO_APPROVE_DOMAINS", '["vip.com"]')
        monkeypatch.setenv("ADMIN_TOKENS", '{"s3cret": "admin"}')

        settings = Settings(_env_file=None)

        assert settings.store_backend == "memory"
        assert settings.require_invite_code is True
        assert settings.auto_approve_domains == ["vip.com"]
        assert settings.admin_tokens == {"s3cret": "admin"}


class TestBuildOptions:
    def test_defaults(self) -> None:
        options = build_options(Settings(_env_file=None))

        assert options.enabled is True
        assert isinstance(options.auto_approve, AutoApproveDisabled)
        assert options.intercept_paths == DEFAULT_INTERCEPT_PATHS
        assert options.admin_roles == ("admin",)

    def test_auto_approve_all_wins_over_domains(self) -> None:
        options = build_options(
            Settings(_env_file=None, auto_approve=True, auto_approve_domains=["vip.com"])
        )
        assert isinstance(options.auto_approve, AlwaysApprove)

    def test_domain_allow_list(self) -> None:
        options = build_options(Settings(_env_file=None, auto_approve_domains=["vip.com"]))

        assert isinstance(options.auto_approve, PredicateApprove)
        assert options.auto_approve.predicate("ceo@vip.com") is True
        assert options.auto_approve.predicate("ceo@notvip.com") is False

    def test_custom_paths_and_roles(self) -> None:
        options = build_options(
            Settings(
                _env_file=None,
                intercept_paths=["/register"],
                admin_roles=["owner"],
                max_waitlist_size=10,
            )
        )

        assert options.intercept_paths == ("/register",)
        assert options.admin_roles == ("owner",)
        assert options.max_waitlist_size == 10
