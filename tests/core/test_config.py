from __future__ import annotations

import pytest

from membership.core.config import AppEnv, Settings, load_settings

# ---- valid values ----


def test_load_settings_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("APP_ENV", raising=False)
    monkeypatch.delenv("LOG_LEVEL", raising=False)
    settings = load_settings()
    assert settings.app_env == "dev"
    assert settings.log_level == "info"


def test_load_settings_respects_env_vars(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("APP_ENV", "prod")
    monkeypatch.setenv("LOG_LEVEL", "error")
    settings = load_settings()
    assert settings.app_env == "prod"
    assert settings.log_level == "error"


def test_load_settings_normalizes_case(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("APP_ENV", "PROD")
    monkeypatch.setenv("LOG_LEVEL", "DEBUG")
    settings = load_settings()
    assert settings.app_env == "prod"
    assert settings.log_level == "debug"


def test_load_settings_strips_whitespace(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("APP_ENV", "  test  ")
    monkeypatch.setenv("LOG_LEVEL", "  warning  ")
    settings = load_settings()
    assert settings.app_env == "test"
    assert settings.log_level == "warning"


# ---- invalid APP_ENV ----


def test_load_settings_rejects_invalid_app_env(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setenv("APP_ENV", "staging")
    monkeypatch.setenv("LOG_LEVEL", "info")
    with pytest.raises(ValueError, match="APP_ENV must be dev|test|prod"):
        load_settings()


def test_load_settings_rejects_empty_app_env(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setenv("APP_ENV", "")
    with pytest.raises(ValueError, match="APP_ENV must be dev|test|prod"):
        load_settings()


# ---- invalid LOG_LEVEL ----


def test_load_settings_rejects_invalid_log_level(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setenv("APP_ENV", "dev")
    monkeypatch.setenv("LOG_LEVEL", "verbose")
    with pytest.raises(ValueError, match="LOG_LEVEL must be debug|info|warning|error"):
        load_settings()


def test_load_settings_rejects_empty_log_level(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setenv("LOG_LEVEL", "")
    with pytest.raises(ValueError, match="LOG_LEVEL must be debug|info|warning|error"):
        load_settings()


# ---- Settings properties ----


def _make_settings(app_env: AppEnv = "dev") -> Settings:
    return Settings(  # type: ignore[arg-type]
        app_env=app_env,
        log_level="info",
        log_json=False,
        port=8000,
        redis_url=None,
    )


def test_settings_is_dev() -> None:
    assert _make_settings("dev").is_dev is True


@pytest.mark.parametrize("env", ["test", "prod"])
def test_settings_is_not_dev(env: AppEnv) -> None:
    assert _make_settings(env).is_dev is False


def test_settings_is_frozen() -> None:
    s = _make_settings()
    with pytest.raises(AttributeError):
        s.app_env = "prod"  # type: ignore[misc]


# ---- membership terms and admins ----


def test_load_settings_membership_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("MEMBERSHIP_PRICE", raising=False)
    monkeypatch.delenv("MEMBERSHIP_DURATION_SECONDS", raising=False)
    monkeypatch.delenv("ADMIN_IDS", raising=False)
    settings = load_settings()
    assert settings.membership_price == 100
    assert settings.membership_duration_seconds == 30 * 24 * 60 * 60
    assert settings.admin_ids == frozenset()


def test_load_settings_reads_membership_terms(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("MEMBERSHIP_PRICE", "0")
    monkeypatch.setenv("MEMBERSHIP_DURATION_SECONDS", " 3600 ")
    settings = load_settings()
    assert settings.membership_price == 0
    assert settings.membership_duration_seconds == 3600


def test_load_settings_rejects_negative_price(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("MEMBERSHIP_PRICE", "-5")
    with pytest.raises(ValueError, match="MEMBERSHIP_PRICE must be >= 0"):
        load_settings()


def test_load_settings_rejects_zero_duration(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("MEMBERSHIP_DURATION_SECONDS", "0")
    with pytest.raises(ValueError, match="MEMBERSHIP_DURATION_SECONDS must be > 0"):
        load_settings()


def test_load_settings_rejects_non_integer(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("MEMBERSHIP_PRICE", "ten")
    with pytest.raises(ValueError, match="MEMBERSHIP_PRICE must be an integer"):
        load_settings()


def test_load_settings_parses_admin_ids(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ADMIN_IDS", "ops, root,,  ")
    assert load_settings().admin_ids == frozenset({"ops", "root"})


@pytest.mark.parametrize(
    "raw,expected",
    [("1", True), ("TRUE", True), ("yes", True), ("0", False), ("", False)],
)
def test_load_settings_log_json_flag(
    monkeypatch: pytest.MonkeyPatch, raw: str, expected: bool
) -> None:
    monkeypatch.setenv("LOG_JSON", raw)
    assert load_settings().log_json is expected
