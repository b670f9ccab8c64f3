import pytest
from pydantic import ValidationError

from app.settings import Settings


@pytest.mark.parametrize(
    "env_value, expected",
    [
        (None, []),
        ("https://example.com", ["https://example.com"]),
        ("https://a.com, https://b.com", ["https://a.com", "https://b.com"]),
        ('["https://a.com","https://b.com"]', ["https://a.com", "https://b.com"]),
    ],
)
def test_cors_origins_env_parsing(monkeypatch, env_value, expected):
    if env_value is None:
        monkeypatch.delenv("CORS_ORIGINS", raising=False)
    else:
        monkeypatch.setenv("CORS_ORIGINS", env_value)

    settings = Settings(_env_file=None)

    assert settings.cors_origins == expected


def test_defaults_to_prod_when_env_missing(monkeypatch):
    monkeypatch.delenv("APP_ENV", raising=False)
    monkeypatch.delenv("TESTING", raising=False)
    monkeypatch.delenv("METRICS_ENABLED", raising=False)

    settings = Settings(_env_file=None)

    assert settings.app_env == "prod"
    assert settings.pricing_config_path == "pricing/arqexpress_v1.json"


def test_log_level_is_normalized():
    assert Settings(app_env="dev", log_level=" debug ", _env_file=None).log_level == "DEBUG"


def test_invalid_log_level_is_rejected():
    with pytest.raises(ValidationError, match="log_level"):
        Settings(app_env="dev", log_level="chatty", _env_file=None)


def test_prod_requires_metrics_token_when_enabled():
    with pytest.raises(ValidationError, match="METRICS_TOKEN"):
        Settings(app_env="prod", metrics_enabled=True, metrics_token=None, testing=False, _env_file=None)


def test_prod_rejects_short_metrics_token():
    with pytest.raises(ValidationError, match="at least 16 characters"):
        Settings(app_env="prod", metrics_enabled=True, metrics_token="short", testing=False, _env_file=None)


def test_prod_rejects_wildcard_cors_with_strict_mode():
    with pytest.raises(ValidationError, match="CORS_ORIGINS"):
        Settings(app_env="prod", strict_cors=True, cors_origins=["*"], testing=False, _env_file=None)


def test_prod_rejects_testing_mode():
    with pytest.raises(ValidationError, match="testing mode"):
        Settings(app_env="prod", testing=True, _env_file=None)


def test_prod_accepts_valid_configuration():
    settings = Settings(
        app_env="prod",
        strict_cors=True,
        cors_origins=["https://studio.example.com"],
        metrics_enabled=True,
        metrics_token="metrics-token-0123456789",
        testing=False,
        _env_file=None,
    )

    assert settings.cors_origins == ["https://studio.example.com"]


def test_dev_allows_metrics_without_token():
    settings = Settings(app_env="dev", metrics_enabled=True, testing=True, _env_file=None)

    assert settings.metrics_token is None
