from datetime import timedelta

import pytest

from authflow.core import config as config_module
from authflow.core.config import AuthConfig, load_config, parse_duration, validate_runtime_config


@pytest.mark.parametrize(
    ('value', 'expected'),
    [
        ('90d', timedelta(days=90)),
        ('12h', timedelta(hours=12)),
        ('30m', timedelta(minutes=30)),
        ('45s', timedelta(seconds=45)),
        ('3600', timedelta(seconds=3600)),
        (' 7d ', timedelta(days=7)),
    ],
)
def test_parse_duration_accepts_supported_units(value: str, expected: timedelta) -> None:
    assert parse_duration(value) == expected


@pytest.mark.parametrize('value', ['', 'soon', '10w', '-5m'])
def test_parse_duration_rejects_unknown_formats(value: str) -> None:
    with pytest.raises(ValueError):
        parse_duration(value)


def test_load_config_reads_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(config_module, 'load_dotenv', lambda: None)
    monkeypatch.setenv('APP_ENV', 'production')
    monkeypatch.setenv('JWT_SECRET_KEY', 'from-env')
    monkeypatch.setenv('JWT_EXPIRES_IN', '2h')
    monkeypatch.setenv('JWT_COOKIE_EXPIRES_IN', '7')
    monkeypatch.setenv('EMAIL_USE_TLS', 'yes')
    monkeypatch.setenv('CORS_ORIGINS', 'https://a.example, https://b.example')

    config = load_config()

    assert config.is_production
    assert config.jwt_secret_key == 'from-env'
    assert config.jwt_expires_in == timedelta(hours=2)
    assert config.jwt_cookie_expires_in_days == 7
    assert config.email_use_tls is True
    assert config.cors_origins == ('https://a.example', 'https://b.example')


def test_load_config_rejects_bad_expiry(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(config_module, 'load_dotenv', lambda: None)
    monkeypatch.setenv('JWT_EXPIRES_IN', 'forever')

    with pytest.raises(ValueError):
        load_config()


def test_validate_runtime_config_requires_secret_in_production() -> None:
    with pytest.raises(RuntimeError):
        validate_runtime_config(AuthConfig(app_env='production'))


def test_validate_runtime_config_allows_default_secret_outside_production() -> None:
    validate_runtime_config(AuthConfig(app_env='development'))
    validate_runtime_config(AuthConfig(app_env='production', jwt_secret_key='real-secret'))
