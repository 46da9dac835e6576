from __future__ import annotations

import pytest
from pydantic import ValidationError

from app.core.config import Settings


def test_placeholder_database_url_allowed_in_development() -> None:
    settings = Settings(_env_file=None, app_env="development")
    assert settings.database_url.startswith("postgresql+asyncpg://")


def test_placeholder_database_url_rejected_in_production() -> None:
    with pytest.raises(ValidationError):
        Settings(_env_file=None, app_env="production")


def test_debug_rejected_in_production() -> None:
    with pytest.raises(ValidationError):
        Settings(
            _env_file=None,
            app_env="prod",
            debug=True,
            database_url="postgresql+asyncpg://app:secret@db:5432/eduadmin",
        )


def test_explicit_database_url_allowed_in_production() -> None:
    settings = Settings(
        _env_file=None,
        app_env="production",
        database_url="postgresql+asyncpg://app:secret@db:5432/eduadmin",
    )
    assert settings.debug is False


def test_tokens_are_normalized() -> None:
    settings = Settings(
        _env_file=None,
        log_level=" debug ",
        default_currency="eur",
        meeting_link_base_url="https://meet.example.com/",
    )
    assert settings.log_level == "DEBUG"
    assert settings.default_currency == "EUR"
    assert settings.meeting_link_base_url == "https://meet.example.com"


def test_currency_must_be_three_letters() -> None:
    with pytest.raises(ValidationError):
        Settings(_env_file=None, default_currency="EURO")
