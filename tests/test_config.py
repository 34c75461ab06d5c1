"""Tests for settings loading."""

import pytest

from routesnap.config import load_settings
from routesnap.errors import ConfigurationError

REQUIRED = {
    "MAPPING_TABLE_NAME": "mapping",
    "BUCKET_NAME": "bucket",
    "DISTRIBUTION_ID": "E123",
    "UNIFORM_PROJECT_ID": "proj",
    "UNIFORM_API_KEY": "secret",
}


@pytest.fixture
def env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    for name, value in REQUIRED.items():
        monkeypatch.setenv(name, value)
    for name in ("UNIFORM_ORIGIN", "UNIFORM_ROUTE_ORIGIN", "RENDER_CONCURRENCY"):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def test_defaults(env: pytest.MonkeyPatch) -> None:
    """Test that optional settings fall back to their defaults."""
    settings = load_settings()
    assert settings.bucket_name == "bucket"
    assert settings.uniform_origin == "https://uniform.app"
    assert settings.uniform_route_origin is None
    assert settings.render_concurrency == 4


def test_route_origin_override(env: pytest.MonkeyPatch) -> None:
    """Test an explicit route origin."""
    env.setenv("UNIFORM_ROUTE_ORIGIN", "https://edge.test")
    assert load_settings().uniform_route_origin == "https://edge.test"


def test_missing_required(env: pytest.MonkeyPatch) -> None:
    """Test that missing variables are named in the error."""
    env.delenv("DISTRIBUTION_ID")
    env.delenv("UNIFORM_API_KEY")

    with pytest.raises(ConfigurationError) as exc_info:
        load_settings()
    assert "DISTRIBUTION_ID" in str(exc_info.value)
    assert "UNIFORM_API_KEY" in str(exc_info.value)


def test_invalid_concurrency(env: pytest.MonkeyPatch) -> None:
    """Test that a non-positive concurrency is rejected."""
    env.setenv("RENDER_CONCURRENCY", "0")
    with pytest.raises(ConfigurationError, match="Invalid settings"):
        load_settings()
