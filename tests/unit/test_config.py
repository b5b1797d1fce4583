"""Unit tests for config.py"""

import pytest

from mdcms.config import load_config


@pytest.fixture(autouse=True)
def _isolated(tmp_path, monkeypatch):
    """Run every test from an empty directory with no MDCMS_ variables set."""
    monkeypatch.chdir(tmp_path)
    for name in ("DB_URL", "STORAGE_BACKEND", "DEFAULT_FORMAT", "LOCALES", "WORDS_PER_MINUTE", "CONTENT_DIR"):
        monkeypatch.delenv(f"MDCMS_{name}", raising=False)


def test_load_config_defaults():
    """Settings defaults are used when no config.yaml, env var, or override exists."""
    settings = load_config()
    assert settings.storage_backend == "file"
    assert settings.default_format == "json"
    assert settings.db_url == "sqlite:///mdcms.db"
    assert settings.locales == []


def test_load_config_uses_env_db_url(monkeypatch):
    """MDCMS_DB_URL env var is picked up by load_config."""
    monkeypatch.setenv("MDCMS_DB_URL", "sqlite:///env.db")
    assert load_config().db_url == "sqlite:///env.db"


def test_load_config_env_overrides_config_yaml(tmp_path, monkeypatch):
    """MDCMS_DEFAULT_FORMAT takes precedence over config.yaml."""
    (tmp_path / "config.yaml").write_text("default_format: json\n")
    monkeypatch.setenv("MDCMS_DEFAULT_FORMAT", "markdown")
    assert load_config().default_format == "markdown"


def test_load_config_cli_overrides_env(monkeypatch):
    """A non-None override beats the env var; None overrides are ignored."""
    monkeypatch.setenv("MDCMS_STORAGE_BACKEND", "sql")
    assert load_config(overrides={"storage_backend": "file"}).storage_backend == "file"
    assert load_config(overrides={"storage_backend": None}).storage_backend == "sql"


def test_load_config_reads_yaml(tmp_path):
    (tmp_path / "config.yaml").write_text("content_dir: site\nlocales: [en, fr]\n")
    settings = load_config()
    assert settings.content_dir == "site"
    assert settings.locales == ["en", "fr"]


def test_load_config_env_locales_comma_separated(monkeypatch):
    """MDCMS_LOCALES is split on commas."""
    monkeypatch.setenv("MDCMS_LOCALES", "en, de ,")
    assert load_config().locales == ["en", "de"]


def test_load_config_env_words_per_minute(monkeypatch):
    """Numeric env vars are coerced by the settings schema."""
    monkeypatch.setenv("MDCMS_WORDS_PER_MINUTE", "250")
    assert load_config().words_per_minute == 250


def test_load_config_invalid_yaml(tmp_path):
    """load_config raises ValueError when config.yaml contains invalid YAML."""
    (tmp_path / "config.yaml").write_text("key: [unclosed\n")
    with pytest.raises(ValueError, match="Invalid config.yaml"):
        load_config()


def test_load_config_invalid_value():
    """Values outside the schema are reported as ValueError."""
    with pytest.raises(ValueError, match="Invalid settings"):
        load_config(overrides={"storage_backend": "redis"})
