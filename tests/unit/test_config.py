"""Unit tests for config.py"""

import pytest
from pydantic import ValidationError

from clausereview.config import load_config


@pytest.fixture(autouse=True)
def isolated_cwd(tmp_path, monkeypatch):
    """Keep a stray config.yaml in the project root out of these tests."""
    monkeypatch.chdir(tmp_path)


def test_load_config_uses_env_db_url(monkeypatch):
    """CLAUSEREVIEW_DB_URL env var is picked up by load_config."""
    monkeypatch.setenv("CLAUSEREVIEW_DB_URL", "sqlite:///env.db")
    assert load_config().db_url == "sqlite:///env.db"


def test_load_config_env_overrides_config_yaml(tmp_path, monkeypatch):
    """CLAUSEREVIEW_DB_URL takes precedence over config.yaml db_url."""
    (tmp_path / "config.yaml").write_text("db_url: 'sqlite:///project.db'\n")
    monkeypatch.setenv("CLAUSEREVIEW_DB_URL", "sqlite:///override.db")
    assert load_config().db_url == "sqlite:///override.db"


def test_load_config_cli_overrides_env(monkeypatch):
    """A non-None CLI override beats the env var."""
    monkeypatch.setenv("CLAUSEREVIEW_MAX_CATEGORIES", "5")
    assert load_config(overrides={"max_categories": 3, "db_url": None}).max_categories == 3


def test_load_config_defaults(monkeypatch):
    monkeypatch.delenv("CLAUSEREVIEW_DB_URL", raising=False)
    settings = load_config()
    assert settings.db_url == "sqlite:///clausereview.db"
    assert settings.max_categories == 20
    assert (settings.keyword_weight, settings.synonym_weight) == (2, 3)
    assert settings.default_category == "GENERAL"


def test_load_config_yaml_values(tmp_path):
    (tmp_path / "config.yaml").write_text("synonym_weight: 7\nlog_level: DEBUG\n")
    settings = load_config()
    assert settings.synonym_weight == 7
    assert settings.log_level == "DEBUG"


def test_load_config_invalid_yaml(tmp_path):
    """load_config raises ValueError when config.yaml contains invalid YAML."""
    (tmp_path / "config.yaml").write_text("key: [unclosed\n")
    with pytest.raises(ValueError, match="Invalid config.yaml"):
        load_config()


def test_load_config_env_coerced(monkeypatch):
    monkeypatch.setenv("CLAUSEREVIEW_DIFF_TIMEOUT", "1.5")
    assert load_config().diff_timeout == 1.5


def test_load_config_rejects_bad_log_level(monkeypatch):
    monkeypatch.setenv("CLAUSEREVIEW_LOG_LEVEL", "LOUD")
    with pytest.raises(ValidationError):
        load_config()
