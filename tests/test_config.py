"""Tests for environment-driven configuration."""

from __future__ import annotations

import pytest

from habitgrove.config import BaseConfig, TestConfig


def test_defaults(tmp_path, monkeypatch):
    for name in (
        "HABITGROVE_DATABASE_URL",
        "HABITGROVE_OWNER_ID",
        "HABITGROVE_AI_API_KEY",
        "HABITGROVE_CLASSIFIER_TIMEOUT",
    ):
        monkeypatch.delenv(name, raising=False)

    config = BaseConfig(tmp_path)

    assert config.DATA_DIR == tmp_path.resolve()
    assert config.DATABASE_URL.endswith("habitgrove.db")
    assert config.OWNER_ID == "local"
    assert config.CLASSIFIER_TIMEOUT == 8.0
    assert config.ai_enabled is False
    assert config.sqlalchemy_engine_options() == {"connect_args": {"check_same_thread": False}}


def test_environment_overrides(tmp_path, monkeypatch):
    monkeypatch.setenv("HABITGROVE_DATA_DIR", str(tmp_path / "data"))
    monkeypatch.setenv("HABITGROVE_OWNER_ID", "alex")
    monkeypatch.setenv("HABITGROVE_AI_API_KEY", "k")
    monkeypatch.setenv("HABITGROVE_CLASSIFIER_TIMEOUT", "2.5")
    monkeypatch.setenv("HABITGROVE_DEV_MODE", "off")

    config = BaseConfig()

    assert config.DATA_DIR == (tmp_path / "data").resolve()
    assert config.DATA_DIR.is_dir()
    assert config.OWNER_ID == "alex"
    assert config.ai_enabled is True
    assert config.CLASSIFIER_TIMEOUT == 2.5
    assert config.DEV_MODE is False


@pytest.mark.parametrize("value", ["0", "-1", "soon"])
def test_bad_timeout_rejected(tmp_path, monkeypatch, value):
    monkeypatch.setenv("HABITGROVE_CLASSIFIER_TIMEOUT", value)
    with pytest.raises(ValueError):
        BaseConfig(tmp_path)


def test_test_config_disables_ai(tmp_path, monkeypatch):
    monkeypatch.setenv("HABITGROVE_AI_API_KEY", "k")
    monkeypatch.setenv("HABITGROVE_DATABASE_URL", "postgresql://elsewhere/db")

    config = TestConfig(tmp_path)

    assert config.ai_enabled is False
    assert config.DATABASE_URL.startswith("sqlite:///")
    assert config.OWNER_ID == "tester"
