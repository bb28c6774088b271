from __future__ import annotations

import pytest

from handballstats import config
from handballstats.config import ReportSettings

ENV_KEYS = (
    "HANDBALLSTATS_ENV_FILE",
    "HANDBALLSTATS_CACHE_DIR",
    "HANDBALLSTATS_REPORT_CONFIG",
    "HANDBALLSTATS_CACHE_TTL",
    "HANDBALLSTATS_OUTPUT",
)


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    for key in ENV_KEYS:
        # setenv first so values loaded from a .env file are undone afterwards
        monkeypatch.setenv(key, "")
        monkeypatch.delenv(key)
    monkeypatch.setattr(config, "_ENV_LOADED", False)
    monkeypatch.chdir(tmp_path)
    return monkeypatch


def test_defaults_without_environment(clean_env):
    clean_env.setattr(config, "_ENV_LOADED", True)
    settings = ReportSettings.from_env()
    assert settings.cache_dir == ".cache"
    assert settings.report_config == "config/report.yml"
    assert settings.cache_ttl is None
    assert settings.output_path is None


def test_environment_overrides(clean_env):
    clean_env.setattr(config, "_ENV_LOADED", True)
    clean_env.setenv("HANDBALLSTATS_CACHE_DIR", "/tmp/hb-cache")
    clean_env.setenv("HANDBALLSTATS_CACHE_TTL", "3600")
    clean_env.setenv("HANDBALLSTATS_OUTPUT", "out/report.json")

    settings = ReportSettings.from_env()
    assert settings.cache_dir == "/tmp/hb-cache"
    assert settings.cache_ttl == 3600
    assert settings.output_path == "out/report.json"


def test_invalid_ttl_is_ignored(clean_env):
    clean_env.setattr(config, "_ENV_LOADED", True)
    clean_env.setenv("HANDBALLSTATS_CACHE_TTL", "soon")
    assert ReportSettings.from_env().cache_ttl is None


def test_env_file_is_loaded_once(clean_env, tmp_path):
    env_file = tmp_path / "custom.env"
    env_file.write_text(
        "# report settings\nHANDBALLSTATS_REPORT_CONFIG='season/report.yml'\nnot a pair\n",
        encoding="utf-8",
    )
    clean_env.setenv("HANDBALLSTATS_ENV_FILE", str(env_file))

    settings = ReportSettings.from_env()
    assert settings.report_config == "season/report.yml"
    assert config._ENV_LOADED is True


def test_parse_env_file_handles_exports_and_quotes(tmp_path):
    env_file = tmp_path / ".env"
    env_file.write_text(
        "export HANDBALLSTATS_OUTPUT=\"out/r.json\"\n\n# comment\nHANDBALLSTATS_CACHE_TTL = 30\nQUOTED='it''s'\n",
        encoding="utf-8",
    )
    assert config.parse_env_file(env_file) == {
        "HANDBALLSTATS_OUTPUT": "out/r.json",
        "HANDBALLSTATS_CACHE_TTL": "30",
        "QUOTED": "it''s",
    }


def test_env_file_does_not_override_existing_variables(clean_env, tmp_path):
    env_file = tmp_path / "custom.env"
    env_file.write_text("HANDBALLSTATS_CACHE_DIR=/from/file\n", encoding="utf-8")
    clean_env.setenv("HANDBALLSTATS_ENV_FILE", str(env_file))
    clean_env.setenv("HANDBALLSTATS_CACHE_DIR", "/from/env")

    assert ReportSettings.from_env().cache_dir == "/from/env"
