# SPDX-License-Identifier: MIT
# Copyright (c) 2025-2026 Soroush Yousefpour
"""
Unit tests for config.py.

All tests use temporary directories and never touch ~/.opengrammar/.
"""

import stat
import tomllib
from pathlib import Path

import pytest

from open_grammar import config as cfg_mod


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

@pytest.fixture
def isolated(tmp_path, monkeypatch):
    """Point the config module at tmp_path and reset the singleton."""
    monkeypatch.setattr(cfg_mod, "CONFIG_DIR", tmp_path)
    monkeypatch.setattr(cfg_mod, "CONFIG_FILE", tmp_path / "config.toml")
    monkeypatch.setattr(cfg_mod, "_config", None)
    for var in cfg_mod.API_KEY_ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    return tmp_path


def _load(tmp_path: Path, toml_content: str | None = None):
    """Write toml_content (if given) and load config from it."""
    cfg_file = tmp_path / "config.toml"
    if toml_content is not None:
        cfg_file.write_text(toml_content, encoding="utf-8")
    return cfg_mod.load_config()


# ---------------------------------------------------------------------------
# Basic loading
# ---------------------------------------------------------------------------

class TestLoadConfig:
    def test_missing_file_writes_defaults(self, isolated):
        config = _load(isolated)
        cfg_file = isolated / "config.toml"
        assert cfg_file.exists()
        assert config.backend.provider == "anthropic"
        # Written defaults must be valid TOML
        with open(cfg_file, "rb") as f:
            assert tomllib.load(f)["general"]["language"] == "en"

    def test_created_file_is_private(self, isolated):
        _load(isolated)
        mode = stat.S_IMODE((isolated / "config.toml").stat().st_mode)
        assert mode == 0o600

    def test_valid_toml_loads_values(self, isolated):
        toml = """
[general]
language = "id"
action = "formal"

[backend]
provider = "ollama"

[ollama]
model = "llama3.2:3b"
timeout = 30

[ui]
auto_copy = true
"""
        config = _load(isolated, toml)
        assert config.general.language == "id"
        assert config.general.action == "formal"
        assert config.backend.provider == "ollama"
        assert config.ollama.model == "llama3.2:3b"
        assert config.ollama.timeout == 30
        assert config.ui.auto_copy is True

    def test_invalid_toml_returns_defaults(self, isolated, capsys):
        """Corrupt TOML must not crash; should fall back to defaults."""
        config = _load(isolated, "[[[ not valid toml")
        assert config.general.language == "en"
        assert "Config parse error" in capsys.readouterr().err

    def test_empty_toml_returns_defaults(self, isolated):
        config = _load(isolated, "")
        assert config.general.action == "grammar"


# ---------------------------------------------------------------------------
# Default values
# ---------------------------------------------------------------------------

class TestDefaultValues:
    def test_language_default(self, isolated):
        assert _load(isolated, "").general.language == "en"

    def test_anthropic_defaults(self, isolated):
        config = _load(isolated, "")
        assert config.anthropic.url == "https://api.anthropic.com/v1/messages"
        assert config.anthropic.model == "claude-3-haiku-20240307"
        assert config.anthropic.max_tokens == 1000
        assert config.anthropic.api_key == ""

    def test_auto_copy_disabled_by_default(self, isolated):
        assert _load(isolated, "").ui.auto_copy is False

    def test_local_servers_default_to_localhost(self, isolated):
        config = _load(isolated, "")
        assert config.ollama.url.startswith("http://localhost:")
        assert config.lm_studio.url.startswith("http://localhost:")


# ---------------------------------------------------------------------------
# Validation / sanitization
# ---------------------------------------------------------------------------

class TestValidation:
    def test_invalid_language_falls_back(self, isolated):
        config = _load(isolated, '[general]\nlanguage = "fr"\n')
        assert config.general.language == "en"

    def test_invalid_action_falls_back(self, isolated):
        config = _load(isolated, '[general]\naction = "summarize"\n')
        assert config.general.action == "grammar"

    def test_custom_is_not_a_default_action(self, isolated):
        config = _load(isolated, '[general]\naction = "custom"\n')
        assert config.general.action == "grammar"

    def test_invalid_provider_falls_back(self, isolated, capsys):
        config = _load(isolated, '[backend]\nprovider = "openai"\n')
        assert config.backend.provider == "anthropic"
        assert "Invalid backend 'openai'" in capsys.readouterr().err

    def test_invalid_url_falls_back(self, isolated):
        config = _load(isolated, '[ollama]\nurl = "not-a-url"\n')
        assert config.ollama.url.startswith("http")

    def test_non_positive_max_tokens_falls_back(self, isolated):
        config = _load(isolated, "[anthropic]\nmax_tokens = 0\n")
        assert config.anthropic.max_tokens == 1000

    def test_negative_timeout_becomes_unlimited(self, isolated):
        config = _load(isolated, "[lm_studio]\ntimeout = -5\n")
        assert config.lm_studio.timeout == 0

    def test_non_string_api_key_ignored(self, isolated):
        config = _load(isolated, "[anthropic]\napi_key = 12345\n")
        assert config.anthropic.api_key == ""


# ---------------------------------------------------------------------------
# API key resolution
# ---------------------------------------------------------------------------

class TestEffectiveApiKey:
    def test_configured_key_wins(self, monkeypatch):
        monkeypatch.setenv("ANTHROPIC_API_KEY", "sk-env")
        assert cfg_mod.AnthropicConfig(api_key=" sk-file ").effective_api_key == "sk-file"

    def test_environment_order(self, monkeypatch):
        monkeypatch.setenv("OPENGRAMMAR_API_KEY", "sk-og")
        monkeypatch.setenv("ANTHROPIC_API_KEY", "sk-anthropic")
        assert cfg_mod.AnthropicConfig().effective_api_key == "sk-og"

    def test_no_key_anywhere(self, monkeypatch):
        for var in cfg_mod.API_KEY_ENV_VARS:
            monkeypatch.delenv(var, raising=False)
        assert cfg_mod.AnthropicConfig().effective_api_key == ""


# ---------------------------------------------------------------------------
# update_config_field round-trip
# ---------------------------------------------------------------------------

class TestUpdateConfigField:
    def test_update_string_field(self, isolated):
        _load(isolated)
        assert cfg_mod.update_config_field("general", "language", "id")
        written = (isolated / "config.toml").read_text(encoding="utf-8")
        assert 'language = "id"' in written
        assert cfg_mod.get_config().general.language == "id"

    def test_update_bool_field(self, isolated):
        _load(isolated)
        cfg_mod.update_config_field("ui", "auto_copy", True)
        written = (isolated / "config.toml").read_text(encoding="utf-8")
        assert "auto_copy = true" in written

    def test_update_int_field(self, isolated):
        _load(isolated)
        cfg_mod.update_config_field("anthropic", "max_tokens", 2000)
        written = (isolated / "config.toml").read_text(encoding="utf-8")
        assert "max_tokens = 2000" in written
        # lm_studio has its own max_tokens that must stay untouched
        with open(isolated / "config.toml", "rb") as f:
            data = tomllib.load(f)
        assert data["lm_studio"]["max_tokens"] == 0

    def test_api_key_with_special_characters(self, isolated):
        _load(isolated)
        key = 'sk-ant-"quoted"\\slash'
        cfg_mod.update_config_field("anthropic", "api_key", key)
        with open(isolated / "config.toml", "rb") as f:
            data = tomllib.load(f)
        assert data["anthropic"]["api_key"] == key
        assert cfg_mod.get_config().anthropic.api_key == key

    def test_written_file_stays_private(self, isolated):
        _load(isolated)
        cfg_mod.update_config_field("anthropic", "api_key", "sk-test")
        mode = stat.S_IMODE((isolated / "config.toml").stat().st_mode)
        assert mode == 0o600

    def test_key_missing_from_file_is_added(self, isolated):
        _load(isolated, "[general]\nlanguage = \"en\"\n")
        cfg_mod.update_config_field("backend", "provider", "ollama")
        with open(isolated / "config.toml", "rb") as f:
            data = tomllib.load(f)
        assert data["backend"]["provider"] == "ollama"
        assert data["general"]["language"] == "en"


# ---------------------------------------------------------------------------
# Helper function unit tests
# ---------------------------------------------------------------------------

class TestHelpers:
    def test_replace_in_section_replaces_string(self):
        content = '[anthropic]\nmodel = "old-model"\n'
        result = cfg_mod._replace_in_section(content, "anthropic", "model", '"new-model"')
        assert '"new-model"' in result
        assert '"old-model"' not in result

    def test_replace_in_section_replaces_bool(self):
        content = "[ui]\nauto_copy = false\n"
        result = cfg_mod._replace_in_section(content, "ui", "auto_copy", "true")
        assert "auto_copy = true" in result

    def test_replace_in_section_only_touches_named_section(self):
        content = '[ollama]\nmodel = "a"\n\n[lm_studio]\nmodel = "b"\n'
        result = cfg_mod._replace_in_section(content, "lm_studio", "model", '"c"')
        assert '[ollama]\nmodel = "a"' in result
        assert '[lm_studio]\nmodel = "c"' in result

    def test_replace_in_section_matches_whole_key(self):
        content = '[ollama]\ncheck_url = "http://localhost:11434/"\nurl = "http://localhost:11434/api/generate"\n'
        result = cfg_mod._replace_in_section(content, "ollama", "url", '"http://127.0.0.1:11434/api/generate"')
        assert 'check_url = "http://localhost:11434/"' in result
        assert 'url = "http://127.0.0.1:11434/api/generate"' in result

    def test_replace_in_section_appends_missing_section(self):
        result = cfg_mod._replace_in_section('[general]\nlanguage = "en"', "ui", "auto_copy", "true")
        assert result.endswith("[ui]\nauto_copy = true\n")

    def test_serialize_toml_value_bool(self):
        assert cfg_mod._serialize_toml_value(True) == "true"
        assert cfg_mod._serialize_toml_value(False) == "false"

    def test_serialize_toml_value_int(self):
        assert cfg_mod._serialize_toml_value(42) == "42"

    def test_serialize_toml_value_string(self):
        assert cfg_mod._serialize_toml_value("hello") == '"hello"'
        assert cfg_mod._serialize_toml_value('a"b\\c') == '"a\\"b\\\\c"'
