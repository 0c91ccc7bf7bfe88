# SPDX-License-Identifier: MIT
# Copyright (c) 2025-2026 Soroush Yousefpour
"""
Configuration management for OpenGrammar.

Loads settings from ~/.opengrammar/config.toml with sensible defaults.
"""

import fcntl
import os
import re
import sys
import threading
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal, Optional
from urllib.parse import urlparse

from .actions import ACTION_REGISTRY, CUSTOM_ACTION

CONFIG_DIR = Path.home() / ".opengrammar"
CONFIG_FILE = CONFIG_DIR / "config.toml"

# Environment variables checked when no API key is configured
API_KEY_ENV_VARS = ("OPENGRAMMAR_API_KEY", "ANTHROPIC_API_KEY")

# Available text backends
TEXT_BACKENDS = ("anthropic", "ollama", "lm_studio")
TextBackendType = Literal["anthropic", "ollama", "lm_studio"]

RESPONSE_LANGUAGES = ("en", "id")

# Default configuration
DEFAULT_CONFIG = """# OpenGrammar Configuration
# Edit this file to customize behavior

[general]
# Response language: "en" (US English) or "id" (Bahasa Indonesia)
language = "en"

# Default action: grammar, improve, rephrase, formal, detailed
action = "grammar"

[backend]
# Text backend: "anthropic", "ollama", or "lm_studio"
provider = "anthropic"

[anthropic]
# Your Claude API key (bring your own key).
# Leave empty to use the OPENGRAMMAR_API_KEY or ANTHROPIC_API_KEY environment variable.
api_key = ""

# Messages API endpoint
url = "https://api.anthropic.com/v1/messages"

# Model to use
model = "claude-3-haiku-20240307"

# Maximum tokens in the reply
max_tokens = 1000

# Request timeout in seconds (0 = no limit)
timeout = 60

[ollama]
# Ollama server URL
url = "http://localhost:11434/api/generate"
check_url = "http://localhost:11434/"

# Model for text processing
model = "gemma3:4b-it-qat"

# Keep model hot in memory between requests
keep_alive = "60m"

# Request timeout in seconds (0 = no limit)
timeout = 0

[lm_studio]
# LM Studio server URL (OpenAI-compatible endpoint)
url = "http://localhost:1234/v1/chat/completions"
check_url = "http://localhost:1234/"

# Model to use (empty = first loaded model)
model = "google/gemma-3-4b"

# Maximum tokens to generate (0 = default 2048)
max_tokens = 0

# Request timeout in seconds (0 = no limit)
timeout = 0

[ui]
# Copy the final text to the clipboard after each run
auto_copy = false
"""


@dataclass
class GeneralConfig:
    language: str = "en"
    action: str = "grammar"


@dataclass
class BackendConfig:
    """Text backend selection."""
    provider: TextBackendType = "anthropic"


@dataclass
class AnthropicConfig:
    """Claude Messages API settings."""
    api_key: str = ""
    url: str = "https://api.anthropic.com/v1/messages"
    model: str = "claude-3-haiku-20240307"
    max_tokens: int = 1000
    timeout: int = 60

    @property
    def effective_api_key(self) -> str:
        """Configured key, or the first non-empty key from the environment."""
        if self.api_key.strip():
            return self.api_key.strip()
        for var in API_KEY_ENV_VARS:
            value = os.environ.get(var, "").strip()
            if value:
                return value
        return ""


@dataclass
class OllamaConfig:
    """Ollama-specific settings."""
    url: str = "http://localhost:11434/api/generate"
    check_url: str = "http://localhost:11434/"
    model: str = "gemma3:4b-it-qat"
    keep_alive: str = "60m"
    timeout: int = 0


@dataclass
class LMStudioConfig:
    """LM Studio-specific settings."""
    url: str = "http://localhost:1234/v1/chat/completions"
    check_url: str = "http://localhost:1234/"
    model: str = "google/gemma-3-4b"
    max_tokens: int = 0
    timeout: int = 0


@dataclass
class UIConfig:
    auto_copy: bool = False


@dataclass
class Config:
    general: GeneralConfig = field(default_factory=GeneralConfig)
    backend: BackendConfig = field(default_factory=BackendConfig)
    anthropic: AnthropicConfig = field(default_factory=AnthropicConfig)
    ollama: OllamaConfig = field(default_factory=OllamaConfig)
    lm_studio: LMStudioConfig = field(default_factory=LMStudioConfig)
    ui: UIConfig = field(default_factory=UIConfig)


def load_config() -> Config:
    """Load configuration from file, creating default if missing."""
    CONFIG_DIR.mkdir(parents=True, exist_ok=True)
    try:
        CONFIG_DIR.chmod(0o700)
    except OSError:
        pass

    # Create default config if it doesn't exist
    if not CONFIG_FILE.exists():
        CONFIG_FILE.write_text(DEFAULT_CONFIG, encoding='utf-8')
        try:
            # The file may hold an API key
            CONFIG_FILE.chmod(0o600)
        except OSError:
            pass

    # Load and parse config
    data = {}
    try:
        with open(CONFIG_FILE, 'rb') as f:
            data = tomllib.load(f)
    except Exception as e:
        print(f"Config parse error: {e}", file=sys.stderr)

    # Build config object with defaults
    config = Config()

    # General settings
    if 'general' in data:
        config.general = GeneralConfig(
            language=data['general'].get('language', config.general.language),
            action=data['general'].get('action', config.general.action),
        )

    # Backend settings
    if 'backend' in data:
        config.backend = BackendConfig(
            provider=data['backend'].get('provider', config.backend.provider),
        )

    # Anthropic settings
    if 'anthropic' in data:
        config.anthropic = AnthropicConfig(
            api_key=data['anthropic'].get('api_key', config.anthropic.api_key),
            url=data['anthropic'].get('url', config.anthropic.url),
            model=data['anthropic'].get('model', config.anthropic.model),
            max_tokens=data['anthropic'].get('max_tokens', config.anthropic.max_tokens),
            timeout=data['anthropic'].get('timeout', config.anthropic.timeout),
        )

    # Ollama settings
    if 'ollama' in data:
        config.ollama = OllamaConfig(
            url=data['ollama'].get('url', config.ollama.url),
            check_url=data['ollama'].get('check_url', config.ollama.check_url),
            model=data['ollama'].get('model', config.ollama.model),
            keep_alive=data['ollama'].get('keep_alive', config.ollama.keep_alive),
            timeout=data['ollama'].get('timeout', config.ollama.timeout),
        )

    # LM Studio settings
    if 'lm_studio' in data:
        config.lm_studio = LMStudioConfig(
            url=data['lm_studio'].get('url', config.lm_studio.url),
            check_url=data['lm_studio'].get('check_url', config.lm_studio.check_url),
            model=data['lm_studio'].get('model', config.lm_studio.model),
            max_tokens=data['lm_studio'].get('max_tokens', config.lm_studio.max_tokens),
            timeout=data['lm_studio'].get('timeout', config.lm_studio.timeout),
        )

    # UI settings
    if 'ui' in data:
        config.ui = UIConfig(
            auto_copy=data['ui'].get('auto_copy', config.ui.auto_copy),
        )

    # Validate and sanitize config values
    _validate_config(config)

    return config


def _is_valid_url(url: str) -> bool:
    """Check if a string is a valid HTTP/HTTPS URL."""
    try:
        result = urlparse(url)
        return result.scheme in ("http", "https") and bool(result.netloc)
    except (ValueError, AttributeError):
        return False


def _validate_config(config: Config):
    """Validate and sanitize configuration values."""
    if config.general.language not in RESPONSE_LANGUAGES:
        print(f"Config warning: Invalid language '{config.general.language}', using 'en'", file=sys.stderr)
        config.general.language = "en"

    if config.general.action not in ACTION_REGISTRY or config.general.action == CUSTOM_ACTION:
        print(f"Config warning: Invalid default action '{config.general.action}', using 'grammar'", file=sys.stderr)
        config.general.action = "grammar"

    if config.backend.provider not in TEXT_BACKENDS:
        print(f"Config warning: Invalid backend '{config.backend.provider}', using 'anthropic'", file=sys.stderr)
        config.backend.provider = "anthropic"

    if not isinstance(config.anthropic.api_key, str):
        print("Config warning: anthropic api_key must be a string, ignoring it", file=sys.stderr)
        config.anthropic.api_key = ""

    # URL validation
    if not _is_valid_url(config.anthropic.url):
        print(f"Config warning: Invalid anthropic URL '{config.anthropic.url}', using default", file=sys.stderr)
        config.anthropic.url = "https://api.anthropic.com/v1/messages"

    if not _is_valid_url(config.ollama.url):
        print(f"Config warning: Invalid ollama URL '{config.ollama.url}', using default", file=sys.stderr)
        config.ollama.url = "http://localhost:11434/api/generate"

    if not _is_valid_url(config.ollama.check_url):
        print(f"Config warning: Invalid ollama check_url '{config.ollama.check_url}', using default", file=sys.stderr)
        config.ollama.check_url = "http://localhost:11434/"

    if not _is_valid_url(config.lm_studio.url):
        print(f"Config warning: Invalid lm_studio URL '{config.lm_studio.url}', using default", file=sys.stderr)
        config.lm_studio.url = "http://localhost:1234/v1/chat/completions"

    if not _is_valid_url(config.lm_studio.check_url):
        print(f"Config warning: Invalid lm_studio check_url '{config.lm_studio.check_url}', using default", file=sys.stderr)
        config.lm_studio.check_url = "http://localhost:1234/"

    # Numeric limits
    if not isinstance(config.anthropic.max_tokens, int) or config.anthropic.max_tokens < 1:
        print("Config warning: anthropic max_tokens must be a positive integer, using 1000", file=sys.stderr)
        config.anthropic.max_tokens = 1000

    for section in (config.anthropic, config.ollama, config.lm_studio):
        if not isinstance(section.timeout, int) or section.timeout < 0:
            print("Config warning: timeout cannot be negative, using 0 (unlimited)", file=sys.stderr)
            section.timeout = 0

    if not isinstance(config.lm_studio.max_tokens, int) or config.lm_studio.max_tokens < 0:
        config.lm_studio.max_tokens = 0


# Global config instance with thread-safe initialization
_config: Optional[Config] = None
_config_lock = threading.Lock()


def get_config() -> Config:
    """Get the global configuration instance (thread-safe)."""
    global _config
    if _config is None:
        with _config_lock:
            # Double-check locking pattern for thread safety
            if _config is None:
                _config = load_config()
    return _config


# ---------------------------------------------------------------------------
# TOML section helpers
# ---------------------------------------------------------------------------

_TOML_STRING = r'"(?:[^"\\]|\\.)*"'


def _replace_in_section(content: str, section: str, key: str, new_value: str) -> str:
    """Replace a key's value within a specific TOML section.

    new_value must already be serialized to its TOML string representation
    (e.g. '"quoted"' for strings, 'true'/'false' for bools, '42' for ints).

    If the key doesn't exist in the section, it is appended under the header.
    """
    lines = content.splitlines(keepends=True)
    in_section = False
    section_header_idx = None
    key_prefix = rf'^(\s*{re.escape(key)}\s*=\s*)'
    for i, line in enumerate(lines):
        stripped = line.strip()
        if stripped.startswith("[") and stripped.endswith("]"):
            in_section = stripped == f"[{section}]"
            if in_section:
                section_header_idx = i
            continue
        if in_section:
            # Quoted string, unquoted boolean, unquoted number
            for value_pattern in (_TOML_STRING, r'(?:true|false)', r'[-+]?[0-9]*\.?[0-9]+'):
                new_line = re.sub(
                    key_prefix + value_pattern,
                    lambda m: m.group(1) + new_value,
                    line,
                    count=1,
                )
                if new_line != line:
                    lines[i] = new_line
                    return "".join(lines)

    # Key not found in section - append it after the section header
    if section_header_idx is not None:
        lines.insert(section_header_idx + 1, f"{key} = {new_value}\n")
        return "".join(lines)

    # Section not found at all - append a new section at the end of the file
    if lines and not lines[-1].endswith("\n"):
        lines[-1] += "\n"
    lines.append(f"\n[{section}]\n")
    lines.append(f"{key} = {new_value}\n")
    return "".join(lines)


def _serialize_toml_value(value) -> str:
    """Serialize a Python value to its TOML string representation."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return str(value)
    # String: escape backslashes and quotes, wrap in double quotes
    escaped = str(value).replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def update_config_field(section: str, key: str, value) -> bool:
    """Update a single config field in-memory AND persist to TOML.

    value may be a bool, int, float, or str. Serialization is handled
    automatically so callers pass Python-native values directly.
    """
    config = get_config()
    section_obj = getattr(config, section, None)
    if section_obj is not None and hasattr(section_obj, key):
        with _config_lock:
            setattr(section_obj, key, value)
    try:
        fd = os.open(str(CONFIG_FILE), os.O_RDWR | os.O_CREAT, 0o600)
        try:
            fcntl.flock(fd, fcntl.LOCK_EX)
            content = CONFIG_FILE.read_text(encoding='utf-8')
            toml_value = _serialize_toml_value(value)
            content = _replace_in_section(content, section, key, toml_value)
            CONFIG_FILE.write_text(content, encoding='utf-8')
        finally:
            fcntl.flock(fd, fcntl.LOCK_UN)
            os.close(fd)
        return True
    except Exception as e:
        print(f"Config write failed: {e}", file=sys.stderr)
        return False
