"""Tests for photostudio.core.config — configuration management.

Tests cover:
- Default values for all configuration fields.
- Environment variable overrides (GEMINI_API_KEY and the PHOTOSTUDIO_ prefix).
- Credential detection.
- Pydantic validation constraints (port range, log level literals).
"""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from photostudio.core.config import StudioConfig

_ENV_VARS = [
    "GEMINI_API_KEY",
    "PHOTOSTUDIO_GEMINI_API_KEY",
    "PHOTOSTUDIO_GEMINI_MODEL",
    "PHOTOSTUDIO_TEMPLATE_IMAGES_DIR",
    "PHOTOSTUDIO_SERVER_HOST",
    "PHOTOSTUDIO_SERVER_PORT",
    "PHOTOSTUDIO_LOG_LEVEL",
]


@pytest.fixture
def clean_env(monkeypatch):
    """Remove every variable the config reads."""
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestConfigDefaults:
    """Verify that StudioConfig provides sensible defaults."""

    def test_defaults(self, clean_env):
        cfg = StudioConfig(_env_file=None)
        assert cfg.gemini_api_key is None
        assert cfg.gemini_model == "gemini-2.5-flash-image-preview"
        assert cfg.template_images_dir == Path("public/templates")
        assert cfg.server_host == "0.0.0.0"
        assert cfg.server_port == 7860
        assert cfg.log_level == "INFO"

    def test_package_asset_dirs_exist(self, clean_env):
        cfg = StudioConfig(_env_file=None)
        assert (cfg.html_dir / "index.html").is_file()
        assert (cfg.static_dir / "js" / "app.js").is_file()
        assert (cfg.static_dir / "css" / "style.css").is_file()


class TestEnvironmentOverrides:
    """Values loaded from the environment."""

    def test_gemini_api_key_env(self, clean_env):
        clean_env.setenv("GEMINI_API_KEY", "from-env")
        cfg = StudioConfig(_env_file=None)
        assert cfg.gemini_api_key == "from-env"
        assert cfg.credentials_configured is True

    def test_prefixed_api_key_env(self, clean_env):
        clean_env.setenv("PHOTOSTUDIO_GEMINI_API_KEY", "prefixed")
        cfg = StudioConfig(_env_file=None)
        assert cfg.gemini_api_key == "prefixed"

    def test_prefixed_settings(self, clean_env, temp_dir: Path):
        clean_env.setenv("PHOTOSTUDIO_GEMINI_MODEL", "gemini-other")
        clean_env.setenv("PHOTOSTUDIO_TEMPLATE_IMAGES_DIR", str(temp_dir))
        clean_env.setenv("PHOTOSTUDIO_SERVER_PORT", "8080")
        cfg = StudioConfig(_env_file=None)
        assert cfg.gemini_model == "gemini-other"
        assert cfg.template_images_dir == temp_dir
        assert cfg.server_port == 8080

    def test_env_file(self, clean_env, temp_dir: Path):
        env_file = temp_dir / ".env"
        env_file.write_text("GEMINI_API_KEY=from-file\nPHOTOSTUDIO_LOG_LEVEL=DEBUG\n")
        cfg = StudioConfig(_env_file=env_file)
        assert cfg.gemini_api_key == "from-file"
        assert cfg.log_level == "DEBUG"


class TestCredentials:
    """credentials_configured reflects a usable key."""

    @pytest.mark.parametrize("key, expected", [(None, False), ("", False), ("   ", False), ("k", True)])
    def test_credentials_configured(self, clean_env, key, expected):
        cfg = StudioConfig(gemini_api_key=key, _env_file=None)
        assert cfg.credentials_configured is expected


class TestValidation:
    """Pydantic constraints."""

    @pytest.mark.parametrize("port", [80, 70000])
    def test_port_out_of_range(self, clean_env, port):
        with pytest.raises(ValidationError):
            StudioConfig(server_port=port, _env_file=None)

    def test_invalid_log_level(self, clean_env):
        with pytest.raises(ValidationError):
            StudioConfig(log_level="LOUD", _env_file=None)
