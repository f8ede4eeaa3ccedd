"""Configuration management for AI Photo Studio.

This module provides centralized configuration management using Pydantic Settings.
Configuration is loaded from environment variables with the PHOTOSTUDIO_ prefix,
allowing easy customization without code changes.

Environment Variable Loading
-----------------------------
Configuration values are loaded in the following priority order:
1. Environment variables (PHOTOSTUDIO_* prefix)
2. .env file in the project root
3. Default values defined in StudioConfig

The Gemini API key is the one exception to the prefix rule: it is read from
the conventional ``GEMINI_API_KEY`` variable (``PHOTOSTUDIO_GEMINI_API_KEY`` is
accepted as well).

Example .env file:
    GEMINI_API_KEY=your-key-here
    PHOTOSTUDIO_GEMINI_MODEL=gemini-2.5-flash-image-preview
    PHOTOSTUDIO_TEMPLATE_IMAGES_DIR=public/templates
    PHOTOSTUDIO_SERVER_PORT=7860

Global Configuration Instance
------------------------------
A global ``config`` instance is created automatically at module import time.
It only holds settings; the Gemini client itself is built from it during
application startup (see :func:`photostudio.core.provider.create_provider`).

Usage Example
-------------
    from photostudio.core.config import config

    print(config.gemini_model)
    print(config.template_images_dir)
"""

from pathlib import Path
from typing import Literal

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Package-relative asset directories (HTML page, CSS and JS).
_PACKAGE_DIR = Path(__file__).resolve().parent.parent


class StudioConfig(BaseSettings):
    """Main configuration for AI Photo Studio.

    Attributes
    ----------
    Provider Settings:
        gemini_api_key : str | None
            API key for the Gemini provider.  ``None`` means generation
            requests fail fast with a configuration error.
        gemini_model : str
            Gemini model identifier used for image generation.

    Paths:
        template_images_dir : Path
            Directory holding the selectable template images.
        static_dir : Path
            Directory with the frontend CSS and JavaScript.
        html_dir : Path
            Directory containing ``index.html``.

    Server Settings:
        server_host : str
            Server bind address (0.0.0.0 for local network)
        server_port : int
            Server port (1024-65535)
        log_level : Literal["DEBUG", "INFO", "WARNING", "ERROR"]
            Root logging level used by the CLI entry point.

    Examples
    --------
    Create a custom configuration:

        >>> custom_config = StudioConfig(
        ...     gemini_api_key="test-key",
        ...     template_images_dir="/srv/templates",
        ... )
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="PHOTOSTUDIO_",
        case_sensitive=False,
        populate_by_name=True,
        extra="ignore",
    )

    # Provider settings
    gemini_api_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices(
            "gemini_api_key",
            "GEMINI_API_KEY",
            "PHOTOSTUDIO_GEMINI_API_KEY",
        ),
        description="API key for the Gemini image generation provider",
    )
    gemini_model: str = Field(
        default="gemini-2.5-flash-image-preview",
        description="Gemini model used for face-swap generation",
    )

    # Paths
    template_images_dir: Path = Field(
        default=Path("public/templates"),
        description="Directory containing selectable template images",
    )
    static_dir: Path = Field(
        default=_PACKAGE_DIR / "static",
        description="Directory with frontend CSS and JavaScript",
    )
    html_dir: Path = Field(
        default=_PACKAGE_DIR / "templates",
        description="Directory containing index.html",
    )

    # Server settings
    server_host: str = Field(
        default="0.0.0.0",
        description="Server bind address (0.0.0.0 for local network)",
    )
    server_port: int = Field(
        default=7860,
        description="Server port",
        ge=1024,
        le=65535,
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Root logging level",
    )

    @property
    def credentials_configured(self) -> bool:
        """Whether a non-blank API key is available."""
        return bool(self.gemini_api_key and self.gemini_api_key.strip())


# Global configuration instance
# Loads values from environment variables (PHOTOSTUDIO_* prefix, plus
# GEMINI_API_KEY) and the .env file.
config = StudioConfig()
