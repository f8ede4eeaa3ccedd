"""Core functionality for AI Photo Studio.

- **config.py**: Environment-based configuration using Pydantic Settings
  (``PHOTOSTUDIO_*`` variables plus ``GEMINI_API_KEY``).
- **provider.py**: The :class:`GenerationProvider` seam and the Gemini
  implementation.
- **prompts.py**: Face-swap instruction compilation.
- **results.py**: Tagged results (image / text / error) and provider-response
  parsing.
- **data_uri.py**: Base64 data URI encoding and decoding.
- **templates.py**: Template image catalogue and reference resolution.
"""

from photostudio.core.config import StudioConfig, config

__all__ = [
    "StudioConfig",
    "config",
]
