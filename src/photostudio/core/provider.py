"""Image generation provider integration for AI Photo Studio.

This module provides the seam between the HTTP gateway and the external
generative model.  The gateway only depends on :class:`GenerationProvider`;
the production implementation, :class:`GeminiProvider`, wraps an explicitly
constructed ``google.genai.Client``.

Client Lifecycle
----------------
No SDK client is created at import time.  :func:`create_provider` builds one
from :class:`~photostudio.core.config.StudioConfig` during application startup
and the result is stored on ``app.state``.  Tests pass a fake provider to
:func:`photostudio.api.main.create_app` instead.

Request Shape
-------------
Every call sends a single user turn made of three parts, in this order:

1. the text instruction (see :mod:`photostudio.core.prompts`),
2. the selfie (Image 1),
3. the template (Image 2),

and asks for both text and image response modalities, so a model that
declines or cannot draw still answers with text.

Usage
-----
::

    from photostudio.core.config import config
    from photostudio.core.provider import create_provider

    provider = create_provider(config)
    response = provider.generate(instruction, selfie, template)
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any

from google import genai
from google.genai import types

from photostudio.core.config import StudioConfig
from photostudio.core.data_uri import DecodedImage

logger = logging.getLogger(__name__)


class GenerationProvider(ABC):
    """Interface for services that composite a selfie onto a template."""

    #: Human-readable model identifier, reported by ``GET /api/config``.
    model: str = ""

    @abstractmethod
    def generate(self, instruction: str, image: DecodedImage, template: DecodedImage) -> Any:
        """Run one generation round trip.

        Args:
            instruction: Full text instruction.
            image: The user's selfie.
            template: The selected template image.

        Returns:
            The raw provider response, to be interpreted by
            :func:`photostudio.core.results.parse_generation_response`.

        Raises:
            Exception: Any SDK or network error, unmodified.  Classification
                happens in the gateway.
        """


class GeminiProvider(GenerationProvider):
    """Gemini multimodal image generation via the ``google-genai`` SDK.

    Attributes:
        _client: The ``genai.Client`` used for all calls.
        model: Gemini model identifier.
    """

    def __init__(self, client: genai.Client, model: str) -> None:
        self._client = client
        self.model = model

    def build_contents(
        self, instruction: str, image: DecodedImage, template: DecodedImage
    ) -> list:
        """Assemble the multi-part request contents."""
        return [
            instruction,
            types.Part.from_bytes(data=image.data, mime_type=image.mime_type),
            types.Part.from_bytes(data=template.data, mime_type=template.mime_type),
        ]

    def generate(self, instruction: str, image: DecodedImage, template: DecodedImage) -> Any:
        logger.info(
            f"Calling {self.model} (selfie {len(image.data)} bytes {image.mime_type}, "
            f"template {len(template.data)} bytes {template.mime_type})"
        )
        return self._client.models.generate_content(
            model=self.model,
            contents=self.build_contents(instruction, image, template),
            config=types.GenerateContentConfig(
                response_modalities=["TEXT", "IMAGE"],
            ),
        )


def create_provider(config: StudioConfig) -> GenerationProvider | None:
    """Build the production provider from configuration.

    Args:
        config: Application configuration.

    Returns:
        A :class:`GeminiProvider`, or ``None`` when no API key is configured.
    """
    if not config.credentials_configured:
        logger.warning("GEMINI_API_KEY is not set; generation requests will fail.")
        return None

    client = genai.Client(api_key=config.gemini_api_key)
    logger.info(f"Gemini provider initialised (model={config.gemini_model}).")
    return GeminiProvider(client, config.gemini_model)
