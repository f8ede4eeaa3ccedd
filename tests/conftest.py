"""Shared pytest fixtures for AI Photo Studio tests."""

from __future__ import annotations

import base64
import io
import shutil
import tempfile
from pathlib import Path
from types import SimpleNamespace
from typing import Any, Generator

import pytest
from fastapi.testclient import TestClient
from PIL import Image

from photostudio.api.main import create_app
from photostudio.core.config import StudioConfig
from photostudio.core.data_uri import DecodedImage
from photostudio.core.provider import GenerationProvider

# ---------------------------------------------------------------------------
# Image helpers.
# ---------------------------------------------------------------------------


def make_image_bytes(fmt: str = "PNG", size: tuple[int, int] = (8, 12), color=(200, 80, 40)) -> bytes:
    """Render a small solid-colour image with Pillow and return its bytes."""
    buffer = io.BytesIO()
    Image.new("RGB", size, color).save(buffer, format=fmt)
    return buffer.getvalue()


def make_data_uri(fmt: str = "PNG", mime_type: str = "image/png") -> str:
    """Return a real image encoded as a base64 data URI."""
    encoded = base64.b64encode(make_image_bytes(fmt)).decode("ascii")
    return f"data:{mime_type};base64,{encoded}"


# ---------------------------------------------------------------------------
# Fake provider responses, shaped like google-genai's GenerateContentResponse.
# ---------------------------------------------------------------------------


def image_part(data: bytes, mime_type: str | None = "image/png") -> SimpleNamespace:
    return SimpleNamespace(text=None, inline_data=SimpleNamespace(data=data, mime_type=mime_type))


def text_part(text: str) -> SimpleNamespace:
    return SimpleNamespace(text=text, inline_data=None)


def make_response(
    *parts: SimpleNamespace,
    finish_reason: str | None = "STOP",
    block_reason: str | None = None,
    candidates: list | None = None,
) -> SimpleNamespace:
    """Build a fake provider response.

    Args:
        *parts: Content parts of the first candidate.
        finish_reason: Finish reason of the first candidate.
        block_reason: Prompt feedback block reason (``None`` = not blocked).
        candidates: Explicit candidate list, overriding *parts*.
    """
    if candidates is None:
        candidates = [
            SimpleNamespace(
                content=SimpleNamespace(parts=list(parts)),
                finish_reason=finish_reason,
            )
        ]
    return SimpleNamespace(
        candidates=candidates,
        prompt_feedback=SimpleNamespace(block_reason=block_reason),
    )


class FakeProvider(GenerationProvider):
    """Records calls and returns a canned response (or raises a canned error)."""

    model = "fake-image-model"

    def __init__(self, response: Any = None, error: Exception | None = None) -> None:
        self.response = response if response is not None else make_response(
            image_part(b"generated-bytes", "image/png")
        )
        self.error = error
        self.calls: list[dict] = []

    @property
    def call_count(self) -> int:
        return len(self.calls)

    def generate(self, instruction: str, image: DecodedImage, template: DecodedImage) -> Any:
        self.calls.append({"instruction": instruction, "image": image, "template": template})
        if self.error is not None:
            raise self.error
        return self.response


# ---------------------------------------------------------------------------
# Fixtures.
# ---------------------------------------------------------------------------


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files.

    Yields:
        Path to temporary directory

    Cleanup:
        Directory is removed after test completes
    """
    temp_path = Path(tempfile.mkdtemp())
    try:
        yield temp_path
    finally:
        shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def template_dir(temp_dir: Path) -> Path:
    """Create a template directory with two images and some noise.

    Returns:
        Path containing ``beach.png`` (8x12), ``suit.JPG`` (10x20),
        ``notes.txt`` and a corrupt ``broken.webp``.
    """
    directory = temp_dir / "templates"
    directory.mkdir()
    (directory / "beach.png").write_bytes(make_image_bytes("PNG", (8, 12)))
    (directory / "suit.JPG").write_bytes(make_image_bytes("JPEG", (10, 20)))
    (directory / "notes.txt").write_text("not an image")
    (directory / "broken.webp").write_bytes(b"definitely not a webp")
    return directory


@pytest.fixture
def test_config(template_dir: Path) -> StudioConfig:
    """Configuration with credentials and the temporary template directory."""
    return StudioConfig(
        gemini_api_key="test-key",
        gemini_model="fake-image-model",
        template_images_dir=template_dir,
        _env_file=None,
    )


@pytest.fixture
def no_key_config(template_dir: Path) -> StudioConfig:
    """Configuration without any API key."""
    return StudioConfig(
        gemini_api_key=None,
        template_images_dir=template_dir,
        _env_file=None,
    )


@pytest.fixture
def fake_provider() -> FakeProvider:
    """Provider returning a single inline PNG."""
    return FakeProvider()


@pytest.fixture
def test_client(test_config: StudioConfig, fake_provider: FakeProvider) -> Generator[TestClient, None, None]:
    """TestClient for an app wired to the fake provider."""
    app = create_app(test_config, fake_provider)
    with TestClient(app) as client:
        yield client


@pytest.fixture
def selfie_data_uri() -> str:
    return make_data_uri("PNG", "image/png")


@pytest.fixture
def template_data_uri() -> str:
    return make_data_uri("JPEG", "image/jpeg")
