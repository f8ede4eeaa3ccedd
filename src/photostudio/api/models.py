"""Pydantic request and response models for the AI Photo Studio API.

Models
------
GenerationRequest
    Payload for ``POST /api/predictions``.
GenerationResponse
    Successful generation result (HTTP 201).
ErrorResponse
    Error body returned with every 4xx/5xx status.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class GenerationRequest(BaseModel):
    """Request body for the ``POST /api/predictions`` endpoint.

    ``image`` and ``template`` are declared optional so that a missing value
    reaches the route handler, which answers with the gateway's own 400
    error body instead of a schema validation error.

    Attributes:
        image: The user's selfie as a base64 data URI.
        template: The template image as a base64 data URI, or a template
            reference such as ``/templates/summer-dress.png``.
        prompt: Optional free-text instructions appended to the fixed
            face-swap instruction.
    """

    image: str | None = Field(
        default=None,
        description="Selfie as a base64 data URI.",
    )
    template: str | None = Field(
        default=None,
        description="Template as a base64 data URI or a template path.",
    )
    prompt: str | None = Field(
        default=None,
        description="Optional free-text prompt.",
    )


class GenerationResponse(BaseModel):
    """Response body for a successful generation.

    Attributes:
        output: A ``data:<mime>;base64,...`` image, or plain text when the
            model answered without an image.
        note: Advisory message, present for text-only results.
    """

    output: str = Field(
        ...,
        description="Generated image data URI, or the model's text answer.",
    )
    note: str | None = Field(
        default=None,
        description="Advisory note (set when output is text).",
    )


class ErrorResponse(BaseModel):
    """Error body returned by the gateway."""

    error: str = Field(
        ...,
        description="User-facing error message.",
    )
