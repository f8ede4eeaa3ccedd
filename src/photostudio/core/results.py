"""Tagged generation results and provider-response parsing.

The provider returns a loosely-typed, multi-part response: a list of
candidates, each holding content parts that may carry text or inline image
bytes.  Route handlers never inspect that structure directly.  Instead,
:func:`parse_generation_response` turns it into exactly one of three result
types:

``ImageResult``
    The first inline image part, ready to be re-emitted as a data URI.
``TextResult``
    The model answered in text only (it declined, or lacks image output).
``ErrorResult``
    Nothing usable came back, or the request was blocked.  Carries an
    :class:`ErrorKind` and a fixed, user-facing message.

Exceptions raised by the provider SDK are mapped onto ``ErrorResult`` by
:func:`classify_provider_error`, which pattern-matches the error text.
"""

from __future__ import annotations

import base64
import binascii
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Union

from photostudio.core.data_uri import DEFAULT_MIME_TYPE, encode_data_uri


class ErrorKind(str, Enum):
    """Classification of failed generations."""

    MODEL_UNAVAILABLE = "model_unavailable"
    SAFETY_BLOCKED = "safety_blocked"
    RATE_LIMITED = "rate_limited"
    EMPTY_RESPONSE = "empty_response"
    PROVIDER_ERROR = "provider_error"


# Fixed user-facing messages.  Raw provider messages are only logged.
ERROR_MESSAGES: dict[ErrorKind, str] = {
    ErrorKind.MODEL_UNAVAILABLE: (
        "The image model is currently unavailable. Please try again later."
    ),
    ErrorKind.SAFETY_BLOCKED: (
        "The request was blocked by the provider's safety filters. "
        "Try a different photo or prompt."
    ),
    ErrorKind.RATE_LIMITED: (
        "The provider's quota or rate limit was exceeded. Please try again later."
    ),
    ErrorKind.EMPTY_RESPONSE: "The provider returned no image or text.",
    ErrorKind.PROVIDER_ERROR: "Failed to generate image.",
}

TEXT_ONLY_NOTE = (
    "The model returned text instead of an image. It may have declined the "
    "request or the selected model may not support image output."
)

# Candidate finish reasons that indicate a safety or policy block.
_SAFETY_FINISH_REASONS = frozenset(
    {
        "SAFETY",
        "PROHIBITED_CONTENT",
        "BLOCKLIST",
        "SPII",
        "IMAGE_SAFETY",
        "IMAGE_PROHIBITED_CONTENT",
    }
)

_RATE_LIMIT_RE = re.compile(
    r"quota|\brate\b|rate[ _-]?limit|\b429\b|resource_exhausted|too many requests"
)
_NOT_FOUND_RE = re.compile(r"\b404\b|not found")


@dataclass(frozen=True)
class ImageResult:
    """An inline image returned by the provider."""

    data: bytes
    mime_type: str

    def to_data_uri(self) -> str:
        return encode_data_uri(self.data, self.mime_type)


@dataclass(frozen=True)
class TextResult:
    """A text-only answer returned by the provider."""

    text: str
    note: str = TEXT_ONLY_NOTE


@dataclass(frozen=True)
class ErrorResult:
    """A failed generation.

    Attributes:
        kind: Error classification.
        message: Fixed message that is safe to show to the user.
        detail: Raw provider detail for logs, never returned to clients.
    """

    kind: ErrorKind
    message: str
    detail: str | None = None

    @classmethod
    def of(cls, kind: ErrorKind, detail: str | None = None) -> ErrorResult:
        return cls(kind=kind, message=ERROR_MESSAGES[kind], detail=detail)


GenerationResult = Union[ImageResult, TextResult, ErrorResult]


def _enum_name(value: Any) -> str:
    """Normalise an SDK enum (or plain string) to an upper-case name."""
    if value is None:
        return ""
    return str(getattr(value, "value", value)).upper()


def _inline_bytes(inline_data: Any) -> bytes:
    """Return the raw bytes of an inline data blob.

    The SDK exposes bytes; REST-shaped payloads carry base64 strings.
    """
    data = getattr(inline_data, "data", None)
    if isinstance(data, str):
        try:
            return base64.b64decode(data, validate=True)
        except (binascii.Error, ValueError):
            return b""
    return data or b""


def parse_generation_response(response: Any) -> GenerationResult:
    """Turn a raw provider response into a tagged result.

    Rules, applied in order:

    1. A prompt-level block reason means the request was blocked.
    2. No candidates means an empty response.
    3. The first part of the first candidate carrying inline image bytes
       becomes an :class:`ImageResult`.
    4. Otherwise, any text parts are joined into a :class:`TextResult`.
    5. Otherwise, a safety finish reason means blocked, anything else empty.

    Args:
        response: A ``GenerateContentResponse`` (or anything shaped like one).

    Returns:
        Exactly one of ``ImageResult``, ``TextResult`` or ``ErrorResult``.
    """
    feedback = getattr(response, "prompt_feedback", None)
    block_reason = getattr(feedback, "block_reason", None)
    if block_reason is not None:
        return ErrorResult.of(ErrorKind.SAFETY_BLOCKED, f"block_reason={_enum_name(block_reason)}")

    candidates = getattr(response, "candidates", None) or []
    if not candidates:
        return ErrorResult.of(ErrorKind.EMPTY_RESPONSE, "no candidates")

    candidate = candidates[0]
    content = getattr(candidate, "content", None)
    parts = getattr(content, "parts", None) or []

    texts: list[str] = []
    for part in parts:
        inline_data = getattr(part, "inline_data", None)
        if inline_data is not None:
            data = _inline_bytes(inline_data)
            if data:
                mime_type = getattr(inline_data, "mime_type", None) or DEFAULT_MIME_TYPE
                return ImageResult(data=data, mime_type=mime_type)

        text = getattr(part, "text", None)
        if text and text.strip():
            texts.append(text.strip())

    if texts:
        return TextResult(text="\n\n".join(texts))

    finish_reason = _enum_name(getattr(candidate, "finish_reason", None))
    if finish_reason in _SAFETY_FINISH_REASONS:
        return ErrorResult.of(ErrorKind.SAFETY_BLOCKED, f"finish_reason={finish_reason}")

    return ErrorResult.of(ErrorKind.EMPTY_RESPONSE, f"finish_reason={finish_reason or 'none'}")


def classify_provider_error(error: BaseException) -> ErrorResult:
    """Map a provider exception onto a fixed user-facing error.

    Matching is case-insensitive on the exception text, first match wins:

    - ``quota`` / ``rate`` / ``rate limit`` / ``429`` / ``resource_exhausted``
      → rate limited
    - ``404`` / ``not found``                            → model unavailable
    - ``safety`` / ``blocked``                           → safety filters
    - anything else                                      → generic failure

    Numeric codes and "rate" only match as whole words, so ``14040`` is not a
    404 and "generate" is not a rate limit.

    Args:
        error: Exception raised by the provider call.

    Returns:
        ``ErrorResult`` whose ``detail`` holds the raw exception text.
    """
    detail = str(error)
    text = detail.lower()

    if _RATE_LIMIT_RE.search(text):
        kind = ErrorKind.RATE_LIMITED
    elif _NOT_FOUND_RE.search(text):
        kind = ErrorKind.MODEL_UNAVAILABLE
    elif "safety" in text or "blocked" in text:
        kind = ErrorKind.SAFETY_BLOCKED
    else:
        kind = ErrorKind.PROVIDER_ERROR

    return ErrorResult.of(kind, detail)
