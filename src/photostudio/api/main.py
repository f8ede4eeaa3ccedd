"""AI Photo Studio — FastAPI Application.

This module is the single entry point for the web application.  It defines
the application factory, all REST API routes, and the ``main()`` CLI function
that launches the uvicorn server.

Architecture
------------
The application is a thin, stateless gateway:

- **Configuration** comes from :class:`~photostudio.core.config.StudioConfig`
  (environment variables and ``.env``).
- **The provider** (:class:`~photostudio.core.provider.GenerationProvider`)
  is built once at startup by the lifespan handler and stored on
  ``app.state``.  :func:`create_app` accepts a ready-made provider so tests
  can substitute a fake.
- **Templates** are image files in ``config.template_images_dir``, served
  at ``/templates/...`` and listed by ``GET /api/templates``.
- **The HTML page** is served as a raw ``HTMLResponse``; the page fetches the
  template list on load and converts the chosen template to a data URI in the
  browser before calling the gateway.

Endpoints
---------
========  ============================  ====================================
Method    Path                          Purpose
========  ============================  ====================================
GET       ``/``                         Serve the main HTML page
GET       ``/api/config``               Version, model, credential status
GET       ``/api/templates``            Template image catalogue
POST      ``/api/predictions``          Face-swap generation gateway
========  ============================  ====================================

Error Bodies
------------
Every gateway failure is answered with ``{"error": "<message>"}``:

- 400 for missing or undecodable ``image`` / ``template`` and malformed
  request bodies,
- 500 for missing credentials and all provider failures.

Usage
-----
CLI (installed entry point)::

    photostudio

Direct invocation::

    python -m photostudio.api.main
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager

from fastapi import APIRouter, Depends, FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, JSONResponse
from fastapi.staticfiles import StaticFiles

from photostudio import __version__
from photostudio.api.models import ErrorResponse, GenerationRequest, GenerationResponse
from photostudio.core.config import StudioConfig, config
from photostudio.core.data_uri import DataURIError, DecodedImage, is_data_uri, parse_data_uri
from photostudio.core.prompts import build_instruction
from photostudio.core.provider import GenerationProvider, create_provider
from photostudio.core.results import (
    ErrorKind,
    ErrorResult,
    GenerationResult,
    ImageResult,
    TextResult,
    classify_provider_error,
    parse_generation_response,
)
from photostudio.core.templates import TemplateNotFoundError, list_templates, load_template

logger = logging.getLogger(__name__)

MISSING_CREDENTIALS_MESSAGE = "The GEMINI_API_KEY environment variable is not set."
MISSING_INPUTS_MESSAGE = "Image and template are required."
INVALID_IMAGE_MESSAGE = "Image must be a base64 data URI."
INVALID_TEMPLATE_MESSAGE = "Template must be a base64 data URI or the name of an available template."
INVALID_BODY_MESSAGE = "Request body must be a JSON object with image, template and prompt."


class GatewayError(Exception):
    """An error answered with ``{"error": message}`` and *status_code*."""

    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.message = message


router = APIRouter()


# ---------------------------------------------------------------------------
# Input decoding helpers.
# ---------------------------------------------------------------------------


def _decode_image(value: str) -> DecodedImage:
    """Decode the selfie, which must always be a data URI."""
    try:
        return parse_data_uri(value)
    except DataURIError as e:
        raise GatewayError(400, INVALID_IMAGE_MESSAGE) from e


def _decode_template(value: str, cfg: StudioConfig) -> DecodedImage:
    """Decode the template from a data URI or a catalogue reference."""
    try:
        if is_data_uri(value):
            return parse_data_uri(value)
        return load_template(cfg.template_images_dir, value)
    except (DataURIError, TemplateNotFoundError) as e:
        raise GatewayError(400, INVALID_TEMPLATE_MESSAGE) from e


def require_provider(request: Request) -> GenerationProvider:
    """Return the configured provider or fail with the credentials error.

    Runs as a route dependency, so FastAPI resolves it before validating the
    request body.  A request of any shape is answered with 500 when no key is
    set.  Bodies that are not valid JSON at all are still rejected with 400,
    because FastAPI parses the body before dependencies run.
    """
    cfg: StudioConfig = request.app.state.config
    provider: GenerationProvider | None = request.app.state.provider
    if not cfg.credentials_configured or provider is None:
        logger.error("Generation requested but GEMINI_API_KEY is not set.")
        raise GatewayError(500, MISSING_CREDENTIALS_MESSAGE)
    return provider


def _run_provider(
    provider: GenerationProvider,
    instruction: str,
    image: DecodedImage,
    template: DecodedImage,
) -> GenerationResult:
    """Call the provider once and reduce the outcome to a tagged result.

    Provider exceptions and unparseable responses are logged here and turned
    into :class:`ErrorResult` values; nothing propagates to the caller.
    """
    try:
        response = provider.generate(instruction, image, template)
    except Exception as e:
        result = classify_provider_error(e)
        logger.error(f"Provider error ({result.kind.value}): {e}", exc_info=True)
        return result

    try:
        return parse_generation_response(response)
    except Exception as e:
        logger.error(f"Failed to parse provider response: {e}", exc_info=True)
        return ErrorResult.of(ErrorKind.PROVIDER_ERROR, str(e))


# ---------------------------------------------------------------------------
# Routes.
# ---------------------------------------------------------------------------


@router.get("/", response_class=HTMLResponse)
async def index(request: Request) -> HTMLResponse:
    """Serve the main application HTML page.

    Raises:
        HTTPException: 404 if ``index.html`` is not found.
    """
    index_path = request.app.state.config.html_dir / "index.html"
    if index_path.exists():
        return HTMLResponse(content=index_path.read_text(encoding="utf-8"))
    raise HTTPException(status_code=404, detail="index.html not found")


@router.get("/api/config")
async def get_config(request: Request) -> dict:
    """Return frontend-facing configuration.

    Returns:
        Dictionary with ``version``, ``model`` and ``credentials_configured``.
        The API key itself is never exposed.
    """
    cfg: StudioConfig = request.app.state.config
    return {
        "version": __version__,
        "model": cfg.gemini_model,
        "credentials_configured": cfg.credentials_configured,
    }


@router.get("/api/templates")
async def get_templates(request: Request) -> dict:
    """Return the template image catalogue.

    Returns:
        Dictionary with a ``templates`` list; each entry has ``filename``,
        ``url``, ``width`` and ``height``.
    """
    cfg: StudioConfig = request.app.state.config
    return {"templates": [t.to_dict() for t in list_templates(cfg.template_images_dir)]}


@router.post(
    "/api/predictions",
    status_code=201,
    response_model=GenerationResponse,
    response_model_exclude_none=True,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
def create_prediction(
    req: GenerationRequest,
    request: Request,
    provider: GenerationProvider = Depends(require_provider),
) -> GenerationResponse:
    """Face-swap the selfie onto the template.

    Declared as a sync handler so the blocking provider round trip runs in
    the threadpool.

    Steps:

    1. Fail with 500 if no API key is configured (:func:`require_provider`,
       resolved before the body is validated, so a mistyped body gets the
       credentials error too).
    2. Fail with 400 if ``image`` or ``template`` is missing.
    3. Decode both images (400 on failure).
    4. Build the instruction and call the provider once.
    5. Map the tagged result to 201 or 500.

    Args:
        req: Validated :class:`GenerationRequest` payload.
        request: The incoming request (gives access to ``app.state``).
        provider: The configured provider.

    Returns:
        :class:`GenerationResponse` with the image data URI, or the model's
        text plus an advisory ``note``.

    Raises:
        GatewayError: Rendered as ``{"error": ...}`` by the app's handler.
    """
    cfg: StudioConfig = request.app.state.config

    # --- Validation ---------------------------------------------------------
    if not (req.image and req.image.strip()) or not (req.template and req.template.strip()):
        raise GatewayError(400, MISSING_INPUTS_MESSAGE)

    image = _decode_image(req.image.strip())
    template = _decode_template(req.template.strip(), cfg)

    # --- Generation ---------------------------------------------------------
    instruction = build_instruction(req.prompt)
    logger.info(f"Generating face swap (custom prompt: {bool((req.prompt or '').strip())})")
    result = _run_provider(provider, instruction, image, template)

    if isinstance(result, ImageResult):
        logger.info(f"Provider returned an image ({result.mime_type}, {len(result.data)} bytes)")
        return GenerationResponse(output=result.to_data_uri())

    if isinstance(result, TextResult):
        logger.warning("Provider returned text only; relaying it with a note.")
        return GenerationResponse(output=result.text, note=result.note)

    logger.error(f"Generation failed ({result.kind.value}): {result.detail}")
    raise GatewayError(500, result.message)


# ---------------------------------------------------------------------------
# Exception handlers.
# ---------------------------------------------------------------------------


async def _gateway_error_handler(request: Request, exc: GatewayError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


async def _request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    logger.warning(f"Rejected malformed request to {request.url.path}: {exc.errors()}")
    return JSONResponse(status_code=400, content={"error": INVALID_BODY_MESSAGE})


# ---------------------------------------------------------------------------
# Application factory.
# ---------------------------------------------------------------------------


def create_app(
    cfg: StudioConfig | None = None,
    provider: GenerationProvider | None = None,
    *,
    provider_factory: Callable[[StudioConfig], GenerationProvider | None] = create_provider,
) -> FastAPI:
    """Build the FastAPI application.

    Args:
        cfg: Configuration to use.  Defaults to the global ``config``.
        provider: Ready-made provider.  When ``None``, *provider_factory* is
            called with *cfg* at startup.
        provider_factory: Builds the provider during the lifespan startup.

    Returns:
        The configured :class:`FastAPI` instance.
    """
    cfg = cfg or config

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        # --- Startup -------------------------------------------------------
        app.state.provider = provider if provider is not None else provider_factory(cfg)
        logger.info(f"Template directory: {cfg.template_images_dir}")

        yield  # Application runs here.

        # --- Shutdown ------------------------------------------------------
        app.state.provider = None

    app = FastAPI(
        title="AI Photo Studio",
        description="Upload a selfie, pick a template, and let Gemini swap you in.",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.config = cfg
    app.state.provider = provider

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(GatewayError, _gateway_error_handler)
    app.add_exception_handler(RequestValidationError, _request_validation_handler)
    app.include_router(router)

    app.mount("/static", StaticFiles(directory=str(cfg.static_dir)), name="static")
    app.mount(
        "/templates",
        StaticFiles(directory=str(cfg.template_images_dir), check_dir=False),
        name="templates",
    )

    return app


app = create_app()


# ---------------------------------------------------------------------------
# CLI entry point.
# ---------------------------------------------------------------------------


def main() -> None:
    """Launch the uvicorn ASGI server.

    Reads host, port and log level from :data:`~photostudio.core.config.config`
    (``PHOTOSTUDIO_SERVER_HOST``, ``PHOTOSTUDIO_SERVER_PORT`` and
    ``PHOTOSTUDIO_LOG_LEVEL``).  Defaults to ``0.0.0.0:7860``.

    This function is registered as the ``photostudio`` console script in
    ``pyproject.toml``.
    """
    import uvicorn

    logging.basicConfig(
        level=getattr(logging, config.log_level),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    uvicorn.run(
        "photostudio.api.main:app",
        host=config.server_host,
        port=config.server_port,
        reload=False,
    )


if __name__ == "__main__":
    main()
