"""AI Photo Studio — FastAPI REST API layer.

Modules
-------
main
    FastAPI application factory, route handlers and the ``main()`` CLI entry
    point.
models
    Pydantic models for API request and response validation.
"""
