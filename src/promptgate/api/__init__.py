"""PromptGate — FastAPI REST API layer.

This package contains the FastAPI application, Pydantic response models, the
prompt templates, input validation, and the prefix-scoped CORS middleware.

Modules
-------
main
    FastAPI application factory, route handlers and the ``main()`` CLI
    entry point.
models
    Pydantic models for API responses.
prompt_builder
    Fixed prompt templates and ``{{prompt}}`` substitution.
validation
    Prompt validation and image dimension parsing/clamping.
cors
    Cross-origin policy applied under the ``/ai`` prefix.
"""
