"""Katika portfolio backend - FastAPI REST API layer.

Modules
-------
main
    Application factory, route handlers, error handlers and the ``main()``
    CLI entry point.
models
    Pydantic request models.
"""
