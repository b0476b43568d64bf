"""Web application package for langbly-sync."""

from flask import Flask

from langbly_sync.config import initialize_app


def create_app() -> Flask:
    """Application factory for the HTTP interface."""
    initialize_app()

    from .app import build_app  # Import here to avoid circular imports

    return build_app()


__all__ = ["create_app"]
