"""Web API for program-builder."""

from .app import create_app

__all__ = ["create_app"]
