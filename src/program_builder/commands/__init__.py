"""CLI commands for program-builder."""

from .build import build
from .export import export
from .init import init
from .programs import programs
from .serve import serve
from .templates import templates

__all__ = [
    "build",
    "export",
    "init",
    "programs",
    "serve",
    "templates",
]
