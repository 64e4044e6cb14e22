"""Data loading utilities."""

from .template_loader import load_templates, seed_templates_from_json

__all__ = ["load_templates", "seed_templates_from_json"]
