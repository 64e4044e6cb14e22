"""Database layer for program-builder."""

from .engine import get_data_dir, get_db_path, init_db, seed_templates
from .repositories import ProgramRepository, TemplateRepository

__all__ = [
    "get_data_dir",
    "get_db_path",
    "init_db",
    "ProgramRepository",
    "seed_templates",
    "TemplateRepository",
]
