"""Hierarchical program tree editor."""

from .aggregate import format_duration, program_duration, total_duration, workout_duration
from .editor import EditorOptions, ProgramBuilder, SaveResult
from .errors import (
    BuilderError,
    InvalidPatchError,
    InvalidPathError,
    NotFoundError,
    TypeMismatchError,
)
from .identity import IdRegistry, NodeKind, new_node_id
from .reorder import DragEndEvent, ReorderEngine, ReorderOutcome, ReorderResult
from .selection import Selection, SelectionController
from .store import ROOT, ROOT_CONTAINER_ID, OrderedCollectionStore

__all__ = [
    "BuilderError",
    "DragEndEvent",
    "EditorOptions",
    "format_duration",
    "IdRegistry",
    "InvalidPatchError",
    "InvalidPathError",
    "new_node_id",
    "NodeKind",
    "NotFoundError",
    "OrderedCollectionStore",
    "program_duration",
    "ProgramBuilder",
    "ReorderEngine",
    "ReorderOutcome",
    "ReorderResult",
    "ROOT",
    "ROOT_CONTAINER_ID",
    "SaveResult",
    "Selection",
    "SelectionController",
    "total_duration",
    "TypeMismatchError",
    "workout_duration",
]
