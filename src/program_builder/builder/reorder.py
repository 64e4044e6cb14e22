"""Drag-and-drop reordering of the program tree."""

import logging
from dataclasses import dataclass
from enum import Enum

from .errors import TypeMismatchError
from .identity import NodeKind
from .store import ROOT_CONTAINER_ID, NodePath, OrderedCollectionStore

logger = logging.getLogger(__name__)


class ReorderOutcome(str, Enum):
    """What a drag-end gesture did to the tree."""

    NOOP = "noop"
    REORDERED = "reordered"  # same sibling group, new index
    MOVED = "moved"  # new parent
    REJECTED = "rejected"  # incompatible destination, tree unchanged


@dataclass(frozen=True)
class DragEndEvent:
    """A finished drag gesture.

    Container ids name the sibling group an item is shown in: the program
    root container for workouts, the workout id for its exercises, and the
    exercise id for its sets. ``target_id`` is the item dropped onto, the
    destination container itself, or None when nothing was under the pointer.
    """

    dragged_id: str
    dragged_container_id: str
    target_id: str | None
    target_container_id: str | None = None

    @classmethod
    def from_dict(cls, data: dict) -> "DragEndEvent":
        """Create from dictionary."""
        return cls(
            dragged_id=data["draggedId"],
            dragged_container_id=data["draggedContainerId"],
            target_id=data.get("targetId"),
            target_container_id=data.get("targetContainerId") or data["draggedContainerId"],
        )


@dataclass(frozen=True)
class ReorderResult:
    """Result of applying a drag-end event."""

    outcome: ReorderOutcome
    kind: NodeKind | None = None
    path: NodePath | None = None  # new path of the dragged node

    @property
    def changed(self) -> bool:
        return self.outcome in (ReorderOutcome.REORDERED, ReorderOutcome.MOVED)


_NOOP = ReorderResult(ReorderOutcome.NOOP)


class ReorderEngine:
    """Translates drag-end events into store mutations."""

    def __init__(self, store: OrderedCollectionStore):
        self.store = store

    def apply(self, event: DragEndEvent) -> ReorderResult:
        """Apply a drag-end event.

        Dropping an item onto itself, or with nothing resolvable under the
        pointer, leaves the store untouched.
        """
        if event.target_id is None or event.target_id == event.dragged_id:
            return _NOOP

        source_path = self._locate(event.dragged_id, event.dragged_container_id)
        if source_path is None:
            logger.info("Drop ignored: %s is not in container %s", event.dragged_id, event.dragged_container_id)
            return _NOOP
        kind = NodeKind.at_depth(len(source_path))
        source_parent = source_path[:-1]

        target_container = event.target_container_id or event.dragged_container_id
        target_parent = self.store.resolve_container(target_container, kind)
        if target_parent is None:
            logger.info("Drop ignored: unknown container in %s", event)
            return _NOOP

        if source_parent == target_parent:
            return self._reorder(kind, source_path, event.target_id)
        return self._transfer(kind, source_path, target_parent, target_container, event.target_id)

    def _reorder(self, kind: NodeKind, source_path: NodePath, target_id: str) -> ReorderResult:
        parent = source_path[:-1]
        siblings = self.store.child_ids(parent)
        if target_id not in siblings:
            return _NOOP
        old_index = siblings.index(source_path[-1])
        new_index = siblings.index(target_id)
        # remove at old_index, insert at new_index: same splice both directions
        path = self.store.move(source_path, parent, new_index)
        logger.debug("Reordered %s %s: %d -> %d", kind.value, source_path[-1], old_index, new_index)
        return ReorderResult(ReorderOutcome.REORDERED, kind, path)

    def _transfer(
        self,
        kind: NodeKind,
        source_path: NodePath,
        target_parent: NodePath,
        target_container: str,
        target_id: str,
    ) -> ReorderResult:
        siblings = self.store.child_ids(target_parent)
        if target_id == target_container:
            index = len(siblings)
        elif target_id in siblings:
            index = siblings.index(target_id)
        else:
            return _NOOP

        try:
            path = self.store.move(source_path, target_parent, index)
        except TypeMismatchError as e:
            logger.warning("Drop rejected: %s", e)
            return ReorderResult(ReorderOutcome.REJECTED, kind)
        logger.debug(
            "Moved %s %s from %s to %s at index %d",
            kind.value,
            source_path[-1],
            source_path[:-1],
            target_parent,
            index,
        )
        return ReorderResult(ReorderOutcome.MOVED, kind, path)

    def _locate(self, node_id: str, container_id: str) -> NodePath | None:
        """Path of the node ``node_id`` whose parent is shown as ``container_id``."""
        for kind in NodeKind:
            path = self.store.path_of(kind, node_id)
            if path is None:
                continue
            parent_id = path[-2] if len(path) > 1 else ROOT_CONTAINER_ID
            if parent_id == container_id:
                return path
        return None
