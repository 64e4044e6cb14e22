"""Ordered collection store for the program tree.

Nodes live in flat per-kind maps keyed by id. Structure is kept in explicit
ordered child-id lists, so nodes never reference each other directly and the
nested ``Program`` is only materialised on demand.

A node is addressed by the path of ids leading to it::

    ()                                  the program itself
    (workout_id,)                       an allocated workout
    (workout_id, exercise_id)           an allocated exercise
    (workout_id, exercise_id, set_id)   a set
"""

import logging
from dataclasses import fields, replace
from typing import Any, Union

from ..models.program import (
    AllocatedExercise,
    AllocatedWorkout,
    ExerciseSet,
    Program,
    ProgramStatus,
    SetType,
)
from ..models.templates import ExerciseTemplate, WorkoutTemplate
from .errors import InvalidPatchError, InvalidPathError, NotFoundError, TypeMismatchError
from .identity import IdRegistry, NodeKind

logger = logging.getLogger(__name__)

Node = Union[AllocatedWorkout, AllocatedExercise, ExerciseSet]
NodePath = tuple[str, ...]
NodeKey = tuple[NodeKind | None, str]

ROOT: NodePath = ()
ROOT_CONTAINER_ID = "program"

_ROOT_KEY: NodeKey = (None, "")

CHILD_FIELDS = {
    None: "workouts",
    NodeKind.WORKOUT: "exercises",
    NodeKind.EXERCISE: "sets",
}

NODE_TYPES = {
    NodeKind.WORKOUT: AllocatedWorkout,
    NodeKind.EXERCISE: AllocatedExercise,
    NodeKind.SET: ExerciseSet,
}

# camelCase form keys accepted in update patches
_PATCH_ALIASES = {
    "breakTime": "break_time",
    "durationDays": "duration_days",
    "rotationDays": "rotation_days",
    "exerciseRef": "exercise_ref",
    "exercise": "exercise_ref",
    "workoutRef": "workout_ref",
    "workout": "workout_ref",
}

_PROTECTED_FIELDS = {"id", "order", "created_at"}


def kind_of(node: Any) -> NodeKind:
    """Return the node kind of a model instance."""
    for kind, node_type in NODE_TYPES.items():
        if isinstance(node, node_type):
            return kind
    raise TypeError(f"Not a program tree node: {type(node).__name__}")


class OrderedCollectionStore:
    """Holds the workout/exercise/set tree and keeps sibling order contiguous.

    Every public mutation validates its inputs completely before touching
    any state, so a failed call leaves the tree exactly as it was.
    """

    def __init__(self, program: Program | None = None):
        self._ids = IdRegistry()
        self._nodes: dict[NodeKind, dict[str, Node]] = {kind: {} for kind in NodeKind}
        self._children: dict[NodeKey, list[str]] = {_ROOT_KEY: []}
        self._parents: dict[NodeKey, NodeKey] = {}
        self._program = Program()
        if program is not None:
            self.load(program)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get(self, path: NodePath) -> Node | Program:
        """Return a detached copy of the node (with its subtree) at ``path``."""
        key = self._resolve(path)
        if key is None:
            raise InvalidPathError(path)
        if key == _ROOT_KEY:
            return self.snapshot()
        return self._materialize(*key)

    def exists(self, path: NodePath) -> bool:
        return self._resolve(path) is not None

    def contains(self, kind: NodeKind, node_id: str | None) -> bool:
        return node_id is not None and node_id in self._nodes[kind]

    def count(self, kind: NodeKind) -> int:
        return len(self._nodes[kind])

    def child_ids(self, parent_path: NodePath) -> list[str]:
        """Ids of the children of ``parent_path`` in order."""
        key = self._resolve(parent_path)
        if key is None or key[0] is NodeKind.SET:
            raise InvalidPathError(parent_path)
        return list(self._children[key])

    def first_child_id(self, parent_path: NodePath) -> str | None:
        children = self.child_ids(parent_path)
        return children[0] if children else None

    def index_of(self, path: NodePath) -> int:
        """Position of the node among its siblings (0-based)."""
        key = self._resolve(path)
        if key is None or key == _ROOT_KEY:
            raise InvalidPathError(path)
        return self._children[self._parents[key]].index(key[1])

    def path_of(self, kind: NodeKind, node_id: str) -> NodePath | None:
        """Path of a node found by kind and id, or None if it is not in the tree."""
        key: NodeKey = (kind, node_id)
        if node_id not in self._nodes[kind]:
            return None
        ids = []
        while key != _ROOT_KEY:
            ids.append(key[1])
            key = self._parents[key]
        return tuple(reversed(ids))

    def parent_id(self, kind: NodeKind, node_id: str) -> str | None:
        """Id of the node's parent (None for workouts or unknown nodes)."""
        parent = self._parents.get((kind, node_id))
        if parent is None or parent == _ROOT_KEY:
            return None
        return parent[1]

    def resolve_container(
        self, container_id: str | None, child_kind: NodeKind | None = None
    ) -> NodePath | None:
        """Map a drag container id to the path of the sibling group it shows.

        The program root uses ``ROOT_CONTAINER_ID``; workouts and exercises
        use their own ids. Ids are only unique per kind, so ``child_kind``
        (the kind of the node being dropped) picks the container kind that
        can hold it before any other kind is tried.
        """
        if container_id is None:
            return None
        if container_id == ROOT_CONTAINER_ID and child_kind in (None, NodeKind.WORKOUT):
            return ROOT
        kinds = [NodeKind.WORKOUT, NodeKind.EXERCISE]
        if child_kind is not None and child_kind.parent is not None:
            kinds.remove(child_kind.parent)
            kinds.insert(0, child_kind.parent)
        for kind in kinds:
            path = self.path_of(kind, container_id)
            if path is not None:
                return path
        if container_id == ROOT_CONTAINER_ID:
            return ROOT
        return None

    def snapshot(self) -> Program:
        """Materialise the whole tree as an independent ``Program``."""
        workouts = [
            self._materialize(NodeKind.WORKOUT, wid) for wid in self._children[_ROOT_KEY]
        ]
        return replace(self._program, workouts=workouts)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def load(self, program: Program) -> None:
        """Replace the tree with ``program``.

        Hydrated records may lack ids or carry duplicates; those nodes get
        fresh ids. Incoming ``order`` values decide the sibling order and are
        then renumbered.
        """
        self._ids.clear()
        self._nodes = {kind: {} for kind in NodeKind}
        self._children = {_ROOT_KEY: []}
        self._parents = {}
        self._program = replace(program, workouts=[])

        for workout in sorted(program.workouts, key=lambda w: w.order):
            self._attach(workout, NodeKind.WORKOUT, _ROOT_KEY, None, hydrate=True)
        self._renumber(_ROOT_KEY)
        logger.debug(
            "Loaded program %r: %d workouts, %d exercises, %d sets",
            program.name,
            self.count(NodeKind.WORKOUT),
            self.count(NodeKind.EXERCISE),
            self.count(NodeKind.SET),
        )

    def insert(self, parent_path: NodePath, item: Node, position: int | None = None) -> NodePath:
        """Insert ``item`` (and its subtree) under ``parent_path``.

        Args:
            parent_path: Path of the parent; ``ROOT`` for workouts
            item: Workout, exercise or set; missing ids are assigned
            position: 0-based index among the siblings, appends when None

        Returns:
            Path of the inserted node
        """
        parent_key = self._resolve(parent_path)
        if parent_key is None:
            raise InvalidPathError(parent_path)
        kind = kind_of(item)
        self._check_parent(kind, parent_key)
        self._check_ids(item, kind)

        node_id = self._attach(item, kind, parent_key, position, hydrate=False)
        self._renumber(parent_key)
        logger.debug("Inserted %s %s under %s", kind.value, node_id, parent_path or "<root>")
        return tuple(parent_path) + (node_id,)

    def remove(self, path: NodePath) -> Node:
        """Remove the node at ``path`` with its subtree.

        Returns:
            Detached copy of the removed node
        """
        if not path:
            raise InvalidPathError(path, "The program root cannot be removed")
        key = self._resolve(path)
        if key is None:
            raise NotFoundError(self._kind_for_path(path), path[-1])

        removed = self._materialize(*key)
        parent_key = self._parents[key]
        self._children[parent_key].remove(key[1])
        self._drop(key)
        self._renumber(parent_key)
        logger.debug("Removed %s %s", key[0].value, key[1])
        return removed

    def move(self, source_path: NodePath, target_parent_path: NodePath, target_index: int) -> NodePath:
        """Move a node to ``target_index`` under ``target_parent_path``.

        The index refers to the destination list after the node has been
        detached. The node keeps its id and its subtree.

        Returns:
            New path of the moved node
        """
        if not source_path:
            raise InvalidPathError(source_path, "The program root cannot be moved")
        key = self._resolve(source_path)
        if key is None:
            raise NotFoundError(self._kind_for_path(source_path), source_path[-1])
        target_key = self._resolve(target_parent_path)
        if target_key is None:
            raise InvalidPathError(target_parent_path)
        kind, node_id = key
        self._check_parent(kind, target_key)

        source_key = self._parents[key]
        self._children[source_key].remove(node_id)
        siblings = self._children[target_key]
        index = max(0, min(target_index, len(siblings)))
        siblings.insert(index, node_id)
        self._parents[key] = target_key

        self._renumber(source_key)
        if target_key != source_key:
            self._renumber(target_key)
        logger.debug(
            "Moved %s %s to index %d under %s",
            kind.value,
            node_id,
            index,
            target_parent_path or "<root>",
        )
        return tuple(target_parent_path) + (node_id,)

    def update(self, path: NodePath, patch: dict[str, Any]) -> Node | Program:
        """Shallow-merge ``patch`` into the node at ``path``.

        ``id``, ``order`` and child lists are never touched; such keys are
        ignored. Unknown fields raise ``InvalidPatchError``.

        Returns:
            Detached copy of the updated node
        """
        key = self._resolve(path)
        if key is None:
            if not path:
                raise InvalidPathError(path)
            raise NotFoundError(self._kind_for_path(path), path[-1])

        kind = key[0]
        current = self._program if kind is None else self._nodes[kind][key[1]]
        changes = self._prepare_patch(kind, current, patch)
        updated = replace(current, **changes)

        if kind is None:
            self._program = updated
            return self.snapshot()
        self._nodes[kind][key[1]] = updated
        logger.debug("Updated %s %s: %s", kind.value, key[1], sorted(changes))
        return self._materialize(*key)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _resolve(self, path: NodePath) -> NodeKey | None:
        """Walk ``path`` from the root; None when any hop does not resolve."""
        path = tuple(path)
        if len(path) > len(NodeKind):
            return None
        key = _ROOT_KEY
        for depth, node_id in enumerate(path, start=1):
            child: NodeKey = (NodeKind.at_depth(depth), node_id)
            if self._parents.get(child) != key:
                return None
            key = child
        return key

    def _kind_for_path(self, path: NodePath) -> str:
        if 0 < len(path) <= len(NodeKind):
            return NodeKind.at_depth(len(path)).value
        return "node"

    def _check_parent(self, kind: NodeKind, parent_key: NodeKey) -> None:
        if kind.parent is not parent_key[0]:
            parent_kind = parent_key[0].value if parent_key[0] else None
            raise TypeMismatchError(kind.value, parent_kind)

    def _check_ids(self, item: Node, kind: NodeKind) -> None:
        """Reject supplied ids that are live, retired, or repeated in ``item``."""
        seen: dict[NodeKind, set[str]] = {k: set() for k in NodeKind}
        stack = [(item, kind)]
        while stack:
            node, node_kind = stack.pop()
            if node.id:
                if node.id in seen[node_kind] or not self._ids.is_available(node_kind, node.id):
                    raise ValueError(f"{node_kind.value} id {node.id!r} is already in use")
                seen[node_kind].add(node.id)
            child_kind = node_kind.child
            if child_kind is not None:
                stack.extend((child, child_kind) for child in getattr(node, CHILD_FIELDS[node_kind]))

    def _attach(
        self,
        item: Node,
        kind: NodeKind,
        parent_key: NodeKey,
        position: int | None,
        hydrate: bool,
    ) -> str:
        node_id = item.id
        if not node_id or (hydrate and not self._ids.is_available(kind, node_id)):
            if hydrate and node_id:
                logger.info("Duplicate %s id %s in loaded program, assigning a new one", kind.value, node_id)
            node_id = self._ids.issue(kind)
        else:
            self._ids.claim(kind, node_id)

        child_kind = kind.child
        if child_kind is None:
            stored = replace(item, id=node_id)
            children = []
        else:
            child_field = CHILD_FIELDS[kind]
            stored = replace(item, id=node_id, **{child_field: []})
            children = getattr(item, child_field)

        key: NodeKey = (kind, node_id)
        self._nodes[kind][node_id] = stored
        self._parents[key] = parent_key
        siblings = self._children[parent_key]
        if position is None:
            siblings.append(node_id)
        else:
            siblings.insert(max(0, min(position, len(siblings))), node_id)

        if child_kind is not None:
            self._children[key] = []
            if hydrate:
                children = sorted(children, key=lambda c: c.order)
            for child in children:
                self._attach(child, child_kind, key, None, hydrate)
            self._renumber(key)
        return node_id

    def _drop(self, key: NodeKey) -> None:
        kind, node_id = key
        for child_id in self._children.pop(key, []):
            self._drop((kind.child, child_id))
        del self._nodes[kind][node_id]
        del self._parents[key]
        self._ids.retire(kind, node_id)

    def _renumber(self, parent_key: NodeKey) -> None:
        """Re-derive contiguous 1-based ``order`` for a sibling group."""
        kind = NodeKind.WORKOUT if parent_key == _ROOT_KEY else parent_key[0].child
        nodes = self._nodes[kind]
        for index, node_id in enumerate(self._children[parent_key], start=1):
            node = nodes[node_id]
            if node.order != index:
                nodes[node_id] = replace(node, order=index)

    def _materialize(self, kind: NodeKind, node_id: str) -> Node:
        node = self._nodes[kind][node_id]
        child_kind = kind.child
        if child_kind is None:
            return replace(node)
        children = [
            self._materialize(child_kind, child_id)
            for child_id in self._children[(kind, node_id)]
        ]
        return replace(node, **{CHILD_FIELDS[kind]: children})

    def _prepare_patch(self, kind: NodeKind | None, current: Any, patch: dict[str, Any]) -> dict:
        allowed = {f.name for f in fields(current)} - _PROTECTED_FIELDS - {CHILD_FIELDS[kind]}
        changes = {}
        unknown = []
        for raw_name, value in patch.items():
            name = _PATCH_ALIASES.get(raw_name, raw_name)
            if name in _PROTECTED_FIELDS or name == CHILD_FIELDS[kind]:
                logger.info("Ignoring protected field %r in %s patch", raw_name, kind.value if kind else "program")
                continue
            if name not in allowed:
                unknown.append(raw_name)
                continue
            changes[name] = _coerce(name, value)
        if unknown:
            raise InvalidPatchError(kind.value if kind else "program", unknown)
        return changes


def _coerce(name: str, value: Any) -> Any:
    """Turn form values into model values for the patched field."""
    if name == "exercise_ref" and isinstance(value, dict):
        return ExerciseTemplate.from_dict(value)
    if name == "workout_ref" and isinstance(value, dict):
        return WorkoutTemplate.from_dict(value)
    if name == "type" and value is not None:
        return SetType(value)
    if name == "status" and value is not None:
        return ProgramStatus(value)
    return value
