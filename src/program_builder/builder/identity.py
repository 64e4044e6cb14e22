"""Stable node identifiers, independent of array position."""

from enum import Enum
from uuid import uuid4


class NodeKind(str, Enum):
    """Node kinds of the program tree, from the root down."""

    WORKOUT = "workout"
    EXERCISE = "exercise"
    SET = "set"

    @property
    def parent(self) -> "NodeKind | None":
        kinds = list(NodeKind)
        index = kinds.index(self)
        return kinds[index - 1] if index else None

    @property
    def child(self) -> "NodeKind | None":
        kinds = list(NodeKind)
        index = kinds.index(self)
        return kinds[index + 1] if index + 1 < len(kinds) else None

    @classmethod
    def at_depth(cls, depth: int) -> "NodeKind":
        return list(cls)[depth - 1]


def new_node_id() -> str:
    """Generate a fresh node id."""
    return str(uuid4())


class IdRegistry:
    """Tracks issued ids per node kind.

    Ids stay reserved after their node is deleted, so a store never hands the
    same id to two different nodes during its lifetime.
    """

    def __init__(self):
        self._live: dict[NodeKind, set[str]] = {kind: set() for kind in NodeKind}
        self._retired: dict[NodeKind, set[str]] = {kind: set() for kind in NodeKind}

    def is_available(self, kind: NodeKind, node_id: str) -> bool:
        """Whether ``node_id`` was never issued for ``kind``."""
        return node_id not in self._live[kind] and node_id not in self._retired[kind]

    def issue(self, kind: NodeKind) -> str:
        """Reserve and return a fresh id."""
        node_id = new_node_id()
        while not self.is_available(kind, node_id):
            node_id = new_node_id()
        self._live[kind].add(node_id)
        return node_id

    def claim(self, kind: NodeKind, node_id: str) -> None:
        """Reserve an externally supplied id."""
        if not self.is_available(kind, node_id):
            raise ValueError(f"{kind.value} id {node_id!r} is already in use")
        self._live[kind].add(node_id)

    def retire(self, kind: NodeKind, node_id: str) -> None:
        self._live[kind].discard(node_id)
        self._retired[kind].add(node_id)

    def clear(self) -> None:
        """Forget all ids. Used when a new tree is loaded."""
        for kind in NodeKind:
            self._live[kind] = set()
            self._retired[kind] = set()
