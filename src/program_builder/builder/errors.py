"""Errors raised by the program tree editor."""


class BuilderError(Exception):
    """Base class for program tree errors."""


class InvalidPathError(BuilderError):
    """An operation addressed a parent or node that does not resolve.

    This is a programming error: callers only build paths from ids they got
    from the store.
    """

    def __init__(self, path: tuple, message: str | None = None):
        self.path = tuple(path)
        super().__init__(message or f"Path does not resolve: {'/'.join(self.path) or '<root>'}")


class NotFoundError(BuilderError):
    """Remove/update/select on a node that is not (or no longer) in the tree."""

    def __init__(self, kind: str, node_id: str):
        self.kind = kind
        self.node_id = node_id
        super().__init__(f"{kind} {node_id!r} not found")


class TypeMismatchError(BuilderError):
    """A node was placed under a parent of an incompatible kind."""

    def __init__(self, kind: str, parent_kind: str | None):
        self.kind = kind
        self.parent_kind = parent_kind
        parent = parent_kind or "program"
        super().__init__(f"A {kind} cannot be placed under a {parent}")


class InvalidPatchError(BuilderError, ValueError):
    """An update patch names a field the node does not have."""

    def __init__(self, kind: str, fields: list[str]):
        self.kind = kind
        self.fields = fields
        super().__init__(f"Unknown {kind} field(s): {', '.join(sorted(fields))}")
