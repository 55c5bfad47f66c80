"""Identifier source for the nodes created by a parse."""


class ASTNodeIdGenerator:
    """Hands out increasing node identifiers, starting from a given value."""

    def __init__(self, first_id: int = 0) -> None:
        self._next_id = first_id

    @property
    def next_id(self) -> int:
        """Identifier that the next call to new_id will return."""
        return self._next_id

    def new_id(self) -> int:
        """Get a fresh identifier."""
        node_id = self._next_id
        self._next_id += 1
        return node_id
