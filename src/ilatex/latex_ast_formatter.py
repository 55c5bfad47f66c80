"""Visitor rendering a LaTeX AST as an indented tree, for debugging."""

from typing import List

from ilatex.latex_ast_node import ASTNode
from ilatex.latex_ast_visitor import LatexASTVisitorAdapter


class LatexASTFormatter(LatexASTVisitorAdapter):
    """Visitor that formats the AST structure, one node per line."""

    def __init__(self, indent: int = 2) -> None:
        """
        Initialize the formatter.

        Args:
            indent: Number of spaces per level of depth
        """
        super().__init__()
        self._indent = indent
        self._lines: List[str] = []

    @property
    def formatted_ast(self) -> str:
        """The formatted AST of all the nodes visited so far."""
        return "\n".join(self._lines)

    def reset(self) -> None:
        """Forget all the nodes visited so far."""
        self._lines = []

    def _add_line(self, text: str, depth: int) -> None:
        self._lines.append(" " * (self._indent * depth) + "| " + text)

    def generic_visit(self, node: ASTNode, depth: int) -> None:
        """
        Format any node as its type, followed by its name if it has one.

        Args:
            node: The node to visit
            depth: Depth of the node in the traversal
        """
        text = node.type.value
        if node.name:
            text += f" [{node.name}]"

        self._add_line(text, depth)

    def visit_Parameter(self, node: ASTNode, depth: int) -> None:  # pylint: disable=invalid-name
        """
        Format a parameter node with its value.

        Args:
            node: The parameter node to visit
            depth: Depth of the node in the traversal
        """
        self._add_line(f"{node.type.value} [{node.value}]", depth)

    def visit_ParameterAssignment(self, node: ASTNode, depth: int) -> None:  # pylint: disable=invalid-name
        """
        Format a "key = value" parameter node.

        Args:
            node: The assignment node to visit
            depth: Depth of the node in the traversal
        """
        self._add_line(f"{node.type.value} [{node.value.key.value} = {node.value.value.value}]", depth)
