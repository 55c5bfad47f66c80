"""Visitor collecting the nodes of a LaTeX AST."""

from typing import List

from ilatex.latex_ast_node import ASTNode
from ilatex.latex_ast_visitor import LatexASTVisitor


class LatexASTNodeCollector(LatexASTVisitor):
    """Visitor that collects every visited node, in traversal order."""

    def __init__(self) -> None:
        self._nodes: List[ASTNode] = []

    @property
    def nodes(self) -> List[ASTNode]:
        """The nodes visited so far."""
        return self._nodes

    def visit(self, node: ASTNode, depth: int) -> None:
        self._nodes.append(node)
