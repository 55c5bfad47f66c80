"""Visitor searching a LaTeX AST for nodes satisfying a predicate."""

import sys
from typing import Callable, List

from ilatex.latex_ast_node import ASTNode
from ilatex.latex_ast_visitor import LatexASTVisitor


class LatexASTSearcher(LatexASTVisitor):
    """
    Visitor that collects the nodes for which a test returns True.

    Matches are kept in traversal order. Once the maximum number of matches is
    reached, the remaining nodes are ignored.
    """

    def __init__(
        self,
        test: Callable[[ASTNode, int], bool],
        max_nb_matches: int = sys.maxsize
    ) -> None:
        """
        Initialize the searcher.

        Args:
            test: Predicate called with each node and its depth
            max_nb_matches: Maximum number of matches to collect
        """
        self._test = test
        self._max_nb_matches = max_nb_matches
        self._matches: List[ASTNode] = []

    @property
    def match(self) -> ASTNode | None:
        """The first match, if any."""
        return self._matches[0] if self._matches else None

    @property
    def matches(self) -> List[ASTNode]:
        """All the matches found so far."""
        return self._matches

    @property
    def nb_matches(self) -> int:
        """Number of matches found so far."""
        return len(self._matches)

    def reset(self) -> None:
        """Forget all the matches found so far."""
        self._matches = []

    def visit(self, node: ASTNode, depth: int) -> None:
        if len(self._matches) >= self._max_nb_matches:
            return

        if self._test(node, depth):
            self._matches.append(node)
