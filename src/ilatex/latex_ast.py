"""AST of a LaTeX document, kept in sync with the edits of its source."""

import logging
import sys
from typing import List

from ilatex.latex_ast_node import ASTNode
from ilatex.latex_ast_node_collector import LatexASTNodeCollector
from ilatex.latex_ast_node_id_generator import ASTNodeIdGenerator
from ilatex.latex_ast_visitor import LatexASTVisitor
from ilatex.latex_exceptions import NoASTRootError
from ilatex.latex_grammar_config import LatexGrammarConfig
from ilatex.latex_parser import LatexParser
from ilatex.latex_source_change import SourceFileChange
from ilatex.latex_source_position import SourceFilePosition


class LatexAST:
    """
    AST of a LaTeX document.

    The tree is built by parse and then only updated incrementally: every change
    made to the source is passed to every node so that node ranges keep matching
    the text. A new tree is only built when parse is called again.
    """

    def __init__(self, config: LatexGrammarConfig | None = None) -> None:
        """
        Initialize an AST without any root.

        Args:
            config: Known commands and environments used when parsing
        """
        self._config = config
        self._root: ASTNode | None = None
        self._nodes_cache: List[ASTNode] | None = None
        self._logger = logging.getLogger("LatexAST")

    @property
    def has_root(self) -> bool:
        """True once a document has been successfully parsed."""
        return self._root is not None

    @property
    def root(self) -> ASTNode:
        """
        The root node of the AST.

        Raises:
            NoASTRootError: If no document has been successfully parsed yet
        """
        if self._root is None:
            raise NoASTRootError("The AST has no root node")

        return self._root

    @property
    def nodes(self) -> List[ASTNode]:
        """
        All the nodes of the AST, in traversal order.

        Raises:
            NoASTRootError: If no document has been successfully parsed yet
        """
        if self._nodes_cache is None:
            collector = LatexASTNodeCollector()
            self.root.visit_with(collector)
            self._nodes_cache = collector.nodes

        return self._nodes_cache

    def parse(self, text: str, config: LatexGrammarConfig | None = None) -> ASTNode:
        """
        Build a brand new tree from a complete document.

        If parsing fails, the current tree is left untouched.

        Args:
            text: The source text
            config: Known commands and environments (overrides the one given at creation)

        Returns:
            The new root node

        Raises:
            LatexParseError: If the text does not match the grammar
        """
        parser = LatexParser(config if config is not None else self._config, ASTNodeIdGenerator())
        root = parser.parse(text)

        self._root = root
        self._nodes_cache = None
        self._logger.debug("Parsed a new AST with %d nodes", len(self.nodes))
        return root

    def process_source_file_change(self, change: SourceFileChange) -> None:
        """
        Update every node of the AST after a change in the source.

        Args:
            change: The change made to the source

        Raises:
            UnreachableChangeRelationError: If the change cannot be related to a node
        """
        for node in self.nodes:
            node.process_source_file_edit(change)

    def visit_with(self, visitor: LatexASTVisitor, max_depth: int = sys.maxsize) -> None:
        """
        Visit the nodes of the AST in pre-order.

        Args:
            visitor: Visitor called on every node
            max_depth: Maximum depth of the visited nodes
        """
        self.root.visit_with(visitor, 0, max_depth)

    def node_at(self, position: SourceFilePosition) -> ASTNode | None:
        """
        Get the deepest node whose range contains a position.

        A position located where a node ends belongs to the node that starts
        there, if any.

        Args:
            position: The position to look for

        Returns:
            The deepest node containing the position, or None if it is outside the document
        """
        node = self.root
        if not node.range.contains_position(position):
            return None

        while True:
            next_node = None
            for child in node.children():
                if child.range.from_.is_before_or_equal(position) and position.is_before(child.range.to):
                    next_node = child
                    break

            if next_node is None:
                return node

            node = next_node

    def first_node_after(self, position: SourceFilePosition) -> ASTNode | None:
        """
        Get the first node, in source order, that starts at or after a position.

        Args:
            position: The position to start from

        Returns:
            The first such node, or None if there is none
        """
        for node in self.nodes:
            if node.range.from_.is_after_or_equal(position):
                return node

        return None
