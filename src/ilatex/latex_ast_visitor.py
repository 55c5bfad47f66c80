"""
Visitors for LaTeX AST traversal.

Traversal itself is driven by ASTNode.visit_with: visitors only receive each
node together with its depth.
"""

from abc import ABC, abstractmethod

from ilatex.latex_ast_node import ASTNode


class LatexASTVisitor(ABC):
    """Base class of all the visitors of a LaTeX AST."""

    @abstractmethod
    def visit(self, node: ASTNode, depth: int) -> None:
        """
        Visit a node.

        Args:
            node: The node to visit
            depth: Depth of the node in the traversal
        """


class LatexASTVisitorAdapter(LatexASTVisitor):
    """
    Visitor dispatching each node to a method named after the type of the node.

    For instance, a command node is passed to visit_Command and a curly braces
    parameter block to visit_CurlyBracesParameterBlock. Nodes without a matching
    method are passed to generic_visit, which does nothing unless overridden.
    """

    def visit(self, node: ASTNode, depth: int) -> None:
        """
        Visit a node and dispatch to the appropriate visit method.

        Args:
            node: The node to visit
            depth: Depth of the node in the traversal
        """
        method_name = f'visit_{node.type.value}'
        visitor = getattr(self, method_name, self.generic_visit)
        visitor(node, depth)

    def generic_visit(self, node: ASTNode, depth: int) -> None:
        """
        Default visit method for nodes without specific handlers.

        Args:
            node: The node to visit
            depth: Depth of the node in the traversal
        """
