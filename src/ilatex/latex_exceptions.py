"""Custom exceptions for LaTeX AST operations."""

from typing import Any, List

from ilatex.latex_parser_index import ParserIndex


class LatexASTError(Exception):
    """Base exception for LaTeX AST operations."""

    def __init__(self, message: str, error_details: dict[str, Any] | None = None):
        """
        Initialize the exception.

        Args:
            message: Error message
            error_details: Optional dictionary with detailed error information
        """
        super().__init__(message)
        self.error_details = error_details


class LatexParseError(LatexASTError):
    """
    Raised when a document does not match the grammar.

    The position is the furthest point the parser reached, and the expectations
    are the alternatives that would have allowed it to go further.
    """

    def __init__(self, position: ParserIndex, expected: List[str]):
        """
        Initialize the exception.

        Args:
            position: Furthest position reached by the parser (1-based line and column)
            expected: Descriptions of what was expected at that position
        """
        self.position = position
        self.expected = sorted(set(expected))

        expected_text = ", ".join(self.expected) if self.expected else "nothing"
        super().__init__(
            f"Parse error at line {position.line}, column {position.column}: expected {expected_text}",
            {
                'offset': position.offset,
                'line': position.line,
                'column': position.column,
                'expected': self.expected
            }
        )


class UnspecifiedOffsetError(LatexASTError):
    """Raised when the offset of a position created without one is requested."""


class UnreachableChangeRelationError(LatexASTError):
    """Raised when a source file change cannot be classified against a range."""


class NoASTRootError(LatexASTError):
    """Raised when the root of an AST that has not been parsed yet is requested."""


class LatexGrammarConfigError(LatexASTError):
    """Raised when a grammar configuration is invalid."""
