"""A LaTeX source buffer together with the AST of its content."""

import logging

from ilatex.latex_ast import LatexAST
from ilatex.latex_exceptions import LatexParseError, UnreachableChangeRelationError
from ilatex.latex_grammar_config import LatexGrammarConfig
from ilatex.latex_source_buffer import LatexSourceBuffer
from ilatex.latex_source_change import SourceFileChange


class LatexSourceFile:
    """
    Keeps the AST of a source buffer in sync with its edits.

    Edits of the buffer are applied to the AST incrementally, in the order the
    buffer reports them. The whole buffer is only parsed again on request, for
    instance when the file is saved. If parsing fails, the last successfully
    parsed tree remains in use.
    """

    def __init__(self, buffer: LatexSourceBuffer, config: LatexGrammarConfig | None = None) -> None:
        """
        Initialize the source file and start tracking the edits of its buffer.

        No parsing is done until parse is called.

        Args:
            buffer: Buffer holding the source text
            config: Known commands and environments used when parsing
        """
        self._logger = logging.getLogger("LatexSourceFile")
        self._buffer = buffer
        self._ast = LatexAST(config)
        self._last_error: LatexParseError | None = None
        self._is_dirty = False
        self._needs_reparse = False

        self._buffer.add_change_listener(self._on_buffer_change)

    @property
    def buffer(self) -> LatexSourceBuffer:
        """Buffer holding the source text."""
        return self._buffer

    @property
    def ast(self) -> LatexAST:
        """AST of the last successfully parsed version of the source."""
        return self._ast

    @property
    def last_error(self) -> LatexParseError | None:
        """Error raised by the last parse, if it failed."""
        return self._last_error

    @property
    def is_dirty(self) -> bool:
        """True if the buffer has changed since it was last saved."""
        return self._is_dirty

    @property
    def needs_reparse(self) -> bool:
        """True if an edit could not be applied to the AST incrementally."""
        return self._needs_reparse

    def parse(self) -> bool:
        """
        Parse the whole buffer again.

        Returns:
            True if parsing succeeded, False if the previous AST was kept
        """
        try:
            self._ast.parse(self._buffer.get_text())

        except LatexParseError as e:
            self._logger.warning("Failed to parse LaTeX source: %s", e)
            self._last_error = e
            return False

        self._last_error = None
        self._needs_reparse = False
        return True

    def process_save(self) -> bool:
        """
        Handle a save of the buffer: mark it clean and parse it again.

        Returns:
            True if parsing succeeded, False if the previous AST was kept
        """
        self._is_dirty = False
        return self.parse()

    def close(self) -> None:
        """Stop tracking the edits of the buffer."""
        self._buffer.remove_change_listener(self._on_buffer_change)

    def _on_buffer_change(self, change: SourceFileChange) -> None:
        self._is_dirty = True

        if not self._ast.has_root:
            return

        try:
            self._ast.process_source_file_change(change)

        except UnreachableChangeRelationError as e:
            self._logger.error("Could not apply change %s to the AST: %s", change, e)
            self._needs_reparse = True
