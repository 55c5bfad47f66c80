"""Text buffers holding the source of a LaTeX document."""

from abc import ABC, abstractmethod
import logging
from typing import Callable, List

from ilatex.latex_parser_index import ParserIndex, ParserIndexer
from ilatex.latex_source_change import SourceFileChange
from ilatex.latex_source_position import SourceFilePosition
from ilatex.latex_source_range import SourceFileRange


ChangeListener = Callable[[SourceFileChange], None]


class LatexSourceBuffer(ABC):
    """
    Abstract base class for the text buffers a LaTeX AST can be attached to.

    Every mutation of the buffer is reported to the change listeners, one
    SourceFileChange per mutation, in the order the mutations were made.
    """

    def __init__(self) -> None:
        self._change_listeners: List[ChangeListener] = []
        self._indexer: ParserIndexer | None = None

    @abstractmethod
    def get_text(self) -> str:
        """
        Get the whole text of the buffer.

        Returns:
            The current text
        """

    def _get_indexer(self) -> ParserIndexer:
        if self._indexer is None:
            self._indexer = ParserIndexer(self.get_text())

        return self._indexer

    def position_at(self, offset: int) -> SourceFilePosition:
        """
        Get the position of a character offset.

        Args:
            offset: 0-based character offset

        Returns:
            The position (with its offset)

        Raises:
            IndexError: If the offset is outside the text
        """
        if offset < 0 or offset > len(self.get_text()):
            raise IndexError(f"Offset {offset} is out of range")

        return SourceFilePosition.from_parser_index(self._get_indexer().index_at(offset))

    def offset_at(self, position: SourceFilePosition) -> int:
        """
        Get the character offset of a position, from its current line and column.

        Args:
            position: The position

        Returns:
            The 0-based character offset

        Raises:
            IndexError: If the line of the position does not exist
        """
        return self._get_indexer().offset_at(position.line + 1, position.column + 1)

    def get_text_in_range(self, text_range: SourceFileRange) -> str:
        """
        Get the text between the current bounds of a range.

        Args:
            text_range: The range

        Returns:
            The text of the range
        """
        return self.get_text()[self.offset_at(text_range.from_):self.offset_at(text_range.to)]

    def add_change_listener(self, listener: ChangeListener) -> None:
        """Register a callback invoked after each mutation of the buffer."""
        self._change_listeners.append(listener)

    def remove_change_listener(self, listener: ChangeListener) -> None:
        """
        Unregister a change callback.

        Raises:
            ValueError: If the callback was not registered
        """
        self._change_listeners.remove(listener)

    def _create_change(self, old_text: str, start_offset: int, end_offset: int, new_text: str) -> SourceFileChange:
        """
        Describe the replacement of a span of the text before its mutation.

        Args:
            old_text: Text of the buffer before the mutation
            start_offset: Start of the replaced span in the old text
            end_offset: End of the replaced span in the old text
            new_text: Text inserted in place of the span

        Returns:
            The change
        """
        indexer = ParserIndexer(old_text)
        start: ParserIndex = indexer.index_at(start_offset)
        end: ParserIndex = indexer.index_at(end_offset)
        return SourceFileChange(
            SourceFilePosition.from_parser_index(start),
            SourceFilePosition.from_parser_index(end),
            new_text,
            end_offset - start_offset
        )

    def _notify_change(self, change: SourceFileChange) -> None:
        # The text has changed, so line starts must be computed again
        self._indexer = None
        for listener in list(self._change_listeners):
            listener(change)


class StringLatexSourceBuffer(LatexSourceBuffer):
    """Source buffer holding its text in memory."""

    def __init__(self, text: str = "") -> None:
        """
        Initialize the buffer.

        Args:
            text: Initial text of the buffer
        """
        super().__init__()
        self._text = text
        self._logger = logging.getLogger("StringLatexSourceBuffer")

    def get_text(self) -> str:
        return self._text

    def set_text(self, text: str) -> SourceFileChange:
        """
        Replace the whole text of the buffer.

        Args:
            text: The new text

        Returns:
            The change that was made
        """
        return self._replace_offsets(0, len(self._text), text)

    def replace(self, text_range: SourceFileRange, text: str) -> SourceFileChange:
        """
        Replace the text of a range.

        Args:
            text_range: The range to replace
            text: The replacement text

        Returns:
            The change that was made

        Raises:
            IndexError: If the range is outside the text
            ValueError: If the range ends before it starts
        """
        start_offset = self.offset_at(text_range.from_)
        end_offset = self.offset_at(text_range.to)
        if end_offset < start_offset:
            raise ValueError(f"Range {text_range} ends before it starts")

        if end_offset > len(self._text):
            raise IndexError(f"Range {text_range} is out of range")

        return self._replace_offsets(start_offset, end_offset, text)

    def insert(self, position: SourceFilePosition, text: str) -> SourceFileChange:
        """
        Insert text at a position.

        Args:
            position: Where to insert the text
            text: The text to insert

        Returns:
            The change that was made
        """
        return self.replace(SourceFileRange(position, position), text)

    def delete(self, text_range: SourceFileRange) -> SourceFileChange:
        """
        Delete the text of a range.

        Args:
            text_range: The range to delete

        Returns:
            The change that was made
        """
        return self.replace(text_range, "")

    def _replace_offsets(self, start_offset: int, end_offset: int, text: str) -> SourceFileChange:
        change = self._create_change(self._text, start_offset, end_offset, text)
        self._text = self._text[:start_offset] + text + self._text[end_offset:]
        self._logger.debug("Applied change %s", change)
        self._notify_change(change)
        return change
