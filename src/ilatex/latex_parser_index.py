"""Native position representation used by the LaTeX parser."""

from bisect import bisect_right
from dataclasses import dataclass
from typing import List


@dataclass(frozen=True)
class ParserIndex:
    """
    A position in the parser's input.

    The offset is 0-based, while the line and column are 1-based.
    """
    offset: int
    line: int
    column: int


class ParserIndexer:
    """Converts character offsets of a text into parser indices."""

    def __init__(self, text: str) -> None:
        """
        Initialize the indexer by recording where each line starts.

        Args:
            text: The text whose offsets will be converted
        """
        self._line_starts: List[int] = [0]
        for i, char in enumerate(text):
            if char == '\n':
                self._line_starts.append(i + 1)

    def index_at(self, offset: int) -> ParserIndex:
        """
        Get the parser index for a character offset.

        Args:
            offset: 0-based character offset

        Returns:
            The matching parser index
        """
        line = bisect_right(self._line_starts, offset) - 1
        return ParserIndex(offset, line + 1, offset - self._line_starts[line] + 1)

    @property
    def line_count(self) -> int:
        """Number of lines in the text."""
        return len(self._line_starts)

    def offset_at(self, line: int, column: int) -> int:
        """
        Get the character offset of a 1-based line and column.

        Args:
            line: 1-based line number
            column: 1-based column number

        Returns:
            The matching 0-based character offset

        Raises:
            IndexError: If the line does not exist
        """
        if line < 1 or line > len(self._line_starts):
            raise IndexError(f"Line {line} is out of range")

        return self._line_starts[line - 1] + column - 1
