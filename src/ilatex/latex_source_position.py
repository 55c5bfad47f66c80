"""
Positions in a source file that can follow unsaved edits.

A position keeps the coordinates it was created with and a separate, mutable
shift. Reading the line, column or offset returns the initial value plus the
shift, so the incremental update code only ever has to touch the shift.
"""

from dataclasses import dataclass

from ilatex.latex_exceptions import UnspecifiedOffsetError
from ilatex.latex_parser_index import ParserIndex


@dataclass
class PositionShift:
    """Amount by which a position has moved since it was created."""
    lines: int = 0
    columns: int = 0
    offset: int = 0


@dataclass(frozen=True)
class RawSourceFilePosition:
    """Plain 0-based (line, column) pair exchanged with the host editor."""
    line: int
    column: int


@dataclass(frozen=True)
class RawSourceFileRange:
    """Plain pair of 0-based positions exchanged with the host editor."""
    from_: RawSourceFilePosition
    to: RawSourceFilePosition


class SourceFilePosition:
    """
    A position in a file with a line, a column, an optional offset and a shift.

    Line, column and offset are all 0-based. The offset may be left unspecified
    (None), in which case reading it raises an UnspecifiedOffsetError.
    """

    def __init__(self, line: int, column: int, offset: int | None = None) -> None:
        """
        Initialize a position.

        Args:
            line: 0-based line number
            column: 0-based column number
            offset: Optional 0-based character offset in the file
        """
        self._initial_line = line
        self._initial_column = column
        self._initial_offset = offset

        # Only the incremental update code may mutate the shift
        self.shift = PositionShift()

    @property
    def initial_line(self) -> int:
        """Line of the position when it was created."""
        return self._initial_line

    @property
    def initial_column(self) -> int:
        """Column of the position when it was created."""
        return self._initial_column

    @property
    def initial_offset(self) -> int | None:
        """Offset of the position when it was created, if any."""
        return self._initial_offset

    @property
    def line(self) -> int:
        """Zero-based line number (with the shift applied)."""
        return self._initial_line + self.shift.lines

    @property
    def column(self) -> int:
        """Zero-based column number (with the shift applied)."""
        return self._initial_column + self.shift.columns

    @property
    def offset(self) -> int:
        """
        File offset (with the shift applied).

        Raises:
            UnspecifiedOffsetError: If the position was created without an offset
        """
        if self._initial_offset is None:
            raise UnspecifiedOffsetError(f"Position {self} has no offset")

        return self._initial_offset + self.shift.offset

    @property
    def has_offset(self) -> bool:
        """True if the position was created with an offset."""
        return self._initial_offset is not None

    @property
    def raw(self) -> RawSourceFilePosition:
        """The current position as a plain (line, column) pair."""
        return RawSourceFilePosition(self.line, self.column)

    @property
    def as_parser_index(self) -> ParserIndex:
        """
        The current position in the parser's native (1-based) representation.

        Raises:
            UnspecifiedOffsetError: If the position was created without an offset
        """
        return ParserIndex(self.offset, self.line + 1, self.column + 1)

    def with_shift(self, line: int = 0, column: int = 0, offset: int = 0) -> 'SourceFilePosition':
        """
        Create a new, unshifted position moved by the given amounts.

        Args:
            line: Number of lines to add
            column: Number of columns to add
            offset: Number of characters to add to the offset (if there is one)

        Returns:
            The new position
        """
        new_offset = self.offset + offset if self.has_offset else None
        return SourceFilePosition(self.line + line, self.column + column, new_offset)

    def _key(self) -> tuple[int, int]:
        return (self.line, self.column)

    def is_before(self, other: 'SourceFilePosition') -> bool:
        """Check if this position is strictly before another one (offsets are ignored)."""
        return self._key() < other._key()

    def is_before_or_equal(self, other: 'SourceFilePosition') -> bool:
        """Check if this position is before or at another one (offsets are ignored)."""
        return self._key() <= other._key()

    def is_equal(self, other: 'SourceFilePosition') -> bool:
        """Check if this position is at the same line and column as another one."""
        return self._key() == other._key()

    def is_after_or_equal(self, other: 'SourceFilePosition') -> bool:
        """Check if this position is after or at another one (offsets are ignored)."""
        return self._key() >= other._key()

    def is_after(self, other: 'SourceFilePosition') -> bool:
        """Check if this position is strictly after another one (offsets are ignored)."""
        return self._key() > other._key()

    def __str__(self) -> str:
        return f"[Ln {self.line} Col {self.column}]"

    def __repr__(self) -> str:
        offset = self._initial_offset if self._initial_offset is None else self.offset
        return f"SourceFilePosition(line={self.line}, column={self.column}, offset={offset})"

    @staticmethod
    def from_parser_index(index: ParserIndex) -> 'SourceFilePosition':
        """
        Create a position from a parser index.

        Args:
            index: Parser index with 1-based line and column

        Returns:
            The equivalent 0-based position
        """
        return SourceFilePosition(index.line - 1, index.column - 1, index.offset)

    @staticmethod
    def from_raw(raw: RawSourceFilePosition) -> 'SourceFilePosition':
        """
        Create a position (without offset) from a host editor position.

        Args:
            raw: The 0-based (line, column) pair

        Returns:
            The new position
        """
        return SourceFilePosition(raw.line, raw.column)

    @staticmethod
    def compare_in_ascending_order(position1: 'SourceFilePosition', position2: 'SourceFilePosition') -> int:
        """
        Compare two positions, for sorting them in ascending order.

        Args:
            position1: First position
            position2: Second position

        Returns:
            -1, 0 or +1 depending on whether position1 is before, at or after position2
        """
        if position1.is_before(position2):
            return -1

        if position1.is_after(position2):
            return 1

        return 0
