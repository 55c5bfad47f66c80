"""Description of a single text change in a source buffer."""

from enum import Enum

from ilatex.latex_source_position import PositionShift, RawSourceFileRange, SourceFilePosition


class SourceFileChangeKind(Enum):
    """Kind of text change."""
    INSERTION = "Insertion"
    DELETION = "Deletion"
    REPLACEMENT = "Replacement"


class SourceFileChange:
    """
    A change in a source buffer: the text between two positions is replaced by new text.

    The shift gives the net amount by which positions located after the change move.
    Be careful: the column shift is only meaningful for positions on the last line
    of the replaced range.
    """

    def __init__(
        self,
        start: SourceFilePosition,
        end: SourceFilePosition,
        text: str,
        range_length: int
    ) -> None:
        """
        Initialize a change.

        Args:
            start: Start of the replaced range
            end: End of the replaced range
            text: The text inserted in place of the range
            range_length: Number of characters in the replaced range
        """
        self.start = start
        self.end = end
        self.text = text
        self.range_length = range_length
        self.kind = self._compute_kind()
        self.shift = self._compute_shift()

    @classmethod
    def from_shift(
        cls,
        start: SourceFilePosition,
        end: SourceFilePosition,
        shift: PositionShift,
        text: str = ""
    ) -> 'SourceFileChange':
        """
        Create a change whose shift is already known.

        Args:
            start: Start of the replaced range
            end: End of the replaced range
            shift: Net shift implied by the change
            text: The inserted text, if known

        Returns:
            The new change
        """
        change = cls(start, end, text, max(0, len(text) - shift.offset))
        change.shift = PositionShift(shift.lines, shift.columns, shift.offset)
        return change

    @property
    def raw_range(self) -> RawSourceFileRange:
        """The replaced range as plain (line, column) pairs, for the host editor."""
        return RawSourceFileRange(self.start.raw, self.end.raw)

    def _compute_kind(self) -> SourceFileChangeKind:
        if self.range_length == 0 and self.start.is_equal(self.end):
            return SourceFileChangeKind.INSERTION

        if not self.text:
            return SourceFileChangeKind.DELETION

        return SourceFileChangeKind.REPLACEMENT

    def _compute_shift(self) -> PositionShift:
        nb_new_lines = self.text.count("\n")

        # Lines added minus lines removed or replaced
        lines = nb_new_lines - (self.end.line - self.start.line)

        # A position that was on the end line, after the end, keeps its distance to the end.
        # Its new column starts either after the start column (single-line text) or at the
        # beginning of the last inserted line.
        last_line_length = len(self.text) - (self.text.rfind("\n") + 1)
        new_end_column = last_line_length if nb_new_lines > 0 else self.start.column + last_line_length
        columns = new_end_column - self.end.column

        offset = len(self.text) - self.range_length
        return PositionShift(lines, columns, offset)

    def __str__(self) -> str:
        return f"{self.kind.value} {self.start} -> {self.end} {self.text!r}"

    def __repr__(self) -> str:
        return (
            f"SourceFileChange(start={self.start}, end={self.end}, text={self.text!r}, "
            f"range_length={self.range_length}, shift={self.shift})"
        )
