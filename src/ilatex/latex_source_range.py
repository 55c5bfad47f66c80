"""Ranges in a source file that can follow unsaved edits."""

from enum import Enum
import logging

from ilatex.latex_exceptions import UnreachableChangeRelationError
from ilatex.latex_source_change import SourceFileChange, SourceFileChangeKind
from ilatex.latex_source_position import RawSourceFileRange, SourceFilePosition


class RelativeRangePosition(Enum):
    """Where a change happened, relative to a range."""
    BEFORE = "Before"
    WITHIN = "Within"
    ACROSS = "Across"
    AFTER = "After"


class SourceFileRange:
    """
    A range between two positions in a file, each with a possibly non-null shift.

    Note: nothing guarantees that the first position is before the second one
    (with or without shifts): the range is not guaranteed to be valid at all times.
    """

    _logger = logging.getLogger("SourceFileRange")

    def __init__(self, from_: SourceFilePosition, to: SourceFilePosition) -> None:
        """
        Initialize a range.

        Args:
            from_: Start position
            to: End position
        """
        self.from_ = from_
        self.to = to

    @property
    def is_single_line(self) -> bool:
        """True if the range starts and ends on the same line."""
        return self.from_.line == self.to.line

    @property
    def is_empty(self) -> bool:
        """True if the range starts and ends at the same place."""
        return self.from_.is_equal(self.to)

    @property
    def raw(self) -> RawSourceFileRange:
        """The current range as plain positions."""
        return RawSourceFileRange(self.from_.raw, self.to.raw)

    def contains_position(self, position: SourceFilePosition) -> bool:
        """Check if a position lies within this range (bounds included)."""
        return self.from_.is_before_or_equal(position) and self.to.is_after_or_equal(position)

    def contains(self, other: 'SourceFileRange') -> bool:
        """Check if another range lies within this range (bounds included)."""
        return self.contains_position(other.from_) and self.contains_position(other.to)

    def intersects(self, other: 'SourceFileRange') -> bool:
        """Check if either bound of another range lies within this range."""
        return self.contains_position(other.from_) or self.contains_position(other.to)

    def intersection(
        self,
        start: SourceFilePosition,
        end: SourceFilePosition
    ) -> 'SourceFileRange | None':
        """
        Compute the intersection of this range with the span between two positions.

        Touching spans intersect with an empty range.

        Args:
            start: Start of the span
            end: End of the span

        Returns:
            The intersection, or None if the span and this range do not meet
        """
        inter_start = start if start.is_after(self.from_) else self.from_
        inter_end = end if end.is_before(self.to) else self.to
        if inter_start.is_after(inter_end):
            return None

        return SourceFileRange(
            SourceFilePosition(inter_start.line, inter_start.column),
            SourceFilePosition(inter_end.line, inter_end.column)
        )

    def __str__(self) -> str:
        return f"{self.from_} -> {self.to}"

    def __repr__(self) -> str:
        return f"SourceFileRange({self.from_!r}, {self.to!r})"

    def _is_insertion_at_start(self, change: SourceFileChange) -> bool:
        return (
            change.kind == SourceFileChangeKind.INSERTION
            and self.from_.is_equal(change.end)
            and not self.is_empty
        )

    def process_change(self, change: SourceFileChange) -> RelativeRangePosition:
        """
        Shift the start and/or end of this range to take a change into account.

        If the change happens across the range, nothing is shifted: there is too little
        information to move one bound safely. Owners of ranges that care about this
        situation are responsible for reacting to it.

        Only an insertion at the start of the range counts as a change before it. A
        deletion or replacement ending exactly at the start touches the first character
        of the range and is reported as a change across it.

        Args:
            change: The change to process

        Returns:
            The position of the change relative to this range

        Raises:
            UnreachableChangeRelationError: If the change cannot be related to this range
        """
        # Case 1: this range ends strictly before the modified range
        if self.to.is_before(change.start):
            return RelativeRangePosition.AFTER

        # Case 2: this range starts after the modified range (or text is inserted right at its start)
        if self.from_.is_after(change.end) or self._is_insertion_at_start(change):
            self._shift_after_change_before_range(change)
            return RelativeRangePosition.BEFORE

        # Case 3: the modified range overlaps with this range
        if self.intersection(change.start, change.end) is not None:
            # Case 3.1: the modified range is contained within this range
            if change.start.is_after_or_equal(self.from_) and change.end.is_before_or_equal(self.to):
                self._shift_after_change_within_range(change)
                return RelativeRangePosition.WITHIN

            # Case 3.2: a part of the modified range is outside this range
            return RelativeRangePosition.ACROSS

        self._logger.error("Unexpected kind of source file change %r in range %s", change, self)
        raise UnreachableChangeRelationError(
            f"Unexpected kind of source file change in range {self}",
            {
                'range': str(self),
                'change_start': str(change.start),
                'change_end': str(change.end)
            }
        )

    def _shift_after_change_before_range(self, change: SourceFileChange) -> None:
        start_line = self.from_.line
        is_single_line = self.is_single_line

        self.from_.shift.lines += change.shift.lines
        self.from_.shift.offset += change.shift.offset

        self.to.shift.lines += change.shift.lines
        self.to.shift.offset += change.shift.offset

        # If this range starts on the last line of the modified range, the start column moves
        # too, and so does the end column when the range fits on that line
        if start_line == change.end.line:
            self.from_.shift.columns += change.shift.columns
            if is_single_line:
                self.to.shift.columns += change.shift.columns

    def _shift_after_change_within_range(self, change: SourceFileChange) -> None:
        end_line = self.to.line

        self.to.shift.lines += change.shift.lines
        self.to.shift.offset += change.shift.offset

        # If the change ends on the last line of this range, the end column moves too
        if change.end.line == end_line:
            self.to.shift.columns += change.shift.columns

    @staticmethod
    def from_raw(raw: RawSourceFileRange) -> 'SourceFileRange':
        """
        Create a range (without offsets) from a host editor range.

        Args:
            raw: The plain range

        Returns:
            The new range
        """
        return SourceFileRange(SourceFilePosition.from_raw(raw.from_), SourceFilePosition.from_raw(raw.to))
