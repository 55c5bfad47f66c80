"""Qt-specific source buffer backed by a text document."""

import logging

from PySide6.QtGui import QTextDocument

from ilatex.latex_source_buffer import LatexSourceBuffer


def _string_index(text: str, utf16_offset: int) -> int:
    """
    Convert an offset in UTF-16 code units into an index in a string.

    Offsets past the end of the text give the length of the text.

    Args:
        text: The text
        utf16_offset: Offset in UTF-16 code units

    Returns:
        The matching index in the string
    """
    utf16_text = text.encode("utf-16-le", errors="surrogatepass")
    return len(utf16_text[:2 * max(utf16_offset, 0)].decode("utf-16-le", errors="ignore"))


class QtLatexSourceBuffer(LatexSourceBuffer):
    """
    Source buffer reading and tracking the text of a Qt text document.

    Qt reports each edit as a position with a number of removed and added
    UTF-16 code units, which are converted into string indices. A snapshot of
    the previous text is kept so that each edit can be described with lines
    and columns as they were before the edit.
    """

    def __init__(self, document: QTextDocument) -> None:
        """
        Initialize the buffer.

        Args:
            document: The document holding the LaTeX source
        """
        super().__init__()
        self._logger = logging.getLogger("QtLatexSourceBuffer")
        self._document = document
        self._text = document.toPlainText()
        self._document.contentsChange.connect(self._on_contents_change)

    @property
    def document(self) -> QTextDocument:
        """The tracked document."""
        return self._document

    def get_text(self) -> str:
        return self._text

    def detach(self) -> None:
        """Stop tracking the edits of the document."""
        self._document.contentsChange.disconnect(self._on_contents_change)

    def _on_contents_change(self, position: int, chars_removed: int, chars_added: int) -> None:
        """
        Handle an edit of the document.

        Qt counts UTF-16 code units, so the edit is first converted to string indices.

        Args:
            position: Offset where the edit happened, in UTF-16 code units
            chars_removed: Number of UTF-16 code units removed
            chars_added: Number of UTF-16 code units added
        """
        old_text = self._text
        new_text = self._document.toPlainText()

        # Qt counts the final paragraph separator in some edits, which the index conversion clamps away
        start = _string_index(old_text, position)
        removed_end = _string_index(old_text, position + chars_removed)
        added_end = _string_index(new_text, position + chars_added)

        removed_text = old_text[start:removed_end]
        added_text = new_text[start:added_end]

        # Qt may report a whole block as replaced: only keep the characters that actually differ
        prefix_length = 0
        max_prefix_length = min(len(removed_text), len(added_text))
        while prefix_length < max_prefix_length and removed_text[prefix_length] == added_text[prefix_length]:
            prefix_length += 1

        suffix_length = 0
        max_suffix_length = max_prefix_length - prefix_length
        while (
            suffix_length < max_suffix_length
            and removed_text[-1 - suffix_length] == added_text[-1 - suffix_length]
        ):
            suffix_length += 1

        start += prefix_length
        removed_text = removed_text[prefix_length:len(removed_text) - suffix_length]
        added_text = added_text[prefix_length:len(added_text) - suffix_length]

        # Format-only changes are reported as edits that do not alter the text
        if not removed_text and not added_text:
            self._text = new_text
            return

        change = self._create_change(old_text, start, start + len(removed_text), added_text)
        self._text = new_text
        self._logger.debug("Document changed: %s", change)
        self._notify_change(change)
