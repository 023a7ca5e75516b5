"""Verse segmentation for song lyrics."""

from __future__ import annotations

from collections.abc import Iterator

VERSE_DELIMITER = "\n\n"


class VerseSequence:
    """Lazy, restartable view of a lyric text split into verses.

    Verses are the pieces between literal ``"\\n\\n"`` delimiters. Nothing is
    trimmed or dropped: adjacent delimiters produce empty-string verses in
    place, and an empty text is a single empty verse. Each call to
    ``iter()`` scans the text again from the beginning.
    """

    def __init__(self, text: str, delimiter: str = VERSE_DELIMITER) -> None:
        if not delimiter:
            raise ValueError("delimiter must not be empty")
        self._text = text
        self._delimiter = delimiter

    def __iter__(self) -> Iterator[str]:
        text, delimiter = self._text, self._delimiter
        start = 0
        while True:
            idx = text.find(delimiter, start)
            if idx < 0:
                yield text[start:]
                return
            yield text[start:idx]
            start = idx + len(delimiter)

    def __len__(self) -> int:
        return self._text.count(self._delimiter) + 1

    def __repr__(self) -> str:
        return f"VerseSequence(verses={len(self)})"


def split_verses(text: str) -> list[str]:
    """Return every verse of ``text`` as a list."""
    return list(VerseSequence(text))
