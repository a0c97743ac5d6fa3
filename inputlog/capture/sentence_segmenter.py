import unicodedata

TERMINATORS = frozenset(".?!")
LINE_BREAKS = frozenset("\r\n")


class SentenceSegmenter:
    """Folds typed characters into sentences.

    Rules, first match wins:
      - CR/LF ends the sentence and always clears the buffer.
      - A terminator (. ? !) is appended.
      - A space right after a terminator ends the sentence; the space starts the next one.
      - Any other non-control character is appended; control characters are dropped.

    feed() and finish() return the finished sentence (trimmed), or None.
    """

    def __init__(self) -> None:
        self._buffer: list[str] = []

    @property
    def buffer(self) -> str:
        return "".join(self._buffer)

    def feed(self, char: str) -> str | None:
        if char in LINE_BREAKS:
            return self._take()
        if char in TERMINATORS:
            self._buffer.append(char)
            return None
        if char == " " and self._buffer and self._buffer[-1] in TERMINATORS:
            sentence = self._take()
            self._buffer.append(char)
            return sentence
        if unicodedata.category(char) == "Cc":
            return None
        self._buffer.append(char)
        return None

    def finish(self) -> str | None:
        """Return whatever is buffered as a final sentence and reset."""
        return self._take()

    def _take(self) -> str | None:
        sentence = "".join(self._buffer).strip()
        self._buffer.clear()
        return sentence or None
