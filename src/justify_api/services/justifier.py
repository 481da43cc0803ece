"""Fixed-width text justification."""

from __future__ import annotations

from dataclasses import dataclass, field

from justify_api.core.errors import InvalidWidthError


@dataclass
class Line:
    """Words packed onto a single output line."""

    words: list[str] = field(default_factory=list)
    length: int = 0

    def fits(self, word: str, width: int) -> bool:
        """Return True if ``word`` can be appended without exceeding ``width``."""
        separator = 1 if self.words else 0
        return self.length + separator + len(word) <= width

    def append(self, word: str) -> None:
        separator = 1 if self.words else 0
        self.words.append(word)
        self.length += separator + len(word)

    @property
    def char_count(self) -> int:
        """Total characters of the words, excluding separators."""
        return sum(len(word) for word in self.words)


def split_words(text: str) -> list[str]:
    """Split text on runs of whitespace, dropping empty fragments."""
    return text.split()


def count_words(text: str) -> int:
    """Return the number of whitespace-delimited words in ``text``."""
    return len(split_words(text))


def pack_lines(words: list[str], width: int) -> list[Line]:
    """Greedily pack words into lines no wider than ``width``.

    A word longer than ``width`` gets a line of its own and is never split.
    """
    lines: list[Line] = []
    current = Line()
    for word in words:
        if current.words and not current.fits(word, width):
            lines.append(current)
            current = Line()
        current.append(word)
    if current.words:
        lines.append(current)
    return lines


def _spread_line(line: Line, width: int) -> str:
    gaps = len(line.words) - 1
    total_spaces = width - line.char_count
    base, extra = divmod(total_spaces, gaps)
    parts: list[str] = []
    for index, word in enumerate(line.words[:-1]):
        parts.append(word)
        parts.append(" " * (base + (1 if index < extra else 0)))
    parts.append(line.words[-1])
    return "".join(parts)


def _pad_line(line: Line, width: int) -> str:
    return " ".join(line.words).ljust(width)


def justify(text: str, width: int) -> str:
    """Justify ``text`` so every line except the last is exactly ``width`` wide.

    Extra spaces go to the leftmost gaps first. Single-word lines and the last
    line of a multi-line result are left-aligned and padded with trailing
    spaces. When the whole text fits on one line of two or more words, that
    line is spread to the full width.

    Args:
        text: Arbitrary text; whitespace runs are collapsed.
        width: Target line width, must be positive.

    Returns:
        The justified lines joined with ``"\\n"`` (no trailing newline).

    Raises:
        InvalidWidthError: If ``width`` is not a positive integer.
    """
    if isinstance(width, bool) or not isinstance(width, int) or width <= 0:
        raise InvalidWidthError(f"Line width must be a positive integer, got {width!r}")

    words = split_words(text)
    if not words:
        return ""

    lines = pack_lines(words, width)
    last_index = len(lines) - 1
    rendered: list[str] = []
    for index, line in enumerate(lines):
        if len(line.words) > 1 and (index < last_index or last_index == 0):
            rendered.append(_spread_line(line, width))
        else:
            rendered.append(_pad_line(line, width))
    return "\n".join(rendered)
