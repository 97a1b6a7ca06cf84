"""
Character ranges over a source buffer.
"""
from typing import ClassVar

import attr


@attr.s(auto_attribs=True, frozen=True)
class TextLocation:
    """
    A line/column pair, both 1-based.  The pair C{(0, 0)} means "unknown".
    """
    line: int
    column: int


@attr.s(frozen=True, repr=False)
class TextRange:
    """
    An immutable view over the characters C{buffer[pos:end]}.

    Ranges are cheap to create: the underlying buffer is shared by reference
    between all ranges carved from it.
    """

    empty: ClassVar['TextRange']
    """A zero-length range over an empty buffer, used as "no location"."""

    buffer: str = attr.ib()
    """The entire source text."""

    pos: int = attr.ib()
    """The starting index into L{buffer}."""

    end: int = attr.ib()
    """The (non-inclusive) ending index into L{buffer}."""

    def __attrs_post_init__(self) -> None:
        if self.pos < 0 or self.pos > len(self.buffer):
            raise ValueError('TextRange.pos is out of range')
        if self.end < 0 or self.end > len(self.buffer):
            raise ValueError('TextRange.end is out of range')
        if self.end < self.pos:
            raise ValueError('TextRange.end cannot be smaller than TextRange.pos')

    @classmethod
    def from_string(cls, buffer: str) -> 'TextRange':
        """
        Create a range covering the whole of C{buffer}.
        """
        return cls(buffer, 0, len(buffer))

    @classmethod
    def from_string_range(cls, buffer: str, pos: int, end: int) -> 'TextRange':
        return cls(buffer, pos, end)

    @property
    def length(self) -> int:
        return self.end - self.pos

    def get_new_range(self, pos: int, end: int) -> 'TextRange':
        """
        Create a range over the same buffer.  C{pos} and C{end} are absolute
        indexes into the buffer, not offsets from this range.
        """
        return TextRange(self.buffer, pos, end)

    def is_empty(self) -> bool:
        return self.pos == self.end

    def __str__(self) -> str:
        return self.buffer[self.pos:self.end]

    def __repr__(self) -> str:
        return f'<TextRange {self.pos}:{self.end} {str(self)!r}>'

    def get_debug_dump(self, pos_delimiter: str, end_delimiter: str) -> str:
        """
        Return the whole buffer with the delimiters inserted around this range.
        Useful in test failure messages.
        """
        return (self.buffer[:self.pos] + pos_delimiter
                + self.buffer[self.pos:self.end] + end_delimiter
                + self.buffer[self.end:])

    def get_location(self, index: int) -> TextLocation:
        """
        Compute the line and column number of C{index} by scanning the buffer
        from its start.

        C{"\\r\\n"} counts as a single line break.  A lone C{"\\r"} does not
        start a new line.

        @param index: An absolute index into L{buffer}.
        @return: The location, or C{TextLocation(0, 0)} if C{index} is
            outside the buffer.
        """
        if index < 0 or index > len(self.buffer):
            return TextLocation(0, 0)

        line = 1
        column = 1
        current = 0
        buffer = self.buffer
        while current < index:
            char = buffer[current]
            current += 1
            if char == '\r' and current < len(buffer) and buffer[current] == '\n':
                # Counted when we reach the \n
                continue
            if char == '\n':
                line += 1
                column = 1
            else:
                column += 1
        return TextLocation(line, column)


TextRange.empty = TextRange('', 0, 0)
