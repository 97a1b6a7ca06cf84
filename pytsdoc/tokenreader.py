"""
Cursor and slice abstractions over the token list of a L{ParserContext}.
"""
from typing import TYPE_CHECKING, List, Optional, Sequence

import attr

from pytsdoc.textrange import TextRange
from pytsdoc.tokenizer import Token, TokenKind

if TYPE_CHECKING:
    from pytsdoc.parser import ParserContext


@attr.s(frozen=True, repr=False, eq=False)
class TokenSequence:
    """
    An immutable view of the tokens C{parser_context.tokens[start_index:end_index]}.

    Sequences are how nodes remember which part of the input they were parsed
    from: the tokens themselves are never copied.
    """

    parser_context: 'ParserContext' = attr.ib()
    start_index: int = attr.ib()
    end_index: int = attr.ib()

    def __attrs_post_init__(self) -> None:
        count = len(self.parser_context.tokens)
        if self.start_index < 0 or self.start_index > count:
            raise ValueError('TokenSequence.start_index is out of range')
        if self.end_index < 0 or self.end_index > count:
            raise ValueError('TokenSequence.end_index is out of range')
        if self.end_index < self.start_index:
            raise ValueError('TokenSequence.end_index cannot be smaller than TokenSequence.start_index')

    @classmethod
    def create_empty(cls, parser_context: 'ParserContext') -> 'TokenSequence':
        return cls(parser_context, 0, 0)

    @property
    def tokens(self) -> Sequence[Token]:
        return self.parser_context.tokens[self.start_index:self.end_index]

    def get_new_sequence(self, start_index: int, end_index: int) -> 'TokenSequence':
        """
        Create a sequence over the same token list.
        """
        return TokenSequence(self.parser_context, start_index, end_index)

    def get_containing_text_range(self) -> TextRange:
        """
        The source range going from the first token to the last one.
        """
        if self.is_empty():
            return TextRange.empty
        tokens = self.parser_context.tokens
        return self.parser_context.source_range.get_new_range(
            tokens[self.start_index].range.pos,
            tokens[self.end_index - 1].range.end)

    def is_empty(self) -> bool:
        return self.start_index == self.end_index

    def __len__(self) -> int:
        return self.end_index - self.start_index

    def __str__(self) -> str:
        return ''.join(str(token) for token in self.tokens)

    def __repr__(self) -> str:
        return f'<TokenSequence {self.start_index}:{self.end_index} {str(self)!r}>'


class TokenReader:
    """
    A cursor over the token list, with an "accumulated sequence" that
    grows as tokens are read and can be extracted as a L{TokenSequence}.

    Backtracking: L{create_marker} returns the current position, which can
    later be restored with L{backtrack_to_marker}.  That is all the state a
    sub-parser needs to undo its work when it fails.

    A reader can be restricted to an embedded sequence, in which case it
    reports C{EndOfInput} at the end of that sequence.
    """

    def __init__(self, parser_context: 'ParserContext',
                 embedded_token_sequence: Optional[TokenSequence] = None):
        self._parser_context = parser_context
        self.tokens: List[Token] = parser_context.tokens

        if embedded_token_sequence is not None:
            if embedded_token_sequence.parser_context is not parser_context:
                raise ValueError('The embedded token sequence must belong to the same parser context')
            self._reader_start_index = embedded_token_sequence.start_index
            self._reader_end_index = embedded_token_sequence.end_index
        else:
            self._reader_start_index = 0
            self._reader_end_index = len(self.tokens)

        self._current_index = self._reader_start_index
        self._accumulated_start_index = self._reader_start_index

    def extract_accumulated_sequence(self) -> TokenSequence:
        """
        Return the tokens read since the last extraction and start a new
        accumulation.

        @raises RuntimeError: If nothing was read.
        """
        if self._accumulated_start_index == self._current_index:
            raise RuntimeError('Parser assertion failed: The queue should not be empty when '
                               'extract_accumulated_sequence() is called')
        sequence = TokenSequence(self._parser_context,
                                 self._accumulated_start_index, self._current_index)
        self._accumulated_start_index = self._current_index
        return sequence

    def is_accumulated_sequence_empty(self) -> bool:
        return self._accumulated_start_index == self._current_index

    def try_extract_accumulated_sequence(self) -> Optional[TokenSequence]:
        if self.is_accumulated_sequence_empty():
            return None
        return self.extract_accumulated_sequence()

    def assert_accumulated_sequence_is_empty(self) -> None:
        if not self.is_accumulated_sequence_empty():
            sequence = TokenSequence(self._parser_context,
                                     self._accumulated_start_index, self._current_index)
            raise RuntimeError('Parser assertion failed: The queue should be empty, but it contains:\n'
                               + repr([str(token) for token in sequence.tokens]))

    def peek_token(self) -> Token:
        return self.tokens[self._current_index]

    def peek_token_kind(self) -> TokenKind:
        if self._current_index >= self._reader_end_index:
            return TokenKind.EndOfInput
        return self.tokens[self._current_index].kind

    def peek_token_after_kind(self) -> TokenKind:
        if self._current_index + 1 >= self._reader_end_index:
            return TokenKind.None_
        return self.tokens[self._current_index + 1].kind

    def peek_token_after_after_kind(self) -> TokenKind:
        if self._current_index + 2 >= self._reader_end_index:
            return TokenKind.None_
        return self.tokens[self._current_index + 2].kind

    def read_token(self) -> Token:
        """
        Consume and return the next token.

        @raises RuntimeError: When reading past the end of the stream, or
            when the next token is C{EndOfInput}.
        """
        if self._current_index >= self._reader_end_index:
            raise RuntimeError('Cannot read past end of stream')
        token = self.tokens[self._current_index]
        if token.kind is TokenKind.EndOfInput:
            raise RuntimeError('The EndOfInput token cannot be read')
        self._current_index += 1
        return token

    def peek_previous_token_kind(self) -> TokenKind:
        """
        The kind of the token before the cursor, C{EndOfInput} at the start of
        the input.
        """
        if self._current_index == 0:
            return TokenKind.EndOfInput
        return self.tokens[self._current_index - 1].kind

    def create_marker(self) -> int:
        return self._current_index

    def backtrack_to_marker(self, marker: int) -> None:
        """
        Move the cursor back to a position returned by L{create_marker}.

        @raises RuntimeError: If the marker is ahead of the cursor.
        """
        if marker > self._current_index:
            raise RuntimeError('The marker has expired')
        self._current_index = marker
        if marker < self._accumulated_start_index:
            self._accumulated_start_index = marker
