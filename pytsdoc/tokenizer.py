"""
Split the content lines of a comment into a flat list of L{Token}s.

Punctuation characters are always tokens of their own.  Runs of word
characters, of spacing, and of any other character are grouped together.
A zero-width C{Newline} token marks the end of each line and the list always
ends with exactly one C{EndOfInput} token.
"""
from enum import Enum, auto
from typing import Dict, FrozenSet, List, Optional, Sequence

import attr

from pytsdoc.textrange import TextRange


class TokenKind(Enum):
    """
    The classification of a L{Token}.
    """

    None_ = auto()
    """Returned by the peek methods when looking before the start of input."""

    EndOfInput = auto()
    """Always the last token of the list."""

    Newline = auto()
    """A zero-width token marking the end of a line."""

    Spacing = auto()
    """Spaces and tabs."""

    AsciiWord = auto()
    """Upper and lower case letters, digits and the underscore."""

    OtherPunctuation = auto()
    """A CommonMark punctuation character without a dedicated kind."""

    Other = auto()
    """Any other run of characters, including non-ASCII letters."""

    Backslash = auto()
    LessThan = auto()
    GreaterThan = auto()
    Equals = auto()
    SingleQuote = auto()
    DoubleQuote = auto()
    Slash = auto()
    Hyphen = auto()
    AtSign = auto()
    LeftCurlyBracket = auto()
    RightCurlyBracket = auto()
    Backtick = auto()
    Period = auto()
    Colon = auto()
    Comma = auto()
    LeftSquareBracket = auto()
    RightSquareBracket = auto()
    Pipe = auto()
    LeftParenthesis = auto()
    RightParenthesis = auto()
    PoundSymbol = auto()
    Plus = auto()
    DollarSign = auto()


@attr.s(auto_attribs=True, frozen=True, repr=False)
class Token:
    """
    A token of a TSDoc comment.

    The C{range} of a token never spans more than one line, and always falls
    within C{line}.
    """
    kind: TokenKind
    range: TextRange
    line: TextRange
    """The line that the token was found on."""

    def __str__(self) -> str:
        if self.kind is TokenKind.Newline:
            # The line break itself is not part of any line
            return '\n'
        return str(self.range)

    def __repr__(self) -> str:
        return f'<Token {self.kind.name} {str(self)!r}>'


_COMMONMARK_PUNCTUATION = '!"#$%&\'()*+,-./:;<=>?@[\\]^`{|}~'
_WORD_CHARACTERS = 'abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789_'

_SPECIAL_CHARACTERS: Dict[str, TokenKind] = {
    '\\': TokenKind.Backslash,
    '<': TokenKind.LessThan,
    '>': TokenKind.GreaterThan,
    '=': TokenKind.Equals,
    "'": TokenKind.SingleQuote,
    '"': TokenKind.DoubleQuote,
    '/': TokenKind.Slash,
    '-': TokenKind.Hyphen,
    '@': TokenKind.AtSign,
    '{': TokenKind.LeftCurlyBracket,
    '}': TokenKind.RightCurlyBracket,
    '`': TokenKind.Backtick,
    '.': TokenKind.Period,
    ':': TokenKind.Colon,
    ',': TokenKind.Comma,
    '[': TokenKind.LeftSquareBracket,
    ']': TokenKind.RightSquareBracket,
    '|': TokenKind.Pipe,
    '(': TokenKind.LeftParenthesis,
    ')': TokenKind.RightParenthesis,
    '#': TokenKind.PoundSymbol,
    '+': TokenKind.Plus,
    '$': TokenKind.DollarSign,
}

def _build_character_map() -> Dict[str, TokenKind]:
    charmap = {char: TokenKind.OtherPunctuation for char in _COMMONMARK_PUNCTUATION}
    charmap.update(_SPECIAL_CHARACTERS)
    charmap.update({char: TokenKind.AsciiWord for char in _WORD_CHARACTERS})
    charmap[' '] = TokenKind.Spacing
    charmap['\t'] = TokenKind.Spacing
    return charmap

# Characters missing from this table are TokenKind.Other.
_CHARACTER_MAP: Dict[str, TokenKind] = _build_character_map()

_PUNCTUATION_KINDS: FrozenSet[TokenKind] = frozenset(
    [*_SPECIAL_CHARACTERS.values(), TokenKind.OtherPunctuation])

_MULTI_CHARACTER_KINDS: FrozenSet[TokenKind] = frozenset(
    [TokenKind.Spacing, TokenKind.AsciiWord, TokenKind.Other])


class Tokenizer:
    """
    Stateless tokenizer, all methods are static.
    """

    @staticmethod
    def read_tokens(lines: Sequence[TextRange]) -> List[Token]:
        """
        Tokenize the content lines produced by L{pytsdoc.lines.LineExtractor}.

        @param lines: The content lines, in order.
        @return: The tokens.  The last one is always C{EndOfInput}.
        """
        tokens: List[Token] = []
        last_line: Optional[TextRange] = None
        for line in lines:
            Tokenizer._push_tokens_for_line(tokens, line)
            last_line = line

        if last_line is not None:
            tokens.append(Token(TokenKind.EndOfInput,
                                last_line.get_new_range(last_line.end, last_line.end),
                                last_line))
        else:
            tokens.append(Token(TokenKind.EndOfInput, TextRange.empty, TextRange.empty))
        return tokens

    @staticmethod
    def is_punctuation(kind: TokenKind) -> bool:
        """
        Whether C{kind} is one of the CommonMark punctuation characters, which
        are the characters that may be escaped with a backslash.
        """
        return kind in _PUNCTUATION_KINDS

    @staticmethod
    def _push_tokens_for_line(tokens: List[Token], line: TextRange) -> None:
        buffer = line.buffer
        index = line.pos
        token_kind: Optional[TokenKind] = None
        token_pos = index

        while index < line.end:
            char_kind = _CHARACTER_MAP.get(buffer[index], TokenKind.Other)

            if token_kind is None or char_kind is not token_kind \
                    or token_kind not in _MULTI_CHARACTER_KINDS:
                if token_kind is not None:
                    tokens.append(Token(token_kind, line.get_new_range(token_pos, index), line))
                token_pos = index
                token_kind = char_kind
            index += 1

        if token_kind is not None:
            tokens.append(Token(token_kind, line.get_new_range(token_pos, index), line))

        tokens.append(Token(TokenKind.Newline, line.get_new_range(line.end, line.end), line))
