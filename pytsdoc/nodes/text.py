"""
Leaf content nodes: text, escapes, errors and code.
"""
import enum
import re
from typing import TYPE_CHECKING, Optional, Sequence

from pytsdoc.nodes.base import DocNode, DocNodeKind, ExcerptKind, excerpt, excerpt_text

if TYPE_CHECKING:
    from pytsdoc.configuration import TSDocConfiguration
    from pytsdoc.messages import TSDocMessageId
    from pytsdoc.tokenreader import TokenSequence

_NEWLINE_RE = re.compile(r'[\r\n]')


class DocPlainText(DocNode):
    """
    Ordinary text, never spanning more than one line.
    """

    def __init__(self, configuration: 'TSDocConfiguration', text: Optional[str] = None,
                 *, text_excerpt: Optional['TokenSequence'] = None):
        """
        @raises ValueError: If the builder C{text} contains a newline.  Use
            L{DocSoftBreak} between lines.
        """
        super().__init__(configuration)
        self._text = text
        self._text_excerpt = excerpt(configuration, ExcerptKind.PlainText, text_excerpt)
        if self._text_excerpt is None:
            if text is None:
                raise ValueError('DocPlainText requires a text or a text_excerpt')
            if _NEWLINE_RE.search(text):
                raise ValueError('The DocPlainText content must not contain newline characters')

    @property
    def kind(self) -> str:
        return DocNodeKind.PlainText

    @property
    def text(self) -> str:
        if self._text is None:
            self._text = excerpt_text(self._text_excerpt)
        assert self._text is not None
        return self._text

    @property
    def text_excerpt(self) -> Optional['TokenSequence']:
        if self._text_excerpt is None:
            return None
        return self._text_excerpt.content

    def _on_get_child_nodes(self) -> Sequence[Optional[DocNode]]:
        return [self._text_excerpt]

    def __repr__(self) -> str:
        return f'<DocPlainText {self.text!r}>'


class DocSoftBreak(DocNode):
    """
    A line break in the middle of a paragraph.  Renderers usually treat it
    like a space.
    """

    def __init__(self, configuration: 'TSDocConfiguration',
                 *, soft_break_excerpt: Optional['TokenSequence'] = None):
        super().__init__(configuration)
        self._soft_break_excerpt = excerpt(configuration, ExcerptKind.SoftBreak,
                                           soft_break_excerpt)

    @property
    def kind(self) -> str:
        return DocNodeKind.SoftBreak

    def _on_get_child_nodes(self) -> Sequence[Optional[DocNode]]:
        return [self._soft_break_excerpt]


class EscapeStyle(enum.Enum):
    """
    How a L{DocEscapedText} was encoded.
    """
    CommonMarkBackslash = enum.auto()
    """A backslash followed by the escaped punctuation character: C{"\\@"}."""


class DocEscapedText(DocNode):
    """
    Text that was escaped to prevent it from being interpreted as markup.
    """

    def __init__(self, configuration: 'TSDocConfiguration',
                 escape_style: EscapeStyle, decoded_text: str,
                 encoded_text: Optional[str] = None,
                 *, encoded_text_excerpt: Optional['TokenSequence'] = None):
        """
        @param decoded_text: The text without the escaping, like C{"@"}.
        @param encoded_text: The text as written, like C{"\\@"}.
        """
        super().__init__(configuration)
        self.escape_style = escape_style
        self.decoded_text = decoded_text
        self._encoded_text = encoded_text
        self._encoded_text_excerpt = excerpt(configuration, ExcerptKind.EscapedText,
                                             encoded_text_excerpt)
        if self._encoded_text_excerpt is None and encoded_text is None:
            raise ValueError('DocEscapedText requires an encoded_text or an encoded_text_excerpt')

    @property
    def kind(self) -> str:
        return DocNodeKind.EscapedText

    @property
    def encoded_text(self) -> str:
        if self._encoded_text is None:
            self._encoded_text = excerpt_text(self._encoded_text_excerpt)
        assert self._encoded_text is not None
        return self._encoded_text

    def _on_get_child_nodes(self) -> Sequence[Optional[DocNode]]:
        return [self._encoded_text_excerpt]


class DocErrorText(DocNode):
    """
    Text that could not be parsed.  The parser reports a message for it
    and moves on.

    Error text only exists in parsed trees.
    """

    def __init__(self, configuration: 'TSDocConfiguration', text_excerpt: 'TokenSequence',
                 message_id: 'TSDocMessageId', error_message: str,
                 error_location: 'TokenSequence'):
        """
        @param text_excerpt: The tokens that are rendered as plain text in
            place of the malformed construct.
        @param error_location: The tokens the message points at.  They often
            differ from C{text_excerpt}, for example when the problem is a
            missing closing delimiter.
        """
        super().__init__(configuration)
        self._text_excerpt = excerpt(configuration, ExcerptKind.ErrorText, text_excerpt)
        self.message_id = message_id
        self.error_message = error_message
        self.error_location = error_location

    @property
    def kind(self) -> str:
        return DocNodeKind.ErrorText

    @property
    def text(self) -> str:
        return str(self.text_excerpt)

    @property
    def text_excerpt(self) -> 'TokenSequence':
        assert self._text_excerpt is not None
        return self._text_excerpt.content

    def _on_get_child_nodes(self) -> Sequence[Optional[DocNode]]:
        return [self._text_excerpt]

    def __repr__(self) -> str:
        return f'<DocErrorText {self.message_id.value} {self.text!r}>'


class DocCodeSpan(DocNode):
    """
    Inline code: C{`x = 1`}.
    """

    def __init__(self, configuration: 'TSDocConfiguration', code: Optional[str] = None,
                 *, opening_delimiter_excerpt: Optional['TokenSequence'] = None,
                 code_excerpt: Optional['TokenSequence'] = None,
                 closing_delimiter_excerpt: Optional['TokenSequence'] = None):
        super().__init__(configuration)
        self._code = code
        self._opening_delimiter_excerpt = excerpt(configuration,
                                                  ExcerptKind.CodeSpan_OpeningDelimiter,
                                                  opening_delimiter_excerpt)
        self._code_excerpt = excerpt(configuration, ExcerptKind.CodeSpan_Code, code_excerpt)
        self._closing_delimiter_excerpt = excerpt(configuration,
                                                  ExcerptKind.CodeSpan_ClosingDelimiter,
                                                  closing_delimiter_excerpt)
        if self._code_excerpt is None and code is None:
            raise ValueError('DocCodeSpan requires a code or a code_excerpt')

    @property
    def kind(self) -> str:
        return DocNodeKind.CodeSpan

    @property
    def code(self) -> str:
        """
        The code, without the backticks.
        """
        if self._code is None:
            self._code = excerpt_text(self._code_excerpt)
        assert self._code is not None
        return self._code

    def _on_get_child_nodes(self) -> Sequence[Optional[DocNode]]:
        return [self._opening_delimiter_excerpt, self._code_excerpt,
                self._closing_delimiter_excerpt]


class DocFencedCode(DocNode):
    """
    A block of code between C{```} fences, with an optional language
    specifier after the opening fence.
    """

    def __init__(self, configuration: 'TSDocConfiguration',
                 code: Optional[str] = None, language: str = '',
                 *, opening_fence_excerpt: Optional['TokenSequence'] = None,
                 spacing_after_opening_fence_excerpt: Optional['TokenSequence'] = None,
                 language_excerpt: Optional['TokenSequence'] = None,
                 spacing_after_language_excerpt: Optional['TokenSequence'] = None,
                 code_excerpt: Optional['TokenSequence'] = None,
                 spacing_before_closing_fence_excerpt: Optional['TokenSequence'] = None,
                 closing_fence_excerpt: Optional['TokenSequence'] = None,
                 spacing_after_closing_fence_excerpt: Optional['TokenSequence'] = None):
        super().__init__(configuration)
        c = configuration
        self._opening_fence_excerpt = excerpt(c, ExcerptKind.FencedCode_OpeningFence,
                                              opening_fence_excerpt)
        self._spacing_after_opening_fence_excerpt = excerpt(
            c, ExcerptKind.Spacing, spacing_after_opening_fence_excerpt)
        self._language_excerpt = excerpt(c, ExcerptKind.FencedCode_Language, language_excerpt)
        self._spacing_after_language_excerpt = excerpt(c, ExcerptKind.Spacing,
                                                       spacing_after_language_excerpt)
        self._code_excerpt = excerpt(c, ExcerptKind.FencedCode_Code, code_excerpt)
        self._spacing_before_closing_fence_excerpt = excerpt(
            c, ExcerptKind.Spacing, spacing_before_closing_fence_excerpt)
        self._closing_fence_excerpt = excerpt(c, ExcerptKind.FencedCode_ClosingFence,
                                              closing_fence_excerpt)
        self._spacing_after_closing_fence_excerpt = excerpt(
            c, ExcerptKind.Spacing, spacing_after_closing_fence_excerpt)

        if self._code_excerpt is None:
            if code is None:
                raise ValueError('DocFencedCode requires a code or a code_excerpt')
            self._code: Optional[str] = code
            self._language: Optional[str] = language
        else:
            self._code = None
            self._language = None

    @property
    def kind(self) -> str:
        return DocNodeKind.FencedCode

    @property
    def language(self) -> str:
        """
        The language specifier, like C{"ts"}, or C{""}.
        """
        if self._language is None:
            self._language = excerpt_text(self._language_excerpt) or ''
        return self._language

    @property
    def code(self) -> str:
        """
        The code lines, each ending with C{"\\n"}.
        """
        if self._code is None:
            self._code = excerpt_text(self._code_excerpt) or ''
        return self._code

    def _on_get_child_nodes(self) -> Sequence[Optional[DocNode]]:
        return [
            self._opening_fence_excerpt,
            self._spacing_after_opening_fence_excerpt,
            self._language_excerpt,
            self._spacing_after_language_excerpt,
            self._code_excerpt,
            self._spacing_before_closing_fence_excerpt,
            self._closing_fence_excerpt,
            self._spacing_after_closing_fence_excerpt,
        ]
