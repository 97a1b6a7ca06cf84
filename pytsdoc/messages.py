"""
Diagnostics reported while loading configuration or parsing a comment.

Diagnostics are never raised: the parser records them in a
L{ParserMessageLog} and the caller decides how to present them.
"""
from enum import Enum
from typing import TYPE_CHECKING, Iterator, List, Optional

import attr

from pytsdoc.textrange import TextRange

if TYPE_CHECKING:
    from pytsdoc.tokenreader import TokenSequence
    from pytsdoc.nodes import DocNode, DocErrorText


class TSDocMessageId(str, Enum):
    """
    Stable identifiers for every diagnostic.  The values can be used to
    suppress or filter messages and will not change between releases.
    """

    ##################################################
    ## Config files

    ConfigFileNotFound = 'tsdoc-config-file-not-found'
    """The C{tsdoc.json} file was not found in the given folder."""

    ConfigInvalidJson = 'tsdoc-config-invalid-json'
    """The config file is not valid JSON."""

    ConfigFileUnsupportedSchema = 'tsdoc-config-unsupported-schema'
    """The C{$schema} field names an unknown schema."""

    ConfigFileSchemaError = 'tsdoc-config-schema-error'
    """The config file contains fields or values that the schema does not allow."""

    ConfigFileCyclicExtends = 'tsdoc-config-cyclic-extends'
    """The C{extends} chain loops back to a file already being loaded."""

    ConfigFileUnresolvedExtends = 'tsdoc-config-unresolved-extends'
    """A path listed in C{extends} does not exist."""

    ConfigFileDuplicateTagName = 'tsdoc-config-duplicate-tag-name'
    """Two C{tagDefinitions} entries use the same name."""

    ConfigFileUndefinedTag = 'tsdoc-config-undefined-tag'
    """C{supportForTags} names a tag that is not defined."""

    ##################################################
    ## Comment delimiters

    CommentNotFound = 'tsdoc-comment-not-found'
    CommentOpeningDelimiterSyntax = 'tsdoc-comment-missing-opening-delimiter'
    CommentMissingClosingDelimiter = 'tsdoc-comment-missing-closing-delimiter'

    ##################################################
    ## Tags and structure

    ExtraInheritDocTag = 'tsdoc-extra-inheritdoc-tag'
    EscapeRightBrace = 'tsdoc-escape-right-brace'
    EscapeGreaterThan = 'tsdoc-escape-greater-than'
    MissingDeprecationMessage = 'tsdoc-missing-deprecation-message'
    InheritDocIncompatibleTag = 'tsdoc-inheritdoc-incompatible-tag'
    InheritDocIncompatibleSummary = 'tsdoc-inheritdoc-incompatible-summary'
    InlineTagMissingBraces = 'tsdoc-inline-tag-missing-braces'
    TagShouldNotHaveBraces = 'tsdoc-tag-should-not-have-braces'
    UnsupportedTag = 'tsdoc-unsupported-tag'
    UndefinedTag = 'tsdoc-undefined-tag'
    DuplicateBlockTag = 'tsdoc-duplicate-block-tag'
    """A block that may appear only once (like C{@remarks}) was repeated."""

    ParamTagWithInvalidType = 'tsdoc-param-tag-with-invalid-type'
    ParamTagWithInvalidOptionalName = 'tsdoc-param-tag-with-invalid-optional-name'
    ParamTagWithInvalidName = 'tsdoc-param-tag-with-invalid-name'
    ParamTagMissingHyphen = 'tsdoc-param-tag-missing-hyphen'
    UnnecessaryBackslash = 'tsdoc-unnecessary-backslash'
    MissingTag = 'tsdoc-missing-tag'
    AtSignInWord = 'tsdoc-at-sign-in-word'
    AtSignWithoutTagName = 'tsdoc-at-sign-without-tag-name'
    MalformedInlineTag = 'tsdoc-malformed-inline-tag'
    CharactersAfterBlockTag = 'tsdoc-characters-after-block-tag'
    MalformedTagName = 'tsdoc-malformed-tag-name'
    CharactersAfterInlineTag = 'tsdoc-characters-after-inline-tag'
    InlineTagMissingRightBrace = 'tsdoc-inline-tag-missing-right-brace'
    InlineTagUnescapedBrace = 'tsdoc-inline-tag-unescaped-brace'
    InheritDocTagSyntax = 'tsdoc-inheritdoc-tag-syntax'

    ##################################################
    ## Links and declaration references

    LinkTagEmpty = 'tsdoc-link-tag-empty'
    LinkTagUnescapedText = 'tsdoc-link-tag-unescaped-text'
    LinkTagDestinationSyntax = 'tsdoc-link-tag-destination-syntax'
    LinkTagInvalidUrl = 'tsdoc-link-tag-invalid-url'
    ReferenceMissingHash = 'tsdoc-reference-missing-hash'
    ReferenceHashSyntax = 'tsdoc-reference-hash-syntax'
    ReferenceMalformedPackageName = 'tsdoc-reference-malformed-package-name'
    ReferenceMalformedImportPath = 'tsdoc-reference-malformed-import-path'
    MissingReference = 'tsdoc-missing-reference'
    ReferenceMissingDot = 'tsdoc-reference-missing-dot'
    ReferenceSelectorMissingParens = 'tsdoc-reference-selector-missing-parens'
    ReferenceMissingColon = 'tsdoc-reference-missing-colon'
    ReferenceMissingRightParen = 'tsdoc-reference-missing-right-paren'
    ReferenceSymbolSyntax = 'tsdoc-reference-symbol-syntax'
    ReferenceMissingRightBracket = 'tsdoc-reference-missing-right-bracket'
    ReferenceMissingQuote = 'tsdoc-reference-missing-quote'
    ReferenceEmptyIdentifier = 'tsdoc-reference-empty-identifier'
    ReferenceMissingIdentifier = 'tsdoc-reference-missing-identifier'
    ReferenceUnquotedIdentifier = 'tsdoc-reference-unquoted-identifier'
    ReferenceMissingLabel = 'tsdoc-reference-missing-label'
    ReferenceSelectorSyntax = 'tsdoc-reference-selector-syntax'

    ##################################################
    ## HTML

    HtmlTagMissingGreaterThan = 'tsdoc-html-tag-missing-greater-than'
    HtmlTagMissingEquals = 'tsdoc-html-tag-missing-equals'
    HtmlTagMissingString = 'tsdoc-html-tag-missing-string'
    HtmlStringMissingQuote = 'tsdoc-html-string-missing-quote'
    TextAfterHtmlString = 'tsdoc-text-after-html-string'
    MissingHtmlEndTag = 'tsdoc-missing-html-end-tag'
    MalformedHtmlName = 'tsdoc-malformed-html-name'
    UnsupportedHtmlElementName = 'tsdoc-unsupported-html-name'
    XmlTagNameMismatch = 'tsdoc-xml-tag-name-mismatch'
    """An end tag does not match any open start tag in the same section."""

    ##################################################
    ## Code

    CodeFenceOpeningIndent = 'tsdoc-code-fence-opening-indent'
    CodeFenceSpecifierSyntax = 'tsdoc-code-fence-specifier-syntax'
    CodeFenceClosingIndent = 'tsdoc-code-fence-closing-indent'
    CodeFenceMissingDelimiter = 'tsdoc-code-fence-missing-delimiter'
    CodeFenceClosingSyntax = 'tsdoc-code-fence-closing-syntax'
    CodeSpanEmpty = 'tsdoc-code-span-empty'
    CodeSpanMissingDelimiter = 'tsdoc-code-span-missing-delimiter'

    def __str__(self) -> str:
        return self.value


def all_tsdoc_message_ids() -> List[str]:
    """
    Every known message id, sorted alphabetically.
    """
    return sorted(member.value for member in TSDocMessageId)

_KNOWN_MESSAGE_IDS = frozenset(all_tsdoc_message_ids())

def is_known_message_id(message_id: str) -> bool:
    return message_id in _KNOWN_MESSAGE_IDS


@attr.s(auto_attribs=True, frozen=True)
class ParserMessage:
    """
    A diagnostic with its location.
    """

    message_id: TSDocMessageId

    unformatted_text: str
    """The message without the location prefix."""

    text_range: TextRange
    """Where the problem was found."""

    token_sequence: Optional['TokenSequence'] = None
    """The tokens the problem relates to, if any."""

    doc_node: Optional['DocNode'] = None
    """The node the problem relates to, if any."""

    @property
    def text(self) -> str:
        """
        The message prefixed with C{"(line,column): "} when the location is
        known, for example C{"(3,7): The code span is missing its closing backtick"}.
        """
        message = self.unformatted_text or 'An unknown error occurred'
        text_range = self.text_range
        if text_range.pos != 0 or text_range.end != 0:
            location = text_range.get_location(text_range.pos)
            if location.line:
                return f'({location.line},{location.column}): {message}'
        return message

    def __str__(self) -> str:
        return self.text


class ParserMessageLog:
    """
    Accumulates the L{ParserMessage}s of a parse or a config file load.
    """

    def __init__(self) -> None:
        self._messages: List[ParserMessage] = []

    @property
    def messages(self) -> List[ParserMessage]:
        return self._messages

    def __iter__(self) -> Iterator[ParserMessage]:
        return iter(self._messages)

    def __len__(self) -> int:
        return len(self._messages)

    def add_message(self, message: ParserMessage) -> None:
        self._messages.append(message)

    def add_message_for_text_range(self, message_id: TSDocMessageId,
                                   message_text: str, text_range: TextRange) -> None:
        self.add_message(ParserMessage(message_id, message_text, text_range))

    def add_message_for_token_sequence(self, message_id: TSDocMessageId, message_text: str,
                                       token_sequence: 'TokenSequence',
                                       doc_node: Optional['DocNode'] = None) -> None:
        """
        Report a problem located at the first token of C{token_sequence}.
        """
        token = token_sequence.parser_context.tokens[token_sequence.start_index]
        self.add_message(ParserMessage(message_id, message_text, token.range,
                                       token_sequence, doc_node))

    def add_message_for_doc_error_text(self, doc_error_text: 'DocErrorText') -> None:
        """
        Report the problem carried by a L{DocErrorText} node created by the parser.
        """
        error_location = doc_error_text.error_location
        token_sequence = doc_error_text.text_excerpt or error_location
        self.add_message(ParserMessage(doc_error_text.message_id,
                                       doc_error_text.error_message,
                                       error_location.get_containing_text_range(),
                                       token_sequence,
                                       doc_error_text))
