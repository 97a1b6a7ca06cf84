"""
The first parsing stage: turn the token list into a flat list of nodes.

The L{NodeParser} recognizes escapes, block and inline tags, HTML tags and
code, and keeps every other token as plain text.  It does not know about
sections: sorting the nodes into the L{DocComment} is the job of
L{pytsdoc.assembler.DocCommentAssembler}.

Each construct is parsed by a method that either returns the node, or
rewinds the L{TokenReader} and returns a L{DocErrorText} holding at least
one token.  This way the main loop always moves forward, and malformed
input never raises.
"""
import json
from typing import TYPE_CHECKING, List, Optional, Union

import attr

from pytsdoc.beta.declref import DeclarationReference
from pytsdoc.configuration import TSDocTagSyntaxKind
from pytsdoc.messages import TSDocMessageId
from pytsdoc.nodes import (DocBlockTag, DocCodeSpan, DocDeclarationReference, DocErrorText,
                           DocEscapedText, DocFencedCode, DocHtmlAttribute, DocHtmlEndTag,
                           DocHtmlStartTag, DocInheritDocTag, DocInlineTag, DocLinkTag,
                           DocMemberIdentifier, DocMemberReference, DocMemberSelector,
                           DocMemberSymbol, DocNode, DocParamBlock, DocPlainText, DocSoftBreak,
                           EscapeStyle)
from pytsdoc.stringchecks import (explain_if_invalid_html_name, explain_if_invalid_import_path,
                                  explain_if_invalid_link_url, explain_if_invalid_package_name,
                                  explain_if_invalid_tsdoc_tag_name,
                                  explain_if_invalid_unquoted_identifier,
                                  explain_if_invalid_unquoted_member_identifier)
from pytsdoc.tokenizer import Token, Tokenizer, TokenKind
from pytsdoc.tokenreader import TokenReader, TokenSequence

if TYPE_CHECKING:
    from pytsdoc.parser import ParserContext


@attr.s(auto_attribs=True, frozen=True)
class _Failure:
    """
    Returned by the sub-parsers that let their caller decide how much to
    backtrack.
    """
    message_id: TSDocMessageId
    message: str
    location: TokenSequence


# Tokens that end the scan for the "#" of a declaration reference.
_DECLARATION_REFERENCE_STOP_KINDS = frozenset([
    TokenKind.DoubleQuote, TokenKind.EndOfInput, TokenKind.LeftCurlyBracket,
    TokenKind.LeftParenthesis, TokenKind.LeftSquareBracket, TokenKind.Newline,
    TokenKind.Pipe, TokenKind.RightCurlyBracket, TokenKind.RightParenthesis,
    TokenKind.RightSquareBracket, TokenKind.SingleQuote, TokenKind.Spacing,
])

# Tokens that start a member reference.
_MEMBER_REFERENCE_START_KINDS = frozenset([
    TokenKind.Period, TokenKind.LeftParenthesis, TokenKind.AsciiWord, TokenKind.Colon,
    TokenKind.LeftSquareBracket, TokenKind.DoubleQuote,
])

# Tokens that end a destination: a URL or a declaration reference in the newer notation.
_DESTINATION_STOP_KINDS = frozenset([
    TokenKind.Spacing, TokenKind.Newline, TokenKind.EndOfInput, TokenKind.Pipe,
    TokenKind.RightCurlyBracket,
])

_SPACING_KINDS = frozenset([TokenKind.Spacing, TokenKind.Newline])

_PARAM_TAG_NAMES = frozenset(['@PARAM', '@TYPEPARAM'])


class NodeParser:
    """
    Parses the tokens of a L{ParserContext}.
    """

    def __init__(self, parser_context: 'ParserContext'):
        self._parser_context = parser_context
        self._configuration = parser_context.configuration
        self._nodes: List[DocNode] = []
        self._found_inherit_doc_tag = False

    def parse(self) -> List[DocNode]:
        """
        @return: The verbatim nodes, in source order.  Together they hold
            every token of the input except the final C{EndOfInput}.
        """
        token_reader = TokenReader(self._parser_context)

        while True:
            kind = token_reader.peek_token_kind()

            if kind is TokenKind.EndOfInput:
                break

            elif kind is TokenKind.Newline:
                self._push_accumulated_plain_text(token_reader)
                token_reader.read_token()
                self._nodes.append(DocSoftBreak(
                    self._configuration,
                    soft_break_excerpt=token_reader.extract_accumulated_sequence()))

            elif kind is TokenKind.Backslash:
                self._push_accumulated_plain_text(token_reader)
                self._nodes.append(self._parse_backslash_escape(token_reader))

            elif kind is TokenKind.AtSign:
                self._push_accumulated_plain_text(token_reader)
                self._nodes.append(self._parse_block(token_reader))

            elif kind is TokenKind.LeftCurlyBracket:
                self._push_accumulated_plain_text(token_reader)
                marker = token_reader.create_marker()
                doc_node = self._parse_inline_tag(token_reader)

                if isinstance(doc_node, DocInheritDocTag):
                    # @inheritDoc replaces the whole comment, so only one is allowed
                    if self._found_inherit_doc_tag:
                        doc_node = self._backtrack_and_create_error_range(
                            token_reader, marker, token_reader.create_marker() - 1,
                            TSDocMessageId.ExtraInheritDocTag,
                            'A doc comment cannot have more than one @inheritDoc tag')
                    self._found_inherit_doc_tag = True
                self._nodes.append(doc_node)

            elif kind is TokenKind.RightCurlyBracket:
                self._push_accumulated_plain_text(token_reader)
                self._nodes.append(self._create_error(
                    token_reader, TSDocMessageId.EscapeRightBrace,
                    'The "}" character should be escaped using a backslash to avoid confusion '
                    'with a TSDoc inline tag'))

            elif kind is TokenKind.LessThan:
                self._push_accumulated_plain_text(token_reader)
                if token_reader.peek_token_after_kind() is TokenKind.Slash:
                    self._nodes.append(self._parse_html_end_tag(token_reader))
                else:
                    self._nodes.append(self._parse_html_start_tag(token_reader))

            elif kind is TokenKind.GreaterThan:
                self._push_accumulated_plain_text(token_reader)
                self._nodes.append(self._create_error(
                    token_reader, TSDocMessageId.EscapeGreaterThan,
                    'The ">" character should be escaped using a backslash to avoid confusion '
                    'with an HTML tag'))

            elif kind is TokenKind.Backtick:
                self._push_accumulated_plain_text(token_reader)
                if token_reader.peek_token_after_kind() is TokenKind.Backtick \
                        and token_reader.peek_token_after_after_kind() is TokenKind.Backtick:
                    self._nodes.append(self._parse_fenced_code(token_reader))
                else:
                    self._nodes.append(self._parse_code_span(token_reader))

            else:
                # Anything else is plain text
                token_reader.read_token()

        self._push_accumulated_plain_text(token_reader)
        return self._nodes

    def _push_accumulated_plain_text(self, token_reader: TokenReader) -> None:
        if not token_reader.is_accumulated_sequence_empty():
            self._nodes.append(DocPlainText(
                self._configuration, text_excerpt=token_reader.extract_accumulated_sequence()))

    ##################################################
    ## Escapes and block tags

    def _parse_backslash_escape(self, token_reader: TokenReader) -> DocNode:
        token_reader.assert_accumulated_sequence_is_empty()
        marker = token_reader.create_marker()

        token_reader.read_token()  # the backslash

        if token_reader.peek_token_kind() is TokenKind.EndOfInput:
            return self._backtrack_and_create_error(
                token_reader, marker, TSDocMessageId.UnnecessaryBackslash,
                'A backslash must precede another character that is being escaped')

        escaped_token = token_reader.read_token()

        # As in CommonMark, only punctuation can be escaped.
        if not Tokenizer.is_punctuation(escaped_token.kind):
            return self._backtrack_and_create_error(
                token_reader, marker, TSDocMessageId.UnnecessaryBackslash,
                'A backslash can only be used to escape a punctuation character')

        return DocEscapedText(self._configuration, EscapeStyle.CommonMarkBackslash,
                              str(escaped_token),
                              encoded_text_excerpt=token_reader.extract_accumulated_sequence())

    def _parse_block(self, token_reader: TokenReader) -> DocNode:
        """
        Parse a block tag, and the header of a C{@param} block if the tag
        is defined as one.
        """
        doc_node = self._parse_block_tag(token_reader)
        if not isinstance(doc_node, DocBlockTag):
            return doc_node

        tag_definition = self._configuration.try_get_tag_definition_with_upper_case(
            doc_node.tag_name_with_upper_case)
        if tag_definition is not None \
                and tag_definition.syntax_kind is TSDocTagSyntaxKind.BlockTag \
                and tag_definition.tag_name_with_upper_case in _PARAM_TAG_NAMES:
            return self._parse_param_block(token_reader, doc_node, tag_definition.tag_name)
        return doc_node

    def _parse_block_tag(self, token_reader: TokenReader) -> DocNode:
        token_reader.assert_accumulated_sequence_is_empty()
        marker = token_reader.create_marker()

        if token_reader.peek_token_kind() is not TokenKind.AtSign:
            return self._backtrack_and_create_error(
                token_reader, marker, TSDocMessageId.MissingTag,
                'Expecting a TSDoc tag starting with "@"')

        # "@one" is a tag at the start of a line, but "@one@two" is an error:
        # it should be "@one @two", or "\@one\@two" for literal text.
        if token_reader.peek_previous_token_kind() not in (TokenKind.EndOfInput,
                                                           TokenKind.Spacing,
                                                           TokenKind.Newline):
            return self._backtrack_and_create_error(
                token_reader, marker, TSDocMessageId.AtSignInWord,
                'The "@" character looks like part of a TSDoc tag; use a backslash to escape it')

        tag_name = str(token_reader.read_token())

        if token_reader.peek_token_kind() is not TokenKind.AsciiWord:
            return self._backtrack_and_create_error(
                token_reader, marker, TSDocMessageId.AtSignWithoutTagName,
                'Expecting a TSDoc tag name after "@"; if it is not a tag, use a backslash '
                'to escape this character')

        tag_name_marker = token_reader.create_marker()

        while token_reader.peek_token_kind() is TokenKind.AsciiWord:
            tag_name += str(token_reader.read_token())

        if token_reader.peek_token_kind() not in (TokenKind.Spacing, TokenKind.Newline,
                                                  TokenKind.EndOfInput):
            bad_character = str(token_reader.peek_token().range)[0]
            return self._backtrack_and_create_error(
                token_reader, marker, TSDocMessageId.CharactersAfterBlockTag,
                f'The token "{tag_name}" looks like a TSDoc tag but contains an invalid '
                f'character {json.dumps(bad_character)}; if it is not a tag, use a backslash '
                'to escape the "@"')

        if explain_if_invalid_tsdoc_tag_name(tag_name):
            failure = self._create_failure_for_tokens_since(
                token_reader, TSDocMessageId.MalformedTagName,
                'A TSDoc tag name must start with a letter and contain only letters and numbers',
                tag_name_marker)
            return self._backtrack_and_create_error_for_failure(token_reader, marker, '', failure)

        return DocBlockTag(self._configuration, tag_name,
                           tag_name_excerpt=token_reader.extract_accumulated_sequence())

    ##################################################
    ## @param blocks

    def _parse_param_block(self, token_reader: TokenReader, block_tag: DocBlockTag,
                           tag_name: str) -> DocParamBlock:
        start_marker = token_reader.create_marker()

        spacing_before_parameter_name = self._try_read_spacing_and_newlines(token_reader)

        # "@param {type} name" is JSDoc, tolerated with a warning
        jsdoc_type_before_parameter_name = self._try_parse_unsupported_jsdoc_type(
            token_reader, block_tag, tag_name)

        # "@param [name]" is a JSDoc optional parameter
        jsdoc_optional_name_open: Optional[TokenSequence] = None
        if token_reader.peek_token_kind() is TokenKind.LeftSquareBracket:
            token_reader.read_token()
            jsdoc_optional_name_open = token_reader.extract_accumulated_sequence()

        parameter_name = ''
        while token_reader.peek_token_kind() in (TokenKind.AsciiWord, TokenKind.Period,
                                                 TokenKind.DollarSign):
            parameter_name += str(token_reader.read_token())

        explanation = explain_if_invalid_unquoted_identifier(parameter_name)
        if explanation is not None:
            token_reader.backtrack_to_marker(start_marker)

            if parameter_name:
                message = (f'The {tag_name} block should be followed by a valid parameter name: '
                           f'{explanation}')
            else:
                message = f'The {tag_name} block should be followed by a parameter name'
            self._parser_context.log.add_message_for_token_sequence(
                TSDocMessageId.ParamTagWithInvalidName, message,
                block_tag.get_token_sequence(), block_tag)
            return DocParamBlock(self._configuration, block_tag, '')

        parameter_name_excerpt = token_reader.extract_accumulated_sequence()

        jsdoc_optional_name_rest: Optional[TokenSequence] = None
        if jsdoc_optional_name_open is not None:
            jsdoc_optional_name_rest = self._try_parse_jsdoc_optional_name_rest(token_reader)

            error_sequence = jsdoc_optional_name_open
            if jsdoc_optional_name_rest is not None:
                error_sequence = jsdoc_optional_name_open.get_new_sequence(
                    jsdoc_optional_name_open.start_index, jsdoc_optional_name_rest.end_index)

            self._parser_context.log.add_message_for_token_sequence(
                TSDocMessageId.ParamTagWithInvalidOptionalName,
                f"The {tag_name} should not include a JSDoc-style optional name; "
                "it must not be enclosed in '[ ]' brackets.",
                error_sequence, block_tag)

        spacing_after_parameter_name = self._try_read_spacing_and_newlines(token_reader)

        # "@param name {type}"
        jsdoc_type_after_parameter_name = self._try_parse_unsupported_jsdoc_type(
            token_reader, block_tag, tag_name)

        hyphen: Optional[TokenSequence] = None
        spacing_after_hyphen: Optional[TokenSequence] = None
        jsdoc_type_after_hyphen: Optional[TokenSequence] = None
        if token_reader.peek_token_kind() is TokenKind.Hyphen:
            token_reader.read_token()
            hyphen = token_reader.extract_accumulated_sequence()
            spacing_after_hyphen = self._try_read_spacing_and_newlines(token_reader)

            # "@param name - {type}"
            jsdoc_type_after_hyphen = self._try_parse_unsupported_jsdoc_type(
                token_reader, block_tag, tag_name)
        else:
            self._parser_context.log.add_message_for_token_sequence(
                TSDocMessageId.ParamTagMissingHyphen,
                f'The {tag_name} block should be followed by a parameter name and then a hyphen',
                block_tag.get_token_sequence(), block_tag)

        return DocParamBlock(
            self._configuration, block_tag,
            spacing_before_parameter_name_excerpt=spacing_before_parameter_name,
            unsupported_jsdoc_type_before_parameter_name_excerpt=jsdoc_type_before_parameter_name,
            unsupported_jsdoc_optional_name_open_excerpt=jsdoc_optional_name_open,
            parameter_name_excerpt=parameter_name_excerpt,
            unsupported_jsdoc_optional_name_rest_excerpt=jsdoc_optional_name_rest,
            spacing_after_parameter_name_excerpt=spacing_after_parameter_name,
            unsupported_jsdoc_type_after_parameter_name_excerpt=jsdoc_type_after_parameter_name,
            hyphen_excerpt=hyphen,
            spacing_after_hyphen_excerpt=spacing_after_hyphen,
            unsupported_jsdoc_type_after_hyphen_excerpt=jsdoc_type_after_hyphen)

    def _try_parse_jsdoc_type_or_value_rest(self, token_reader: TokenReader,
                                            open_kind: TokenKind, close_kind: TokenKind,
                                            start_marker: int) -> Optional[TokenSequence]:
        """
        Read the rest of a JSDoc expression like C{string}} or C{="]"]},
        up to the delimiter that balances the one already read.  Nested
        delimiters and quoted strings are skipped.

        @return: The tokens, or C{None} after rewinding to C{start_marker}
            if the input ends first.
        """
        quote_kind: Optional[TokenKind] = None
        open_count = 1
        while open_count > 0:
            token_kind = token_reader.peek_token_kind()
            if token_kind is open_kind:
                if quote_kind is None:
                    open_count += 1
            elif token_kind is close_kind:
                if quote_kind is None:
                    open_count -= 1
            elif token_kind is TokenKind.Backslash:
                # A backslash escapes the next character inside a string
                if quote_kind is not None:
                    token_reader.read_token()
                    token_kind = token_reader.peek_token_kind()
            elif token_kind in (TokenKind.DoubleQuote, TokenKind.SingleQuote, TokenKind.Backtick):
                if quote_kind is token_kind:
                    quote_kind = None
                elif quote_kind is None:
                    quote_kind = token_kind

            if token_kind is TokenKind.EndOfInput:
                token_reader.backtrack_to_marker(start_marker)
                return None
            token_reader.read_token()

        return token_reader.try_extract_accumulated_sequence()

    def _try_parse_unsupported_jsdoc_type(self, token_reader: TokenReader,
                                          block_tag: DocBlockTag,
                                          tag_name: str) -> Optional[TokenSequence]:
        """
        Read a JSDoc type like C{{string}}, and the spacing after it.
        """
        token_reader.assert_accumulated_sequence_is_empty()

        # "{@" starts an inline tag, not a type
        if token_reader.peek_token_kind() is not TokenKind.LeftCurlyBracket \
                or token_reader.peek_token_after_kind() is TokenKind.AtSign:
            return None

        start_marker = token_reader.create_marker()
        token_reader.read_token()  # the "{"

        jsdoc_type = self._try_parse_jsdoc_type_or_value_rest(
            token_reader, TokenKind.LeftCurlyBracket, TokenKind.RightCurlyBracket, start_marker)

        if jsdoc_type is not None:
            self._parser_context.log.add_message_for_token_sequence(
                TSDocMessageId.ParamTagWithInvalidType,
                f"The {tag_name} block should not include a JSDoc-style '{{type}}'",
                jsdoc_type, block_tag)

            spacing = self._try_read_spacing_and_newlines(token_reader)
            if spacing is not None:
                jsdoc_type = jsdoc_type.get_new_sequence(jsdoc_type.start_index, spacing.end_index)
        return jsdoc_type

    def _try_parse_jsdoc_optional_name_rest(self, token_reader: TokenReader
                                            ) -> Optional[TokenSequence]:
        """
        Read the end of a JSDoc optional name, like C{]} or C{=[]]} in
        C{@param [x=[]] - the X value}.
        """
        token_reader.assert_accumulated_sequence_is_empty()
        if token_reader.peek_token_kind() is TokenKind.EndOfInput:
            return None
        start_marker = token_reader.create_marker()
        return self._try_parse_jsdoc_type_or_value_rest(
            token_reader, TokenKind.LeftSquareBracket, TokenKind.RightSquareBracket, start_marker)

    ##################################################
    ## Inline tags

    def _parse_inline_tag(self, token_reader: TokenReader) -> DocNode:
        token_reader.assert_accumulated_sequence_is_empty()
        marker = token_reader.create_marker()

        if token_reader.peek_token_kind() is not TokenKind.LeftCurlyBracket:
            return self._backtrack_and_create_error(
                token_reader, marker, TSDocMessageId.MissingTag,
                'Expecting a TSDoc tag starting with "{"')
        token_reader.read_token()

        opening_delimiter = token_reader.extract_accumulated_sequence()

        # Errors after this point include both the "{" and the "@", otherwise
        # the main loop would read the "@" as a block tag.
        at_sign_marker = token_reader.create_marker()

        if token_reader.peek_token_kind() is not TokenKind.AtSign:
            return self._backtrack_and_create_error(
                token_reader, marker, TSDocMessageId.MalformedInlineTag,
                'Expecting a TSDoc tag starting with "{@"')

        tag_name = str(token_reader.read_token())
        while token_reader.peek_token_kind() is TokenKind.AsciiWord:
            tag_name += str(token_reader.read_token())

        if tag_name == '@':
            failure = self._create_failure_for_tokens_since(
                token_reader, TSDocMessageId.MalformedInlineTag,
                'Expecting a TSDoc inline tag name after the "{@" characters', at_sign_marker)
            return self._backtrack_and_create_error_range_for_failure(
                token_reader, marker, at_sign_marker, '', failure)

        if explain_if_invalid_tsdoc_tag_name(tag_name):
            failure = self._create_failure_for_tokens_since(
                token_reader, TSDocMessageId.MalformedTagName,
                'A TSDoc tag name must start with a letter and contain only letters and numbers',
                at_sign_marker)
            return self._backtrack_and_create_error_range_for_failure(
                token_reader, marker, at_sign_marker, '', failure)

        tag_name_excerpt = token_reader.extract_accumulated_sequence()

        spacing_after_tag_name = self._try_read_spacing_and_newlines(token_reader)

        # "{@tag}" is fine, "{@tag!}" is not
        if spacing_after_tag_name is None \
                and token_reader.peek_token_kind() is not TokenKind.RightCurlyBracket:
            bad_character = str(token_reader.peek_token().range)[:1]
            failure = self._create_failure_for_token(
                token_reader, TSDocMessageId.CharactersAfterInlineTag,
                f'The character {json.dumps(bad_character)} cannot appear after the TSDoc tag '
                'name; expecting a space')
            return self._backtrack_and_create_error_range_for_failure(
                token_reader, marker, at_sign_marker, '', failure)

        while True:
            kind = token_reader.peek_token_kind()
            if kind is TokenKind.EndOfInput:
                return self._backtrack_and_create_error_range(
                    token_reader, marker, at_sign_marker,
                    TSDocMessageId.InlineTagMissingRightBrace,
                    'The TSDoc inline tag name is missing its closing "}"')
            elif kind is TokenKind.Backslash:
                # A "}" in the content must be escaped with a backslash
                token_reader.read_token()
                if not Tokenizer.is_punctuation(token_reader.peek_token_kind()):
                    failure = self._create_failure_for_token(
                        token_reader, TSDocMessageId.UnnecessaryBackslash,
                        'A backslash can only be used to escape a punctuation character')
                    return self._backtrack_and_create_error_range_for_failure(
                        token_reader, marker, at_sign_marker,
                        'Error reading inline TSDoc tag: ', failure)
                token_reader.read_token()
            elif kind is TokenKind.LeftCurlyBracket:
                failure = self._create_failure_for_token(
                    token_reader, TSDocMessageId.InlineTagUnescapedBrace,
                    'The "{" character must be escaped with a backslash when used inside '
                    'a TSDoc inline tag')
                return self._backtrack_and_create_error_range_for_failure(
                    token_reader, marker, at_sign_marker, '', failure)
            elif kind is TokenKind.RightCurlyBracket:
                break
            else:
                token_reader.read_token()

        tag_content_excerpt = token_reader.try_extract_accumulated_sequence()

        token_reader.read_token()  # the "}"
        closing_delimiter = token_reader.extract_accumulated_sequence()

        common_parameters = dict(
            opening_delimiter_excerpt=opening_delimiter,
            tag_name_excerpt=tag_name_excerpt,
            spacing_after_tag_name_excerpt=spacing_after_tag_name,
            closing_delimiter_excerpt=closing_delimiter,
        )
        error_tag = DocInlineTag(self._configuration, tag_name,
                                 tag_content_excerpt=tag_content_excerpt, **common_parameters)

        # The content is parsed again by a reader that stops at the "}"
        embedded_token_reader = TokenReader(
            self._parser_context,
            tag_content_excerpt or TokenSequence.create_empty(self._parser_context))

        tag_name_with_upper_case = tag_name.upper()
        try:
            if tag_name_with_upper_case == '@INHERITDOC':
                return self._parse_inherit_doc_tag(tag_name, common_parameters, error_tag,
                                                   embedded_token_reader)
            elif tag_name_with_upper_case == '@LINK':
                return self._parse_link_tag(tag_name, common_parameters, error_tag,
                                            tag_content_excerpt, embedded_token_reader)
            else:
                return error_tag
        except SyntaxError as ex:
            # Raised by DeclarationReference.parse()
            if tag_name_with_upper_case == '@INHERITDOC':
                message_id = TSDocMessageId.InheritDocTagSyntax
            else:
                message_id = TSDocMessageId.LinkTagDestinationSyntax
            text_excerpt = TokenSequence(self._parser_context, marker,
                                         token_reader.create_marker())
            return self._new_error_text(text_excerpt, message_id,
                                        f'Invalid declaration reference: {ex}')

    def _parse_inherit_doc_tag(self, tag_name: str, common_parameters: dict,
                               error_tag: DocInlineTag,
                               embedded_token_reader: TokenReader) -> DocNode:
        declaration_reference: Optional[DocDeclarationReference] = None

        if embedded_token_reader.peek_token_kind() is not TokenKind.EndOfInput:
            declaration_reference = self._parse_declaration_reference(
                embedded_token_reader, common_parameters['tag_name_excerpt'], error_tag)
            if declaration_reference is None:
                return error_tag

            if embedded_token_reader.peek_token_kind() is not TokenKind.EndOfInput:
                embedded_token_reader.read_token()
                self._parser_context.log.add_message_for_token_sequence(
                    TSDocMessageId.InheritDocTagSyntax,
                    'Unexpected character after declaration reference',
                    embedded_token_reader.extract_accumulated_sequence(), error_tag)
                return error_tag

        return DocInheritDocTag(self._configuration, tag_name, declaration_reference,
                                **common_parameters)

    def _parse_link_tag(self, tag_name: str, common_parameters: dict,
                        error_tag: DocInlineTag,
                        tag_content_excerpt: Optional[TokenSequence],
                        embedded_token_reader: TokenReader) -> DocNode:
        tag_name_excerpt: TokenSequence = common_parameters['tag_name_excerpt']

        if tag_content_excerpt is None:
            self._parser_context.log.add_message_for_token_sequence(
                TSDocMessageId.LinkTagEmpty, 'The @link tag content is missing',
                tag_name_excerpt, error_tag)
            return error_tag

        # A URL is told apart from a declaration reference by "//" or
        # "scheme://".  Exotic URLs can use an HTML <a> tag instead.
        looks_like_url = (embedded_token_reader.peek_token_kind() is TokenKind.Slash
                          and embedded_token_reader.peek_token_after_kind() is TokenKind.Slash)
        marker = embedded_token_reader.create_marker()

        done = looks_like_url
        while not done:
            kind = embedded_token_reader.peek_token_kind()
            if kind in (TokenKind.AsciiWord, TokenKind.Period, TokenKind.Hyphen, TokenKind.Plus):
                embedded_token_reader.read_token()
            elif kind is TokenKind.Colon:
                embedded_token_reader.read_token()
                looks_like_url = (
                    embedded_token_reader.peek_token_kind() is TokenKind.Slash
                    and embedded_token_reader.peek_token_after_kind() is TokenKind.Slash)
                done = True
            else:
                done = True

        embedded_token_reader.backtrack_to_marker(marker)

        url_destination: Optional[TokenSequence] = None
        spacing_after_destination: Optional[TokenSequence] = None
        code_destination: Optional[DocDeclarationReference] = None

        if looks_like_url:
            url_destination = self._parse_link_tag_url_destination(embedded_token_reader,
                                                                   error_tag)
            if url_destination is None:
                return error_tag
            spacing_after_destination = self._try_read_spacing_and_newlines(embedded_token_reader)
        else:
            code_destination = self._parse_declaration_reference(
                embedded_token_reader, tag_name_excerpt, error_tag)
            if code_destination is None:
                return error_tag

        if embedded_token_reader.peek_token_kind() is TokenKind.Spacing:
            raise RuntimeError('Unconsumed spacing encountered after construct')

        pipe: Optional[TokenSequence] = None
        spacing_after_pipe: Optional[TokenSequence] = None
        link_text: Optional[TokenSequence] = None
        spacing_after_link_text: Optional[TokenSequence] = None

        if embedded_token_reader.peek_token_kind() is TokenKind.Pipe:
            embedded_token_reader.read_token()
            pipe = embedded_token_reader.extract_accumulated_sequence()
            spacing_after_pipe = self._try_read_spacing_and_newlines(embedded_token_reader)

            # The embedded reader reports EndOfInput at the "}"
            spacing_after_link_text_marker: Optional[int] = None
            while True:
                kind = embedded_token_reader.peek_token_kind()
                if kind is TokenKind.EndOfInput:
                    break
                elif kind in (TokenKind.Pipe, TokenKind.LeftCurlyBracket):
                    bad_character = str(embedded_token_reader.read_token())
                    self._parser_context.log.add_message_for_token_sequence(
                        TSDocMessageId.LinkTagUnescapedText,
                        f'The "{bad_character}" character may not be used in the link text '
                        'without escaping it',
                        embedded_token_reader.extract_accumulated_sequence(), error_tag)
                    return error_tag
                elif kind in _SPACING_KINDS:
                    embedded_token_reader.read_token()
                else:
                    spacing_after_link_text_marker = embedded_token_reader.create_marker() + 1
                    embedded_token_reader.read_token()

            link_text_and_spacing = embedded_token_reader.try_extract_accumulated_sequence()
            if link_text_and_spacing is not None:
                if spacing_after_link_text_marker is None:
                    spacing_after_link_text = link_text_and_spacing
                elif spacing_after_link_text_marker >= link_text_and_spacing.end_index:
                    link_text = link_text_and_spacing
                else:
                    link_text = link_text_and_spacing.get_new_sequence(
                        link_text_and_spacing.start_index, spacing_after_link_text_marker)
                    spacing_after_link_text = link_text_and_spacing.get_new_sequence(
                        spacing_after_link_text_marker, link_text_and_spacing.end_index)

        elif embedded_token_reader.peek_token_kind() is not TokenKind.EndOfInput:
            embedded_token_reader.read_token()
            self._parser_context.log.add_message_for_token_sequence(
                TSDocMessageId.LinkTagDestinationSyntax,
                'Unexpected character after link destination',
                embedded_token_reader.extract_accumulated_sequence(), error_tag)
            return error_tag

        return DocLinkTag(self._configuration, tag_name, code_destination,
                          url_destination_excerpt=url_destination,
                          spacing_after_destination_excerpt=spacing_after_destination,
                          pipe_excerpt=pipe,
                          spacing_after_pipe_excerpt=spacing_after_pipe,
                          link_text_excerpt=link_text,
                          spacing_after_link_text_excerpt=spacing_after_link_text,
                          **common_parameters)

    def _parse_link_tag_url_destination(self, embedded_token_reader: TokenReader,
                                        node_for_error_context: DocNode
                                        ) -> Optional[TokenSequence]:
        # Everything up to the next space; this is not a real URI parser.
        url_destination = ''
        while embedded_token_reader.peek_token_kind() not in _DESTINATION_STOP_KINDS:
            url_destination += str(embedded_token_reader.read_token())

        if not url_destination:
            raise RuntimeError('Missing URL in _parse_link_tag_url_destination()')

        url_destination_excerpt = embedded_token_reader.extract_accumulated_sequence()

        explanation = explain_if_invalid_link_url(url_destination)
        if explanation:
            self._parser_context.log.add_message_for_token_sequence(
                TSDocMessageId.LinkTagInvalidUrl, explanation,
                url_destination_excerpt, node_for_error_context)
            return None
        return url_destination_excerpt

    ##################################################
    ## Declaration references

    def _parse_declaration_reference(self, token_reader: TokenReader,
                                     token_sequence_for_error_context: TokenSequence,
                                     node_for_error_context: DocNode,
                                     allow_beta: bool = True
                                     ) -> Optional[DocDeclarationReference]:
        """
        Parse a declaration reference like C{my-package/path#MyClass.member}.

        A reference containing a C{"!"} is in the newer notation, and is
        parsed by L{DeclarationReference.parse}.

        @return: The reference, or C{None} after logging a message.
        @raises SyntaxError: If a reference in the newer notation is malformed.
        """
        token_reader.assert_accumulated_sequence_is_empty()

        if allow_beta and self._looks_like_beta_reference(token_reader):
            return self._parse_beta_declaration_reference(token_reader)

        # A package name may contain characters that look like a member
        # reference, so scan ahead for a "#" outside of quotes.
        marker = token_reader.create_marker()
        has_hash = False

        # Forgetting the "#" is a common mistake, betrayed by "@" or "/"
        # near the start, which are not allowed in member references.
        looking_for_import_characters = True
        saw_import_characters = False

        while True:
            kind = token_reader.peek_token_kind()
            if kind in _DECLARATION_REFERENCE_STOP_KINDS:
                break
            elif kind is TokenKind.PoundSymbol:
                has_hash = True
                break
            elif kind in (TokenKind.Slash, TokenKind.AtSign):
                if looking_for_import_characters:
                    saw_import_characters = True
                token_reader.read_token()
            elif kind in (TokenKind.AsciiWord, TokenKind.Period, TokenKind.Hyphen):
                token_reader.read_token()
            else:
                looking_for_import_characters = False
                token_reader.read_token()

        if not has_hash and saw_import_characters:
            self._parser_context.log.add_message_for_token_sequence(
                TSDocMessageId.ReferenceMissingHash,
                'The declaration reference appears to contain a package name or import path, '
                'but it is missing the "#" delimiter',
                token_reader.extract_accumulated_sequence(), node_for_error_context)
            return None

        token_reader.backtrack_to_marker(marker)

        package_name: Optional[TokenSequence] = None
        import_path: Optional[TokenSequence] = None
        import_hash: Optional[TokenSequence] = None
        spacing_after_import_hash: Optional[TokenSequence] = None

        if has_hash:
            # A leading "." starts a relative path, not a package name
            if token_reader.peek_token_kind() is not TokenKind.Period:
                scoped_package_name = token_reader.peek_token_kind() is TokenKind.AtSign
                finished_scope = False

                while True:
                    kind = token_reader.peek_token_kind()
                    if kind is TokenKind.EndOfInput:
                        raise RuntimeError('Expecting pound symbol')
                    elif kind is TokenKind.Slash:
                        # "@scope/name/path" stops at the second slash
                        if scoped_package_name and not finished_scope:
                            token_reader.read_token()
                            finished_scope = True
                        else:
                            break
                    elif kind is TokenKind.PoundSymbol:
                        break
                    else:
                        token_reader.read_token()

                if not token_reader.is_accumulated_sequence_empty():
                    package_name = token_reader.extract_accumulated_sequence()
                    explanation = explain_if_invalid_package_name(str(package_name))
                    if explanation:
                        self._parser_context.log.add_message_for_token_sequence(
                            TSDocMessageId.ReferenceMalformedPackageName, explanation,
                            package_name, node_for_error_context)
                        return None

            while True:
                kind = token_reader.peek_token_kind()
                if kind is TokenKind.EndOfInput:
                    raise RuntimeError('Expecting pound symbol')
                elif kind is TokenKind.PoundSymbol:
                    break
                token_reader.read_token()

            if not token_reader.is_accumulated_sequence_empty():
                import_path = token_reader.extract_accumulated_sequence()
                explanation = explain_if_invalid_import_path(str(import_path),
                                                             package_name is not None)
                if explanation:
                    self._parser_context.log.add_message_for_token_sequence(
                        TSDocMessageId.ReferenceMalformedImportPath, explanation,
                        import_path, node_for_error_context)
                    return None

            token_reader.read_token()  # the "#"
            import_hash = token_reader.extract_accumulated_sequence()

            spacing_after_import_hash = self._try_read_spacing_and_newlines(token_reader)

            if package_name is None and import_path is None:
                self._parser_context.log.add_message_for_token_sequence(
                    TSDocMessageId.ReferenceHashSyntax,
                    'The hash character must be preceded by a package name or import path',
                    import_hash, node_for_error_context)
                return None

        member_references: List[DocMemberReference] = []
        while token_reader.peek_token_kind() in _MEMBER_REFERENCE_START_KINDS:
            member_reference = self._parse_member_reference(
                token_reader, bool(member_references),
                token_sequence_for_error_context, node_for_error_context)
            if member_reference is None:
                return None
            member_references.append(member_reference)

        if package_name is None and import_path is None and not member_references:
            self._parser_context.log.add_message_for_token_sequence(
                TSDocMessageId.MissingReference, 'Expecting a declaration reference',
                token_sequence_for_error_context, node_for_error_context)
            return None

        return DocDeclarationReference(
            self._configuration,
            member_references=member_references,
            package_name_excerpt=package_name,
            import_path_excerpt=import_path,
            import_hash_excerpt=import_hash,
            spacing_after_import_hash_excerpt=spacing_after_import_hash)

    @staticmethod
    def _looks_like_beta_reference(token_reader: TokenReader) -> bool:
        marker = token_reader.create_marker()
        found = False
        while token_reader.peek_token_kind() not in _DESTINATION_STOP_KINDS:
            if str(token_reader.read_token()) == '!':
                found = True
                break
        token_reader.backtrack_to_marker(marker)
        return found

    def _parse_beta_declaration_reference(self, token_reader: TokenReader
                                          ) -> DocDeclarationReference:
        while token_reader.peek_token_kind() not in _DESTINATION_STOP_KINDS:
            token_reader.read_token()
        beta_reference_excerpt = token_reader.extract_accumulated_sequence()

        beta_reference = DeclarationReference.parse(str(beta_reference_excerpt))

        return DocDeclarationReference(
            self._configuration,
            beta_reference=beta_reference,
            beta_reference_excerpt=beta_reference_excerpt,
            spacing_after_beta_reference_excerpt=self._try_read_spacing_and_newlines(token_reader))

    def _parse_member_reference(self, token_reader: TokenReader, expecting_dot: bool,
                                token_sequence_for_error_context: TokenSequence,
                                node_for_error_context: DocNode) -> Optional[DocMemberReference]:
        log = self._parser_context.log

        dot: Optional[TokenSequence] = None
        spacing_after_dot: Optional[TokenSequence] = None
        if expecting_dot:
            if token_reader.peek_token_kind() is not TokenKind.Period:
                log.add_message_for_token_sequence(
                    TSDocMessageId.ReferenceMissingDot,
                    'Expecting a period before the next component of a declaration reference',
                    token_sequence_for_error_context, node_for_error_context)
                return None
            token_reader.read_token()
            dot = token_reader.extract_accumulated_sequence()
            spacing_after_dot = self._try_read_spacing_and_newlines(token_reader)

        left_parenthesis: Optional[TokenSequence] = None
        spacing_after_left_parenthesis: Optional[TokenSequence] = None
        if token_reader.peek_token_kind() is TokenKind.LeftParenthesis:
            token_reader.read_token()
            left_parenthesis = token_reader.extract_accumulated_sequence()
            spacing_after_left_parenthesis = self._try_read_spacing_and_newlines(token_reader)

        member_symbol: Optional[DocMemberSymbol] = None
        member_identifier: Optional[DocMemberIdentifier] = None
        if token_reader.peek_token_kind() is TokenKind.LeftSquareBracket:
            member_symbol = self._parse_member_symbol(token_reader, node_for_error_context)
            if member_symbol is None:
                return None
        else:
            member_identifier = self._parse_member_identifier(
                token_reader, token_sequence_for_error_context, node_for_error_context)
            if member_identifier is None:
                return None
        spacing_after_member = self._try_read_spacing_and_newlines(token_reader)

        colon: Optional[TokenSequence] = None
        spacing_after_colon: Optional[TokenSequence] = None
        selector: Optional[DocMemberSelector] = None
        spacing_after_selector: Optional[TokenSequence] = None
        if token_reader.peek_token_kind() is TokenKind.Colon:
            token_reader.read_token()
            colon = token_reader.extract_accumulated_sequence()
            spacing_after_colon = self._try_read_spacing_and_newlines(token_reader)

            if left_parenthesis is None:
                log.add_message_for_token_sequence(
                    TSDocMessageId.ReferenceSelectorMissingParens,
                    'Syntax error in declaration reference: the member selector must be '
                    'enclosed in parentheses',
                    colon, node_for_error_context)
                return None

            selector = self._parse_member_selector(token_reader, colon, node_for_error_context)
            if selector is None:
                return None
            spacing_after_selector = self._try_read_spacing_and_newlines(token_reader)

        elif left_parenthesis is not None:
            log.add_message_for_token_sequence(
                TSDocMessageId.ReferenceMissingColon,
                'Expecting a colon after the identifier because the expression is in parentheses',
                left_parenthesis, node_for_error_context)
            return None

        right_parenthesis: Optional[TokenSequence] = None
        spacing_after_right_parenthesis: Optional[TokenSequence] = None
        if left_parenthesis is not None:
            if token_reader.peek_token_kind() is not TokenKind.RightParenthesis:
                log.add_message_for_token_sequence(
                    TSDocMessageId.ReferenceMissingRightParen,
                    'Expecting a matching right parenthesis',
                    left_parenthesis, node_for_error_context)
                return None
            token_reader.read_token()
            right_parenthesis = token_reader.extract_accumulated_sequence()
            spacing_after_right_parenthesis = self._try_read_spacing_and_newlines(token_reader)

        return DocMemberReference(
            self._configuration,
            member_identifier=member_identifier,
            member_symbol=member_symbol,
            selector=selector,
            dot_excerpt=dot,
            spacing_after_dot_excerpt=spacing_after_dot,
            left_parenthesis_excerpt=left_parenthesis,
            spacing_after_left_parenthesis_excerpt=spacing_after_left_parenthesis,
            spacing_after_member_excerpt=spacing_after_member,
            colon_excerpt=colon,
            spacing_after_colon_excerpt=spacing_after_colon,
            spacing_after_selector_excerpt=spacing_after_selector,
            right_parenthesis_excerpt=right_parenthesis,
            spacing_after_right_parenthesis_excerpt=spacing_after_right_parenthesis,
            parsed=True)

    def _parse_member_symbol(self, token_reader: TokenReader,
                             node_for_error_context: DocNode) -> Optional[DocMemberSymbol]:
        if token_reader.peek_token_kind() is not TokenKind.LeftSquareBracket:
            raise RuntimeError('Expecting "["')

        token_reader.read_token()
        left_bracket = token_reader.extract_accumulated_sequence()

        spacing_after_left_bracket = self._try_read_spacing_and_newlines(token_reader)

        declaration_reference = self._parse_declaration_reference(
            token_reader, left_bracket, node_for_error_context, allow_beta=False)
        if declaration_reference is None:
            self._parser_context.log.add_message_for_token_sequence(
                TSDocMessageId.ReferenceSymbolSyntax,
                'Missing declaration reference in symbol reference',
                left_bracket, node_for_error_context)
            return None

        # The declaration reference already read the trailing spacing
        if token_reader.peek_token_kind() is not TokenKind.RightSquareBracket:
            self._parser_context.log.add_message_for_token_sequence(
                TSDocMessageId.ReferenceMissingRightBracket,
                'Missing closing square bracket for symbol reference',
                left_bracket, node_for_error_context)
            return None

        token_reader.read_token()
        right_bracket = token_reader.extract_accumulated_sequence()

        return DocMemberSymbol(self._configuration, declaration_reference,
                               left_bracket_excerpt=left_bracket,
                               spacing_after_left_bracket_excerpt=spacing_after_left_bracket,
                               right_bracket_excerpt=right_bracket)

    def _parse_member_identifier(self, token_reader: TokenReader,
                                 token_sequence_for_error_context: TokenSequence,
                                 node_for_error_context: DocNode
                                 ) -> Optional[DocMemberIdentifier]:
        log = self._parser_context.log

        if token_reader.peek_token_kind() is TokenKind.DoubleQuote:
            token_reader.read_token()
            left_quote = token_reader.extract_accumulated_sequence()

            while token_reader.peek_token_kind() is not TokenKind.DoubleQuote:
                if token_reader.peek_token_kind() is TokenKind.EndOfInput:
                    log.add_message_for_token_sequence(
                        TSDocMessageId.ReferenceMissingQuote,
                        'Unexpected end of input inside quoted member identifier',
                        left_quote, node_for_error_context)
                    return None
                token_reader.read_token()

            if token_reader.is_accumulated_sequence_empty():
                log.add_message_for_token_sequence(
                    TSDocMessageId.ReferenceEmptyIdentifier,
                    'The quoted identifier cannot be empty',
                    left_quote, node_for_error_context)
                return None

            identifier = token_reader.extract_accumulated_sequence()

            token_reader.read_token()  # the closing quote
            right_quote = token_reader.extract_accumulated_sequence()

            return DocMemberIdentifier(self._configuration,
                                       left_quote_excerpt=left_quote,
                                       identifier_excerpt=identifier,
                                       right_quote_excerpt=right_quote)

        while token_reader.peek_token_kind() in (TokenKind.AsciiWord, TokenKind.DollarSign):
            token_reader.read_token()

        if token_reader.is_accumulated_sequence_empty():
            log.add_message_for_token_sequence(
                TSDocMessageId.ReferenceMissingIdentifier,
                'Syntax error in declaration reference: expecting a member identifier',
                token_sequence_for_error_context, node_for_error_context)
            return None

        identifier = token_reader.extract_accumulated_sequence()

        explanation = explain_if_invalid_unquoted_member_identifier(str(identifier))
        if explanation:
            log.add_message_for_token_sequence(
                TSDocMessageId.ReferenceUnquotedIdentifier, explanation,
                identifier, node_for_error_context)
            return None

        return DocMemberIdentifier(self._configuration, identifier_excerpt=identifier)

    def _parse_member_selector(self, token_reader: TokenReader,
                               token_sequence_for_error_context: TokenSequence,
                               node_for_error_context: DocNode) -> Optional[DocMemberSelector]:
        if token_reader.peek_token_kind() is not TokenKind.AsciiWord:
            self._parser_context.log.add_message_for_token_sequence(
                TSDocMessageId.ReferenceMissingLabel,
                'Expecting a selector label after the colon',
                token_sequence_for_error_context, node_for_error_context)
            return None

        token_reader.read_token()
        selector_excerpt = token_reader.extract_accumulated_sequence()

        selector = DocMemberSelector(self._configuration, selector_excerpt=selector_excerpt)
        if selector.error_message:
            self._parser_context.log.add_message_for_token_sequence(
                TSDocMessageId.ReferenceSelectorSyntax, selector.error_message,
                selector_excerpt, node_for_error_context)
            return None
        return selector

    ##################################################
    ## HTML

    def _parse_html_start_tag(self, token_reader: TokenReader) -> DocNode:
        token_reader.assert_accumulated_sequence_is_empty()
        marker = token_reader.create_marker()

        if token_reader.read_token().kind is not TokenKind.LessThan:
            raise RuntimeError('Expecting an HTML tag starting with "<"')

        # No whitespace is allowed after the "<"
        opening_delimiter = token_reader.extract_accumulated_sequence()

        name = self._parse_html_name(token_reader, is_element_name=True)
        if isinstance(name, _Failure):
            return self._backtrack_and_create_error_for_failure(
                token_reader, marker, 'Invalid HTML element: ', name)

        spacing_after_name = self._try_read_spacing_and_newlines(token_reader)

        html_attributes: List[DocHtmlAttribute] = []
        while token_reader.peek_token_kind() is TokenKind.AsciiWord:
            attribute = self._parse_html_attribute(token_reader)
            if isinstance(attribute, _Failure):
                return self._backtrack_and_create_error_for_failure(
                    token_reader, marker, 'The HTML element has an invalid attribute: ', attribute)
            html_attributes.append(attribute)

        token_reader.assert_accumulated_sequence_is_empty()
        end_delimiter_marker = token_reader.create_marker()

        self_closing_tag = False
        if token_reader.peek_token_kind() is TokenKind.Slash:
            token_reader.read_token()
            self_closing_tag = True

        if token_reader.peek_token_kind() is not TokenKind.GreaterThan:
            failure = self._create_failure_for_tokens_since(
                token_reader, TSDocMessageId.HtmlTagMissingGreaterThan,
                'Expecting an attribute or ">" or "/>"', end_delimiter_marker)
            return self._backtrack_and_create_error_for_failure(
                token_reader, marker, 'The HTML tag has invalid syntax: ', failure)
        token_reader.read_token()

        closing_delimiter = token_reader.extract_accumulated_sequence()

        # A newline after the tag is left for the main loop, as a soft break
        return DocHtmlStartTag(self._configuration,
                               html_attributes=html_attributes,
                               self_closing_tag=self_closing_tag,
                               opening_delimiter_excerpt=opening_delimiter,
                               name_excerpt=name,
                               spacing_after_name_excerpt=spacing_after_name,
                               closing_delimiter_excerpt=closing_delimiter)

    def _parse_html_attribute(self, token_reader: TokenReader
                              ) -> Union[DocHtmlAttribute, _Failure]:
        token_reader.assert_accumulated_sequence_is_empty()

        name = self._parse_html_name(token_reader, is_element_name=False)
        if isinstance(name, _Failure):
            return name

        spacing_after_name = self._try_read_spacing_and_newlines(token_reader)

        if token_reader.peek_token_kind() is not TokenKind.Equals:
            return self._create_failure_for_token(
                token_reader, TSDocMessageId.HtmlTagMissingEquals,
                'Expecting "=" after HTML attribute name')
        token_reader.read_token()
        equals = token_reader.extract_accumulated_sequence()

        spacing_after_equals = self._try_read_spacing_and_newlines(token_reader)

        failure = self._parse_html_string(token_reader)
        if failure is not None:
            return failure
        value = token_reader.extract_accumulated_sequence()

        spacing_after_value = self._try_read_spacing_and_newlines(token_reader)

        return DocHtmlAttribute(self._configuration,
                                name_excerpt=name,
                                spacing_after_name_excerpt=spacing_after_name,
                                equals_excerpt=equals,
                                spacing_after_equals_excerpt=spacing_after_equals,
                                value_excerpt=value,
                                spacing_after_value_excerpt=spacing_after_value)

    def _parse_html_string(self, token_reader: TokenReader) -> Optional[_Failure]:
        """
        Read a quoted attribute value into the accumulated sequence.

        @return: C{None} on success.
        """
        marker = token_reader.create_marker()
        quote_kind = token_reader.peek_token_kind()
        if quote_kind not in (TokenKind.DoubleQuote, TokenKind.SingleQuote):
            return self._create_failure_for_token(
                token_reader, TSDocMessageId.HtmlTagMissingString,
                'Expecting an HTML string starting with a single-quote or double-quote character')
        token_reader.read_token()

        while True:
            kind = token_reader.peek_token_kind()
            if kind is quote_kind:
                token_reader.read_token()
                break
            if kind in (TokenKind.EndOfInput, TokenKind.Newline):
                return self._create_failure_for_token(
                    token_reader, TSDocMessageId.HtmlStringMissingQuote,
                    'The HTML string is missing its closing quote', marker)
            token_reader.read_token()

        # The next attribute cannot start right after the quote
        if token_reader.peek_token_kind() is TokenKind.AsciiWord:
            return self._create_failure_for_token(
                token_reader, TSDocMessageId.TextAfterHtmlString,
                'The next character after a closing quote must be spacing or punctuation')
        return None

    def _parse_html_end_tag(self, token_reader: TokenReader) -> DocNode:
        token_reader.assert_accumulated_sequence_is_empty()
        marker = token_reader.create_marker()

        if token_reader.peek_token_kind() is not TokenKind.LessThan:
            return self._backtrack_and_create_error(
                token_reader, marker, TSDocMessageId.MissingHtmlEndTag,
                'Expecting a closing tag starting with "</"')
        token_reader.read_token()

        if token_reader.peek_token_kind() is not TokenKind.Slash:
            return self._backtrack_and_create_error(
                token_reader, marker, TSDocMessageId.MissingHtmlEndTag,
                'Expecting a closing tag starting with "</"')
        token_reader.read_token()

        # No whitespace is allowed after the "</"
        opening_delimiter = token_reader.extract_accumulated_sequence()

        name = self._parse_html_name(token_reader, is_element_name=True)
        if isinstance(name, _Failure):
            return self._backtrack_and_create_error_for_failure(
                token_reader, marker, 'Expecting an HTML name: ', name)

        spacing_after_name = self._try_read_spacing_and_newlines(token_reader)

        if token_reader.peek_token_kind() is not TokenKind.GreaterThan:
            failure = self._create_failure_for_token(
                token_reader, TSDocMessageId.HtmlTagMissingGreaterThan,
                'Expecting a closing ">" for the HTML tag')
            return self._backtrack_and_create_error_for_failure(token_reader, marker, '', failure)
        token_reader.read_token()

        closing_delimiter = token_reader.extract_accumulated_sequence()

        return DocHtmlEndTag(self._configuration,
                             opening_delimiter_excerpt=opening_delimiter,
                             name_excerpt=name,
                             spacing_after_name_excerpt=spacing_after_name,
                             closing_delimiter_excerpt=closing_delimiter)

    def _parse_html_name(self, token_reader: TokenReader,
                         is_element_name: bool) -> Union[TokenSequence, _Failure]:
        """
        Read an element or attribute name.
        """
        marker = token_reader.create_marker()

        if token_reader.peek_token_kind() is TokenKind.Spacing:
            return self._create_failure_for_tokens_since(
                token_reader, TSDocMessageId.MalformedHtmlName,
                'A space is not allowed here', marker)

        while token_reader.peek_token_kind() in (TokenKind.Hyphen, TokenKind.Period,
                                                 TokenKind.AsciiWord):
            token_reader.read_token()

        name_excerpt = token_reader.try_extract_accumulated_sequence()
        if name_excerpt is None:
            return self._create_failure_for_token(
                token_reader, TSDocMessageId.MalformedHtmlName, 'Expecting an HTML name')

        html_name = str(name_excerpt)

        explanation = explain_if_invalid_html_name(html_name)
        if explanation:
            return self._create_failure_for_tokens_since(
                token_reader, TSDocMessageId.MalformedHtmlName, explanation, marker)

        if is_element_name and self._configuration.validation.report_unsupported_html_elements \
                and not self._configuration.is_html_element_supported(html_name):
            return self._create_failure_for_token(
                token_reader, TSDocMessageId.UnsupportedHtmlElementName,
                f'The HTML element name {json.dumps(html_name)} is not defined by your '
                'TSDoc configuration', marker)

        return name_excerpt

    ##################################################
    ## Code

    def _parse_fenced_code(self, token_reader: TokenReader) -> DocNode:
        token_reader.assert_accumulated_sequence_is_empty()

        start_marker = token_reader.create_marker()
        end_of_opening_delimiter_marker = start_marker + 2

        if token_reader.peek_previous_token_kind() not in (TokenKind.Newline,
                                                           TokenKind.EndOfInput):
            # The error covers the three backticks, so that they are not read as a code span
            return self._backtrack_and_create_error_range(
                token_reader, start_marker, end_of_opening_delimiter_marker,
                TSDocMessageId.CodeFenceOpeningIndent,
                'The opening backtick for a code fence must appear at the start of the line')

        for _ in range(3):
            token_reader.read_token()
        opening_fence = token_reader.extract_accumulated_sequence()

        # The newline goes with the spacing after the language
        while token_reader.peek_token_kind() is TokenKind.Spacing:
            token_reader.read_token()
        spacing_after_opening_fence = token_reader.try_extract_accumulated_sequence()

        # Read the language specifier, if any, and the end of the line
        start_of_padding_marker: Optional[int] = None
        while True:
            kind = token_reader.peek_token_kind()
            if kind in _SPACING_KINDS:
                if start_of_padding_marker is None:
                    start_of_padding_marker = token_reader.create_marker()
                token_reader.read_token()
                if kind is TokenKind.Newline:
                    break
            elif kind is TokenKind.Backtick:
                failure = self._create_failure_for_token(
                    token_reader, TSDocMessageId.CodeFenceSpecifierSyntax,
                    'The language specifier cannot contain backtick characters')
                return self._backtrack_and_create_error_range_for_failure(
                    token_reader, start_marker, end_of_opening_delimiter_marker,
                    'Error parsing code fence: ', failure)
            elif kind is TokenKind.EndOfInput:
                failure = self._create_failure_for_token(
                    token_reader, TSDocMessageId.CodeFenceMissingDelimiter,
                    'Missing closing delimiter')
                return self._backtrack_and_create_error_range_for_failure(
                    token_reader, start_marker, end_of_opening_delimiter_marker,
                    'Error parsing code fence: ', failure)
            else:
                start_of_padding_marker = None
                token_reader.read_token()

        assert start_of_padding_marker is not None
        # "pov-ray sdl    \n"
        rest_of_line = token_reader.extract_accumulated_sequence()
        language = rest_of_line.get_new_sequence(rest_of_line.start_index,
                                                 start_of_padding_marker)
        spacing_after_language = rest_of_line.get_new_sequence(start_of_padding_marker,
                                                               rest_of_line.end_index)

        # Read the code until a line starts with the closing fence
        code_end_marker = -1
        closing_fence_start_marker = -1
        token_before_delimiter: Optional[Token] = None
        at_start_of_line = True
        while True:
            if token_reader.peek_token_kind() is TokenKind.EndOfInput:
                failure = self._create_failure_for_token(
                    token_reader, TSDocMessageId.CodeFenceMissingDelimiter,
                    'Missing closing delimiter')
                return self._backtrack_and_create_error_range_for_failure(
                    token_reader, start_marker, end_of_opening_delimiter_marker,
                    'Error parsing code fence: ', failure)

            if at_start_of_line:
                at_start_of_line = False
                code_end_marker = token_reader.create_marker()
                token_before_delimiter = token_reader.tokens[code_end_marker - 1]

                while token_reader.peek_token_kind() is TokenKind.Spacing:
                    token_before_delimiter = token_reader.read_token()

                if token_reader.peek_token_kind() is TokenKind.Backtick \
                        and token_reader.peek_token_after_kind() is TokenKind.Backtick \
                        and token_reader.peek_token_after_after_kind() is TokenKind.Backtick:
                    closing_fence_start_marker = token_reader.create_marker()
                    for _ in range(3):
                        token_reader.read_token()
                    break
                continue

            if token_reader.read_token().kind is TokenKind.Newline:
                at_start_of_line = True

        assert token_before_delimiter is not None
        if token_before_delimiter.kind is not TokenKind.Newline:
            self._parser_context.log.add_message_for_text_range(
                TSDocMessageId.CodeFenceClosingIndent,
                'The closing delimiter for a code fence must not be indented',
                token_before_delimiter.range)

        # "code 1\ncode 2\n  ```"
        code_and_delimiter = token_reader.extract_accumulated_sequence()
        code = code_and_delimiter.get_new_sequence(code_and_delimiter.start_index, code_end_marker)
        spacing_before_closing_fence = code_and_delimiter.get_new_sequence(
            code_end_marker, closing_fence_start_marker)
        closing_fence = code_and_delimiter.get_new_sequence(closing_fence_start_marker,
                                                            code_and_delimiter.end_index)

        # Read the spacing and the newline after the closing fence
        while True:
            kind = token_reader.peek_token_kind()
            if kind is TokenKind.Spacing:
                token_reader.read_token()
            elif kind is TokenKind.Newline:
                token_reader.read_token()
                break
            elif kind is TokenKind.EndOfInput:
                break
            else:
                self._parser_context.log.add_message_for_text_range(
                    TSDocMessageId.CodeFenceClosingSyntax,
                    'Unexpected characters after closing delimiter for code fence',
                    token_reader.peek_token().range)
                break
        spacing_after_closing_fence = token_reader.try_extract_accumulated_sequence()

        return DocFencedCode(
            self._configuration,
            opening_fence_excerpt=opening_fence,
            spacing_after_opening_fence_excerpt=spacing_after_opening_fence,
            language_excerpt=_none_if_empty(language),
            spacing_after_language_excerpt=spacing_after_language,
            code_excerpt=code,
            spacing_before_closing_fence_excerpt=_none_if_empty(spacing_before_closing_fence),
            closing_fence_excerpt=closing_fence,
            spacing_after_closing_fence_excerpt=spacing_after_closing_fence)

    def _parse_code_span(self, token_reader: TokenReader) -> DocNode:
        token_reader.assert_accumulated_sequence_is_empty()
        marker = token_reader.create_marker()

        if token_reader.peek_token_kind() is not TokenKind.Backtick:
            raise RuntimeError('Expecting a code span starting with a backtick character "`"')
        token_reader.read_token()

        opening_delimiter = token_reader.extract_accumulated_sequence()

        while True:
            kind = token_reader.peek_token_kind()
            if kind is TokenKind.Backtick:
                if token_reader.is_accumulated_sequence_empty():
                    return self._backtrack_and_create_error_range(
                        token_reader, marker, marker + 1, TSDocMessageId.CodeSpanEmpty,
                        'A code span must contain at least one character between the backticks')
                code = token_reader.extract_accumulated_sequence()
                token_reader.read_token()
                closing_delimiter = token_reader.extract_accumulated_sequence()
                break
            if kind in (TokenKind.EndOfInput, TokenKind.Newline):
                return self._backtrack_and_create_error(
                    token_reader, marker, TSDocMessageId.CodeSpanMissingDelimiter,
                    'The code span is missing its closing backtick')
            token_reader.read_token()

        return DocCodeSpan(self._configuration,
                           opening_delimiter_excerpt=opening_delimiter,
                           code_excerpt=code,
                           closing_delimiter_excerpt=closing_delimiter)

    ##################################################
    ## Helpers

    def _try_read_spacing_and_newlines(self, token_reader: TokenReader) -> Optional[TokenSequence]:
        while token_reader.peek_token_kind() in _SPACING_KINDS:
            token_reader.read_token()
        return token_reader.try_extract_accumulated_sequence()

    def _new_error_text(self, text_excerpt: TokenSequence, message_id: TSDocMessageId,
                        error_message: str,
                        error_location: Optional[TokenSequence] = None) -> DocErrorText:
        doc_error_text = DocErrorText(
            self._configuration, text_excerpt, message_id, error_message,
            error_location if error_location is not None else text_excerpt)
        self._parser_context.log.add_message_for_doc_error_text(doc_error_text)
        return doc_error_text

    def _create_error(self, token_reader: TokenReader, message_id: TSDocMessageId,
                      error_message: str) -> DocErrorText:
        """
        Read the next token and report it as a L{DocErrorText}.
        """
        token_reader.read_token()
        return self._new_error_text(token_reader.extract_accumulated_sequence(),
                                    message_id, error_message)

    def _backtrack_and_create_error(self, token_reader: TokenReader, marker: int,
                                    message_id: TSDocMessageId,
                                    error_message: str) -> DocErrorText:
        """
        Rewind to C{marker}, then read one token and report it as a L{DocErrorText}.
        """
        token_reader.backtrack_to_marker(marker)
        return self._create_error(token_reader, message_id, error_message)

    def _read_error_range(self, token_reader: TokenReader, error_start_marker: int,
                          error_inclusive_end_marker: int) -> TokenSequence:
        token_reader.backtrack_to_marker(error_start_marker)
        while token_reader.create_marker() != error_inclusive_end_marker:
            token_reader.read_token()
        if token_reader.peek_token_kind() is not TokenKind.EndOfInput:
            token_reader.read_token()
        return token_reader.extract_accumulated_sequence()

    def _backtrack_and_create_error_range(self, token_reader: TokenReader,
                                          error_start_marker: int,
                                          error_inclusive_end_marker: int,
                                          message_id: TSDocMessageId,
                                          error_message: str) -> DocErrorText:
        """
        Rewind to C{error_start_marker}, then read the tokens up to and
        including C{error_inclusive_end_marker} as a L{DocErrorText}.
        """
        text_excerpt = self._read_error_range(token_reader, error_start_marker,
                                              error_inclusive_end_marker)
        return self._new_error_text(text_excerpt, message_id, error_message)

    def _backtrack_and_create_error_for_failure(self, token_reader: TokenReader, marker: int,
                                                error_message_prefix: str,
                                                failure: _Failure) -> DocErrorText:
        token_reader.backtrack_to_marker(marker)
        token_reader.read_token()
        return self._new_error_text(token_reader.extract_accumulated_sequence(),
                                    failure.message_id, error_message_prefix + failure.message,
                                    failure.location)

    def _backtrack_and_create_error_range_for_failure(self, token_reader: TokenReader,
                                                      error_start_marker: int,
                                                      error_inclusive_end_marker: int,
                                                      error_message_prefix: str,
                                                      failure: _Failure) -> DocErrorText:
        text_excerpt = self._read_error_range(token_reader, error_start_marker,
                                              error_inclusive_end_marker)
        return self._new_error_text(text_excerpt, failure.message_id,
                                    error_message_prefix + failure.message, failure.location)

    def _create_failure_for_token(self, token_reader: TokenReader,
                                  message_id: TSDocMessageId, message: str,
                                  token_marker: Optional[int] = None) -> _Failure:
        """
        A failure located at a single token: the one at C{token_marker}, or
        the next one.
        """
        if token_marker is None:
            token_marker = token_reader.create_marker()
        return _Failure(message_id, message,
                        TokenSequence(self._parser_context, token_marker, token_marker + 1))

    def _create_failure_for_tokens_since(self, token_reader: TokenReader,
                                         message_id: TSDocMessageId, message: str,
                                         start_marker: int) -> _Failure:
        """
        A failure located at the tokens read since C{start_marker}, or at
        the next token if none were read.
        """
        end_marker = token_reader.create_marker()
        if end_marker < start_marker:
            raise RuntimeError('Invalid start_marker')
        if end_marker == start_marker:
            end_marker += 1
        return _Failure(message_id, message,
                        TokenSequence(self._parser_context, start_marker, end_marker))


def _none_if_empty(token_sequence: TokenSequence) -> Optional[TokenSequence]:
    if token_sequence.is_empty():
        return None
    return token_sequence
