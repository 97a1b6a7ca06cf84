from typing import List

import pytest

from pytsdoc.configuration import TSDocConfiguration
from pytsdoc.nodes import (DocCodeSpan, DocDeclarationReference, DocErrorText,
                           DocEscapedText, DocFencedCode, DocHtmlEndTag, DocHtmlStartTag,
                           DocInheritDocTag, DocInlineTag, DocLinkTag, DocNode, DocParamBlock,
                           DocPlainText, EscapeStyle, SelectorKind)
from pytsdoc.parser import ParserContext

from pytsdoc.test import find_nodes, message_ids, message_texts, node_kinds, parse


def verbatim(text: str) -> List[DocNode]:
    return parse(text).verbatim_nodes

def single(parser_context: ParserContext, node_class: type) -> DocNode:
    (node,) = [node for node in parser_context.verbatim_nodes if isinstance(node, node_class)]
    return node

def link_destination(text: str) -> DocDeclarationReference:
    parser_context = parse(text)
    assert message_ids(parser_context) == []
    link = single(parser_context, DocLinkTag)
    assert isinstance(link, DocLinkTag)
    assert link.code_destination is not None
    return link.code_destination

def reference_ids(text: str) -> List[str]:
    """
    The messages reported for C{{@link text}}.
    """
    return message_ids(parse('/** {@link ' + text + '} */'))


##################################################
## Plain text and escapes

def test_plain_text_and_soft_breaks() -> None:
    nodes = verbatim('/**\n * one two\n * three\n */')
    assert node_kinds(nodes) == ['PlainText', 'SoftBreak', 'PlainText', 'SoftBreak']
    assert [node.text for node in nodes if isinstance(node, DocPlainText)] == [
        'one two', 'three']

def test_backslash_escape() -> None:
    parser_context = parse('/** a \\{ b */')
    assert message_ids(parser_context) == []
    escaped = single(parser_context, DocEscapedText)
    assert isinstance(escaped, DocEscapedText)
    assert escaped.escape_style is EscapeStyle.CommonMarkBackslash
    assert escaped.decoded_text == '{'
    assert escaped.encoded_text == '\\{'

def test_backslash_before_letter() -> None:
    parser_context = parse('/** \\a */')
    assert message_ids(parser_context) == ['tsdoc-unnecessary-backslash']
    assert message_texts(parser_context) == [
        'A backslash can only be used to escape a punctuation character']
    error = single(parser_context, DocErrorText)
    assert isinstance(error, DocErrorText)
    assert error.text == '\\'

def test_backslash_at_end_of_line() -> None:
    parser_context = parse('/**\n * a \\\n * b\n */')
    assert message_ids(parser_context) == ['tsdoc-unnecessary-backslash']

@pytest.mark.parametrize('text, message_id', [
    ('/** a } b */', 'tsdoc-escape-right-brace'),
    ('/** a > b */', 'tsdoc-escape-greater-than'),
])
def test_characters_to_escape(text: str, message_id: str) -> None:
    parser_context = parse(text)
    assert message_ids(parser_context) == [message_id]
    error = single(parser_context, DocErrorText)
    assert isinstance(error, DocErrorText)
    assert error.text in '}>'


##################################################
## Block tags

def test_block_tag() -> None:
    nodes = verbatim('/** @remarks text */')
    assert node_kinds(nodes) == ['BlockTag', 'PlainText', 'SoftBreak']

def test_at_sign_in_word() -> None:
    parser_context = parse('/** foo@bar */')
    assert message_ids(parser_context) == ['tsdoc-at-sign-in-word']
    assert node_kinds(parser_context.verbatim_nodes) == [
        'PlainText', 'ErrorText', 'PlainText', 'SoftBreak']

def test_at_sign_without_tag_name() -> None:
    parser_context = parse('/** @ */')
    assert message_ids(parser_context) == ['tsdoc-at-sign-without-tag-name']

def test_characters_after_block_tag() -> None:
    parser_context = parse('/** @foo! */')
    assert message_ids(parser_context) == ['tsdoc-characters-after-block-tag']
    assert message_texts(parser_context) == [
        'The token "@foo" looks like a TSDoc tag but contains an invalid character "!"; '
        'if it is not a tag, use a backslash to escape the "@"']

def test_escaped_at_sign() -> None:
    parser_context = parse('/** \\@foo */')
    assert message_ids(parser_context) == []
    assert node_kinds(parser_context.verbatim_nodes) == ['EscapedText', 'PlainText', 'SoftBreak']


##################################################
## @param blocks

def test_param_block() -> None:
    parser_context = parse('/** @param x - the X */')
    block = single(parser_context, DocParamBlock)
    assert isinstance(block, DocParamBlock)
    assert block.parameter_name == 'x'
    assert block.block_tag.tag_name == '@param'

def test_param_names_may_contain_dollar_signs() -> None:
    parser_context = parse('/** @param $x_1 - the X */')
    assert message_ids(parser_context) == []
    assert parser_context.doc_comment.params.blocks[0].parameter_name == '$x_1'

def test_param_missing_name() -> None:
    parser_context = parse('/** @param - the X */')
    assert message_ids(parser_context) == ['tsdoc-param-tag-with-invalid-name']
    assert message_texts(parser_context) == [
        'The @param block should be followed by a parameter name']
    block = single(parser_context, DocParamBlock)
    assert isinstance(block, DocParamBlock)
    assert block.parameter_name == ''

def test_param_dotted_name() -> None:
    parser_context = parse('/** @param options.x - the X */')
    assert message_ids(parser_context) == ['tsdoc-param-tag-with-invalid-name']
    assert message_texts(parser_context) == [
        'The @param block should be followed by a valid parameter name: '
        'The identifier cannot contain non-word characters']

def test_type_param_block() -> None:
    parser_context = parse('/** @typeParam T - the type */')
    assert message_ids(parser_context) == []
    assert [block.parameter_name for block in parser_context.doc_comment.type_params] == ['T']

@pytest.mark.parametrize('text', [
    '/** @param {string} x - the X */',
    '/** @param x {string} - the X */',
    '/** @param x - {string} the X */',
])
def test_param_jsdoc_type(text: str) -> None:
    parser_context = parse(text)
    assert message_ids(parser_context) == ['tsdoc-param-tag-with-invalid-type']
    assert parser_context.doc_comment.params.blocks[0].parameter_name == 'x'

def test_param_jsdoc_optional_name() -> None:
    parser_context = parse('/** @param [x] - the X */')
    assert message_ids(parser_context) == ['tsdoc-param-tag-with-invalid-optional-name']
    assert parser_context.doc_comment.params.blocks[0].parameter_name == 'x'

def test_param_jsdoc_optional_name_with_default() -> None:
    parser_context = parse('/** @param [x=[1]] - the X */')
    assert message_ids(parser_context) == ['tsdoc-param-tag-with-invalid-optional-name']
    assert parser_context.doc_comment.params.blocks[0].parameter_name == 'x'


##################################################
## Inline tags

def test_inline_tag() -> None:
    parser_context = parse('/** {@label MY_LABEL} */')
    assert message_ids(parser_context) == []
    tag = single(parser_context, DocInlineTag)
    assert isinstance(tag, DocInlineTag)
    assert tag.tag_name == '@label'
    assert tag.tag_content == 'MY_LABEL'

def test_inline_tag_escaped_brace() -> None:
    parser_context = parse('/** {@label a\\}b} */')
    assert message_ids(parser_context) == []
    tag = single(parser_context, DocInlineTag)
    assert isinstance(tag, DocInlineTag)
    assert tag.tag_content == 'a\\}b'

@pytest.mark.parametrize('text, expected_ids', [
    ('/** {foo} */', ['tsdoc-malformed-inline-tag', 'tsdoc-escape-right-brace']),
    ('/** {@} */', ['tsdoc-malformed-inline-tag', 'tsdoc-escape-right-brace']),
    ('/** {@link!} */', ['tsdoc-characters-after-inline-tag', 'tsdoc-escape-right-brace']),
    ('/** {@link Foo */', ['tsdoc-inline-tag-missing-right-brace']),
])
def test_malformed_inline_tags(text: str, expected_ids: List[str]) -> None:
    assert message_ids(parse(text)) == expected_ids

def test_malformed_inline_tag_messages() -> None:
    assert message_texts(parse('/** {foo} */'))[0] == 'Expecting a TSDoc tag starting with "{@"'
    assert message_texts(parse('/** {@} */'))[0] == (
        'Expecting a TSDoc inline tag name after the "{@" characters')
    assert message_texts(parse('/** {@link Foo */'))[0] == (
        'The TSDoc inline tag name is missing its closing "}"')

def test_inline_tag_error_covers_the_at_sign() -> None:
    parser_context = parse('/** {@link Foo */')
    error = parser_context.verbatim_nodes[0]
    assert isinstance(error, DocErrorText)
    assert error.text == '{@'
    # The rest is plain text, not a block tag
    assert node_kinds(parser_context.verbatim_nodes[1:]) == ['PlainText', 'SoftBreak']

def test_inline_tag_unescaped_brace() -> None:
    parser_context = parse('/** {@link a{b} */')
    assert message_ids(parser_context)[0] == 'tsdoc-inline-tag-unescaped-brace'


##################################################
## @link

def test_link_to_url() -> None:
    parser_context = parse('/** {@link https://example.com | the site} */')
    assert message_ids(parser_context) == []
    link = single(parser_context, DocLinkTag)
    assert isinstance(link, DocLinkTag)
    assert link.url_destination == 'https://example.com'
    assert link.code_destination is None
    assert link.link_text == 'the site'

def test_link_without_text() -> None:
    parser_context = parse('/** {@link Foo} */')
    link = single(parser_context, DocLinkTag)
    assert isinstance(link, DocLinkTag)
    assert link.link_text is None

def test_link_empty() -> None:
    parser_context = parse('/** {@link} */')
    assert message_ids(parser_context) == ['tsdoc-link-tag-empty']
    # The tag is kept, as a generic inline tag
    tag = single(parser_context, DocInlineTag)
    assert isinstance(tag, DocInlineTag)
    assert tag.tag_name == '@link'

@pytest.mark.parametrize('url, message', [
    ('http://', 'An @link URL must have at least one character after "://"'),
    ('//example.com', 'An @link URL must begin with a scheme comprised only of letters and '
                      'numbers followed by "://". (For general URLs, use an HTML "<a>" tag '
                      'instead.)'),
])
def test_link_invalid_url(url: str, message: str) -> None:
    parser_context = parse('/** {@link ' + url + '} */')
    assert message_ids(parser_context) == ['tsdoc-link-tag-invalid-url']
    assert message_texts(parser_context) == [message]

def test_link_unescaped_text() -> None:
    parser_context = parse('/** {@link Foo | a|b} */')
    assert message_ids(parser_context) == ['tsdoc-link-tag-unescaped-text']
    assert message_texts(parser_context) == [
        'The "|" character may not be used in the link text without escaping it']

def test_link_destination_syntax() -> None:
    assert reference_ids('Foo=') == ['tsdoc-link-tag-destination-syntax']


##################################################
## Declaration references

def test_member_references() -> None:
    reference = link_destination('/** {@link MyClass.myMethod} */')
    assert reference.package_name is None
    assert reference.import_path is None
    members = reference.member_references
    assert [member.has_dot for member in members] == [False, True]
    assert [member.member_identifier.identifier for member in members
            if member.member_identifier is not None] == ['MyClass', 'myMethod']
    assert reference.emit_as_tsdoc() == 'MyClass.myMethod'

def test_package_and_import_path() -> None:
    reference = link_destination('/** {@link my-package/path/to#MyClass} */')
    assert reference.package_name == 'my-package'
    assert reference.import_path == '/path/to'
    assert reference.emit_as_tsdoc() == 'my-package/path/to#MyClass'

def test_scoped_package() -> None:
    reference = link_destination('/** {@link @scope/my-package#MyClass} */')
    assert reference.package_name == '@scope/my-package'
    assert reference.import_path is None

def test_relative_import_path() -> None:
    reference = link_destination('/** {@link ./file#MyClass} */')
    assert reference.package_name is None
    assert reference.import_path == './file'

def test_selector() -> None:
    reference = link_destination('/** {@link (MyClass:constructor)} */')
    (member,) = reference.member_references
    assert member.selector is not None
    assert member.selector.selector == 'constructor'
    assert member.selector.selector_kind is SelectorKind.System
    assert reference.emit_as_tsdoc() == '(MyClass:constructor)'

def test_label_selector() -> None:
    reference = link_destination('/** {@link (MyClass:MY_LABEL)} */')
    (member,) = reference.member_references
    assert member.selector is not None
    assert member.selector.selector_kind is SelectorKind.Label

def test_parenthesized_member_needs_a_selector() -> None:
    # The parentheses hold a single identifier and its selector
    assert reference_ids('(MyClass.method:MY_LABEL)') == ['tsdoc-reference-missing-colon']

def test_quoted_identifier() -> None:
    reference = link_destination('/** {@link MyClass."static"} */')
    member = reference.member_references[1]
    assert member.member_identifier is not None
    assert member.member_identifier.identifier == 'static'
    assert member.member_identifier.has_quotes
    assert reference.emit_as_tsdoc() == 'MyClass."static"'

def test_symbol_reference() -> None:
    reference = link_destination('/** {@link MyClass.[Symbol.iterator]} */')
    member = reference.member_references[1]
    assert member.member_symbol is not None
    symbol_reference = member.member_symbol.symbol_reference
    assert symbol_reference.emit_as_tsdoc() == 'Symbol.iterator'
    assert reference.emit_as_tsdoc() == 'MyClass.[Symbol.iterator]'

def test_spacing_in_reference() -> None:
    reference = link_destination('/** {@link MyClass . myMethod | text} */')
    assert reference.emit_as_tsdoc() == 'MyClass.myMethod'

@pytest.mark.parametrize('text, message_id', [
    ('my-package/Foo', 'tsdoc-reference-missing-hash'),
    ('#Foo', 'tsdoc-reference-hash-syntax'),
    ('bad~name#Foo', 'tsdoc-reference-malformed-package-name'),
    ('my-package//x#Foo', 'tsdoc-reference-malformed-import-path'),
    ('Foo Bar', 'tsdoc-reference-missing-dot'),
    ('Foo:static', 'tsdoc-reference-selector-missing-parens'),
    ('(Foo)', 'tsdoc-reference-missing-colon'),
    ('(Foo:static', 'tsdoc-reference-missing-right-paren'),
    ('Foo.[]', 'tsdoc-reference-symbol-syntax'),
    ('Foo.[Bar', 'tsdoc-reference-missing-right-bracket'),
    ('Foo."bar', 'tsdoc-reference-missing-quote'),
    ('Foo.""', 'tsdoc-reference-empty-identifier'),
    ('Foo.static', 'tsdoc-reference-unquoted-identifier'),
    ('(Foo:)', 'tsdoc-reference-missing-label'),
    ('(Foo:bar)', 'tsdoc-reference-selector-syntax'),
    ('(Foo:0)', 'tsdoc-reference-selector-syntax'),
])
def test_reference_errors(text: str, message_id: str) -> None:
    assert reference_ids(text)[-1] == message_id

def test_reference_error_messages() -> None:
    assert message_texts(parse('/** {@link Foo.static} */')) == [
        'The identifier "static" must be quoted because it is a TSDoc system selector name']
    assert message_texts(parse('/** {@link (Foo:bar)} */')) == [
        'The selector "bar" is not a recognized TSDoc system selector name']

def test_missing_reference() -> None:
    parser_context = parse('/** {@inheritDoc -} */')
    assert message_ids(parser_context) == ['tsdoc-missing-reference']
    assert message_texts(parser_context) == ['Expecting a declaration reference']


##################################################
## Declaration references in the newer notation

def test_beta_reference() -> None:
    reference = link_destination('/** {@link my-package!MyClass#method | text} */')
    assert reference.beta_reference is not None
    assert str(reference.beta_reference) == 'my-package!MyClass#method'
    assert reference.member_references == ()
    assert reference.emit_as_tsdoc() == 'my-package!MyClass#method'

def test_beta_reference_syntax_error() -> None:
    parser_context = parse('/** {@link pkg!a..b} */')
    assert message_ids(parser_context) == ['tsdoc-link-tag-destination-syntax']
    assert message_texts(parser_context)[0].startswith('Invalid declaration reference: ')
    error = single(parser_context, DocErrorText)
    assert isinstance(error, DocErrorText)
    # The whole tag is kept as text
    assert error.text == '{@link pkg!a..b}'


##################################################
## @inheritDoc

def test_inherit_doc() -> None:
    parser_context = parse('/** {@inheritDoc MyClass.method} */')
    assert message_ids(parser_context) == []
    tag = single(parser_context, DocInheritDocTag)
    assert isinstance(tag, DocInheritDocTag)
    assert tag.declaration_reference is not None
    assert tag.declaration_reference.emit_as_tsdoc() == 'MyClass.method'

def test_inherit_doc_without_reference() -> None:
    parser_context = parse('/** {@inheritDoc} */')
    assert message_ids(parser_context) == []
    tag = single(parser_context, DocInheritDocTag)
    assert isinstance(tag, DocInheritDocTag)
    assert tag.declaration_reference is None

def test_extra_inherit_doc() -> None:
    parser_context = parse('/** {@inheritDoc Foo} {@inheritDoc Bar} */')
    assert message_ids(parser_context) == ['tsdoc-extra-inheritdoc-tag']
    error = single(parser_context, DocErrorText)
    assert isinstance(error, DocErrorText)
    assert error.text == '{@inheritDoc Bar}'

def test_inherit_doc_trailing_characters() -> None:
    parser_context = parse('/** {@inheritDoc Foo=} */')
    assert message_ids(parser_context) == ['tsdoc-inheritdoc-tag-syntax']


##################################################
## HTML

def test_html_tags() -> None:
    parser_context = parse('/** <a href="#" title=\'x\'>link</a> */')
    assert message_ids(parser_context) == []
    assert node_kinds(parser_context.verbatim_nodes) == [
        'HtmlStartTag', 'PlainText', 'HtmlEndTag', 'SoftBreak']

    start_tag = parser_context.verbatim_nodes[0]
    assert isinstance(start_tag, DocHtmlStartTag)
    assert start_tag.name == 'a'
    assert not start_tag.self_closing_tag
    assert [(attribute.name, attribute.value) for attribute in start_tag.html_attributes] == [
        ('href', '"#"'), ('title', "'x'")]
    assert start_tag.emit_as_html() == '<a href="#" title=\'x\'>'

    end_tag = parser_context.verbatim_nodes[2]
    assert isinstance(end_tag, DocHtmlEndTag)
    assert end_tag.name == 'a'
    assert end_tag.emit_as_html() == '</a>'

def test_self_closing_html_tag() -> None:
    parser_context = parse('/** line<br/>break */')
    start_tag = single(parser_context, DocHtmlStartTag)
    assert isinstance(start_tag, DocHtmlStartTag)
    assert start_tag.self_closing_tag
    assert start_tag.emit_as_html() == '<br/>'

def test_html_spacing_is_kept() -> None:
    parser_context = parse('/** <a  href = "#"  > */')
    start_tag = single(parser_context, DocHtmlStartTag)
    assert isinstance(start_tag, DocHtmlStartTag)
    assert start_tag.emit_as_html() == '<a  href = "#"  >'

@pytest.mark.parametrize('text, message_id, message', [
    ('/** < a> */', 'tsdoc-malformed-html-name',
     'Invalid HTML element: A space is not allowed here'),
    ('/** <a href> */', 'tsdoc-html-tag-missing-equals',
     'The HTML element has an invalid attribute: Expecting "=" after HTML attribute name'),
    ('/** <a href=x> */', 'tsdoc-html-tag-missing-string',
     'The HTML element has an invalid attribute: Expecting an HTML string starting with a '
     'single-quote or double-quote character'),
    ('/** <a href="x> */', 'tsdoc-html-string-missing-quote',
     'The HTML element has an invalid attribute: The HTML string is missing its closing quote'),
    ('/** <a href="x"y="z"> */', 'tsdoc-text-after-html-string',
     'The HTML element has an invalid attribute: The next character after a closing quote '
     'must be spacing or punctuation'),
    ('/** <a =x> */', 'tsdoc-html-tag-missing-greater-than',
     'The HTML tag has invalid syntax: Expecting an attribute or ">" or "/>"'),
])
def test_html_errors(text: str, message_id: str, message: str) -> None:
    parser_context = parse(text)
    assert message_ids(parser_context)[0] == message_id
    assert message_texts(parser_context)[0] == message
    # Only the "<" is reported as an error, the rest is read again
    error = parser_context.verbatim_nodes[0]
    assert isinstance(error, DocErrorText)
    assert error.text == '<'

def test_unsupported_html_element() -> None:
    configuration = TSDocConfiguration()
    configuration.set_supported_html_elements(['b'])

    parser_context = parse('/** <b>bold</b> */', configuration)
    assert message_ids(parser_context) == []

    parser_context = parse('/** <a>link</a> */', configuration)
    # Both the start tag and the end tag are reported
    assert message_ids(parser_context).count('tsdoc-unsupported-html-name') == 2
    assert message_texts(parser_context)[0] == (
        'Invalid HTML element: The HTML element name "a" is not defined by your '
        'TSDoc configuration')

def test_html_elements_are_not_checked_by_default() -> None:
    assert message_ids(parse('/** <custom-element>x</custom-element> */')) == []


##################################################
## Code

def test_code_span() -> None:
    parser_context = parse('/** Use `x = 1` here */')
    assert message_ids(parser_context) == []
    code_span = single(parser_context, DocCodeSpan)
    assert isinstance(code_span, DocCodeSpan)
    assert code_span.code == 'x = 1'

def test_code_span_empty() -> None:
    parser_context = parse('/** a `` b */')
    assert message_ids(parser_context) == ['tsdoc-code-span-empty']
    error = single(parser_context, DocErrorText)
    assert isinstance(error, DocErrorText)
    assert error.text == '``'

@pytest.mark.parametrize('text', ['/** `x */', '/**\n * `x\n * y`\n */'])
def test_code_span_missing_delimiter(text: str) -> None:
    parser_context = parse(text)
    assert message_ids(parser_context)[0] == 'tsdoc-code-span-missing-delimiter'
    assert message_texts(parser_context)[0] == 'The code span is missing its closing backtick'

def test_fenced_code() -> None:
    parser_context = parse('\n'.join([
        '/**',
        ' * ```ts',
        ' * const a = 1;',
        ' *',
        ' *   indented();',
        ' * ```',
        ' */',
    ]))
    assert message_ids(parser_context) == []
    fenced_code = single(parser_context, DocFencedCode)
    assert isinstance(fenced_code, DocFencedCode)
    assert fenced_code.language == 'ts'
    assert fenced_code.code == 'const a = 1;\n\n  indented();\n'

def test_fenced_code_without_language() -> None:
    parser_context = parse('/**\n * ```\n * code\n * ```\n */')
    assert message_ids(parser_context) == []
    fenced_code = single(parser_context, DocFencedCode)
    assert isinstance(fenced_code, DocFencedCode)
    assert fenced_code.language == ''
    assert fenced_code.code == 'code\n'

def test_fenced_code_opening_indent() -> None:
    parser_context = parse('/**\n * text ```\n * ```\n */')
    ids = message_ids(parser_context)
    assert ids[0] == 'tsdoc-code-fence-opening-indent'
    error = parser_context.verbatim_nodes[1]
    assert isinstance(error, DocErrorText)
    assert error.text == '```'

def test_fenced_code_missing_delimiter() -> None:
    parser_context = parse('/**\n * ```ts\n * code\n */')
    assert message_ids(parser_context) == ['tsdoc-code-fence-missing-delimiter']
    assert message_texts(parser_context) == ['Error parsing code fence: Missing closing delimiter']

def test_fenced_code_closing_indent() -> None:
    parser_context = parse('/**\n * ```\n * code\n *   ```\n */')
    assert message_ids(parser_context) == ['tsdoc-code-fence-closing-indent']
    # The fence is still parsed
    assert len(find_nodes(parser_context.doc_comment, DocFencedCode)) == 1

def test_fenced_code_closing_syntax() -> None:
    parser_context = parse('/**\n * ```\n * code\n * ``` x\n */')
    assert message_ids(parser_context) == ['tsdoc-code-fence-closing-syntax']

def test_fenced_code_specifier_syntax() -> None:
    parser_context = parse('/**\n * ```ts`\n * ```\n */')
    assert message_ids(parser_context)[0] == 'tsdoc-code-fence-specifier-syntax'
