"""
Sorting the verbatim nodes into the sections of the L{DocComment}.
"""
from pytsdoc.configuration import TSDocConfiguration, TSDocTagDefinition, TSDocTagSyntaxKind
from pytsdoc.emitters import PlainTextEmitter
from pytsdoc.nodes import DocBlock, DocBlockTag, DocInheritDocTag
from pytsdoc.tags import StandardTags

from pytsdoc.test import find_nodes, message_ids, message_texts, node_kinds, paragraphs, parse


def test_standard_blocks() -> None:
    parser_context = parse('\n'.join([
        '/**',
        ' * Summary.',
        ' * @remarks Remarks.',
        ' * @privateRemarks Private.',
        ' * @deprecated Use something else.',
        ' * @returns The result.',
        ' * @example Example one.',
        ' * @example Example two.',
        ' * @see First.',
        ' * @see Second.',
        ' */',
    ]))
    assert message_ids(parser_context) == []
    doc_comment = parser_context.doc_comment

    assert PlainTextEmitter.get_plain_text(doc_comment.summary_section) == 'Summary.'
    for block, text in [(doc_comment.remarks_block, 'Remarks.'),
                        (doc_comment.private_remarks, 'Private.'),
                        (doc_comment.deprecated_block, 'Use something else.'),
                        (doc_comment.returns_block, 'The result.')]:
        assert block is not None
        assert PlainTextEmitter.get_plain_text(block.content) == text

    assert [PlainTextEmitter.get_plain_text(block.content)
            for block in doc_comment.custom_blocks] == ['Example one.', 'Example two.']
    assert [PlainTextEmitter.get_plain_text(block.content)
            for block in doc_comment.see_blocks] == ['First.', 'Second.']

def test_params_and_type_params() -> None:
    parser_context = parse('\n'.join([
        '/**',
        ' * @typeParam T - The type.',
        ' * @param a - The first.',
        ' * @param b - The second.',
        ' */',
    ]))
    doc_comment = parser_context.doc_comment
    assert [block.parameter_name for block in doc_comment.type_params] == ['T']
    assert [block.parameter_name for block in doc_comment.params] == ['a', 'b']

def test_duplicate_param() -> None:
    parser_context = parse('/** @param x - One.\n * @param x - Two. */')
    assert message_ids(parser_context) == []
    params = parser_context.doc_comment.params
    assert params.count == 2
    block = params.try_get_block_by_name('x')
    assert block is params.blocks[0]

def test_modifiers() -> None:
    parser_context = parse('/** Summary.\n * @internal @beta @internal */')
    doc_comment = parser_context.doc_comment
    assert message_ids(parser_context) == []

    modifier_tag_set = doc_comment.modifier_tag_set
    assert modifier_tag_set.is_internal()
    assert modifier_tag_set.is_beta()
    assert not modifier_tag_set.is_alpha()
    assert [tag.tag_name for tag in modifier_tag_set.nodes] == ['@internal', '@beta']

    # Modifiers are not part of the summary
    assert PlainTextEmitter.get_plain_text(doc_comment) == 'Summary.'
    # except for the repeated one, so that its text is still in the tree
    (repeated,) = find_nodes(doc_comment.summary_section, DocBlockTag)
    assert repeated.tag_name == '@internal'
    assert repeated is not modifier_tag_set.nodes[0]

def test_repeated_modifier_keeps_its_tokens() -> None:
    parser_context = parse('/** @beta @beta */')
    assert message_ids(parser_context) == []
    doc_comment = parser_context.doc_comment
    assert len(doc_comment.modifier_tag_set) == 1
    assert doc_comment.emit_as_tsdoc() == '/**\n * @beta\n *\n * @beta\n */\n'

def test_content_after_modifier_stays_in_section() -> None:
    parser_context = parse('/** @remarks One\n * @sealed\n * two. */')
    remarks_block = parser_context.doc_comment.remarks_block
    assert remarks_block is not None
    assert PlainTextEmitter.get_plain_text(remarks_block.content) == 'One\n\ntwo.'

def test_duplicate_block() -> None:
    parser_context = parse('/** @remarks One.\n * @remarks Two. */')
    assert message_ids(parser_context) == ['tsdoc-duplicate-block-tag']
    assert message_texts(parser_context) == [
        'The @remarks block may only be used once per comment']

    doc_comment = parser_context.doc_comment
    assert doc_comment.remarks_block is not None
    assert PlainTextEmitter.get_plain_text(doc_comment.remarks_block.content) == 'One.'
    # The second block is kept
    (block,) = doc_comment.custom_blocks
    assert PlainTextEmitter.get_plain_text(block.content) == 'Two.'

def test_undefined_tag() -> None:
    parser_context = parse('/** @foo bar */')
    assert message_ids(parser_context) == ['tsdoc-undefined-tag']
    assert message_texts(parser_context) == [
        'The TSDoc tag "@foo" is not defined in this configuration']
    # The tag becomes part of the content
    (tag,) = find_nodes(parser_context.doc_comment.summary_section, DocBlockTag)
    assert tag.tag_name == '@foo'

def test_ignore_undefined_tags() -> None:
    configuration = TSDocConfiguration()
    configuration.validation.ignore_undefined_tags = True
    assert message_ids(parse('/** @foo bar {@bar} */', configuration)) == []

def test_inline_tag_missing_braces() -> None:
    parser_context = parse('/** @link Foo */')
    assert message_ids(parser_context) == ['tsdoc-inline-tag-missing-braces']
    assert message_texts(parser_context) == [
        'The TSDoc tag "@link" is an inline tag; it must be enclosed in "{ }" braces']

def test_tag_should_not_have_braces() -> None:
    parser_context = parse('/** {@remarks} */')
    assert message_ids(parser_context) == ['tsdoc-tag-should-not-have-braces']
    assert parser_context.doc_comment.remarks_block is None

def test_unsupported_tag() -> None:
    configuration = TSDocConfiguration()
    configuration.set_support_for_tag(StandardTags.remarks, True)

    parser_context = parse('/** @remarks One.\n * @returns Two. */', configuration)
    assert message_ids(parser_context) == ['tsdoc-unsupported-tag']
    assert message_texts(parser_context) == [
        'The TSDoc tag "@returns" is not supported by this tool']
    # Unsupported tags are still parsed
    assert parser_context.doc_comment.returns_block is not None

def test_custom_tags() -> None:
    configuration = TSDocConfiguration()
    configuration.add_tag_definitions([
        TSDocTagDefinition('@myBlock', TSDocTagSyntaxKind.BlockTag),
        TSDocTagDefinition('@myFlag', TSDocTagSyntaxKind.ModifierTag),
        TSDocTagDefinition('@myInline', TSDocTagSyntaxKind.InlineTag),
    ])
    parser_context = parse('/** {@myInline x}\n * @myBlock Content.\n * @myFlag */',
                           configuration)
    assert message_ids(parser_context) == []

    doc_comment = parser_context.doc_comment
    (block,) = doc_comment.custom_blocks
    assert block.block_tag.tag_name == '@myBlock'
    assert PlainTextEmitter.get_plain_text(block.content) == 'Content.'
    assert doc_comment.modifier_tag_set.has_tag_name('@MYFLAG')

def test_synonym() -> None:
    configuration = TSDocConfiguration()
    configuration.add_synonym(StandardTags.example, '@sample')
    parser_context = parse('/** @sample Code. */', configuration)
    assert message_ids(parser_context) == []
    (block,) = find_nodes(parser_context.doc_comment, DocBlock)
    assert block.block_tag.tag_name == '@sample'

def test_deprecated_without_message() -> None:
    parser_context = parse('/** @deprecated */')
    assert message_ids(parser_context) == ['tsdoc-missing-deprecation-message']
    assert message_texts(parser_context) == [
        'The @deprecated block must include a deprecation message, e.g. describing the '
        'recommended alternative']

def test_inherit_doc() -> None:
    parser_context = parse('/** {@inheritDoc Foo}\n * @param x - The X. */')
    assert message_ids(parser_context) == []
    doc_comment = parser_context.doc_comment
    assert isinstance(doc_comment.inherit_doc_tag, DocInheritDocTag)
    # Not part of the summary
    assert find_nodes(doc_comment.summary_section, DocInheritDocTag) == []

def test_inherit_doc_with_remarks_and_summary() -> None:
    parser_context = parse('/** Summary. {@inheritDoc Foo}\n * @remarks More. */')
    assert message_ids(parser_context) == [
        'tsdoc-inheritdoc-incompatible-tag', 'tsdoc-inheritdoc-incompatible-summary']
    # The summary message is reported on the whole comment
    summary_message = parser_context.log.messages[1]
    assert summary_message.text_range.pos == 0

def test_html_tags_must_match() -> None:
    parser_context = parse('/** <b>bold</i> */')
    assert message_ids(parser_context) == ['tsdoc-xml-tag-name-mismatch']
    assert message_texts(parser_context) == [
        'Expecting closing tag name to match opening tag name, got "i" but expected "b"']

def test_unmatched_html_end_tag() -> None:
    parser_context = parse('/** bold</b> */')
    assert message_ids(parser_context) == ['tsdoc-xml-tag-name-mismatch']
    assert message_texts(parser_context) == [
        'The closing tag "</b>" does not match any opening tag']
    # The end tag is kept in the tree
    assert node_kinds(paragraphs(parser_context.doc_comment.summary_section)[0].nodes) == [
        'PlainText', 'HtmlEndTag', 'SoftBreak']

def test_unclosed_html_start_tag() -> None:
    parser_context = parse('/** <a>text */')
    assert message_ids(parser_context) == ['tsdoc-missing-html-end-tag']
    assert message_texts(parser_context) == [
        'Expecting a closing tag "</a>" for this opening tag']
    assert parser_context.log.messages[0].text_range.pos == 5

    assert message_ids(parse('/** <a><br/>text</a> */')) == []

def test_html_tags_are_balanced_per_section() -> None:
    parser_context = parse('/** <b>bold\n * @remarks text</i> */')
    assert message_ids(parser_context) == [
        'tsdoc-missing-html-end-tag', 'tsdoc-xml-tag-name-mismatch']

    parser_context = parse('/** <b>bold</b>\n * @remarks <i>text</i> */')
    assert message_ids(parser_context) == []
