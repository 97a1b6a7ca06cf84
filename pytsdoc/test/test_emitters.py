import pytest

from pytsdoc.configuration import TSDocConfiguration
from pytsdoc.emitters import PlainTextEmitter, StringBuilder, TSDocEmitter
from pytsdoc.nodes import (DocBlockTag, DocCodeSpan, DocComment, DocErrorText, DocLinkTag,
                           DocParagraph, DocParamBlock, DocPlainText, DocSoftBreak)

from pytsdoc.test import parse


def emit(text: str) -> str:
    return parse(text).doc_comment.emit_as_tsdoc()


##################################################
## TSDocEmitter

def test_string_builder() -> None:
    output = StringBuilder()
    assert str(output) == ''
    output.append('a')
    output.append('b')
    assert str(output) == 'ab'
    output.append('c')
    assert str(output) == 'abc'

@pytest.mark.parametrize('text, expected', [
    ('/** Hello world */', '/**\n * Hello world\n */\n'),
    ('/**   Hello    world   */', '/**\n * Hello world\n */\n'),
    ('/**\n * Adds.\n * @param x - desc\n */', '/**\n * Adds.\n *\n * @param x - desc\n */\n'),
    ('/** @returns The sum */', '/**\n * @returns The sum\n */\n'),
    ('/** @param - no name */', '/**\n * @param - no name\n */\n'),
    ('/** See {@link MyClass.method|the method}. */',
     '/**\n * See {@link MyClass.method | the method}.\n */\n'),
    ('/** Summary.\n * @internal */', '/**\n * Summary.\n *\n * @internal\n */\n'),
    ('/** Use `x`, \\@ and <b>bold</b>. */', '/**\n * Use `x`, \\@ and <b>bold</b>.\n */\n'),
])
def test_emit_comment(text: str, expected: str) -> None:
    assert emit(text) == expected

def test_emit_fenced_code() -> None:
    text = '\n'.join([
        '/**',
        ' * Example:',
        ' * ```ts',
        ' * let x = 1;',
        ' * ```',
        ' */',
    ])
    assert emit(text) == '/**\n * Example:\n * ```ts\n * let x = 1;\n * ```\n *\n */\n'

def test_emit_empty_comment() -> None:
    assert emit('/** */') == ''
    assert DocComment(TSDocConfiguration()).emit_as_tsdoc() == ''

def test_emit_is_stable() -> None:
    text = '\n'.join([
        '/**',
        ' *   A  summary',
        ' *   on two lines.',
        ' *',
        ' * @remarks',
        ' * Remarks with {@link https://example.com | a link}.',
        ' * @param a - The A',
        ' * @param b - The B',
        ' * @returns Nothing.',
        ' * @beta',
        ' */',
    ])
    emitted = emit(text)
    assert emit(emitted) == emitted

def test_emit_built_comment() -> None:
    configuration = TSDocConfiguration()
    doc_comment = DocComment(configuration)
    doc_comment.summary_section.append_node(DocParagraph(configuration, [
        DocPlainText(configuration, 'Hello'),
        DocSoftBreak(configuration),
        DocPlainText(configuration, 'world'),
    ]))
    assert doc_comment.emit_as_tsdoc() == '/**\n * Hello\n * world\n */\n'

    param_block = DocParamBlock(configuration, DocBlockTag(configuration, '@param'), 'x')
    param_block.content.append_node_in_paragraph(DocPlainText(configuration, 'The X'))
    doc_comment.params.add(param_block)
    assert doc_comment.emit_as_tsdoc() == '/**\n * Hello\n * world\n *\n * @param x - The X\n */\n'

def test_emit_built_link() -> None:
    configuration = TSDocConfiguration()
    doc_comment = DocComment(configuration)
    doc_comment.summary_section.append_node_in_paragraph(DocLinkTag(
        configuration, url_destination='https://example.com', link_text='the site'))
    assert doc_comment.emit_as_tsdoc() == '/**\n * {@link https://example.com | the site}\n */\n'

def test_render_declaration_reference() -> None:
    parser_context = parse('/** {@link my-package#(Foo:class).bar} */')
    (link,) = [node for node in parser_context.verbatim_nodes if isinstance(node, DocLinkTag)]
    assert link.code_destination is not None
    output = StringBuilder()
    TSDocEmitter().render_declaration_reference(output, link.code_destination)
    assert str(output) == 'my-package#(Foo:class).bar'


##################################################
## PlainTextEmitter

@pytest.mark.parametrize('text, expected', [
    ('/** Hello   world */', 'Hello world'),
    ('/** One\n * two.\n *\n * Three. */', 'One\ntwo.\n\nThree.'),
    ('/** Use `x = 1`. */', 'Use x = 1.'),
    ('/** An \\@ sign. */', 'An @ sign.'),
    ('/** {@link Foo | the text} */', 'the text'),
    ('/** {@link https://example.com} */', 'https://example.com'),
    ('/** {@link Foo.bar} */', 'Foo.bar'),
    ('/** A <b>bold</b> word. */', 'A bold word.'),
    ('/** {@label X} Label. */', 'Label.'),
    ('/** Summary.\n * @remarks Remarks. */', 'Summary.'),
])
def test_get_plain_text(text: str, expected: str) -> None:
    assert PlainTextEmitter.get_plain_text(parse(text).doc_comment) == expected

def test_get_plain_text_of_fenced_code() -> None:
    parser_context = parse('/**\n * Before.\n * ```\n * code\n * ```\n * After.\n */')
    assert PlainTextEmitter.get_plain_text(parser_context.doc_comment) == (
        'Before.\n\ncode\n\nAfter.')

def test_has_any_text_content() -> None:
    configuration = TSDocConfiguration()
    assert not PlainTextEmitter.has_any_text_content(DocPlainText(configuration, '   '))
    assert PlainTextEmitter.has_any_text_content(DocPlainText(configuration, ' a '))
    assert PlainTextEmitter.has_any_text_content(DocCodeSpan(configuration, 'x'))
    assert not PlainTextEmitter.has_any_text_content(DocParagraph(configuration))
    assert PlainTextEmitter.has_any_text_content([
        DocParagraph(configuration), DocPlainText(configuration, 'x')])

def test_has_any_text_content_required_characters() -> None:
    configuration = TSDocConfiguration()
    paragraph = DocParagraph(configuration, [
        DocPlainText(configuration, 'ab'), DocSoftBreak(configuration),
        DocPlainText(configuration, ' c '),
    ])
    assert PlainTextEmitter.has_any_text_content(paragraph, 3)
    assert not PlainTextEmitter.has_any_text_content(paragraph, 4)
    with pytest.raises(ValueError):
        PlainTextEmitter.has_any_text_content(paragraph, 0)

def test_error_text_is_not_content() -> None:
    parser_context = parse('/** } */')
    (error,) = [node for node in parser_context.verbatim_nodes if isinstance(node, DocErrorText)]
    assert not PlainTextEmitter.has_any_text_content(error)
    assert not PlainTextEmitter.has_any_text_content(parser_context.doc_comment)
