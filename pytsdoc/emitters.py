"""
Rendering of node trees back to text.

L{TSDocEmitter} produces a normalized C{/** */} comment, L{PlainTextEmitter}
answers questions about the text content of a tree.
"""
import enum
import re
from typing import Callable, Iterable, List, Optional, Sequence, Union

from pytsdoc.nodes import (DocBlock, DocBlockTag, DocCodeSpan, DocComment,
                           DocDeclarationReference, DocErrorText, DocEscapedText,
                           DocFencedCode, DocHtmlAttribute, DocHtmlEndTag, DocHtmlStartTag,
                           DocInheritDocTag, DocInlineTag, DocInlineTagBase, DocLinkTag,
                           DocMemberIdentifier, DocMemberReference, DocMemberSelector,
                           DocMemberSymbol, DocNode, DocNodeKind, DocParagraph,
                           DocParamBlock, DocParamCollection, DocPlainText, DocSection)
from pytsdoc.tags import StandardTags
from pytsdoc.transforms import trim_spaces_in_paragraph

_NEWLINE_RE = re.compile(r'\r?\n')
_WHITESPACE_RE = re.compile(r'\s')


class StringBuilder:
    """
    Collects strings, to join them once at the end.
    """

    def __init__(self) -> None:
        self._chunks: List[str] = []

    def append(self, text: str) -> None:
        self._chunks.append(text)

    def __str__(self) -> str:
        if len(self._chunks) > 1:
            self._chunks = [''.join(self._chunks)]
        return self._chunks[0] if self._chunks else ''


class _LineState(enum.Enum):
    Closed = enum.auto()
    StartOfLine = enum.auto()
    MiddleOfLine = enum.auto()


class TSDocEmitter:
    """
    Renders a tree as TSDoc.

    The output is normalized: spacing is collapsed, every block starts on
    its own line, and paragraphs are separated by exactly one blank line.
    Parsing the output gives back an equivalent tree.
    """

    eol = '\n'

    def __init__(self) -> None:
        self._emit_comment_framing = True
        self._output: Optional[StringBuilder] = None
        self._line_state = _LineState.Closed
        self._previous_line_had_content = False

        # A paragraph is normally preceded by a blank line, but the one
        # that follows "@param x -" stays on the same line.
        self._hanging_paragraph = False

    def render_comment(self, output: StringBuilder, doc_comment: DocComment) -> None:
        """
        Render a whole comment, with its C{/** */} framing.
        """
        self._emit_comment_framing = True
        self._render_complete_object(output, doc_comment)

    def render_html_tag(self, output: StringBuilder,
                        html_tag: Union[DocHtmlStartTag, DocHtmlEndTag]) -> None:
        self._emit_comment_framing = False
        self._render_complete_object(output, html_tag)

    def render_declaration_reference(self, output: StringBuilder,
                                     declaration_reference: DocDeclarationReference) -> None:
        self._emit_comment_framing = False
        self._render_complete_object(output, declaration_reference)

    def _render_complete_object(self, output: StringBuilder, doc_node: DocNode) -> None:
        self._output = output
        self._line_state = _LineState.Closed
        self._previous_line_had_content = False
        self._hanging_paragraph = False

        self._render_node(doc_node)

        self._write_end()

    def _render_node(self, doc_node: Optional[DocNode]) -> None:
        if doc_node is None:
            return
        kind = doc_node.kind

        if kind == DocNodeKind.Block:
            assert isinstance(doc_node, DocBlock)
            self._ensure_line_skipped()
            self._render_node(doc_node.block_tag)
            if doc_node.block_tag.tag_name_with_upper_case == \
                    StandardTags.returns.tag_name_with_upper_case:
                self._write_content(' ')
                self._hanging_paragraph = True
            self._render_node(doc_node.content)

        elif kind == DocNodeKind.BlockTag:
            assert isinstance(doc_node, DocBlockTag)
            if self._line_state is _LineState.MiddleOfLine:
                self._write_content(' ')
            self._write_content(doc_node.tag_name)

        elif kind == DocNodeKind.CodeSpan:
            assert isinstance(doc_node, DocCodeSpan)
            self._write_content('`')
            self._write_content(doc_node.code)
            self._write_content('`')

        elif kind == DocNodeKind.Comment:
            assert isinstance(doc_node, DocComment)
            self._render_nodes([
                doc_node.summary_section,
                doc_node.remarks_block,
                doc_node.private_remarks,
                doc_node.deprecated_block,
                doc_node.params,
                doc_node.type_params,
                doc_node.returns_block,
                *doc_node.custom_blocks,
                *doc_node.see_blocks,
                doc_node.inherit_doc_tag,
            ])
            if doc_node.modifier_tag_set.nodes:
                self._ensure_line_skipped()
                self._render_nodes(doc_node.modifier_tag_set.nodes)

        elif kind == DocNodeKind.DeclarationReference:
            assert isinstance(doc_node, DocDeclarationReference)
            if doc_node.beta_reference is not None:
                self._write_content(str(doc_node.beta_reference))
            else:
                self._write_content(doc_node.package_name)
                self._write_content(doc_node.import_path)
                if doc_node.package_name is not None or doc_node.import_path is not None:
                    self._write_content('#')
                self._render_nodes(doc_node.member_references)

        elif kind == DocNodeKind.ErrorText:
            assert isinstance(doc_node, DocErrorText)
            self._write_content(doc_node.text)

        elif kind == DocNodeKind.EscapedText:
            assert isinstance(doc_node, DocEscapedText)
            self._write_content(doc_node.encoded_text)

        elif kind == DocNodeKind.FencedCode:
            assert isinstance(doc_node, DocFencedCode)
            self._ensure_at_start_of_line()
            self._write_content('```')
            self._write_content(doc_node.language)
            self._write_newline()
            self._write_content(doc_node.code)
            self._write_content('```')
            self._write_newline()
            self._write_newline()

        elif kind == DocNodeKind.HtmlAttribute:
            assert isinstance(doc_node, DocHtmlAttribute)
            self._write_content(doc_node.name)
            self._write_content(doc_node.spacing_after_name)
            self._write_content('=')
            self._write_content(doc_node.spacing_after_equals)
            self._write_content(doc_node.value)
            self._write_content(doc_node.spacing_after_value)

        elif kind == DocNodeKind.HtmlStartTag:
            assert isinstance(doc_node, DocHtmlStartTag)
            self._write_content('<')
            self._write_content(doc_node.name)
            self._write_content(doc_node.spacing_after_name)
            needs_space = not doc_node.spacing_after_name
            for attribute in doc_node.html_attributes:
                if needs_space:
                    self._write_content(' ')
                self._render_node(attribute)
                needs_space = not attribute.spacing_after_value
            self._write_content('/>' if doc_node.self_closing_tag else '>')

        elif kind == DocNodeKind.HtmlEndTag:
            assert isinstance(doc_node, DocHtmlEndTag)
            self._write_content('</')
            self._write_content(doc_node.name)
            self._write_content('>')

        elif kind == DocNodeKind.InheritDocTag:
            assert isinstance(doc_node, DocInheritDocTag)
            reference = doc_node.declaration_reference

            def write_inherit_doc_content() -> None:
                if reference is not None:
                    self._write_content(' ')
                    self._render_node(reference)
            self._render_inline_tag(doc_node, write_inherit_doc_content)

        elif kind == DocNodeKind.InlineTag:
            assert isinstance(doc_node, DocInlineTag)
            content = doc_node.tag_content

            def write_inline_tag_content() -> None:
                if content:
                    self._write_content(' ')
                    self._write_content(content)
            self._render_inline_tag(doc_node, write_inline_tag_content)

        elif kind == DocNodeKind.LinkTag:
            assert isinstance(doc_node, DocLinkTag)
            link_tag = doc_node

            def write_link_tag_content() -> None:
                if link_tag.url_destination is not None:
                    self._write_content(' ')
                    self._write_content(link_tag.url_destination)
                elif link_tag.code_destination is not None:
                    self._write_content(' ')
                    self._render_node(link_tag.code_destination)
                if link_tag.link_text is not None:
                    self._write_content(' ')
                    self._write_content('|')
                    self._write_content(' ')
                    self._write_content(link_tag.link_text)
            self._render_inline_tag(doc_node, write_link_tag_content)

        elif kind == DocNodeKind.MemberIdentifier:
            assert isinstance(doc_node, DocMemberIdentifier)
            if doc_node.has_quotes:
                self._write_content('"')
                self._write_content(doc_node.identifier)
                self._write_content('"')
            else:
                self._write_content(doc_node.identifier)

        elif kind == DocNodeKind.MemberReference:
            assert isinstance(doc_node, DocMemberReference)
            if doc_node.has_dot:
                self._write_content('.')
            if doc_node.selector is not None:
                self._write_content('(')
            if doc_node.member_symbol is not None:
                self._render_node(doc_node.member_symbol)
            else:
                self._render_node(doc_node.member_identifier)
            if doc_node.selector is not None:
                self._write_content(':')
                self._render_node(doc_node.selector)
                self._write_content(')')

        elif kind == DocNodeKind.MemberSelector:
            assert isinstance(doc_node, DocMemberSelector)
            self._write_content(doc_node.selector)

        elif kind == DocNodeKind.MemberSymbol:
            assert isinstance(doc_node, DocMemberSymbol)
            self._write_content('[')
            self._render_node(doc_node.symbol_reference)
            self._write_content(']')

        elif kind == DocNodeKind.Section:
            assert isinstance(doc_node, DocSection)
            self._render_nodes(doc_node.nodes)

        elif kind == DocNodeKind.Paragraph:
            assert isinstance(doc_node, DocParagraph)
            trimmed_nodes = trim_spaces_in_paragraph(doc_node).nodes
            if trimmed_nodes:
                if self._hanging_paragraph:
                    self._hanging_paragraph = False
                else:
                    self._ensure_line_skipped()
                self._render_nodes(trimmed_nodes)
                self._write_newline()

        elif kind == DocNodeKind.ParamBlock:
            assert isinstance(doc_node, DocParamBlock)
            self._ensure_line_skipped()
            self._render_node(doc_node.block_tag)
            self._write_content(' ')
            if doc_node.parameter_name:
                self._write_content(doc_node.parameter_name)
                self._write_content(' - ')
            self._hanging_paragraph = True
            self._render_node(doc_node.content)
            self._hanging_paragraph = False

        elif kind == DocNodeKind.ParamCollection:
            assert isinstance(doc_node, DocParamCollection)
            self._render_nodes(doc_node.blocks)

        elif kind == DocNodeKind.PlainText:
            assert isinstance(doc_node, DocPlainText)
            self._write_content(doc_node.text)

        elif kind == DocNodeKind.SoftBreak:
            if self._line_state is _LineState.MiddleOfLine:
                self._write_newline()

        elif kind == DocNodeKind.Excerpt:
            # Excerpts only exist in parsed trees
            pass

        elif kind in list(DocNodeKind):
            raise AssertionError(f'Unhandled node kind {kind}')

        else:
            # A custom node: render what it contains
            self._render_nodes(doc_node.get_child_nodes())

    def _render_inline_tag(self, doc_inline_tag: DocInlineTagBase,
                           write_inline_tag_content: Callable[[], None]) -> None:
        self._write_content('{')
        self._write_content(doc_inline_tag.tag_name)
        write_inline_tag_content()
        self._write_content('}')

    def _render_nodes(self, doc_nodes: Iterable[Optional[DocNode]]) -> None:
        for doc_node in doc_nodes:
            self._render_node(doc_node)

    def _ensure_at_start_of_line(self) -> None:
        if self._line_state is _LineState.MiddleOfLine:
            self._write_newline()

    def _ensure_line_skipped(self) -> None:
        self._ensure_at_start_of_line()
        if self._previous_line_had_content:
            self._write_newline()

    def _write_content(self, content: Optional[str]) -> None:
        """
        Write some text.  Newlines in it become L{_write_newline} calls, so
        that each line gets its C{" *"} prefix.
        """
        if not content:
            return

        split_lines = _NEWLINE_RE.split(content)
        if len(split_lines) > 1:
            for i, line in enumerate(split_lines):
                if i:
                    self._write_newline()
                self._write_content(line)
            return

        assert self._output is not None
        if self._line_state is _LineState.Closed:
            if self._emit_comment_framing:
                self._output.append('/**' + self.eol + ' *')
            self._line_state = _LineState.StartOfLine

        if self._line_state is _LineState.StartOfLine:
            if self._emit_comment_framing:
                self._output.append(' ')

        self._output.append(content)
        self._line_state = _LineState.MiddleOfLine
        self._previous_line_had_content = True

    def _write_newline(self) -> None:
        assert self._output is not None
        if self._line_state is _LineState.Closed:
            if self._emit_comment_framing:
                self._output.append('/**' + self.eol + ' *')
            self._line_state = _LineState.StartOfLine

        self._previous_line_had_content = self._line_state is _LineState.MiddleOfLine

        if self._emit_comment_framing:
            self._output.append(self.eol + ' *')
        else:
            self._output.append(self.eol)

        self._line_state = _LineState.StartOfLine
        self._hanging_paragraph = False

    def _write_end(self) -> None:
        assert self._output is not None
        if self._line_state is _LineState.MiddleOfLine:
            if self._emit_comment_framing:
                self._write_newline()

        if self._line_state is not _LineState.Closed:
            if self._emit_comment_framing:
                self._output.append('/' + self.eol)
            self._line_state = _LineState.Closed


class PlainTextEmitter:
    """
    Looks at the text that a tree would show to a reader, ignoring tags
    and markup.
    """

    @classmethod
    def has_any_text_content(cls, node_or_nodes: Union[DocNode, Sequence[DocNode]],
                             required_characters: int = 1) -> bool:
        """
        Whether the tree has some text other than spaces, such as a
        C{@deprecated} block that explains what to use instead.

        @param required_characters: How many non-space characters are
            needed to count as content.
        @raises ValueError: If C{required_characters} is less than 1.
        """
        if required_characters < 1:
            raise ValueError('required_characters must be greater than zero')

        if isinstance(node_or_nodes, DocNode):
            nodes: Sequence[DocNode] = [node_or_nodes]
        else:
            nodes = node_or_nodes

        return cls._scan_text_content(nodes, required_characters) >= required_characters

    @classmethod
    def _scan_text_content(cls, nodes: Iterable[DocNode], required_characters: int) -> int:
        """
        @return: The number of non-space characters found, counting stops
            once C{required_characters} is reached.
        """
        found_characters = 0
        for node in nodes:
            if isinstance(node, (DocFencedCode, DocCodeSpan)):
                found_characters += cls._count_non_space_characters(node.code)
            elif isinstance(node, DocEscapedText):
                found_characters += cls._count_non_space_characters(node.decoded_text)
            elif isinstance(node, DocLinkTag):
                found_characters += cls._count_non_space_characters(node.link_text or '')
            elif isinstance(node, DocPlainText):
                found_characters += cls._count_non_space_characters(node.text)

            if found_characters >= required_characters:
                break

            found_characters += cls._scan_text_content(node.get_child_nodes(),
                                                       required_characters - found_characters)
            if found_characters >= required_characters:
                break

        return found_characters

    @staticmethod
    def _count_non_space_characters(text: str) -> int:
        return len(text) - len(_WHITESPACE_RE.findall(text))

    @classmethod
    def get_plain_text(cls, node: DocNode) -> str:
        """
        The text of a tree without its markup: code spans keep their code,
        links are replaced by their text, paragraphs are separated by a
        blank line and other tags are dropped.
        """
        paragraphs: List[str] = []
        cls._collect_paragraphs(node, paragraphs)
        return '\n\n'.join(paragraph for paragraph in paragraphs if paragraph)

    @classmethod
    def _collect_paragraphs(cls, node: DocNode, paragraphs: List[str]) -> None:
        if isinstance(node, DocParagraph):
            chunks: List[str] = []
            for child in trim_spaces_in_paragraph(node).nodes:
                cls._collect_text(child, chunks)
            paragraphs.append(''.join(chunks).strip())
        elif isinstance(node, DocFencedCode):
            paragraphs.append(node.code.rstrip('\n'))
        elif isinstance(node, DocComment):
            cls._collect_paragraphs(node.summary_section, paragraphs)
        else:
            for child in node.get_child_nodes():
                cls._collect_paragraphs(child, paragraphs)

    @classmethod
    def _collect_text(cls, node: DocNode, chunks: List[str]) -> None:
        kind = node.kind
        if isinstance(node, (DocPlainText, DocErrorText)):
            chunks.append(node.text)
        elif kind == DocNodeKind.SoftBreak:
            chunks.append('\n')
        elif isinstance(node, DocCodeSpan):
            chunks.append(node.code)
        elif isinstance(node, DocEscapedText):
            chunks.append(node.decoded_text)
        elif isinstance(node, DocLinkTag):
            if node.link_text is not None:
                chunks.append(node.link_text)
            elif node.url_destination is not None:
                chunks.append(node.url_destination)
            elif node.code_destination is not None:
                chunks.append(node.code_destination.emit_as_tsdoc())
