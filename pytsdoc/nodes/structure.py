"""
The nodes that give a comment its structure: sections, paragraphs, blocks
and the L{DocComment} root.
"""
from typing import TYPE_CHECKING, Dict, Iterable, Iterator, List, Optional, Sequence

from pytsdoc.nodes.base import (DocNode, DocNodeContainer, DocNodeKind, ExcerptKind,
                                excerpt, excerpt_text)
from pytsdoc.stringchecks import validate_tsdoc_tag_name
from pytsdoc.tags import StandardModifierTagSet

if TYPE_CHECKING:
    from pytsdoc.configuration import TSDocConfiguration
    from pytsdoc.nodes.inline import DocInheritDocTag
    from pytsdoc.tokenreader import TokenSequence


class DocBlockTag(DocNode):
    """
    A block tag like C{@remarks} or a modifier tag like C{@internal}.
    """

    def __init__(self, configuration: 'TSDocConfiguration', tag_name: str,
                 *, tag_name_excerpt: Optional['TokenSequence'] = None):
        """
        @param tag_name: The name, including the C{@}.
        @raises ValueError: If C{tag_name} is not a valid tag name.
        """
        super().__init__(configuration)
        validate_tsdoc_tag_name(tag_name)
        self.tag_name = tag_name
        self.tag_name_with_upper_case = tag_name.upper()
        self._tag_name_excerpt = excerpt(configuration, ExcerptKind.BlockTag, tag_name_excerpt)

    @property
    def kind(self) -> str:
        return DocNodeKind.BlockTag

    @property
    def tag_name_excerpt(self) -> Optional['TokenSequence']:
        if self._tag_name_excerpt is None:
            return None
        return self._tag_name_excerpt.content

    def get_token_sequence(self) -> 'TokenSequence':
        """
        @raises RuntimeError: If the tag was not created by the parser.
        """
        if self._tag_name_excerpt is None:
            raise RuntimeError('DocBlockTag.get_token_sequence() failed because this object '
                               'did not originate from a parsed input')
        return self._tag_name_excerpt.content

    def _on_get_child_nodes(self) -> Sequence[Optional[DocNode]]:
        return [self._tag_name_excerpt]

    def __repr__(self) -> str:
        return f'<DocBlockTag {self.tag_name}>'


class DocParagraph(DocNodeContainer):
    """
    A run of inline content, separated from the next paragraph by a blank line.
    """

    @property
    def kind(self) -> str:
        return DocNodeKind.Paragraph


class DocSection(DocNodeContainer):
    """
    The content of a block: paragraphs and block-level nodes like fenced code.
    """

    @property
    def kind(self) -> str:
        return DocNodeKind.Section

    def append_node_in_paragraph(self, doc_node: DocNode) -> None:
        """
        Append C{doc_node} to the last paragraph of the section, starting a
        new paragraph if the section does not end with one.
        """
        paragraph: Optional[DocParagraph] = None
        if self._nodes:
            last_node = self._nodes[-1]
            if last_node.kind == DocNodeKind.Paragraph:
                assert isinstance(last_node, DocParagraph)
                paragraph = last_node
        if paragraph is None:
            paragraph = DocParagraph(self.configuration)
            self.append_node(paragraph)
        paragraph.append_node(doc_node)

    def append_nodes_in_paragraph(self, doc_nodes: Iterable[DocNode]) -> None:
        for doc_node in doc_nodes:
            self.append_node_in_paragraph(doc_node)


class DocBlock(DocNode):
    """
    A block tag with the content that follows it, up to the next block tag.
    """

    def __init__(self, configuration: 'TSDocConfiguration', block_tag: DocBlockTag):
        super().__init__(configuration)
        self.block_tag = block_tag
        self.content = DocSection(configuration)

    @property
    def kind(self) -> str:
        return DocNodeKind.Block

    def _on_get_child_nodes(self) -> Sequence[Optional[DocNode]]:
        return [self.block_tag, self.content]

    def __repr__(self) -> str:
        return f'<{self.__class__.__name__} {self.block_tag.tag_name}>'


class DocParamBlock(DocBlock):
    """
    A C{@param} or C{@typeParam} block::

        @param name - description

    A JSDoc type (C{{string}}) or optional name (C{[name]}) is tolerated
    with a warning, and kept in the tree as non-standard text.
    """

    def __init__(self, configuration: 'TSDocConfiguration', block_tag: DocBlockTag,
                 parameter_name: Optional[str] = None,
                 *, spacing_before_parameter_name_excerpt: Optional['TokenSequence'] = None,
                 unsupported_jsdoc_type_before_parameter_name_excerpt: Optional['TokenSequence'] = None,
                 unsupported_jsdoc_optional_name_open_excerpt: Optional['TokenSequence'] = None,
                 parameter_name_excerpt: Optional['TokenSequence'] = None,
                 unsupported_jsdoc_optional_name_rest_excerpt: Optional['TokenSequence'] = None,
                 spacing_after_parameter_name_excerpt: Optional['TokenSequence'] = None,
                 unsupported_jsdoc_type_after_parameter_name_excerpt: Optional['TokenSequence'] = None,
                 hyphen_excerpt: Optional['TokenSequence'] = None,
                 spacing_after_hyphen_excerpt: Optional['TokenSequence'] = None,
                 unsupported_jsdoc_type_after_hyphen_excerpt: Optional['TokenSequence'] = None):
        super().__init__(configuration, block_tag)
        c = configuration
        nonstandard = ExcerptKind.NonstandardText
        self._spacing_before_parameter_name_excerpt = excerpt(
            c, ExcerptKind.Spacing, spacing_before_parameter_name_excerpt)
        self._unsupported_jsdoc_type_before_parameter_name_excerpt = excerpt(
            c, nonstandard, unsupported_jsdoc_type_before_parameter_name_excerpt)
        self._unsupported_jsdoc_optional_name_open_excerpt = excerpt(
            c, nonstandard, unsupported_jsdoc_optional_name_open_excerpt)
        self._parameter_name_excerpt = excerpt(c, ExcerptKind.ParamBlock_ParameterName,
                                               parameter_name_excerpt)
        self._unsupported_jsdoc_optional_name_rest_excerpt = excerpt(
            c, nonstandard, unsupported_jsdoc_optional_name_rest_excerpt)
        self._spacing_after_parameter_name_excerpt = excerpt(
            c, ExcerptKind.Spacing, spacing_after_parameter_name_excerpt)
        self._unsupported_jsdoc_type_after_parameter_name_excerpt = excerpt(
            c, nonstandard, unsupported_jsdoc_type_after_parameter_name_excerpt)
        self._hyphen_excerpt = excerpt(c, ExcerptKind.ParamBlock_Hyphen, hyphen_excerpt)
        self._spacing_after_hyphen_excerpt = excerpt(c, ExcerptKind.Spacing,
                                                     spacing_after_hyphen_excerpt)
        self._unsupported_jsdoc_type_after_hyphen_excerpt = excerpt(
            c, nonstandard, unsupported_jsdoc_type_after_hyphen_excerpt)

        self.parameter_name: str = (excerpt_text(self._parameter_name_excerpt)
                                    or parameter_name or '')
        """The name of the parameter, or C{""} if it could not be parsed."""

    @property
    def kind(self) -> str:
        return DocNodeKind.ParamBlock

    def _on_get_child_nodes(self) -> Sequence[Optional[DocNode]]:
        return [
            self.block_tag,
            self._spacing_before_parameter_name_excerpt,
            self._unsupported_jsdoc_type_before_parameter_name_excerpt,
            self._unsupported_jsdoc_optional_name_open_excerpt,
            self._parameter_name_excerpt,
            self._unsupported_jsdoc_optional_name_rest_excerpt,
            self._spacing_after_parameter_name_excerpt,
            self._unsupported_jsdoc_type_after_parameter_name_excerpt,
            self._hyphen_excerpt,
            self._spacing_after_hyphen_excerpt,
            self._unsupported_jsdoc_type_after_hyphen_excerpt,
            self.content,
        ]

    def __repr__(self) -> str:
        return f'<DocParamBlock {self.block_tag.tag_name} {self.parameter_name!r}>'


class DocParamCollection(DocNode):
    """
    The C{@param} (or C{@typeParam}) blocks of a comment, in source order.

    When a name is documented twice, L{try_get_block_by_name} returns the
    first block.
    """

    def __init__(self, configuration: 'TSDocConfiguration'):
        super().__init__(configuration)
        self._blocks: List[DocParamBlock] = []
        self._blocks_by_name: Dict[str, DocParamBlock] = {}

    @property
    def kind(self) -> str:
        return DocNodeKind.ParamCollection

    @property
    def blocks(self) -> Sequence[DocParamBlock]:
        return tuple(self._blocks)

    @property
    def count(self) -> int:
        return len(self._blocks)

    def __iter__(self) -> Iterator[DocParamBlock]:
        return iter(self._blocks)

    def __len__(self) -> int:
        return len(self._blocks)

    def add(self, doc_param_block: DocParamBlock) -> None:
        self._blocks.append(doc_param_block)
        self._blocks_by_name.setdefault(doc_param_block.parameter_name, doc_param_block)

    def clear(self) -> None:
        self._blocks.clear()
        self._blocks_by_name.clear()

    def try_get_block_by_name(self, parameter_name: str) -> Optional[DocParamBlock]:
        return self._blocks_by_name.get(parameter_name)

    def _on_get_child_nodes(self) -> Sequence[Optional[DocNode]]:
        return self._blocks


class DocComment(DocNode):
    """
    The root of a parsed comment.

    The parser sorts the content into the standard sections; the blocks of
    any other tag end up in L{custom_blocks}.
    """

    def __init__(self, configuration: 'TSDocConfiguration'):
        super().__init__(configuration)

        self.summary_section = DocSection(configuration)
        """The content before the first block tag: a short description of the item."""

        self.remarks_block: Optional[DocBlock] = None
        """The C{@remarks} block: the main documentation."""

        self.private_remarks: Optional[DocBlock] = None
        """The C{@privateRemarks} block: notes for maintainers, not for users."""

        self.deprecated_block: Optional[DocBlock] = None
        """The C{@deprecated} block, which should explain what to use instead."""

        self.params = DocParamCollection(configuration)
        self.type_params = DocParamCollection(configuration)

        self.returns_block: Optional[DocBlock] = None

        self.inherit_doc_tag: Optional['DocInheritDocTag'] = None
        """The C{{@inheritDoc}} tag, if any."""

        self.modifier_tag_set = StandardModifierTagSet()
        """The modifier tags like C{@internal}."""

        self._custom_blocks: List[DocBlock] = []
        self._see_blocks: List[DocBlock] = []

    @property
    def kind(self) -> str:
        return DocNodeKind.Comment

    @property
    def custom_blocks(self) -> Sequence[DocBlock]:
        """
        The blocks of the tags without a dedicated attribute, like C{@example}.
        """
        return tuple(self._custom_blocks)

    @property
    def see_blocks(self) -> Sequence[DocBlock]:
        """
        The C{@see} blocks, one per reference.
        """
        return tuple(self._see_blocks)

    def append_custom_block(self, block: DocBlock) -> None:
        self._custom_blocks.append(block)

    def append_see_block(self, block: DocBlock) -> None:
        self._see_blocks.append(block)

    def emit_as_tsdoc(self) -> str:
        """
        Render the comment as a normalized C{/** */} comment.
        """
        from pytsdoc.emitters import StringBuilder, TSDocEmitter
        output = StringBuilder()
        TSDocEmitter().render_comment(output, self)
        return str(output)

    def _on_get_child_nodes(self) -> Sequence[Optional[DocNode]]:
        return [
            self.summary_section,
            self.remarks_block,
            self.private_remarks,
            self.deprecated_block,
            self.params if self.params.count else None,
            self.type_params if self.type_params.count else None,
            self.returns_block,
            *self._custom_blocks,
            *self._see_blocks,
            self.inherit_doc_tag,
            *self.modifier_tag_set.nodes,
        ]
