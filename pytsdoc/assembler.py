"""
The second parsing stage: sort the verbatim nodes into a L{DocComment}.
"""
from typing import TYPE_CHECKING, List, Optional, Sequence

from pytsdoc.configuration import TSDocTagDefinition, TSDocTagSyntaxKind
from pytsdoc.emitters import PlainTextEmitter
from pytsdoc.messages import TSDocMessageId
from pytsdoc.nodes import (DocBlock, DocBlockTag, DocHtmlEndTag, DocHtmlStartTag,
                           DocInheritDocTag, DocInlineTagBase, DocNode, DocNodeKind,
                           DocParamBlock, DocSection)
from pytsdoc.tags import StandardTags

if TYPE_CHECKING:
    from pytsdoc.parser import ParserContext
    from pytsdoc.tokenreader import TokenSequence


class DocCommentAssembler:
    """
    Walks the nodes found by the L{NodeParser} in source order.

    The content goes to the I{current section}: the summary at first, then
    the content of the last block that was opened.  Tags are checked
    against the configuration on the way.
    """

    def __init__(self, parser_context: 'ParserContext'):
        self._parser_context = parser_context
        self._configuration = parser_context.configuration
        self._doc_comment = parser_context.doc_comment
        self._current_section: DocSection = self._doc_comment.summary_section
        self._open_html_tags: List[DocHtmlStartTag] = []

    def assemble(self, verbatim_nodes: Sequence[DocNode]) -> None:
        for doc_node in verbatim_nodes:
            if isinstance(doc_node, DocParamBlock):
                self._add_param_block(doc_node)

            elif isinstance(doc_node, DocBlockTag):
                self._add_block_tag(doc_node)

            elif isinstance(doc_node, DocInlineTagBase):
                tag_definition = self._configuration.try_get_tag_definition_with_upper_case(
                    doc_node.tag_name_with_upper_case)
                if doc_node.tag_name_excerpt is not None:
                    self._validate_tag_definition(tag_definition, doc_node.tag_name, True,
                                                  doc_node.tag_name_excerpt, doc_node)

                # Looks like an inline tag, but stands for the whole comment body
                if isinstance(doc_node, DocInheritDocTag):
                    self._doc_comment.inherit_doc_tag = doc_node
                else:
                    self._push_node(doc_node)

            elif isinstance(doc_node, DocHtmlStartTag):
                if not doc_node.self_closing_tag:
                    self._open_html_tags.append(doc_node)
                self._push_node(doc_node)

            elif isinstance(doc_node, DocHtmlEndTag):
                self._close_html_tag(doc_node)
                self._push_node(doc_node)

            else:
                self._push_node(doc_node)

        self._report_unclosed_html_tags()
        self._perform_validation_checks()

    def _push_node(self, doc_node: DocNode) -> None:
        if self._configuration.doc_node_manager.is_allowed_child(DocNodeKind.Paragraph,
                                                                 doc_node.kind):
            self._current_section.append_node_in_paragraph(doc_node)
        else:
            self._current_section.append_node(doc_node)

    def _enter_section(self, section: DocSection) -> None:
        self._report_unclosed_html_tags()
        self._current_section = section

    def _add_block_tag(self, doc_block_tag: DocBlockTag) -> None:
        tag_definition = self._configuration.try_get_tag_definition_with_upper_case(
            doc_block_tag.tag_name_with_upper_case)
        self._validate_tag_definition(tag_definition, doc_block_tag.tag_name, False,
                                      doc_block_tag.get_token_sequence(), doc_block_tag)

        if tag_definition is not None:
            if tag_definition.syntax_kind is TSDocTagSyntaxKind.BlockTag:
                block = DocBlock(self._configuration, doc_block_tag)
                self._add_block_to_doc_comment(block)
                self._enter_section(block.content)
                return
            elif tag_definition.syntax_kind is TSDocTagSyntaxKind.ModifierTag:
                # Modifiers are not part of the content, unless repeated
                if self._doc_comment.modifier_tag_set.add_tag(doc_block_tag):
                    return

        self._push_node(doc_block_tag)

    def _add_param_block(self, doc_param_block: DocParamBlock) -> None:
        block_tag = doc_param_block.block_tag
        tag_definition = self._configuration.try_get_tag_definition_with_upper_case(
            block_tag.tag_name_with_upper_case)
        self._validate_tag_definition(tag_definition, block_tag.tag_name, False,
                                      block_tag.get_token_sequence(), block_tag)

        if block_tag.tag_name_with_upper_case == StandardTags.type_param.tag_name_with_upper_case:
            self._doc_comment.type_params.add(doc_param_block)
        else:
            self._doc_comment.params.add(doc_param_block)
        self._enter_section(doc_param_block.content)

    def _add_block_to_doc_comment(self, block: DocBlock) -> None:
        doc_comment = self._doc_comment
        tag_name_with_upper_case = block.block_tag.tag_name_with_upper_case

        if tag_name_with_upper_case == StandardTags.see.tag_name_with_upper_case:
            doc_comment.append_see_block(block)
            return

        singletons = (
            (StandardTags.remarks, 'remarks_block'),
            (StandardTags.private_remarks, 'private_remarks'),
            (StandardTags.deprecated, 'deprecated_block'),
            (StandardTags.returns, 'returns_block'),
        )
        for tag_definition, attribute in singletons:
            if tag_name_with_upper_case == tag_definition.tag_name_with_upper_case:
                if getattr(doc_comment, attribute) is None:
                    setattr(doc_comment, attribute, block)
                    return
                # Keep the content of the duplicate, so that nothing is lost
                self._parser_context.log.add_message_for_token_sequence(
                    TSDocMessageId.DuplicateBlockTag,
                    f'The {block.block_tag.tag_name} block may only be used once per comment',
                    block.block_tag.get_token_sequence(), block.block_tag)
                break

        doc_comment.append_custom_block(block)

    def _close_html_tag(self, end_tag: DocHtmlEndTag) -> None:
        if end_tag.name_excerpt is None:
            return
        if not self._open_html_tags:
            self._parser_context.log.add_message_for_token_sequence(
                TSDocMessageId.XmlTagNameMismatch,
                f'The closing tag "</{end_tag.name}>" does not match any opening tag',
                end_tag.name_excerpt, end_tag)
            return
        start_tag = self._open_html_tags.pop()
        if start_tag.name != end_tag.name:
            self._parser_context.log.add_message_for_token_sequence(
                TSDocMessageId.XmlTagNameMismatch,
                f'Expecting closing tag name to match opening tag name, got "{end_tag.name}" '
                f'but expected "{start_tag.name}"',
                end_tag.name_excerpt, end_tag)

    def _report_unclosed_html_tags(self) -> None:
        """
        Report the start tags of the current section that were never closed.
        """
        for start_tag in self._open_html_tags:
            if start_tag.name_excerpt is not None:
                self._parser_context.log.add_message_for_token_sequence(
                    TSDocMessageId.MissingHtmlEndTag,
                    f'Expecting a closing tag "</{start_tag.name}>" for this opening tag',
                    start_tag.name_excerpt, start_tag)
        self._open_html_tags = []

    def _validate_tag_definition(self, tag_definition: Optional[TSDocTagDefinition],
                                 tag_name: str, expecting_inline_tag: bool,
                                 token_sequence_for_error_context: 'TokenSequence',
                                 node_for_error_context: DocNode) -> None:
        log = self._parser_context.log

        if tag_definition is None:
            if not self._configuration.validation.ignore_undefined_tags:
                log.add_message_for_token_sequence(
                    TSDocMessageId.UndefinedTag,
                    f'The TSDoc tag "{tag_name}" is not defined in this configuration',
                    token_sequence_for_error_context, node_for_error_context)
            return

        is_inline_tag = tag_definition.syntax_kind is TSDocTagSyntaxKind.InlineTag
        if is_inline_tag != expecting_inline_tag:
            if expecting_inline_tag:
                log.add_message_for_token_sequence(
                    TSDocMessageId.TagShouldNotHaveBraces,
                    f'The TSDoc tag "{tag_name}" is not an inline tag; it must not be enclosed '
                    'in "{ }" braces',
                    token_sequence_for_error_context, node_for_error_context)
            else:
                log.add_message_for_token_sequence(
                    TSDocMessageId.InlineTagMissingBraces,
                    f'The TSDoc tag "{tag_name}" is an inline tag; it must be enclosed in "{{ }}" '
                    'braces',
                    token_sequence_for_error_context, node_for_error_context)
        elif self._configuration.validation.report_unsupported_tags \
                and not self._configuration.is_tag_supported(tag_definition):
            log.add_message_for_token_sequence(
                TSDocMessageId.UnsupportedTag,
                f'The TSDoc tag "{tag_name}" is not supported by this tool',
                token_sequence_for_error_context, node_for_error_context)

    def _perform_validation_checks(self) -> None:
        doc_comment = self._doc_comment
        log = self._parser_context.log

        deprecated_block = doc_comment.deprecated_block
        if deprecated_block is not None \
                and not PlainTextEmitter.has_any_text_content(deprecated_block):
            log.add_message_for_token_sequence(
                TSDocMessageId.MissingDeprecationMessage,
                f'The {deprecated_block.block_tag.tag_name} block must include a deprecation '
                'message, e.g. describing the recommended alternative',
                deprecated_block.block_tag.get_token_sequence(), deprecated_block)

        if doc_comment.inherit_doc_tag is not None:
            remarks_block = doc_comment.remarks_block
            if remarks_block is not None:
                log.add_message_for_token_sequence(
                    TSDocMessageId.InheritDocIncompatibleTag,
                    f'A "{remarks_block.block_tag.tag_name}" block must not be used, because '
                    'that content is provided by the @inheritDoc tag',
                    remarks_block.block_tag.get_token_sequence(), remarks_block.block_tag)
            if PlainTextEmitter.has_any_text_content(doc_comment.summary_section):
                log.add_message_for_text_range(
                    TSDocMessageId.InheritDocIncompatibleSummary,
                    'The summary section must not have any content, because that content is '
                    'provided by the @inheritDoc tag',
                    self._parser_context.comment_range)
