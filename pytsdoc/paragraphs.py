"""
The last parsing stage: split the sections into paragraphs at blank lines.
"""
import enum
import re
from typing import List, Sequence

from pytsdoc.nodes import DocNode, DocParagraph, DocPlainText, DocSection, DocSoftBreak

_WHITESPACE_RE = re.compile(r'^\s*$')


class _SplitterState(enum.Enum):
    Start = enum.auto()
    """Skipping the blank lines before the first paragraph."""
    AwaitingTrailer = enum.auto()
    """Reading a paragraph, until a blank line."""
    ReadingTrailer = enum.auto()
    """Reading the blank lines after a paragraph."""


class ParagraphSplitter:
    """
    While assembling, all the inline content of a section goes into a
    single paragraph.  This splits it where one or more blank lines
    (lines ended by a L{DocSoftBreak}) appear.  The blank lines stay at
    the end of the preceding paragraph, as its I{trailer}.
    """

    @classmethod
    def split_paragraphs(cls, node: DocNode) -> None:
        """
        Split the paragraphs of every section found under C{node}.
        """
        if isinstance(node, DocSection):
            cls.split_paragraphs_for_section(node)
            return
        for child_node in node.get_child_nodes():
            cls.split_paragraphs(child_node)

    @classmethod
    def split_paragraphs_for_section(cls, doc_section: DocSection) -> None:
        output_nodes: List[DocNode] = []
        for old_node in doc_section.nodes:
            if isinstance(old_node, DocParagraph):
                cls._split_paragraph(old_node, output_nodes)
            else:
                output_nodes.append(old_node)

        doc_section.clear_nodes()
        doc_section.append_nodes(output_nodes)

    @classmethod
    def _split_paragraph(cls, old_paragraph: DocParagraph, output_nodes: List[DocNode]) -> None:
        input_nodes: Sequence[DocNode] = old_paragraph.nodes

        current_paragraph = DocParagraph(old_paragraph.configuration)
        output_nodes.append(current_paragraph)

        state = _SplitterState.Start

        current_index = 0
        while current_index < len(input_nodes):
            # Find the end of the line, including its soft break
            is_blank_line = True
            line_end_index = current_index
            while line_end_index < len(input_nodes):
                node = input_nodes[line_end_index]
                line_end_index += 1
                if isinstance(node, DocSoftBreak):
                    break
                if is_blank_line and not cls._is_whitespace(node):
                    is_blank_line = False

            if state is _SplitterState.Start:
                if not is_blank_line:
                    state = _SplitterState.AwaitingTrailer
            elif state is _SplitterState.AwaitingTrailer:
                if is_blank_line:
                    state = _SplitterState.ReadingTrailer
            elif state is _SplitterState.ReadingTrailer:
                if not is_blank_line:
                    current_paragraph = DocParagraph(old_paragraph.configuration)
                    output_nodes.append(current_paragraph)
                    state = _SplitterState.AwaitingTrailer
            else:
                raise AssertionError(f'Unknown state {state}')

            current_paragraph.append_nodes(input_nodes[current_index:line_end_index])
            current_index = line_end_index

    @staticmethod
    def _is_whitespace(node: DocNode) -> bool:
        return isinstance(node, DocPlainText) and bool(_WHITESPACE_RE.match(node.text))
