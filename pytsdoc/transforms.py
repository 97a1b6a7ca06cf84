"""
Transformations of node trees, for renderers.
"""
import re
from typing import List

from pytsdoc.nodes import DocNode, DocParagraph, DocPlainText, DocSoftBreak

_SPACES_RE = re.compile(r'\s+')


def trim_spaces_in_paragraph(doc_paragraph: DocParagraph) -> DocParagraph:
    """
    Collapse the spacing of the plain text in a paragraph, as HTML would.
    Leading and trailing spaces are removed, other runs of spaces become a
    single space, and consecutive plain text nodes are merged.  Soft breaks
    are kept, except at the start and the end of the paragraph.  For
    example::

        "   Here   are some   ", <SoftBreak>, "   words", {@inheritDoc}, "to process.", "  "

    becomes::

        "Here are some", <SoftBreak>, "words", {@inheritDoc}, "to process."

    @return: A new paragraph.  The original is not modified.
    """
    configuration = doc_paragraph.configuration
    transformed_nodes: List[DocNode] = []

    # Whether the next nonempty node needs a space before it
    pending_space = False
    accumulated_text_chunks: List[str] = []

    # Leading spaces are always trimmed
    finished_skipping_leading_spaces = False

    def at_start_of_line() -> bool:
        return bool(accumulated_text_chunks) and accumulated_text_chunks[-1] == '\n'

    def push_accumulated_text(end_of_paragraph: bool) -> None:
        text = ''.join(accumulated_text_chunks)
        if end_of_paragraph:
            text = text.rstrip('\n')
        for i, line in enumerate(text.split('\n')):
            if i != 0:
                transformed_nodes.append(DocSoftBreak(configuration))
            if line:
                transformed_nodes.append(DocPlainText(configuration, line))
        accumulated_text_chunks.clear()

    for node in doc_paragraph.nodes:
        if isinstance(node, DocPlainText):
            text = node.text
            started_with_space = bool(text) and text[0].isspace()
            ended_with_space = bool(text) and text[-1].isspace()
            collapsed_text = _SPACES_RE.sub(' ', text).strip()

            if started_with_space and finished_skipping_leading_spaces \
                    and not at_start_of_line():
                pending_space = True

            if collapsed_text:
                if pending_space:
                    accumulated_text_chunks.append(' ')
                    pending_space = False
                accumulated_text_chunks.append(collapsed_text)
                finished_skipping_leading_spaces = True

            if ended_with_space and finished_skipping_leading_spaces:
                pending_space = True

        elif isinstance(node, DocSoftBreak):
            # The spacing at the end of a line is dropped
            if finished_skipping_leading_spaces:
                accumulated_text_chunks.append('\n')
            pending_space = False

        else:
            if pending_space:
                accumulated_text_chunks.append(' ')
                pending_space = False
            if accumulated_text_chunks:
                push_accumulated_text(end_of_paragraph=False)
            transformed_nodes.append(node)
            finished_skipping_leading_spaces = True

    if accumulated_text_chunks:
        push_accumulated_text(end_of_paragraph=True)

    return DocParagraph(configuration, transformed_nodes)
