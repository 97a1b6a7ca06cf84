"""pytsdoc's test suite."""

from typing import TYPE_CHECKING, List, Optional, Sequence, Type, TypeVar

from pytsdoc.configuration import TSDocConfiguration
from pytsdoc.nodes import DocNode, DocNodeKind, DocParagraph, DocSection
from pytsdoc.parser import ParserContext, TSDocParser

# Because pytest 6.1 does not yet export types for fixtures, we define
# approximations that are good enough for our test cases:

if TYPE_CHECKING:
    from typing_extensions import Protocol

    class CaptureResult(Protocol):
        out: str
        err: str

    class CapSys(Protocol):
        def readouterr(self) -> CaptureResult: ...

    from _pytest.monkeypatch import MonkeyPatch
else:
    CaptureResult = CapSys = object
    MonkeyPatch = object


N = TypeVar('N', bound=DocNode)


def parse(text: str, configuration: Optional[TSDocConfiguration] = None) -> ParserContext:
    """
    Parse a comment with a fresh L{TSDocParser}.
    """
    return TSDocParser(configuration).parse_string(text)

def message_ids(parser_context: ParserContext) -> List[str]:
    """
    The IDs of the messages reported while parsing, in the order they were
    reported.
    """
    return [message.message_id.value for message in parser_context.log]

def message_texts(parser_context: ParserContext) -> List[str]:
    return [message.unformatted_text for message in parser_context.log]

def paragraphs(section: DocSection) -> List[DocParagraph]:
    return [node for node in section.nodes if isinstance(node, DocParagraph)]

def find_nodes(node: DocNode, node_class: Type[N]) -> List[N]:
    """
    Walk the tree below C{node}, depth first in child order, and collect
    the instances of C{node_class}.
    """
    found: List[N] = []
    for child in node.get_child_nodes():
        if isinstance(child, node_class):
            found.append(child)
        found.extend(find_nodes(child, node_class))
    return found

def node_kinds(nodes: Sequence[DocNode]) -> List[str]:
    """
    The kinds of some nodes, leaving out the excerpts.
    """
    return [str(node.kind) for node in nodes if node.kind != DocNodeKind.Excerpt]
