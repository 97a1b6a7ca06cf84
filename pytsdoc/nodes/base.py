"""
The base classes of the node hierarchy.

Nodes are built in one of two ways:

 - I{builder} mode, from plain strings.  This is how transforms and
   programs that generate comments create nodes.
 - I{parsed} mode, from the L{TokenSequence}s found by the parser.  Each
   sequence is wrapped in a L{DocExcerpt} child, so that walking the tree
   with L{DocNode.get_child_nodes} visits every token of the input exactly
   once.

A node is in parsed mode when its excerpt arguments are given.  The string
properties of a parsed node are computed from its excerpts.
"""
from enum import Enum, auto
from typing import TYPE_CHECKING, Iterable, List, Optional, Sequence

from pytsdoc.tokenizer import TokenKind

if TYPE_CHECKING:
    from pytsdoc.configuration import TSDocConfiguration
    from pytsdoc.tokenreader import TokenSequence


class DocNodeKind(str, Enum):
    """
    The kinds of the built-in nodes.

    A node kind is a string: custom nodes registered with
    L{pytsdoc.configuration.DocNodeManager} use their own strings.
    Members compare equal to their value, so C{node.kind == 'Paragraph'}
    works too.
    """

    Block = 'Block'
    BlockTag = 'BlockTag'
    Excerpt = 'Excerpt'
    FencedCode = 'FencedCode'
    CodeSpan = 'CodeSpan'
    Comment = 'Comment'
    DeclarationReference = 'DeclarationReference'
    ErrorText = 'ErrorText'
    EscapedText = 'EscapedText'
    HtmlAttribute = 'HtmlAttribute'
    HtmlEndTag = 'HtmlEndTag'
    HtmlStartTag = 'HtmlStartTag'
    InheritDocTag = 'InheritDocTag'
    InlineTag = 'InlineTag'
    LinkTag = 'LinkTag'
    MemberIdentifier = 'MemberIdentifier'
    MemberReference = 'MemberReference'
    MemberSelector = 'MemberSelector'
    MemberSymbol = 'MemberSymbol'
    Paragraph = 'Paragraph'
    ParamBlock = 'ParamBlock'
    ParamCollection = 'ParamCollection'
    PlainText = 'PlainText'
    Section = 'Section'
    SoftBreak = 'SoftBreak'

    def __str__(self) -> str:
        return self.value


class ExcerptKind(Enum):
    """
    The role of the tokens held by a L{DocExcerpt}.
    """

    Spacing = auto()
    """Spaces and newlines, which must not contain anything else."""

    BlockTag = auto()

    CodeSpan_OpeningDelimiter = auto()
    CodeSpan_Code = auto()
    CodeSpan_ClosingDelimiter = auto()

    DeclarationReference_PackageName = auto()
    DeclarationReference_ImportPath = auto()
    DeclarationReference_ImportHash = auto()
    DeclarationReference_BetaReference = auto()
    """A reference in the C{package!Namespace.member} notation."""

    ErrorText = auto()
    EscapedText = auto()

    FencedCode_OpeningFence = auto()
    FencedCode_Language = auto()
    FencedCode_Code = auto()
    FencedCode_ClosingFence = auto()

    HtmlAttribute_Name = auto()
    HtmlAttribute_Equals = auto()
    HtmlAttribute_Value = auto()

    HtmlEndTag_OpeningDelimiter = auto()
    HtmlEndTag_Name = auto()
    HtmlEndTag_ClosingDelimiter = auto()

    HtmlStartTag_OpeningDelimiter = auto()
    HtmlStartTag_Name = auto()
    HtmlStartTag_ClosingDelimiter = auto()

    InlineTag_OpeningDelimiter = auto()
    InlineTag_TagName = auto()
    InlineTag_TagContent = auto()
    InlineTag_ClosingDelimiter = auto()

    LinkTag_UrlDestination = auto()
    LinkTag_Pipe = auto()
    LinkTag_LinkText = auto()

    MemberIdentifier_LeftQuote = auto()
    MemberIdentifier_Identifier = auto()
    MemberIdentifier_RightQuote = auto()

    MemberReference_Dot = auto()
    MemberReference_LeftParenthesis = auto()
    MemberReference_Colon = auto()
    MemberReference_RightParenthesis = auto()

    MemberSelector = auto()

    DocMemberSymbol_LeftBracket = auto()
    DocMemberSymbol_RightBracket = auto()

    NonstandardText = auto()
    """Text that TSDoc does not allow but tolerates, like a JSDoc C{{type}}."""

    ParamBlock_ParameterName = auto()
    ParamBlock_Hyphen = auto()

    PlainText = auto()
    SoftBreak = auto()


class DocNode:
    """
    Abstract base class of all the nodes.
    """

    def __init__(self, configuration: 'TSDocConfiguration'):
        self.configuration = configuration

    @property
    def kind(self) -> str:
        """
        A L{DocNodeKind} for built-in nodes, or the kind string that a
        custom node was registered with.
        """
        raise NotImplementedError()

    def get_child_nodes(self) -> List['DocNode']:
        """
        The child nodes, in source order.  Never contains C{None}.
        """
        return [node for node in self._on_get_child_nodes() if node is not None]

    def _on_get_child_nodes(self) -> Sequence[Optional['DocNode']]:
        """
        Subclasses return their children here, using C{None} for the absent ones.
        """
        return ()

    def __repr__(self) -> str:
        return f'<{self.__class__.__name__}>'


class DocExcerpt(DocNode):
    """
    A run of tokens of a parsed node, like the C{"{"} of an inline tag
    or the spacing after a tag name.

    Excerpts are the leaves of a parsed tree.
    """

    def __init__(self, configuration: 'TSDocConfiguration',
                 excerpt_kind: ExcerptKind, content: 'TokenSequence'):
        """
        @raises ValueError: If C{excerpt_kind} is C{Spacing} but C{content}
            holds something else than spacing.
        """
        super().__init__(configuration)

        if excerpt_kind is ExcerptKind.Spacing:
            for token in content.tokens:
                if token.kind not in (TokenKind.Spacing, TokenKind.Newline, TokenKind.EndOfInput):
                    raise ValueError('The excerpt_kind=Spacing but the range contains '
                                     'a non-whitespace token')

        self.excerpt_kind = excerpt_kind
        self.content = content

    @property
    def kind(self) -> str:
        return DocNodeKind.Excerpt

    def __repr__(self) -> str:
        return f'<DocExcerpt {self.excerpt_kind.name} {str(self.content)!r}>'


def excerpt(configuration: 'TSDocConfiguration', excerpt_kind: ExcerptKind,
            content: Optional['TokenSequence']) -> Optional[DocExcerpt]:
    """
    Wrap C{content} in a L{DocExcerpt}, or return C{None} if there is no
    content.
    """
    if content is None:
        return None
    return DocExcerpt(configuration, excerpt_kind, content)

def excerpt_text(doc_excerpt: Optional[DocExcerpt]) -> Optional[str]:
    if doc_excerpt is None:
        return None
    return str(doc_excerpt.content)


class DocNodeContainer(DocNode):
    """
    A node holding an ordered list of child nodes.

    Which children are allowed is decided by the
    L{pytsdoc.configuration.DocNodeManager} of the configuration.
    """

    def __init__(self, configuration: 'TSDocConfiguration',
                 child_nodes: Iterable[DocNode] = ()):
        super().__init__(configuration)
        self._nodes: List[DocNode] = []
        self.append_nodes(child_nodes)

    @property
    def nodes(self) -> Sequence[DocNode]:
        return tuple(self._nodes)

    def append_node(self, doc_node: DocNode) -> None:
        """
        @raises ValueError: If this container does not allow children of
            that kind.
        """
        if not self.configuration.doc_node_manager.is_allowed_child(self.kind, doc_node.kind):
            raise ValueError(f'The TSDocConfiguration does not allow a {self.kind} node '
                             f'to contain a node of type {doc_node.kind}')
        self._nodes.append(doc_node)

    def append_nodes(self, doc_nodes: Iterable[DocNode]) -> None:
        for doc_node in doc_nodes:
            self.append_node(doc_node)

    def clear_nodes(self) -> None:
        self._nodes.clear()

    def _on_get_child_nodes(self) -> Sequence[Optional[DocNode]]:
        return self._nodes
