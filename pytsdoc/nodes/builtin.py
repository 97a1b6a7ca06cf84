"""
Registration of the built-in node kinds with a L{DocNodeManager}.
"""
from typing import TYPE_CHECKING

from pytsdoc.configuration import DocNodeDefinition
from pytsdoc.nodes.base import DocExcerpt, DocNodeKind
from pytsdoc.nodes.html import DocHtmlAttribute, DocHtmlEndTag, DocHtmlStartTag
from pytsdoc.nodes.inline import DocInheritDocTag, DocInlineTag, DocLinkTag
from pytsdoc.nodes.references import (DocDeclarationReference, DocMemberIdentifier,
                                      DocMemberReference, DocMemberSelector, DocMemberSymbol)
from pytsdoc.nodes.structure import (DocBlock, DocBlockTag, DocComment, DocParagraph,
                                     DocParamBlock, DocParamCollection, DocSection)
from pytsdoc.nodes.text import (DocCodeSpan, DocErrorText, DocEscapedText, DocFencedCode,
                                DocPlainText, DocSoftBreak)

if TYPE_CHECKING:
    from pytsdoc.configuration import TSDocConfiguration

BUILTIN_PACKAGE_NAME = 'pytsdoc'

_BUILTIN_DEFINITIONS = (
    DocNodeDefinition(DocNodeKind.Block, DocBlock),
    DocNodeDefinition(DocNodeKind.BlockTag, DocBlockTag),
    DocNodeDefinition(DocNodeKind.CodeSpan, DocCodeSpan),
    DocNodeDefinition(DocNodeKind.Comment, DocComment),
    DocNodeDefinition(DocNodeKind.DeclarationReference, DocDeclarationReference),
    DocNodeDefinition(DocNodeKind.ErrorText, DocErrorText),
    DocNodeDefinition(DocNodeKind.EscapedText, DocEscapedText),
    DocNodeDefinition(DocNodeKind.Excerpt, DocExcerpt),
    DocNodeDefinition(DocNodeKind.FencedCode, DocFencedCode),
    DocNodeDefinition(DocNodeKind.HtmlAttribute, DocHtmlAttribute),
    DocNodeDefinition(DocNodeKind.HtmlEndTag, DocHtmlEndTag),
    DocNodeDefinition(DocNodeKind.HtmlStartTag, DocHtmlStartTag),
    DocNodeDefinition(DocNodeKind.InheritDocTag, DocInheritDocTag),
    DocNodeDefinition(DocNodeKind.InlineTag, DocInlineTag),
    DocNodeDefinition(DocNodeKind.LinkTag, DocLinkTag),
    DocNodeDefinition(DocNodeKind.MemberIdentifier, DocMemberIdentifier),
    DocNodeDefinition(DocNodeKind.MemberReference, DocMemberReference),
    DocNodeDefinition(DocNodeKind.MemberSelector, DocMemberSelector),
    DocNodeDefinition(DocNodeKind.MemberSymbol, DocMemberSymbol),
    DocNodeDefinition(DocNodeKind.Paragraph, DocParagraph),
    DocNodeDefinition(DocNodeKind.ParamBlock, DocParamBlock),
    DocNodeDefinition(DocNodeKind.ParamCollection, DocParamCollection),
    DocNodeDefinition(DocNodeKind.PlainText, DocPlainText),
    DocNodeDefinition(DocNodeKind.Section, DocSection),
    DocNodeDefinition(DocNodeKind.SoftBreak, DocSoftBreak),
)

SECTION_CHILD_KINDS = (
    DocNodeKind.FencedCode,
    DocNodeKind.Paragraph,
    DocNodeKind.HtmlStartTag,
    DocNodeKind.HtmlEndTag,
)
"""The kinds that a L{DocSection} may hold directly."""

PARAGRAPH_CHILD_KINDS = (
    DocNodeKind.BlockTag,
    DocNodeKind.CodeSpan,
    DocNodeKind.ErrorText,
    DocNodeKind.EscapedText,
    DocNodeKind.HtmlStartTag,
    DocNodeKind.HtmlEndTag,
    DocNodeKind.InlineTag,
    DocNodeKind.LinkTag,
    DocNodeKind.PlainText,
    DocNodeKind.SoftBreak,
)
"""The kinds that a L{DocParagraph} may hold."""


def register_builtin_doc_nodes(configuration: 'TSDocConfiguration') -> None:
    """
    Register the built-in kinds under the package name C{"pytsdoc"}, and
    the children allowed in sections and paragraphs.
    """
    manager = configuration.doc_node_manager
    manager.register_doc_nodes(BUILTIN_PACKAGE_NAME, _BUILTIN_DEFINITIONS)
    manager.register_allowable_children(DocNodeKind.Section, SECTION_CHILD_KINDS)
    manager.register_allowable_children(DocNodeKind.Paragraph, PARAGRAPH_CHILD_KINDS)
