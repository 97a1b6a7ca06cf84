"""
The node tree produced by the parser.

Every node class is importable from this package.
"""
from pytsdoc.nodes.base import (DocExcerpt, DocNode, DocNodeContainer, DocNodeKind,
                                ExcerptKind)
from pytsdoc.nodes.html import DocHtmlAttribute, DocHtmlEndTag, DocHtmlStartTag
from pytsdoc.nodes.inline import DocInheritDocTag, DocInlineTag, DocInlineTagBase, DocLinkTag
from pytsdoc.nodes.references import (DocDeclarationReference, DocMemberIdentifier,
                                      DocMemberReference, DocMemberSelector, DocMemberSymbol,
                                      SelectorKind)
from pytsdoc.nodes.structure import (DocBlock, DocBlockTag, DocComment, DocParagraph,
                                     DocParamBlock, DocParamCollection, DocSection)
from pytsdoc.nodes.text import (DocCodeSpan, DocErrorText, DocEscapedText, DocFencedCode,
                                DocPlainText, DocSoftBreak, EscapeStyle)

__all__ = [
    'DocBlock', 'DocBlockTag', 'DocCodeSpan', 'DocComment', 'DocDeclarationReference',
    'DocErrorText', 'DocEscapedText', 'DocExcerpt', 'DocFencedCode', 'DocHtmlAttribute',
    'DocHtmlEndTag', 'DocHtmlStartTag', 'DocInheritDocTag', 'DocInlineTag',
    'DocInlineTagBase', 'DocLinkTag', 'DocMemberIdentifier', 'DocMemberReference',
    'DocMemberSelector', 'DocMemberSymbol', 'DocNode', 'DocNodeContainer', 'DocNodeKind',
    'DocParagraph', 'DocParamBlock', 'DocParamCollection', 'DocPlainText', 'DocSection',
    'DocSoftBreak', 'EscapeStyle', 'ExcerptKind', 'SelectorKind',
]
