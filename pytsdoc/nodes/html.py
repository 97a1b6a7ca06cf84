"""
HTML tags embedded in a comment.

Start and end tags are separate nodes: the parser does not build an
element tree.  The parser checks that each tag is well formed, and the
assembler checks that the tags of a section are balanced.
"""
from typing import TYPE_CHECKING, Iterable, List, Optional, Sequence, Union

from pytsdoc.nodes.base import DocNode, DocNodeKind, ExcerptKind, excerpt, excerpt_text

if TYPE_CHECKING:
    from pytsdoc.configuration import TSDocConfiguration
    from pytsdoc.tokenreader import TokenSequence


class DocHtmlAttribute(DocNode):
    """
    An attribute of a L{DocHtmlStartTag}: C{href="#"}.
    """

    def __init__(self, configuration: 'TSDocConfiguration',
                 name: Optional[str] = None, value: Optional[str] = None,
                 spacing_after_name: Optional[str] = None,
                 spacing_after_equals: Optional[str] = None,
                 spacing_after_value: Optional[str] = None,
                 *, name_excerpt: Optional['TokenSequence'] = None,
                 spacing_after_name_excerpt: Optional['TokenSequence'] = None,
                 equals_excerpt: Optional['TokenSequence'] = None,
                 spacing_after_equals_excerpt: Optional['TokenSequence'] = None,
                 value_excerpt: Optional['TokenSequence'] = None,
                 spacing_after_value_excerpt: Optional['TokenSequence'] = None):
        """
        @param value: The value, including its quotes: C{'"#"'}.
        """
        super().__init__(configuration)
        c = configuration
        self._name_excerpt = excerpt(c, ExcerptKind.HtmlAttribute_Name, name_excerpt)
        self._spacing_after_name_excerpt = excerpt(c, ExcerptKind.Spacing,
                                                   spacing_after_name_excerpt)
        self._equals_excerpt = excerpt(c, ExcerptKind.HtmlAttribute_Equals, equals_excerpt)
        self._spacing_after_equals_excerpt = excerpt(c, ExcerptKind.Spacing,
                                                     spacing_after_equals_excerpt)
        self._value_excerpt = excerpt(c, ExcerptKind.HtmlAttribute_Value, value_excerpt)
        self._spacing_after_value_excerpt = excerpt(c, ExcerptKind.Spacing,
                                                    spacing_after_value_excerpt)

        if self._name_excerpt is None:
            if name is None or value is None:
                raise ValueError('DocHtmlAttribute requires a name and a value')
            self.name: str = name
            self.value: str = value
            self.spacing_after_name = spacing_after_name
            self.spacing_after_equals = spacing_after_equals
            self.spacing_after_value = spacing_after_value
        else:
            self.name = str(self._name_excerpt.content)
            self.value = excerpt_text(self._value_excerpt) or ''
            self.spacing_after_name = excerpt_text(self._spacing_after_name_excerpt)
            self.spacing_after_equals = excerpt_text(self._spacing_after_equals_excerpt)
            self.spacing_after_value = excerpt_text(self._spacing_after_value_excerpt)

    @property
    def kind(self) -> str:
        return DocNodeKind.HtmlAttribute

    def _on_get_child_nodes(self) -> Sequence[Optional[DocNode]]:
        return [
            self._name_excerpt,
            self._spacing_after_name_excerpt,
            self._equals_excerpt,
            self._spacing_after_equals_excerpt,
            self._value_excerpt,
            self._spacing_after_value_excerpt,
        ]


def _emit_as_html(tag: Union['DocHtmlStartTag', 'DocHtmlEndTag']) -> str:
    from pytsdoc.emitters import StringBuilder, TSDocEmitter
    output = StringBuilder()
    TSDocEmitter().render_html_tag(output, tag)
    return str(output)


class DocHtmlStartTag(DocNode):
    """
    An HTML start tag: C{<a href="#">}, or a self-closing tag: C{<br/>}.
    """

    def __init__(self, configuration: 'TSDocConfiguration', name: Optional[str] = None,
                 spacing_after_name: Optional[str] = None,
                 html_attributes: Iterable[DocHtmlAttribute] = (),
                 self_closing_tag: bool = False,
                 *, opening_delimiter_excerpt: Optional['TokenSequence'] = None,
                 name_excerpt: Optional['TokenSequence'] = None,
                 spacing_after_name_excerpt: Optional['TokenSequence'] = None,
                 closing_delimiter_excerpt: Optional['TokenSequence'] = None):
        super().__init__(configuration)
        c = configuration
        self._opening_delimiter_excerpt = excerpt(c, ExcerptKind.HtmlStartTag_OpeningDelimiter,
                                                  opening_delimiter_excerpt)
        self._name_excerpt = excerpt(c, ExcerptKind.HtmlStartTag_Name, name_excerpt)
        self._spacing_after_name_excerpt = excerpt(c, ExcerptKind.Spacing,
                                                   spacing_after_name_excerpt)
        self._closing_delimiter_excerpt = excerpt(c, ExcerptKind.HtmlStartTag_ClosingDelimiter,
                                                  closing_delimiter_excerpt)
        self._html_attributes: List[DocHtmlAttribute] = list(html_attributes)
        self.self_closing_tag = self_closing_tag

        if self._name_excerpt is None:
            if name is None:
                raise ValueError('DocHtmlStartTag requires a name or a name_excerpt')
            self.name: str = name
            self.spacing_after_name = spacing_after_name
        else:
            self.name = str(self._name_excerpt.content)
            self.spacing_after_name = excerpt_text(self._spacing_after_name_excerpt)

    @property
    def kind(self) -> str:
        return DocNodeKind.HtmlStartTag

    @property
    def name_excerpt(self) -> Optional['TokenSequence']:
        if self._name_excerpt is None:
            return None
        return self._name_excerpt.content

    @property
    def html_attributes(self) -> Sequence[DocHtmlAttribute]:
        return tuple(self._html_attributes)

    def emit_as_html(self) -> str:
        """
        Render the tag as HTML, normalizing the spacing between attributes.
        """
        return _emit_as_html(self)

    def _on_get_child_nodes(self) -> Sequence[Optional[DocNode]]:
        return [
            self._opening_delimiter_excerpt,
            self._name_excerpt,
            self._spacing_after_name_excerpt,
            *self._html_attributes,
            self._closing_delimiter_excerpt,
        ]

    def __repr__(self) -> str:
        return f'<DocHtmlStartTag {self.name!r}>'


class DocHtmlEndTag(DocNode):
    """
    An HTML end tag: C{</a>}.
    """

    def __init__(self, configuration: 'TSDocConfiguration', name: Optional[str] = None,
                 *, opening_delimiter_excerpt: Optional['TokenSequence'] = None,
                 name_excerpt: Optional['TokenSequence'] = None,
                 spacing_after_name_excerpt: Optional['TokenSequence'] = None,
                 closing_delimiter_excerpt: Optional['TokenSequence'] = None):
        super().__init__(configuration)
        c = configuration
        self._opening_delimiter_excerpt = excerpt(c, ExcerptKind.HtmlEndTag_OpeningDelimiter,
                                                  opening_delimiter_excerpt)
        self._name_excerpt = excerpt(c, ExcerptKind.HtmlEndTag_Name, name_excerpt)
        self._spacing_after_name_excerpt = excerpt(c, ExcerptKind.Spacing,
                                                   spacing_after_name_excerpt)
        self._closing_delimiter_excerpt = excerpt(c, ExcerptKind.HtmlEndTag_ClosingDelimiter,
                                                  closing_delimiter_excerpt)
        if self._name_excerpt is None:
            if name is None:
                raise ValueError('DocHtmlEndTag requires a name or a name_excerpt')
            self.name: str = name
        else:
            self.name = str(self._name_excerpt.content)

    @property
    def kind(self) -> str:
        return DocNodeKind.HtmlEndTag

    @property
    def name_excerpt(self) -> Optional['TokenSequence']:
        if self._name_excerpt is None:
            return None
        return self._name_excerpt.content

    def emit_as_html(self) -> str:
        return _emit_as_html(self)

    def _on_get_child_nodes(self) -> Sequence[Optional[DocNode]]:
        return [
            self._opening_delimiter_excerpt,
            self._name_excerpt,
            self._spacing_after_name_excerpt,
            self._closing_delimiter_excerpt,
        ]

    def __repr__(self) -> str:
        return f'<DocHtmlEndTag {self.name!r}>'
