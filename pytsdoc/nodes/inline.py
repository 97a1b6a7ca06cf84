"""
Inline tags: C{{@tagName content}}.
"""
from typing import TYPE_CHECKING, List, Optional, Sequence

from pytsdoc.nodes.base import DocNode, DocNodeKind, ExcerptKind, excerpt, excerpt_text
from pytsdoc.stringchecks import validate_tsdoc_tag_name

if TYPE_CHECKING:
    from pytsdoc.configuration import TSDocConfiguration
    from pytsdoc.nodes.references import DocDeclarationReference
    from pytsdoc.tokenreader import TokenSequence


class DocInlineTagBase(DocNode):
    """
    Base class of the inline tags.  Subclasses parse the tag content into
    their own children.
    """

    def __init__(self, configuration: 'TSDocConfiguration', tag_name: str,
                 *, opening_delimiter_excerpt: Optional['TokenSequence'] = None,
                 tag_name_excerpt: Optional['TokenSequence'] = None,
                 spacing_after_tag_name_excerpt: Optional['TokenSequence'] = None,
                 closing_delimiter_excerpt: Optional['TokenSequence'] = None):
        """
        @param tag_name: The tag name, including the C{@}.
        @raises ValueError: If C{tag_name} is not a valid tag name.
        """
        super().__init__(configuration)
        validate_tsdoc_tag_name(tag_name)
        self.tag_name = tag_name
        self.tag_name_with_upper_case = tag_name.upper()

        c = configuration
        self._opening_delimiter_excerpt = excerpt(c, ExcerptKind.InlineTag_OpeningDelimiter,
                                                  opening_delimiter_excerpt)
        self._tag_name_excerpt = excerpt(c, ExcerptKind.InlineTag_TagName, tag_name_excerpt)
        self._spacing_after_tag_name_excerpt = excerpt(c, ExcerptKind.Spacing,
                                                       spacing_after_tag_name_excerpt)
        self._closing_delimiter_excerpt = excerpt(c, ExcerptKind.InlineTag_ClosingDelimiter,
                                                  closing_delimiter_excerpt)

    @property
    def tag_name_excerpt(self) -> Optional['TokenSequence']:
        """
        The tokens of the tag name, if the tag was parsed.
        """
        if self._tag_name_excerpt is None:
            return None
        return self._tag_name_excerpt.content

    def _on_get_child_nodes(self) -> Sequence[Optional[DocNode]]:
        return [
            self._opening_delimiter_excerpt,
            self._tag_name_excerpt,
            self._spacing_after_tag_name_excerpt,
            *self._get_child_nodes_for_content(),
            self._closing_delimiter_excerpt,
        ]

    def _get_child_nodes_for_content(self) -> Sequence[Optional[DocNode]]:
        raise NotImplementedError()


class DocInlineTag(DocInlineTagBase):
    """
    An inline tag that the parser has no special support for.  The content
    is kept as a string.
    """

    def __init__(self, configuration: 'TSDocConfiguration', tag_name: str,
                 tag_content: str = '',
                 *, tag_content_excerpt: Optional['TokenSequence'] = None,
                 opening_delimiter_excerpt: Optional['TokenSequence'] = None,
                 tag_name_excerpt: Optional['TokenSequence'] = None,
                 spacing_after_tag_name_excerpt: Optional['TokenSequence'] = None,
                 closing_delimiter_excerpt: Optional['TokenSequence'] = None):
        super().__init__(configuration, tag_name,
                         opening_delimiter_excerpt=opening_delimiter_excerpt,
                         tag_name_excerpt=tag_name_excerpt,
                         spacing_after_tag_name_excerpt=spacing_after_tag_name_excerpt,
                         closing_delimiter_excerpt=closing_delimiter_excerpt)
        self._tag_content_excerpt = excerpt(configuration, ExcerptKind.InlineTag_TagContent,
                                            tag_content_excerpt)
        self._tag_content = tag_content if self._opening_delimiter_excerpt is None else None

    @property
    def kind(self) -> str:
        return DocNodeKind.InlineTag

    @property
    def tag_content(self) -> str:
        """
        The text between the tag name and the closing brace, without the
        spacing that follows the tag name.
        """
        if self._tag_content is None:
            self._tag_content = excerpt_text(self._tag_content_excerpt) or ''
        return self._tag_content

    def _get_child_nodes_for_content(self) -> Sequence[Optional[DocNode]]:
        return [self._tag_content_excerpt]


class DocLinkTag(DocInlineTagBase):
    """
    The C{{@link}} tag.  The destination is either a declaration reference
    or a URL, and may be followed by a C{|} and the link text::

        {@link my-package#MyClass.method | the method}
        {@link https://example.com | the site}
    """

    def __init__(self, configuration: 'TSDocConfiguration', tag_name: str = '@link',
                 code_destination: Optional['DocDeclarationReference'] = None,
                 url_destination: Optional[str] = None,
                 link_text: Optional[str] = None,
                 *, url_destination_excerpt: Optional['TokenSequence'] = None,
                 spacing_after_destination_excerpt: Optional['TokenSequence'] = None,
                 pipe_excerpt: Optional['TokenSequence'] = None,
                 spacing_after_pipe_excerpt: Optional['TokenSequence'] = None,
                 link_text_excerpt: Optional['TokenSequence'] = None,
                 spacing_after_link_text_excerpt: Optional['TokenSequence'] = None,
                 opening_delimiter_excerpt: Optional['TokenSequence'] = None,
                 tag_name_excerpt: Optional['TokenSequence'] = None,
                 spacing_after_tag_name_excerpt: Optional['TokenSequence'] = None,
                 closing_delimiter_excerpt: Optional['TokenSequence'] = None):
        """
        @raises ValueError: If the tag name is not C{@link}, or if both
            destinations are given.
        """
        super().__init__(configuration, tag_name,
                         opening_delimiter_excerpt=opening_delimiter_excerpt,
                         tag_name_excerpt=tag_name_excerpt,
                         spacing_after_tag_name_excerpt=spacing_after_tag_name_excerpt,
                         closing_delimiter_excerpt=closing_delimiter_excerpt)

        if self.tag_name_with_upper_case != '@LINK':
            raise ValueError('DocLinkTag requires the tag name to be "{@link}"')

        c = configuration
        self.code_destination = code_destination
        self._url_destination_excerpt = excerpt(c, ExcerptKind.LinkTag_UrlDestination,
                                                url_destination_excerpt)
        self._spacing_after_destination_excerpt = excerpt(c, ExcerptKind.Spacing,
                                                          spacing_after_destination_excerpt)
        self._pipe_excerpt = excerpt(c, ExcerptKind.LinkTag_Pipe, pipe_excerpt)
        self._spacing_after_pipe_excerpt = excerpt(c, ExcerptKind.Spacing,
                                                   spacing_after_pipe_excerpt)
        self._link_text_excerpt = excerpt(c, ExcerptKind.LinkTag_LinkText, link_text_excerpt)
        self._spacing_after_link_text_excerpt = excerpt(c, ExcerptKind.Spacing,
                                                        spacing_after_link_text_excerpt)

        if self._opening_delimiter_excerpt is None:
            self._url_destination = url_destination
            self._link_text = link_text
        else:
            self._url_destination = excerpt_text(self._url_destination_excerpt)
            self._link_text = excerpt_text(self._link_text_excerpt)

        if self.code_destination is not None and self._url_destination is not None:
            raise ValueError('Either the code_destination or the url_destination may be '
                             'specified, but not both')

    @property
    def kind(self) -> str:
        return DocNodeKind.LinkTag

    @property
    def url_destination(self) -> Optional[str]:
        """
        The URL, like C{"https://example.com"}, when the destination is not
        a declaration reference.
        """
        return self._url_destination

    @property
    def link_text(self) -> Optional[str]:
        """
        The text after the C{|}, or C{None} when there is no pipe.
        """
        return self._link_text

    def _get_child_nodes_for_content(self) -> Sequence[Optional[DocNode]]:
        return [
            self.code_destination,
            self._url_destination_excerpt,
            self._spacing_after_destination_excerpt,
            self._pipe_excerpt,
            self._spacing_after_pipe_excerpt,
            self._link_text_excerpt,
            self._spacing_after_link_text_excerpt,
        ]


class DocInheritDocTag(DocInlineTagBase):
    """
    The C{{@inheritDoc}} tag.  It is written like an inline tag, but it
    replaces the whole comment with the documentation of another item.
    """

    def __init__(self, configuration: 'TSDocConfiguration', tag_name: str = '@inheritDoc',
                 declaration_reference: Optional['DocDeclarationReference'] = None,
                 *, opening_delimiter_excerpt: Optional['TokenSequence'] = None,
                 tag_name_excerpt: Optional['TokenSequence'] = None,
                 spacing_after_tag_name_excerpt: Optional['TokenSequence'] = None,
                 closing_delimiter_excerpt: Optional['TokenSequence'] = None):
        """
        @param declaration_reference: The item to copy from.  When C{None},
            documentation tools use the base class or the implemented interface.
        @raises ValueError: If the tag name is not C{@inheritDoc}.
        """
        super().__init__(configuration, tag_name,
                         opening_delimiter_excerpt=opening_delimiter_excerpt,
                         tag_name_excerpt=tag_name_excerpt,
                         spacing_after_tag_name_excerpt=spacing_after_tag_name_excerpt,
                         closing_delimiter_excerpt=closing_delimiter_excerpt)
        if self.tag_name_with_upper_case != '@INHERITDOC':
            raise ValueError('DocInheritDocTag requires the tag name to be "{@inheritDoc}"')
        self.declaration_reference = declaration_reference

    @property
    def kind(self) -> str:
        return DocNodeKind.InheritDocTag

    def _get_child_nodes_for_content(self) -> List[Optional[DocNode]]:
        return [self.declaration_reference]
