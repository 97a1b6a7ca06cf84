"""
Declaration references, the notation used by C{{@link}} and
C{{@inheritDoc}} to name another API item::

    my-package/path#MyClass.(myMethod:static)

A reference is made of an optional package name and import path, followed
by a chain of member references.  References written in the newer
C{package!Namespace.member} notation are parsed by L{pytsdoc.beta.declref}
and kept in L{DocDeclarationReference.beta_reference}.
"""
import enum
import json
import re
from typing import TYPE_CHECKING, Iterable, List, Optional, Sequence

from pytsdoc.nodes.base import DocNode, DocNodeKind, ExcerptKind, excerpt, excerpt_text
from pytsdoc.stringchecks import (explain_if_invalid_unquoted_member_identifier,
                                  is_system_selector)

if TYPE_CHECKING:
    from pytsdoc.beta.declref import DeclarationReference
    from pytsdoc.configuration import TSDocConfiguration
    from pytsdoc.tokenreader import TokenSequence


class DocDeclarationReference(DocNode):
    """
    A declaration reference.
    """

    def __init__(self, configuration: 'TSDocConfiguration',
                 package_name: Optional[str] = None,
                 import_path: Optional[str] = None,
                 member_references: Iterable['DocMemberReference'] = (),
                 beta_reference: Optional['DeclarationReference'] = None,
                 *, package_name_excerpt: Optional['TokenSequence'] = None,
                 import_path_excerpt: Optional['TokenSequence'] = None,
                 spacing_after_import_path_excerpt: Optional['TokenSequence'] = None,
                 import_hash_excerpt: Optional['TokenSequence'] = None,
                 spacing_after_import_hash_excerpt: Optional['TokenSequence'] = None,
                 beta_reference_excerpt: Optional['TokenSequence'] = None,
                 spacing_after_beta_reference_excerpt: Optional['TokenSequence'] = None):
        super().__init__(configuration)
        c = configuration
        self._package_name_excerpt = excerpt(c, ExcerptKind.DeclarationReference_PackageName,
                                             package_name_excerpt)
        self._import_path_excerpt = excerpt(c, ExcerptKind.DeclarationReference_ImportPath,
                                            import_path_excerpt)
        self._spacing_after_import_path_excerpt = excerpt(c, ExcerptKind.Spacing,
                                                          spacing_after_import_path_excerpt)
        self._import_hash_excerpt = excerpt(c, ExcerptKind.DeclarationReference_ImportHash,
                                            import_hash_excerpt)
        self._spacing_after_import_hash_excerpt = excerpt(c, ExcerptKind.Spacing,
                                                          spacing_after_import_hash_excerpt)
        self._beta_reference_excerpt = excerpt(c, ExcerptKind.DeclarationReference_BetaReference,
                                               beta_reference_excerpt)
        self._spacing_after_beta_reference_excerpt = excerpt(
            c, ExcerptKind.Spacing, spacing_after_beta_reference_excerpt)

        self._package_name = excerpt_text(self._package_name_excerpt) or package_name
        self._import_path = excerpt_text(self._import_path_excerpt) or import_path
        self._member_references: List[DocMemberReference] = list(member_references)
        self.beta_reference = beta_reference

    @property
    def kind(self) -> str:
        return DocNodeKind.DeclarationReference

    @property
    def package_name(self) -> Optional[str]:
        """
        The npm package name, like C{"@scope/my-package"}, or C{None} for
        the package of the comment.
        """
        return self._package_name

    @property
    def import_path(self) -> Optional[str]:
        """
        The path after the package name, like C{"/path/to/module"}, or a
        relative path like C{"./file"} when there is no package name.
        """
        return self._import_path

    @property
    def member_references(self) -> Sequence['DocMemberReference']:
        return tuple(self._member_references)

    def emit_as_tsdoc(self) -> str:
        """
        Render the reference as it would be written in a comment.
        """
        from pytsdoc.emitters import StringBuilder, TSDocEmitter
        output = StringBuilder()
        TSDocEmitter().render_declaration_reference(output, self)
        return str(output)

    def _on_get_child_nodes(self) -> Sequence[Optional[DocNode]]:
        return [
            self._package_name_excerpt,
            self._import_path_excerpt,
            self._spacing_after_import_path_excerpt,
            self._import_hash_excerpt,
            self._spacing_after_import_hash_excerpt,
            *self._member_references,
            self._beta_reference_excerpt,
            self._spacing_after_beta_reference_excerpt,
        ]


class DocMemberReference(DocNode):
    """
    One component of a declaration reference, like C{.myMethod},
    C{[Symbol.iterator]} or C{(MyClass:constructor)}.
    """

    def __init__(self, configuration: 'TSDocConfiguration', has_dot: bool = False,
                 member_identifier: Optional['DocMemberIdentifier'] = None,
                 member_symbol: Optional['DocMemberSymbol'] = None,
                 selector: Optional['DocMemberSelector'] = None,
                 *, dot_excerpt: Optional['TokenSequence'] = None,
                 spacing_after_dot_excerpt: Optional['TokenSequence'] = None,
                 left_parenthesis_excerpt: Optional['TokenSequence'] = None,
                 spacing_after_left_parenthesis_excerpt: Optional['TokenSequence'] = None,
                 spacing_after_member_excerpt: Optional['TokenSequence'] = None,
                 colon_excerpt: Optional['TokenSequence'] = None,
                 spacing_after_colon_excerpt: Optional['TokenSequence'] = None,
                 spacing_after_selector_excerpt: Optional['TokenSequence'] = None,
                 right_parenthesis_excerpt: Optional['TokenSequence'] = None,
                 spacing_after_right_parenthesis_excerpt: Optional['TokenSequence'] = None,
                 parsed: bool = False):
        """
        @param parsed: Whether the node comes from the parser, in which case
            C{has_dot} is computed from C{dot_excerpt}.
        @raises ValueError: If both C{member_identifier} and
            C{member_symbol} are given.
        """
        super().__init__(configuration)
        if member_identifier is not None and member_symbol is not None:
            raise ValueError('A DocMemberReference cannot have both a member_identifier '
                             'and a member_symbol')

        c = configuration
        self._dot_excerpt = excerpt(c, ExcerptKind.MemberReference_Dot, dot_excerpt)
        self._spacing_after_dot_excerpt = excerpt(c, ExcerptKind.Spacing,
                                                  spacing_after_dot_excerpt)
        self._left_parenthesis_excerpt = excerpt(c, ExcerptKind.MemberReference_LeftParenthesis,
                                                 left_parenthesis_excerpt)
        self._spacing_after_left_parenthesis_excerpt = excerpt(
            c, ExcerptKind.Spacing, spacing_after_left_parenthesis_excerpt)
        self._spacing_after_member_excerpt = excerpt(c, ExcerptKind.Spacing,
                                                     spacing_after_member_excerpt)
        self._colon_excerpt = excerpt(c, ExcerptKind.MemberReference_Colon, colon_excerpt)
        self._spacing_after_colon_excerpt = excerpt(c, ExcerptKind.Spacing,
                                                    spacing_after_colon_excerpt)
        self._spacing_after_selector_excerpt = excerpt(c, ExcerptKind.Spacing,
                                                       spacing_after_selector_excerpt)
        self._right_parenthesis_excerpt = excerpt(
            c, ExcerptKind.MemberReference_RightParenthesis, right_parenthesis_excerpt)
        self._spacing_after_right_parenthesis_excerpt = excerpt(
            c, ExcerptKind.Spacing, spacing_after_right_parenthesis_excerpt)

        self.has_dot = self._dot_excerpt is not None if parsed else has_dot
        self.member_identifier = member_identifier
        self.member_symbol = member_symbol
        self.selector = selector

    @property
    def kind(self) -> str:
        return DocNodeKind.MemberReference

    def _on_get_child_nodes(self) -> Sequence[Optional[DocNode]]:
        return [
            self._dot_excerpt,
            self._spacing_after_dot_excerpt,
            self._left_parenthesis_excerpt,
            self._spacing_after_left_parenthesis_excerpt,
            self.member_identifier,
            self.member_symbol,
            self._spacing_after_member_excerpt,
            self._colon_excerpt,
            self._spacing_after_colon_excerpt,
            self.selector,
            self._spacing_after_selector_excerpt,
            self._right_parenthesis_excerpt,
            self._spacing_after_right_parenthesis_excerpt,
        ]


class DocMemberIdentifier(DocNode):
    """
    The name of a member, optionally in double quotes: C{myMethod} or
    C{"my-method"}.
    """

    def __init__(self, configuration: 'TSDocConfiguration', identifier: Optional[str] = None,
                 *, left_quote_excerpt: Optional['TokenSequence'] = None,
                 identifier_excerpt: Optional['TokenSequence'] = None,
                 right_quote_excerpt: Optional['TokenSequence'] = None):
        super().__init__(configuration)
        c = configuration
        self._left_quote_excerpt = excerpt(c, ExcerptKind.MemberIdentifier_LeftQuote,
                                           left_quote_excerpt)
        self._identifier_excerpt = excerpt(c, ExcerptKind.MemberIdentifier_Identifier,
                                           identifier_excerpt)
        self._right_quote_excerpt = excerpt(c, ExcerptKind.MemberIdentifier_RightQuote,
                                            right_quote_excerpt)
        if self._identifier_excerpt is None:
            if identifier is None:
                raise ValueError('DocMemberIdentifier requires an identifier or an identifier_excerpt')
            self._identifier = identifier
        else:
            self._identifier = str(self._identifier_excerpt.content)

    @staticmethod
    def is_valid_identifier(identifier: str) -> bool:
        """
        Whether C{identifier} can be written without quotes.
        """
        return explain_if_invalid_unquoted_member_identifier(identifier) is None

    @property
    def kind(self) -> str:
        return DocNodeKind.MemberIdentifier

    @property
    def identifier(self) -> str:
        """
        The identifier, without the quotes.
        """
        return self._identifier

    @property
    def has_quotes(self) -> bool:
        if self._identifier_excerpt is not None:
            return self._left_quote_excerpt is not None
        return not self.is_valid_identifier(self._identifier)

    def _on_get_child_nodes(self) -> Sequence[Optional[DocNode]]:
        return [self._left_quote_excerpt, self._identifier_excerpt, self._right_quote_excerpt]


class DocMemberSymbol(DocNode):
    """
    A member identified by an ECMAScript symbol: C{[Symbol.iterator]}.
    The brackets hold a declaration reference to the symbol.
    """

    def __init__(self, configuration: 'TSDocConfiguration',
                 symbol_reference: DocDeclarationReference,
                 *, left_bracket_excerpt: Optional['TokenSequence'] = None,
                 spacing_after_left_bracket_excerpt: Optional['TokenSequence'] = None,
                 right_bracket_excerpt: Optional['TokenSequence'] = None):
        super().__init__(configuration)
        c = configuration
        self._left_bracket_excerpt = excerpt(c, ExcerptKind.DocMemberSymbol_LeftBracket,
                                             left_bracket_excerpt)
        self._spacing_after_left_bracket_excerpt = excerpt(c, ExcerptKind.Spacing,
                                                           spacing_after_left_bracket_excerpt)
        self._right_bracket_excerpt = excerpt(c, ExcerptKind.DocMemberSymbol_RightBracket,
                                              right_bracket_excerpt)
        self.symbol_reference = symbol_reference

    @property
    def kind(self) -> str:
        return DocNodeKind.MemberSymbol

    def _on_get_child_nodes(self) -> Sequence[Optional[DocNode]]:
        return [self._left_bracket_excerpt, self._spacing_after_left_bracket_excerpt,
                self.symbol_reference, self._right_bracket_excerpt]


class SelectorKind(enum.Enum):
    """
    The kinds of L{DocMemberSelector}.
    """
    Error = enum.auto()
    """The selector is not valid, see L{DocMemberSelector.error_message}."""
    System = enum.auto()
    """A system selector like C{static} or C{constructor}."""
    Index = enum.auto()
    """A numeric overload index.  Deprecated in favor of labels."""
    Label = enum.auto()
    """A label defined with C{{@label}}: C{MY_LABEL}."""


_LIKE_INDEX_SELECTOR_RE = re.compile(r'^[0-9]')
_INDEX_SELECTOR_RE = re.compile(r'^[1-9][0-9]*$')
_LIKE_LABEL_RE = re.compile(r'^[A-Z_]')
_LABEL_RE = re.compile(r'^[A-Z_][A-Z0-9_]+$')
_LIKE_SYSTEM_SELECTOR_RE = re.compile(r'^[a-z]+$')


class DocMemberSelector(DocNode):
    """
    The part after the colon in C{(myMethod:static)} which disambiguates
    members sharing a name.
    """

    def __init__(self, configuration: 'TSDocConfiguration', selector: Optional[str] = None,
                 *, selector_excerpt: Optional['TokenSequence'] = None):
        super().__init__(configuration)
        self._selector_excerpt = excerpt(configuration, ExcerptKind.MemberSelector,
                                         selector_excerpt)
        if self._selector_excerpt is not None:
            selector = str(self._selector_excerpt.content)
        elif selector is None:
            raise ValueError('DocMemberSelector requires a selector or a selector_excerpt')
        self.selector: str = selector

        self.error_message: Optional[str] = None
        """Why the selector is invalid, when L{selector_kind} is C{Error}."""

        self.selector_kind = SelectorKind.Error
        if _LIKE_INDEX_SELECTOR_RE.match(selector):
            if _INDEX_SELECTOR_RE.match(selector):
                self.selector_kind = SelectorKind.Index
            else:
                self.error_message = 'An index selector must be a nonnegative integer'
        elif _LIKE_LABEL_RE.match(selector):
            if _LABEL_RE.match(selector):
                self.selector_kind = SelectorKind.Label
            else:
                self.error_message = ('A label selector must be comprised of upper case letters, '
                                      'numbers, and underscores and must not start with a number')
        elif is_system_selector(selector):
            self.selector_kind = SelectorKind.System
        elif _LIKE_SYSTEM_SELECTOR_RE.match(selector):
            self.error_message = (f'The selector {json.dumps(selector)} is not a recognized '
                                  'TSDoc system selector name')
        else:
            self.error_message = 'Unrecognized selector'

    @property
    def kind(self) -> str:
        return DocNodeKind.MemberSelector

    def _on_get_child_nodes(self) -> Sequence[Optional[DocNode]]:
        return [self._selector_excerpt]
