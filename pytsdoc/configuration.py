"""
Registries that drive the parser: which tags exist, how they are written,
which ones an application supports, and which node kinds may contain which.

A L{TSDocConfiguration} is built once and then handed to any number of
L{pytsdoc.parser.TSDocParser} instances.  It must not be changed while a
parse is in progress.
"""
import enum
import json
import logging
import re
from typing import (TYPE_CHECKING, Callable, Dict, Iterable, Iterator, List, Optional,
                    Sequence, Set, Tuple)

import attr

from pytsdoc.messages import is_known_message_id
from pytsdoc.stringchecks import (explain_if_invalid_package_name, validate_html_name,
                                  validate_tsdoc_tag_name)

if TYPE_CHECKING:
    from pytsdoc.nodes import DocNode

logger = logging.getLogger(__name__)


class TSDocTagSyntaxKind(enum.Enum):
    """
    How a tag is written.
    """
    InlineTag = enum.auto()
    """An inline tag, enclosed in braces: C{{@link}}."""
    BlockTag = enum.auto()
    """A block tag that starts a new documentation section: C{@remarks}."""
    ModifierTag = enum.auto()
    """A block tag without content whose presence is the information: C{@internal}."""


class Standardization(str, enum.Enum):
    """
    The level of support expected from documentation tools for a standard tag.
    """
    Core = 'Core'
    """Every documentation tool should support these tags."""
    Extended = 'Extended'
    """Optional, but when supported the tag must behave as standardized."""
    Discretionary = 'Discretionary'
    """The syntax is standardized, the meaning is left to each tool."""
    None_ = 'None'
    """Not part of the standard: custom tags."""


class TSDocSynonymCollection:
    """
    The alternative names of a L{TSDocTagDefinition}.
    """

    def __init__(self, synonyms: Iterable[str] = ()) -> None:
        self._synonyms: List[str] = []
        self._synonyms_with_upper_case: List[str] = []
        for synonym in synonyms:
            self.add(synonym)

    @property
    def count(self) -> int:
        return len(self._synonyms)

    @property
    def synonyms(self) -> Tuple[str, ...]:
        return tuple(self._synonyms)

    @property
    def synonyms_with_upper_case(self) -> Tuple[str, ...]:
        return tuple(self._synonyms_with_upper_case)

    def add(self, synonym: str) -> None:
        validate_tsdoc_tag_name(synonym)
        if synonym in self._synonyms:
            return
        self._synonyms.append(synonym)
        self._synonyms_with_upper_case.append(synonym.upper())

    def delete(self, synonym: str) -> bool:
        if synonym not in self._synonyms:
            return False
        index = self._synonyms.index(synonym)
        del self._synonyms[index]
        del self._synonyms_with_upper_case[index]
        return True

    def clear(self) -> None:
        self._synonyms.clear()
        self._synonyms_with_upper_case.clear()

    def has_tag_name(self, tag_name: str) -> bool:
        return tag_name.upper() in self._synonyms_with_upper_case

    def __iter__(self) -> Iterator[str]:
        return iter(self.synonyms)

    def __len__(self) -> int:
        return len(self._synonyms)


class TSDocTagDefinition:
    """
    Defines a tag understood by the parser.

    Definitions are compared by identity: two definitions with the same name
    are different tags, and a L{TSDocConfiguration} refuses to hold both.
    """

    def __init__(self, tag_name: str, syntax_kind: TSDocTagSyntaxKind,
                 allow_multiple: bool = False,
                 standardization: Standardization = Standardization.None_,
                 synonyms: Iterable[str] = ()):
        """
        @param tag_name: The name, including the C{@}, like C{@myTag}.
        @param allow_multiple: Whether the tag may appear more than once in
            a comment.
        @raises ValueError: If C{tag_name} or a synonym is not a valid tag name.
        """
        validate_tsdoc_tag_name(tag_name)
        self.tag_name = tag_name
        self.tag_name_with_upper_case = tag_name.upper()
        self.syntax_kind = syntax_kind
        self.standardization = standardization
        self.allow_multiple = allow_multiple
        self._synonym_collection = TSDocSynonymCollection(
            synonym for synonym in synonyms if synonym != tag_name)

    @property
    def synonyms(self) -> Tuple[str, ...]:
        return self._synonym_collection.synonyms

    @property
    def synonyms_with_upper_case(self) -> Tuple[str, ...]:
        return self._synonym_collection.synonyms_with_upper_case

    def has_tag_name(self, tag_name: str) -> bool:
        """
        Whether C{tag_name} is the name or one of the synonyms of this tag,
        ignoring case.
        """
        return (tag_name.upper() == self.tag_name_with_upper_case
                or self._synonym_collection.has_tag_name(tag_name))

    def _derive(self) -> 'TSDocTagDefinition':
        return TSDocTagDefinition(self.tag_name, self.syntax_kind,
                                  allow_multiple=self.allow_multiple,
                                  standardization=self.standardization,
                                  synonyms=self.synonyms)

    def __repr__(self) -> str:
        return f'<TSDocTagDefinition {self.tag_name} {self.syntax_kind.name}>'


@attr.s(auto_attribs=True)
class TSDocValidationConfiguration:
    """
    Switches for the optional checks of the parser.
    """

    ignore_undefined_tags: bool = False
    """Silently accept tags that have no definition instead of reporting C{tsdoc-undefined-tag}."""

    report_unsupported_tags: bool = False
    """
    Report C{tsdoc-unsupported-tag} for defined tags that the application
    did not mark as supported.  L{TSDocConfiguration.set_support_for_tag}
    turns this on.
    """

    report_unsupported_html_elements: bool = False
    """
    Report C{tsdoc-unsupported-html-name} for HTML elements missing from
    L{TSDocConfiguration.supported_html_elements}.
    """


@attr.s(auto_attribs=True, frozen=True)
class DocNodeDefinition:
    """
    Associates a node kind with the class implementing it.
    """
    doc_node_kind: str
    constructor: Callable[..., 'DocNode']


@attr.s(auto_attribs=True)
class _RegisteredDocNodeDefinition:
    doc_node_kind: str
    constructor: Callable[..., 'DocNode']
    package_name: str
    allowed_child_kinds: Set[str] = attr.ib(factory=set)


_NODE_KIND_RE = re.compile(r'^[_a-z][_a-z0-9]*$', re.IGNORECASE)

def _kind_name(kind: str) -> str:
    return getattr(kind, 'value', kind)


class DocNodeManager:
    """
    The registry of node kinds and of the parent/child relationships
    allowed between them.

    Custom node classes must be registered with L{register_doc_nodes}, and
    containers refuse to hold a child kind that was not registered with
    L{register_allowable_children}.
    """

    def __init__(self) -> None:
        self._definitions_by_kind: Dict[str, _RegisteredDocNodeDefinition] = {}
        self._definitions_by_constructor: Dict[Callable[..., 'DocNode'],
                                               _RegisteredDocNodeDefinition] = {}

    def register_doc_nodes(self, package_name: str,
                           definitions: Iterable[DocNodeDefinition]) -> None:
        """
        @param package_name: The name of the package that defines the
            nodes, used in error messages.  Must be a valid npm-style
            package name.
        @raises ValueError: On an invalid package name or kind name, or when
            a kind or a class is already registered.
        """
        package_name_error = explain_if_invalid_package_name(package_name)
        if package_name_error:
            raise ValueError('Invalid NPM package name: ' + package_name_error)

        for definition in definitions:
            kind = definition.doc_node_kind
            if not _NODE_KIND_RE.match(kind):
                raise ValueError(f'The DocNode kind {json.dumps(_kind_name(kind))} is not a valid identifier. '
                                 'It must start with an underscore or letter, and be comprised of '
                                 'letters, numbers, and underscores')

            existing = self._definitions_by_kind.get(kind)
            if existing is not None:
                raise ValueError(f'The DocNode kind "{_kind_name(kind)}" was already registered '
                                 f'by {existing.package_name}')

            existing = self._definitions_by_constructor.get(definition.constructor)
            if existing is not None:
                raise ValueError(f'This DocNode constructor was already registered by '
                                 f'{existing.package_name} as {_kind_name(existing.doc_node_kind)}')

            registered = _RegisteredDocNodeDefinition(kind, definition.constructor, package_name)
            self._definitions_by_kind[kind] = registered
            self._definitions_by_constructor[definition.constructor] = registered

    def throw_if_not_registered_kind(self, doc_node_kind: str) -> None:
        """
        @raises ValueError: If C{doc_node_kind} was never registered.
        """
        self._get_definition(doc_node_kind)

    def is_registered_kind(self, doc_node_kind: str) -> bool:
        return doc_node_kind in self._definitions_by_kind

    def register_allowable_children(self, parent_kind: str, child_kinds: Iterable[str]) -> None:
        """
        Allow nodes of C{child_kinds} to be appended to containers of C{parent_kind}.
        """
        parent_definition = self._get_definition(parent_kind)
        for child_kind in child_kinds:
            self._get_definition(child_kind)
            parent_definition.allowed_child_kinds.add(child_kind)

    def is_allowed_child(self, parent_kind: str, child_kind: str) -> bool:
        return child_kind in self._get_definition(parent_kind).allowed_child_kinds

    def _get_definition(self, doc_node_kind: str) -> _RegisteredDocNodeDefinition:
        definition = self._definitions_by_kind.get(doc_node_kind)
        if definition is None:
            raise ValueError(f'The DocNode kind "{_kind_name(doc_node_kind)}" was not registered '
                             'with this TSDocConfiguration')
        return definition


class TSDocConfiguration:
    """
    Configuration for the parser.

    A tag is I{defined} when the parser knows how it is written, and
    I{supported} when the application actually implements it.  The
    standard tags are defined (but not supported) by default.
    """

    def __init__(self) -> None:
        self._tag_definitions: List[TSDocTagDefinition] = []
        self._tag_definitions_by_name: Dict[str, TSDocTagDefinition] = {}
        self._supported_tag_definitions: Set[TSDocTagDefinition] = set()
        # Definitions given to add_tag_definition() mapped to the copies
        # created by add_synonym()/remove_synonym().
        self._configured_tag_definitions: Dict[TSDocTagDefinition, TSDocTagDefinition] = {}
        self._derived_tag_definitions: Set[TSDocTagDefinition] = set()
        self._validation = TSDocValidationConfiguration()
        self._supported_html_elements: List[str] = []
        self._doc_node_manager = DocNodeManager()

        self.clear(no_standard_tags=False)

        from pytsdoc.nodes.builtin import register_builtin_doc_nodes
        register_builtin_doc_nodes(self)

    def clear(self, no_standard_tags: bool = False) -> None:
        """
        Reset the tag definitions, the supported HTML elements and the
        validation switches.  The node registry is left alone.

        @param no_standard_tags: Do not define the standard tags again.
        """
        self._tag_definitions.clear()
        self._tag_definitions_by_name.clear()
        self._supported_tag_definitions.clear()
        self._configured_tag_definitions.clear()
        self._derived_tag_definitions.clear()
        self._validation.ignore_undefined_tags = False
        self._validation.report_unsupported_tags = False
        self._validation.report_unsupported_html_elements = False
        self._supported_html_elements.clear()

        if not no_standard_tags:
            from pytsdoc.tags import StandardTags
            self.add_tag_definitions(StandardTags.all_definitions)

    @property
    def tag_definitions(self) -> Sequence[TSDocTagDefinition]:
        """
        All the tags known to the parser.
        """
        return tuple(self._tag_definitions)

    @property
    def supported_tag_definitions(self) -> Sequence[TSDocTagDefinition]:
        """
        The subset of L{tag_definitions} that the application supports.
        Only relevant when L{TSDocValidationConfiguration.report_unsupported_tags} is enabled.
        """
        return tuple(definition for definition in self._tag_definitions
                     if definition in self._supported_tag_definitions)

    @property
    def validation(self) -> TSDocValidationConfiguration:
        return self._validation

    @property
    def supported_html_elements(self) -> Sequence[str]:
        return tuple(self._supported_html_elements)

    @property
    def doc_node_manager(self) -> DocNodeManager:
        return self._doc_node_manager

    def try_get_tag_definition(self, tag_name: str) -> Optional[TSDocTagDefinition]:
        """
        Look up a tag by its name or one of its synonyms, ignoring case.
        """
        return self._tag_definitions_by_name.get(tag_name.upper())

    def try_get_tag_definition_with_upper_case(self, already_upper_case_tag_name: str
                                               ) -> Optional[TSDocTagDefinition]:
        return self._tag_definitions_by_name.get(already_upper_case_tag_name)

    def add_tag_definition(self, tag_definition: TSDocTagDefinition) -> None:
        """
        Define a new tag, as unsupported.

        @raises ValueError: If the name or a synonym of the tag is already taken.
        """
        existing = self._tag_definitions_by_name.get(tag_definition.tag_name_with_upper_case)
        if existing is tag_definition:
            return
        if existing is not None:
            raise ValueError(f'A tag is already defined using the name {existing.tag_name}')

        conflicts = []
        for synonym in tag_definition.synonyms_with_upper_case:
            existing = self._tag_definitions_by_name.get(synonym)
            if existing is not None:
                conflicts.append(f'{synonym}=>{existing.tag_name}')
        if conflicts:
            raise ValueError('A tag with the same name or synonym is already defined: '
                             + ', '.join(conflicts))

        self._tag_definitions.append(tag_definition)
        self._index_tag_definition(tag_definition)
        logger.debug("Defined tag %s", tag_definition.tag_name)

    def add_tag_definitions(self, tag_definitions: Iterable[TSDocTagDefinition],
                            supported: Optional[bool] = None) -> None:
        """
        Call L{add_tag_definition} for each definition.

        @param supported: If not C{None}, also call L{set_support_for_tag}.
        """
        for tag_definition in tag_definitions:
            self.add_tag_definition(tag_definition)
            if supported is not None:
                self.set_support_for_tag(tag_definition, supported)

    def get_configured_tag_definition(self, tag_definition: TSDocTagDefinition) -> TSDocTagDefinition:
        """
        Return the definition that is actually in use for C{tag_definition}:
        either C{tag_definition} itself, or the copy that replaced it when
        its synonyms were changed.

        @raises ValueError: If the tag is not defined in this configuration.
        """
        configured = self._configured_tag_definitions.get(tag_definition, tag_definition)
        if self._tag_definitions_by_name.get(configured.tag_name_with_upper_case) is not configured:
            raise ValueError('The specified TSDocTagDefinition is not defined for this TSDocConfiguration')
        return configured

    def is_tag_supported(self, tag_definition: TSDocTagDefinition) -> bool:
        return self.get_configured_tag_definition(tag_definition) in self._supported_tag_definitions

    def set_support_for_tag(self, tag_definition: TSDocTagDefinition, supported: bool) -> None:
        """
        Mark a defined tag as supported or unsupported.  This enables
        L{TSDocValidationConfiguration.report_unsupported_tags}.
        """
        configured = self.get_configured_tag_definition(tag_definition)
        if supported:
            self._supported_tag_definitions.add(configured)
        else:
            self._supported_tag_definitions.discard(configured)
        self._validation.report_unsupported_tags = True

    def set_support_for_tags(self, tag_definitions: Iterable[TSDocTagDefinition],
                             supported: bool) -> None:
        for tag_definition in tag_definitions:
            self.set_support_for_tag(tag_definition, supported)

    def add_synonym(self, tag_definition: TSDocTagDefinition, synonym: str) -> TSDocTagDefinition:
        """
        Make C{synonym} an alternative name for a defined tag.

        The definition passed in is never modified: the first time its
        synonyms change, a copy replaces it in this configuration, and the
        copy is what this method returns.

        @raises ValueError: If C{synonym} is already used by another tag.
        """
        validate_tsdoc_tag_name(synonym)
        configured = self.get_configured_tag_definition(tag_definition)
        if configured.has_tag_name(synonym):
            return configured

        existing = self._tag_definitions_by_name.get(synonym.upper())
        if existing is not None:
            raise ValueError(f'A tag with the same name or synonym is already defined: '
                             f'{synonym.upper()}=>{existing.tag_name}')

        derived = self._get_or_create_derived(configured)
        derived._synonym_collection.add(synonym)
        self._reindex()
        logger.debug("Added synonym %s to %s", synonym, derived.tag_name)
        return derived

    def remove_synonym(self, tag_definition: TSDocTagDefinition, synonym: str) -> TSDocTagDefinition:
        """
        The counterpart of L{add_synonym}.
        """
        configured = self.get_configured_tag_definition(tag_definition)
        if synonym not in configured.synonyms:
            return configured

        derived = self._get_or_create_derived(configured)
        derived._synonym_collection.delete(synonym)
        self._reindex()
        logger.debug("Removed synonym %s from %s", synonym, derived.tag_name)
        return derived

    def set_supported_html_elements(self, html_tags: Iterable[str]) -> None:
        """
        Replace the list of supported HTML element names.  This enables
        L{TSDocValidationConfiguration.report_unsupported_html_elements}.
        """
        self._supported_html_elements.clear()
        self._validation.report_unsupported_html_elements = True
        for html_tag in html_tags:
            self.add_supported_html_element(html_tag)

    def add_supported_html_element(self, html_tag: str) -> None:
        validate_html_name(html_tag)
        if html_tag not in self._supported_html_elements:
            self._supported_html_elements.append(html_tag)
        self._validation.report_unsupported_html_elements = True

    def is_html_element_supported(self, html_tag: str) -> bool:
        return html_tag in self._supported_html_elements

    def is_known_message_id(self, message_id: str) -> bool:
        return is_known_message_id(message_id)

    def _get_or_create_derived(self, configured: TSDocTagDefinition) -> TSDocTagDefinition:
        if configured in self._derived_tag_definitions:
            return configured

        derived = configured._derive()
        self._tag_definitions[self._tag_definitions.index(configured)] = derived
        if configured in self._supported_tag_definitions:
            self._supported_tag_definitions.discard(configured)
            self._supported_tag_definitions.add(derived)
        self._configured_tag_definitions[configured] = derived
        self._derived_tag_definitions.add(derived)
        return derived

    def _index_tag_definition(self, tag_definition: TSDocTagDefinition) -> None:
        self._tag_definitions_by_name[tag_definition.tag_name_with_upper_case] = tag_definition
        for synonym in tag_definition.synonyms_with_upper_case:
            self._tag_definitions_by_name[synonym] = tag_definition

    def _reindex(self) -> None:
        self._tag_definitions_by_name.clear()
        for tag_definition in self._tag_definitions:
            self._index_tag_definition(tag_definition)
