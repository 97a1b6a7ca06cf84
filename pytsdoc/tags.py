"""
The tags defined by the TSDoc standard, and the sets that collect the
modifier tags found in a comment.
"""
from typing import TYPE_CHECKING, Dict, List, Optional, Sequence

from pytsdoc.configuration import Standardization, TSDocTagDefinition, TSDocTagSyntaxKind

if TYPE_CHECKING:
    from pytsdoc.nodes import DocBlockTag

_Block = TSDocTagSyntaxKind.BlockTag
_Inline = TSDocTagSyntaxKind.InlineTag
_Modifier = TSDocTagSyntaxKind.ModifierTag


class StandardTags:
    """
    Tags whose meaning is defined by the TSDoc standard.

    The C{(Core)}, C{(Extended)} and C{(Discretionary)} levels are described
    in L{Standardization}.
    """

    alpha = TSDocTagDefinition('@alpha', _Modifier,
                               standardization=Standardization.Discretionary)
    """The release stage of the API item is "alpha": not yet released to third parties."""

    beta = TSDocTagDefinition('@beta', _Modifier,
                              standardization=Standardization.Discretionary)
    """The release stage is "beta": released as a preview, may change."""

    decorator = TSDocTagDefinition('@decorator', _Block, allow_multiple=True,
                                   standardization=Standardization.Extended)
    """Documents a decorator applied to the declaration, since the compiler drops them from typings."""

    default_value = TSDocTagDefinition('@defaultValue', _Block,
                                       standardization=Standardization.Extended)
    """The default value of a field or property."""

    deprecated = TSDocTagDefinition('@deprecated', _Block,
                                    standardization=Standardization.Core)
    """The API item is no longer supported.  The block should explain the alternative."""

    event_property = TSDocTagDefinition('@eventProperty', _Modifier,
                                        standardization=Standardization.Extended)
    """The property returns an event object that handlers can be attached to."""

    example = TSDocTagDefinition('@example', _Block, allow_multiple=True,
                                 standardization=Standardization.Extended)
    experimental = TSDocTagDefinition('@experimental', _Modifier,
                                      standardization=Standardization.Discretionary)

    inherit_doc = TSDocTagDefinition('@inheritDoc', _Inline,
                                     standardization=Standardization.Extended)
    """Copy the documentation from another API item, given by a declaration reference."""

    internal = TSDocTagDefinition('@internal', _Modifier,
                                  standardization=Standardization.Discretionary)
    label = TSDocTagDefinition('@label', _Inline, standardization=Standardization.Core)
    link = TSDocTagDefinition('@link', _Inline, allow_multiple=True,
                              standardization=Standardization.Core)
    override = TSDocTagDefinition('@override', _Modifier,
                                  standardization=Standardization.Extended)
    package_documentation = TSDocTagDefinition('@packageDocumentation', _Modifier,
                                               standardization=Standardization.Core)
    """The comment documents the whole package rather than a declaration."""

    param = TSDocTagDefinition('@param', _Block, allow_multiple=True,
                               standardization=Standardization.Core)
    private_remarks = TSDocTagDefinition('@privateRemarks', _Block,
                                         standardization=Standardization.Core)
    """Content for maintainers, omitted from public documentation."""

    public = TSDocTagDefinition('@public', _Modifier,
                                standardization=Standardization.Discretionary)
    readonly = TSDocTagDefinition('@readonly', _Modifier,
                                  standardization=Standardization.Extended)
    remarks = TSDocTagDefinition('@remarks', _Block, standardization=Standardization.Core)
    """The main documentation, after the summary section."""

    returns = TSDocTagDefinition('@returns', _Block, standardization=Standardization.Core)
    sealed = TSDocTagDefinition('@sealed', _Modifier,
                                standardization=Standardization.Extended)
    see = TSDocTagDefinition('@see', _Block, standardization=Standardization.Extended)
    """A reference to a related item.  Each block is one entry of the list of references."""

    since = TSDocTagDefinition('@since', _Block, standardization=Standardization.Extended)
    """The version in which the API item was introduced."""

    throws = TSDocTagDefinition('@throws', _Block, allow_multiple=True,
                                standardization=Standardization.Extended)
    type_param = TSDocTagDefinition('@typeParam', _Block, allow_multiple=True,
                                    standardization=Standardization.Core)
    version = TSDocTagDefinition('@version', _Block, standardization=Standardization.Extended)
    virtual = TSDocTagDefinition('@virtual', _Modifier,
                                 standardization=Standardization.Extended)

    all_definitions: Sequence[TSDocTagDefinition] = (
        alpha, beta, default_value, decorator, deprecated, event_property, example,
        experimental, inherit_doc, internal, label, link, override, package_documentation,
        param, private_remarks, public, readonly, remarks, returns, sealed, see, since,
        throws, type_param, version, virtual,
    )


class ModifierTagSet:
    """
    The modifier tags found in a comment.

    Modifier tags have no content: their presence is the information.  The
    set is keyed on the upper case tag name, so adding a tag twice keeps
    the first node.
    """

    def __init__(self) -> None:
        self._nodes: List['DocBlockTag'] = []
        self._nodes_by_name: Dict[str, 'DocBlockTag'] = {}

    @property
    def nodes(self) -> Sequence['DocBlockTag']:
        """The block tag nodes, in the order they were added."""
        return tuple(self._nodes)

    def has_tag_name(self, modifier_tag_name: str) -> bool:
        """
        Whether a tag named C{modifier_tag_name} (like C{"@internal"}) was
        added.  Synonyms are not considered and case is ignored.
        """
        return modifier_tag_name.upper() in self._nodes_by_name

    def has_tag(self, modifier_tag_definition: TSDocTagDefinition) -> bool:
        return self.try_get_tag(modifier_tag_definition) is not None

    def try_get_tag(self, modifier_tag_definition: TSDocTagDefinition) -> Optional['DocBlockTag']:
        """
        @raises ValueError: If the definition is not a modifier tag.
        """
        if modifier_tag_definition.syntax_kind is not TSDocTagSyntaxKind.ModifierTag:
            raise ValueError('The tag definition is not a modifier tag')
        return self._nodes_by_name.get(modifier_tag_definition.tag_name_with_upper_case)

    def add_tag(self, block_tag: 'DocBlockTag') -> bool:
        """
        Add a modifier tag node.

        @return: C{False} if a tag with the same name was already present,
            in which case nothing changed.
        """
        if block_tag.tag_name_with_upper_case in self._nodes_by_name:
            return False
        self._nodes_by_name[block_tag.tag_name_with_upper_case] = block_tag
        self._nodes.append(block_tag)
        return True

    def __len__(self) -> int:
        return len(self._nodes)


class StandardModifierTagSet(ModifierTagSet):
    """
    A L{ModifierTagSet} with shortcuts for the standard modifiers.
    """

    def is_alpha(self) -> bool:
        return self.has_tag(StandardTags.alpha)

    def is_beta(self) -> bool:
        return self.has_tag(StandardTags.beta)

    def is_experimental(self) -> bool:
        return self.has_tag(StandardTags.experimental)

    def is_public(self) -> bool:
        return self.has_tag(StandardTags.public)

    def is_internal(self) -> bool:
        return self.has_tag(StandardTags.internal)

    def is_event_property(self) -> bool:
        return self.has_tag(StandardTags.event_property)

    def is_override(self) -> bool:
        return self.has_tag(StandardTags.override)

    def is_package_documentation(self) -> bool:
        return self.has_tag(StandardTags.package_documentation)

    def is_readonly(self) -> bool:
        return self.has_tag(StandardTags.readonly)

    def is_sealed(self) -> bool:
        return self.has_tag(StandardTags.sealed)

    def is_virtual(self) -> bool:
        return self.has_tag(StandardTags.virtual)
