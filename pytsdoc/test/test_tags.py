import pytest

from pytsdoc.configuration import Standardization, TSDocConfiguration, TSDocTagSyntaxKind
from pytsdoc.nodes import DocBlockTag
from pytsdoc.tags import ModifierTagSet, StandardModifierTagSet, StandardTags


def test_standard_tags() -> None:
    names = [definition.tag_name for definition in StandardTags.all_definitions]
    assert len(names) == len(set(names)) == 27
    for definition in StandardTags.all_definitions:
        assert definition.standardization is not Standardization.None_
        assert definition.synonyms == ()

    assert StandardTags.param.allow_multiple
    assert not StandardTags.remarks.allow_multiple
    assert StandardTags.link.syntax_kind is TSDocTagSyntaxKind.InlineTag
    assert StandardTags.internal.syntax_kind is TSDocTagSyntaxKind.ModifierTag
    assert StandardTags.type_param.tag_name == '@typeParam'

def test_modifier_tag_set() -> None:
    configuration = TSDocConfiguration()
    modifiers = ModifierTagSet()
    assert len(modifiers) == 0

    first = DocBlockTag(configuration, '@internal')
    assert modifiers.add_tag(first)
    # Case insensitive, the first node is kept
    assert not modifiers.add_tag(DocBlockTag(configuration, '@Internal'))
    assert modifiers.add_tag(DocBlockTag(configuration, '@myFlag'))

    assert len(modifiers) == 2
    assert [tag.tag_name for tag in modifiers.nodes] == ['@internal', '@myFlag']
    assert modifiers.has_tag_name('@INTERNAL')
    assert modifiers.has_tag_name('@myflag')
    assert not modifiers.has_tag_name('@beta')
    assert modifiers.has_tag(StandardTags.internal)
    assert modifiers.try_get_tag(StandardTags.internal) is first
    assert modifiers.try_get_tag(StandardTags.beta) is None

def test_try_get_tag_requires_modifier() -> None:
    with pytest.raises(ValueError):
        ModifierTagSet().try_get_tag(StandardTags.remarks)

def test_standard_modifier_tag_set() -> None:
    configuration = TSDocConfiguration()
    modifiers = StandardModifierTagSet()
    for tag_name in ['@alpha', '@sealed', '@packageDocumentation']:
        modifiers.add_tag(DocBlockTag(configuration, tag_name))

    assert modifiers.is_alpha()
    assert modifiers.is_sealed()
    assert modifiers.is_package_documentation()
    assert not modifiers.is_beta()
    assert not modifiers.is_experimental()
    assert not modifiers.is_public()
    assert not modifiers.is_internal()
    assert not modifiers.is_event_property()
    assert not modifiers.is_override()
    assert not modifiers.is_readonly()
    assert not modifiers.is_virtual()
