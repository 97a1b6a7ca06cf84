"""
Loading C{tsdoc.json} files and applying them to a L{TSDocConfiguration}.
"""
import json
from pathlib import Path
from typing import Any, Dict, List

import pytest

from pytsdoc.configfile import CURRENT_SCHEMA_URL, TSDocConfigFile
from pytsdoc.configuration import TSDocConfiguration, TSDocTagSyntaxKind
from pytsdoc.tags import StandardTags


def write_config(path: Path, data: Any) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data), encoding='utf-8')
    return path

def config(**fields: Any) -> Dict[str, Any]:
    data: Dict[str, Any] = {'$schema': CURRENT_SCHEMA_URL}
    data.update(fields)
    return data

def log_ids(config_file: TSDocConfigFile) -> List[str]:
    return [str(message.message_id) for message in config_file.log]


def test_load_file(tmp_path: Path) -> None:
    path = write_config(tmp_path / 'tsdoc.json', config(
        tagDefinitions=[
            {'tagName': '@myTag', 'syntaxKind': 'modifier'},
            {'tagName': '@myBlock', 'syntaxKind': 'block', 'allowMultiple': True},
        ],
        supportForTags={'@myTag': True, '@remarks': True},
        supportedHtmlElements=['b', 'i'],
    ))
    config_file = TSDocConfigFile.load_file(str(path))
    assert log_ids(config_file) == []
    assert not config_file.has_errors
    assert not config_file.file_not_found
    assert config_file.file_path == str(path)
    assert config_file.tsdoc_schema == CURRENT_SCHEMA_URL
    assert [d.tag_name for d in config_file.tag_definitions] == ['@myTag', '@myBlock']
    assert config_file.support_for_tags == {'@myTag': True, '@remarks': True}

    configuration = TSDocConfiguration()
    config_file.configure_parser(configuration)
    assert log_ids(config_file) == []

    my_tag = configuration.try_get_tag_definition('@myTag')
    assert my_tag is not None
    assert my_tag.syntax_kind is TSDocTagSyntaxKind.ModifierTag
    my_block = configuration.try_get_tag_definition('@myBlock')
    assert my_block is not None
    assert my_block.allow_multiple

    assert configuration.is_tag_supported(my_tag)
    assert configuration.is_tag_supported(StandardTags.remarks)
    assert not configuration.is_tag_supported(StandardTags.returns)
    assert configuration.validation.report_unsupported_tags

    assert configuration.supported_html_elements == ('b', 'i')
    assert configuration.validation.report_unsupported_html_elements

def test_configure_parser_resets(tmp_path: Path) -> None:
    path = write_config(tmp_path / 'tsdoc.json', config())
    configuration = TSDocConfiguration()
    configuration.set_supported_html_elements(['b'])
    TSDocConfigFile.load_file(str(path)).configure_parser(configuration)
    assert configuration.supported_html_elements == ()
    assert not configuration.validation.report_unsupported_html_elements
    assert configuration.try_get_tag_definition('@remarks') is StandardTags.remarks

def test_report_unsupported_html_elements(tmp_path: Path) -> None:
    path = write_config(tmp_path / 'tsdoc.json', config(
        supportedHtmlElements=['b'], reportUnsupportedHtmlElements=False))
    configuration = TSDocConfiguration()
    TSDocConfigFile.load_file(str(path)).configure_parser(configuration)
    assert configuration.supported_html_elements == ('b',)
    assert not configuration.validation.report_unsupported_html_elements

def test_file_not_found(tmp_path: Path) -> None:
    config_file = TSDocConfigFile.load_file(str(tmp_path / 'tsdoc.json'))
    assert config_file.file_not_found
    # A missing file is not an error: the defaults apply
    assert not config_file.has_errors
    assert log_ids(config_file) == ['tsdoc-config-file-not-found']

def test_invalid_json(tmp_path: Path) -> None:
    path = tmp_path / 'tsdoc.json'
    path.write_text('{"$schema": ', encoding='utf-8')
    config_file = TSDocConfigFile.load_file(str(path))
    assert config_file.has_errors
    assert log_ids(config_file) == ['tsdoc-config-invalid-json']
    assert config_file.log.messages[0].text.startswith('Error parsing JSON input: ')

@pytest.mark.parametrize('data, error', [
    ([], 'data should be object'),
    (config(foo=1), "data should NOT have additional properties ('foo')"),
    (config(extends='base.json'), 'data.extends should be array of strings'),
    (config(noStandardTags='yes'), 'data.noStandardTags should be boolean'),
    (config(tagDefinitions=[{'syntaxKind': 'block'}]),
     "data.tagDefinitions[0] should have required property 'tagName'"),
    (config(tagDefinitions=[{'tagName': 'myTag', 'syntaxKind': 'block'}]),
     'data.tagDefinitions[0].tagName should match pattern'),
    (config(tagDefinitions=[{'tagName': '@myTag', 'syntaxKind': 'other'}]),
     'data.tagDefinitions[0].syntaxKind should be equal to one of the allowed values: '
     'inline, block, modifier'),
    (config(tagDefinitions=[{'tagName': '@myTag', 'syntaxKind': 'block', 'x': 1}]),
     "data.tagDefinitions[0] should NOT have additional properties ('x')"),
    (config(supportForTags={'@myTag': 'yes'}), "data.supportForTags['@myTag'] should be boolean"),
    (config(supportForTags={'myTag': True}), "data.supportForTags property name 'myTag' is invalid"),
    (config(supportedHtmlElements=['b', '1']), 'data.supportedHtmlElements[1] should match pattern'),
])
def test_schema_errors(tmp_path: Path, data: Any, error: str) -> None:
    config_file = TSDocConfigFile.load_file(str(write_config(tmp_path / 'tsdoc.json', data)))
    assert config_file.has_errors
    assert log_ids(config_file) == ['tsdoc-config-schema-error']
    assert error in config_file.log.messages[0].unformatted_text

@pytest.mark.parametrize('data', [{}, {'$schema': 'https://example.com/tsdoc.schema.json'}])
def test_unsupported_schema(tmp_path: Path, data: Any) -> None:
    config_file = TSDocConfigFile.load_file(str(write_config(tmp_path / 'tsdoc.json', data)))
    assert log_ids(config_file) == ['tsdoc-config-unsupported-schema']
    assert config_file.has_errors

def test_duplicate_tag_name(tmp_path: Path) -> None:
    path = write_config(tmp_path / 'tsdoc.json', config(tagDefinitions=[
        {'tagName': '@myTag', 'syntaxKind': 'block'},
        {'tagName': '@MYTAG', 'syntaxKind': 'modifier'},
    ]))
    config_file = TSDocConfigFile.load_file(str(path))
    assert log_ids(config_file) == ['tsdoc-config-duplicate-tag-name']
    assert [d.tag_name for d in config_file.tag_definitions] == ['@myTag']

def test_redefined_standard_tag(tmp_path: Path) -> None:
    path = write_config(tmp_path / 'tsdoc.json', config(tagDefinitions=[
        {'tagName': '@remarks', 'syntaxKind': 'modifier'}]))
    config_file = TSDocConfigFile.load_file(str(path))
    assert log_ids(config_file) == []

    config_file.configure_parser(TSDocConfiguration())
    assert log_ids(config_file) == ['tsdoc-config-duplicate-tag-name']

def test_undefined_tag(tmp_path: Path) -> None:
    path = write_config(tmp_path / 'tsdoc.json', config(supportForTags={'@nope': True}))
    config_file = TSDocConfigFile.load_file(str(path))
    assert not config_file.has_errors

    config_file.configure_parser(TSDocConfiguration())
    assert log_ids(config_file) == ['tsdoc-config-undefined-tag']
    assert config_file.log.messages[0].unformatted_text == (
        'The "supportForTags" field refers to an undefined tag "@nope".')
    assert config_file.has_errors

def test_extends(tmp_path: Path) -> None:
    write_config(tmp_path / 'base' / 'tsdoc-base.json', config(
        noStandardTags=True,
        tagDefinitions=[{'tagName': '@baseTag', 'syntaxKind': 'block'}],
        supportedHtmlElements=['b'],
    ))
    path = write_config(tmp_path / 'tsdoc.json', config(
        extends=['./base/tsdoc-base.json'],
        tagDefinitions=[{'tagName': '@myTag', 'syntaxKind': 'inline'}],
        supportForTags={'@baseTag': True},
    ))
    config_file = TSDocConfigFile.load_file(str(path))
    assert not config_file.has_errors
    assert config_file.extends_paths == ['./base/tsdoc-base.json']
    (base_file,) = config_file.extends_files
    assert base_file.file_path == str(tmp_path / 'base' / 'tsdoc-base.json')

    configuration = TSDocConfiguration()
    config_file.configure_parser(configuration)
    assert [d.tag_name for d in configuration.tag_definitions] == ['@baseTag', '@myTag']
    # Inherited from the base file
    assert configuration.try_get_tag_definition('@remarks') is None
    assert configuration.supported_html_elements == ('b',)
    assert configuration.validation.report_unsupported_html_elements
    base_tag = configuration.try_get_tag_definition('@baseTag')
    assert base_tag is not None
    assert configuration.is_tag_supported(base_tag)

def test_extends_no_standard_tags_override(tmp_path: Path) -> None:
    write_config(tmp_path / 'base.json', config(noStandardTags=True))
    path = write_config(tmp_path / 'tsdoc.json', config(extends=['./base.json'],
                                                        noStandardTags=False))
    configuration = TSDocConfiguration()
    TSDocConfigFile.load_file(str(path)).configure_parser(configuration)
    assert configuration.try_get_tag_definition('@remarks') is StandardTags.remarks

def test_extends_package(tmp_path: Path) -> None:
    write_config(tmp_path / 'node_modules' / 'my-config' / 'tsdoc.json', config(
        tagDefinitions=[{'tagName': '@shared', 'syntaxKind': 'modifier'}]))
    path = write_config(tmp_path / 'project' / 'tsdoc.json', config(
        extends=['my-config/tsdoc.json']))
    config_file = TSDocConfigFile.load_file(str(path))
    assert not config_file.has_errors

    configuration = TSDocConfiguration()
    config_file.configure_parser(configuration)
    assert configuration.try_get_tag_definition('@shared') is not None

def test_unresolved_extends(tmp_path: Path) -> None:
    path = write_config(tmp_path / 'tsdoc.json', config(extends=['./missing.json']))
    config_file = TSDocConfigFile.load_file(str(path))
    assert config_file.has_errors
    assert log_ids(config_file) == ['tsdoc-config-unresolved-extends']
    assert config_file.log.messages[0].unformatted_text.startswith(
        'Unable to resolve "extends" reference to "./missing.json"')
    assert config_file.extends_files == []

def test_cyclic_extends(tmp_path: Path) -> None:
    first = write_config(tmp_path / 'first.json', config(extends=['./second.json']))
    second = write_config(tmp_path / 'second.json', config(extends=['./first.json']))
    config_file = TSDocConfigFile.load_file(str(first))
    assert config_file.has_errors
    assert log_ids(config_file) == []

    (second_file,) = config_file.extends_files
    assert log_ids(second_file) == []
    (cycle_file,) = second_file.extends_files
    assert log_ids(cycle_file) == ['tsdoc-config-cyclic-extends']
    assert str(second) in cycle_file.log.messages[0].unformatted_text

def test_load_from_object() -> None:
    config_file = TSDocConfigFile.load_from_object(config(
        tagDefinitions=[{'tagName': '@myTag', 'syntaxKind': 'block'}]))
    assert not config_file.has_errors
    assert config_file.file_path == ''
    configuration = TSDocConfiguration()
    config_file.configure_parser(configuration)
    assert configuration.try_get_tag_definition('@myTag') is not None

def test_load_from_object_rejects_extends() -> None:
    with pytest.raises(ValueError):
        TSDocConfigFile.load_from_object(config(extends=['./base.json']))

def test_save_and_load() -> None:
    configuration = TSDocConfiguration()
    configuration.add_tag_definition(
        TSDocConfigFile.load_from_object(config(tagDefinitions=[
            {'tagName': '@myTag', 'syntaxKind': 'modifier', 'allowMultiple': True}])
        ).tag_definitions[0])
    configuration.set_support_for_tag(StandardTags.remarks, True)
    configuration.set_supported_html_elements(['b'])

    saved = TSDocConfigFile.load_from_parser(configuration).save_to_object()
    assert saved['$schema'] == CURRENT_SCHEMA_URL
    assert saved['noStandardTags'] is True
    assert {'tagName': '@myTag', 'syntaxKind': 'modifier', 'allowMultiple': True} \
        in saved['tagDefinitions']
    assert {'tagName': '@remarks', 'syntaxKind': 'block'} in saved['tagDefinitions']
    assert saved['supportForTags'] == {'@remarks': True}
    assert saved['supportedHtmlElements'] == ['b']
    assert saved['reportUnsupportedHtmlElements'] is True
    # The saved object is plain JSON data
    assert json.loads(json.dumps(saved)) == saved

    reloaded = TSDocConfiguration()
    TSDocConfigFile.load_from_object(saved).configure_parser(reloaded)
    assert [d.tag_name for d in reloaded.tag_definitions] == [
        d.tag_name for d in configuration.tag_definitions]
    assert [d.tag_name for d in reloaded.supported_tag_definitions] == ['@remarks']
    assert reloaded.supported_html_elements == ('b',)

def test_find_config_path_for_folder(tmp_path: Path) -> None:
    (tmp_path / 'project' / 'src' / 'deep').mkdir(parents=True)
    (tmp_path / 'project' / 'package.json').write_text('{}', encoding='utf-8')
    assert TSDocConfigFile.find_config_path_for_folder(
        str(tmp_path / 'project' / 'src' / 'deep')) == str(tmp_path / 'project' / 'tsdoc.json')

def test_load_for_folder(tmp_path: Path) -> None:
    (tmp_path / 'src').mkdir()
    (tmp_path / 'tsconfig.json').write_text('{}', encoding='utf-8')
    write_config(tmp_path / 'tsdoc.json', config(
        tagDefinitions=[{'tagName': '@myTag', 'syntaxKind': 'block'}]))
    config_file = TSDocConfigFile.load_for_folder(str(tmp_path / 'src'))
    assert config_file.file_path == str(tmp_path / 'tsdoc.json')
    assert [d.tag_name for d in config_file.tag_definitions] == ['@myTag']
