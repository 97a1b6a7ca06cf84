from io import StringIO
from typing import Any, Dict, List

from configargparse import ConfigFileParserException
import pytest

from pytsdoc._configparser import (CompositeConfigParser, IniConfigParser, TomlConfigParser,
                                   ValidatorParser, get_toml_section)
from pytsdoc.options import PytsdocConfigParser, get_parser


def test_get_toml_section() -> None:
    data = {'tool': {'pytsdoc': {'emit': True}, 'other': 1}}
    assert get_toml_section(data, 'tool.pytsdoc') == {'emit': True}
    assert get_toml_section(data, ' "tool".pytsdoc ') == {'emit': True}
    assert get_toml_section(data, ('tool', 'pytsdoc')) == {'emit': True}
    assert get_toml_section(data, 'tool') == data['tool']
    assert get_toml_section(data, 'tool.other') is None
    assert get_toml_section(data, 'tool.missing') is None
    assert get_toml_section(data, 'missing.pytsdoc') is None

INI_CASES: List[Dict[str, Any]] = [
    {'line': 'key = value',                     'expected': ('key', 'value')},
    {'line': 'key=value',                       'expected': ('key', 'value')},
    {'line': 'key=value#not_a_comment ',        'expected': ('key', 'value#not_a_comment')},
    {'line': 'key = ./tsdoc.json',              'expected': ('key', './tsdoc.json')},
    {'line': 'key = true',                      'expected': ('key', 'true')},
    {'line': "key = ['a', 'b']",                'expected': ('key', ['a', 'b'])},
    {'line': 'key = [1, 2]',                    'expected': ('key', ['1', '2'])},
    {'line': 'key = []',                        'expected': ('key', [])},
    {'line': 'key = \n  a.ts\n  b.ts',          'expected': ('key', ['a.ts', 'b.ts'])},
    {'line': 'key = [not a list',               'expected': ('key', '[not a list')},
]

TOML_CASES: List[Dict[str, Any]] = [
    {'line': 'key = "value"',                   'expected': ('key', 'value')},
    {'line': "key = './tsdoc.json'",            'expected': ('key', './tsdoc.json')},
    {'line': 'key = true',                      'expected': ('key', 'true')},
    {'line': 'key = false',                     'expected': ('key', 'false')},
    {'line': 'key = 3',                         'expected': ('key', '3')},
    {'line': "key = ['a', 'b']",                'expected': ('key', ['a', 'b'])},
    {'line': 'key = [1, 2]',                    'expected': ('key', ['1', '2'])},
]

def test_IniConfigParser() -> None:
    p = IniConfigParser(['pytsdoc'])

    for test in INI_CASES:
        try:
            parsed_obj = p.parse(StringIO('[pytsdoc]\n'+test['line']))
        except Exception as e:
            raise AssertionError("Line %r, error: %s" % (test['line'], str(e))) from e
        else:
            parsed_obj = dict(parsed_obj)
            expected = {test['expected'][0]: test['expected'][1]}
            assert parsed_obj==expected, "Line %r" % (test['line'])

def test_IniConfigParser_other_sections() -> None:
    p = IniConfigParser(['pytsdoc'])
    assert dict(p.parse(StringIO('[other]\nkey = value\n'))) == {}
    assert dict(p.parse(StringIO('[other]\na = 1\n[pytsdoc]\nb = 2\n'))) == {'b': '2'}

def test_IniConfigParser_errors() -> None:
    p = IniConfigParser(['pytsdoc'])
    with pytest.raises(ConfigFileParserException):
        p.parse(StringIO('key = value'))
    with pytest.raises(ConfigFileParserException, match="Error evaluating list for 'key'"):
        p.parse(StringIO('[pytsdoc]\nkey = [a b]'))

def test_TomlConfigParser() -> None:
    p = TomlConfigParser(['tool.pytsdoc'])

    for test in TOML_CASES:
        try:
            parsed_obj = p.parse(StringIO('[tool.pytsdoc]\n'+test['line']))
        except Exception as e:
            raise AssertionError("Line %r, error: %s" % (test['line'], str(e))) from e
        else:
            parsed_obj = dict(parsed_obj)
            expected = {test['expected'][0]: test['expected'][1]}
            assert parsed_obj==expected, "Line %r" % (test['line'])

def test_TomlConfigParser_first_section_wins() -> None:
    p = TomlConfigParser(['tool.pytsdoc', 'pytsdoc'])
    text = '[pytsdoc]\na = "1"\n\n[tool.pytsdoc]\nb = "2"\n'
    assert dict(p.parse(StringIO(text))) == {'b': '2'}
    assert dict(p.parse(StringIO('[pytsdoc]\na = "1"\n'))) == {'a': '1'}
    assert dict(p.parse(StringIO('[tool.black]\na = "1"\n'))) == {}

def test_TomlConfigParser_errors() -> None:
    p = TomlConfigParser(['tool.pytsdoc'])
    with pytest.raises(ConfigFileParserException, match="Couldn't parse TOML file"):
        p.parse(StringIO('[tool.pytsdoc\n'))

def test_CompositeConfigParser() -> None:
    toml_text = '[tool.pytsdoc]\nemit = true\n'
    ini_text = '[pytsdoc]\nemit = true\nfiles = \n  a.ts\n  b.ts\n'
    assert dict(PytsdocConfigParser.parse(StringIO(toml_text))) == {'emit': 'true'}
    assert dict(PytsdocConfigParser.parse(StringIO(ini_text))) == {
        'emit': 'true', 'files': ['a.ts', 'b.ts']}

    p = CompositeConfigParser([TomlConfigParser(['x']), IniConfigParser(['x'])])
    with pytest.raises(ConfigFileParserException, match='Error parsing config'):
        p.parse(StringIO('not a config file ['))

def test_CompositeConfigParser_syntax_description() -> None:
    description = PytsdocConfigParser.get_syntax_description()
    assert description.startswith('[1] TomlConfigParser: ')
    assert '[2] IniConfigParser: ' in description

def test_ValidatorParser() -> None:
    p = ValidatorParser(PytsdocConfigParser, get_parser())
    text = '[tool.pytsdoc]\nemit = true\ntsdoc-config = "tsdoc.json"\nnot-an-option = 1\n'
    with pytest.warns(UserWarning, match="No such config option: 'not-an-option'"):
        data = p.parse(StringIO(text))
    assert dict(data) == {'emit': 'true', 'tsdoc-config': 'tsdoc.json'}
