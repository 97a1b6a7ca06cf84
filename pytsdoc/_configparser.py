"""
Config file parsers for L{configargparse}, reading the C{pytsdoc} section of
project files.

L{TomlConfigParser} reads C{pyproject.toml}::

    [tool.pytsdoc]
    tsdoc-config = "./tsdoc.json"
    report-unsupported-tags = true

L{IniConfigParser} reads C{setup.cfg} or C{pytsdoc.ini}::

    [pytsdoc]
    tsdoc-config = ./tsdoc.json
    report-unsupported-tags = true

L{CompositeConfigParser} tries several parsers in turn, so the same
C{--config} option accepts both formats.
"""
from __future__ import annotations

import argparse
import configparser
import warnings
from ast import literal_eval
from collections import OrderedDict
from typing import Any, Callable, Dict, List, Optional, TextIO, Tuple, Union

from configargparse import ArgumentParser, ConfigFileParser, ConfigFileParserException
import toml


def get_toml_section(data: Dict[str, Any], section: Union[Tuple[str, ...], str]) -> Optional[Dict[str, Any]]:
    """
    Given some TOML data (as loaded with C{toml.load()}), returns the
    requested section, like C{"tool.pytsdoc"}, or C{None} if there is no
    such table.
    """
    keys = tuple(part.strip().strip('"\'') for part in section.split('.')) \
        if isinstance(section, str) else section
    item = data.get(keys[0])
    if len(keys) > 1:
        return get_toml_section(item, keys[1:]) if isinstance(item, dict) else None
    return item if isinstance(item, dict) else None


class TomlConfigParser(ConfigFileParser):
    """
    Reads the first of C{sections} found in a TOML file.  Values keep
    their TOML types until argparse converts them: lists become lists of
    strings, anything else becomes a string.
    """

    def __init__(self, sections: List[str]) -> None:
        super().__init__()
        self.sections = sections

    def __call__(self) -> ConfigFileParser:
        return self

    def parse(self, stream: TextIO) -> Dict[str, Any]:
        try:
            config = toml.load(stream)
        except Exception as e:
            raise ConfigFileParserException(f"Couldn't parse TOML file: {e}")

        result: Dict[str, Any] = OrderedDict()
        for section in self.sections:
            data = get_toml_section(config, section)
            if not data:
                continue
            for key, value in data.items():
                if isinstance(value, list):
                    result[key] = [str(i) for i in value]
                elif isinstance(value, bool):
                    # argparse's store_true actions expect 'true' or 'false'
                    result[key] = str(value).lower()
                elif value is not None:
                    result[key] = str(value)
            break
        return result

    def get_syntax_description(self) -> str:
        return ("Config file syntax is Tom's Obvious, Minimal Language. "
                "See https://github.com/toml-lang/toml/blob/v0.5.0/README.md for details.")


class IniConfigParser(ConfigFileParser):
    """
    Reads the C{sections} of an INI file with L{configparser}.  A value
    written as a Python list literal becomes a list, so does a value
    spanning several lines.
    """

    def __init__(self, sections: List[str]) -> None:
        super().__init__()
        self.sections = sections

    def __call__(self) -> ConfigFileParser:
        return self

    def parse(self, stream: TextIO) -> Dict[str, Any]:
        config = configparser.ConfigParser()
        try:
            config.read_string(stream.read())
        except Exception as e:
            raise ConfigFileParserException(f"Couldn't parse INI file: {e}")

        result: Dict[str, Union[str, List[str]]] = OrderedDict()
        for section in config.sections():
            if section not in self.sections:
                continue
            for key, value in config[section].items():
                if value.startswith('[') and value.endswith(']'):
                    try:
                        items = literal_eval(value)
                    except (ValueError, SyntaxError) as e:
                        raise ConfigFileParserException(
                            f"Error evaluating list for {key!r}: {e}") from e
                    if not isinstance(items, list):
                        raise ConfigFileParserException(f"{key!r} is not a list")
                    result[key] = [str(i) for i in items]
                elif '\n' in value:
                    result[key] = [line for line in value.split('\n') if line]
                else:
                    result[key] = value
        return result

    def get_syntax_description(self) -> str:
        return ("Uses configparser module to parse an INI file. "
                "Lists are written one item per line, or with the python list syntax.")


class CompositeConfigParser(ConfigFileParser):
    """
    A config parser that understands multiple formats: each parser is
    tried in turn until one succeeds.
    """

    def __init__(self, config_parser_types: List[Callable[[], ConfigFileParser]]) -> None:
        super().__init__()
        self.parsers = [p() for p in config_parser_types]

    def __call__(self) -> ConfigFileParser:
        return self

    def parse(self, stream: TextIO) -> Dict[str, Any]:
        errors = []
        for p in self.parsers:
            try:
                return p.parse(stream) # type: ignore[no-any-return]
            except Exception as e:
                stream.seek(0)
                errors.append(e)
        raise ConfigFileParserException(
                f"Error parsing config: {', '.join(repr(str(e)) for e in errors)}")

    def get_syntax_description(self) -> str:
        return ' '.join(f"[{i+1}] {parser.__class__.__name__}: {parser.get_syntax_description()}"
                        for i, parser in enumerate(self.parsers))


class ValidatorParser(ConfigFileParser):
    """
    Wraps a config parser to warn about, and drop, the keys that match no
    option of C{argument_parser}.
    """

    def __init__(self, config_parser: ConfigFileParser, argument_parser: ArgumentParser) -> None:
        super().__init__()
        self.config_parser = config_parser
        self.argument_parser = argument_parser

    def get_syntax_description(self) -> str:
        return self.config_parser.get_syntax_description() #type:ignore[no-any-return]

    def parse(self, stream: TextIO) -> Dict[str, Any]:
        data: Dict[str, Any] = self.config_parser.parse(stream)

        known_config_keys: Dict[str, argparse.Action] = {
            config_key: action for action in self.argument_parser._actions
            for config_key in self.argument_parser.get_possible_config_keys(action)}

        new_data = {}
        for key, value in data.items():
            if key in known_config_keys:
                new_data[key] = value
            else:
                warnings.warn(f"No such config option: {key!r}")
        return new_data
