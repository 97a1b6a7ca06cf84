"""
The command-line parsing.
"""
from argparse import Namespace
from pathlib import Path
from typing import List, Optional, Sequence

from configargparse import ArgumentParser
import attr

from pytsdoc import __version__
from pytsdoc.utils import parse_path
from pytsdoc._configparser import CompositeConfigParser, IniConfigParser, TomlConfigParser, ValidatorParser

DEFAULT_CONFIG_FILES = ['./pyproject.toml', './setup.cfg', './pytsdoc.ini']
CONFIG_SECTIONS = ['tool.pytsdoc', 'tool:pytsdoc', 'pytsdoc']

__all__ = ("Options", )

# CONFIGURATION PARSING

PytsdocConfigParser = CompositeConfigParser(
                [TomlConfigParser(CONFIG_SECTIONS),
                 IniConfigParser(CONFIG_SECTIONS)])

# ARGUMENTS PARSING

def get_parser() -> ArgumentParser:
    parser = ArgumentParser(
        prog='pytsdoc',
        description="Check and normalize TSDoc comments.",
        usage="pytsdoc [options] FILE...",
        default_config_files=DEFAULT_CONFIG_FILES,
        config_file_parser_class=PytsdocConfigParser)

    # Warn about unknown keys in the config files.
    parser._config_file_parser = ValidatorParser(parser._config_file_parser, parser)

    parser.add_argument(
        '-c', '--config', is_config_file=True,
        help=("Load config from this file (any command line "
              "options override settings from the file)."), metavar="PATH",)
    parser.add_argument(
        '--tsdoc-config', dest='tsdoc_config', metavar='PATH', default=None,
        help=("A tsdoc.json file defining custom tags and the supported tags "
              "and HTML elements."))
    parser.add_argument(
        '--ignore-undefined-tags', dest='ignore_undefined_tags', action='store_true',
        help="Don't report tags that have no definition.")
    parser.add_argument(
        '--report-unsupported-tags', dest='report_unsupported_tags', action='store_true',
        help="Report the defined tags that the configuration does not mark as supported.")
    parser.add_argument(
        '--emit', dest='emit', action='store_true',
        help="Print each comment in normalized TSDoc form.")
    parser.add_argument(
        '--plain-text', dest='plain_text', action='store_true',
        help="Print the summary of each comment as plain text.")
    parser.add_argument(
        '--whole-file', dest='whole_file', action='store_true',
        help=("Parse each file as a single comment, instead of looking for "
              "the first /** */ comment in it."))
    parser.add_argument(
        '-v', '--verbose', action='count', dest='verbosity', default=0,
        help="Be noisier.  Can be repeated.")
    parser.add_argument(
        '--version', action='version', version=f'%(prog)s {__version__}')
    parser.add_argument(
        'files', metavar='FILE', nargs='*', default=[],
        help="Source files containing TSDoc comments.")
    return parser

def parse_args(args: Sequence[str]) -> Namespace:
    return get_parser().parse_args(args)

# CONVERTERS

def _convert_files(l: List[str]) -> List[Path]:
    return [parse_path(p, opt='FILE') for p in l]
def _convert_tsdoc_config(s: Optional[str]) -> Optional[Path]:
    return parse_path(s, opt='--tsdoc-config') if s else None

@attr.s
class Options:
    """
    Container for all possible pytsdoc options.

    See C{pytsdoc --help} for more informations.
    """

    files:                      List[Path]              = attr.ib(converter=_convert_files)
    tsdoc_config:               Optional[Path]          = attr.ib(converter=_convert_tsdoc_config)
    ignore_undefined_tags:      bool                    = attr.ib()
    report_unsupported_tags:    bool                    = attr.ib()
    emit:                       bool                    = attr.ib()
    plain_text:                 bool                    = attr.ib()
    whole_file:                 bool                    = attr.ib()
    verbosity:                  int                     = attr.ib()

    # HIGH LEVEL FACTORY METHODS

    @classmethod
    def defaults(cls,) -> 'Options':
        return cls.from_args([])

    @classmethod
    def from_args(cls, args: Sequence[str]) -> 'Options':
        return cls.from_namespace(parse_args(args))

    @classmethod
    def from_namespace(cls, args: Namespace) -> 'Options':
        argsdict = vars(args)

        # remove the config argument
        argsdict.pop('config')

        return cls(**argsdict)
