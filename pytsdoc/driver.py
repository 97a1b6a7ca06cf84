"""The entry point."""

import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from pytsdoc.configfile import TSDocConfigFile
from pytsdoc.configuration import TSDocConfiguration
from pytsdoc.emitters import PlainTextEmitter
from pytsdoc.messages import ParserMessage
from pytsdoc.options import Options
from pytsdoc.parser import ParserContext, TSDocParser
from pytsdoc.textrange import TextRange
from pytsdoc.utils import error

def get_configuration(options: Options) -> TSDocConfiguration:
    """
    Build the parser configuration from the C{--tsdoc-config} file and the
    validation options.  The problems found in the config file are printed.
    """
    configuration = TSDocConfiguration()

    if options.tsdoc_config is not None:
        config_file = TSDocConfigFile.load_file(str(options.tsdoc_config))
        if config_file.file_not_found:
            error(f"{options.tsdoc_config}: file not found.")
        config_file.configure_parser(configuration)
        _print_config_file_messages(config_file)
        if config_file.has_errors:
            error(f"{options.tsdoc_config}: invalid TSDoc configuration.")

    if options.ignore_undefined_tags:
        configuration.validation.ignore_undefined_tags = True
    if options.report_unsupported_tags:
        configuration.validation.report_unsupported_tags = True
    return configuration

def _print_config_file_messages(config_file: TSDocConfigFile) -> None:
    for extends_file in config_file.extends_files:
        _print_config_file_messages(extends_file)
    for message in config_file.log:
        print(f"{config_file.file_path}: [{message.message_id}] {message.unformatted_text}",
              file=sys.stderr)

def find_comment_range(text: str) -> Optional[TextRange]:
    """
    Find the first C{/** */} comment in some source code.

    @return: The range of the comment, going to the end of C{text} if the
        comment is not closed, or C{None} if there is no comment.
    """
    pos = text.find('/**')
    if pos == -1:
        return None
    end = text.find('*/', pos + 3)
    end = len(text) if end == -1 else end + 2
    return TextRange.from_string_range(text, pos, end)

def format_message(path: Path, message: ParserMessage) -> str:
    """
    Format a diagnostic as C{FILE:LINE:COLUMN: [message-id] message}.
    """
    location = message.text_range.get_location(message.text_range.pos)
    return f"{path}:{location.line}:{location.column}: [{message.message_id}] {message.unformatted_text}"

def check_file(parser: TSDocParser, path: Path, whole_file: bool) -> Optional[ParserContext]:
    """
    Parse the comment of a file.

    @return: The parse result, or C{None} if the file has no comment.
    """
    try:
        text = path.read_text(encoding='utf-8')
    except (OSError, UnicodeDecodeError) as e:
        error(f"{path}: cannot read file: {e}")

    if whole_file:
        text_range: Optional[TextRange] = TextRange.from_string(text)
    else:
        text_range = find_comment_range(text)
    if text_range is None:
        return None
    return parser.parse_range(text_range)

def main(args: Sequence[str] = sys.argv[1:]) -> int:
    """
    This is the console_scripts entry point for pytsdoc CLI.

    @param args: Command line arguments to run the CLI.
    @return: C{0} if no problem was found, C{2} if diagnostics were printed.
    """
    options = Options.from_args(args)

    if options.verbosity > 0:
        logging.basicConfig(level=logging.DEBUG if options.verbosity > 1 else logging.INFO)

    if not options.files:
        error("No files given.")

    parser = TSDocParser(get_configuration(options))

    exitcode = 0
    for path in options.files:
        parser_context = check_file(parser, path, options.whole_file)
        if parser_context is None:
            continue

        for message in parser_context.log:
            print(format_message(path, message))
            exitcode = 2

        if options.emit:
            print(parser_context.doc_comment.emit_as_tsdoc(), end='')
        if options.plain_text:
            print(PlainTextEmitter.get_plain_text(parser_context.doc_comment))

    return exitcode
