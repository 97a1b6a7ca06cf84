"""
The entry point of the parser.

Usage::

    from pytsdoc.parser import TSDocParser

    parser_context = TSDocParser().parse_string('/** Hello {@link World} */')
    for message in parser_context.log:
        print(message)
    summary = parser_context.doc_comment.summary_section

The comment goes through these stages:

 1. L{LineExtractor} finds the C{/** */} delimiters and the content lines.
 2. L{Tokenizer} splits the lines into tokens.
 3. L{NodeParser} builds the verbatim list of nodes.
 4. L{DocCommentAssembler} sorts the nodes into the sections of the
    L{DocComment}.
 5. L{ParagraphSplitter} splits the sections into paragraphs.
"""
import logging
from typing import List, Optional

from pytsdoc.assembler import DocCommentAssembler
from pytsdoc.configuration import TSDocConfiguration
from pytsdoc.lines import LineExtractor
from pytsdoc.messages import ParserMessageLog
from pytsdoc.nodeparser import NodeParser
from pytsdoc.nodes import DocComment, DocNode
from pytsdoc.paragraphs import ParagraphSplitter
from pytsdoc.textrange import TextRange
from pytsdoc.tokenizer import Token, Tokenizer

logger = logging.getLogger(__name__)


class ParserContext:
    """
    The state built up by the parser stages, and the result of a parse.
    """

    def __init__(self, configuration: TSDocConfiguration, source_range: TextRange):
        self.configuration = configuration
        """The configuration given to the L{TSDocParser}."""

        self.source_range = source_range
        """The start and end of the parsed input."""

        self.comment_range: TextRange = TextRange.empty
        """The range going from the opening C{/**} to the closing C{*/}."""

        self.lines: List[TextRange] = []
        """The content lines of the comment, without the delimiters and the C{*} prefixes."""

        self.tokens: List[Token] = []
        """All the tokens extracted from L{lines}."""

        self.verbatim_nodes: List[DocNode] = []
        """The nodes found by the L{NodeParser}, before they are sorted into L{doc_comment}."""

        self.doc_comment = DocComment(configuration)
        """The parsed comment.  This is the primary output of the parser."""

        self.log = ParserMessageLog()
        """The diagnostics reported while parsing."""


class TSDocParser:
    """
    Parses TSDoc comments.  A parser can be reused for any number of comments.
    """

    def __init__(self, configuration: Optional[TSDocConfiguration] = None):
        """
        @param configuration: The tags and validation switches to use.  A
            default L{TSDocConfiguration} is created when omitted.
        """
        if configuration is None:
            configuration = TSDocConfiguration()
        self.configuration = configuration

    def parse_string(self, text: str) -> ParserContext:
        """
        Parse a string holding a single C{/** */} comment, optionally
        surrounded by whitespace.
        """
        return self.parse_range(TextRange.from_string(text))

    def parse_range(self, text_range: TextRange) -> ParserContext:
        """
        Parse the comment found at the start of C{text_range}.

        The parser never raises for malformed content: problems are
        reported in L{ParserContext.log}.
        """
        parser_context = ParserContext(self.configuration, text_range)

        if LineExtractor.extract(parser_context):
            parser_context.tokens = Tokenizer.read_tokens(parser_context.lines)

            node_parser = NodeParser(parser_context)
            parser_context.verbatim_nodes = node_parser.parse()

            DocCommentAssembler(parser_context).assemble(parser_context.verbatim_nodes)
            ParagraphSplitter.split_paragraphs(parser_context.doc_comment)
        else:
            logger.debug("No comment found in %r", text_range)

        return parser_context
