"""
Extract the content lines of a C{/** ... */} comment.
"""
from enum import Enum, auto
from typing import TYPE_CHECKING, List

from pytsdoc.messages import TSDocMessageId
from pytsdoc.textrange import TextRange

if TYPE_CHECKING:
    from pytsdoc.parser import ParserContext


class _State(Enum):
    BeginComment1 = auto()
    """Looking for C{"/*"}."""
    BeginComment2 = auto()
    """Looking for the second C{"*"} after C{"/*"}."""
    CollectingFirstLine = auto()
    """Like C{CollectingLine} but right after the C{"/**"}."""
    CollectingLine = auto()
    """Collecting characters until the end of the line."""
    AdvancingLine = auto()
    """After a newline, looking for the C{"*"} that starts a line or the C{"*/"} that ends the comment."""
    Done = auto()


def _is_whitespace(char: str) -> bool:
    return char.isspace()


class LineExtractor:
    """
    A single pass character state machine that strips the comment delimiters
    and the C{"*"} prefix of each line.
    """

    @staticmethod
    def extract(parser_context: 'ParserContext') -> bool:
        """
        Scan C{parser_context.source_range} from C{"/**"} until C{"*/"}.

        On success, C{parser_context.comment_range} and
        C{parser_context.lines} are assigned.  Trailing whitespace is trimmed
        from every line, and an empty first line is dropped.

        @return: C{False} if no comment could be extracted, in which case a
            message was added to C{parser_context.log}.
        """
        source_range: TextRange = parser_context.source_range
        buffer = source_range.buffer

        comment_range_start = 0
        comment_range_end = 0

        # Set before entering CollectingFirstLine, CollectingLine or AdvancingLine
        collecting_line_start = 0
        collecting_line_end = 0

        next_index = source_range.pos
        state = _State.BeginComment1

        lines: List[TextRange] = []

        while state is not _State.Done:
            if next_index >= source_range.end:
                if state in (_State.BeginComment1, _State.BeginComment2):
                    parser_context.log.add_message_for_text_range(
                        TSDocMessageId.CommentNotFound,
                        'Expecting a "/**" comment', source_range)
                else:
                    parser_context.log.add_message_for_text_range(
                        TSDocMessageId.CommentMissingClosingDelimiter,
                        'Unexpected end of input', source_range)
                return False

            current = buffer[next_index]
            current_index = next_index
            next_index += 1
            next_char = buffer[next_index] if next_index < source_range.end else ''

            if state is _State.BeginComment1:
                if current == '/' and next_char == '*':
                    comment_range_start = current_index
                    next_index += 1  # the star
                    state = _State.BeginComment2
                elif not _is_whitespace(current):
                    parser_context.log.add_message_for_text_range(
                        TSDocMessageId.CommentOpeningDelimiterSyntax,
                        'Expecting a leading "/**"',
                        source_range.get_new_range(current_index, current_index + 1))
                    return False

            elif state is _State.BeginComment2:
                if current == '*':
                    if next_char == ' ':
                        next_index += 1
                    collecting_line_start = next_index
                    collecting_line_end = next_index
                    state = _State.CollectingFirstLine
                else:
                    parser_context.log.add_message_for_text_range(
                        TSDocMessageId.CommentOpeningDelimiterSyntax,
                        'Expecting a leading "/**"',
                        source_range.get_new_range(current_index, current_index + 1))
                    return False

            elif state in (_State.CollectingFirstLine, _State.CollectingLine):
                if current == '\n':
                    if state is not _State.CollectingFirstLine \
                            or collecting_line_end > collecting_line_start:
                        lines.append(source_range.get_new_range(collecting_line_start,
                                                                collecting_line_end))
                    collecting_line_start = next_index
                    collecting_line_end = next_index
                    state = _State.AdvancingLine
                elif current == '*' and next_char == '/':
                    if collecting_line_end > collecting_line_start:
                        lines.append(source_range.get_new_range(collecting_line_start,
                                                                collecting_line_end))
                    collecting_line_start = 0
                    collecting_line_end = 0
                    next_index += 1  # the slash
                    comment_range_end = next_index
                    state = _State.Done
                elif not _is_whitespace(current):
                    collecting_line_end = next_index

            elif state is _State.AdvancingLine:
                if current == '*':
                    if next_char == '/':
                        collecting_line_start = 0
                        collecting_line_end = 0
                        next_index += 1
                        comment_range_end = next_index
                        state = _State.Done
                    else:
                        # Discard the star at the start of the line, and one space after it.
                        if next_char == ' ':
                            next_index += 1
                        collecting_line_start = next_index
                        collecting_line_end = next_index
                        state = _State.CollectingLine
                elif current == '\n':
                    # Blank line
                    lines.append(source_range.get_new_range(current_index, current_index))
                    collecting_line_start = next_index
                elif not _is_whitespace(current):
                    # The star is missing: the line starts where the whitespace started
                    collecting_line_end = next_index
                    state = _State.CollectingLine

        parser_context.comment_range = source_range.get_new_range(comment_range_start,
                                                                  comment_range_end)
        parser_context.lines = lines
        return True
