"""
Error taxonomy and error reporting for Tally
Structured exceptions, an Ok/Err result type and source-context formatting
"""

from dataclasses import dataclass
from functools import wraps
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple, Union

from pyparsing import col, lineno

from tokens import Token, TokenKind


# ============================================================================
# EXCEPTIONS
# ============================================================================

class TallyError(Exception):
    """Base class for every error raised by the tokenizer, parser and evaluator"""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class TokenizerError(TallyError):
    """Source text contains a character no token kind accepts"""

    def __init__(self, message: str, location: int = 0, line: int = 0, column: int = 0):
        self.location = location
        self.line = line
        self.column = column
        super().__init__(message)


class ParseError(TallyError):
    """The token at the cursor is not one of the required kinds"""

    def __init__(self, position: int, expected: Sequence[TokenKind], got: Optional[Token] = None):
        self.position = position
        self.expected = tuple(expected)
        self.got = got
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        wanted = " or ".join(str(kind) for kind in self.expected)
        found = f"{self.got.type} {self.got.text!r}" if self.got else "end of input"
        return f"At position {self.position} expected {wanted}, got {found}"


class UndefinedVariable(TallyError):
    """A variable was read before anything was assigned to it"""

    def __init__(self, name: str, position: Optional[int] = None):
        self.name = name
        self.position = position
        super().__init__(f"Variable '{name}' is not defined")


class NumericFormatError(TallyError):
    """A number literal whose text is not a base-10 integer"""

    def __init__(self, text: str, position: Optional[int] = None):
        self.text = text
        self.position = position
        super().__init__(f"Invalid integer literal {text!r}")


class InternalError(TallyError):
    """Evaluator met something that is not a Tally AST node"""
    pass


# ============================================================================
# RESULT TYPE
# ============================================================================

@dataclass(frozen=True)
class Ok:
    value: Any

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Err:
    error: TallyError

    @property
    def ok(self) -> bool:
        return False


Result = Union[Ok, Err]


def capture_errors(func: Callable) -> Callable[..., Result]:
    """Wrap func so that a TallyError comes back as Err instead of being raised"""
    @wraps(func)
    def captured(*args, **kwargs) -> Result:
        try:
            return Ok(func(*args, **kwargs))
        except TallyError as e:
            return Err(e)

    return captured


# ============================================================================
# REPORTS (Plain Dictionaries)
# ============================================================================

def make_error_report(
    kind: str,
    message: str,
    line: int = 0,
    column: int = 0,
    expected: Optional[List[str]] = None,
    got: Optional[str] = None,
    context: Optional[str] = None
) -> Dict:
    """Create an error report structure"""
    return {
        'kind': kind,
        'message': message,
        'line': line,
        'column': column,
        'expected': expected or [],
        'got': got,
        'context': context,
    }


def format_error_report(report: Dict) -> str:
    """Format an error report as text"""
    if report['line']:
        text = f"{report['kind']} at line {report['line']}, column {report['column']}:\n"
    else:
        text = f"{report['kind']}:\n"
    text += f"  {report['message']}\n"

    if report['expected']:
        text += f"  Expected: {', '.join(report['expected'])}\n"

    if report['got']:
        text += f"  Got: {report['got']}\n"

    if report['context']:
        text += f"{report['context']}\n"

    return text


def get_context_lines(source_text: str, line_num: int, col_num: int, context_lines: int = 1) -> str:
    """Get context lines around the error with a caret under the column"""
    lines = source_text.split('\n')
    start_line = max(0, line_num - context_lines - 1)
    end_line = min(len(lines), line_num + context_lines)

    context_parts = []
    for i in range(start_line, end_line):
        line_prefix = f"{i+1:4d}: "
        context_parts.append(f"{line_prefix}{lines[i]}")
        if i == line_num - 1:
            context_parts.append(f"{'':6}{' ' * (col_num - 1)}^")

    return '\n'.join(context_parts)


def line_and_column(source_text: str, offset: int) -> Tuple[int, int]:
    """1-based line and column of a character offset"""
    return lineno(offset, source_text), col(offset, source_text)


def _parse_error_offset(error: ParseError, tokens: Sequence[Token]) -> int:
    if error.got is not None:
        return error.got.position
    if tokens:
        last = tokens[-1]
        return last.position + len(last.text)
    return 0


def describe_error(error: TallyError, source_text: str = "", tokens: Sequence[Token] = ()) -> Dict:
    """Build a report for any Tally error, locating it in source_text when possible"""
    offset = None
    expected = None
    got = None

    if isinstance(error, TokenizerError):
        offset = error.location
    elif isinstance(error, ParseError):
        offset = _parse_error_offset(error, tokens)
        expected = [str(kind) for kind in error.expected]
        got = f"'{error.got.text}'" if error.got else "end of input"
    elif isinstance(error, (UndefinedVariable, NumericFormatError)):
        offset = error.position

    kind = {
        TokenizerError: "Tokenizer error",
        ParseError: "Parse error",
        UndefinedVariable: "Runtime error",
        NumericFormatError: "Runtime error",
    }.get(type(error), "Internal error")

    if offset is None or not source_text:
        return make_error_report(kind, error.message, expected=expected, got=got)

    line, column = line_and_column(source_text, offset)
    return make_error_report(
        kind,
        error.message,
        line=line,
        column=column,
        expected=expected,
        got=got,
        context=get_context_lines(source_text, line, column)
    )
