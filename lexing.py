"""
Tally tokenizer
pyparsing token table producing the flat Token list the parser consumes
"""

from typing import List

from pyparsing import (
    Keyword, Literal, MatchFirst, ParseException, ParserElement, Regex,
    StringEnd, ZeroOrMore, python_style_comment
)

from error_handling import TokenizerError, line_and_column
from tokens import Token, TokenKind

# Enable packrat parsing for performance
ParserElement.enable_packrat()


CYRILLIC = "абвгдеёжзийклмнопрстуфхцчшщъыьэюяАБВГДЕЁЖЗИЙКЛМНОПРСТУФХЦЧШЩЪЫЬЭЮЯ"
IDENT_START = "abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ_" + CYRILLIC
IDENT_CHARS = IDENT_START + "0123456789"

# Word spellings come first so "print" is never read as a variable.
# Every keyword also has a Cyrillic spelling.
KEYWORDS = {
    "print": TokenKind.LOG,
    "КОНСОЛЬ": TokenKind.LOG,
    "РАВНО": TokenKind.ASSIGN,
    "ПЛЮС": TokenKind.PLUS,
    "МИНУС": TokenKind.MINUS,
}

SYMBOLS = {
    "+": TokenKind.PLUS,
    "-": TokenKind.MINUS,
    "=": TokenKind.ASSIGN,
    "(": TokenKind.LPAR,
    ")": TokenKind.RPAR,
    ";": TokenKind.SEMICOLON,
}


def _emit(kind: TokenKind):
    def action(s, loc, toks):
        return Token(kind, toks[0], loc)
    return action


class TallyTokenizer:
    """Tokenizer built once per instance from the keyword and symbol tables"""

    def __init__(self):
        self._setup_token_patterns()

    def _setup_token_patterns(self):
        keyword = MatchFirst([
            Keyword(word, ident_chars=IDENT_CHARS).set_parse_action(_emit(kind))
            for word, kind in KEYWORDS.items()
        ])
        number = Regex(r"[0-9]+").set_parse_action(_emit(TokenKind.NUMBER))
        variable = Regex(f"[{IDENT_START}][{IDENT_CHARS}]*").set_parse_action(_emit(TokenKind.VARIABLE))
        symbol = MatchFirst([
            Literal(text).set_parse_action(_emit(kind))
            for text, kind in SYMBOLS.items()
        ])

        self.token = keyword | number | variable | symbol
        self.source = ZeroOrMore(self.token) + StringEnd()
        self.source.ignore(python_style_comment)

    def tokenize(self, text: str) -> List[Token]:
        """Split source text into tokens; positions are character offsets"""
        try:
            return list(self.source.parse_string(text, parse_all=True))
        except ParseException as e:
            line, column = line_and_column(text, e.loc)
            found = text[e.loc] if e.loc < len(text) else "end of input"
            raise TokenizerError(
                f"Unexpected character {found!r} at line {line}, column {column}",
                location=e.loc,
                line=line,
                column=column
            ) from e


def tokenize(text: str) -> List[Token]:
    """Tokenize Tally source text"""
    return TallyTokenizer().tokenize(text)

