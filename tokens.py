"""
Tally token model
Token kinds and the immutable token record shared by the lexer and parser
"""

from dataclasses import dataclass
from enum import Enum


class TokenKind(Enum):
    """The nine token kinds of the Tally language"""
    NUMBER = "NUMBER"
    VARIABLE = "VARIABLE"
    PLUS = "PLUS"
    MINUS = "MINUS"
    ASSIGN = "ASSIGN"
    LOG = "LOG"
    LPAR = "LPAR"
    RPAR = "RPAR"
    SEMICOLON = "SEMICOLON"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class Token:
    """Classified lexical unit with its source position"""
    type: TokenKind
    text: str
    position: int

    def __str__(self) -> str:
        return f"{self.type}({self.text!r})@{self.position}"
