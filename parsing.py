"""
Tally parser
Recursive-descent parser turning a token list into a StatementList

Grammar, lowest to highest precedence:

    program    := statement* EOF
    statement  := assignment ';' | printStmt ';'
    assignment := VARIABLE ASSIGN formula
    printStmt  := LOG formula
    formula    := atom ( (PLUS|MINUS) atom )*
    atom       := LPAR formula RPAR | NUMBER | VARIABLE
"""

import sys
from typing import List, Optional, Sequence

from ast_nodes import BinaryOp, Node, NumberLiteral, StatementList, UnaryOp, VariableRef
from error_handling import ParseError, capture_errors
from tokens import Token, TokenKind


class Parser:
    """Single-cursor parser over one token sequence; not reentrant"""

    def __init__(self, tokens: Sequence[Token], debug: bool = False):
        self.tokens = list(tokens)
        self.pos = 0
        self.debug = debug

    def _trace(self, message: str) -> None:
        if self.debug:
            print(f"[parse {self.pos}] {message}", file=sys.stderr)

    def at_end(self) -> bool:
        return self.pos >= len(self.tokens)

    def peek(self) -> Optional[Token]:
        """Current token without consuming it, None at end of input"""
        if self.at_end():
            return None
        return self.tokens[self.pos]

    def match(self, *expected: TokenKind) -> Optional[Token]:
        """Consume and return the current token if its type is expected"""
        token = self.peek()
        if token is not None and token.type in expected:
            self.pos += 1
            return token
        return None

    def require(self, *expected: TokenKind) -> Token:
        """Like match, but a mismatch is a ParseError at the cursor"""
        token = self.match(*expected)
        if token is None:
            raise ParseError(self.pos, expected, self.peek())
        return token

    # ---------- EXPRESSIONS ----------
    def parse_atom(self) -> Node:
        if self.match(TokenKind.LPAR) is not None:
            node = self.parse_formula()
            self.require(TokenKind.RPAR)
            return node

        number = self.match(TokenKind.NUMBER)
        if number is not None:
            return NumberLiteral(number.text, number.position)

        variable = self.match(TokenKind.VARIABLE)
        if variable is not None:
            return VariableRef(variable.text, variable.position)

        raise ParseError(self.pos, (TokenKind.LPAR, TokenKind.NUMBER, TokenKind.VARIABLE), self.peek())

    def parse_formula(self) -> Node:
        left = self.parse_atom()
        operator = self.match(TokenKind.PLUS, TokenKind.MINUS)
        while operator is not None:
            right = self.parse_atom()
            left = BinaryOp(operator.type, left, right)
            operator = self.match(TokenKind.PLUS, TokenKind.MINUS)
        return left

    # ---------- STATEMENTS ----------
    def parse_print(self) -> Node:
        operator = self.require(TokenKind.LOG)
        return UnaryOp(operator.type, self.parse_formula())

    def parse_statement(self) -> Node:
        variable = self.match(TokenKind.VARIABLE)
        if variable is None:
            self._trace("print statement")
            return self.parse_print()

        self._trace(f"assignment to {variable.text}")
        target = VariableRef(variable.text, variable.position)
        operator = self.require(TokenKind.ASSIGN)
        return BinaryOp(operator.type, target, self.parse_formula())

    def parse_program(self) -> StatementList:
        statements: List[Node] = []
        while not self.at_end():
            statement = self.parse_statement()
            self.require(TokenKind.SEMICOLON)
            statements.append(statement)
        self._trace(f"parsed {len(statements)} statements")
        return StatementList(tuple(statements))


# Factory and entry points
def create_parser(tokens: Sequence[Token], debug: bool = False) -> Parser:
    """Create a parser over tokens"""
    return Parser(tokens, debug=debug)


def parse_program(tokens: Sequence[Token], debug: bool = False) -> StatementList:
    """Parse a complete token sequence into its StatementList"""
    return create_parser(tokens, debug).parse_program()


try_parse_program = capture_errors(parse_program)
