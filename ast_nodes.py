"""
Tally abstract syntax tree
Closed set of immutable node types produced by the parser
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple, Union

from tokens import TokenKind


@dataclass(frozen=True)
class NumberLiteral:
    raw_text: str
    position: Optional[int] = field(default=None, compare=False)


@dataclass(frozen=True)
class VariableRef:
    name: str
    position: Optional[int] = field(default=None, compare=False)


@dataclass(frozen=True)
class BinaryOp:
    """PLUS, MINUS or ASSIGN; ASSIGN always has a VariableRef on the left"""
    operator: TokenKind
    left: 'Node'
    right: 'Node'


@dataclass(frozen=True)
class UnaryOp:
    """Print statement (operator is always LOG)"""
    operator: TokenKind
    operand: 'Node'


@dataclass(frozen=True)
class StatementList:
    statements: Tuple['Node', ...] = ()


Node = Union[NumberLiteral, VariableRef, BinaryOp, UnaryOp, StatementList]


def pretty_print_ast(node: Node, indent: int = 0) -> str:
    """Pretty print an AST node for debugging"""
    lines = []
    pending = [(node, indent)]
    while pending:
        current, depth = pending.pop()
        pad = "  " * depth
        if isinstance(current, NumberLiteral):
            lines.append(f"{pad}NumberLiteral({current.raw_text})")
        elif isinstance(current, VariableRef):
            lines.append(f"{pad}VariableRef({current.name})")
        elif isinstance(current, BinaryOp):
            lines.append(f"{pad}BinaryOp({current.operator})")
            pending.append((current.right, depth + 1))
            pending.append((current.left, depth + 1))
        elif isinstance(current, UnaryOp):
            lines.append(f"{pad}UnaryOp({current.operator})")
            pending.append((current.operand, depth + 1))
        else:
            lines.append(f"{pad}StatementList")
            pending.extend((statement, depth + 1) for statement in reversed(current.statements))
    return "".join(line + "\n" for line in lines)


def _formula_to_dict(node: BinaryOp) -> Dict[str, Any]:
    rest = []
    while isinstance(node, BinaryOp) and node.operator in (TokenKind.PLUS, TokenKind.MINUS):
        rest.append({"operator": node.operator.value, "operand": ast_to_dict(node.right)})
        node = node.left
    rest.reverse()
    return {"type": "Formula", "first": ast_to_dict(node), "rest": rest}


def ast_to_dict(node: Node) -> Dict[str, Any]:
    """
    Convert an AST to a JSON-compatible dictionary.
    A PLUS/MINUS chain becomes one flat Formula entry, first operand then
    (operator, operand) pairs in source order.
    """
    if isinstance(node, NumberLiteral):
        return {"type": "NumberLiteral", "value": node.raw_text}
    if isinstance(node, VariableRef):
        return {"type": "VariableRef", "name": node.name}
    if isinstance(node, BinaryOp):
        if node.operator != TokenKind.ASSIGN:
            return _formula_to_dict(node)
        return {
            "type": "BinaryOp",
            "operator": node.operator.value,
            "left": ast_to_dict(node.left),
            "right": ast_to_dict(node.right),
        }
    if isinstance(node, UnaryOp):
        return {
            "type": "UnaryOp",
            "operator": node.operator.value,
            "operand": ast_to_dict(node.operand),
        }
    return {
        "type": "StatementList",
        "statements": [ast_to_dict(statement) for statement in node.statements],
    }
