"""
Tally Interpreter
Tree-walking evaluator over the AST with an explicitly passed binding store
Printed values go to an output sink, stdout unless told otherwise
"""

import re
import sys
from typing import Dict, Optional, TextIO

from ast_nodes import BinaryOp, Node, NumberLiteral, StatementList, UnaryOp, VariableRef
from error_handling import InternalError, NumericFormatError, UndefinedVariable, capture_errors
from lexing import tokenize
from parsing import parse_program
from tokens import TokenKind


INTEGER_PATTERN = re.compile(r"[+-]?[0-9]+")


# ============================================================================
# BINDING STORE
# ============================================================================

def create_binding_store() -> Dict[str, int]:
  """Create an empty name -> integer binding store"""
  return {}


def lookup_binding(bindings: Dict[str, int], name: str, position: Optional[int] = None) -> int:
  """Look up a variable; only an absent key is undefined, 0 is a value"""
  if name not in bindings:
    raise UndefinedVariable(name, position)
  return bindings[name]


# ============================================================================
# EVALUATION FUNCTIONS
# ============================================================================

def eval_number(node: NumberLiteral) -> int:
  """Evaluate number literal"""
  if not INTEGER_PATTERN.fullmatch(node.raw_text):
    raise NumericFormatError(node.raw_text, node.position)
  return int(node.raw_text, 10)


def eval_formula(node: BinaryOp, bindings: Dict[str, int], out: Optional[TextIO] = None,
                 debug: bool = False) -> int:
  """
  Evaluate a PLUS/MINUS chain left to right.
  The parser folds formulas to the left, so the chain is walked down its left
  spine in a loop and only right operands are evaluated recursively.
  """
  tail = []
  while isinstance(node, BinaryOp) and node.operator in (TokenKind.PLUS, TokenKind.MINUS):
    tail.append((node.operator, node.right))
    node = node.left

  value = eval_ast(node, bindings, out, debug)
  for operator, right in reversed(tail):
    right_value = eval_ast(right, bindings, out, debug)
    if operator == TokenKind.PLUS:
      value += right_value
    else:
      value -= right_value
  return value


def eval_ast(node: Node, bindings: Dict[str, int], out: Optional[TextIO] = None,
             debug: bool = False) -> Optional[int]:
  """
  Evaluate an AST node against bindings.
  Formulas and assignments return their integer value; print statements and
  statement lists return None.
  """
  if debug:
    print(f"Evaluating: {type(node).__name__}", file=sys.stderr)

  match node:
    case NumberLiteral():
      return eval_number(node)

    case VariableRef(name=name):
      return lookup_binding(bindings, name, node.position)

    case UnaryOp(operator=TokenKind.LOG, operand=operand):
      value = eval_ast(operand, bindings, out, debug)
      print(value, file=out if out is not None else sys.stdout)
      return None

    case BinaryOp(operator=TokenKind.PLUS | TokenKind.MINUS):
      return eval_formula(node, bindings, out, debug)

    case BinaryOp(operator=TokenKind.ASSIGN, left=VariableRef(name=name), right=right):
      value = eval_ast(right, bindings, out, debug)
      bindings[name] = value
      if debug:
        print(f"  Bound: {name} = {value}", file=sys.stderr)
      return value

    case StatementList(statements=statements):
      for statement in statements:
        eval_ast(statement, bindings, out, debug)
      return None

    case _:
      raise InternalError(f"Cannot evaluate {node!r}")


# ============================================================================
# PROGRAM EVALUATION
# ============================================================================

def evaluate(ast: Node, bindings: Optional[Dict[str, int]] = None, out: Optional[TextIO] = None,
             debug: bool = False) -> Dict[str, int]:
  """
  Run a parsed program and return the binding store it ran against.
  A fresh store is created when none is given.
  """
  if bindings is None:
    bindings = create_binding_store()
  eval_ast(ast, bindings, out, debug)
  return bindings


def run_source(text: str, bindings: Optional[Dict[str, int]] = None, out: Optional[TextIO] = None,
               debug: bool = False) -> Dict[str, int]:
  """Tokenize, parse and evaluate Tally source text"""
  ast = parse_program(tokenize(text), debug)
  return evaluate(ast, bindings, out, debug)


try_evaluate = capture_errors(evaluate)


# ============================================================================
# FACTORY FUNCTIONS (for main.py)
# ============================================================================

class Interpreter:
  """Evaluator holding one binding store across several programs"""

  def __init__(self, debug: bool = False, out: Optional[TextIO] = None):
    self.debug = debug
    self.out = out
    self.bindings = create_binding_store()

  def interpret(self, ast: Node) -> Dict[str, int]:
    return evaluate(ast, self.bindings, self.out, self.debug)

  def run(self, text: str) -> Dict[str, int]:
    return run_source(text, self.bindings, self.out, self.debug)

  def reset(self) -> None:
    self.bindings = create_binding_store()


def create_interpreter(debug: bool = False, out: Optional[TextIO] = None) -> Interpreter:
  """Factory function returning an interpreter"""
  return Interpreter(debug=debug, out=out)


def create_debug_interpreter() -> Interpreter:
  """Factory function returning a debug interpreter"""
  return create_interpreter(debug=True)
