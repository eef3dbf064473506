"""
Evaluator tests for Tally
"""

import io

import pytest
from ast_nodes import BinaryOp, NumberLiteral, StatementList, UnaryOp, VariableRef
from error_handling import Err, InternalError, NumericFormatError, Ok, UndefinedVariable
from interpreter import (
  create_binding_store,
  create_debug_interpreter,
  create_interpreter,
  eval_ast,
  evaluate,
  run_source,
  try_evaluate,
)
from parsing import parse_program
from tokens import TokenKind


@pytest.fixture
def bindings():
  return create_binding_store()


def run_tokens(make_tokens, source, bindings=None):
  out = io.StringIO()
  store = evaluate(parse_program(make_tokens(source)), bindings, out)
  return out.getvalue(), store


class TestNodeEvaluation:
  """One test per AST variant"""

  def test_number_literal(self, bindings):
    assert eval_ast(NumberLiteral("42"), bindings) == 42

  def test_invalid_number_literal(self, bindings):
    with pytest.raises(NumericFormatError) as excinfo:
      eval_ast(NumberLiteral("4x2", position=3), bindings)
    assert excinfo.value.text == "4x2"
    assert excinfo.value.position == 3

  def test_plus_and_minus(self, bindings):
    node = BinaryOp(TokenKind.MINUS, NumberLiteral("5"), NumberLiteral("9"))
    assert eval_ast(node, bindings) == -4
    node = BinaryOp(TokenKind.PLUS, NumberLiteral("5"), NumberLiteral("9"))
    assert eval_ast(node, bindings) == 14

  def test_assign_returns_value_and_binds(self, bindings):
    node = BinaryOp(TokenKind.ASSIGN, VariableRef("x"), NumberLiteral("7"))
    assert eval_ast(node, bindings) == 7
    assert bindings == {"x": 7}

  def test_assign_to_non_variable_is_internal_error(self, bindings):
    node = BinaryOp(TokenKind.ASSIGN, NumberLiteral("1"), NumberLiteral("7"))
    with pytest.raises(InternalError):
      eval_ast(node, bindings)

  def test_variable_lookup(self, bindings):
    bindings["x"] = 3
    assert eval_ast(VariableRef("x"), bindings) == 3

  def test_zero_valued_binding_is_defined(self, bindings):
    bindings["zero"] = 0
    assert eval_ast(VariableRef("zero"), bindings) == 0

  def test_undefined_variable(self, bindings):
    with pytest.raises(UndefinedVariable) as excinfo:
      eval_ast(VariableRef("y", position=1), bindings)
    assert excinfo.value.name == "y"
    assert excinfo.value.position == 1

  def test_print_writes_line_and_returns_none(self, bindings):
    out = io.StringIO()
    assert eval_ast(UnaryOp(TokenKind.LOG, NumberLiteral("5")), bindings, out) is None
    assert out.getvalue() == "5\n"

  def test_print_defaults_to_stdout(self, bindings, capsys):
    eval_ast(UnaryOp(TokenKind.LOG, NumberLiteral("8")), bindings)
    assert capsys.readouterr().out == "8\n"

  def test_statement_list_returns_none(self, bindings):
    ast = StatementList((BinaryOp(TokenKind.ASSIGN, VariableRef("a"), NumberLiteral("1")),))
    assert eval_ast(ast, bindings) is None
    assert bindings["a"] == 1

  def test_unknown_node_is_internal_error(self, bindings):
    with pytest.raises(InternalError):
      eval_ast("not a node", bindings)


class TestPrograms:
  """End to end over hand-built token lists"""

  def test_assignment_then_print(self, make_tokens):
    output, store = run_tokens(make_tokens, "x = 5 - 9 ; print x ;")
    assert output == "-4\n"
    assert store == {"x": -4}

  def test_reassignment_overwrites(self, make_tokens):
    output, _ = run_tokens(make_tokens, "x = 1 ; x = 2 ; print x ;")
    assert output == "2\n"

  def test_parentheses_change_grouping(self, make_tokens):
    grouped, _ = run_tokens(make_tokens, "print 5 - ( 9 + 1 ) ;")
    flat, _ = run_tokens(make_tokens, "print 5 - 9 + 1 ;")
    assert grouped == "-5\n"
    assert flat == "-3\n"

  def test_long_fold(self, make_tokens):
    output, _ = run_tokens(make_tokens, "print 10 - 1 - 2 - 3 + 4 ;")
    assert output == "8\n"

  def test_undefined_variable_aborts_run(self, make_tokens):
    out = io.StringIO()
    ast = parse_program(make_tokens("print 1 ; print y ; print 2 ;"))
    with pytest.raises(UndefinedVariable) as excinfo:
      evaluate(ast, out=out)
    assert excinfo.value.name == "y"
    assert out.getvalue() == "1\n"

  def test_empty_program(self):
    out = io.StringIO()
    assert evaluate(parse_program([]), out=out) == {}
    assert out.getvalue() == ""

  def test_independent_runs_do_not_share_bindings(self, make_tokens):
    _, first = run_tokens(make_tokens, "x = 1 ;")
    with pytest.raises(UndefinedVariable):
      run_tokens(make_tokens, "print x ;")
    assert first == {"x": 1}

  def test_existing_store_is_reused(self, make_tokens):
    store = {"x": 10}
    output, result = run_tokens(make_tokens, "print x - 3 ;", store)
    assert output == "7\n"
    assert result is store


class TestSourceText:

  def test_run_source(self):
    out = io.StringIO()
    store = run_source("sum = 5 - 9;\nother = 0 - 6;\nprint sum - other + (5 + 3);", out=out)
    assert out.getvalue() == "10\n"
    assert store == {"sum": -4, "other": -6}

  def test_interpreter_keeps_bindings_between_runs(self):
    out = io.StringIO()
    interpreter = create_interpreter(out=out)
    interpreter.run("x = 2;")
    interpreter.run("print x + 1;")
    assert out.getvalue() == "3\n"
    interpreter.reset()
    assert interpreter.bindings == {}

  def test_debug_trace_goes_to_stderr(self, capsys):
    run_source("x = 1; print x;", debug=True)
    captured = capsys.readouterr()
    assert captured.out == "1\n"
    assert "Bound: x = 1" in captured.err


class TestResultEntryPoint:

  def test_ok(self, make_tokens):
    result = try_evaluate(parse_program(make_tokens("x = 4 ;")))
    assert isinstance(result, Ok)
    assert result.value == {"x": 4}

  def test_err(self, make_tokens):
    result = try_evaluate(parse_program(make_tokens("print y ;")))
    assert isinstance(result, Err)
    assert isinstance(result.error, UndefinedVariable)
    assert result.error.name == "y"


class TestLongFormulas:
  """Formulas far longer than the recursion limit"""

  def test_long_sum(self):
    out = io.StringIO()
    run_source("print " + " + ".join(["1"] * 2500) + ";", out=out)
    assert out.getvalue() == "2500\n"

  def test_long_mixed_chain_folds_left(self):
    out = io.StringIO()
    terms = " - 1 + 2" * 1500
    store = run_source(f"x = 0{terms}; print x - (3 - 1);", out=out)
    assert store["x"] == 1500
    assert out.getvalue() == "1498\n"

  def test_long_chain_of_variables(self):
    out = io.StringIO()
    run_source("a = 3; print " + " - ".join(["a"] * 2000) + ";", out=out)
    assert out.getvalue() == f"{3 - 3 * 1999}\n"

  def test_debug_interpreter(self):
    interpreter = create_debug_interpreter()
    assert interpreter.debug
    assert interpreter.bindings == {}
