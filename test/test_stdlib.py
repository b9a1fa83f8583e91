"""
Built-in function tests for Tamarin
"""

import io
import pytest
from stdlib import (
  BUILTIN_FUNCTIONS, get_builtin_function, list_builtin_functions,
  tamarin_len, tamarin_push, tamarin_puts
)
from interpreter import create_interpreter, make_execution_context
from runtime import NULL, inspect_value, make_array, make_integer, make_string


class TestLen:
  """Test len()"""

  @pytest.mark.parametrize("source,expected", [
      ('len("")', 0),
      ('len("four")', 4),
      ('len("hello world")', 11),
      ("len([1, 2, 3])", 3),
      ("len([])", 0),
  ])
  def test_len(self, evaluate, source, expected):
    assert evaluate(source)['value'] == expected

  def test_len_unsupported(self, evaluate):
    result = evaluate("len(1)")
    assert result['message'] == "argument to `len` not supported, got INTEGER"

  def test_len_wrong_count(self, evaluate):
    result = evaluate('len("one", "two")')
    assert result['message'] == "wrong number of arguments. got=2, want=1"


class TestArrayBuiltins:
  """Test first, last, rest and push"""

  @pytest.mark.parametrize("source,expected", [
      ("first([1, 2, 3])", "1"),
      ("first([])", "null"),
      ("last([1, 2, 3])", "3"),
      ("last([])", "null"),
      ("rest([1, 2, 3])", "[2, 3]"),
      ("rest([1])", "[]"),
      ("rest([])", "null"),
      ("push([], 1)", "[1]"),
      ("push([1, 2], [3])", "[1, 2, [3]]"),
  ])
  def test_results(self, evaluate, source, expected):
    assert inspect_value(evaluate(source)) == expected

  @pytest.mark.parametrize("name", ["first", "last", "rest"])
  def test_requires_array(self, evaluate, name):
    result = evaluate(f"{name}(1)")
    assert result['message'] == f"argument to `{name}` must be ARRAY, got INTEGER"

  def test_push_requires_array(self, evaluate):
    result = evaluate("push(1, 1)")
    assert result['message'] == "argument to `push` must be ARRAY, got INTEGER"

  def test_push_wrong_count(self, evaluate):
    result = evaluate("push([1])")
    assert result['message'] == "wrong number of arguments. got=1, want=2"

  def test_push_does_not_modify_original(self, evaluate):
    assert inspect_value(evaluate("let a = [1]; let b = push(a, 2); a")) == "[1]"

  def test_rest_does_not_modify_original(self, evaluate):
    assert inspect_value(evaluate("let a = [1, 2]; rest(a); a")) == "[1, 2]"

  def test_direct_call(self):
    array = make_array([make_integer(1)])
    result = tamarin_push([array, make_string("x")], make_execution_context())
    assert inspect_value(result) == "[1, x]"
    assert len(array['value']) == 1


class TestPuts:
  """Test puts()"""

  def test_puts_writes_each_argument(self):
    output = io.StringIO()
    interpreter = create_interpreter(output=output)
    result = interpreter.eval_source('puts("hello", [1, 2], true)')
    assert result is NULL
    assert output.getvalue() == "hello\n[1, 2]\ntrue\n"

  def test_puts_without_arguments(self):
    output = io.StringIO()
    result = tamarin_puts([], make_execution_context(output))
    assert result is NULL
    assert output.getvalue() == ""

  def test_puts_defaults_to_stdout(self, capsys):
    tamarin_puts([make_integer(3)], make_execution_context())
    assert capsys.readouterr().out == "3\n"


class TestRegistry:
  """Test the built-in registry"""

  def test_registered_names(self):
    assert sorted(list_builtin_functions()) == ["first", "last", "len", "push", "puts", "rest"]

  def test_lookup(self):
    builtin = get_builtin_function("len")
    assert builtin['type'] == "BUILTIN"
    assert builtin['func'] is tamarin_len
    assert get_builtin_function("nope") is None

  def test_inspect_builtin(self, evaluate):
    assert inspect_value(evaluate("len")) == "builtin function len"

  def test_user_binding_shadows_builtin(self, evaluate):
    assert evaluate("let len = fn(x) { 42 }; len([])")['value'] == 42

  def test_builtins_are_values(self, evaluate):
    assert evaluate("let f = first; f([7])")['value'] == 7
    assert BUILTIN_FUNCTIONS["first"]['name'] == "first"
