"""
Utilities module for the Tamarin interpreter
Error value builders, argument validation and 64-bit integer arithmetic
"""

from typing import Callable, Dict, List, Optional

from runtime import (
  make_error,
  make_integer,
  native_bool_to_boolean,
)


INT64_MIN = -(2 ** 63)
INT64_MAX = 2 ** 63 - 1


# ==================== INTEGER ARITHMETIC ====================

def wrap_int64(value: int) -> int:
  """
  Wrap an unbounded Python int into the signed 64-bit range

  Examples:
    wrap_int64(2 ** 63) -> -(2 ** 63)
    wrap_int64(-1) -> -1
  """
  return ((value - INT64_MIN) % 2 ** 64) + INT64_MIN


def truncating_divide(left: int, right: int) -> int:
  """
  Integer division rounding toward zero (not toward negative infinity)

  Examples:
    truncating_divide(7, 2) -> 3
    truncating_divide(-7, 2) -> -3
  """
  quotient = abs(left) // abs(right)
  return quotient if (left < 0) == (right < 0) else -quotient


# ==================== ERROR MESSAGE BUILDERS ====================

def type_mismatch_error(left_type: str, op: str, right_type: str) -> Dict:
  """Operands of different types under an operator that needs matching types"""
  return make_error(f"type mismatch: {left_type} {op} {right_type}")


def unknown_operator_error(op: str, left_type: str, right_type: Optional[str] = None) -> Dict:
  """
  Operator not defined for the operand type(s)

  Examples:
    unknown_operator_error("-", "BOOLEAN") -> "unknown operator: -BOOLEAN"
    unknown_operator_error("+", "BOOLEAN", "BOOLEAN") -> "unknown operator: BOOLEAN + BOOLEAN"
  """
  if right_type is None:
    return make_error(f"unknown operator: {op}{left_type}")
  return make_error(f"unknown operator: {left_type} {op} {right_type}")


def arity_error(expected: int, got: int, builtin: bool = False) -> Dict:
  """
  Generate arity mismatch error

  Args:
    expected: Expected number of arguments
    got: Actual number of arguments
    builtin: Built-ins report the counts in got/want order

  Returns:
    ERROR value with formatted message
  """
  if builtin:
    return make_error(f"wrong number of arguments. got={got}, want={expected}")
  return make_error(f"wrong number of arguments: want={expected}, got={got}")


def argument_type_error(func_name: str, expected: str, actual: Dict) -> Dict:
  return make_error(f"argument to `{func_name}` must be {expected}, got {actual['type']}")


def unsupported_argument_error(func_name: str, actual: Dict) -> Dict:
  return make_error(f"argument to `{func_name}` not supported, got {actual['type']}")


# ==================== VALIDATION UTILITIES ====================

def validate_function_args(
  func_name: str,
  args: List[Dict],
  expected_types: List[Optional[str]]
) -> Optional[Dict]:
  """
  Validate built-in arguments against expected type tags

  Args:
    func_name: Function name for error messages
    args: List of argument values
    expected_types: Expected type tag per argument (None accepts anything)

  Returns:
    ERROR value describing the first mismatch, or None if the arguments are valid
  """
  if len(args) != len(expected_types):
    return arity_error(len(expected_types), len(args), builtin=True)

  for arg, expected in zip(args, expected_types):
    if expected is not None and arg['type'] != expected:
      return argument_type_error(func_name, expected, arg)

  return None


# ==================== BINARY OPERATION FACTORIES ====================

def binary_arithmetic_op(op: Callable[[int, int], int]) -> Callable[[Dict, Dict], Dict]:
  """
  Factory for integer arithmetic; results wrap to signed 64-bit

  Examples:
    add = binary_arithmetic_op(operator.add)
    add(make_integer(1), make_integer(2)) -> INTEGER 3
  """
  def arithmetic(x: Dict, y: Dict) -> Dict:
    return make_integer(wrap_int64(op(x['value'], y['value'])))

  return arithmetic


def binary_comparison_op(op: Callable[[int, int], bool]) -> Callable[[Dict, Dict], Dict]:
  """Factory for integer comparisons returning the shared boolean singletons"""
  def comparison(x: Dict, y: Dict) -> Dict:
    return native_bool_to_boolean(op(x['value'], y['value']))

  return comparison
