"""
Tamarin Interpreter - Tree-walking evaluator
Runtime values and environments are plain dictionaries (see runtime.py)
Errors are ERROR values that short-circuit evaluation; output goes through the execution context
"""

from typing import Dict, List, Optional, TextIO
import operator
import sys

from syntax import (
  ArrayLiteral, BlockStatement, Boolean, CallExpression, ExpressionStatement,
  FunctionLiteral, HashLiteral, Identifier, IfExpression, IndexExpression, InfixExpression,
  IntegerLiteral, LetStatement, PrefixExpression, Program, ReturnStatement, StringLiteral
)
from runtime import (
  ARRAY_OBJ, BUILTIN_OBJ, FUNCTION_OBJ, HASH_OBJ, INTEGER_OBJ, NULL, RETURN_VALUE_OBJ,
  STRING_OBJ,
  TamarinRuntimeError,
  env_define,
  env_lookup_value,
  hash_key,
  is_error,
  is_signal,
  is_truthy,
  make_array,
  make_error,
  make_function,
  make_hash,
  make_integer,
  make_return_value,
  make_runtime_env,
  make_string,
  native_bool_to_boolean,
)
from utilities import (
  arity_error,
  binary_arithmetic_op,
  binary_comparison_op,
  truncating_divide,
  type_mismatch_error,
  unknown_operator_error,
  wrap_int64,
)
from stdlib import get_builtin_function
from parsing import Lexer, Parser
from error_handling import TamarinParseError


# ============================================================================
# EXECUTION CONTEXT
# ============================================================================

def make_execution_context(output: Optional[TextIO] = None) -> Dict:
  """Side-effect channels available to built-ins"""
  return {
      'output': output if output is not None else sys.stdout
  }


# ============================================================================
# OPERATOR TABLES
# ============================================================================

INTEGER_OPERATORS = {
    '+': binary_arithmetic_op(operator.add),
    '-': binary_arithmetic_op(operator.sub),
    '*': binary_arithmetic_op(operator.mul),
    '/': binary_arithmetic_op(truncating_divide),
    '<': binary_comparison_op(operator.lt),
    '>': binary_comparison_op(operator.gt),
    '==': binary_comparison_op(operator.eq),
    '!=': binary_comparison_op(operator.ne),
}


# ============================================================================
# EVALUATION FUNCTIONS
# ============================================================================

def eval_ast(node, env: Dict, debug: bool = False, context: Optional[Dict] = None) -> Dict:
  """
  Evaluate an AST node in env and return a runtime value.
  `let` mutates env in place; errors come back as ERROR values, never as exceptions.
  """
  if context is None:
    context = make_execution_context()

  if debug:
    print(f"Evaluating: {type(node).__name__}")

  # Statements
  if isinstance(node, Program):
    return eval_program(node, env, debug, context)
  elif isinstance(node, ExpressionStatement):
    return eval_ast(node.expression, env, debug, context)
  elif isinstance(node, BlockStatement):
    return eval_block_statement(node, env, debug, context)
  elif isinstance(node, LetStatement):
    return eval_let_statement(node, env, debug, context)
  elif isinstance(node, ReturnStatement):
    return eval_return_statement(node, env, debug, context)

  # Literals
  elif isinstance(node, IntegerLiteral):
    return make_integer(node.value)
  elif isinstance(node, StringLiteral):
    return make_string(node.value)
  elif isinstance(node, Boolean):
    return native_bool_to_boolean(node.value)
  elif isinstance(node, ArrayLiteral):
    return eval_array_literal(node, env, debug, context)
  elif isinstance(node, HashLiteral):
    return eval_hash_literal(node, env, debug, context)
  elif isinstance(node, FunctionLiteral):
    return make_function([p.value for p in node.parameters], node.body, env)

  # Expressions
  elif isinstance(node, Identifier):
    return eval_identifier(node, env, debug, context)
  elif isinstance(node, PrefixExpression):
    return eval_prefix_expression(node, env, debug, context)
  elif isinstance(node, InfixExpression):
    return eval_infix_expression(node, env, debug, context)
  elif isinstance(node, IfExpression):
    return eval_if_expression(node, env, debug, context)
  elif isinstance(node, CallExpression):
    return eval_call_expression(node, env, debug, context)
  elif isinstance(node, IndexExpression):
    return eval_index_expression(node, env, debug, context)

  raise TamarinRuntimeError(f"Unknown node type: {type(node).__name__}")


def eval_program(program: Program, env: Dict, debug: bool = False, context: Optional[Dict] = None) -> Dict:
  """Evaluate top-level statements; `return` stops the program and is unwrapped"""
  result = NULL

  for statement in program.statements:
    result = eval_ast(statement, env, debug, context)

    if result['type'] == RETURN_VALUE_OBJ:
      return result['value']
    if is_error(result):
      return result

  return result


def eval_block_statement(block: BlockStatement, env: Dict, debug: bool = False, context: Optional[Dict] = None) -> Dict:
  """Evaluate a block; a return value is passed up still wrapped"""
  result = NULL

  for statement in block.statements:
    result = eval_ast(statement, env, debug, context)

    if is_signal(result):
      return result

  return result


def eval_let_statement(node: LetStatement, env: Dict, debug: bool = False, context: Optional[Dict] = None) -> Dict:
  """Bind the value in the current scope; evaluates to the bound value"""
  value = eval_ast(node.value, env, debug, context)
  if is_signal(value):
    return value
  return env_define(env, node.name.value, value)


def eval_return_statement(node: ReturnStatement, env: Dict, debug: bool = False, context: Optional[Dict] = None) -> Dict:
  value = eval_ast(node.value, env, debug, context)
  if is_signal(value):
    return value
  return make_return_value(value)


def eval_identifier(node: Identifier, env: Dict, debug: bool = False, context: Optional[Dict] = None) -> Dict:
  """Look up a name in the environment chain, then among the built-ins"""
  value = env_lookup_value(env, node.value)
  if value is not None:
    return value

  builtin = get_builtin_function(node.value)
  if builtin is not None:
    return builtin

  return make_error(f"identifier not found: {node.value}")


# ==================== OPERATORS ====================

def eval_prefix_expression(node: PrefixExpression, env: Dict, debug: bool = False, context: Optional[Dict] = None) -> Dict:
  right = eval_ast(node.right, env, debug, context)
  if is_signal(right):
    return right

  if node.operator == '!':
    return native_bool_to_boolean(not is_truthy(right))
  if node.operator == '-' and right['type'] == INTEGER_OBJ:
    return make_integer(wrap_int64(-right['value']))
  return unknown_operator_error(node.operator, right['type'])


def eval_infix_expression(node: InfixExpression, env: Dict, debug: bool = False, context: Optional[Dict] = None) -> Dict:
  left = eval_ast(node.left, env, debug, context)
  if is_signal(left):
    return left

  right = eval_ast(node.right, env, debug, context)
  if is_signal(right):
    return right

  return apply_infix_operator(node.operator, left, right)


def apply_infix_operator(op: str, left: Dict, right: Dict) -> Dict:
  """Apply a binary operator to two evaluated operands"""
  if left['type'] == INTEGER_OBJ and right['type'] == INTEGER_OBJ:
    return eval_integer_infix(op, left, right)
  if left['type'] == STRING_OBJ and right['type'] == STRING_OBJ:
    return eval_string_infix(op, left, right)

  # Booleans and null are singletons, so identity is equality for them
  if op == '==':
    return native_bool_to_boolean(left is right)
  if op == '!=':
    return native_bool_to_boolean(left is not right)

  if left['type'] != right['type']:
    return type_mismatch_error(left['type'], op, right['type'])
  return unknown_operator_error(op, left['type'], right['type'])


def eval_integer_infix(op: str, left: Dict, right: Dict) -> Dict:
  handler = INTEGER_OPERATORS.get(op)
  if handler is None:
    return unknown_operator_error(op, left['type'], right['type'])

  if op == '/' and right['value'] == 0:
    return make_error("division by zero")

  return handler(left, right)


def eval_string_infix(op: str, left: Dict, right: Dict) -> Dict:
  if op == '+':
    return make_string(left['value'] + right['value'])
  if op == '==':
    return native_bool_to_boolean(left['value'] == right['value'])
  if op == '!=':
    return native_bool_to_boolean(left['value'] != right['value'])
  return unknown_operator_error(op, left['type'], right['type'])


# ==================== CONTROL FLOW ====================

def eval_if_expression(node: IfExpression, env: Dict, debug: bool = False, context: Optional[Dict] = None) -> Dict:
  """Branches run in the current environment; no branch taken gives null"""
  condition = eval_ast(node.condition, env, debug, context)
  if is_signal(condition):
    return condition

  if is_truthy(condition):
    return eval_ast(node.consequence, env, debug, context)
  elif node.alternative is not None:
    return eval_ast(node.alternative, env, debug, context)
  return NULL


# ==================== FUNCTIONS ====================

def eval_expressions(nodes, env: Dict, debug: bool = False, context: Optional[Dict] = None) -> List[Dict]:
  """
  Evaluate expressions left to right.
  On the first error or return value, returns a single-element list holding it.
  """
  results = []
  for expression in nodes:
    value = eval_ast(expression, env, debug, context)
    if is_signal(value):
      return [value]
    results.append(value)
  return results


def eval_call_expression(node: CallExpression, env: Dict, debug: bool = False, context: Optional[Dict] = None) -> Dict:
  function = eval_ast(node.function, env, debug, context)
  if is_signal(function):
    return function

  if function['type'] not in (FUNCTION_OBJ, BUILTIN_OBJ):
    return make_error(f"not a function: {function['type']}")

  args = eval_expressions(node.arguments, env, debug, context)
  if len(args) == 1 and is_signal(args[0]):
    return args[0]

  return apply_function(function, args, debug, context)


def apply_function(function: Dict, args: List[Dict], debug: bool = False, context: Optional[Dict] = None) -> Dict:
  """Call a user function or built-in with already-evaluated arguments"""
  if context is None:
    context = make_execution_context()

  if function['type'] == BUILTIN_OBJ:
    return function['func'](args, context)

  params = function['params']
  if len(params) != len(args):
    return arity_error(len(params), len(args))

  call_env = make_runtime_env(function['closure_env'], dict(zip(params, args)))

  if debug:
    print(f"Calling fn({', '.join(params)}) with {len(args)} argument(s)")

  result = eval_ast(function['body'], call_env, debug, context)

  # `return` stops at the function boundary
  if result['type'] == RETURN_VALUE_OBJ:
    return result['value']
  return result


# ==================== COLLECTIONS ====================

def eval_array_literal(node: ArrayLiteral, env: Dict, debug: bool = False, context: Optional[Dict] = None) -> Dict:
  elements = eval_expressions(node.elements, env, debug, context)
  if len(elements) == 1 and is_signal(elements[0]):
    return elements[0]
  return make_array(elements)


def eval_hash_literal(node: HashLiteral, env: Dict, debug: bool = False, context: Optional[Dict] = None) -> Dict:
  """Keys and values are evaluated in source order; a later duplicate key wins"""
  pairs = {}

  for key_node, value_node in node.pairs:
    key = eval_ast(key_node, env, debug, context)
    if is_signal(key):
      return key

    key_id = hash_key(key)
    if key_id is None:
      return make_error(f"unusable as hash key: {key['type']}")

    value = eval_ast(value_node, env, debug, context)
    if is_signal(value):
      return value

    pairs[key_id] = (key, value)

  return make_hash(pairs)


def eval_index_expression(node: IndexExpression, env: Dict, debug: bool = False, context: Optional[Dict] = None) -> Dict:
  left = eval_ast(node.left, env, debug, context)
  if is_signal(left):
    return left

  index = eval_ast(node.index, env, debug, context)
  if is_signal(index):
    return index

  return apply_index(left, index)


def apply_index(left: Dict, index: Dict) -> Dict:
  """Index into an array, string or hash; out of range and missing keys give null"""
  if left['type'] in (ARRAY_OBJ, STRING_OBJ) and index['type'] == INTEGER_OBJ:
    items = left['value']
    i = index['value']
    if i < 0 or i >= len(items):
      return NULL
    if left['type'] == STRING_OBJ:
      return make_string(items[i])
    return items[i]

  if left['type'] == HASH_OBJ:
    key_id = hash_key(index)
    if key_id is None:
      return make_error(f"unusable as hash key: {index['type']}")
    pair = left['value'].get(key_id)
    return pair[1] if pair is not None else NULL

  return make_error(f"index operator not supported: {left['type']}")


# ============================================================================
# INTERPRETER OBJECT
# ============================================================================

class TamarinInterpreter:
  """A persistent global environment plus the parse-and-evaluate pipeline"""

  def __init__(self, debug: bool = False, output: Optional[TextIO] = None):
    self.debug = debug
    self.env = make_runtime_env()
    self.context = make_execution_context(output)

  def parse(self, text: str, filename: str = "<input>") -> Program:
    """Parse source text; raises TamarinParseError if it has syntax errors"""
    parser = Parser(Lexer(text), self.debug)
    program = parser.parse_program()
    if parser.diagnostics:
      raise TamarinParseError(parser.diagnostics, filename)
    return program

  def eval_program(self, program: Program) -> Dict:
    """Evaluate a parsed program in the persistent environment"""
    try:
      return eval_ast(program, self.env, self.debug, self.context)
    except RecursionError as e:
      raise TamarinRuntimeError("maximum recursion depth exceeded") from e

  def eval_source(self, text: str) -> Dict:
    """Parse and evaluate source text"""
    return self.eval_program(self.parse(text))


def create_interpreter(debug: bool = False, output: Optional[TextIO] = None) -> TamarinInterpreter:
  """Factory function returning an interpreter"""
  return TamarinInterpreter(debug=debug, output=output)


def create_debug_interpreter(output: Optional[TextIO] = None) -> TamarinInterpreter:
  """Factory function returning a debug interpreter"""
  return TamarinInterpreter(debug=True, output=output)
