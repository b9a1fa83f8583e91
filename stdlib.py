"""
Tamarin Standard Library
Built-in functions available in every program
Each built-in takes (args, context) and returns a runtime value; failures are ERROR values
"""

from typing import Dict, List, Optional

from runtime import (
  ARRAY_OBJ,
  NULL,
  STRING_OBJ,
  inspect_value,
  make_array,
  make_builtin,
  make_integer,
)
from utilities import (
  argument_type_error,
  unsupported_argument_error,
  validate_function_args,
)


# ============================================================================
# OUTPUT FUNCTIONS
# ============================================================================

def tamarin_puts(args: List[Dict], context: Dict) -> Dict:
  """Write each argument's inspect text on its own line"""
  output = context['output']
  for arg in args:
    output.write(inspect_value(arg) + "\n")
  return NULL


# ============================================================================
# ARRAY AND STRING FUNCTIONS
# ============================================================================

def tamarin_len(args: List[Dict], context: Dict) -> Dict:
  """Length of a string (in characters) or an array"""
  error = validate_function_args("len", args, [None])
  if error:
    return error

  arg = args[0]
  if arg['type'] in (STRING_OBJ, ARRAY_OBJ):
    return make_integer(len(arg['value']))
  return unsupported_argument_error("len", arg)


def _array_argument(name: str, args: List[Dict]) -> Optional[Dict]:
  """Check for a single ARRAY argument; returns an ERROR value or None"""
  return validate_function_args(name, args, [ARRAY_OBJ])


def tamarin_first(args: List[Dict], context: Dict) -> Dict:
  """First element of an array, or null if empty"""
  error = _array_argument("first", args)
  if error:
    return error

  elements = args[0]['value']
  return elements[0] if elements else NULL


def tamarin_last(args: List[Dict], context: Dict) -> Dict:
  """Last element of an array, or null if empty"""
  error = _array_argument("last", args)
  if error:
    return error

  elements = args[0]['value']
  return elements[-1] if elements else NULL


def tamarin_rest(args: List[Dict], context: Dict) -> Dict:
  """New array without the first element, or null if empty"""
  error = _array_argument("rest", args)
  if error:
    return error

  elements = args[0]['value']
  if not elements:
    return NULL
  return make_array(elements[1:])


def tamarin_push(args: List[Dict], context: Dict) -> Dict:
  """New array with the value appended; the original is unchanged"""
  error = validate_function_args("push", args, [None, None])
  if error:
    return error

  array, value = args
  if array['type'] != ARRAY_OBJ:
    return argument_type_error("push", ARRAY_OBJ, array)
  return make_array(array['value'] + (value,))


# ============================================================================
# BUILT-IN FUNCTION REGISTRY
# ============================================================================

BUILTIN_FUNCTIONS: Dict[str, Dict] = {
    "len": make_builtin("len", tamarin_len),
    "first": make_builtin("first", tamarin_first),
    "last": make_builtin("last", tamarin_last),
    "rest": make_builtin("rest", tamarin_rest),
    "push": make_builtin("push", tamarin_push),
    "puts": make_builtin("puts", tamarin_puts),
}

# Shown by the REPL :help command
BUILTIN_USAGE: Dict[str, str] = {
    "len": "len(x) -> length of a string or array",
    "first": "first(a) -> first element or null",
    "last": "last(a) -> last element or null",
    "rest": "rest(a) -> array without its first element, or null",
    "push": "push(a, x) -> new array with x appended",
    "puts": "puts(x, ...) -> print each argument, returns null",
}


def get_builtin_function(name: str) -> Optional[Dict]:
  """Get a built-in function by name, or None"""
  return BUILTIN_FUNCTIONS.get(name)


def list_builtin_functions() -> List[str]:
  """List all available built-in functions"""
  return list(BUILTIN_FUNCTIONS.keys())
