"""
Tamarin runtime object model
Values are tagged dictionaries; booleans and null are shared singletons
Environments are dictionaries chained through 'parent'
"""

from typing import Any, Callable, Dict, List, Optional, Tuple


# ============================================================================
# TYPE TAGS
# ============================================================================

INTEGER_OBJ = "INTEGER"
BOOLEAN_OBJ = "BOOLEAN"
STRING_OBJ = "STRING"
NULL_OBJ = "NULL"
ARRAY_OBJ = "ARRAY"
HASH_OBJ = "HASH"
FUNCTION_OBJ = "FUNCTION"
BUILTIN_OBJ = "BUILTIN"
ERROR_OBJ = "ERROR"
RETURN_VALUE_OBJ = "RETURN_VALUE"

HASHABLE_TYPES = (INTEGER_OBJ, BOOLEAN_OBJ, STRING_OBJ)


# ============================================================================
# DATA STRUCTURES
# ============================================================================

def make_value(value: Any, type_name: str) -> Dict:
    """Create a runtime value"""
    return {
        'value': value,
        'type': type_name
    }


TRUE = make_value(True, BOOLEAN_OBJ)
FALSE = make_value(False, BOOLEAN_OBJ)
NULL = make_value(None, NULL_OBJ)


def native_bool_to_boolean(value: bool) -> Dict:
    return TRUE if value else FALSE


def make_integer(value: int) -> Dict:
    return make_value(value, INTEGER_OBJ)


def make_string(value: str) -> Dict:
    return make_value(value, STRING_OBJ)


def make_array(elements) -> Dict:
    """Arrays are never changed in place; builtins return new arrays"""
    return make_value(tuple(elements), ARRAY_OBJ)


def make_hash(pairs: Dict[Tuple[str, Any], Tuple[Dict, Dict]]) -> Dict:
    """Create a hash from {hash_key: (key, value)}"""
    return make_value(pairs, HASH_OBJ)


def make_function(params: List[str], body: Any, closure_env: Dict) -> Dict:
    """Create a function value with closure"""
    return {
        'type': FUNCTION_OBJ,
        'params': params,
        'body': body,
        'closure_env': closure_env
    }


def make_builtin(name: str, func: Callable) -> Dict:
    """Create a native function value"""
    return {
        'type': BUILTIN_OBJ,
        'name': name,
        'func': func
    }


def make_error(message: str) -> Dict:
    return {
        'type': ERROR_OBJ,
        'message': message
    }


def make_return_value(value: Dict) -> Dict:
    """Wrap a value leaving a function through `return`"""
    return make_value(value, RETURN_VALUE_OBJ)


# ============================================================================
# PREDICATES
# ============================================================================

def is_error(obj: Optional[Dict]) -> bool:
    return obj is not None and obj['type'] == ERROR_OBJ


def is_signal(obj: Optional[Dict]) -> bool:
    """Error or return value: either one stops evaluation of the enclosing code"""
    return obj is not None and obj['type'] in (ERROR_OBJ, RETURN_VALUE_OBJ)


def is_truthy(obj: Dict) -> bool:
    """Only false and null are falsy"""
    return obj is not FALSE and obj is not NULL


def hash_key(obj: Dict) -> Optional[Tuple[str, Any]]:
    """Key under which obj is stored in a hash, or None if obj is unhashable.

    The type tag is part of the key, so `1` and `true` never collide.
    """
    if obj['type'] not in HASHABLE_TYPES:
        return None
    return (obj['type'], obj['value'])


# ============================================================================
# INSPECTION
# ============================================================================

def inspect_value(obj: Dict) -> str:
    """Textual form of a value as shown by the REPL"""
    obj_type = obj['type']

    if obj_type == INTEGER_OBJ:
        return str(obj['value'])
    elif obj_type == BOOLEAN_OBJ:
        return "true" if obj['value'] else "false"
    elif obj_type == STRING_OBJ:
        return obj['value']
    elif obj_type == NULL_OBJ:
        return "null"
    elif obj_type == ARRAY_OBJ:
        return "[" + ", ".join(inspect_value(e) for e in obj['value']) + "]"
    elif obj_type == HASH_OBJ:
        pairs = [f"{inspect_value(k)}: {inspect_value(v)}" for k, v in obj['value'].values()]
        return "{" + ", ".join(pairs) + "}"
    elif obj_type == FUNCTION_OBJ:
        return f"fn({', '.join(obj['params'])}) {{ {obj['body']} }}"
    elif obj_type == BUILTIN_OBJ:
        return f"builtin function {obj['name']}"
    elif obj_type == ERROR_OBJ:
        return f"ERROR: {obj['message']}"
    elif obj_type == RETURN_VALUE_OBJ:
        return inspect_value(obj['value'])
    return f"<{obj_type}>"


# ============================================================================
# ENVIRONMENT OPERATIONS
# ============================================================================

def make_runtime_env(parent: Optional[Dict] = None, bindings: Optional[Dict] = None) -> Dict:
    """Create a runtime environment; parent is the enclosing scope"""
    return {
        'parent': parent,
        'bindings': bindings or {}
    }


def env_define(env: Dict, name: str, value: Dict) -> Dict:
    """Bind name in this scope only (not in any enclosing scope)"""
    env['bindings'][name] = value
    return value


def env_lookup_value(env: Dict, name: str) -> Optional[Dict]:
    """Look up a name in the environment chain"""
    while env is not None:
        if name in env['bindings']:
            return env['bindings'][name]
        env = env['parent']
    return None


# ============================================================================
# EXCEPTIONS
# ============================================================================

class TamarinRuntimeError(Exception):
    """Host-level fault that escapes evaluation (not a language ERROR value)"""
    pass
