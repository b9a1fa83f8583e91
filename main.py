"""
Tamarin Programming Language - Main Entry Point
A small dynamically-typed language with first-class functions, closures, arrays and hashes
"""

import sys
import argparse
from pathlib import Path
from typing import Callable, Optional, TextIO
import os

# Readline support for history and auto-completion
try:
  import readline
  READLINE_AVAILABLE = True
except ImportError:
  READLINE_AVAILABLE = False

from parsing import create_parser, create_debug_parser, pretty_print_ast
from error_handling import TamarinParseError
from interpreter import create_interpreter, TamarinInterpreter
from runtime import TamarinRuntimeError, inspect_value, is_error
from stdlib import BUILTIN_USAGE, list_builtin_functions
from syntax import LetStatement
from tokens import KEYWORDS


VERSION = "Tamarin v0.1.0"
PROMPT = ">> "
HISTORY_FILE = "~/.tamarin_history"
HISTORY_LENGTH = 1000


def create_arg_parser() -> argparse.ArgumentParser:
  """Create command line argument parser"""
  parser = argparse.ArgumentParser(
      description='Tamarin Programming Language - a tree-walking interpreter',
      formatter_class=argparse.RawDescriptionHelpFormatter,
      epilog="""
Examples:
  %(prog)s script.tam             # Run a Tamarin script
  %(prog)s -i                     # Interactive mode
  %(prog)s --parse script.tam     # Parse and show the AST
  %(prog)s --tokens script.tam    # Show the token stream
  %(prog)s --debug script.tam     # Run with debug output
  %(prog)s --recursion-limit 20000 script.tam
        """
  )

  parser.add_argument(
      'script',
      nargs='?',
      help='Tamarin script file to execute'
  )

  parser.add_argument(
      '-i', '--interactive',
      action='store_true',
      help='Start interactive mode'
  )

  parser.add_argument(
      '--parse',
      action='store_true',
      help='Parse file and show the AST (for debugging)'
  )

  parser.add_argument(
      '--tokens',
      action='store_true',
      help='Show the token stream of a file (for debugging)'
  )

  parser.add_argument(
      '--debug',
      action='store_true',
      help='Enable debug output for all stages'
  )

  parser.add_argument(
      '--recursion-limit',
      type=int,
      default=None,
      metavar='N',
      help='Raise the host recursion limit for deeply recursive programs'
  )

  parser.add_argument(
      '--version',
      action='version',
      version=VERSION
  )

  return parser


def read_script(script_path: str) -> str:
  with open(script_path, 'r', encoding='utf-8') as f:
    return f.read()


def report_file_error(script_path: str, error: Exception, debug: bool = False) -> None:
  """Print a file-level failure with a hint and exit"""
  if isinstance(error, FileNotFoundError):
    print(f"Error: Script file '{script_path}' not found")
    print(f"  Hint: Check the file path and make sure the file exists")
  elif isinstance(error, PermissionError):
    print(f"Error: Permission denied reading '{script_path}'")
    print(f"  Hint: Make sure you have read permissions for this file")
  elif isinstance(error, UnicodeDecodeError):
    print(f"Error: Cannot decode file '{script_path}': {error}")
    print(f"  Hint: Make sure the file is a text file with UTF-8 encoding")
  else:
    print(f"Unexpected error while processing '{script_path}': {error}")
    if debug:
      import traceback
      traceback.print_exc()
  sys.exit(1)


def parse_file(script_path: str, debug: bool = False) -> None:
  """Parse a Tamarin script file and show the AST"""
  parser = create_debug_parser() if debug else create_parser()

  try:
    print(f"Parsing {script_path}...")
    program = parser.parse_file(script_path)
  except TamarinParseError as e:
    print(str(e))
    sys.exit(1)
  except (OSError, UnicodeDecodeError) as e:
    report_file_error(script_path, e, debug)
    return

  print(f"\nParsed {len(program.statements)} top-level statements:")
  print("=" * 50)
  print(str(program))
  print()
  print(pretty_print_ast(program), end='')


def tokenize_file(script_path: str, debug: bool = False) -> None:
  """Show the token stream of a Tamarin script file"""
  parser = create_debug_parser() if debug else create_parser()

  try:
    source = read_script(script_path)
  except (OSError, UnicodeDecodeError) as e:
    report_file_error(script_path, e, debug)
    return

  for token in parser.tokenize(source):
    print(token)


def run_script_file(script_path: str, debug: bool = False) -> None:
  """Run a Tamarin script file; syntax errors and a final ERROR value exit with status 1"""
  interpreter = create_interpreter(debug=debug)

  try:
    source = read_script(script_path)
    if debug:
      print(f"Parsing {script_path}...")
    program = interpreter.parse(source, script_path)
    if debug:
      print(f"Parsed {len(program.statements)} statements")
  except TamarinParseError as e:
    print(str(e))
    sys.exit(1)
  except (OSError, UnicodeDecodeError) as e:
    report_file_error(script_path, e, debug)
    return

  result = interpreter.eval_program(program)

  if is_error(result):
    print(f"Runtime error in '{script_path}': {result['message']}")
    sys.exit(1)

  if debug:
    print(f"Result: {inspect_value(result)}")


# ============================================================================
# INTERACTIVE MODE
# ============================================================================

def setup_readline():
  """Setup readline with history and auto-completion"""
  if not READLINE_AVAILABLE:
    return

  history_file = os.path.expanduser(HISTORY_FILE)
  try:
    readline.read_history_file(history_file)
  except OSError:
    pass  # First time, no history yet

  readline.set_history_length(HISTORY_LENGTH)

  completions = sorted(KEYWORDS) + list_builtin_functions() + [
      ":parse", ":tokens", ":env", ":help", "exit"
  ]

  def completer(text, state):
    options = [cmd for cmd in completions if cmd.startswith(text)]
    if state < len(options):
      return options[state]
    return None

  readline.set_completer(completer)
  readline.parse_and_bind("tab: complete")

  import atexit
  atexit.register(readline.write_history_file, history_file)


def print_repl_help(output: TextIO) -> None:
  output.write("REPL Commands:\n")
  output.write("  :parse <src>      - Show the parsed AST\n")
  output.write("  :tokens <src>     - Show the token stream\n")
  output.write("  :env              - Show current bindings\n")
  output.write("  :help             - Show this help\n")
  output.write("  exit              - Exit REPL\n")
  output.write("\n")
  output.write("Built-in functions:\n")
  for usage in BUILTIN_USAGE.values():
    output.write(f"  {usage}\n")


def print_parser_errors(messages, output: TextIO) -> None:
  output.write("parser errors:\n")
  for message in messages:
    output.write(f"\t{message}\n")


def handle_repl_command(line: str, interpreter: TamarinInterpreter, output: TextIO) -> bool:
  """Run a REPL command; returns False if line is not a command"""
  parser = create_parser(interpreter.debug)

  if line == ":help":
    print_repl_help(output)
  elif line == ":env":
    bindings = interpreter.env['bindings']
    if not bindings:
      output.write("  (no bindings)\n")
    for name, value in bindings.items():
      output.write(f"  {name} = {inspect_value(value)}\n")
  elif line.startswith(":parse "):
    program, errors = parser.parse_string(line[len(":parse "):])
    if errors:
      print_parser_errors(errors, output)
    else:
      output.write(str(program) + "\n")
      output.write(pretty_print_ast(program))
  elif line.startswith(":tokens "):
    for token in parser.tokenize(line[len(":tokens "):]):
      output.write(f"{token}\n")
  else:
    return False
  return True


def start_repl(read_line: Callable[[str], str], output: TextIO, debug: bool = False) -> None:
  """
  Read-eval-print loop over one persistent environment.
  read_line(prompt) returns the next line and raises EOFError at end of input.
  """
  interpreter = create_interpreter(debug=debug, output=output)

  while True:
    try:
      line = read_line(PROMPT)
    except (EOFError, KeyboardInterrupt):
      output.write("\n")
      break

    code = line.strip()
    if code == "exit":
      break
    if not code:
      continue

    if code.startswith(":") and handle_repl_command(code, interpreter, output):
      continue

    try:
      program = interpreter.parse(line)
    except TamarinParseError as e:
      print_parser_errors(e.messages, output)
      continue

    result = interpreter.eval_program(program)

    if program.statements and isinstance(program.statements[-1], LetStatement) and not is_error(result):
      continue
    output.write(inspect_value(result) + "\n")


def run_interactive_mode(debug: bool = False) -> None:
  """Run Tamarin in interactive mode on the terminal"""
  print(f"{VERSION} - Interactive Mode")
  print("Type 'exit' to quit, ':help' for commands")
  if READLINE_AVAILABLE:
    print("Readline enabled: Use ↑/↓ for history, Tab for completion")
  if debug:
    print("Debug mode enabled")
  print()

  setup_readline()
  start_repl(input, sys.stdout, debug)


def show_language_info() -> None:
  """Show Tamarin language information"""
  print("Tamarin Programming Language")
  print("=" * 50)
  print("A small dynamically-typed language with:")
  print("• Integers, booleans, strings, arrays and hashes")
  print("• First-class functions and closures")
  print("• let bindings, if/else and return")
  print(f"• Built-ins: {', '.join(list_builtin_functions())}")
  print()


def main(argv: Optional[list] = None) -> None:
  """Main entry point for Tamarin"""
  arg_parser = create_arg_parser()
  args = arg_parser.parse_args(argv)

  if args.recursion_limit:
    sys.setrecursionlimit(args.recursion_limit)

  try:
    if args.script:
      if not Path(args.script).exists():
        print(f"Error: Script file '{args.script}' does not exist")
        sys.exit(1)

      if args.tokens:
        tokenize_file(args.script, debug=args.debug)
      elif args.parse:
        parse_file(args.script, debug=args.debug)
      else:
        run_script_file(args.script, debug=args.debug)

    elif args.interactive:
      run_interactive_mode(debug=args.debug)

    else:
      # No script - show info and start interactive mode
      show_language_info()
      print("Starting interactive mode...")
      print("Use 'tamarin --help' for command line options")
      print()
      run_interactive_mode(debug=args.debug)

  except TamarinRuntimeError as e:
    print(f"Fatal error: {e}")
    print("  Hint: Try --recursion-limit with a larger value for deeply recursive programs")
    sys.exit(1)


if __name__ == "__main__":
  main()
