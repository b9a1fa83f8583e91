"""
Test configuration for Tamarin interpreter tests
"""

import pytest
import sys
from pathlib import Path

# Add the project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from parsing import Lexer, Parser
from interpreter import create_interpreter


def parse_source(source):
  """Parse source and return (program, errors)"""
  parser = Parser(Lexer(source))
  program = parser.parse_program()
  return program, parser.errors


@pytest.fixture
def parse():
  """Parse source that must be free of syntax errors"""
  def _parse(source):
    program, errors = parse_source(source)
    assert errors == [], f"unexpected parser errors: {errors}"
    return program
  return _parse


@pytest.fixture
def evaluate():
  """Evaluate source in a fresh interpreter and return the result value"""
  def _evaluate(source):
    return create_interpreter().eval_source(source)
  return _evaluate
