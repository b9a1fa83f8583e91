"""
Diagnostic formatting tests for Tamarin
"""

import pytest
from error_handling import (
  TamarinParseError, describe_token, diagnostic_for_token, format_parse_error,
  generate_suggestions, get_context_lines
)
from parsing import Lexer, Parser
from tokens import Token
import tokens as tok


def diagnostics_for(source):
  parser = Parser(Lexer(source))
  parser.parse_program()
  return parser.diagnostics


class TestParseErrorStructure:
  """Test parse error dictionaries"""

  def test_defaults(self):
    error = diagnostic_for_token("boom", None, "let x = 1;")
    assert error['expected'] == []
    assert error['suggestions'] == []
    assert error['got'] is None
    assert error['line'] == 0
    assert error['context'] is None

  def test_diagnostic_for_token(self):
    source = "let x = 1;\nlet y 2;"
    token = Token(tok.INT, "2", source.index("2;"))
    error = diagnostic_for_token("expected next token to be ASSIGN, got INT instead",
                                 token, source, [tok.ASSIGN])
    assert error['line'] == 2
    assert error['column'] == 7
    assert error['got'] == "'2' (INT)"
    assert error['expected'] == [tok.ASSIGN]
    assert "let y 2;" in error['context']

  def test_token_without_location(self):
    error = diagnostic_for_token("oops", Token(tok.EOF, ""), "")
    assert error['line'] == 0
    assert error['got'] == "end of input"


class TestFormatting:
  """Test rendered diagnostics"""

  def test_format_with_location(self):
    error = diagnostics_for("let x 5;")[0]
    text = format_parse_error(error)
    assert text.startswith("Parse error at line 1, column 7:\n")
    assert "  expected next token to be ASSIGN, got INT instead\n" in text
    assert "  Expected: ASSIGN\n" in text
    assert "  Got: '5' (INT)\n" in text
    assert "^ Error here" in text
    assert "let bindings need '=' between the name and the value" in text

  def test_format_without_location(self):
    text = format_parse_error(diagnostic_for_token("bad", None, ""))
    assert text == "Parse error:\n  bad\n"

  def test_context_lines(self):
    source = "a\nb\nc\nd\ne"
    context = get_context_lines(source, 3, 1)
    lines = context.split("\n")
    assert lines[0] == "   1: a"
    assert "   3: c" in lines
    assert lines[lines.index("   3: c") + 1] == "      ^ Error here"
    assert lines[-1] == "   5: e"

  def test_caret_column(self):
    context = get_context_lines("let x 5;", 1, 7)
    assert context.split("\n")[1] == "      " + " " * 6 + "^ Error here"


class TestSuggestions:
  """Test generated hints"""

  def test_describe_token(self):
    assert describe_token(Token(tok.EOF, "")) == "end of input"
    assert describe_token(Token(tok.IDENT, "foo")) == "'foo' (IDENT)"

  def test_illegal_character(self):
    suggestions = generate_suggestions("no prefix parse function for ILLEGAL found",
                                       Token(tok.ILLEGAL, "@"), [])
    assert "'@' is not part of the language" in suggestions

  def test_trailing_comma(self):
    suggestions = generate_suggestions("no prefix parse function for RPAREN found",
                                       Token(tok.RPAREN, ")"), [])
    assert any("trailing commas" in s for s in suggestions)

  def test_early_end_of_input(self):
    error = diagnostics_for("let x = (1 + 2")[0]
    assert error['got'] == "end of input"
    assert any("unclosed" in s for s in error['suggestions'])

  def test_missing_brace(self):
    error = diagnostics_for("fn(x) x")[0]
    assert error['expected'] == [tok.LBRACE]
    assert any("braces" in s for s in error['suggestions'])


class TestParseErrorException:
  """Test TamarinParseError"""

  def test_messages_and_rendering(self):
    diagnostics = diagnostics_for("let x 5; let = 1;")
    error = TamarinParseError(diagnostics, "demo.tam")
    assert error.messages == [
        "expected next token to be ASSIGN, got INT instead",
        "expected next token to be IDENT, got ASSIGN instead",
    ]
    text = str(error)
    assert text.startswith("2 syntax error(s) in demo.tam\n")
    assert text.count("Parse error at line 1") == 2

  def test_is_exception(self):
    with pytest.raises(TamarinParseError):
      raise TamarinParseError([diagnostic_for_token("bad", None, "")])
