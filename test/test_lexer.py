"""
Lexer tests for Tamarin
Token stream for operators, keywords, literals and illegal characters
"""

import pytest
import tokens as tok
from tokens import Token
from parsing import Lexer


def types_of(source):
  return [t.type for t in Lexer(source).tokenize()]


class TestTokenStream:
  """Test the sequence of tokens produced for source text"""

  def test_operators_and_delimiters(self):
    source = "=+(){},;"
    expected = [
        (tok.ASSIGN, "="), (tok.PLUS, "+"), (tok.LPAREN, "("), (tok.RPAREN, ")"),
        (tok.LBRACE, "{"), (tok.RBRACE, "}"), (tok.COMMA, ","), (tok.SEMICOLON, ";"),
        (tok.EOF, ""),
    ]
    assert [(t.type, t.literal) for t in Lexer(source).tokenize()] == expected

  def test_two_character_operators(self):
    assert types_of("10 == 10; 10 != 9;") == [
        tok.INT, tok.EQ, tok.INT, tok.SEMICOLON,
        tok.INT, tok.NOT_EQ, tok.INT, tok.SEMICOLON, tok.EOF,
    ]

  def test_let_statement(self):
    tokens = Lexer("let five = 5;").tokenize()
    assert tokens == [
        Token(tok.LET, "let"), Token(tok.IDENT, "five"), Token(tok.ASSIGN, "="),
        Token(tok.INT, "5"), Token(tok.SEMICOLON, ";"), Token(tok.EOF, ""),
    ]

  def test_keywords(self):
    assert types_of("fn let true false if else return") == [
        tok.FUNCTION, tok.LET, tok.TRUE, tok.FALSE, tok.IF, tok.ELSE, tok.RETURN, tok.EOF,
    ]

  def test_identifiers_allow_underscores_and_digits(self):
    tokens = Lexer("_tmp x1 fnord").tokenize()
    assert [(t.type, t.literal) for t in tokens[:-1]] == [
        (tok.IDENT, "_tmp"), (tok.IDENT, "x1"), (tok.IDENT, "fnord"),
    ]

  def test_string_literal(self):
    tokens = Lexer('"foo bar" ""').tokenize()
    assert tokens[0] == Token(tok.STRING, "foo bar")
    assert tokens[1] == Token(tok.STRING, "")

  def test_unterminated_string_runs_to_end(self):
    tokens = Lexer('"abc').tokenize()
    assert tokens == [Token(tok.STRING, "abc"), Token(tok.EOF, "")]

  def test_brackets_and_colon(self):
    assert types_of('[1, 2]; {"a": 1}') == [
        tok.LBRACKET, tok.INT, tok.COMMA, tok.INT, tok.RBRACKET, tok.SEMICOLON,
        tok.LBRACE, tok.STRING, tok.COLON, tok.INT, tok.RBRACE, tok.EOF,
    ]

  def test_illegal_characters(self):
    tokens = Lexer("a @ b").tokenize()
    assert tokens[1] == Token(tok.ILLEGAL, "@")

  def test_locations(self):
    tokens = Lexer("let\tx = 10;").tokenize()
    assert [t.loc for t in tokens] == [0, 4, 6, 8, 10, 11]


class TestEndOfInput:
  """Test EOF behaviour"""

  def test_empty_source(self):
    assert types_of("") == [tok.EOF]

  def test_eof_is_repeated(self):
    lexer = Lexer("x")
    assert lexer.next_token().type == tok.IDENT
    for _ in range(3):
      assert lexer.next_token().type == tok.EOF

  def test_whitespace_only(self):
    assert types_of("  \n\t ") == [tok.EOF]
