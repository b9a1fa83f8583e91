"""
Tamarin tokens
Token types, keyword table and the immutable Token record shared by lexer, parser and AST
"""

from dataclasses import dataclass, field


# ============================================================================
# TOKEN TYPES
# ============================================================================

ILLEGAL = "ILLEGAL"
EOF = "EOF"

# Identifiers and literals
IDENT = "IDENT"
INT = "INT"
STRING = "STRING"

# Operators
ASSIGN = "ASSIGN"
PLUS = "PLUS"
MINUS = "MINUS"
BANG = "BANG"
ASTERISK = "ASTERISK"
SLASH = "SLASH"
LT = "LT"
GT = "GT"
EQ = "EQ"
NOT_EQ = "NOT_EQ"

# Delimiters
COMMA = "COMMA"
SEMICOLON = "SEMICOLON"
COLON = "COLON"
LPAREN = "LPAREN"
RPAREN = "RPAREN"
LBRACE = "LBRACE"
RBRACE = "RBRACE"
LBRACKET = "LBRACKET"
RBRACKET = "RBRACKET"

# Keywords
FUNCTION = "FUNCTION"
LET = "LET"
TRUE = "TRUE"
FALSE = "FALSE"
IF = "IF"
ELSE = "ELSE"
RETURN = "RETURN"


KEYWORDS = {
    "fn": FUNCTION,
    "let": LET,
    "true": TRUE,
    "false": FALSE,
    "if": IF,
    "else": ELSE,
    "return": RETURN,
}

# Longest operators first so that `==` is never read as `=` `=`
OPERATORS = {
    "==": EQ,
    "!=": NOT_EQ,
    "=": ASSIGN,
    "+": PLUS,
    "-": MINUS,
    "!": BANG,
    "*": ASTERISK,
    "/": SLASH,
    "<": LT,
    ">": GT,
    ",": COMMA,
    ";": SEMICOLON,
    ":": COLON,
    "(": LPAREN,
    ")": RPAREN,
    "{": LBRACE,
    "}": RBRACE,
    "[": LBRACKET,
    "]": RBRACKET,
}


def lookup_ident(word: str) -> str:
    """Return the keyword type for word, or IDENT"""
    return KEYWORDS.get(word, IDENT)


@dataclass(frozen=True)
class Token:
    """Tamarin token. `loc` is the source offset and does not take part in equality"""
    type: str
    literal: str
    loc: int = field(default=-1, compare=False)

    def __str__(self) -> str:
        return f"{self.type}({self.literal!r})"
