"""
Syntax diagnostics for the Tamarin parser
Diagnostics are plain dictionaries; formatting and suggestions are pure functions
"""

from typing import List, Optional, Dict
from pyparsing import lineno, col

import tokens as tok


# ============================================================================
# DIAGNOSTICS
# ============================================================================

def diagnostic_for_token(message: str, token: Optional[tok.Token], source_text: str,
                         expected: Optional[List[str]] = None) -> Dict:
    """Build the diagnostic dict for an error reported at token.

    Without a token, or for a token with no source offset, the diagnostic
    has line 0 and no context lines.
    """
    expected = list(expected or [])
    diagnostic = {
        'message': message,
        'location': -1,
        'line': 0,
        'column': 0,
        'expected': expected,
        'got': describe_token(token) if token is not None else None,
        'context': None,
        'suggestions': generate_suggestions(message, token, expected),
    }

    if token is not None and token.loc >= 0:
        line_num = lineno(token.loc, source_text)
        col_num = col(token.loc, source_text)
        diagnostic.update(
            location=token.loc,
            line=line_num,
            column=col_num,
            context=get_context_lines(source_text, line_num, col_num),
        )

    return diagnostic


def format_parse_error(error: Dict) -> str:
    """Render a diagnostic: header, message, then whichever details it carries"""
    if error['line']:
        parts = [f"Parse error at line {error['line']}, column {error['column']}:"]
    else:
        parts = ["Parse error:"]
    parts.append(f"  {error['message']}")

    if error['expected']:
        parts.append(f"  Expected: {', '.join(error['expected'])}")
    if error['got']:
        parts.append(f"  Got: {error['got']}")
    if error['context']:
        parts.append(f"  Context:\n{error['context']}")
    if error['suggestions']:
        parts.append("  Suggestions:")
        parts.extend(f"    - {s}" for s in error['suggestions'])

    return "\n".join(parts) + "\n"


# ============================================================================
# PURE FUNCTIONS
# ============================================================================

def get_context_lines(source_text: str, line_num: int, col_num: int, context_lines: int = 2) -> str:
    """Numbered source lines around line_num, with a caret under col_num"""
    lines = source_text.split('\n')
    first = max(1, line_num - context_lines)
    last = min(len(lines), line_num + context_lines)

    rendered = []
    for number in range(first, last + 1):
        rendered.append(f"{number:4d}: {lines[number - 1]}")
        if number == line_num:
            # Gutter is "NNNN: ", six columns wide
            rendered.append(" " * (5 + col_num) + "^ Error here")

    return '\n'.join(rendered)


def describe_token(token: tok.Token) -> str:
    """Describe what was actually found at the error location"""
    if token.type == tok.EOF:
        return "end of input"
    return f"'{token.literal}' ({token.type})"


def generate_suggestions(message: str, got: Optional[tok.Token], expected: List[str]) -> List[str]:
    """Generate helpful suggestions based on the error"""
    suggestions = []

    if tok.ASSIGN in expected:
        suggestions.append("let bindings need '=' between the name and the value")

    if tok.IDENT in expected:
        suggestions.append("names must start with a letter or underscore")

    if tok.LBRACE in expected:
        suggestions.append("if branches and function bodies are wrapped in braces { }")

    if tok.COLON in expected:
        suggestions.append("hash entries are written as key: value")

    if got is not None:
        if got.type == tok.ILLEGAL:
            suggestions.append(f"'{got.literal}' is not part of the language")
        elif got.type in (tok.RPAREN, tok.RBRACKET) and "no prefix parse function" in message:
            suggestions.append("trailing commas are not allowed in lists and argument lists")
        elif got.type == tok.EOF:
            suggestions.append("the input ended early; check for unclosed brackets")

    return suggestions


# ============================================================================
# EXCEPTIONS
# ============================================================================

class TamarinParseError(Exception):
    """Raised by whole-file parsing when the parser reported diagnostics"""
    def __init__(self, diagnostics: List[Dict], filename: str = "<input>"):
        self.diagnostics = diagnostics
        self.filename = filename
        self.messages = [d['message'] for d in diagnostics]
        super().__init__(f"{len(diagnostics)} syntax error(s) in {filename}")

    def __str__(self) -> str:
        header = f"{len(self.diagnostics)} syntax error(s) in {self.filename}\n"
        return header + "\n".join(format_parse_error(d) for d in self.diagnostics)
