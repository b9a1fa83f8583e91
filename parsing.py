"""
Tamarin Lexer and Parser
Token scanning built on pyparsing, and a precedence-climbing (Pratt) parser producing the AST
"""

from typing import Callable, Dict, Iterator, List, Optional, Tuple
from dataclasses import fields, is_dataclass
from enum import IntEnum

from pyparsing import ParserElement, Regex, Word, alphanums, alphas, nums, one_of

import tokens as tok
from tokens import Token
from syntax import (
    ArrayLiteral, BlockStatement, Boolean, CallExpression, Expression, ExpressionStatement,
    FunctionLiteral, HashLiteral, Identifier, IfExpression, IndexExpression, InfixExpression,
    IntegerLiteral, LetStatement, PrefixExpression, Program, ReturnStatement, Statement,
    StringLiteral
)
from error_handling import TamarinParseError, diagnostic_for_token
from runtime import TamarinRuntimeError


INT64_MAX = 2 ** 63 - 1


# ============================================================================
# LEXER
# ============================================================================

def _token_action(token_type: str) -> Callable:
    def action(s, loc, toks):
        return Token(token_type, toks[0], loc)
    return action


def _identifier_action(s, loc, toks):
    return Token(tok.lookup_ident(toks[0]), toks[0], loc)


def _operator_action(s, loc, toks):
    return Token(tok.OPERATORS[toks[0]], toks[0], loc)


def _string_action(s, loc, toks):
    # An unterminated string runs to the end of input
    text = toks[0][1:]
    if text.endswith('"'):
        text = text[:-1]
    return Token(tok.STRING, text, loc)


def create_token_pattern() -> ParserElement:
    """Build the pyparsing expression matching a single Tamarin token"""
    string_literal = Regex(r'"[^"]*"?').set_parse_action(_string_action)
    identifier = Word(alphas + "_", alphanums + "_").set_parse_action(_identifier_action)
    integer = Word(nums).set_parse_action(_token_action(tok.INT))
    operator = one_of(list(tok.OPERATORS)).set_parse_action(_operator_action)

    pattern = string_literal | identifier | integer | operator
    # Offsets must line up with the raw source, so tabs are never expanded
    return pattern.parse_with_tabs()


TOKEN_PATTERN = create_token_pattern()


class Lexer:
    """Tamarin lexer: a restartable-per-source stream of tokens ending in EOF"""

    def __init__(self, source: str):
        self.source = source
        self._stream = self._scan()

    def _scan(self) -> Iterator[Token]:
        position = 0
        for toks, start, end in TOKEN_PATTERN.scan_string(self.source):
            yield from self._illegal_between(position, start)
            yield toks[0]
            position = end
        yield from self._illegal_between(position, len(self.source))

    def _illegal_between(self, start: int, end: int) -> Iterator[Token]:
        """Characters skipped by the scanner that are not whitespace are illegal"""
        for offset in range(start, end):
            char = self.source[offset]
            if not char.isspace():
                yield Token(tok.ILLEGAL, char, offset)

    def next_token(self) -> Token:
        """Return the next token; EOF is returned indefinitely once reached"""
        token = next(self._stream, None)
        if token is None:
            return Token(tok.EOF, "", len(self.source))
        return token

    def tokenize(self) -> List[Token]:
        """Return all remaining tokens, ending with a single EOF"""
        result = []
        while True:
            token = self.next_token()
            result.append(token)
            if token.type == tok.EOF:
                return result


# ============================================================================
# PRECEDENCE TABLE
# ============================================================================

class Precedence(IntEnum):
    LOWEST = 1
    EQUALS = 2       # == !=
    LESSGREATER = 3  # < >
    SUM = 4          # + -
    PRODUCT = 5      # * /
    PREFIX = 6       # -x !x
    CALL = 7         # f(x)
    INDEX = 8        # a[i]


PRECEDENCES = {
    tok.EQ: Precedence.EQUALS,
    tok.NOT_EQ: Precedence.EQUALS,
    tok.LT: Precedence.LESSGREATER,
    tok.GT: Precedence.LESSGREATER,
    tok.PLUS: Precedence.SUM,
    tok.MINUS: Precedence.SUM,
    tok.SLASH: Precedence.PRODUCT,
    tok.ASTERISK: Precedence.PRODUCT,
    tok.LPAREN: Precedence.CALL,
    tok.LBRACKET: Precedence.INDEX,
}


# ============================================================================
# PARSER
# ============================================================================

class Parser:
    """Pratt parser over a token source. Malformed input is reported, never raised"""

    def __init__(self, lexer: Lexer, debug: bool = False):
        self.lexer = lexer
        self.debug = debug
        self.diagnostics: List[Dict] = []

        self.cur_token: Token = Token(tok.EOF, "")
        self.peek_token: Token = Token(tok.EOF, "")

        self._setup_handlers()

        # Fill cur_token and peek_token
        self._next_token()
        self._next_token()

    def _setup_handlers(self):
        """Fixed dispatch tables keyed by token type"""
        self.prefix_parse_fns: Dict[str, Callable[[], Optional[Expression]]] = {
            tok.IDENT: self._parse_identifier,
            tok.INT: self._parse_integer_literal,
            tok.STRING: self._parse_string_literal,
            tok.TRUE: self._parse_boolean,
            tok.FALSE: self._parse_boolean,
            tok.BANG: self._parse_prefix_expression,
            tok.MINUS: self._parse_prefix_expression,
            tok.LPAREN: self._parse_grouped_expression,
            tok.IF: self._parse_if_expression,
            tok.FUNCTION: self._parse_function_literal,
            tok.LBRACKET: self._parse_array_literal,
            tok.LBRACE: self._parse_hash_literal,
        }

        self.infix_parse_fns: Dict[str, Callable[[Expression], Optional[Expression]]] = {
            tok.PLUS: self._parse_infix_expression,
            tok.MINUS: self._parse_infix_expression,
            tok.SLASH: self._parse_infix_expression,
            tok.ASTERISK: self._parse_infix_expression,
            tok.EQ: self._parse_infix_expression,
            tok.NOT_EQ: self._parse_infix_expression,
            tok.LT: self._parse_infix_expression,
            tok.GT: self._parse_infix_expression,
            tok.LPAREN: self._parse_call_expression,
            tok.LBRACKET: self._parse_index_expression,
        }

    @property
    def errors(self) -> List[str]:
        """Accumulated diagnostics, in order, as plain strings"""
        return [d['message'] for d in self.diagnostics]

    # ------------------------------------------------------------------
    # Token helpers
    # ------------------------------------------------------------------

    def _next_token(self):
        self.cur_token = self.peek_token
        self.peek_token = self.lexer.next_token()

    def _cur_token_is(self, token_type: str) -> bool:
        return self.cur_token.type == token_type

    def _peek_token_is(self, token_type: str) -> bool:
        return self.peek_token.type == token_type

    def _expect_peek(self, token_type: str) -> bool:
        if self._peek_token_is(token_type):
            self._next_token()
            return True
        self._peek_error(token_type)
        return False

    def _peek_precedence(self) -> int:
        return PRECEDENCES.get(self.peek_token.type, Precedence.LOWEST)

    def _cur_precedence(self) -> int:
        return PRECEDENCES.get(self.cur_token.type, Precedence.LOWEST)

    def _synchronize(self):
        """Skip to the end of the current statement after a failed production"""
        while not (self._cur_token_is(tok.SEMICOLON)
                   or self._peek_token_is(tok.EOF)
                   or self._peek_token_is(tok.RBRACE)):
            self._next_token()

    # ------------------------------------------------------------------
    # Diagnostics
    # ------------------------------------------------------------------

    def _add_error(self, message: str, token: Token, expected: Optional[List[str]] = None):
        source = getattr(self.lexer, 'source', "")
        self.diagnostics.append(diagnostic_for_token(message, token, source, expected))
        if self.debug:
            print(f"Parse error: {message}")

    def _peek_error(self, token_type: str):
        message = f"expected next token to be {token_type}, got {self.peek_token.type} instead"
        self._add_error(message, self.peek_token, [token_type])

    def _no_prefix_parse_fn_error(self, token: Token):
        self._add_error(f"no prefix parse function for {token.type} found", token)

    # ------------------------------------------------------------------
    # Statements
    # ------------------------------------------------------------------

    def parse_program(self) -> Program:
        """Parse statements until EOF; nesting deeper than the host stack is fatal"""
        statements = []
        try:
            while not self._cur_token_is(tok.EOF):
                statement = self._parse_statement()
                if statement is not None:
                    statements.append(statement)
                self._next_token()
        except RecursionError as e:
            raise TamarinRuntimeError("maximum nesting depth exceeded while parsing") from e
        return Program(tuple(statements))

    def _parse_statement(self) -> Optional[Statement]:
        if self.debug:
            print(f"Parsing statement at {self.cur_token}")

        if self._cur_token_is(tok.LET):
            return self._parse_let_statement()
        if self._cur_token_is(tok.RETURN):
            return self._parse_return_statement()
        return self._parse_expression_statement()

    def _parse_let_statement(self) -> Optional[LetStatement]:
        token = self.cur_token

        if not self._expect_peek(tok.IDENT):
            self._synchronize()
            return None
        name = Identifier(self.cur_token, self.cur_token.literal)

        if not self._expect_peek(tok.ASSIGN):
            self._synchronize()
            return None

        self._next_token()
        value = self._parse_expression(Precedence.LOWEST)
        if value is None:
            self._synchronize()
            return None

        if self._peek_token_is(tok.SEMICOLON):
            self._next_token()

        return LetStatement(token, name, value)

    def _parse_return_statement(self) -> Optional[ReturnStatement]:
        token = self.cur_token

        self._next_token()
        value = self._parse_expression(Precedence.LOWEST)
        if value is None:
            self._synchronize()
            return None

        if self._peek_token_is(tok.SEMICOLON):
            self._next_token()

        return ReturnStatement(token, value)

    def _parse_expression_statement(self) -> Optional[ExpressionStatement]:
        token = self.cur_token

        expression = self._parse_expression(Precedence.LOWEST)
        if expression is None:
            return None

        if self._peek_token_is(tok.SEMICOLON):
            self._next_token()

        return ExpressionStatement(token, expression)

    def _parse_block_statement(self) -> BlockStatement:
        """Statements up to the matching `}` or end of input"""
        token = self.cur_token
        statements = []

        self._next_token()

        while not self._cur_token_is(tok.RBRACE) and not self._cur_token_is(tok.EOF):
            statement = self._parse_statement()
            if statement is not None:
                statements.append(statement)
            self._next_token()

        return BlockStatement(token, tuple(statements))

    # ------------------------------------------------------------------
    # Expressions
    # ------------------------------------------------------------------

    def _parse_expression(self, precedence: int) -> Optional[Expression]:
        prefix = self.prefix_parse_fns.get(self.cur_token.type)
        if prefix is None:
            self._no_prefix_parse_fn_error(self.cur_token)
            return None
        left = prefix()

        while (left is not None
               and not self._peek_token_is(tok.SEMICOLON)
               and precedence < self._peek_precedence()):
            infix = self.infix_parse_fns.get(self.peek_token.type)
            if infix is None:
                return left

            self._next_token()
            left = infix(left)

        return left

    def _parse_identifier(self) -> Expression:
        return Identifier(self.cur_token, self.cur_token.literal)

    def _parse_integer_literal(self) -> Optional[Expression]:
        literal = self.cur_token.literal
        value = int(literal)
        if value > INT64_MAX:
            self._add_error(f"could not parse {literal} as integer", self.cur_token)
            return None
        return IntegerLiteral(self.cur_token, value)

    def _parse_string_literal(self) -> Expression:
        return StringLiteral(self.cur_token, self.cur_token.literal)

    def _parse_boolean(self) -> Expression:
        return Boolean(self.cur_token, self._cur_token_is(tok.TRUE))

    def _parse_prefix_expression(self) -> Optional[Expression]:
        token = self.cur_token

        self._next_token()
        right = self._parse_expression(Precedence.PREFIX)
        if right is None:
            return None

        return PrefixExpression(token, token.literal, right)

    def _parse_infix_expression(self, left: Expression) -> Optional[Expression]:
        token = self.cur_token
        precedence = self._cur_precedence()

        self._next_token()
        right = self._parse_expression(precedence)
        if right is None:
            return None

        return InfixExpression(token, left, token.literal, right)

    def _parse_grouped_expression(self) -> Optional[Expression]:
        self._next_token()

        expression = self._parse_expression(Precedence.LOWEST)
        if expression is None:
            return None

        if not self._expect_peek(tok.RPAREN):
            return None

        return expression

    def _parse_if_expression(self) -> Optional[Expression]:
        token = self.cur_token

        if not self._expect_peek(tok.LPAREN):
            return None

        self._next_token()
        condition = self._parse_expression(Precedence.LOWEST)
        if condition is None:
            return None

        if not self._expect_peek(tok.RPAREN):
            return None

        if not self._expect_peek(tok.LBRACE):
            return None

        consequence = self._parse_block_statement()

        alternative = None
        if self._peek_token_is(tok.ELSE):
            self._next_token()

            if not self._expect_peek(tok.LBRACE):
                return None

            alternative = self._parse_block_statement()

        return IfExpression(token, condition, consequence, alternative)

    def _parse_function_literal(self) -> Optional[Expression]:
        token = self.cur_token

        if not self._expect_peek(tok.LPAREN):
            return None

        parameters = self._parse_function_parameters()
        if parameters is None:
            return None

        if not self._expect_peek(tok.LBRACE):
            return None

        body = self._parse_block_statement()

        return FunctionLiteral(token, tuple(parameters), body)

    def _parse_function_parameters(self) -> Optional[List[Identifier]]:
        identifiers = []

        if self._peek_token_is(tok.RPAREN):
            self._next_token()
            return identifiers

        if not self._expect_peek(tok.IDENT):
            return None
        identifiers.append(Identifier(self.cur_token, self.cur_token.literal))

        while self._peek_token_is(tok.COMMA):
            self._next_token()
            if not self._expect_peek(tok.IDENT):
                return None
            identifiers.append(Identifier(self.cur_token, self.cur_token.literal))

        if not self._expect_peek(tok.RPAREN):
            return None

        return identifiers

    def _parse_call_expression(self, function: Expression) -> Optional[Expression]:
        token = self.cur_token
        arguments = self._parse_expression_list(tok.RPAREN)
        if arguments is None:
            return None
        return CallExpression(token, function, tuple(arguments))

    def _parse_expression_list(self, end: str) -> Optional[List[Expression]]:
        """Comma-separated expressions up to `end`; no trailing comma"""
        items = []

        if self._peek_token_is(end):
            self._next_token()
            return items

        self._next_token()
        item = self._parse_expression(Precedence.LOWEST)
        if item is None:
            return None
        items.append(item)

        while self._peek_token_is(tok.COMMA):
            self._next_token()
            self._next_token()
            item = self._parse_expression(Precedence.LOWEST)
            if item is None:
                return None
            items.append(item)

        if not self._expect_peek(end):
            return None

        return items

    def _parse_array_literal(self) -> Optional[Expression]:
        token = self.cur_token
        elements = self._parse_expression_list(tok.RBRACKET)
        if elements is None:
            return None
        return ArrayLiteral(token, tuple(elements))

    def _parse_index_expression(self, left: Expression) -> Optional[Expression]:
        token = self.cur_token

        self._next_token()
        index = self._parse_expression(Precedence.LOWEST)
        if index is None:
            return None

        if not self._expect_peek(tok.RBRACKET):
            return None

        return IndexExpression(token, left, index)

    def _parse_hash_literal(self) -> Optional[Expression]:
        token = self.cur_token
        pairs: List[Tuple[Expression, Expression]] = []

        while not self._peek_token_is(tok.RBRACE):
            self._next_token()
            key = self._parse_expression(Precedence.LOWEST)
            if key is None:
                return None

            if not self._expect_peek(tok.COLON):
                return None

            self._next_token()
            value = self._parse_expression(Precedence.LOWEST)
            if value is None:
                return None

            pairs.append((key, value))

            if not self._peek_token_is(tok.RBRACE) and not self._expect_peek(tok.COMMA):
                return None

        if not self._expect_peek(tok.RBRACE):
            return None

        return HashLiteral(token, tuple(pairs))


# ============================================================================
# FRONT-END
# ============================================================================

class TamarinParser:
    """Main Tamarin parser combining lexer and Pratt parser"""

    def __init__(self, debug: bool = False):
        self.debug = debug

    def parse_string(self, text: str) -> Tuple[Program, List[str]]:
        """Parse source text, returning the program and its diagnostics"""
        parser = Parser(Lexer(text), self.debug)
        program = parser.parse_program()
        return program, parser.errors

    def parse_file(self, filepath: str) -> Program:
        """Parse a source file; raises TamarinParseError if it has syntax errors"""
        with open(filepath, 'r', encoding='utf-8') as f:
            content = f.read()

        parser = Parser(Lexer(content), self.debug)
        program = parser.parse_program()
        if parser.diagnostics:
            raise TamarinParseError(parser.diagnostics, filepath)
        return program

    def tokenize(self, text: str) -> List[Token]:
        """Tokenize Tamarin source code"""
        return Lexer(text).tokenize()


# Factory functions for creating parsers
def create_parser(debug: bool = False) -> TamarinParser:
    """Create a Tamarin parser"""
    return TamarinParser(debug=debug)


def create_debug_parser() -> TamarinParser:
    """Create a Tamarin parser with debug enabled"""
    return TamarinParser(debug=True)


def pretty_print_ast(node, indent: int = 0) -> str:
    """Pretty print an AST node for debugging"""
    result = "  " * indent + type(node).__name__
    scalars = []
    children = []

    for f in fields(node):
        if f.name == 'token':
            continue
        value = getattr(node, f.name)
        if is_dataclass(value):
            children.append(value)
        elif isinstance(value, tuple):
            for item in value:
                # Hash pairs are (key, value) tuples
                children.extend(item if isinstance(item, tuple) else (item,))
        elif value is not None:
            scalars.append(repr(value))

    if scalars:
        result += f"({', '.join(scalars)})"
    result += "\n"

    for child in children:
        result += pretty_print_ast(child, indent + 1)

    return result
