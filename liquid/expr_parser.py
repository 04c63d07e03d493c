"""Parser for the expression language used inside objects and tags.

Besides plain expressions such as ``a.b[c] | upcase``, the parser handles the
statement forms used by the ``assign``, ``cycle``, ``for`` and ``when`` tags.
These are selected by a prefix that the lexer recognises.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Callable

from liquid.evaluation import (
    Context,
    Evaluator,
    Expression,
    contains_expr,
    filter_expr,
    index_expr,
    is_truthy,
    property_expr,
    range_expr,
    value_less,
    values_equal,
)
from liquid.expr_lexer import Lexeme, TokenKind, lex

ASSIGN_STATEMENT_SELECTOR = "%assign "
CYCLE_STATEMENT_SELECTOR = "{%cycle "
LOOP_STATEMENT_SELECTOR = "%loop "
WHEN_STATEMENT_SELECTOR = "{%when "

_END = ";"


def _quote(text: str) -> str:
    return json.dumps(text, ensure_ascii=False)


class ExpressionSyntaxError(Exception):
    """A syntax error in an expression or statement."""


@dataclass
class Assignment:
    """A parsed ``{% assign %}`` statement."""

    variable: str
    value_fn: Expression


@dataclass
class Cycle:
    """A parsed ``{% cycle %}`` statement: an optional group and the values."""

    group: str = ""
    values: list[str] = field(default_factory=list)


@dataclass
class Loop:
    """A parsed loop statement with its modifiers."""

    variable: str
    expr: Expression
    limit: Expression | None = None
    offset: Expression | None = None
    cols: Expression | None = None
    reversed: bool = False


@dataclass
class When:
    """A parsed ``{% when %}`` clause."""

    exprs: list[Expression] = field(default_factory=list)


@dataclass
class Statement:
    """The result of parsing: exactly one of the fields is set."""

    expression: Expression | None = None
    assignment: Assignment | None = None
    cycle: Cycle | None = None
    loop: Loop | None = None
    when: When | None = None


def _literal(value: Any) -> Evaluator:
    return lambda _ctx: value


def _variable(name: str) -> Evaluator:
    return lambda ctx: ctx.get(name)


def _binary(op: Callable[[Any, Any], bool], left: Evaluator, right: Evaluator) -> Evaluator:
    return lambda ctx: op(left(ctx), right(ctx))


def _and(left: Evaluator, right: Evaluator) -> Evaluator:
    return lambda ctx: is_truthy(left(ctx)) and is_truthy(right(ctx))


def _or(left: Evaluator, right: Evaluator) -> Evaluator:
    return lambda ctx: is_truthy(left(ctx)) or is_truthy(right(ctx))


_COMPARISONS: dict[Any, Callable[[Any, Any], bool]] = {
    TokenKind.EQ: values_equal,
    TokenKind.NEQ: lambda a, b: not values_equal(a, b),
    ">": lambda a, b: value_less(b, a),
    "<": value_less,
    TokenKind.GE: lambda a, b: value_less(b, a) or values_equal(a, b),
    TokenKind.LE: lambda a, b: value_less(a, b) or values_equal(a, b),
}


class _Parser:
    def __init__(self, source: str) -> None:
        self.source = source
        # The terminating ';' marks the end of input.
        self.tokens = lex(source + _END)
        self.pos = 0

    # -- token helpers ---------------------------------------------------

    def error(self) -> ExpressionSyntaxError:
        return ExpressionSyntaxError(f"syntax error in {_quote(self.source)}")

    def peek(self) -> Lexeme | None:
        return self.tokens[self.pos] if self.pos < len(self.tokens) else None

    def accept(self, kind: TokenKind) -> Lexeme | None:
        tok = self.peek()
        if tok is not None and tok.kind is kind:
            self.pos += 1
            return tok
        return None

    def expect(self, kind: TokenKind) -> Lexeme:
        tok = self.accept(kind)
        if tok is None:
            raise self.error()
        return tok

    def accept_char(self, char: str) -> bool:
        tok = self.peek()
        if tok is not None and tok.kind is TokenKind.CHAR and tok.value == char:
            self.pos += 1
            return True
        return False

    def expect_char(self, char: str) -> None:
        if not self.accept_char(char):
            raise self.error()

    def finish(self) -> None:
        self.expect_char(_END)
        if self.pos != len(self.tokens):
            raise self.error()

    # -- statements ------------------------------------------------------

    def parse(self) -> Statement:
        if self.accept(TokenKind.ASSIGN):
            name = self.expect(TokenKind.IDENTIFIER).name
            self.expect_char("=")
            value = self.cond()
            self.finish()
            return Statement(assignment=Assignment(name, Expression(value)))
        if self.accept(TokenKind.CYCLE):
            cycle = self.cycle()
            self.finish()
            return Statement(cycle=cycle)
        if self.accept(TokenKind.LOOP):
            loop = self.loop()
            self.finish()
            return Statement(loop=loop)
        if self.accept(TokenKind.WHEN):
            exprs = [Expression(self.expr())]
            while self.accept_char(","):
                exprs.append(Expression(self.expr()))
            self.finish()
            return Statement(when=When(exprs))
        value = self.cond()
        self.finish()
        return Statement(expression=Expression(value))

    def string(self) -> str:
        tok = self.expect(TokenKind.LITERAL)
        if not isinstance(tok.value, str):
            raise ExpressionSyntaxError(f"expected a string for {_quote(str(tok.value))}")
        return tok.value

    def cycle(self) -> Cycle:
        first = self.string()
        group = ""
        if self.accept_char(":"):
            group, first = first, self.string()
        values = [first]
        while self.accept_char(","):
            values.append(self.string())
        return Cycle(group, values)

    def loop(self) -> Loop:
        name = self.expect(TokenKind.IDENTIFIER).name
        self.expect(TokenKind.IN)
        loop = Loop(name, Expression(self.filtered(self.expr())))
        while True:
            tok = self.peek()
            if tok is None:
                break
            if tok.kind is TokenKind.IDENTIFIER:
                self.pos += 1
                if tok.name != "reversed":
                    raise ExpressionSyntaxError(f"undefined loop modifier {_quote(tok.name)}")
                loop.reversed = True
            elif tok.kind is TokenKind.KEYWORD:
                self.pos += 1
                value = Expression(self.expr())
                if tok.name == "cols":
                    loop.cols = value
                elif tok.name == "limit":
                    loop.limit = value
                elif tok.name == "offset":
                    loop.offset = value
                else:
                    raise ExpressionSyntaxError(f"undefined loop modifier {_quote(tok.name)}")
            else:
                break
        return loop

    # -- expressions -----------------------------------------------------

    def cond(self) -> Evaluator:
        result = self.rel()
        while True:
            if self.accept(TokenKind.AND):
                result = _and(result, self.rel())
            elif self.accept(TokenKind.OR):
                result = _or(result, self.rel())
            else:
                return result

    def rel(self) -> Evaluator:
        left = self.expr()
        tok = self.peek()
        if tok is None:
            return self.filtered(left)
        if tok.kind is TokenKind.CONTAINS:
            self.pos += 1
            return contains_expr(left, self.expr())
        key: Any = tok.value if tok.kind is TokenKind.CHAR else tok.kind
        op = _COMPARISONS.get(key) if key in (TokenKind.EQ, TokenKind.NEQ, TokenKind.GE, TokenKind.LE, "<", ">") else None
        if op is not None:
            self.pos += 1
            return _binary(op, left, self.expr())
        return self.filtered(left)

    def filtered(self, receiver: Evaluator) -> Evaluator:
        while self.accept_char("|"):
            tok = self.peek()
            if tok is not None and tok.kind is TokenKind.IDENTIFIER:
                self.pos += 1
                receiver = filter_expr(receiver, tok.name)
            elif tok is not None and tok.kind is TokenKind.KEYWORD:
                self.pos += 1
                params = [self.expr()]
                while self.accept_char(","):
                    params.append(self.expr())
                receiver = filter_expr(receiver, tok.name, params)
            else:
                raise self.error()
        return receiver

    def expr(self) -> Evaluator:
        result = self.primary()
        while True:
            prop = self.accept(TokenKind.PROPERTY)
            if prop is not None:
                result = property_expr(result, prop.name)
            elif self.accept_char("["):
                index = self.expr()
                self.expect_char("]")
                result = index_expr(result, index)
            else:
                return result

    def primary(self) -> Evaluator:
        tok = self.peek()
        if tok is None:
            raise self.error()
        if tok.kind is TokenKind.LITERAL:
            self.pos += 1
            return _literal(tok.value)
        if tok.kind is TokenKind.IDENTIFIER:
            self.pos += 1
            return _variable(tok.name)
        if self.accept_char("("):
            start = self.pos
            first = self.expr()
            if self.accept(TokenKind.DOTDOT):
                end = self.expr()
                self.expect_char(")")
                return range_expr(first, end)
            self.pos = start
            inner = self.cond()
            self.expect_char(")")
            return inner
        raise self.error()


def parse_statement(selector: str, source: str) -> Statement:
    """Parse ``source`` as the statement chosen by ``selector``."""
    return _Parser(selector + source).parse()


def parse(source: str) -> Expression:
    """Parse an expression string into an Expression."""
    statement = _Parser(source).parse()
    if statement.expression is None:
        raise ExpressionSyntaxError(f"syntax error in {_quote(source)}")
    return statement.expression


def evaluate_string(source: str, ctx: Context) -> Any:
    """Parse ``source`` and evaluate it in ``ctx``."""
    return parse(source).evaluate(ctx)