import pytest

from liquid.evaluation import Config, Context, Expression
from liquid.expr_parser import (
    ASSIGN_STATEMENT_SELECTOR,
    CYCLE_STATEMENT_SELECTOR,
    LOOP_STATEMENT_SELECTOR,
    WHEN_STATEMENT_SELECTOR,
    ExpressionSyntaxError,
    evaluate_string,
    parse,
    parse_statement,
)


def add(a: int, b: int) -> int:
    return a + b


@pytest.fixture
def ctx():
    cfg = Config()
    cfg.add_filter("add", add)
    return Context({"a": 1, "b": 2, "obj": {"prop": 2}}, cfg)


@pytest.fixture
def rich_ctx():
    return Context(
        {
            "n": 123,
            "array": ["first", "second", "third"],
            "hash": {"a": "first", "b": {"c": "d"}, "c": ["r", "g", "b"]},
            "range": {"begin": 1, "end": 5},
        },
        Config(),
    )


@pytest.mark.parametrize(
    "source, expected",
    [
        ("true", True),
        ("false", False),
        ("nil", None),
        ("2", 2),
        ('"s"', "s"),
        ("a", 1),
        ("obj.prop", 2),
        ("a | add: b", 3),
        ("1 == 1", True),
        ("1 != 1", False),
        ("true and true", True),
    ],
)
def test_parse(ctx, source, expected):
    expr = parse(source)
    assert expr.evaluate(ctx) == expected


@pytest.mark.parametrize(
    "source",
    [
        "a syntax error",
        "%assign a",
        "%assign a 3",
        "%cycle 'a' 'b'",
        "%loop a in in",
        "%when a b",
    ],
)
def test_parse_errors(source):
    with pytest.raises(ExpressionSyntaxError, match="syntax error"):
        parse(source)


def test_parse_rejects_statement_forms():
    with pytest.raises(ExpressionSyntaxError, match="syntax error"):
        parse("%assign a = 1")


@pytest.mark.parametrize(
    "source, expected",
    [
        ("hash.b.c", "d"),
        ('hash["b"].c', "d"),
        ("hash.c[0]", "r"),
        ("array[-1]", "third"),
        ("array[100]", None),
        ("(1..5)", range(1, 6)),
        ("(1..range.end)", range(1, 6)),
        ('(1..range["end"])', range(1, 6)),
        ("(range.begin..range.end)", range(1, 6)),
        ("(1)", 1),
        ("(n)", 123),
        ("1.0 == 1", True),
        ("1 != 1.0", False),
        ("1 != 2.0", True),
        ("1.0 < 2", True),
        ('"a" < "b"', True),
        ('"b" < "a"', False),
        ("2 > 1", True),
        ("1 > 2", False),
        ('"a" <= "a"', True),
        ("2 <= 1", False),
        ("1 >= 1", True),
        ("1 >= 2", False),
        ("true and false", False),
        ("true and true and true", True),
        ("false or true", True),
        ("false or false", False),
        ('"seafood" contains "foo"', True),
        ('"seafood" contains "bar"', False),
        ('array contains "first"', True),
        ('nil contains "missing"', False),
    ],
)
def test_evaluate_string(rich_ctx, source, expected):
    assert evaluate_string(source, rich_ctx) == expected


def test_evaluate_string_syntax_error(rich_ctx):
    with pytest.raises(ExpressionSyntaxError):
        evaluate_string("syntax error", rich_ctx)


def test_parse_statement_assign():
    stmt = parse_statement(ASSIGN_STATEMENT_SELECTOR, "a = b")
    assert stmt.assignment.variable == "a"
    assert isinstance(stmt.assignment.value_fn, Expression)
    assert stmt.assignment.value_fn.evaluate(Context({"b": 7})) == 7


def test_parse_statement_assign_condition():
    stmt = parse_statement(ASSIGN_STATEMENT_SELECTOR, "a = 1 == 1")
    assert stmt.assignment.variable == "a"
    assert stmt.assignment.value_fn.evaluate(Context()) is True


def test_parse_statement_cycle():
    stmt = parse_statement(CYCLE_STATEMENT_SELECTOR, "'a', 'b'")
    assert stmt.cycle.group == ""
    assert stmt.cycle.values == ["a", "b"]


def test_parse_statement_cycle_group():
    stmt = parse_statement(CYCLE_STATEMENT_SELECTOR, "'g': 'a', 'b'")
    assert stmt.cycle.group == "g"
    assert stmt.cycle.values == ["a", "b"]


def test_parse_statement_cycle_requires_strings():
    with pytest.raises(ExpressionSyntaxError, match="expected a string"):
        parse_statement(CYCLE_STATEMENT_SELECTOR, "1, 'b'")


def test_parse_statement_loop():
    stmt = parse_statement(LOOP_STATEMENT_SELECTOR, "x in array reversed offset: 2 limit: 3")
    loop = stmt.loop
    assert loop.variable == "x"
    assert loop.reversed is True
    assert loop.cols is None
    ctx = Context({"array": [1, 2]})
    assert loop.limit.evaluate(ctx) == 3
    assert loop.offset.evaluate(ctx) == 2
    assert loop.expr.evaluate(ctx) == [1, 2]


def test_parse_statement_loop_undefined_modifier():
    with pytest.raises(ExpressionSyntaxError, match="undefined loop modifier"):
        parse_statement(LOOP_STATEMENT_SELECTOR, "x in array sideways")


def test_parse_statement_when():
    stmt = parse_statement(WHEN_STATEMENT_SELECTOR, "a, b")
    assert len(stmt.when.exprs) == 2
    ctx = Context({"a": "x", "b": "y"})
    assert [e.evaluate(ctx) for e in stmt.when.exprs] == ["x", "y"]


def test_parse_statement_plain_expression():
    stmt = parse_statement("", "1 < 2")
    assert stmt.assignment is None
    assert stmt.expression.evaluate(Context()) is True