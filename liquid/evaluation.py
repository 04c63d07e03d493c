"""Evaluation of compiled expressions: contexts, filters and value operations."""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Callable, Sequence

from liquid.drops import from_drop

Evaluator = Callable[["Context"], Any]

_CO_VARARGS = 0x04


def _quote(text: str) -> str:
    return json.dumps(text, ensure_ascii=False)


class InterpreterError(Exception):
    """An error in the input expression, rather than in the interpreter."""


class UndefinedFilter(Exception):
    """The named filter is not defined."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"undefined filter {_quote(name)}")


class FilterError(Exception):
    """An error raised while applying a filter."""

    def __init__(self, filter_name: str, err: BaseException) -> None:
        self.filter_name = filter_name
        self.err = err
        super().__init__(f"error applying filter {_quote(filter_name)} ({_quote(str(err))})")


class FilterArityError(InterpreterError):
    """A filter was given more arguments than it takes."""

    def __init__(self, given: int, expected: int) -> None:
        self.given = given
        self.expected = expected
        super().__init__(f"wrong number of arguments (given {given}, expected {expected})")


# -- filter parameter introspection -------------------------------------------


@dataclass(frozen=True)
class _Param:
    name: str
    hint: Any
    has_default: bool


def _resolve_hint(hint: Any) -> Any:
    if hint is None:
        return None
    if isinstance(hint, str):
        base = hint.split("[", 1)[0].strip()
        return _named_hints().get(base)
    origin = getattr(hint, "__origin__", None)
    if origin in (list, dict):
        return origin
    return hint


def _named_hints() -> dict[str, Any]:
    return {
        "str": str,
        "int": int,
        "float": float,
        "bool": bool,
        "list": list,
        "List": list,
        "dict": dict,
        "Dict": dict,
        "Closure": Closure,
    }


def _parameters(fn: Callable[..., Any]) -> tuple[list[_Param], bool] | None:
    """Return the positional parameters of ``fn`` and whether it takes ``*args``.

    Returns None when the callable cannot be introspected (e.g. a builtin).
    """
    func: Any = fn
    skip = 0
    if hasattr(func, "__func__") and hasattr(func, "__self__"):
        func = func.__func__
        skip = 1
    elif not hasattr(func, "__code__") and not isinstance(fn, type):
        call = getattr(type(fn), "__call__", None)
        if call is not None and hasattr(call, "__code__"):
            func = call
            skip = 1
    code = getattr(func, "__code__", None)
    if code is None:
        return None
    count = code.co_argcount
    names = code.co_varnames[:count]
    n_defaults = len(getattr(func, "__defaults__", None) or ())
    annotations = getattr(func, "__annotations__", None) or {}
    params = [
        _Param(name, _resolve_hint(annotations.get(name)), i >= count - n_defaults)
        for i, name in enumerate(names)
    ][skip:]
    return params, bool(code.co_flags & _CO_VARARGS)


@dataclass
class Config:
    """Configuration for expression interpretation: the filter dictionary."""

    filters: dict[str, Callable[..., Any]] = field(default_factory=dict)

    def add_filter(self, name: str, fn: Callable[..., Any]) -> None:
        """Add a filter. A filter is a function that takes at least one input."""
        if not callable(fn):
            raise TypeError("a filter must be a function")
        info = _parameters(fn)
        if info is not None:
            params, varargs = info
            if not params and not varargs:
                raise ValueError("a filter function must have at least one input")
        self.filters[name] = fn


# -- value operations ---------------------------------------------------------


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _is_sequence(value: Any) -> bool:
    return isinstance(value, (list, tuple, range))


def is_truthy(value: Any) -> bool:
    """Liquid truth: everything except nil and false is true."""
    value = from_drop(value)
    return value is not None and value is not False


def values_equal(a: Any, b: Any) -> bool:
    """Compare two values; numbers compare by value regardless of type."""
    a, b = from_drop(a), from_drop(b)
    if isinstance(a, bool) or isinstance(b, bool):
        return type(a) is type(b) and a == b
    try:
        return bool(a == b)
    except Exception:  # noqa: BLE001
        return False


def value_less(a: Any, b: Any) -> bool:
    """Return True if ``a`` orders before ``b``; unordered values are never less."""
    a, b = from_drop(a), from_drop(b)
    if _is_number(a) and _is_number(b):
        return a < b
    if isinstance(a, str) and isinstance(b, str):
        return a < b
    return False


def value_contains(container: Any, item: Any) -> bool:
    """Implement the ``contains`` operator."""
    container, item = from_drop(container), from_drop(item)
    if isinstance(container, str):
        return isinstance(item, str) and item in container
    if _is_sequence(container):
        return any(values_equal(element, item) for element in container)
    if isinstance(container, Mapping):
        try:
            return item in container
        except TypeError:
            return False
    return False


def property_value(obj: Any, name: Any) -> Any:
    """Look up ``obj.name``: a map key, a sequence property, or an attribute."""
    obj = from_drop(obj)
    if obj is None:
        return None
    if isinstance(obj, Mapping):
        try:
            if name in obj:
                return obj[name]
        except TypeError:
            return None
        return len(obj) if name == "size" else None
    if isinstance(obj, str):
        return len(obj) if name == "size" else None
    if _is_sequence(obj):
        if name == "size":
            return len(obj)
        if name == "first":
            return obj[0] if obj else None
        if name == "last":
            return obj[-1] if obj else None
        return None
    if isinstance(name, str) and name and not name.startswith("_"):
        attr = getattr(obj, name, None)
        if callable(attr) and not isinstance(attr, type):
            return attr()
        return attr
    return None


def index_value(obj: Any, index: Any) -> Any:
    """Look up ``obj[index]``; out-of-range indices and missing keys give None."""
    obj, index = from_drop(obj), from_drop(index)
    if isinstance(obj, Mapping):
        try:
            return obj.get(index)
        except TypeError:
            return None
    if _is_sequence(obj):
        if isinstance(index, float) and index.is_integer():
            index = int(index)
        if not isinstance(index, int) or isinstance(index, bool):
            return None
        if index < 0:
            index += len(obj)
        return obj[index] if 0 <= index < len(obj) else None
    return None


def _to_int(value: Any) -> int:
    value = from_drop(value)
    if value is None:
        return 0
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            try:
                return int(float(value))
            except ValueError as exc:
                raise InterpreterError(f"can't convert {_quote(value)} to an integer") from exc
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise InterpreterError(f"can't convert {value!r} to an integer") from exc


_ZERO: dict[Any, Callable[[], Any]] = {str: str, int: int, float: float, bool: bool, list: list, dict: dict}


def _convert(value: Any, hint: Any) -> Any:
    if hint is str:
        if value is None:
            return ""
        if isinstance(value, bool):
            return "true" if value else "false"
        return value if isinstance(value, str) else str(value)
    if hint is int and not isinstance(value, bool):
        return _to_int(value)
    if hint is float:
        if value is None:
            return 0.0
        try:
            return float(value)
        except (TypeError, ValueError) as exc:
            raise InterpreterError(f"can't convert {value!r} to a number") from exc
    if hint is list:
        if value is None:
            return []
        if isinstance(value, list):
            return value
        if isinstance(value, Mapping):
            return list(value.values())
        if isinstance(value, (tuple, range, set, frozenset)):
            return list(value)
        return [value]
    return value


def _call(fn: Callable[..., Any], args: list[Any]) -> Any:
    info = _parameters(fn)
    if info is None:
        return fn(*args)
    params, varargs = info
    if len(args) > len(params) and not varargs:
        raise FilterArityError(len(args) - 1, len(params) - 1)
    call_args = [_convert(arg, param.hint) for arg, param in zip(args, params)] + args[len(params):]
    for param in params[len(args):]:
        if param.has_default:
            break
        zero = _ZERO.get(param.hint)
        call_args.append(zero() if zero else None)
    return fn(*call_args)


# -- contexts, expressions and closures ---------------------------------------


class Context:
    """The evaluation context: variable bindings plus the configuration."""

    def __init__(self, bindings: dict[str, Any] | None = None, config: Config | None = None) -> None:
        self.bindings = bindings if bindings is not None else {}
        self.config = config if config is not None else Config()

    def get(self, name: str) -> Any:
        """Return the value bound to ``name``, as templates see it."""
        return from_drop(self.bindings.get(name))

    def set(self, name: str, value: Any) -> None:
        """Bind ``name`` to ``value``."""
        self.bindings[name] = value

    def clone(self) -> Context:
        """Return a copy whose bindings can change without affecting this one."""
        return Context(dict(self.bindings), self.config)

    def apply_filter(self, name: str, receiver: Evaluator, params: Sequence[Evaluator]) -> Any:
        """Apply the named filter to the receiver and parameter values.

        Errors from the filter itself are raised as FilterError.
        """
        fn = self.config.filters.get(name)
        if fn is None:
            raise UndefinedFilter(name)
        info = _parameters(fn)
        positional = info[0] if info is not None else []
        args = [receiver(self)]
        for i, param in enumerate(params, start=1):
            if i < len(positional) and positional[i].hint is Closure:
                source = param(self)
                if not isinstance(source, str):
                    raise InterpreterError(f"expected an expression string, got {source!r}")
                from liquid.expr_parser import parse

                args.append(Closure(parse(source), self))
            else:
                args.append(param(self))
        try:
            result = _call(fn, args)
        except Exception as exc:  # noqa: BLE001 - any filter failure is reported the same way
            raise FilterError(name, exc) from exc
        if isinstance(result, (bytes, bytearray)):
            return bytes(result).decode("utf-8")
        return result


@dataclass(frozen=True)
class Expression:
    """A compiled expression."""

    evaluator: Evaluator

    def evaluate(self, ctx: Context) -> Any:
        """Evaluate the expression in ``ctx``."""
        return self.evaluator(ctx)


@dataclass(frozen=True)
class Closure:
    """An expression together with the context it is evaluated in."""

    expr: Expression
    context: Context

    def bind(self, name: str, value: Any) -> Closure:
        """Return a new closure with ``name`` bound to ``value``."""
        ctx = self.context.clone()
        ctx.set(name, value)
        return Closure(self.expr, ctx)

    def evaluate(self) -> Any:
        """Evaluate the expression in the closure's context."""
        return self.expr.evaluate(self.context)


def constant(value: Any) -> Expression:
    """Return an expression that always evaluates to ``value``."""
    return Expression(lambda _ctx: value)


def negation(expr: Expression) -> Expression:
    """Return an expression that is true when ``expr`` is nil or false."""

    def evaluate(ctx: Context) -> bool:
        value = expr.evaluate(ctx)
        return value is None or value is False

    return Expression(evaluate)


# -- evaluator builders used by the expression parser -------------------------


def range_expr(start: Evaluator, end: Evaluator) -> Evaluator:
    """Build ``(start..end)``, inclusive of both ends."""
    return lambda ctx: range(_to_int(start(ctx)), _to_int(end(ctx)) + 1)


def contains_expr(container: Evaluator, item: Evaluator) -> Evaluator:
    """Build ``container contains item``."""
    return lambda ctx: value_contains(container(ctx), item(ctx))


def filter_expr(receiver: Evaluator, name: str, params: Sequence[Evaluator] | None = None) -> Evaluator:
    """Build ``receiver | name: params``."""
    args = list(params or ())
    return lambda ctx: ctx.apply_filter(name, receiver, args)


def index_expr(sequence: Evaluator, index: Evaluator) -> Evaluator:
    """Build ``sequence[index]``."""
    return lambda ctx: index_value(sequence(ctx), index(ctx))


def property_expr(obj: Evaluator, name: str) -> Evaluator:
    """Build ``obj.name``."""
    return lambda ctx: property_value(obj(ctx), name)