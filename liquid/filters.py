"""The standard Liquid filters."""

from __future__ import annotations

import json
import math
import re
from collections.abc import Mapping
from datetime import date, datetime
from functools import cmp_to_key
from typing import Any, Protocol
from urllib.parse import quote_plus, unquote_plus

from dateutil import parser as date_parser

from liquid.evaluation import property_value, value_less


class FilterDictionary(Protocol):
    def add_filter(self, name: str, fn: Any) -> None: ...


def _text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _is_empty(value: Any) -> bool:
    if isinstance(value, (str, list, tuple, dict, Mapping, set, frozenset, range)):
        return len(value) == 0
    return False


def _compare(a: Any, b: Any) -> int:
    if value_less(a, b):
        return -1
    if value_less(b, a):
        return 1
    return 0


def sort_filter(array: list, key: Any = None) -> list:
    """Return a sorted copy; with ``key``, sort by that property, nil first."""
    result = list(array)
    if key is None:
        result.sort(key=cmp_to_key(_compare))
        return result
    name = _text(key)

    def by_property(a: Any, b: Any) -> int:
        pa, pb = property_value(a, name), property_value(b, name)
        if pa is None or pb is None:
            return (pa is not None) - (pb is not None)
        return _compare(pa, pb)

    result.sort(key=cmp_to_key(by_property))
    return result


def sort_natural_filter(array: list, key: Any = None) -> list:
    """Return a copy sorted case-insensitively."""
    result = list(array)
    if not result:
        return result
    if key is not None:

        def prop(item: Any) -> str:
            if isinstance(item, Mapping):
                value = item.get(key)
                if isinstance(value, str):
                    return value.lower()
            return ""

        result.sort(key=prop)
    elif isinstance(result[0], str):
        result.sort(key=lambda s: s.upper())
    return result


def join_filter(array: list, sep: str = " ") -> str:
    """Join the non-nil items with ``sep``."""
    return sep.join(_text(item) for item in array if item is not None)


def reverse_filter(array: list) -> list:
    """Return the items in reverse order."""
    return list(reversed(array))


def split_filter(s: str, sep: str) -> list:
    """Split ``s``; a single space splits on runs of whitespace. Trailing empties are dropped."""
    if sep == " ":
        result = re.split(r"[ \t\n\v\f\r]+", s)
    elif sep == "":
        result = list(s)
    else:
        result = s.split(sep)
    while result and result[-1] == "":
        result.pop()
    return result


def uniq_filter(array: list) -> list:
    """Return the items with duplicates removed, keeping first occurrences."""
    result: list = []
    for item in array:
        if not any(type(other) is type(item) and other == item for other in result):
            result.append(item)
    return result


def _escape(s: str) -> str:
    return (
        s.replace("&", "&amp;")
        .replace("'", "&#39;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace('"', "&#34;")
    )


def _unescape(s: str) -> str:
    import html

    return html.unescape(s)


def _to_datetime(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if isinstance(value, str):
        return date_parser.parse(value)
    raise ValueError(f"can't convert {value!r} to a date")


_DIRECTIVE = re.compile(r"%([-_0^]?)([A-Za-z%])")


def _strftime(fmt: str, t: datetime) -> str:
    def directive(m: re.Match[str]) -> str:
        flag, conv = m.groups()
        if conv == "%":
            return "%"
        text = f"{t.day:2d}" if conv == "e" else t.strftime("%" + conv)
        if flag == "-":
            text = text.lstrip("0 ") or "0"
        elif flag == "^":
            text = text.upper()
        return text

    return _DIRECTIVE.sub(directive, fmt)


def _default(value: Any, default_value: Any) -> Any:
    if value is None or value is False or _is_empty(value):
        return default_value
    return value


def _json(a: Any) -> str:
    try:
        return json.dumps(a, separators=(",", ":"), sort_keys=True, ensure_ascii=False)
    except (TypeError, ValueError):
        return ""


def _compact(a: list) -> list:
    return [item for item in a if item is not None]


def _concat(a: list, b: list) -> list:
    return [*a, *b]


def _map(a: list, key: str) -> list:
    return [property_value(obj, key) for obj in a]


def _first(a: list) -> Any:
    return a[0] if a else None


def _last(a: list) -> Any:
    return a[-1] if a else None


def _date(t: Any, fmt: str = "%a, %b %d, %y") -> str:
    return _strftime(fmt, _to_datetime(t))


def _abs(a: float) -> float:
    return math.fabs(a)


def _ceil(a: float) -> int:
    return math.ceil(a)


def _floor(a: float) -> int:
    return math.floor(a)


def _modulo(a: float, b: float) -> float:
    return math.fmod(a, b)


def _minus(a: float, b: float) -> float:
    return a - b


def _plus(a: float, b: float) -> float:
    return a + b


def _times(a: float, b: float) -> float:
    return a * b


def _divided_by(a: float, b: Any) -> Any:
    if isinstance(b, int) and not isinstance(b, bool):
        if b == 0:
            raise ZeroDivisionError("division by zero")
        n = int(a)
        q = abs(n) // abs(b)
        return q if (n >= 0) == (b > 0) else -q
    if isinstance(b, float):
        if b == 0:
            raise ZeroDivisionError("division by zero")
        return a / b
    raise ValueError(f"invalid divisor: '{_text(b)}'")


def _round(n: float, places: int = 0) -> float:
    exp = 10.0**places
    return math.floor(n * exp + 0.5) / exp


def _size(value: Any) -> int:
    if isinstance(value, (str, list, tuple, Mapping, range)):
        return len(value)
    return 0


def _append(s: str, suffix: str) -> str:
    return s + suffix


def _capitalize(s: str) -> str:
    return s[:1].upper() + s[1:]


def _downcase(s: str) -> str:
    return s.lower()


def _upcase(s: str) -> str:
    return s.upper()


def _escape_filter(s: str) -> str:
    return _escape(s)


def _escape_once(s: str) -> str:
    return _escape(_unescape(s))


def _newline_to_br(s: str) -> str:
    return s.replace("\n", "<br />")


def _prepend(s: str, prefix: str) -> str:
    return prefix + s


def _remove(s: str, old: str) -> str:
    return s.replace(old, "")


def _remove_first(s: str, old: str) -> str:
    return s.replace(old, "", 1)


def _replace(s: str, old: str, new: str) -> str:
    return s.replace(old, new)


def _replace_first(s: str, old: str, new: str) -> str:
    return s.replace(old, new, 1)


def _slice(s: str, start: int, length: int = 1) -> str:
    if not s:
        return ""
    if start < 0:
        start += len(s)
    if start < 0:
        return ""
    return s[start:start + length]


def _strip_html(s: str) -> str:
    return re.sub(r"<.*?>", "", s)


def _strip_newlines(s: str) -> str:
    return s.replace("\n", "")


def _strip(s: str) -> str:
    return s.strip()


def _lstrip(s: str) -> str:
    return s.lstrip()


def _rstrip(s: str) -> str:
    return s.rstrip()


def _truncate(s: str, length: int = 50, ellipsis: str = "...") -> str:
    pattern = re.compile(rf"^(.{{{length - len(ellipsis)}}})..{{{len(ellipsis)},}}")
    return pattern.sub(lambda m: m.group(1) + ellipsis, s)


def _truncatewords(s: str, length: int = 15, ellipsis: str = "...") -> str:
    m = re.match(rf"(?:\s*\S+){{{length}}}", s)
    if m is None or m.group() == "":
        return s
    return m.group() + ellipsis


def _url_encode(s: str) -> str:
    return quote_plus(s)


def _url_decode(s: str) -> str:
    return unquote_plus(s)


def _inspect(value: Any) -> str:
    try:
        return json.dumps(value, separators=(",", ":"), sort_keys=True, ensure_ascii=False)
    except (TypeError, ValueError):
        return repr(value)


_TYPE_NAMES = {str: "string", float: "float64", type(None): "<nil>"}


def _type(value: Any) -> str:
    return _TYPE_NAMES.get(type(value), type(value).__name__)


def add_standard_filters(fd: FilterDictionary) -> None:
    """Define the standard Liquid filters in ``fd``."""
    filters = {
        "default": _default,
        "json": _json,
        "compact": _compact,
        "concat": _concat,
        "join": join_filter,
        "map": _map,
        "reverse": reverse_filter,
        "sort": sort_filter,
        "first": _first,
        "last": _last,
        "uniq": uniq_filter,
        "date": _date,
        "abs": _abs,
        "ceil": _ceil,
        "floor": _floor,
        "modulo": _modulo,
        "minus": _minus,
        "plus": _plus,
        "times": _times,
        "divided_by": _divided_by,
        "round": _round,
        "size": _size,
        "append": _append,
        "capitalize": _capitalize,
        "downcase": _downcase,
        "escape": _escape_filter,
        "escape_once": _escape_once,
        "newline_to_br": _newline_to_br,
        "prepend": _prepend,
        "remove": _remove,
        "remove_first": _remove_first,
        "replace": _replace,
        "replace_first": _replace_first,
        "sort_natural": sort_natural_filter,
        "slice": _slice,
        "split": split_filter,
        "strip_html": _strip_html,
        "strip_newlines": _strip_newlines,
        "strip": _strip,
        "lstrip": _lstrip,
        "rstrip": _rstrip,
        "truncate": _truncate,
        "truncatewords": _truncatewords,
        "upcase": _upcase,
        "url_encode": _url_encode,
        "url_decode": _url_decode,
        "inspect": _inspect,
        "type": _type,
    }
    for name, fn in filters.items():
        fd.add_filter(name, fn)