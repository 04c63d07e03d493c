"""Break template source into text, object and tag tokens."""

from __future__ import annotations

import re
from dataclasses import replace
from functools import lru_cache
from typing import Sequence

from liquid.tokens import SourceLoc, Token, TokenType

DEFAULT_DELIMS = ("{{", "}}", "{%", "%}")


def _resolve_delims(delims: Sequence[str] | None) -> tuple[str, str, str, str]:
    if delims is None or len(delims) != 4:
        return DEFAULT_DELIMS
    obj_left, obj_right, tag_left, tag_right = (
        given or default for given, default in zip(delims, DEFAULT_DELIMS)
    )
    return obj_left, obj_right, tag_left, tag_right


@lru_cache(maxsize=32)
def _token_matcher(delims: tuple[str, str, str, str]) -> re.Pattern[str]:
    obj_left, obj_right, tag_left, tag_right = delims
    # Tag arguments may not contain anything that looks like the start of the
    # closing delimiter; for "%}" this is "[^%]|%[^}]".
    exclusion = "|".join(
        f"{re.escape(tag_right[:i])}[^{re.escape(ch)}]" for i, ch in enumerate(tag_right)
    )
    pattern = (
        rf"{re.escape(obj_left)}-?\s*(.+?)\s*-?{re.escape(obj_right)}"
        rf"|{re.escape(tag_left)}-?\s*(\w+)(?:\s+((?:{exclusion})+?))?\s*-?{re.escape(tag_right)}"
    )
    return re.compile(pattern, re.ASCII)


def scan(
    data: str,
    loc: SourceLoc | None = None,
    delims: Sequence[str] | None = None,
) -> list[Token]:
    """Break ``data`` into a list of tokens.

    ``delims`` is (object left, object right, tag left, tag right); anything but
    four strings selects the defaults, and an empty string stands for its default.
    """
    loc = loc if loc is not None else SourceLoc()
    resolved = _resolve_delims(delims)
    obj_left, obj_right, tag_left, tag_right = resolved
    tokens: list[Token] = []
    pos = 0

    for match in _token_matcher(resolved).finditer(data):
        start, end = match.span()
        if pos < start:
            text = data[pos:start]
            tokens.append(Token(TokenType.TEXT, loc, source=text))
            loc = replace(loc, line_no=loc.line_no + text.count("\n"))
        source = match.group(0)
        if match.group(1) is not None:
            left, right = obj_left, obj_right
            token = Token(TokenType.OBJ, loc, args=match.group(1), source=source)
        else:
            left, right = tag_left, tag_right
            token = Token(
                TokenType.TAG,
                loc,
                name=match.group(2),
                args=match.group(3) or "",
                source=source,
            )
        if source[len(left)] == "-":
            tokens.append(Token(TokenType.TRIM_LEFT))
        tokens.append(token)
        if source[-len(right) - 1] == "-":
            tokens.append(Token(TokenType.TRIM_RIGHT))
        loc = replace(loc, line_no=loc.line_no + source.count("\n"))
        pos = end

    if pos < len(data):
        tokens.append(Token(TokenType.TEXT, loc, source=data[pos:]))
    return tokens