"""Tokens produced by the template scanner."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum


class TokenType(Enum):
    """The kind of a template token."""

    TEXT = "TextTokenType"
    TAG = "TagTokenType"
    OBJ = "ObjTokenType"
    TRIM_LEFT = "TrimLeftTokenType"
    TRIM_RIGHT = "TrimRightTokenType"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class SourceLoc:
    """A source location: a path in the local file system and a line number."""

    pathname: str = ""
    line_no: int = 0

    def is_zero(self) -> bool:
        """Return True if neither a path nor a line number is set."""
        return self.pathname == "" and self.line_no == 0

    def __str__(self) -> str:
        if self.pathname:
            return f"{self.pathname}:{self.line_no}"
        return f"line {self.line_no}"


def _quote(text: str) -> str:
    return json.dumps(text, ensure_ascii=False)


@dataclass
class Token:
    """An object ``{{ a.b }}``, a tag ``{% if a > b %}``, a text chunk, or a trim marker.

    ``name`` is the tag name of a tag, ``args`` its arguments (or the expression
    of an object), and ``source`` the whole token including its delimiters.
    """

    type: TokenType
    source_loc: SourceLoc = field(default_factory=SourceLoc)
    name: str = ""
    args: str = ""
    source: str = ""

    def source_location(self) -> SourceLoc:
        """Return the token's source location, for error reporting."""
        return self.source_loc

    def source_text(self) -> str:
        """Return the token's source text, for error reporting."""
        return self.source

    def __str__(self) -> str:
        if self.type is TokenType.TAG:
            return f"{self.type}{{Tag:{_quote(self.name)}, Args:{_quote(self.args)}}}"
        if self.type is TokenType.OBJ:
            return f"{self.type}{{{_quote(self.args)}}}"
        if self.type in (TokenType.TRIM_LEFT, TokenType.TRIM_RIGHT):
            return "-"
        return f"{self.type}{{{_quote(self.source)}}}"