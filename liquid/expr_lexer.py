"""Tokenizer for the expression language used inside objects and tags."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum, auto
from typing import Any, Iterator


class TokenKind(Enum):
    """The kind of an expression token."""

    LITERAL = auto()
    IDENTIFIER = auto()
    KEYWORD = auto()
    PROPERTY = auto()
    ASSIGN = auto()
    CYCLE = auto()
    LOOP = auto()
    WHEN = auto()
    EQ = auto()
    NEQ = auto()
    GE = auto()
    LE = auto()
    IN = auto()
    AND = auto()
    OR = auto()
    CONTAINS = auto()
    DOTDOT = auto()
    CHAR = auto()


@dataclass(frozen=True)
class Lexeme:
    """A token: its kind, a literal value (or the character itself) and a name."""

    kind: TokenKind
    value: Any = None
    name: str = ""


_TOKEN_RE = re.compile(
    r"""
    (?P<ws>\s+)
    |(?P<assign>%assign\ )
    |(?P<cycle>\{%cycle\ )
    |(?P<loop>%loop\ )
    |(?P<when>\{%when\ )
    |(?P<string>"[^"]*"|'[^']*')
    |(?P<float>-?\d+\.\d+)
    |(?P<int>-?\d+)
    |(?P<op>==|!=|>=|<=|\.\.)
    |(?P<keyword>[A-Za-z_][\w-]*\??:)
    |(?P<property>\.[A-Za-z_][\w-]*\??)
    |(?P<ident>[A-Za-z_][\w-]*\??)
    |(?P<char>.)
    """,
    re.VERBOSE | re.DOTALL | re.ASCII,
)

_STATEMENTS = {
    "assign": TokenKind.ASSIGN,
    "cycle": TokenKind.CYCLE,
    "loop": TokenKind.LOOP,
    "when": TokenKind.WHEN,
}

_OPERATORS = {
    "==": TokenKind.EQ,
    "!=": TokenKind.NEQ,
    ">=": TokenKind.GE,
    "<=": TokenKind.LE,
    "..": TokenKind.DOTDOT,
}

_WORDS = {
    "and": TokenKind.AND,
    "or": TokenKind.OR,
    "contains": TokenKind.CONTAINS,
    "in": TokenKind.IN,
}

_LITERAL_WORDS = {"true": True, "false": False, "nil": None}


def _lexemes(source: str) -> Iterator[Lexeme]:
    for match in _TOKEN_RE.finditer(source):
        group = match.lastgroup
        text = match.group()
        if group == "ws":
            continue
        if group in _STATEMENTS:
            yield Lexeme(_STATEMENTS[group])
        elif group == "string":
            yield Lexeme(TokenKind.LITERAL, text[1:-1])
        elif group == "float":
            yield Lexeme(TokenKind.LITERAL, float(text))
        elif group == "int":
            yield Lexeme(TokenKind.LITERAL, int(text))
        elif group == "op":
            yield Lexeme(_OPERATORS[text])
        elif group == "keyword":
            yield Lexeme(TokenKind.KEYWORD, name=text[:-1])
        elif group == "property":
            yield Lexeme(TokenKind.PROPERTY, name=text[1:])
        elif group == "ident":
            if text in _LITERAL_WORDS:
                yield Lexeme(TokenKind.LITERAL, _LITERAL_WORDS[text])
            elif text in _WORDS:
                yield Lexeme(_WORDS[text])
            else:
                yield Lexeme(TokenKind.IDENTIFIER, name=text)
        else:
            yield Lexeme(TokenKind.CHAR, text)


def lex(source: str) -> list[Lexeme]:
    """Break an expression into a list of lexemes."""
    return list(_lexemes(source))