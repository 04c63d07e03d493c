"""Parse template source into an abstract syntax tree."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Protocol, Sequence

from liquid.errors import SourceError, located_error, wrap_error
from liquid.evaluation import Config, Expression
from liquid.expr_parser import parse as parse_expression
from liquid.scanner import scan
from liquid.tokens import SourceLoc, Token, TokenType


class BlockSyntax(Protocol):
    """Syntax information about a block tag, supplied to the parser."""

    def is_block(self) -> bool: ...

    def can_have_parent(self, parent: BlockSyntax) -> bool: ...

    def is_block_end(self) -> bool: ...

    def is_block_start(self) -> bool: ...

    def is_clause(self) -> bool: ...

    def parent_tags(self) -> list[str]: ...

    def requires_parent(self) -> bool: ...

    def tag_name(self) -> str: ...


class Grammar(Protocol):
    """Supplies the parser with the syntax of block tags."""

    def block_syntax(self, name: str) -> BlockSyntax | None:
        """Return the syntax of the named block tag, or None if it is not a block."""
        ...


class TrimDirection(Enum):
    """The side on which a trim marker removes whitespace."""

    LEFT = "left"
    RIGHT = "right"


class _Located:
    token: Token

    def source_location(self) -> SourceLoc:
        return self.token.source_location()

    def source_text(self) -> str:
        return self.token.source_text()


class _Sourceless:
    def source_location(self) -> SourceLoc:
        raise RuntimeError("unexpected call on sourceless node")

    def source_text(self) -> str:
        raise RuntimeError("unexpected call on sourceless node")


@dataclass
class ASTBlock(_Located):
    """A ``{% tag %}…{% endtag %}`` block, or one of its clauses."""

    token: Token
    syntax: Any = None
    body: list[Any] = field(default_factory=list)
    clauses: list[ASTBlock] = field(default_factory=list)

    @property
    def name(self) -> str:
        return self.token.name


@dataclass
class ASTRaw(_Sourceless):
    """The text between the start and end of a raw tag."""

    slices: list[str] = field(default_factory=list)


@dataclass
class ASTTag(_Located):
    """A tag that is neither a block start nor a block end."""

    token: Token


@dataclass
class ASTText(_Located):
    """A span of text, rendered verbatim."""

    token: Token


@dataclass
class ASTObject(_Located):
    """An ``{{ object }}`` with its compiled expression."""

    token: Token
    expr: Expression


@dataclass
class ASTSeq(_Sourceless):
    """A sequence of nodes."""

    children: list[Any] = field(default_factory=list)


@dataclass
class ASTTrim(_Sourceless):
    """A whitespace trim marker."""

    direction: TrimDirection


def _quote(text: str) -> str:
    return json.dumps(text, ensure_ascii=False)


@dataclass
class ParserConfig:
    """Configuration for parsing: expression config, grammar and delimiters."""

    config: Config = field(default_factory=Config)
    grammar: Grammar | None = None
    delims: Sequence[str] | None = None

    def parse(self, source: str, loc: SourceLoc | None = None) -> ASTSeq:
        """Parse template source into an AST root; raises SourceError."""
        return self._parse_tokens(scan(source, loc, self.delims))

    def _parse_tokens(self, tokens: list[Token]) -> ASTSeq:
        root = ASTSeq()
        target: list[Any] = root.children
        syntax: Any = None
        block: ASTBlock | None = None
        stack: list[tuple[Any, ASTBlock | None, list[Any]]] = []
        raw: ASTRaw | None = None
        in_comment = in_raw = False

        for tok in tokens:
            if in_comment:
                if tok.type is TokenType.TAG and tok.name == "endcomment":
                    in_comment = False
            elif in_raw:
                if tok.type is TokenType.TAG and tok.name == "endraw":
                    in_raw = False
                elif raw is not None:
                    raw.slices.append(tok.source)
            elif tok.type is TokenType.OBJ:
                try:
                    expr = parse_expression(tok.args)
                except Exception as exc:  # noqa: BLE001
                    raise wrap_error(exc, tok) from exc
                target.append(ASTObject(tok, expr))
            elif tok.type is TokenType.TEXT:
                target.append(ASTText(tok))
            elif tok.type is TokenType.TAG:
                if self.grammar is None:
                    raise located_error(tok, "no grammar is configured")
                cs = self.grammar.block_syntax(tok.name)
                if cs is None:
                    target.append(ASTTag(tok))
                elif tok.name == "comment":
                    in_comment = True
                elif tok.name == "raw":
                    in_raw = True
                    raw = ASTRaw()
                    target.append(raw)
                elif cs.requires_parent() and (syntax is None or not cs.can_have_parent(syntax)):
                    suffix = f"; immediate parent is {syntax.tag_name()}" if syntax is not None else ""
                    raise located_error(
                        tok, f"{tok.name} not inside {' or '.join(cs.parent_tags())}{suffix}"
                    )
                elif cs.is_block_start():
                    stack.append((syntax, block, target))
                    syntax, block = cs, ASTBlock(tok, cs)
                    target.append(block)
                    target = block.body
                elif cs.is_clause():
                    if block is None:
                        raise located_error(tok, f"{tok.name} is not inside a block")
                    clause = ASTBlock(tok, cs)
                    block.clauses.append(clause)
                    target = clause.body
                elif cs.is_block_end():
                    if not stack:
                        raise located_error(tok, f"unexpected {tok.name}")
                    syntax, block, target = stack.pop()
                else:
                    raise located_error(tok, f"block type {_quote(tok.name)}")
            elif tok.type is TokenType.TRIM_LEFT:
                target.append(ASTTrim(TrimDirection.LEFT))
            elif tok.type is TokenType.TRIM_RIGHT:
                target.append(ASTTrim(TrimDirection.RIGHT))

        if block is not None:
            raise located_error(block, f"unterminated {_quote(block.name)} block")
        return root


__all__ = [
    "ASTBlock",
    "ASTObject",
    "ASTRaw",
    "ASTSeq",
    "ASTTag",
    "ASTText",
    "ASTTrim",
    "BlockSyntax",
    "Grammar",
    "ParserConfig",
    "SourceError",
    "TrimDirection",
]