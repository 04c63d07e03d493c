"""Errors that carry a template source location."""

from __future__ import annotations

from typing import Any

from liquid.tokens import SourceLoc


class SourceError(Exception):
    """An error with a source location, the offending source text and an optional cause."""

    def __init__(
        self,
        message: str,
        loc: SourceLoc | None = None,
        context: str = "",
        cause: BaseException | None = None,
    ) -> None:
        self.message = message
        self.loc = loc if loc is not None else SourceLoc()
        self.context = context
        self.cause = cause
        super().__init__(self._describe())
        if cause is not None:
            self.__cause__ = cause

    def path(self) -> str:
        """Return the pathname of the source, or an empty string."""
        return self.loc.pathname

    def line_number(self) -> int:
        """Return the source line number, or 0 if unknown."""
        return self.loc.line_no

    def _describe(self) -> str:
        line = f" (line {self.loc.line_no})" if self.loc.line_no > 0 else ""
        locative = f" in {self.loc.pathname}" if self.loc.pathname else f" in {self.context}"
        return f"Liquid error{line}: {self.message}{locative}"

    def __str__(self) -> str:
        return self._describe()


def located_error(loc: Any, message: str) -> SourceError:
    """Create a SourceError at the location of ``loc``.

    ``loc`` is anything with ``source_location()`` and ``source_text()`` methods,
    such as a Token.
    """
    return SourceError(message, loc.source_location(), loc.source_text())


def wrap_error(err: BaseException | None, loc: Any) -> SourceError | None:
    """Wrap ``err`` in a SourceError located at ``loc``.

    A SourceError that already has a path, or a ``loc`` without location
    information, leaves ``err`` as it is. A SourceError without a path is
    re-wrapped around its cause.
    """
    if err is None:
        return None
    if isinstance(err, SourceError):
        if err.path() or loc.source_location().is_zero():
            return err
        if err.cause is not None:
            err = err.cause
    wrapped = located_error(loc, str(err))
    wrapped.cause = err
    wrapped.__cause__ = err
    return wrapped