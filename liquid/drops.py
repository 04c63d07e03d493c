"""Objects that present themselves to templates as a different value."""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class Drop(Protocol):
    """An object that templates see as the value of its ``to_liquid`` method."""

    def to_liquid(self) -> Any:
        """Return the value that templates should see in place of this object."""
        ...


def from_drop(obj: Any) -> Any:
    """Return ``obj.to_liquid()`` if ``obj`` is a drop, else ``obj`` itself."""
    if isinstance(obj, Drop):
        return obj.to_liquid()
    return obj