"""Symbols and lexical scopes."""

from __future__ import annotations

import enum
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator, Optional

from azurite.types import Type


class SymbolKind(enum.Enum):
    VARIABLE = "variable"
    FUNCTION = "function"


@dataclass
class Symbol:
    name: str
    kind: SymbolKind
    type: Type


class ScopeError(Exception):
    """A name could not be declared in the current scope."""


class Scope:
    """A stack of name tables; lookups search from the innermost outwards."""

    def __init__(self) -> None:
        self._frames: list[dict[str, Symbol]] = [{}]

    @property
    def depth(self) -> int:
        return len(self._frames)

    def push(self) -> None:
        self._frames.append({})

    def pop(self) -> None:
        if self._frames:
            self._frames.pop()

    @contextmanager
    def nested(self) -> Iterator["Scope"]:
        """Open a scope for the duration of a ``with`` block."""
        self.push()
        try:
            yield self
        finally:
            self.pop()

    def insert(self, name: str, symbol: Symbol) -> None:
        """Declare ``name`` in the innermost scope; redeclaring it raises."""
        if not self._frames:
            raise ScopeError("no open scope")
        current = self._frames[-1]
        if name in current:
            raise ScopeError(f"'{name}' is already defined in this scope")
        current[name] = symbol

    def lookup(self, name: str) -> Optional[Symbol]:
        for frame in reversed(self._frames):
            if name in frame:
                return frame[name]
        return None