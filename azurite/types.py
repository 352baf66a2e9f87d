"""Semantic types used by the type checker."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional


class Type:
    """Base class of every checker type."""

    __slots__ = ()

    def is_numeric(self) -> bool:
        """Return True for ``int`` and ``float``."""
        return self == INT or self == FLOAT


@dataclass(frozen=True)
class Primitive(Type):
    """A built-in scalar type such as ``int`` or ``void``."""

    name: str

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class Instance(Type):
    """An instance of a class or an enum."""

    name: str

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class ArrayOf(Type):
    """An array whose elements all have one type."""

    element: Type

    def __str__(self) -> str:
        return f"{self.element}[]"


@dataclass(frozen=True)
class FuncType(Type):
    """A function signature."""

    params: tuple[Type, ...]
    ret: Type

    def __init__(self, params: Iterable[Type], ret: Type) -> None:
        object.__setattr__(self, "params", tuple(params))
        object.__setattr__(self, "ret", ret)

    def __str__(self) -> str:
        joined = ", ".join(str(p) for p in self.params)
        return f"func({joined}) -> {self.ret}"


@dataclass(frozen=True)
class TupleOf(Type):
    """A fixed-length tuple of types."""

    elements: tuple[Type, ...]

    def __init__(self, elements: Iterable[Type]) -> None:
        object.__setattr__(self, "elements", tuple(elements))

    def __str__(self) -> str:
        return "(" + ", ".join(str(t) for t in self.elements) + ")"


INT = Primitive("int")
FLOAT = Primitive("float")
STRING = Primitive("string")
BOOL = Primitive("bool")
NULL = Primitive("null")
VOID = Primitive("void")
ANY = Primitive("any")

_BY_NAME = {t.name: t for t in (INT, FLOAT, STRING, BOOL, NULL, VOID, ANY)}


def type_from_name(name: str) -> Optional[Type]:
    """Return the primitive type spelled ``name``, or None if there is none."""
    return _BY_NAME.get(name)