"""Syntax tree consumed by the type checker."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Optional, Union


@dataclass(frozen=True)
class Span:
    """A source location."""

    start: int = 0
    end: int = 0
    line: int = 0
    column: int = 0


@dataclass
class _ExprNode:
    span: Span = field(default_factory=Span, kw_only=True)


# ---------------------------------------------------------------- type syntax


@dataclass
class TypeName:
    name: str


@dataclass
class GenericType:
    name: str
    params: list["AstType"] = field(default_factory=list)


@dataclass
class ArrayType:
    element: "AstType"
    size: Optional[int] = None


@dataclass
class TupleType:
    elements: list["AstType"] = field(default_factory=list)


AstType = Union[TypeName, GenericType, ArrayType, TupleType]


# ---------------------------------------------------------------- operators


class BinOp(enum.Enum):
    ADD = "+"
    SUB = "-"
    MUL = "*"
    DIV = "/"
    MOD = "%"
    EQ = "=="
    NEQ = "!="
    LT = "<"
    GT = ">"
    LE = "<="
    GE = ">="
    AND = "and"
    OR = "or"
    ASSIGN = "="
    BIT_AND = "&"
    BIT_OR = "|"
    BIT_XOR = "^"
    SHL = "<<"
    SHR = ">>"
    IS = "is"

    def __str__(self) -> str:
        return self.value


class UnOp(enum.Enum):
    NEG = "-"
    NOT = "not"

    def __str__(self) -> str:
        return self.value


# ---------------------------------------------------------------- expressions


@dataclass
class Ident(_ExprNode):
    name: str


@dataclass
class IntLit(_ExprNode):
    value: int


@dataclass
class FloatLit(_ExprNode):
    value: float


@dataclass
class StringLit(_ExprNode):
    value: str


@dataclass
class CharLit(_ExprNode):
    value: str


@dataclass
class BoolLit(_ExprNode):
    value: bool


@dataclass
class NullLit(_ExprNode):
    pass


@dataclass
class SelfExpr(_ExprNode):
    pass


@dataclass
class SuperExpr(_ExprNode):
    pass


@dataclass
class FieldAccess(_ExprNode):
    obj: "Expr"
    field: str
    null_safe: bool = False


@dataclass
class MethodCall(_ExprNode):
    obj: "Expr"
    method: str
    args: list["Expr"] = field(default_factory=list)
    null_safe: bool = False


@dataclass
class EnumVariantExpr(_ExprNode):
    enum_name: str
    variant: str
    args: list["Expr"] = field(default_factory=list)


@dataclass
class ArrayLit(_ExprNode):
    elements: list["Expr"] = field(default_factory=list)


@dataclass
class Index(_ExprNode):
    obj: "Expr"
    index: "Expr"


@dataclass
class Slice(_ExprNode):
    obj: "Expr"
    start: "Expr"
    end: "Expr"


@dataclass
class WildcardPattern:
    pass


@dataclass
class IdentPattern:
    name: str


@dataclass
class EnumVariantPattern:
    enum_name: str
    variant: str
    bindings: list[str] = field(default_factory=list)


Pattern = Union[WildcardPattern, IdentPattern, EnumVariantPattern]


@dataclass
class MatchArm:
    pattern: Pattern
    body: "Expr"


@dataclass
class Match(_ExprNode):
    value: "Expr"
    arms: list[MatchArm] = field(default_factory=list)


@dataclass
class Range(_ExprNode):
    start: "Expr"
    end: "Expr"


@dataclass
class Binary(_ExprNode):
    left: "Expr"
    op: BinOp
    right: "Expr"


@dataclass
class Unary(_ExprNode):
    op: UnOp
    operand: "Expr"


@dataclass
class Call(_ExprNode):
    callee: "Expr"
    args: list["Expr"] = field(default_factory=list)


@dataclass
class Block(_ExprNode):
    statements: list["Stmt"] = field(default_factory=list)


@dataclass
class IfExpr(_ExprNode):
    condition: "Expr"
    then_branch: "Expr"
    else_branch: Optional["Expr"] = None


@dataclass
class WhileExpr(_ExprNode):
    condition: "Expr"
    body: "Expr"


@dataclass
class TupleExpr(_ExprNode):
    elements: list["Expr"] = field(default_factory=list)


Expr = Union[
    Ident, IntLit, FloatLit, StringLit, CharLit, BoolLit, NullLit, SelfExpr,
    SuperExpr, FieldAccess, MethodCall, EnumVariantExpr, ArrayLit, Index, Slice,
    Match, Range, Binary, Unary, Call, Block, IfExpr, WhileExpr, TupleExpr,
]


# ---------------------------------------------------------------- statements


@dataclass
class Param:
    name: Ident
    type_annotation: Optional[AstType] = None
    default_value: Optional[Expr] = None
    vararg: bool = False


@dataclass
class ClassField:
    name: Ident
    type_: AstType


@dataclass
class EnumVariant:
    name: Ident
    fields: list[AstType] = field(default_factory=list)


@dataclass
class Let:
    name: Ident
    value: Expr
    type_annotation: Optional[AstType] = None


@dataclass
class Import:
    path: str


@dataclass
class EnumDecl:
    name: Ident
    variants: list[EnumVariant] = field(default_factory=list)


@dataclass
class ClassDecl:
    name: Ident
    type_params: list[str] = field(default_factory=list)
    parent: Optional[str] = None
    fields: list[ClassField] = field(default_factory=list)
    methods: list["Stmt"] = field(default_factory=list)


@dataclass
class FuncDecl:
    name: Ident
    params: list[Param] = field(default_factory=list)
    return_type: Optional[AstType] = None
    body: Expr = field(default_factory=Block)


@dataclass
class Return:
    value: Optional[Expr] = None


@dataclass
class Break:
    pass


@dataclass
class Continue:
    pass


@dataclass
class IfStmt:
    condition: Expr
    then_branch: Expr
    else_branch: Optional[Expr] = None


@dataclass
class WhileStmt:
    condition: Expr
    body: Expr


@dataclass
class ForStmt:
    name: Ident
    iterable: Expr
    body: Expr


@dataclass
class ExprStmt:
    expr: Expr


@dataclass
class TryStmt:
    try_block: Expr
    catch_var: Ident
    catch_block: Expr


@dataclass
class Throw:
    value: Expr


@dataclass
class Destructure:
    names: list[Ident]
    value: Expr


Stmt = Union[
    Let, Import, EnumDecl, ClassDecl, FuncDecl, Return, Break, Continue,
    IfStmt, WhileStmt, ForStmt, ExprStmt, TryStmt, Throw, Destructure,
]


@dataclass
class Program:
    statements: list[Stmt] = field(default_factory=list)