"""Type rules for expressions."""

from __future__ import annotations

from typing import Optional, Sequence

from azurite.members import resolve_instance_field, resolve_instance_method
from azurite.syntax import (
    ArrayLit,
    Binary,
    BinOp,
    Block,
    BoolLit,
    Call,
    CharLit,
    EnumVariantExpr,
    EnumVariantPattern,
    Expr,
    FieldAccess,
    FloatLit,
    Ident,
    IdentPattern,
    IfExpr,
    Index,
    IntLit,
    Match,
    MethodCall,
    NullLit,
    Range,
    SelfExpr,
    Slice,
    Span,
    StringLit,
    SuperExpr,
    TupleExpr,
    Unary,
    UnOp,
    WhileExpr,
    WildcardPattern,
)
from azurite.types import (
    ANY,
    BOOL,
    FLOAT,
    INT,
    NULL,
    STRING,
    VOID,
    ArrayOf,
    FuncType,
    Instance,
    TupleOf,
    Type,
)

_ARITHMETIC = {BinOp.ADD, BinOp.SUB, BinOp.MUL, BinOp.DIV, BinOp.MOD}
_EQUALITY = {BinOp.EQ, BinOp.NEQ}
_ORDERING = {BinOp.LT, BinOp.GT, BinOp.LE, BinOp.GE}
_LOGICAL = {BinOp.AND, BinOp.OR}
_BITWISE = {BinOp.BIT_AND, BinOp.BIT_OR, BinOp.BIT_XOR, BinOp.SHL, BinOp.SHR}

_IS_TYPE_NAMES = {
    "int": INT,
    "float": FLOAT,
    "string": STRING,
    "bool": BOOL,
    "void": VOID,
    "null": NULL,
}

_IS_TARGETS = (STRING, INT, FLOAT, BOOL, NULL, VOID)


def _is_enum_variant(c, name: str, variant: str) -> bool:
    variants = c.enums.get(name)
    return variants is not None and any(v.name.name == variant for v in variants)


def _enum_of(c, obj: Expr, obj_type: Optional[Type], member: str) -> Optional[Type]:
    """Return the enum instance type if ``obj.member`` names an enum variant."""
    if obj_type == VOID and isinstance(obj, Ident) and _is_enum_variant(c, obj.name, member):
        return Instance(obj.name)
    return None


def _required_args(params: Sequence[Type], defaults) -> int:
    if defaults is None:
        return len(params)
    return sum(1 for i in range(len(params)) if i >= len(defaults) or defaults[i] is None)


def _check_args(c, params: Sequence[Type], args: Sequence[Expr]) -> None:
    for number, arg in enumerate(args, start=1):
        actual = c.check_expr(arg)
        if number <= len(params) and actual is not None:
            expected = params[number - 1]
            if actual != expected:
                c.error(arg.span, f"arg {number}: expected '{expected}', got '{actual}'")


def _check_field_access(c, expr: FieldAccess) -> Optional[Type]:
    obj_type = c.check_expr(expr.obj)
    if expr.null_safe and obj_type == NULL:
        return NULL
    variant = _enum_of(c, expr.obj, obj_type, expr.field)
    if variant is not None:
        return variant
    if obj_type is None:
        return None
    return resolve_instance_field(c, obj_type, expr.field, expr.span)


def _check_constructor(c, expr: MethodCall) -> tuple[bool, Optional[Type]]:
    """Handle ``Class.new(...)``; the flag says whether the call was handled."""
    obj = expr.obj
    if expr.method != "new" or not isinstance(obj, Ident):
        return False, None
    if obj.name in c.generic_classes:
        return True, c.instantiate_generic_constructor(obj.name, expr.args)
    if obj.name in c.concrete_classes:
        symbol = c.scope.lookup(f"{obj.name}_{expr.method}")
        if symbol is not None and isinstance(symbol.type, FuncType):
            _check_args(c, symbol.type.params, expr.args)
            return True, symbol.type.ret
    return False, None


def _check_method_call(c, expr: MethodCall) -> Optional[Type]:
    span = expr.obj.span
    handled, result = _check_constructor(c, expr)
    if handled:
        return result
    obj_type = c.check_expr(expr.obj)
    if expr.null_safe and obj_type == NULL:
        return NULL
    variant = _enum_of(c, expr.obj, obj_type, expr.method)
    if variant is not None:
        for arg in expr.args:
            c.check_expr(arg)
        return variant
    if obj_type is None:
        for arg in expr.args:
            c.check_expr(arg)
        return None
    return resolve_instance_method(c, obj_type, expr.method, expr.args, span)


def _check_array(c, expr: ArrayLit) -> Optional[Type]:
    elem_type: Optional[Type] = None
    for element in expr.elements:
        t = c.check_expr(element)
        if elem_type is None:
            elem_type = t
    return ArrayOf(elem_type) if elem_type is not None else None


def _check_index(c, expr: Index) -> Optional[Type]:
    c.check_expr(expr.index)
    obj_type = c.check_expr(expr.obj)
    if obj_type is None:
        return None
    if isinstance(obj_type, ArrayOf):
        return obj_type.element
    c.error(expr.obj.span, f"cannot index '{obj_type}'")
    return None


def _check_slice(c, expr: Slice) -> Optional[Type]:
    c.check_expr(expr.start)
    c.check_expr(expr.end)
    obj_type = c.check_expr(expr.obj)
    if obj_type is None:
        return None
    if obj_type == STRING or isinstance(obj_type, ArrayOf):
        return obj_type
    c.error(expr.span, f"cannot slice '{obj_type}'")
    return None


def _check_match(c, expr: Match) -> Type:
    value_type = c.check_expr(expr.value)
    if isinstance(value_type, Instance) and value_type.name in c.enums:
        variants = c.enums[value_type.name]
        has_wildcard = any(
            isinstance(arm.pattern, (WildcardPattern, IdentPattern)) for arm in expr.arms
        )
        if not has_wildcard:
            covered = {
                arm.pattern.variant
                for arm in expr.arms
                if isinstance(arm.pattern, EnumVariantPattern)
            }
            missing = [v.name.name for v in variants if v.name.name not in covered]
            if missing:
                listed = ", ".join(f'"{name}"' for name in missing)
                c.error(expr.span, f"non-exhaustive match: missing variants [{listed}]")
    for arm in expr.arms:
        c.check_expr(arm.body)
    return VOID


def _check_ident(c, expr: Ident) -> Optional[Type]:
    symbol = c.scope.lookup(expr.name)
    if symbol is not None:
        return symbol.type
    if expr.name in c.generic_classes or expr.name in c.concrete_classes or expr.name in c.enums:
        return VOID
    c.error(expr.span, f"undefined '{expr.name}'")
    return None


def _check_is(c, expr: Binary, span: Span) -> Optional[Type]:
    left = c.check_expr(expr.left)
    target: Optional[Type] = None
    if isinstance(expr.right, Ident):
        name = expr.right.name
        target = _IS_TYPE_NAMES.get(name)
        if target is None and (name in c.concrete_classes or name in c.enums):
            target = Instance(name)
    if target is None:
        c.error(span, "unknown type in 'is' expression")
        return None
    if left is not None and left == target:
        return BOOL
    shown = str(left) if left is not None else ""
    c.error(span, f"type mismatch: '{shown}' is not '{target}'")
    return None


def _check_binary_op(
    c, left: Optional[Type], right: Optional[Type], op: BinOp, span: Span
) -> Optional[Type]:
    lt = left if left is not None else VOID
    rt = right if right is not None else VOID
    if op in _ARITHMETIC:
        if lt == ANY or rt == ANY:
            return ANY
        if lt.is_numeric() and rt.is_numeric():
            return FLOAT if FLOAT in (lt, rt) else INT
        if op is BinOp.ADD and lt == STRING and rt == STRING:
            return STRING
        c.error(span, f"cannot apply '{op}' to '{lt}' and '{rt}'")
        return None
    if op in _EQUALITY:
        if lt == rt or (lt.is_numeric() and rt.is_numeric()):
            return BOOL
        c.error(span, f"cannot compare '{lt}' with '{rt}'")
        return None
    if op in _ORDERING:
        if lt.is_numeric() and rt.is_numeric():
            return BOOL
        c.error(span, f"cannot compare '{lt}' with '{rt}'")
        return None
    if op in _LOGICAL:
        if lt == BOOL and rt == BOOL:
            return BOOL
        c.error(span, f"cannot apply '{op}' to '{lt}' and '{rt}'")
        return None
    if op is BinOp.ASSIGN:
        if lt == rt or lt == NULL or lt == ANY or rt == ANY:
            return rt
        c.error(span, f"cannot assign '{rt}' to '{lt}'")
        return None
    if op in _BITWISE:
        if lt == INT and rt == INT:
            return INT
        c.error(span, "bitwise op requires ints")
        return None
    if rt in _IS_TARGETS or isinstance(rt, Instance):
        return BOOL
    c.error(span, f"cannot use 'is' with '{rt}'")
    return None


def _check_unary_op(c, operand: Optional[Type], op: UnOp, span: Span) -> Optional[Type]:
    t = operand if operand is not None else VOID
    if op is UnOp.NEG:
        if t.is_numeric():
            return t
        c.error(span, f"cannot negate '{t}'")
        return None
    if t == BOOL:
        return BOOL
    c.error(span, f"cannot apply 'not' to '{t}'")
    return None


def _check_call(c, expr: Call) -> Optional[Type]:
    span = expr.callee.span
    callee_type = c.check_expr(expr.callee)
    if callee_type is None:
        return None
    if not isinstance(callee_type, FuncType):
        c.error(span, f"cannot call '{callee_type}'")
        return None
    defaults = c.fn_defaults.get(expr.callee.name) if isinstance(expr.callee, Ident) else None
    required = _required_args(callee_type.params, defaults)
    if len(callee_type.params) > len(expr.args) and len(expr.args) < required:
        c.error(span, f"expected at least {required} args, got {len(expr.args)}")
    _check_args(c, callee_type.params, expr.args)
    return callee_type.ret


def _check_block(c, expr: Block) -> Optional[Type]:
    last: Optional[Type] = None
    with c.scope.nested():
        for stmt in expr.statements:
            t = c.check_stmt(stmt)
            if t is not None:
                last = t
    return last


def _check_if(c, expr: IfExpr) -> Optional[Type]:
    c.check_expr(expr.condition)
    then_type = c.check_expr(expr.then_branch)
    else_type = c.check_expr(expr.else_branch) if expr.else_branch is not None else None
    return then_type if then_type is not None else else_type


def _check_while(c, expr: WhileExpr) -> Type:
    c.in_loop += 1
    try:
        c.check_expr(expr.condition)
        c.check_expr(expr.body)
    finally:
        c.in_loop -= 1
    return VOID


def _check_tuple(c, expr: TupleExpr) -> Optional[Type]:
    types = [c.check_expr(e) for e in expr.elements]
    if any(t is None for t in types):
        return None
    return TupleOf(types)


def check_expr(c, expr: Expr) -> Optional[Type]:
    """Check ``expr`` against checker ``c`` and return its type, or None if unknown."""
    match expr:
        case IntLit() | CharLit():
            return INT
        case FloatLit():
            return FLOAT
        case StringLit():
            return STRING
        case BoolLit():
            return BOOL
        case NullLit():
            return NULL
        case SelfExpr() | SuperExpr():
            return VOID
        case FieldAccess():
            return _check_field_access(c, expr)
        case MethodCall():
            return _check_method_call(c, expr)
        case EnumVariantExpr():
            for arg in expr.args:
                c.check_expr(arg)
            return Instance(expr.enum_name) if expr.enum_name in c.enums else VOID
        case ArrayLit():
            return _check_array(c, expr)
        case Index():
            return _check_index(c, expr)
        case Slice():
            return _check_slice(c, expr)
        case Match():
            return _check_match(c, expr)
        case Range():
            c.check_expr(expr.start)
            c.check_expr(expr.end)
            return VOID
        case Ident():
            return _check_ident(c, expr)
        case Binary():
            span = expr.left.span
            if expr.op is BinOp.IS:
                return _check_is(c, expr, span)
            left = c.check_expr(expr.left)
            right = c.check_expr(expr.right)
            return _check_binary_op(c, left, right, expr.op, span)
        case Unary():
            operand = c.check_expr(expr.operand)
            return _check_unary_op(c, operand, expr.op, expr.operand.span)
        case Call():
            return _check_call(c, expr)
        case Block():
            return _check_block(c, expr)
        case IfExpr():
            return _check_if(c, expr)
        case WhileExpr():
            return _check_while(c, expr)
        case TupleExpr():
            return _check_tuple(c, expr)
    raise TypeError(f"unknown expression: {expr!r}")