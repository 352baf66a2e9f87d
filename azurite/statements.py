"""Type rules for statements."""

from __future__ import annotations

from typing import Optional

from azurite.symbol import ScopeError, Symbol, SymbolKind
from azurite.syntax import (
    Break,
    ClassDecl,
    Continue,
    Destructure,
    EnumDecl,
    ExprStmt,
    ForStmt,
    FuncDecl,
    Ident,
    IfStmt,
    Import,
    Let,
    NullLit,
    Param,
    Return,
    Span,
    Stmt,
    Throw,
    TryStmt,
    WhileStmt,
)
from azurite.types import ANY, INT, NULL, STRING, VOID, FuncType, Instance, TupleOf, Type


def _declare(c, ident: Ident, kind: SymbolKind, type_: Type) -> None:
    try:
        c.scope.insert(ident.name, Symbol(ident.name, kind, type_))
    except ScopeError as exc:
        c.error(ident.span, str(exc))


def _param_type(c, param: Param) -> Type:
    if param.type_annotation is None:
        return VOID
    resolved = c.resolve_type(param.type_annotation)
    return resolved if resolved is not None else VOID


def _return_type(c, annotation) -> Type:
    if annotation is None:
        return VOID
    resolved = c.resolve_type(annotation)
    return resolved if resolved is not None else VOID


def _check_let(c, stmt: Let) -> Optional[Type]:
    inferred = c.check_expr(stmt.value)
    declared = c.resolve_type(stmt.type_annotation) if stmt.type_annotation is not None else None
    if declared is not None:
        if inferred is not None and inferred != declared and declared != ANY:
            c.error(stmt.name.span, f"type mismatch: expected '{declared}', got '{inferred}'")
        result: Optional[Type] = declared
    else:
        if inferred == NULL and not isinstance(stmt.value, NullLit):
            c.error(stmt.name.span, f"cannot infer type for 'let {stmt.name.name}'")
        result = inferred
    if result is not None:
        _declare(c, stmt.name, SymbolKind.VARIABLE, result)
    return result


def _check_class(c, stmt: ClassDecl) -> None:
    if stmt.type_params:
        c.generic_classes[stmt.name.name] = (
            list(stmt.type_params),
            list(stmt.fields),
            list(stmt.methods),
        )
        return
    class_name = stmt.name.name
    c.concrete_classes[class_name] = list(stmt.fields)
    for method in stmt.methods:
        if not isinstance(method, FuncDecl):
            continue
        fn_name = f"{class_name}_{method.name.name}"
        params = [
            _param_type(c, p)
            for p in method.params
            if p.name.name != "self" and not p.vararg
        ]
        if method.name.name == "new":
            ret: Type = Instance(class_name)
        else:
            ret = _return_type(c, method.return_type)
        try:
            c.scope.insert(fn_name, Symbol(fn_name, SymbolKind.FUNCTION, FuncType(params, ret)))
        except ScopeError as exc:
            c.error(stmt.name.span, str(exc))
        c.fn_defaults[fn_name] = [p.default_value for p in method.params]


def _check_func(c, stmt: FuncDecl) -> None:
    with c.scope.nested():
        for param in stmt.params:
            _declare(c, param.name, SymbolKind.VARIABLE, _param_type(c, param))
        ret = _return_type(c, stmt.return_type)
        c.in_function = True
        c.expected_return = ret
        try:
            c.check_expr(stmt.body)
        finally:
            c.in_function = False
            c.expected_return = None
    params = [_param_type(c, p) for p in stmt.params if not p.vararg]
    _declare(c, stmt.name, SymbolKind.FUNCTION, FuncType(params, ret))
    c.fn_defaults[stmt.name.name] = [p.default_value for p in stmt.params]


def _check_return(c, stmt: Return) -> Optional[Type]:
    actual = c.check_expr(stmt.value) if stmt.value is not None else None
    span = stmt.value.span if stmt.value is not None else Span()
    expected = c.expected_return
    if expected is not None:
        if actual is not None and actual != expected:
            c.error(span, f"expected '{expected}', got '{actual}'")
        elif actual is None and expected != VOID:
            c.error(span, f"expected return type '{expected}'")
    return actual


def _in_loop(c, *exprs) -> None:
    c.in_loop += 1
    try:
        for expr in exprs:
            c.check_expr(expr)
    finally:
        c.in_loop -= 1


def _check_destructure(c, stmt: Destructure) -> Optional[Type]:
    value_type = c.check_expr(stmt.value)
    if value_type is None:
        return None
    if not isinstance(value_type, TupleOf):
        c.error(stmt.value.span, f"cannot destructure '{value_type}'")
        return None
    elements = value_type.elements
    if len(elements) != len(stmt.names):
        c.error(
            stmt.value.span,
            f"tuple has {len(elements)} elements, but {len(stmt.names)} names given",
        )
    for i, name in enumerate(stmt.names):
        element = elements[i] if i < len(elements) else VOID
        _declare(c, name, SymbolKind.VARIABLE, element)
    return VOID


def check_stmt(c, stmt: Stmt) -> Optional[Type]:
    """Check one statement against checker ``c`` and return its type, if any."""
    match stmt:
        case Let():
            return _check_let(c, stmt)
        case Import():
            return None
        case EnumDecl(name=name, variants=variants):
            c.enums[name.name] = list(variants)
            return None
        case ClassDecl():
            _check_class(c, stmt)
            return None
        case FuncDecl():
            _check_func(c, stmt)
            return None
        case Return():
            return _check_return(c, stmt)
        case Break() | Continue():
            if c.in_loop == 0:
                c.error(Span(), "'break'/'continue' outside loop")
            return None
        case IfStmt(condition=cond, then_branch=then, else_branch=other):
            c.check_expr(cond)
            c.check_expr(then)
            if other is not None:
                c.check_expr(other)
            return None
        case WhileStmt(condition=cond, body=body):
            _in_loop(c, cond, body)
            return None
        case ForStmt(name=name, iterable=iterable, body=body):
            c.check_expr(iterable)
            with c.scope.nested():
                _declare(c, name, SymbolKind.VARIABLE, INT)
                _in_loop(c, body)
            return None
        case ExprStmt(expr=expr):
            return c.check_expr(expr)
        case TryStmt(try_block=try_block, catch_var=catch_var, catch_block=catch_block):
            with c.scope.nested():
                c.check_expr(try_block)
            with c.scope.nested():
                try:
                    c.scope.insert(
                        catch_var.name,
                        Symbol(catch_var.name, SymbolKind.VARIABLE, STRING),
                    )
                except ScopeError:
                    pass
                c.check_expr(catch_block)
            return None
        case Throw(value=value):
            c.check_expr(value)
            return None
        case Destructure():
            return _check_destructure(c, stmt)
    raise TypeError(f"unknown statement: {stmt!r}")