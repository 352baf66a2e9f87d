"""Type rules for field access and method calls on values."""

from __future__ import annotations

from typing import Optional, Sequence

from azurite.syntax import Expr, Ident, Span
from azurite.types import BOOL, INT, VOID, ArrayOf, FuncType, Instance, Type

_SIMPLE_ARRAY_METHODS = {
    "len": INT,
    "is_empty": BOOL,
    "clear": VOID,
    "reverse": VOID,
    "sort": VOID,
}


def _required_args(params: Sequence[Type], defaults: Optional[Sequence[Optional[Expr]]]) -> int:
    """Count parameters that have no default value."""
    if defaults is None:
        return len(params)
    return sum(1 for i in range(len(params)) if i >= len(defaults) or defaults[i] is None)


def _check_call_args(c, fn_name: str, sig: FuncType, args: Sequence[Expr], span: Span) -> None:
    required = _required_args(sig.params, c.fn_defaults.get(fn_name))
    if len(sig.params) > len(args) and len(args) < required:
        c.error(span, f"expected at least {required} args, got {len(args)}")
    for number, (arg, expected) in enumerate(zip(args, sig.params), start=1):
        actual = c.check_expr(arg)
        if actual is not None and actual != expected:
            c.error(arg.span, f"arg {number}: expected '{expected}', got '{actual}'")
    for arg in args[len(sig.params):]:
        c.check_expr(arg)


def resolve_instance_field(c, instance: Type, field: str, span: Span) -> Optional[Type]:
    """Return the type of ``field`` on ``instance``, reporting an error if there is none."""
    if not isinstance(instance, Instance):
        c.error(span, "cannot access field on non-instance")
        return None
    fields = c.concrete_classes.get(instance.name) or []
    found = next((f for f in fields if f.name.name == field), None)
    if found is None:
        c.error(span, f"no field '{field}' on '{instance.name}'")
        return None
    return c.resolve_type(found.type_)


def _function_argument(c, arg: Expr) -> Optional[tuple[str, Optional[Type]]]:
    if not isinstance(arg, Ident):
        return None
    symbol = c.scope.lookup(arg.name)
    return arg.name, (symbol.type if symbol is not None else None)


def _array_method(c, elem: Type, method: str, args: Sequence[Expr], span: Span) -> Optional[Type]:
    if method in _SIMPLE_ARRAY_METHODS:
        for arg in args:
            c.check_expr(arg)
        return _SIMPLE_ARRAY_METHODS[method]

    if method in ("map", "filter"):
        if len(args) != 1:
            c.error(span, f"'{method}' takes 1 arg (function), got {len(args)}")
            return None
        named = _function_argument(c, args[0])
        if named is None:
            c.error(span, f"'{method}' requires a function name")
            return None
        fn_name, fn_type = named
        if not isinstance(fn_type, FuncType):
            c.error(span, f"'{fn_name}' is not a function")
            return None
        if len(fn_type.params) != 1:
            c.error(span, f"'{method}' function must take 1 arg, got {len(fn_type.params)}")
            return None
        if fn_type.params[0] != elem:
            c.error(span, f"'{method}' function takes '{fn_type.params[0]}', expected '{elem}'")
            return None
        if method == "map":
            return ArrayOf(fn_type.ret)
        if fn_type.ret != BOOL:
            c.error(span, "'filter' function must return bool")
            return None
        return ArrayOf(elem)

    if method == "reduce":
        if len(args) != 2:
            c.error(span, f"'reduce' takes 2 args (initial, function), got {len(args)}")
            return None
        init_type = c.check_expr(args[0])
        if init_type != elem:
            c.error(span, f"initial value must be '{elem}', got '{init_type or VOID}'")
        named = _function_argument(c, args[1])
        if named is None:
            c.error(span, "'reduce' second arg must be a function name")
            return elem
        fn_name, fn_type = named
        if not isinstance(fn_type, FuncType):
            c.error(span, f"'{fn_name}' is not a function")
        elif len(fn_type.params) != 2:
            c.error(span, f"'reduce' function must take 2 args, got {len(fn_type.params)}")
        elif fn_type.params[0] != elem or fn_type.params[1] != elem:
            first, second = fn_type.params
            c.error(
                span,
                f"'reduce' function takes '({first}, {second})', expected '({elem}, {elem})'",
            )
        elif fn_type.ret != elem:
            c.error(span, f"'reduce' function must return '{elem}', got '{fn_type.ret}'")
        return elem

    if method in ("push", "contains"):
        if len(args) != 1:
            c.error(span, f"'{method}' takes 1 arg, got {len(args)}")
        else:
            arg_type = c.check_expr(args[0])
            if arg_type != elem:
                c.error(span, f"expected '{elem}', got '{arg_type or VOID}'")
        return VOID if method == "push" else BOOL

    if method == "pop":
        if args:
            c.error(span, f"'pop' takes 0 args, got {len(args)}")
        return elem

    if method == "insert":
        if len(args) != 2:
            c.error(span, f"'insert' takes 2 args, got {len(args)}")
        else:
            if c.check_expr(args[0]) != INT:
                c.error(span, "first arg must be int")
            value_type = c.check_expr(args[1])
            if value_type != elem:
                c.error(span, f"expected '{elem}', got '{value_type or VOID}'")
        return VOID

    if method == "remove":
        if len(args) != 1:
            c.error(span, f"'remove' takes 1 arg, got {len(args)}")
        elif c.check_expr(args[0]) != INT:
            c.error(span, "first arg must be int")
        return elem

    c.error(span, f"no method '{method}' on array")
    return None


def resolve_instance_method(
    c, instance: Type, method: str, args: Sequence[Expr], span: Span
) -> Optional[Type]:
    """Check a method call on ``instance`` and return its result type."""
    if isinstance(instance, Instance):
        fn_name = f"{instance.name}_{method}"
        symbol = c.scope.lookup(fn_name)
        if symbol is None:
            c.error(span, f"no method '{method}' on '{instance.name}'")
            return None
        if not isinstance(symbol.type, FuncType):
            c.error(span, "not a function")
            return None
        _check_call_args(c, fn_name, symbol.type, args, span)
        return symbol.type.ret
    if isinstance(instance, ArrayOf):
        return _array_method(c, instance.element, method, args, span)
    c.error(span, "cannot call method on non-instance")
    return None