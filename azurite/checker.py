"""The type checker: global state, builtins and generic class instantiation."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

from azurite import expressions, statements
from azurite.symbol import Scope, ScopeError, Symbol, SymbolKind
from azurite.syntax import (
    ArrayType,
    AstType,
    ClassField,
    EnumVariant,
    Expr,
    FuncDecl,
    GenericType,
    Program,
    Span,
    Stmt,
    TupleType,
    TypeName,
)
from azurite.types import (
    BOOL,
    FLOAT,
    INT,
    STRING,
    VOID,
    ArrayOf,
    FuncType,
    Instance,
    TupleOf,
    Type,
    type_from_name,
)


@dataclass(frozen=True)
class CheckError:
    """A single type error found in a program."""

    span: Span
    message: str

    def __str__(self) -> str:
        return self.message


class CheckFailed(Exception):
    """Raised when a program has one or more type errors."""

    def __init__(self, errors: Sequence[CheckError]) -> None:
        self.errors = list(errors)
        super().__init__(f"{len(self.errors)} type error(s) found")


def _fn(params: Sequence[Type], ret: Type) -> FuncType:
    return FuncType(params, ret)


_BUILTINS: tuple[tuple[str, FuncType], ...] = (
    ("print", _fn([], VOID)),  # variadic; arguments are not checked
    ("len", _fn([], INT)),
    ("int", _fn([FLOAT], INT)),
    ("float", _fn([INT], FLOAT)),
    ("sqrt", _fn([FLOAT], FLOAT)),
    ("abs", _fn([INT], INT)),
    ("read", _fn([], STRING)),
    ("input", _fn([STRING], STRING)),
    ("exit", _fn([INT], VOID)),
    ("char_at", _fn([STRING, INT], INT)),
    ("chr", _fn([INT], STRING)),
    ("str", _fn([], STRING)),
    ("getenv", _fn([STRING], STRING)),
    ("system", _fn([STRING], INT)),
    ("pid", _fn([], INT)),
    ("cwd", _fn([], STRING)),
    ("sin", _fn([FLOAT], FLOAT)),
    ("cos", _fn([FLOAT], FLOAT)),
    ("tan", _fn([FLOAT], FLOAT)),
    ("pow", _fn([FLOAT, FLOAT], FLOAT)),
    ("log", _fn([FLOAT], FLOAT)),
    ("log10", _fn([FLOAT], FLOAT)),
    ("floor", _fn([FLOAT], FLOAT)),
    ("ceil", _fn([FLOAT], FLOAT)),
    ("asin", _fn([FLOAT], FLOAT)),
    ("acos", _fn([FLOAT], FLOAT)),
    ("atan", _fn([FLOAT], FLOAT)),
    ("atan2", _fn([FLOAT, FLOAT], FLOAT)),
    ("sinh", _fn([FLOAT], FLOAT)),
    ("cosh", _fn([FLOAT], FLOAT)),
    ("tanh", _fn([FLOAT], FLOAT)),
    ("exp", _fn([FLOAT], FLOAT)),
    ("expm1", _fn([FLOAT], FLOAT)),
    ("log2", _fn([FLOAT], FLOAT)),
    ("hypot", _fn([FLOAT, FLOAT], FLOAT)),
    ("fmod", _fn([FLOAT, FLOAT], FLOAT)),
    ("copysign", _fn([FLOAT, FLOAT], FLOAT)),
    ("rand", _fn([], INT)),
    ("srand", _fn([INT], VOID)),
)

_TYPE_SPELLING = {INT: "int", FLOAT: "float", STRING: "string", BOOL: "bool"}


def _spell_primitive(t: Type) -> str:
    """Name a concrete type for substitution; anything unsupported becomes int."""
    return _TYPE_SPELLING.get(t, "int")


class Checker:
    """Checks programs for type errors; state persists between calls."""

    def __init__(self) -> None:
        self.scope = Scope()
        self.errors: list[CheckError] = []
        self.in_function = False
        self.in_loop = 0
        self.expected_return: Optional[Type] = None
        self.generic_classes: dict[str, tuple[list[str], list[ClassField], list[Stmt]]] = {}
        self.concrete_classes: dict[str, list[ClassField]] = {}
        self.enums: dict[str, list[EnumVariant]] = {}
        self.fn_defaults: dict[str, list[Optional[Expr]]] = {}
        self._register_builtins()

    def _register_builtins(self) -> None:
        for name, type_ in _BUILTINS:
            self._declare_function(name, type_)

    def _declare_function(self, name: str, type_: Type) -> None:
        try:
            self.scope.insert(name, Symbol(name, SymbolKind.FUNCTION, type_))
        except ScopeError:
            pass

    def check_program(self, program: Program) -> None:
        """Check every statement; raise CheckFailed listing the errors, if any."""
        self.errors.clear()
        for stmt in program.statements:
            self.check_stmt(stmt)
        if self.errors:
            raise CheckFailed(self.errors)

    def check_stmt(self, stmt: Stmt) -> Optional[Type]:
        return statements.check_stmt(self, stmt)

    def check_expr(self, expr: Expr) -> Optional[Type]:
        return expressions.check_expr(self, expr)

    def error(self, span: Span, message: str) -> None:
        """Record a type error."""
        self.errors.append(CheckError(span, str(message)))

    def resolve_type(self, type_: AstType) -> Optional[Type]:
        """Turn a written type into a checker type, or None if it is unknown."""
        if isinstance(type_, TypeName):
            if type_.name in self.concrete_classes:
                return Instance(type_.name)
            return type_from_name(type_.name)
        if isinstance(type_, GenericType):
            return self.create_concrete_from_generic(type_.name, type_.params)
        if isinstance(type_, ArrayType):
            element = self.resolve_type(type_.element)
            return ArrayOf(element) if element is not None else None
        if isinstance(type_, TupleType):
            resolved = [self.resolve_type(t) for t in type_.elements]
            if any(t is None for t in resolved):
                return None
            return TupleOf(resolved)
        return None

    def subst_ast_type(
        self, ty: AstType, type_params: Sequence[str], concrete_types: Sequence[Type]
    ) -> AstType:
        """Replace type parameters in ``ty`` with the spelling of concrete types."""
        if isinstance(ty, TypeName):
            if ty.name in type_params:
                concrete = concrete_types[list(type_params).index(ty.name)]
                if isinstance(concrete, Instance):
                    return TypeName(concrete.name)
                return TypeName(_spell_primitive(concrete))
            return ty
        if isinstance(ty, GenericType):
            return GenericType(
                ty.name,
                [self.subst_ast_type(p, type_params, concrete_types) for p in ty.params],
            )
        return ty

    def _resolve_substituted(
        self, annotation: Optional[AstType], type_params, concrete_types
    ) -> Type:
        if annotation is None:
            return VOID
        resolved = self.resolve_type(self.subst_ast_type(annotation, type_params, concrete_types))
        return resolved if resolved is not None else VOID

    def create_concrete_from_generic(
        self, base_name: str, params: Sequence[AstType]
    ) -> Optional[Type]:
        """Instantiate generic class ``base_name`` with ``params``, registering its methods."""
        entry = self.generic_classes.get(base_name)
        if entry is None:
            return None
        type_params, fields, methods = entry
        concrete_types: list[Type] = []
        for p in params:
            found = type_from_name(p.name) if isinstance(p, TypeName) else None
            concrete_types.append(found if found is not None else INT)
        suffix = "_".join(str(t) for t in concrete_types)
        concrete_name = f"{base_name}_{suffix}"
        if concrete_name in self.concrete_classes:
            return Instance(concrete_name)

        self.concrete_classes[concrete_name] = [
            ClassField(f.name, self.subst_ast_type(f.type_, type_params, concrete_types))
            for f in fields
        ]
        for method in methods:
            if not isinstance(method, FuncDecl):
                continue
            fn_name = f"{concrete_name}_{method.name.name}"
            param_types = [
                self._resolve_substituted(p.type_annotation, type_params, concrete_types)
                for p in method.params
                if p.name.name != "self"
            ]
            ret = self._resolve_substituted(method.return_type, type_params, concrete_types)
            self._declare_function(fn_name, FuncType(param_types, ret))
            self.fn_defaults[fn_name] = [p.default_value for p in method.params]
        return Instance(concrete_name)

    def instantiate_generic_constructor(
        self, class_name: str, args: Sequence[Expr]
    ) -> Optional[Type]:
        """Infer a generic class's parameters from constructor arguments."""
        entry = self.generic_classes.get(class_name)
        if entry is None:
            return None
        type_params = entry[0]
        concrete_types: list[Type] = []
        for i in range(len(type_params)):
            inferred = self.check_expr(args[i]) if i < len(args) else None
            concrete_types.append(inferred if inferred is not None else INT)
        spelled = [TypeName(_spell_primitive(t)) for t in concrete_types]
        return self.create_concrete_from_generic(class_name, spelled)