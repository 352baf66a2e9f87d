import pytest

from azurite.expressions import check_expr
from azurite.statements import check_stmt
from azurite.symbol import Scope, Symbol, SymbolKind
from azurite.syntax import (
    ArrayLit,
    ArrayType,
    Binary,
    BinOp,
    Block,
    BoolLit,
    Break,
    Call,
    CharLit,
    ClassField,
    EnumVariant,
    EnumVariantExpr,
    EnumVariantPattern,
    ExprStmt,
    FieldAccess,
    FloatLit,
    Ident,
    IfExpr,
    Index,
    IntLit,
    Let,
    Match,
    MatchArm,
    MethodCall,
    NullLit,
    Range,
    SelfExpr,
    Slice,
    StringLit,
    TupleExpr,
    TypeName,
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
    type_from_name,
)


class _Ctx:
    def __init__(self):
        self.scope = Scope()
        self.errors = []
        self.in_function = False
        self.in_loop = 0
        self.expected_return = None
        self.generic_classes = {}
        self.concrete_classes = {}
        self.enums = {}
        self.fn_defaults = {}
        self.generic_calls = []

    def error(self, span, message):
        self.errors.append(message)

    def check_expr(self, expr):
        return check_expr(self, expr)

    def check_stmt(self, stmt):
        return check_stmt(self, stmt)

    def resolve_type(self, type_):
        if isinstance(type_, TypeName):
            if type_.name in self.concrete_classes:
                return Instance(type_.name)
            return type_from_name(type_.name)
        if isinstance(type_, ArrayType):
            inner = self.resolve_type(type_.element)
            return ArrayOf(inner) if inner is not None else None
        return None

    def instantiate_generic_constructor(self, class_name, args):
        self.generic_calls.append(class_name)
        return Instance(class_name + "_generic")

    def declare(self, name, type_, kind=SymbolKind.VARIABLE):
        self.scope.insert(name, Symbol(name, kind, type_))


@pytest.fixture
def ctx():
    return _Ctx()


@pytest.mark.parametrize(
    "expr, expected",
    [
        (IntLit(1), INT),
        (FloatLit(1.5), FLOAT),
        (StringLit("s"), STRING),
        (CharLit("a"), INT),
        (BoolLit(True), BOOL),
        (NullLit(), NULL),
        (SelfExpr(), VOID),
    ],
)
def test_literals(ctx, expr, expected):
    assert check_expr(ctx, expr) == expected
    assert ctx.errors == []


def test_undefined_identifier(ctx):
    assert check_expr(ctx, Ident("x")) is None
    assert ctx.errors == ["undefined 'x'"]


def test_class_name_identifier_is_void(ctx):
    ctx.concrete_classes["Point"] = []
    assert check_expr(ctx, Ident("Point")) == VOID
    assert ctx.errors == []


@pytest.mark.parametrize(
    "left, right, expected",
    [
        (IntLit(1), IntLit(2), INT),
        (IntLit(1), FloatLit(2.0), FLOAT),
        (StringLit("a"), StringLit("b"), STRING),
    ],
)
def test_addition(ctx, left, right, expected):
    assert check_expr(ctx, Binary(left, BinOp.ADD, right)) == expected
    assert ctx.errors == []


def test_string_subtraction_is_rejected(ctx):
    assert check_expr(ctx, Binary(StringLit("a"), BinOp.SUB, StringLit("b"))) is None
    assert len(ctx.errors) == 1
    assert ctx.errors[0].startswith("cannot apply")


def test_any_operand_gives_any(ctx):
    ctx.declare("a", ANY)
    result = check_expr(ctx, Binary(Ident("a"), BinOp.MUL, IntLit(3)))
    assert result == ANY
    assert str(result) == "any"
    assert ctx.errors == []
    reversed_result = check_expr(ctx, Binary(StringLit("s"), BinOp.SUB, Ident("a")))
    assert str(reversed_result) == "any"
    assert ctx.errors == []


def test_ordering_and_equality(ctx):
    assert check_expr(ctx, Binary(IntLit(1), BinOp.LT, FloatLit(2.0))) == BOOL
    assert check_expr(ctx, Binary(IntLit(1), BinOp.EQ, FloatLit(2.0))) == BOOL
    assert ctx.errors == []
    assert check_expr(ctx, Binary(StringLit("a"), BinOp.LT, StringLit("b"))) is None
    assert check_expr(ctx, Binary(IntLit(1), BinOp.EQ, StringLit("b"))) is None
    assert all(e.startswith("cannot compare") for e in ctx.errors)
    assert len(ctx.errors) == 2


def test_logical_requires_bools(ctx):
    assert check_expr(ctx, Binary(BoolLit(True), BinOp.AND, BoolLit(False))) == BOOL
    assert check_expr(ctx, Binary(BoolLit(True), BinOp.OR, IntLit(1))) is None
    assert len(ctx.errors) == 1


def test_assign_to_null_takes_right_type(ctx):
    assert check_expr(ctx, Binary(NullLit(), BinOp.ASSIGN, IntLit(1))) == INT
    assert check_expr(ctx, Binary(IntLit(1), BinOp.ASSIGN, StringLit("s"))) is None
    assert ctx.errors == ["cannot assign 'string' to 'int'"]


def test_bitwise_requires_ints(ctx):
    assert check_expr(ctx, Binary(IntLit(1), BinOp.SHL, IntLit(2))) == INT
    assert check_expr(ctx, Binary(FloatLit(1.0), BinOp.BIT_AND, IntLit(2))) is None
    assert ctx.errors == ["bitwise op requires ints"]


def test_is_expression(ctx):
    ctx.declare("n", INT)
    assert check_expr(ctx, Binary(Ident("n"), BinOp.IS, Ident("int"))) == BOOL
    assert ctx.errors == []
    assert check_expr(ctx, Binary(Ident("n"), BinOp.IS, Ident("string"))) is None
    assert ctx.errors == ["type mismatch: 'int' is not 'string'"]


def test_is_with_unknown_type(ctx):
    ctx.declare("n", INT)
    assert check_expr(ctx, Binary(Ident("n"), BinOp.IS, Ident("Nope"))) is None
    assert ctx.errors == ["unknown type in 'is' expression"]


def test_unary(ctx):
    assert check_expr(ctx, Unary(UnOp.NEG, FloatLit(1.0))) == FLOAT
    assert check_expr(ctx, Unary(UnOp.NOT, BoolLit(True))) == BOOL
    assert ctx.errors == []
    assert check_expr(ctx, Unary(UnOp.NOT, IntLit(1))) is None
    assert check_expr(ctx, Unary(UnOp.NEG, StringLit("s"))) is None
    assert ctx.errors == ["cannot apply 'not' to 'int'", "cannot negate 'string'"]


def test_call_checks_argument_types(ctx):
    ctx.declare("f", FuncType([INT], STRING), SymbolKind.FUNCTION)
    assert check_expr(ctx, Call(Ident("f"), [FloatLit(1.0)])) == STRING
    assert ctx.errors == ["arg 1: expected 'int', got 'float'"]


def test_call_missing_arguments(ctx):
    ctx.declare("f", FuncType([INT], VOID), SymbolKind.FUNCTION)
    assert check_expr(ctx, Call(Ident("f"), [])) == VOID
    assert ctx.errors == ["expected at least 1 args, got 0"]


def test_call_defaults_allow_fewer_arguments(ctx):
    ctx.declare("f", FuncType([INT], VOID), SymbolKind.FUNCTION)
    ctx.fn_defaults["f"] = [IntLit(0)]
    assert check_expr(ctx, Call(Ident("f"), [])) == VOID
    assert ctx.errors == []


def test_calling_non_function(ctx):
    ctx.declare("n", INT)
    assert check_expr(ctx, Call(Ident("n"), [])) is None
    assert ctx.errors == ["cannot call 'int'"]


def test_array_literal(ctx):
    assert check_expr(ctx, ArrayLit([IntLit(1), IntLit(2)])) == ArrayOf(INT)
    assert check_expr(ctx, ArrayLit([])) is None


def test_index(ctx):
    ctx.declare("xs", ArrayOf(STRING))
    ctx.declare("n", INT)
    assert check_expr(ctx, Index(Ident("xs"), IntLit(0))) == STRING
    assert check_expr(ctx, Index(Ident("n"), IntLit(0))) is None
    assert ctx.errors == ["cannot index 'int'"]


def test_slice(ctx):
    ctx.declare("s", STRING)
    ctx.declare("n", INT)
    assert check_expr(ctx, Slice(Ident("s"), IntLit(0), IntLit(1))) == STRING
    assert check_expr(ctx, Slice(Ident("n"), IntLit(0), IntLit(1))) is None
    assert ctx.errors == ["cannot slice 'int'"]


def test_tuple(ctx):
    assert check_expr(ctx, TupleExpr([IntLit(1), StringLit("a")])) == TupleOf([INT, STRING])
    assert check_expr(ctx, TupleExpr([IntLit(1), Ident("missing")])) is None


def test_block_scope_is_closed_and_returns_last_type(ctx):
    block = Block([Let(Ident("inner"), IntLit(1)), ExprStmt(StringLit("s"))])
    assert check_expr(ctx, block) == STRING
    assert ctx.scope.lookup("inner") is None
    assert ctx.scope.depth == 1


def test_if_expression_prefers_then_type(ctx):
    assert check_expr(ctx, IfExpr(BoolLit(True), IntLit(1), StringLit("s"))) == INT
    assert check_expr(ctx, IfExpr(BoolLit(True), Block([]), StringLit("s"))) == STRING


def test_while_allows_break_and_restores_loop_depth(ctx):
    loop = WhileExpr(BoolLit(True), Block([Break()]))
    assert check_expr(ctx, loop) == VOID
    assert ctx.in_loop == 0
    assert ctx.errors == []


def test_range_is_void(ctx):
    assert check_expr(ctx, Range(IntLit(0), IntLit(3))) == VOID


def _color(ctx):
    ctx.enums["Color"] = [EnumVariant(Ident("Red")), EnumVariant(Ident("Green"))]
    ctx.declare("c", Instance("Color"))


def test_match_non_exhaustive(ctx):
    _color(ctx)
    arms = [MatchArm(EnumVariantPattern("Color", "Red"), IntLit(1))]
    assert check_expr(ctx, Match(Ident("c"), arms)) == VOID
    assert len(ctx.errors) == 1
    assert ctx.errors[0].startswith("non-exhaustive match: missing variants")
    assert '"Green"' in ctx.errors[0]
    assert '"Red"' not in ctx.errors[0]


def test_match_with_wildcard_is_exhaustive(ctx):
    _color(ctx)
    arms = [MatchArm(WildcardPattern(), IntLit(1))]
    assert check_expr(ctx, Match(Ident("c"), arms)) == VOID
    assert ctx.errors == []


def test_enum_variant_access(ctx):
    _color(ctx)
    assert check_expr(ctx, FieldAccess(Ident("Color"), "Red")) == Instance("Color")
    assert check_expr(ctx, MethodCall(Ident("Color"), "Green", [])) == Instance("Color")
    assert ctx.errors == []


def test_enum_variant_expr(ctx):
    _color(ctx)
    assert check_expr(ctx, EnumVariantExpr("Color", "Red")) == Instance("Color")
    assert check_expr(ctx, EnumVariantExpr("Shape", "Circle")) == VOID


def _point(ctx):
    ctx.concrete_classes["Point"] = [ClassField(Ident("x"), TypeName("int"))]
    ctx.declare("p", Instance("Point"))


def test_field_access(ctx):
    _point(ctx)
    assert check_expr(ctx, FieldAccess(Ident("p"), "x")) == INT
    assert check_expr(ctx, FieldAccess(Ident("p"), "z")) is None
    assert ctx.errors == ["no field 'z' on 'Point'"]


def test_null_safe_access_on_null(ctx):
    ctx.declare("nothing", NULL)
    assert check_expr(ctx, FieldAccess(Ident("nothing"), "x", null_safe=True)) == NULL
    assert check_expr(ctx, MethodCall(Ident("nothing"), "m", [], null_safe=True)) == NULL
    assert ctx.errors == []


def test_instance_method_call(ctx):
    _point(ctx)
    ctx.declare("Point_norm", FuncType([], FLOAT), SymbolKind.FUNCTION)
    assert check_expr(ctx, MethodCall(Ident("p"), "norm", [])) == FLOAT
    assert check_expr(ctx, MethodCall(Ident("p"), "nope", [])) is None
    assert ctx.errors == ["no method 'nope' on 'Point'"]


def test_constructor_call(ctx):
    _point(ctx)
    ctx.declare("Point_new", FuncType([INT], Instance("Point")), SymbolKind.FUNCTION)
    assert check_expr(ctx, MethodCall(Ident("Point"), "new", [IntLit(1)])) == Instance("Point")
    assert ctx.errors == []
    assert check_expr(ctx, MethodCall(Ident("Point"), "new", [StringLit("s")])) == Instance("Point")
    assert ctx.errors == ["arg 1: expected 'int', got 'string'"]


def test_generic_constructor_is_delegated(ctx):
    ctx.generic_classes["Box"] = (["T"], [], [])
    result = check_expr(ctx, MethodCall(Ident("Box"), "new", [IntLit(1)]))
    assert result == Instance("Box_generic")
    assert ctx.generic_calls == ["Box"]


def test_array_methods(ctx):
    ctx.declare("xs", ArrayOf(INT))
    assert check_expr(ctx, MethodCall(Ident("xs"), "push", [IntLit(1)])) == VOID
    assert check_expr(ctx, MethodCall(Ident("xs"), "len", [])) == INT
    assert check_expr(ctx, MethodCall(Ident("xs"), "pop", [])) == INT
    assert ctx.errors == []


def test_method_on_unknown_object_checks_args(ctx):
    assert check_expr(ctx, MethodCall(Ident("ghost"), "m", [Ident("other")])) is None
    assert ctx.errors == ["undefined 'ghost'", "undefined 'other'"]