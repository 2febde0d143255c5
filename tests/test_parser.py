try:
    from context import *
except ImportError:
    pass

import pytest

from fix_ast import Call, ExpressionFragment, OperatorOccurrence
from fix_ops import PRELUDE, Fixity, Operator, OperatorTable
from fix_lexer import tokenize
from fix_parser import (
    IllegalExpression,
    MissingOperand,
    Resolver,
    StructuralViolation,
    build_call,
)


ARITH = OperatorTable(
    [
        Operator("^", Fixity.RIGHT, 8, "pow"),
        Operator("*", Fixity.LEFT, 7, "mul"),
        Operator("+", Fixity.LEFT, 6, "add"),
        Operator("-", Fixity.LEFT, 6, "sub"),
        Operator("==", Fixity.NONE, 4, "eq"),
        Operator("<", Fixity.NONE, 4, "lt"),
    ]
)


def _flatten(expr):
    if isinstance(expr, ExpressionFragment):
        return expr.text
    elif isinstance(expr, Call):
        return [expr.function, _flatten(expr.left), _flatten(expr.right)]
    else:
        raise TypeError(f"Unknown type '{type(expr)}' in _flatten")


def _frag(text):
    return ExpressionFragment(tokenize(text))


def _resolve(source, table=ARITH):
    return _flatten(Resolver(table).resolve(source))


def test_left_associativity():
    assert _resolve("a - b - c") == ["sub", ["sub", "a", "b"], "c"]
    assert _resolve("a + b - c") == ["sub", ["add", "a", "b"], "c"]


def test_right_associativity():
    assert _resolve("a ^ b ^ c") == ["pow", "a", ["pow", "b", "c"]]


def test_precedence():
    assert _resolve("a + b * c") == ["add", "a", ["mul", "b", "c"]]
    assert _resolve("a * b + c") == ["add", ["mul", "a", "b"], "c"]


def test_expr_multiprec():
    assert _resolve("a + b * c ^ d ^ e - f") == [
        "sub",
        ["add", "a", ["mul", "b", ["pow", "c", ["pow", "d", "e"]]]],
        "f",
    ]


def test_operands_are_opaque():
    assert _resolve("f (x + y) * xs [0]") == ["mul", "f (x + y)", "xs [0]"]


def test_non_associative_conflicts():
    with pytest.raises(IllegalExpression):
        Resolver(ARITH).resolve("a == b < c")
    with pytest.raises(IllegalExpression):
        Resolver(ARITH).resolve("a == b == c")

    # a single non-associative operator is fine
    assert _resolve("a + b == c") == ["eq", ["add", "a", "b"], "c"]


def test_mismatched_fixity_conflicts():
    with pytest.raises(IllegalExpression, match="share precedence 1"):
        Resolver(PRELUDE).resolve("m >>= f =<< n")


def test_no_operator_identity():
    tokens = tokenize("foo (1, 2) bar")
    assert Resolver(ARITH).resolve_tokens(tokens) == ExpressionFragment(tokens)


def test_flip():
    assert _resolve("a >>= f", PRELUDE) == ["fix_prelude.chain", "a", "f"]
    assert _resolve("f =<< a", PRELUDE) == ["fix_prelude.chain", "a", "f"]
    assert _resolve("f =<< g =<< a", PRELUDE) == [
        "fix_prelude.chain",
        ["fix_prelude.chain", "a", "g"],
        "f",
    ]


def test_flip_uses_the_applied_operator():
    # `<<` and `=<<` are both flipped and right associative at precedence 1
    assert _resolve("a << b =<< c", PRELUDE) == [
        "fix_prelude.then",
        ["fix_prelude.chain", "c", "b"],
        "a",
    ]
    # `>>=` is not flipped, even when its right-hand side is resolved under `$`
    assert _resolve("f $ m >>= g", PRELUDE) == [
        "fix_prelude.apply",
        "f",
        ["fix_prelude.chain", "m", "g"],
    ]


def test_build_call():
    a, b = _frag("a"), _frag("b")
    assert build_call(Operator("|>", Fixity.LEFT, 1, "pipe"), a, b) == Call("pipe", a, b)
    assert build_call(Operator("<|", Fixity.RIGHT, 1, "pipe", True), a, b) == Call("pipe", b, a)


def test_resolving_resolved_expression_is_identity():
    resolver = Resolver(ARITH)
    expr = resolver.resolve("a + b * c")
    assert resolver.resolve_atoms([expr]) is expr


def test_pre_tagged_atoms():
    resolver = Resolver()  # operators come pre-identified, the table is not consulted
    atoms = [_frag("a"), ARITH["+"], _frag("b"), OperatorOccurrence(ARITH["*"]), _frag("c")]
    assert _flatten(resolver.resolve_atoms(atoms)) == ["add", "a", ["mul", "b", "c"]]

    inner = resolver.resolve_atoms([_frag("a"), ARITH["+"], _frag("b")])
    assert _flatten(resolver.resolve_atoms([inner, ARITH["*"], _frag("c")])) == [
        "mul",
        ["add", "a", "b"],
        "c",
    ]


@pytest.mark.parametrize(
    "atoms",
    [
        [],
        [_frag("a"), _frag("b")],
        [ARITH["+"], _frag("a")],
        [_frag("a"), ARITH["+"]],
        [_frag("a"), ARITH["+"], ARITH["*"], _frag("b")],
        # binds looser than the sentinel root
        [_frag("a"), Operator("@", Fixity.LEFT, -2, "at"), _frag("b")],
    ],
)
def test_structural_violations(atoms):
    with pytest.raises(StructuralViolation):
        Resolver(ARITH).resolve_atoms(atoms)


def test_missing_operands():
    resolver = Resolver(ARITH)
    with pytest.raises(MissingOperand, match="after '\\+' at token 1"):
        resolver.resolve("a + + b")
    with pytest.raises(MissingOperand, match="before '\\+' at token 0"):
        resolver.resolve("+ a")
    with pytest.raises(MissingOperand, match="after '\\*' at token 1"):
        resolver.resolve("a *")
    with pytest.raises(MissingOperand, match="empty expression"):
        resolver.resolve("  # nothing here")
