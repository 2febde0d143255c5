try:
    from context import *
except ImportError:
    pass

import json

import pytest

from fix_ops import PRELUDE, SENTINEL, Fixity, Operator, OperatorTable, RegistryError


def _symbols(ops):
    return [op.symbol for op in ops]


def test_prelude_priority_order():
    assert _symbols(PRELUDE.priority_order()) == [
        ".",
        "<>",
        "<$>",
        "<$",
        "$>",
        "<*>",
        "*>",
        "<*",
        "<&>",
        ">>=",
        ">>",
        "=<<",
        "<<",
        "$",
    ]
    assert SENTINEL.symbol not in PRELUDE


def test_lookup():
    assert PRELUDE["=<<"] == Operator("=<<", Fixity.RIGHT, 1, "fix_prelude.chain", flip=True)
    assert PRELUDE.get("+") is None
    assert "<$>" in PRELUDE
    assert len(PRELUDE) == 14


def test_override_replaces_and_moves_to_the_end(capsys):
    table = OperatorTable(
        [
            Operator("+", Fixity.LEFT, 6, "add"),
            Operator("-", Fixity.LEFT, 6, "sub"),
            Operator("+", Fixity.LEFT, 6, "plus"),
        ]
    )
    assert "Overriding operator '+'" in capsys.readouterr().err
    assert table["+"].function == "plus"
    assert _symbols(table) == ["-", "+"]
    assert _symbols(table.priority_order()) == ["-", "+"]


def test_with_operators_returns_a_new_snapshot():
    base = OperatorTable([Operator("+", Fixity.LEFT, 6, "add")])
    extended = base.with_operators(Operator("*", Fixity.LEFT, 7, "mul"))
    assert _symbols(base) == ["+"]
    assert _symbols(extended.priority_order()) == ["*", "+"]


@pytest.mark.parametrize(
    "op",
    [
        Operator("", Fixity.LEFT, 1, "f"),
        Operator("a+", Fixity.LEFT, 1, "f"),
        Operator("+", Fixity.LEFT, -1, "f"),
        Operator("+", "left", 1, "f"),
        Operator("+", Fixity.LEFT, "4", "f"),
        Operator("+", Fixity.LEFT, 1.5, "f"),
        Operator("+", Fixity.LEFT, 1, None),
        Operator("+", Fixity.LEFT, 1, "f", flip="yes"),
        Operator(None, Fixity.LEFT, 1, "f"),
    ],
)
def test_invalid_operators(op):
    with pytest.raises(RegistryError):
        OperatorTable([op])


def test_from_json_accumulates_on_base(tmp_path, capsys):
    path = tmp_path / "ops.json"
    path.write_text(
        json.dumps(
            [
                {"symbol": "|>", "fixity": "left", "precedence": 1, "function": "pipe"},
                {"symbol": "$", "fixity": "right", "precedence": 0, "function": "call", "flip": True},
            ]
        )
    )
    table = OperatorTable.from_json(str(path), base=PRELUDE)
    assert table["|>"] == Operator("|>", Fixity.LEFT, 1, "pipe", False)
    assert table["$"].function == "call" and table["$"].flip
    assert len(table) == len(PRELUDE) + 1
    assert "Overriding operator '$'" in capsys.readouterr().err

    out = tmp_path / "out.json"
    table.to_json(str(out))
    assert json.loads(out.read_text())[-1]["fixity"] == "right"


def test_from_json_rejects_bad_records(tmp_path):
    path = tmp_path / "ops.json"
    path.write_text(json.dumps([{"symbol": "|>", "fixity": "sideways", "precedence": 1}]))
    with pytest.raises(RegistryError):
        OperatorTable.from_json(str(path))

    path.write_text(json.dumps({"symbol": "|>"}))
    with pytest.raises(RegistryError):
        OperatorTable.from_json(str(path))
