import sys
import json

from enum import Enum
from typing import Dict, Iterable, Iterator, List, Optional
from collections import namedtuple

from termcolor import cprint

from fix_lexer import SYMBOL_CHARS


class Fixity(Enum):
    NONE = 0
    LEFT = 1
    RIGHT = 2


Operator = namedtuple(
    typename="Operator",
    field_names=["symbol", "fixity", "precedence", "function", "flip"],
    defaults=[False],
)


# Synthetic root of every resolution, binds looser than any registrable operator
SENTINEL = Operator(symbol="", fixity=Fixity.NONE, precedence=-1, function="", flip=False)


class RegistryError(Exception):
    pass


def validate_operator(op: Operator) -> Operator:
    if not isinstance(op.symbol, str) or not op.symbol:
        raise RegistryError(f"Operator symbol must be a non-empty str, got {op.symbol!r}")
    if any(char not in SYMBOL_CHARS for char in op.symbol):
        raise RegistryError(f"Operator '{op.symbol}' contains non-symbol characters")
    if not isinstance(op.fixity, Fixity):
        raise RegistryError(f"Invalid fixity for operator '{op.symbol}': {op.fixity!r}")
    if not isinstance(op.precedence, int) or isinstance(op.precedence, bool):
        raise RegistryError(f"Precedence of '{op.symbol}' must be an int, got {op.precedence!r}")
    if not isinstance(op.function, str):
        raise RegistryError(f"Function of '{op.symbol}' must be a str, got {op.function!r}")
    if not isinstance(op.flip, bool):
        raise RegistryError(f"Flip of '{op.symbol}' must be a bool, got {op.flip!r}")
    if op.precedence < 0:
        raise RegistryError(f"Invalid precedence for '{op.symbol}': {op.precedence} (must be >= 0)")
    return op


class OperatorTable:
    """ Immutable snapshot of registered operators, keyed by symbol.

        Registering a symbol twice replaces the earlier record, and the replacement
        takes its place at the end of the registration order.
    """

    def __init__(self, operators: Iterable[Operator] = ()):
        self._operators: Dict[str, Operator] = {}
        for op in operators:
            validate_operator(op)
            if op.symbol in self._operators:
                cprint(
                    f"Overriding operator '{op.symbol}' with new implementation",
                    color="yellow",
                    file=sys.stderr,
                )
                del self._operators[op.symbol]
            self._operators[op.symbol] = op

        # NOTE sorted() is stable, so equal precedences keep their registration order
        self._priority = tuple(sorted(self._operators.values(), key=lambda op: -op.precedence))

    def priority_order(self) -> List[Operator]:
        """ Operators in the order the tagger looks for them. """
        return list(self._priority)

    def with_operators(self, *operators: Operator) -> "OperatorTable":
        return OperatorTable([*self, *operators])

    def get(self, symbol: str) -> Optional[Operator]:
        return self._operators.get(symbol)

    def __getitem__(self, symbol: str) -> Operator:
        return self._operators[symbol]

    def __contains__(self, symbol: str) -> bool:
        return symbol in self._operators

    def __iter__(self) -> Iterator[Operator]:
        return iter(self._operators.values())

    def __len__(self) -> int:
        return len(self._operators)

    def __repr__(self):
        return f"OperatorTable({', '.join(self._operators)})"

    @classmethod
    def from_json(cls, path: str, base: Optional["OperatorTable"] = None) -> "OperatorTable":
        """ Load operators from a JSON list, registering them on top of `base`. """
        with open(path, "r") as json_file:
            records = json.load(json_file)
        if not isinstance(records, list):
            raise RegistryError(f"Expected a list of operators in '{path}'")
        return cls([*(base or ()), *(operator_from_dict(record) for record in records)])

    def to_json(self, path: str):
        with open(path, "w") as json_file:
            json.dump([operator_to_dict(op) for op in self], json_file, indent=2)


def operator_from_dict(record: dict) -> Operator:
    try:
        return Operator(
            symbol=record["symbol"],
            fixity=Fixity[record.get("fixity", "none").upper()],
            precedence=int(record["precedence"]),
            function=record["function"],
            flip=bool(record.get("flip", False)),
        )
    except (KeyError, ValueError, TypeError) as err:
        raise RegistryError(f"Invalid operator record {record!r}: {err}") from err


def operator_to_dict(op: Operator) -> dict:
    return {
        "symbol": op.symbol,
        "fixity": op.fixity.name.lower(),
        "precedence": op.precedence,
        "function": op.function,
        "flip": op.flip,
    }


# NOTE longer symbols are registered before the shorter ones they contain
# (e.g. `<$>` before `$>`), since equal precedences are scanned in this order
PRELUDE = OperatorTable(
    [
        # highest precedence
        Operator(".", Fixity.RIGHT, 9, "fix_prelude.compose"),
        Operator("<>", Fixity.RIGHT, 6, "fix_prelude.mappend"),
        Operator("<$>", Fixity.LEFT, 4, "fix_prelude.fmap"),
        Operator("<$", Fixity.LEFT, 4, "fix_prelude.replace"),
        Operator("$>", Fixity.LEFT, 4, "fix_prelude.replace", flip=True),
        Operator("<*>", Fixity.LEFT, 4, "fix_prelude.ap"),
        Operator("*>", Fixity.LEFT, 4, "fix_prelude.discard_left"),
        Operator("<*", Fixity.LEFT, 4, "fix_prelude.discard_right"),
        Operator("<&>", Fixity.LEFT, 1, "fix_prelude.fmap", flip=True),
        Operator(">>=", Fixity.LEFT, 1, "fix_prelude.chain"),
        Operator(">>", Fixity.LEFT, 1, "fix_prelude.then"),
        Operator("=<<", Fixity.RIGHT, 1, "fix_prelude.chain", flip=True),
        Operator("<<", Fixity.RIGHT, 1, "fix_prelude.then", flip=True),
        Operator("$", Fixity.RIGHT, 0, "fix_prelude.apply"),
        # lowest precedence
    ]
)
