from __future__ import annotations

from typing import Iterable, Optional, Tuple, Union

from fix_lexer import Adjacency, Token, TokenType
from fix_ops import Operator


class Node:
    """ Base class for all atoms and expression nodes. """

    def __str__(self):
        return (
            f"{self.__class__.__name__}("
            + ", ".join([f"{k}={v}" for k, v in self.__dict__.items()])
            + ")"
        )

    def __repr__(self):
        return str(self)

    def __eq__(self, other):
        return type(self) is type(other) and self.__dict__ == other.__dict__

    __hash__ = None


class Expr(Node):
    """ Base class for all expression nodes. """

    pass


class ExpressionFragment(Expr):
    """ Opaque operand, one or more tokens the resolver never looks into. """

    def __init__(self, tokens: Iterable[Token]):
        self.tokens: Tuple[Token, ...] = tuple(tokens)

    @property
    def text(self) -> str:
        parts = []
        for tok in self.tokens:
            parts.append(tok.value)
            if not (tok.type == TokenType.SYMBOL and tok.adjacency == Adjacency.TIGHT):
                parts.append(" ")
        return "".join(parts).rstrip()

    def is_empty(self) -> bool:
        return not self.tokens


class Call(Expr):
    """ Expression class for applying an operator's function, like `function(left, right)`. """

    def __init__(self, function: str, left: Expr, right: Expr):
        self.function = function
        self.left = left
        self.right = right


class OperatorOccurrence(Node):
    """ An operator found in the input.

        `position` is the index of its first token, or `None` when the operator was
        supplied already tagged.
    """

    def __init__(self, operator: Operator, position: Optional[int] = None):
        self.operator = operator
        self.position = position

    @property
    def symbol(self) -> str:
        return self.operator.symbol

    def where(self) -> str:
        if self.position is None:
            return f"'{self.symbol}'"
        return f"'{self.symbol}' at token {self.position}"


Atom = Union[Expr, OperatorOccurrence]
