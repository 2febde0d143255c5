from typing import List, Optional, Sequence, Union

from fix_ast import Atom, ExpressionFragment, OperatorOccurrence
from fix_ops import Fixity, Operator, OperatorTable
from fix_lexer import Adjacency, Token, TokenType


def _window_matches(window: Sequence[Token], symbol: str) -> bool:
    """ A window spells `symbol` when it is a single run of symbol characters that ends
        right after its last character (i.e. it is not the prefix of a longer run).
    """
    *head, last = window
    return (
        all(tok.type == TokenType.SYMBOL for tok in window)
        and all(tok.value == char for tok, char in zip(window, symbol))
        and all(tok.adjacency == Adjacency.TIGHT for tok in head)
        and last.adjacency == Adjacency.LOOSE
    )


def find_operator(tokens: Sequence[Token], op: Operator) -> Optional[int]:
    """ Returns the index of the first token of the preferred occurrence of `op`.

        Right-associative operators prefer their rightmost occurrence, all others the leftmost.
    """
    width = len(op.symbol)
    starts = range(len(tokens) - width + 1)
    if op.fixity == Fixity.RIGHT:
        starts = reversed(starts)

    for start in starts:
        if _window_matches(tokens[start : start + width], op.symbol):
            return start
    return None


def _split(
    tokens: Sequence[Token], offset: int, priority: List[Operator]
) -> List[Union[Token, OperatorOccurrence]]:
    for op in priority:
        if (start := find_operator(tokens, op)) is not None:
            end = start + len(op.symbol)
            return (
                _split(tokens[:start], offset, priority)
                + [OperatorOccurrence(op, position=offset + start)]
                + _split(tokens[end:], offset + end, priority)
            )
    return list(tokens)


def split_operators(tokens: Sequence[Token], table: OperatorTable) -> List[Atom]:
    """ Partition `tokens` into an alternating sequence of fragments and operators.

        Operator symbols are searched in the table's priority order, so when symbols overlap
        (`<$>` contains `$>`) the one checked first wins. Each side of a match is split again
        on its own. Runs of tokens between operators become one `ExpressionFragment`, which
        is empty when two operators are adjacent or an operator sits at either end.
    """
    atoms: List[Atom] = []
    pending: List[Token] = []
    for item in _split(tokens, 0, table.priority_order()):
        if isinstance(item, OperatorOccurrence):
            atoms.append(ExpressionFragment(pending))
            atoms.append(item)
            pending = []
        else:
            pending.append(item)
    atoms.append(ExpressionFragment(pending))
    return atoms
