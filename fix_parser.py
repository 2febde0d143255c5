from typing import Iterable, List, Sequence, Union

from fix_ast import Atom, Call, Expr, ExpressionFragment, OperatorOccurrence
from fix_ops import PRELUDE, SENTINEL, Fixity, Operator, OperatorTable
from fix_lexer import Token, tokenize
from fix_tagger import split_operators


class ResolveError(Exception):
    pass


class IllegalExpression(ResolveError):
    """ Adjacent operators of equal precedence whose fixities can't be reconciled. """

    pass


class StructuralViolation(ResolveError):
    """ The atom sequence does not alternate operands and operators. """

    pass


class MissingOperand(ResolveError):
    pass


def build_call(op: Operator, left: Expr, right: Expr) -> Call:
    """ Apply `op` to its operands, swapping them if the operator is flipped. """
    if op.flip:
        return Call(op.function, right, left)
    return Call(op.function, left, right)


class _AtomReader:
    """ Cursor over an alternating sequence, created anew for each resolution. """

    def __init__(self, atoms: Sequence[Atom]):
        self.atoms = atoms
        self.pos = 0
        self.last_op: OperatorOccurrence = None

    def at_end(self) -> bool:
        return self.pos >= len(self.atoms)

    def peek_operator(self) -> OperatorOccurrence:
        atom = self.atoms[self.pos]
        if not isinstance(atom, OperatorOccurrence):
            raise StructuralViolation(f"Expected an operator but got {atom} at atom {self.pos}")
        return atom

    def eat_operator(self) -> OperatorOccurrence:
        self.last_op = self.peek_operator()
        self.pos += 1
        return self.last_op

    def eat_operand(self) -> Expr:
        if self.at_end():
            raise StructuralViolation(f"Expected an operand after {self.last_op.where()}")

        atom = self.atoms[self.pos]
        if not isinstance(atom, Expr):
            raise StructuralViolation(f"Expected an operand but got {atom} at atom {self.pos}")
        if isinstance(atom, ExpressionFragment) and atom.is_empty():
            if self.last_op is not None:
                raise MissingOperand(f"Missing operand after {self.last_op.where()}")
            if len(self.atoms) > 1 and isinstance(self.atoms[1], OperatorOccurrence):
                raise MissingOperand(f"Missing operand before {self.atoms[1].where()}")
            raise MissingOperand("Cannot resolve an empty expression")

        self.pos += 1
        return atom


def _parse(op1: Operator, e1: Expr, atoms: _AtomReader) -> Expr:
    """ `parse ::= (<op> operand)*`

        Note: consumes operators for as long as they bind tighter than `op1` (precedence climbing).
    """
    while not atoms.at_end():
        occurrence = atoms.peek_operator()
        op2 = occurrence.operator

        # Equal precedence needs a shared, non-NONE fixity to know which side to group
        if op1.precedence == op2.precedence and (
            op1.fixity != op2.fixity or op1.fixity == Fixity.NONE
        ):
            raise IllegalExpression(
                f"Illegal expression: '{op1.symbol}' and {occurrence.where()} share "
                f"precedence {op2.precedence} but have fixities {op1.fixity.name} and {op2.fixity.name}"
            )

        # `e1` is complete, let the caller continue at `op2`
        if op1.precedence > op2.precedence or (
            op1.precedence == op2.precedence and op1.fixity == Fixity.LEFT
        ):
            return e1

        # `op2` binds tighter (or both associate right), so resolve its right-hand side first
        atoms.eat_operator()
        rhs = _parse(op2, atoms.eat_operand(), atoms)
        e1 = build_call(op2, e1, rhs)

    return e1


class Resolver:
    """ Resolver for user-defined infix operators.

        Turns a flat stream of tokens (or an already tagged sequence of operands and
        operators) into nested `Call` nodes, following the precedence and fixity
        registered in `table`.
    """

    def __init__(self, table: OperatorTable = PRELUDE):
        self.table = table

    def resolve(self, source_code: str) -> Expr:
        """ Returns the resolved expression for `source_code`. """
        return self.resolve_tokens(tokenize(source_code))

    def resolve_tokens(self, tokens: Iterable[Token]) -> Expr:
        return self.resolve_atoms(self.tag(tokens))

    def tag(self, tokens: Iterable[Token]) -> List[Atom]:
        return split_operators(list(tokens), self.table)

    def resolve_atoms(self, atoms: Iterable[Union[Atom, Operator]]) -> Expr:
        """ Resolves a sequence whose operators are already identified.

            Operands may be fragments or previously resolved expressions, and operators
            may be given as bare `Operator` records.
        """
        atoms = [OperatorOccurrence(a) if isinstance(a, Operator) else a for a in atoms]
        if not atoms:
            raise StructuralViolation("Cannot resolve an empty sequence")

        reader = _AtomReader(atoms)
        expr = _parse(SENTINEL, reader.eat_operand(), reader)
        if not reader.at_end():
            raise StructuralViolation(
                f"Operator {reader.peek_operator().where()} binds looser than the expression root"
            )
        return expr
