"""
Defines the syntax tree for rinha programs.

Every node is an immutable dataclass tagged with the Location of the source
it came from. Nodes carry no behaviour beyond structural equality, hashing
and location lookup; evaluation lives in rinha_interpreter.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Tuple as TupleType, Union


@dataclass(frozen=True)
class Location:
    """A span in a source file, as byte offsets."""
    start: int = 0
    end: int = 0
    filename: str = ""

    def __repr__(self) -> str:
        return f"Location({self.filename}:{self.start}..{self.end})"


class BinaryOp(Enum):
    Add = "Add"
    Sub = "Sub"
    Mul = "Mul"
    Div = "Div"
    Rem = "Rem"
    Eq = "Eq"
    Neq = "Neq"
    Lt = "Lt"
    Gt = "Gt"
    Lte = "Lte"
    Gte = "Gte"
    And = "And"
    Or = "Or"

    @property
    def symbol(self) -> str:
        return _OP_SYMBOLS[self]


_OP_SYMBOLS = {
    BinaryOp.Add: "+", BinaryOp.Sub: "-", BinaryOp.Mul: "*",
    BinaryOp.Div: "/", BinaryOp.Rem: "%", BinaryOp.Eq: "==",
    BinaryOp.Neq: "!=", BinaryOp.Lt: "<", BinaryOp.Gt: ">",
    BinaryOp.Lte: "<=", BinaryOp.Gte: ">=", BinaryOp.And: "&&",
    BinaryOp.Or: "||",
}


# =================================================================
# Literals and names
# =================================================================

@dataclass(frozen=True)
class Int:
    value: int
    location: Location = Location()


@dataclass(frozen=True)
class Str:
    value: str
    location: Location = Location()


@dataclass(frozen=True)
class Bool:
    value: bool
    location: Location = Location()


@dataclass(frozen=True)
class Var:
    """A variable reference, also used for binding names and parameters."""
    text: str
    location: Location = Location()


# =================================================================
# Composite nodes
# =================================================================

@dataclass(frozen=True)
class Let:
    """`let name = value; next`. The binding is visible only in `next`."""
    name: Var
    value: 'Term'
    next: 'Term'
    location: Location = Location()


@dataclass(frozen=True)
class If:
    condition: 'Term'
    then: 'Term'
    otherwise: 'Term'
    location: Location = Location()


@dataclass(frozen=True)
class Binary:
    lhs: 'Term'
    op: BinaryOp
    rhs: 'Term'
    location: Location = Location()


@dataclass(frozen=True)
class Function:
    """A function literal. `value` is the body."""
    parameters: TupleType[Var, ...]
    value: 'Term'
    location: Location = Location()


@dataclass(frozen=True)
class Call:
    callee: 'Term'
    arguments: TupleType['Term', ...]
    location: Location = Location()


@dataclass(frozen=True)
class Print:
    value: 'Term'
    location: Location = Location()


@dataclass(frozen=True)
class Tuple:
    first: 'Term'
    second: 'Term'
    location: Location = Location()


@dataclass(frozen=True)
class First:
    value: 'Term'
    location: Location = Location()


@dataclass(frozen=True)
class Second:
    value: 'Term'
    location: Location = Location()


Term = Union[Int, Str, Bool, Var, Let, If, Binary, Function, Call, Print, Tuple, First, Second]

TERM_KINDS = {
    cls.__name__: cls
    for cls in (Int, Str, Bool, Var, Let, If, Binary, Function, Call, Print, Tuple, First, Second)
}


@dataclass(frozen=True)
class File:
    """A program unit: module name, root expression and base location."""
    name: str
    expression: Term
    location: Location = Location()


def is_pure(term: Term) -> bool:
    """Shallow purity used to decide memoization eligibility.

    Only the node itself is classified: a Print is impure, a Function is as
    pure as its body's top node, and every other kind counts as pure even if
    a Print sits somewhere below it.
    """
    match term:
        case Print():
            return False
        case Function():
            return is_pure(term.value)
        case _:
            return True
