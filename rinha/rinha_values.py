"""
Runtime values produced by the rinha evaluator.

Ints, strings, booleans and tuples are plain Python values (int, str, bool
and a 2-element tuple). Closures are the only dedicated runtime type.
"""

import hashlib
from typing import Any, Tuple as TupleType, TYPE_CHECKING

from rinha.rinha_ast import Term, Var
from rinha.rinha_errors import UnhashableValue

if TYPE_CHECKING:
    from rinha.rinha_environment import Scope

INT_MIN = -(2 ** 63)
INT_MAX = 2 ** 63 - 1


class Closure:
    """A function value: parameters and body plus the scope it was created in.

    The scope is shared, not copied. Binding a name into it after the fact
    (the `let` self-reference patch) is seen by every holder of the closure.
    """
    def __init__(self, parameters: TupleType[Var, ...], body: Term, environment: 'Scope'):
        self.parameters = parameters
        self.body = body
        self.environment = environment

    def __repr__(self) -> str:
        names = ", ".join(p.text for p in self.parameters)
        return f"<Closure fn({names}) at {self.body.location!r}>"


def kind_of(value: Any) -> str:
    """Name of the value kind, as used in error messages."""
    # bool is a subclass of int, so check it before int
    if isinstance(value, bool):
        return "Bool"
    if isinstance(value, int):
        return "Int"
    if isinstance(value, str):
        return "Str"
    if isinstance(value, tuple):
        return "Tuple"
    if isinstance(value, Closure):
        return "Closure"
    raise TypeError(f"not a rinha value: {value!r}")


def in_int_range(n: int) -> bool:
    return INT_MIN <= n <= INT_MAX


def values_equal(lhs: Any, rhs: Any) -> bool:
    """Structural equality of two values of the same kind.

    Raises TypeError when the kinds differ or a closure is involved.
    """
    kind = kind_of(lhs)
    if kind == "Closure" or kind_of(rhs) == "Closure":
        raise TypeError("closures cannot be compared")
    if kind != kind_of(rhs):
        raise TypeError(f"cannot compare {kind} with {kind_of(rhs)}")
    if kind == "Tuple":
        return values_equal(lhs[0], rhs[0]) and values_equal(lhs[1], rhs[1])
    return lhs == rhs


def order(lhs: Any, rhs: Any) -> int:
    """Total order on same-kind values: -1, 0 or 1. Tuples compare lexicographically."""
    kind = kind_of(lhs)
    if kind == "Closure" or kind_of(rhs) == "Closure":
        raise TypeError("closures cannot be compared")
    if kind != kind_of(rhs):
        raise TypeError(f"cannot compare {kind} with {kind_of(rhs)}")
    if kind == "Tuple":
        first = order(lhs[0], rhs[0])
        return first if first != 0 else order(lhs[1], rhs[1])
    return (lhs > rhs) - (lhs < rhs)


def _canonical(value: Any) -> str:
    match kind_of(value):
        case "Bool":
            return f"Bool({'true' if value else 'false'})"
        case "Int":
            return f"Int({value})"
        case "Str":
            return f"Str({len(value)}:{value})"
        case "Tuple":
            return f"Tuple({_canonical(value[0])},{_canonical(value[1])})"
        case _:
            raise UnhashableValue(value)


def hash_value(value: Any) -> str:
    """Deterministic structural digest of a value. Closures are unhashable."""
    return hashlib.sha256(_canonical(value).encode("utf-8")).hexdigest()
