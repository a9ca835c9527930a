"""
Binary operators over rinha values.

Both operands are already evaluated when an operator runs, so `&&` and `||`
do not short-circuit.
"""

from typing import Any

from rinha.rinha_ast import BinaryOp, Location
from rinha.rinha_errors import DivisionByZero, InvalidOperand
from rinha.rinha_printer import display
from rinha.rinha_values import in_int_range, kind_of, order, values_equal


def _invalid(op: BinaryOp, lhs: Any, rhs: Any, location: Location, detail: str = "") -> InvalidOperand:
    full = detail or f"cannot apply {op.symbol} to {kind_of(lhs)} and {kind_of(rhs)}"
    return InvalidOperand(f"invalid operands for {op.name}", full, location)


def _is_int(value: Any) -> bool:
    # bool is a subclass of int
    return isinstance(value, int) and not isinstance(value, bool)


def _checked(op: BinaryOp, lhs: Any, rhs: Any, result: int, location: Location) -> int:
    if not in_int_range(result):
        raise _invalid(op, lhs, rhs, location, f"integer overflow in {lhs} {op.symbol} {rhs}")
    return result


def _truncating_div(a: int, b: int) -> int:
    q = abs(a) // abs(b)
    return q if (a < 0) == (b < 0) else -q


def _truncating_rem(a: int, b: int) -> int:
    return a - b * _truncating_div(a, b)


def _arithmetic(lhs: Any, op: BinaryOp, rhs: Any, location: Location) -> Any:
    if op is BinaryOp.Add and (isinstance(lhs, str) or isinstance(rhs, str)):
        return display(lhs) + display(rhs)
    if not (_is_int(lhs) and _is_int(rhs)):
        raise _invalid(op, lhs, rhs, location)
    match op:
        case BinaryOp.Add:
            return _checked(op, lhs, rhs, lhs + rhs, location)
        case BinaryOp.Sub:
            return _checked(op, lhs, rhs, lhs - rhs, location)
        case BinaryOp.Mul:
            return _checked(op, lhs, rhs, lhs * rhs, location)
        case BinaryOp.Div | BinaryOp.Rem:
            if rhs == 0:
                name = "division" if op is BinaryOp.Div else "remainder"
                raise DivisionByZero(
                    f"{name} by zero",
                    f"cannot compute {lhs} {op.symbol} 0: the divisor is zero",
                    location,
                )
            if op is BinaryOp.Div:
                return _checked(op, lhs, rhs, _truncating_div(lhs, rhs), location)
            return _truncating_rem(lhs, rhs)
    raise _invalid(op, lhs, rhs, location)


def compare(lhs: Any, op: BinaryOp, rhs: Any, location: Location) -> Any:
    """Apply a binary operator to two evaluated operands.

    Raises InvalidOperand (DivisionByZero for a zero divisor) carrying the
    location of the binary expression.
    """
    match op:
        case BinaryOp.Add | BinaryOp.Sub | BinaryOp.Mul | BinaryOp.Div | BinaryOp.Rem:
            return _arithmetic(lhs, op, rhs, location)
        case BinaryOp.And | BinaryOp.Or:
            if not (isinstance(lhs, bool) and isinstance(rhs, bool)):
                raise _invalid(op, lhs, rhs, location)
            return (lhs and rhs) if op is BinaryOp.And else (lhs or rhs)

    try:
        match op:
            case BinaryOp.Eq:
                return values_equal(lhs, rhs)
            case BinaryOp.Neq:
                return not values_equal(lhs, rhs)
            case BinaryOp.Lt:
                return order(lhs, rhs) < 0
            case BinaryOp.Gt:
                return order(lhs, rhs) > 0
            case BinaryOp.Lte:
                return order(lhs, rhs) <= 0
            case BinaryOp.Gte:
                return order(lhs, rhs) >= 0
    except TypeError as e:
        raise _invalid(op, lhs, rhs, location, f"cannot apply {op.symbol}: {e}") from e
    raise _invalid(op, lhs, rhs, location)
