"""
Error types raised while decoding and evaluating rinha programs.
"""

from typing import Any, Dict, List, Optional

from rinha.rinha_ast import Location


class RinhaRuntimeError(Exception):
    """A semantic error found while evaluating a program.

    `message` is the short, stable description; `full_text` explains it for
    a human; `location` points at the offending node. `stacktrace` holds the
    call frames that were active when the error was raised, filled in by the
    evaluator the first time the error leaves a function call.
    """
    kind = "RuntimeError"

    def __init__(self, message: str, full_text: str, location: Location):
        super().__init__(message)
        self.message = message
        self.full_text = full_text
        self.location = location
        self.stacktrace: Optional[List[Dict[str, Any]]] = None

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.message!r}, {self.location!r})"


class UnboundVariable(RinhaRuntimeError):
    kind = "UnboundVariable"

    def __init__(self, name: str, location: Location):
        super().__init__(
            f'unbound variable "{name}"',
            f'variable "{name}" was not defined in the current scope',
            location,
        )
        self.name = name


class InvalidCall(RinhaRuntimeError):
    kind = "InvalidCall"


class InvalidCondition(RinhaRuntimeError):
    kind = "InvalidCondition"


class InvalidProjection(RinhaRuntimeError):
    kind = "InvalidProjection"


class InvalidOperand(RinhaRuntimeError):
    kind = "InvalidOperand"


class DivisionByZero(InvalidOperand):
    kind = "DivisionByZero"


class UnhashableValue(Exception):
    """Raised when a value cannot take part in a cache key. Never escapes the cache."""
    def __init__(self, value: Any):
        super().__init__("unhashable value")
        self.value = value


class DecodeError(ValueError):
    """The tagged representation of a program is malformed."""
    def __init__(self, message: str, path: str = ""):
        super().__init__(f"{message} (at {path or '/'})")
        self.message = message
        self.path = path
