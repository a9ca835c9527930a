"""
Display formatting for rinha values and the print capability.
"""

import sys
from abc import ABC, abstractmethod
from typing import Any, List, Optional, TextIO

from rinha.rinha_values import Closure


class Printer:
    """Formats rinha values into their display form."""

    def __init__(self):
        self._handlers = self._create_handlers()

    def pformat(self, obj: Any) -> str:
        """Public entry point to format a value."""
        handler = self._get_handler(obj)
        return handler(obj)

    def _get_handler(self, obj):
        """Dispatcher to find the correct formatting method."""
        obj_type = type(obj)
        if obj_type in self._handlers:
            return self._handlers[obj_type]
        # bool is a subclass of int, so check it before int
        if isinstance(obj, bool): return self._pformat_bool
        if isinstance(obj, int): return self._pformat_int
        if isinstance(obj, str): return self._pformat_str
        if isinstance(obj, tuple): return self._pformat_tuple
        # Default to Python's repr for unknown types
        return repr

    def _create_handlers(self):
        return {
            int: self._pformat_int,
            str: self._pformat_str,
            bool: self._pformat_bool,
            tuple: self._pformat_tuple,
            Closure: self._pformat_closure,
        }

    def _pformat_int(self, obj):
        return str(obj)

    def _pformat_str(self, obj):
        return obj

    def _pformat_bool(self, obj):
        return 'true' if obj else 'false'

    def _pformat_tuple(self, obj):
        first, second = obj
        return f"({self.pformat(first)}, {self.pformat(second)})"

    def _pformat_closure(self, obj):
        return "[closure]"


_printer = Printer()


def display(value: Any) -> str:
    """Display form of a value, as `print` writes it."""
    return _printer.pformat(value)


# =================================================================
# Print capability
# =================================================================

class PrintSink(ABC):
    """Receives every value passed to `print`, in evaluation order."""

    @abstractmethod
    def print(self, value: Any) -> Any:
        """Emit the value's display form and return the value unchanged."""
        raise NotImplementedError


class StdoutSink(PrintSink):
    """Writes one line per printed value to a text stream (stdout by default)."""
    def __init__(self, stream: Optional[TextIO] = None):
        self.stream = stream

    def print(self, value: Any) -> Any:
        stream = self.stream or sys.stdout
        stream.write(display(value) + "\n")
        stream.flush()
        return value


class RecordingSink(PrintSink):
    """Records printed values and their rendered lines instead of writing them."""
    def __init__(self, echo: Optional[PrintSink] = None):
        self.values: List[Any] = []
        self.lines: List[str] = []
        self.echo = echo

    def print(self, value: Any) -> Any:
        self.values.append(value)
        self.lines.append(display(value))
        if self.echo is not None:
            self.echo.print(value)
        return value

    @property
    def text(self) -> str:
        return "".join(line + "\n" for line in self.lines)
