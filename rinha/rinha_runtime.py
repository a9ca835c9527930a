# rinha_runtime.py

import sys
from dataclasses import dataclass, field
from typing import Any, Dict, List, Literal, Optional

from rinha.rinha_ast import File, Location
from rinha.rinha_cache import MemoCache
from rinha.rinha_environment import Scope
from rinha.rinha_errors import DecodeError, RinhaRuntimeError
from rinha.rinha_interpreter import Evaluator
from rinha.rinha_printer import PrintSink, RecordingSink, display
from rinha.rinha_serialize import load_program


# ===================================================================
# Error rendering
# ===================================================================

def line_and_column(source: str, offset: int) -> tuple[int, int]:
    """1-based line and column (in characters) of a UTF-8 byte offset into source."""
    offset = len(source.encode("utf-8")[:max(offset, 0)].decode("utf-8", errors="ignore"))
    line = source.count("\n", 0, offset) + 1
    col = offset - (source.rfind("\n", 0, offset) + 1) + 1
    return line, col


def source_context(source: str, line: int, col: Optional[int], radius: int = 2) -> str:
    lines = source.splitlines()
    if not line or line < 1 or line > len(lines):
        return ""
    start = max(1, line - radius)
    end = min(len(lines), line + radius)
    width = len(str(end))
    out = []
    for i in range(start, end + 1):
        prefix = ">" if i == line else " "
        ln = str(i).rjust(width)
        out.append(f"{prefix} {ln} | {lines[i - 1]}")
        if i == line and col is not None:
            caret = " " * max(col - 1, 0)
            out.append(f"  {' ' * width} | {caret}^")
    return "\n".join(out)


def format_stacktrace(stack: Optional[List[Dict[str, Any]]]) -> str:
    if not stack:
        return ""
    frames = []
    for frame in stack:
        name = frame.get('name') or '<fn>'
        args = " ".join(display(a) for a in frame.get('args') or [])
        frames.append(f"({name} {args})" if args else f"({name})")
    return "rinha stacktrace: " + " ".join(frames)


def format_runtime_error(e: Exception, source: Optional[str] = None) -> str:
    if isinstance(e, DecodeError):
        return f"DecodeError: {e}"
    if not isinstance(e, RinhaRuntimeError):
        return f"InternalError: {e}"

    msg = f"{e.kind}: {e.message}\n{e.full_text}"
    loc: Location = e.location
    if source is not None:
        line, col = line_and_column(source, loc.start)
        msg = f"{msg}\n(line {line}, col {col} in {loc.filename})"
        context = source_context(source, line, col)
        if context:
            msg = f"{msg}\n{context}"
    else:
        msg = f"{msg}\n(at {loc.filename}:{loc.start}..{loc.end})"

    st = format_stacktrace(e.stacktrace)
    if st:
        msg += "\n" + st
    return msg


# ===================================================================
# Program execution
# ===================================================================

@dataclass
class ExecutionResult:
    """The structured result of a program execution."""
    status: Literal['success', 'error']
    value: Any = None
    error_message: Optional[str] = None
    error: Optional[Exception] = None
    output: List[str] = field(default_factory=list)
    printed: List[Any] = field(default_factory=list)
    cache_stats: Dict[str, int] = field(default_factory=dict)

    def format_error(self, source: Optional[str] = None) -> str:
        """Formats the error, with line, column and context when the source text is given."""
        if self.status != 'error':
            return ""
        if self.error is not None:
            return format_runtime_error(self.error, source)
        return str(self.error_message or "Unknown error")


class ProgramRunner:
    """Decodes and executes rinha programs, one fresh cache per run."""

    def __init__(self, printer: Optional[PrintSink] = None, memoize: bool = True,
                 recursion_limit: Optional[int] = None):
        self.printer = printer
        self.memoize = memoize
        self.recursion_limit = recursion_limit
        self.root_scope = Scope()
        self.evaluator: Optional[Evaluator] = None

    def _new_evaluator(self, sink: RecordingSink) -> Evaluator:
        return Evaluator(printer=sink, cache=MemoCache(), memoize=self.memoize)

    def run_file(self, file: File) -> ExecutionResult:
        """Evaluates a decoded program unit."""
        if self.recursion_limit and sys.getrecursionlimit() < self.recursion_limit:
            sys.setrecursionlimit(self.recursion_limit)

        sink = RecordingSink(echo=self.printer)
        self.evaluator = self._new_evaluator(sink)
        # Each run starts from an empty root; bindings never survive a run.
        self.root_scope = Scope()
        try:
            value = self.evaluator.eval(file.expression, self.root_scope)
        except RinhaRuntimeError as e:
            return ExecutionResult(
                status='error',
                error_message=format_runtime_error(e),
                error=e,
                output=list(sink.lines),
                printed=list(sink.values),
                cache_stats=self.evaluator.cache.stats(),
            )
        return ExecutionResult(
            status='success',
            value=value,
            output=list(sink.lines),
            printed=list(sink.values),
            cache_stats=self.evaluator.cache.stats(),
        )

    def handle_program(self, data, *, content_type: Optional[str] = None,
                       fmt: Optional[str] = None, filename: str = "<memory>") -> ExecutionResult:
        """The main entry point: decode a tagged program and run it."""
        try:
            file = load_program(data, content_type=content_type, fmt=fmt, filename=filename)
        except DecodeError as e:
            return ExecutionResult(status='error', error_message=format_runtime_error(e), error=e)
        return self.run_file(file)
