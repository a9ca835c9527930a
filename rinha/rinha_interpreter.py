"""
The core rinha interpreter: a recursive evaluator over the syntax tree.
"""
import os
import sys
from typing import Any, Dict, List, Optional

from rinha.rinha_ast import (
    Int, Str, Bool, Var, Let, If, Binary, Function, Call, Print,
    Tuple, First, Second, Term, is_pure,
)
from rinha.rinha_cache import MemoCache
from rinha.rinha_environment import Scope
from rinha.rinha_errors import (
    RinhaRuntimeError, UnboundVariable, InvalidCall, InvalidCondition, InvalidProjection,
)
from rinha.rinha_operators import compare
from rinha.rinha_printer import PrintSink, StdoutSink, display
from rinha.rinha_values import Closure, kind_of


class Evaluator:
    """The rinha execution engine.

    Holds the print capability and the memoization cache for one run; the
    scope is passed explicitly through every recursive call.
    """
    def __init__(self, printer: Optional[PrintSink] = None, cache: Optional[MemoCache] = None,
                 memoize: bool = True):
        self.printer = printer if printer is not None else StdoutSink()
        self.cache = cache if cache is not None else MemoCache()
        self.memoize = memoize
        self.call_stack: List[Dict[str, Any]] = []

    def _push_frame(self, name, closure, args, call_site: Call):
        self.call_stack.append({
            'name': name,
            'func': closure,
            'args': args,
            'call_site': call_site.location,
        })

    def _pop_frame(self):
        if self.call_stack:
            self.call_stack.pop()

    def _dbg(self, *parts):
        if os.environ.get("RINHA_DEBUG"):
            print("[DBG]", *parts, file=sys.stderr)

    def eval(self, node: Term, scope: Scope) -> Any:
        """Recursive dispatcher for evaluating any syntax node."""
        match node:
            case Int() | Str() | Bool():
                return node.value

            case Var():
                try:
                    return scope[node.text]
                except KeyError:
                    self._dbg("unbound", node.text, "visible:", sorted(scope.visible_names()))
                    raise UnboundVariable(node.text, node.location) from None

            case Let():
                return self._eval_let(node, scope)

            case If():
                condition = self.eval(node.condition, scope)
                if not isinstance(condition, bool):
                    raise InvalidCondition(
                        "invalid if condition",
                        f"{display(condition)} can't be used as an if condition. use a boolean instead",
                        node.condition.location,
                    )
                return self.eval(node.then if condition else node.otherwise, scope)

            case Binary():
                lhs = self.eval(node.lhs, scope)
                rhs = self.eval(node.rhs, scope)
                return compare(lhs, node.op, rhs, node.location)

            case Function():
                # Closure-owned scope; the `let` self-reference patch writes here.
                return Closure(node.parameters, node.value, scope.child())

            case Call():
                return self._eval_call(node, scope)

            case Print():
                value = self.eval(node.value, scope)
                return self.printer.print(value)

            case Tuple():
                first = self.eval(node.first, scope)
                second = self.eval(node.second, scope)
                return (first, second)

            case First() | Second():
                value = self.eval(node.value, scope)
                if not isinstance(value, tuple):
                    which = "first" if isinstance(node, First) else "second"
                    raise InvalidProjection(
                        "invalid expression",
                        f"cannot use {which} operation on {kind_of(value)}, only on a tuple",
                        node.location,
                    )
                return value[0] if isinstance(node, First) else value[1]

            case _:
                raise TypeError(f"Unknown syntax node: {node!r}")

    def _eval_let(self, node: Let, scope: Scope) -> Any:
        name = node.name.text
        value = self.eval(node.value, scope)
        frame = scope.child()
        if isinstance(value, Closure):
            # Self-reference patch: the closure can now call itself by name.
            value.environment[name] = value
        frame[name] = value
        return self.eval(node.next, frame)

    def _eval_call(self, node: Call, scope: Scope) -> Any:
        callee = self.eval(node.callee, scope)
        if not isinstance(callee, Closure):
            raise InvalidCall(
                "invalid function call",
                f"{display(callee)} cannot be called as a function",
                node.location,
            )

        arguments = [self.eval(argument, scope) for argument in node.arguments]

        # Extra arguments or parameters are ignored.
        frame = callee.environment.child()
        bound = []
        for parameter, argument in zip(callee.parameters, arguments):
            frame[parameter.text] = argument
            bound.append(argument)

        name = node.callee.text if isinstance(node.callee, Var) else "<fn>"
        self._push_frame(name, callee, bound, node)
        try:
            if self.memoize and is_pure(callee.body):
                return self._eval_memoized(callee.body, bound, frame)
            return self.eval(callee.body, frame)
        except RinhaRuntimeError as e:
            if e.stacktrace is None:
                e.stacktrace = list(self.call_stack)
            raise
        finally:
            self._pop_frame()

    def _eval_memoized(self, body: Term, arguments: List[Any], scope: Scope) -> Any:
        key = self.cache.cache_key(body, arguments)
        if key is None:
            self.cache.bypasses += 1
            self._dbg("cache bypass", body.location)
            return self.eval(body, scope)

        found, value = self.cache.lookup(key)
        if found:
            self._dbg("cache hit", key[:12])
            return value

        self._dbg("cache miss", key[:12])
        value = self.eval(body, scope)
        self.cache.store(key, value)
        return value


def evaluate(node: Term, env: Scope, cache: MemoCache, printer: PrintSink) -> Any:
    """Evaluate one syntax tree against an environment, cache and print capability."""
    return Evaluator(printer, cache).eval(node, env)
