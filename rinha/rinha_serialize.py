from __future__ import annotations

import json
import re
from typing import Any, Optional
import collections.abc

import yaml

from rinha.rinha_ast import (
    Location, BinaryOp, File, Term, TERM_KINDS,
    Int, Str, Bool, Var, Let, If, Binary, Function, Call, Print, Tuple, First, Second,
)
from rinha.rinha_errors import DecodeError
from rinha.rinha_values import in_int_range


# --------------------------
# Helpers
# --------------------------

def _norm_text(data: bytes | bytearray | str, *, encoding: Optional[str] = None) -> str:
    if isinstance(data, (bytes, bytearray)):
        try:
            return data.decode(encoding or 'utf-8')
        except UnicodeDecodeError as e:
            raise DecodeError(f"invalid {e.encoding} text at byte {e.start}") from e
        except LookupError as e:
            raise DecodeError(f"unknown text encoding {encoding!r}") from e
    if isinstance(data, str):
        return data
    return str(data)


def _encoding_from_content_type(content_type: Optional[str]) -> Optional[str]:
    if not content_type:
        return None
    m = re.search(r'charset\s*=\s*([^\s;]+)', content_type, re.IGNORECASE)
    if m:
        return m.group(1).strip('"').strip("'")
    return None


def detect_format(content_type: Optional[str] = None, data_hint: Optional[str] = None) -> Optional[str]:
    """
    Returns a canonical format name among: 'json', 'yaml'.
    Uses Content-Type first; falls back to simple data sniffing if provided.
    """
    ct = (content_type or "").lower()
    if 'json' in ct:
        return 'json'
    if 'yaml' in ct or 'x-yaml' in ct:
        return 'yaml'

    if data_hint is not None:
        s = data_hint.lstrip()
        if s.startswith('{') or s.startswith('['):
            return 'json'
        if s:
            return 'yaml'
    return None


# --------------------------
# Wire format
# --------------------------

def deserialize(data: bytes | bytearray | str,
                *,
                content_type: Optional[str] = None,
                fmt: Optional[str] = None) -> Any:
    """
    Convert wire data (bytes/string) to plain Python structures.
    Supported fmt: 'json', 'yaml'. If fmt is None, uses content_type, then sniffing.
    """
    text = _norm_text(data, encoding=_encoding_from_content_type(content_type))
    f = (fmt or detect_format(content_type, text))
    if f == 'json':
        try:
            return json.loads(text)
        except json.JSONDecodeError:
            # YAML is a superset of JSON; accept JSON-labelled YAML
            try:
                return yaml.safe_load(text)
            except yaml.YAMLError as e:
                raise DecodeError(f"invalid JSON/YAML document: {e}") from e
    if f == 'yaml':
        try:
            return yaml.safe_load(text)
        except yaml.YAMLError as e:
            raise DecodeError(f"invalid YAML document: {e}") from e
    raise DecodeError(f"unsupported program format: {f!r}")


def serialize(value: Any, *, fmt: str, pretty: bool = True) -> str:
    """
    Convert a syntax tree (File or Term) or plain structure into text.
    - fmt: 'json' | 'yaml'
    """
    f = (fmt or '').lower()
    if isinstance(value, File):
        built = encode_file(value)
    elif isinstance(value, tuple(TERM_KINDS.values())):
        built = encode_term(value)
    else:
        built = value
    if f == 'json':
        return json.dumps(built, ensure_ascii=False, indent=2 if pretty else None)
    if f == 'yaml':
        return yaml.safe_dump(built, sort_keys=False, allow_unicode=True)
    raise ValueError(f"Unsupported serialization format: {fmt!r}")


# --------------------------
# Tagged tree -> syntax tree
# --------------------------

class _Decoder:
    """Turns `{"kind": ...}` mappings into syntax nodes.

    A node without a `location` inherits the location of its parent.
    """

    def _field(self, node: collections.abc.Mapping, name: str, path: str) -> Any:
        if name not in node:
            raise DecodeError(f"missing field {name!r}", path)
        return node[name]

    def _offset(self, value: Any, path: str) -> int:
        if isinstance(value, bool) or not isinstance(value, int) or value < 0:
            raise DecodeError("location offset must be a non-negative integer", path)
        return value

    def location(self, obj: Any, inherited: Location, path: str) -> Location:
        if obj is None:
            return inherited
        if not isinstance(obj, collections.abc.Mapping):
            raise DecodeError("location must be a mapping", path)
        start = self._offset(obj.get('start', inherited.start), f"{path}/start")
        end = self._offset(obj.get('end', inherited.end), f"{path}/end")
        filename = obj.get('filename', inherited.filename)
        if not isinstance(filename, str):
            raise DecodeError("location filename must be a string", path)
        return Location(start, end, filename)

    def var(self, obj: Any, inherited: Location, path: str) -> Var:
        if not isinstance(obj, collections.abc.Mapping):
            raise DecodeError("expected a variable", path)
        text = self._field(obj, 'text', path)
        if not isinstance(text, str):
            raise DecodeError("variable text must be a string", f"{path}/text")
        return Var(text, self.location(obj.get('location'), inherited, f"{path}/location"))

    def term(self, obj: Any, inherited: Location, path: str = "") -> Term:
        if not isinstance(obj, collections.abc.Mapping):
            raise DecodeError(f"expected a term, got {type(obj).__name__}", path)
        kind = self._field(obj, 'kind', path)
        if kind not in TERM_KINDS:
            raise DecodeError(f"unknown term kind {kind!r}", f"{path}/kind")
        loc = self.location(obj.get('location'), inherited, f"{path}/location")

        def sub(name: str) -> Term:
            return self.term(self._field(obj, name, path), loc, f"{path}/{name}")

        match kind:
            case 'Int':
                value = self._field(obj, 'value', path)
                if isinstance(value, bool) or not isinstance(value, int):
                    raise DecodeError("Int value must be an integer", f"{path}/value")
                if not in_int_range(value):
                    raise DecodeError(f"integer literal {value} does not fit in 64 bits", f"{path}/value")
                return Int(value, loc)
            case 'Str':
                value = self._field(obj, 'value', path)
                if not isinstance(value, str):
                    raise DecodeError("Str value must be a string", f"{path}/value")
                return Str(value, loc)
            case 'Bool':
                value = self._field(obj, 'value', path)
                if not isinstance(value, bool):
                    raise DecodeError("Bool value must be a boolean", f"{path}/value")
                return Bool(value, loc)
            case 'Var':
                return self.var(obj, inherited, path)
            case 'Let':
                name = self.var(self._field(obj, 'name', path), loc, f"{path}/name")
                return Let(name, sub('value'), sub('next'), loc)
            case 'If':
                return If(sub('condition'), sub('then'), sub('otherwise'), loc)
            case 'Binary':
                op = self._field(obj, 'op', path)
                try:
                    op = BinaryOp(op)
                except ValueError:
                    raise DecodeError(f"unknown binary operator {op!r}", f"{path}/op") from None
                return Binary(sub('lhs'), op, sub('rhs'), loc)
            case 'Function':
                params = self._field(obj, 'parameters', path)
                if not isinstance(params, list):
                    raise DecodeError("parameters must be a list", f"{path}/parameters")
                parameters = tuple(
                    self.var(p, loc, f"{path}/parameters/{i}") for i, p in enumerate(params)
                )
                return Function(parameters, sub('value'), loc)
            case 'Call':
                args = self._field(obj, 'arguments', path)
                if not isinstance(args, list):
                    raise DecodeError("arguments must be a list", f"{path}/arguments")
                arguments = tuple(
                    self.term(a, loc, f"{path}/arguments/{i}") for i, a in enumerate(args)
                )
                return Call(sub('callee'), arguments, loc)
            case 'Print':
                return Print(sub('value'), loc)
            case 'Tuple':
                return Tuple(sub('first'), sub('second'), loc)
            case 'First':
                return First(sub('value'), loc)
            case 'Second':
                return Second(sub('value'), loc)
        raise DecodeError(f"unknown term kind {kind!r}", f"{path}/kind")


def decode_term(obj: Any, base_location: Optional[Location] = None) -> Term:
    """Decode one tagged expression tree."""
    return _Decoder().term(obj, base_location or Location())


def decode_file(obj: Any, *, filename: str = "<memory>") -> File:
    """
    Decode a program unit `{name, expression, location}`. A bare expression
    (a mapping with a `kind`) is accepted as a file named after `filename`.
    """
    decoder = _Decoder()
    if isinstance(obj, collections.abc.Mapping) and 'kind' in obj:
        base = Location(0, 0, filename)
        return File(filename, decoder.term(obj, base), base)
    if not isinstance(obj, collections.abc.Mapping):
        raise DecodeError(f"expected a program mapping, got {type(obj).__name__}")
    name = obj.get('name', filename)
    if not isinstance(name, str):
        raise DecodeError("file name must be a string", "/name")
    base = decoder.location(obj.get('location'), Location(0, 0, name), "/location")
    expression = obj.get('expression')
    if expression is None:
        raise DecodeError("missing field 'expression'")
    return File(name, decoder.term(expression, base, "/expression"), base)


def load_program(data: bytes | bytearray | str,
                 *,
                 content_type: Optional[str] = None,
                 fmt: Optional[str] = None,
                 filename: str = "<memory>") -> File:
    """Deserialize wire data and decode it into a File."""
    return decode_file(deserialize(data, content_type=content_type, fmt=fmt), filename=filename)


# --------------------------
# Syntax tree -> tagged tree
# --------------------------

def _encode_location(loc: Location) -> dict:
    return {'start': loc.start, 'end': loc.end, 'filename': loc.filename}


def _encode_var(var: Var) -> dict:
    return {'text': var.text, 'location': _encode_location(var.location)}


def encode_term(term: Term) -> dict:
    """The tagged representation of a syntax node."""
    out: dict = {'kind': type(term).__name__}
    match term:
        case Int() | Str() | Bool():
            out['value'] = term.value
        case Var():
            out['text'] = term.text
        case Let():
            out['name'] = _encode_var(term.name)
            out['value'] = encode_term(term.value)
            out['next'] = encode_term(term.next)
        case If():
            out['condition'] = encode_term(term.condition)
            out['then'] = encode_term(term.then)
            out['otherwise'] = encode_term(term.otherwise)
        case Binary():
            out['lhs'] = encode_term(term.lhs)
            out['op'] = term.op.value
            out['rhs'] = encode_term(term.rhs)
        case Function():
            out['parameters'] = [_encode_var(p) for p in term.parameters]
            out['value'] = encode_term(term.value)
        case Call():
            out['callee'] = encode_term(term.callee)
            out['arguments'] = [encode_term(a) for a in term.arguments]
        case Print() | First() | Second():
            out['value'] = encode_term(term.value)
        case Tuple():
            out['first'] = encode_term(term.first)
            out['second'] = encode_term(term.second)
        case _:
            raise TypeError(f"Unknown syntax node: {term!r}")
    out['location'] = _encode_location(term.location)
    return out


def encode_file(file: File) -> dict:
    return {
        'name': file.name,
        'expression': encode_term(file.expression),
        'location': _encode_location(file.location),
    }


__all__ = [
    "deserialize",
    "serialize",
    "detect_format",
    "decode_term",
    "decode_file",
    "load_program",
    "encode_term",
    "encode_file",
]
