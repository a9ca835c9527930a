import json

import pytest

from rinha.rinha_ast import BinaryOp, Binary, Call, File, Function, Int, Let, Location, Print, Var
from rinha.rinha_errors import DecodeError
from rinha.rinha_serialize import (
    decode_file, decode_term, deserialize, detect_format, encode_term, load_program, serialize,
)

PROGRAM_JSON = """
{
  "name": "sum.rinha",
  "expression": {
    "kind": "Let",
    "name": {"text": "f", "location": {"start": 4, "end": 5, "filename": "sum.rinha"}},
    "value": {
      "kind": "Function",
      "parameters": [{"text": "a", "location": {"start": 12, "end": 13, "filename": "sum.rinha"}}],
      "value": {
        "kind": "Binary",
        "lhs": {"kind": "Var", "text": "a", "location": {"start": 19, "end": 20, "filename": "sum.rinha"}},
        "op": "Add",
        "rhs": {"kind": "Int", "value": 1, "location": {"start": 23, "end": 24, "filename": "sum.rinha"}},
        "location": {"start": 19, "end": 24, "filename": "sum.rinha"}
      },
      "location": {"start": 8, "end": 26, "filename": "sum.rinha"}
    },
    "next": {
      "kind": "Print",
      "value": {
        "kind": "Call",
        "callee": {"kind": "Var", "text": "f", "location": {"start": 34, "end": 35, "filename": "sum.rinha"}},
        "arguments": [{"kind": "Int", "value": 41, "location": {"start": 36, "end": 38, "filename": "sum.rinha"}}],
        "location": {"start": 34, "end": 39, "filename": "sum.rinha"}
      },
      "location": {"start": 28, "end": 40, "filename": "sum.rinha"}
    },
    "location": {"start": 0, "end": 40, "filename": "sum.rinha"}
  },
  "location": {"start": 0, "end": 40, "filename": "sum.rinha"}
}
"""


def test_decode_full_json_program():
    file = load_program(PROGRAM_JSON)
    assert isinstance(file, File)
    assert file.name == "sum.rinha"
    let = file.expression
    assert isinstance(let, Let)
    assert let.name == Var("f", Location(4, 5, "sum.rinha"))
    assert isinstance(let.value, Function)
    assert let.value.parameters[0].text == "a"
    assert isinstance(let.value.value, Binary) and let.value.value.op is BinaryOp.Add
    call = let.next.value
    assert isinstance(let.next, Print) and isinstance(call, Call)
    assert call.arguments == (Int(41, Location(36, 38, "sum.rinha")),)
    assert call.location == Location(34, 39, "sum.rinha")


def test_yaml_program_inherits_missing_locations():
    src = """
name: short.rinha
location: {start: 0, end: 20, filename: short.rinha}
expression:
  kind: Print
  location: {start: 2, end: 9}
  value: {kind: Str, value: hi}
"""
    file = load_program(src, fmt="yaml")
    assert file.expression.location == Location(2, 9, "short.rinha")
    assert file.expression.value.location == Location(2, 9, "short.rinha")


def test_bare_expression_becomes_a_file():
    file = decode_file({"kind": "Int", "value": 3}, filename="bare.rinha")
    assert file.name == "bare.rinha"
    assert file.expression == Int(3, Location(0, 0, "bare.rinha"))


@pytest.mark.parametrize("obj,fragment", [
    ({"kind": "Nope"}, "unknown term kind"),
    ({"kind": "Int"}, "missing field 'value'"),
    ({"kind": "Int", "value": "1"}, "must be an integer"),
    ({"kind": "Int", "value": True}, "must be an integer"),
    ({"kind": "Int", "value": 2 ** 63}, "64 bits"),
    ({"kind": "Bool", "value": 1}, "must be a boolean"),
    ({"kind": "Binary", "op": "Pow", "lhs": {"kind": "Int", "value": 1},
      "rhs": {"kind": "Int", "value": 1}}, "unknown binary operator"),
    ({"kind": "Call", "callee": {"kind": "Var", "text": "f"}, "arguments": {}}, "must be a list"),
    ([1, 2], "expected a term"),
])
def test_malformed_terms_raise_decode_error(obj, fragment):
    with pytest.raises(DecodeError) as exc:
        decode_term(obj)
    assert fragment in str(exc.value)


@pytest.mark.parametrize("offset", [1.5, "3", -1, True])
def test_location_offsets_must_be_non_negative_integers(offset):
    bad = {"kind": "Int", "value": 1, "location": {"start": offset, "end": 4, "filename": "f"}}
    with pytest.raises(DecodeError) as exc:
        decode_term(bad)
    assert exc.value.path == "/location/start"
    assert "non-negative integer" in str(exc.value)


def test_invalid_utf8_bytes_raise_decode_error():
    with pytest.raises(DecodeError) as exc:
        load_program(b'{"kind": "Str", "value": "a\xffb"}', fmt="json")
    assert "invalid utf-8" in str(exc.value)


def test_decode_error_reports_path():
    bad = {"kind": "Tuple", "first": {"kind": "Int", "value": 1}, "second": {"kind": "Oops"}}
    with pytest.raises(DecodeError) as exc:
        decode_term(bad)
    assert exc.value.path == "/second/kind"


def test_file_without_expression():
    with pytest.raises(DecodeError):
        decode_file({"name": "x"})


def test_detect_format():
    assert detect_format("application/json") == "json"
    assert detect_format("application/x-yaml") == "yaml"
    assert detect_format(None, '  {"kind": "Int"}') == "json"
    assert detect_format(None, "kind: Int") == "yaml"
    assert detect_format(None, None) is None


def test_deserialize_yaml_labelled_as_json_falls_back():
    assert deserialize("kind: Int\nvalue: 1\n", content_type="application/json") == {"kind": "Int", "value": 1}


def test_deserialize_bytes_with_charset():
    data = '{"kind": "Str", "value": "olá"}'.encode("latin-1")
    out = deserialize(data, content_type="application/json; charset=latin-1")
    assert out["value"] == "olá"


def test_encode_term_writes_the_tagged_shape():
    term = Let(Var("x", Location(1, 2, "f")), Int(1, Location(5, 6, "f")), Var("x"), Location(0, 9, "f"))
    encoded = encode_term(term)
    assert encoded["kind"] == "Let"
    assert encoded["name"] == {"text": "x", "location": {"start": 1, "end": 2, "filename": "f"}}
    assert encoded["value"]["value"] == 1
    assert decode_term(encoded) == term


def test_serialize_file_to_json_and_back():
    file = load_program(PROGRAM_JSON)
    text = serialize(file, fmt="json")
    assert json.loads(text)["expression"]["kind"] == "Let"
    assert load_program(text) == file
    with pytest.raises(ValueError):
        serialize(file, fmt="toml")
