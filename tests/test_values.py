"""Tests for logsviewer/parser/values.py"""

import pytest

from logsviewer.parser.values import MISSING, ValueKind, kind_of, lookup, to_text


@pytest.mark.parametrize(
    "value, kind",
    [
        (MISSING, ValueKind.MISSING),
        (None, ValueKind.NULL),
        ("text", ValueKind.STRING),
        (True, ValueKind.BOOLEAN),
        (False, ValueKind.BOOLEAN),
        (3, ValueKind.INTEGER),
        (3.5, ValueKind.FLOAT),
        ({"a": 1}, ValueKind.OBJECT),
        ([1, 2], ValueKind.ARRAY),
    ],
)
def test_kind_of(value, kind):
    assert kind_of(value) is kind


def test_kind_of_rejects_non_json_values():
    with pytest.raises(TypeError):
        kind_of(object())


def test_lookup_distinguishes_missing_from_null():
    fields = {"present": None}
    assert lookup(fields, "present") is None
    assert lookup(fields, "absent") is MISSING


@pytest.mark.parametrize(
    "value, text",
    [
        (MISSING, ""),
        (None, ""),
        ("hello", "hello"),
        ("", ""),
        (True, "true"),
        (False, "false"),
        (42, "42"),
        (-7, "-7"),
        (1.5, "1.5"),
        (1.0, "1"),
        (0.1, "0.1"),
        (1e20, "100000000000000000000"),
        (1.5e-7, "0.00000015"),
        ({"a": 1, "b": [1, 2]}, '{"a":1,"b":[1,2]}'),
        ([1, "x", None], '[1,"x",null]'),
        ({"name": "café"}, '{"name":"café"}'),
    ],
)
def test_to_text(value, text):
    assert to_text(value) == text
