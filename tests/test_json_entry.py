"""Tests for logsviewer/parser/json_entry.py"""

from datetime import datetime, timezone

import pytest

from logsviewer.config.schema import ParserConfig
from logsviewer.errors import ParseError
from logsviewer.parser.json_entry import FILE_FIELD, JsonEntryParser

PATH = "/var/log/app/service.log"


@pytest.fixture
def parser():
    return JsonEntryParser(ParserConfig(extra_fields=["level"]))


class TestParse:
    def test_typical_line(self, parser):
        line = '{"timestamp":"2024-01-01T00:00:00Z","message":"hello","level":"info"}'
        entry = parser.parse(PATH, line)

        assert entry.source_path == PATH
        assert entry.raw_line == line
        assert entry.message == "hello"
        assert entry.timestamp == datetime(2024, 1, 1, tzinfo=timezone.utc)
        assert entry.timestamp_text == "2024-01-01T00:00:00Z"
        assert dict(entry.extras) == {"level": "info"}
        assert entry.fields["level"] == "info"

    def test_missing_timestamp_still_emits(self, parser):
        entry = parser.parse(PATH, '{"message":"no time"}')
        assert entry.timestamp is None
        assert entry.timestamp_text == ""
        assert entry.message == "no time"

    def test_custom_field_names(self):
        config = ParserConfig(timestamp_field="ts", message_field="msg", extra_fields=["svc"])
        entry = JsonEntryParser(config).parse(PATH, '{"ts":1700000000,"msg":"up","svc":"api"}')
        assert entry.message == "up"
        assert entry.timestamp == datetime(2023, 11, 14, 22, 13, 20, tzinfo=timezone.utc)
        assert entry.extras["svc"] == "api"

    @pytest.mark.parametrize(
        "value, message",
        [
            ('"plain"', "plain"),
            ("true", "true"),
            ("12", "12"),
            ("2.5", "2.5"),
            ('{"code":7}', '{"code":7}'),
            ('["a","b"]', '["a","b"]'),
            ("null", ""),
        ],
    )
    def test_message_coercion(self, parser, value, message):
        entry = parser.parse(PATH, '{"message":%s}' % value)
        assert entry.message == message

    def test_absent_message_is_empty(self, parser):
        entry = parser.parse(PATH, '{"other":1}')
        assert entry.message == ""
        assert entry.display_message() == '{"other":1}'

    def test_extra_fields_keep_configured_order(self):
        config = ParserConfig(extra_fields=["b", "a", "missing"])
        entry = JsonEntryParser(config).parse(PATH, '{"a":1,"b":{"x":true}}')
        assert list(entry.extras.items()) == [("b", '{"x":true}'), ("a", "1"), ("missing", "")]

    def test_file_field_resolves_to_path(self):
        config = ParserConfig(extra_fields=[FILE_FIELD, "level"])
        entry = JsonEntryParser(config).parse(PATH, '{"level":"warn"}')
        assert entry.extras[FILE_FIELD] == PATH

    def test_file_field_ignores_json_key_of_same_name(self):
        config = ParserConfig(extra_fields=[FILE_FIELD])
        entry = JsonEntryParser(config).parse(PATH, '{"@file":"spoofed.log"}')
        assert entry.extras[FILE_FIELD] == PATH


class TestParseErrors:
    @pytest.mark.parametrize("line", ["not json", '{"open": ', "[1, 2]", "42", '"text"', "null", ""])
    def test_non_objects_are_rejected(self, parser, line):
        with pytest.raises(ParseError) as excinfo:
            parser.parse(PATH, line)
        assert excinfo.value.path == PATH
        assert PATH in str(excinfo.value)

    @pytest.mark.parametrize(
        "line",
        ['{"message": NaN}', '{"timestamp": Infinity, "message": "x"}', '{"level": -Infinity}'],
    )
    def test_non_standard_constants_are_rejected(self, parser, line):
        with pytest.raises(ParseError, match="invalid JSON constant"):
            parser.parse(PATH, line)

    def test_deep_nesting_is_rejected(self, parser):
        line = '{"a":' + "[" * 100000 + "]" * 100000 + "}"
        with pytest.raises(ParseError):
            parser.parse(PATH, line)
