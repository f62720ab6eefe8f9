"""
Unit tests for structured-output parsing of context detection responses.

Stage 1 (JSON parse) and stage 2 (schema) failures both raise
MalformedResponseError.
"""

import json

import pytest

from redaction_layer.detection.exceptions import MalformedResponseError
from redaction_layer.detection.response_parser import ENTITY_RESPONSE_SCHEMA, ResponseParser
from redaction_layer.models.enums import EntityType


@pytest.fixture
def parser():
    return ResponseParser()


def entity(**overrides):
    item = {"type": "NAME", "text": "Sarah", "start": 0, "end": 5, "confidence": 0.95}
    item.update(overrides)
    return item


class TestStage1JsonParse:

    def test_valid_response(self, parser):
        content = json.dumps({"entities": [entity(), entity(type="EMPLOYER", text="Google", start=15, end=21)]})
        candidates = parser.parse(content)

        assert [c.type for c in candidates] == [EntityType.NAME, EntityType.EMPLOYER]
        assert candidates[1].text == "Google"

    def test_empty_entities(self, parser):
        assert parser.parse('{"entities": []}') == []

    @pytest.mark.parametrize("content", ["", "   ", "\n"])
    def test_empty_content(self, parser, content):
        with pytest.raises(MalformedResponseError) as exc_info:
            parser.parse(content)
        assert exc_info.value.details["parse_error"] == "Empty content"

    def test_invalid_json(self, parser):
        with pytest.raises(MalformedResponseError) as exc_info:
            parser.parse('{"entities": [')
        assert "parse_error" in exc_info.value.details

    def test_non_object_json(self, parser):
        with pytest.raises(MalformedResponseError, match="not a JSON object"):
            parser.parse('[{"type": "NAME"}]')

    def test_raw_content_is_not_kept(self, parser):
        content = '{"entities": [{"text": "Jane Doe, SSN 123-45-6789"'
        with pytest.raises(MalformedResponseError) as exc_info:
            parser.parse(content)

        assert exc_info.value.details["content_length"] == len(content)
        assert "Jane Doe" not in str(exc_info.value)


class TestStage2Schema:

    def test_missing_entities_key(self, parser):
        with pytest.raises(MalformedResponseError, match="schema"):
            parser.parse('{"items": []}')

    @pytest.mark.parametrize(
        "bad",
        [
            entity(type="PASSPORT"),
            entity(text=""),
            entity(start=-1),
            entity(start="0"),
            entity(confidence=1.5),
        ],
    )
    def test_invalid_entity(self, parser, bad):
        with pytest.raises(MalformedResponseError) as exc_info:
            parser.parse(json.dumps({"entities": [bad]}))
        assert exc_info.value.details["validation_errors"]

    def test_missing_field(self, parser):
        item = entity()
        del item["confidence"]
        with pytest.raises(MalformedResponseError):
            parser.parse(json.dumps({"entities": [item]}))

    def test_validation_messages_do_not_echo_values(self, parser):
        with pytest.raises(MalformedResponseError) as exc_info:
            parser.parse(json.dumps({"entities": [entity(type="Jane Doe")]}))

        assert all("Jane Doe" not in msg for msg in exc_info.value.details["validation_errors"])

    def test_schema_enum_covers_entity_types(self):
        enum = ENTITY_RESPONSE_SCHEMA["properties"]["entities"]["items"]["properties"]["type"]["enum"]
        assert set(enum) == {t.value for t in EntityType}

    def test_offsets_are_not_checked_here(self, parser):
        candidates = parser.parse(json.dumps({"entities": [entity(start=10, end=3)]}))
        assert candidates[0].start == 10
