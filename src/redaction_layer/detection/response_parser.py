"""
Structured-output parsing for context detection responses.

Two hard-fail stages, both raising MalformedResponseError:
- Stage 1: JSON parse (content must be a JSON object)
- Stage 2: JSON Schema validation of the entity contract

A response failing either stage is a detection failure for the owning
segment; nothing from it is trusted.
"""

import json
from typing import Any

import structlog
from jsonschema import Draft7Validator

from redaction_layer.detection.exceptions import MalformedResponseError
from redaction_layer.models.entity_models import CandidateEntity
from redaction_layer.models.enums import EntityType


logger = structlog.get_logger(__name__)


ENTITY_RESPONSE_SCHEMA: dict[str, Any] = {
    "type": "object",
    "required": ["entities"],
    "properties": {
        "entities": {
            "type": "array",
            "items": {
                "type": "object",
                "required": ["type", "text", "start", "end", "confidence"],
                "properties": {
                    "type": {"type": "string", "enum": [t.value for t in EntityType]},
                    "text": {"type": "string", "minLength": 1},
                    "start": {"type": "integer", "minimum": 0},
                    "end": {"type": "integer", "minimum": 0},
                    "confidence": {"type": "number", "minimum": 0, "maximum": 1},
                },
            },
        },
    },
}


class ResponseParser:
    """
    Parse and validate a raw capability response into candidate entities.

    Offsets are not checked here; that is the hallucination guard's job.
    """

    def __init__(self, schema: dict[str, Any] | None = None):
        self.schema = schema or ENTITY_RESPONSE_SCHEMA
        self._validator = Draft7Validator(self.schema)

    def parse(self, content: str) -> list[CandidateEntity]:
        """
        Parse LLM response content.

        Args:
            content: Raw JSON string from the LLM

        Returns:
            Candidate entities in response order

        Raises:
            MalformedResponseError: On empty content, invalid JSON, non-object
                JSON or schema violations
        """
        data = self._parse_json(content)
        self._validate_schema(data)

        candidates = [CandidateEntity(**item) for item in data["entities"]]
        logger.debug("Parsed context detection response", candidates=len(candidates))
        return candidates

    def _parse_json(self, content: str) -> dict:
        if not content or not content.strip():
            raise MalformedResponseError(
                "Response content is empty or whitespace-only",
                raw_content=content,
                parse_error="Empty content",
            )

        try:
            parsed = json.loads(content)
        except json.JSONDecodeError as e:
            raise MalformedResponseError(
                f"Failed to parse response as JSON: {e.msg}",
                raw_content=content,
                parse_error=f"{e.msg} at line {e.lineno} col {e.colno}",
            ) from e

        if not isinstance(parsed, dict):
            raise MalformedResponseError(
                f"Response is not a JSON object (got {type(parsed).__name__})",
                raw_content=content,
                parse_error=f"Expected dict, got {type(parsed).__name__}",
            )
        return parsed

    def _validate_schema(self, data: dict) -> None:
        errors = list(self._validator.iter_errors(data))
        if not errors:
            return

        error_messages = []
        for error in errors[:10]:  # Limit to first 10 errors
            path = ".".join(str(p) for p in error.path) if error.path else "root"
            # error.message can echo the offending value; keep only the validator name
            error_messages.append(f"{path}: {error.validator} violation")

        raise MalformedResponseError(
            f"Response violates entity schema with {len(errors)} error(s)",
            validation_errors=error_messages,
        )
