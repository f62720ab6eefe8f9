"""
Deterministic pattern detector for lexically unambiguous PII.

Handles EMAIL, PHONE, ID_NUMBER (US SSN format) and CARD_NUMBER. Runs once
over the whole document, not per segment: these patterns need no context.
All patterns are compiled at import time; one pass per pattern keeps the
scan linear in document length.
"""

import re
from dataclasses import dataclass
from typing import Callable, Optional

import structlog

from redaction_layer.config import Settings
from redaction_layer.models.entity_models import Entity
from redaction_layer.models.enums import EntitySource, EntityType


logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class PiiPattern:
    """A compiled pattern plus its post-match validation."""

    name: str
    type: EntityType
    regex: re.Pattern
    confidence: float
    validator: Optional[Callable[[str], bool]] = None


def is_luhn_valid(number: str) -> bool:
    """Luhn checksum over the digits of ``number`` (separators ignored)."""
    digits = [int(c) for c in number if c.isdigit()]
    if not digits:
        return False

    total = 0
    for i, digit in enumerate(reversed(digits)):
        if i % 2 == 1:
            digit *= 2
            if digit > 9:
                digit -= 9
        total += digit
    return total % 10 == 0


def _has_phone_format(match: str) -> bool:
    # A bare run of digits is more likely an order number than a phone
    return bool(re.search(r"[-.\s()]", match)) or match.startswith("+")


def _is_sixteen_digits(match: str) -> bool:
    return sum(c.isdigit() for c in match) == 16


EMAIL_PATTERN = PiiPattern(
    name="email",
    type=EntityType.EMAIL,
    regex=re.compile(r"\b[A-Za-z0-9._%+\-]+@[A-Za-z0-9.\-]+\.[A-Za-z]{2,}\b"),
    confidence=1.0,
)

# 555-1234, 617-555-1234, (617) 555-1234, +1-617-555-1234
PHONE_PATTERN = PiiPattern(
    name="phone",
    type=EntityType.PHONE,
    regex=re.compile(
        r"(?<!\w)"
        r"(?:(?:\+\d{1,3}[-.\s]?)?(?:\(\d{3}\)|\d{3})[-.\s]?)?"
        r"\d{3}[-.\s]\d{4}"
        r"(?!\d)"
    ),
    confidence=0.9,
    validator=_has_phone_format,
)

ID_NUMBER_PATTERN = PiiPattern(
    name="ssn",
    type=EntityType.ID_NUMBER,
    regex=re.compile(r"\b\d{3}-\d{2}-\d{4}\b"),
    confidence=0.95,
)

CARD_NUMBER_PATTERN = PiiPattern(
    name="card",
    type=EntityType.CARD_NUMBER,
    regex=re.compile(r"\b\d{4}[-\s]?\d{4}[-\s]?\d{4}[-\s]?\d{4}\b"),
    confidence=0.95,
    validator=_is_sixteen_digits,
)

DEFAULT_PATTERNS: list[PiiPattern] = [
    EMAIL_PATTERN,
    PHONE_PATTERN,
    ID_NUMBER_PATTERN,
    CARD_NUMBER_PATTERN,
]


class PatternDetector:
    """
    Regex scanner producing document-global entities with source=pattern.

    Overlapping matches of different patterns are resolved here, keeping
    the higher-confidence match, then the longer one.
    """

    def __init__(self, settings: Optional[Settings] = None, patterns: Optional[list[PiiPattern]] = None):
        self.require_luhn = settings.PATTERN_REQUIRE_LUHN if settings else False
        self.patterns = patterns if patterns is not None else DEFAULT_PATTERNS

    def detect(self, text: str) -> list[Entity]:
        """
        Detect pattern PII in ``text``.

        Args:
            text: Full document text

        Returns:
            Entities sorted by start offset. Malformed input (non-string,
            empty) yields no matches.
        """
        if not isinstance(text, str) or not text:
            return []

        matches: list[Entity] = []
        for pattern in self.patterns:
            for match in pattern.regex.finditer(text):
                value = match.group()
                if not self._is_valid(pattern, value):
                    continue
                matches.append(
                    Entity(
                        text=value,
                        type=pattern.type,
                        start=match.start(),
                        end=match.end(),
                        confidence=pattern.confidence,
                        source=EntitySource.PATTERN,
                    )
                )

        entities = self._resolve_overlaps(matches)

        logger.debug(
            "Pattern detection complete",
            document_length=len(text),
            raw_matches=len(matches),
            entities=len(entities),
        )
        return entities

    def _is_valid(self, pattern: PiiPattern, value: str) -> bool:
        if pattern.validator is not None and not pattern.validator(value):
            return False
        if pattern.type == EntityType.CARD_NUMBER and self.require_luhn:
            return is_luhn_valid(value)
        return True

    @staticmethod
    def _resolve_overlaps(matches: list[Entity]) -> list[Entity]:
        """Remove overlapping matches, keeping higher-confidence then longer ones."""
        ranked = sorted(matches, key=lambda e: (-e.confidence, -e.length, e.start))
        taken: list[Entity] = []
        for candidate in ranked:
            if not any(candidate.overlap_with(kept) for kept in taken):
                taken.append(candidate)
        return sorted(taken, key=lambda e: (e.start, e.end))
