"""
Span-based PII redaction.

Replaces entity spans with placeholders. Overlapping spans are merged into
one region first so no fragment of the raw value survives, and regions are
substituted from the end of the text backwards so earlier offsets stay
valid.

Strategies:
- replace: "[REDACTED_<TYPE>]" (default)
- hash: "[<TYPE>_<first 8 hex chars of HMAC-SHA256>]", stable per key
- mask: partial masking that keeps the shape ("j***@e***.com")
"""

import hashlib
import hmac
import re
from dataclasses import dataclass, field

import structlog

from redaction_layer.config import Settings
from redaction_layer.models.entity_models import Entity
from redaction_layer.models.enums import EntitySource, EntityType, RedactionStrategyEnum


logger = structlog.get_logger(__name__)


@dataclass
class RedactionRegion:
    """A contiguous span to replace, built from one or more entities."""

    start: int
    end: int
    type: EntityType
    members: list[Entity] = field(default_factory=list)

    @property
    def length(self) -> int:
        return self.end - self.start


def _region_type(members: list[Entity]) -> EntityType:
    # longest member wins; context beats pattern on equal length
    best = max(
        members,
        key=lambda e: (e.length, e.source == EntitySource.CONTEXT, -e.start),
    )
    return best.type


def _mask_word(word: str) -> str:
    if not word:
        return word
    return word[0] + "*" * min(len(word) - 1, 3)


def mask_value(text: str, entity_type: EntityType) -> str:
    """Partially mask ``text`` according to its type."""
    if entity_type == EntityType.EMAIL and "@" in text:
        local, _, domain = text.partition("@")
        domain_name, dot, tld = domain.partition(".")
        if local and domain_name and dot:
            return f"{_mask_word(local)}@{_mask_word(domain_name)}.{tld}"
        return f"[REDACTED_{entity_type.value}]"
    if entity_type == EntityType.PHONE:
        digits = re.sub(r"\D", "", text)
        return f"***-***-{digits[-4:]}"
    if entity_type == EntityType.NAME:
        return " ".join(_mask_word(word) for word in text.split(" "))
    if entity_type in (EntityType.ID_NUMBER, EntityType.CARD_NUMBER):
        if len(text) <= 4:
            return "*" * len(text)
        return "*" * (len(text) - 4) + text[-4:]
    return "*" * min(len(text), 8)


class Redactor:
    """
    Apply placeholders for verified entities to the original text.

    Redaction is idempotent: an entity whose span no longer holds its text
    (because it was already replaced) is skipped.
    """

    def __init__(self, settings: Settings):
        self.settings = settings
        self.strategy = RedactionStrategyEnum(settings.REDACTION_STRATEGY)
        self._hash_key = settings.REDACTION_HASH_KEY.encode("utf-8")

    def placeholder(self, text: str, entity_type: EntityType) -> str:
        """Replacement string for ``text`` under the configured strategy."""
        if self.strategy == RedactionStrategyEnum.HASH:
            digest = hmac.new(self._hash_key, text.encode("utf-8"), hashlib.sha256).hexdigest()[:8]
            return f"[{entity_type.value}_{digest}]"
        if self.strategy == RedactionStrategyEnum.MASK:
            return mask_value(text, entity_type)
        return f"[REDACTED_{entity_type.value}]"

    def plan(self, text: str, entities: list[Entity]) -> list[RedactionRegion]:
        """
        Build the merged regions that ``redact`` would substitute.

        Entities whose span is out of bounds or no longer matches the text
        are left out.
        """
        valid = []
        for entity in entities:
            if entity.start < 0 or entity.end > len(text) or entity.start >= entity.end:
                continue
            if text[entity.start:entity.end] != entity.text:
                continue
            valid.append(entity)

        regions: list[RedactionRegion] = []
        for entity in sorted(valid, key=lambda e: (e.start, -e.end)):
            if regions and entity.start < regions[-1].end:
                current = regions[-1]
                current.end = max(current.end, entity.end)
                current.members.append(entity)
                continue
            regions.append(RedactionRegion(entity.start, entity.end, entity.type, [entity]))

        for region in regions:
            region.type = _region_type(region.members)
        return regions

    def redact(self, original_text: str, entities: list[Entity]) -> str:
        """
        Replace every valid entity span with its placeholder.

        Args:
            original_text: Text the entity offsets refer to
            entities: Verified entities with document offsets

        Returns:
            Sanitized text; the input unchanged when nothing applies
        """
        sanitized, _ = self.redact_with_regions(original_text, entities)
        return sanitized

    def redact_with_regions(self, original_text: str, entities: list[Entity]) -> tuple[str, list[RedactionRegion]]:
        if not entities:
            return original_text, []

        regions = self.plan(original_text, entities)
        skipped = len(entities) - sum(len(r.members) for r in regions)

        sanitized = original_text
        for region in sorted(regions, key=lambda r: r.start, reverse=True):
            replacement = self.placeholder(original_text[region.start:region.end], region.type)
            sanitized = sanitized[:region.start] + replacement + sanitized[region.end:]

        logger.debug(
            "Redaction applied",
            strategy=self.strategy.value,
            regions=len(regions),
            skipped_entities=skipped,
            original_length=len(original_text),
            redacted_length=len(sanitized),
        )
        return sanitized, regions

    def verify(self, sanitized_text: str, entities: list[Entity]) -> list[str]:
        """
        Report entities whose text still appears in the sanitized output.

        Only whole-word matches count, so a short value such as "Ted" is not
        reported for appearing inside a placeholder. Warnings name type and
        original position only, never the value.
        """
        warnings = []
        for entity in entities:
            needle = entity.text.strip()
            if not needle:
                continue
            pattern = r"(?<!\w)" + re.escape(needle) + r"(?!\w)"
            if re.search(pattern, sanitized_text, re.IGNORECASE):
                warnings.append(
                    f"{entity.type.value} entity at {entity.start}-{entity.end} still present in output"
                )
        return warnings
