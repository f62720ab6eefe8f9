"""
Entity reconciliation across segments and detectors.

Turns per-segment context findings (segment-local offsets) and pattern
findings (document offsets) into one ordered, de-duplicated, conflict-free
entity list with document-global offsets.

Steps:
1. Remap: global = segment.start_offset + local, clipped to the segment
2. Re-verify against the document text (when given)
3. Dedup on (start, end, normalized text), first occurrence wins
4. Resolve type conflicts on heavily overlapping spans
5. Optionally propagate surviving entities (and name variations) to their
   other occurrences
"""

import re
from dataclasses import dataclass, field
from typing import Optional, Sequence

import structlog

from redaction_layer.config import Settings
from redaction_layer.models.document_models import Segment
from redaction_layer.models.entity_models import Entity
from redaction_layer.models.enums import EntitySource, EntityType


logger = structlog.get_logger(__name__)

# Entities overlapping by more than this share of the shorter span are
# considered the same finding.
CONFLICT_OVERLAP_RATIO = 0.5

POSSESSIVE_SUFFIXES = ("'s", "’s")


@dataclass
class ReconciliationResult:
    """Reconciled entities plus counters for RedactionStats."""

    entities: list[Entity] = field(default_factory=list)
    hallucinations_dropped: int = 0
    conflicts_resolved: int = 0
    duplicates_removed: int = 0
    propagated: int = 0


@dataclass
class _Ranked:
    entity: Entity
    segment_index: int

    @property
    def rank(self) -> tuple[int, int]:
        # lower wins: context before pattern, then lower segment index
        source_rank = 0 if self.entity.source == EntitySource.CONTEXT else 1
        return source_rank, self.segment_index


def _remap(entity: Entity, segment: Segment) -> Optional[Entity]:
    """Move a segment-local entity to document offsets, clipped to the segment."""
    global_start = segment.start_offset + entity.start
    global_end = segment.start_offset + entity.end

    start = max(global_start, segment.start_offset)
    end = min(global_end, segment.end_offset)
    if end <= start:
        return None

    if start == global_start and end == global_end:
        return entity.shifted(segment.start_offset)

    text = entity.text[start - global_start:end - global_start]
    if not text:
        return None
    return Entity(
        text=text,
        type=entity.type,
        start=start,
        end=end,
        confidence=entity.confidence,
        source=entity.source,
    )


def name_variations(name: str) -> list[str]:
    """
    Spellings of a detected name to propagate, longest first.

    Full name, its possessives, then for multi-part names the first and
    last part with their possessives. Single-letter parts and initials
    ("J.") are not propagated on their own.
    """
    parts = name.split()
    variations = [name + suffix for suffix in POSSESSIVE_SUFFIXES] + [name]
    if len(parts) >= 2:
        for part in (parts[0], parts[-1]):
            if len(part.strip(".")) < 2:
                continue
            variations.extend(part + suffix for suffix in POSSESSIVE_SUFFIXES)
            variations.append(part)

    unique: dict[str, str] = {}
    for variation in variations:
        unique.setdefault(variation.lower(), variation)
    return sorted(unique.values(), key=len, reverse=True)


def _is_conflict(a: Entity, b: Entity) -> bool:
    if a.type == b.type:
        return False
    overlap = a.overlap_with(b)
    return overlap > CONFLICT_OVERLAP_RATIO * min(a.length, b.length)


class EntityReconciler:
    """
    Merge findings from every segment and detector.

    Output does not depend on the order in which segment calls completed:
    inputs are visited in segment-index order, then pattern findings.
    """

    def __init__(self, settings: Settings):
        self.settings = settings

    def reconcile(
        self,
        segments: Sequence[Segment],
        per_segment_entities: Sequence[Sequence[Entity]],
        pattern_entities: Sequence[Entity] = (),
        document_text: Optional[str] = None,
    ) -> ReconciliationResult:
        """
        Reconcile detector output into one entity list.

        Args:
            segments: Segments in document order
            per_segment_entities: Context findings aligned with ``segments``,
                offsets local to each segment
            pattern_entities: Pattern findings with document offsets
            document_text: Full document; enables re-verification and
                occurrence propagation

        Returns:
            ReconciliationResult with entities sorted by (start, end)
        """
        if len(per_segment_entities) != len(segments):
            raise ValueError(
                f"per_segment_entities has {len(per_segment_entities)} entries "
                f"for {len(segments)} segments"
            )

        result = ReconciliationResult()

        ordered = sorted(zip(segments, per_segment_entities), key=lambda pair: pair[0].index)
        candidates: list[_Ranked] = []
        for segment, local_entities in ordered:
            for entity in sorted(local_entities, key=lambda e: (e.start, e.end)):
                remapped = _remap(entity, segment)
                if remapped is None:
                    result.hallucinations_dropped += 1
                    continue
                candidates.append(_Ranked(remapped, segment.index))

        last_index = max((s.index for s in segments), default=0) + 1
        for entity in sorted(pattern_entities, key=lambda e: (e.start, e.end)):
            candidates.append(_Ranked(entity, last_index))

        if document_text is not None:
            verified = []
            for candidate in candidates:
                entity = candidate.entity
                if document_text[entity.start:entity.end] == entity.text:
                    verified.append(candidate)
                else:
                    result.hallucinations_dropped += 1
            candidates = verified

        accepted = self._dedup_and_resolve(candidates, result)
        entities = [item.entity for item in accepted]

        if self.settings.PROPAGATE_ENTITY_OCCURRENCES and document_text:
            entities = self._propagate(entities, document_text, result)

        result.entities = sorted(entities, key=lambda e: (e.start, e.end))

        logger.debug(
            "Entities reconciled",
            entities=len(result.entities),
            duplicates_removed=result.duplicates_removed,
            conflicts_resolved=result.conflicts_resolved,
            hallucinations_dropped=result.hallucinations_dropped,
            propagated=result.propagated,
        )
        return result

    @staticmethod
    def _dedup_and_resolve(candidates: list[_Ranked], result: ReconciliationResult) -> list[_Ranked]:
        seen: set[tuple[int, int, str]] = set()
        accepted: list[_Ranked] = []

        for candidate in candidates:
            entity = candidate.entity
            key = (entity.start, entity.end, entity.text.strip().lower())
            if key in seen:
                result.duplicates_removed += 1
                continue

            losing = False
            for i in range(len(accepted) - 1, -1, -1):
                other = accepted[i]
                if not _is_conflict(entity, other.entity):
                    continue
                if other.rank < candidate.rank:
                    losing = True
                    break
                if candidate.rank < other.rank:
                    del accepted[i]
                    result.conflicts_resolved += 1

            if losing:
                result.conflicts_resolved += 1
                continue

            seen.add(key)
            accepted.append(candidate)

        return accepted

    @staticmethod
    def _propagate(entities: list[Entity], document_text: str, result: ReconciliationResult) -> list[Entity]:
        """
        Add every other whole-word, case-insensitive occurrence of each entity.

        NAME entities also cover their possessive forms and, for names of
        two or more parts, the first and last part on their own. Longer
        variations are searched first so "Smith's" wins over "Smith".
        """
        output = list(entities)
        for entity in entities:
            needle = entity.text.strip()
            if not needle:
                continue
            variations = [needle]
            if entity.type == EntityType.NAME:
                variations = name_variations(needle)

            for variation in variations:
                pattern = re.compile(r"(?<!\w)" + re.escape(variation) + r"(?!\w)", re.IGNORECASE)
                for match in pattern.finditer(document_text):
                    start, end = match.span()
                    if any(e.start < end and start < e.end for e in output):
                        continue
                    output.append(
                        Entity(
                            text=match.group(0),
                            type=entity.type,
                            start=start,
                            end=end,
                            confidence=entity.confidence,
                            source=entity.source,
                        )
                    )
                    result.propagated += 1
        return output
