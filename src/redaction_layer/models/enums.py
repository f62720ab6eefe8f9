"""
Enumerations for PII Redaction Layer data models.

All enums are closed taxonomies - no values outside these sets are permitted.
"""

from enum import Enum


class EntityType(str, Enum):
    """
    Closed taxonomy of PII entity types.

    Pattern-detectable types have an unambiguous lexical signature
    (EMAIL, PHONE, ID_NUMBER, CARD_NUMBER). The rest need surrounding
    context and come from the external text-analysis capability.
    """

    NAME = "NAME"
    EMAIL = "EMAIL"
    PHONE = "PHONE"
    ID_NUMBER = "ID_NUMBER"
    CARD_NUMBER = "CARD_NUMBER"
    ADDRESS = "ADDRESS"
    DOB = "DOB"
    MEDICAL = "MEDICAL"
    FINANCIAL = "FINANCIAL"
    EMPLOYER = "EMPLOYER"

    @classmethod
    def context_types(cls) -> list["EntityType"]:
        """Types the context detector is asked to find."""
        return [cls.NAME, cls.ADDRESS, cls.DOB, cls.MEDICAL, cls.FINANCIAL, cls.EMPLOYER]


class EntitySource(str, Enum):
    """Which detector produced an entity."""

    PATTERN = "pattern"
    CONTEXT = "context"


class PipelineState(str, Enum):
    """
    Per-document pipeline state.

    received -> (short_path | chunked) -> reconciling -> redacting -> done
    Any state may end in degraded.
    """

    RECEIVED = "received"
    SHORT_PATH = "short_path"
    CHUNKED = "chunked"
    RECONCILING = "reconciling"
    REDACTING = "redacting"
    DONE = "done"
    DEGRADED = "degraded"


class RedactionStrategyEnum(str, Enum):
    """Placeholder style used by the Redactor."""

    REPLACE = "replace"
    HASH = "hash"
    MASK = "mask"
