"""Integration test fixtures.

End-to-end scenarios run the real pipeline with an in-memory capability,
so no external service is required.
"""

import pytest

from redaction_layer.models.enums import EntityType


@pytest.fixture
def coaching_terms():
    """Contextual PII a well-behaved capability would report."""
    return {
        "Sarah Johnson": EntityType.NAME,
        "Emily": EntityType.NAME,
        "Google": EntityType.EMPLOYER,
        "anxiety": EntityType.MEDICAL,
    }
