"""
Unit tests for structlog configuration.
"""

import logging

from redaction_layer.logging_config import add_app_context, configure_logging, scrub_text_fields


class TestProcessors:

    def test_app_context(self):
        assert add_app_context(None, "info", {"event": "x"})["app"] == "pii-redaction-layer"

    def test_scrubs_text_bearing_fields(self):
        event = scrub_text_fields(
            None,
            "info",
            {"event": "Redaction done", "text": "Sarah Johnson", "prompt": "abc", "segment_index": 2},
        )

        assert event["text"] == "<13 chars>"
        assert event["prompt"] == "<3 chars>"
        assert event["segment_index"] == 2
        assert event["event"] == "Redaction done"

    def test_non_string_values_untouched(self):
        event = scrub_text_fields(None, "info", {"event": "x", "content": None})
        assert event["content"] is None


class TestConfigureLogging:

    def test_sets_root_level_and_single_handler(self):
        configure_logging(log_level="WARNING", environment="production")

        root = logging.getLogger()
        assert root.level == logging.WARNING
        assert len(root.handlers) == 1
        assert logging.getLogger("httpx").level == logging.WARNING

    def test_unknown_level_falls_back_to_info(self):
        configure_logging(log_level="chatty")
        assert logging.getLogger().level == logging.INFO
