"""Tests for request span enrichment."""

from unittest.mock import MagicMock

from analyze_fastapi.app.telemetry import _enrich_span_with_request_details


def _span() -> MagicMock:
    span = MagicMock()
    span.is_recording.return_value = True
    return span


def test_enrich_decodes_query_defaults() -> None:
    span = _span()
    scope = {"query_string": b"index=my%20docs&analyzer=std%2Bx&position=true"}

    _enrich_span_with_request_details(span, scope)

    span.set_attribute.assert_any_call("app.analyze.default_corpus", "my docs")
    span.set_attribute.assert_any_call("app.analyze.default_analyzer", "std+x")
    assert span.set_attribute.call_count == 2


def test_enrich_prefers_corpus_over_index() -> None:
    span = _span()

    _enrich_span_with_request_details(span, {"query_string": b"corpus=a&index=b"})

    span.set_attribute.assert_called_once_with("app.analyze.default_corpus", "a")


def test_enrich_skips_non_recording_span() -> None:
    span = MagicMock()
    span.is_recording.return_value = False

    _enrich_span_with_request_details(span, {"query_string": b"analyzer=std"})

    span.set_attribute.assert_not_called()
