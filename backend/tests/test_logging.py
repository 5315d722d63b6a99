"""Tests for JSON log formatting."""

import logging

import orjson

from study_recall.core.logging import JsonFormatter


def test_json_formatter_includes_context_fields() -> None:
    record = logging.LogRecord("study_recall.test", logging.INFO, __file__, 1, "ingested %s", ("a.txt",), None)
    record.ctx_collection = "c1"
    payload = orjson.loads(JsonFormatter().format(record))
    assert payload["message"] == "ingested a.txt"
    assert payload["level"] == "INFO"
    assert payload["ctx_collection"] == "c1"


def test_bound_logger_carries_context(caplog) -> None:
    from study_recall.core.logging import bind

    log = bind(logging.getLogger("study_recall.test"), collection="c1")
    with caplog.at_level(logging.INFO, logger="study_recall.test"):
        log.info("hello", extra={"ctx_document_id": "doc_1"})
    record = caplog.records[-1]
    assert record.ctx_collection == "c1"
    assert record.ctx_document_id == "doc_1"
