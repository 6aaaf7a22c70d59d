import logging

from autolearn.diagnostics import build_debug_report
from autolearn.storage import InMemoryPatternStore, LearnedRecord
from autolearn.core import Category
from autolearn.utils import ActivityLogHandler, configure_logging


def test_ring_buffer_keeps_latest():
    handler = ActivityLogHandler(capacity=3)
    log = logging.getLogger("autolearn.test.ring")
    log.addHandler(handler)
    log.setLevel(logging.DEBUG)
    try:
        for i in range(5):
            log.info(f"message {i}")
    finally:
        log.removeHandler(handler)
    assert [e.message for e in handler.records()] == ["message 2", "message 3", "message 4"]
    assert [e.message for e in handler.recent(2)] == ["message 3", "message 4"]
    assert handler.recent(0) == []


def test_filters_and_metadata(activity):
    logging.getLogger("autolearn.learning.x").info("learned", extra={"activity": {"records": 3}})
    logging.getLogger("autolearn.storage.x").warning("slow")

    learned = activity.records(logger_prefix="autolearn.learning")
    assert [e.message for e in learned] == ["learned"]
    assert learned[0].metadata == {"records": 3}
    assert [e.message for e in activity.records(level="warning")] == ["slow"]

    activity.clear()
    assert activity.records() == []


def test_configure_logging_replaces_handler(cfg):
    first = configure_logging(cfg)
    second = configure_logging(cfg)
    try:
        handlers = logging.getLogger("autolearn").handlers
        assert second in handlers
        assert first not in handlers
    finally:
        logging.getLogger("autolearn").removeHandler(second)


def test_debug_report_sections(activity, registry):
    store = InMemoryPatternStore()
    store.upsert(LearnedRecord(kind=Category.FIX_PATCH, content="OLD:\na\n\nNEW:\nb\n\nREASON: bug"))
    store.upsert(LearnedRecord(kind=Category.CODE_SNIPPET, content="fun a() {}"))
    activity.clear()

    logging.getLogger("autolearn.learning.pipeline").info("Learned 2 records", extra={"activity": {"records": 2}})
    try:
        raise ValueError("bad chunk")
    except ValueError:
        logging.getLogger("autolearn.learning.pipeline").exception("Learning task failed")

    report = build_debug_report(store, registry, activity)

    assert report.startswith("=== Autolearn Debug Information ===")
    assert "Total Log Entries: 2" in report
    assert "Info: 1" in report
    assert "Error: 1" in report
    assert "Fix Patches: 1" in report
    assert "Code Snippets: 1" in report
    assert "Metadata Transformations: 0" in report
    assert "Total Records: 2" in report
    assert "Total Score: 2" in report
    assert "No model selected" in report
    assert "Active Model Name: autolearn-offline" in report
    assert "  records: 2" in report
    assert "--- Errors (1) ---" in report
    assert "ValueError: bad chunk" in report
    assert "--- Learning Events (2) ---" in report


def test_debug_report_with_selected_model(activity, registry):
    registry.set_selected("mediapipe_bert_en")
    report = build_debug_report(None, registry, activity)
    assert "No pattern store" in report
    assert "Selected: Mediapipe BERT English" in report
    assert "Type: MEDIAPIPE_BERT" in report
    assert "Ready: False" in report
    assert "--- Errors" not in report
