"""
screengraph.diagnostics 單元測試
驗證 RecordingSink 收集、摘要、事件與 context manager 行為。
"""

import pytest

from screengraph.diagnostics import Diagnostic, DiagnosticKind, RecordingSink
from screengraph.event_bus import event_bus
from screengraph.exceptions import NavigationFailedError


@pytest.mark.unit
class TestRecordingSink:
    """收集失敗"""

    @pytest.mark.unit
    def test_record_and_query(self):
        sink = RecordingSink()
        sink.record_failure("Cannot route from Home to Island", "t.py", 10,
                            kind=DiagnosticKind.NO_ROUTE)
        sink.record_failure("something else")
        assert sink.failure_count == 2
        assert [d.description for d in sink.of_kind(DiagnosticKind.NO_ROUTE)] == [
            "Cannot route from Home to Island",
        ]
        assert sink.failures[1].kind is DiagnosticKind.GENERIC

    @pytest.mark.unit
    def test_failures_is_a_copy(self):
        sink = RecordingSink()
        sink.record_failure("x")
        sink.failures.clear()
        assert sink.failure_count == 1

    @pytest.mark.unit
    def test_clear(self):
        sink = RecordingSink()
        sink.record_failure("x")
        sink.clear()
        assert sink.failure_count == 0

    @pytest.mark.unit
    def test_failure_event_emitted(self):
        """每筆失敗發佈 navigator.failure"""
        received = []
        event_bus.on("navigator.failure", lambda e: received.append(e.data))
        RecordingSink().record_failure("Unsuccessfully entered Menu", "t.py", 5,
                                       kind=DiagnosticKind.ENTER_TIMEOUT)
        assert received == [{
            "kind": "enter_timeout", "description": "Unsuccessfully entered Menu",
            "file": "t.py", "line": 5,
        }]


@pytest.mark.unit
class TestSummary:
    """摘要"""

    @pytest.mark.unit
    def test_empty_summary(self):
        assert RecordingSink().summary() == "Navigation: 0 項失敗"

    @pytest.mark.unit
    def test_summary_lists_failures(self):
        sink = RecordingSink()
        sink.record_failure("a", "t.py", 1)
        sink.record_failure("b")
        lines = sink.summary().splitlines()
        assert lines[0] == "Navigation: 2 項失敗"
        assert lines[1] == "  1. [generic] a (t.py:1)"
        assert lines[2] == "  2. [generic] b"

    @pytest.mark.unit
    def test_diagnostic_str_without_file(self):
        assert str(Diagnostic("x", kind=DiagnosticKind.NO_ROUTE)) == "[no_route] x"


@pytest.mark.unit
class TestRaising:
    """raise_if_failed / context manager"""

    @pytest.mark.unit
    def test_raise_if_failed_noop_when_clean(self):
        RecordingSink().raise_if_failed()

    @pytest.mark.unit
    def test_raise_if_failed(self):
        sink = RecordingSink()
        sink.record_failure("x")
        with pytest.raises(NavigationFailedError) as exc_info:
            sink.raise_if_failed()
        assert len(exc_info.value.failures) == 1

    @pytest.mark.unit
    def test_context_manager_raises_at_exit(self):
        with pytest.raises(NavigationFailedError):
            with RecordingSink() as sink:
                sink.record_failure("x")
                sink.record_failure("y")

    @pytest.mark.unit
    def test_context_manager_keeps_original_exception(self):
        """區塊內已拋出例外時不蓋掉它"""
        with pytest.raises(KeyError):
            with RecordingSink() as sink:
                sink.record_failure("x")
                raise KeyError("original")
