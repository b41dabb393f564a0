import logging

from core.correlation import CorrelationFilter, get_current_correlation_id, with_correlation


def make_record() -> logging.LogRecord:
    return logging.LogRecord("test", logging.INFO, __file__, 1, "message", None, None)


class TestCorrelation:
    def test_no_correlation_by_default(self):
        assert get_current_correlation_id() is None

    def test_with_correlation_sets_and_restores(self):
        with with_correlation("session-1"):
            assert get_current_correlation_id() == "session-1"
            with with_correlation("session-2"):
                assert get_current_correlation_id() == "session-2"
            assert get_current_correlation_id() == "session-1"
        assert get_current_correlation_id() is None

    def test_generates_id_when_none_given(self):
        with with_correlation() as correlation_id:
            assert len(correlation_id) == 12
            assert get_current_correlation_id() == correlation_id

    def test_filter_adds_correlation_id(self):
        record = make_record()
        with with_correlation("session-1"):
            assert CorrelationFilter().filter(record)
        assert record.correlation_id == "session-1"

    def test_filter_placeholder_outside_context(self):
        record = make_record()
        CorrelationFilter().filter(record)
        assert record.correlation_id == "-"
