"""
Tests for request-ID tagging of log records.
"""
import logging

from shortlink_app.logging_config import RequestIdFilter, request_id_var


def make_record() -> logging.LogRecord:
    return logging.LogRecord("shortlink_app.test", logging.INFO, __file__, 1, "hello", None, None)


class TestRequestIdFilter:

    def test_outside_a_request(self):
        record = make_record()

        assert RequestIdFilter().filter(record) is True
        assert record.request_id == "-"

    def test_uses_current_request_id(self):
        token = request_id_var.set("req-abc")
        try:
            record = make_record()
            RequestIdFilter().filter(record)
        finally:
            request_id_var.reset(token)

        assert record.request_id == "req-abc"
