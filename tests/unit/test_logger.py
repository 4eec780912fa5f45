import logging

import pytest

from invoice_scan.logging.logger import Log, _ContextFormatter


def _record(**extra: object) -> logging.LogRecord:
    record = logging.LogRecord(
        "invoice_scan", logging.INFO, __file__, 1, "Invoice created", None, None
    )
    record.__dict__.update(extra)
    return record


class TestContextFormatter:
    def test_plain_message(self) -> None:
        formatter = _ContextFormatter("[%(levelname)s] %(message)s")
        assert formatter.format(_record()) == "[INFO] Invoice created"

    def test_appends_sorted_context(self) -> None:
        formatter = _ContextFormatter("[%(levelname)s] %(message)s")
        line = formatter.format(_record(size_bytes=12, mime_type="image/png"))
        assert line == "[INFO] Invoice created | mime_type=image/png size_bytes=12"


class TestLog:
    def test_passes_kwargs_as_extra(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.INFO, logger="invoice_scan"):
            Log._logger.propagate = True
            Log.info("Invoice created", invoice_id="01J")
        record = caplog.records[-1]
        assert record.getMessage() == "Invoice created"
        assert record.invoice_id == "01J"  # type: ignore[attr-defined]

    def test_configure_sets_level(self) -> None:
        Log.configure("debug")
        assert Log._logger.level == logging.DEBUG
        assert logging.getLogger("uvicorn.access").level == logging.DEBUG
        Log._logger.propagate = True
