"""Tests for runtime settings and structured logging."""

import io
import json
import logging
from decimal import Decimal
from pathlib import Path

import pytest

from printstock.domain.exceptions import InsufficientStockError
from printstock.infrastructure.config import DEFAULT_DATA_DIR, Settings
from printstock.logging_config import (
    StructuredFormatter,
    configure_logging,
    get_logger,
    reset_logging,
)


class TestSettings:

    def test_defaults(self):
        settings = Settings.from_env({})
        assert settings.data_dir == DEFAULT_DATA_DIR
        assert settings.sweep_interval_seconds == 60.0
        assert settings.default_hold_hours == 24.0
        assert settings.log_level == "INFO"
        assert settings.store_path == DEFAULT_DATA_DIR / "printstock.json"

    def test_reads_environment(self, tmp_path):
        settings = Settings.from_env(
            {
                "PRINTSTOCK_DATA_DIR": str(tmp_path),
                "PRINTSTOCK_SWEEP_INTERVAL": "15",
                "PRINTSTOCK_DEFAULT_HOLD_HOURS": "48",
                "PRINTSTOCK_LOG_LEVEL": "debug",
            }
        )
        assert settings.data_dir == Path(tmp_path)
        assert settings.sweep_interval_seconds == 15.0
        assert settings.default_hold_hours == 48.0
        assert settings.log_level == "DEBUG"

    def test_empty_value_means_default(self):
        assert Settings.from_env({"PRINTSTOCK_SWEEP_INTERVAL": ""}).sweep_interval_seconds == 60.0

    @pytest.mark.parametrize("raw", ["0", "-1", "soon"])
    def test_bad_interval_rejected(self, raw):
        with pytest.raises(ValueError, match="PRINTSTOCK_SWEEP_INTERVAL"):
            Settings.from_env({"PRINTSTOCK_SWEEP_INTERVAL": raw})


class TestStructuredLogging:

    def _capture(self, level=logging.DEBUG) -> io.StringIO:
        stream = io.StringIO()
        reset_logging()
        configure_logging(level=level, stream=stream)
        return stream

    def test_emits_one_json_line_with_extra_fields(self):
        stream = self._capture()
        get_logger("test").info(
            "reservation_created", extra={"reservation_id": 4, "quantity": Decimal("2.5")}
        )
        payload = json.loads(stream.getvalue().strip())
        assert payload["message"] == "reservation_created"
        assert payload["level"] == "INFO"
        assert payload["logger"] == "printstock.test"
        assert payload["reservation_id"] == 4
        assert payload["quantity"] == "2.5"
        assert "ts" in payload

    def test_exception_fields(self):
        stream = self._capture()
        try:
            raise InsufficientStockError(1, Decimal("5"), Decimal("2"))
        except InsufficientStockError:
            get_logger("test").exception("rejected")
        payload = json.loads(stream.getvalue().strip())
        assert payload["exc_type"] == "InsufficientStockError"
        assert payload["exc_code"] == "insufficient_stock"
        assert "short by 3" in payload["exc_message"]

    def test_level_filters(self):
        stream = self._capture(level="WARNING")
        get_logger("test").info("quiet")
        get_logger("test").warning("loud")
        lines = stream.getvalue().strip().splitlines()
        assert [json.loads(line)["message"] for line in lines] == ["loud"]

    def test_configure_is_idempotent(self):
        self._capture()
        configure_logging(stream=io.StringIO())
        assert len(logging.getLogger("printstock").handlers) == 1

    def test_formatter_handles_plain_record(self):
        record = logging.LogRecord("printstock.x", logging.ERROR, __file__, 1, "boom %s", ("now",), None)
        payload = json.loads(StructuredFormatter().format(record))
        assert payload["message"] == "boom now"
        assert payload["level"] == "ERROR"
