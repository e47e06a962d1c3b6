"""Tests for observability/logger.py and observability/metrics.py"""
import io
import json
import logging
import sys


class TestStructuredFormatter:
    def _get_record(
        self,
        msg,
        level=logging.INFO,
        exc_info=None,
        stack_info=None,
        extra_fields=None,
    ):
        record = logging.LogRecord(
            name="test",
            level=level,
            pathname="",
            lineno=0,
            msg=msg,
            args=(),
            exc_info=exc_info,
        )
        if extra_fields is not None:
            record.extra_fields = extra_fields
        if stack_info is not None:
            record.stack_info = stack_info
        return record

    def test_basic_format(self):
        from imgpublish.observability.logger import StructuredFormatter

        fmt = StructuredFormatter()
        result = json.loads(fmt.format(self._get_record("hello world")))
        assert result["message"] == "hello world"
        assert result["level"] == "INFO"
        assert result["logger"] == "test"
        assert "ts" in result

    def test_extra_fields_merged(self):
        from imgpublish.observability.logger import StructuredFormatter

        fmt = StructuredFormatter()
        record = self._get_record(
            "msg", extra_fields={"resolved_path": "assets/a.png", "attempt": 2},
        )
        result = json.loads(fmt.format(record))
        assert result["resolved_path"] == "assets/a.png"
        assert result["attempt"] == 2

    def test_non_json_values_stringified(self):
        from pathlib import PurePosixPath

        from imgpublish.observability.logger import StructuredFormatter

        fmt = StructuredFormatter()
        record = self._get_record("msg", extra_fields={"path": PurePosixPath("a/b.png")})
        assert json.loads(fmt.format(record))["path"] == "a/b.png"

    def test_exception_info_included(self):
        from imgpublish.observability.logger import StructuredFormatter

        fmt = StructuredFormatter()
        try:
            raise ValueError("test error")
        except ValueError:
            exc_info = sys.exc_info()
        result = json.loads(fmt.format(self._get_record("error msg", exc_info=exc_info)))
        assert "ValueError" in result["exception"]

    def test_stack_info_included(self):
        from imgpublish.observability.logger import StructuredFormatter

        fmt = StructuredFormatter()
        record = self._get_record("msg", stack_info="Stack Trace Here")
        assert json.loads(fmt.format(record))["stack_info"] == "Stack Trace Here"


class TestGetLogger:
    def test_returns_logger_with_handler(self):
        from imgpublish.observability.logger import get_logger

        logger = get_logger("test.observability.unique1")
        assert isinstance(logger, logging.Logger)
        assert len(logger.handlers) > 0
        assert logger.propagate is False

    def test_default_level_is_warning(self):
        from imgpublish.observability.logger import get_logger

        assert get_logger("test.observability.default_level").level == logging.WARNING

    def test_string_level(self):
        from imgpublish.observability.logger import get_logger

        logger = get_logger("test.observability.unique2", level="debug")
        assert logger.level == logging.DEBUG

    def test_idempotent_no_duplicate_handlers(self):
        from imgpublish.observability.logger import get_logger

        name = "test.observability.unique3"
        handler_count = len(get_logger(name).handlers)
        assert len(get_logger(name).handlers) == handler_count

    def test_custom_stream(self):
        from imgpublish.observability.logger import get_logger

        stream = io.StringIO()
        logger = get_logger("test.observability.stream_unique", stream=stream)
        logger.warning("upload failed", extra={"extra_fields": {"op": "upload"}})
        line = json.loads(stream.getvalue().strip())
        assert line["message"] == "upload failed"
        assert line["op"] == "upload"

    def test_below_level_suppressed(self):
        from imgpublish.observability.logger import get_logger

        stream = io.StringIO()
        logger = get_logger("test.observability.quiet", stream=stream)
        logger.info("not shown")
        assert stream.getvalue() == ""


class TestSetLevel:
    def test_changes_only_loggers_under_prefix(self):
        from imgpublish.observability.logger import get_logger, set_level

        inside = get_logger("setlevel.app.worker")
        root = get_logger("setlevel.app")
        outside = get_logger("setlevel.application")

        changed = set_level("debug", prefix="setlevel.app")

        assert changed == ["setlevel.app", "setlevel.app.worker"]
        assert inside.level == logging.DEBUG
        assert root.level == logging.DEBUG
        assert outside.level == logging.WARNING

    def test_timestamp_taken_from_record(self):
        from imgpublish.observability.logger import StructuredFormatter

        record = logging.LogRecord("t", logging.INFO, "", 0, "m", (), None)
        record.created = 0.0
        result = json.loads(StructuredFormatter().format(record))
        assert result["ts"] == "1970-01-01T00:00:00+00:00"


class TestMetricsHook:
    def test_noop_satisfies_protocol(self):
        from imgpublish.observability.metrics import MetricsHook, NoopMetricsHook

        assert isinstance(NoopMetricsHook(), MetricsHook)

    def test_noop_discards(self):
        from imgpublish.observability.metrics import NoopMetricsHook

        hook = NoopMetricsHook()
        assert hook.increment("imgpublish.upload_success_total") is None
        assert hook.timing("imgpublish.upload_duration_ms", 12.5) is None

    def test_object_missing_methods_rejected(self):
        from imgpublish.observability.metrics import MetricsHook

        class OnlyIncrement:
            def increment(self, name, value=1, tags=None):
                pass

        assert not isinstance(OnlyIncrement(), MetricsHook)
