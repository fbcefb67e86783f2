import logging

import structlog

from nexus_ledger.config import Settings
from nexus_ledger.logging_config import LogContext, configure_logging, get_logger


class TestLogContext:
    def test_binds_and_unbinds(self):
        structlog.contextvars.clear_contextvars()

        with LogContext(idempotency_key="k1", kind="sale"):
            bound = structlog.contextvars.get_contextvars()
            assert bound == {"idempotency_key": "k1", "kind": "sale"}

        assert structlog.contextvars.get_contextvars() == {}

    def test_keeps_unrelated_context(self):
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(request_id="r1")

        with LogContext(kind="sale"):
            pass

        assert structlog.contextvars.get_contextvars() == {"request_id": "r1"}
        structlog.contextvars.clear_contextvars()


class TestProcessorLogging:
    def test_posted_event_logged(self, processor, make_request, capsys, caplog):
        with caplog.at_level(logging.INFO):
            result = processor.process(make_request(idempotency_key="log-1"))

        assert result.success
        all_output = capsys.readouterr().out + caplog.text
        assert "transaction_posted" in all_output

    def test_rejected_event_logged(self, processor, make_request, capsys, caplog):
        with caplog.at_level(logging.INFO):
            processor.process(make_request(description=""))

        all_output = capsys.readouterr().out + caplog.text
        assert "transaction_rejected" in all_output

    def test_replayed_event_logged(self, processor, make_request, capsys, caplog):
        request = make_request(idempotency_key="log-2")
        processor.process(request)
        with caplog.at_level(logging.INFO):
            processor.process(request)

        all_output = capsys.readouterr().out + caplog.text
        assert "transaction_replayed" in all_output


class TestConfigureLogging:
    def test_json_format(self, capsys, caplog):
        configure_logging(Settings(_env_file=None, log_format="json"))
        logger = get_logger("nexus_ledger.tests")

        with caplog.at_level(logging.INFO):
            logger.info("json_event", amount="10.00")

        all_output = capsys.readouterr().out + caplog.text
        assert '"event": "json_event"' in all_output

    def test_log_file(self, tmp_path):
        log_file = tmp_path / "logs" / "nexus.log"

        configure_logging(Settings(_env_file=None, log_file=log_file))

        assert log_file.parent.exists()
        root = logging.getLogger()
        handlers = [h for h in root.handlers if isinstance(h, logging.FileHandler)]
        for handler in handlers:
            root.removeHandler(handler)
            handler.close()
        assert handlers
