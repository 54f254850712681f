import json
import logging

from nlte.logging_config import QUIET_LOGGERS, setup_logging


def test_stdlib_records_render_as_json(capsys):
    setup_logging("INFO")

    logging.getLogger("nlte.core.parser").info("Immediate send detected: %s", "1 CELO")

    line = capsys.readouterr().out.strip().splitlines()[-1]
    record = json.loads(line)
    assert record["event"] == "Immediate send detected: 1 CELO"
    assert record["level"] == "info"
    assert record["logger"] == "nlte.core.parser"
    assert record["service"] == "nlte"
    assert "timestamp" in record


def test_third_party_loggers_are_quieted():
    setup_logging("DEBUG")

    assert logging.getLogger().level == logging.DEBUG
    for name in QUIET_LOGGERS:
        assert logging.getLogger(name).level == logging.WARNING
