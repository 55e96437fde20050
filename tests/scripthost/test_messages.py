"""
Tests for console message rendering and the JSON logger.
"""

import json
import logging

import pytest

from scripthost.messages import ConsoleMessageType, ConsoleReporter, render
from scripthost.scripthost_logger import ScripthostLogger


def messages_of(caplog):
    return [json.loads(record.getMessage()) for record in caplog.records if record.name == "scripthost"]


def test_render_substitutes_pairs():
    rendered = render("Unable to register <script_name>: <message>", "<script_name>", "greeter.py", "<message>", 3)
    assert rendered == "Unable to register greeter.py: 3"


def test_render_rejects_unpaired_placeholders():
    with pytest.raises(ValueError):
        render("<a> <b>", "<a>", "1", "<b>")


def test_send_by_key_logs_json_line(caplog):
    reporter = ConsoleReporter(ScripthostLogger())

    with caplog.at_level(logging.INFO, logger="scripthost"):
        text = reporter.send_by_key(ConsoleMessageType.ERROR, "script-register-error", "<script_name>", "a/main.py", "<message>", "boom")

    assert text == "Unable to register script: a/main.py, message: boom."
    [line] = messages_of(caplog)
    assert line["level"] == "ERROR"
    assert line["message"] == text
    assert line["caller_name"] == "test_send_by_key_logs_json_line"
    assert line["caller_file"] == "test_messages.py"


def test_unknown_key_is_logged_verbatim(caplog):
    reporter = ConsoleReporter(ScripthostLogger(), messages={"custom": "Hello <who>"})

    with caplog.at_level(logging.INFO, logger="scripthost"):
        assert reporter.send_by_key(ConsoleMessageType.NORMAL, "custom", "<who>", "ops") == "Hello ops"
        assert reporter.send_by_key(ConsoleMessageType.WARNING, "no-such-key") == "no-such-key"

    assert [line["level"] for line in messages_of(caplog)] == ["INFO", "WARNING"]


def test_send_reports_its_caller(caplog):
    reporter = ConsoleReporter(ScripthostLogger())

    with caplog.at_level(logging.INFO, logger="scripthost"):
        reporter.send(ConsoleMessageType.NORMAL, "plain <x>", "<x>", "text")

    [line] = messages_of(caplog)
    assert line["caller_name"] == "test_send_reports_its_caller"


def test_logger_stacklevel_skips_helpers(caplog):
    logger = ScripthostLogger()

    def helper():
        logger.log("from helper", logging.INFO, stacklevel=2)

    with caplog.at_level(logging.INFO, logger="scripthost"):
        helper()
        logger.log("direct", logging.INFO)

    assert [line["caller_name"] for line in messages_of(caplog)] == [
        "test_logger_stacklevel_skips_helpers",
        "test_logger_stacklevel_skips_helpers",
    ]
