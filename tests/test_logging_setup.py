from __future__ import annotations

import logging

from ghircbot.logging.setup import KeyValueFormatter, configure_logging


def test_extras_are_rendered_as_key_value_pairs() -> None:
    record = logging.LogRecord("Dispatcher", logging.INFO, __file__, 1, "Joined channel", (), None)
    record.channel = "#aria"
    record.status = 200

    line = KeyValueFormatter().format(record)

    assert line.endswith("INFO Dispatcher: Joined channel channel=#aria status=200")
    stamp = line.split(" ")[0]
    assert "T" in stamp and stamp.endswith("Z")


def test_configure_logging_replaces_handlers() -> None:
    root = logging.getLogger()
    saved = list(root.handlers), root.level
    try:
        configure_logging("debug")
        configure_logging("warning")
        assert root.level == logging.WARNING
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, KeyValueFormatter)
    finally:
        root.handlers[:] = saved[0]
        root.setLevel(saved[1])
