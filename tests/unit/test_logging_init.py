from __future__ import annotations

import logging

from tourney.log import LabeledFormatter, get_logger, setup_logging


def test_setup_logging_is_idempotent():
    first = setup_logging()
    second = setup_logging(verbose=True)
    assert first is second
    assert len(first.handlers) == 1
    assert first.propagate is False


def test_get_logger_sets_up_once():
    assert get_logger() is setup_logging()


def test_module_loggers_are_children():
    logger = setup_logging()
    assert logging.getLogger("tourney.loader").parent is logger


def test_labeled_formatter():
    record = logging.LogRecord("tourney", logging.WARNING, __file__, 1, "ignoring %r", ("x",), None)
    assert LabeledFormatter().format(record) == "WARN ignoring 'x'"


def test_module_docstring():
    import tourney.log

    assert tourney.log.__doc__.startswith("Logging setup")
