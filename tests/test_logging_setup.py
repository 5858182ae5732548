import logging

import pytest

from statement_ingest import logging_setup


def test_get_logger_adds_null_handler_until_configured(package_logger):
    logging_setup.get_logger("statement_ingest.test")
    assert [type(h) for h in package_logger.handlers] == [logging.NullHandler]


def test_configure_logging_writes_to_current_stderr(package_logger, capsys):
    logging_setup.get_logger("statement_ingest.test")
    logging_setup.configure_logging(logging.DEBUG)

    logging_setup.get_logger("statement_ingest.test").debug("row %d normalized", 3)

    assert "DEBUG statement_ingest.test: row 3 normalized" in capsys.readouterr().err
    assert not any(isinstance(h, logging.NullHandler) for h in package_logger.handlers)
    assert package_logger.propagate is False


def test_configure_logging_again_only_changes_level(package_logger, capsys):
    logging_setup.configure_logging(logging.DEBUG)
    logging_setup.configure_logging(logging.WARNING)

    assert len(package_logger.handlers) == 1
    assert package_logger.level == logging.WARNING
    logging_setup.get_logger("statement_ingest.test").info("hidden")
    assert "hidden" not in capsys.readouterr().err


@pytest.mark.parametrize(
    ("level", "verbose", "expected"),
    [
        (None, False, logging.INFO),
        ("warning", False, logging.WARNING),
        (" Error ", False, logging.ERROR),
        ("ERROR", True, logging.DEBUG),
        (None, True, logging.DEBUG),
    ],
)
def test_resolve_level(level, verbose, expected):
    assert logging_setup.resolve_level(level, verbose=verbose) == expected


def test_resolve_level_falls_back_to_environment(monkeypatch):
    monkeypatch.setenv("STATEMENT_INGEST_LOG_LEVEL", "warning")
    assert logging_setup.resolve_level() == logging.WARNING
    assert logging_setup.resolve_level("debug") == logging.DEBUG


def test_resolve_level_rejects_unknown_names():
    with pytest.raises(ValueError, match="unknown log level 'loud'"):
        logging_setup.resolve_level("loud")
