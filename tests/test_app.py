"""Tests for the command-line entry point."""

import logging

import pytest

from mini_mailer import __version__
from mini_mailer.app import main, parse_args, setup_logging
from mini_mailer.config import Config


def test_defaults():
    args = parse_args([])
    assert args.profile is None
    assert not args.debug
    assert not args.paths


def test_profile_and_debug():
    args = parse_args(["--profile", "work", "--debug"])
    assert args.profile == "work"
    assert args.debug


def test_version(capsys):
    with pytest.raises(SystemExit):
        parse_args(["--version"])
    assert __version__ in capsys.readouterr().out


def test_paths(xdg_dirs, capsys):
    assert main(["--paths"]) == 0
    out = capsys.readouterr().out
    assert str(Config.config_file_path()) in out
    assert str(Config.log_file_path()) in out


@pytest.fixture
def package_logger():
    logger = logging.getLogger("mini_mailer")
    handlers, level = list(logger.handlers), logger.level
    yield logger
    for handler in logger.handlers:
        if handler not in handlers:
            handler.close()
    logger.handlers[:] = handlers
    logger.setLevel(level)


def test_debug_logging_to_file(xdg_dirs, package_logger):
    setup_logging(debug=True)
    logging.getLogger("mini_mailer.smtp.transport").debug("hello log")

    for handler in package_logger.handlers:
        handler.flush()
    assert "hello log" in Config.log_file_path().read_text()


def test_no_log_file_without_debug(xdg_dirs, package_logger):
    setup_logging(debug=False)
    assert not Config.log_file_path().exists()
