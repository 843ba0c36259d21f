import logging

from chaoslab.utils.logging import (
    current_command,
    resolve_log_level,
    set_command_context,
    setup_logging,
)


def test_resolve_log_level():
    assert resolve_log_level(False, False) == "WARNING"
    assert resolve_log_level(True, False) == "INFO"
    assert resolve_log_level(True, True) == "DEBUG"


def test_setup_logging_installs_single_handler():
    setup_logging("INFO")
    setup_logging("WARNING")
    root = logging.getLogger()
    prefixed = [h for h in root.handlers if h.formatter and "%(command)s" in h.formatter._fmt]
    assert len(prefixed) == 1
    assert root.level == logging.WARNING


def test_records_carry_command(capsys):
    setup_logging("WARNING")
    set_command_context("lorenz")
    try:
        assert current_command() == "lorenz"
        logging.getLogger("chaoslab.test").warning("diverged")
        assert "[lorenz] WARNING: diverged" in capsys.readouterr().err
    finally:
        set_command_context("cli")
