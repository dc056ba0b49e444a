from __future__ import annotations

import argparse
import logging

import pytest

import llmbatch.cli.execution_framework as ef
from llmbatch.cli.args_parser import add_common_arguments


def _setup_logger(_: str) -> logging.Logger:
    logger = logging.getLogger("test.execution_framework")
    logger.addHandler(logging.NullHandler())
    return logger


class _Script(ef.BatchScript):
    def __init__(self, outcome) -> None:
        super().__init__("test")
        self.outcome = outcome
        self.args = None

    def create_argument_parser(self) -> argparse.ArgumentParser:
        parser = argparse.ArgumentParser()
        add_common_arguments(parser)
        return parser

    def run_cli(self, args: argparse.Namespace) -> int:
        self.args = args
        if isinstance(self.outcome, BaseException):
            raise self.outcome
        return self.outcome


@pytest.fixture(autouse=True)
def _patch_logger(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(ef, "setup_logger", _setup_logger)


def _exit_code(script: ef.BatchScript, argv) -> int:
    with pytest.raises(SystemExit) as exc_info:
        script.execute(argv)
    return exc_info.value.code


@pytest.mark.unit
def test_execute_exits_with_run_cli_code(config_loader) -> None:
    s = _Script(0)

    assert _exit_code(s, []) == 0
    assert s.config_loader is config_loader
    assert s.config_manager is not None


@pytest.mark.unit
def test_execute_propagates_nonzero_code() -> None:
    assert _exit_code(_Script(130), []) == 130


@pytest.mark.unit
def test_keyboard_interrupt_exits_130(capsys) -> None:
    assert _exit_code(_Script(KeyboardInterrupt()), []) == 130
    assert "cancelled" in capsys.readouterr().out


@pytest.mark.unit
def test_unexpected_error_exits_1(capsys) -> None:
    assert _exit_code(_Script(RuntimeError("kaput")), []) == 1
    assert "[ERROR] Unexpected error: kaput" in capsys.readouterr().out


@pytest.mark.unit
def test_quiet_flag_sets_quiet() -> None:
    s = _Script(0)
    _exit_code(s, ["--quiet"])

    assert s.quiet is True
