import io
import json
import os
import typing as t

import pytest

import fishlog
from fishlog import Logger, Severity


class CapturedLogger:
    """A Logger writing into memory, with helpers to read back its records."""

    def __init__(self, level: Severity = Severity.DEBUG) -> None:
        self.stream = io.StringIO()
        self.exit_codes: list[int] = []
        self.logger = Logger(level=level, exit_func=self.exit_codes.append)
        self.logger.set_output(self.stream)

    @property
    def output(self) -> str:
        return self.stream.getvalue()

    def records(self) -> list[dict[str, t.Any]]:
        return [json.loads(line) for line in self.output.splitlines() if line]

    def last(self) -> dict[str, t.Any]:
        records = self.records()
        assert records, "no record was written"
        return records[-1]


@pytest.fixture
def captured() -> CapturedLogger:
    return CapturedLogger()


@pytest.fixture
def log(captured: CapturedLogger) -> Logger:
    return captured.logger


@pytest.fixture(autouse=True)
def reset_global_logger():
    """Each test starts without a process-wide logger."""
    fishlog.reset()
    yield
    fishlog.reset()


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path):
    """Keep FISHLOG_* variables and .env files of the host out of settings."""
    for name in list(os.environ):
        if name.startswith("FISHLOG_"):
            monkeypatch.delenv(name)
    monkeypatch.chdir(tmp_path)
