# tests/test_logging_setup.py

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from tasktrack.logging_setup import setup_logging


@pytest.fixture()
def root_logging():
    root = logging.getLogger()
    level, handlers = root.level, list(root.handlers)
    yield root
    for h in list(root.handlers):
        root.removeHandler(h)
        h.close()
    root.setLevel(level)
    for h in handlers:
        root.addHandler(h)
    logging.captureWarnings(False)


def test_console_is_filtered_and_file_gets_everything(
    tmp_path: Path, capsys: pytest.CaptureFixture[str], root_logging: logging.Logger
) -> None:
    setup_logging(log_dir=tmp_path / "logs")

    logging.getLogger("tasktrack.demo").debug("quiet detail")
    logging.getLogger("tasktrack.demo").warning("shown on console")
    logging.getLogger("somelib").warning("library noise")
    for h in root_logging.handlers:
        h.flush()

    err = capsys.readouterr().err
    assert "shown on console" in err
    assert "quiet detail" not in err
    assert "library noise" not in err

    log_text = (tmp_path / "logs" / "tasktrack.log").read_text("utf-8")
    assert "quiet detail" in log_text
    assert "library noise" in log_text
