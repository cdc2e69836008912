import logging

import pytest

from otto.logging_utils import LOG_FILE_NAME, configure_logging


@pytest.fixture
def bare_root():
    root = logging.getLogger()
    saved = [h for h in root.handlers if getattr(h, "_otto", False)]
    for h in saved:
        root.removeHandler(h)
    yield root
    for h in [h for h in root.handlers if getattr(h, "_otto", False)]:
        root.removeHandler(h)
        h.close()
    for h in saved:
        root.addHandler(h)


def test_logs_to_requested_file(bare_root, tmp_path) -> None:
    log_path = tmp_path / "out" / LOG_FILE_NAME

    assert configure_logging(str(log_path)) == str(log_path)

    logging.getLogger("otto.test").info("hello build log")
    for h in bare_root.handlers:
        h.flush()
    assert "hello build log" in log_path.read_text(encoding="utf-8")


def test_second_call_keeps_first_file(bare_root, tmp_path) -> None:
    first = configure_logging(str(tmp_path / "a.log"))

    assert configure_logging(str(tmp_path / "b.log")) == first
    assert len([h for h in bare_root.handlers if getattr(h, "_otto", False)]) == 2


def test_falls_back_to_working_directory(bare_root, tmp_path, monkeypatch) -> None:
    blocker = tmp_path / "blocker"
    blocker.write_text("", encoding="utf-8")
    cwd = tmp_path / "cwd"
    cwd.mkdir()
    monkeypatch.chdir(cwd)

    chosen = configure_logging(str(blocker / LOG_FILE_NAME))

    assert chosen == str(cwd.resolve() / LOG_FILE_NAME)
