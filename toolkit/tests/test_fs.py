import logging
import os
import stat
from pathlib import Path

from toolkit.core.fs import create_dir, log_error


def test_create_dir_builds_full_chain_and_is_idempotent(tmp_path: Path):
    target = tmp_path / "x" / "y" / "z"
    create_dir(str(target))
    assert target.is_dir()

    (target / "keep.txt").write_text("still here", encoding="utf-8")
    create_dir(str(target))
    assert (target / "keep.txt").read_text(encoding="utf-8") == "still here"
    assert sorted(p.name for p in tmp_path.iterdir()) == ["x"]


def test_create_dir_applies_mode(tmp_path: Path):
    old = os.umask(0o022)
    try:
        create_dir(str(tmp_path / "m"))
    finally:
        os.umask(old)
    assert stat.S_IMODE((tmp_path / "m").stat().st_mode) == 0o755


def test_create_dir_does_not_type_check_existing_entry(tmp_path: Path):
    f = tmp_path / "not-a-dir"
    f.write_text("file", encoding="utf-8")
    create_dir(str(f))
    assert f.is_file()


def test_log_error_ignores_none(caplog):
    with caplog.at_level(logging.DEBUG, logger="toolkit"):
        log_error(None)
    assert caplog.records == []


def test_log_error_writes_error_line(caplog):
    with caplog.at_level(logging.ERROR, logger="toolkit"):
        log_error(RuntimeError("disk on fire"))
    (record,) = caplog.records
    assert record.levelno == logging.ERROR
    assert record.getMessage() == "error: disk on fire"
