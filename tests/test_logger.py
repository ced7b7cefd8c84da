from datetime import datetime

import pytest

from tinyredis import logger


def test_info_goes_to_stdout(capsys):
    logger.info("hello", 1)
    out = capsys.readouterr().out
    assert "[INFO][test_logger.py:" in out
    assert out.rstrip().endswith("hello 1")


@pytest.mark.parametrize(
    "func, flag",
    [
        (logger.debug, "[DEBUG]"),
        (logger.warn, "[WARN]"),
        (logger.error, "[ERROR]"),
    ],
)
def test_level_flags(capsys, func, flag):
    func("message")
    out = capsys.readouterr().out
    assert out.startswith(flag)
    assert "message" in out


def test_fatal_exits(capsys):
    with pytest.raises(SystemExit) as info:
        logger.fatal("boom")
    assert info.value.code == 1
    assert "[FATAL]" in capsys.readouterr().out


def test_must_open_creates_directory(tmp_path):
    directory = tmp_path / "a" / "b"
    with logger.must_open("x.log", str(directory)) as f:
        f.write("first\n")
    with logger.must_open("x.log", str(directory)) as f:
        f.write("second\n")
    assert (directory / "x.log").read_text() == "first\nsecond\n"


def test_setup_writes_file(tmp_path, capsys):
    settings = logger.Settings(
        path=str(tmp_path / "logs"), name="server", ext="log", time_format="%Y-%m-%d"
    )
    logger.setup(settings)
    logger.info("started", 42)
    expected = tmp_path / "logs" / f"server-{datetime.now().strftime('%Y-%m-%d')}.log"
    content = expected.read_text()
    assert "[INFO]" in content
    assert "started 42" in content
    assert "started 42" in capsys.readouterr().out


def test_setup_failure_exits(tmp_path):
    blocker = tmp_path / "file"
    blocker.write_text("")
    settings = logger.Settings(
        path=str(blocker / "sub"), name="n", ext="log", time_format="%Y"
    )
    with pytest.raises(SystemExit):
        logger.setup(settings)