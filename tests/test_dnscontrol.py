"""Host wrapper tests: translate dnscontrol.lua, then run the command."""

import sys
from pathlib import Path

import pytest

from luatojs import dnscontrol


@pytest.fixture
def fake_command(monkeypatch: pytest.MonkeyPatch) -> None:
    """Stand in for dnscontrol with the running interpreter."""
    monkeypatch.setattr(dnscontrol, "COMMAND", sys.executable)


def write_input(tmp_path: Path, source: bytes) -> None:
    (tmp_path / dnscontrol.INPUT_NAME).write_bytes(source)


def test_translates_and_returns_child_status(tmp_path: Path, fake_command) -> None:
    write_input(tmp_path, b'D("example.com", REG)\n')
    code = dnscontrol.main(["-c", "import sys; sys.exit(3)"], cwd=str(tmp_path))
    assert code == 3
    output = (tmp_path / dnscontrol.OUTPUT_NAME).read_bytes()
    assert output == b'D("\\x65\\x78\\x61\\x6d\\x70\\x6c\\x65\\x2e\\x63\\x6f\\x6d", REG);\n'


def test_arguments_are_forwarded_verbatim(tmp_path: Path, fake_command) -> None:
    write_input(tmp_path, b"x = 1\n")
    script = (
        "import sys; "
        "sys.exit(0 if sys.argv[1:] == ['preview', '--full'] else 1)"
    )
    code = dnscontrol.main(["-c", script, "preview", "--full"], cwd=str(tmp_path))
    assert code == 0


def test_child_runs_in_working_directory(tmp_path: Path, fake_command) -> None:
    write_input(tmp_path, b"x = 1\n")
    script = (
        "import os, sys; "
        "sys.exit(0 if os.path.exists('" + dnscontrol.OUTPUT_NAME + "') else 1)"
    )
    assert dnscontrol.main(["-c", script], cwd=str(tmp_path)) == 0


def test_translation_error_skips_write_and_run(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    write_input(tmp_path, b"x = 1\nlocal a, b = 1, 2\n")

    def fail_run(*args, **kwargs):
        raise AssertionError("command must not run")

    monkeypatch.setattr(dnscontrol.subprocess, "run", fail_run)
    code = dnscontrol.main([], cwd=str(tmp_path))
    assert code == 1
    assert not (tmp_path / dnscontrol.OUTPUT_NAME).exists()
    assert capsys.readouterr().err == (
        "error:2:1: multiple names in local declaration\n"
    )


def test_parse_error_skips_write(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    write_input(tmp_path, b"x = \n")
    assert dnscontrol.main([], cwd=str(tmp_path)) == 1
    assert not (tmp_path / dnscontrol.OUTPUT_NAME).exists()
    assert "unexpected symbol near <eof>" in capsys.readouterr().err


def test_missing_input(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert dnscontrol.main([], cwd=str(tmp_path)) == 1
    assert "cannot open" in capsys.readouterr().err
    assert not (tmp_path / dnscontrol.OUTPUT_NAME).exists()


def test_missing_command(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    write_input(tmp_path, b"x = 1\n")
    monkeypatch.setattr(dnscontrol, "COMMAND", str(tmp_path / "no-such-command"))
    assert dnscontrol.main([], cwd=str(tmp_path)) == 127
    assert "command not found" in capsys.readouterr().err
    assert (tmp_path / dnscontrol.OUTPUT_NAME).read_bytes() == b"x = 1;\n"
