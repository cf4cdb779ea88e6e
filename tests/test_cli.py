import os
import signal
import subprocess
import sys
import time
from pathlib import Path

import pytest

from label_dispatcher import cli

SRC_DIR = Path(__file__).resolve().parents[1] / "src"


def test_missing_argument_exits_1(runner, temp_dir, capsys):
    assert cli.main([]) == 1
    assert "input file is required" in capsys.readouterr().err
    assert runner.calls == []
    assert list(temp_dir.iterdir()) == []


def test_flags_reach_the_driver(tmp_path, runner, monkeypatch):
    image = tmp_path / "ready.png"
    image.write_bytes(b"\x89PNG fake")

    status = cli.main([
        "--device", "usb://0x04f9:0x2042",
        "--label", "62x29",
        "--model", "QL-700",
        str(image),
    ])

    assert status == 0
    cmd = runner.calls[0]
    assert cmd[cmd.index("--printer") + 1] == "usb://0x04f9:0x2042"
    assert cmd[cmd.index("--label") + 1] == "62x29"
    assert cmd[cmd.index("--model") + 1] == "QL-700"
    assert cmd[-1] == str(image)


def test_svg_with_size_flags(tmp_path, runner, temp_dir, monkeypatch):
    monkeypatch.setenv("LABEL_CONVERT_COMMAND", "convert")
    svg = tmp_path / "label.svg"
    svg.write_text("<svg/>")

    assert cli.main(["--width", "306", "--height", "991", str(svg)]) == 0
    convert_cmd = runner.calls[0]
    assert convert_cmd[convert_cmd.index("-extent") + 1] == "306x991"
    assert list(temp_dir.iterdir()) == []


def test_strict_flag_fails_on_driver_error(tmp_path, runner):
    image = tmp_path / "ready.png"
    image.write_bytes(b"\x89PNG fake")
    runner.print_status = 1

    assert cli.main([str(image)]) == 0
    assert cli.main(["--strict", str(image)]) == 1


def test_invalid_environment_is_usage_error(tmp_path, runner, monkeypatch):
    monkeypatch.setenv("LABEL_HEIGHT", "tall")
    image = tmp_path / "ready.png"
    image.write_bytes(b"\x89PNG fake")

    assert cli.main([str(image)]) == 1
    assert runner.calls == []


def test_exit_on_signals_restores_handlers():
    before = signal.getsignal(signal.SIGTERM)
    with cli.exit_on_signals():
        assert signal.getsignal(signal.SIGTERM) is cli._raise_exit
        with pytest.raises(SystemExit) as excinfo:
            cli._raise_exit(signal.SIGTERM, None)
        assert excinfo.value.code == 128 + signal.SIGTERM
    assert signal.getsignal(signal.SIGTERM) == before


@pytest.mark.skipif(sys.platform == "win32", reason="needs POSIX signals")
def test_sigterm_during_conversion_removes_temp_file(tmp_path):
    scratch = tmp_path / "scratch"
    scratch.mkdir()
    slow_convert = tmp_path / "slow-convert"
    slow_convert.write_text("#!/bin/sh\nexec sleep 30\n")
    slow_convert.chmod(0o755)
    svg = tmp_path / "label.svg"
    svg.write_text("<svg/>")

    env = dict(os.environ)
    env.update(
        TMPDIR=str(scratch),
        LABEL_CONVERT_COMMAND=str(slow_convert),
        PYTHONPATH=os.pathsep.join(filter(None, [str(SRC_DIR), env.get("PYTHONPATH")])),
    )
    proc = subprocess.Popen(
        [sys.executable, "-m", "label_dispatcher", str(svg)],
        cwd=str(tmp_path),
        env=env,
        stdout=subprocess.DEVNULL,
        stderr=subprocess.DEVNULL,
    )
    try:
        deadline = time.monotonic() + 15
        while not list(scratch.glob("label-*.png")):
            assert proc.poll() is None, "dispatcher exited before converting"
            assert time.monotonic() < deadline, "temp file never appeared"
            time.sleep(0.05)

        proc.send_signal(signal.SIGTERM)
        assert proc.wait(timeout=15) == 128 + signal.SIGTERM
    finally:
        if proc.poll() is None:
            proc.kill()
            proc.wait()

    assert list(scratch.iterdir()) == []
