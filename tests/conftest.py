import subprocess
from pathlib import Path

import pytest

from label_dispatcher.config import DispatchConfig


class FakeRunner:
    """Stands in for subprocess.run and records every command."""

    def __init__(self):
        self.calls = []
        self.convert_status = 0
        self.print_status = 0
        self.temp_files = []

    def __call__(self, cmd, check=False, **kwargs):
        self.calls.append(list(cmd))
        if cmd[0] == "convert":
            output = Path(cmd[-1])
            self.temp_files.append(output)
            assert output.exists(), "temp file should exist while converting"
            if self.convert_status == 0:
                output.write_bytes(b"\x89PNG fake")
            return subprocess.CompletedProcess(cmd, self.convert_status)
        return subprocess.CompletedProcess(cmd, self.print_status)

    def tools(self):
        return [call[0] for call in self.calls]


@pytest.fixture
def runner(monkeypatch):
    fake = FakeRunner()
    monkeypatch.setattr(subprocess, "run", fake)
    return fake


@pytest.fixture
def config():
    return DispatchConfig(convert_command="convert", driver_command="brother_ql")


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for key in (
        "LABEL_PRINTER_DEVICE",
        "LABEL_SIZE",
        "LABEL_WIDTH",
        "LABEL_HEIGHT",
        "LABEL_PRINTER_MODEL",
        "LABEL_PRINTER_BACKEND",
        "LABEL_DRIVER_COMMAND",
        "LABEL_CONVERT_COMMAND",
        "LABEL_BACKGROUND",
        "LABEL_STRICT_PRINT_STATUS",
    ):
        monkeypatch.delenv(key, raising=False)
    monkeypatch.setattr("label_dispatcher.config.load_dotenv", lambda: False)


@pytest.fixture
def temp_dir(tmp_path, monkeypatch):
    """Directory that scoped temp files are created in."""
    import tempfile

    scratch = tmp_path / "scratch"
    scratch.mkdir()
    monkeypatch.setattr(tempfile, "tempdir", str(scratch))
    return scratch
