from __future__ import annotations

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from knxdevinfo import cli
from knxdevinfo.api import Client
from knxdevinfo.core.errors import InterrogationCanceled
from knxdevinfo.core.manufacturers import ManufacturerTable

runner = CliRunner()

SNAPSHOT = """
name: Weinzierl KNX IP BAOS
device_descriptor: "07b0"
properties:
  0:
    1: ["0000"]
    71: ["0000", "0003"]
    12: ["00c5"]
  1:
    13: ["00c5 0012 21"]
    5: ["01"]
"""


class FakeClient(Client):
    def __init__(self) -> None:
        super().__init__(manufacturers=ManufacturerTable(names={197: "Weinzierl Engineering GmbH"}))


@pytest.fixture
def snapshot(tmp_path: Path) -> Path:
    path = tmp_path / "device.yaml"
    path.write_text(SNAPSHOT, encoding="utf-8")
    return path


def test_inspect_command(monkeypatch: pytest.MonkeyPatch, snapshot: Path) -> None:
    monkeypatch.setattr(cli, "Client", FakeClient)
    result = runner.invoke(cli.app, ["inspect", str(snapshot)])
    assert result.exit_code == 0
    assert "Reading data from device Weinzierl KNX IP BAOS" in result.stdout
    assert "Device Descriptor = 07B0" in result.stdout
    assert "Manufacturer = Weinzierl Engineering GmbH" in result.stdout
    assert "\nApplication Program Object\n" in result.stdout
    assert "Program Version = Weinzierl Engineering GmbH 0012 v2.1" in result.stdout
    assert "General" not in result.stdout


def test_inspect_raw(monkeypatch: pytest.MonkeyPatch, snapshot: Path) -> None:
    monkeypatch.setattr(cli, "Client", FakeClient)
    result = runner.invoke(cli.app, ["inspect", "--raw", str(snapshot)])
    assert result.exit_code == 0
    assert "Device Descriptor = 07B0 [07b0]" in result.stdout


def test_inspect_json(monkeypatch: pytest.MonkeyPatch, snapshot: Path) -> None:
    monkeypatch.setattr(cli, "Client", FakeClient)
    result = runner.invoke(cli.app, ["inspect", "--json", str(snapshot)])
    assert result.exit_code == 0
    items = json.loads(result.stdout)
    assert items[0] == {
        "category": "General",
        "parameter": "DeviceDescriptor",
        "name": "Device Descriptor",
        "value": "07B0",
        "raw": "07b0",
    }
    assert {"category": "Application Program Object", "parameter": "LoadStateControl"}.items() <= items[-1].items()


def test_inspect_descriptor_failure(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setattr(cli, "Client", FakeClient)
    path = tmp_path / "broken.yaml"
    path.write_text('descriptor_error: "no response"\n', encoding="utf-8")
    result = runner.invoke(cli.app, ["inspect", str(path)])
    assert result.exit_code == 1
    assert "Error: reading device descriptor: no response" in result.stderr


def test_inspect_invalid_snapshot(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setattr(cli, "Client", FakeClient)
    path = tmp_path / "invalid.yaml"
    path.write_text("- not a mapping\n", encoding="utf-8")
    result = runner.invoke(cli.app, ["inspect", str(path)])
    assert result.exit_code == 1
    assert "must contain a mapping at root" in result.stderr


def test_inspect_canceled(monkeypatch: pytest.MonkeyPatch, snapshot: Path) -> None:
    class CancelingClient(FakeClient):
        def read_device_info(self, device, *, descriptor=None, on_item=None):
            raise KeyboardInterrupt

    monkeypatch.setattr(cli, "Client", CancelingClient)
    result = runner.invoke(cli.app, ["inspect", str(snapshot)])
    assert result.exit_code == cli.EXIT_CANCELED
    assert "canceled" in result.stderr


def test_inspect_canceled_by_device(monkeypatch: pytest.MonkeyPatch, snapshot: Path) -> None:
    class InterruptedClient(FakeClient):
        def read_device_info(self, device, *, descriptor=None, on_item=None):
            raise InterrogationCanceled("interrupted")

    monkeypatch.setattr(cli, "Client", InterruptedClient)
    result = runner.invoke(cli.app, ["inspect", str(snapshot)])
    assert result.exit_code == cli.EXIT_CANCELED


def test_manufacturer_command(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(cli, "Client", FakeClient)
    result = runner.invoke(cli.app, ["manufacturer", "197"])
    assert result.exit_code == 0
    assert result.stdout.strip() == "Weinzierl Engineering GmbH"


def test_load_warnings_are_printed(monkeypatch: pytest.MonkeyPatch) -> None:
    class WarningClient(Client):
        def __init__(self) -> None:
            warnings = ("User manufacturer table overrides id 1 (Siemens)",)
            super().__init__(manufacturers=ManufacturerTable(names={}, warnings=warnings))

    monkeypatch.setattr(cli, "Client", WarningClient)
    result = runner.invoke(cli.app, ["manufacturer", "1"])
    assert result.exit_code == 0
    assert "Warning: User manufacturer table overrides id 1 (Siemens)" in result.stderr
    assert result.stdout.strip() == "Unknown"
