from __future__ import annotations

from pathlib import Path

import pytest

from knxdevinfo.core.errors import ManufacturerTableError
from knxdevinfo.core.manufacturers import load_manufacturers


def _write_table(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


@pytest.fixture(autouse=True)
def _isolated_config(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "cfg"))


def test_load_packaged_table() -> None:
    table = load_manufacturers()
    assert table.name(197) == "Weinzierl Engineering GmbH"
    assert table.name(1) == "Siemens"
    assert table.name(0xFFFF) == "Unknown"
    assert table.warnings == ()


def test_user_table_adds_and_overrides(tmp_path: Path) -> None:
    _write_table(
        tmp_path / "cfg" / "knxdevinfo" / "manufacturers.yaml",
        """
manufacturers:
  1: "Siemens Schweiz AG"
  65000: "Lab prototype"
""",
    )
    table = load_manufacturers()
    assert table.name(65000) == "Lab prototype"
    assert table.name(1) == "Siemens Schweiz AG"
    assert len(table.warnings) == 1
    assert "overrides id 1" in table.warnings[0]


def test_duplicate_ids_rejected(tmp_path: Path) -> None:
    _write_table(
        tmp_path / "cfg" / "knxdevinfo" / "manufacturers.yaml",
        """
manufacturers:
  65000: "First"
  65000: "Second"
""",
    )
    with pytest.raises(ManufacturerTableError, match="Duplicate key"):
        load_manufacturers()


def test_non_integer_id_rejected(tmp_path: Path) -> None:
    _write_table(
        tmp_path / "cfg" / "knxdevinfo" / "manufacturers.yaml",
        """
manufacturers:
  acme: "Acme"
""",
    )
    with pytest.raises(ManufacturerTableError):
        load_manufacturers()


def test_empty_name_rejected(tmp_path: Path) -> None:
    _write_table(
        tmp_path / "cfg" / "knxdevinfo" / "manufacturers.yaml",
        """
manufacturers:
  65000: ""
""",
    )
    with pytest.raises(ManufacturerTableError, match="Schema validation failed"):
        load_manufacturers()
