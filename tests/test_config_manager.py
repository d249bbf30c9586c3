import json
from pathlib import Path

import pytest

from TagFormula import config_manager


@pytest.fixture
def config_files(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    values = tmp_path / "config.json"
    strings = tmp_path / "ui_strings.json"
    values.write_text(json.dumps({"darkmode": False, "decimal_places": 4}), encoding="utf-8")
    strings.write_text(json.dumps({"darkmode": "Dark mode"}), encoding="utf-8")
    monkeypatch.setattr(config_manager, "config_json", values)
    monkeypatch.setattr(config_manager, "ui_strings", strings)
    return values


def test_load_single_and_all(config_files: Path) -> None:
    assert config_manager.load_setting_value("decimal_places") == 4
    assert config_manager.load_setting_value("all") == {"darkmode": False, "decimal_places": 4}
    assert config_manager.load_setting_description("darkmode") == "Dark mode"


def test_missing_key_returns_default(config_files: Path) -> None:
    assert config_manager.load_setting_value("catalog_url") == 0
    assert config_manager.load_setting_value("catalog_url", "") == ""
    assert config_manager.load_setting_description("catalog_url") == ""


def test_save_roundtrip(config_files: Path) -> None:
    settings = config_manager.load_setting_value("all")
    settings["darkmode"] = True
    assert config_manager.save_setting(settings) == settings
    assert config_manager.load_setting_value("darkmode") is True


@pytest.mark.parametrize("content", [None, "{not json"])
def test_missing_or_corrupt_file_behaves_like_empty(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, content
) -> None:
    path = tmp_path / "config.json"
    if content is not None:
        path.write_text(content, encoding="utf-8")
    monkeypatch.setattr(config_manager, "config_json", path)
    assert config_manager.load_setting_value("all") == {}
    assert config_manager.load_setting_value("decimal_places", 10) == 10


def test_shipped_config_has_every_description() -> None:
    root = Path(__file__).resolve().parent.parent
    values = json.loads((root / "config.json").read_text(encoding="utf-8"))
    strings = json.loads((root / "ui_strings.json").read_text(encoding="utf-8"))
    assert values.keys() == strings.keys()
    assert values["decimal_places"] >= 2
