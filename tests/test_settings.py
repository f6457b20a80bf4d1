import json

import pytest

from logic_grid_mystery.core.settings import UserSettings


def test_missing_file_keeps_defaults(tmp_path):
    settings = UserSettings(str(tmp_path / "missing.json"))
    settings.load()
    assert settings.theme_prompt == "Classic Mystery"


def test_save_and_load(tmp_path):
    path = str(tmp_path / "settings.json")
    settings = UserSettings(path)
    settings.theme_prompt = "Cyberpunk Heist"
    settings.save()

    reloaded = UserSettings(path)
    reloaded.load()
    assert reloaded.theme_prompt == "Cyberpunk Heist"


@pytest.mark.parametrize("content", ["{broken", "[1, 2]", json.dumps({"save_version": 99, "theme_prompt": "Future"})])
def test_unusable_file_keeps_defaults(tmp_path, content):
    path = tmp_path / "settings.json"
    path.write_text(content, encoding="utf-8")
    settings = UserSettings(str(path))
    settings.load()
    assert settings.theme_prompt == "Classic Mystery"


def test_save_failure_raises(tmp_path):
    settings = UserSettings(str(tmp_path / "no_such_dir" / "settings.json"))
    with pytest.raises(IOError):
        settings.save()
