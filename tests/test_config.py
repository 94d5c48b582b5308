"""
Tests for hierarchical user configuration.
"""

import json

import pytest

from bugduck.exceptions import ConfigError
from bugduck.user_config import UserConfig, clamp_bug_count, get_user_config


def _write_config(path, data):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data), encoding="utf-8")


@pytest.mark.parametrize("raw,expected", [
    (3, 3),
    (0, 1),
    (-4, 1),
    (11, 10),
    ("7", 7),
    ("lots", 3),
    (None, 3),
])
def test_clamp_bug_count(raw, expected):
    assert clamp_bug_count(raw) == expected


def test_defaults(isolated_project):
    config = UserConfig()
    assert config.bugs_per_run == 3
    assert config.bugs_per_save_choices == [1, 2, 3]
    assert config.get("commentary.model") == "gpt-4o-mini"
    assert config.get("missing.key", "fallback") == "fallback"
    assert config.commentary_api_key is None


def test_local_overrides_global(isolated_project, tmp_path):
    _write_config(tmp_path / "home" / ".bugduck" / "config.json", {
        "mutation": {"bugs_per_run": 5},
        "commentary": {"model": "global-model"},
    })
    _write_config(isolated_project / ".bugduck" / "config.json", {"mutation": {"bugs_per_run": 2}})

    config = UserConfig()

    assert config.bugs_per_run == 2
    assert config.get("commentary.model") == "global-model"
    # Untouched defaults survive the merge
    assert config.bugs_per_save_choices == [1, 2, 3]


def test_out_of_range_run_count_is_clamped(isolated_project):
    _write_config(isolated_project / ".bugduck" / "config.json", {"mutation": {"bugs_per_run": 99}})
    assert UserConfig().bugs_per_run == 10


@pytest.mark.parametrize("raw,expected", [
    ([2, 4], [2, 4]),
    (5, [5]),
    ([0, 50, "x"], [1, 10]),
    ([], [1, 2, 3]),
    ("bad", [1, 2, 3]),
])
def test_bugs_per_save_choices(isolated_project, raw, expected):
    _write_config(isolated_project / ".bugduck" / "config.json", {"mutation": {"bugs_per_save": raw}})
    assert UserConfig().bugs_per_save_choices == expected


def test_broken_config_file_is_ignored(isolated_project):
    path = isolated_project / ".bugduck" / "config.json"
    path.parent.mkdir(parents=True)
    path.write_text("{oops", encoding="utf-8")
    assert UserConfig().bugs_per_run == 3


def test_set_local_persists_and_reloads(isolated_project):
    config = get_user_config()
    assert config.set_local("mutation.weights.offByOne", 4)

    assert config.get("mutation.weights") == {"offByOne": 4}
    stored = json.loads((isolated_project / ".bugduck" / "config.json").read_text(encoding="utf-8"))
    assert stored == {"mutation": {"weights": {"offByOne": 4}}}


def test_set_global(isolated_project, tmp_path):
    config = UserConfig()
    assert config.set_global("commentary.enabled", False)
    assert config.get("commentary.enabled") is False
    assert (tmp_path / "home" / ".bugduck" / "config.json").exists()


def test_env_api_key_wins(isolated_project, monkeypatch):
    _write_config(isolated_project / ".bugduck" / "config.json", {"commentary": {"api_key": "from-file"}})
    assert UserConfig().commentary_api_key == "from-file"

    monkeypatch.setenv("BUGDUCK_LLM_API_KEY", "from-env")
    assert UserConfig().commentary_api_key == "from-env"


@pytest.mark.parametrize("key", ["", "mutation..weights", "bogus.value"])
def test_invalid_keys_are_rejected(isolated_project, key):
    with pytest.raises(ConfigError):
        UserConfig().set_local(key, 1)
    assert not (isolated_project / ".bugduck" / "config.json").exists()
