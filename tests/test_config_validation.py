from pathlib import Path

import pytest

from cursorpager.config import load_config
from cursorpager.config.schema import deep_merge_dicts
from cursorpager.utils.errors import ConfigError


@pytest.mark.parametrize(
    "text",
    [
        "unknown: true\n",
        "paging:\n  page_size: 0\n",
        "paging:\n  timeout_seconds: -1\n",
        "logging:\n  level: LOUD\n",
        "logging:\n  indent: -2\n",
        "store:\n  server_selection_timeout_ms: 0\n",
        "- just\n- a list\n",
        "paging: [unclosed\n",
    ],
)
def test_invalid_config_rejected(tmp_path: Path, text: str) -> None:
    cfg_file = tmp_path / "bad.yml"
    cfg_file.write_text(text, encoding="utf-8")
    with pytest.raises(ConfigError):
        load_config(cfg_file, env={})


def test_partial_override_keeps_defaults(tmp_path: Path) -> None:
    cfg_file = tmp_path / "cfg.yml"
    cfg_file.write_text("paging:\n  page_size: 25\n  timeout_seconds: 2.5\n", encoding="utf-8")
    cfg = load_config(cfg_file, env={})
    assert cfg.paging.page_size == 25
    assert cfg.paging.timeout_seconds == 2.5
    assert cfg.paging.key_field == "_id"


def test_empty_file_uses_defaults(tmp_path: Path) -> None:
    cfg_file = tmp_path / "empty.yml"
    cfg_file.write_text("", encoding="utf-8")
    assert load_config(cfg_file, env={}) == load_config(env={})


def test_missing_file(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "nope.yml", env={})


def test_deep_merge_dicts() -> None:
    a = {"x": {"y": 1, "z": 2}, "k": 1}
    b = {"x": {"z": 3}, "n": 4}
    assert deep_merge_dicts(a, b) == {"x": {"y": 1, "z": 3}, "k": 1, "n": 4}
    assert a == {"x": {"y": 1, "z": 2}, "k": 1}
