from pathlib import Path
from typing import Any

import pytest

from cursorpager.config import load_config, require_store
from cursorpager.utils.errors import ConfigError


def test_env_connection_settings(monkeypatch: Any) -> None:
    monkeypatch.setenv("MONGODB_URI", "mongodb://localhost:27017")
    monkeypatch.setenv("MONGODB_DATABASE", "sample_mflix")
    monkeypatch.setenv("MONGODB_COLLECTION", "movies")
    cfg = load_config()
    assert cfg.store.uri is not None
    assert cfg.store.uri.get_secret_value() == "mongodb://localhost:27017"
    assert "27017" not in repr(cfg.store)
    assert require_store(cfg) == ("mongodb://localhost:27017", "sample_mflix", "movies")


def test_custom_env_names(tmp_path: Path) -> None:
    cfg_file = tmp_path / "cfg.yml"
    cfg_file.write_text('store:\n  uri_env: "APP_MONGO"\n  database: "films"\n')
    cfg = load_config(cfg_file, env={"APP_MONGO": "mongodb://h", "MONGODB_COLLECTION": "c"})
    assert cfg.store.uri_env == "APP_MONGO"
    assert require_store(cfg, env={}) == ("mongodb://h", "films", "c")


def test_env_overrides_yaml(tmp_path: Path) -> None:
    cfg_file = tmp_path / "cfg.yml"
    cfg_file.write_text("store:\n  collection: from_yaml\n")
    cfg = load_config(cfg_file, env={"MONGODB_COLLECTION": "from_env"})
    assert cfg.store.collection == "from_env"


@pytest.mark.parametrize("missing", ["MONGODB_URI", "MONGODB_DATABASE", "MONGODB_COLLECTION"])
def test_require_store_names_missing_variable(missing: str) -> None:
    env = {
        "MONGODB_URI": "mongodb://h",
        "MONGODB_DATABASE": "d",
        "MONGODB_COLLECTION": "c",
    }
    del env[missing]
    cfg = load_config(env=env)
    with pytest.raises(ConfigError, match=missing):
        require_store(cfg, env=env)
