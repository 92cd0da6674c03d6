import importlib
import json

import pytest

from scoreboard.core import config
from scoreboard.core.config import PlatformConfig, load_platform_config
from scoreboard.core.errors import ConfigError


def test_defaults():
    assert config.SCOREBOARD_PORT == 5005
    assert config.SCOREBOARD_HTTP_TIMEOUT_S == 5.0


def test_env_override_and_invalid_value(monkeypatch, caplog):
    monkeypatch.setenv("SCOREBOARD_HTTP_TIMEOUT_S", "2.5")
    monkeypatch.setenv("SCOREBOARD_PORT", "not-a-port")
    caplog.set_level("WARNING")
    try:
        reloaded = importlib.reload(config)
        assert reloaded.SCOREBOARD_HTTP_TIMEOUT_S == 2.5
        assert reloaded.SCOREBOARD_PORT == 5005
        assert any("SCOREBOARD_PORT" in record.getMessage() for record in caplog.records)
    finally:
        monkeypatch.delenv("SCOREBOARD_HTTP_TIMEOUT_S")
        monkeypatch.delenv("SCOREBOARD_PORT")
        importlib.reload(config)


def test_platform_config_from_mapping():
    cfg = PlatformConfig.from_mapping(
        {"platform": "SchmidtScoreboard", "name": "Rink", "scoreboards": [" ABCDEFGH ", "10.0.0.1"]}
    )
    assert cfg.name == "Rink"
    assert cfg.scoreboards == ["ABCDEFGH", "10.0.0.1"]


def test_platform_config_defaults():
    cfg = PlatformConfig.from_mapping({})
    assert cfg.name == "SchmidtScoreboard"
    assert cfg.scoreboards == []


@pytest.mark.parametrize("data", [{"scoreboards": "ABCDEFGH"}, {"scoreboards": ["ok", 5]}])
def test_platform_config_rejects_bad_shapes(data):
    with pytest.raises(ConfigError):
        PlatformConfig.from_mapping(data)


def test_load_platform_config(tmp_path):
    path = tmp_path / "platform.json"
    path.write_text(json.dumps({"scoreboards": ["AAAAAAAA"]}), encoding="utf-8")
    assert load_platform_config(path).scoreboards == ["AAAAAAAA"]

    path.write_text("{broken", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_platform_config(path)

    path.write_text("[]", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_platform_config(path)


def test_load_platform_config_unreadable_files(tmp_path):
    with pytest.raises(ConfigError):
        load_platform_config(tmp_path / "missing.json")

    with pytest.raises(ConfigError):
        load_platform_config(tmp_path)

    latin1 = tmp_path / "latin1.json"
    latin1.write_bytes(b'{"name": "Eisb\xe4r"}')
    with pytest.raises(ConfigError):
        load_platform_config(latin1)
