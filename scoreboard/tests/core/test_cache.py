import json

import pytest

from scoreboard.core.cache import JsonAccessoryCache
from scoreboard.core.errors import ConfigError
from scoreboard.core.identity import generate_uuid
from scoreboard.core.registry import AccessoryRegistry


def test_missing_file_is_empty_cache(tmp_path):
    cache = JsonAccessoryCache(tmp_path / "accessories.json")
    assert cache.persisted() == []


def test_registration_survives_restart(tmp_path):
    path = tmp_path / "accessories.json"

    first = AccessoryRegistry(JsonAccessoryCache(path))
    report = first.discover(["AAAAAAAA", "10.0.0.1"])
    assert len(report.created) == 2

    saved = json.loads(path.read_text(encoding="utf-8"))
    assert {entry["uuid"] for entry in saved} == {generate_uuid("0.0.0.0"), generate_uuid("10.0.0.1")}

    restarted_cache = JsonAccessoryCache(path)
    restarted = AccessoryRegistry(restarted_cache)
    for record in restarted_cache.persisted():
        restarted.configure_accessory(record)
    again = restarted.discover(["AAAAAAAA", "10.0.0.1"])
    assert again.created == []
    assert [record.context["device"] for record in again.restored] == ["0.0.0.0", "10.0.0.1"]
    assert len(json.loads(path.read_text(encoding="utf-8"))) == 2


@pytest.mark.parametrize(
    "content",
    ["{oops", "{}", '[{"displayName": "no uuid"}]', '[{"uuid": "not-a-uuid"}]'],
)
def test_corrupt_cache_is_config_error(tmp_path, content):
    path = tmp_path / "accessories.json"
    path.write_text(content, encoding="utf-8")
    with pytest.raises(ConfigError):
        JsonAccessoryCache(path)


def test_unreadable_cache_is_config_error(tmp_path):
    directory = tmp_path / "accessories.json"
    directory.mkdir()
    with pytest.raises(ConfigError):
        JsonAccessoryCache(directory)

    binary = tmp_path / "binary.json"
    binary.write_bytes(b"\xff\xfe\x00garbage")
    with pytest.raises(ConfigError):
        JsonAccessoryCache(binary)
