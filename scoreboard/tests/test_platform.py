from scoreboard.core.bridge import ScoreboardBridge
from scoreboard.core.config import PlatformConfig
from scoreboard.core.identity import generate_uuid
from scoreboard.core.registry import AccessoryRecord
from scoreboard.platform import ScoreboardPlatform


def _factory(device):
    def build(address: str) -> ScoreboardBridge:
        return ScoreboardBridge(address, session=device)

    return build


def test_discovery_builds_accessories_for_valid_tokens(host, device):
    config = PlatformConfig(scoreboards=["AAAAAAAA", "not-8-chars-but-letters", "ZZZZZZZZ", "BADCODE!"])
    platform = ScoreboardPlatform(config, host, bridge_factory=_factory(device))

    report = platform.did_finish_launching()

    assert len(report.failures) == 1
    assert len(host.registered) == 3
    addresses = sorted(accessory.address for accessory in platform.accessories.values())
    assert addresses == ["0.0.0.0", "BADCODE!", "not-8-chars-but-letters"]


def test_restored_accessories_are_not_registered_again(host, device):
    cached = AccessoryRecord(
        uuid=generate_uuid("1.55.109.163"),
        display_name="Main rink",
        context={"device": "1.55.109.163"},
    )
    platform = ScoreboardPlatform(PlatformConfig(scoreboards=["ABCDEFGH"]), host, bridge_factory=_factory(device))
    platform.configure_accessory(cached)

    report = platform.did_finish_launching()

    assert report.restored == [cached]
    assert host.registered == []
    accessory = platform.accessories[cached.uuid]
    assert accessory.record is cached
    assert accessory.bridge.base_url == "http://1.55.109.163:5005/"


def test_did_finish_launching_runs_once(host, device):
    platform = ScoreboardPlatform(PlatformConfig(scoreboards=["10.0.0.1"]), host, bridge_factory=_factory(device))
    first = platform.did_finish_launching()
    second = platform.did_finish_launching()
    assert first is second
    assert len(host.registered) == 1


def test_accessory_events_reach_the_device(host, device, mocker):
    platform = ScoreboardPlatform(PlatformConfig(scoreboards=["10.0.0.1"]), host, bridge_factory=_factory(device))
    platform.did_finish_launching()
    (accessory,) = platform.accessories.values()
    callback = mocker.Mock()
    accessory.handle_get_on(callback)
    callback.assert_called_once_with(None, True)
    assert device.calls[0][1] == "http://10.0.0.1:5005/"
