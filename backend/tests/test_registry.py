from conftest import FakeChannel

from tracker.services.timers import ConnectionRegistry


def test_register_and_lookup():
    registry = ConnectionRegistry()
    channel = FakeChannel('sid-1', 1)
    assert registry.register(1, channel) is None
    assert registry.lookup(1) is channel
    assert registry.lookup(2) is None
    assert registry.channel_for_sid('sid-1') is channel
    assert len(registry) == 1


def test_register_replaces_without_closing():
    registry = ConnectionRegistry()
    first = FakeChannel('sid-1', 1)
    second = FakeChannel('sid-2', 1)
    registry.register(1, first)
    assert registry.register(1, second) is first
    assert registry.lookup(1) is second
    assert not first.closed
    # Superseded channel stays reachable until it disconnects
    assert registry.channel_for_sid('sid-1') is first
    assert len(registry) == 1


def test_stale_unregister_keeps_newer_channel():
    registry = ConnectionRegistry()
    first = FakeChannel('sid-1', 1)
    second = FakeChannel('sid-2', 1)
    registry.register(1, first)
    registry.register(1, second)
    registry.unregister(1, first)
    assert registry.lookup(1) is second
    assert registry.channel_for_sid('sid-1') is None


def test_unregister_current_channel():
    registry = ConnectionRegistry()
    channel = FakeChannel('sid-1', 1)
    registry.register(1, channel)
    registry.unregister(1, channel)
    registry.unregister(1, channel)
    assert registry.lookup(1) is None
    assert registry.channel_for_sid('sid-1') is None
    assert len(registry) == 0


def test_reregistering_same_channel_reports_no_previous():
    registry = ConnectionRegistry()
    channel = FakeChannel('sid-1', 1)
    registry.register(1, channel)
    assert registry.register(1, channel) is None

