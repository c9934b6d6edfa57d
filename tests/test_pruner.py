def test_sweep_cascades_alarms_of_expired_connection(hub):
    hub.connections.upsert('a', hub.clock())
    hub.connections.upsert('b', hub.clock())
    for name in ['tea', 'coffee', 'eggs']:
        hub.alarms.start(name, 'a', hub.clock())
    hub.alarms.start('toast', 'b', hub.clock())

    hub.clock.advance(hub.client_expiry - 1)
    hub.connections.upsert('b', hub.clock())
    hub.clock.advance(2)

    assert hub.pruner.sweep() == ['a']
    assert 'a' not in hub.connections
    assert [alarm.name for alarm in hub.alarms.top(10)] == ['toast']
    hub.assert_consistent()


def test_sweep_reports_nothing_when_all_alive(hub):
    hub.connections.upsert('a', hub.clock())
    hub.clock.advance(hub.client_expiry)

    assert hub.pruner.sweep() == []
    assert 'a' in hub.connections


def test_sweep_uses_explicit_time(hub):
    hub.connections.upsert('a', hub.clock())
    later = hub.clock.advance(hub.client_expiry + 1)
    hub.clock.now = hub.clock.now.replace(year=2000)

    assert hub.pruner.sweep(later) == ['a']


def test_evict_removes_connection_and_alarms(hub):
    hub.connections.upsert('a', hub.clock())
    hub.alarms.start('tea', 'a', hub.clock())

    assert hub.pruner.evict('a') is True
    assert 'a' not in hub.connections
    assert len(hub.alarms) == 0
    assert hub.pruner.evict('a') is False


def test_heartbeat_refresh_prevents_expiry(hub):
    hub.connections.upsert('a', hub.clock())
    hub.alarms.start('tea', 'a', hub.clock())

    for _ in range(50):
        hub.clock.advance(hub.client_expiry - 1)
        assert hub.pruner.sweep() == []
        hub.connections.upsert('a', hub.clock())

    assert 'a' in hub.connections
    assert 'tea' in hub.alarms
