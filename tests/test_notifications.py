from covidsim.engines.notifications import NotificationBus, Tick, SimulationReset


def test_drain_delivers_in_order_once():
    bus = NotificationBus()
    seen = []
    bus.subscribe(Tick, lambda evt: seen.append(evt.snapshot["day"]))
    bus.subscribe("SimulationReset", lambda evt: seen.append("reset"))

    bus.emit(Tick(snapshot={"day": 1}))
    bus.emit(SimulationReset(snapshot={}))
    bus.emit(Tick(snapshot={"day": 2}))
    assert bus.pending_count() == 3

    assert bus.drain() == 3
    assert seen == [1, "reset", 2]
    assert bus.drain() == 0
    assert seen == [1, "reset", 2]
    assert bus.stats() == {"Tick": 2, "SimulationReset": 1}


def test_unsubscribe():
    bus = NotificationBus()
    seen = []
    handler = seen.append
    bus.subscribe(Tick, handler)

    assert bus.unsubscribe("Tick", handler)
    assert not bus.unsubscribe(Tick, handler)
    bus.emit(Tick(snapshot={}))
    bus.drain()
    assert seen == []


def test_handler_error_is_isolated(capsys):
    bus = NotificationBus()
    seen = []

    def broken(evt):
        raise ValueError("boom")

    bus.subscribe(Tick, broken)
    bus.subscribe(Tick, seen.append)
    bus.emit(Tick(snapshot={}))
    bus.drain()

    assert len(seen) == 1
    assert "Notification Error (Tick): boom" in capsys.readouterr().out


def test_clear_drops_pending():
    bus = NotificationBus()
    bus.emit(Tick(snapshot={}))
    bus.clear()
    assert bus.drain() == 0
