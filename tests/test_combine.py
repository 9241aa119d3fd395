# tests/test_combine.py

from safecall import CancellationSignal, combine_signals


def test_fires_once_on_first_source() -> None:
    a, b = CancellationSignal(), CancellationSignal()
    combined = combine_signals([a, b])
    calls: list[CancellationSignal] = []
    combined.subscribe(calls.append)

    b.fire()
    a.fire()

    assert combined.fired
    assert calls == [combined]
    assert combined.source is b


def test_detaches_from_remaining_sources_after_firing() -> None:
    a, b, c = CancellationSignal(), CancellationSignal(), CancellationSignal()
    combined = combine_signals([a, b, c])
    assert [s.subscriber_count() for s in (a, b, c)] == [1, 1, 1]

    a.fire()

    assert b.subscriber_count() == 0
    assert c.subscriber_count() == 0
    assert not combined.attached


def test_empty_input_never_fires() -> None:
    combined = combine_signals([])
    calls: list[CancellationSignal] = []
    combined.subscribe(calls.append)

    assert not combined.fired
    assert calls == []
    combined.close()
    assert not combined.fired


def test_already_fired_input_short_circuits() -> None:
    live = CancellationSignal()
    fired = CancellationSignal.already_fired()

    combined = combine_signals([live, fired])

    assert combined.fired
    assert combined.source is fired
    assert live.subscriber_count() == 0


def test_duplicate_sources_fire_once() -> None:
    a = CancellationSignal()
    combined = combine_signals([a, a, a])
    calls: list[CancellationSignal] = []
    combined.subscribe(calls.append)

    assert a.subscriber_count() == 1
    assert combined.sources == (a,)

    a.fire()
    a.fire()

    assert calls == [combined]


def test_close_detaches_without_firing() -> None:
    a, b = CancellationSignal(), CancellationSignal()
    combined = combine_signals([a, b])

    combined.close()
    combined.close()
    a.fire()

    assert not combined.fired
    assert b.subscriber_count() == 0


def test_combined_signals_nest() -> None:
    a, b, c = CancellationSignal(), CancellationSignal(), CancellationSignal()
    inner = combine_signals([a, b])
    outer = combine_signals([inner, c])

    b.fire()

    assert inner.fired
    assert outer.fired
    assert outer.source is inner
    assert c.subscriber_count() == 0


def test_firing_combined_directly_detaches_sources() -> None:
    a = CancellationSignal()
    combined = combine_signals([a])

    combined.fire()

    assert combined.fired
    assert not a.fired
    assert a.subscriber_count() == 0
