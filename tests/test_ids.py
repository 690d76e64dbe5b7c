from smartplan.agent.ids import IdGenerator


def test_ids_combine_timestamp_and_counter():
    generator = IdGenerator(clock=lambda: 2.0)
    assert generator.next_id() == 2000000
    assert generator.next_id() == 2000001


def test_burst_within_one_tick_never_repeats():
    generator = IdGenerator(clock=lambda: 2.0)
    ids = [generator.next_id() for _ in range(2500)]
    assert len(set(ids)) == len(ids)
    assert ids == sorted(ids)


def test_clock_moving_backwards_stays_monotonic():
    ticks = iter([5.0, 4.0, 4.0])
    generator = IdGenerator(clock=lambda: next(ticks))
    first, second, third = generator.next_id(), generator.next_id(), generator.next_id()
    assert first < second < third
