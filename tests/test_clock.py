from clock import LogicalClock


def test_ticks_strictly_increase_when_source_stalls():
    readings = iter([100, 100, 90, 250])
    clock = LogicalClock(source=lambda: next(readings))
    assert [clock.tick() for _ in range(4)] == [100, 101, 102, 250]
