import pytest

from tandem.errors import EventListExhausted, QueueOverflow
from tandem.queues import EventKind, FutureEventList, SimulationClock, WaitingLine


def test_waiting_line_is_fifo():
    line = WaitingLine("stage1", limit=10)
    for t in (1.0, 2.0, 3.0):
        line.append(t)
    assert len(line) == 3
    assert [line.pop_oldest() for _ in range(3)] == [1.0, 2.0, 3.0]
    assert len(line) == 0


def test_waiting_line_interleaved_push_pop():
    line = WaitingLine("stage1", limit=10)
    line.append(1.0)
    line.append(2.0)
    assert line.pop_oldest() == 1.0
    line.append(3.0)
    assert line.pop_oldest() == 2.0
    line.append(4.0)
    assert line.snapshot() == (3.0, 4.0)
    assert line.peek_oldest() == 3.0


def test_waiting_line_overflow_names_stage_and_time():
    line = WaitingLine("stage2", limit=2)
    line.append(0.5)
    line.append(0.7)
    with pytest.raises(QueueOverflow) as info:
        line.append(0.9)
    assert info.value.stage == "stage2"
    assert info.value.time == 0.9
    assert info.value.limit == 2
    assert "stage2" in str(info.value)
    assert len(line) == 2


def test_pop_from_empty_line():
    line = WaitingLine("stage1", limit=1)
    assert line.peek_oldest() is None
    with pytest.raises(IndexError):
        line.pop_oldest()


def test_select_next_picks_minimum_and_advances_clock():
    clock = SimulationClock()
    fel = FutureEventList(clock)
    fel.schedule(EventKind.ARRIVE_STAGE1, 3.0)
    fel.schedule(EventKind.COMPLETE_STAGE2, 1.5)
    fel.schedule(EventKind.END_SIMULATION, 10.0)
    assert fel.select_next() is EventKind.COMPLETE_STAGE2
    assert clock.current_time == 1.5
    fel.cancel(EventKind.COMPLETE_STAGE2)
    assert fel.select_next() is EventKind.ARRIVE_STAGE1
    assert clock.current_time == 3.0


def test_tie_goes_to_first_declared_kind():
    clock = SimulationClock()
    fel = FutureEventList(clock)
    fel.schedule(EventKind.END_SIMULATION, 2.0)
    fel.schedule(EventKind.COMPLETE_STAGE1, 2.0)
    fel.schedule(EventKind.COMPLETE_STAGE2, 2.0)
    assert fel.select_next() is EventKind.COMPLETE_STAGE1


def test_unscheduled_kinds_are_never_selected():
    clock = SimulationClock()
    fel = FutureEventList(clock)
    fel.schedule(EventKind.END_SIMULATION, 1e40)
    assert not fel.is_scheduled(EventKind.ARRIVE_STAGE1)
    assert fel.select_next() is EventKind.END_SIMULATION


def test_empty_event_list_raises():
    clock = SimulationClock()
    fel = FutureEventList(clock)
    with pytest.raises(EventListExhausted):
        fel.select_next()


def test_clock_elapsed_moves_marker():
    clock = SimulationClock()
    clock.advance(2.5)
    assert clock.elapsed() == 2.5
    assert clock.elapsed() == 0.0
    with pytest.raises(ValueError):
        clock.advance(1.0)
