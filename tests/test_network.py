import pytest

from tandem.queues import EventKind
from tandem.simulation import EngineState


def _env(cfg, variates):
    env = EngineState(cfg, variates)
    env.events.schedule(EventKind.END_SIMULATION, cfg.run_length)
    return env


def test_no_transit_link_by_default(base_cfg, scripted):
    env = _env(base_cfg, scripted())
    assert env.transit is None
    assert env.router.transit is None


def test_transit_arrival_tracks_earliest_in_flight(transit_cfg, scripted):
    env = _env(transit_cfg, scripted(exponentials=[5.0], uniforms=[1.5, 0.2]))
    link = env.transit
    link.depart(env)                    # eligible at 1.5
    assert env.events.time_of(EventKind.ARRIVE_STAGE2) == pytest.approx(1.5)
    env.clock.advance(0.5)
    link.depart(env)                    # eligible at 0.7, overtakes
    assert env.events.time_of(EventKind.ARRIVE_STAGE2) == pytest.approx(0.7)
    assert link.in_flight_count == 2
    assert link.max_in_flight_seen == 2

    assert env.events.select_next() is EventKind.ARRIVE_STAGE2
    assert env.clock.current_time == pytest.approx(0.7)
    env.router.on_transit_arrival(env)
    assert link.in_flight_count == 1
    assert env.events.time_of(EventKind.ARRIVE_STAGE2) == pytest.approx(1.5)
    assert env.stage2.server.busy

    assert env.events.select_next() is EventKind.ARRIVE_STAGE2
    env.router.on_transit_arrival(env)
    assert link.in_flight_count == 0
    assert not env.events.is_scheduled(EventKind.ARRIVE_STAGE2)
    assert env.stage2.line.snapshot() == (1.5,)
    assert link.max_in_flight_seen == 2


def test_stage1_completion_enters_transit(transit_cfg, scripted):
    env = _env(transit_cfg, scripted(exponentials=[0.4], uniforms=[1.0]))
    env.stage1.on_arrival(env)
    assert env.events.select_next() is EventKind.COMPLETE_STAGE1
    env.stage1.on_completion(env)
    assert env.stage2.customers_arrived == 0
    assert env.transit.in_flight_count == 1
    assert env.events.time_of(EventKind.ARRIVE_STAGE2) == pytest.approx(1.4)


def test_transit_area(transit_cfg, scripted):
    env = _env(transit_cfg, scripted())
    env.transit.depart(env)
    env.transit.depart(env)
    env.transit.accumulate(0.5)
    assert env.transit.area_in_flight == pytest.approx(1.0)
