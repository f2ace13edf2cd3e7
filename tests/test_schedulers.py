import copy
import random

import pytest

from schedsim.algorithms import (
    run_algorithm,
    schedule_fcfs,
    schedule_rr,
    schedule_sjf,
)
from schedsim.errors import CapacityExceededError, InvalidInputError
from schedsim.models import ProcessRecord
from schedsim.observer import EventKind, RecordingObserver


def _procs():
    return [
        ProcessRecord(1, arrival=0, burst=5, priority=2),
        ProcessRecord(2, arrival=1, burst=3, priority=1),
        ProcessRecord(3, arrival=2, burst=1, priority=3),
    ]


def _random_workload(seed, n=6):
    rng = random.Random(seed)
    return [
        ProcessRecord(pid, arrival=rng.randint(0, 12), burst=rng.randint(1, 7), priority=rng.randint(0, 4))
        for pid in range(1, n + 1)
    ]


ALL = [
    pytest.param(lambda ps: schedule_fcfs(ps), id="fcfs"),
    pytest.param(lambda ps: schedule_sjf(ps), id="sjf"),
    pytest.param(lambda ps: schedule_rr(ps, quantum=2), id="rr-q2"),
    pytest.param(lambda ps: schedule_rr(ps, quantum=3), id="rr-q3"),
]


def test_fcfs_order():
    res = schedule_fcfs(_procs())
    assert [p.pid for p in res.processes] == [1, 2, 3]
    assert [p.waiting for p in res.processes] == [0, 4, 6]
    assert [p.turnaround for p in res.processes] == [5, 7, 7]
    assert [p.response for p in res.processes] == [0, 4, 6]
    assert res.trace == [1, 1, 1, 1, 1, 2, 2, 2, 3]


def test_fcfs_totals_and_averages():
    res = schedule_fcfs(_procs())
    assert res.totals.waiting == 10
    assert res.totals.turnaround == 19
    assert res.totals.response == 10
    avg = res.totals.averages(len(res.processes))
    assert avg["avg_waiting"] == pytest.approx(10 / 3)
    assert avg["avg_turnaround"] == pytest.approx(19 / 3)


def test_sjf_does_not_preempt_running_job():
    res = schedule_sjf(_procs())
    assert [p.pid for p in res.processes] == [1, 3, 2]
    assert [p.waiting for p in res.processes] == [0, 3, 5]
    assert [p.turnaround for p in res.processes] == [5, 4, 8]
    assert res.trace == [1, 1, 1, 1, 1, 3, 2, 2, 2]


def test_rr_quantum_2():
    res = schedule_rr(_procs(), quantum=2)
    assert res.trace == [1, 1, 2, 2, 3, 1, 1, 2, 1]
    assert [p.pid for p in res.processes] == [3, 2, 1]
    by_pid = {p.pid: p for p in res.processes}
    assert by_pid[1].waiting == 4
    assert by_pid[1].response == 0
    assert by_pid[2].waiting == 4
    assert by_pid[2].response == 1
    assert by_pid[3].waiting == 2
    assert by_pid[3].turnaround == 3
    assert res.totals.waiting == 10
    assert res.totals.turnaround == 19
    assert res.totals.response == 3


def test_rr_dispatch_sequence():
    obs = RecordingObserver()
    schedule_rr(_procs(), quantum=2, observer=obs)
    assert [e.pid for e in obs.of_kind(EventKind.DISPATCH)] == [1, 2, 3, 1, 2, 1]
    assert [(e.time, e.pid) for e in obs.of_kind(EventKind.TIMEOUT)] == [(2, 1), (4, 2), (7, 1)]


def test_rr_lone_process_is_redispatched():
    res = schedule_rr([ProcessRecord(7, arrival=0, burst=5)], quantum=2)
    assert res.trace == [7] * 5
    assert res.processes[0].waiting == 0
    assert res.processes[0].turnaround == 5
    assert len(res.timeline) == 1


def test_rr_large_quantum_matches_fcfs():
    procs = _procs()
    rr = schedule_rr(procs, quantum=100)
    fcfs = schedule_fcfs(procs)
    assert rr.trace == fcfs.trace
    assert [p.waiting for p in rr.processes] == [p.waiting for p in fcfs.processes]


def test_idle_ticks_advance_the_clock():
    procs = [ProcessRecord(1, arrival=0, burst=2), ProcessRecord(2, arrival=5, burst=1)]
    for schedule in (schedule_fcfs, schedule_sjf):
        res = schedule(procs)
        assert res.trace == [1, 1, None, None, None, 2]
        assert [p.waiting for p in res.processes] == [0, 0]
        assert res.system.idle_time == 3
    res = schedule_rr(procs, quantum=1)
    assert res.trace == [1, 1, None, None, None, 2]


def test_late_first_arrival():
    res = schedule_fcfs([ProcessRecord(1, arrival=3, burst=2)])
    assert res.trace == [None, None, None, 1, 1]
    assert res.processes[0].completion == 5
    assert res.processes[0].waiting == 0


def test_equal_arrivals_keep_input_order():
    procs = [
        ProcessRecord(5, arrival=3, burst=1),
        ProcessRecord(6, arrival=0, burst=2),
        ProcessRecord(7, arrival=3, burst=1),
    ]
    assert [p.pid for p in schedule_fcfs(procs).processes] == [6, 5, 7]


def test_sjf_ties_keep_arrival_order():
    procs = [
        ProcessRecord(1, arrival=0, burst=3),
        ProcessRecord(2, arrival=0, burst=3),
        ProcessRecord(3, arrival=0, burst=1),
    ]
    assert [p.pid for p in schedule_sjf(procs).processes] == [3, 1, 2]


def test_empty_workload():
    res = schedule_fcfs([])
    assert res.processes == []
    assert res.trace == []
    assert res.system.throughput == 0.0


@pytest.mark.parametrize("schedule", ALL)
@pytest.mark.parametrize("seed", range(8))
def test_conservation_and_clock(schedule, seed):
    procs = _random_workload(seed)
    res = schedule(procs)

    assert len(res.processes) == len(procs)
    assert {p.pid for p in res.processes} == {p.pid for p in procs}
    for p in res.processes:
        assert p.turnaround == p.waiting + p.burst
        assert p.remaining == 0
        assert p.completion == p.arrival + p.turnaround
        assert 0 <= p.response <= p.waiting

    assert res.elapsed == res.system.idle_time + sum(p.burst for p in procs)
    assert res.totals.waiting == sum(p.waiting for p in res.processes)
    assert res.totals.turnaround == sum(p.turnaround for p in res.processes)
    assert res.totals.response == sum(p.response for p in res.processes)
    # Results come out in termination order.
    completions = [p.completion for p in res.processes]
    assert completions == sorted(completions)


@pytest.mark.parametrize("schedule", ALL)
def test_input_is_not_mutated(schedule):
    procs = _random_workload(3)
    before = copy.deepcopy(procs)
    res = schedule(procs)
    assert procs == before
    assert all(r is not p for r in res.processes for p in procs)


@pytest.mark.parametrize("schedule", ALL)
def test_repeated_runs_are_independent(schedule):
    procs = _random_workload(5)
    first = schedule(procs)
    second = schedule(procs)
    assert first.processes == second.processes
    assert first.totals == second.totals


@pytest.mark.parametrize("seed", range(8))
def test_fcfs_earlier_arrival_finishes_first(seed):
    res = schedule_fcfs(_random_workload(seed))
    for a in res.processes:
        for b in res.processes:
            if a.arrival < b.arrival:
                assert a.completion <= b.completion


@pytest.mark.parametrize("seed", range(8))
def test_sjf_dispatches_shortest_ready_job(seed):
    procs = _random_workload(seed)
    by_pid = {p.pid: p for p in procs}
    obs = RecordingObserver()
    schedule_sjf(procs, observer=obs)

    dispatched = set()
    for event in obs.of_kind(EventKind.DISPATCH):
        chosen = by_pid[event.pid]
        ready = [p for p in procs if p.arrival <= event.time and p.pid not in dispatched]
        assert chosen.burst == min(p.burst for p in ready)
        dispatched.add(event.pid)


@pytest.mark.parametrize("quantum", [1, 2, 4])
@pytest.mark.parametrize("seed", range(8))
def test_rr_fairness(seed, quantum):
    procs = _random_workload(seed)
    n = len(procs)
    bound = (n - 1) * quantum + max(p.burst for p in procs)
    obs = RecordingObserver()
    schedule_rr(procs, quantum=quantum, observer=obs)

    dispatched_at = {}
    preempted_at = {}
    for event in obs.events:
        if event.kind is EventKind.DISPATCH:
            if event.pid in preempted_at:
                assert event.time - preempted_at.pop(event.pid) <= bound
            dispatched_at[event.pid] = event.time
        elif event.kind in (EventKind.TIMEOUT, EventKind.TERMINATE):
            assert event.time - dispatched_at[event.pid] <= quantum
            if event.kind is EventKind.TIMEOUT:
                preempted_at[event.pid] = event.time


def test_observer_sees_every_lifecycle_step():
    obs = RecordingObserver()
    schedule_fcfs(_procs(), observer=obs)
    assert [e.pid for e in obs.of_kind(EventKind.ARRIVAL)] == [1, 2, 3]
    assert [e.pid for e in obs.of_kind(EventKind.DISPATCH)] == [1, 2, 3]
    assert [(e.time, e.pid) for e in obs.of_kind(EventKind.TERMINATE)] == [(5, 1), (8, 2), (9, 3)]
    assert obs.of_kind(EventKind.TIMEOUT) == []


def test_capacity_exceeded():
    with pytest.raises(CapacityExceededError) as info:
        schedule_fcfs(_procs(), capacity=2)
    assert info.value.count == 3
    assert info.value.capacity == 2
    with pytest.raises(CapacityExceededError):
        schedule_rr(_procs(), quantum=2, capacity=2)


@pytest.mark.parametrize(
    "bad",
    [
        ProcessRecord(9, arrival=0, burst=0),
        ProcessRecord(9, arrival=-1, burst=2),
        ProcessRecord(1, arrival=0, burst=2),
        ProcessRecord(9, arrival=0, burst=1.5),
        ProcessRecord(9, arrival=0.5, burst=2),
        ProcessRecord(9, arrival=0, burst=True),
        ProcessRecord(9, arrival="0", burst=2),
    ],
    ids=["zero-burst", "negative-arrival", "duplicate-pid", "float-burst", "float-arrival", "bool-burst", "str-arrival"],
)
@pytest.mark.parametrize("schedule", ALL)
def test_invalid_processes_rejected(schedule, bad):
    with pytest.raises(InvalidInputError):
        schedule(_procs() + [bad])


@pytest.mark.parametrize("quantum", [None, 0, -2, 1.5, 2.0, True, "2"])
def test_rr_requires_positive_quantum(quantum):
    with pytest.raises(InvalidInputError, match="quantum"):
        schedule_rr(_procs(), quantum=quantum)


def test_run_algorithm_dispatch():
    assert run_algorithm("FCFS", _procs()).algorithm == "FCFS"
    assert run_algorithm("sjf", _procs()).algorithm == "SJF (non-preemptive)"
    res = run_algorithm("rr", _procs(), quantum=2, capacity=3)
    assert res.quantum == 2
    with pytest.raises(InvalidInputError, match="Unknown algorithm"):
        run_algorithm("priority", _procs())


def test_fractional_burst_is_rejected_before_the_run():
    with pytest.raises(InvalidInputError, match="whole ticks"):
        schedule_fcfs([ProcessRecord(1, arrival=0, burst=1.5)])


def test_fractional_quantum_does_not_fall_back_to_fcfs():
    procs = [ProcessRecord(1, arrival=0, burst=4), ProcessRecord(2, arrival=0, burst=4)]
    with pytest.raises(InvalidInputError, match="quantum"):
        schedule_rr(procs, quantum=1.5)
