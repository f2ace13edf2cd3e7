from __future__ import annotations

import copy
import logging
from dataclasses import replace
from typing import Optional, Sequence

from .errors import CapacityExceededError, InvalidInputError
from .gantt import slices_from_trace
from .metrics import compute_system_metrics
from .models import ProcessRecord, ScheduleResult
from .observer import EventKind, SimulationObserver, TraceEvent
from .ordering import OrderingRule, by_arrival, by_burst_ascending
from .queue import OrderedQueue

logger = logging.getLogger(__name__)

# Upper bound on the number of processes one run will accept.
MAX_PROCESSES = 64


def _is_tick_count(value) -> bool:
    # bool is an int subclass but never a valid tick count.
    return isinstance(value, int) and not isinstance(value, bool)


def validate_processes(processes: Sequence[ProcessRecord], capacity: int = MAX_PROCESSES) -> None:
    """
    Reject inputs a run cannot simulate, before any queue is built.
    """
    if len(processes) > capacity:
        raise CapacityExceededError(len(processes), capacity)

    seen: set[int] = set()
    for p in processes:
        if not _is_tick_count(p.arrival) or not _is_tick_count(p.burst):
            raise InvalidInputError(
                f"P{p.pid}: arrival and burst must be whole ticks (got {p.arrival!r}, {p.burst!r})"
            )
        if p.arrival < 0:
            raise InvalidInputError(f"P{p.pid}: arrival time must be >= 0 (got {p.arrival})")
        if p.burst <= 0:
            raise InvalidInputError(f"P{p.pid}: burst time must be > 0 (got {p.burst})")
        if p.pid in seen:
            raise InvalidInputError(f"Duplicate process id P{p.pid}")
        seen.add(p.pid)


def _emit(observer: Optional[SimulationObserver], kind: EventKind, time: int, record: ProcessRecord,
          waiting: Optional[int] = None) -> None:
    if observer is not None:
        observer.on_event(TraceEvent(kind=kind, time=time, pid=record.pid, waiting=waiting))


def _working_copy(p: ProcessRecord) -> ProcessRecord:
    return replace(
        p,
        remaining=p.burst,
        waiting=0,
        ready_since=p.arrival,
        executed=0,
        turnaround=0,
        response=0,
        completion=0,
    )


def _seed_pending(processes: Sequence[ProcessRecord]) -> OrderedQueue:
    pending = OrderedQueue()
    for p in processes:
        pending.enqueue(_working_copy(p))
    pending.sort_by(by_arrival)
    return pending


def _admit_arrivals(pending: OrderedQueue, ready: OrderedQueue, time: int,
                    observer: Optional[SimulationObserver]) -> int:
    """
    Move every pending record that has arrived by `time` to the ready tail.
    Returns how many were moved.
    """
    moved = 0
    while not pending.is_empty() and pending.peek().arrival <= time:
        record = pending.dequeue()
        ready.enqueue(record)
        _emit(observer, EventKind.ARRIVAL, time, record)
        moved += 1
    return moved


def _terminate(record: ProcessRecord, time: int, result: ScheduleResult,
               observer: Optional[SimulationObserver]) -> None:
    # The running copy is done; the result keeps its own snapshot.
    record.turnaround = record.waiting + record.burst
    record.completion = time
    result.processes.append(copy.copy(record))
    result.totals.turnaround += record.turnaround
    result.totals.response += record.response
    _emit(observer, EventKind.TERMINATE, time, record, record.waiting)


def _finish(result: ScheduleResult) -> ScheduleResult:
    result.timeline = slices_from_trace(result.trace)
    system = compute_system_metrics(result)
    logger.debug(
        "%s finished %d processes in %d ticks (%d idle)",
        result.algorithm,
        len(result.processes),
        result.elapsed,
        system.idle_time,
    )
    return result


def _simulate_non_preemptive(
    algorithm: str,
    processes: Sequence[ProcessRecord],
    ready_rule: Optional[OrderingRule],
    capacity: int,
    observer: Optional[SimulationObserver],
) -> ScheduleResult:
    """
    Tick loop shared by FCFS and SJF. A dispatched process keeps the CPU
    until it terminates; `ready_rule` (if any) reorders the ready queue
    every time new processes arrive.
    """
    validate_processes(processes, capacity)

    n = len(processes)
    pending = _seed_pending(processes)
    ready = OrderedQueue()
    result = ScheduleResult(algorithm=algorithm, quantum=None)

    running: Optional[ProcessRecord] = None
    time = 0
    terminated = 0

    while terminated < n:
        if _admit_arrivals(pending, ready, time, observer) and ready_rule is not None:
            ready.sort_by(ready_rule)

        if running is None and not ready.is_empty() and ready.peek().arrival <= time:
            running = ready.dequeue()
            running.waiting = time - running.arrival
            running.response = running.waiting
            running.executed = 0
            result.totals.waiting += running.waiting
            _emit(observer, EventKind.DISPATCH, time, running, running.waiting)

        result.trace.append(None if running is None else running.pid)
        time += 1

        if running is not None:
            running.remaining -= 1
            running.executed += 1
            if running.remaining == 0:
                _terminate(running, time, result, observer)
                running = None
                terminated += 1

    return _finish(result)


def schedule_fcfs(
    processes: Sequence[ProcessRecord],
    quantum: Optional[int] = None,
    *,
    capacity: int = MAX_PROCESSES,
    observer: Optional[SimulationObserver] = None,
) -> ScheduleResult:
    """
    First-Come First-Serve (non-preemptive).

    Processes enter the ready queue in arrival order (input order on ties)
    and are served in exactly that order. `quantum` is accepted so every
    algorithm shares one call shape; it is ignored.
    """
    return _simulate_non_preemptive("FCFS", processes, None, capacity, observer)


def schedule_sjf(
    processes: Sequence[ProcessRecord],
    quantum: Optional[int] = None,
    *,
    capacity: int = MAX_PROCESSES,
    observer: Optional[SimulationObserver] = None,
) -> ScheduleResult:
    """
    Shortest Job First (non-preemptive).

    Whenever processes arrive the ready queue is re-sorted by burst time,
    so each dispatch picks the shortest job among those ready. A shorter
    job arriving mid-burst waits for the running one to finish.
    """
    return _simulate_non_preemptive("SJF (non-preemptive)", processes, by_burst_ascending, capacity, observer)


def schedule_rr(
    processes: Sequence[ProcessRecord],
    quantum: Optional[int] = None,
    *,
    capacity: int = MAX_PROCESSES,
    observer: Optional[SimulationObserver] = None,
) -> ScheduleResult:
    """
    Round Robin scheduling with a fixed time quantum.

    The ready queue is plain FIFO. A process that has run `quantum` ticks
    goes back to the tail and the new head is dispatched in the same tick.
    Waiting time accumulates over every stretch spent in the ready queue.
    Response time is the wait before the first dispatch only, so the
    response total is the sum of those first waits.
    """
    if not _is_tick_count(quantum) or quantum <= 0:
        raise InvalidInputError("Round Robin requires a positive whole-tick quantum (use --quantum)")
    validate_processes(processes, capacity)

    n = len(processes)
    pending = _seed_pending(processes)
    ready = OrderedQueue()
    result = ScheduleResult(algorithm="Round Robin", quantum=quantum)
    started: set[int] = set()

    def dispatch(current_time: int) -> ProcessRecord:
        record = ready.dequeue()
        delta = current_time - record.ready_since
        record.waiting += delta
        record.executed = 0
        if record.pid not in started:
            record.response = record.waiting
            started.add(record.pid)
        result.totals.waiting += delta
        _emit(observer, EventKind.DISPATCH, current_time, record, record.waiting)
        return record

    running: Optional[ProcessRecord] = None
    time = 0
    terminated = 0

    while terminated < n:
        _admit_arrivals(pending, ready, time, observer)

        if running is None and not ready.is_empty():
            running = dispatch(time)

        # Quantum expired: requeue at the tail and hand the CPU to the head.
        if running is not None and running.executed == quantum:
            running.ready_since = time
            _emit(observer, EventKind.TIMEOUT, time, running, running.waiting)
            ready.enqueue(running)
            running = dispatch(time)

        result.trace.append(None if running is None else running.pid)
        time += 1

        if running is not None:
            running.remaining -= 1
            running.executed += 1
            if running.remaining == 0:
                _terminate(running, time, result, observer)
                running = None
                terminated += 1

    return _finish(result)


ALGORITHMS = {
    "fcfs": schedule_fcfs,
    "sjf": schedule_sjf,
    "rr": schedule_rr,
}


def run_algorithm(name: str, processes: Sequence[ProcessRecord], quantum: Optional[int] = None,
                  **options) -> ScheduleResult:
    """
    Dispatch to the requested algorithm. Quantum only matters for round-robin.
    """
    name = name.lower()
    if name not in ALGORITHMS:
        raise InvalidInputError(f"Unknown algorithm '{name}' (choose from {', '.join(ALGORITHMS)})")

    func = ALGORITHMS[name]
    return func(processes, quantum=quantum, **options)
