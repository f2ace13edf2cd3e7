from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional


@dataclass
class ProcessRecord:
    """
    One process: its input data plus the bookkeeping a simulation run fills in.

    Algorithms never mutate the records they are given; they work on copies
    and put a final snapshot of each copy into the result.
    """

    pid: int
    arrival: int
    burst: int
    priority: int = 0
    remaining: Optional[int] = None
    waiting: int = 0
    # Tick the record last entered the ready queue (arrival or last preemption).
    ready_since: Optional[int] = None
    executed: int = 0
    turnaround: int = 0
    response: int = 0
    completion: int = 0

    def __post_init__(self) -> None:
        if self.remaining is None:
            self.remaining = self.burst
        if self.ready_since is None:
            self.ready_since = self.arrival


@dataclass
class Totals:
    turnaround: int = 0
    waiting: int = 0
    response: int = 0

    def averages(self, count: int) -> dict:
        if count <= 0:
            return {"avg_waiting": 0.0, "avg_turnaround": 0.0, "avg_response": 0.0}
        return {
            "avg_waiting": self.waiting / count,
            "avg_turnaround": self.turnaround / count,
            "avg_response": self.response / count,
        }


@dataclass
class ScheduledSlice:
    """
    One contiguous slice of execution for a process in the Gantt chart.
    """

    pid: int
    start_time: int
    end_time: int


@dataclass
class SystemMetrics:
    cpu_busy_time: int
    idle_time: int
    makespan: int
    throughput: float
    cpu_utilization: float
    starvation_count: int = 0


@dataclass
class ScheduleResult:
    algorithm: str
    quantum: Optional[int]
    processes: List[ProcessRecord] = field(default_factory=list)
    totals: Totals = field(default_factory=Totals)
    # Pid on the CPU at each tick, None for idle ticks.
    trace: List[Optional[int]] = field(default_factory=list)
    timeline: List[ScheduledSlice] = field(default_factory=list)
    system: Optional[SystemMetrics] = None

    @property
    def elapsed(self) -> int:
        return len(self.trace)
