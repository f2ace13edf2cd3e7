"""
Tick-driven CPU scheduling simulator.

Runs FCFS, non-preemptive SJF and Round-Robin over a fixed list of
processes and reports waiting, turnaround and response times.
"""

from .algorithms import ALGORITHMS, run_algorithm, schedule_fcfs, schedule_rr, schedule_sjf
from .errors import CapacityExceededError, EmptyQueueError, InvalidInputError, SchedulerError
from .models import ProcessRecord, ScheduleResult, Totals

__all__ = [
    "ALGORITHMS",
    "CapacityExceededError",
    "EmptyQueueError",
    "InvalidInputError",
    "ProcessRecord",
    "ScheduleResult",
    "SchedulerError",
    "Totals",
    "run_algorithm",
    "schedule_fcfs",
    "schedule_rr",
    "schedule_sjf",
]
