from __future__ import annotations

from typing import List

from .models import ProcessRecord, ScheduleResult, SystemMetrics


def compute_system_metrics(result: ScheduleResult) -> SystemMetrics:
    """
    Compute throughput and CPU utilization from the per-tick trace of a
    finished run.
    """
    makespan = len(result.trace)
    idle_time = sum(1 for pid in result.trace if pid is None)
    cpu_busy_time = makespan - idle_time

    if not result.processes:
        system = SystemMetrics(
            cpu_busy_time=cpu_busy_time,
            idle_time=idle_time,
            makespan=makespan,
            throughput=0.0,
            cpu_utilization=0.0,
        )
        result.system = system
        return system

    throughput = len(result.processes) / makespan if makespan > 0 else 0.0
    cpu_utilization = cpu_busy_time / makespan if makespan > 0 else 0.0

    # Count processes whose waiting time is more than 2x the average waiting time.
    avg_wait = result.totals.waiting / len(result.processes)
    starvation_count = sum(1 for p in result.processes if p.waiting > 2 * avg_wait)

    system = SystemMetrics(
        cpu_busy_time=cpu_busy_time,
        idle_time=idle_time,
        makespan=makespan,
        throughput=throughput,
        cpu_utilization=cpu_utilization,
        starvation_count=starvation_count,
    )
    result.system = system
    return system


def summarize_process_metrics(processes: List[ProcessRecord]) -> dict:
    """
    Return averages of the key per-process metrics for quick comparison.
    """
    if not processes:
        return {"avg_waiting": 0.0, "avg_turnaround": 0.0, "avg_response": 0.0}

    n = len(processes)
    return {
        "avg_waiting": sum(p.waiting for p in processes) / n,
        "avg_turnaround": sum(p.turnaround for p in processes) / n,
        "avg_response": sum(p.response for p in processes) / n,
    }
