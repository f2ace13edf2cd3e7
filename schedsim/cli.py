from __future__ import annotations

import argparse
import logging
import time
from pathlib import Path
from typing import Optional

from rich import box
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from .algorithms import ALGORITHMS, MAX_PROCESSES, run_algorithm
from .errors import SchedulerError
from .gantt import build_rich_gantt, render_gantt
from .metrics import summarize_process_metrics
from .models import ScheduleResult
from .observer import LoggingObserver
from .workload_io import load_workload

DEFAULT_QUANTUM = 2

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="scheduler-sim",
        description="Tick-by-tick CPU scheduling simulator (FCFS, SJF, RR).",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Log every arrival, dispatch, timeout and termination.",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    run_parser = subparsers.add_parser("run", help="Run a scheduling algorithm on a workload file.")
    run_parser.add_argument(
        "--algorithm",
        "-a",
        required=True,
        choices=sorted(ALGORITHMS),
        help="Algorithm to use.",
    )
    run_parser.add_argument(
        "--workload",
        "-w",
        required=True,
        help="Path to JSON or CSV workload file.",
    )
    run_parser.add_argument(
        "--quantum",
        "-q",
        type=int,
        default=None,
        help="Time quantum for round-robin (ignored by FCFS and SJF).",
    )
    run_parser.add_argument(
        "--capacity",
        type=int,
        default=MAX_PROCESSES,
        help=f"Maximum number of processes accepted (default: {MAX_PROCESSES}).",
    )
    run_parser.add_argument(
        "--plain",
        action="store_true",
        help="Draw the Gantt chart as plain text instead of a colored panel.",
    )
    run_parser.add_argument(
        "--step",
        action="store_true",
        help="Replay the run tick by tick in the terminal.",
    )
    run_parser.add_argument(
        "--step-delay",
        type=float,
        default=0.3,
        help="Seconds to wait between ticks when --step is used (default: 0.3).",
    )

    compare_parser = subparsers.add_parser(
        "compare",
        help="Run several algorithms on the same workload and compare average metrics.",
    )
    compare_parser.add_argument(
        "--workload",
        "-w",
        required=True,
        help="Path to JSON or CSV workload file.",
    )
    compare_parser.add_argument(
        "--algorithms",
        "-a",
        nargs="+",
        default=["fcfs", "sjf", "rr"],
        help="Algorithms to compare (default: fcfs sjf rr).",
    )
    compare_parser.add_argument(
        "--quantum",
        "-q",
        type=int,
        default=DEFAULT_QUANTUM,
        help=f"Time quantum used for RR when included (default: {DEFAULT_QUANTUM}).",
    )
    compare_parser.add_argument(
        "--capacity",
        type=int,
        default=MAX_PROCESSES,
        help=f"Maximum number of processes accepted (default: {MAX_PROCESSES}).",
    )

    return parser


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(show_path=False)],
    )


def print_result(result: ScheduleResult, console: Optional[Console] = None, plain: bool = False) -> None:
    """
    Print the Gantt chart, the per-process table and the averaged metrics.
    """
    console = console or Console()

    console.print(f"[bold]Algorithm:[/bold] {result.algorithm}")
    if result.quantum is not None:
        console.print(f"[bold]Quantum:[/bold] {result.quantum}")

    console.print()

    if plain:
        console.print(escape(render_gantt(result.timeline)))
    else:
        panel, time_marks = build_rich_gantt(result.timeline)
        console.print(panel)
        if time_marks:
            console.print(time_marks)

    console.print()

    headers = [
        "Index",
        "PID",
        "Arrive",
        "Burst",
        "Priority",
        "Wait",
        "Turnaround",
        "Response",
        "Complete",
    ]

    proc_table = Table(title="Per-process metrics", box=box.SIMPLE_HEAVY)
    for h in headers:
        justify = "center" if h in {"PID", "Priority"} else "right"
        proc_table.add_column(h, justify=justify)

    for index, p in enumerate(result.processes):
        proc_table.add_row(
            str(index),
            f"P{p.pid}",
            str(p.arrival),
            str(p.burst),
            str(p.priority),
            str(p.waiting),
            str(p.turnaround),
            str(p.response),
            str(p.completion),
        )

    console.print(proc_table)
    console.print()

    summary = result.totals.averages(len(result.processes))
    sys_table = Table(title="System metrics", box=box.SIMPLE_HEAVY)
    sys_table.add_column("Metric")
    sys_table.add_column("Value", justify="right")

    sys_table.add_row("Avg turnaround", f"{summary['avg_turnaround']:.2f}")
    sys_table.add_row("Avg waiting", f"{summary['avg_waiting']:.2f}")
    sys_table.add_row("Avg response", f"{summary['avg_response']:.2f}")
    if result.system:
        sys = result.system
        sys_table.add_row("Elapsed ticks", str(sys.makespan))
        sys_table.add_row("Idle ticks", str(sys.idle_time))
        sys_table.add_row("Throughput (proc/tick)", f"{sys.throughput:.3f}")
        sys_table.add_row("CPU utilization", f"{sys.cpu_utilization*100:.1f}%")
        sys_table.add_row("Starvation count", str(sys.starvation_count))

    console.print(sys_table)


def _animate_result(result: ScheduleResult, delay: float, console: Console) -> None:
    """
    Replay the per-tick trace of a finished run.
    """
    if not result.trace:
        console.print("[red]No execution to animate.[/red]")
        return

    console.print(f"[bold]Simulating {result.algorithm}[/bold] (duration {result.elapsed} ticks)")
    console.print("[dim]Press Ctrl+C to skip animation.[/dim]")

    run_length = 0
    previous: Optional[int] = None
    for t, pid in enumerate(result.trace):
        run_length = run_length + 1 if pid is not None and pid == previous else 1
        previous = pid
        if pid is None:
            console.print(f"t={t:2d}: [dim](idle)[/dim]")
        else:
            console.print(f"t={t:2d}: P{pid} [green]{'█' * run_length}[/green]")
        time.sleep(delay)


def _compare(workload_path: Path, algorithms: list[str], quantum: int, capacity: int,
             console: Console) -> None:
    processes = load_workload(workload_path)

    summary_table = Table(title=f"Algorithm comparison: {workload_path}", box=box.SIMPLE_HEAVY)
    summary_table.add_column("Algorithm")
    summary_table.add_column("Quantum", justify="right")
    summary_table.add_column("Avg waiting", justify="right")
    summary_table.add_column("Avg turnaround", justify="right")
    summary_table.add_column("Avg response", justify="right")
    summary_table.add_column("Elapsed", justify="right")

    for alg in algorithms:
        q = quantum if alg.lower() == "rr" else None
        result = run_algorithm(alg, processes, quantum=q, capacity=capacity)
        summary = summarize_process_metrics(result.processes)
        summary_table.add_row(
            result.algorithm,
            "" if result.quantum is None else str(result.quantum),
            f"{summary['avg_waiting']:.2f}",
            f"{summary['avg_turnaround']:.2f}",
            f"{summary['avg_response']:.2f}",
            str(result.elapsed),
        )

    console.print(summary_table)


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    configure_logging(args.verbose)
    observer = LoggingObserver() if args.verbose else None

    console = Console()

    try:
        if args.command == "run":
            processes = load_workload(Path(args.workload))
            result = run_algorithm(
                args.algorithm,
                processes,
                quantum=args.quantum,
                capacity=args.capacity,
                observer=observer,
            )
            if args.step:
                try:
                    _animate_result(result, args.step_delay, console)
                except KeyboardInterrupt:
                    console.print("[yellow]Animation skipped.[/yellow]")
            print_result(result, console, plain=args.plain)
            return 0

        if args.command == "compare":
            _compare(Path(args.workload), args.algorithms, args.quantum, args.capacity, console)
            return 0
    except (SchedulerError, OSError) as exc:
        logger.debug("run aborted", exc_info=True)
        console.print(f"[red]Error: {escape(str(exc))}[/red]")
        return 1

    parser.error(f"Unknown command: {args.command}")
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
