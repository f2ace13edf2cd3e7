from __future__ import annotations

from typing import Callable

from .models import ProcessRecord

OrderingRule = Callable[[ProcessRecord, ProcessRecord], int]


def by_arrival(a: ProcessRecord, b: ProcessRecord) -> int:
    """
    Ascending arrival time. Keeps the pending queue in next-to-arrive order.
    """
    return (a.arrival > b.arrival) - (a.arrival < b.arrival)


def by_burst_ascending(a: ProcessRecord, b: ProcessRecord) -> int:
    """
    Ascending burst time, used by SJF to put the shortest ready job first.

    Equal bursts compare as zero so a stable sort keeps their queue order.
    """
    return (a.burst > b.burst) - (a.burst < b.burst)
