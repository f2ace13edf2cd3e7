from __future__ import annotations


class SchedulerError(Exception):
    """
    Base class for every failure raised by a simulation run.
    """


class EmptyQueueError(SchedulerError, IndexError):
    """Raised by dequeue/peek on an empty queue."""


class CapacityExceededError(SchedulerError):
    def __init__(self, count: int, capacity: int) -> None:
        super().__init__(f"{count} processes exceed the result capacity of {capacity}")
        self.count = count
        self.capacity = capacity


class InvalidInputError(SchedulerError, ValueError):
    """
    Bad process data, quantum, algorithm name or workload file.
    """
