"""Simulations of operating-system concepts: shell, virtual memory, scheduling, file system, concurrency and a signature scanner."""

__version__ = "0.1.0"