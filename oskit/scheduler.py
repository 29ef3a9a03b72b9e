"""Priority scheduler with simulated CPU, I/O, timer and monitor threads."""

from __future__ import annotations

import random
import re
import sys
import threading
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Callable, Iterator, Optional, TextIO

_INT = re.compile(r"\s*([+-]?\d+)")


def _atoi(text: str) -> int:
    match = _INT.match(text)
    return int(match.group(1)) if match else 0


def _scan_two_ints(line: str) -> Optional[tuple[int, int]]:
    first = _INT.match(line)
    if not first:
        return None
    second = _INT.match(line, first.end())
    if not second:
        return None
    return int(first.group(1)), int(second.group(1))


class ProcessState(Enum):
    NEW = auto()
    READY = auto()
    RUNNING = auto()
    WAITING = auto()
    TERMINATED = auto()


@dataclass(eq=False)
class PCB:
    pid: int
    priority: int
    time_limit: int
    state: ProcessState = ProcessState.READY
    cpu_time_used: int = 0
    io_requested: bool = False
    parent: Optional["PCB"] = None
    children: list["PCB"] = field(default_factory=list)

    @property
    def child_count(self) -> int:
        return len(self.children)


class ProcessQueue:
    """Thread-safe queue that hands out the most urgent process first."""

    def __init__(self) -> None:
        self._items: list[PCB] = []
        self._lock = threading.Lock()

    def enqueue(self, pcb: PCB) -> None:
        with self._lock:
            self._items.append(pcb)

    def dequeue(self) -> Optional[PCB]:
        """Remove the lowest priority number, ties broken by shortest time limit."""
        with self._lock:
            if not self._items:
                return None
            best = min(self._items, key=lambda p: (p.priority, p.time_limit))
            self._items.remove(best)
            return best

    def take_where(self, predicate: Callable[[PCB], bool]) -> list[PCB]:
        """Remove and return, in order, every process matching the predicate."""
        with self._lock:
            taken = [p for p in self._items if predicate(p)]
            self._items = [p for p in self._items if not predicate(p)]
            return taken

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)

    def __iter__(self) -> Iterator[PCB]:
        with self._lock:
            snapshot = list(self._items)
        return iter(snapshot)


class TimeManager:
    """Counts timer interrupts against the current quantum."""

    def __init__(self, quantum: int = 2) -> None:
        self.current_quantum = quantum
        self.time_used = 0
        self._lock = threading.Lock()

    def setup(self, quantum: int) -> None:
        with self._lock:
            self.current_quantum = quantum
            self.time_used = 0

    def tick(self) -> None:
        with self._lock:
            self.time_used += 1

    def should_preempt(self) -> bool:
        with self._lock:
            return self.time_used >= self.current_quantum


class Scheduler:
    """Ready and wait queues driven by scheduler, I/O, timer and monitor loops."""

    QUANTUM = 5

    def __init__(
        self,
        out: Optional[TextIO] = None,
        err: Optional[TextIO] = None,
        rng: Optional[random.Random] = None,
        tick_seconds: float = 1.0,
    ) -> None:
        self.out = out if out is not None else sys.stdout
        self.err = err if err is not None else sys.stderr
        self.rng = rng if rng is not None else random.Random()
        self.tick_seconds = tick_seconds
        self.ready_queue = ProcessQueue()
        self.wait_queue = ProcessQueue()
        self.time_manager = TimeManager()
        self._next_pid = 1
        self._pid_lock = threading.Lock()
        self._idle_reported = False
        self._last_counts: Optional[tuple[int, int]] = None
        self._stop = threading.Event()
        self._threads: list[threading.Thread] = []

    def _pause(self, units: float) -> None:
        if self.tick_seconds > 0 and units > 0:
            self._stop.wait(units * self.tick_seconds)

    def create_process(self, priority: int, time_limit: int) -> PCB:
        with self._pid_lock:
            pid = self._next_pid
            self._next_pid += 1
        return PCB(pid=pid, priority=priority, time_limit=time_limit)

    def submit(self, priority: int, time_limit: int) -> PCB:
        """Create a process and place it on the ready queue."""
        pcb = self.create_process(priority, time_limit)
        self.ready_queue.enqueue(pcb)
        return pcb

    def run_once(self) -> Optional[PCB]:
        """Dispatch one process until it blocks, is preempted or finishes."""
        pcb = self.ready_queue.dequeue()
        if pcb is None:
            if not self._idle_reported:
                print("[Scheduler] No ready processes. Idling...\nmy_shell v", file=self.err)
                self._idle_reported = True
            return None
        self._idle_reported = False

        print(f"[Scheduler] Scheduling PID {pcb.pid}", file=self.err)
        self.time_manager.setup(self.QUANTUM)
        pcb.state = ProcessState.RUNNING

        for _ in range(pcb.time_limit):
            if pcb.state is not ProcessState.RUNNING:
                break
            print(f"[CPU] PID {pcb.pid} running... (used: {pcb.cpu_time_used})", file=self.err)
            self._pause(1)
            pcb.cpu_time_used += 1

            if self.rng.randrange(5) == 0 and not pcb.io_requested:
                print(f"[CPU] PID {pcb.pid} requesting I/O", file=self.err)
                pcb.state = ProcessState.WAITING
                pcb.io_requested = True
                self.wait_queue.enqueue(pcb)
                break

            if self.time_manager.should_preempt():
                print(
                    f"[Preempt] PID {pcb.pid} quantum expired, moving back to ready queue",
                    file=self.err,
                )
                pcb.state = ProcessState.READY
                self.ready_queue.enqueue(pcb)
                break

            if pcb.cpu_time_used >= pcb.time_limit:
                print(f"[CPU] PID {pcb.pid} completed execution.", file=self.err)
                pcb.state = ProcessState.TERMINATED
                break
        return pcb

    def complete_io(self) -> list[PCB]:
        """Finish every pending I/O request and move those processes to ready."""
        done = self.wait_queue.take_where(lambda p: p.io_requested)
        for pcb in done:
            print(f"[IO] Completing I/O for PID {pcb.pid}", file=self.out)
            pcb.state = ProcessState.READY
            pcb.io_requested = False
            self.ready_queue.enqueue(pcb)
        return done

    def monitor_once(self) -> bool:
        """Report queue sizes if they changed; return whether a report was made."""
        counts = (len(self.ready_queue), len(self.wait_queue))
        if counts == self._last_counts:
            return False
        ready, waiting = counts
        print(f"[Monitor] Ready: {ready}, Waiting: {waiting}", file=self.out)
        if not ready and not waiting:
            print("my_shell v", file=self.out, flush=True)
        self._last_counts = counts
        return True

    def load_batch_file(self, path) -> list[PCB]:
        """Load 'priority time_limit' lines and 'SLEEP n' pauses from a file."""
        loaded: list[PCB] = []
        with open(path, encoding="utf-8") as handle:
            for line in handle:
                if line.startswith("#") or len(line) < 2:
                    continue
                if line.startswith("SLEEP"):
                    seconds = _atoi(line[6:])
                    print(
                        f"[Batch] Sleeping for {seconds} seconds before next process",
                        file=self.out,
                    )
                    self._pause(seconds)
                    continue
                values = _scan_two_ints(line)
                if values is None:
                    continue
                priority, time_limit = values
                pcb = self.submit(priority, time_limit)
                loaded.append(pcb)
                print(
                    f"[Batch] Loaded PID {pcb.pid} with priority {priority} "
                    f"and time limit {time_limit}",
                    file=self.out,
                )
        return loaded

    @staticmethod
    def _row(pcb: PCB, detailed: bool) -> str:
        if detailed:
            return (
                f"{pcb.pid:3d} {pcb.state.name:>6s} {pcb.priority:8d} "
                f"{pcb.cpu_time_used:4d} {pcb.time_limit:5d} "
                f"{int(pcb.io_requested):2d} {pcb.child_count:3d}"
            )
        return f"{pcb.pid:3d} {pcb.state.name:>6s} {pcb.priority:8d}"

    def display_procs(self, detailed: bool = False) -> str:
        """Write and return a table of the ready and wait queues."""
        lines = ["[procs] Ready Queue:"]
        lines.append(
            "PID STATE PRIORITY USED LIMIT IO CHILDREN" if detailed else "PID STATE PRIORITY"
        )
        lines.extend(self._row(pcb, detailed) for pcb in self.ready_queue)
        lines.append("[procs] Wait Queue:")
        lines.extend(self._row(pcb, detailed) for pcb in self.wait_queue)
        text = "\n".join(lines) + "\n"
        self.out.write(text)
        return text

    def _scheduler_loop(self) -> None:
        while not self._stop.is_set():
            if self.run_once() is None:
                self._stop.wait(self.tick_seconds)

    def _io_loop(self) -> None:
        while not self._stop.wait(3 * self.tick_seconds):
            self.complete_io()

    def _timer_loop(self) -> None:
        while not self._stop.wait(self.tick_seconds):
            self.time_manager.tick()

    def _monitor_loop(self) -> None:
        while not self._stop.wait(self.tick_seconds):
            self.monitor_once()

    def start(self) -> None:
        """Launch the I/O, timer, scheduler and monitor threads."""
        if self._threads:
            return
        self._stop.clear()
        self._threads = [
            threading.Thread(target=target, name=name, daemon=True)
            for name, target in (
                ("io", self._io_loop),
                ("timer", self._timer_loop),
                ("scheduler", self._scheduler_loop),
                ("monitor", self._monitor_loop),
            )
        ]
        for thread in self._threads:
            thread.start()

    def stop(self) -> None:
        """Signal the background threads to finish and wait for them."""
        self._stop.set()
        for thread in self._threads:
            thread.join(timeout=5)
        self._threads = []