"""Paged virtual memory with a global TLB and FIFO frame replacement."""

from __future__ import annotations

import sys
import time
from collections import deque
from dataclasses import dataclass, field
from typing import Optional, TextIO

PAGE_SIZE = 4096
NUM_PAGES = 50
NUM_FRAMES = 25
MAX_PROCESSES = 20
TLB_SIZE = 8


class VMError(Exception):
    """Raised for invalid process ids, full process tables and bad pages."""


@dataclass
class PageTableEntry:
    frame_number: int = -1
    valid: bool = False
    modified: bool = False
    read_permission: bool = True
    write_permission: bool = True


def _fresh_page_table() -> list[PageTableEntry]:
    return [PageTableEntry() for _ in range(NUM_PAGES)]


@dataclass
class Process:
    process_id: int
    page_table: list[PageTableEntry] = field(default_factory=_fresh_page_table)


@dataclass
class Frame:
    frame_number: int
    occupied: bool = False
    process_id: int = -1
    page_number: int = -1


@dataclass
class TLBEntry:
    page_number: int = 0
    frame_number: int = 0
    valid: bool = False
    use_counter: int = 0


class VirtualMemoryManager:
    """Simulated physical frames, per-process page tables and a shared TLB."""

    def __init__(self, out: Optional[TextIO] = None, disk_delay: float = 1.0):
        self.out = out if out is not None else sys.stdout
        self.disk_delay = disk_delay
        self.processes: list[Process] = []
        self.tlb_hits = 0
        self.tlb_misses = 0
        self.reset()

    def reset(self) -> None:
        """Free every frame, empty the TLB and the replacement queue."""
        self.frames = [Frame(index) for index in range(NUM_FRAMES)]
        self.tlb = [TLBEntry() for _ in range(TLB_SIZE)]
        self._fifo: deque[int] = deque(maxlen=NUM_FRAMES)

    @property
    def process_count(self) -> int:
        return len(self.processes)

    def _say(self, text: str) -> None:
        print(text, file=self.out)

    def create_process(self) -> int:
        """Register a new process and return its id (starting at 1)."""
        if len(self.processes) >= MAX_PROCESSES:
            raise VMError("process table is full")
        process = Process(len(self.processes) + 1)
        self.processes.append(process)
        return process.process_id

    def process(self, vm_pid: int) -> Process:
        if not 1 <= vm_pid <= len(self.processes):
            raise VMError(f"Invalid VM process ID: {vm_pid}")
        return self.processes[vm_pid - 1]

    def allocate_frame(self) -> int:
        """Return a free frame, evicting the oldest loaded one if none is free."""
        for frame in self.frames:
            if not frame.occupied:
                frame.occupied = True
                self._fifo.append(frame.frame_number)
                return frame.frame_number
        victim = self._fifo.popleft()
        for process in self.processes:
            for entry in process.page_table:
                if entry.frame_number == victim:
                    entry.valid = False
                    entry.frame_number = -1
        self._fifo.append(victim)
        return victim

    def tlb_lookup(self, page_number: int) -> Optional[int]:
        """Return the cached frame for a page, or None on a miss."""
        for entry in self.tlb:
            if entry.valid and entry.page_number == page_number:
                entry.use_counter += 1
                self.tlb_hits += 1
                return entry.frame_number
        self.tlb_misses += 1
        return None

    def tlb_add_entry(self, page_number: int, frame_number: int) -> None:
        lru_index = 0
        min_use = self.tlb[0].use_counter
        for index, entry in enumerate(self.tlb[1:], start=1):
            if not entry.valid:
                lru_index = index
                break
            if entry.use_counter < min_use:
                min_use = entry.use_counter
                lru_index = index
        self.tlb[lru_index] = TLBEntry(page_number, frame_number, True, 1)

    def load_page(self, process: Process, page_number: int, hard_fault: bool) -> int:
        """Bring a page into a frame, update tables and the TLB; return the frame."""
        frame_number = self.allocate_frame()
        entry = process.page_table[page_number]
        entry.frame_number = frame_number
        entry.valid = True
        self.frames[frame_number] = Frame(frame_number, True, process.process_id, page_number)
        if hard_fault and self.disk_delay > 0:
            time.sleep(self.disk_delay)
        self.tlb_add_entry(page_number, frame_number)
        kind = "Hard" if hard_fault else "Soft"
        self._say(f"Page Fault ({kind}): Process {process.process_id}, Page {page_number}")
        return frame_number

    def access_memory(
        self, process: Process, page_number: int, offset: int, mode: str
    ) -> Optional[int]:
        """Access a page; return the frame used, or None on a permission violation."""
        if not 0 <= page_number < NUM_PAGES:
            raise VMError(f"page {page_number} out of range")
        entry = process.page_table[page_number]
        frame_number = self.tlb_lookup(page_number)
        if frame_number is not None:
            self._say(
                f"TLB HIT: Frame {frame_number} for Process {process.process_id}, "
                f"Page {page_number}"
            )
        else:
            if not entry.valid:
                self.load_page(process, page_number, True)
            frame_number = entry.frame_number
        if (mode == "r" and not entry.read_permission) or (
            mode == "w" and not entry.write_permission
        ):
            self._say(
                f"Access violation: Process {process.process_id}, Page {page_number}, "
                f"Offset {offset}, Mode {mode}"
            )
            return None
        self._say(
            f"Accessed memory at Frame {frame_number}, Offset {offset} "
            f"for Process {process.process_id}, Mode {mode}"
        )
        return frame_number

    def free_frames(self, process: Process) -> None:
        for entry in process.page_table:
            if entry.valid:
                self.frames[entry.frame_number] = Frame(entry.frame_number)
                entry.valid = False

    def free_process(self, vm_pid: int) -> None:
        self.free_frames(self.process(vm_pid))

    def tlb_state(self) -> str:
        lines = ["", "TLB State:"]
        lines.extend(
            f"Index {index}: Page {entry.page_number} -> Frame {entry.frame_number} "
            f"(Use: {entry.use_counter})"
            for index, entry in enumerate(self.tlb)
            if entry.valid
        )
        lines.append(f"TLB Hits: {self.tlb_hits}, Misses: {self.tlb_misses}")
        return "\n".join(lines) + "\n\n"

    def memory_state(self) -> str:
        lines = ["", "Memory State:"]
        for index, frame in enumerate(self.frames):
            if frame.occupied:
                lines.append(
                    f"Frame {index}: Process {frame.process_id}, Page {frame.page_number}"
                )
            else:
                lines.append(f"Frame {index}: Free")
        return "\n".join(lines) + "\n" + self.tlb_state()