"""Resource contention simulation with starvation timeouts and restarts."""

from __future__ import annotations

import argparse
import sys
import threading
import time
from typing import Optional, TextIO

NUM_PROCESSES = 5
STARVATION_TIMEOUT = 5.0


def run_simulation(
    log: TextIO,
    num_processes: int = NUM_PROCESSES,
    starvation_timeout: float = STARVATION_TIMEOUT,
    work_seconds: float = 4.0,
    retry_seconds: float = 1.0,
) -> list[int]:
    """Run worker threads competing for one resource; return the acquisition order."""
    resource = threading.Lock()
    log_lock = threading.Lock()
    order: list[int] = []

    def record(text: str) -> None:
        with log_lock:
            log.write(text + "\n")
            log.flush()

    def worker(pid: int) -> None:
        record(f"Process {pid}: Started and attempting to access resource...")
        wait_start = time.monotonic()
        while True:
            if resource.acquire(blocking=False):
                try:
                    record(f"Process {pid}: Acquired resource.")
                    order.append(pid)
                    time.sleep(work_seconds)
                finally:
                    resource.release()
                record(f"Process {pid}: Released resource and completed.")
                return
            if time.monotonic() - wait_start >= starvation_timeout:
                record(f"Process {pid}: Starved. Restarting...")
                wait_start = time.monotonic()
            else:
                record(f"Process {pid}: Waiting for resource...")
            time.sleep(retry_seconds)

    threads = [
        threading.Thread(target=worker, args=(pid,)) for pid in range(1, num_processes + 1)
    ]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()
    return order


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(prog="deadlock", description="Starvation avoidance demo.")
    parser.add_argument("--log", default="activity_log.txt")
    parser.add_argument("--processes", type=int, default=NUM_PROCESSES)
    parser.add_argument("--timeout", type=float, default=STARVATION_TIMEOUT)
    parser.add_argument("--work", type=float, default=4.0)
    parser.add_argument("--retry", type=float, default=1.0)
    args = parser.parse_args(argv)
    try:
        handle = open(args.log, "w", encoding="utf-8")
    except OSError as exc:
        print(f"Failed to open log file: {exc.strerror}", file=sys.stderr)
        return 1
    with handle:
        run_simulation(handle, args.processes, args.timeout, args.work, args.retry)
    return 0