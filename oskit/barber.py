"""Sleeping-barber simulations built on a monitor and on semaphores."""

from __future__ import annotations

import argparse
import random
import sys
import threading
import time
from typing import Optional, TextIO

NUM_CUSTOMERS = 10
NUM_CHAIRS = 5


class _Console:
    def __init__(self, out: Optional[TextIO]) -> None:
        self.out = out if out is not None else sys.stdout
        self._lock = threading.Lock()

    def say(self, text: str) -> None:
        with self._lock:
            print(text, file=self.out, flush=True)


def _arrival_delays(count: int, max_delay: int, rng: Optional[random.Random]) -> list[int]:
    rng = rng if rng is not None else random.Random()
    return [rng.randrange(max_delay) if max_delay > 0 else 0 for _ in range(count)]


def _run_customers(target, delays: list[int]) -> None:
    threads = [
        threading.Thread(target=target, args=(cid, delay))
        for cid, delay in enumerate(delays, start=1)
    ]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()


def run_monitor_shop(
    num_customers: int = NUM_CUSTOMERS,
    num_chairs: int = NUM_CHAIRS,
    haircut_seconds: float = 2.0,
    max_arrival_delay: int = 3,
    out: Optional[TextIO] = None,
    rng: Optional[random.Random] = None,
) -> tuple[list[int], list[int]]:
    """Run the shop with a lock and condition variables.

    Arrival delays are drawn from range(max_arrival_delay) seconds.
    Returns the ids of customers served and of those turned away.
    """
    console = _Console(out)
    delays = _arrival_delays(num_customers, max_arrival_delay, rng)
    lock = threading.Lock()
    customer_ready = threading.Condition(lock)
    barber_ready = threading.Condition(lock)
    closing = threading.Event()
    waiting = 0
    called = 0
    served: list[int] = []
    turned_away: list[int] = []

    def barber() -> None:
        nonlocal waiting, called
        while True:
            with lock:
                while waiting == 0 and not closing.is_set():
                    console.say("[Barber] Sleeping. No customers.")
                    customer_ready.wait()
                if waiting == 0:
                    return
                waiting -= 1
                called += 1
                barber_ready.notify()
            console.say("[Barber] Cutting hair...")
            if closing.wait(haircut_seconds):
                return
            console.say("[Barber] Haircut done.")

    def customer(cid: int, delay: int) -> None:
        nonlocal waiting, called
        if delay:
            time.sleep(delay)
        with lock:
            if waiting >= num_chairs:
                turned_away.append(cid)
                seated = False
            else:
                waiting += 1
                console.say(f"[Customer {cid}] Waiting. ({waiting} in queue)")
                customer_ready.notify()
                while called == 0:
                    barber_ready.wait()
                called -= 1
                served.append(cid)
                seated = True
        if seated:
            console.say(f"[Customer {cid}] Getting haircut.")
            console.say(f"[Customer {cid}] Haircut done. Leaving.")
        else:
            console.say(f"[Customer {cid}] No chairs. Leaving.")

    barber_thread = threading.Thread(target=barber)
    barber_thread.start()
    _run_customers(customer, delays)
    with lock:
        closing.set()
        customer_ready.notify_all()
    barber_thread.join()
    console.say("All customers processed. Shop closed.")
    return served, turned_away


def run_semaphore_shop(
    num_customers: int = NUM_CUSTOMERS,
    num_chairs: int = NUM_CHAIRS,
    haircut_seconds: float = 2.0,
    max_arrival_delay: int = 3,
    out: Optional[TextIO] = None,
    rng: Optional[random.Random] = None,
) -> tuple[list[int], list[int]]:
    """Run the shop with counting semaphores; returns (served, turned_away)."""
    console = _Console(out)
    delays = _arrival_delays(num_customers, max_arrival_delay, rng)
    waiting_room = threading.Semaphore(num_chairs)
    barber_chair = threading.Semaphore(0)
    barber_sleep = threading.Semaphore(0)
    haircut_done = threading.Semaphore(0)
    closing = threading.Event()
    record_lock = threading.Lock()
    served: list[int] = []
    turned_away: list[int] = []

    def barber() -> None:
        while True:
            barber_sleep.acquire()
            if closing.is_set():
                return
            barber_chair.release()
            console.say("[Barber] Cutting hair...")
            if haircut_seconds > 0:
                time.sleep(haircut_seconds)
            haircut_done.release()

    def customer(cid: int, delay: int) -> None:
        if delay:
            time.sleep(delay)
        if waiting_room.acquire(blocking=False):
            console.say(f"[Customer {cid}] Sitting in waiting room.")
            barber_sleep.release()
            barber_chair.acquire()
            console.say(f"[Customer {cid}] Getting haircut.")
            with record_lock:
                served.append(cid)
            haircut_done.acquire()
            waiting_room.release()
            console.say(f"[Customer {cid}] Haircut done. Leaving.")
        else:
            with record_lock:
                turned_away.append(cid)
            console.say(f"[Customer {cid}] No chairs. Leaving.")

    barber_thread = threading.Thread(target=barber)
    barber_thread.start()
    _run_customers(customer, delays)
    closing.set()
    barber_sleep.release()
    barber_thread.join()
    console.say("All customers processed. Shop closed.")
    return served, turned_away


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(prog="barber", description="Sleeping barber simulation.")
    parser.add_argument("--semaphore", action="store_true", help="use semaphores")
    parser.add_argument("--customers", type=int, default=NUM_CUSTOMERS)
    parser.add_argument("--chairs", type=int, default=NUM_CHAIRS)
    parser.add_argument("--haircut", type=float, default=2.0, help="seconds per haircut")
    parser.add_argument("--max-arrival", type=int, default=3, help="arrival delay bound")
    args = parser.parse_args(argv)
    run = run_semaphore_shop if args.semaphore else run_monitor_shop
    run(args.customers, args.chairs, args.haircut, args.max_arrival)
    return 0