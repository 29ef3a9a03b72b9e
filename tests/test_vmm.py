import io

import pytest

from oskit.vmm import (
    MAX_PROCESSES,
    NUM_FRAMES,
    TLB_SIZE,
    VirtualMemoryManager,
    VMError,
)


@pytest.fixture
def vm():
    return VirtualMemoryManager(out=io.StringIO(), disk_delay=0)


def test_create_process_ids_match_lookup(vm):
    pids = [vm.create_process() for _ in range(3)]
    assert [vm.process(pid).process_id for pid in pids] == pids
    assert vm.process_count == len(pids)


def test_process_table_full_raises(vm):
    for _ in range(MAX_PROCESSES):
        vm.create_process()
    with pytest.raises(VMError):
        vm.create_process()


def test_invalid_pid_raises(vm):
    vm.create_process()
    with pytest.raises(VMError, match="Invalid VM process ID"):
        vm.free_process(0)
    with pytest.raises(VMError):
        vm.process(vm.process_count + 1)


def test_page_out_of_range_raises(vm):
    proc = vm.process(vm.create_process())
    with pytest.raises(VMError):
        vm.access_memory(proc, -1, 0, "r")


def test_hard_fault_logged_and_frame_marked(vm):
    proc = vm.process(vm.create_process())
    frame = vm.access_memory(proc, 3, 12, "r")
    text = vm.out.getvalue()
    assert "Page Fault (Hard): Process 1, Page 3" in text
    assert proc.page_table[3].valid
    assert proc.page_table[3].frame_number == frame
    assert vm.frames[frame].occupied
    assert vm.frames[frame].page_number == 3


def test_second_access_is_tlb_hit(vm):
    proc = vm.process(vm.create_process())
    first = vm.access_memory(proc, 5, 0, "w")
    second = vm.access_memory(proc, 5, 0, "w")
    assert first == second
    assert "TLB HIT" in vm.out.getvalue()
    assert "TLB Hits: 1, Misses: 1" in vm.tlb_state()


def test_lookup_increments_use_counter(vm):
    proc = vm.process(vm.create_process())
    vm.access_memory(proc, 2, 0, "r")
    entry = next(e for e in vm.tlb if e.valid and e.page_number == 2)
    before = entry.use_counter
    assert vm.tlb_lookup(2) == proc.page_table[2].frame_number
    assert entry.use_counter == before + 1


def test_tlb_miss_returns_none(vm):
    misses = vm.tlb_misses
    assert vm.tlb_lookup(7) is None
    assert vm.tlb_misses == misses + 1


def test_tlb_fills_all_slots(vm):
    proc = vm.process(vm.create_process())
    for page in range(TLB_SIZE):
        vm.access_memory(proc, page, 0, "r")
    assert all(entry.valid for entry in vm.tlb)
    assert {entry.page_number for entry in vm.tlb} == set(range(TLB_SIZE))


def test_tlb_replacement_keeps_size(vm):
    proc = vm.process(vm.create_process())
    for page in range(TLB_SIZE + 2):
        vm.access_memory(proc, page, 0, "r")
    valid = [entry for entry in vm.tlb if entry.valid]
    assert len(valid) == TLB_SIZE
    assert TLB_SIZE + 1 in {entry.page_number for entry in valid}


def test_fifo_eviction_reuses_oldest_frame(vm):
    proc = vm.process(vm.create_process())
    for page in range(NUM_FRAMES):
        vm.access_memory(proc, page, 0, "r")
    assert all(frame.occupied for frame in vm.frames)
    oldest_frame = proc.page_table[0].frame_number
    vm.access_memory(proc, NUM_FRAMES, 0, "r")
    assert proc.page_table[NUM_FRAMES].frame_number == oldest_frame
    assert not proc.page_table[0].valid
    assert proc.page_table[0].frame_number == -1


def test_free_process_releases_frames(vm):
    pid = vm.create_process()
    proc = vm.process(pid)
    for page in range(4):
        vm.access_memory(proc, page, 0, "r")
    vm.free_process(pid)
    assert not any(frame.occupied for frame in vm.frames)
    assert not any(entry.valid for entry in proc.page_table)
    assert vm.memory_state().count(": Free") == NUM_FRAMES


def test_access_violation_returns_none(vm):
    proc = vm.process(vm.create_process())
    proc.page_table[4].read_permission = False
    assert vm.access_memory(proc, 4, 9, "r") is None
    assert "Access violation: Process 1, Page 4, Offset 9, Mode r" in vm.out.getvalue()


def test_memory_state_lists_occupied_frame(vm):
    proc = vm.process(vm.create_process())
    frame = vm.access_memory(proc, 6, 0, "r")
    state = vm.memory_state()
    assert state.startswith("\nMemory State:\n")
    assert f"Frame {frame}: Process 1, Page 6" in state
    assert "TLB State:" in state


def test_reset_clears_frames_and_tlb(vm):
    proc = vm.process(vm.create_process())
    vm.access_memory(proc, 1, 0, "r")
    vm.reset()
    assert not any(frame.occupied for frame in vm.frames)
    assert not any(entry.valid for entry in vm.tlb)