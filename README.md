# oskit

Small simulations that show how an operating system works:

- `oskit.shell` – a command shell with batch files, `;`-separated commands,
  pipes, `<`/`>` redirection, background jobs (`&`), a job table and built-in
  commands that drive the simulations below.
- `oskit.vmm` – a paged virtual-memory manager (`VirtualMemoryManager`) with
  FIFO frame replacement and an 8-entry TLB that replaces its least-used entry.
- `oskit.scheduler` – a priority scheduler (`Scheduler`) with time quanta,
  preemption, simulated I/O waits and a queue monitor, run on background threads.
- `oskit.filesystem` – an in-memory tree of directories and files (`FileSystem`).
- `oskit.barber` – the sleeping-barber problem, solved with a monitor and with
  semaphores.
- `oskit.deadlock` – threads competing for one resource, restarting their wait
  when they starve.
- `oskit.scanner` – scans a directory for files holding a signature string.

## Installation

```
pip install .
```

## The shell

```
oskit-shell            # reads commands from standard input
oskit-shell batch.txt  # runs the commands in batch.txt, then reads standard input
```

The shell prints no prompt. When started it launches the scheduler threads,
whose progress messages appear on standard error and standard output. Sending
`SIGUSR1` to the shell makes it exit.

Any command that is not built in is started as an external program. A trailing
`&` runs it in the background; finished background jobs are reported as
`[Completed] PID <pid> - <command>` before the next line is read. Each started
program is also registered with the scheduler and given a simulated
virtual-memory process.

Built-in commands:

| Command | Effect |
| --- | --- |
| `jobs` | list active background jobs |
| `end` | send SIGTERM to all background jobs |
| `exit` | leave the shell |
| `memaccess <shell_pid> <r/w> <address>` | simulate a memory access for a program started by the shell |
| `create <file>` / `delete <file>` | create or remove a real file |
| `mkdir <dir>`, `rmdir <dir> [-f]`, `cd <dir>`, `pwd`, `tree` | work with the in-memory file system |
| `createf <name> <size>`, `deletef <name>` | create (with random contents) or remove a simulated file |
| `move <src> <dir>`, `copy <src> <new>`, `copydir <src> <new>` | move and copy nodes |
| `rename <old> <new>`, `editfile <name> <text>` | rename a node, replace a file's contents |
| `search <name>`, `info <name> [-d]` | find a node anywhere, describe a node |

Pipelines (`a | b | c`) always run in the foreground and do not take
redirections.

## Other commands

```
oskit-barber                 # sleeping barber, monitor version
oskit-barber --semaphore     # sleeping barber, semaphore version
oskit-deadlock               # writes activity_log.txt
oskit-scan <directory>       # warns about files holding the signature
```

`oskit-barber` also takes `--customers`, `--chairs`, `--haircut` (seconds per
haircut) and `--max-arrival` (arrival delays are drawn from `0` up to this bound,
exclusive). `oskit-deadlock` takes `--log`, `--processes`, `--timeout`,
`--work` and `--retry`. `oskit-scan` looks for `.test_virus_active` in the
regular files directly inside the directory.

## Using the library

```python
from oskit.filesystem import FileSystem
from oskit.vmm import VirtualMemoryManager
from oskit.scheduler import Scheduler

fs = FileSystem()
fs.mkdir("docs")
fs.cd("docs")
fs.create_file("notes.txt", 16)
print(fs.pwd())          # /docs

vmm = VirtualMemoryManager(disk_delay=0)
pid = vmm.create_process()
vmm.access_memory(vmm.process(pid), 3, 128, "r")
print(vmm.memory_state())

sched = Scheduler(tick_seconds=0)
sched.submit(priority=1, time_limit=3)
sched.run_once()
sched.display_procs(detailed=True)
```

File-system operations that cannot be carried out raise `FileSystemError`;
invalid memory requests raise `VMError`.

## Tests

```
pip install .[test]
pytest
```