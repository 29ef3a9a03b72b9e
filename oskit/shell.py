"""Interactive and batch command shell with job control and simulated OS services."""

from __future__ import annotations

import contextlib
import os
import re
import signal
import subprocess
import sys
from dataclasses import dataclass
from typing import Callable, Iterable, Iterator, Optional, TextIO

from oskit.filesystem import FileSystem, FileSystemError
from oskit.scheduler import Scheduler
from oskit.vmm import VirtualMemoryManager, VMError

MAX_LINE = 1024
MAX_ARGS = 64
MAX_JOBS = 64
MAX_PID_MAP = 64
MAX_PIPELINE = 10

_WORD = re.compile(r"[^ \t\r\n]+")
_INT = re.compile(r"\s*([+-]?\d+)")


def _atoi(text: str) -> int:
    match = _INT.match(text)
    return int(match.group(1)) if match else 0


def _clean(command: str) -> str:
    return command.lstrip(" ").split("\n", 1)[0]


def split_commands(line: str) -> list[str]:
    """Split a line at ';', dropping empty pieces, leading spaces and anything after a newline."""
    commands: list[str] = []
    for piece in line.split(";"):
        if not piece:
            continue
        if len(commands) >= MAX_ARGS:
            break
        commands.append(_clean(piece))
    return commands


def parse_args(command: str) -> list[str]:
    """Split a command into whitespace-separated words, at most MAX_ARGS - 1 of them."""
    return _WORD.findall(command)[: MAX_ARGS - 1]


def extract_redirections(
    args: Iterable[str],
) -> tuple[list[str], Optional[str], Optional[str]]:
    """Return the command words before any '<' or '>' and the input and output files."""
    words = list(args)
    input_file: Optional[str] = None
    output_file: Optional[str] = None
    last_in: Optional[int] = None
    last_out: Optional[int] = None
    for index, word in enumerate(words):
        following = words[index + 1] if index + 1 < len(words) else None
        if word == "<":
            input_file = following
            last_in = index
        if word == ">":
            output_file = following
            last_out = index
    cuts = [index for index in (last_in, last_out) if index is not None]
    cut = min(cuts) if cuts else len(words)
    return words[:cut], input_file, output_file


def _create_0644(path: str, flags: int) -> int:
    return os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o644)


@dataclass
class Job:
    pid: int
    command: str
    active: bool = True


class JobTable:
    """Background jobs in the order they were started."""

    def __init__(self, limit: int = MAX_JOBS) -> None:
        self.limit = limit
        self._jobs: list[Job] = []

    def add(self, pid: int, command: str) -> Job:
        if len(self._jobs) >= self.limit:
            raise OverflowError("Too many background jobs")
        job = Job(pid, command[: MAX_LINE - 1])
        self._jobs.append(job)
        return job

    def reap(self) -> list[Job]:
        """Mark finished jobs inactive without blocking and return them."""
        finished: list[Job] = []
        for job in self._jobs:
            if not job.active:
                continue
            try:
                done, _ = os.waitpid(job.pid, os.WNOHANG)
            except ChildProcessError:
                done = job.pid
            if done:
                job.active = False
                finished.append(job)
        return finished

    def terminate_all(self) -> list[Job]:
        """Send SIGTERM to every active job and mark it inactive."""
        terminated: list[Job] = []
        for job in self._jobs:
            if not job.active:
                continue
            with contextlib.suppress(ProcessLookupError):
                os.kill(job.pid, signal.SIGTERM)
            job.active = False
            terminated.append(job)
        return terminated

    def __iter__(self) -> Iterator[Job]:
        return iter(list(self._jobs))

    def __len__(self) -> int:
        return len(self._jobs)


class Shell:
    """Runs built-in commands against the simulated services and starts external programs."""

    def __init__(
        self,
        out: Optional[TextIO] = None,
        err: Optional[TextIO] = None,
        scheduler: Optional[Scheduler] = None,
        memory: Optional[VirtualMemoryManager] = None,
        filesystem: Optional[FileSystem] = None,
    ) -> None:
        self.out = out if out is not None else sys.stdout
        self.err = err if err is not None else sys.stderr
        self.scheduler = scheduler if scheduler is not None else Scheduler(self.out, self.err)
        self.memory = memory if memory is not None else VirtualMemoryManager(out=self.out)
        self.filesystem = filesystem if filesystem is not None else FileSystem()
        self.jobs = JobTable()
        self.pid_map: dict[int, int] = {}
        self._processes: dict[int, subprocess.Popen] = {}
        self._builtins: dict[str, Callable[[list[str]], None]] = {
            "jobs": self._jobs,
            "end": self._end,
            "memaccess": self._memaccess,
            "create": self._create,
            "delete": self._delete,
            "mkdir": self._mkdir,
            "rmdir": self._rmdir,
            "createf": self._createf,
            "deletef": self._deletef,
            "move": self._move,
            "copy": self._copy,
            "copydir": self._copydir,
            "search": self._search,
            "tree": self._tree,
            "info": self._info,
            "pwd": self._pwd,
            "cd": self._cd,
            "rename": self._rename,
            "editfile": self._editfile,
        }

    # output helpers

    def _say(self, text: str) -> None:
        print(text, file=self.out)

    def _complain(self, text: str) -> None:
        print(text, file=self.err)

    def _os_error(self, prefix: str, exc: OSError) -> None:
        self._complain(f"{prefix}: {exc.strerror or exc}")

    def _fs(self, action: Callable, *args) -> None:
        try:
            result = action(*args)
        except FileSystemError as exc:
            self._say(str(exc))
            return
        if isinstance(result, str):
            self._say(result)
        elif isinstance(result, list):
            for line in result:
                self._say(line)

    @staticmethod
    def _arg(args: list[str], index: int) -> Optional[str]:
        return args[index] if index < len(args) else None

    def _handle_exit_signal(self, signum, frame) -> None:
        self._say("\n[Shell exiting via signal]")
        self.out.flush()
        sys.exit(0)

    # line handling

    def execute_line(self, line: str) -> bool:
        """Run every command on a line; return False once 'exit' is reached."""
        for command in split_commands(line[: MAX_LINE - 1]):
            if "|" in command:
                self._run_pipeline(command)
                continue
            args = parse_args(command)
            if not args:
                continue
            if args[0] == "exit":
                return False
            handler = self._builtins.get(args[0])
            if handler is not None:
                handler(args)
                continue
            background = args[-1] == "&"
            if background:
                args = args[:-1]
            self._run_command(args, background)
        return True

    def reap_jobs(self) -> list[Job]:
        """Report finished background jobs and release their simulated memory."""
        finished = self.jobs.reap()
        for job in finished:
            self._say(f"[Completed] PID {job.pid} - {job.command}")
            process = self._processes.pop(job.pid, None)
            if process is not None:
                process.poll()
            vm_pid = self.pid_map.get(job.pid)
            if vm_pid is not None:
                try:
                    self.memory.free_process(vm_pid)
                except VMError as exc:
                    self._say(str(exc))
        return finished

    def run(self, stream: Iterable[str], batch: bool = False) -> bool:
        """Execute lines from a stream; return True if 'exit' was given."""
        for line in stream:
            self.reap_jobs()
            if not self.execute_line(line[: MAX_LINE - 1]):
                return True
        if not batch:
            self._say("")
        return False

    # external programs

    def _register(self, shell_pid: int) -> None:
        self.scheduler.submit(2, 1)
        if len(self.pid_map) >= MAX_PID_MAP:
            return
        try:
            vm_pid = self.memory.create_process()
        except VMError:
            return
        self.pid_map[shell_pid] = vm_pid

    def _run_command(self, args: list[str], background: bool) -> None:
        argv, input_file, output_file = extract_redirections(args)
        if not argv:
            self._complain("Command failed: missing command")
            return
        self.out.flush()
        with contextlib.ExitStack() as stack:
            stdin = stdout = None
            if input_file:
                try:
                    stdin = stack.enter_context(open(input_file, "rb"))
                except OSError as exc:
                    self._os_error("Failed to open input file", exc)
                    return
            if output_file:
                try:
                    stdout = stack.enter_context(
                        open(output_file, "wb", opener=_create_0644)
                    )
                except OSError as exc:
                    self._os_error("Failed to open output file", exc)
                    return
            try:
                process = subprocess.Popen(argv, stdin=stdin, stdout=stdout)
            except OSError as exc:
                self._os_error("Command failed", exc)
                return
        self._register(process.pid)
        if not background:
            process.wait()
            return
        self._say(f"Process running in background with PID {process.pid}")
        self._processes[process.pid] = process
        try:
            self.jobs.add(process.pid, argv[0])
        except OverflowError as exc:
            self._complain(str(exc))

    def _run_pipeline(self, line: str) -> None:
        segments = [segment for segment in line.split("|") if segment][:MAX_PIPELINE]
        self.out.flush()
        processes: list[subprocess.Popen] = []
        upstream = None
        for position, segment in enumerate(segments):
            last = position == len(segments) - 1
            argv = parse_args(_clean(segment))
            if upstream is not None:
                stdin = upstream
            else:
                stdin = subprocess.DEVNULL if position else None
            process: Optional[subprocess.Popen] = None
            if not argv:
                self._complain("execvp failed: empty command")
            else:
                try:
                    process = subprocess.Popen(
                        argv, stdin=stdin, stdout=None if last else subprocess.PIPE
                    )
                except OSError as exc:
                    self._os_error("execvp failed", exc)
            if upstream is not None:
                upstream.close()
            upstream = process.stdout if process is not None and not last else None
            if process is not None:
                processes.append(process)
        for process in processes:
            process.wait()

    # built-in commands

    def _jobs(self, args: list[str]) -> None:
        for number, job in enumerate(self.jobs, start=1):
            if job.active:
                self._say(f"[{number}] PID {job.pid} - {job.command}")

    def _end(self, args: list[str]) -> None:
        for job in self.jobs.terminate_all():
            process = self._processes.pop(job.pid, None)
            if process is not None:
                process.wait()
        self._say("All background jobs terminated.")

    def _memaccess(self, args: list[str]) -> None:
        if len(args) < 4:
            self._say("Usage: memaccess <shell_pid> <r/w> <virtual_address>")
            return
        shell_pid = _atoi(args[1])
        mode = args[2][0]
        address = _atoi(args[3])
        vm_pid = self.pid_map.get(shell_pid)
        if vm_pid is None:
            return
        try:
            process = self.memory.process(vm_pid)
            self.memory.access_memory(process, vm_pid, address, mode)
        except VMError as exc:
            self._say(str(exc))

    def _create(self, args: list[str]) -> None:
        name = self._arg(args, 1)
        if name is None:
            self._say("Usage: create <file_name>")
            return
        try:
            with open(name, "w", encoding="utf-8"):
                pass
        except OSError as exc:
            self._os_error("Error creating file", exc)
            return
        self._say(f"File '{name}' created successfully.")

    def _delete(self, args: list[str]) -> None:
        name = self._arg(args, 1)
        if name is None:
            self._say("Usage: delete <file_name>")
            return
        try:
            os.remove(name)
        except OSError as exc:
            self._os_error("Error deleting file", exc)
            return
        self._say(f"File '{name}' deleted successfully.")

    def _mkdir(self, args: list[str]) -> None:
        self._fs(self.filesystem.mkdir, self._arg(args, 1))

    def _rmdir(self, args: list[str]) -> None:
        force = self._arg(args, 2) == "-f"
        self._fs(self.filesystem.rmdir, self._arg(args, 1), force)

    def _createf(self, args: list[str]) -> None:
        if len(args) < 3:
            self._say("Usage: createf <file_name> <size>")
            return
        self._fs(self.filesystem.create_file, args[1], _atoi(args[2]))

    def _deletef(self, args: list[str]) -> None:
        if len(args) < 2:
            self._say("Usage: deletef <file_name>")
            return
        self._fs(self.filesystem.delete_file, args[1])

    def _move(self, args: list[str]) -> None:
        if len(args) < 3:
            self._say("Usage: move <source> <destination_dir>")
            return
        self._fs(self.filesystem.move, args[1], args[2])

    def _copy(self, args: list[str]) -> None:
        if len(args) < 3:
            self._say("Usage: copy <source> <new_name>")
            return
        self._fs(self.filesystem.copy, args[1], args[2])

    def _copydir(self, args: list[str]) -> None:
        if len(args) < 3:
            self._say("Usage: copydir <source_directory> <new_name>")
            return
        self._fs(self.filesystem.copy_dir, args[1], args[2])

    def _search(self, args: list[str]) -> None:
        if len(args) < 2:
            self._say("Usage: search <file_or_dir_name>")
            return
        node = self.filesystem.search(args[1])
        if node is None:
            self._say("Not found.")
        else:
            self._say(f"Found: {node.name} ({node.type.value})")

    def _tree(self, args: list[str]) -> None:
        self._fs(self.filesystem.tree)

    def _info(self, args: list[str]) -> None:
        if self._arg(args, 2) == "-d":
            self._fs(self.filesystem.info, self._arg(args, 1), True)
            return
        if len(args) < 2:
            self._say("Usage: info <name>")
            return
        self._fs(self.filesystem.info, args[1], False)

    def _pwd(self, args: list[str]) -> None:
        self._say(self.filesystem.pwd())

    def _cd(self, args: list[str]) -> None:
        if len(args) < 2:
            self._complain("cd: missing argument")
            return
        self._fs(self.filesystem.cd, args[1])

    def _rename(self, args: list[str]) -> None:
        if len(args) < 3:
            self._complain("rename: missing argument")
            return
        self._fs(self.filesystem.rename, args[1], args[2])

    def _editfile(self, args: list[str]) -> None:
        if len(args) < 3:
            self._complain("editfile: missing argument")
            return
        self._fs(self.filesystem.edit_file, args[1], args[2])


def main(argv: Optional[list[str]] = None) -> int:
    args = sys.argv[1:] if argv is None else list(argv)
    batch_file = None
    if len(args) == 1:
        try:
            batch_file = open(args[0], encoding="utf-8")
        except OSError as exc:
            print(f"Failed to open batch file: {exc.strerror}", file=sys.stderr)
            return 1

    scheduler = Scheduler()
    scheduler.start()
    shell = Shell(scheduler=scheduler)

    previous_handler = None
    if hasattr(signal, "SIGUSR1"):
        with contextlib.suppress(ValueError):
            previous_handler = signal.signal(signal.SIGUSR1, shell._handle_exit_signal)

    try:
        if batch_file is not None:
            with batch_file:
                if shell.run(batch_file, batch=True):
                    return 0
        shell.run(sys.stdin)
    finally:
        scheduler.stop()
        if previous_handler is not None:
            with contextlib.suppress(ValueError):
                signal.signal(signal.SIGUSR1, previous_handler)
    return 0