"""Tracking and waiting for child processes."""

from __future__ import annotations

import errno
import os
import sys
from dataclasses import dataclass
from typing import Callable, Optional

from esshell.errors import fail
from esshell.status import status_message
from esshell.term import Term, mkstr
from esshell.util import strerror


@dataclass
class Process:
    """A child process started by the shell."""

    pid: int
    background: bool = False


def _write_stderr(text: str) -> None:
    sys.stderr.write(text)
    sys.stderr.flush()


class ProcessTable:
    """The children of the shell that have not yet been waited for.

    ``report`` receives the lines describing how background processes died.
    """

    def __init__(self, report: Optional[Callable[[str], None]] = None) -> None:
        self._procs: dict[int, Process] = {}
        self._report = report or _write_stderr
        self.has_forked = False

    def add(self, pid: int, background: bool = False) -> Process:
        """Record a new child."""
        proc = Process(pid, background)
        self._procs[pid] = proc
        return proc

    def reap(self, pid: int) -> Process:
        """Remove a dead child from the table and return it."""
        try:
            return self._procs.pop(pid)
        except KeyError:
            raise KeyError(f"{pid} is not a known child") from None

    def background_pids(self) -> list[Term]:
        """The process ids of the background children, oldest first."""
        return [mkstr(str(proc.pid)) for proc in self._procs.values() if proc.background]

    def fork(self, background: bool = False) -> int:
        """Fork; the parent records the child and gets its pid, the child gets 0."""
        try:
            pid = os.fork()
        except OSError as error:
            fail("es:efork", f"fork: {strerror(error.errno or 0)}")
        if pid:
            self.add(pid, background)
            return pid
        self._procs.clear()
        self.has_forked = True
        return 0

    def wait(self, pid: int = -1) -> int:
        """Wait for child ``pid``, or any child for -1; return its wait status."""
        try:
            deadpid, status = os.waitpid(pid, 0)
        except ChildProcessError:
            if pid > 0:
                fail("es:ewait", f"wait: {pid} is not a child of this shell")
            fail("es:ewait", f"wait: {strerror(errno.ECHILD)}")
        except OSError as error:
            fail("es:ewait", f"wait: {strerror(error.errno or 0)}")
        proc = self._procs.pop(deadpid, None)
        if proc is not None and proc.background:
            message = status_message(deadpid, status)
            if message is not None:
                self._report(message + "\n")
        return status