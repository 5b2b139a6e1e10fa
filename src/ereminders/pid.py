"""PID file management utilities."""

import os
import time
from dataclasses import dataclass
from pathlib import Path


@dataclass
class ProcessInfo:
    """Process information from PID file."""

    pid: int
    start_time: float
    alive: bool


def write_pid_file(pid_path: Path, pid: int | None = None) -> None:
    """Write current process PID to file.

    Args:
        pid_path: Path to the PID file.
        pid: Process ID to write. Defaults to current process.
    """
    pid_path.parent.mkdir(parents=True, exist_ok=True)
    pid_path.write_text(f"{pid or os.getpid()}\n{time.time()}\n")


def read_pid_file(pid_path: Path) -> ProcessInfo | None:
    """Read PID file and check if process is alive.

    Returns:
        ProcessInfo if file exists and is readable, None otherwise.
    """
    if not pid_path.exists():
        return None

    try:
        content = pid_path.read_text().strip().split("\n")
        pid = int(content[0])
        start_time = float(content[1]) if len(content) > 1 else 0.0
        return ProcessInfo(pid=pid, start_time=start_time, alive=is_process_alive(pid))
    except (ValueError, IndexError):
        return None


def remove_pid_file(pid_path: Path) -> None:
    pid_path.unlink(missing_ok=True)


def is_process_alive(pid: int) -> bool:
    """Check if a process with given PID is alive."""
    try:
        os.kill(pid, 0)  # Signal 0 checks existence without sending signal
        return True
    except OSError:
        return False
