"""Readers for the /proc pseudo-filesystem.

Each process directory under the proc root exposes the pieces psmem needs:

    <root>/<pid>/exe            symlink to the executable
    <root>/<pid>/cmdline        NUL separated argument vector
    <root>/<pid>/smaps_rollup   pre-aggregated memory accounting
    <root>/<pid>/smaps          one block of fields per mapping

Only four fields of the smaps files are used:

    Pss:                  87 kB
    Private_Clean:         0 kB
    Private_Dirty:        12 kB
    Swap:                  0 kB
"""

import os
import re
import stat
from collections.abc import Iterable
from contextlib import contextmanager

import psutil
import structlog

from psmem.config import ScanConfig
from psmem.models import MemoryUsage, ProcessRecord

log = structlog.get_logger()

# Average truncation error of the kernel's rolled-up PSS
PSS_ADJUST = 0.5

_PSS = "Pss:"
_SWAP = "Swap:"
_PRIVATE = ("Private_Clean:", "Private_Dirty:")
_MAPPING_RE = re.compile(r"^[0-9a-f]+-[0-9a-f]+\s")


class ProcRootError(OSError):
    """The process-information root could not be listed."""


@contextmanager
def wrap_exceptions(pid: int):
    """Translate OS errors raised while reading a pid into psutil exceptions."""
    try:
        yield
    except (FileNotFoundError, ProcessLookupError) as exc:
        raise psutil.NoSuchProcess(pid) from exc
    except PermissionError as exc:
        raise psutil.AccessDenied(pid) from exc


def list_pids(proc_root: str) -> list[int]:
    """
    List the pids currently visible under ``proc_root``.

    Entries must start with an ASCII digit and stat as a directory. Entries
    that vanish before they can be stat'ed are skipped.

    Raises:
        ProcRootError: If ``proc_root`` itself cannot be listed.
    """
    try:
        entries = os.listdir(proc_root)
    except OSError as exc:
        raise ProcRootError(exc.errno, exc.strerror, proc_root) from exc

    pids: list[int] = []
    for entry in entries:
        if not ("0" <= entry[:1] <= "9"):
            continue
        try:
            st = os.stat(os.path.join(proc_root, entry))
        except OSError:
            continue  # Process exited
        if not stat.S_ISDIR(st.st_mode):
            continue
        pids.append(int(entry, 10))
    return pids


def resolve_name(pid: int, config: ScanConfig) -> str:
    """
    Return the display name for ``pid``.

    When the command line starts with the executable path the name is the
    executable's basename; otherwise (scripts, rewritten process titles) it
    is the command line itself.
    """
    base = os.path.join(config.proc_root, str(pid))
    with wrap_exceptions(pid):
        exe = os.readlink(os.path.join(base, "exe"))
        with open(os.path.join(base, "cmdline"), "rb") as fh:
            raw = fh.read(config.cmdline_limit)

    if not raw:
        raise psutil.NoSuchProcess(pid, msg="empty command line")

    cmdline = raw.replace(b"\0", b" ").decode("utf-8", errors="replace").rstrip()
    if not cmdline or cmdline.startswith(exe):
        return os.path.basename(exe)
    return cmdline


def _field_value(line: str) -> float:
    tokens = line.split()
    if len(tokens) < 2:
        raise ValueError(f"missing value in smaps line {line!r}")
    return float(tokens[1])


def parse_smaps(lines: Iterable[str], rollup: bool = False) -> MemoryUsage:
    """
    Sum the Pss, Swap and Private_* fields of an smaps or smaps_rollup file.

    In detailed mode the Pss of the ``[heap]`` mapping is also reported. In
    rollup mode ``PSS_ADJUST`` is added once to compensate for the kernel's
    rounding.

    Raises:
        ValueError: If a matched field carries no parseable number.
    """
    pss = swap = private = heap = 0.0
    in_heap = False

    for line in lines:
        line = line.rstrip("\n")
        if line.startswith(_PSS):
            value = _field_value(line)
            pss += value
            if in_heap:
                heap += value
        elif line.startswith(_SWAP):
            swap += _field_value(line)
        elif line.startswith(_PRIVATE):
            private += _field_value(line)
        elif not rollup and _MAPPING_RE.match(line):
            in_heap = line.endswith("[heap]")

    if rollup:
        pss += PSS_ADJUST
    return MemoryUsage(pss=pss, shared=pss - private, swap=swap, heap=heap)


def _read_smaps(pid: int, path: str, rollup: bool) -> MemoryUsage:
    with wrap_exceptions(pid):
        with open(path, encoding="utf-8", errors="replace") as fh:
            return parse_smaps(fh, rollup=rollup)


def read_memory(pid: int, config: ScanConfig) -> MemoryUsage:
    """
    Extract the memory usage of ``pid``.

    ``smaps_rollup`` is tried first when enabled; any failure there falls
    back to the detailed ``smaps`` file.
    """
    base = os.path.join(config.proc_root, str(pid))
    if config.prefer_rollup:
        try:
            return _read_smaps(pid, os.path.join(base, "smaps_rollup"), rollup=True)
        except (psutil.Error, OSError, ValueError) as exc:
            log.debug("rollup_fallback", pid=pid, reason=type(exc).__name__)
    return _read_smaps(pid, os.path.join(base, "smaps"), rollup=False)


def read_process(pid: int, config: ScanConfig) -> ProcessRecord | None:
    """Read one process, returning None if it vanished or is inaccessible."""
    try:
        name = resolve_name(pid, config)
        usage = read_memory(pid, config)
    except (psutil.Error, OSError, ValueError) as exc:
        log.debug("process_skipped", pid=pid, reason=type(exc).__name__)
        return None
    return ProcessRecord.from_usage(name, pid, usage)
