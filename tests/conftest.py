"""Shared fixtures: a fake proc filesystem built under tmp_path."""

import os
from pathlib import Path

import pytest
import structlog

ROLLUP = """\
00400000-7fff5a3fe000 ---p 00000000 00:00 0                              [rollup]
Rss:                3968 kB
Pss:                1000 kB
Pss_Anon:            400 kB
Pss_File:            600 kB
Pss_Shmem:             0 kB
Shared_Clean:       2000 kB
Shared_Dirty:          0 kB
Private_Clean:       300 kB
Private_Dirty:       500 kB
Referenced:         3968 kB
Anonymous:           400 kB
Swap:                 64 kB
SwapPss:              64 kB
Locked:                0 kB
"""

SMAPS = """\
55d1c0a00000-55d1c0a21000 rw-p 00000000 00:00 0                          [heap]
Size:                132 kB
KernelPageSize:        4 kB
MMUPageSize:           4 kB
Rss:                  20 kB
Pss:                  20 kB
Shared_Clean:          0 kB
Shared_Dirty:          0 kB
Private_Clean:         0 kB
Private_Dirty:        20 kB
Referenced:           20 kB
Anonymous:            20 kB
Swap:                  4 kB
SwapPss:               4 kB
Locked:                0 kB
VmFlags: rd wr mr mw me ac
7f3a1c000000-7f3a1c1c5000 r-xp 00000000 08:01 1234567                    /usr/lib/libc.so.6
Size:               1812 kB
KernelPageSize:        4 kB
MMUPageSize:           4 kB
Rss:                1200 kB
Pss:                 150 kB
Shared_Clean:       1190 kB
Shared_Dirty:          0 kB
Private_Clean:        10 kB
Private_Dirty:         0 kB
Referenced:         1200 kB
Anonymous:             0 kB
Swap:                  0 kB
SwapPss:               0 kB
Locked:                0 kB
VmFlags: rd ex mr mw me
"""


class FakeProc:
    """Builder for process directories under a fake proc root."""

    def __init__(self, root: Path) -> None:
        """Initialize FakeProc over an existing, empty root directory."""
        self.root = root

    def add(
        self,
        pid: int,
        exe: str | None = "/usr/bin/bash",
        cmdline: bytes | None = None,
        rollup: str | None = ROLLUP,
        smaps: str | None = SMAPS,
    ) -> Path:
        """Create /<pid> with whichever pseudo-files are not None."""
        piddir = self.root / str(pid)
        piddir.mkdir()
        if exe is not None:
            os.symlink(exe, piddir / "exe")
            if cmdline is None:
                cmdline = exe.encode() + b"\0"
        if cmdline is not None:
            (piddir / "cmdline").write_bytes(cmdline)
        if rollup is not None:
            (piddir / "smaps_rollup").write_text(rollup)
        if smaps is not None:
            (piddir / "smaps").write_text(smaps)
        return piddir


@pytest.fixture
def fake_proc(tmp_path: Path) -> FakeProc:
    """An empty fake proc root."""
    root = tmp_path / "proc"
    root.mkdir()
    return FakeProc(root)


@pytest.fixture(autouse=True)
def reset_structlog():
    """Undo any structlog configuration a test installed through the CLI."""
    yield
    structlog.reset_defaults()
