#!/usr/bin/env python3
"""
scan_session.py
One run of the pipeline against a scope: scans/<scope_id>-<unix time>/
"""

import re
import shutil
import time
from pathlib import Path
from typing import Callable, List


def format_duration(seconds: int) -> str:
    seconds = int(seconds)
    if seconds > 59:
        return f"{seconds // 60} minutes"
    return f"{seconds} seconds"


def purge_previous(scans_dir: Path, scope_id: str) -> List[Path]:
    """Remove earlier <scope_id>-<timestamp> scan dirs (debug mode)"""
    scans_dir = Path(scans_dir)
    if not scans_dir.is_dir():
        return []
    pattern = re.compile(re.escape(scope_id) + r"-\d+")
    removed = []
    for p in sorted(scans_dir.iterdir()):
        if p.is_dir() and pattern.fullmatch(p.name):
            shutil.rmtree(p)
            removed.append(p)
    return removed


class ScanSession:
    def __init__(self, scope_id: str, path: Path, start_time: int, clock: Callable[[], float] = time.time):
        self.scope_id = scope_id
        self.scan_id = path.name
        self.path = path
        self.start_time = start_time
        self.end_time = None
        self.clock = clock

    @classmethod
    def begin(cls, scope_id: str, roots_file: Path, scans_dir: Path, debug: bool = False,
              clock: Callable[[], float] = time.time) -> "ScanSession":
        start = int(clock())
        scans_dir = Path(scans_dir)

        if debug:
            for p in purge_previous(scans_dir, scope_id):
                print(f"[*] debug: removed previous scan {p}")

        # same-second runs share a directory
        path = scans_dir / f"{scope_id}-{start}"
        path.mkdir(parents=True, exist_ok=True)

        session = cls(scope_id, path, start, clock)
        shutil.copyfile(roots_file, session.roots)
        print(f"'{roots_file}' -> '{session.roots}'")
        return session

    @property
    def roots(self) -> Path:
        return self.path / "roots.txt"

    @property
    def subdomains(self) -> Path:
        return self.path / "subdomains.txt"

    @property
    def resolved(self) -> Path:
        return self.path / "resolved.txt"

    @property
    def dns_json(self) -> Path:
        return self.path / "dns.json"

    @property
    def ips(self) -> Path:
        return self.path / "ips.txt"

    @property
    def fingerprints(self) -> Path:
        return self.path / "fingerprints.txt"

    def elapsed(self) -> int:
        end = self.end_time if self.end_time is not None else int(self.clock())
        return end - self.start_time

    def close(self) -> str:
        """Stop the clock, return the human readable duration"""
        self.end_time = int(self.clock())
        return format_duration(self.elapsed())
