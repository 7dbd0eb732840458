#!/usr/bin/env python3
"""
list_cache.py
Local copies of the remote resolver lists (trickest) and DNS wordlist
(assetnote). Downloads are merged anew-style: lines already present stay,
duplicates are dropped, unseen lines are appended. Lists never shrink.
"""

from pathlib import Path
from typing import Iterable, List

import requests

TRUSTED_RESOLVERS_URL = "https://raw.githubusercontent.com/trickest/resolvers/main/resolvers-trusted.txt"
ALL_RESOLVERS_URL = "https://raw.githubusercontent.com/trickest/resolvers/main/resolvers.txt"
WORDLIST_URL = "https://wordlists-cdn.assetnote.io/data/manual/best-dns-wordlist.txt"


def read_lines(path: Path) -> List[str]:
    path = Path(path)
    if not path.exists():
        return []
    return [l.strip() for l in path.read_text(errors="ignore").splitlines() if l.strip()]


def _ends_with_newline(path: Path) -> bool:
    with open(path, "rb") as f:
        f.seek(0, 2)
        if f.tell() == 0:
            return True
        f.seek(-1, 2)
        return f.read(1) == b"\n"


def merge_lines(path: Path, lines: Iterable[str]) -> List[str]:
    """Append the lines not yet in `path`, in order. Returns what was appended."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    seen = set()
    if path.exists():
        # stream, the assetnote wordlist is millions of lines
        with open(path, errors="ignore") as f:
            seen.update(l.strip() for l in f if l.strip())
    added = []
    for line in lines:
        line = line.strip()
        if not line or line in seen:
            continue
        seen.add(line)
        added.append(line)

    if not path.exists():
        path.touch()
    if added:
        needs_newline = not _ends_with_newline(path)
        with open(path, "a") as f:
            if needs_newline:
                f.write("\n")
            f.write("\n".join(added) + "\n")
    return added


class ListCache:
    def __init__(self, base_dir: Path, session=None, timeout: int = 60):
        self.lists_dir = Path(base_dir) / "lists"
        self.session = session or requests.Session()
        self.timeout = timeout

    @property
    def trusted_resolvers(self) -> Path:
        return self.lists_dir / "trickest" / "resolvers-trusted.txt"

    @property
    def all_resolvers(self) -> Path:
        return self.lists_dir / "trickest" / "resolvers.txt"

    @property
    def wordlist(self) -> Path:
        return self.lists_dir / "assetnote" / "best-dns-wordlist.txt"

    @property
    def validated_resolvers(self) -> Path:
        return self.lists_dir / "updated-resolvers.txt"

    def resolver_source(self, use_large: bool):
        """(url, local path) of the resolver list to keep fresh"""
        if use_large:
            return ALL_RESOLVERS_URL, self.all_resolvers
        return TRUSTED_RESOLVERS_URL, self.trusted_resolvers

    def prepare(self):
        (self.lists_dir / "trickest").mkdir(parents=True, exist_ok=True)
        (self.lists_dir / "assetnote").mkdir(parents=True, exist_ok=True)

    def refresh(self, source_url: str, destination: Path) -> int:
        """
        Download `source_url` and merge it into `destination`. A failed
        download leaves the destination as it was. Returns the number of new
        lines.
        """
        destination = Path(destination)
        destination.parent.mkdir(parents=True, exist_ok=True)
        print(f"[*] Updating {source_url}")
        try:
            resp = self.session.get(source_url, timeout=self.timeout)
        except requests.RequestException as e:
            print(f"[!] could not fetch {source_url}: {e}")
            return 0
        if resp.status_code != 200:
            print(f"[!] could not fetch {source_url}: HTTP {resp.status_code}")
            return 0

        added = merge_lines(destination, resp.text.splitlines())
        print(f"[+] {len(added)} new lines -> {destination}")
        return len(added)

    def refresh_all(self, use_large_resolver_list: bool) -> dict:
        """Refresh the selected resolver list and the wordlist"""
        self.prepare()
        url, resolvers = self.resolver_source(use_large_resolver_list)
        results = {}
        for source, dest in ((url, resolvers), (WORDLIST_URL, self.wordlist)):
            results[dest] = self.refresh(source, dest)
        return results
