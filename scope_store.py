#!/usr/bin/env python3
"""
scope_store.py
Filesystem registry of scopes: scope/<scope_id>/roots.txt holds one root
domain pattern per line (wildcards are ok, e.g. *.example.com).
"""

from pathlib import Path
from typing import Callable, List, Optional

import tldextract

ROOTS_FILE = "roots.txt"

# bundled public suffix snapshot only, never fetched over the network
_EXTRACT = tldextract.TLDExtract(suffix_list_urls=())


class ScopeNotFound(Exception):
    def __init__(self, scope_id: str, scope_path: Path):
        super().__init__(f"scope {scope_id!r} not found at {scope_path}")
        self.scope_id = scope_id
        self.scope_path = scope_path


def validate_scope_id(scope_id: str) -> str:
    scope_id = (scope_id or "").strip()
    if not scope_id:
        raise ValueError("scope name is empty")
    if "/" in scope_id or "\\" in scope_id or scope_id.startswith("."):
        raise ValueError(f"invalid scope name: {scope_id!r}")
    return scope_id


def normalize_root(pattern: str) -> str:
    """*.Example.com -> example.com"""
    root = pattern.strip().lower().rstrip(".")
    while root.startswith("*."):
        root = root[2:]
    return root


def has_public_suffix(domain: str) -> bool:
    ext = _EXTRACT(domain)
    return bool(ext.domain and ext.suffix)


class ScopeStore:
    def __init__(self, base_dir: Path):
        self.base_dir = Path(base_dir)
        self.scopes_dir = self.base_dir / "scope"

    def scope_path(self, scope_id: str) -> Path:
        return self.scopes_dir / scope_id

    def roots_path(self, scope_id: str) -> Path:
        return self.scope_path(scope_id) / ROOTS_FILE

    def list_scopes(self) -> List[str]:
        if not self.scopes_dir.is_dir():
            return []
        return sorted(p.name for p in self.scopes_dir.iterdir() if p.is_dir())

    def ensure_initialized(self, prompt: Callable[[str], str] = input) -> Optional[Path]:
        """
        First run: create the registry, ask for a scope name and create an
        empty roots.txt for it. Returns the new roots file, which the caller
        should tell the operator to fill in before re-running. Returns None
        when the registry already exists.
        """
        if self.scopes_dir.is_dir():
            return None

        print("Starting first run setup...")
        self.scopes_dir.mkdir(parents=True, exist_ok=True)

        while True:
            answer = prompt("Enter the name of a new scope (e.g., name of target organization): ")
            try:
                new_scope = validate_scope_id(answer)
                break
            except ValueError as e:
                print(f"[!] {e}")

        roots = self.roots_path(new_scope)
        roots.parent.mkdir(parents=True, exist_ok=True)
        roots.touch()
        return roots

    def load_roots(self, scope_id: str) -> List[str]:
        """Root patterns of a scope, in file order, blanks/comments/duplicates dropped"""
        path = self.scope_path(scope_id)
        if not path.is_dir():
            raise ScopeNotFound(scope_id, path)

        roots_file = path / ROOTS_FILE
        if not roots_file.exists():
            return []

        roots = []
        for line in roots_file.read_text().splitlines():
            line = line.strip()
            if not line or line.startswith("#"):
                continue
            if line not in roots:
                roots.append(line)
        return roots

    def tool_targets(self, roots: List[str]) -> List[str]:
        """Normalized, deduplicated domains to hand to the enumeration tools"""
        targets = []
        for pattern in roots:
            domain = normalize_root(pattern)
            if not domain:
                continue
            if not has_public_suffix(domain):
                print(f"[!] {pattern}: no known public suffix, passing it through anyway")
            if domain not in targets:
                targets.append(domain)
        return targets
