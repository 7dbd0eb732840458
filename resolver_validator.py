#!/usr/bin/env python3
"""
resolver_validator.py
Builds lists/updated-resolvers.txt from a candidate resolver list with
dnsvalidator.
"""

import sys
from pathlib import Path

from enumeration_pipeline import CommandRunner


class MissingResolverFile(Exception):
    pass


class ResolverValidator:
    def __init__(self, output_path: Path, runner: CommandRunner = None, strict: bool = False):
        self.output_path = Path(output_path)
        self.runner = runner or CommandRunner()
        self.strict = strict

    def discard_previous(self):
        """Delete an earlier validated list so a fresh one has to be generated"""
        if self.output_path.exists():
            self.output_path.unlink()

    def validate(self, candidate_list: Path, concurrency: int = 20) -> Path:
        print(f"[*] Validating resolvers from {candidate_list} and saving results to {self.output_path}")
        self.output_path.parent.mkdir(parents=True, exist_ok=True)

        if self.runner.which("dnsvalidator"):
            self.runner.run(["dnsvalidator", "-tL", str(candidate_list),
                             "-threads", str(concurrency), "-o", str(self.output_path)])
        else:
            print("[!] dnsvalidator not installed; skipping.")

        if not self.output_path.exists():
            print("Could not find fresh resolvers.", file=sys.stderr)
            if self.strict:
                raise MissingResolverFile(str(self.output_path))
        return self.output_path
