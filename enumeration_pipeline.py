#!/usr/bin/env python3
"""
enumeration_pipeline.py
Sequential recon pipeline over a scan directory:

    subfinder -> (shuffledns) -> puredns -> dnsx -> nmap

Every stage reads the previous stage's file and writes its own. A stage that
fails (tool missing, non-zero exit) is reported and leaves an empty output
file behind; the next stage still runs. Nothing is retried.
"""

import json
import shutil
import subprocess
from pathlib import Path
from typing import Dict, List, Optional

from list_cache import merge_lines, read_lines


class StageError(Exception):
    pass


class CommandRunner:
    """Thin wrapper over shutil.which / subprocess.run so tests can swap it out"""

    def which(self, name: str) -> Optional[str]:
        return shutil.which(name)

    def run(self, cmd: List[str], capture: bool = False, input_text: str = None):
        print(f"[RUN] {' '.join(cmd)}")
        return subprocess.run(cmd, input=input_text, capture_output=capture, text=True)


class Stage:
    name = "stage"
    tool = None
    description = ""

    def __init__(self, runner: CommandRunner):
        self.runner = runner

    def output(self, session) -> Path:
        raise NotImplementedError

    def run(self, session) -> Path:
        raise NotImplementedError

    def require_tool(self):
        if not self.runner.which(self.tool):
            raise StageError(f"{self.tool} not installed; skipping.")

    def call(self, cmd: List[str], **kwargs):
        proc = self.runner.run(cmd, **kwargs)
        if proc.returncode != 0:
            raise StageError(f"{self.tool} exited with status {proc.returncode}")
        return proc


class DiscoveryStage(Stage):
    name = "discovery"
    tool = "subfinder"
    description = "Passive subdomain enumeration with subfinder"

    def __init__(self, runner: CommandRunner, targets: List[str]):
        super().__init__(runner)
        self.targets = targets

    def output(self, session) -> Path:
        return session.subdomains

    def run(self, session) -> Path:
        out = self.output(session)
        out.touch()
        if not self.targets:
            print("[!] no roots to enumerate")
            return out
        self.require_tool()
        proc = self.call(["subfinder", "-silent"], capture=True,
                         input_text="\n".join(self.targets) + "\n")
        added = merge_lines(out, proc.stdout.splitlines())
        print(f"[+] subfinder: {len(added)} new subdomains -> {out}")
        return out


class BruteforceStage(Stage):
    name = "bruteforce"
    tool = "shuffledns"
    description = "DNS brute-force with shuffledns"

    def __init__(self, runner: CommandRunner, targets: List[str], wordlist: Path, resolvers: Path):
        super().__init__(runner)
        self.targets = targets
        self.wordlist = Path(wordlist)
        self.resolvers = Path(resolvers)

    def output(self, session) -> Path:
        return session.subdomains

    def run(self, session) -> Path:
        out = self.output(session)
        out.touch()
        if not self.targets:
            print("[!] no roots to brute-force")
            return out
        self.require_tool()
        failed = []
        # one root at a time
        for domain in self.targets:
            print(f"[*] Starting DNS brute-force against {domain}")
            try:
                proc = self.call(["shuffledns", "-d", domain, "-w", str(self.wordlist),
                                  "-r", str(self.resolvers), "-mode", "bruteforce", "-silent"],
                                 capture=True)
            except StageError as e:
                print(f"[!] {domain}: {e}")
                failed.append(domain)
                continue
            added = merge_lines(out, proc.stdout.splitlines())
            print(f"[+] shuffledns {domain}: {len(added)} new subdomains")
        if failed:
            raise StageError(f"brute-force failed for {', '.join(failed)}")
        return out


class ResolutionStage(Stage):
    name = "resolution"
    tool = "puredns"
    description = "Resolving subdomains with puredns"

    def __init__(self, runner: CommandRunner, resolvers: Path):
        super().__init__(runner)
        self.resolvers = Path(resolvers)
        self.count = 0

    def output(self, session) -> Path:
        return session.resolved

    def run(self, session) -> Path:
        out = self.output(session)
        if not read_lines(session.subdomains):
            print("[!] no subdomains to resolve")
            out.touch()
            return out
        self.require_tool()
        self.call(["puredns", "resolve", str(session.subdomains), "-r", str(self.resolvers),
                   "-w", str(out), "-q"], capture=True)
        self.count = len(read_lines(out))
        print(f"[+] {self.count} resolved hosts -> {out}")
        return out


def extract_a_records(dns_json: Path) -> List[str]:
    """A records from dnsx -json output (one JSON object per line)"""
    ips = []
    for line in read_lines(dns_json):
        try:
            record = json.loads(line)
        except json.JSONDecodeError:
            continue
        if not isinstance(record, dict):
            continue
        for ip in record.get("a") or []:
            if ip not in ips:
                ips.append(ip)
    return ips


class RecordExtractionStage(Stage):
    name = "records"
    tool = "dnsx"
    description = "Extracting A records with dnsx"

    def __init__(self, runner: CommandRunner):
        super().__init__(runner)
        self.count = 0

    def output(self, session) -> Path:
        return session.ips

    def run(self, session) -> Path:
        out = self.output(session)
        out.touch()
        if not read_lines(session.resolved):
            print("[!] no resolved hosts to query")
            return out
        self.require_tool()
        try:
            self.call(["dnsx", "-l", str(session.resolved), "-json",
                       "-o", str(session.dns_json), "-silent"], capture=True)
            added = merge_lines(out, extract_a_records(session.dns_json))
        finally:
            if session.dns_json.exists():
                session.dns_json.unlink()
        self.count = len(added)
        print(f"[+] {self.count} IP addresses -> {out}")
        return out


class FingerprintStage(Stage):
    name = "fingerprint"
    tool = "nmap"
    description = "Fingerprinting hosts using Nmap..."

    def output(self, session) -> Path:
        return session.fingerprints

    def run(self, session) -> Path:
        out = self.output(session)
        if not read_lines(session.ips):
            print("[!] no IP addresses to fingerprint")
            out.touch()
            return out
        self.require_tool()
        self.call(["nmap", "-iL", str(session.ips), "-Pn", "-T4", "-A", "-oN", str(out)])
        return out


class EnumerationPipeline:
    def __init__(self, stages: List[Stage]):
        self.stages = stages
        self.errors: Dict[str, str] = {}

    @classmethod
    def build(cls, runner: CommandRunner, targets: List[str], trusted_resolvers: Path,
              wordlist: Path = None, bruteforce_resolvers: Path = None,
              dns_bruteforce: bool = False) -> "EnumerationPipeline":
        stages = [DiscoveryStage(runner, targets)]
        if dns_bruteforce:
            stages.append(BruteforceStage(runner, targets, wordlist, bruteforce_resolvers))
        stages += [
            ResolutionStage(runner, trusted_resolvers),
            RecordExtractionStage(runner),
            FingerprintStage(runner),
        ]
        return cls(stages)

    def run(self, session) -> Dict[str, Path]:
        outputs = {}
        for stage in self.stages:
            print(f"[*] {stage.description}")
            try:
                outputs[stage.name] = stage.run(session)
            except StageError as e:
                print(f"[!] {stage.name}: {e}")
                self.errors[stage.name] = str(e)
                out = stage.output(session)
                out.touch()
                outputs[stage.name] = out
        return outputs
