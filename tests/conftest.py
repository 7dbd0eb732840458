import json
import subprocess
from pathlib import Path
from types import SimpleNamespace

import pytest

from list_cache import TRUSTED_RESOLVERS_URL, ALL_RESOLVERS_URL, WORDLIST_URL, read_lines

ALL_TOOLS = {"subfinder", "shuffledns", "puredns", "massdns", "dnsx", "nmap", "dnsvalidator", "notify"}


def _arg(cmd, flag):
    return cmd[cmd.index(flag) + 1]


class FakeRunner:
    """Stands in for CommandRunner; writes what the real tools would write"""

    def __init__(self, installed=None, fail=()):
        self.installed = set(ALL_TOOLS if installed is None else installed)
        self.fail = set(fail)
        self.calls = []
        self.notified = []
        self.validator_writes = True
        self.subfinder_results = {"acme.com": ["www.acme.com", "api.acme.com", "www.acme.com"]}
        self.shuffledns_results = {"acme.com": ["dev.acme.com", "www.acme.com"]}
        # hosts that resolve, with their A records
        self.a_records = {
            "www.acme.com": ["192.0.2.10"],
            "api.acme.com": ["192.0.2.11", "192.0.2.10"],
            "dev.acme.com": ["192.0.2.12"],
        }

    @property
    def tools_called(self):
        return [c[0] for c in self.calls]

    def which(self, name):
        return f"/usr/bin/{name}" if name in self.installed else None

    def run(self, cmd, capture=False, input_text=None):
        self.calls.append(list(cmd))
        tool = cmd[0]
        if tool in self.fail:
            return subprocess.CompletedProcess(cmd, 1, "", f"{tool} failed")
        stdout = getattr(self, "_" + tool)(cmd, input_text) or ""
        return subprocess.CompletedProcess(cmd, 0, stdout, "")

    def _subfinder(self, cmd, stdin):
        found = []
        for domain in stdin.split():
            found += self.subfinder_results.get(domain, [])
        return "\n".join(found) + ("\n" if found else "")

    def _shuffledns(self, cmd, stdin):
        found = self.shuffledns_results.get(_arg(cmd, "-d"), [])
        return "\n".join(found) + ("\n" if found else "")

    def _puredns(self, cmd, stdin):
        hosts = [h for h in read_lines(Path(cmd[2])) if h in self.a_records]
        Path(_arg(cmd, "-w")).write_text("".join(h + "\n" for h in hosts))
        return "\n".join(hosts)

    def _dnsx(self, cmd, stdin):
        lines = []
        for host in read_lines(Path(_arg(cmd, "-l"))):
            lines.append(json.dumps({"host": host, "a": self.a_records.get(host, [])}))
        Path(_arg(cmd, "-o")).write_text("".join(l + "\n" for l in lines))
        return "\n".join(lines)

    def _nmap(self, cmd, stdin):
        report = "".join(f"Nmap scan report for {ip}\n" for ip in read_lines(Path(_arg(cmd, "-iL"))))
        Path(_arg(cmd, "-oN")).write_text("# Nmap done\n" + report)

    def _dnsvalidator(self, cmd, stdin):
        if self.validator_writes:
            Path(_arg(cmd, "-o")).write_text("1.1.1.1\n9.9.9.9\n")

    def _notify(self, cmd, stdin):
        self.notified.append(stdin.strip())


class FakeHttp:
    """requests.Session stand-in"""

    def __init__(self, bodies=None, status=200, error=None):
        self.bodies = bodies if bodies is not None else {
            TRUSTED_RESOLVERS_URL: "1.1.1.1\n8.8.8.8\n",
            ALL_RESOLVERS_URL: "1.1.1.1\n8.8.8.8\n9.9.9.9\n",
            WORDLIST_URL: "www\napi\ndev\n",
        }
        self.status = status
        self.error = error
        self.requested = []

    def get(self, url, timeout=None):
        self.requested.append(url)
        if self.error:
            raise self.error
        return SimpleNamespace(status_code=self.status, text=self.bodies.get(url, ""))


@pytest.fixture
def runner():
    return FakeRunner()


@pytest.fixture
def http():
    return FakeHttp()


@pytest.fixture
def workdir(tmp_path):
    scope = tmp_path / "scope" / "acme"
    scope.mkdir(parents=True)
    (scope / "roots.txt").write_text("acme.com\n")
    return tmp_path


@pytest.fixture
def session(tmp_path):
    from scan_session import ScanSession
    path = tmp_path / "scans" / "acme-1000"
    path.mkdir(parents=True)
    (path / "roots.txt").write_text("acme.com\n")
    return ScanSession("acme", path, 1000, clock=lambda: 1000)
