#!/usr/bin/env python3
"""
scan.py
Subdomain enumeration, optional DNS brute-force, resolution and host
fingerprinting for a named scope.

Usage:
    python3 scan.py <scope_id>

Output lands in scans/<scope_id>-<timestamp>/. Toggles live in ScanConfig and
can be flipped with SCAN_* environment variables (see scan_config.py).

External tools: subfinder, shuffledns, puredns (+ massdns), dnsx, nmap,
dnsvalidator, notify (optional).
"""

import argparse
import os
import sys
import time
from pathlib import Path

from enumeration_pipeline import CommandRunner, EnumerationPipeline
from list_cache import ListCache
from resolver_validator import MissingResolverFile, ResolverValidator
from scan_config import ScanConfig
from scan_session import ScanSession
from scope_store import ScopeNotFound, ScopeStore

REQUIRED_TOOLS = ["subfinder", "puredns", "massdns", "dnsx", "nmap"]


def missing_tools(runner, config):
    tools = list(REQUIRED_TOOLS)
    if config.dns_bruteforce:
        tools.append("shuffledns")
    if config.validate_resolvers_on_start:
        tools.append("dnsvalidator")
    if config.notify:
        tools.append("notify")
    return [t for t in tools if not runner.which(t)]


def send_notification(runner, message):
    if not runner.which("notify"):
        print("[!] notify not installed; skipping.")
        return
    runner.run(["notify", "-silent"], capture=True, input_text=message + "\n")


def run_scan(scope_id, base_dir, config, runner, http=None, prompt=input, clock=time.time):
    store = ScopeStore(base_dir)

    created = store.ensure_initialized(prompt)
    if created:
        print(f"Created new scope at {created.parent}. Please add root domains to {created} "
              f"(wildcards are ok) and re-run the script.")
        return 0

    if not scope_id:
        print("usage: scan.py <scope_id>")
        return 1

    try:
        roots = store.load_roots(scope_id)
    except ScopeNotFound:
        print("Specified scope was not found.")
        known = store.list_scopes()
        if known:
            print(f"[*] known scopes: {', '.join(known)}")
        return 1

    for tool in missing_tools(runner, config):
        print(f"[!] {tool} not installed; the stages using it will be skipped.")

    lists = ListCache(base_dir, session=http, timeout=config.fetch_timeout)
    validator = ResolverValidator(lists.validated_resolvers, runner, strict=config.strict_resolvers)
    if config.validate_resolvers_on_start:
        validator.discard_previous()

    lists.refresh_all(config.use_large_resolver_list)
    _, raw_resolvers = lists.resolver_source(config.use_large_resolver_list)
    # puredns and dnsvalidator always work from the trusted list
    trusted = lists.trusted_resolvers
    if not trusted.exists():
        print(f"[!] {trusted} not found; resolution and validation will have no resolvers.")

    if config.validate_resolvers_on_start:
        try:
            validator.validate(trusted, config.validator_threads)
        except MissingResolverFile as e:
            print(f"[!] no validated resolvers at {e}; aborting (strict mode).")
            return 1

    bruteforce_resolvers = lists.validated_resolvers if lists.validated_resolvers.exists() else raw_resolvers

    session = ScanSession.begin(scope_id, store.roots_path(scope_id), Path(base_dir) / "scans",
                                debug=config.debug, clock=clock)

    print(f"Starting new scan with ID: {session.scan_id}")
    print("Scan roots:")
    for root in roots:
        print(root)

    pipeline = EnumerationPipeline.build(
        runner,
        store.tool_targets(roots),
        trusted_resolvers=trusted,
        wordlist=lists.wordlist,
        bruteforce_resolvers=bruteforce_resolvers,
        dns_bruteforce=config.dns_bruteforce,
    )
    pipeline.run(session)

    message = f"Done! Scan {session.scan_id} took {session.close()}."
    print(message)
    if config.notify:
        send_notification(runner, message)
    return 0


def main(argv=None, base_dir=None, config=None, runner=None, http=None, prompt=input, clock=time.time):
    parser = argparse.ArgumentParser(description="Subdomain enumeration and host fingerprinting for a scope")
    parser.add_argument("scope_id", nargs="?", help="name of a directory under scope/")
    args = parser.parse_args(argv)

    try:
        return run_scan(
            args.scope_id,
            Path(base_dir or os.getcwd()),
            config or ScanConfig.from_env(),
            runner or CommandRunner(),
            http=http,
            prompt=prompt,
            clock=clock,
        )
    except KeyboardInterrupt:
        print("Interrupted")
        return 130


if __name__ == "__main__":
    sys.exit(main())
