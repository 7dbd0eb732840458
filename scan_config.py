#!/usr/bin/env python3
"""
scan_config.py
Behavioural toggles for a scan run. Defaults match the CONFIGURATION block of
the old shell script; every toggle can be overridden from the environment.
"""

import os

TRUE_VALUES = ("1", "true", "yes", "on")

# env var -> (attribute, type)
ENV_OVERRIDES = {
    "SCAN_DEBUG": ("debug", bool),
    "SCAN_DNS_BRUTEFORCE": ("dns_bruteforce", bool),
    "SCAN_VALIDATE_RESOLVERS": ("validate_resolvers_on_start", bool),
    "SCAN_LARGE_RESOLVERS": ("use_large_resolver_list", bool),
    "SCAN_STRICT_RESOLVERS": ("strict_resolvers", bool),
    "SCAN_VALIDATOR_THREADS": ("validator_threads", int),
    "SCAN_NOTIFY": ("notify", bool),
    "SCAN_FETCH_TIMEOUT": ("fetch_timeout", int),
}


class ScanConfig:
    def __init__(self,
                 debug: bool = False,
                 dns_bruteforce: bool = False,
                 validate_resolvers_on_start: bool = True,
                 use_large_resolver_list: bool = False,
                 strict_resolvers: bool = False,
                 validator_threads: int = 20,
                 notify: bool = False,
                 fetch_timeout: int = 60):
        # debug removes previous scans of the same scope (repeatable test runs)
        self.debug = debug
        # shuffledns brute-force per root, slow
        self.dns_bruteforce = dns_bruteforce
        # regenerate lists/updated-resolvers.txt with dnsvalidator
        self.validate_resolvers_on_start = validate_resolvers_on_start
        # trickest resolvers.txt instead of resolvers-trusted.txt
        self.use_large_resolver_list = use_large_resolver_list
        # abort instead of warn when validation yields no resolver file
        self.strict_resolvers = strict_resolvers
        self.validator_threads = validator_threads
        # pipe the final message to projectdiscovery/notify
        self.notify = notify
        self.fetch_timeout = fetch_timeout

    @classmethod
    def from_env(cls, environ=None) -> "ScanConfig":
        """Build a config from defaults plus SCAN_* environment overrides"""
        environ = os.environ if environ is None else environ
        config = cls()
        for var, (attr, kind) in ENV_OVERRIDES.items():
            raw = environ.get(var)
            if raw is None:
                continue
            if kind is bool:
                setattr(config, attr, raw.strip().lower() in TRUE_VALUES)
            else:
                try:
                    setattr(config, attr, int(raw))
                except ValueError:
                    print(f"[!] ignoring {var}={raw!r}: not an integer")
        return config

    def __repr__(self):
        fields = ", ".join(f"{k}={v!r}" for k, v in vars(self).items())
        return f"ScanConfig({fields})"
