from __future__ import annotations

import argparse
import sys
from typing import List, Optional

from .config import ProbeConfig
from .logger import create_logger, get_logger
from .models import InputError, ProbeResult
from .output import FORMATS, print_row, save_results, summarize
from .ports import parse_ports
from .presets import PRESETS, get_preset
from .prober import probe
from .targets import expand_hosts

EXIT_OK = 0
EXIT_UNREACHABLE = 1
EXIT_INPUT_ERROR = 2
EXIT_INTERRUPTED = 130

LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")

log = get_logger("cli")


def build_parser() -> argparse.ArgumentParser:
    presets = ", ".join(f"{name} ({p.description})" for name, p in PRESETS.items())
    p = argparse.ArgumentParser(
        prog="port-prober",
        description="TCP reachability checks for a list of hosts and ports",
    )
    p.add_argument("--hosts", help="Comma-separated IPs, CIDR blocks or hostnames")
    p.add_argument("--ports", help="Port spec: 1-1024 or 22,80,443 or mixed")
    p.add_argument("--preset", help=f"Named hosts/ports set: {presets}")
    p.add_argument("--timeout", type=float, help="Per-endpoint timeout in seconds (default: 0.5)")
    p.add_argument("--workers", type=int, help="Concurrent probes (default: 64)")
    p.add_argument("--unordered", action="store_true", help="Print results as they complete")
    p.add_argument("--failed-only", action="store_true", help="Only display/save endpoints that did not connect")
    p.add_argument("--format", choices=FORMATS, help="Save results to file")
    p.add_argument("--out-dir", default="PROBES", help="Output directory for saved files")
    p.add_argument(
        "--log-level",
        type=str.upper,
        choices=LOG_LEVELS,
        default="WARNING",
        help="Logging level (default: WARNING)",
    )
    p.add_argument("--log-file", help="Also write log lines to this file")
    p.add_argument("--progress-every", type=int, default=0, help="Log progress every N probes (default: off)")
    return p


def _resolve_targets(args: argparse.Namespace) -> tuple:
    preset = get_preset(args.preset) if args.preset else None

    if args.hosts:
        hosts = expand_hosts(args.hosts)
    elif preset and preset.hosts:
        hosts = list(preset.hosts)
    else:
        raise InputError("--hosts is required" + (f" with preset '{args.preset}'" if preset else ""))

    if args.ports:
        ports = parse_ports(args.ports)
    elif preset and preset.ports:
        ports = list(preset.ports)
    else:
        raise InputError("--ports is required")

    return hosts, ports


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    create_logger(args.log_level, args.log_file)

    try:
        hosts, ports = _resolve_targets(args)
        config = ProbeConfig.from_env().with_overrides(
            timeout_s=args.timeout,
            workers=args.workers,
            ordered=not args.unordered,
        ).validate()
    except InputError as e:
        parser.print_usage(sys.stderr)
        print(f"port-prober: error: {e}", file=sys.stderr)
        return EXIT_INPUT_ERROR

    print(f"[*] Hosts: {len(hosts)} | Ports: {len(ports)} | Total probes: {len(hosts) * len(ports)}")

    results: List[ProbeResult] = []

    def emit(r: ProbeResult) -> None:
        results.append(r)
        print_row(r, args.failed_only)

    try:
        probe(
            hosts,
            ports,
            timeout_s=config.timeout_s,
            workers=config.workers,
            ordered=config.ordered,
            on_result=emit,
            progress_every=args.progress_every,
        )
    except InputError as e:
        print(f"port-prober: error: {e}", file=sys.stderr)
        return EXIT_INPUT_ERROR
    except KeyboardInterrupt:
        log.warning("Interrupted after %d of %d probes", len(results), len(hosts) * len(ports))
        print(summarize(results) + " (interrupted)")
        return EXIT_INTERRUPTED

    print(summarize(results))

    if args.format:
        path = save_results(results, fmt=args.format, out_dir=args.out_dir, failed_only=args.failed_only)
        print(f"Saved results to {path}")

    return EXIT_OK if all(r.connected for r in results) else EXIT_UNREACHABLE
