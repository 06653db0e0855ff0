from __future__ import annotations

import csv
import json
import os
from collections import Counter
from datetime import datetime
from typing import List, Sequence

from .models import Outcome, ProbeResult

FORMATS = ("txt", "csv", "json")

_LABELS = {
    Outcome.CONNECTED: "connected",
    Outcome.TIMED_OUT: "timed out",
    Outcome.REFUSED: "refused",
    Outcome.RESOLUTION_FAILED: "unresolved",
    Outcome.ERROR: "error",
}


def format_row(r: ProbeResult) -> str:
    row = f"Host: {r.host} | Port {r.port}: {_LABELS[r.outcome]} ({r.elapsed_s:.4f}s)"
    if r.message and r.outcome is not Outcome.REFUSED:
        row += f" | {r.message}"
    return row


def summarize(results: Sequence[ProbeResult]) -> str:
    counts = Counter(r.outcome for r in results)
    parts = [f"{_LABELS[o]}={counts[o]}" for o in Outcome if counts[o]]
    detail = ", ".join(parts) if parts else "none"
    return f"Probed {len(results)} endpoints: {detail}"


def _filtered(results: Sequence[ProbeResult], failed_only: bool) -> List[ProbeResult]:
    return [r for r in results if not (failed_only and r.connected)]


def print_row(r: ProbeResult, failed_only: bool = False) -> None:
    if failed_only and r.connected:
        return
    print(format_row(r), flush=True)


def print_results(results: Sequence[ProbeResult], failed_only: bool = False) -> None:
    """Print a finished run, rows then summary, for callers of probe()."""
    # Results are already in emission order; do not re-sort
    for r in results:
        print_row(r, failed_only)
    print(summarize(results))


def save_results(
    results: Sequence[ProbeResult],
    fmt: str,
    out_dir: str = "PROBES",
    failed_only: bool = False,
) -> str:
    if fmt not in FORMATS:
        raise ValueError(f"Unsupported format: {fmt}")

    os.makedirs(out_dir, exist_ok=True)
    ts = datetime.now().strftime("%Y-%m-%d_%H-%M-%S")
    path = os.path.join(out_dir, f"{ts}_port_probe.{fmt}")

    rows = _filtered(results, failed_only)

    if fmt == "txt":
        with open(path, "w", encoding="utf-8") as f:
            for r in rows:
                f.write(format_row(r) + "\n")
            f.write(summarize(results) + "\n")

    elif fmt == "csv":
        with open(path, "w", newline="", encoding="utf-8") as f:
            w = csv.writer(f)
            w.writerow(["host", "port", "outcome", "elapsed_s", "message"])
            for r in rows:
                w.writerow([r.host, r.port, r.outcome.value, r.elapsed_s, r.message or ""])

    else:
        with open(path, "w", encoding="utf-8") as f:
            json.dump([r.to_dict() for r in rows], f, indent=2)

    return path
