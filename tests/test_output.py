from __future__ import annotations

import csv
import json
from pathlib import Path

import pytest

from port_prober.models import Endpoint, Outcome, ProbeResult
from port_prober.output import format_row, print_results, print_row, save_results, summarize

RESULTS = [
    ProbeResult(Endpoint("10.0.0.2", 443), Outcome.CONNECTED, 0.0012),
    ProbeResult(Endpoint("10.0.0.1", 22), Outcome.REFUSED, 0.0003, "[Errno 111] Connection refused"),
    ProbeResult(Endpoint("10.0.0.1", 80), Outcome.ERROR, 0.0101, "Network is unreachable"),
]


def test_format_row() -> None:
    assert format_row(RESULTS[0]) == "Host: 10.0.0.2 | Port 443: connected (0.0012s)"
    assert format_row(RESULTS[1]) == "Host: 10.0.0.1 | Port 22: refused (0.0003s)"
    assert format_row(RESULTS[2]).endswith("error (0.0101s) | Network is unreachable")


def test_summarize_counts_outcomes() -> None:
    assert summarize(RESULTS) == "Probed 3 endpoints: connected=1, refused=1, error=1"
    assert summarize([]) == "Probed 0 endpoints: none"


def test_print_results_keeps_given_order(capsys) -> None:
    print_results(RESULTS)

    lines = capsys.readouterr().out.splitlines()
    assert lines[0].startswith("Host: 10.0.0.2")
    assert lines[1].startswith("Host: 10.0.0.1 | Port 22")
    assert lines[-1].startswith("Probed 3 endpoints")


def test_print_results_failed_only(capsys) -> None:
    print_results(RESULTS, failed_only=True)

    out = capsys.readouterr().out
    assert "Port 443" not in out
    assert "Port 22" in out


def test_print_row_skips_connected_when_failed_only(capsys) -> None:
    print_row(RESULTS[0], failed_only=True)
    print_row(RESULTS[1], failed_only=True)

    lines = capsys.readouterr().out.splitlines()
    assert lines == ["Host: 10.0.0.1 | Port 22: refused (0.0003s)"]


def test_save_json(tmp_path: Path) -> None:
    path = save_results(RESULTS, fmt="json", out_dir=str(tmp_path))

    data = json.loads(Path(path).read_text(encoding="utf-8"))
    assert [d["outcome"] for d in data] == ["connected", "refused", "error"]
    assert data[0] == {
        "host": "10.0.0.2",
        "port": 443,
        "outcome": "connected",
        "elapsed_s": 0.0012,
        "message": None,
    }


def test_save_csv_failed_only(tmp_path: Path) -> None:
    path = save_results(RESULTS, fmt="csv", out_dir=str(tmp_path), failed_only=True)

    with open(path, newline="", encoding="utf-8") as f:
        rows = list(csv.reader(f))
    assert rows[0] == ["host", "port", "outcome", "elapsed_s", "message"]
    assert [r[2] for r in rows[1:]] == ["refused", "error"]


def test_save_txt(tmp_path: Path) -> None:
    path = save_results(RESULTS, fmt="txt", out_dir=str(tmp_path / "nested"))

    text = Path(path).read_text(encoding="utf-8")
    assert path.endswith("_port_probe.txt")
    assert "Port 443: connected" in text
    assert text.rstrip().endswith("error=1")


def test_save_rejects_unknown_format(tmp_path: Path) -> None:
    with pytest.raises(ValueError):
        save_results(RESULTS, fmt="html", out_dir=str(tmp_path))
