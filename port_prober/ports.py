from __future__ import annotations

from typing import List

from .models import InputError


def _parse_port(text: str, part: str) -> int:
    try:
        p = int(text)
    except ValueError:
        raise InputError(f"Invalid port: {part}") from None
    if p < 1 or p > 65535:
        raise InputError(f"Invalid port: {p}")
    return p


def parse_ports(spec: str) -> List[int]:
    """
    Parses a port specification string into a list of ports.
    Supports:
    - Single ports: "80"
    - Ranges: "1-1024"
    - Comma-separated: "22,80,443"
    - Mixed: "443,80,9000-9005"

    Order is kept as written and repeated ports are probed again.
    """
    spec = spec.strip()
    if not spec:
        raise InputError("Empty port spec")

    ports: List[int] = []
    for part in spec.split(","):
        part = part.strip()
        if not part:
            continue
        if "-" in part:
            start_s, end_s = part.split("-", 1)
            start = _parse_port(start_s.strip(), part)
            end = _parse_port(end_s.strip(), part)
            if start > end:
                raise InputError(f"Invalid port range: {part}")
            ports.extend(range(start, end + 1))
        else:
            ports.append(_parse_port(part, part))

    if not ports:
        raise InputError(f"No ports in spec: {spec!r}")
    return ports
