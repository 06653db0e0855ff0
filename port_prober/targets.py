from __future__ import annotations

import ipaddress
from typing import List

from .models import InputError

# Refuse to expand blocks larger than a /16
MAX_CIDR_HOSTS = 65536


def expand_target(target: str) -> List[str]:
    """
    Supports:
      - Single IP: "172.20.0.10" or "::1"
      - CIDR: "172.20.0.0/24"
      - Hostname: "mail.example.com" (kept as-is, resolved per endpoint)
    """
    target = target.strip()
    if not target:
        raise InputError("Empty target")

    # Try IP or CIDR first
    try:
        ip = ipaddress.ip_address(target)
        return [str(ip)]
    except ValueError:
        pass

    if "/" in target:
        try:
            net = ipaddress.ip_network(target, strict=False)
        except ValueError as e:
            raise InputError(f"Invalid network '{target}': {e}") from e
        if net.num_addresses > MAX_CIDR_HOSTS:
            raise InputError(f"Network too large: {target} ({net.num_addresses} addresses)")
        # hosts() excludes network + broadcast (good for /24 style)
        hosts = [str(ip) for ip in net.hosts()]
        # if /32 or single-address network
        if not hosts:
            hosts = [str(net.network_address)]
        return hosts

    # Name resolution happens inside each probe so failures stay per-endpoint
    return [target]


def expand_hosts(spec: str) -> List[str]:
    """Comma-separated targets, expanded in the order given."""
    if not spec or not spec.strip():
        raise InputError("Empty host spec")

    hosts: List[str] = []
    for part in spec.split(","):
        if not part.strip():
            continue
        hosts.extend(expand_target(part))

    if not hosts:
        raise InputError(f"No hosts in spec: {spec!r}")
    return hosts
