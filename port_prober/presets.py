"""
Named endpoint sets for the checks that get run most often.

A preset may carry hosts, ports or both. Ports-only presets still need
hosts from the command line.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Tuple

from .models import InputError


@dataclass(frozen=True)
class Preset:
    description: str
    hosts: Tuple[str, ...] = ()
    ports: Tuple[int, ...] = ()


PRESETS: Dict[str, Preset] = {
    "office365": Preset(
        description="Exchange Online, SMTP submission and sign-in endpoints",
        hosts=(
            "outlook.office365.com",
            "smtp.office365.com",
            "login.microsoftonline.com",
        ),
        ports=(25, 80, 443, 587),
    ),
    "domain-controller": Preset(
        description="Active Directory domain controller ports",
        ports=(53, 88, 135, 389, 445, 464, 636, 3268, 3269),
    ),
    "remote-admin": Preset(
        description="SSH, RDP and WinRM",
        ports=(22, 3389, 5985, 5986),
    ),
}


def get_preset(name: str) -> Preset:
    key = name.strip().lower()
    try:
        return PRESETS[key]
    except KeyError:
        known = ", ".join(sorted(PRESETS))
        raise InputError(f"Unknown preset '{name}' (known: {known})") from None
