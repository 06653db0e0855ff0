from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class InputError(ValueError):
    """Raised for malformed hosts, ports or run settings, before any probing."""


class Outcome(str, Enum):
    CONNECTED = "connected"
    TIMED_OUT = "timed_out"
    REFUSED = "refused"
    RESOLUTION_FAILED = "resolution_failed"
    ERROR = "error"


@dataclass(frozen=True)
class Endpoint:
    host: str
    port: int

    def __post_init__(self) -> None:
        if not isinstance(self.host, str) or not self.host.strip():
            raise InputError(f"Invalid host: {self.host!r}")
        # bool is an int subclass; True is not port 1
        if isinstance(self.port, bool) or not isinstance(self.port, int):
            raise InputError(f"Invalid port: {self.port!r}")
        if self.port < 1 or self.port > 65535:
            raise InputError(f"Invalid port: {self.port}")

    def __str__(self) -> str:
        if ":" in self.host:
            return f"[{self.host}]:{self.port}"
        return f"{self.host}:{self.port}"


@dataclass(frozen=True)
class ProbeResult:
    endpoint: Endpoint
    outcome: Outcome
    elapsed_s: float
    message: Optional[str] = None

    @property
    def host(self) -> str:
        return self.endpoint.host

    @property
    def port(self) -> int:
        return self.endpoint.port

    @property
    def connected(self) -> bool:
        return self.outcome is Outcome.CONNECTED

    def to_dict(self) -> dict:
        return {
            "host": self.host,
            "port": self.port,
            "outcome": self.outcome.value,
            "elapsed_s": self.elapsed_s,
            "message": self.message,
        }
