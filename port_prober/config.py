from __future__ import annotations

import math
import os
from dataclasses import dataclass, replace
from typing import Mapping, Optional

from .models import InputError

DEFAULT_TIMEOUT_S = 0.5
DEFAULT_WORKERS = 64

TIMEOUT_ENV = "PORT_PROBER_TIMEOUT"
WORKERS_ENV = "PORT_PROBER_WORKERS"


@dataclass(frozen=True)
class ProbeConfig:
    """
    Settings shared by every endpoint in a run.

    timeout_s is in seconds and applies to each endpoint separately.
    """

    timeout_s: float = DEFAULT_TIMEOUT_S
    workers: int = DEFAULT_WORKERS
    ordered: bool = True

    def validate(self) -> "ProbeConfig":
        if isinstance(self.timeout_s, bool) or not isinstance(self.timeout_s, (int, float)):
            raise InputError(f"Timeout must be a number of seconds, got {self.timeout_s!r}")
        if not self.timeout_s > 0 or not math.isfinite(self.timeout_s):
            raise InputError(f"Timeout must be > 0, got {self.timeout_s}")
        if isinstance(self.workers, bool) or not isinstance(self.workers, int) or self.workers < 1:
            raise InputError(f"Workers must be >= 1, got {self.workers!r}")
        return self

    def with_overrides(
        self,
        timeout_s: Optional[float] = None,
        workers: Optional[int] = None,
        ordered: Optional[bool] = None,
    ) -> "ProbeConfig":
        changes = {}
        if timeout_s is not None:
            changes["timeout_s"] = timeout_s
        if workers is not None:
            changes["workers"] = workers
        if ordered is not None:
            changes["ordered"] = ordered
        return replace(self, **changes)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "ProbeConfig":
        env = os.environ if environ is None else environ
        cfg = cls()

        raw_timeout = env.get(TIMEOUT_ENV, "").strip()
        if raw_timeout:
            try:
                cfg = cfg.with_overrides(timeout_s=float(raw_timeout))
            except ValueError:
                raise InputError(f"{TIMEOUT_ENV} must be a number, got {raw_timeout!r}") from None

        raw_workers = env.get(WORKERS_ENV, "").strip()
        if raw_workers:
            try:
                cfg = cfg.with_overrides(workers=int(raw_workers))
            except ValueError:
                raise InputError(f"{WORKERS_ENV} must be an integer, got {raw_workers!r}") from None

        return cfg.validate()
