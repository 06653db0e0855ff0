from .models import Endpoint, InputError, Outcome, ProbeResult
from .prober import build_endpoints, iter_probes, probe, probe_one

__version__ = "0.1.0"

__all__ = [
    "Endpoint",
    "InputError",
    "Outcome",
    "ProbeResult",
    "build_endpoints",
    "iter_probes",
    "probe",
    "probe_one",
]
