from __future__ import annotations

import concurrent.futures
import logging
import socket
import time
from collections import Counter
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from typing import Callable, Dict, Iterable, Iterator, List, Optional, Sequence, Tuple

from .config import DEFAULT_TIMEOUT_S, DEFAULT_WORKERS, ProbeConfig
from .logger import get_logger, log_event
from .models import Endpoint, InputError, Outcome, ProbeResult

log = get_logger("prober")

ResultCallback = Callable[[ProbeResult], None]

# getaddrinfo cannot be interrupted, so lookups run here and are waited on
# with the remaining budget. Threads start lazily.
_resolver = ThreadPoolExecutor(max_workers=128, thread_name_prefix="resolve")


def _finish(
    endpoint: Endpoint,
    outcome: Outcome,
    start: float,
    message: Optional[str] = None,
) -> ProbeResult:
    elapsed = time.perf_counter() - start
    return ProbeResult(
        endpoint=endpoint,
        outcome=outcome,
        elapsed_s=round(elapsed, 4),
        message=message,
    )


def _classify(exc: Optional[BaseException]) -> Tuple[Outcome, Optional[str]]:
    if exc is None:
        return Outcome.ERROR, "no addresses to connect to"
    # socket.timeout only became an alias of TimeoutError in 3.10
    if isinstance(exc, (socket.timeout, TimeoutError)):
        return Outcome.TIMED_OUT, None
    if isinstance(exc, ConnectionRefusedError):
        return Outcome.REFUSED, str(exc) or None
    return Outcome.ERROR, str(exc) or exc.__class__.__name__


def probe_one(endpoint: Endpoint, timeout_s: float) -> ProbeResult:
    """
    One TCP handshake attempt against endpoint, nothing is sent or read.

    Resolution and every connect attempt share a single deadline of
    timeout_s seconds. Per-endpoint failures come back as the result's
    outcome; this never raises for network conditions.
    """
    start = time.perf_counter()
    deadline = start + timeout_s

    lookup = _resolver.submit(socket.getaddrinfo, endpoint.host, endpoint.port, type=socket.SOCK_STREAM)
    try:
        infos = lookup.result(timeout=timeout_s)
    except concurrent.futures.TimeoutError:
        # a lookup still running is left to finish on its own
        lookup.cancel()
        return _finish(endpoint, Outcome.TIMED_OUT, start)
    except socket.gaierror as e:
        return _finish(endpoint, Outcome.RESOLUTION_FAILED, start, str(e))
    except UnicodeError as e:
        # idna refuses labels that are empty or longer than 63 chars
        return _finish(endpoint, Outcome.RESOLUTION_FAILED, start, str(e))

    last_exc: Optional[BaseException] = None
    for family, socktype, proto, _canon, addr in infos:
        remaining = deadline - time.perf_counter()
        if remaining <= 0:
            last_exc = socket.timeout("timed out")
            break

        sock: Optional[socket.socket] = None
        try:
            sock = socket.socket(family, socktype, proto)
            sock.settimeout(remaining)
            sock.connect(addr)
            return _finish(endpoint, Outcome.CONNECTED, start)
        except OSError as e:
            last_exc = e
        finally:
            if sock is not None:
                try:
                    sock.close()
                except OSError:
                    pass

    outcome, message = _classify(last_exc)
    return _finish(endpoint, outcome, start, message)


def build_endpoints(hosts: Iterable[str], ports: Iterable[int]) -> List[Endpoint]:
    """Host-major, port-minor product of hosts and ports."""
    if isinstance(hosts, str):
        raise InputError("hosts must be a sequence of host strings, not a single string")
    if isinstance(ports, (str, bytes)):
        raise InputError("ports must be a sequence of integers, not a string")

    host_list = list(hosts)
    port_list = list(ports)
    if not host_list:
        raise InputError("Empty host list")
    if not port_list:
        raise InputError("Empty port list")

    return [Endpoint(h, p) for h in host_list for p in port_list]


def iter_probes(
    endpoints: Sequence[Endpoint],
    timeout_s: float,
    workers: int,
    ordered: bool = True,
) -> Iterator[ProbeResult]:
    """
    Bounded-futures prober (won't create one future per endpoint up front).

    With ordered=True results come out in submission order no matter which
    attempt finishes first; otherwise they come out as they complete. Closing
    the generator early cancels every attempt that has not started.
    """
    jobs = enumerate(endpoints)
    max_pending = max(workers * 4, 100)

    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="probe") as pool:
        pending: Dict[Future, int] = {}
        buffered: Dict[int, ProbeResult] = {}
        next_index = 0

        def submit_next() -> bool:
            try:
                idx, ep = next(jobs)
            except StopIteration:
                return False
            fut = pool.submit(probe_one, ep, timeout_s)
            pending[fut] = idx
            return True

        def refill() -> None:
            # buffered results count against the window so a slow head
            # cannot let the reorder buffer grow without bound
            while len(pending) + len(buffered) < max_pending and submit_next():
                pass

        try:
            refill()

            while pending:
                done, _ = wait(pending, return_when=FIRST_COMPLETED)
                for fut in done:
                    idx = pending.pop(fut)
                    r = fut.result()
                    if ordered:
                        buffered[idx] = r
                    else:
                        yield r

                if ordered:
                    while next_index in buffered:
                        yield buffered.pop(next_index)
                        next_index += 1

                refill()
        finally:
            for fut in pending:
                fut.cancel()


def probe(
    hosts: Iterable[str],
    ports: Iterable[int],
    timeout_s: float = DEFAULT_TIMEOUT_S,
    workers: int = DEFAULT_WORKERS,
    ordered: bool = True,
    on_result: Optional[ResultCallback] = None,
    progress_every: int = 0,
) -> List[ProbeResult]:
    """
    Probe every (host, port) pair once and return one result per pair.

    Raises InputError before any socket is opened when the hosts, ports or
    settings are unusable. on_result is called for each result in the order
    results are emitted.
    """
    config = ProbeConfig(timeout_s=timeout_s, workers=workers, ordered=ordered).validate()
    endpoints = build_endpoints(hosts, ports)

    total = len(endpoints)
    log_event(log, "run_started", {
        "endpoints": total,
        "timeout_s": config.timeout_s,
        "workers": config.workers,
        "ordered": config.ordered,
    })

    results: List[ProbeResult] = []
    counts: Counter = Counter()
    start_all = time.perf_counter()

    for r in iter_probes(endpoints, config.timeout_s, config.workers, config.ordered):
        results.append(r)
        counts[r.outcome.value] += 1
        log_event(log, "probe_result", r.to_dict(), level=logging.DEBUG)

        if on_result is not None:
            on_result(r)

        done = len(results)
        if progress_every > 0 and (done % progress_every == 0 or done == total):
            elapsed = time.perf_counter() - start_all
            rate = done / elapsed if elapsed > 0 else 0.0
            log.info("Probed %d/%d | connected=%d | %.0f probes/s",
                     done, total, counts[Outcome.CONNECTED.value], rate)

    log_event(log, "run_finished", {
        "endpoints": total,
        "elapsed_s": round(time.perf_counter() - start_all, 4),
        "outcomes": dict(counts),
    })
    return results
