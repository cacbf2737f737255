from __future__ import annotations

import socket
import time
from typing import Callable, Optional


class ProbeResult:
    __slots__ = ("host", "port", "rtt_ms")

    def __init__(self, host: str, port: int, rtt_ms: float):
        self.host = host
        self.port = port
        self.rtt_ms = rtt_ms

    def __repr__(self) -> str:  # pragma: no cover - debug helper
        return f"ProbeResult(host={self.host!r}, port={self.port}, rtt_ms={self.rtt_ms:.1f})"


def tcp_probe(host: str, port: int, timeout: Optional[float] = None) -> ProbeResult:
    """Open and immediately close a TCP connection to (host, port).

    Returns the connect time in ms. Connect failures propagate as the
    OSError raised by the socket layer; ``timeout`` of None keeps the OS
    default connect timeout.
    """
    start = time.perf_counter()
    # None puts the socket in blocking mode: only the OS connect timeout applies
    with socket.create_connection((host, port), timeout=timeout):
        rtt_ms = (time.perf_counter() - start) * 1000.0
    return ProbeResult(host, port, rtt_ms)


Probe = Callable[[str, int, Optional[float]], ProbeResult]
