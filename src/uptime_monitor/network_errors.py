from __future__ import annotations

import errno
import socket
from enum import Enum
from typing import Optional


class RecoverableNetworkError(Enum):
    """Transient connect failures that count toward a site's alert threshold."""

    CONNECTION_REFUSED = "connection refused"
    NETWORK_UNREACHABLE = "network unreachable"
    CONNECTION_TIMED_OUT = "connection timed out"
    CONNECTION_RESET_BY_PEER = "connection reset by peer"
    UNKNOWN_HOST_NAME = "unknown hostname"
    TEMPORARY_NAME_SERVER_FAILURE = "temporary nameserver failure"
    NAME_SERVER_FAILURE = "nameserver failure"

    @property
    def description(self) -> str:
        return self.value


_ERRNO_MAP = {
    errno.ECONNREFUSED: RecoverableNetworkError.CONNECTION_REFUSED,
    errno.ENETUNREACH: RecoverableNetworkError.NETWORK_UNREACHABLE,
    errno.EHOSTUNREACH: RecoverableNetworkError.NETWORK_UNREACHABLE,
    errno.ETIMEDOUT: RecoverableNetworkError.CONNECTION_TIMED_OUT,
    errno.ECONNRESET: RecoverableNetworkError.CONNECTION_RESET_BY_PEER,
}

# getaddrinfo codes; EAI_NODATA is not defined on every platform
_GAI_MAP = {
    socket.EAI_NONAME: RecoverableNetworkError.UNKNOWN_HOST_NAME,
    socket.EAI_AGAIN: RecoverableNetworkError.TEMPORARY_NAME_SERVER_FAILURE,
    socket.EAI_FAIL: RecoverableNetworkError.NAME_SERVER_FAILURE,
}
if hasattr(socket, "EAI_NODATA"):
    _GAI_MAP[socket.EAI_NODATA] = RecoverableNetworkError.UNKNOWN_HOST_NAME


def classify_error(exc: BaseException) -> Optional[RecoverableNetworkError]:
    """Map a failed connect attempt to a recoverable kind, or None if fatal."""
    if isinstance(exc, socket.gaierror):
        return _GAI_MAP.get(exc.errno)
    # socket.timeout only became an alias of TimeoutError in 3.10; neither carries an errno
    if isinstance(exc, (TimeoutError, socket.timeout)) and exc.errno is None:
        return RecoverableNetworkError.CONNECTION_TIMED_OUT
    if isinstance(exc, ConnectionRefusedError):
        return RecoverableNetworkError.CONNECTION_REFUSED
    if isinstance(exc, ConnectionResetError):
        return RecoverableNetworkError.CONNECTION_RESET_BY_PEER
    if isinstance(exc, OSError):
        return _ERRNO_MAP.get(exc.errno)
    return None


def describe(kind: RecoverableNetworkError) -> str:
    return kind.description
