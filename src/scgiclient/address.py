"""Handling of SCGI server addresses."""

from __future__ import annotations

import logging
import socket
import urllib.parse
from typing import Self

from .errors import ConnectError, ValidationError


class UnixPath:
    """The filesystem path of a UNIX-domain socket."""

    __slots__ = {
        "path": "The socket path, relative to the working directory or absolute.",
    }

    path: str

    def __init__(self: Self, path: str) -> None:
        """
        Construct a new UnixPath.

        :param path: The socket path.
        """
        self.path = path

    def __eq__(self: Self, other: object) -> bool:
        """Compare two addresses."""
        if not isinstance(other, UnixPath):
            return NotImplemented
        return self.path == other.path

    def __hash__(self: Self) -> int:
        """Hash the address."""
        return hash(self.path)

    def __repr__(self: Self) -> str:
        """Return the representation of the address."""
        return f"UnixPath({self.path!r})"


class HostPort:
    """A TCP endpoint address."""

    __slots__ = {
        "host": "The host part, which can be a hostname or address literal.",
        "port": "The port part, which can be a service name or integer literal.",
    }

    host: str
    port: str

    def __init__(self: Self, host: str, port: str) -> None:
        """
        Construct a new HostPort.

        :param host: The hostname or address literal, without IPv6 brackets.
        :param port: The port number or service name.
        """
        self.host = host
        self.port = port

    def __eq__(self: Self, other: object) -> bool:
        """Compare two addresses."""
        if not isinstance(other, HostPort):
            return NotImplemented
        return (self.host, self.port) == (other.host, other.port)

    def __hash__(self: Self) -> int:
        """Hash the address."""
        return hash((self.host, self.port))

    def __repr__(self: Self) -> str:
        """Return the representation of the address."""
        return f"HostPort({self.host!r}, {self.port!r})"


ConnectionTarget = UnixPath | HostPort
"""The type of a resolved SCGI server address."""


def resolve(target: str) -> ConnectionTarget:
    """
    Work out which socket an scgi:// URL names.

    Three forms are accepted: scgi:///relative/path and scgi:////absolute/path name a
    UNIX-domain socket, while scgi://host:port names a TCP endpoint, with the port
    defaulting to 80. The host keeps the case it was written in.

    :param target: The URL.
    :return: The socket address.
    :raises ValidationError: if the URL lacks the // authority marker, has both or
        neither of a host and a path, or has an unparseable host or port
    """
    if not target.partition(":")[2].startswith("//"):
        msg = f"invalid scgi connection string {target!r}"
        raise ValidationError(msg)
    try:
        parts = urllib.parse.urlsplit(target)
    except ValueError as exc:
        msg = f"invalid scgi connection string {target!r}"
        raise ValidationError(msg) from exc
    if bool(parts.netloc) == bool(parts.path):
        msg = f"invalid scgi connection string {target!r}"
        raise ValidationError(msg)

    if not parts.netloc:
        # Drop one slash so that scgi:///foo is the relative path foo.
        path = parts.path
        if path.startswith("/"):
            path = path[1:]
        return UnixPath(path)

    try:
        port = parts.port
    except ValueError as exc:
        msg = f"invalid port in scgi connection string {target!r}"
        raise ValidationError(msg) from exc
    # SplitResult.hostname lower-cases, so take the host from the netloc instead.
    host = parts.netloc.rpartition("@")[2]
    if host.startswith("["):
        # IPv6 literal; the brackets only separate it from the port number.
        host = host[1 : host.index("]")]
    else:
        host = host.partition(":")[0]
    if not host:
        msg = f"missing host in scgi connection string {target!r}"
        raise ValidationError(msg)
    return HostPort(host, "80" if port is None else str(port))


def dial(target: ConnectionTarget, timeout: float | None = None) -> socket.socket:
    """
    Open a stream connection to an SCGI server.

    :param target: The address to connect to.
    :param timeout: The timeout in seconds to apply to the socket, or None to block.
    :return: The connected socket, which the caller must close.
    :raises ConnectError: if the connection cannot be made
    """
    if isinstance(target, UnixPath):
        logging.getLogger(__name__).debug("Connecting to UNIX socket %s", target.path)
        try:
            sock = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
        except OSError as exc:
            msg = f"round trip over unix socket: {exc}"
            raise ConnectError(msg) from exc
        try:
            sock.settimeout(timeout)
            sock.connect(target.path)
        except OSError as exc:
            sock.close()
            msg = f"round trip over unix socket {target.path!r}: {exc}"
            raise ConnectError(msg) from exc
        return sock

    logging.getLogger(__name__).debug(
        "Connecting to TCP %s port %s", target.host, target.port
    )
    try:
        return socket.create_connection((target.host, target.port), timeout)
    except OSError as exc:
        msg = f"round trip over tcp to {target.host}:{target.port}: {exc}"
        raise ConnectError(msg) from exc
