"""
Reception of SCGI responses.

An SCGI response is a CGI response: the status arrives as a ``Status`` header rather
than as an HTTP status line. This module rewrites that first line into an HTTP status
line, which is enough for the standard library's HTTP response parser to handle the
rest.
"""

from __future__ import annotations

import contextlib
import http.client
import io
import logging
import socket
from typing import BinaryIO, Self

from .errors import FormatError, ProtocolError, StreamError
from .types import Request, ResponseParser

_MAX_LINE = 65536
"""The longest status line accepted, in bytes, matching http.client."""


class _AdaptedStream(io.RawIOBase):
    """A raw stream that yields a synthesized status line, then the rest of a source."""

    __slots__ = {
        "_connection": """The socket to close along with the stream, if any.""",
        "_prefix": """The part of the status line not yet read.""",
        "_source": """The buffered stream positioned after the original first line.""",
    }

    _connection: socket.socket | None
    _prefix: bytes
    _source: BinaryIO

    def __init__(
        self: Self,
        prefix: bytes,
        source: BinaryIO,
        connection: socket.socket | None,
    ) -> None:
        """
        Construct a new _AdaptedStream.

        :param prefix: The bytes to yield before the source.
        :param source: The remainder of the response.
        :param connection: The socket underlying the source, or None.
        """
        super().__init__()
        self._connection = connection
        self._prefix = prefix
        self._source = source

    def readable(self: Self) -> bool:
        """Report that the stream can be read."""
        return True

    def readinto(self: Self, buffer: memoryview) -> int:
        """Read the rest of the status line, or else what the source has available."""
        if self._prefix:
            count = min(len(buffer), len(self._prefix))
            buffer[:count] = self._prefix[:count]
            self._prefix = self._prefix[count:]
            return count
        # readinto1 returns whatever is available instead of waiting to fill the buffer,
        # which would block on a server that keeps the connection open.
        return self._source.readinto1(buffer)  # type: ignore[attr-defined]

    def close(self: Self) -> None:
        """Close the stream, the source and the connection."""
        if self.closed:
            return
        try:
            self._source.close()
        finally:
            try:
                if self._connection is not None:
                    self._connection.close()
            finally:
                super().close()


class _StreamSocket:
    """The minimal socket lookalike that http.client.HTTPResponse reads from."""

    __slots__ = {
        "_stream": """The stream to hand out.""",
    }

    _stream: io.BufferedIOBase

    def __init__(self: Self, stream: io.BufferedIOBase) -> None:
        """
        Construct a new _StreamSocket.

        :param stream: The stream returned from makefile.
        """
        self._stream = stream

    def makefile(self: Self, _mode: str, *_args: object) -> io.BufferedIOBase:
        """Return the stream."""
        return self._stream


def adapt(
    source: BinaryIO, protocol: str, connection: socket.socket | None = None
) -> io.BufferedReader:
    """
    Reshape an SCGI response into an HTTP response.

    The first line must be a Status header. It is replaced by an HTTP status line using
    the request's protocol version; everything after it is passed through untouched.

    :param source: The buffered response stream, positioned at its start.
    :param protocol: The protocol version of the request, e.g. HTTP/1.1.
    :param connection: The socket to close when the returned stream is closed, or
        None.
    :return: A stream starting with an HTTP status line.
    :raises FormatError: if the first line is not a Status header
    :raises StreamError: if the first line cannot be read in full
    """
    try:
        line = source.readline(_MAX_LINE + 1)
    except OSError as exc:
        msg = f"round trip: read error: {exc}"
        raise StreamError(msg) from exc
    if len(line) > _MAX_LINE:
        msg = "status line too long"
        raise FormatError(msg)
    if not line.endswith(b"\n"):
        msg = "round trip: invalid format: EOF before end of status line"
        raise StreamError(msg)
    line = line[:-1]
    if line.endswith(b"\r"):
        line = line[:-1]

    name, separator, status = line.partition(b": ")
    if not separator:
        msg = "invalid status response format"
        raise FormatError(msg)
    if name != b"Status":
        msg = "invalid status header"
        raise FormatError(msg)

    status_line = protocol.encode("ISO-8859-1") + b" " + status + b"\r\n"
    return io.BufferedReader(_AdaptedStream(status_line, source, connection))


def parse(stream: io.BufferedIOBase, method: str) -> http.client.HTTPResponse:
    """
    Parse an HTTP status line and headers.

    :param stream: The HTTP-shaped response stream.
    :param method: The request method, which affects whether a body is expected.
    :return: The response, with its headers read and its body still in the stream.
    :raises ProtocolError: if the stream is not a valid HTTP response
    :raises StreamError: if reading fails
    """
    response = http.client.HTTPResponse(_StreamSocket(stream), method=method)  # type: ignore[arg-type]
    try:
        response.begin()
    except http.client.HTTPException as exc:
        msg = f"round trip: unparseable response: {exc!r}"
        raise ProtocolError(msg) from exc
    except OSError as exc:
        msg = f"round trip: read error: {exc}"
        raise StreamError(msg) from exc
    logging.getLogger(__name__).debug(
        "Received response %d %s", response.status, response.reason
    )
    return response


def read(
    connection: socket.socket,
    request: Request,
    parser: ResponseParser = parse,
) -> http.client.HTTPResponse:
    """
    Read the response to a request from a socket.

    On success the socket stays open until the response body has been read or the
    response is closed. On failure everything opened here is closed, including the
    socket.

    :param connection: The socket the request was sent over.
    :param request: The request, for its protocol version and method.
    :param parser: The HTTP response parser.
    :return: The response.
    """
    with contextlib.ExitStack() as stack:
        source = stack.enter_context(connection.makefile("rb"))
        stack.callback(connection.close)
        stream = stack.enter_context(
            contextlib.closing(adapt(source, request.protocol, connection))
        )
        response = parser(stream, request.method)
        stack.pop_all()
    return response
