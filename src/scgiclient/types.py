"""Data types used by multiple modules."""

from __future__ import annotations

import http.client
import io
import wsgiref.headers
from collections.abc import Callable, Iterable, Mapping
from typing import BinaryIO, Protocol, Self

from .errors import StreamError

BodyType = bytes | BinaryIO | None
"""The legal types of a request body."""

HeadersType = Mapping[str, str | Iterable[str]] | Iterable[tuple[str, str]]
"""The forms in which request headers may be passed to a Request."""

ResponseParser = Callable[[io.BufferedIOBase, str], http.client.HTTPResponse]
"""
The type of an HTTP response parser.

A parser accepts a stream shaped as an HTTP status line, headers, a blank line and a
body, plus the request method, and returns the parsed response or raises
ProtocolError.
"""


class Transport(Protocol):
    """Anything that can carry out a single request/response exchange."""

    def execute(self: Self, request: Request) -> http.client.HTTPResponse:
        """
        Send a request and return the response.

        :param request: The request to send.
        :return: The response, whose body may still be unread.
        """


def _header_list(headers: HeadersType | None) -> list[tuple[str, str]]:
    """
    Flatten the accepted header forms into a list of name/value pairs.

    :param headers: The headers as passed to Request.
    :return: One pair per value, in the order given.
    """
    if headers is None:
        return []
    if isinstance(headers, Mapping):
        result = []
        for name, values in headers.items():
            if isinstance(values, str):
                result.append((name, values))
            else:
                result.extend((name, value) for value in values)
        return result
    return list(headers)


class Request:
    """
    An HTTP-shaped request to be sent to an SCGI server.

    CGI variables such as REMOTE_ADDR, REQUEST_URI or QUERY_STRING are passed as
    headers; they are forwarded with their names upper-cased.
    """

    __slots__ = {
        "body": "The body as bytes or a binary file object, or None for no body.",
        "headers": "The headers, case-insensitive and possibly multi-valued.",
        "method": "The request method.",
        "protocol": "The protocol version, sent as SERVER_PROTOCOL.",
        "url": "The scgi:// URL naming the server socket.",
    }

    body: BodyType
    headers: wsgiref.headers.Headers
    method: str
    protocol: str
    url: str

    def __init__(
        self: Self,
        url: str,
        method: str = "GET",
        headers: HeadersType | None = None,
        body: BodyType = None,
        protocol: str = "HTTP/1.1",
    ) -> None:
        """
        Construct a new Request.

        :param url: The address of the SCGI server, in one of the forms
            scgi:///relative/path, scgi:////absolute/path or scgi://host:port.
        :param method: The request method.
        :param headers: The headers, either as a mapping from name to a value or a list
            of values, or as an iterable of name/value pairs.
        :param body: The body, or None.
        :param protocol: The protocol version.
        """
        self.url = url
        self.method = method
        self.headers = wsgiref.headers.Headers(_header_list(headers))
        self.body = body
        self.protocol = protocol

    def __repr__(self: Self) -> str:
        """Return a short representation of the request."""
        return f"<Request {self.method} {self.url}>"

    def buffered(self: Self) -> Request:
        """
        Return an equivalent request whose body is held in memory.

        A file-like body is read to the end. The original request is not modified; if
        its body is already bytes or None, it is returned as is.

        :return: A request with a bytes or None body.
        :raises StreamError: if reading the body fails
        """
        if self.body is None or isinstance(self.body, bytes | bytearray | memoryview):
            return self
        try:
            data = self.body.read()
        except OSError as exc:
            msg = f"body read error: {exc}"
            raise StreamError(msg) from exc
        copy = Request(self.url, self.method, None, data, self.protocol)
        copy.headers = self.headers
        return copy

    def content(self: Self) -> bytes:
        """
        Return the body of a buffered request.

        :return: The body bytes, or an empty bytes object if there is no body.
        """
        body = self.body
        if body is None:
            return b""
        assert isinstance(body, bytes | bytearray | memoryview), "body not buffered"
        return bytes(body)
