"""
The SCGI client.

The main entry point is Client.execute, which performs one complete request/response
exchange over a fresh connection.
"""

from __future__ import annotations

import contextlib
import http.client
from typing import Self

from . import address, response, transmit
from .types import Request


class Client:
    """
    An SCGI client.

    A client holds no state beyond its configuration, so a single instance can be shared
    freely, including between threads. Each call to execute opens its own connection,
    which is never reused.

    The client accepts three forms of URL:

    * a relative socket path, scgi:///relative/path
    * an absolute socket path, scgi:////absolute/path
    * a host and port, scgi://host:port
    """

    __slots__ = {
        "timeout": """The socket timeout in seconds, or None to block indefinitely.""",
    }

    timeout: float | None

    def __init__(self: Self, timeout: float | None = None) -> None:
        """
        Construct a new Client.

        :param timeout: The timeout applied to connecting and to every read and write on
            the connection, or None for no timeout.
        """
        self.timeout = timeout

    def execute(self: Self, request: Request) -> http.client.HTTPResponse:
        """
        Send a request to an SCGI server and return its response.

        The connection is closed once the response body has been read to the end or the
        response is closed; callers that abandon a response should close it, for example
        by using it as a context manager.

        :param request: The request.
        :return: The response, with its headers parsed and its body unread.
        :raises ValidationError: if the URL is ambiguous or a header cannot be sent
        :raises ConnectError: if the server cannot be reached
        :raises StreamError: if reading or writing fails
        :raises FormatError: if the response does not start with a Status header
        :raises ProtocolError: if the rest of the response is not valid HTTP
        """
        target = address.resolve(request.url)
        request = request.buffered()
        with contextlib.ExitStack() as stack:
            connection = stack.enter_context(address.dial(target, self.timeout))
            transmit.send(connection, request)
            result = response.read(connection, request)
            stack.pop_all()
        return result
