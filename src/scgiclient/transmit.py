"""Sending of SCGI requests."""

from __future__ import annotations

import logging
import socket

from . import headers, netstring
from .errors import StreamError
from .types import Request


def send(connection: socket.socket, request: Request) -> None:
    """
    Send a request over a connected socket.

    The body is read into memory first, because its exact length must be sent before
    it. The netstring-framed header block and the body are then written in that order.

    The connection is not closed, whether or not sending succeeds.

    :param connection: The socket to write to.
    :param request: The request to send.
    :raises StreamError: if the body cannot be read or the socket cannot be written
    :raises ValidationError: if a header cannot be encoded
    """
    request = request.buffered()
    body = request.content()
    block = headers.build(request)
    logging.getLogger(__name__).debug(
        "Sending %s request: %d-byte header block, %d-byte body",
        request.method,
        len(block),
        len(body),
    )
    try:
        with connection.makefile("wb") as writer:
            netstring.write(writer, block)
            writer.write(body)
    except StreamError:
        raise
    except OSError as exc:
        msg = f"round trip write error: {exc}"
        raise StreamError(msg) from exc
