"""
The netstring framing used for the SCGI header block.

A netstring is the ASCII decimal length of its payload, a colon, the payload itself,
and a comma, for example ``b"5:hello,"``.
"""

from __future__ import annotations

import io
from typing import BinaryIO

from .errors import FormatError, StreamError

_CHUNK_SIZE = io.DEFAULT_BUFFER_SIZE
"""The largest number of payload bytes requested from the source at once."""


def encode(data: bytes) -> bytes:
    """
    Frame a byte string as a netstring.

    :param data: The payload.
    :return: The framed payload.
    """
    return b"%d:%s," % (len(data), data)


def write(sink: BinaryIO, data: bytes) -> None:
    """
    Write a byte string to a sink as a netstring.

    :param sink: The binary stream to write to.
    :param data: The payload.
    :raises StreamError: if the sink fails to accept any part of the frame
    """
    try:
        sink.write(b"%d" % len(data))
        sink.write(b":")
        sink.write(data)
        sink.write(b",")
    except OSError as exc:
        msg = f"netstring write error: {exc}"
        raise StreamError(msg) from exc


def read(source: BinaryIO) -> bytes:
    """
    Read one netstring from a stream.

    The stream is left positioned immediately after the trailing comma.

    :param source: The binary stream to read from.
    :return: The payload.
    :raises FormatError: if the length prefix is not a decimal number or the payload is
        not followed by a comma
    :raises StreamError: if the stream ends before the netstring is complete
    """
    digits = bytearray()
    while True:
        char = source.read(1)
        if not char:
            msg = "netstring read error: EOF in length prefix"
            raise StreamError(msg)
        if char == b":":
            break
        if not char.isdigit():
            msg = "invalid length"
            raise FormatError(msg)
        digits += char
    if not digits:
        msg = "invalid length"
        raise FormatError(msg)
    count = int(digits)

    # The declared length is untrusted; never request more than _CHUNK_SIZE at once.
    chunks = []
    received = 0
    while received < count + 1:
        chunk = source.read(min(count + 1 - received, _CHUNK_SIZE))
        if not chunk:
            msg = (
                f"netstring read error: expected {count + 1} bytes, "
                f"stream ended after {received}"
            )
            raise StreamError(msg)
        chunks.append(chunk)
        received += len(chunk)
    data = b"".join(chunks)
    if data[-1:] != b",":
        msg = "missing trailing comma"
        raise FormatError(msg)
    return data[:-1]


def decode(data: bytes) -> bytes:
    """
    Decode a complete, in-memory netstring.

    :param data: Exactly one framed netstring.
    :return: The payload.
    :raises FormatError: if the framing is invalid or bytes follow the trailing comma
    :raises StreamError: if the frame is truncated
    """
    source = io.BytesIO(data)
    payload = read(source)
    if source.tell() != len(data):
        msg = "trailing data after netstring"
        raise FormatError(msg)
    return payload
