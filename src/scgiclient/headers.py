"""Construction of the SCGI header block."""

from __future__ import annotations

from collections.abc import Iterable, Iterator

from .errors import ValidationError
from .types import Request


def _names(request: Request) -> Iterable[str]:
    """
    List the distinct header names of a request.

    :param request: The request.
    :return: The header names, each once, in order of first appearance.
    """
    return dict.fromkeys(name.lower() for name in request.headers.keys()).keys()


def _tokens(request: Request) -> Iterator[str]:
    """
    Generate the header block as alternating names and values.

    :param request: The buffered request.
    :return: The tokens, without terminators.
    """
    # Servers rely on CONTENT_LENGTH being first and SCGI second.
    yield "CONTENT_LENGTH"
    yield str(len(request.content()))
    yield "SCGI"
    yield "1"
    yield "REQUEST_METHOD"
    yield request.method
    yield "SERVER_PROTOCOL"
    yield request.protocol
    for name in _names(request):
        yield name.upper()
        yield ",".join(request.headers.get_all(name))


def _encode(token: str) -> bytes:
    """
    Encode a single token and check that it cannot break the framing.

    :param token: The name or value.
    :return: The encoded token, NUL-terminated.
    """
    if "\0" in token:
        msg = f"NUL byte in SCGI header token {token!r}"
        raise ValidationError(msg)
    try:
        return token.encode("ISO-8859-1") + b"\0"
    except UnicodeEncodeError as exc:
        msg = f"SCGI header token {token!r} is not ISO-8859-1"
        raise ValidationError(msg) from exc


def build(request: Request) -> bytes:
    """
    Build the SCGI header block for a request.

    The result is the netstring payload; it does not include the netstring framing.

    :param request: The request, whose body must already be buffered.
    :return: The NUL-terminated names and values.
    :raises ValidationError: if a name or value contains a NUL byte or is not
        ISO-8859-1
    """
    return b"".join(_encode(token) for token in _tokens(request))
