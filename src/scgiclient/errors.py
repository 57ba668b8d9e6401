"""Exceptions raised by the SCGI client."""


class Error(Exception):
    """The base class of all errors raised by this package."""

    __slots__ = ()


class ValidationError(Error, ValueError):
    """
    Raised if a request cannot be expressed in SCGI.

    This covers an ambiguous or empty target address as well as header names or values
    that would corrupt the header block.
    """

    __slots__ = ()


class ConnectError(Error, OSError):
    """Raised if the connection to the SCGI server cannot be established."""

    __slots__ = ()


class StreamError(Error, OSError):
    """Raised if reading from or writing to a stream fails or a stream ends early."""

    __slots__ = ()


class FormatError(Error, ValueError):
    """Raised if received data does not follow the netstring or SCGI response format."""

    __slots__ = ()


class ProtocolError(Error):
    """Raised if the adapted response cannot be parsed as an HTTP response."""

    __slots__ = ()
