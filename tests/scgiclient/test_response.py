"""Tests the response module."""

from __future__ import annotations

import io
import socket
from typing import Self
from unittest import TestCase
from unittest.mock import MagicMock

from scgiclient import response
from scgiclient.errors import FormatError, ProtocolError, StreamError
from scgiclient.types import Request


class TestAdapt(TestCase):
    """Tests rewriting the status line."""

    def test_crlf(self: Self) -> None:
        """Test the basic transformation with CRLF line endings."""
        source = io.BytesIO(b"Status: 200 OK\r\nX: y\r\n\r\nbody")
        stream = response.adapt(source, "HTTP/1.1")
        self.assertEqual(stream.read(), b"HTTP/1.1 200 OK\r\nX: y\r\n\r\nbody")

    def test_lf(self: Self) -> None:
        """Test a bare LF after the status line."""
        source = io.BytesIO(b"Status: 404 Not Found\nContent-Type: text/plain\n\n")
        stream = response.adapt(source, "HTTP/1.0")
        self.assertEqual(
            stream.read(), b"HTTP/1.0 404 Not Found\r\nContent-Type: text/plain\n\n"
        )

    def test_small_reads(self: Self) -> None:
        """Test that reads smaller than the status line see every byte once."""
        source = io.BytesIO(b"Status: 500 Internal Server Error\r\n\r\nx")
        stream = response.adapt(source, "HTTP/1.1")
        data = b""
        while chunk := stream.read1(3):
            data += chunk
        self.assertEqual(data, b"HTTP/1.1 500 Internal Server Error\r\n\r\nx")

    def test_wrong_header(self: Self) -> None:
        """Test rejection of a first line that is not a Status header."""
        for first in (b"Foo: bar\r\n", b"status: 200 OK\r\n", b"Status : 200\r\n"):
            with self.subTest(first=first):
                source = io.BytesIO(first + b"\r\nbody")
                with self.assertRaises(FormatError) as cm:
                    response.adapt(source, "HTTP/1.1")
                self.assertEqual(str(cm.exception), "invalid status header")

    def test_no_separator(self: Self) -> None:
        """Test rejection of a first line without a colon-space separator."""
        for first in (b"HTTP/1.1 200 OK\r\n", b"Status:200 OK\r\n", b"\r\n"):
            with self.subTest(first=first):
                with self.assertRaises(FormatError) as cm:
                    response.adapt(io.BytesIO(first), "HTTP/1.1")
                self.assertEqual(str(cm.exception), "invalid status response format")

    def test_truncated(self: Self) -> None:
        """Test that EOF before the end of the first line is a stream error."""
        for data in (b"", b"Status: 200 OK"):
            with self.subTest(data=data):
                with self.assertRaises(StreamError):
                    response.adapt(io.BytesIO(data), "HTTP/1.1")

    def test_too_long(self: Self) -> None:
        """Test rejection of an over-long first line."""
        source = io.BytesIO(b"Status: 200 " + b"K" * 70000 + b"\r\n\r\n")
        with self.assertRaises(FormatError):
            response.adapt(source, "HTTP/1.1")

    def test_close(self: Self) -> None:
        """Test that closing the stream closes the source and connection."""
        source = io.BytesIO(b"Status: 200 OK\r\n\r\n")
        connection = MagicMock()
        stream = response.adapt(source, "HTTP/1.1", connection)
        stream.close()
        self.assertTrue(source.closed)
        connection.close.assert_called_once_with()


class TestParse(TestCase):
    """Tests parsing an adapted stream."""

    def test_parse(self: Self) -> None:
        """Test parsing status, headers and body."""
        source = io.BytesIO(b"Status: 200 OK\r\nX: y\r\n\r\nbody")
        result = response.parse(response.adapt(source, "HTTP/1.1"), "GET")
        self.assertEqual(result.status, 200)
        self.assertEqual(result.reason, "OK")
        self.assertEqual(result.getheader("X"), "y")
        self.assertEqual(result.read(), b"body")
        self.assertTrue(source.closed)

    def test_content_length(self: Self) -> None:
        """Test that Content-Length bounds the body."""
        source = io.BytesIO(
            b"Status: 201 Created\r\nContent-Length: 3\r\nLocation: /a\r\n\r\nabcdef"
        )
        result = response.parse(response.adapt(source, "HTTP/1.1"), "POST")
        self.assertEqual(result.status, 201)
        self.assertEqual(result.headers["Location"], "/a")
        self.assertEqual(result.read(), b"abc")

    def test_head(self: Self) -> None:
        """Test that no body is read for a HEAD request."""
        source = io.BytesIO(b"Status: 200 OK\r\nContent-Length: 10\r\n\r\n")
        result = response.parse(response.adapt(source, "HTTP/1.1"), "HEAD")
        self.assertEqual(result.read(), b"")

    def test_bad_status(self: Self) -> None:
        """Test that an unparseable status is a protocol error."""
        source = io.BytesIO(b"Status: OK\r\n\r\n")
        with self.assertRaises(ProtocolError):
            response.parse(response.adapt(source, "HTTP/1.1"), "GET")

    def test_bad_protocol(self: Self) -> None:
        """Test that a protocol version the parser does not know is a protocol error."""
        source = io.BytesIO(b"Status: 200 OK\r\n\r\n")
        with self.assertRaises(ProtocolError):
            response.parse(response.adapt(source, "SPDY/3"), "GET")


class TestRead(TestCase):
    """Tests reading a response from a socket."""

    def test_read(self: Self) -> None:
        """Test reading a response and closing the socket after the body."""
        client, server = socket.socketpair()
        with server:
            server.sendall(b"Status: 200 OK\r\nContent-Length: 4\r\n\r\nbody")
            result = response.read(client, Request("scgi://h"))
            self.assertEqual(result.status, 200)
            self.assertEqual(result.read(), b"body")
            self.assertTrue(result.isclosed())
            self.assertEqual(client.fileno(), -1)

    def test_close_on_format_error(self: Self) -> None:
        """Test that the socket is closed if the status line is malformed."""
        client, server = socket.socketpair()
        with server:
            server.sendall(b"Foo: bar\r\n\r\n")
            with self.assertRaises(FormatError):
                response.read(client, Request("scgi://h"))
            self.assertEqual(client.fileno(), -1)

    def test_close_on_parser_error(self: Self) -> None:
        """Test that the socket is closed if the parser fails."""
        client, server = socket.socketpair()
        parser = MagicMock(side_effect=ProtocolError("bad"))
        with server:
            server.sendall(b"Status: 200 OK\r\n\r\n")
            with self.assertRaises(ProtocolError):
                response.read(client, Request("scgi://h", method="DELETE"), parser)
            self.assertEqual(client.fileno(), -1)
        stream, method = parser.call_args.args
        self.assertEqual(method, "DELETE")
        self.assertTrue(stream.closed)
