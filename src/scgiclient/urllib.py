"""
An adapter connecting scgiclient to the Python standard library urllib.request.

Installing SCGIHandler in an opener makes scgi:// URLs work with urlopen::

    opener = scgiclient.urllib.build_opener()
    with opener.open("scgi:////run/app.sock") as response:
        body = response.read()

CGI variables are passed as request headers, e.g. ``REQUEST_URI``.
"""

from __future__ import annotations

import http.client
import urllib.request
from typing import Self

from .client import Client
from .types import Request


class SCGIHandler(urllib.request.BaseHandler):
    """A urllib.request handler for the scgi URL scheme."""

    client: Client

    def __init__(self: Self, client: Client | None = None) -> None:
        """
        Construct a new SCGIHandler.

        :param client: The client that carries out requests, or None to use one with
            default settings.
        """
        self.client = client if client is not None else Client()

    def scgi_open(self: Self, req: urllib.request.Request) -> http.client.HTTPResponse:
        """
        Carry out a request for an scgi:// URL.

        :param req: The urllib request.
        :return: The response.
        """
        data = req.data
        if isinstance(data, bytes | bytearray | memoryview):
            data = bytes(data)
        elif data is not None and not hasattr(data, "read"):
            # urllib also accepts an iterable of bytes.
            data = b"".join(data)
        request = Request(
            req.full_url,
            method=req.get_method(),
            headers=req.header_items(),
            body=data,
        )
        response = self.client.execute(request)
        # Match what urllib.request.AbstractHTTPHandler.do_open sets.
        response.url = req.full_url
        response.msg = response.reason
        return response


def build_opener(
    *handlers: urllib.request.BaseHandler, client: Client | None = None
) -> urllib.request.OpenerDirector:
    """
    Build a urllib opener that also handles scgi:// URLs.

    :param handlers: Further handlers, as for urllib.request.build_opener.
    :param client: The client for the SCGI handler, or None for a default one.
    :return: The opener.
    """
    return urllib.request.build_opener(SCGIHandler(client), *handlers)
