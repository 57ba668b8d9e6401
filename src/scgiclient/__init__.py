"""
A client that speaks SCGI.

scgiclient translates an HTTP-shaped request into an SCGI request, sends it to an SCGI
server over a UNIX-domain or TCP socket, and turns the CGI-style response back into an
ordinary http.client.HTTPResponse.

The composition root is scgiclient.client.Client. For use with urllib.request, see
the urllib module, which registers the scgi URL scheme with an opener.

Please see the individual modules for more details.
"""
