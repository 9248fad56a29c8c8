# -*- coding: utf-8 -*-
# Some elements of this module are based on the flup library client.  The
# copyright notice thereof is included below.
#
# Copyright (c) 2006 Allan Saddi <allan@saddi.com>
# All rights reserved.
#
# Redistribution and use in source and binary forms, with or without
# modification, are permitted provided that the following conditions
# are met:
# 1. Redistributions of source code must retain the above copyright
#    notice, this list of conditions and the following disclaimer.
# 2. Redistributions in binary form must reproduce the above copyright
#    notice, this list of conditions and the following disclaimer in the
#    documentation and/or other materials provided with the distribution.
#
# THIS SOFTWARE IS PROVIDED BY THE AUTHOR AND CONTRIBUTORS ``AS IS'' AND
# ANY EXPRESS OR IMPLIED WARRANTIES, INCLUDING, BUT NOT LIMITED TO, THE
# IMPLIED WARRANTIES OF MERCHANTABILITY AND FITNESS FOR A PARTICULAR PURPOSE
# ARE DISCLAIMED.  IN NO EVENT SHALL THE AUTHOR OR CONTRIBUTORS BE LIABLE
# FOR ANY DIRECT, INDIRECT, INCIDENTAL, SPECIAL, EXEMPLARY, OR CONSEQUENTIAL
# DAMAGES (INCLUDING, BUT NOT LIMITED TO, PROCUREMENT OF SUBSTITUTE GOODS
# OR SERVICES; LOSS OF USE, DATA, OR PROFITS; OR BUSINESS INTERRUPTION)
# HOWEVER CAUSED AND ON ANY THEORY OF LIABILITY, WHETHER IN CONTRACT, STRICT
# LIABILITY, OR TORT (INCLUDING NEGLIGENCE OR OTHERWISE) ARISING IN ANY WAY
# OUT OF THE USE OF THIS SOFTWARE, EVEN IF ADVISED OF THE POSSIBILITY OF
# SUCH DAMAGE.
#
#
import re
import socket
import struct

from flup.client.fcgi_app import FCGIApp as FCGIApp_orig
from flup.client.fcgi_app import (
    Record, FCGI_BEGIN_REQUEST, FCGI_BeginRequestBody, FCGI_BeginRequestBody_LEN,
    FCGI_RESPONDER, FCGI_STDIN, FCGI_STDOUT, FCGI_STDERR, FCGI_END_REQUEST,
    FCGI_EndRequestBody, FCGI_EndRequestBody_LEN, FCGI_REQUEST_COMPLETE,
    FCGI_CANT_MPX_CONN, FCGI_OVERLOADED, FCGI_UNKNOWN_ROLE
)

from opcache_exporter.common.errors import ExporterConnectionError


__author__ = "OPcache Exporter Authors"
__copyright__ = "Copyright (C) OPcache Exporter Authors. All rights reserved."
__license__ = ""


PROTOCOL_STATUSES = {
    FCGI_CANT_MPX_CONN: 'cannot multiplex connection',
    FCGI_OVERLOADED: 'overloaded',
    FCGI_UNKNOWN_ROLE: 'unknown role',
}

HEADER_RE = re.compile(r'^[A-Za-z0-9-]+:')


class FCGIApp(FCGIApp_orig):
    """
    flup's FCGIApp cut down to a one shot FastCGI client.  Every call runs a
    single RESPONDER request on a new connection and returns what the script
    printed instead of serving it as a WSGI app.
    """

    _environPrefixes = [
        'SERVER_', 'HTTP_', 'REQUEST_', 'REMOTE_', 'PATH_', 'CONTENT_',
        'DOCUMENT_', 'SCRIPT_'
    ]

    def __init__(self, connect=None, host=None, port=None, timeout=None, filterEnviron=True):
        """
        :param connect: str Unix socket path or (host, port) tuple
        :param host: str TCP host, takes precedence over connect
        :param port: int TCP port, required with host
        :param timeout: float socket timeout in seconds, None blocks forever
        :param filterEnviron: bool pass only CGI variables from environ
        """
        if host is not None:
            assert port is not None
            connect = (host, port)

        self._connect = connect
        self._timeout = timeout
        self._filterEnviron = filterEnviron

    def __call__(self, environ):
        """
        Runs the request

        :param environ: dict of CGI variables, str to str
        :return: tuple (str status, list of (header, value), bytes body, bytes stderr)
        """
        sock = self._getConnection()
        try:
            # only one request goes through this connection
            requestId = 1

            rec = Record(FCGI_BEGIN_REQUEST, requestId)
            rec.contentData = struct.pack(FCGI_BeginRequestBody, FCGI_RESPONDER, 0)
            rec.contentLength = FCGI_BeginRequestBody_LEN
            rec.write(sock)

            if self._filterEnviron:
                params = self._defaultFilterEnviron(environ)
            else:
                params = self._lightFilterEnviron(environ)
            self._fcgiParams(sock, requestId, params)
            self._fcgiParams(sock, requestId, {})

            # empty FCGI_STDIN stream, there is no request body
            Record(FCGI_STDIN, requestId).write(sock)

            try:
                out, err = self._readResponse(sock, requestId)
            except EOFError:
                # flup reports short reads and socket timeouts alike
                raise ExporterConnectionError(
                    message='connection closed or timed out in the middle of a record',
                    payload={'address': self._connect}
                )
        finally:
            sock.close()

        status, headers, body = self._parseOutput(out)
        return status, headers, body, err

    @staticmethod
    def _readResponse(sock, requestId):
        """
        Collects FCGI_STDOUT and FCGI_STDERR until FCGI_END_REQUEST
        """
        out = []
        err = []

        while True:
            inrec = Record()
            inrec.read(sock)

            if inrec.requestId != requestId:
                continue

            if inrec.type == FCGI_STDOUT:
                out.append(inrec.contentData)
            elif inrec.type == FCGI_STDERR:
                err.append(inrec.contentData)
            elif inrec.type == FCGI_END_REQUEST:
                if inrec.contentLength >= FCGI_EndRequestBody_LEN:
                    appStatus, protocolStatus = struct.unpack(
                        FCGI_EndRequestBody, inrec.contentData[:FCGI_EndRequestBody_LEN]
                    )
                    if protocolStatus != FCGI_REQUEST_COMPLETE:
                        raise ExporterConnectionError(
                            message='request rejected by FastCGI server: %s' %
                                    PROTOCOL_STATUSES.get(protocolStatus, protocolStatus),
                            payload={'app_status': appStatus, 'protocol_status': protocolStatus}
                        )
                break

        return b''.join(out), b''.join(err)

    @staticmethod
    def _parseOutput(output):
        """
        Splits CGI response headers from the body

        Output without a header block is returned as a body with 200 status.
        """
        status = '200 OK'
        headers = []

        ends = [
            (index, len(separator))
            for index, separator in ((output.find(s), s) for s in (b'\r\n\r\n', b'\n\n'))
            if index >= 0
        ]
        if not ends:
            return status, headers, output

        index, separator_length = min(ends)
        head, body = output[:index], output[index + separator_length:]

        for line in head.decode('latin-1').splitlines():
            if not HEADER_RE.match(line):
                # not a CGI header block at all
                return '200 OK', [], output

            header, value = line.split(':', 1)
            header = header.strip().lower()
            value = value.strip()

            if header == 'status':
                status = value
            else:
                headers.append((header, value))

        return status, headers, body

    def _getConnection(self):
        if self._connect is None:
            raise NotImplementedError(
                'Launching and managing FastCGI programs not yet implemented'
            )

        if isinstance(self._connect, str):
            sock = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
            sock.settimeout(self._timeout)
            try:
                sock.connect(self._connect)
            except OSError:
                sock.close()
                raise
            return sock

        return socket.create_connection(self._connect, timeout=self._timeout)
