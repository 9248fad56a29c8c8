"""
Helpers for working with sockets.
"""
# -*- coding: utf-8 -*-
from opcache_exporter.common.errors import ExporterConfigError


__author__ = "OPcache Exporter Authors"
__copyright__ = "Copyright (C) OPcache Exporter Authors. All rights reserved."
__license__ = ""


def listen_address(address, port='9101'):
    """
    Helper function that splits a listen address and returns a host, port
    combination suitable for socket.bind().

    Accepts "host:port", ":port", "*:port", "[::1]:port", a bare port or a
    bare host.  An empty host or a wildcard means all interfaces.

    :param address: String listen address
    :param port: String Port number used when the address has none
    :return: Tuple (String host, Int port)
    """
    address = (address or '').strip()
    parts = address.rsplit(':', 1)

    # make sure we got all of the expected pieces
    if len(parts) < 2 or parts[0].endswith(':'):
        if parts[0].isdigit():
            parts.insert(0, '')
        else:
            parts = [address, port]

    host, port = parts
    host = host.strip('[]')

    # replace wildcard with empty host
    if host == '*':
        host = ''

    try:
        port = int(port)
    except ValueError:
        raise ExporterConfigError(
            message='invalid port in listen address',
            payload={'address': address}
        )

    if not 0 <= port <= 65535:
        raise ExporterConfigError(
            message='port out of range in listen address',
            payload={'address': address}
        )

    return host, port
