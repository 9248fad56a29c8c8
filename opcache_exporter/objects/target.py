# -*- coding: utf-8 -*-
from collections import namedtuple
from urllib.parse import urlsplit

from opcache_exporter.common.errors import ExporterConfigError


__author__ = "OPcache Exporter Authors"
__copyright__ = "Copyright (C) OPcache Exporter Authors. All rights reserved."
__license__ = ""


URI_SEPARATOR = ';'

SCHEMES = ('tcp', 'unix')


class Target(namedtuple('Target', ['uri', 'normalized_uri', 'scheme', 'address', 'script_path'])):
    """
    One monitored OPcache instance.

    uri is the connection string exactly as configured and is what metrics get
    labelled with.  address is what the transport dials: a (host, port) tuple
    for tcp or a socket path for unix.
    """
    __slots__ = ()

    def __str__(self):
        return self.uri


def normalize_uri(uri):
    """
    Bare "host:port" is an old style tcp address
    """
    if '://' not in uri:
        return 'tcp://' + uri
    return uri


def parse_target(uri, script_path):
    """
    Parses a connection URI into a Target

    :param uri: str tcp://host:port, unix:///path/to/socket or host:port
    :param script_path: str path of the status script on the PHP side
    :return: Target
    """
    normalized_uri = normalize_uri(uri)
    parsed = urlsplit(normalized_uri)
    scheme = parsed.scheme.lower()

    if scheme not in SCHEMES:
        raise ExporterConfigError(
            message='unsupported scheme "%s", expected one of %s' % (parsed.scheme, ', '.join(SCHEMES)),
            payload={'uri': uri}
        )

    if scheme == 'unix':
        # unix:///path gives an empty netloc, unix://relative/path does not
        path = parsed.netloc + parsed.path
        if not path:
            raise ExporterConfigError(message='missing socket path', payload={'uri': uri})
        address = path
    else:
        try:
            port = parsed.port
        except ValueError:
            raise ExporterConfigError(message='invalid port', payload={'uri': uri})

        if not parsed.hostname:
            raise ExporterConfigError(message='missing host', payload={'uri': uri})
        if port is None:
            raise ExporterConfigError(message='missing port', payload={'uri': uri})
        address = (parsed.hostname, port)

    return Target(
        uri=uri,
        normalized_uri=normalized_uri,
        scheme=scheme,
        address=address,
        script_path=script_path
    )


def parse_targets(value, script_path):
    """
    Parses a list of connection URIs separated by semicolon

    :param value: str one or several URIs
    :param script_path: str path of the status script on the PHP side
    :return: list of Target
    """
    targets = []
    seen = set()
    for uri in (value or '').split(URI_SEPARATOR):
        uri = uri.strip()
        if not uri:
            continue

        # the uri is the only label, a repeated one would expose every series twice
        if uri in seen:
            raise ExporterConfigError(message='duplicate FastCGI URI', payload={'uri': uri})
        seen.add(uri)

        targets.append(parse_target(uri, script_path))

    if not targets:
        raise ExporterConfigError(message='no FastCGI URI configured', payload={'value': value})

    return targets
