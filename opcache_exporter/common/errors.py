# -*- coding: utf-8 -*-


__author__ = "OPcache Exporter Authors"
__copyright__ = "Copyright (C) OPcache Exporter Authors. All rights reserved."
__license__ = ""


def shorten(value, limit):
    """
    Renders a payload value for a log line: one line, at most limit chars

    :param value: any, bytes are shown with undecodable bytes escaped
    :param limit: int
    :return: str
    """
    if isinstance(value, bytes):
        value = value.decode('utf-8', 'backslashreplace')
    elif not isinstance(value, str):
        value = '%s' % (value,)

    if len(value) > limit:
        return '%r... (%d chars more)' % (value[:limit], len(value) - limit)
    return '%r' % value


class ExporterException(Exception):
    """
    Base error of the exporter.

    payload keeps what the FastCGI server sent back (body, stderr, status
    line) untouched.  Only the string form cuts it, since bodies of a broken
    PHP setup can be whole error pages.
    """
    description = 'Something really bad happened'
    payload_limit = 256

    def __init__(self, message=None, payload=None):
        Exception.__init__(self, message)
        self.message = message
        self.payload = payload or {}

    def __str__(self):
        message = self.message or self.description
        if not self.payload:
            return message

        details = ', '.join(
            '%s=%s' % (key, shorten(self.payload[key], self.payload_limit))
            for key in sorted(self.payload)
        )
        return '%s (%s)' % (message, details)


class ExporterConfigError(ExporterException):
    description = "Invalid exporter configuration"


class ExporterConnectionError(ExporterException):
    description = "Couldn't talk to the FastCGI server"


class ExporterDecodeError(ExporterException):
    description = "Couldn't decode OPcache status"
