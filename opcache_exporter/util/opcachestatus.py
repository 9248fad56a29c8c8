# -*- coding: utf-8 -*-
import json

import gevent

from opcache_exporter.common.context import context
from opcache_exporter.common.errors import (
    ExporterException, ExporterConnectionError, ExporterDecodeError
)
from opcache_exporter.objects import status
from opcache_exporter.util.fcgi import FCGIApp


__author__ = "OPcache Exporter Authors"
__copyright__ = "Copyright (C) OPcache Exporter Authors. All rights reserved."
__license__ = ""


class OpcacheStatus(object):
    """
    Query wrapper around FCGIApp.  Responsible for calling the status
    script on one target and decoding what it prints.
    """

    def __init__(self, target, timeout=None):
        """
        :param target: Target
        :param timeout: float seconds for the whole round trip, None to wait
                        forever
        """
        self.target = target
        self.timeout = timeout

        self.env = {}
        self._setup_env()

    def _setup_env(self):
        """
        Setup environment variables to pass though CGI
        """
        self.env = {
            'SCRIPT_FILENAME': self.target.script_path,
            'REQUEST_METHOD': 'GET',
            'CONTENT_LENGTH': '0',
        }

    def _connect(self):
        """
        FCGIApp doesn't open a socket until call, so there is nothing to
        handle here.
        """
        return FCGIApp(connect=self.target.address, timeout=self.timeout)

    def _request(self):
        fcgi = self._connect()
        try:
            with gevent.Timeout(self.timeout, ExporterConnectionError(message='timed out')):
                return fcgi(self.env)
        except ExporterException:
            raise
        except OSError as e:
            raise ExporterConnectionError(
                message='failed to communicate with "%s": %s' % (self.target.uri, e),
                payload={'address': self.target.address}
            )

    def get_status(self):
        """
        Runs the status script on the target and decodes its output.

        Example of the decoded part of the output::
            {
              "opcache_enabled": true,
              "cache_full": false,
              "restart_pending": false,
              "restart_in_progress": false,
              "memory_usage": {
                "used_memory": 9203872,
                "free_memory": 125013856,
                "wasted_memory": 0,
                "current_wasted_percentage": 0
              },
              "interned_strings_usage": {...},
              "opcache_statistics": {...}
            }

        :return: StatusSnapshot
        :raises ExporterConnectionError: target unreachable or broken transport
        :raises ExporterDecodeError: output is not the expected json
        """
        status_line, headers, body, err = self._request()

        if err:
            context.log.debug(
                'stderr from "%s": %s' % (self.target.uri, err.decode('utf-8', 'replace'))
            )

        try:
            return status.decode(status.StatusSnapshot, json.loads(body.decode('utf-8')))
        except ValueError as e:
            # UnicodeDecodeError and json.JSONDecodeError are ValueErrors as well
            raise ExporterDecodeError(
                message='failed to decode status from "%s": %s' % (self.target.uri, e),
                payload={
                    'body': body.decode('utf-8', 'backslashreplace'),
                    'status': status_line,
                    'stderr': err.decode('utf-8', 'backslashreplace'),
                }
            )
