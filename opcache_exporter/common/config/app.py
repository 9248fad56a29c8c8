# -*- coding: utf-8 -*-
from opcache_exporter.common.config.abstract import AbstractConfig
from opcache_exporter.common.errors import ExporterConfigError

__author__ = "OPcache Exporter Authors"
__copyright__ = "Copyright (C) OPcache Exporter Authors. All rights reserved."
__license__ = ""


class Config(AbstractConfig):
    config = dict(
        exporter=dict(
            listen_address=':9101',
            telemetry_path='/metrics',
        ),
        opcache=dict(
            fcgi_uri='tcp://127.0.0.1:9000',
            script_path='',
            script_dir='',
            timeout=0.0,
        ),
    )

    @property
    def timeout(self):
        """
        FastCGI round trip timeout in seconds, None if disabled
        """
        value = self.config['opcache'].get('timeout')
        if value in (None, ''):
            return None

        try:
            seconds = float(value)
        except (TypeError, ValueError):
            raise ExporterConfigError(
                message='timeout must be a number of seconds',
                payload={'timeout': value}
            )

        if seconds < 0:
            raise ExporterConfigError(
                message='timeout must not be negative',
                payload={'timeout': value}
            )

        return seconds or None
