# -*- coding: utf-8 -*-
import os

from opcache_exporter import Singleton
from opcache_exporter.common.util import logger


__author__ = "OPcache Exporter Authors"
__copyright__ = "Copyright (C) OPcache Exporter Authors. All rights reserved."
__license__ = ""


class Context(Singleton):
    def __init__(self):
        self.pid = os.getpid()

        self.version_semver = (0, 1, 0)
        self.version = '.'.join(map(str, self.version_semver))
        self.app_name = 'opcache-exporter'
        self.app_config = None

        # usable before setup(), e.g. from tests
        self.default_log = logger.get('%s-default' % self.app_name)

    def setup(self, **kwargs):
        self._setup_app_config(**kwargs)
        self._setup_app_logs(**kwargs)

    def _setup_app_config(self, **kwargs):
        """
        Setup app config

        :param config_file: str config file, defaults are used if None
        :param config_changes: dict patch applied on top of the file (cli options)
        """
        from opcache_exporter.common.config.app import Config
        self.app_config = Config(kwargs.get('config_file'))
        self.app_config.apply(kwargs.get('config_changes') or {})

    def _setup_app_logs(self, **kwargs):
        """
        Setup app log

        :param log_file: str override the configured handlers with a log file
        :param log_level: str force log level (debug, info, warning, error)
        """
        log_file = kwargs.get('log_file')
        log_level = kwargs.get('log_level')

        logger.setup('%s-default' % self.app_name, self.app_config.filename)
        self.default_log = logger.get('%s-default' % self.app_name)

        if log_file:
            for handler in list(self.default_log.handlers):
                self.default_log.removeHandler(handler)
            self.default_log.addHandler(logger.get_debug_handler(log_file))

        if log_level:
            self.default_log.setLevel(logger.LEVELS[log_level])

    @property
    def log(self):
        return self.default_log


context = Context()
