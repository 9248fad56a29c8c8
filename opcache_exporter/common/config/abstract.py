# -*- coding: utf-8 -*-
import configparser
import copy

from opcache_exporter.common.errors import ExporterConfigError

__author__ = "OPcache Exporter Authors"
__copyright__ = "Copyright (C) OPcache Exporter Authors. All rights reserved."
__license__ = ""


class AbstractConfig(object):
    """
    Sections and defaults are declared in the class level config dict.  An
    INI file and then command line changes are applied on top of a copy.

    The same file also carries logging.config sections, those are left to the
    logger and never end up here.
    """
    filename = None
    config = dict()

    def __init__(self, config_file=None):
        self.config = copy.deepcopy(self.config)
        if config_file:
            self.filename = config_file
        if self.filename:
            self.load()

    def load(self):
        """
        Reads the known sections of the config file into the config
        """
        parser = configparser.RawConfigParser()
        try:
            parser.read(self.filename)
        except configparser.Error as e:
            raise ExporterConfigError(
                message='failed to parse config file: %s' % e,
                payload={'filename': self.filename}
            )

        patch = {}
        for section in parser.sections():
            if section in self.config:
                patch[section] = dict(
                    (key, value.strip()) for key, value in parser.items(section)
                )

        self.apply(patch)

    def get(self, section, default=None):
        if default is None:
            default = {}
        return self.config.get(section, default)

    def __getitem__(self, item):
        return self.config[item]

    def apply(self, patch, current=None):
        """
        Recursively applies changes to config

        :param patch: dict of sections or values
        :param current: subtree being patched, the whole config if None
        :return: int amount of values changed
        """
        if current is None:
            current = self.config

        changes = 0
        for key, value in patch.items():
            if isinstance(value, dict) and isinstance(current.get(key), dict):
                changes += self.apply(value, current[key])
            elif current.get(key) != value or key not in current:
                current[key] = value
                changes += 1

        return changes
