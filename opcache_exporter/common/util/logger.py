# -*- coding: utf-8 -*-
import configparser
import logging
import logging.config


__author__ = "OPcache Exporter Authors"
__copyright__ = "Copyright (C) OPcache Exporter Authors. All rights reserved."
__license__ = ""

LOGGERS_CACHE = {}

LOG_FORMAT = '%(asctime)s [%(process)d] %(threadName)s %(levelname)s %(message)s'

LEVELS = {
    'debug': logging.DEBUG,
    'info': logging.INFO,
    'warning': logging.WARNING,
    'error': logging.ERROR,
}


def has_logging_sections(config_file):
    """
    Checks whether a config file carries fileConfig sections

    :param config_file: str config file name
    :return: bool
    """
    parser = configparser.RawConfigParser()
    parser.read(config_file)
    return all(parser.has_section(s) for s in ('loggers', 'handlers', 'formatters'))


def setup(log_name, config_file=None):
    """
    Configures logging either from the config file or with a single stream
    handler if the file has no logging sections

    :param log_name: str name of the default log
    :param config_file: str config file name
    """
    if config_file and has_logging_sections(config_file):
        logging.config.fileConfig(config_file, disable_existing_loggers=False)
        return

    log = get(log_name)
    if not log.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        log.addHandler(handler)
        log.setLevel(logging.INFO)


def get(log_name):
    """
    Creates logger object to specified log and caches it in LOGGERS_CACHE dict

    :param log_name: log name
    :return: logger object
    """
    if log_name not in LOGGERS_CACHE:
        logger = logging.getLogger(log_name)
        LOGGERS_CACHE[log_name] = logger
    return LOGGERS_CACHE[log_name]


def get_debug_handler(log_file):
    """
    returns a file handler for debug log file
    :param log_file: str log file
    :return: FileHandler obj
    """
    handler = logging.FileHandler(log_file, 'a')
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    return handler
