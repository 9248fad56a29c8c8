# -*- coding: utf-8 -*-
import os

from optparse import OptionParser, Option

__author__ = "OPcache Exporter Authors"
__copyright__ = "Copyright (C) OPcache Exporter Authors. All rights reserved."
__license__ = ""


usage = "usage: %prog [start|configtest] [options]"

option_list = (
    Option(
        '--config',
        action='store',
        dest='config',
        type='string',
        help='path to the config file',
        default=None,
    ),
    Option(
        '--log',
        action='store',
        dest='log',
        type='string',
        help='path to the log file',
        default=None,
    ),
    Option(
        '--log.level',
        action='store',
        dest='log_level',
        type='choice',
        choices=['debug', 'info', 'warning', 'error'],
        help='only log messages with the given severity or above',
        default=None,
    ),
    Option(
        '--web.listen-address',
        action='store',
        dest='listen_address',
        type='string',
        help='address to listen on for web interface and telemetry (default :9101)',
        default=None,
    ),
    Option(
        '--web.telemetry-path',
        action='store',
        dest='telemetry_path',
        type='string',
        help='path under which to expose metrics (default /metrics)',
        default=None,
    ),
    Option(
        '--opcache.fcgi-uri',
        action='store',
        dest='fcgi_uri',
        type='string',
        help='connection string to FastCGI server(s), several URIs can be separated '
             'by semicolon (default tcp://127.0.0.1:9000)',
        default=None,
    ),
    Option(
        '--opcache.script-path',
        action='store',
        dest='script_path',
        type='string',
        help='path to PHP script which echoes json-encoded OPcache status',
        default=None,
    ),
    Option(
        '--opcache.script-dir',
        action='store',
        dest='script_dir',
        type='string',
        help='path to directory where temporary PHP file will be created',
        default=None,
    ),
    Option(
        '--opcache.timeout',
        action='store',
        dest='timeout',
        type='string',
        help='seconds to wait for a FastCGI server, 0 waits forever (default 0)',
        default=None,
    ),
)

parser = OptionParser(usage, option_list=option_list)


def config_changes(options):
    """
    Command line options that were given, shaped as a config patch
    """
    sections = {
        'exporter': ('listen_address', 'telemetry_path'),
        'opcache': ('fcgi_uri', 'script_path', 'script_dir', 'timeout'),
    }

    changes = {}
    for section, keys in sections.items():
        for key in keys:
            value = getattr(options, key)
            if value is not None:
                changes.setdefault(section, {})[key] = value
    return changes


def load_targets(script_path):
    from opcache_exporter.common.context import context
    from opcache_exporter.objects.target import parse_targets
    return parse_targets(context.app_config['opcache']['fcgi_uri'], script_path)


def configtest():
    """
    Checks the config and every target URI

    :return: int 0 if everything is ok, 1 if something is wrong
    """
    from opcache_exporter.common.context import context
    from opcache_exporter.common.errors import ExporterConfigError
    from opcache_exporter.common.util.net import listen_address

    try:
        listen_address(context.app_config['exporter']['listen_address'])
        timeout = context.app_config.timeout
        targets = load_targets(context.app_config['opcache']['script_path'] or '<generated>')
    except ExporterConfigError as e:
        print("\033[31mConfig is invalid: %s\033[0m" % e)
        return 1

    for target in targets:
        print("target %s -> %s %s" % (target.uri, target.scheme, target.address))
    print("timeout: %s" % ('%ss' % timeout if timeout else 'none'))
    print("\033[32mConfig is OK\033[0m")
    return 0


def start():
    """
    Creates the status script if needed, registers targets and serves metrics

    :return: int exit code
    """
    from opcache_exporter.common.context import context
    from opcache_exporter.common.errors import ExporterConfigError
    from opcache_exporter.common.util import script
    from opcache_exporter.registry import build_registry
    from opcache_exporter import server

    exporter_config = context.app_config['exporter']
    opcache_config = context.app_config['opcache']

    try:
        timeout = context.app_config.timeout
        # fail on bad URIs before leaving a temporary file behind
        load_targets(opcache_config['script_path'] or '')
    except ExporterConfigError as e:
        context.log.error('invalid config: %s' % e)
        return 1

    script_path = opcache_config['script_path']
    generated = not script_path
    if generated:
        try:
            script_path = script.write_status_script(opcache_config['script_dir'])
        except OSError as e:
            context.log.error('failed to create status script: %s' % e)
            return 1

    try:
        registry, _ = build_registry(load_targets(script_path), timeout=timeout)
        server.serve(
            registry,
            address=exporter_config['listen_address'],
            telemetry_path=exporter_config['telemetry_path']
        )
    except KeyboardInterrupt:
        context.log.info('interrupted, exiting')
    except (ExporterConfigError, OSError) as e:
        context.log.error('error starting HTTP server: %s' % e)
        context.log.debug('additional info:', exc_info=True)
        return 1
    finally:
        if generated:
            script.remove_status_script(script_path)

    return 0


def run(argv=None):
    """
    Exporter startup procedure
    Reads options, sets the context and runs the requested action

    :param argv: list of str arguments, sys.argv[1:] if None
    :return: int exit code
    """
    options, args = parser.parse_args(argv)

    action = args[0] if args else 'start'
    if action not in ('start', 'configtest'):
        print("Invalid action supplied\n")
        parser.print_help()
        return 1

    if options.config and not os.access(options.config, os.R_OK):
        print("\033[31mConfig file %s could not be found or opened.\033[0m" % options.config)
        return 1

    from opcache_exporter.common.context import context
    from opcache_exporter.common.errors import ExporterConfigError
    try:
        context.setup(
            config_file=options.config,
            config_changes=config_changes(options),
            log_file=options.log,
            log_level=options.log_level,
        )
    except ExporterConfigError as e:
        print("\033[31mConfig is invalid: %s\033[0m" % e)
        return 1

    if action == 'configtest':
        return configtest()

    context.log.info('starting opcache-exporter %s' % context.version)
    return start()
