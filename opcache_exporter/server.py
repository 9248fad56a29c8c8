# -*- coding: utf-8 -*-
from gevent.pywsgi import WSGIServer
from prometheus_client import make_wsgi_app

from opcache_exporter.common.context import context
from opcache_exporter.common.util.net import listen_address


__author__ = "OPcache Exporter Authors"
__copyright__ = "Copyright (C) OPcache Exporter Authors. All rights reserved."
__license__ = ""


INDEX_PAGE = '\n'.join([
    '<html>',
    '  <head>',
    '    <title>OPcache Exporter</title>',
    '  </head>',
    '  <body>',
    '    <h1>OPcache Exporter</h1>',
    '    <p>',
    '      <a href="%s">Metrics</a>',
    '    </p>',
    '  </body>',
    '</html>',
])


def make_app(registry, telemetry_path='/metrics'):
    """
    WSGI app serving metrics on telemetry_path and an index page elsewhere

    :param registry: prometheus_client CollectorRegistry
    :param telemetry_path: str
    :return: WSGI callable
    """
    metrics_app = make_wsgi_app(registry)
    index = (INDEX_PAGE % telemetry_path).encode('utf-8')

    def app(environ, start_response):
        if environ.get('PATH_INFO', '/') == telemetry_path:
            return metrics_app(environ, start_response)

        start_response('200 OK', [
            ('Content-Type', 'text/html; charset=utf-8'),
            ('Content-Length', str(len(index))),
        ])
        return [index]

    return app


def serve(registry, address=':9101', telemetry_path='/metrics'):
    """
    Serves metrics until interrupted

    :param registry: prometheus_client CollectorRegistry
    :param address: str listen address
    :param telemetry_path: str
    """
    host, port = listen_address(address)
    server = WSGIServer((host, port), make_app(registry, telemetry_path), log=None)

    context.log.info('listening on %s:%s, metrics at %s' % (host or '*', port, telemetry_path))
    try:
        server.serve_forever()
    finally:
        server.stop()
