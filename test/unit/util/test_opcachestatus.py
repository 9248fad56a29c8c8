# -*- coding: utf-8 -*-
import pytest

from opcache_exporter.common.errors import ExporterConnectionError, ExporterDecodeError
from opcache_exporter.objects.status import StatusSnapshot
from opcache_exporter.objects.target import parse_target
from opcache_exporter.util.opcachestatus import OpcacheStatus
from test.base import FakeFCGIServer, PHP_HEADERS, status_snapshot, unused_tcp_port


__author__ = "OPcache Exporter Authors"
__copyright__ = "Copyright (C) OPcache Exporter Authors. All rights reserved."
__license__ = ""


SCRIPT = '/tmp/opcache.12345.php'


class TestOpcacheStatus(object):

    def test_env(self):
        client = OpcacheStatus(parse_target('tcp://127.0.0.1:9000', SCRIPT))
        assert client.env['SCRIPT_FILENAME'] == SCRIPT
        assert 'QUERY_STRING' not in client.env

    def test_get_status_tcp(self):
        with FakeFCGIServer() as server:
            snapshot = OpcacheStatus(parse_target(server.uri, SCRIPT)).get_status()

        assert snapshot == status_snapshot()
        assert server.requests[0]['SCRIPT_FILENAME'] == SCRIPT

    def test_get_status_unix(self):
        with FakeFCGIServer(unix=True) as server:
            snapshot = OpcacheStatus(parse_target(server.uri, SCRIPT)).get_status()
        assert snapshot.opcache_enabled is True
        assert snapshot.opcache_statistics.hits == 900

    def test_bare_and_tcp_uri_dial_the_same(self):
        with FakeFCGIServer() as server:
            host, port = server.address
            bare = OpcacheStatus(parse_target('%s:%s' % (host, port), SCRIPT)).get_status()
            explicit = OpcacheStatus(parse_target('tcp://%s:%s' % (host, port), SCRIPT)).get_status()

        assert bare == explicit
        assert server.requests[0] == server.requests[1]

    def test_unreachable(self):
        target = parse_target('tcp://127.0.0.1:%s' % unused_tcp_port(), SCRIPT)
        with pytest.raises(ExporterConnectionError) as excinfo:
            OpcacheStatus(target).get_status()
        assert excinfo.value.payload == {'address': target.address}

    def test_timeout(self):
        with FakeFCGIServer(hang=True) as server:
            with pytest.raises(ExporterConnectionError):
                OpcacheStatus(parse_target(server.uri, SCRIPT), timeout=0.3).get_status()

    def test_broken_transport(self):
        with FakeFCGIServer(close_early=True) as server:
            with pytest.raises(ExporterConnectionError):
                OpcacheStatus(parse_target(server.uri, SCRIPT)).get_status()

    def test_not_json_keeps_body(self):
        stdout = b'Status: 404 Not Found\r\nContent-type: text/html\r\n\r\nFile not found.\n'
        with FakeFCGIServer(stdout=stdout, stderr=b'Primary script unknown') as server:
            with pytest.raises(ExporterDecodeError) as excinfo:
                OpcacheStatus(parse_target(server.uri, SCRIPT)).get_status()

        error = excinfo.value
        assert error.payload['body'] == 'File not found.\n'
        assert error.payload['status'] == '404 Not Found'
        assert error.payload['stderr'] == 'Primary script unknown'
        assert 'File not found.' in str(error)

    def test_php_warning_before_json_keeps_body(self):
        body = '<br />\n<b>Warning</b>: something<br />\n{"opcache_enabled":true}'
        with FakeFCGIServer(stdout=PHP_HEADERS + body.encode('utf-8')) as server:
            with pytest.raises(ExporterDecodeError) as excinfo:
                OpcacheStatus(parse_target(server.uri, SCRIPT)).get_status()
        assert excinfo.value.payload['body'] == body

    def test_undecodable_bytes_kept(self):
        stdout = PHP_HEADERS + b'\xff\xfePHP Warning'
        with FakeFCGIServer(stdout=stdout, stderr=b'bad \xc3') as server:
            with pytest.raises(ExporterDecodeError) as excinfo:
                OpcacheStatus(parse_target(server.uri, SCRIPT)).get_status()

        payload = excinfo.value.payload
        assert payload['body'] == '\\xff\\xfePHP Warning'
        assert payload['body'].encode('ascii').decode('unicode_escape').encode('latin-1') == \
            b'\xff\xfePHP Warning'
        assert payload['stderr'] == 'bad \\xc3'

    def test_opcache_disabled(self):
        # opcache_get_status() returns false when OPcache is off
        with FakeFCGIServer(stdout=PHP_HEADERS + b'false') as server:
            with pytest.raises(ExporterDecodeError) as excinfo:
                OpcacheStatus(parse_target(server.uri, SCRIPT)).get_status()
        assert excinfo.value.payload['body'] == 'false'

    def test_wrong_shape(self):
        with FakeFCGIServer(stdout=PHP_HEADERS + b'{"memory_usage":{"used_memory":"a lot"}}') as server:
            with pytest.raises(ExporterDecodeError):
                OpcacheStatus(parse_target(server.uri, SCRIPT)).get_status()

    def test_partial_document(self):
        with FakeFCGIServer(stdout=PHP_HEADERS + b'{"opcache_enabled":true}') as server:
            snapshot = OpcacheStatus(parse_target(server.uri, SCRIPT)).get_status()
        assert snapshot == StatusSnapshot(opcache_enabled=True)
