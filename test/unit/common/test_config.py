# -*- coding: utf-8 -*-
import pytest

from opcache_exporter.common.config.app import Config
from opcache_exporter.common.errors import ExporterConfigError


__author__ = "OPcache Exporter Authors"
__copyright__ = "Copyright (C) OPcache Exporter Authors. All rights reserved."
__license__ = ""


class TestConfig(object):

    def test_defaults(self):
        config = Config()
        assert config['exporter']['listen_address'] == ':9101'
        assert config['exporter']['telemetry_path'] == '/metrics'
        assert config['opcache']['fcgi_uri'] == 'tcp://127.0.0.1:9000'
        assert config['opcache']['script_path'] == ''
        assert config.timeout is None

    def test_load_file(self, tmp_path):
        config_file = tmp_path / 'opcache-exporter.conf'
        config_file.write_text(
            '[exporter]\n'
            'listen_address = 127.0.0.1:9200\n'
            '[opcache]\n'
            'fcgi_uri = unix:///run/php/php-fpm.sock;tcp://10.0.0.2:9000\n'
            'timeout = 2.5\n'
        )
        config = Config(str(config_file))

        assert config['exporter']['listen_address'] == '127.0.0.1:9200'
        assert config['exporter']['telemetry_path'] == '/metrics'
        assert config['opcache']['fcgi_uri'] == 'unix:///run/php/php-fpm.sock;tcp://10.0.0.2:9000'
        assert config.timeout == 2.5

    def test_instances_do_not_share_state(self):
        first = Config()
        first.apply({'opcache': {'fcgi_uri': 'tcp://10.0.0.1:9000'}})
        assert Config()['opcache']['fcgi_uri'] == 'tcp://127.0.0.1:9000'

    def test_apply_counts_changes(self):
        config = Config()
        changes = config.apply({'exporter': {'listen_address': ':9101', 'telemetry_path': '/m'}})
        assert changes == 1
        assert config.get('missing') == {}

    @pytest.mark.parametrize('value, expected', [
        ('0', None),
        ('', None),
        (0.0, None),
        ('10', 10.0),
    ])
    def test_timeout(self, value, expected):
        config = Config()
        config.apply({'opcache': {'timeout': value}})
        assert config.timeout == expected

    @pytest.mark.parametrize('value', ['soon', '-1'])
    def test_invalid_timeout(self, value):
        config = Config()
        config.apply({'opcache': {'timeout': value}})
        with pytest.raises(ExporterConfigError):
            config.timeout

    def test_malformed_file(self, tmp_path):
        config_file = tmp_path / 'opcache-exporter.conf'
        config_file.write_text('listen_address = :9101\n')
        with pytest.raises(ExporterConfigError) as excinfo:
            Config(str(config_file))
        assert excinfo.value.payload == {'filename': str(config_file)}

    def test_logging_sections_ignored(self, tmp_path):
        config_file = tmp_path / 'opcache-exporter.conf'
        config_file.write_text(
            '[opcache]\n'
            'fcgi_uri = tcp://php:9000  \n'
            '[loggers]\n'
            'keys = root\n'
        )
        config = Config(str(config_file))

        assert config['opcache']['fcgi_uri'] == 'tcp://php:9000'
        assert config.get('loggers') == {}
