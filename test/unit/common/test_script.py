# -*- coding: utf-8 -*-
import os
import stat

from opcache_exporter.common.util import script


__author__ = "OPcache Exporter Authors"
__copyright__ = "Copyright (C) OPcache Exporter Authors. All rights reserved."
__license__ = ""


def test_write_and_remove(tmp_path):
    path = script.write_status_script(str(tmp_path))

    assert os.path.dirname(path) == str(tmp_path)
    assert os.path.basename(path).startswith('opcache.')
    assert path.endswith('.php')
    assert stat.S_IMODE(os.stat(path).st_mode) == 0o777

    with open(path) as f:
        assert f.read() == '<?php\necho(json_encode(opcache_get_status(false)));\n'

    script.remove_status_script(path)
    assert not os.path.exists(path)


def test_default_dir():
    path = script.write_status_script('')
    try:
        assert os.path.isfile(path)
    finally:
        script.remove_status_script(path)


def test_remove_missing_is_logged(tmp_path, caplog):
    script.remove_status_script(str(tmp_path / 'gone.php'))
    assert 'failed to remove status script' in caplog.text
