# -*- coding: utf-8 -*-
import os
import tempfile

from opcache_exporter.common.context import context


__author__ = "OPcache Exporter Authors"
__copyright__ = "Copyright (C) OPcache Exporter Authors. All rights reserved."
__license__ = ""


STATUS_SCRIPT = '<?php\necho(json_encode(opcache_get_status(false)));\n'


def write_status_script(script_dir=None):
    """
    Writes the PHP script which echoes json-encoded OPcache status into a
    temporary file.  The file must be readable by the PHP runtime, which
    usually runs as another user, hence the permissive mode.

    :param script_dir: str directory for the file (system temp dir if empty)
    :return: str path of the created file
    """
    fd, path = tempfile.mkstemp(prefix='opcache.', suffix='.php', dir=script_dir or None)
    try:
        os.write(fd, STATUS_SCRIPT.encode('utf-8'))
    finally:
        os.close(fd)

    os.chmod(path, 0o777)
    context.log.debug('created status script "%s"' % path)
    return path


def remove_status_script(path):
    try:
        os.remove(path)
        context.log.debug('removed status script "%s"' % path)
    except OSError:
        context.log.error('failed to remove status script "%s"' % path)
        context.log.debug('additional info:', exc_info=True)
