# -*- coding: utf-8 -*-
import threading
import time

from opcache_exporter.common.context import context
from opcache_exporter.common.errors import ExporterException


__author__ = "OPcache Exporter Authors"
__copyright__ = "Copyright (C) OPcache Exporter Authors. All rights reserved."
__license__ = ""


IDLE = 'idle'
POLLING = 'polling'
PUBLISHING = 'publishing'


class AbstractCollector(object):
    """
    Abstract pull collector bound to one target.

    collect() is called from scrape requests and may run concurrently.  The
    whole poll and publish sequence runs under one lock per collector, so two
    scrapes of the same target never interleave and never mix values of two
    polls.
    """
    short_name = None

    def __init__(self, target=None):
        self.target = target
        self.state = IDLE
        self._lock = threading.Lock()

    def describe(self):
        raise NotImplementedError

    def poll(self):
        raise NotImplementedError

    def publish(self, data):
        raise NotImplementedError

    def empty(self):
        """
        Data published when poll failed
        """
        raise NotImplementedError

    def collect(self):
        """
        Common collector cycle

        1. Poll the target
        2. Fall back to empty data if it failed
        3. Publish
        """
        with self._lock:
            start_time = time.time()
            try:
                self.state = POLLING
                try:
                    data = self.poll()
                except Exception as e:
                    self.handle_exception(e)
                    data = self.empty()

                self.state = PUBLISHING
                return self.publish(data)
            finally:
                self.state = IDLE
                context.log.debug(
                    '%s for "%s" collect in %.3f' % (
                        self.short_name, self.target, time.time() - start_time
                    )
                )

    def handle_exception(self, exception):
        if isinstance(exception, ExporterException):
            context.log.error('%s failed to collect from "%s": %s raised %s' % (
                self.short_name, self.target, exception.__class__.__name__, exception
            ))
        else:
            context.log.error('%s failed to collect from "%s": unexpected %s (%s)' % (
                self.short_name, self.target, exception.__class__.__name__, exception
            ))
        context.log.debug('additional info:', exc_info=True)
