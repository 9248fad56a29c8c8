# -*- coding: utf-8 -*-
from collections import OrderedDict

from gevent.pool import Pool
from prometheus_client import CollectorRegistry, Info
from prometheus_client.core import GaugeMetricFamily

from opcache_exporter.collectors.opcache import OpcacheMetricsCollector
from opcache_exporter.common.context import context


__author__ = "OPcache Exporter Authors"
__copyright__ = "Copyright (C) OPcache Exporter Authors. All rights reserved."
__license__ = ""


class ExporterRegistry(object):
    """
    Holds one collector per target and exposes them to prometheus_client as a
    single collector.

    Every target exposes the same metric names, which prometheus_client refuses
    to register twice, so samples of all targets are merged into one family per
    metric name here.  Targets are polled concurrently on a gevent pool.
    """

    def __init__(self, pool_size=None):
        """
        :param pool_size: int max targets polled at once, unlimited if None
        """
        self.collectors = []
        self.pool_size = pool_size

    def register(self, collector):
        self.collectors.append(collector)
        context.log.debug('registered %s for "%s"' % (collector.short_name, collector.target))

    def describe(self):
        families = OrderedDict()
        for collector in self.collectors:
            for descriptor in collector.describe():
                if descriptor.name not in families:
                    families[descriptor.name] = GaugeMetricFamily(
                        descriptor.name, descriptor.documentation, labels=list(descriptor.labels)
                    )
        return list(families.values())

    def collect(self):
        if not self.collectors:
            return []

        pool = Pool(self.pool_size)
        results = pool.map(lambda collector: collector.collect(), self.collectors)

        families = OrderedDict()
        for metrics in results:
            for metric in metrics:
                if metric.name not in families:
                    families[metric.name] = metric
                else:
                    families[metric.name].samples.extend(metric.samples)
        return list(families.values())


def build_registry(targets, timeout=None):
    """
    Creates collectors for targets and registers them in a new
    prometheus_client registry along with build info

    :param targets: list of Target
    :param timeout: float FastCGI round trip timeout in seconds
    :return: tuple (CollectorRegistry, ExporterRegistry)
    """
    exporter_registry = ExporterRegistry()
    for target in targets:
        exporter_registry.register(OpcacheMetricsCollector(target=target, timeout=timeout))

    registry = CollectorRegistry()
    registry.register(exporter_registry)

    build_info = Info(
        'opcache_exporter_build', 'OPcache exporter build information.', registry=registry
    )
    build_info.info({'version': context.version})

    return registry, exporter_registry
