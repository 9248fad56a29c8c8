# -*- coding: utf-8 -*-
from collections import namedtuple

from prometheus_client.core import GaugeMetricFamily

from opcache_exporter.collectors.abstract import AbstractCollector
from opcache_exporter.objects.status import StatusSnapshot
from opcache_exporter.util.opcachestatus import OpcacheStatus


__author__ = "OPcache Exporter Authors"
__copyright__ = "Copyright (C) OPcache Exporter Authors. All rights reserved."
__license__ = ""


NAMESPACE = 'opcache'

URI_LABEL = 'fcgi_uri'

# metric name - help - path of the field in StatusSnapshot
METRICS = (
    ('enabled', 'Is OPcache enabled.', ('opcache_enabled',)),
    ('cache_full', 'Is OPcache full.', ('cache_full',)),
    ('restart_pending', 'Is restart pending.', ('restart_pending',)),
    ('restart_in_progress', 'Is restart in progress.', ('restart_in_progress',)),

    ('memory_usage_used_memory', 'OPcache used memory.',
     ('memory_usage', 'used_memory')),
    ('memory_usage_free_memory', 'OPcache free memory.',
     ('memory_usage', 'free_memory')),
    ('memory_usage_wasted_memory', 'OPcache wasted memory.',
     ('memory_usage', 'wasted_memory')),
    ('memory_usage_current_wasted_percentage', 'OPcache current wasted percentage.',
     ('memory_usage', 'current_wasted_percentage')),

    ('interned_strings_usage_buffer_size', 'OPcache interned string buffer size.',
     ('interned_strings_usage', 'buffer_size')),
    ('interned_strings_usage_used_memory', 'OPcache interned string used memory.',
     ('interned_strings_usage', 'used_memory')),
    ('interned_strings_usage_free_memory', 'OPcache interned string free memory.',
     ('interned_strings_usage', 'free_memory')),
    ('interned_strings_usage_number_of_strings', 'OPcache interned string number of strings.',
     ('interned_strings_usage', 'number_of_strings')),

    ('statistics_num_cached_scripts', 'OPcache statistics, number of cached scripts.',
     ('opcache_statistics', 'num_cached_scripts')),
    ('statistics_num_cached_keys', 'OPcache statistics, number of cached keys.',
     ('opcache_statistics', 'num_cached_keys')),
    ('statistics_max_cached_keys', 'OPcache statistics, max cached keys.',
     ('opcache_statistics', 'max_cached_keys')),
    ('statistics_hits', 'OPcache statistics, hits.',
     ('opcache_statistics', 'hits')),
    ('statistics_start_time', 'OPcache statistics, start time.',
     ('opcache_statistics', 'start_time')),
    ('statistics_last_restart_time', 'OPcache statistics, last restart time.',
     ('opcache_statistics', 'last_restart_time')),
    ('statistics_oom_restarts', 'OPcache statistics, oom restarts.',
     ('opcache_statistics', 'oom_restarts')),
    ('statistics_hash_restarts', 'OPcache statistics, hash restarts.',
     ('opcache_statistics', 'hash_restarts')),
    ('statistics_manual_restarts', 'OPcache statistics, manual restarts.',
     ('opcache_statistics', 'manual_restarts')),
    ('statistics_misses', 'OPcache statistics, misses.',
     ('opcache_statistics', 'misses')),
    ('statistics_blacklist_misses', 'OPcache statistics, blacklist misses.',
     ('opcache_statistics', 'blacklist_misses')),
    ('statistics_blacklist_miss_ratio', 'OPcache statistics, blacklist miss ratio.',
     ('opcache_statistics', 'blacklist_miss_ratio')),
    ('statistics_hit_rate', 'OPcache statistics, opcache hit rate.',
     ('opcache_statistics', 'opcache_hit_rate')),
)


MetricDescriptor = namedtuple('MetricDescriptor', ['name', 'documentation', 'labels', 'path'])


def metric_name(name):
    return '%s_%s' % (NAMESPACE, name)


def metric_value(snapshot, path):
    """
    Reads a field of the snapshot as a gauge value.  Flags become 1.0/0.0,
    counters and ratios are passed through as floats.
    """
    value = snapshot
    for key in path:
        value = getattr(value, key)
    return float(value)


class OpcacheMetricsCollector(AbstractCollector):
    """
    Metrics collector.  One per target.  Queries the status script and
    publishes every field of the snapshot as a gauge labelled with the target
    URI.
    """
    short_name = 'opcache_metrics'

    def __init__(self, target=None, status_client=None, timeout=None):
        """
        :param target: Target
        :param status_client: object with get_status() returning a
                              StatusSnapshot (OpcacheStatus by default)
        :param timeout: float seconds passed to the default OpcacheStatus
        """
        super(OpcacheMetricsCollector, self).__init__(target=target)

        self.status_client = status_client or OpcacheStatus(target, timeout=timeout)
        self.labels = {URI_LABEL: target.uri}
        self.descriptors = tuple(
            MetricDescriptor(metric_name(name), documentation, self.labels, path)
            for name, documentation, path in METRICS
        )

    def describe(self):
        return list(self.descriptors)

    def poll(self):
        return self.status_client.get_status()

    def empty(self):
        return StatusSnapshot()

    def publish(self, snapshot):
        label_names = list(self.labels)
        label_values = [self.labels[name] for name in label_names]

        metrics = []
        for descriptor in self.descriptors:
            gauge = GaugeMetricFamily(descriptor.name, descriptor.documentation, labels=label_names)
            gauge.add_metric(label_values, metric_value(snapshot, descriptor.path))
            metrics.append(gauge)
        return metrics
