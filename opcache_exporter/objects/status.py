# -*- coding: utf-8 -*-
"""
In memory representation of opcache_get_status() output.

Every section is an immutable namedtuple whose fields default to zero, so the
no-argument form of StatusSnapshot is the all-zero snapshot.  Decoding ignores
unknown keys and treats missing or null keys as zero.
"""
from collections import OrderedDict, namedtuple


__author__ = "OPcache Exporter Authors"
__copyright__ = "Copyright (C) OPcache Exporter Authors. All rights reserved."
__license__ = ""


def section(typename, fields):
    """
    Builds a namedtuple class with per field types and zero defaults

    :param typename: str class name
    :param fields: tuple of (name, type) pairs, type is bool, int, float or
                   another section class
    :return: class
    """
    cls = namedtuple(typename, [name for name, _ in fields])
    cls.__new__.__defaults__ = tuple(kind() for _, kind in fields)
    cls.field_types = OrderedDict(fields)
    return cls


MemoryUsage = section('MemoryUsage', (
    ('used_memory', int),
    ('free_memory', int),
    ('wasted_memory', int),
    ('current_wasted_percentage', float),
))

InternedStringsUsage = section('InternedStringsUsage', (
    ('buffer_size', int),
    ('used_memory', int),
    ('free_memory', int),
    ('number_of_strings', int),
))

OpcacheStatistics = section('OpcacheStatistics', (
    ('num_cached_scripts', int),
    ('num_cached_keys', int),
    ('max_cached_keys', int),
    ('hits', int),
    ('start_time', int),
    ('last_restart_time', int),
    ('oom_restarts', int),
    ('hash_restarts', int),
    ('manual_restarts', int),
    ('misses', int),
    ('blacklist_misses', int),
    ('blacklist_miss_ratio', float),
    ('opcache_hit_rate', float),
))

StatusSnapshot = section('StatusSnapshot', (
    ('opcache_enabled', bool),
    ('cache_full', bool),
    ('restart_pending', bool),
    ('restart_in_progress', bool),
    ('memory_usage', MemoryUsage),
    ('interned_strings_usage', InternedStringsUsage),
    ('opcache_statistics', OpcacheStatistics),
))


def _coerce(kind, value, path):
    if hasattr(kind, 'field_types'):
        return decode(kind, value, path)

    # bool is an int subclass, keep flags and numbers apart
    if kind is bool:
        if isinstance(value, bool):
            return value
    elif kind is int:
        if isinstance(value, int) and not isinstance(value, bool):
            return value
        if isinstance(value, float) and value.is_integer():
            return int(value)
    elif kind is float:
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return float(value)

    raise ValueError('%s: expected %s, got %r' % ('.'.join(path), kind.__name__, value))


def decode(cls, data, path=()):
    """
    Decodes a json-loaded dict into a section

    :param cls: section class (StatusSnapshot by default from the callers)
    :param data: dict
    :param path: tuple of keys leading to data, used in error messages
    :return: cls instance
    :raises ValueError: if data does not match the section shape
    """
    if data is None:
        return cls()

    if not isinstance(data, dict):
        raise ValueError(
            '%s: expected an object, got %r' % ('.'.join(path) or 'status', data)
        )

    values = {}
    for name, kind in cls.field_types.items():
        value = data.get(name)
        if value is not None:
            values[name] = _coerce(kind, value, path + (name,))

    return cls(**values)
