# -*- coding: utf-8 -*-
from setuptools import setup, find_packages

__author__ = "OPcache Exporter Authors"
__copyright__ = "Copyright (C) OPcache Exporter Authors. All rights reserved."
__license__ = ""


setup(
    name="opcache-exporter",
    version="0.1.0",
    description="Prometheus exporter for PHP OPcache status over FastCGI",
    keywords="opcache php fastcgi prometheus exporter",
    python_requires=">=3.8",
    packages=find_packages(
        exclude=[
            "*.test", "*.test.*", "test.*", "test",
        ]
    ),
    install_requires=[
        "gevent",
        "prometheus-client",
        "flup",
    ],
    extras_require={
        "test": [
            "pytest",
        ],
    },
    scripts=[
        'opcache-exporter.py'
    ],
    entry_points={},
    long_description='Prometheus exporter for PHP OPcache',
)
