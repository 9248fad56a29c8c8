#!/usr/bin/python3
# -*- coding: utf-8 -*-
import sys


__author__ = "OPcache Exporter Authors"
__copyright__ = "Copyright (C) OPcache Exporter Authors. All rights reserved."
__license__ = ""


# import gevent and make appropriate patches
from gevent import monkey
monkey.patch_all()

# run the main script
from opcache_exporter import main
sys.exit(main.run())
