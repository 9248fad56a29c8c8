# -*- coding: utf-8 -*-


__author__ = "OPcache Exporter Authors"
__copyright__ = "Copyright (C) OPcache Exporter Authors. All rights reserved."
__license__ = ""


class Singleton(object):
    """
    WARN: If you choose to use implied references (re-init), this object can
          still be marked for cleanup by the GC.  You must keep the reference
          counter > 0 at all times or you may have an unexpected clean up cause
          unexpected behavior.
    """
    _instance = None

    def __new__(cls):
        if not cls._instance:
            cls._instance = super(Singleton, cls).__new__(cls)
        return cls._instance
