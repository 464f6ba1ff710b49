#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# filename: environ.py

import os
from .utils import Singleton


class Environ(object, metaclass=Singleton):

    def __init__(self):
        # `-c` on the command line wins over the environment variable
        self._config_ini = None

    @property
    def config_ini(self):
        return self._config_ini or os.getenv("AUTOCAPTCHA_CONFIG_INI") or None

    @config_ini.setter
    def config_ini(self, value):
        self._config_ini = value
