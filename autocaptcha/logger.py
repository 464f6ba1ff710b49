#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# filename: logger.py

import os
import sys
import logging

_ROOT = "autocaptcha"
_FORMAT = "[%(asctime)s] %(levelname)s, %(name)s: %(message)s"
_DATEFMT = "%H:%M:%S"


class BaseLogger(object):

    default_level = logging.DEBUG if os.getenv("AUTOCAPTCHA_DEBUG") else logging.INFO

    def __init__(self, name, level=None):
        if self.__class__ is __class__:
            raise NotImplementedError
        self._name = name
        self._logger = logging.getLogger("%s.%s" % (_ROOT, name))
        self._logger.setLevel(level or self.default_level)
        if not self._logger.handlers:
            self._logger.addHandler(self._get_handler())
        self._logger.propagate = False

    @property
    def name(self):
        return self._name

    @property
    def handlers(self):
        return self._logger.handlers

    def _get_handler(self):
        raise NotImplementedError

    def debug(self, msg, *args, **kwargs):
        return self._logger.debug(msg, *args, **kwargs)

    def info(self, msg, *args, **kwargs):
        return self._logger.info(msg, *args, **kwargs)

    def warning(self, msg, *args, **kwargs):
        return self._logger.warning(msg, *args, **kwargs)

    def error(self, msg, *args, **kwargs):
        return self._logger.error(msg, *args, **kwargs)

    def exception(self, msg, *args, **kwargs):
        kwargs.setdefault("exc_info", True)
        return self._logger.error(msg, *args, **kwargs)


class ConsoleLogger(BaseLogger):

    def _get_handler(self):
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(_FORMAT, _DATEFMT))
        return handler
