#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# filename: config.py

import os
import re
from configparser import RawConfigParser
from .environ import Environ
from .utils import Singleton
from .const import (
    DEFAULT_CONFIG_INI,
    DEFAULT_PROVIDERS,
    DEFAULT_APP_URL,
    DEFAULT_APP_TITLE,
    DEFAULT_TIMEOUT,
    DEFAULT_MAX_OUTPUT_TOKENS,
    DEFAULT_TOP_K,
    DEFAULT_CODE_LENGTH_MIN,
    DEFAULT_CODE_LENGTH_MAX,
)
from .exceptions import UserInputException

_reCommaSep = re.compile(r'\s*,\s*')

environ = Environ()


class BaseConfig(object):

    def __init__(self, config_file=None, required=True):
        if self.__class__ is __class__:
            raise NotImplementedError
        self._config = RawConfigParser()
        if config_file is None:
            return
        file = os.path.normpath(os.path.abspath(config_file))
        if not os.path.exists(file):
            if required:
                raise FileNotFoundError("Config file was not found: %s" % file)
            return
        self._config.read(file, encoding="utf-8-sig")

    def get(self, section, key):
        return self._config.get(section, key)

    def get_optional(self, section, key, default=None):
        if self._config.has_option(section, key):
            v = self._config.get(section, key)
            if v is not None and v.strip() != "":
                return v.strip()
        return default

    def get_optional_bool(self, section, key, default=False):
        if self.get_optional(section, key) is None:
            return default
        try:
            return self._config.getboolean(section, key)
        except ValueError:
            raise UserInputException("Invalid boolean for %s.%s" % (section, key))

    def get_optional_int(self, section, key, default, minimum=None):
        v = self.get_optional(section, key)
        if v is None:
            return default
        try:
            v = int(v)
        except ValueError:
            raise UserInputException("Invalid integer for %s.%s: %r" % (section, key, v))
        if minimum is not None:
            v = max(minimum, v)
        return v

    def get_optional_float(self, section, key, default, minimum=None):
        v = self.get_optional(section, key)
        if v is None:
            return default
        try:
            v = float(v)
        except ValueError:
            raise UserInputException("Invalid number for %s.%s: %r" % (section, key, v))
        if minimum is not None:
            v = max(minimum, v)
        return v

    def get_optional_list(self, section, key, default=None):
        v = self.get_optional(section, key)
        if v is None:
            return list(default) if default is not None else []
        return [s for s in _reCommaSep.split(v) if s]


class AutoCaptchaConfig(BaseConfig, metaclass=Singleton):

    def __init__(self):
        # The default config.ini is optional, an explicit path is not
        explicit = environ.config_ini
        super().__init__(explicit or DEFAULT_CONFIG_INI, required=bool(explicit))

    # [recognizer]

    @property
    def api_key(self):
        return self.get_optional("recognizer", "api_key") or os.getenv("OPENROUTER_API_KEY")

    @property
    def gemini_api_key(self):
        return (
            self.get_optional("recognizer", "gemini_api_key")
            or os.getenv("GEMINI_API_KEY")
            or os.getenv("GOOGLE_API_KEY")
        )

    @property
    def providers(self):
        return self.get_optional_list("recognizer", "providers", DEFAULT_PROVIDERS)

    @property
    def base_url(self):
        return self.get_optional("recognizer", "base_url")

    @property
    def gemini_base_url(self):
        return self.get_optional("recognizer", "gemini_base_url")

    @property
    def fast_mode(self):
        return self.get_optional_bool("recognizer", "fast_mode", False)

    @property
    def app_url(self):
        return self.get_optional("recognizer", "app_url", DEFAULT_APP_URL)

    @property
    def app_title(self):
        return self.get_optional("recognizer", "app_title", DEFAULT_APP_TITLE)

    @property
    def timeout(self):
        return self.get_optional_float("recognizer", "timeout", DEFAULT_TIMEOUT, minimum=0.1)

    @property
    def max_output_tokens(self):
        return self.get_optional_int("recognizer", "max_output_tokens", DEFAULT_MAX_OUTPUT_TOKENS, minimum=16)

    @property
    def top_k(self):
        return self.get_optional_int("recognizer", "top_k", DEFAULT_TOP_K, minimum=1)

    @property
    def code_length_min(self):
        return self.get_optional_int("recognizer", "code_length_min", DEFAULT_CODE_LENGTH_MIN, minimum=1)

    @property
    def code_length_max(self):
        return self.get_optional_int("recognizer", "code_length_max", DEFAULT_CODE_LENGTH_MAX, minimum=1)
