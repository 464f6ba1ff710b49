#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# filename: const.py

DEFAULT_CONFIG_INI = "config.ini"

OPENROUTER_BASE_URL = "https://openrouter.ai/api/v1"
GEMINI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"

DEFAULT_PROVIDERS = (
    "google/gemini-2.5-flash",
    "openai/gpt-4.1-mini",
    "qwen/qwen2.5-vl-72b-instruct",
)

DEFAULT_APP_URL = "https://github.com/autocaptcha/autocaptcha"
DEFAULT_APP_TITLE = "autocaptcha"

DEFAULT_TIMEOUT = 30.0
DEFAULT_MAX_OUTPUT_TOKENS = 256
DEFAULT_TOP_K = 1
DEFAULT_CODE_LENGTH_MIN = 4
DEFAULT_CODE_LENGTH_MAX = 6

CONSENSUS_THRESHOLD = 2

MEDIA_TYPE_JPEG = "image/jpeg"
MEDIA_TYPE_PNG = "image/png"

SKIPPED = "skipped"
