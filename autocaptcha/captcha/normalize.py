#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# filename: captcha/normalize.py

import re

_reNonCode = re.compile(r'[^A-Z0-9]')


def normalize(text):
    """Uppercase `text` and drop everything outside A-Z and 0-9."""
    if not text:
        return ""
    return _reNonCode.sub("", str(text).upper())
