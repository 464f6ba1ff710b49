#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# filename: main.py

import sys
from autocaptcha.cli import run

if __name__ == '__main__':
    sys.exit(run())
