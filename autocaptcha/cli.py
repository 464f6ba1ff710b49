#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# filename: cli.py

import sys
import json
from optparse import OptionParser
from . import __version__, __date__


def create_default_parser():

    parser = OptionParser(
        usage='%prog [options] IMAGE [IMAGE ...]',
        description='Multi-model CAPTCHA recognizer v%s (%s)' % (__version__, __date__),
        version=__version__,
    )

    ## custom input files

    parser.add_option(
        '-c',
        '--config',
        dest='config_ini',
        metavar="FILE",
        help='custom config file encoded with utf8',
    )

    ## recognizer overrides

    parser.add_option(
        '-p',
        '--providers',
        dest='providers',
        metavar="LIST",
        help='comma-separated provider list, highest priority first',
    )

    parser.add_option(
        '-k',
        '--top-k',
        dest='top_k',
        type='int',
        metavar="N",
        help='ask each provider for up to N ranked guesses',
    )

    ## boolean (flag) options

    parser.add_option(
        '-f',
        '--fast',
        dest='fast_mode',
        action='store_true',
        default=None,
        help='stop as soon as two providers agree',
    )

    return parser


def setup_default_environ(options, args, environ):

    environ.config_ini = options.config_ini


def create_recognizer(options):
    from .recognizer import EnsembleRecognizer

    providers = None
    if options.providers:
        providers = [s.strip() for s in options.providers.split(",") if s.strip()]
    return EnsembleRecognizer(
        providers=providers,
        fast_mode=options.fast_mode,
        top_k=options.top_k,
    )


def run(argv=None):

    from .environ import Environ
    from .logger import ConsoleLogger
    from .exceptions import UserInputException

    environ = Environ()
    cout = ConsoleLogger("cli")

    parser = create_default_parser()
    options, args = parser.parse_args(argv)
    if not args:
        parser.error("no image given")

    # the config singleton must be created after the config path is known
    setup_default_environ(options, args, environ)

    try:
        recognizer = create_recognizer(options)
    except (UserInputException, FileNotFoundError) as e:
        cout.error(str(e))
        return 2

    failed = 0
    for path in args:
        try:
            result = recognizer.recognize(path)
        except UserInputException as e:
            cout.error("%s: %s" % (path, e))
            failed += 1
            continue
        if not result.ok:
            failed += 1
        d = result.to_dict()
        d["image"] = path
        print(json.dumps(d, ensure_ascii=False))
        sys.stdout.flush()

    return 1 if failed else 0
