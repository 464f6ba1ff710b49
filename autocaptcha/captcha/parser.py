#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# filename: captcha/parser.py

"""
Recovery parser for the structured answers of multimodal models.

Models are asked for a bare JSON object but routinely wrap it in prose or in
markdown code fences. `extract_json_object` digs the object out, and
`parse_guesses` turns it into one of two shapes:

    {"text": "AB12"}                        -> SingleGuess("AB12")
    {"candidates": ["AB12", "A812", ...]}   -> RankedGuesses([...])
"""

import re
import json
from collections import namedtuple

from .normalize import normalize
from .result import Candidate
from ..exceptions import ParseError

SingleGuess = namedtuple("SingleGuess", ["text"])
RankedGuesses = namedtuple("RankedGuesses", ["texts"])

_TEXT_KEYS = ("text", "captcha", "code", "result")
_LIST_KEYS = ("candidates", "guesses")

_reFence = re.compile(r'```[A-Za-z0-9_-]*')


def _is_scalar(v):
    return isinstance(v, (str, int)) and not isinstance(v, bool)


def strip_fences(text):
    return _reFence.sub("", text or "").strip()


def extract_json_object(text):
    if text is None:
        raise ParseError(msg="Empty model response")
    body = strip_fences(text)
    if not body:
        raise ParseError(msg="Empty model response")

    start = body.find("{")
    end = body.rfind("}")
    if start != -1 and end > start:
        body = body[start:end + 1]

    try:
        return json.loads(body)
    except ValueError as e:
        raise ParseError(msg="Invalid JSON in model response: %s" % e)


def parse_guesses(text):
    obj = extract_json_object(text)
    if not isinstance(obj, dict):
        raise ParseError(msg="Model response is not a JSON object: %r" % (obj,))

    for k in _LIST_KEYS:
        v = obj.get(k)
        if isinstance(v, list):
            return RankedGuesses([str(s) for s in v if _is_scalar(s)])

    for k in _TEXT_KEYS:
        v = obj.get(k)
        if _is_scalar(v):
            return SingleGuess(str(v))

    raise ParseError(msg="Model response has no 'text' or 'candidates' field")


def to_candidates(parsed, provider, duration_ms):
    if isinstance(parsed, SingleGuess):
        raw = [parsed.text]
    else:
        raw = parsed.texts

    seen = set()
    candidates = []
    for s in raw:
        code = normalize(s)
        if not code or code in seen:
            continue
        seen.add(code)
        candidates.append(Candidate(code, provider, duration_ms))
    return candidates
