#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# filename: captcha/result.py

from collections import namedtuple
from ..const import SKIPPED

Candidate = namedtuple("Candidate", ["text", "provider", "duration_ms"])


class ProviderResult(object):
    """
    Outcome of one provider call: either a non-empty ranked list of candidates
    or a failure. A call skipped after early consensus is a failure with
    `skipped` set.
    """

    __slots__ = ("provider", "candidates", "error", "duration_ms", "ranked", "skipped")

    def __init__(self, provider, candidates=None, error=None, duration_ms=0, ranked=False, skipped=False):
        self.provider = provider
        self.candidates = list(candidates or [])
        self.error = error
        self.duration_ms = int(duration_ms)
        self.ranked = bool(ranked)
        self.skipped = bool(skipped)

    @classmethod
    def success(cls, provider, candidates, duration_ms, ranked=False):
        return cls(provider, candidates=candidates, duration_ms=duration_ms, ranked=ranked)

    @classmethod
    def failure(cls, provider, error, duration_ms):
        return cls(provider, error=str(error), duration_ms=duration_ms)

    @classmethod
    def skip(cls, provider, duration_ms):
        return cls(provider, error=SKIPPED, duration_ms=duration_ms, skipped=True)

    @property
    def ok(self):
        return self.error is None and len(self.candidates) > 0

    @property
    def texts(self):
        return [c.text for c in self.candidates]

    @property
    def text(self):
        return self.candidates[0].text if self.candidates else None

    def to_dict(self):
        d = {"provider": self.provider}
        if self.ok:
            if self.ranked:
                d["candidates"] = self.texts
            else:
                d["text"] = self.text
        else:
            d["error"] = self.error
            if self.skipped:
                d["skipped"] = True
        d["duration_ms"] = self.duration_ms
        return d

    def __repr__(self):
        if self.ok:
            return "ProviderResult(%s, %r, %dms)" % (self.provider, self.texts, self.duration_ms)
        return "ProviderResult(%s, error=%r, %dms)" % (self.provider, self.error, self.duration_ms)
