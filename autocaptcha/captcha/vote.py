#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# filename: captcha/vote.py

import threading
from collections import OrderedDict

from ..const import CONSENSUS_THRESHOLD


def _tally(results):
    # insertion order of the OrderedDict is the discovery order
    counts = OrderedDict()
    for r in results:
        if r is None or not r.ok:
            continue
        for c in r.candidates:
            counts[c.text] = counts.get(c.text, 0) + 1
    return counts


def _break_tie(tied, results):
    tied = set(tied)
    for r in results:
        if r is None or not r.ok:
            continue
        for c in r.candidates:
            if c.text in tied:
                return c.text
    return None


def vote(results):
    """
    Pick one string from every candidate of every successful result.

    The most frequent string wins. A tie goes to the first tied string met
    when walking `results` in order (provider priority) and each provider's
    candidates in rank order. No candidates at all gives None.
    """
    counts = _tally(results)
    if not counts:
        return None
    top = max(counts.values())
    tied = [text for text, n in counts.items() if n == top]
    if len(tied) == 1:
        return tied[0]
    return _break_tie(tied, results) or tied[0]


class ConsensusTally(object):
    """
    Running vote for fast mode.

    Results are merged as they settle; the tally resolves at most once, when
    some string is backed by `threshold` distinct providers.
    """

    def __init__(self, size, threshold=CONSENSUS_THRESHOLD):
        self._lock = threading.Lock()
        self._threshold = max(1, int(threshold))
        self._slots = [None] * int(size)
        self._backers = OrderedDict()  # { text: set(provider index) }
        self._decision = None
        self._resolved = False

    @property
    def resolved(self):
        with self._lock:
            return self._resolved

    @property
    def decision(self):
        with self._lock:
            return self._decision

    def add(self, index, result):
        """
        Merge the settled result of the provider at `index`. Returns the
        decision if this call resolved the tally, otherwise None.
        """
        with self._lock:
            if self._resolved:
                return None
            self._slots[index] = result
            if not result.ok:
                return None

            reached = []
            for c in result.candidates:
                backers = self._backers.setdefault(c.text, set())
                backers.add(index)
                if len(backers) >= self._threshold:
                    reached.append(c.text)
            if not reached:
                return None

            if len(reached) == 1:
                winner = reached[0]
            else:
                # several strings crossed together: settle them like a normal vote
                winner = self._resolve_among(reached)
            self._decision = winner
            self._resolved = True
            return winner

    def _resolve_among(self, reached):
        top = max(len(self._backers[t]) for t in reached)
        tied = [t for t in reached if len(self._backers[t]) == top]
        if len(tied) == 1:
            return tied[0]
        settled = [r for r in self._slots if r is not None]
        return _break_tie(tied, settled) or tied[0]
