#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# filename: captcha/dispatch.py

import time
import threading
from collections import namedtuple
from queue import Queue

from .result import ProviderResult
from .vote import ConsensusTally
from ..const import CONSENSUS_THRESHOLD
from ..logger import ConsoleLogger

cout = ConsoleLogger("dispatch")

DispatchOutcome = namedtuple("DispatchOutcome", ["results", "decision"])


class EnsembleDispatcher(object):
    """
    Fan one image out to every provider at once.

    Each provider runs in its own daemon thread and reports back over a queue,
    so only the dispatching thread ever touches the results and the tally.
    In fast mode the first string backed by `threshold` providers ends the
    round: the cancel event is set and every unsettled provider is recorded
    as skipped.
    """

    def __init__(self, fast_mode=False, threshold=CONSENSUS_THRESHOLD):
        self._fast_mode = bool(fast_mode)
        self._threshold = max(1, int(threshold))

    @property
    def fast_mode(self):
        return self._fast_mode

    def dispatch(self, adapters, image):
        adapters = list(adapters)
        n = len(adapters)
        if n == 0:
            return DispatchOutcome([], None)

        t0 = time.monotonic()
        cancel_event = threading.Event()
        done = Queue()

        threads = [
            threading.Thread(
                target=self._run,
                args=(i, adapter, image, cancel_event, done),
                name="Provider-%d" % i,
                daemon=True,
            )
            for i, adapter in enumerate(adapters)
        ]
        for t in threads:
            t.start()

        results = [None] * n
        tally = ConsensusTally(n, self._threshold) if self._fast_mode else None
        decision = None

        for _ in range(n):
            index, result = done.get()
            results[index] = result
            if not result.ok and not result.skipped:
                cout.warning("%s failed: %s (%dms)" % (result.provider, result.error, result.duration_ms))
            if tally is None:
                continue
            decision = tally.add(index, result)
            if decision is None:
                continue

            cancel_event.set()
            elapsed = int((time.monotonic() - t0) * 1000)
            skipped = []
            for j, r in enumerate(results):
                if r is None:
                    results[j] = ProviderResult.skip(adapters[j].name, elapsed)
                    skipped.append(adapters[j].name)
            cout.info("Consensus on %s after %dms" % (decision, elapsed))
            if skipped:
                cout.info("Skipped: %s" % ", ".join(skipped))
            break

        return DispatchOutcome(results, decision)

    @staticmethod
    def _run(index, adapter, image, cancel_event, done):
        t0 = time.monotonic()
        try:
            result = adapter.submit(image, cancel_event)
        except Exception as e:
            cout.exception("Unexpected error from %s" % adapter.name)
            result = ProviderResult.failure(adapter.name, e, int((time.monotonic() - t0) * 1000))
        done.put((index, result))
