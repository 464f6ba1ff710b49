#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# filename: recognizer.py

from .config import AutoCaptchaConfig
from .captcha.image import load_image
from .captcha.providers import create_provider
from .captcha.dispatch import EnsembleDispatcher
from .captcha.vote import vote
from .exceptions import ValidationError
from .logger import ConsoleLogger

cout = ConsoleLogger("recognizer")


class RecognitionResult(object):

    __slots__ = ("final_text", "details")

    def __init__(self, final_text, details):
        self.final_text = final_text
        self.details = list(details)

    @property
    def ok(self):
        return self.final_text is not None

    def to_dict(self):
        return {
            "final_text": self.final_text,
            "details": [r.to_dict() for r in self.details],
        }

    def __repr__(self):
        return "RecognitionResult(%r, %d providers)" % (self.final_text, len(self.details))


class EnsembleRecognizer(object):
    """
    Ask several hosted multimodal models to read a CAPTCHA and vote on the
    answer.

    Keyword arguments override the `[recognizer]` section of the config file;
    the provider list is fixed at construction and its order is the tie-break
    priority.
    """

    def __init__(self, api_key=None, providers=None, base_url=None, fast_mode=None,
                 app_url=None, app_title=None, gemini_api_key=None, gemini_base_url=None,
                 timeout=None, max_output_tokens=None, top_k=None,
                 code_length_min=None, code_length_max=None, config=None):
        cfg = config or AutoCaptchaConfig()

        def pick(value, fallback):
            return fallback if value is None else value

        specs = list(pick(providers, cfg.providers))
        if not specs:
            raise ValidationError(msg="No providers configured")

        fast_mode = pick(fast_mode, cfg.fast_mode)
        options = dict(
            api_key=pick(api_key, cfg.api_key),
            gemini_api_key=pick(gemini_api_key, cfg.gemini_api_key),
            base_url=pick(base_url, cfg.base_url),
            gemini_base_url=pick(gemini_base_url, cfg.gemini_base_url),
            app_url=pick(app_url, cfg.app_url),
            app_title=pick(app_title, cfg.app_title),
            timeout=pick(timeout, cfg.timeout),
            max_output_tokens=pick(max_output_tokens, cfg.max_output_tokens),
            top_k=pick(top_k, cfg.top_k),
            code_length_min=pick(code_length_min, cfg.code_length_min),
            code_length_max=pick(code_length_max, cfg.code_length_max),
        )
        self._adapters = tuple(create_provider(spec, **options) for spec in specs)
        self._dispatcher = EnsembleDispatcher(fast_mode=fast_mode)

    @property
    def providers(self):
        return [a.name for a in self._adapters]

    @property
    def fast_mode(self):
        return self._dispatcher.fast_mode

    def recognize(self, source):
        image = load_image(source)
        cout.debug("Recognizing %r with %s" % (image, ", ".join(self.providers)))

        outcome = self._dispatcher.dispatch(self._adapters, image)
        final_text = outcome.decision
        if final_text is None:
            final_text = vote(outcome.results)

        if final_text is None:
            cout.warning("No decision, every provider failed")
        else:
            cout.info("Decision: %s" % final_text)
        return RecognitionResult(final_text, outcome.results)
