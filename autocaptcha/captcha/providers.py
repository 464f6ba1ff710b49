#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# filename: captcha/providers.py

import time

import requests

from .parser import parse_guesses, to_candidates, RankedGuesses
from .result import ProviderResult
from ..const import (
    OPENROUTER_BASE_URL,
    GEMINI_BASE_URL,
    DEFAULT_APP_URL,
    DEFAULT_APP_TITLE,
    DEFAULT_TIMEOUT,
    DEFAULT_MAX_OUTPUT_TOKENS,
    DEFAULT_TOP_K,
    DEFAULT_CODE_LENGTH_MIN,
    DEFAULT_CODE_LENGTH_MAX,
)
from ..exceptions import (
    AutoCaptchaException,
    CancelledSkip,
    OperationFailedError,
    OperationTimeoutError,
    ParseError,
    TransportError,
    ValidationError,
)


def build_prompt(top_k=DEFAULT_TOP_K, min_len=DEFAULT_CODE_LENGTH_MIN, max_len=DEFAULT_CODE_LENGTH_MAX):
    if min_len > max_len:
        min_len, max_len = max_len, min_len
    if min_len == max_len:
        len_rule = "exactly %d characters" % min_len
    else:
        len_rule = "between %d and %d characters" % (min_len, max_len)

    prompt = (
        "You are an OCR engine. Read the CAPTCHA text in the image.\n"
        "The answer uses only uppercase letters A-Z and digits 0-9, no spaces, "
        "and is %s long.\n"
        "Ignore decorative strokes, background noise and tiny glyphs; "
        "read the dominant large characters.\n" % len_rule
    )
    if top_k > 1:
        prompt += (
            "Return STRICT JSON with a single key 'candidates' holding up to %d "
            "distinct guesses, most likely first.\n" % top_k
        )
    else:
        prompt += "Return STRICT JSON with a single key 'text'.\n"
    prompt += "If uncertain, make your best guess."
    return prompt


class ProviderAdapter(object):
    """
    One inference backend. `submit` never raises for provider-level failures;
    they come back as a failed ProviderResult so sibling calls are unaffected.
    """

    kind = None
    default_base_url = None

    def __init__(self, model, api_key, base_url=None, timeout=DEFAULT_TIMEOUT,
                 max_output_tokens=DEFAULT_MAX_OUTPUT_TOKENS, top_k=DEFAULT_TOP_K,
                 code_length_min=DEFAULT_CODE_LENGTH_MIN, code_length_max=DEFAULT_CODE_LENGTH_MAX,
                 **kwargs):
        if not api_key:
            raise ValidationError(msg="API key not configured for provider %s" % model)
        self._model = model
        self._api_key = api_key
        self._base_url = (base_url or self.default_base_url).rstrip("/")
        self._timeout = timeout
        self._max_output_tokens = int(max_output_tokens)
        self._top_k = max(1, int(top_k))
        self._prompt = build_prompt(self._top_k, code_length_min, code_length_max)

    @property
    def name(self):
        return self._model

    def build_request(self, image):
        """Return (url, headers, payload) for one call."""
        raise NotImplementedError

    def extract_text(self, data):
        raise NotImplementedError

    def submit(self, image, cancel_event=None):
        t0 = time.monotonic()

        def elapsed():
            return int((time.monotonic() - t0) * 1000)

        try:
            parsed = self._call(image, cancel_event)
            candidates = to_candidates(parsed, self.name, elapsed())
            if not candidates:
                raise ParseError(msg="Empty result")
        except CancelledSkip:
            return ProviderResult.skip(self.name, elapsed())
        except AutoCaptchaException as e:
            return ProviderResult.failure(self.name, e, elapsed())
        return ProviderResult.success(
            self.name, candidates, elapsed(), ranked=isinstance(parsed, RankedGuesses),
        )

    def _call(self, image, cancel_event):
        if cancel_event is not None and cancel_event.is_set():
            raise CancelledSkip()

        url, headers, payload = self.build_request(image)
        # one session per call, never shared between worker threads
        try:
            with requests.Session() as session:
                resp = session.post(url, headers=headers, json=payload, timeout=self._timeout)
        except requests.Timeout:
            raise OperationTimeoutError(msg="Recognizer connection time out")
        except requests.ConnectionError:
            raise OperationFailedError(msg="Unable to connect to the recognizer")
        except requests.RequestException as e:
            raise OperationFailedError(msg="Recognizer request failed: %s" % e)

        # the answer is irrelevant once the ensemble has decided
        if cancel_event is not None and cancel_event.is_set():
            raise CancelledSkip()

        try:
            data = resp.json()
        except ValueError:
            data = None

        if not 200 <= resp.status_code < 300:
            err = None
            if isinstance(data, dict):
                err = data.get("error")
                if isinstance(err, dict):
                    err = err.get("message")
            raise TransportError(
                msg="API Error: %s - %s" % (resp.status_code, err or getattr(resp, "text", "")),
                status_code=resp.status_code,
            )
        if not isinstance(data, dict):
            raise ParseError(msg="Invalid JSON response")

        try:
            text = self.extract_text(data)
        except (AttributeError, KeyError, TypeError, IndexError):
            raise ParseError(msg="Unexpected response structure")
        return parse_guesses(text)


_REGISTRY = {}


def register_provider(cls):
    kind = getattr(cls, "kind", None)
    if not kind:
        raise ValueError("Provider must define a non-empty 'kind'")
    _REGISTRY[kind] = cls
    return cls


def split_spec(spec):
    """
    `gemini:gemini-2.0-flash` -> ("gemini", "gemini-2.0-flash"),
    `openai/gpt-4.1-mini` -> ("openrouter", "openai/gpt-4.1-mini").
    """
    spec = (spec or "").strip()
    if not spec:
        raise ValidationError(msg="Empty provider spec")
    kind, sep, model = spec.partition(":")
    if sep and kind.lower() in _REGISTRY and model.strip():
        return kind.lower(), model.strip()
    return OpenRouterProvider.kind, spec


def get_provider_class(kind):
    cls = _REGISTRY.get((kind or "").lower())
    if cls is None:
        raise ValidationError(msg="Unknown provider kind: %s" % kind)
    return cls


@register_provider
class OpenRouterProvider(ProviderAdapter):
    """OpenAI-compatible chat completions endpoint, OpenRouter by default."""

    kind = "openrouter"
    default_base_url = OPENROUTER_BASE_URL

    def __init__(self, model, api_key, app_url=DEFAULT_APP_URL, app_title=DEFAULT_APP_TITLE, **kwargs):
        super().__init__(model, api_key, **kwargs)
        self._app_url = app_url
        self._app_title = app_title

    def build_request(self, image):
        url = self._base_url + "/chat/completions"
        headers = {
            "Authorization": "Bearer " + self._api_key,
            "Content-Type": "application/json",
        }
        if self._app_url:
            headers["HTTP-Referer"] = self._app_url
        if self._app_title:
            headers["X-Title"] = self._app_title
        payload = {
            "model": self._model,
            "messages": [
                {
                    "role": "user",
                    "content": [
                        {"type": "text", "text": self._prompt},
                        {"type": "image_url", "image_url": {"url": image.data_url}},
                    ],
                }
            ],
            "response_format": {"type": "json_object"},
            "temperature": 0,
            "max_tokens": self._max_output_tokens,
        }
        return url, headers, payload

    def extract_text(self, data):
        choices = data.get("choices") or []
        if not choices:
            raise ParseError(msg="Response has no choices")
        msg = (choices[0] or {}).get("message") or {}
        content = msg.get("content")
        if isinstance(content, str):
            return content.strip()
        if isinstance(content, list):
            texts = []
            for part in content:
                if not isinstance(part, dict):
                    continue
                t = part.get("text")
                if t:
                    texts.append(t)
            return "".join(texts).strip()
        raise ParseError(msg="Response has no message content")


@register_provider
class GeminiProvider(ProviderAdapter):
    """Google's native generateContent endpoint."""

    kind = "gemini"
    default_base_url = GEMINI_BASE_URL

    @property
    def name(self):
        return "%s:%s" % (self.kind, self._model)

    def build_request(self, image):
        url = "%s/models/%s:generateContent" % (self._base_url, self._model)
        headers = {
            "Content-Type": "application/json",
            "X-goog-api-key": self._api_key,
        }
        payload = {
            "contents": [
                {
                    "role": "user",
                    "parts": [
                        {"text": self._prompt},
                        {
                            "inline_data": {
                                "mime_type": image.media_type,
                                "data": image.b64,
                            }
                        },
                    ],
                }
            ],
            "generationConfig": {
                "temperature": 0,
                "maxOutputTokens": self._max_output_tokens,
                "responseMimeType": "application/json",
            },
        }
        return url, headers, payload

    def extract_text(self, data):
        # candidates[0].content.parts[*].text
        candidates = data.get("candidates") or []
        if not candidates:
            raise ParseError(msg="Response has no candidates")
        content = (candidates[0] or {}).get("content") or {}
        texts = []
        for p in content.get("parts") or []:
            t = (p or {}).get("text")
            if t:
                texts.append(t)
        if not texts:
            raise ParseError(msg="Response has no text parts")
        return "".join(texts).strip()


def create_provider(spec, api_key=None, gemini_api_key=None, base_url=None, gemini_base_url=None, **kwargs):
    kind, model = split_spec(spec)
    cls = get_provider_class(kind)
    if cls is GeminiProvider:
        return cls(model, gemini_api_key or api_key, base_url=gemini_base_url, **kwargs)
    return cls(model, api_key, base_url=base_url, **kwargs)
