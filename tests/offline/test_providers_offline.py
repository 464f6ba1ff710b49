#!/usr/bin/env python3
# -*- coding: utf-8 -*-

import base64
import threading
import unittest
from unittest import mock

import requests

from autocaptcha.captcha.image import ImageInput
from autocaptcha.captcha.providers import (
    GeminiProvider,
    OpenRouterProvider,
    build_prompt,
    create_provider,
    split_spec,
)
from autocaptcha.exceptions import ValidationError

_IMAGE = ImageInput(b"\x89PNG fake", "image/png")


class _Resp:
    def __init__(self, status_code, data, text=""):
        self.status_code = status_code
        self._data = data
        self.text = text
        self.headers = {}

    def json(self):
        if isinstance(self._data, Exception):
            raise self._data
        return self._data


def _chat(content):
    return {"choices": [{"message": {"content": content}}]}


def _gemini(text):
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


class _Recorder:
    def __init__(self, resp):
        self.resp = resp
        self.calls = []

    # stored on the class as a plain callable, so it is not bound to the session
    def __call__(self, url, **kwargs):
        self.calls.append((url, kwargs))
        if isinstance(self.resp, Exception):
            raise self.resp
        return self.resp


class OpenRouterProviderOfflineTest(unittest.TestCase):
    def _submit(self, resp, cancel_event=None, **kwargs):
        rec = _Recorder(resp)
        with mock.patch("requests.sessions.Session.post", new=rec):
            p = OpenRouterProvider("openai/gpt-4.1-mini", "sk-test", **kwargs)
            result = p.submit(_IMAGE, cancel_event)
        return result, rec

    def test_request_shape(self):
        result, rec = self._submit(
            _Resp(200, _chat('{"text": "ab12"}')),
            app_url="https://example.org", app_title="tester",
        )
        self.assertTrue(result.ok)
        url, kwargs = rec.calls[0]
        self.assertEqual(url, "https://openrouter.ai/api/v1/chat/completions")
        headers = kwargs["headers"]
        self.assertEqual(headers["Authorization"], "Bearer sk-test")
        self.assertEqual(headers["HTTP-Referer"], "https://example.org")
        self.assertEqual(headers["X-Title"], "tester")
        payload = kwargs["json"]
        self.assertEqual(payload["model"], "openai/gpt-4.1-mini")
        self.assertEqual(payload["response_format"], {"type": "json_object"})
        parts = payload["messages"][0]["content"]
        self.assertEqual(parts[0]["type"], "text")
        self.assertIn("CAPTCHA", parts[0]["text"])
        image_url = parts[1]["image_url"]["url"]
        self.assertTrue(image_url.startswith("data:image/png;base64,"))
        self.assertEqual(base64.b64decode(image_url.split(",", 1)[1]), _IMAGE.data)

    def test_base_url_override(self):
        _, rec = self._submit(_Resp(200, _chat('{"text": "AB12"}')), base_url="http://localhost:1234/v1/")
        self.assertEqual(rec.calls[0][0], "http://localhost:1234/v1/chat/completions")

    def test_single_guess(self):
        result, _ = self._submit(_Resp(200, _chat('Here you go: ```json\n{"text": "ab-12"}\n```')))
        self.assertTrue(result.ok)
        self.assertEqual(result.texts, ["AB12"])
        self.assertFalse(result.ranked)
        self.assertEqual(result.to_dict()["text"], "AB12")
        self.assertEqual(result.candidates[0].provider, "openai/gpt-4.1-mini")

    def test_ranked_guesses(self):
        result, _ = self._submit(_Resp(200, _chat('{"candidates": ["abcd", "abce", "ABCD", "abcf"]}')), top_k=3)
        self.assertTrue(result.ok)
        self.assertTrue(result.ranked)
        self.assertEqual(result.texts, ["ABCD", "ABCE", "ABCF"])
        self.assertEqual(result.to_dict()["candidates"], ["ABCD", "ABCE", "ABCF"])

    def test_content_parts_list(self):
        content = [{"type": "text", "text": '{"text": '}, {"type": "text", "text": '"XY99"}'}]
        result, _ = self._submit(_Resp(200, _chat(content)))
        self.assertEqual(result.texts, ["XY99"])

    def test_transport_failure(self):
        result, _ = self._submit(_Resp(429, {"error": {"message": "rate limited"}}))
        self.assertFalse(result.ok)
        self.assertFalse(result.skipped)
        self.assertIn("429", result.error)
        self.assertIn("rate limited", result.error)
        self.assertIn("error", result.to_dict())

    def test_transport_failure_without_json(self):
        result, _ = self._submit(_Resp(502, ValueError("no json"), text="Bad Gateway"))
        self.assertIn("502", result.error)
        self.assertIn("Bad Gateway", result.error)

    def test_connection_errors(self):
        result, _ = self._submit(requests.ConnectionError("boom"))
        self.assertEqual(result.error, "Unable to connect to the recognizer")
        result, _ = self._submit(requests.Timeout("slow"))
        self.assertEqual(result.error, "Recognizer connection time out")

    def test_parse_failures(self):
        for resp in (
            _Resp(200, ValueError("no json")),
            _Resp(200, {"choices": []}),
            _Resp(200, _chat("I cannot read this image.")),
            _Resp(200, _chat('{"answer": "ABCD"}')),
            _Resp(200, _chat('{"text": "???"}')),
        ):
            result, _ = self._submit(resp)
            self.assertFalse(result.ok, resp._data)
            self.assertTrue(result.error)
            self.assertGreaterEqual(result.duration_ms, 0)

    def test_malformed_structure_is_parse_failure(self):
        for data in (
            {"choices": ["oops"]},
            {"choices": {"0": {"message": {"content": "{}"}}}},
            {"choices": [{"message": "not a dict"}]},
            _chat([{"type": "text", "text": 42}]),
        ):
            result, _ = self._submit(_Resp(200, data))
            self.assertFalse(result.ok, data)
            self.assertFalse(result.skipped)
            self.assertEqual(result.error, "Unexpected response structure")

    def test_each_call_uses_its_own_session(self):
        sessions = []
        lock = threading.Lock()

        def _post(session, url, **kwargs):
            with lock:
                sessions.append(session)
            return _Resp(200, _chat('{"text": "AB12"}'))

        p = OpenRouterProvider("m", "sk-test")
        with mock.patch("requests.sessions.Session.post", new=_post):
            threads = [threading.Thread(target=p.submit, args=(_IMAGE,)) for _ in range(3)]
            for t in threads:
                t.start()
            for t in threads:
                t.join(5.0)
            p.submit(_IMAGE)
        self.assertEqual(len(sessions), 4)
        self.assertEqual(len(set(map(id, sessions))), 4)

    def test_cancelled_before_call(self):
        ev = threading.Event()
        ev.set()
        result, rec = self._submit(_Resp(200, _chat('{"text": "AB12"}')), cancel_event=ev)
        self.assertTrue(result.skipped)
        self.assertEqual(result.error, "skipped")
        self.assertEqual(rec.calls, [])

    def test_cancelled_during_call(self):
        ev = threading.Event()

        def _post(session, url, **kwargs):
            ev.set()
            return _Resp(200, _chat('{"text": "AB12"}'))

        with mock.patch("requests.sessions.Session.post", new=_post):
            result = OpenRouterProvider("m", "sk-test").submit(_IMAGE, ev)
        self.assertTrue(result.skipped)
        self.assertEqual(result.candidates, [])

    def test_missing_key(self):
        with self.assertRaises(ValidationError):
            OpenRouterProvider("openai/gpt-4.1-mini", None)
        with self.assertRaises(ValidationError):
            OpenRouterProvider("openai/gpt-4.1-mini", "")


class GeminiProviderOfflineTest(unittest.TestCase):
    def test_request_and_parse(self):
        rec = _Recorder(_Resp(200, _gemini('{"text": "hwtuv"}')))
        with mock.patch("requests.sessions.Session.post", new=rec):
            p = GeminiProvider("gemini-2.0-flash", "g-key")
            result = p.submit(_IMAGE)
        self.assertTrue(result.ok)
        self.assertEqual(result.provider, "gemini:gemini-2.0-flash")
        self.assertEqual(result.texts, ["HWTUV"])

        url, kwargs = rec.calls[0]
        self.assertEqual(
            url, "https://generativelanguage.googleapis.com/v1beta/models/gemini-2.0-flash:generateContent"
        )
        self.assertEqual(kwargs["headers"]["X-goog-api-key"], "g-key")
        payload = kwargs["json"]
        inline = payload["contents"][0]["parts"][1]["inline_data"]
        self.assertEqual(inline["mime_type"], "image/png")
        self.assertEqual(inline["data"], _IMAGE.b64)
        self.assertEqual(payload["generationConfig"]["responseMimeType"], "application/json")

    def test_no_candidates(self):
        with mock.patch("requests.sessions.Session.post", new=_Recorder(_Resp(200, {"candidates": []}))):
            result = GeminiProvider("gemini-2.0-flash", "g-key").submit(_IMAGE)
        self.assertFalse(result.ok)

    def test_malformed_structure_is_parse_failure(self):
        for data in (
            {"candidates": ["x"]},
            {"candidates": [{"content": {"parts": ["x"]}}]},
            {"candidates": [{"content": "text"}]},
            {"candidates": [{"content": {"parts": [{"text": 7}]}}]},
        ):
            with mock.patch("requests.sessions.Session.post", new=_Recorder(_Resp(200, data))):
                result = GeminiProvider("gemini-2.0-flash", "g-key").submit(_IMAGE)
            self.assertFalse(result.ok, data)
            self.assertEqual(result.error, "Unexpected response structure")


class ProviderFactoryOfflineTest(unittest.TestCase):
    def test_split_spec(self):
        self.assertEqual(split_spec("gemini:gemini-2.0-flash"), ("gemini", "gemini-2.0-flash"))
        self.assertEqual(split_spec("openrouter:openai/gpt-4o"), ("openrouter", "openai/gpt-4o"))
        self.assertEqual(split_spec("google/gemini-2.5-flash"), ("openrouter", "google/gemini-2.5-flash"))
        self.assertEqual(split_spec("qwen/qwen-vl:free"), ("openrouter", "qwen/qwen-vl:free"))
        with self.assertRaises(ValidationError):
            split_spec("  ")

    def test_create_provider(self):
        p = create_provider("google/gemini-2.5-flash", api_key="sk", gemini_api_key="g")
        self.assertIsInstance(p, OpenRouterProvider)
        g = create_provider("gemini:gemini-2.0-flash", api_key="sk", gemini_api_key="g")
        self.assertIsInstance(g, GeminiProvider)

    def test_gemini_falls_back_to_main_key(self):
        g = create_provider("gemini:gemini-2.0-flash", api_key="sk")
        self.assertIsInstance(g, GeminiProvider)
        with self.assertRaises(ValidationError):
            create_provider("gemini:gemini-2.0-flash")

    def test_prompt(self):
        single = build_prompt(1, 4, 6)
        self.assertIn("between 4 and 6", single)
        self.assertIn("'text'", single)
        ranked = build_prompt(3, 5, 5)
        self.assertIn("exactly 5", ranked)
        self.assertIn("'candidates'", ranked)
        self.assertIn("up to 3", ranked)


if __name__ == "__main__":
    unittest.main()
