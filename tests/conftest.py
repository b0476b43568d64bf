"""Shared fixtures for the langbly-sync test suite."""

import copy
import json
import threading
from typing import List, Optional

import httpx
import pytest

from langbly_sync.client.service import Translation, TranslationClient
from langbly_sync.config import DEFAULT_CONFIG


class FakeClient:
    """Stands in for TranslationClient; prefixes every text with the target code."""

    def __init__(self, fail_on: Optional[str] = None, error: Optional[Exception] = None):
        self.calls: List[dict] = []
        self.fail_on = fail_on
        self.error = error
        self._lock = threading.Lock()

    def translate_batch(self, texts, target, source=None, fmt=None):
        with self._lock:
            self.calls.append({"texts": list(texts), "target": target, "source": source, "format": fmt})
        if self.fail_on == target:
            raise self.error
        return [Translation(f"[{target}] {text}", source or "en") for text in texts]

    def translate_one(self, text, target, source=None, fmt=None):
        return self.translate_batch([text], target, source=source, fmt=fmt)[0]


@pytest.fixture
def fake_client():
    return FakeClient()


@pytest.fixture
def app_config():
    config = copy.deepcopy(DEFAULT_CONFIG)
    config["langbly"]["api_key"] = "test-key"
    return config


@pytest.fixture
def sleeps():
    return []


@pytest.fixture
def make_client(sleeps):
    """Build a TranslationClient backed by a scripted MockTransport."""

    def _make(handler, **kwargs):
        kwargs.setdefault("max_retries", 2)
        return TranslationClient(
            api_key="test-key",
            api_url="https://api.example.test",
            transport=httpx.MockTransport(handler),
            sleep=sleeps.append,
            **kwargs,
        )

    return _make


def translations_response(texts, prefix="T:", detected=None):
    items = []
    for text in texts:
        item = {"translatedText": f"{prefix}{text}"}
        if detected:
            item["detectedSourceLanguage"] = detected
        items.append(item)
    return httpx.Response(200, json={"data": {"translations": items}})


def request_json(request: httpx.Request) -> dict:
    return json.loads(request.content.decode("utf-8"))
