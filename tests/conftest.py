from __future__ import annotations

import json
from dataclasses import replace
from pathlib import Path
from typing import Any, Optional

import pytest
import requests

from product_imagegen.core.errors import ConfigurationError
from product_imagegen.core.generation_types import Provider
from product_imagegen.image.provider_config import ProviderSettings


def _make_response(
    status: int,
    content: bytes = b"",
    headers: Optional[dict[str, str]] = None,
    json_body: Any = None,
) -> requests.Response:
    response = requests.Response()
    response.status_code = status
    response.encoding = "utf-8"
    if json_body is not None:
        content = json.dumps(json_body).encode()
        response.headers["Content-Type"] = "application/json"
    response._content = content
    response.headers.update(headers or {})
    return response


@pytest.fixture
def make_response():
    return _make_response


@pytest.fixture
def settings(tmp_path: Path) -> ProviderSettings:
    return ProviderSettings(
        huggingface_api_key="hf-test-key",
        fashn_api_key="fashn-test-key",
        timeout_seconds=5.0,
        upload_dir=str(tmp_path / "uploads"),
        generated_dir=str(tmp_path / "generated"),
    )


@pytest.fixture
def hf_only_settings(settings: ProviderSettings) -> ProviderSettings:
    return replace(settings, fashn_api_key=None)


@pytest.fixture
def fashn_only_settings(settings: ProviderSettings) -> ProviderSettings:
    return replace(settings, huggingface_api_key=None)


@pytest.fixture
def unconfigured_settings(settings: ProviderSettings) -> ProviderSettings:
    return replace(settings, huggingface_api_key=None, fashn_api_key=None)


class FakeHuggingFace:
    provider = Provider.HUGGINGFACE

    def __init__(self, settings: ProviderSettings, data: bytes = b"\x89PNG-fake", error=None):
        self.settings = settings
        self.data = data
        self.error = error
        self.calls: list[str] = []

    def invoke(self, prompt: str) -> bytes:
        self.calls.append(prompt)
        if not self.settings.huggingface_api_key:
            raise ConfigurationError("huggingface", "HUGGINGFACE_API_KEY is not set", "set it")
        if self.error is not None:
            raise self.error
        return self.data


class FakeFashn:
    provider = Provider.FASHN

    def __init__(self, settings: ProviderSettings, descriptor=None, error=None):
        self.settings = settings
        self.descriptor = descriptor if descriptor is not None else {"id": "job-123", "error": None}
        self.error = error
        self.calls: list[tuple[str, str]] = []

    def invoke(self, prompt: str, reference_image_url: str) -> dict:
        self.calls.append((prompt, reference_image_url))
        if not self.settings.fashn_api_key:
            raise ConfigurationError("fashn", "FASHN_API_KEY is not set", "set it")
        if self.error is not None:
            raise self.error
        return self.descriptor


@pytest.fixture
def fake_clients():
    def build(settings: ProviderSettings, hf_error=None, fashn_error=None, descriptor=None):
        return {
            Provider.HUGGINGFACE: FakeHuggingFace(settings, error=hf_error),
            Provider.FASHN: FakeFashn(settings, descriptor=descriptor, error=fashn_error),
        }
    return build
