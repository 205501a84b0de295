from __future__ import annotations

from unittest.mock import patch

import pytest
import requests

from product_imagegen.core.errors import ConfigurationError, ProviderError
from product_imagegen.image.fashn_client import FashnClient
from product_imagegen.image.huggingface_client import HuggingFaceClient
from product_imagegen.image.provider_config import ProviderSettings

POST = "product_imagegen.image.client.requests.post"


class TestHuggingFaceClient:
    def test_missing_key_fails_without_network_call(self, fashn_only_settings: ProviderSettings) -> None:
        client = HuggingFaceClient(fashn_only_settings)

        with patch(POST) as mock_post:
            with pytest.raises(ConfigurationError) as exc_info:
                client.invoke("red sneaker")

        mock_post.assert_not_called()
        assert exc_info.value.provider == "huggingface"
        assert "HUGGINGFACE_API_KEY" in exc_info.value.remediation

    def test_returns_image_bytes(self, settings: ProviderSettings, make_response) -> None:
        client = HuggingFaceClient(settings)
        response = make_response(200, b"\x89PNG-bytes", {"Content-Type": "image/png"})

        with patch(POST, return_value=response) as mock_post:
            data = client.invoke("red sneaker on white background")

        assert data == b"\x89PNG-bytes"
        args, kwargs = mock_post.call_args
        assert args[0].endswith(f"/models/{settings.huggingface_model}")
        assert kwargs["json"] == {"inputs": "red sneaker on white background"}
        assert kwargs["headers"]["Authorization"] == "Bearer hf-test-key"
        assert kwargs["timeout"] == settings.timeout_seconds

    def test_upstream_error_message_is_surfaced(self, settings: ProviderSettings, make_response) -> None:
        client = HuggingFaceClient(settings)
        response = make_response(503, json_body={"error": "Model is currently loading"})

        with patch(POST, return_value=response):
            with pytest.raises(ProviderError) as exc_info:
                client.invoke("prompt")

        assert not isinstance(exc_info.value, ConfigurationError)
        assert "503" in exc_info.value.message
        assert "Model is currently loading" in exc_info.value.message

    def test_timeout_becomes_provider_error(self, settings: ProviderSettings) -> None:
        client = HuggingFaceClient(settings)

        with patch(POST, side_effect=requests.exceptions.Timeout("slow")):
            with pytest.raises(ProviderError) as exc_info:
                client.invoke("prompt")

        assert "timed out" in exc_info.value.message

    def test_connection_error_becomes_provider_error(self, settings: ProviderSettings) -> None:
        client = HuggingFaceClient(settings)

        with patch(POST, side_effect=requests.exceptions.ConnectionError("refused")):
            with pytest.raises(ProviderError) as exc_info:
                client.invoke("prompt")

        assert "refused" in exc_info.value.message

    def test_json_body_on_success_is_malformed(self, settings: ProviderSettings, make_response) -> None:
        client = HuggingFaceClient(settings)
        response = make_response(200, json_body={"warning": "queued"})

        with patch(POST, return_value=response):
            with pytest.raises(ProviderError) as exc_info:
                client.invoke("prompt")

        assert "Expected image payload" in exc_info.value.message

    def test_empty_body_is_malformed(self, settings: ProviderSettings, make_response) -> None:
        client = HuggingFaceClient(settings)

        with patch(POST, return_value=make_response(200, b"", {"Content-Type": "image/png"})):
            with pytest.raises(ProviderError):
                client.invoke("prompt")


class TestFashnClient:
    def test_missing_key_fails_without_network_call(self, hf_only_settings: ProviderSettings) -> None:
        client = FashnClient(hf_only_settings)

        with patch(POST) as mock_post:
            with pytest.raises(ConfigurationError) as exc_info:
                client.invoke("prompt", "http://testserver/uploads/image-1-2.png")

        mock_post.assert_not_called()
        assert exc_info.value.provider == "fashn"
        assert "FASHN_API_KEY" in exc_info.value.remediation

    def test_reference_image_is_required(self, settings: ProviderSettings) -> None:
        with pytest.raises(ValueError):
            FashnClient(settings).invoke("prompt", "")

    def test_returns_descriptor_as_is(self, settings: ProviderSettings, make_response) -> None:
        client = FashnClient(settings)
        descriptor = {"id": "123a87r9-4129-4bb3-be18-9c9fb5bd7fc1-u1", "error": None}

        with patch(POST, return_value=make_response(200, json_body=descriptor)) as mock_post:
            result = client.invoke("model on a runway", "http://testserver/uploads/image-1-2.png")

        assert result == descriptor
        args, kwargs = mock_post.call_args
        assert args[0] == "https://api.fashn.ai/v1/run"
        assert kwargs["json"] == {
            "model_name": "product-to-model",
            "inputs": {
                "product_image": "http://testserver/uploads/image-1-2.png",
                "prompt": "model on a runway",
            },
        }
        assert kwargs["headers"]["Authorization"] == "Bearer fashn-test-key"

    def test_descriptor_error_becomes_provider_error(self, settings: ProviderSettings, make_response) -> None:
        client = FashnClient(settings)
        descriptor = {"id": None, "error": {"name": "ImageLoadError", "message": "Cannot load image"}}

        with patch(POST, return_value=make_response(200, json_body=descriptor)):
            with pytest.raises(ProviderError) as exc_info:
                client.invoke("prompt", "http://example.com/a.png")

        assert exc_info.value.message == "Cannot load image"

    def test_non_json_descriptor(self, settings: ProviderSettings, make_response) -> None:
        client = FashnClient(settings)

        with patch(POST, return_value=make_response(200, b"<html>oops</html>")):
            with pytest.raises(ProviderError) as exc_info:
                client.invoke("prompt", "http://example.com/a.png")

        assert "non-JSON" in exc_info.value.message

    def test_unauthorized(self, settings: ProviderSettings, make_response) -> None:
        client = FashnClient(settings)
        response = make_response(401, json_body={"error": "Unauthorized", "message": "Invalid API key"})

        with patch(POST, return_value=response):
            with pytest.raises(ProviderError) as exc_info:
                client.invoke("prompt", "http://example.com/a.png")

        assert "401" in exc_info.value.message
        assert "fashn-test-key" not in exc_info.value.message
