from __future__ import annotations

from pathlib import Path

from product_imagegen.core.generation_types import Provider
from product_imagegen.image.provider_config import (
    ALLOWED_IMAGE_TYPES,
    DEFAULT_HUGGINGFACE_MODEL,
    DEFAULT_TIMEOUT_SECONDS,
    MAX_UPLOAD_BYTES,
    ProviderSettings,
    load_key,
    setup_guidance,
)


class TestProviderSettings:
    def test_from_env_reads_credentials(self, tmp_path: Path) -> None:
        settings = ProviderSettings.from_env({
            "HUGGINGFACE_API_KEY": "hf_abc",
            "FASHN_API_KEY": "fa_xyz",
            "HUGGINGFACE_MODEL": "black-forest-labs/FLUX.1-schnell",
            "PROVIDER_TIMEOUT_SECONDS": "30",
            "UPLOAD_DIR": str(tmp_path / "up"),
            "GENERATED_DIR": str(tmp_path / "gen"),
        })

        assert settings.huggingface_api_key == "hf_abc"
        assert settings.fashn_api_key == "fa_xyz"
        assert settings.huggingface_model == "black-forest-labs/FLUX.1-schnell"
        assert settings.timeout_seconds == 30.0
        assert settings.upload_dir.endswith("up")
        assert settings.generated_dir.endswith("gen")
        assert settings.configured_providers() == {"huggingface": True, "fashn": True}

    def test_defaults_when_environment_is_empty(self) -> None:
        settings = ProviderSettings.from_env({})

        assert settings.huggingface_api_key is None
        assert settings.fashn_api_key is None
        assert settings.huggingface_model == DEFAULT_HUGGINGFACE_MODEL
        assert settings.timeout_seconds == DEFAULT_TIMEOUT_SECONDS
        assert settings.allowed_image_types == ALLOWED_IMAGE_TYPES
        assert settings.max_upload_bytes == MAX_UPLOAD_BYTES
        assert settings.configured_providers() == {"huggingface": False, "fashn": False}

    def test_whitespace_key_counts_as_missing(self) -> None:
        settings = ProviderSettings.from_env({"FASHN_API_KEY": "   "})
        assert not settings.is_configured(Provider.FASHN)

    def test_allowed_types_can_only_narrow(self) -> None:
        settings = ProviderSettings.from_env({"ALLOWED_IMAGE_TYPES": "png, .WEBP, bmp"})
        assert settings.allowed_image_types == ("png", "webp")

        unknown_only = ProviderSettings.from_env({"ALLOWED_IMAGE_TYPES": "bmp,tiff"})
        assert unknown_only.allowed_image_types == ALLOWED_IMAGE_TYPES


class TestLoadKey:
    def test_environment_wins_over_key_file(self, tmp_path: Path) -> None:
        key_file = tmp_path / "huggingface.key"
        key_file.write_text("from-file\n")

        assert load_key("HUGGINGFACE_API_KEY", str(key_file), {"HUGGINGFACE_API_KEY": "from-env"}) == "from-env"
        assert load_key("HUGGINGFACE_API_KEY", str(key_file), {}) == "from-file"

    def test_missing_key_file(self, tmp_path: Path) -> None:
        assert load_key("FASHN_API_KEY", str(tmp_path / "absent.key"), {}) is None
        assert load_key("FASHN_API_KEY", None, {}) is None


def test_setup_guidance_names_variable_and_signup() -> None:
    text = setup_guidance(Provider.FASHN)
    assert "FASHN_API_KEY" in text
    assert "fashn.ai" in text

    text = setup_guidance(Provider.HUGGINGFACE)
    assert "HUGGINGFACE_API_KEY" in text
    assert "huggingface.co" in text
