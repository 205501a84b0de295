"""Provider/runtime configuration for the image-generation layer.

Architectural role:
    Centralizes provider endpoints, credential lookup, storage locations, and
    intake limits. `ProviderSettings.from_env()` is called once at startup and
    the resulting object is passed by reference into provider clients, the
    orchestrator, and the HTTP app.

Credential resolution:
    1. Environment variable (`HUGGINGFACE_API_KEY`, `FASHN_API_KEY`).
    2. Raw contents of the provider key file (`config/<provider>.key`).

Determinism:
    Deterministic for a fixed process environment and key files. Values are
    resolved when `from_env` runs, not at import time.

Failure behavior:
    Missing key material is represented as `None`; clients raise
    `ConfigurationError` when asked to run without it.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Mapping, Optional

from dotenv import load_dotenv

from product_imagegen.core.generation_types import Provider

load_dotenv()


# Provider endpoint and credential map.
PROVIDERS = {

    Provider.HUGGINGFACE: {
        "url": "https://router.huggingface.co/hf-inference/models/{model}",
        "key_env": "HUGGINGFACE_API_KEY",
        "key_file": "config/huggingface.key",
        "signup_url": "https://huggingface.co/settings/tokens",
    },

    Provider.FASHN: {
        "url": "https://api.fashn.ai/v1/run",
        "key_env": "FASHN_API_KEY",
        "key_file": "config/fashn.key",
        "signup_url": "https://app.fashn.ai/api",
    },

}

DEFAULT_HUGGINGFACE_MODEL = "stabilityai/stable-diffusion-xl-base-1.0"
FASHN_MODEL_NAME = "product-to-model"

# Substituted whenever a caller omits the prompt on the image route.
DEFAULT_PROMPT = (
    "Professional fashion photography of a model wearing the garment, "
    "full body shot, studio lighting, clean white background, high detail, "
    "e-commerce product photo"
)

ALLOWED_IMAGE_TYPES = ("jpeg", "jpg", "png", "gif", "webp")
MAX_UPLOAD_BYTES = 10 * 1024 * 1024
DEFAULT_TIMEOUT_SECONDS = 60.0

PROJECT_ROOT = os.path.dirname(
    os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
)


def load_key(env_name: str, key_file: Optional[str] = None, environ: Mapping[str, str] | None = None):
    """Load an API key from the environment or a key file.

    Args:
        env_name: Environment variable holding the key.
        key_file: Optional fallback file containing the raw key.
        environ: Environment mapping; defaults to `os.environ`.

    Returns:
        Key string or `None` when not available.

    Edge cases:
        - Whitespace-only values count as missing.
        - Missing key file returns `None`.
    """
    environ = os.environ if environ is None else environ
    env_value = (environ.get(env_name) or "").strip()
    if env_value:
        return env_value
    if not key_file or not os.path.exists(key_file):
        return None
    with open(key_file, "r") as f:
        return f.read().strip() or None


def setup_guidance(provider: Provider) -> str:
    """Operator-facing setup text for an unconfigured provider."""
    config = PROVIDERS[provider]
    return (
        f"{provider.label} is not configured. Create an API key at "
        f"{config['signup_url']} and add {config['key_env']}=your_key_here "
        "to the .env file, then restart the server."
    )


def _parse_allowed_types(raw: Optional[str]) -> tuple[str, ...]:
    if not raw:
        return ALLOWED_IMAGE_TYPES
    requested = {part.strip().lower().lstrip(".") for part in raw.split(",") if part.strip()}
    # Only a narrower subset of the built-in allow-list is accepted.
    narrowed = tuple(t for t in ALLOWED_IMAGE_TYPES if t in requested)
    return narrowed or ALLOWED_IMAGE_TYPES


@dataclass(frozen=True)
class ProviderSettings:
    """Runtime configuration built once at startup.

    Relevant environment variables:
        - `HUGGINGFACE_API_KEY`, `HUGGINGFACE_MODEL`
        - `FASHN_API_KEY`
        - `PROVIDER_TIMEOUT_SECONDS`
        - `UPLOAD_DIR`, `GENERATED_DIR`
        - `ALLOWED_IMAGE_TYPES` (comma-separated subset)
        - `MAX_UPLOAD_BYTES`
    """

    huggingface_api_key: Optional[str] = None
    huggingface_model: str = DEFAULT_HUGGINGFACE_MODEL
    fashn_api_key: Optional[str] = None
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    upload_dir: str = os.path.join(PROJECT_ROOT, "uploads")
    generated_dir: str = os.path.join(PROJECT_ROOT, "generated")
    allowed_image_types: tuple[str, ...] = field(default=ALLOWED_IMAGE_TYPES)
    max_upload_bytes: int = MAX_UPLOAD_BYTES

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "ProviderSettings":
        environ = os.environ if environ is None else environ
        hf = PROVIDERS[Provider.HUGGINGFACE]
        fashn = PROVIDERS[Provider.FASHN]
        return cls(
            huggingface_api_key=load_key(hf["key_env"], hf["key_file"], environ),
            huggingface_model=environ.get("HUGGINGFACE_MODEL", DEFAULT_HUGGINGFACE_MODEL).strip()
            or DEFAULT_HUGGINGFACE_MODEL,
            fashn_api_key=load_key(fashn["key_env"], fashn["key_file"], environ),
            timeout_seconds=float(environ.get("PROVIDER_TIMEOUT_SECONDS", DEFAULT_TIMEOUT_SECONDS)),
            upload_dir=os.path.realpath(
                environ.get("UPLOAD_DIR", os.path.join(PROJECT_ROOT, "uploads"))
            ),
            generated_dir=os.path.realpath(
                environ.get("GENERATED_DIR", os.path.join(PROJECT_ROOT, "generated"))
            ),
            allowed_image_types=_parse_allowed_types(environ.get("ALLOWED_IMAGE_TYPES")),
            max_upload_bytes=int(environ.get("MAX_UPLOAD_BYTES", MAX_UPLOAD_BYTES)),
        )

    def api_key(self, provider: Provider) -> Optional[str]:
        if provider is Provider.HUGGINGFACE:
            return self.huggingface_api_key
        return self.fashn_api_key

    def is_configured(self, provider: Provider) -> bool:
        return bool(self.api_key(provider))

    def configured_providers(self) -> dict[str, bool]:
        """Configured-flag per provider, keyed by provider value."""
        return {provider.value: self.is_configured(provider) for provider in Provider}

    def unconfigured_setup(self) -> dict[str, str]:
        """Setup guidance keyed by provider value, for each missing key."""
        return {
            provider.value: setup_guidance(provider)
            for provider in Provider
            if not self.is_configured(provider)
        }
