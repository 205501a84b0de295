"""Generation data contracts for `product_imagegen.core.engine`.

Architectural role:
    Defines the typed structures passed between the HTTP layer, the upload
    validator, and the orchestrator. All types are transient; only the files
    referenced by `UploadedAsset` and a completed `GenerationResult` outlive
    one request.

Determinism:
    The data classes are purely structural and state-free.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional


class Provider(str, Enum):
    """External image-generation providers."""

    HUGGINGFACE = "huggingface"
    FASHN = "fashn"

    @property
    def label(self) -> str:
        return PROVIDER_LABELS[self]

    @classmethod
    def parse(cls, value: str | None) -> Optional["Provider"]:
        """Map a caller-supplied service name to a provider.

        Blank and `auto` mean no explicit preference. Unknown names raise
        `ValueError` so the HTTP layer can answer with HTTP 400.
        """
        if value is None:
            return None
        normalized = value.strip().lower()
        if normalized in ("", "auto"):
            return None
        for provider in cls:
            if normalized in (provider.value, provider.label.lower()):
                return provider
        raise ValueError(
            f"Unknown service '{value}'. Available services: "
            f"{sorted(p.value for p in cls)}"
        )


PROVIDER_LABELS = {
    Provider.HUGGINGFACE: "Hugging Face",
    Provider.FASHN: "FASHN.ai",
}


class GenerationStatus(str, Enum):
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass(frozen=True)
class UploadedAsset:
    """Caller-supplied image persisted after passing validation.

    Attributes:
        storage_name: Generated unique file name (`<field>-<ms>-<rand>.<ext>`).
        absolute_path: Absolute path of the stored file.
        size_bytes: Payload size.
        declared_media_type: Media type declared by the caller.
        original_filename: File name declared by the caller.
    """

    storage_name: str
    absolute_path: str
    size_bytes: int
    declared_media_type: str
    original_filename: str = ""


@dataclass
class GenerationRequest:
    """One orchestration call.

    `prompt=None` (or blank) selects the default fashion-photography prompt.
    `reference_image_url` is required whenever Service B may be invoked.
    """

    prompt: Optional[str] = None
    source_asset: Optional[UploadedAsset] = None
    reference_image_url: Optional[str] = None
    preferred_provider: Optional[Provider] = None
    allow_fallback: bool = True


@dataclass
class GenerationResult:
    """Normalized outcome of one orchestration call.

    Attributes:
        output_location: Generated file name (Service A) or provider output
            reference / job id (Service B).
        used_provider: Provider that produced the result.
        prompt_used: Prompt actually sent upstream.
        status: Completion status.
        output_path: Absolute path of the persisted file (Service A only).
        descriptor: Provider job/result descriptor (Service B only).
        errors: Provider errors encountered before success (fallback path).
    """

    output_location: str
    used_provider: Provider
    prompt_used: str
    status: GenerationStatus = GenerationStatus.COMPLETED
    output_path: Optional[str] = None
    descriptor: Optional[dict[str, Any]] = None
    errors: list = field(default_factory=list)
