"""Provider client factory used by the orchestrator.

Role in pipeline:
    - Builds one client per provider from a shared `ProviderSettings`.
    - Gives the orchestrator a single injection point for tests.
"""

from __future__ import annotations

from product_imagegen.core.generation_types import Provider
from product_imagegen.image.fashn_client import FashnClient
from product_imagegen.image.huggingface_client import HuggingFaceClient
from product_imagegen.image.provider_config import ProviderSettings


def build_clients(settings: ProviderSettings) -> dict:
    """Return `{Provider: client}` for every supported provider."""
    return {
        Provider.HUGGINGFACE: HuggingFaceClient(settings),
        Provider.FASHN: FashnClient(settings),
    }
