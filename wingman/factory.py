from __future__ import annotations

import os
from typing import Optional

from wingman.gateway import ProviderGateway
from wingman.types import (
    DEFAULT_GEMINI_MODEL,
    DEFAULT_OLLAMA_MODEL,
    DEFAULT_OLLAMA_URL,
    ProviderConfig,
    ProviderMode,
)

_TRUTHY = {"1", "true", "yes", "on"}


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    try:
        return float(raw) if raw else default
    except ValueError:
        return default


def config_from_env(*, provider: Optional[str] = None) -> ProviderConfig:
    """Build provider settings from environment configuration.

    Env:
      - GEMINI_API_KEY / GOOGLE_API_KEY, GEMINI_MODEL
      - USE_OLLAMA: 'true' selects the local backend
      - OLLAMA_MODEL, OLLAMA_URL (or OLLAMA_BASE_URL)
      - LLM_TEMPERATURE, LLM_TOP_P

    ``provider`` ('gemini' or 'ollama') overrides USE_OLLAMA.
    """
    if provider is None:
        use_local = os.getenv("USE_OLLAMA", "false").strip().lower() in _TRUTHY
    else:
        provider = provider.strip().lower()
        if provider not in ("gemini", "ollama"):
            raise ValueError(f"Unsupported provider={provider!r} (expected 'ollama' or 'gemini')")
        use_local = provider == "ollama"

    return ProviderConfig(
        mode=ProviderMode.LOCAL if use_local else ProviderMode.CLOUD,
        api_key=os.getenv("GEMINI_API_KEY") or os.getenv("GOOGLE_API_KEY") or None,
        local_model=os.getenv("OLLAMA_MODEL", DEFAULT_OLLAMA_MODEL),
        local_endpoint=os.getenv("OLLAMA_URL") or os.getenv("OLLAMA_BASE_URL") or DEFAULT_OLLAMA_URL,
        cloud_model=os.getenv("GEMINI_MODEL", DEFAULT_GEMINI_MODEL),
        temperature=_env_float("LLM_TEMPERATURE", 0.7),
        top_p=_env_float("LLM_TOP_P", 0.9),
    )


async def create_gateway(config: Optional[ProviderConfig] = None, *, provider: Optional[str] = None) -> ProviderGateway:
    """Create an initialized gateway from ``config`` or the environment."""
    return await ProviderGateway.initialize(config or config_from_env(provider=provider))
