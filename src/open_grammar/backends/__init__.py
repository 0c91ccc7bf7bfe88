"""
Text generation backends for OpenGrammar.

To add a new backend:
1. Create a new folder under backends/ with __init__.py and backend.py
2. Add an entry to BACKEND_REGISTRY below

Usage:
    from open_grammar.backends import create_backend, BACKEND_REGISTRY

    backend = create_backend("anthropic")
    if backend.start():
        raw, error = backend.complete("some prompt")
"""

from dataclasses import dataclass
from typing import Callable, Dict, Optional

from .base import TextBackend


@dataclass
class BackendInfo:
    """Metadata for a text backend."""
    id: str                    # Config identifier (e.g., "anthropic")
    name: str                  # Display name (e.g., "Claude API")
    description: str           # Short description for listings
    factory: Callable[[], TextBackend]  # Function to create instance


def _create_anthropic() -> TextBackend:
    from .anthropic import AnthropicBackend
    return AnthropicBackend()


def _create_ollama() -> TextBackend:
    from .ollama import OllamaBackend
    return OllamaBackend()


def _create_lm_studio() -> TextBackend:
    from .lm_studio import LMStudioBackend
    return LMStudioBackend()


# ============================================================================
# BACKEND REGISTRY - Add new backends here
# ============================================================================
BACKEND_REGISTRY: Dict[str, BackendInfo] = {
    "anthropic": BackendInfo(
        id="anthropic",
        name="Claude API",
        description="Anthropic Messages API, bring your own key",
        factory=_create_anthropic,
    ),
    "ollama": BackendInfo(
        id="ollama",
        name="Ollama",
        description="Local LLM server",
        factory=_create_ollama,
    ),
    "lm_studio": BackendInfo(
        id="lm_studio",
        name="LM Studio",
        description="OpenAI-compatible local server",
        factory=_create_lm_studio,
    ),
}


def create_backend(backend_type: str) -> TextBackend:
    """
    Factory function to create a text backend instance.

    Args:
        backend_type: Backend ID from BACKEND_REGISTRY

    Returns:
        An instance of the requested backend.

    Raises:
        ValueError: If backend_type is not recognized.
    """
    if backend_type not in BACKEND_REGISTRY:
        available = ", ".join(BACKEND_REGISTRY.keys())
        raise ValueError(f"Unknown backend: {backend_type}. Available: {available}")

    return BACKEND_REGISTRY[backend_type].factory()


def get_backend_info(backend_type: str) -> Optional[BackendInfo]:
    """Get metadata for a backend type."""
    return BACKEND_REGISTRY.get(backend_type)


__all__ = ["TextBackend", "BackendInfo", "BACKEND_REGISTRY", "create_backend", "get_backend_info"]
