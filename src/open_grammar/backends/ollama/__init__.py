"""Ollama backend for text processing."""

from .backend import OllamaBackend

__all__ = ["OllamaBackend"]
