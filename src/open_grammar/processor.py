# SPDX-License-Identifier: MIT
# Copyright (c) 2025-2026 Soroush Yousefpour
"""
Text processing entry point for OpenGrammar.

Validates the request, builds the action prompt, calls the configured
backend and parses the reply. Every outcome, including failures that
happen before the model is reached, comes back as a ParsedResult so the
presentation layer never needs a separate error path.

Usage:
    from open_grammar.processor import TextProcessor

    processor = TextProcessor()
    result = processor.process("she go to school", "grammar", "en")
    print(result.final_text)
    processor.close()
"""

from typing import Optional

from .actions import CUSTOM_ACTION, build_prompt, get_action, normalize_language
from .backends import TextBackend, create_backend
from .config import get_config
from .parser import ParsedResult, parse_response
from .utils import log, truncate

MESSAGES = {
    "empty_text": {
        "en": "Please enter some text to process.",
        "id": "Silakan masukkan teks untuk diproses.",
    },
    "empty_instruction": {
        "en": "Please enter a custom prompt.",
        "id": "Silakan masukkan prompt kustom.",
    },
}


def localized(message_id: str, language: str) -> str:
    """Look up a user-facing notice in the given language."""
    return MESSAGES[message_id][normalize_language(language)]


def error_result(error) -> ParsedResult:
    """Wrap an error so it renders like a parsed reply."""
    return ParsedResult.message(f"Error: {error}")


class TextProcessor:
    """
    Runs one action on one piece of text.

    Wraps the configured backend (or the one passed in) and turns its raw
    reply into a ParsedResult.
    """

    def __init__(self, backend: Optional[TextBackend] = None):
        if backend is not None:
            self._backend = backend
            return
        config = get_config()
        try:
            self._backend = create_backend(config.backend.provider)
            log(f"Text backend: {self._backend.name}", "INFO")
        except ValueError as e:
            log(f"Failed to create text backend '{config.backend.provider}': {e}", "ERR")
            raise

    def close(self) -> None:
        """Clean up backend resources."""
        self._backend.close()

    def running(self) -> bool:
        """Check if the text backend is available."""
        return self._backend.running()

    def start(self) -> bool:
        """Initialize and verify backend availability."""
        return self._backend.start()

    def process(self, text: str, action_id: str, language: str = "en",
                instruction: Optional[str] = None) -> ParsedResult:
        """
        Run an action on text.

        Args:
            text: The user's text.
            action_id: Action identifier (e.g., "grammar", "custom").
            language: Response language code ("en" or "id").
            instruction: The user's instruction for the custom action.

        Returns:
            The parsed model reply, or a message result describing why
            the request was not sent or failed.
        """
        if not text or not text.strip():
            return ParsedResult.message(localized("empty_text", language))

        if action_id == CUSTOM_ACTION and not (instruction or "").strip():
            return ParsedResult.message(localized("empty_instruction", language))

        action = get_action(action_id)
        if not action:
            log(f"Unknown action requested: {action_id}", "ERR")
            return error_result(f"Unknown action: {action_id}")

        try:
            prompt = build_prompt(action_id, text, language, instruction)
        except ValueError as e:
            log(f"Failed to build prompt for action {action_id}: {e}", "ERR")
            return error_result(e)

        log(f"{action.name} via {self._backend.name} ({len(text)} chars, {normalize_language(language)})", "INFO")
        raw, error = self._backend.complete(prompt)
        if error:
            log(f"Backend error for {action.name}: {error}", "ERR")
            return error_result(error)

        result = parse_response(raw)
        if result.final_text:
            log(f"{action.name} complete: {truncate(result.final_text)}", "OK")
        else:
            log(f"{action.name}: reply had no recognizable final text section", "WARN")
        return result

    @property
    def name(self) -> str:
        """Get the name of the current backend."""
        return self._backend.name

    @property
    def backend(self) -> TextBackend:
        """Get the underlying backend."""
        return self._backend
