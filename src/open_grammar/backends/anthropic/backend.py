# SPDX-License-Identifier: MIT
# Copyright (c) 2025-2026 Soroush Yousefpour
"""
Claude Messages API backend.

Sends a single user message and returns the text of the first content block.
"""

from typing import Optional, Tuple

import requests

from ...config import get_config
from ...utils import log
from ..base import TextBackend

ANTHROPIC_VERSION = "2023-06-01"


class AnthropicBackend(TextBackend):
    """Text backend using the Anthropic Messages API with the user's own key."""

    def __init__(self):
        self._session = requests.Session()

    @property
    def name(self) -> str:
        return "Claude API"

    def close(self) -> None:
        """Clean up resources."""
        try:
            self._session.close()
        except Exception:
            pass

    def running(self) -> bool:
        """The hosted API has no health endpoint; ready means a key is available."""
        return bool(get_config().anthropic.effective_api_key)

    def start(self) -> bool:
        """Verify an API key is configured."""
        if not self.running():
            log("Claude API key not set - run: og key <your-key>", "WARN")
            return False
        log(f"Claude API ready ({get_config().anthropic.model})", "OK")
        return True

    def complete(self, prompt: str) -> Tuple[str, Optional[str]]:
        """Send the prompt to the Messages API."""
        config = get_config()

        api_key = config.anthropic.effective_api_key
        if not api_key:
            return "", "API key is required"

        if not prompt or not prompt.strip():
            return "", "Prompt cannot be empty"

        payload = {
            "model": config.anthropic.model,
            "max_tokens": config.anthropic.max_tokens,
            "messages": [
                {"role": "user", "content": prompt},
            ],
        }

        log(f"Claude request: {config.anthropic.model} ({len(prompt)} chars)", "AI")

        try:
            r = self._session.post(
                config.anthropic.url,
                json=payload,
                headers={
                    "Content-Type": "application/json",
                    "x-api-key": api_key,
                    "anthropic-version": ANTHROPIC_VERSION,
                },
                timeout=self._get_timeout(config.anthropic.timeout),
            )

            if r.status_code != 200:
                log(f"Claude API error {r.status_code}", "ERR")
                return "", self._truncate_error(
                    f"API request failed with status {r.status_code}: {r.text}"
                )

            try:
                data = r.json()
            except ValueError as e:
                log(f"Invalid JSON response from Claude API: {e}", "ERR")
                return "", f"error parsing response: {self._truncate_error(e)}"

            content = data.get("content") if isinstance(data, dict) else None
            if not content or not isinstance(content[0], dict) or content[0].get("type") != "text":
                log("Claude API response has no text content", "WARN")
                return "", "unexpected response format"

            text = content[0].get("text") or ""
            usage = data.get("usage") or {}
            log(
                f"Claude reply: {len(text)} chars "
                f"(tokens in {usage.get('input_tokens', '?')}, out {usage.get('output_tokens', '?')})",
                "OK",
            )
            return text, None

        except requests.exceptions.ConnectionError as e:
            log(f"Claude API connection error: {e}", "ERR")
            return "", "Claude API not reachable"
        except requests.exceptions.Timeout:
            log("Claude API timeout", "ERR")
            return "", "Timeout"
        except Exception as e:
            log(f"Unexpected Claude API error: {type(e).__name__}: {e}", "ERR")
            return "", self._truncate_error(e)
