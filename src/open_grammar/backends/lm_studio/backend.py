# SPDX-License-Identifier: MIT
# Copyright (c) 2025-2026 Soroush Yousefpour
"""
LM Studio backend implementation.

Sends prompts via LM Studio's OpenAI-compatible API.
"""

from typing import Optional, Tuple

import requests

from ...config import get_config
from ...utils import SERVICE_CHECK_TIMEOUT, log
from ..base import TextBackend


class LMStudioBackend(TextBackend):
    """Text backend using LM Studio's OpenAI-compatible API."""

    def __init__(self):
        self._session = requests.Session()

    @property
    def name(self) -> str:
        return "LM Studio"

    def close(self) -> None:
        """Clean up resources."""
        try:
            self._session.close()
        except Exception:
            pass

    def running(self) -> bool:
        """Check if LM Studio server is running."""
        config = get_config()

        if not self._is_local_url(config.lm_studio.check_url, allow_lan=True):
            log("LM Studio URL must be localhost or LAN", "ERR")
            return False

        try:
            r = self._session.get(
                config.lm_studio.check_url,
                timeout=SERVICE_CHECK_TIMEOUT
            )
            return r.status_code == 200
        except (requests.RequestException, ConnectionError):
            return False

    def start(self) -> bool:
        """Check LM Studio availability and verify model."""
        if not self.running():
            log("LM Studio not running - start LM Studio and load a model", "WARN")
            return False

        model_ok, model_info = self._check_model()
        if model_ok:
            log(f"LM Studio ready ({model_info})", "OK")
            return True
        log(f"LM Studio: {model_info}", "WARN")
        return False

    def complete(self, prompt: str) -> Tuple[str, Optional[str]]:
        """Send the prompt as a single user chat message."""
        config = get_config()

        if not self._is_local_url(config.lm_studio.url, allow_lan=True):
            log(f"LM Studio URL not local: {config.lm_studio.url}", "ERR")
            return "", "LM Studio URL must be localhost or LAN"

        if not prompt or not prompt.strip():
            return "", "Prompt cannot be empty"

        try:
            model_id = self._get_model_id()
            if not model_id:
                log("LM Studio: No model available", "ERR")
                return "", "No model available"

            log(f"LM Studio request: {model_id} ({len(prompt)} chars)", "AI")

            payload = {
                "model": model_id,
                "messages": [{"role": "user", "content": prompt}],
                "temperature": 0.2,
                "max_tokens": config.lm_studio.max_tokens if config.lm_studio.max_tokens > 0 else 2048,
                "stream": False
            }

            r = self._session.post(
                config.lm_studio.url,
                json=payload,
                headers={
                    "Content-Type": "application/json",
                    "Authorization": "Bearer lm-studio"
                },
                timeout=self._get_timeout(config.lm_studio.timeout)
            )
            r.raise_for_status()

            # Parse OpenAI chat completion response
            try:
                data = r.json()
            except ValueError as e:
                log(f"Invalid JSON response from LM Studio: {e}", "ERR")
                return "", "Invalid response"

            choices = data.get("choices", [])
            if not choices:
                log("LM Studio returned empty choices array", "WARN")
                return "", "Empty response"

            message = choices[0].get("message", {})
            if not message:
                log("LM Studio response missing message field", "WARN")
                return "", "Invalid response format"

            result = message.get("content") or ""
            if not result.strip():
                log("LM Studio returned empty content", "WARN")
                return "", "Empty response"

            log(f"LM Studio reply: {len(result)} chars", "OK")
            return result, None

        except requests.exceptions.ConnectionError as e:
            log(f"LM Studio connection error: {e}", "ERR")
            return "", "LM Studio not responding"
        except requests.exceptions.Timeout:
            log("LM Studio timeout", "ERR")
            return "", "Timeout"
        except requests.exceptions.HTTPError as e:
            status = e.response.status_code if e.response is not None else "unknown"
            log(f"LM Studio HTTP error {status}: {e}", "ERR")
            return "", f"HTTP error {status}"
        except Exception as e:
            log(f"Unexpected LM Studio error: {type(e).__name__}: {e}", "ERR")
            return "", self._truncate_error(e)

    # ─────────────────────────────────────────────────────────────────
    # Private methods
    # ─────────────────────────────────────────────────────────────────

    def _list_models(self) -> list:
        """IDs of the models currently loaded in LM Studio."""
        config = get_config()
        models_url = config.lm_studio.check_url.rstrip("/") + "/v1/models"
        r = self._session.get(models_url, timeout=SERVICE_CHECK_TIMEOUT)
        r.raise_for_status()
        return [m.get("id", "") for m in r.json().get("data", [])]

    def _check_model(self) -> Tuple[bool, str]:
        """Check if the configured model is available."""
        config = get_config()

        try:
            model_ids = self._list_models()
        except Exception as e:
            return False, self._truncate_error(e)

        if not model_ids:
            return False, "No models loaded - load a model in LM Studio"

        if config.lm_studio.model:
            if config.lm_studio.model in model_ids:
                return True, config.lm_studio.model
            return False, f"Model '{config.lm_studio.model}' not found. Available: {', '.join(model_ids[:3])}"

        return True, model_ids[0]

    def _get_model_id(self) -> str:
        """Get the model ID to use for requests."""
        config = get_config()

        if config.lm_studio.model:
            return config.lm_studio.model

        try:
            model_ids = self._list_models()
        except requests.RequestException as e:
            log(f"LM Studio: could not list models: {e}", "WARN")
            return ""

        return model_ids[0] if model_ids else ""
