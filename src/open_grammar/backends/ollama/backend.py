"""
Ollama backend implementation.

Sends prompts to a local Ollama server.
"""

from typing import Optional, Tuple

import requests

from ..base import TextBackend
from ...config import get_config
from ...utils import log, SERVICE_CHECK_TIMEOUT


class OllamaBackend(TextBackend):
    """Text backend using a local Ollama server."""

    def __init__(self):
        self._session = requests.Session()

    @property
    def name(self) -> str:
        return "Ollama"

    def close(self) -> None:
        try:
            self._session.close()
        except Exception:
            pass

    def running(self) -> bool:
        """Check if Ollama server is running."""
        config = get_config()

        if not self._is_local_url(config.ollama.check_url):
            log("Ollama URL must be localhost", "ERR")
            return False

        try:
            r = self._session.get(
                config.ollama.check_url,
                timeout=SERVICE_CHECK_TIMEOUT
            )
            return r.status_code == 200
        except (requests.RequestException, ConnectionError):
            return False

    def start(self) -> bool:
        """Check Ollama availability."""
        if self.running():
            config = get_config()
            log(f"Ollama ready ({config.ollama.model})", "OK")
            return True

        log("Ollama not running - start with: ollama serve", "WARN")
        return False

    def complete(self, prompt: str) -> Tuple[str, Optional[str]]:
        """Generate a reply with Ollama."""
        config = get_config()

        if not self._is_local_url(config.ollama.url):
            return "", "Ollama URL must be localhost"

        if not prompt or not prompt.strip():
            return "", "Prompt cannot be empty"

        log(f"Ollama request: {config.ollama.model} ({len(prompt)} chars)", "AI")

        try:
            r = self._session.post(
                config.ollama.url,
                json={
                    "model": config.ollama.model,
                    "prompt": prompt,
                    "stream": False,
                    "keep_alive": config.ollama.keep_alive,
                    "options": {
                        "temperature": 0.2,
                        "top_p": 0.9,
                    },
                },
                timeout=self._get_timeout(config.ollama.timeout)
            )
            r.raise_for_status()

            result = r.json().get('response', '')
            if not result.strip():
                log("Ollama returned empty response", "WARN")
                return "", "Empty response"

            log(f"Ollama reply: {len(result)} chars", "OK")
            return result, None

        except requests.exceptions.ConnectionError:
            return "", "Ollama not responding"
        except requests.exceptions.Timeout:
            return "", "Timeout"
        except requests.exceptions.HTTPError as e:
            status = e.response.status_code if e.response is not None else "unknown"
            log(f"Ollama HTTP error {status}: {e}", "ERR")
            return "", f"HTTP error {status}"
        except Exception as e:
            log(f"Unexpected Ollama error: {type(e).__name__}: {e}", "ERR")
            return "", self._truncate_error(e)
