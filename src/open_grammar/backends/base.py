"""
Base text backend interface for OpenGrammar.

All text generation backends must inherit from TextBackend
and implement the required methods.
"""

from abc import ABC, abstractmethod
from typing import Optional, Tuple, Union
from urllib.parse import urlparse

# Shared constants
ERROR_TRUNCATE_LENGTH = 200  # Consistent error message truncation
DEFAULT_CONNECT_TIMEOUT = 10  # Default connection timeout in seconds


class TextBackend(ABC):
    """
    Abstract base class for text generation backends.

    A backend sends one prompt and returns the model's raw reply. It does
    not interpret the reply; that is the parser's job.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable name of the backend."""
        pass

    @abstractmethod
    def close(self) -> None:
        """Clean up resources when shutting down."""
        pass

    @abstractmethod
    def running(self) -> bool:
        """Check if the backend service is reachable and configured."""
        pass

    @abstractmethod
    def start(self) -> bool:
        """
        Initialize and verify backend availability.

        Returns True if backend is ready, False otherwise.
        """
        pass

    @abstractmethod
    def complete(self, prompt: str) -> Tuple[str, Optional[str]]:
        """
        Send a prompt and return the raw model reply.

        Args:
            prompt: The complete prompt text.

        Returns:
            Tuple of (raw_text, error_message).
            On success, error_message is None.
            On error, raw_text is empty and error_message describes the failure.
        """
        pass

    # ─────────────────────────────────────────────────────────────────
    # Shared utilities
    # ─────────────────────────────────────────────────────────────────

    def _get_timeout(self, timeout_config: int) -> Union[int, Tuple[int, None]]:
        """
        Get timeout value for requests.

        Args:
            timeout_config: Timeout from config (0 = unlimited read)

        Returns:
            Timeout value: int if configured, or (connect_timeout, None) for unlimited read
        """
        if timeout_config > 0:
            return timeout_config
        return (DEFAULT_CONNECT_TIMEOUT, None)  # (connect, read=unlimited)

    def _truncate_error(self, error) -> str:
        """Truncate error message to consistent length."""
        return str(error)[:ERROR_TRUNCATE_LENGTH]

    def _is_local_url(self, url: str, allow_lan: bool = False) -> bool:
        """Check if URL points to localhost (or the local network when allow_lan)."""
        host = urlparse(url).hostname
        if not host:
            return False

        if host in ("localhost", "127.0.0.1", "::1"):
            return True

        if not allow_lan:
            return False

        # Local network IPs (192.168.x.x, 10.x.x.x, 172.16-31.x.x)
        try:
            parts = host.split(".")
            if len(parts) == 4:
                if parts[0] == "192" and parts[1] == "168":
                    return True
                if parts[0] == "10":
                    return True
                if parts[0] == "172" and 16 <= int(parts[1]) <= 31:
                    return True
        except (ValueError, IndexError):
            pass

        return False
