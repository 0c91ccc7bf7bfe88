# SPDX-License-Identifier: MIT
# Copyright (c) 2025-2026 Soroush Yousefpour
"""Claude Messages API backend."""

from .backend import AnthropicBackend

__all__ = ["AnthropicBackend"]
