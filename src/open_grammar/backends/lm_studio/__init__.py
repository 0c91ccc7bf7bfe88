# SPDX-License-Identifier: MIT
# Copyright (c) 2025-2026 Soroush Yousefpour
"""LM Studio backend for text processing."""

from .backend import LMStudioBackend

__all__ = ["LMStudioBackend"]
