# SPDX-License-Identifier: MIT
# Copyright (c) 2025-2026 Soroush Yousefpour
"""
Unit tests for utility functions in utils.py.

Clipboard tools are never actually invoked; subprocess and PATH lookups are patched.
"""

import subprocess
from unittest.mock import patch

from open_grammar import utils


# ---------------------------------------------------------------------------
# truncate
# ---------------------------------------------------------------------------

class TestTruncate:
    def test_short_text_unchanged(self):
        assert utils.truncate("hello") == "hello"

    def test_exact_length_unchanged(self):
        text = "x" * utils.LOG_TRUNCATE
        assert utils.truncate(text) == text

    def test_long_text_gets_ellipsis(self):
        result = utils.truncate("abcdefghij", 4)
        assert result == "abcd..."


# ---------------------------------------------------------------------------
# log
# ---------------------------------------------------------------------------

class TestLog:
    def test_goes_to_stderr(self, capsys):
        utils.log("backend ready", "OK")
        captured = capsys.readouterr()
        assert captured.out == ""
        assert "backend ready" in captured.err
        assert "✓" in captured.err

    def test_unknown_level_uses_info_style(self, capsys):
        utils.log("something", "VERBOSE")
        assert "›" in capsys.readouterr().err


# ---------------------------------------------------------------------------
# copy_to_clipboard
# ---------------------------------------------------------------------------

class TestClipboard:
    def test_first_available_tool_used(self):
        available = {"xclip"}
        with patch("open_grammar.utils.shutil.which", side_effect=lambda c: c if c in available else None), \
             patch("open_grammar.utils.subprocess.run") as run:
            assert utils.copy_to_clipboard("héllo") is True
        args, kwargs = run.call_args
        assert args[0] == ["xclip", "-selection", "clipboard"]
        assert kwargs["input"] == "héllo".encode()

    def test_no_tool_available(self, capsys):
        with patch("open_grammar.utils.shutil.which", return_value=None), \
             patch("open_grammar.utils.subprocess.run") as run:
            assert utils.copy_to_clipboard("text") is False
        run.assert_not_called()
        assert "no clipboard tool found" in capsys.readouterr().err

    def test_tool_failure(self):
        with patch("open_grammar.utils.shutil.which", return_value="/usr/bin/pbcopy"), \
             patch("open_grammar.utils.subprocess.run",
                   side_effect=subprocess.CalledProcessError(1, "pbcopy")):
            assert utils.copy_to_clipboard("text") is False
