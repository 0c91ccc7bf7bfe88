# SPDX-License-Identifier: MIT
# Copyright (c) 2025-2026 Soroush Yousefpour
"""
Structured response parser for OpenGrammar.

The model answers in two sections: an analysis block opened by one of the
analysis headers ("ANALYSIS:", "CATATAN PARAFRASA:", ...) followed by the
transformed text opened by one of the final-text headers ("CORRECTED TEXT:",
"HASIL AKHIR:", ...). parse_response() splits a raw reply into those two
parts, trying in order:

1. A whole-text pattern: analysis header at the start, then the shortest
   run of text up to the nearest final-text header, then everything after it.
2. A line scan for the first line containing a final-text header. Lines
   before it are comments, lines after it are the final text.
3. No structure: the whole reply is treated as comments.

To add a header phrase or a language, edit SECTION_HEADERS below.
"""

import re
from dataclasses import dataclass
from typing import Dict, List

# Section kinds
ANALYSIS = "analysis"
FINAL = "final"

# Supported response languages
LANGUAGES = ("en", "id")


# ============================================================================
# HEADER TABLE - kind -> header key -> language -> phrase
# ============================================================================
SECTION_HEADERS: Dict[str, Dict[str, Dict[str, str]]] = {
    ANALYSIS: {
        "analysis": {"en": "ANALYSIS:", "id": "ANALISIS:"},
        "improvements": {"en": "IMPROVEMENTS MADE:", "id": "PERBAIKAN YANG DILAKUKAN:"},
        "rephrasing": {"en": "REPHRASING NOTES:", "id": "CATATAN PARAFRASA:"},
        "formalization": {"en": "FORMALIZATION NOTES:", "id": "CATATAN FORMALISASI:"},
        "expansion": {"en": "EXPANSION DETAILS:", "id": "DETAIL PENGEMBANGAN:"},
    },
    FINAL: {
        "corrected": {"en": "CORRECTED TEXT:", "id": "TEKS YANG DIPERBAIKI:"},
        "improved": {"en": "IMPROVED TEXT:", "id": "TEKS YANG DITINGKATKAN:"},
        "rephrased": {"en": "REPHRASED TEXT:", "id": "TEKS YANG DIPARAFRASA:"},
        "formal": {"en": "FORMAL TEXT:", "id": "TEKS FORMAL:"},
        "detailed": {"en": "DETAILED TEXT:", "id": "TEKS YANG DIPERLUAS:"},
        "final_result": {"en": "FINAL RESULT:", "id": "HASIL AKHIR:"},
    },
}


def header_phrase(kind: str, key: str, language: str) -> str:
    """
    Look up a single header phrase.

    Raises:
        KeyError: If kind, key or language is not in SECTION_HEADERS.
    """
    return SECTION_HEADERS[kind][key][language]


def header_phrases(kind: str) -> List[str]:
    """All phrases of a section kind across languages, longest first."""
    phrases = {
        phrase
        for translations in SECTION_HEADERS[kind].values()
        for phrase in translations.values()
    }
    return sorted(phrases, key=lambda p: (-len(p), p))


def _alternation(phrases: List[str]) -> str:
    return "|".join(re.escape(p) for p in phrases)


# Longest-first alternation keeps a shorter phrase from shadowing a longer one.
_SECTIONS_PATTERN = re.compile(
    rf"({_alternation(header_phrases(ANALYSIS))})"
    r"(.*?)"
    rf"({_alternation(header_phrases(FINAL))})"
    r"(.*)",
    re.IGNORECASE | re.DOTALL,
)

_FINAL_MARKERS = tuple(p.lower() for p in header_phrases(FINAL))


@dataclass(frozen=True)
class ParsedResult:
    """One model reply split into commentary and final text."""
    comments: str
    final_text: str
    raw_result: str

    @classmethod
    def message(cls, text: str) -> "ParsedResult":
        """Wrap a notice or error message so it renders like a parsed reply."""
        return cls(comments=text, final_text="", raw_result=text)

    @property
    def is_empty(self) -> bool:
        """True when neither section has content (show raw_result instead)."""
        return not self.comments and not self.final_text

    def as_dict(self) -> Dict[str, str]:
        return {
            "comments": self.comments,
            "finalText": self.final_text,
            "rawResult": self.raw_result,
        }


def _strip_quote_pair(text: str) -> str:
    """Trim, then drop one enclosing pair of double quotes if present."""
    text = text.strip()
    if text.startswith('"') and text.endswith('"'):
        text = text[1:-1]
    return text.strip()


def parse_response(raw: str) -> ParsedResult:
    """
    Split a raw model reply into comments and final text.

    Never raises for string input. raw_result is always the input, untouched.

    Args:
        raw: The complete text of one model response.

    Returns:
        ParsedResult with trimmed comments and final_text.
    """
    match = _SECTIONS_PATTERN.fullmatch(raw)
    if match:
        return ParsedResult(
            comments=match.group(2).strip(),
            final_text=_strip_quote_pair(match.group(4)),
            raw_result=raw,
        )

    lines = raw.split("\n")
    for index, line in enumerate(lines):
        lowered = line.lower()
        if any(marker in lowered for marker in _FINAL_MARKERS):
            # The matching line is the header itself and belongs to neither side
            return ParsedResult(
                comments="\n".join(lines[:index]).strip(),
                final_text=_strip_quote_pair("\n".join(lines[index + 1:])),
                raw_result=raw,
            )

    return ParsedResult(comments=raw.strip(), final_text="", raw_result=raw)
