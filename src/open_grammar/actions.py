# SPDX-License-Identifier: MIT
# Copyright (c) 2025-2026 Soroush Yousefpour
"""
Text processing actions and their bilingual prompts.

Each action asks the model for a two-section reply whose headers come from
the parser's SECTION_HEADERS table, so prompts and parsing stay in sync.

To add a new action, add an entry to ACTION_REGISTRY.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional

from .parser import ANALYSIS, FINAL, LANGUAGES, header_phrase

DEFAULT_LANGUAGE = "en"
CUSTOM_ACTION = "custom"


@dataclass
class Action:
    """Definition of a text processing action."""
    id: str
    name: str                   # English label
    name_id: str                # Indonesian label
    analysis_header: str        # Key into SECTION_HEADERS[ANALYSIS]
    final_header: str           # Key into SECTION_HEADERS[FINAL]
    task: Dict[str, str]        # Opening instruction, per language
    text_label: Dict[str, str]  # Label above the quoted input text
    analysis_hint: Dict[str, str]
    final_hint: Dict[str, str]


# ============================================================================
# PROMPT FRAGMENTS
# ============================================================================

LANGUAGE_INSTRUCTIONS = {
    "en": "Please respond in US English. ",
    "id": "Please respond in Indonesian (Bahasa Indonesia). ",
}

FORMAT_INSTRUCTIONS = {
    "en": "Please respond in this exact format:",
    "id": "Harap berikan respons dalam format yang tepat ini:",
}

ORIGINAL_TEXT_LABEL = {
    "en": "Original text:",
    "id": "Teks asli:",
}


# ============================================================================
# ACTION REGISTRY
# ============================================================================

ACTION_REGISTRY: Dict[str, Action] = {
    "grammar": Action(
        id="grammar",
        name="Check Grammar & Spelling",
        name_id="Periksa Tata Bahasa & Ejaan",
        analysis_header="analysis",
        final_header="corrected",
        task={
            "en": "Analyze the following text for grammar, spelling, and style issues.",
            "id": "Analisis teks berikut untuk masalah tata bahasa, ejaan, dan gaya penulisan.",
        },
        text_label={
            "en": "Text to analyze:",
            "id": "Teks yang akan dianalisis:",
        },
        analysis_hint={
            "en": 'List specific grammar, spelling, and style issues found. If none found, write "No issues detected."',
            "id": 'Daftar masalah tata bahasa, ejaan, dan gaya yang ditemukan. Jika tidak ada masalah, tulis "Tidak ada masalah yang terdeteksi."',
        },
        final_hint={
            "en": "Provide the corrected version of the text with all issues fixed",
            "id": "Berikan versi teks yang telah diperbaiki dengan semua masalah diperbaiki",
        },
    ),
    "improve": Action(
        id="improve",
        name="Improve It",
        name_id="Tingkatkan Teks",
        analysis_header="improvements",
        final_header="improved",
        task={
            "en": "Improve the following text by enhancing clarity, flow, and overall quality while maintaining the original meaning.",
            "id": "Tingkatkan teks berikut dengan meningkatkan kejelasan, alur, dan kualitas secara keseluruhan sambil mempertahankan makna aslinya.",
        },
        text_label=ORIGINAL_TEXT_LABEL,
        analysis_hint={
            "en": "List the specific improvements and enhancements made to the text",
            "id": "Daftar perbaikan dan peningkatan spesifik yang dilakukan pada teks",
        },
        final_hint={
            "en": "Provide the enhanced version of the text",
            "id": "Berikan versi teks yang telah ditingkatkan",
        },
    ),
    "rephrase": Action(
        id="rephrase",
        name="Re-paraphrase It",
        name_id="Parafrase Ulang",
        analysis_header="rephrasing",
        final_header="rephrased",
        task={
            "en": "Rephrase the following text using different words and sentence structures while keeping the same meaning.",
            "id": "Parafrase teks berikut menggunakan kata-kata dan struktur kalimat yang berbeda sambil mempertahankan makna yang sama.",
        },
        text_label=ORIGINAL_TEXT_LABEL,
        analysis_hint={
            "en": "Brief explanation of the rephrasing approach used",
            "id": "Penjelasan singkat tentang pendekatan parafrasa yang digunakan",
        },
        final_hint={
            "en": "Provide the rephrased version of the text",
            "id": "Berikan versi teks yang telah diparafrasa",
        },
    ),
    "formal": Action(
        id="formal",
        name="Make It Formal",
        name_id="Buat Lebih Formal",
        analysis_header="formalization",
        final_header="formal",
        task={
            "en": "Rewrite the following text in a more formal, professional tone suitable for business or academic contexts.",
            "id": "Tulis ulang teks berikut dengan nada yang lebih formal dan profesional yang cocok untuk konteks bisnis atau akademik.",
        },
        text_label=ORIGINAL_TEXT_LABEL,
        analysis_hint={
            "en": "Explain what changes were made to make the text more formal",
            "id": "Jelaskan perubahan apa yang dilakukan untuk membuat teks lebih formal",
        },
        final_hint={
            "en": "Provide the formal version of the text",
            "id": "Berikan versi formal dari teks",
        },
    ),
    "detailed": Action(
        id="detailed",
        name="Make It More Detailed",
        name_id="Buat Lebih Detail",
        analysis_header="expansion",
        final_header="detailed",
        task={
            "en": "Expand the following text by adding more details, explanations, and context while maintaining accuracy.",
            "id": "Kembangkan teks berikut dengan menambahkan lebih banyak detail, penjelasan, dan konteks sambil mempertahankan keakuratan.",
        },
        text_label=ORIGINAL_TEXT_LABEL,
        analysis_hint={
            "en": "Explain what additional information and details were added",
            "id": "Jelaskan informasi dan detail tambahan apa yang ditambahkan",
        },
        final_hint={
            "en": "Provide the expanded, more detailed version of the text",
            "id": "Berikan versi teks yang diperluas dan lebih detail",
        },
    ),
    CUSTOM_ACTION: Action(
        id=CUSTOM_ACTION,
        name="Custom Action",
        name_id="Aksi Kustom",
        analysis_header="analysis",
        final_header="final_result",
        task={
            "en": "Please perform the following action on the given text:\n\nInstruction: {instruction}",
            "id": "Silakan lakukan tindakan berikut pada teks yang diberikan:\n\nInstruksi: {instruction}",
        },
        text_label={
            "en": "Text to process:",
            "id": "Teks yang akan diproses:",
        },
        analysis_hint={
            "en": "Brief explanation of the action performed",
            "id": "Penjelasan singkat tentang tindakan yang dilakukan",
        },
        final_hint={
            "en": "Provide the final result of the requested action",
            "id": "Berikan hasil akhir dari tindakan yang diminta",
        },
    ),
}


class ActionNotFoundError(ValueError):
    """Raised when a requested action does not exist."""
    pass


def get_action(action_id: str) -> Optional[Action]:
    """Get an action by ID."""
    return ACTION_REGISTRY.get(action_id)


def get_all_actions() -> List[Action]:
    """Get all available actions."""
    return list(ACTION_REGISTRY.values())


def normalize_language(language: Optional[str]) -> str:
    """Map a language code to a supported one (unknown codes become English)."""
    if language in LANGUAGES:
        return language
    return DEFAULT_LANGUAGE


def action_label(action: Action, language: str) -> str:
    """Display label for an action in the given language."""
    return action.name_id if normalize_language(language) == "id" else action.name


# ============================================================================
# PROMPT BUILDER
# ============================================================================

def build_prompt(action_id: str, text: str, language: str = DEFAULT_LANGUAGE,
                 instruction: Optional[str] = None) -> str:
    """
    Build the model prompt for an action.

    Args:
        action_id: The action identifier
        text: The text to process
        language: Response language code ("en" or "id")
        instruction: The user's instruction (custom action only)

    Returns:
        Complete prompt string asking for the two-section reply

    Raises:
        ActionNotFoundError: If action_id is not in ACTION_REGISTRY
        ValueError: If text is empty, or a custom action has no instruction
    """
    if not text:
        raise ValueError("Text cannot be empty")

    action = ACTION_REGISTRY.get(action_id)
    if not action:
        raise ActionNotFoundError(f"Unknown action: {action_id}")

    if action.id == CUSTOM_ACTION and not (instruction or "").strip():
        raise ValueError("Custom action requires an instruction")

    lang = normalize_language(language)
    task = action.task[lang]
    if action.id == CUSTOM_ACTION:
        task = task.format(instruction=instruction)

    analysis = header_phrase(ANALYSIS, action.analysis_header, lang)
    final = header_phrase(FINAL, action.final_header, lang)

    return f"""{LANGUAGE_INSTRUCTIONS[lang]}{task}

{action.text_label[lang]}
"{text}"

{FORMAT_INSTRUCTIONS[lang]}

{analysis}
[{action.analysis_hint[lang]}]

{final}
[{action.final_hint[lang]}]"""
