# SPDX-License-Identifier: MIT
# Copyright (c) 2025-2026 Soroush Yousefpour
"""
Unit tests for the action registry and prompt builder.
"""

import pytest

from open_grammar.actions import (
    ACTION_REGISTRY,
    CUSTOM_ACTION,
    ActionNotFoundError,
    action_label,
    build_prompt,
    get_action,
    get_all_actions,
    normalize_language,
)
from open_grammar.parser import ANALYSIS, FINAL, SECTION_HEADERS, header_phrase, parse_response


# ---------------------------------------------------------------------------
# ACTION_REGISTRY
# ---------------------------------------------------------------------------

class TestActionRegistry:
    def test_builtin_actions_registered(self):
        for action_id in ("grammar", "improve", "rephrase", "formal", "detailed", "custom"):
            assert action_id in ACTION_REGISTRY

    def test_action_id_matches_key(self):
        for key, action in ACTION_REGISTRY.items():
            assert action.id == key

    def test_header_keys_exist_in_table(self):
        for action in get_all_actions():
            assert action.analysis_header in SECTION_HEADERS[ANALYSIS]
            assert action.final_header in SECTION_HEADERS[FINAL]

    def test_every_action_has_both_languages(self):
        for action in get_all_actions():
            for field in (action.task, action.text_label, action.analysis_hint, action.final_hint):
                assert set(field) == {"en", "id"}, f"{action.id} missing a translation"

    def test_get_action_unknown_returns_none(self):
        assert get_action("summarize") is None

    def test_labels(self):
        formal = get_action("formal")
        assert action_label(formal, "en") == "Make It Formal"
        assert action_label(formal, "id") == "Buat Lebih Formal"
        assert action_label(formal, "fr") == "Make It Formal"


class TestNormalizeLanguage:
    def test_supported_codes_pass_through(self):
        assert normalize_language("en") == "en"
        assert normalize_language("id") == "id"

    def test_unknown_code_falls_back_to_english(self):
        assert normalize_language("de") == "en"
        assert normalize_language("") == "en"
        assert normalize_language(None) == "en"


# ---------------------------------------------------------------------------
# build_prompt
# ---------------------------------------------------------------------------

class TestBuildPrompt:
    def test_grammar_english(self):
        prompt = build_prompt("grammar", "she go to school", "en")
        assert prompt.startswith("Please respond in US English. Analyze the following text")
        assert 'Text to analyze:\n"she go to school"' in prompt
        assert "Please respond in this exact format:" in prompt
        assert "\nANALYSIS:\n[" in prompt
        assert "\nCORRECTED TEXT:\n[" in prompt

    def test_grammar_indonesian(self):
        prompt = build_prompt("grammar", "dia pergi sekolah", "id")
        assert prompt.startswith("Please respond in Indonesian (Bahasa Indonesia). Analisis teks berikut")
        assert 'Teks yang akan dianalisis:\n"dia pergi sekolah"' in prompt
        assert "Harap berikan respons dalam format yang tepat ini:" in prompt
        assert "ANALISIS:" in prompt
        assert "TEKS YANG DIPERBAIKI:" in prompt

    def test_unknown_language_uses_english(self):
        prompt = build_prompt("formal", "hey boss", "xx")
        assert "FORMALIZATION NOTES:" in prompt
        assert "FORMAL TEXT:" in prompt
        assert "Original text:" in prompt

    def test_custom_action_includes_instruction(self):
        prompt = build_prompt(CUSTOM_ACTION, "hello", "en", instruction="Translate to pirate speak")
        assert "Instruction: Translate to pirate speak" in prompt
        assert 'Text to process:\n"hello"' in prompt
        assert "FINAL RESULT:" in prompt

    def test_custom_action_indonesian(self):
        prompt = build_prompt(CUSTOM_ACTION, "halo", "id", instruction="Ringkas")
        assert "Instruksi: Ringkas" in prompt
        assert "HASIL AKHIR:" in prompt

    def test_custom_instruction_with_braces(self):
        prompt = build_prompt(CUSTOM_ACTION, "x", "en", instruction="Wrap it in {curly} braces")
        assert "Wrap it in {curly} braces" in prompt

    def test_custom_without_instruction_raises(self):
        with pytest.raises(ValueError, match="instruction"):
            build_prompt(CUSTOM_ACTION, "hello", "en")
        with pytest.raises(ValueError):
            build_prompt(CUSTOM_ACTION, "hello", "en", instruction="   ")

    def test_empty_text_raises(self):
        with pytest.raises(ValueError, match="empty"):
            build_prompt("grammar", "", "en")

    def test_unknown_action_raises(self):
        with pytest.raises(ActionNotFoundError, match="Unknown action"):
            build_prompt("summarize", "hello", "en")

    def test_action_not_found_is_value_error(self):
        assert issubclass(ActionNotFoundError, ValueError)


# ---------------------------------------------------------------------------
# Prompts and parser agree on headers
# ---------------------------------------------------------------------------

class TestPromptParserAgreement:
    @pytest.mark.parametrize("language", ["en", "id"])
    @pytest.mark.parametrize("action_id", sorted(ACTION_REGISTRY))
    def test_reply_in_requested_format_parses(self, action_id, language):
        action = get_action(action_id)
        analysis = header_phrase(ANALYSIS, action.analysis_header, language)
        final = header_phrase(FINAL, action.final_header, language)
        prompt = build_prompt(action_id, "text", language, instruction="do it")
        assert analysis in prompt and final in prompt

        reply = f'{analysis}\nNotes about the change.\n\n{final}\n"The result."'
        result = parse_response(reply)
        assert result.comments == "Notes about the change."
        assert result.final_text == "The result."
