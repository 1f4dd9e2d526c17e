# lingua_relay/core/language.py
# -*- coding: utf-8 -*-
"""
Lingua Relay — Language policy
------------------------------
Maps a target language code to the instruction text that forces the model
to answer in that language only.

The instruction text is two parts joined by a space:
- a shared directive (answer only in <Language>, whatever language the user
  writes in, keep conversational context), and
- a code-specific directive written in the target language itself.

Unknown codes raise UnsupportedLanguageError; nothing falls back silently.
"""

from __future__ import annotations

from typing import Dict, FrozenSet

from lingua_relay.core.errors import UnsupportedLanguageError

LANGUAGE_NAMES: Dict[str, str] = {
    "en": "English",
    "fr": "French",
    "es": "Spanish",
    "ja": "Japanese",
    "ar": "Arabic",
}

SUPPORTED_LANGUAGES: FrozenSet[str] = frozenset(LANGUAGE_NAMES)

_SPECIFIC_INSTRUCTIONS: Dict[str, str] = {
    "en": "Respond in English only. Use proper English grammar and vocabulary.",
    "fr": "Répondez uniquement en français. Utilisez une grammaire et un vocabulaire français corrects.",
    "es": "Responde únicamente en español. Usa gramática y vocabulario español correctos.",
    "ja": "日本語でのみ回答してください。正しい日本語の文法と語彙を使用してください。",
    "ar": "أجب باللغة العربية فقط. استخدم قواعد اللغة العربية والمفردات الصحيحة.",
}

_BASE_TEMPLATE = (
    "You are a helpful AI assistant. You MUST respond ONLY in {name}. "
    "Do not use any other language. "
    "Always respond in {name} regardless of what language the user writes in. "
    "Maintain conversational context and handle follow-up questions naturally, "
    "but always in {name}."
)


def is_supported(code: object) -> bool:
    return isinstance(code, str) and code in SUPPORTED_LANGUAGES


def language_name(code: str) -> str:
    """Return the English display name for `code` ("fr" -> "French")."""
    if not is_supported(code):
        raise UnsupportedLanguageError(code)
    return LANGUAGE_NAMES[code]


def get_language_instructions(code: str) -> str:
    """
    Build the system instructions for the given target language.

    Raises
    ------
    UnsupportedLanguageError
        If `code` is not one of SUPPORTED_LANGUAGES.
    """
    name = language_name(code)
    return f"{_BASE_TEMPLATE.format(name=name)} {_SPECIFIC_INSTRUCTIONS[code]}"


def build_user_input(message: str, code: str) -> str:
    """Wrap the raw user message with an explicit reminder of the output language."""
    name = language_name(code)
    return f"User message: {message}\n\nPlease respond in {name} only."


if __name__ == "__main__":
    # Minimal self-test:  python -m lingua_relay.core.language
    print("Lingua Relay — language policy self-test\n")
    for code in sorted(SUPPORTED_LANGUAGES):
        print(f"[{code}] {language_name(code)}")
        print(f"  {get_language_instructions(code)}\n")
    print(repr(build_user_input("Hello", "fr")))
