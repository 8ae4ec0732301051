"""Read-only language tables and filename heuristics for subtitle tracks."""

from __future__ import annotations

import re
from collections.abc import Sequence
from types import MappingProxyType

from guessit import guessit

ALL_LANGUAGES = "all"

# Filename token -> ISO 639-1 code.
_FILENAME_TOKENS = MappingProxyType(
    {
        "english": "en",
        "eng": "en",
        "en": "en",
        "spanish": "es",
        "esp": "es",
        "spa": "es",
        "es": "es",
        "french": "fr",
        "fra": "fr",
        "fre": "fr",
        "fr": "fr",
        "portuguese": "pt",
        "por": "pt",
        "pt": "pt",
        "german": "de",
        "ger": "de",
        "deu": "de",
        "de": "de",
        "italian": "it",
        "ita": "it",
        "it": "it",
        "japanese": "ja",
        "jpn": "ja",
        "jp": "ja",
        "ja": "ja",
    }
)

LANGUAGE_LABELS = MappingProxyType(
    {
        "en": "English",
        "es": "Spanish",
        "fr": "French",
        "pt": "Portuguese",
        "it": "Italian",
        "de": "German",
        "ja": "Japanese",
        "ko": "Korean",
        "zh": "Chinese",
        "ar": "Arabic",
        "ru": "Russian",
    }
)

# ISO 639-1 -> ISO 639-2/B, as used by the legacy OpenSubtitles REST API.
_ISO639_2 = MappingProxyType(
    {
        "en": "eng",
        "es": "spa",
        "fr": "fre",
        "pt": "por",
        "de": "ger",
        "it": "ita",
        "ja": "jpn",
        "ko": "kor",
        "zh": "chi",
        "ar": "ara",
        "ru": "rus",
    }
)
_ISO639_1 = MappingProxyType({v: k for k, v in _ISO639_2.items()} | {"deu": "de", "fra": "fr"})

_TOKEN_SPLIT_RE = re.compile(r"[^a-z]+")
# Leading episode key ("AR_3", "JA_1"); arc prefixes can collide with language codes.
_EPISODE_KEY_RE = re.compile(r"^[A-Za-z]+_\d+")

# Official tracks without any language marker are English.
DEFAULT_LANGUAGE = "en"


def _language_code(lang_obj: object) -> str | None:
    """Extract a 2-letter language code from a guessit Language object."""
    alpha2 = getattr(lang_obj, "alpha2", None)
    if alpha2:
        return str(alpha2)
    alpha3 = getattr(lang_obj, "alpha3", None)
    if alpha3:
        return to_iso639_1(str(alpha3))
    return None


def _language_from_guessit(filename: str) -> str | None:
    sub_langs = guessit(filename).get("subtitle_language")
    if not sub_langs:
        return None
    lang_obj = sub_langs if not isinstance(sub_langs, list) else sub_langs[0]
    return _language_code(lang_obj)


def _language_from_tokens(filename: str) -> str | None:
    stem = filename.rsplit(".", 1)[0] if "." in filename else filename
    stem = _EPISODE_KEY_RE.sub("", stem).lower()
    tokens = [t for t in _TOKEN_SPLIT_RE.split(stem) if t]
    for token in reversed(tokens):
        if token in _FILENAME_TOKENS:
            return _FILENAME_TOKENS[token]
        if token in LANGUAGE_LABELS:
            return token
        if token in _ISO639_1:
            return _ISO639_1[token]
    return None


def language_from_filename(filename: str) -> str | None:
    """Guess the ISO 639-1 language of a subtitle file from its name.

    Priority: 1) guessit's ``subtitle_language`` (``RO_1.ru.srt`` -> ``ru``),
    2) whole-word tokens (``Romance Dawn 01 [GER].srt`` -> ``de``).
    Returns None when the name carries no recognizable language.
    """
    return _language_from_guessit(filename) or _language_from_tokens(filename)


def language_label(code: str) -> str:
    """Human-readable label for an ISO 639-1 code."""
    return LANGUAGE_LABELS.get(code, code.upper())


def to_iso639_2(code: str) -> str:
    """Map an ISO 639-1 code to ISO 639-2/B (unknown codes pass through)."""
    if code == ALL_LANGUAGES:
        return code
    return _ISO639_2.get(code, code)


def to_iso639_1(code: str) -> str:
    """Normalize a 2- or 3-letter language code to ISO 639-1."""
    code = code.strip().lower()
    if len(code) == 2:
        return code
    return _ISO639_1.get(code, code)


def wants_language(requested: Sequence[str], code: str) -> bool:
    """True when *code* is covered by the requested language set."""
    return ALL_LANGUAGES in requested or code in requested
