"""Language code normalization utilities.

Probe tools disagree on language tags: mkvmerge and ffprobe usually report
ISO 639-2 codes, MediaInfo reports ``ab``, ``abc`` or ``ab-CD`` tags. Every
tag is resolved against the ISO 639 table shipped with pycountry and reduced
to the ISO 639-2/B code that MKVToolNix writes.
"""

import re
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

import pycountry

UNDEFINED = "und"

# FFprobe and MKVToolNix use chi, not zho
LEGACY_ALIASES = {"zho": "chi"}


@dataclass(frozen=True)
class LanguageLookup:
    """Result of normalizing a raw language tag."""

    code: str  # ISO 639-2/B code, "und" when unresolved
    valid: bool  # False when the raw tag could not be resolved


def _get_language(**criteria):
    """pycountry lookup that returns None for unknown codes and fields."""
    try:
        return pycountry.languages.get(**criteria)
    except (KeyError, LookupError):
        return None


def _preferred_code(language) -> str:
    """Prefer the bibliographic code ('ger') over terminology ('deu')."""
    code = getattr(language, "bibliographic", None) or language.alpha_3
    return LEGACY_ALIASES.get(code, code)


@lru_cache(maxsize=1024)
def lookup_iso639(tag: str) -> Optional[str]:
    """Resolve a language tag to an ISO 639-2/B code.

    Args:
        tag: 2-letter, 3-letter or IETF style tag (e.g., 'en', 'ger', 'pt-BR')

    Returns:
        3-letter code, or None if the tag is not a known language
    """
    if not tag:
        return None

    code = tag.strip().lower()
    if code == UNDEFINED:
        return UNDEFINED

    # IETF tags, use the primary language subtag
    primary = re.split(r"[-_]", code, maxsplit=1)[0]

    if len(primary) == 2:
        language = _get_language(alpha_2=primary)
    elif len(primary) == 3:
        language = _get_language(alpha_3=primary) or _get_language(bibliographic=primary)
    else:
        return None

    if language is None:
        return None
    return _preferred_code(language)


def normalize_language(tag: Optional[str]) -> LanguageLookup:
    """Normalize a raw track language tag.

    Empty tags are undefined but valid; unknown tags are coerced to "und" and
    reported as invalid so parsers can flag the track.
    """
    if tag is None or not tag.strip():
        return LanguageLookup(UNDEFINED, True)

    code = lookup_iso639(tag)
    if code is None:
        return LanguageLookup(UNDEFINED, False)
    return LanguageLookup(code, True)


def convert_iso639_1_to_2(code: str) -> str:
    """Convert ISO 639-1 (2-letter) code to ISO 639-2/B (3-letter).

    Args:
        code: 2-letter language code (e.g., 'en')

    Returns:
        3-letter language code (e.g., 'eng'), or original if not found
    """
    if not code:
        return code

    return lookup_iso639(code) or code.lower()


def language_name_to_code(name: str) -> str:
    """Convert an English language name or code to ISO 639-2/B.

    Args:
        name: Language name or code (e.g., "Japanese", "ja", "jpn")

    Returns:
        3-letter code (e.g., "jpn"), or lowercased input if not found
    """
    if not name:
        return name

    code = lookup_iso639(name)
    if code is not None:
        return code

    language = _get_language(name=name.strip())
    if language is None:
        return name.lower()
    return _preferred_code(language)
