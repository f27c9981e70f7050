"""Language tag definitions.

Container stream tags use ISO 639-2 (``jpn``, ``eng``), which is what ffprobe
reports. Users often type ISO 639-1 codes (``ja``, ``en``), and subtitle
files are frequently named with them, so both forms are mapped here.

Reference: https://www.loc.gov/standards/iso639-2/php/code_list.php
"""

from __future__ import annotations

# fmt: off
# ISO 639-1 -> (ISO 639-2/B or /T tag as found in containers, name)
LANGUAGES: dict[str, tuple[str, str]] = {
    "ar": ("ara", "arabic"),      "bg": ("bul", "bulgarian"),   "ca": ("cat", "catalan"),
    "cs": ("ces", "czech"),       "da": ("dan", "danish"),      "de": ("deu", "german"),
    "el": ("ell", "greek"),       "en": ("eng", "english"),     "es": ("spa", "spanish"),
    "et": ("est", "estonian"),    "fa": ("fas", "persian"),     "fi": ("fin", "finnish"),
    "fr": ("fra", "french"),      "he": ("heb", "hebrew"),      "hi": ("hin", "hindi"),
    "hr": ("hrv", "croatian"),    "hu": ("hun", "hungarian"),   "id": ("ind", "indonesian"),
    "it": ("ita", "italian"),     "ja": ("jpn", "japanese"),    "ko": ("kor", "korean"),
    "lt": ("lit", "lithuanian"),  "lv": ("lav", "latvian"),     "ms": ("msa", "malay"),
    "nl": ("nld", "dutch"),       "no": ("nor", "norwegian"),   "pl": ("pol", "polish"),
    "pt": ("por", "portuguese"),  "ro": ("ron", "romanian"),    "ru": ("rus", "russian"),
    "sk": ("slk", "slovak"),      "sl": ("slv", "slovenian"),   "sr": ("srp", "serbian"),
    "sv": ("swe", "swedish"),     "th": ("tha", "thai"),        "tl": ("tgl", "tagalog"),
    "tr": ("tur", "turkish"),     "uk": ("ukr", "ukrainian"),   "vi": ("vie", "vietnamese"),
    "zh": ("zho", "chinese"),
}
# fmt: on

# Bibliographic variants some muxers write instead of the terminology tag.
_BIBLIOGRAPHIC: dict[str, str] = {
    "cze": "ces",
    "ger": "deu",
    "gre": "ell",
    "fre": "fra",
    "per": "fas",
    "may": "msa",
    "dut": "nld",
    "rum": "ron",
    "slo": "slk",
    "chi": "zho",
}

_BY_TAG: dict[str, str] = {tag: short for short, (tag, _) in LANGUAGES.items()}


def normalize_language(code: str) -> str:
    """Return the container tag for a language code.

    ``ja`` -> ``jpn``, ``fre`` -> ``fra``. Unknown codes are returned
    lowercased and otherwise unchanged, so custom tags still match exactly.
    """
    code = code.strip().lower()
    if code in LANGUAGES:
        return LANGUAGES[code][0]
    return _BIBLIOGRAPHIC.get(code, code)


def short_code(tag: str) -> str | None:
    """Return the ISO 639-1 code for a container tag, if known."""
    return _BY_TAG.get(normalize_language(tag))


def language_name(code: str) -> str:
    """Get the full language name for a code, or the code itself if unknown."""
    short = short_code(code)
    if short is None:
        return code
    return LANGUAGES[short][1]


def is_known_language(code: str) -> bool:
    return normalize_language(code) in _BY_TAG


def file_tags(code: str) -> list[str]:
    """Tags a subtitle file for this language may carry in its name."""
    tag = normalize_language(code)
    tags = [tag]
    short = short_code(tag)
    if short:
        tags.append(short)
    tags.extend(b for b, t in _BIBLIOGRAPHIC.items() if t == tag)
    return tags
