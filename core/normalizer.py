# /core/normalizer.py

import re
import unicodedata
from typing import List, Optional

_WHITESPACE = re.compile(r"\s+")
_TRAILING_SEPARATORS = re.compile(r"[\s,;:.\-\"']+$")
_EDGE_QUOTES_AND_SPACE = re.compile(r"^[\s\"']+|[\s\"']+$")


def _clean(text: str) -> str:
    # Any Unicode whitespace counts, not only the ASCII set.
    return _EDGE_QUOTES_AND_SPACE.sub("", _WHITESPACE.sub(" ", text))


def _title_case_word(word: str) -> str:
    # Hyphenated parts ("van-gogh") are cased independently.
    return "-".join(part[:1].title() + part[1:].lower() for part in word.split("-"))


def normalize_name(raw: Optional[str]) -> str:
    """
    Canonicalizes a free-text person name into the Artist merge key.

    "AACHEN, Hans von" and "Hans von Aachen" both become "Hans Von Aachen".
    The text before the first comma is the family name; everything after it
    is the given-name portion, any further commas acting as plain separators.
    Returns '' for empty input, which callers must never use as a merge key.
    """
    if not raw:
        return ""
    name = _clean(unicodedata.normalize("NFKC", str(raw)))
    if "," in name:
        last, _, given = name.partition(",")
        name = _clean(f"{given.replace(',', ' ')} {last}")
    name = _TRAILING_SEPARATORS.sub("", name)
    cased = " ".join(_title_case_word(word) for word in name.split(" ") if word)
    # Case mapping can decompose characters ("ΐ".title() is three code points).
    return unicodedata.normalize("NFKC", cased)


def name_variants(name: str) -> List[str]:
    """
    Deterministic lookup variants of a normalized name, in the order they are tried:
    the name itself, word order reversed, "Last, First", and the name without "the".
    """
    words = name.split()
    if not words:
        return []
    candidates = [
        name,
        " ".join(reversed(words)),
        f"{words[-1]}, {' '.join(words[:-1])}" if len(words) > 1 else "",
        " ".join(word for word in words if word.lower() != "the"),
    ]
    variants = []
    for candidate in candidates:
        if candidate and candidate not in variants:
            variants.append(candidate)
    return variants
