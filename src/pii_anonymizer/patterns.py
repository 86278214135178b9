"""Pattern detectors — regex and lexicon scanners, one per entity type.

Detection is heuristic: structured values (emails, phones, identifiers)
come from regexes, names/companies/cities from fixed lexicons plus a
couple of capitalization shapes.  Detectors run independently and may
return overlapping spans; only exact duplicates are removed here.
"""

from __future__ import annotations
import logging
import re
from collections import Counter
from collections.abc import Iterable, Iterator, Mapping
from typing import Callable

from .lexicons import (
    CITY_NAMES,
    COMPANY_LEGAL_FORMS,
    COMPANY_NAMES,
    FRENCH_FIRST_NAMES,
    STREET_PREFIXES,
)
from .types import ENTITY_TYPES, DetectedEntity, new_entity_id

logger = logging.getLogger(__name__)

_UPPER = "A-ZÀ-ÖØ-Þ"
_LOWER = "a-zß-öø-ÿ'\\-"


def _word_regex(words: Iterable[str]) -> re.Pattern:
    """Whole-word, case-sensitive alternation over a lexicon."""
    alternatives = "|".join(re.escape(w) for w in sorted(words, key=len, reverse=True))
    return re.compile(rf"\b(?:{alternatives})\b")


_EMAIL = re.compile(r"(?<![A-Za-z0-9._%+\-])[A-Za-z0-9._%+\-]+@[A-Za-z0-9.\-]+\.[A-Za-z]{2,}")

_PHONE = re.compile(
    r"(?<!\w)"
    r"(?:\+33[ .\-]?|0)[1-9]"
    r"(?:[ .\-]?\d{2}){4}"
    r"(?!\d)"
)

_IDENTIFIERS = (
    # IBAN, simplified: FR + 2 check digits + 5 groups of 4
    re.compile(r"\bFR\d{2}(?:\s?\d{4}){5}(?!\d)"),
    # payment card: 4 groups of 4 digits
    re.compile(r"(?<!\d)(?:\d{4}[ \-]?){3}\d{4}(?!\d)"),
    # social security number: 13 digits, optionally followed by the 2-digit key
    re.compile(r"(?<!\d)[12]\s?\d{2}\s?\d{2}\s?\d{2}\s?\d{3}\s?\d{3}(?:\s?\d{2})?(?!\d)"),
)

_COMPANY_LIST = _word_regex(COMPANY_NAMES)
_COMPANY_LEGAL_FORM = re.compile(
    rf"\b[{_UPPER}][\w'\-]+(?:\s+[{_UPPER}][\w'\-]+){{0,5}}"
    rf"\s+(?:{'|'.join(re.escape(f) for f in COMPANY_LEGAL_FORMS)})\b"
)

_CITY_LIST = _word_regex(CITY_NAMES)
_STREET = re.compile(
    rf"\b(?:{'|'.join(re.escape(p) for p in STREET_PREFIXES)})"
    rf"\s+(?:(?:de|du|des|la|le)\s+|[ld]')*[{_UPPER}][^,\n]*"
)
_STREET_TRAILING = " \t\r.;:!?"

_FIRST_NAME_LIST = _word_regex(FRENCH_FIRST_NAMES)
_FULL_NAME = re.compile(rf"\b[{_UPPER}][{_LOWER}]+\s+[{_UPPER}][{_LOWER}]+")

Span = tuple[int, int]


def _spans(text: str, *patterns: re.Pattern) -> Iterator[Span]:
    for pattern in patterns:
        for m in pattern.finditer(text):
            yield m.start(), m.end()


# ── Detectors ────────────────────────────────────────────────────────

def _detect_email(text: str) -> Iterator[Span]:
    return _spans(text, _EMAIL)


def _detect_phone(text: str) -> Iterator[Span]:
    return _spans(text, _PHONE)


def _detect_identifier(text: str) -> Iterator[Span]:
    return _spans(text, *_IDENTIFIERS)


def _detect_company(text: str) -> Iterator[Span]:
    return _spans(text, _COMPANY_LIST, _COMPANY_LEGAL_FORM)


def _detect_location(text: str) -> Iterator[Span]:
    yield from _spans(text, _CITY_LIST)
    for start, end in _spans(text, _STREET):
        # the street name runs to the end of the clause; drop trailing punctuation
        while end > start and text[end - 1] in _STREET_TRAILING:
            end -= 1
        yield start, end


def _detect_person(text: str) -> Iterator[Span]:
    return _spans(text, _FIRST_NAME_LIST, _FULL_NAME)


# Order matters: it is the tie-break order for entities sharing a start offset.
_DETECTORS: list[tuple[str, Callable[[str], Iterable[Span]]]] = [
    ("email", _detect_email),
    ("phone", _detect_phone),
    ("identifier", _detect_identifier),
    ("company", _detect_company),
    ("location", _detect_location),
    ("person", _detect_person),
]


def detect_pii(
    text: str,
    enabled: Mapping[str, bool] | None = None,
) -> list[DetectedEntity]:
    """Run every enabled detector against text.

    Args:
        text: Raw input text.  Empty or None yields no entities.
        enabled: Partial map entity type → bool.  Missing types are enabled;
            disabled detectors are not run at all.

    Returns exact-duplicate-free entities sorted by start offset.
    """
    if not text:
        return []
    flags = {t: True for t in ENTITY_TYPES}
    flags.update(enabled or {})

    detections: list[DetectedEntity] = []
    for entity_type, detector in _DETECTORS:
        if not flags[entity_type]:
            continue
        for start, end in detector(text):
            value = text[start:end]
            if not value.strip():
                continue
            detections.append(DetectedEntity(
                id=new_entity_id(),
                type=entity_type,
                value=value,
                start=start,
                end=end,
            ))

    unique = deduplicate(detections)
    if logger.isEnabledFor(logging.DEBUG):
        counts = Counter(e.type for e in unique)
        logger.debug("Detected %d entities in %d chars: %s", len(unique), len(text), dict(counts))
    return unique


def deduplicate(entities: Iterable[DetectedEntity]) -> list[DetectedEntity]:
    """Drop entities repeating an earlier (type, start, end); sort by start.

    Partially overlapping spans are kept.
    """
    seen: set[tuple[str, int, int]] = set()
    unique: list[DetectedEntity] = []
    for entity in entities:
        key = (entity.type, entity.start, entity.end)
        if key in seen:
            continue
        seen.add(key)
        unique.append(entity)
    return sorted(unique, key=lambda e: e.start)
