"""Synthetic replacement values, one family per replacement style.

    ctx = create_replacement_context(seed=42)   # deterministic
    generate_replacement_value("person", "Paul", "french", ctx)   # e.g. "Léa Moreau"
    generate_replacement_value("email", "", "labels", ctx)        # "Email 1"

Without a context every call draws from a fresh, unseeded generator.
"""

from __future__ import annotations
import random
import re
import unicodedata
from collections.abc import Iterable
from dataclasses import dataclass, field

from .lexicons import (
    CITY_NAMES,
    COMPANY_CORES,
    COMPANY_PREFIXES,
    COMPANY_SUFFIXES,
    FRENCH_FIRST_NAMES,
    FRENCH_LAST_NAMES,
    NEUTRAL_FIRST_NAMES,
    PHONE_PREFIXES,
    TYPE_LABELS,
)
from .types import ENTITY_TYPES, REPLACEMENT_STYLES, check_entity_type

EMAIL_DOMAIN = "exemple.com"

# Redraws allowed when a candidate would reintroduce the raw value
MAX_DRAWS = 12

_LABEL_TYPES = {label: t for t, label in TYPE_LABELS.items()}
_LABEL_NUMBER = re.compile(rf"({'|'.join(re.escape(l) for l in _LABEL_TYPES)}) (\d+)")


@dataclass
class ReplacementContext:
    """Per-pass generation state: label counters and the random source."""
    rng: random.Random = field(default_factory=random.Random)
    counters: dict[str, int] = field(default_factory=lambda: dict.fromkeys(ENTITY_TYPES, 0))

    def next_label_number(self, entity_type: str) -> int:
        self.counters[entity_type] = self.counters.get(entity_type, 0) + 1
        return self.counters[entity_type]

    def skip_used_labels(self, replacements: Iterable[str]) -> None:
        """Continue label numbering after the highest "<Label> N" already in use."""
        for replacement in replacements:
            m = _LABEL_NUMBER.fullmatch(replacement)
            if m:
                entity_type = _LABEL_TYPES[m.group(1)]
                self.counters[entity_type] = max(self.counters.get(entity_type, 0), int(m.group(2)))


def create_replacement_context(seed: int | None = None) -> ReplacementContext:
    """Fresh context; pass a seed for reproducible values."""
    return ReplacementContext(rng=random.Random(seed))


def generate_replacement_value(
    entity_type: str,
    value: str = "",
    style: str = "french",
    context: ReplacementContext | None = None,
) -> str:
    """Return a synthetic stand-in for one entity.

    Args:
        entity_type: One of ENTITY_TYPES.
        value: The raw value being replaced.  Realistic styles redraw (up to
            MAX_DRAWS times) any candidate that equals it or contains one of
            its words, so "Paul" never comes back as "Paul Garcia".
        style: "french", "neutral" or "labels".
        context: Shared per-pass state.  Label numbers are sequential only
            within one context.

    Raises:
        ValueError: unknown entity type or style.
    """
    check_entity_type(entity_type)
    if style not in REPLACEMENT_STYLES:
        raise ValueError(f"Unknown replacement style: {style!r}")
    rng = context.rng if context is not None else random.Random()

    if style == "labels":
        n = context.next_label_number(entity_type) if context is not None else rng.randint(1, 50)
        return f"{TYPE_LABELS[entity_type]} {n}"

    forbidden = _forbidden_words(entity_type, value)
    candidate = _draw(entity_type, style, rng)
    for _ in range(MAX_DRAWS - 1):
        if not _reuses(candidate, forbidden):
            break
        candidate = _draw(entity_type, style, rng)
    return candidate


def _draw(entity_type: str, style: str, rng: random.Random) -> str:
    if entity_type == "person":
        return _person_name(style, rng)
    if entity_type == "company":
        return " ".join((
            rng.choice(COMPANY_PREFIXES),
            rng.choice(COMPANY_CORES),
            rng.choice(COMPANY_SUFFIXES),
        ))
    if entity_type == "location":
        return rng.choice(CITY_NAMES)
    if entity_type == "email":
        first, last = _person_name(style, rng).split(" ", 1)
        return f"{_slugify(f'{first}.{last}')}@{EMAIL_DOMAIN}"
    if entity_type == "phone":
        return _phone_number(rng)
    return _identifier(rng)


def _forbidden_words(entity_type: str, value: str) -> set[str]:
    key = value.strip().lower()
    if not key:
        return set()
    words = {key}
    # each word of a name counts, not only the whole value
    if entity_type in ("person", "company", "location"):
        words.update(re.findall(r"[^\W\d_]{2,}", key))
    return words


def _reuses(candidate: str, forbidden: set[str]) -> bool:
    lowered = candidate.lower()
    return any(
        lowered == word or re.search(rf"(?<!\w){re.escape(word)}(?!\w)", lowered)
        for word in forbidden
    )


def _person_name(style: str, rng: random.Random) -> str:
    first_names = NEUTRAL_FIRST_NAMES if style == "neutral" else FRENCH_FIRST_NAMES
    return f"{rng.choice(first_names)} {rng.choice(FRENCH_LAST_NAMES)}"


def _phone_number(rng: random.Random) -> str:
    # "06 12 34 56 78"
    digits = rng.choice(PHONE_PREFIXES) + "".join(str(rng.randrange(10)) for _ in range(8))
    return " ".join(digits[i:i + 2] for i in range(0, len(digits), 2))


def _identifier(rng: random.Random) -> str:
    # IBAN-shaped, no valid checksum: "FR76 1234 5678 9012 3456 7890"
    def digits(n: int) -> str:
        return "".join(str(rng.randrange(10)) for _ in range(n))
    return "FR" + digits(2) + " " + " ".join(digits(4) for _ in range(5))


def _slugify(value: str) -> str:
    ascii_value = unicodedata.normalize("NFKD", value).encode("ascii", "ignore").decode("ascii")
    ascii_value = re.sub(r"[^\w\s.\-]", "", ascii_value).strip()
    return re.sub(r"\s+", ".", ascii_value).lower()
