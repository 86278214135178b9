"""Anonymizer — the main API.  Detect, assign replacements, rebuild text.

Usage:
    from pii_anonymizer import detect_pii, assign_replacements, anonymize_text

    text = "Paul travaille chez Orange à Paris"
    entities = assign_replacements(detect_pii(text))
    print(anonymize_text(text, entities))   # e.g. "Sophie Leroy travaille chez ..."

    # After an edit, pass the previous entities to keep replacements stable
    text = "Paul a quitté Orange"
    entities = assign_replacements(detect_pii(text), previous=entities)

All functions are pure: state between calls lives in the ``previous``
entities the caller threads through.
"""

from __future__ import annotations
import logging
from collections.abc import Sequence

from .generators import ReplacementContext, create_replacement_context, generate_replacement_value
from .types import AnonymizedEntity, DetectedEntity

logger = logging.getLogger(__name__)


def normalize_value(value: str) -> str:
    """Key used to keep replacements coherent across occurrences."""
    return value.strip().lower()


def assign_replacements(
    detected: Sequence[DetectedEntity],
    *,
    previous: Sequence[AnonymizedEntity] | None = None,
    style: str = "french",
    context: ReplacementContext | None = None,
) -> list[AnonymizedEntity]:
    """Give every detected entity a replacement, reusing earlier ones.

    Lookup order for each entity:
      1. a previous entity with the same (start, end, value); its type and
         replacement are kept, which preserves user edits while the text
         has not shifted;
      2. a previous entity with the same normalized value;
      3. a freshly generated value.

    Entities sharing a normalized value always come out with the same
    replacement.  Returned entities keep the input order and are never
    manual; merging manual entities back is up to the caller.
    """
    previous = previous or []
    context = context or create_replacement_context()

    by_signature = {_signature(e): e for e in previous}
    by_value: dict[str, str] = {}
    for e in previous:
        if e.replacement:
            by_value[normalize_value(e.value)] = e.replacement

    # Signature matches claim their value first so a later exact match
    # cannot split a value already handed out earlier in this pass.
    in_pass: dict[str, str] = {}
    for entity in detected:
        prev = by_signature.get(_signature(entity))
        if prev is not None and prev.replacement:
            in_pass.setdefault(normalize_value(entity.value), prev.replacement)

    generated = 0
    out: list[AnonymizedEntity] = []
    for entity in detected:
        prev = by_signature.get(_signature(entity))
        entity_type = prev.type if prev is not None else entity.type
        key = normalize_value(entity.value)
        replacement = in_pass.get(key) or by_value.get(key)
        if not replacement:
            replacement = generate_replacement_value(entity_type, entity.value, style, context)
            generated += 1
        in_pass[key] = replacement
        out.append(AnonymizedEntity(
            id=entity.id,
            type=entity_type,
            value=entity.value,
            start=entity.start,
            end=entity.end,
            replacement=replacement,
            manual=False,
        ))

    logger.debug(
        "Assigned %d replacements (%d generated, style=%s)", len(out), generated, style,
    )
    return out


def anonymize_text(text: str, entities: Sequence[AnonymizedEntity]) -> str:
    """Rebuild text with every entity swapped for its replacement.

    Phase 1 splices entities that have a span, left to right.  An entity
    starting inside an already-replaced span is skipped; at equal starts
    the longest span goes first.

    Phase 2 replaces the literal value of every span-less (manual) entity
    everywhere in the result, in list order.  A later substitution can
    match text produced by an earlier one.
    """
    if not text:
        return ""
    if not entities:
        return text

    spanned = sorted(
        (e for e in entities if e.start >= 0 and e.end >= e.start),
        key=lambda e: (e.start, -e.end),
    )
    parts: list[str] = []
    cursor = 0
    skipped = 0
    for entity in spanned:
        if entity.start < cursor:
            skipped += 1
            continue
        parts.append(text[cursor:entity.start])
        parts.append(entity.replacement)
        cursor = entity.end
    parts.append(text[cursor:])
    result = "".join(parts)
    if skipped:
        logger.debug("Skipped %d overlapping entities", skipped)

    for entity in entities:
        if entity.start >= 0 and entity.end >= 0:
            continue
        if not entity.value:
            continue
        result = result.replace(entity.value, entity.replacement)

    return result


def _signature(entity: DetectedEntity) -> tuple[int, int, str]:
    return (entity.start, entity.end, entity.value)
