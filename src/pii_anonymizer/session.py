"""Session — keeps text, settings and entities between detection refreshes.

The pipeline functions are stateless; an editor calling them on every
keystroke has to thread the previous entities, manual additions and user
edits through itself.  AnonymizationSession does that bookkeeping:

    session = AnonymizationSession(style="labels")
    session.update("Paul travaille chez Orange")
    session.add_manual("Projet Lune", "company", replacement="Projet X")
    session.update("Paul a quitté Orange pour le Projet Lune")
    print(session.render())

Not thread-safe; use one session per document.
"""

from __future__ import annotations
import dataclasses
import logging
import random
from collections.abc import Mapping
from dataclasses import dataclass, field

from .anonymizer import anonymize_text, assign_replacements, normalize_value
from .generators import ReplacementContext, generate_replacement_value
from .patterns import detect_pii
from .types import (
    ENTITY_TYPES,
    REPLACEMENT_STYLES,
    AnonymizedEntity,
    check_entity_type,
    new_entity_id,
)

logger = logging.getLogger(__name__)

DEFAULT_LARGE_INPUT_THRESHOLD = 5000


@dataclass
class AnonymizationSession:
    """Caller-side state for one document being anonymized."""

    style: str = "french"
    enabled: dict[str, bool] = field(default_factory=lambda: dict.fromkeys(ENTITY_TYPES, True))
    large_input_threshold: int = DEFAULT_LARGE_INPUT_THRESHOLD
    rng: random.Random = field(default_factory=random.Random)

    text: str = field(default="", init=False)
    _auto: list[AnonymizedEntity] = field(default_factory=list, init=False, repr=False)
    _manual: list[AnonymizedEntity] = field(default_factory=list, init=False, repr=False)
    # (type, normalized value) pairs the user removed
    _dismissed: set[tuple[str, str]] = field(default_factory=set, init=False, repr=False)

    def __post_init__(self) -> None:
        if self.style not in REPLACEMENT_STYLES:
            raise ValueError(f"Unknown replacement style: {self.style!r}")

    # ------------------------------------------------------------------
    # Detection refresh
    # ------------------------------------------------------------------

    def update(
        self,
        text: str | None = None,
        *,
        enabled: Mapping[str, bool] | None = None,
    ) -> list[AnonymizedEntity]:
        """Re-detect after a text or enabled-type change.

        Replacements of values that are still present are kept, manual
        entities are carried over untouched.  Clearing the text drops
        every entity.
        """
        if text is not None:
            self.text = text
            self._unpin_stale_manual()
        if enabled:
            for entity_type, flag in enabled.items():
                self.enabled[check_entity_type(entity_type)] = bool(flag)

        if not self.text:
            self.clear()
            return []

        if len(self.text) > self.large_input_threshold:
            logger.warning(
                "Input is %d characters (threshold %d); detection may be slow",
                len(self.text), self.large_input_threshold,
            )

        manual_spans = {(m.start, m.end) for m in self._manual if m.has_span}
        detected = [
            d for d in detect_pii(self.text, self.enabled)
            if (d.type, normalize_value(d.value)) not in self._dismissed
            and (d.start, d.end) not in manual_spans
        ]
        self._auto = assign_replacements(
            detected,
            previous=self._auto + self._manual,
            style=self.style,
            context=self._context(),
        )
        return self.entities

    def set_style(self, style: str) -> list[AnonymizedEntity]:
        """Switch style and regenerate every automatic replacement."""
        if style not in REPLACEMENT_STYLES:
            raise ValueError(f"Unknown replacement style: {style!r}")
        self.style = style
        self._auto = assign_replacements(
            self._auto,
            previous=self._manual,
            style=style,
            context=self._context(),
        )
        return self.entities

    # ------------------------------------------------------------------
    # User edits
    # ------------------------------------------------------------------

    def add_manual(
        self,
        value: str,
        entity_type: str = "person",
        replacement: str | None = None,
        *,
        start: int = -1,
        end: int = -1,
    ) -> AnonymizedEntity:
        """Flag a value the detectors missed.

        Without an explicit replacement the value reuses the one already
        assigned to it, or gets a fresh one.  The replacement is then
        applied to every entity sharing the normalized value.
        """
        check_entity_type(entity_type)
        if not value.strip():
            raise ValueError("Manual entity value must not be blank")
        key = normalize_value(value)
        if replacement is None:
            replacement = self._replacement_for(key) or generate_replacement_value(
                entity_type, value, self.style, self._context(),
            )
        entity = AnonymizedEntity(
            id=new_entity_id(),
            type=entity_type,
            value=value,
            start=start,
            end=end,
            replacement=replacement,
            manual=True,
        )
        self._dismissed.discard((entity_type, key))
        self._manual.append(entity)
        self._propagate(key, replacement)
        logger.debug("Added manual %s entity", entity_type)
        return entity

    def set_replacement(self, entity_id: str, replacement: str) -> None:
        """Override a replacement for every occurrence of that value."""
        entity = self._find(entity_id)
        self._propagate(normalize_value(entity.value), replacement)

    def regenerate(self, entity_id: str) -> str:
        """Draw a new replacement for the entity's value."""
        entity = self._find(entity_id)
        replacement = generate_replacement_value(
            entity.type, entity.value, self.style, self._context(),
        )
        self._propagate(normalize_value(entity.value), replacement)
        return replacement

    def remove(self, entity_id: str) -> None:
        """Drop an entity.

        Removing a detected entity dismisses its value: every occurrence
        of it goes and later refreshes do not detect it again.
        """
        entity = self._find(entity_id)
        if entity.manual:
            self._manual = [m for m in self._manual if m.id != entity_id]
            return
        dismissed = (entity.type, normalize_value(entity.value))
        self._dismissed.add(dismissed)
        self._auto = [
            e for e in self._auto
            if (e.type, normalize_value(e.value)) != dismissed
        ]

    def clear(self) -> None:
        self.text = ""
        self._auto = []
        self._manual = []
        self._dismissed.clear()

    # ------------------------------------------------------------------
    # Output
    # ------------------------------------------------------------------

    @property
    def entities(self) -> list[AnonymizedEntity]:
        """Automatic entities followed by manual ones in order of addition."""
        return self._auto + self._manual

    def render(self) -> str:
        return anonymize_text(self.text, self.entities)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _context(self) -> ReplacementContext:
        """Context whose label numbers continue after the ones already shown."""
        context = ReplacementContext(rng=self.rng)
        context.skip_used_labels(e.replacement for e in self.entities)
        return context

    def _find(self, entity_id: str) -> AnonymizedEntity:
        for entity in self.entities:
            if entity.id == entity_id:
                return entity
        raise KeyError(entity_id)

    def _replacement_for(self, key: str) -> str | None:
        for entity in self.entities:
            if entity.replacement and normalize_value(entity.value) == key:
                return entity.replacement
        return None

    def _propagate(self, key: str, replacement: str) -> None:
        def apply(entities: list[AnonymizedEntity]) -> list[AnonymizedEntity]:
            return [
                dataclasses.replace(e, replacement=replacement)
                if normalize_value(e.value) == key else e
                for e in entities
            ]
        self._auto = apply(self._auto)
        self._manual = apply(self._manual)

    def _unpin_stale_manual(self) -> None:
        self._manual = unpin_stale_manual(self.text, self._manual)


def unpin_stale_manual(
    text: str,
    manual: list[AnonymizedEntity],
) -> list[AnonymizedEntity]:
    """Manual spans that no longer hold their value fall back to literal matching."""
    return [
        dataclasses.replace(m, start=-1, end=-1)
        if m.has_span and text[m.start:m.end] != m.value else m
        for m in manual
    ]
