"""PII Anonymizer — local, regex-based PII detection and synthetic replacement."""

from .patterns import detect_pii, deduplicate
from .anonymizer import anonymize_text, assign_replacements, normalize_value
from .generators import ReplacementContext, create_replacement_context, generate_replacement_value
from .session import AnonymizationSession
from .config import create_session, load_config, load_from_yaml
from .types import (
    ENTITY_TYPES, REPLACEMENT_STYLES,
    AnonymizedEntity, DetectedEntity, EntityType, ReplacementStyle,
)

__all__ = [
    "detect_pii", "deduplicate",
    "assign_replacements", "anonymize_text", "normalize_value",
    "ReplacementContext", "create_replacement_context", "generate_replacement_value",
    "AnonymizationSession",
    "create_session", "load_config", "load_from_yaml",
    "ENTITY_TYPES", "REPLACEMENT_STYLES",
    "DetectedEntity", "AnonymizedEntity", "EntityType", "ReplacementStyle",
]
__version__ = "0.1.0"
