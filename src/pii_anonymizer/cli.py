"""CLI interface for pii-anonymizer.

Usage:
    # Detect entities (stdin: text, stdout: JSON entity list)
    echo 'Paul travaille chez Orange à Paris' | pii-anonymizer detect

    # Anonymize (stdout: {"text": ..., "entities": [...]})
    echo 'Écrire à paul@acme.fr' | pii-anonymizer --style labels anonymize

    # Keep replacements stable across runs on an edited text
    pii-anonymizer anonymize --state entities.json < draft.txt

    # One synthetic value
    pii-anonymizer --seed 7 generate person

Everything runs locally; --state is the only file written.
"""

from __future__ import annotations
import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any

import yaml

from .anonymizer import anonymize_text, assign_replacements
from .config import load_config, load_from_yaml
from .generators import create_replacement_context, generate_replacement_value
from .patterns import detect_pii
from .session import unpin_stale_manual
from .types import ENTITY_TYPES, REPLACEMENT_STYLES, AnonymizedEntity

logger = logging.getLogger("pii_anonymizer.cli")


def _settings(args: argparse.Namespace) -> dict[str, Any]:
    cfg = load_from_yaml(args.config) if args.config else load_config({})
    if args.style:
        cfg["style"] = args.style
    if args.skip_types:
        skip = {t.strip() for t in args.skip_types.split(",") if t.strip()}
        cfg["enabled"] = load_config({"skip_types": sorted(skip)})["enabled"]
    return cfg


def _dump(data: Any) -> None:
    json.dump(data, sys.stdout, ensure_ascii=False)
    sys.stdout.write("\n")


def _load_state(path: Path) -> list[AnonymizedEntity]:
    if not path.exists():
        return []
    raw = json.loads(path.read_text(encoding="utf-8") or "[]") or []
    if not isinstance(raw, list):
        raise ValueError(f"{path}: state must be a JSON list of entities")
    return [AnonymizedEntity.from_dict(item) for item in raw]


def cmd_detect(args: argparse.Namespace) -> None:
    """Print the entities detected in stdin."""
    cfg = _settings(args)
    entities = detect_pii(sys.stdin.read(), cfg["enabled"])
    _dump([e.to_dict() for e in entities])


def cmd_anonymize(args: argparse.Namespace) -> None:
    """Anonymize stdin, optionally reusing replacements from a state file."""
    cfg = _settings(args)
    state = Path(args.state) if args.state else None
    previous = _load_state(state) if state else []

    text = sys.stdin.read()
    if len(text) > cfg["large_input_threshold"]:
        logger.warning("Input is %d characters; detection may be slow", len(text))

    manual = unpin_stale_manual(text, [e for e in previous if e.manual])
    manual_spans = {(m.start, m.end) for m in manual if m.has_span}
    detected = [
        d for d in detect_pii(text, cfg["enabled"])
        if (d.start, d.end) not in manual_spans
    ]
    context = create_replacement_context(args.seed)
    context.skip_used_labels(e.replacement for e in previous)
    entities = assign_replacements(
        detected,
        previous=[e for e in previous if not e.manual] + manual,
        style=cfg["style"],
        context=context,
    ) + manual

    if state:
        state.parent.mkdir(parents=True, exist_ok=True)
        state.write_text(
            json.dumps([e.to_dict() for e in entities], ensure_ascii=False, indent=2),
            encoding="utf-8",
        )
    _dump({
        "text": anonymize_text(text, entities),
        "entities": [e.to_dict() for e in entities],
    })


def cmd_generate(args: argparse.Namespace) -> None:
    """Print one synthetic replacement value."""
    cfg = _settings(args)
    context = create_replacement_context(args.seed)
    sys.stdout.write(generate_replacement_value(args.type, args.value, cfg["style"], context))
    sys.stdout.write("\n")


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="pii-anonymizer",
        description="Local PII detection and anonymization",
    )
    parser.add_argument("--config", default=None, help="YAML config file")
    parser.add_argument("--style", choices=REPLACEMENT_STYLES, default=None, help="Replacement style")
    parser.add_argument("--skip-types", default="", help="Comma-separated entity types to skip")
    parser.add_argument("--seed", type=int, default=None, help="Seed for reproducible values")
    parser.add_argument("--log-level", default="WARNING", help="Logging level")

    sub = parser.add_subparsers(dest="command", required=True)
    sub.add_parser("detect", help="Detect entities (text stdin)")
    p_anon = sub.add_parser("anonymize", help="Anonymize text (text stdin)")
    p_anon.add_argument("--state", default=None, help="JSON file holding previous entities")
    p_gen = sub.add_parser("generate", help="Generate one replacement value")
    p_gen.add_argument("type", choices=ENTITY_TYPES)
    p_gen.add_argument("value", nargs="?", default="")

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=args.log_level.upper(),
        stream=sys.stderr,
        format="%(asctime)s [%(levelname)s] %(message)s",
    )

    cmds = {
        "detect": cmd_detect,
        "anonymize": cmd_anonymize,
        "generate": cmd_generate,
    }
    try:
        cmds[args.command](args)
    except (ValueError, OSError, yaml.YAMLError) as exc:
        sys.stderr.write(f"pii-anonymizer: {exc}\n")
        sys.exit(2)


if __name__ == "__main__":
    main()
