#!/usr/bin/env python
"""Score a response file against a bundled instrument preset.

Usage:
    python scripts/score_response.py gad7 answers.json
    python scripts/score_response.py phq9 answers.json --allow-incomplete
    python scripts/score_response.py --list

The answers file holds either a mapping of question ID to value:

    {"gad7_1": "several_days", "gad7_2": "not_at_all", ...}

or a list of answers:

    [{"question_id": "gad7_1", "value": "several_days"}, ...]

Prints the scoring result as JSON. Exits 1 on a scoring error.
"""

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Optional

from riskscore.core.logging import setup_logging
from riskscore.errors import ScoringError
from riskscore.presets.loader import PresetLoader
from riskscore.schemas.questionnaire import Answer
from riskscore.scoring.engine import evaluate


def parse_answers(data: Any) -> list[Answer]:
    """Build answers from either supported file layout."""
    if isinstance(data, dict):
        return [Answer(question_id=qid, value=value) for qid, value in data.items()]
    if isinstance(data, list):
        return [Answer.model_validate(item) for item in data]
    raise ValueError("Answers file must contain an object or a list")


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point for response scoring."""
    parser = argparse.ArgumentParser(description="Score a questionnaire response")
    parser.add_argument("preset", nargs="?", help="Preset name (e.g. gad7)")
    parser.add_argument("answers", nargs="?", type=Path, help="Answers JSON file")
    parser.add_argument(
        "--presets-dir",
        type=Path,
        default=None,
        help="Directory holding preset YAML files",
    )
    parser.add_argument(
        "--allow-incomplete",
        action="store_true",
        help="Score even if required answers are missing",
    )
    parser.add_argument(
        "--validate-config",
        action="store_true",
        help="Run full configuration validation before scoring",
    )
    parser.add_argument("--list", action="store_true", help="List available presets")

    args = parser.parse_args(argv)
    setup_logging()
    loader = PresetLoader(presets_dir=args.presets_dir)

    if args.list:
        for name in loader.list_presets():
            info = loader.get_preset_info(name)
            print(f"{name}\t{info['version']}\t{info['description']}")
        return 0

    if args.preset is None or args.answers is None:
        parser.error("preset and answers are required unless --list is given")

    preset = loader.load(args.preset)
    answers = parse_answers(json.loads(args.answers.read_text(encoding="utf-8")))

    try:
        result = evaluate(
            preset.questionnaire,
            answers,
            preset.config,
            allow_incomplete=args.allow_incomplete,
            validate_config=args.validate_config,
        )
    except ScoringError as e:
        print(json.dumps({"error": e.to_dict()}, indent=2), file=sys.stderr)
        return 1

    print(json.dumps(result.to_dict(), indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
