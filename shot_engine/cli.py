"""shot-engine CLI entry point."""
from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import List, Optional


def main(argv: Optional[List[str]] = None) -> None:
    parser = argparse.ArgumentParser(
        prog="shot-engine",
        description="Shot Engine — story-to-shot planning for video generation",
    )
    sub = parser.add_subparsers(dest="command", metavar="COMMAND")

    movements_parser = sub.add_parser("list-movements", help="List the camera movement catalog")
    movements_parser.add_argument(
        "--category", choices=("establishing", "character", "action", "transition"),
        help="Only list movements in this category",
    )

    analyze_parser = sub.add_parser(
        "analyze-duration",
        help="Estimate a script's natural runtime and score a target duration",
    )
    analyze_parser.add_argument(
        "--script", required=True, metavar="analysis.json",
        help="Path to a ScriptAnalysis JSON file",
    )
    analyze_parser.add_argument(
        "--target", required=True, type=float, metavar="SECONDS",
        help="Requested total duration in seconds",
    )

    plan_parser = sub.add_parser(
        "plan-shots",
        help="Plan a ScriptAnalysis → validated canonical ShotPlan JSON",
    )
    plan_parser.add_argument(
        "--script", required=True, metavar="analysis.json",
        help="Path to a ScriptAnalysis JSON file",
    )
    plan_parser.add_argument(
        "--output", required=True, metavar="plan.json",
        help="Destination path for the canonical ShotPlan JSON",
    )
    plan_parser.add_argument(
        "--characters", metavar="characters.json",
        help="Path to a JSON array of Character records",
    )
    plan_parser.add_argument(
        "--genre", metavar="PRESET_ID",
        help="Genre preset id (noir, scifi, horror, commercial, documentary)",
    )
    plan_parser.add_argument(
        "--target", type=float, metavar="SECONDS",
        help="Fit shot durations to this total",
    )
    seeding = plan_parser.add_mutually_exclusive_group()
    seeding.add_argument(
        "--seed", type=int, metavar="N",
        help="Seed for movement and shot-type draws (default: derived from the script)",
    )
    seeding.add_argument(
        "--unseeded", action="store_true",
        help="Draw from an unseeded random source; every run differs",
    )

    validate_parser = sub.add_parser(
        "validate-plan",
        help="Validate an existing ShotPlan JSON file against the canonical contract",
    )
    validate_parser.add_argument(
        "--plan", required=True, metavar="plan.json",
        help="Path to a ShotPlan JSON file",
    )
    args = parser.parse_args(argv)

    from shot_engine.logging_setup import configure_logging
    configure_logging()

    if args.command == "list-movements":
        list_movements(args.category)
        sys.exit(0)
    elif args.command == "analyze-duration":
        try:
            report = analyze_duration_file(Path(args.script), args.target)
        except Exception as exc:
            print(f"ERROR: {exc}")
            sys.exit(1)
        print(json.dumps(report, sort_keys=True, indent=2, ensure_ascii=False))
        sys.exit(0)
    elif args.command == "plan-shots":
        import jsonschema
        try:
            plan = produce_shot_plan(
                Path(args.script),
                Path(args.output),
                characters_path=Path(args.characters) if args.characters else None,
                genre=args.genre,
                target_duration=args.target,
                seed=args.seed,
                unseeded=args.unseeded,
            )
        except jsonschema.ValidationError as exc:
            print(f"ERROR: invalid ScriptAnalysis — {exc.message}")
            sys.exit(1)
        except Exception as exc:
            print(f"ERROR: {exc}")
            sys.exit(1)
        print(
            f"OK: planned {len(plan.shots)} shots "
            f"({plan.total_duration_seconds}s) → {args.output}"
        )
        sys.exit(0)
    elif args.command == "validate-plan":
        import jsonschema
        try:
            validate_plan_file(Path(args.plan))
        except jsonschema.ValidationError as exc:
            print(f"ERROR: invalid ShotPlan — {exc.message}")
            sys.exit(1)
        except Exception as exc:
            print(f"ERROR: {exc}")
            sys.exit(1)
        print("OK: ShotPlan is valid")
        sys.exit(0)
    else:
        parser.print_help()
        sys.exit(1)


def list_movements(category: Optional[str] = None) -> None:
    from shot_engine.catalogs import DEFAULT_MOVEMENTS

    movements = (
        DEFAULT_MOVEMENTS.in_category(category) if category else DEFAULT_MOVEMENTS.values()
    )
    for movement in movements:
        print(f"{movement.id}\t{movement.category}\t{movement.min_duration}s\t{movement.name}")


def analyze_duration_file(script_path: Path, target_duration: float) -> dict:
    """Run the duration analyzer on a ScriptAnalysis file; camelCase result dict."""
    from shot_engine.planning.duration_analyzer import analyze_duration
    from shot_engine.schemas.script_analysis_v1 import load_script_analysis

    analysis = load_script_analysis(script_path)
    return analyze_duration(analysis, target_duration).model_dump(mode="json", by_alias=True)


def validate_plan_file(plan_path: Path) -> None:
    """Load a ShotPlan JSON file and validate it against the canonical contract.

    Raises ``jsonschema.ValidationError`` if the file does not conform to
    ``ShotPlan.v1.json``, and ``ValueError`` if its timing lock does not match
    its shots.
    """
    from shot_engine.contract_validate import validate_shotplan
    from shot_engine.planning.timing import compute_timing_lock_hash
    from shot_engine.schemas.shotplan_v1 import load_shotplan

    data = json.loads(plan_path.read_text(encoding="utf-8"))
    validate_shotplan(data)

    plan = load_shotplan(data)
    if compute_timing_lock_hash(plan.shots) != plan.timing_lock_hash:
        raise ValueError("timingLockHash does not match shot order/durations")


def produce_shot_plan(
    script_path: Path,
    output_path: Path,
    *,
    characters_path: Optional[Path] = None,
    genre: Optional[str] = None,
    target_duration: Optional[float] = None,
    seed: Optional[int] = None,
    unseeded: bool = False,
):
    """Plan script → canonical ShotPlan, validate against contracts, write file.

    The genre preset's style bible is applied when a genre is given.

    Raises ``jsonschema.ValidationError`` if:
    - the input file does not conform to ``ScriptAnalysis.v1.json``, or
    - the produced plan does not conform to ``ShotPlan.v1.json``.

    The output file is never written when validation fails.
    """
    import jsonschema  # noqa: PLC0415
    from shot_engine.catalogs import get_genre_preset
    from shot_engine.planning import UnseededRandom, build_shot_plan
    from shot_engine.schema_loader import load_schema
    from shot_engine.schemas.script_analysis_v1 import load_characters, load_script_analysis
    from shot_engine.schemas.shotplan_v1 import canonical_json_bytes

    raw_data = json.loads(script_path.read_text(encoding="utf-8"))
    jsonschema.validate(raw_data, load_schema("ScriptAnalysis.v1.json"))
    analysis = load_script_analysis(raw_data)

    characters = load_characters(characters_path) if characters_path else []

    preset = None
    if genre:
        preset = get_genre_preset(genre)
        if preset is None:
            raise ValueError(f"unknown genre preset: {genre}")

    plan = build_shot_plan(
        analysis,
        characters,
        style_bible=preset.style_bible if preset else None,
        genre_preset=preset,
        target_duration=target_duration,
        seed=seed,
        rng=UnseededRandom() if unseeded else None,
    )

    output_path.write_bytes(canonical_json_bytes(plan))
    return plan


if __name__ == "__main__":
    main()
