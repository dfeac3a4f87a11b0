import argparse
import json
import logging
import sys
from dataclasses import replace

from backend.core.exercise_normalizer import NormalizeOptions
from backend.core.muscle_stats import calculate_stats
from backend.core.muscle_templates import TemplateMuscleLookup
from backend.core.pr_metrics import (
    calculate_pr_metrics,
    filter_pr_metrics_by_search,
    get_top_prs,
    sort_pr_metrics_by_weight,
)
from backend.core.training_math import current_iso_week
from backend.services.backup_service import BackupValidationError, parse_workout_backup
from backend.services.workout_parser import parse_model_output
from backend.settings import get_settings
from domain.models import is_calendar_date

logger = logging.getLogger(__name__)


def _read(path):
    with open(path, "r", encoding="utf-8") as f:
        return f.read()


def _calendar_date(text):
    if not is_calendar_date(text):
        raise argparse.ArgumentTypeError(f"not a YYYY-MM-DD calendar date: {text!r}")
    return text


def _write(text, output):
    if output:
        with open(output, "w", encoding="utf-8") as f:
            f.write(text)
    else:
        print(text)


def _load_sessions(path):
    return parse_workout_backup(_read(path)).workout_sessions


def cmd_extract(args):
    settings = get_settings()
    options = NormalizeOptions(
        use_template_muscles=settings.use_template_muscles,
        allow_model_provided_muscles=settings.allow_model_provided_muscles,
    )
    if args.today:
        options = replace(options, date_factory=lambda: args.today)

    result = parse_model_output(_read(args.input), options)
    for warning in result.warnings:
        logger.warning(warning)
    _write(json.dumps(result.to_dict(), indent=2, ensure_ascii=False), args.output)
    return 0 if result.exercises else 1


def cmd_stats(args):
    settings = get_settings()
    result = calculate_stats(
        _load_sessions(args.input),
        current_week=args.week or current_iso_week(),
        template_lookup=TemplateMuscleLookup(),
        bodyweight=settings.default_bodyweight,
    )
    _write(json.dumps(result.to_dict(), indent=2, ensure_ascii=False), args.output)
    return 0


def cmd_prs(args):
    metrics = calculate_pr_metrics(_load_sessions(args.input))
    if args.search:
        metrics = filter_pr_metrics_by_search(metrics, args.search)
    metrics = get_top_prs(metrics, args.top) if args.top else sort_pr_metrics_by_weight(metrics)
    _write(json.dumps([m.to_dict() for m in metrics], indent=2, ensure_ascii=False), args.output)
    return 0


def cmd_validate_backup(args):
    backup = parse_workout_backup(_read(args.input))
    _write(f"OK: {len(backup.workout_sessions)} sessions (schema version {backup.schema_version})", args.output)
    return 0


def build_parser():
    parser = argparse.ArgumentParser(description="Workout log parsing and analytics")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    extract = subparsers.add_parser("extract", help="Normalize exercises from a model output file")
    extract.add_argument("input", help="File containing raw model output")
    extract.add_argument("--today", type=_calendar_date, help="Date (YYYY-MM-DD) for exercises without one")
    extract.set_defaults(func=cmd_extract)

    stats = subparsers.add_parser("stats", help="Workout and muscle-group stats from a backup file")
    stats.add_argument("input", help="Backup JSON file path")
    stats.add_argument("--week", help="ISO week to report as current (e.g. 2024-W51)")
    stats.set_defaults(func=cmd_stats)

    prs = subparsers.add_parser("prs", help="Personal records from a backup file")
    prs.add_argument("input", help="Backup JSON file path")
    prs.add_argument("--top", type=int, help="Only the N heaviest PRs")
    prs.add_argument("--search", help="Case-insensitive exercise filter")
    prs.set_defaults(func=cmd_prs)

    validate = subparsers.add_parser("validate-backup", help="Check a backup file")
    validate.add_argument("input", help="Backup JSON file path")
    validate.set_defaults(func=cmd_validate_backup)

    for sub in (extract, stats, prs, validate):
        sub.add_argument("-o", "--output", help="Output file path (default: stdout)")

    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        sys.exit(args.func(args))
    except FileNotFoundError:
        print(f"Error: File not found: {args.input}", file=sys.stderr)
        sys.exit(1)
    except BackupValidationError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
