"""Command-line interface for gamehealth."""

import argparse
import logging
import sys
from pathlib import Path

from gamehealth.health import analyze_game_health, calculate_overall_health_score
from gamehealth.optimizer import auto_assign_players
from gamehealth.output import format_assignments, format_assignments_csv, format_health_report
from gamehealth.parser import SnapshotError, load_game_data, write_assignments_yaml
from gamehealth.suggestions import get_improved_assignment_suggestions


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gamehealth",
        description="Check and optimize player-to-game assignments for an improv event.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""\
Examples:
  gamehealth event.yaml
  gamehealth event.yaml --optimize
  gamehealth event.yaml --optimize --output assignments.yaml
""",
    )
    parser.add_argument(
        "snapshot",
        type=Path,
        help="Path to the event snapshot (YAML or JSON)",
    )
    parser.add_argument(
        "--optimize",
        action="store_true",
        help="Compute a replacement assignment set and report its health",
    )
    parser.add_argument(
        "--output",
        type=Path,
        help="Write the optimized assignments to this YAML file (implies --optimize)",
    )
    parser.add_argument(
        "--csv",
        action="store_true",
        help="Print optimized assignments as CSV instead of a table",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log optimizer progress",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point for gamehealth CLI."""
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(levelname)s: %(message)s",
    )

    if not args.snapshot.exists():
        print(f"Error: Snapshot file not found: {args.snapshot}", file=sys.stderr)
        return 1

    try:
        data = load_game_data(args.snapshot)
    except SnapshotError as e:
        print(f"Error parsing snapshot: {e}", file=sys.stderr)
        return 1

    attending = data.attending_players()
    print(f"Loaded {len(data.games)} games and {len(attending)} attending players")
    print()

    problems = analyze_game_health(data)
    suggestions = get_improved_assignment_suggestions(data, problems)
    print(format_health_report(data, problems, suggestions))

    if not (args.optimize or args.output):
        return 0

    assignments = auto_assign_players(data)
    optimized = data.with_assignments(assignments)
    new_problems = analyze_game_health(optimized)

    print()
    print(
        f"Health score: {calculate_overall_health_score(problems)} -> "
        f"{calculate_overall_health_score(new_problems)}"
    )
    print()
    if args.csv:
        print(format_assignments_csv(assignments))
    else:
        print(format_assignments(data, assignments))

    remaining = get_improved_assignment_suggestions(optimized, new_problems)
    if remaining:
        print()
        print("=== Remaining Suggestions ===")
        for suggestion in remaining:
            print(f"  - {suggestion}")

    if args.output:
        event_id = data.event_id or (assignments[0].event_id if assignments else "")
        write_assignments_yaml(args.output, assignments, event_id)
        print(f"\nWrote {len(assignments)} assignments to: {args.output}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
