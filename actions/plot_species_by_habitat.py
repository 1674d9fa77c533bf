#!/usr/bin/env python3
"""
Plot per-species occurrence split between two habitats.

**Purpose**: Read two observation files (one per habitat), count observations
per species, normalize for unequal sampling effort, print the intermediate
table, and save a stacked bar chart where every species is one 100% bar split
between the two habitats.

**Usage**:
    python actions/plot_species_by_habitat.py data/AG.csv data/FOREST.xlsx

    # Raw counts instead of effort-normalized proportions
    python actions/plot_species_by_habitat.py data/AG.csv data/FOREST.csv --raw

    # Explicit count column, custom labels, PNG output
    python actions/plot_species_by_habitat.py a.csv b.csv --count-column count \\
        --label-a Agriculture --label-b Forest --output species_split.png

**Inputs**:
    .csv (header row) or .xlsx/.xls (first sheet, header row), each with a
    species identifier column ("ID" or "species" by default).

**Outputs**:
  - Chart (default: bat_species_by_habitat.pdf in the current directory).
  - Optional CSV of the intermediate table (--table-output).

**Exit codes**:
  - 0: Success
  - 1: Usage error, or the run failed (missing file, unsupported format,
       missing column, unreadable file). No chart is written on failure.
"""

import argparse
import sys
from dataclasses import replace
from pathlib import Path

# Ensure project root is on path for imports
repo_root = Path(__file__).parent.parent
if str(repo_root) not in sys.path:
    sys.path.insert(0, str(repo_root))

from habitat_split.config.settings import ORIENTATIONS, get_settings
from habitat_split.data.schemas import HabitatSplitError, UsageError
from habitat_split.orchestration.pipeline import run_habitat_split


class _UsageArgumentParser(argparse.ArgumentParser):
    """ArgumentParser that raises UsageError instead of exiting with status 2."""

    def error(self, message):
        raise UsageError(message)


def build_parser() -> argparse.ArgumentParser:
    """
    Build the command-line parser.

    Returns:
        Configured argument parser.
    """
    parser = _UsageArgumentParser(
        prog="plot_species_by_habitat.py",
        description="Plot per-species occurrence split between two habitats.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )

    parser.add_argument(
        "habitat_a_file",
        help="Observation file for habitat A (.csv, .xlsx, .xls).",
    )

    parser.add_argument(
        "habitat_b_file",
        help="Observation file for habitat B (.csv, .xlsx, .xls).",
    )

    parser.add_argument(
        "--id-column",
        default=None,
        help="Species identifier column. Default: 'ID', falling back to 'species'.",
    )

    parser.add_argument(
        "--count-column",
        default=None,
        help="Numeric count column to sum per species. Default: count rows.",
    )

    parser.add_argument(
        "--raw",
        action="store_true",
        help="Split raw counts instead of effort-normalized proportions.",
    )

    parser.add_argument(
        "--output",
        default=None,
        help="Chart path (.pdf, .png, .svg). Default: bat_species_by_habitat.pdf.",
    )

    parser.add_argument("--label-a", default=None, help="Display name of habitat A.")
    parser.add_argument("--label-b", default=None, help="Display name of habitat B.")
    parser.add_argument("--title", default=None, help="Chart title.")

    parser.add_argument(
        "--orientation",
        choices=ORIENTATIONS,
        default=None,
        help="Bar orientation. Default: horizontal.",
    )

    parser.add_argument(
        "--table-output",
        default=None,
        help="Optional CSV path for the intermediate per-species table.",
    )

    return parser


def main(argv=None) -> int:
    """
    Main entrypoint.

    Steps:
      1. Parse arguments (usage errors → exit 1 with usage text).
      2. Load settings from the environment and apply CLI overrides.
      3. Run the pipeline.
      4. Translate pipeline errors into exit code 1.

    Args:
        argv: Optional argument list (defaults to sys.argv[1:]).

    Returns:
        Process exit code.
    """
    parser = build_parser()

    try:
        args = parser.parse_args(argv)
    except UsageError as e:
        parser.print_usage(sys.stderr)
        print(f"Error: {e}", file=sys.stderr)
        # Only missing positionals get the two-file hint
        if "habitat_a_file" in str(e) or "habitat_b_file" in str(e):
            print("Please provide two input files: habitat A and habitat B.", file=sys.stderr)
        return 1

    try:
        settings = get_settings()
        overrides = {
            'id_column': args.id_column,
            'count_column': args.count_column,
            'label_a': args.label_a,
            'label_b': args.label_b,
            'title': args.title,
            'orientation': args.orientation,
            'output_path': Path(args.output) if args.output else None,
        }
        overrides = {key: value for key, value in overrides.items() if value is not None}
        if args.raw:
            overrides['normalize_effort'] = False
        settings = replace(settings, **overrides)
    except ValueError as e:
        print(f"ERROR: Invalid configuration: {e}", file=sys.stderr)
        return 1

    print("=" * 80)
    print(f"Species occurrence by habitat: {settings.label_a} vs {settings.label_b}")
    print("=" * 80)

    try:
        run_habitat_split(
            args.habitat_a_file,
            args.habitat_b_file,
            settings=settings,
            table_output=args.table_output,
        )
    except (FileNotFoundError, HabitatSplitError, OSError) as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
