"""
End-to-end species-by-habitat pipeline.

**Conceptual**: One linear pass over two input files:

    read_observation_table  (habitat A, habitat B)
        → count_species       (per-habitat SpeciesCount)
        → merge_species_counts (full outer join, missing = 0)
        → compute_percent_split (RAW or EFFORT mode)
        → prepare_plot_data + render_stacked_bar_chart

Nothing is retried and nothing is kept between runs. Any stage error
propagates to the caller, and the chart is only drawn after every upstream
stage has succeeded, so a failed run never leaves a partial image behind.

Progress goes to stdout as plain status lines (files read, row counts,
habitat totals, the intermediate table, and a short summary).
"""

from pathlib import Path

from habitat_split.analytics.aggregation import count_missing_identifiers, count_species
from habitat_split.analytics.merge import merge_species_counts
from habitat_split.analytics.normalization import (
    NormalizationMode,
    SplitResult,
    compute_percent_split,
)
from habitat_split.analytics.summary import (
    count_undefined_species,
    format_split_table,
    top_species,
)
from habitat_split.config.settings import PipelineSettings
from habitat_split.data.io import read_observation_table, write_split_table_csv
from habitat_split.plotting.stacked_bar import (
    ChartStyle,
    prepare_plot_data,
    render_stacked_bar_chart,
    validate_output_path,
)


def chart_style_from_settings(settings: PipelineSettings) -> ChartStyle:
    """Build the ChartStyle matching a PipelineSettings."""
    return ChartStyle(
        label_a=settings.label_a,
        label_b=settings.label_b,
        color_a=settings.color_a,
        color_b=settings.color_b,
        title=settings.title,
        orientation=settings.orientation,
    )


def _load_habitat_counts(path: Path | str, label: str, settings: PipelineSettings):
    """Read one habitat file and return its per-species counts."""
    print(f"Reading {label} file: {path}")
    table = read_observation_table(
        path,
        id_column=settings.id_column,
        count_column=settings.count_column,
        context=f"{label} file {path}",
    )
    id_column = table.attrs["id_column"]
    print(f"  ✓ {len(table)} rows, identifier column '{id_column}'")

    skipped = count_missing_identifiers(table, id_column)
    if skipped:
        print(f"  ⚠ Skipping {skipped} row(s) with a missing or blank '{id_column}'")

    counts = count_species(table, id_column, count_column=settings.count_column)
    print(f"  ✓ {len(counts)} species")
    return counts


def run_habitat_split(
    path_a: Path | str,
    path_b: Path | str,
    settings: PipelineSettings | None = None,
    render: bool = True,
    table_output: Path | str | None = None,
) -> SplitResult:
    """
    Run the full pipeline for one pair of habitat files.

    **Functionally**:
      1. Load and count habitat A, then habitat B.
      2. Merge into one row per species (missing side = 0).
      3. Compute the percentage split in settings.normalization_mode.
      4. Print the intermediate table and top species per habitat.
      5. If render=True, write the stacked bar chart to settings.output_path.
      6. Optionally write the intermediate table to CSV, only after the chart
         was saved.

    Args:
        path_a: Habitat A observation file (.csv/.xls/.xlsx).
        path_b: Habitat B observation file.
        settings: PipelineSettings; defaults to PipelineSettings().
        render: If False, skip chart rendering (table and console output only).
        table_output: Optional CSV path for the intermediate table.

    Returns:
        SplitResult for the run.

    Raises:
        FileNotFoundError, UnsupportedFormatError, ParseError,
        MissingColumnError: From the loader; the run aborts before anything
        is written.
        OSError: If the chart or table can't be written.
    """
    settings = settings or PipelineSettings()
    label_a, label_b = settings.label_a, settings.label_b

    # Reject a bad chart destination before any work is done
    if render:
        validate_output_path(settings.output_path)

    counts_a = _load_habitat_counts(path_a, label_a, settings)
    counts_b = _load_habitat_counts(path_b, label_b, settings)

    merged = merge_species_counts(counts_a, counts_b)
    print(f"Merged species: {len(merged)}")

    mode = settings.normalization_mode
    result = compute_percent_split(merged, mode)
    print(f"Total measurements - {label_a}: {result.total_a}, {label_b}: {result.total_b}")
    if mode is NormalizationMode.EFFORT:
        print("Normalization: sampling effort (counts divided by habitat totals)")
    else:
        print("Normalization: none (raw counts)")

    print()
    print("Intermediate results:")
    print(format_split_table(result, label_a=label_a, label_b=label_b))
    print()

    undefined = count_undefined_species(result)
    if undefined:
        print(f"  ⚠ {undefined} species with no observations in either habitat "
              f"(excluded from the chart)")

    for habitat, label in (("a", label_a), ("b", label_b)):
        top = top_species(result, habitat=habitat, n=5)
        if top.empty:
            continue
        print(f"Top {len(top)} species in {label}:")
        for row in top.itertuples(index=False):
            share = row.percent_a if habitat == "a" else row.percent_b
            print(f"  {row.species:30s} {share:6.2f}%")
    print()

    if render:
        plot_data = prepare_plot_data(result.table)
        output = render_stacked_bar_chart(
            plot_data,
            settings.output_path,
            style=chart_style_from_settings(settings),
        )
        print(f"Plot saved to {output} ({len(plot_data)} species)")

    # Table only after the chart is saved
    if table_output is not None:
        write_split_table_csv(result.table, table_output)
        print(f"  ✓ Saved intermediate table: {table_output}")

    return result
