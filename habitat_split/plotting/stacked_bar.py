"""
Two-segment stacked bar chart of per-species habitat splits.

**Conceptual**: Every species gets one bar of constant length (100%). The bar
is split at percent_a: the first segment (habitat A colour) runs from 0 to
percent_a, the second (habitat B colour) from percent_a to 100. Bars are
ordered by percent_a descending, so species most associated with habitat A
come first.

**Layout**:
  - Horizontal (default): species on the y-axis, first-ranked species at the
    top; percent on the x-axis.
  - Vertical: species on the x-axis (labels rotated), percent on the y-axis.
  - The species axis grows with the number of species (0.3 in each, at
    least 3 in) so labels stay legible; the percent axis is a fixed 8 in.
  - Legend on top, light grid along the percent axis only.

Species with undefined splits never reach the chart: prepare_plot_data drops
them before rendering.
"""

from dataclasses import dataclass
from pathlib import Path

import matplotlib
matplotlib.use('Agg')  # Non-interactive backend
import matplotlib.patches as mpatches
import matplotlib.pyplot as plt
from matplotlib.ticker import PercentFormatter
import numpy as np
import pandas as pd

from habitat_split.data.schemas import UnsupportedFormatError


SUPPORTED_OUTPUT_EXTENSIONS = ('.pdf', '.png', '.svg')

# Inches per species along the species axis, and the floor/fixed sizes
INCHES_PER_SPECIES = 0.3
MIN_SPECIES_AXIS_INCHES = 3.0
PERCENT_AXIS_INCHES = 8.0


@dataclass(frozen=True)
class ChartStyle:
    """
    Visual settings for the stacked bar chart.

    Attributes:
        label_a: Legend label for habitat A.
        label_b: Legend label for habitat B.
        color_a: Fill colour for habitat A segments.
        color_b: Fill colour for habitat B segments.
        title: Chart title.
        orientation: "horizontal" or "vertical".
        value_label: Axis label for the percent axis.
        bar_width: Bar thickness as a fraction of the slot (0 < w <= 1).
        dpi: Resolution for raster output (PNG).
    """
    label_a: str = "AG"
    label_b: str = "FOREST"
    color_a: str = "#0072B2"
    color_b: str = "#D55E00"
    title: str = "Species occurrence by habitat"
    orientation: str = "horizontal"
    value_label: str = "Share of occurrence"
    bar_width: float = 0.7
    dpi: int = 300

    def __post_init__(self):
        """Validate style after initialization."""
        if self.orientation not in ("horizontal", "vertical"):
            raise ValueError(
                f"orientation must be 'horizontal' or 'vertical', got: {self.orientation}"
            )
        if not 0 < self.bar_width <= 1:
            raise ValueError(f"bar_width must be in (0, 1], got: {self.bar_width}")
        if self.dpi <= 0:
            raise ValueError(f"dpi must be positive, got: {self.dpi}")


def prepare_plot_data(split: pd.DataFrame) -> pd.DataFrame:
    """
    Build the plot table: defined splits only, ordered by percent_a descending.

    **Functionally**:
      - Drops rows where percent_a or percent_b is missing (zero-total species).
      - Stable sort on percent_a descending; ties keep their input order.
      - Converts percentages to plain float64 for plotting.

    Args:
        split: Per-species table with 'species', 'percent_a', 'percent_b'
               (e.g., SplitResult.table).

    Returns:
        DataFrame with columns ['species', 'percent_a', 'percent_b'] and a
        fresh RangeIndex. Empty if no species has a defined split.
    """
    defined = split[split['percent_a'].notna() & split['percent_b'].notna()]
    plot_data = pd.DataFrame({
        'species': defined['species'].astype(str),
        'percent_a': defined['percent_a'].astype(float),
        'percent_b': defined['percent_b'].astype(float),
    })
    plot_data = plot_data.sort_values('percent_a', ascending=False, kind="mergesort")
    return plot_data.reset_index(drop=True)


def compute_figure_size(n_species: int, orientation: str = "horizontal") -> tuple[float, float]:
    """
    Figure size (width, height) in inches for n_species bars.

    >>> compute_figure_size(40)
    (8.0, 12.0)
    >>> compute_figure_size(2, "vertical")
    (3.0, 8.0)
    """
    species_axis = max(MIN_SPECIES_AXIS_INCHES, INCHES_PER_SPECIES * n_species)
    if orientation == "horizontal":
        return (PERCENT_AXIS_INCHES, species_axis)
    return (species_axis, PERCENT_AXIS_INCHES)


def validate_output_path(path: Path | str) -> str:
    """Return the output format for path ("pdf", "png", "svg"), or raise UnsupportedFormatError."""
    path = Path(path)
    ext = path.suffix.lower()
    if ext not in SUPPORTED_OUTPUT_EXTENSIONS:
        raise UnsupportedFormatError(
            f"Unsupported output extension '{path.suffix or '(none)'}' for {path}. "
            f"Accepted: {', '.join(SUPPORTED_OUTPUT_EXTENSIONS)}."
        )
    return ext.lstrip('.')


def render_stacked_bar_chart(
    plot_data: pd.DataFrame,
    output_path: Path | str,
    style: ChartStyle | None = None,
) -> Path:
    """
    Draw the stacked bar chart and write it to disk.

    **Functionally**:
      - Validates the output extension (.pdf, .png, .svg) before drawing.
      - Creates the parent directory if needed.
      - Draws habitat A segments from 0 to percent_a and habitat B segments
        stacked on top, in plot_data order (first row = top bar when
        horizontal, leftmost when vertical).
      - An empty plot_data still produces a chart with axes, legend, and title.
      - Always closes the figure, even if saving fails.

    Args:
        plot_data: Output of prepare_plot_data.
        output_path: Destination file.
        style: ChartStyle; defaults to ChartStyle().

    Returns:
        Path of the written file.

    Raises:
        UnsupportedFormatError: If the output extension isn't supported.
        OSError: If the file can't be written.
    """
    style = style or ChartStyle()
    output_path = Path(output_path)
    output_format = validate_output_path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    species = plot_data['species'].tolist()
    percent_a = plot_data['percent_a'].to_numpy(dtype=float)
    percent_b = plot_data['percent_b'].to_numpy(dtype=float)
    positions = np.arange(len(species))

    fig, ax = plt.subplots(figsize=compute_figure_size(len(species), style.orientation))
    try:
        if style.orientation == "horizontal":
            ax.barh(positions, percent_a, height=style.bar_width,
                    color=style.color_a, label=style.label_a)
            ax.barh(positions, percent_b, left=percent_a, height=style.bar_width,
                    color=style.color_b, label=style.label_b)
            ax.set_yticks(positions)
            ax.set_yticklabels(species, fontsize=9)
            ax.invert_yaxis()  # First-ranked species on top
            ax.set_xlim(0, 100)
            ax.xaxis.set_major_formatter(PercentFormatter(xmax=100))
            ax.set_xlabel(style.value_label)
            ax.grid(axis='x', color="#EEEEEE")
        else:
            ax.bar(positions, percent_a, width=style.bar_width,
                   color=style.color_a, label=style.label_a)
            ax.bar(positions, percent_b, bottom=percent_a, width=style.bar_width,
                   color=style.color_b, label=style.label_b)
            ax.set_xticks(positions)
            ax.set_xticklabels(species, rotation=45, ha='right', fontsize=9)
            ax.set_ylim(0, 100)
            ax.yaxis.set_major_formatter(PercentFormatter(xmax=100))
            ax.set_ylabel(style.value_label)
            ax.grid(axis='y', color="#EEEEEE")

        ax.set_axisbelow(True)
        for side in ('top', 'right'):
            ax.spines[side].set_visible(False)

        ax.set_title(style.title, fontsize=14, fontweight='bold', loc='left', pad=28)
        # Explicit handles so an empty chart still gets a legend
        legend_handles = [
            mpatches.Patch(color=style.color_a, label=style.label_a),
            mpatches.Patch(color=style.color_b, label=style.label_b),
        ]
        ax.legend(
            handles=legend_handles,
            loc='lower left',
            bbox_to_anchor=(0.0, 1.04),
            ncol=2,
            frameon=False,
        )
        fig.tight_layout()

        try:
            fig.savefig(output_path, format=output_format, dpi=style.dpi, bbox_inches='tight')
        except Exception as e:
            raise OSError(f"{output_path}: Failed to write chart. Error: {e}") from e
    finally:
        plt.close(fig)

    return output_path
