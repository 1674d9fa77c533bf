"""
Console summaries of a per-species habitat split.

Formats the intermediate table printed after normalization and picks the
species most strongly associated with each habitat. Values are rounded here
for display only; the SplitResult itself is never modified.
"""

import pandas as pd

from habitat_split.analytics.normalization import SplitResult


def format_split_table(
    result: SplitResult,
    label_a: str = "A",
    label_b: str = "B",
    decimals: int = 2,
) -> str:
    """
    Render the intermediate per-species table as text.

    Columns: species, counts for both habitats, the habitat totals, the
    per-habitat proportions, and the two percentages. Undefined percentages
    are shown as "NA".

    Args:
        result: Output of compute_percent_split.
        label_a: Display name of habitat A (used in column headers).
        label_b: Display name of habitat B.
        decimals: Decimal places for percentages.

    Returns:
        Multi-line string (an "(no species)" line for an empty table).
    """
    table = result.table
    if table.empty:
        return "(no species)"

    display = pd.DataFrame({
        'Species': table['species'],
        f'Count_{label_a}': table['count_a'],
        f'Count_{label_b}': table['count_b'],
        f'total_{label_a}': result.total_a,
        f'total_{label_b}': result.total_b,
        f'Prop_{label_a}': table['prop_a'].round(4),
        f'Prop_{label_b}': table['prop_b'].round(4),
        f'Perc_in_{label_a}': table['percent_a'].round(decimals),
        f'Perc_in_{label_b}': table['percent_b'].round(decimals),
    })

    return display.to_string(index=False, na_rep="NA")


def top_species(
    result: SplitResult,
    habitat: str = "a",
    n: int = 5,
) -> pd.DataFrame:
    """
    Species most associated with one habitat.

    **Functionally**:
      - habitat="a": highest percent_a first.
      - habitat="b": lowest percent_a (i.e. highest percent_b) first.
      - Species with undefined splits are ignored.
      - Stable sort, so ties keep merge order.

    Args:
        result: Output of compute_percent_split.
        habitat: "a" or "b" (case-insensitive).
        n: Maximum number of species to return.

    Returns:
        DataFrame with columns ['species', 'percent_a', 'percent_b'], at most n rows.

    Raises:
        ValueError: If habitat is not "a" or "b", or n is negative.
    """
    habitat = habitat.lower()
    if habitat not in ("a", "b"):
        raise ValueError(f"habitat must be 'a' or 'b', got: {habitat!r}")
    if n < 0:
        raise ValueError(f"n must be non-negative, got: {n}")

    defined = result.defined[['species', 'percent_a', 'percent_b']]
    ordered = defined.sort_values(
        'percent_a',
        ascending=(habitat == "b"),
        kind="mergesort",
    )
    return ordered.head(n).reset_index(drop=True)


def count_undefined_species(result: SplitResult) -> int:
    """Number of species excluded from the chart for lack of observations."""
    return len(result.undefined)
