"""
Per-species percentage split between two habitats.

**Conceptual**: For every species we want to know what share of its
occurrence falls in habitat A versus habitat B, as two percentages that add up
to 100. There are two ways to compute that share, selected by
NormalizationMode:

  - RAW: compare raw counts directly.
        percent_a = count_a / (count_a + count_b) * 100

  - EFFORT: first convert counts into occurrence rates by dividing by each
    habitat's sampling effort (its grand total of observations), then compare
    the rates.
        prop_a    = count_a / total_a        (0 if total_a == 0)
        prop_b    = count_b / total_b        (0 if total_b == 0)
        percent_a = prop_a / (prop_a + prop_b) * 100

  In both modes percent_b = 100 - percent_a.

**Sampling effort**: Surveys rarely cover two habitats equally. If habitat A
was sampled three times as intensively, every species looks three times more
"A-associated" in raw counts. Effort normalization removes that bias; it is
also invariant to rescaling one habitat's counts by any positive constant.
When total_a == total_b the two modes coincide.

**Undefined splits**: A species with zero combined proportion has no
meaningful split. Its percentages are missing (pd.NA in a nullable Float64
column) rather than NaN from a 0/0 division, and no error is raised. Such
species are dropped by the renderer.

Percentages are never rounded here; rounding is a display concern.
"""

from dataclasses import dataclass
from enum import Enum

import numpy as np
import pandas as pd


class NormalizationMode(Enum):
    """How counts are turned into comparable per-habitat proportions."""
    RAW = "raw"
    EFFORT = "effort"


SPLIT_COLUMNS = [
    'species',
    'count_a',
    'count_b',
    'prop_a',
    'prop_b',
    'percent_a',
    'percent_b',
]


@dataclass
class SplitResult:
    """
    Output of the normalizer.

    **Conceptual**: Bundles the per-species table with the context needed to
    interpret it (sampling totals and the mode used), so reporting and
    plotting code don't have to recompute anything.

    Attributes:
        table: DataFrame with SPLIT_COLUMNS, one row per merged species, in
               merge order. percent_a/percent_b are nullable Float64 and
               missing for species with no observations in either habitat.
        total_a: Sampling effort of habitat A (sum of count_a).
        total_b: Sampling effort of habitat B (sum of count_b).
        mode: NormalizationMode that produced the percentages.
    """
    table: pd.DataFrame
    total_a: int | float
    total_b: int | float
    mode: NormalizationMode

    @property
    def defined(self) -> pd.DataFrame:
        """Rows whose split is defined (both percentages present)."""
        return self.table[self.table['percent_a'].notna()]

    @property
    def undefined(self) -> pd.DataFrame:
        """Rows with zero combined proportion (percentages missing)."""
        return self.table[self.table['percent_a'].isna()]


def compute_habitat_totals(merged: pd.DataFrame) -> tuple[int | float, int | float]:
    """
    Sum each habitat's counts over all species (the sampling effort).

    Args:
        merged: DataFrame with 'count_a' and 'count_b' columns.

    Returns:
        Tuple (total_a, total_b). Integers when the counts are integers.
    """
    total_a = merged['count_a'].sum()
    total_b = merged['count_b'].sum()
    # numpy scalars -> plain Python numbers for printing and JSON
    if isinstance(total_a, np.generic):
        total_a = total_a.item()
    if isinstance(total_b, np.generic):
        total_b = total_b.item()
    return total_a, total_b


def _safe_divide(numerator: np.ndarray, denominator) -> np.ndarray:
    """Elementwise division returning 0 wherever the denominator is 0."""
    numerator = np.asarray(numerator, dtype=float)
    denominator = np.broadcast_to(np.asarray(denominator, dtype=float), numerator.shape)
    out = np.zeros_like(numerator)
    np.divide(numerator, denominator, out=out, where=denominator != 0)
    return out


def compute_proportions(
    merged: pd.DataFrame,
    mode: NormalizationMode,
) -> tuple[np.ndarray, np.ndarray]:
    """
    Per-species proportions for each habitat.

    **Functionally**:
      - EFFORT: count / habitat total, 0 when the habitat total is 0.
      - RAW: the counts themselves (as floats); the percent split only
        depends on their ratio.

    Args:
        merged: DataFrame with 'count_a' and 'count_b' columns.
        mode: Normalization mode.

    Returns:
        Tuple (prop_a, prop_b) of float arrays aligned with merged's rows.
    """
    count_a = merged['count_a'].to_numpy(dtype=float)
    count_b = merged['count_b'].to_numpy(dtype=float)

    if mode is NormalizationMode.RAW:
        return count_a, count_b

    if mode is NormalizationMode.EFFORT:
        total_a, total_b = compute_habitat_totals(merged)
        return _safe_divide(count_a, total_a), _safe_divide(count_b, total_b)

    raise ValueError(f"Unknown normalization mode: {mode!r}")


def compute_percent_split(
    merged: pd.DataFrame,
    mode: NormalizationMode = NormalizationMode.EFFORT,
) -> SplitResult:
    """
    Convert merged counts into per-species percentages summing to 100.

    **Functionally**:
      - Computes habitat totals and per-habitat proportions for the mode.
      - percent_a = prop_a / (prop_a + prop_b) * 100 where the sum is > 0.
      - percent_b = 100 - percent_a.
      - Both percentages missing (pd.NA) where prop_a + prop_b == 0.
      - Does not modify `merged`; row order is preserved.

    Args:
        merged: Output of merge_species_counts.
        mode: NormalizationMode.RAW or NormalizationMode.EFFORT (default).

    Returns:
        SplitResult with the per-species table, habitat totals, and mode.

    Example:
        >>> merged = pd.DataFrame({
        ...     'species': ['Sparrow', 'Robin'],
        ...     'count_a': [45, 32],
        ...     'count_b': [15, 28],
        ... })
        >>> result = compute_percent_split(merged, NormalizationMode.RAW)
        >>> result.table['percent_a'].round(2).tolist()
        [75.0, 53.33]
    """
    if not isinstance(mode, NormalizationMode):
        raise ValueError(f"Unknown normalization mode: {mode!r}")

    total_a, total_b = compute_habitat_totals(merged)
    prop_a, prop_b = compute_proportions(merged, mode)

    prop_sum = prop_a + prop_b
    defined = prop_sum > 0

    percent_a = np.full(prop_a.shape, np.nan)
    np.divide(prop_a, prop_sum, out=percent_a, where=defined)
    percent_a[defined] *= 100.0
    percent_b = np.where(defined, 100.0 - percent_a, np.nan)

    table = merged[['species', 'count_a', 'count_b']].copy().reset_index(drop=True)
    table['prop_a'] = prop_a
    table['prop_b'] = prop_b
    # NaN becomes <NA> in the nullable dtype
    table['percent_a'] = pd.Series(percent_a).astype("Float64")
    table['percent_b'] = pd.Series(percent_b).astype("Float64")

    return SplitResult(
        table=table[SPLIT_COLUMNS],
        total_a=total_a,
        total_b=total_b,
        mode=mode,
    )
