"""
Full outer join of two habitats' per-species counts.

**Conceptual**: After aggregation each habitat has its own SpeciesCount series.
Merging produces one row per species seen in *either* habitat, with the count
from each side and 0 where a species was never observed in that habitat.

**Identifier matching**: Exact string equality. "Myotis myotis" and
"myotis myotis" (or a trailing space) are different species here; inconsistent
spelling between the two files shows up as two rows rather than being silently
combined.
"""

import pandas as pd


MERGED_COLUMNS = [
    'species',
    'count_a',
    'count_b',
]


def merge_species_counts(
    counts_a: pd.Series,
    counts_b: pd.Series,
) -> pd.DataFrame:
    """
    Outer-join habitat A and habitat B counts on species identifier.

    **Functionally**:
      - Species union ordered as: habitat A species in their order, followed by
        species seen only in habitat B in their order.
      - Missing sides filled with 0.
      - Counts stay integers when both inputs are integer-valued.

    Args:
        counts_a: Per-species counts for habitat A (index = species).
        counts_b: Per-species counts for habitat B (index = species).

    Returns:
        DataFrame with columns ['species', 'count_a', 'count_b'] and a fresh
        RangeIndex. Each species appears exactly once.

    Example:
        >>> a = pd.Series({'Owl': 10})
        >>> b = pd.Series({}, dtype='int64')
        >>> merge_species_counts(a, b)
          species  count_a  count_b
        0     Owl       10        0
    """
    only_in_b = counts_b.index.difference(counts_a.index, sort=False)
    species = counts_a.index.append(only_in_b)

    merged = pd.DataFrame({
        'species': species.astype(object),
        'count_a': counts_a.reindex(species, fill_value=0).to_numpy(),
        'count_b': counts_b.reindex(species, fill_value=0).to_numpy(),
    })

    return merged[MERGED_COLUMNS].reset_index(drop=True)
