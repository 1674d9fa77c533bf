"""
Per-species observation counts for a single habitat table.

**Conceptual**: Each input row is one observation (a trap capture, an
acoustic detection, a survey sighting). Grouping rows by species identifier
turns a habitat table into a SpeciesCount series: one entry per distinct
species, holding how often it was observed in that habitat.

**Two variants**:
  - Row-count mode (default): the count is the number of rows per species.
  - Count-column mode: each row already carries a count; the value per
    species is the sum of that column. Non-numeric, missing or negative
    counts are treated as zero.

Identifiers are taken verbatim (case-sensitive, whitespace preserved). Rows
with a missing or blank identifier are not counted.
"""

import pandas as pd


def _valid_identifier_mask(ids: pd.Series) -> pd.Series:
    """Boolean mask of rows whose identifier is present and not blank."""
    return ids.notna() & (ids.astype(str).str.strip() != "")


def count_missing_identifiers(table: pd.DataFrame, id_column: str) -> int:
    """
    Count rows that the aggregator skips for lack of an identifier.

    Args:
        table: Observation table.
        id_column: Name of the identifier column.

    Returns:
        Number of rows with a missing or blank identifier.
    """
    if table.empty:
        return 0
    return int((~_valid_identifier_mask(table[id_column])).sum())


def count_species(
    table: pd.DataFrame,
    id_column: str,
    count_column: str | None = None,
) -> pd.Series:
    """
    Aggregate a habitat table into per-species counts.

    **Functionally**:
      - Drops rows whose identifier is missing or blank.
      - Groups by the identifier column without sorting, so the result follows
        first-appearance order in the table.
      - Row-count mode: size of each group.
      - Count-column mode: sum of pd.to_numeric(count_column, errors="coerce")
        with NaN and negative values replaced by 0. Integral sums are
        returned as int64.
      - An empty table (or one with no valid identifiers) returns an empty
        int64 Series instead of raising.

    Args:
        table: Observation table (values may be strings, as read by
               read_observation_table).
        id_column: Name of the species identifier column.
        count_column: Optional name of an explicit count column.

    Returns:
        Series indexed by species identifier (index name "species"),
        named "count".

    Raises:
        KeyError: If id_column (or count_column) is not in the table.

    Example:
        >>> df = pd.DataFrame({'ID': ['Owl', 'Bat', 'Owl']})
        >>> count_species(df, 'ID').to_dict()
        {'Owl': 2, 'Bat': 1}
    """
    if id_column not in table.columns:
        raise KeyError(
            f"Identifier column '{id_column}' not found in table. "
            f"Available columns: {list(table.columns)}"
        )
    if count_column is not None and count_column not in table.columns:
        raise KeyError(
            f"Count column '{count_column}' not found in table. "
            f"Available columns: {list(table.columns)}"
        )

    valid = table.loc[_valid_identifier_mask(table[id_column])]

    if valid.empty:
        return pd.Series(
            [],
            index=pd.Index([], name="species", dtype=object),
            dtype="int64",
            name="count",
        )

    ids = valid[id_column].astype(str)

    if count_column is None:
        counts = ids.groupby(ids, sort=False).size()
    else:
        values = pd.to_numeric(valid[count_column], errors="coerce").fillna(0.0)
        values = values.where(values >= 0, 0.0)
        counts = values.groupby(ids, sort=False).sum()
        # Whole-number sums are counts; keep them as integers
        if (counts % 1 == 0).all():
            counts = counts.astype("int64")

    counts.index.name = "species"
    counts.name = "count"
    return counts
