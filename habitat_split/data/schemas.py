"""
Error types and column validation for observation tables.

**Conceptual**: This module defines the "data contract" for habitat observation
files: each file must carry an identifier column naming the species observed
in that row, and, in the count-column variant, an explicit count column. Every
table entering the pipeline passes through these checks so that downstream
stages (aggregation, merging, normalization) can assume the columns exist.

**Schema philosophy**:
  - One row per observation (or per species, with an explicit count column).
  - The identifier column is required and located by name, never by position.
  - Validation raises a specific error class with the file context and the
    columns that were actually found.

**Error taxonomy**: every failure the pipeline can surface has its own class
deriving from HabitatSplitError, so the CLI can report any of them uniformly
while tests can assert on the precise kind. Missing files use the builtin
FileNotFoundError.
"""

import pandas as pd


class HabitatSplitError(Exception):
    """Base class for all pipeline errors."""
    pass


class UsageError(HabitatSplitError):
    """Raised when the command line is malformed (e.g., fewer than two input files)."""
    pass


class UnsupportedFormatError(HabitatSplitError):
    """
    Raised when a file extension is not one of the accepted formats.

    The message names the offending extension and the accepted set, e.g.
    "Unsupported file extension '.txt' for data/forest.txt. Accepted: .csv, .xls, .xlsx".
    """
    pass


class MissingColumnError(HabitatSplitError):
    """
    Raised when a required column (identifier or count) is absent from a table.

    **Conceptual**: Columns are located by name rather than by position (first
    column species, second column count), so a reordered or renamed header
    surfaces here. The message names both the missing column and the file so
    the user can fix the header directly.
    """
    pass


class ParseError(HabitatSplitError):
    """
    Raised when the underlying CSV/spreadsheet reader fails.

    Wraps the original reader message; the original exception is chained as
    __cause__.
    """
    pass


# Identifier column candidates tried in order when no explicit name is configured
DEFAULT_ID_COLUMNS = (
    'ID',
    'species',
)

# Accepted input extensions, grouped by reader
DELIMITED_EXTENSIONS = ('.csv',)
SPREADSHEET_EXTENSIONS = ('.xls', '.xlsx')
SUPPORTED_INPUT_EXTENSIONS = DELIMITED_EXTENSIONS + SPREADSHEET_EXTENSIONS


def resolve_id_column(
    df: pd.DataFrame,
    id_column: str | None = None,
    context: str | None = None,
) -> str:
    """
    Determine which column holds the species identifier.

    **Functionally**:
      - If `id_column` is given, it must be present (exact, case-sensitive match).
      - Otherwise the first of DEFAULT_ID_COLUMNS present in the table is used.
      - Raises MissingColumnError when no candidate matches.

    Args:
        df: Table to inspect.
        id_column: Explicit identifier column name, or None to use the defaults.
        context: Optional source description (usually the file path) for
                 error messages.

    Returns:
        Name of the identifier column.

    Raises:
        MissingColumnError: If the requested (or any default) column is absent.

    Example:
        >>> df = pd.DataFrame({'species': ['Owl'], 'site': ['A1']})
        >>> resolve_id_column(df)
        'species'
    """
    ctx = f"{context}: " if context else ""

    if id_column is not None:
        if id_column not in df.columns:
            raise MissingColumnError(
                f"{ctx}Missing required identifier column '{id_column}'. "
                f"Found columns: {list(df.columns)}."
            )
        return id_column

    for candidate in DEFAULT_ID_COLUMNS:
        if candidate in df.columns:
            return candidate

    raise MissingColumnError(
        f"{ctx}Missing required identifier column. "
        f"Expected one of: {list(DEFAULT_ID_COLUMNS)}. "
        f"Found columns: {list(df.columns)}."
    )


def validate_observation_schema(
    df: pd.DataFrame,
    id_column: str,
    count_column: str | None = None,
    context: str | None = None,
) -> None:
    """
    Validate that a table carries the columns the aggregator needs.

    **Functionally**:
      - Checks that the identifier column is present.
      - In the count-column variant, checks that the count column is present.
      - Does not inspect values: blank identifiers and non-numeric counts are
        handled by the aggregator, not rejected here.

    Args:
        df: Table to validate.
        id_column: Name of the species identifier column.
        count_column: Optional name of an explicit count column.
        context: Optional source description for error messages.

    Raises:
        MissingColumnError: If any required column is missing.
    """
    ctx = f"{context}: " if context else ""

    required_cols = [id_column]
    if count_column is not None:
        required_cols.append(count_column)

    missing_cols = [col for col in required_cols if col not in df.columns]
    if missing_cols:
        raise MissingColumnError(
            f"{ctx}Missing required columns: {missing_cols}. "
            f"Expected columns: {required_cols}. "
            f"Found columns: {list(df.columns)}."
        )
