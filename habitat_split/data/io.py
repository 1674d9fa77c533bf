"""
Observation table readers and the intermediate-table writer.

**Conceptual**: This module is the *only* I/O boundary for input data in the
pipeline. Both habitat files pass through read_observation_table, which
dispatches on the file extension, wraps reader failures in ParseError, and
checks the identifier column before anything is counted.

**Rule**: Never call pd.read_csv or pd.read_excel directly in aggregation,
normalization, or orchestration code. Always go through these functions so
that unsupported formats, unreadable files, and missing columns produce the
same errors everywhere.

**Value handling**: Cells are read as untyped strings (dtype=str) so that
identifiers such as "001" or "1e3" are kept verbatim. Missing cells stay
missing. Numeric interpretation (for count columns) happens in the aggregator.
"""

import pandas as pd
from pathlib import Path

from habitat_split.data.schemas import (
    DELIMITED_EXTENSIONS,
    SPREADSHEET_EXTENSIONS,
    SUPPORTED_INPUT_EXTENSIONS,
    ParseError,
    UnsupportedFormatError,
    resolve_id_column,
    validate_observation_schema,
)


def detect_table_format(path: Path | str) -> str:
    """
    Classify a path as "delimited" or "spreadsheet" by its extension.

    The check is case-insensitive (".CSV" and ".csv" are equivalent).

    Args:
        path: Input file path.

    Returns:
        "delimited" for .csv, "spreadsheet" for .xls/.xlsx.

    Raises:
        UnsupportedFormatError: For any other extension (including none).
    """
    path = Path(path)
    ext = path.suffix.lower()

    if ext in DELIMITED_EXTENSIONS:
        return "delimited"
    if ext in SPREADSHEET_EXTENSIONS:
        return "spreadsheet"

    raise UnsupportedFormatError(
        f"Unsupported file extension '{path.suffix or '(none)'}' for {path}. "
        f"Accepted: {', '.join(SUPPORTED_INPUT_EXTENSIONS)}."
    )


def read_observation_table(
    path: Path | str,
    id_column: str | None = None,
    count_column: str | None = None,
    context: str | None = None,
) -> pd.DataFrame:
    """
    Read one habitat's observation table with format dispatch and column checks.

    **Conceptual**: Loads a CSV (header row) or the first sheet of an Excel
    workbook (header row) and guarantees the species identifier column exists.
    This function is the gateway for all observation data entering the system.

    **Functionally**:
      - Raises FileNotFoundError if the path does not exist.
      - Dispatches on extension via detect_table_format.
      - Reads every cell as a string; missing cells stay NaN.
      - Strips surrounding whitespace from column headers (cell values are
        left untouched so identifiers keep their exact spelling) and rejects
        headers that become duplicates.
      - Resolves the identifier column (explicit name, or "ID" then "species").
      - Validates the count column too when one is requested.
      - Records the resolved identifier column in df.attrs["id_column"].

    Args:
        path: Path to a .csv, .xls, or .xlsx file.
        id_column: Identifier column name, or None to use the defaults.
        count_column: Optional explicit count column that must be present.
        context: Optional label (e.g., habitat name) for error messages.
                 Defaults to the path.

    Returns:
        DataFrame with the file's columns, all values as strings or missing.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        UnsupportedFormatError: If the extension is not .csv/.xls/.xlsx.
        ParseError: If the underlying reader fails or headers are duplicated.
        MissingColumnError: If the identifier (or count) column is absent.

    Example:
        >>> df = read_observation_table("data/AG.csv")
        >>> df.attrs["id_column"]
        'ID'
    """
    path = Path(path)
    context = context or str(path)

    if not path.exists():
        raise FileNotFoundError(
            f"Input file not found: {path}. "
            f"Ensure the file exists and the path is correct."
        )

    table_format = detect_table_format(path)

    try:
        if table_format == "delimited":
            df = pd.read_csv(path, dtype=str)
        else:
            df = pd.read_excel(path, sheet_name=0, dtype=str)
    except Exception as e:
        kind = "CSV" if table_format == "delimited" else "spreadsheet"
        raise ParseError(
            f"{context}: Failed to read {kind}. Error: {e}"
        ) from e

    df.columns = [str(col).strip() for col in df.columns]

    # Stripping can collapse distinct headers such as "ID" and " ID"
    duplicated = df.columns[df.columns.duplicated()].unique().tolist()
    if duplicated:
        raise ParseError(
            f"{context}: Duplicate column headers after trimming whitespace: "
            f"{duplicated}. Found columns: {list(df.columns)}."
        )

    resolved = resolve_id_column(df, id_column=id_column, context=context)
    validate_observation_schema(df, resolved, count_column=count_column, context=context)

    df.attrs["id_column"] = resolved
    return df


def write_split_table_csv(
    df: pd.DataFrame,
    path: Path | str,
) -> None:
    """
    Write the intermediate per-species table to CSV.

    Creates the parent directory if needed and writes without the index.
    Undefined percentages are written as empty cells.

    Args:
        df: Per-species table (species, counts, proportions, percentages).
        path: Destination CSV path.

    Raises:
        OSError: If the file can't be written.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    try:
        df.to_csv(path, index=False)
    except Exception as e:
        raise OSError(
            f"{path}: Failed to write CSV. Error: {e}"
        ) from e
