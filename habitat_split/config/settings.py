"""
Configuration settings for the habitat split pipeline.

**Conceptual**: Earlier versions of the analysis hard-coded file paths, the "ID"
column name, habitat names, and the colour palette inline. This module gathers
those knobs into one frozen dataclass that is passed explicitly into the
pipeline. Values load from environment variables (optionally via a .env file
at the project root) and are validated at construction time, so a bad
orientation or empty label fails at startup, not halfway through a run.

**Environment variables** (all optional):
  - HABITAT_SPLIT_ID_COLUMN: identifier column (default: try "ID", then "species").
  - HABITAT_SPLIT_COUNT_COLUMN: explicit count column (default: count rows).
  - HABITAT_SPLIT_LABEL_A / HABITAT_SPLIT_LABEL_B: habitat names.
  - HABITAT_SPLIT_COLOR_A / HABITAT_SPLIT_COLOR_B: bar segment colours.
  - HABITAT_SPLIT_OUTPUT_PATH: chart destination (.pdf, .png, .svg).
  - HABITAT_SPLIT_NORMALIZE_EFFORT: "true"/"false" (default: true).
  - HABITAT_SPLIT_TITLE: chart title.
  - HABITAT_SPLIT_ORIENTATION: "horizontal" or "vertical".

Command-line flags override these via dataclasses.replace.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from habitat_split.analytics.normalization import NormalizationMode

# Load .env from project root (no-op when the file is absent)
env_path = Path(__file__).parent.parent.parent / ".env"
load_dotenv(dotenv_path=env_path)


ORIENTATIONS = ("horizontal", "vertical")

DEFAULT_LABEL_A = "AG"
DEFAULT_LABEL_B = "FOREST"
DEFAULT_COLOR_A = "#0072B2"
DEFAULT_COLOR_B = "#D55E00"
DEFAULT_OUTPUT_PATH = "bat_species_by_habitat.pdf"
DEFAULT_TITLE = "Species occurrence by habitat"


def _parse_bool(name: str, raw: str) -> bool:
    """Parse a boolean environment value ("true"/"1"/"yes" vs "false"/"0"/"no")."""
    value = raw.strip().lower()
    if value in ("true", "1", "yes"):
        return True
    if value in ("false", "0", "no"):
        return False
    raise ValueError(
        f"{name} must be a boolean (true/false), got: {raw}"
    )


@dataclass(frozen=True)
class PipelineSettings:
    """
    Settings for one pipeline run.

    Attributes:
        id_column: Species identifier column. None means try "ID", then "species".
        count_column: Explicit numeric count column. None means each row is
                      one observation.
        label_a: Display name of habitat A (default "AG").
        label_b: Display name of habitat B (default "FOREST").
        color_a: Bar colour for habitat A segments.
        color_b: Bar colour for habitat B segments.
        output_path: Chart destination; format follows the extension.
        normalize_effort: If True (default), normalize counts by each
                          habitat's total before splitting.
        title: Chart title.
        orientation: "horizontal" (default) or "vertical" bars.
    """
    id_column: Optional[str] = None
    count_column: Optional[str] = None
    label_a: str = DEFAULT_LABEL_A
    label_b: str = DEFAULT_LABEL_B
    color_a: str = DEFAULT_COLOR_A
    color_b: str = DEFAULT_COLOR_B
    output_path: Path = Path(DEFAULT_OUTPUT_PATH)
    normalize_effort: bool = True
    title: str = DEFAULT_TITLE
    orientation: str = "horizontal"

    def __post_init__(self):
        """Validate settings after initialization."""
        if not self.label_a or not self.label_b:
            raise ValueError("Habitat labels must be non-empty.")
        if self.label_a == self.label_b:
            raise ValueError(
                f"Habitat labels must differ, got '{self.label_a}' for both."
            )
        if self.orientation not in ORIENTATIONS:
            raise ValueError(
                f"orientation must be one of {list(ORIENTATIONS)}, got: {self.orientation}"
            )
        if not str(self.output_path):
            raise ValueError("output_path must be non-empty.")
        if self.id_column == "":
            raise ValueError("id_column must be non-empty when set.")
        if self.count_column == "":
            raise ValueError("count_column must be non-empty when set.")
        # Accept plain strings for output_path
        if not isinstance(self.output_path, Path):
            object.__setattr__(self, "output_path", Path(self.output_path))

    @property
    def normalization_mode(self) -> NormalizationMode:
        """NormalizationMode selected by normalize_effort."""
        return NormalizationMode.EFFORT if self.normalize_effort else NormalizationMode.RAW

    @classmethod
    def from_env(cls) -> "PipelineSettings":
        """
        Load pipeline settings from environment variables.

        Unset variables fall back to the dataclass defaults; empty strings for
        the column variables also mean "unset".

        Returns:
            PipelineSettings built from the environment.

        Raises:
            ValueError: If HABITAT_SPLIT_NORMALIZE_EFFORT is not a boolean or
                        any value fails validation.

        Usage example:
            >>> # In .env file:
            >>> # HABITAT_SPLIT_LABEL_A=Agriculture
            >>> # HABITAT_SPLIT_LABEL_B=Forest
            >>>
            >>> settings = PipelineSettings.from_env()
            >>> print(settings.label_a)  # "Agriculture"
        """
        id_column = os.getenv("HABITAT_SPLIT_ID_COLUMN", "") or None
        count_column = os.getenv("HABITAT_SPLIT_COUNT_COLUMN", "") or None
        normalize_str = os.getenv("HABITAT_SPLIT_NORMALIZE_EFFORT", "true")

        return cls(
            id_column=id_column,
            count_column=count_column,
            label_a=os.getenv("HABITAT_SPLIT_LABEL_A", DEFAULT_LABEL_A),
            label_b=os.getenv("HABITAT_SPLIT_LABEL_B", DEFAULT_LABEL_B),
            color_a=os.getenv("HABITAT_SPLIT_COLOR_A", DEFAULT_COLOR_A),
            color_b=os.getenv("HABITAT_SPLIT_COLOR_B", DEFAULT_COLOR_B),
            output_path=Path(os.getenv("HABITAT_SPLIT_OUTPUT_PATH", DEFAULT_OUTPUT_PATH)),
            normalize_effort=_parse_bool("HABITAT_SPLIT_NORMALIZE_EFFORT", normalize_str),
            title=os.getenv("HABITAT_SPLIT_TITLE", DEFAULT_TITLE),
            orientation=os.getenv("HABITAT_SPLIT_ORIENTATION", "horizontal").strip().lower(),
        )


_default_settings: Optional[PipelineSettings] = None


def get_settings() -> PipelineSettings:
    """
    Get the settings singleton, loading it from the environment on first call.

    Tests and callers that need different values should construct
    PipelineSettings directly instead.

    Returns:
        Cached PipelineSettings.
    """
    global _default_settings

    if _default_settings is None:
        _default_settings = PipelineSettings.from_env()

    return _default_settings


def reset_settings():
    """Clear the cached settings singleton so the next get_settings() reloads."""
    global _default_settings
    _default_settings = None
