"""
Tests for habitat_split/config/settings.py

Environment variables are set with monkeypatch so each test starts clean.
"""

from pathlib import Path

import pytest

from habitat_split.analytics.normalization import NormalizationMode
from habitat_split.config.settings import (
    DEFAULT_COLOR_A,
    DEFAULT_OUTPUT_PATH,
    PipelineSettings,
    get_settings,
    reset_settings,
)


ENV_VARS = [
    "HABITAT_SPLIT_ID_COLUMN",
    "HABITAT_SPLIT_COUNT_COLUMN",
    "HABITAT_SPLIT_LABEL_A",
    "HABITAT_SPLIT_LABEL_B",
    "HABITAT_SPLIT_COLOR_A",
    "HABITAT_SPLIT_COLOR_B",
    "HABITAT_SPLIT_OUTPUT_PATH",
    "HABITAT_SPLIT_NORMALIZE_EFFORT",
    "HABITAT_SPLIT_TITLE",
    "HABITAT_SPLIT_ORIENTATION",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Remove pipeline env vars and the cached singleton around each test."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    reset_settings()
    yield
    reset_settings()


def test_defaults():
    """Defaults: AG vs FOREST, effort normalization, PDF output."""
    settings = PipelineSettings.from_env()

    assert settings.id_column is None
    assert settings.count_column is None
    assert settings.label_a == "AG"
    assert settings.label_b == "FOREST"
    assert settings.color_a == DEFAULT_COLOR_A
    assert settings.output_path == Path(DEFAULT_OUTPUT_PATH)
    assert settings.normalize_effort is True
    assert settings.normalization_mode is NormalizationMode.EFFORT
    assert settings.orientation == "horizontal"


def test_from_env_overrides(monkeypatch):
    """Every field can come from the environment."""
    monkeypatch.setenv("HABITAT_SPLIT_ID_COLUMN", "taxon")
    monkeypatch.setenv("HABITAT_SPLIT_COUNT_COLUMN", "n")
    monkeypatch.setenv("HABITAT_SPLIT_LABEL_A", "Agriculture")
    monkeypatch.setenv("HABITAT_SPLIT_LABEL_B", "Forest")
    monkeypatch.setenv("HABITAT_SPLIT_OUTPUT_PATH", "out/chart.png")
    monkeypatch.setenv("HABITAT_SPLIT_NORMALIZE_EFFORT", "false")
    monkeypatch.setenv("HABITAT_SPLIT_ORIENTATION", "Vertical")

    settings = PipelineSettings.from_env()

    assert settings.id_column == "taxon"
    assert settings.count_column == "n"
    assert settings.label_a == "Agriculture"
    assert settings.label_b == "Forest"
    assert settings.output_path == Path("out/chart.png")
    assert settings.normalization_mode is NormalizationMode.RAW
    assert settings.orientation == "vertical"


def test_from_env_invalid_boolean(monkeypatch):
    """A non-boolean normalize flag fails at load time."""
    monkeypatch.setenv("HABITAT_SPLIT_NORMALIZE_EFFORT", "sometimes")

    with pytest.raises(ValueError) as exc_info:
        PipelineSettings.from_env()

    assert "HABITAT_SPLIT_NORMALIZE_EFFORT" in str(exc_info.value)


def test_validation_rejects_identical_labels():
    """Both habitats can't share a label (the legend would be ambiguous)."""
    with pytest.raises(ValueError):
        PipelineSettings(label_a="X", label_b="X")


def test_validation_rejects_unknown_orientation():
    with pytest.raises(ValueError):
        PipelineSettings(orientation="diagonal")


def test_string_output_path_is_converted():
    """output_path given as str becomes a Path."""
    settings = PipelineSettings(output_path="chart.png")
    assert settings.output_path == Path("chart.png")


def test_get_settings_is_cached(monkeypatch):
    """The singleton is loaded once until reset_settings()."""
    monkeypatch.setenv("HABITAT_SPLIT_LABEL_A", "First")
    first = get_settings()

    monkeypatch.setenv("HABITAT_SPLIT_LABEL_A", "Second")
    assert get_settings() is first

    reset_settings()
    assert get_settings().label_a == "Second"
