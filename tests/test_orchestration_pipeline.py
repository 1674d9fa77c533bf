"""
End-to-end tests for habitat_split/orchestration/pipeline.py

**Testing philosophy**: Build small habitat files on disk (CSV and XLSX),
run the whole pipeline, and check the SplitResult plus what was written.
"""

import numpy as np
import pandas as pd
import pytest

from habitat_split.config.settings import PipelineSettings
from habitat_split.data.schemas import MissingColumnError, UnsupportedFormatError
from habitat_split.orchestration import pipeline
from habitat_split.orchestration.pipeline import run_habitat_split


def write_observations(path, species_counts, id_column='ID'):
    """Write one row per observation for each (species, n) pair."""
    rows = [name for name, n in species_counts.items() for _ in range(n)]
    df = pd.DataFrame({id_column: rows, 'site': ['S1'] * len(rows)})
    if path.suffix == '.xlsx':
        df.to_excel(path, index=False)
    else:
        df.to_csv(path, index=False)
    return path


def split_by_species(result):
    """Map species → (percent_a, percent_b) for defined rows."""
    table = result.defined.set_index('species')
    return {
        name: (float(row['percent_a']), float(row['percent_b']))
        for name, row in table.iterrows()
    }


def test_raw_mode_end_to_end(tmp_path):
    """Sparrow/Robin example through files, raw mode, PNG output."""
    path_a = write_observations(tmp_path / "ag.csv", {'Sparrow': 45, 'Robin': 32})
    path_b = write_observations(tmp_path / "forest.csv", {'Sparrow': 15, 'Robin': 28})
    output = tmp_path / "chart.png"
    settings = PipelineSettings(output_path=output, normalize_effort=False)

    result = run_habitat_split(path_a, path_b, settings)

    splits = split_by_species(result)
    assert np.allclose(splits['Sparrow'], (75.0, 25.0))
    assert np.allclose(splits['Robin'], (53.3333, 46.6667), atol=1e-3)
    assert (result.total_a, result.total_b) == (77, 43)
    assert output.exists()


def test_effort_mode_with_xlsx_and_species_only_in_a(tmp_path):
    """CSV + XLSX inputs; a species missing from B is 100% A."""
    path_a = write_observations(tmp_path / "ag.csv", {'Owl': 10, 'Bat': 10})
    path_b = write_observations(tmp_path / "forest.xlsx", {'Bat': 5})
    output = tmp_path / "chart.pdf"

    result = run_habitat_split(path_a, path_b, PipelineSettings(output_path=output))

    table = result.table.set_index('species')
    assert table.loc['Owl', 'count_b'] == 0
    splits = split_by_species(result)
    assert np.allclose(splits['Owl'], (100.0, 0.0))
    # Bat: prop_a = 10/20, prop_b = 5/5 → 0.5 / 1.5
    assert np.isclose(splits['Bat'][0], 100.0 / 3.0)
    assert output.read_bytes()[:4] == b"%PDF"


def test_species_identifier_column_fallback(tmp_path):
    """Files using a "species" header work without configuration."""
    path_a = write_observations(tmp_path / "a.csv", {'Owl': 2}, id_column='species')
    path_b = write_observations(tmp_path / "b.csv", {'Owl': 2}, id_column='species')

    result = run_habitat_split(path_a, path_b, render=False)

    assert split_by_species(result) == {'Owl': (50.0, 50.0)}


def test_count_column_variant(tmp_path):
    """Explicit count column is summed per species."""
    path_a = tmp_path / "a.csv"
    path_b = tmp_path / "b.csv"
    path_a.write_text("species,count\nSparrow,40\nSparrow,5\nRobin,32\n")
    path_b.write_text("species,count\nSparrow,15\nRobin,28\nRobin,n/a\n")
    settings = PipelineSettings(
        count_column='count',
        normalize_effort=False,
        output_path=tmp_path / "c.png",
    )

    result = run_habitat_split(path_a, path_b, settings)

    assert np.isclose(split_by_species(result)['Sparrow'][0], 75.0)


def test_zero_total_species_excluded_without_error(tmp_path):
    """A species with zero counts everywhere doesn't abort the run."""
    path_a = tmp_path / "a.csv"
    path_b = tmp_path / "b.csv"
    path_a.write_text("species,count\nOwl,3\nGhost,0\n")
    path_b.write_text("species,count\nOwl,1\nGhost,0\n")
    output = tmp_path / "chart.png"
    settings = PipelineSettings(count_column='count', output_path=output)

    result = run_habitat_split(path_a, path_b, settings)

    assert result.undefined['species'].tolist() == ['Ghost']
    assert 'Ghost' not in split_by_species(result)
    assert output.exists()


def test_table_output_written(tmp_path):
    """The intermediate table can be saved as CSV."""
    path_a = write_observations(tmp_path / "a.csv", {'Owl': 1})
    path_b = write_observations(tmp_path / "b.csv", {'Bat': 1})
    table_path = tmp_path / "tables" / "split.csv"

    run_habitat_split(path_a, path_b, render=False, table_output=table_path)

    written = pd.read_csv(table_path)
    assert written['species'].tolist() == ['Owl', 'Bat']


def test_failed_chart_leaves_no_table(tmp_path, monkeypatch):
    """If saving the chart fails, the intermediate table is not written either."""
    def failing_render(*args, **kwargs):
        raise OSError("disk full")

    monkeypatch.setattr(pipeline, "render_stacked_bar_chart", failing_render)

    path_a = write_observations(tmp_path / "a.csv", {'Owl': 1})
    path_b = write_observations(tmp_path / "b.csv", {'Bat': 1})
    table_path = tmp_path / "split.csv"

    with pytest.raises(OSError):
        run_habitat_split(
            path_a,
            path_b,
            PipelineSettings(output_path=tmp_path / "chart.png"),
            table_output=table_path,
        )

    assert not table_path.exists()


def test_missing_column_aborts_before_output(tmp_path):
    """A loader error propagates and no chart is written."""
    path_a = write_observations(tmp_path / "a.csv", {'Owl': 1})
    path_b = tmp_path / "b.csv"
    path_b.write_text("taxon\nOwl\n")
    output = tmp_path / "chart.png"

    with pytest.raises(MissingColumnError):
        run_habitat_split(path_a, path_b, PipelineSettings(output_path=output))

    assert not output.exists()


def test_bad_output_extension_fails_before_loading(tmp_path):
    """The chart destination is checked before the inputs are read."""
    with pytest.raises(UnsupportedFormatError):
        run_habitat_split(
            tmp_path / "missing_a.csv",
            tmp_path / "missing_b.csv",
            PipelineSettings(output_path=tmp_path / "chart.gif"),
        )


def test_progress_output(tmp_path, capsys):
    """Console output reports files, totals, and the intermediate table."""
    path_a = write_observations(tmp_path / "a.csv", {'Owl': 3})
    path_b = write_observations(tmp_path / "b.csv", {'Owl': 1})

    run_habitat_split(path_a, path_b, render=False)

    out = capsys.readouterr().out
    assert "Reading AG file" in out
    assert "Total measurements - AG: 3, FOREST: 1" in out
    assert "Intermediate results:" in out
