"""
Tests for the level file adapter - CSV and JSON exports to level rows.
"""

import json
import pytest
from pathlib import Path

from ingestion.providers.file_adapter import read_level_rows, FileAdapterError

FIXTURES = Path(__file__).parent.parent.parent / 'tests' / 'fixtures'


class TestReadCsv:
    """Tests for CSV level files."""

    def test_weekly_fixture(self):
        rows = read_level_rows(FIXTURES / 'fund_levels_weekly.csv')

        assert len(rows) == 26
        assert rows[0] == {'date': '2024-01-05', 'value': 100.0}
        assert all(set(row) == {'date', 'value'} for row in rows)

    def test_custom_columns(self, tmp_path):
        path = tmp_path / 'prices.csv'
        path.write_text("Date,Close,Volume\n2024-01-02,101.5,100\n2024-01-03,102.0,200\n")

        rows = read_level_rows(path, date_column='Date', value_column='Close')

        assert rows == [
            {'date': '2024-01-02', 'value': 101.5},
            {'date': '2024-01-03', 'value': 102.0},
        ]

    def test_blank_cells_become_none(self, tmp_path):
        path = tmp_path / 'gaps.csv'
        path.write_text("date,value\n2024-01-02,101.5\n2024-01-03,\n")

        rows = read_level_rows(path)

        assert rows[1] == {'date': '2024-01-03', 'value': None}

    def test_missing_column(self):
        with pytest.raises(FileAdapterError, match="Missing required columns"):
            read_level_rows(FIXTURES / 'fund_levels_missing_column.csv')

    def test_empty_file(self, tmp_path):
        path = tmp_path / 'empty.csv'
        path.write_text("")

        with pytest.raises(FileAdapterError):
            read_level_rows(path)


class TestReadJson:
    """Tests for JSON level files."""

    def test_levels_object(self):
        rows = read_level_rows(FIXTURES / 'fund_levels_monthly.json', value_column='nav')

        assert len(rows) == 14
        assert rows[0] == {'date': '2023-01-31', 'value': 10.0}
        assert rows[5]['value'] is None

    def test_plain_list(self, tmp_path):
        path = tmp_path / 'levels.json'
        path.write_text(json.dumps([{'date': '2024-01-02', 'value': 5}, 'junk']))

        assert read_level_rows(path) == [{'date': '2024-01-02', 'value': 5}]

    def test_wrong_shape(self, tmp_path):
        path = tmp_path / 'levels.json'
        path.write_text(json.dumps({'data': []}))

        with pytest.raises(FileAdapterError, match="list of rows"):
            read_level_rows(path)

    def test_invalid_json(self, tmp_path):
        path = tmp_path / 'levels.json'
        path.write_text("{not json")

        with pytest.raises(FileAdapterError, match="Failed to read JSON"):
            read_level_rows(path)


class TestPathValidation:
    def test_missing_file(self, tmp_path):
        with pytest.raises(FileAdapterError, match="not found"):
            read_level_rows(tmp_path / 'absent.csv')

    def test_unsupported_suffix(self, tmp_path):
        path = tmp_path / 'levels.xlsx'
        path.write_text("x")

        with pytest.raises(FileAdapterError, match="Unsupported level file type"):
            read_level_rows(path)
