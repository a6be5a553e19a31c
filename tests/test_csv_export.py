"""Tests for CSV export."""

from datetime import date

import pytest

from utils.csv_export import (
    CSV_HEADERS,
    EmptyExportError,
    csv_row,
    export_filename,
    format_payout,
    iter_csv_rows,
    render_csv,
)


class TestRenderCsv:
    """Test render_csv."""

    def test_header_is_unquoted(self, sample_records):
        """Test the first line is the plain header row."""
        text = render_csv(sample_records)
        assert text.split("\n")[0] == "Timestamp,Network,Type,Sub ID,Transaction ID,Payout,IP Address"

    def test_cells_are_quoted(self, make_record):
        """Test every data cell is double-quoted."""
        text = render_csv([make_record(sub_id="abc", transaction_id="T1", payout=12.5, ip_address="1.2.3.4")])
        assert text.split("\n")[1] == (
            '"2025-01-15T10:30:00.000Z","trafee","lead","abc","T1","12.5","1.2.3.4"'
        )

    def test_no_trailing_newline(self, sample_records):
        """Test the document has one line per record plus the header."""
        text = render_csv(sample_records)
        assert not text.endswith("\n")
        assert len(text.split("\n")) == len(sample_records) + 1

    def test_round_trip_recovers_fields(self, make_record):
        """Test parsing the export gives back the same strings, awkward values included."""
        records = [
            make_record(sub_id='say "hi", twice', transaction_id="a,b"),
            make_record(sub_id="plain", payout=0.0),
        ]
        rows = list(iter_csv_rows(render_csv(records)))

        assert rows[0] == CSV_HEADERS
        assert rows[1:] == [csv_row(r) for r in records]
        assert rows[1][3] == 'say "hi", twice'

    def test_empty_export_raises(self):
        """Test nothing is produced for an empty subset."""
        with pytest.raises(EmptyExportError):
            render_csv([])


@pytest.mark.parametrize(
    "value,expected",
    [
        (12.5, "12.5"),
        (10.0, "10"),
        (0.0, "0"),
        (0.1, "0.1"),
        (1e16, "10000000000000000"),
        (123456789.25, "123456789.25"),
        (0.000001, "0.000001"),
        (1e-7, "1e-7"),
        (1.5e-7, "1.5e-7"),
        (1e21, "1e+21"),
        (2.5e22, "2.5e+22"),
    ],
)
def test_format_payout(value, expected):
    """Test payouts render like Number#toString: no trailing .0, JS exponent form."""
    assert format_payout(value) == expected


def test_export_filename():
    """Test the dated download name."""
    assert export_filename(date(2025, 1, 15)) == "cpa-conversions-2025-01-15.csv"
