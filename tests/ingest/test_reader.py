import pytest
from datetime import datetime

import numpy as np

from caseglobe.ingest.reader import CaseCsvReader, parse_case_date, parse_count

pytestmark = pytest.mark.unit


class TestParseCaseDate:
    """Date parsing for M/D/Y and M/D/YY."""

    def test_four_digit_year(self):
        assert parse_case_date("3/12/2020") == datetime(2020, 3, 12)

    def test_two_digit_year_maps_to_2000s(self):
        assert parse_case_date("1/22/20") == datetime(2020, 1, 22)

    def test_custom_year_base(self):
        assert parse_case_date("1/22/99", year_base=1900) == datetime(1999, 1, 22)

    @pytest.mark.parametrize("text", ["", "2020-03-12", "3/12", "a/b/c", "2/30/2020", "13/1/20"])
    def test_invalid_dates_return_none(self, text):
        assert parse_case_date(text) is None

    def test_surrounding_whitespace_is_ignored(self):
        assert parse_case_date(" 3/1/20 ") == datetime(2020, 3, 1)

    @pytest.mark.parametrize("text", ["1/1/3000", "1/1/150", "12/31/1600"])
    def test_dates_outside_storable_range_return_none(self, text):
        assert parse_case_date(text) is None


class TestParseCount:
    """Count parsing follows leading-integer semantics."""

    @pytest.mark.parametrize("text,expected", [
        ("42", 42),
        ("12.7", 12),
        ("7abc", 7),
        ("", 0),
        ("n/a", 0),
        (None, 0),
        ("-5", 0),
        ("99999999999999999999", 0),
        ("9223372036854775807", 9223372036854775807),
    ])
    def test_values(self, text, expected):
        assert parse_count(text) == expected


class TestCaseCsvReader:

    def test_parses_valid_rows(self, internal_config, make_csv):
        text = make_csv(
            ("China", 30.9756, 112.2707, "1/22/20", 444),
            ("Italy", 41.8719, 12.5674, "2/21/2020", 20),
        )
        result = CaseCsvReader(internal_config).parse(text)

        assert result.valid_rows == 2
        assert result.dropped_rows == 0
        df = result.samples
        assert df["country"].tolist() == ["China", "Italy"]
        assert df["location_key"].tolist() == ["30.9756,112.2707", "41.8719,12.5674"]
        assert df["count"].tolist() == [444, 20]
        assert df["count"].dtype == np.int64
        assert df["date"].tolist()[1] == datetime(2020, 2, 21)

    def test_header_only_is_empty(self, internal_config, make_csv):
        result = CaseCsvReader(internal_config).parse(make_csv())

        assert result.is_empty
        assert result.total_rows == 0
        assert list(result.samples.columns) == [
            "location_key", "country", "latitude", "longitude", "date", "count"
        ]

    def test_empty_text_is_empty(self, internal_config):
        result = CaseCsvReader(internal_config).parse("")
        assert result.is_empty

    def test_blank_lines_are_skipped_not_counted(self, internal_config):
        text = "\n\nheader,a,b,c,d,e,f\n\n,,China,31,112,1/22/20,5\n   \n"
        result = CaseCsvReader(internal_config).parse(text)

        assert result.valid_rows == 1
        assert result.dropped_rows == 0

    def test_malformed_rows_are_dropped_and_counted(self, internal_config, make_csv):
        text = make_csv(
            ("China", 31.0, 112.0, "1/22/20", 5),
            ("China", "abc", 112.0, "1/22/20", 5),
            ("China", 31.0, "", "1/22/20", 5),
            ("China", 31.0, 112.0, "yesterday", 5),
            ",,China,31.0,112.0,1/22/20",
        )
        result = CaseCsvReader(internal_config).parse(text)

        assert result.valid_rows == 1
        assert result.dropped_rows == 4
        assert result.drop_reasons == {
            "bad_latitude": 1,
            "bad_longitude": 1,
            "bad_date": 1,
            "too_few_fields": 1,
        }

    def test_out_of_range_year_is_dropped_not_raised(self, internal_config, make_csv):
        text = make_csv(
            ("China", 31.0, 112.0, "1/22/20", 5),
            ("China", 31.0, 112.0, "1/1/3000", 7),
        )
        result = CaseCsvReader(internal_config).parse(text)

        assert result.valid_rows == 1
        assert result.drop_reasons == {"bad_date": 1}

    def test_oversized_count_keeps_row_as_zero(self, internal_config, make_csv):
        text = make_csv(
            ("China", 31.0, 112.0, "1/22/20", 5),
            ("China", 31.0, 112.0, "1/23/20", "99999999999999999999"),
        )
        result = CaseCsvReader(internal_config).parse(text)

        assert result.valid_rows == 2
        assert result.samples["count"].tolist() == [5, 0]

    def test_nan_coordinates_are_dropped(self, internal_config, make_csv):
        text = make_csv(("China", "nan", 112.0, "1/22/20", 5))
        result = CaseCsvReader(internal_config).parse(text)
        assert result.drop_reasons["bad_latitude"] == 1

    def test_missing_count_is_zero(self, internal_config, make_csv):
        text = make_csv(",,China,31.0,112.0,1/22/20,")
        result = CaseCsvReader(internal_config).parse(text)

        assert result.samples["count"].tolist() == [0]

    def test_duplicate_rows_are_kept(self, internal_config, make_csv):
        text = make_csv(
            ("China", 31.0, 112.0, "1/22/20", 30),
            ("China", 31.0, 112.0, "1/22/20", 20),
        )
        result = CaseCsvReader(internal_config).parse(text)

        assert result.valid_rows == 2
        assert result.distinct_location_keys() == ["31.0000,112.0000"]
        assert len(result.distinct_dates()) == 1

    def test_extra_columns_are_ignored(self, internal_config):
        text = "h\n,,Iran,32.0,53.0,2/19/20,2,extra,columns\n"
        result = CaseCsvReader(internal_config).parse(text)
        assert result.samples["count"].tolist() == [2]

    def test_custom_column_layout(self, make_config):
        config = make_config(ingestion={
            "min_fields": 5,
            "country_column": 0,
            "latitude_column": 1,
            "longitude_column": 2,
            "date_column": 3,
            "count_column": 4,
        })
        text = "country,lat,lon,date,count\nSpain,40.0,-4.0,3/1/20,84\n"
        result = CaseCsvReader(config).parse(text)

        assert result.samples["country"].tolist() == ["Spain"]
        assert result.samples["count"].tolist() == [84]

    def test_read_file(self, internal_config, csv_file):
        result = CaseCsvReader(internal_config).read(csv_file)
        assert result.valid_rows == 9

    def test_read_missing_file_raises(self, internal_config, tmp_path):
        with pytest.raises(FileNotFoundError):
            CaseCsvReader(internal_config).read(tmp_path / "missing.csv")
